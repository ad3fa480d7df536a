"""Notification repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.notification import Notification, NotificationStatus


class INotificationRepository(Protocol):
    """Repository interface for decision-carrying notifications."""

    async def create(self, notification: Notification) -> Notification:
        """Persist a new pending notification."""
        ...

    async def get(self, notification_id: int) -> Notification | None:
        """Get a notification by ID."""
        ...

    async def get_pending_for_group(self, group_id: int) -> list[Notification]:
        """Get unresolved notifications addressed to a group."""
        ...

    async def resolve(
        self,
        notification_id: int,
        status: NotificationStatus,
        acting_user_id: UUID,
    ) -> bool:
        """Move a pending notification to APPROVED or DENIED.

        Applies only while the row is still pending.
        """
        ...

    async def resolve_pending_for_requester(
        self,
        group_id: int,
        user_id: UUID,
        status: NotificationStatus,
        acting_user_id: UUID,
    ) -> int:
        """Settle every pending notification a user raised for a group.

        Returns the number of rows updated.
        """
        ...
