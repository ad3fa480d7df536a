"""Join request repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.join_request import JoinRequest, JoinRequestStatus


class IJoinRequestRepository(Protocol):
    """Repository interface for JoinRequest entities."""

    async def get(self, request_id: int) -> JoinRequest | None:
        """Get a join request by ID."""
        ...

    async def get_latest(self, group_id: int, user_id: UUID) -> JoinRequest | None:
        """Get the most recent request of a user for a group, whatever its status."""
        ...

    async def get_pending_for_group(self, group_id: int) -> list[JoinRequest]:
        """Get all pending requests for a group, oldest first."""
        ...

    async def has_user_requested_to_join(self, group_id: int, user_id: UUID) -> bool:
        """Check for a pending request."""
        ...

    async def create(self, group_id: int, user_id: UUID) -> JoinRequest:
        """Create a pending join request."""
        ...

    async def process(
        self, request_id: int, status: JoinRequestStatus, acting_admin_id: UUID
    ) -> bool:
        """Move a pending request to a terminal status.

        Applies only while the row is still pending. Returns False when
        another writer got there first.
        """
        ...
