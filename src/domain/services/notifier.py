"""Notifier collaborator for join approval decisions."""

from collections.abc import Callable
from datetime import datetime
from typing import Protocol

import structlog

from core.exceptions import NotificationNotFoundError
from domain.entities.group import Group
from domain.entities.notification import (
    GroupApprovalNotification,
    Notification,
    NotificationStatus,
)
from domain.entities.user import User
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.role_service import persisted_group_id

logger = structlog.get_logger()


class INotifier(Protocol):
    """What MembershipService needs from a notifier.

    Every method takes an optional unit of work. When one is given the
    write joins that transaction, nothing is committed, and the caller
    mirrors the outcome into the entity after its own commit.
    """

    async def group_approval_request(
        self, requester: User, group: Group, uow: IUnitOfWork | None = None
    ) -> GroupApprovalNotification:
        """Raise a pending approval notification addressed to the group."""
        ...

    async def approve_notification(
        self, admin: User, notification: Notification, uow: IUnitOfWork | None = None
    ) -> bool:
        """Consume the notification as approved. False if it was not pending."""
        ...

    async def deny_notification(
        self, admin: User, notification: Notification, uow: IUnitOfWork | None = None
    ) -> bool:
        """Consume the notification as denied. False if it was not pending."""
        ...


class Notifier:
    """Storage-backed notifier.

    Decisions are one-shot: ``resolve`` in storage only matches a pending
    row, so two admins deciding at once cannot both succeed.
    """

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def group_approval_request(
        self, requester: User, group: Group, uow: IUnitOfWork | None = None
    ) -> GroupApprovalNotification:
        notification = GroupApprovalNotification(
            group_id=persisted_group_id(group),
            from_user=requester,
            group_name=group.name,
        )
        if uow is not None:
            created = await uow.notifications.create(notification)
        else:
            async with self._uow_factory() as own_uow:
                created = await own_uow.notifications.create(notification)
                await own_uow.commit()

        logger.info(
            "approval_requested",
            notification_id=created.id,
            group_id=created.group_id,
            requester_id=str(requester.id),
        )
        return created  # type: ignore[return-value]

    async def approve_notification(
        self, admin: User, notification: Notification, uow: IUnitOfWork | None = None
    ) -> bool:
        return await self._resolve(admin, notification, NotificationStatus.APPROVED, uow)

    async def deny_notification(
        self, admin: User, notification: Notification, uow: IUnitOfWork | None = None
    ) -> bool:
        return await self._resolve(admin, notification, NotificationStatus.DENIED, uow)

    async def get(self, notification_id: int) -> Notification:
        async with self._uow_factory() as uow:
            notification = await uow.notifications.get(notification_id)
        if not notification:
            raise NotificationNotFoundError(str(notification_id))
        return notification

    async def get_pending_for_group(self, group_id: int) -> list[Notification]:
        """Open approval notifications addressed to a group."""
        async with self._uow_factory() as uow:
            return await uow.notifications.get_pending_for_group(group_id)

    async def _resolve(
        self,
        admin: User,
        notification: Notification,
        status: NotificationStatus,
        uow: IUnitOfWork | None,
    ) -> bool:
        if notification.id is None:
            raise NotificationNotFoundError("<unsaved>")
        if not notification.is_pending:
            return False

        if uow is not None:
            resolved = await uow.notifications.resolve(notification.id, status, admin.id)
        else:
            async with self._uow_factory() as own_uow:
                resolved = await own_uow.notifications.resolve(
                    notification.id, status, admin.id
                )
                if resolved:
                    await own_uow.commit()

        if not resolved:
            logger.warning(
                "notification_already_resolved",
                notification_id=notification.id,
                status=status.value,
            )
            return False

        if uow is None:
            notification.mark_resolved(status, admin.id, datetime.utcnow())
        logger.info(
            "notification_resolved",
            notification_id=notification.id,
            status=status.value,
            actor_id=str(admin.id),
        )
        return True
