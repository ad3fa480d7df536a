"""SQLAlchemy implementation of Notification repository."""

import dataclasses
from datetime import datetime
from uuid import UUID

from sqlalchemy import exists, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from domain.entities.notification import (
    GroupApprovalNotification,
    Notification,
    NotificationKinds,
    NotificationStatus,
)
from domain.entities.user import User
from infrastructure.database.models import GroupMemberModel, NotificationModel

_STATUS_TO_ENUM = {status.value: status for status in NotificationStatus}


class SQLAlchemyNotificationRepository:
    """SQLAlchemy implementation of INotificationRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, notification: Notification) -> Notification:
        """Create a new pending notification."""
        model = NotificationModel(
            kind=notification.kind,
            group_id=notification.group_id,
            from_user_id=notification.from_user.id,
            status=NotificationStatus.PENDING.value,
            created_at=notification.created_at,
        )
        self._session.add(model)
        await self._session.flush()
        return dataclasses.replace(notification, id=model.id)

    async def get(self, notification_id: int) -> Notification | None:
        stmt = select(NotificationModel).where(NotificationModel.id == notification_id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def get_pending_for_group(self, group_id: int) -> list[Notification]:
        stmt = (
            select(NotificationModel)
            .where(
                NotificationModel.group_id == group_id,
                NotificationModel.status == NotificationStatus.PENDING.value,
            )
            .order_by(NotificationModel.created_at, NotificationModel.id)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def resolve(
        self,
        notification_id: int,
        status: NotificationStatus,
        acting_user_id: UUID,
    ) -> bool:
        """pending -> approved/denied, only if the actor is an admin of the group."""
        if status == NotificationStatus.PENDING:
            raise ValueError("A notification cannot be resolved back to pending")

        admin_row = aliased(GroupMemberModel)
        stmt = (
            update(NotificationModel)
            .where(
                NotificationModel.id == notification_id,
                NotificationModel.status == NotificationStatus.PENDING.value,
                exists().where(
                    admin_row.group_id == NotificationModel.group_id,
                    admin_row.user_id == acting_user_id,
                    admin_row.role == "admin",
                ),
            )
            .values(
                status=status.value,
                resolved_at=datetime.utcnow(),
                resolved_by=acting_user_id,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        await self._session.flush()
        return result.rowcount > 0  # type: ignore[attr-defined, no-any-return]

    async def resolve_pending_for_requester(
        self,
        group_id: int,
        user_id: UUID,
        status: NotificationStatus,
        acting_user_id: UUID,
    ) -> int:
        """Settle all pending notifications a user raised for a group."""
        stmt = (
            update(NotificationModel)
            .where(
                NotificationModel.group_id == group_id,
                NotificationModel.from_user_id == user_id,
                NotificationModel.status == NotificationStatus.PENDING.value,
            )
            .values(
                status=status.value,
                resolved_at=datetime.utcnow(),
                resolved_by=acting_user_id,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        await self._session.flush()
        return result.rowcount  # type: ignore[attr-defined, no-any-return]

    def _to_entity(self, model: NotificationModel) -> Notification:
        """Convert ORM model (group and requester joined) to domain entity."""
        if model.kind != NotificationKinds.GROUP_APPROVAL:
            raise ValueError(f"Unknown notification kind: {model.kind}")
        return GroupApprovalNotification(
            id=model.id,
            group_id=model.group_id,
            group_name=model.group.name,
            from_user=User(
                id=model.from_user.id,
                username=model.from_user.username,
                email=model.from_user.email,
                display_name=model.from_user.display_name,
                created_at=model.from_user.created_at,
            ),
            status=_STATUS_TO_ENUM[model.status],
            created_at=model.created_at,
            resolved_at=model.resolved_at,
            resolved_by=model.resolved_by,
        )
