"""SQLAlchemy implementation of JoinRequest repository."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import exists, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from domain.entities.join_request import JoinRequest, JoinRequestStatus
from infrastructure.database.models import GroupMemberModel, JoinRequestModel

_STATUS_TO_ENUM = {status.value: status for status in JoinRequestStatus}


class SQLAlchemyJoinRequestRepository:
    """SQLAlchemy implementation of IJoinRequestRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, request_id: int) -> JoinRequest | None:
        stmt = select(JoinRequestModel).where(JoinRequestModel.id == request_id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def get_latest(self, group_id: int, user_id: UUID) -> JoinRequest | None:
        stmt = (
            select(JoinRequestModel)
            .where(
                JoinRequestModel.group_id == group_id,
                JoinRequestModel.user_id == user_id,
            )
            .order_by(JoinRequestModel.id.desc())
            .limit(1)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def get_pending_for_group(self, group_id: int) -> list[JoinRequest]:
        stmt = (
            select(JoinRequestModel)
            .where(
                JoinRequestModel.group_id == group_id,
                JoinRequestModel.status == JoinRequestStatus.PENDING.value,
            )
            .order_by(JoinRequestModel.requested_at, JoinRequestModel.id)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def has_user_requested_to_join(self, group_id: int, user_id: UUID) -> bool:
        stmt = select(
            exists().where(
                JoinRequestModel.group_id == group_id,
                JoinRequestModel.user_id == user_id,
                JoinRequestModel.status == JoinRequestStatus.PENDING.value,
            )
        )
        result = await self._session.execute(stmt)
        return bool(result.scalar())

    async def create(self, group_id: int, user_id: UUID) -> JoinRequest:
        model = JoinRequestModel(
            group_id=group_id,
            user_id=user_id,
            status=JoinRequestStatus.PENDING.value,
            requested_at=datetime.utcnow(),
        )
        self._session.add(model)
        await self._session.flush()
        return self._to_entity(model)

    async def process(
        self, request_id: int, status: JoinRequestStatus, acting_admin_id: UUID
    ) -> bool:
        """pending -> approved/rejected, only if the actor is an admin of the group."""
        if status == JoinRequestStatus.PENDING:
            raise ValueError("A join request cannot be processed back to pending")

        admin_row = aliased(GroupMemberModel)
        stmt = (
            update(JoinRequestModel)
            .where(
                JoinRequestModel.id == request_id,
                JoinRequestModel.status == JoinRequestStatus.PENDING.value,
                exists().where(
                    admin_row.group_id == JoinRequestModel.group_id,
                    admin_row.user_id == acting_admin_id,
                    admin_row.role == "admin",
                ),
            )
            .values(
                status=status.value,
                processed_at=datetime.utcnow(),
                processed_by=acting_admin_id,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        await self._session.flush()
        return result.rowcount > 0  # type: ignore[attr-defined, no-any-return]

    def _to_entity(self, model: JoinRequestModel) -> JoinRequest:
        """Convert ORM model to domain entity."""
        return JoinRequest(
            id=model.id,
            group_id=model.group_id,
            user_id=model.user_id,
            status=_STATUS_TO_ENUM[model.status],
            requested_at=model.requested_at,
            processed_at=model.processed_at,
            processed_by=model.processed_by,
        )
