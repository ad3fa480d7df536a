"""SQLAlchemy implementation of Group repository."""

from uuid import UUID

from sqlalchemy import ColumnElement, Select, delete, exists, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased, selectinload

from domain.entities.group import Group, GroupMember, GroupRole
from infrastructure.database.models import GroupMemberModel, GroupModel

_ROLE_TO_ENUM = {
    "admin": GroupRole.ADMIN,
    "member": GroupRole.MEMBER,
}

_ENUM_TO_ROLE = {v: k for k, v in _ROLE_TO_ENUM.items()}


class SQLAlchemyGroupRepository:
    """SQLAlchemy implementation of IGroupRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: int) -> Group | None:
        """Get a group snapshot by ID."""
        stmt = (
            select(GroupModel)
            .where(GroupModel.id == id)
            .options(selectinload(GroupModel.members))
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def get_by_name(self, name: str) -> Group | None:
        stmt = (
            select(GroupModel)
            .where(GroupModel.name == name)
            .options(selectinload(GroupModel.members))
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def search_by_name(self, fragment: str) -> list[Group]:
        stmt = (
            select(GroupModel)
            .where(GroupModel.name.ilike(f"%{fragment}%"))
            .options(selectinload(GroupModel.members))
            .order_by(GroupModel.name)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def get_for_user(self, user_id: UUID) -> list[Group]:
        """Get all groups a user belongs to."""
        stmt = (
            select(GroupModel)
            .join(GroupMemberModel, GroupMemberModel.group_id == GroupModel.id)
            .where(GroupMemberModel.user_id == user_id)
            .options(selectinload(GroupModel.members))
            .order_by(GroupModel.created_at)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def exists(self, group: Group) -> bool:
        if group.id is None:
            return False
        stmt = select(exists().where(GroupModel.id == group.id))
        result = await self._session.execute(stmt)
        return bool(result.scalar())

    async def exists_by_name(self, name: str) -> bool:
        stmt = select(exists().where(GroupModel.name == name))
        result = await self._session.execute(stmt)
        return bool(result.scalar())

    async def add(self, group: Group) -> int:
        """Insert the group row and the owner's admin membership."""
        model = GroupModel(
            name=group.name,
            description=group.description,
            require_approval=group.require_approval,
            owner_id=group.owner_id,
            created_at=group.created_at,
        )
        self._session.add(model)
        await self._session.flush()

        self._session.add(
            GroupMemberModel(
                group_id=model.id,
                user_id=group.owner_id,
                role=_ENUM_TO_ROLE[GroupRole.ADMIN],
            )
        )
        await self._session.flush()
        return model.id

    async def add_member(
        self, group_id: int, user_id: UUID, role: GroupRole = GroupRole.MEMBER
    ) -> GroupMember:
        """Add a member to a group."""
        model = GroupMemberModel(
            group_id=group_id,
            user_id=user_id,
            role=_ENUM_TO_ROLE[role],
        )
        self._session.add(model)
        await self._session.flush()
        return self._member_to_entity(model)

    async def remove_member(
        self, group_id: int, user_id: UUID, acting_admin_id: UUID
    ) -> bool:
        """Delete a non-owner membership if the actor is still an admin."""
        stmt = (
            delete(GroupMemberModel)
            .where(
                GroupMemberModel.group_id == group_id,
                GroupMemberModel.user_id == user_id,
                GroupMemberModel.user_id.not_in(self._owner_of(group_id)),
                self._is_stored_admin(group_id, acting_admin_id),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        await self._session.flush()
        return result.rowcount > 0  # type: ignore[attr-defined, no-any-return]

    async def is_member(self, group_id: int, user_id: UUID) -> bool:
        stmt = select(
            exists().where(
                GroupMemberModel.group_id == group_id,
                GroupMemberModel.user_id == user_id,
            )
        )
        result = await self._session.execute(stmt)
        return bool(result.scalar())

    async def is_admin(self, group_id: int, user_id: UUID) -> bool:
        result = await self._session.execute(
            select(self._is_stored_admin(group_id, user_id))
        )
        return bool(result.scalar())

    async def promote_to_admin(
        self, group_id: int, user_id: UUID, acting_admin_id: UUID
    ) -> bool:
        """member -> admin, only if the actor is still an admin."""
        return await self._change_role(
            group_id, user_id, acting_admin_id, GroupRole.MEMBER, GroupRole.ADMIN
        )

    async def demote_admin(
        self, group_id: int, user_id: UUID, acting_admin_id: UUID
    ) -> bool:
        """admin -> member for anyone but the owner."""
        return await self._change_role(
            group_id, user_id, acting_admin_id, GroupRole.ADMIN, GroupRole.MEMBER
        )

    async def set_require_approval(self, group_id: int, flag: bool) -> bool:
        stmt = (
            update(GroupModel)
            .where(GroupModel.id == group_id)
            .values(require_approval=flag)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        await self._session.flush()
        return result.rowcount > 0  # type: ignore[attr-defined, no-any-return]

    async def delete(self, id: int) -> bool:
        """Delete a group (cascade deletes members, requests, notifications)."""
        stmt = select(GroupModel).where(GroupModel.id == id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if not model:
            return False

        await self._session.delete(model)
        await self._session.flush()
        return True

    async def get_members(self, group_id: int) -> list[GroupMember]:
        """Get all members of a group."""
        stmt = (
            select(GroupMemberModel)
            .where(GroupMemberModel.group_id == group_id)
            .order_by(GroupMemberModel.joined_at)
        )
        result = await self._session.execute(stmt)
        return [self._member_to_entity(model) for model in result.scalars()]

    # --- Conditional write helpers ---

    async def _change_role(
        self,
        group_id: int,
        user_id: UUID,
        acting_admin_id: UUID,
        from_role: GroupRole,
        to_role: GroupRole,
    ) -> bool:
        stmt = (
            update(GroupMemberModel)
            .where(
                GroupMemberModel.group_id == group_id,
                GroupMemberModel.user_id == user_id,
                GroupMemberModel.role == _ENUM_TO_ROLE[from_role],
                GroupMemberModel.user_id.not_in(self._owner_of(group_id)),
                self._is_stored_admin(group_id, acting_admin_id),
            )
            .values(role=_ENUM_TO_ROLE[to_role])
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        await self._session.flush()
        return result.rowcount > 0  # type: ignore[attr-defined, no-any-return]

    def _is_stored_admin(self, group_id: int, user_id: UUID) -> ColumnElement[bool]:
        admin_row = aliased(GroupMemberModel)
        return exists().where(
            admin_row.group_id == group_id,
            admin_row.user_id == user_id,
            admin_row.role == _ENUM_TO_ROLE[GroupRole.ADMIN],
        )

    def _owner_of(self, group_id: int) -> Select[tuple[UUID]]:
        return select(GroupModel.owner_id).where(GroupModel.id == group_id)

    # --- Mapping ---

    def _to_entity(self, model: GroupModel) -> Group:
        """Convert ORM model (members loaded) to domain entity."""
        return Group(
            id=model.id,
            name=model.name,
            description=model.description,
            require_approval=model.require_approval,
            owner_id=model.owner_id,
            created_at=model.created_at,
            members=[m.user_id for m in model.members],
            roles={m.user_id: _ROLE_TO_ENUM[m.role] for m in model.members},
        )

    def _member_to_entity(self, model: GroupMemberModel) -> GroupMember:
        """Convert member ORM model to domain entity."""
        return GroupMember(
            group_id=model.group_id,
            user_id=model.user_id,
            role=_ROLE_TO_ENUM[model.role],
            joined_at=model.joined_at,
        )
