"""Role assignment within a group."""

from collections.abc import Callable

import structlog

from core.exceptions import (
    GroupMemberNotFoundError,
    GroupNotFoundError,
    InsufficientPermissionsError,
    OwnerProtectedError,
    RoleChangeFailedError,
)
from domain.entities.group import Group, GroupRole
from domain.entities.user import User
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.authorization_service import AuthorizationService

logger = structlog.get_logger()


def persisted_group_id(group: Group) -> int:
    """Return the storage id of a group, failing for unsaved snapshots."""
    if group.id is None:
        raise GroupNotFoundError("<unsaved>")
    return group.id


class RoleService:
    """Promotes and demotes group members.

    Role changes are written to storage first and mirrored into the
    in-memory Group only after the commit succeeded.
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        authorization: AuthorizationService | None = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._authorization = authorization or AuthorizationService()

    def is_admin(self, group: Group, user: User) -> bool:
        """True for the owner (by identity) or a member stored as admin."""
        return group.has_admin_rights(user.id)

    def is_owner(self, group: Group, user: User) -> bool:
        return group.is_owner(user.id)

    def is_member(self, group: Group, user: User) -> bool:
        return group.is_member(user.id)

    def get_user_role(self, group: Group, user: User) -> GroupRole | None:
        return self._authorization.get_user_role(user, group)

    async def promote_to_admin(self, group: Group, promoter: User, target: User) -> None:
        """Make a member an admin. Requires admin rights."""
        if not self.is_admin(group, promoter):
            raise InsufficientPermissionsError("admin")
        if not group.is_member(target.id):
            raise GroupMemberNotFoundError(str(target.id))
        if group.role_of(target.id) == GroupRole.ADMIN:
            return

        group_id = persisted_group_id(group)
        async with self._uow_factory() as uow:
            promoted = await uow.groups.promote_to_admin(group_id, target.id, promoter.id)
            if not promoted:
                raise RoleChangeFailedError(str(target.id), "admin")
            await uow.commit()

        group.set_member_role(target.id, GroupRole.ADMIN)
        logger.info(
            "member_promoted",
            group_id=group_id,
            user_id=str(target.id),
            actor_id=str(promoter.id),
        )

    async def demote_admin(self, group: Group, demoter: User, target: User) -> None:
        """Turn an admin back into a plain member. The owner is never demoted."""
        if not self.is_admin(group, demoter):
            raise InsufficientPermissionsError("admin")
        if group.is_owner(target.id):
            raise OwnerProtectedError("demoted")
        if not group.is_member(target.id):
            raise GroupMemberNotFoundError(str(target.id))
        if group.role_of(target.id) == GroupRole.MEMBER:
            return

        group_id = persisted_group_id(group)
        async with self._uow_factory() as uow:
            demoted = await uow.groups.demote_admin(group_id, target.id, demoter.id)
            if not demoted:
                raise RoleChangeFailedError(str(target.id), "member")
            await uow.commit()

        group.set_member_role(target.id, GroupRole.MEMBER)
        logger.info(
            "admin_demoted",
            group_id=group_id,
            user_id=str(target.id),
            actor_id=str(demoter.id),
        )
