"""Membership service: group lifecycle, joining and approvals."""

from collections.abc import Awaitable, Callable, Sequence
from datetime import datetime
from enum import StrEnum
from uuid import UUID

import structlog
from sqlalchemy.exc import IntegrityError

from core.exceptions import (
    AlreadyAGroupMemberError,
    DuplicateGroupError,
    GroupDeletionFailedError,
    GroupMemberNotFoundError,
    GroupNotFoundError,
    InsufficientPermissionsError,
    JoinRequestAlreadyProcessedError,
    JoinRequestNotFoundError,
    MemberRemovalFailedError,
    NotificationAlreadyResolvedError,
    NotificationNotApprovedError,
    NotificationNotFoundError,
    OwnerProtectedError,
    UserNotFoundError,
)
from domain.entities.group import Group, GroupRole
from domain.entities.join_request import JoinRequest, JoinRequestStatus
from domain.entities.notification import Notification, NotificationStatus
from domain.entities.user import User, UserLookupKey
from domain.repositories.unit_of_work import IUnitOfWork
from domain.schemas.group import parse_group_create
from domain.services.notifier import INotifier
from domain.services.role_service import RoleService, persisted_group_id

logger = structlog.get_logger()

GroupDeletedHook = Callable[[int], Awaitable[None]]


class JoinOutcome(StrEnum):
    """What ``join_group`` did. None of these is an error."""

    JOINED = "joined"
    REQUESTED = "requested"
    ALREADY_PENDING = "already_pending"
    ALREADY_MEMBER = "already_member"


def _is_unique_violation(exc: IntegrityError) -> bool:
    orig = str(exc.orig).lower() if exc.orig else ""
    return "unique" in orig or "duplicate" in orig


class MembershipService:
    """Service layer for study group membership.

    Every mutating operation checks permissions against the in-memory
    Group first, then performs a conditional write in storage, and only
    mirrors the change into the Group after the commit succeeded.
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        role_service: RoleService,
        notifier: INotifier,
        group_deleted_hooks: Sequence[GroupDeletedHook] = (),
    ) -> None:
        self._uow_factory = uow_factory
        self._roles = role_service
        self._notifier = notifier
        self._group_deleted_hooks = list(group_deleted_hooks)

    # --- Group lifecycle ---

    async def create_group(
        self,
        name: str,
        description: str,
        require_approval: bool,
        owner: User,
    ) -> Group:
        """Validate, check the name is free, then persist with the owner as admin."""
        data = parse_group_create(name, description, require_approval)
        group = Group(
            name=data.name,
            description=data.description,
            require_approval=data.require_approval,
            owner_id=owner.id,
        )

        async with self._uow_factory() as uow:
            if await uow.groups.exists_by_name(group.name):
                raise DuplicateGroupError(group.name)
            try:
                group_id = await uow.groups.add(group)
                await uow.commit()
            except IntegrityError as exc:
                await uow.rollback()
                if _is_unique_violation(exc):
                    raise DuplicateGroupError(group.name) from exc
                raise

        group.assign_id(group_id)
        logger.info(
            "group_created",
            group_id=group_id,
            name=group.name,
            owner_id=str(owner.id),
            require_approval=group.require_approval,
        )
        return group

    async def set_require_approval(self, group: Group, flag: bool) -> None:
        """Persist the approval flag.

        No permission check here: callers are expected to have checked
        ``AuthorizationService.can_edit_group_settings`` already.
        """
        group_id = persisted_group_id(group)
        async with self._uow_factory() as uow:
            updated = await uow.groups.set_require_approval(group_id, flag)
            if not updated:
                raise GroupNotFoundError(str(group_id))
            await uow.commit()

        group.require_approval = flag
        logger.info("group_approval_flag_set", group_id=group_id, require_approval=flag)

    async def delete_group(self, group: Group, user: User) -> None:
        """Delete a group. Owner only, by identity."""
        if not group.is_owner(user.id):
            raise InsufficientPermissionsError("owner")

        group_id = persisted_group_id(group)
        async with self._uow_factory() as uow:
            deleted = await uow.groups.delete(group_id)
            if not deleted:
                raise GroupDeletionFailedError(str(group_id))
            await uow.commit()

        logger.info("group_deleted", group_id=group_id, actor_id=str(user.id))
        for hook in self._group_deleted_hooks:
            await hook(group_id)

    # --- Reads ---

    async def get_group(self, group_id: int) -> Group:
        async with self._uow_factory() as uow:
            group = await uow.groups.get(group_id)
        if not group:
            raise GroupNotFoundError(str(group_id))
        return group

    async def get_groups_for_user(self, user: User) -> list[Group]:
        async with self._uow_factory() as uow:
            return await uow.groups.get_for_user(user.id)

    async def search_groups(self, name_fragment: str) -> list[Group]:
        async with self._uow_factory() as uow:
            return await uow.groups.search_by_name(name_fragment.strip())

    async def get_pending_join_requests(self, group: Group, admin: User) -> list[JoinRequest]:
        """Pending requests for a group, oldest first. Admin only."""
        if not self._roles.is_admin(group, admin):
            raise InsufficientPermissionsError("admin")
        group_id = persisted_group_id(group)
        async with self._uow_factory() as uow:
            return await uow.join_requests.get_pending_for_group(group_id)

    async def reload_members(self, group: Group) -> None:
        """Replace the in-memory member list and roles with what storage holds."""
        group_id = persisted_group_id(group)
        async with self._uow_factory() as uow:
            members = await uow.groups.get_members(group_id)
        group.replace_members(members)

    # --- Membership ---

    async def add_member(self, group: Group, requester: User, username_to_add: str) -> User:
        """Owner-only direct add, bypassing the join request workflow."""
        if not group.is_owner(requester.id):
            raise InsufficientPermissionsError("owner")

        group_id = persisted_group_id(group)
        username = username_to_add.strip()
        async with self._uow_factory() as uow:
            user = await uow.users.find_user(UserLookupKey.USERNAME, username)
            if not user:
                raise UserNotFoundError(UserLookupKey.USERNAME.value, username)
            if group.is_member(user.id) or await uow.groups.is_member(group_id, user.id):
                raise AlreadyAGroupMemberError(str(user.id))
            try:
                await uow.groups.add_member(group_id, user.id, GroupRole.MEMBER)
                await uow.commit()
            except IntegrityError as exc:
                await uow.rollback()
                if _is_unique_violation(exc):
                    raise AlreadyAGroupMemberError(str(user.id)) from exc
                raise

        group.add_member(user.id)
        logger.info(
            "group_member_added",
            group_id=group_id,
            user_id=str(user.id),
            actor_id=str(requester.id),
        )
        return user

    async def join_group(self, group: Group, user: User) -> JoinOutcome:
        """Join an open group, or file a join request for a restricted one.

        Repeating the call is safe: an existing member or an already
        pending request is reported through the returned outcome. The
        request and its approval notification are committed together.
        """
        if group.is_member(user.id):
            return JoinOutcome.ALREADY_MEMBER

        group_id = persisted_group_id(group)
        async with self._uow_factory() as uow:
            if await uow.groups.is_member(group_id, user.id):
                group.replace_members(await uow.groups.get_members(group_id))
                return JoinOutcome.ALREADY_MEMBER

            if not group.require_approval:
                try:
                    await uow.groups.add_member(group_id, user.id, GroupRole.MEMBER)
                    await uow.commit()
                except IntegrityError as exc:
                    await uow.rollback()
                    if not _is_unique_violation(exc):
                        raise
                    return JoinOutcome.ALREADY_MEMBER
                group.add_member(user.id)
                logger.info("group_joined", group_id=group_id, user_id=str(user.id))
                return JoinOutcome.JOINED

            if await uow.join_requests.has_user_requested_to_join(group_id, user.id):
                return JoinOutcome.ALREADY_PENDING
            try:
                request = await uow.join_requests.create(group_id, user.id)
                await self._notifier.group_approval_request(user, group, uow)
                await uow.commit()
            except IntegrityError as exc:
                await uow.rollback()
                if not _is_unique_violation(exc):
                    raise
                return JoinOutcome.ALREADY_PENDING

        logger.info(
            "join_request_created",
            group_id=group_id,
            user_id=str(user.id),
            request_id=request.id,
        )
        return JoinOutcome.REQUESTED

    async def kick_member(self, group: Group, admin: User, target: User) -> None:
        """Remove a member. Admin only; the owner can never be kicked."""
        if not self._roles.is_admin(group, admin):
            raise InsufficientPermissionsError("admin")
        if group.is_owner(target.id):
            raise OwnerProtectedError("removed")
        if not group.is_member(target.id):
            raise GroupMemberNotFoundError(str(target.id))

        group_id = persisted_group_id(group)
        async with self._uow_factory() as uow:
            removed = await uow.groups.remove_member(group_id, target.id, admin.id)
            if not removed:
                raise MemberRemovalFailedError(str(target.id))
            await uow.commit()

        group.remove_member(target.id)
        logger.info(
            "group_member_removed",
            group_id=group_id,
            user_id=str(target.id),
            actor_id=str(admin.id),
        )

    # --- Approval workflow ---

    async def approve_request(
        self, group: Group, admin: User, notification: Notification
    ) -> None:
        """Approve a join notification and add its requester to the group.

        The notification decision, the matching join request and the member
        row are written in one transaction, so a concurrent decision on the
        same request makes this call fail without side effects.
        """
        self._require_admin_for(group, admin, notification)

        group_id = persisted_group_id(group)
        requester_id = notification.from_user.id
        async with self._uow_factory() as uow:
            approved = await self._notifier.approve_notification(admin, notification, uow)
            if not approved:
                raise NotificationNotApprovedError(str(notification.id))
            await self._settle_join_request(
                uow, group_id, requester_id, JoinRequestStatus.APPROVED, admin.id
            )
            if not await uow.groups.is_member(group_id, requester_id):
                await uow.groups.add_member(group_id, requester_id, GroupRole.MEMBER)
            members = await uow.groups.get_members(group_id)
            await uow.commit()

        notification.mark_resolved(NotificationStatus.APPROVED, admin.id, datetime.utcnow())
        group.replace_members(members)
        logger.info(
            "join_approved",
            group_id=group_id,
            user_id=str(requester_id),
            actor_id=str(admin.id),
            notification_id=notification.id,
        )

    async def deny_request(
        self, group: Group, admin: User, notification: Notification
    ) -> None:
        """Deny a join notification. The requester is not added."""
        self._require_admin_for(group, admin, notification)

        group_id = persisted_group_id(group)
        requester_id = notification.from_user.id
        async with self._uow_factory() as uow:
            denied = await self._notifier.deny_notification(admin, notification, uow)
            if not denied:
                raise NotificationAlreadyResolvedError(str(notification.id))
            await self._settle_join_request(
                uow, group_id, requester_id, JoinRequestStatus.REJECTED, admin.id
            )
            await uow.commit()

        notification.mark_resolved(NotificationStatus.DENIED, admin.id, datetime.utcnow())

        logger.info(
            "join_denied",
            group_id=group_id,
            user_id=str(requester_id),
            actor_id=str(admin.id),
            notification_id=notification.id,
        )

    async def process_join_request(
        self,
        group: Group,
        admin: User,
        request_id: int,
        approve: bool,
    ) -> JoinRequest:
        """Approve or reject a pending join request exactly once.

        On approval the Group's members and roles are reloaded from storage
        so concurrent approvals for the same group are all reflected.
        """
        if not self._roles.is_admin(group, admin):
            raise InsufficientPermissionsError("admin")

        group_id = persisted_group_id(group)
        status = JoinRequestStatus.APPROVED if approve else JoinRequestStatus.REJECTED
        members = None
        async with self._uow_factory() as uow:
            request = await uow.join_requests.get(request_id)
            if not request or request.group_id != group_id:
                raise JoinRequestNotFoundError(str(request_id))
            if not request.is_pending:
                raise JoinRequestAlreadyProcessedError(str(request_id))

            processed = await uow.join_requests.process(request_id, status, admin.id)
            if not processed:
                raise JoinRequestAlreadyProcessedError(str(request_id))

            if approve and not await uow.groups.is_member(group_id, request.user_id):
                await uow.groups.add_member(group_id, request.user_id, GroupRole.MEMBER)
            await uow.notifications.resolve_pending_for_requester(
                group_id,
                request.user_id,
                NotificationStatus.APPROVED if approve else NotificationStatus.DENIED,
                admin.id,
            )
            if approve:
                members = await uow.groups.get_members(group_id)
            await uow.commit()

        if members is not None:
            group.replace_members(members)

        request.status = status
        request.processed_at = datetime.utcnow()
        request.processed_by = admin.id
        logger.info(
            "join_request_processed",
            group_id=group_id,
            request_id=request_id,
            status=status.value,
            actor_id=str(admin.id),
        )
        return request

    # --- Internal helpers ---

    def _require_admin_for(
        self, group: Group, admin: User, notification: Notification
    ) -> None:
        """Admin check plus a guard against notifications for other groups."""
        if not self._roles.is_admin(group, admin):
            raise InsufficientPermissionsError("admin")
        if notification.group_id != group.id:
            raise NotificationNotFoundError(str(notification.id))

    async def _settle_join_request(
        self,
        uow: IUnitOfWork,
        group_id: int,
        user_id: UUID,
        status: JoinRequestStatus,
        admin_id: UUID,
    ) -> None:
        """Close the requester's join request with the same decision.

        A request that another admin already decided fails the whole
        operation. Users without any request (notification raised
        directly) are let through.
        """
        request = await uow.join_requests.get_latest(group_id, user_id)
        if request is None or request.id is None:
            return
        if not request.is_pending:
            raise JoinRequestAlreadyProcessedError(str(request.id))
        if not await uow.join_requests.process(request.id, status, admin_id):
            raise JoinRequestAlreadyProcessedError(str(request.id))
