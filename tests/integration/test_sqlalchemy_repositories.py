"""Conditional writes and mappings of the SQLAlchemy repositories."""

from collections.abc import Callable

import pytest

from core.exceptions import StorageError
from domain.entities.group import Group, GroupRole
from domain.entities.join_request import JoinRequestStatus
from domain.entities.notification import GroupApprovalNotification, NotificationStatus
from domain.entities.user import User, UserLookupKey
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork
from tests.conftest import RegisterUser

UowFactory = Callable[[], SQLAlchemyUnitOfWork]


async def _make_group(
    uow_factory: UowFactory, owner: User, *members: User, name: str = "Study01"
) -> int:
    async with uow_factory() as uow:
        group_id = await uow.groups.add(Group(name=name, owner_id=owner.id))
        for member in members:
            await uow.groups.add_member(group_id, member.id)
        await uow.commit()
    return group_id


class TestGroupRepository:
    @pytest.mark.asyncio
    async def test_add_stores_owner_as_admin(
        self, uow_factory: UowFactory, register_user: RegisterUser
    ):
        alice = await register_user("alice")
        group_id = await _make_group(uow_factory, alice)

        async with uow_factory() as uow:
            assert await uow.groups.is_admin(group_id, alice.id)
            assert await uow.groups.exists_by_name("Study01")
            group = await uow.groups.get(group_id)

        assert group is not None
        assert group.owner_id == alice.id
        assert group.role_of(alice.id) == GroupRole.ADMIN

    @pytest.mark.asyncio
    async def test_promote_requires_stored_admin(
        self, uow_factory: UowFactory, register_user: RegisterUser
    ):
        alice = await register_user("alice")
        bob = await register_user("bob")
        carol = await register_user("carol")
        group_id = await _make_group(uow_factory, alice, bob, carol)

        async with uow_factory() as uow:
            assert not await uow.groups.promote_to_admin(group_id, carol.id, bob.id)
            assert await uow.groups.promote_to_admin(group_id, bob.id, alice.id)
            assert not await uow.groups.promote_to_admin(group_id, bob.id, alice.id)
            await uow.commit()

        async with uow_factory() as uow:
            assert await uow.groups.is_admin(group_id, bob.id)
            assert not await uow.groups.is_admin(group_id, carol.id)

    @pytest.mark.asyncio
    async def test_owner_cannot_be_demoted_or_removed(
        self, uow_factory: UowFactory, register_user: RegisterUser
    ):
        alice = await register_user("alice")
        bob = await register_user("bob")
        group_id = await _make_group(uow_factory, alice, bob)

        async with uow_factory() as uow:
            await uow.groups.promote_to_admin(group_id, bob.id, alice.id)
            assert not await uow.groups.demote_admin(group_id, alice.id, bob.id)
            assert not await uow.groups.remove_member(group_id, alice.id, bob.id)
            await uow.commit()

        async with uow_factory() as uow:
            assert await uow.groups.is_admin(group_id, alice.id)

    @pytest.mark.asyncio
    async def test_remove_member_requires_stored_admin(
        self, uow_factory: UowFactory, register_user: RegisterUser
    ):
        alice = await register_user("alice")
        bob = await register_user("bob")
        carol = await register_user("carol")
        group_id = await _make_group(uow_factory, alice, bob, carol)

        async with uow_factory() as uow:
            assert not await uow.groups.remove_member(group_id, carol.id, bob.id)
            assert await uow.groups.remove_member(group_id, carol.id, alice.id)
            assert not await uow.groups.remove_member(group_id, carol.id, alice.id)
            await uow.commit()

        async with uow_factory() as uow:
            members = await uow.groups.get_members(group_id)
        assert {m.user_id for m in members} == {alice.id, bob.id}

    @pytest.mark.asyncio
    async def test_duplicate_membership_surfaces_as_storage_error(
        self, uow_factory: UowFactory, register_user: RegisterUser
    ):
        alice = await register_user("alice")
        group_id = await _make_group(uow_factory, alice)

        with pytest.raises(StorageError):
            async with uow_factory() as uow:
                await uow.groups.add_member(group_id, alice.id)


class TestJoinRequestRepository:
    @pytest.mark.asyncio
    async def test_process_is_exactly_once(
        self, uow_factory: UowFactory, register_user: RegisterUser
    ):
        alice = await register_user("alice")
        bob = await register_user("bob")
        group_id = await _make_group(uow_factory, alice)

        async with uow_factory() as uow:
            request = await uow.join_requests.create(group_id, bob.id)
            await uow.commit()
        assert request.id is not None

        async with uow_factory() as uow:
            assert not await uow.join_requests.process(
                request.id, JoinRequestStatus.APPROVED, bob.id
            )
            assert await uow.join_requests.process(
                request.id, JoinRequestStatus.APPROVED, alice.id
            )
            assert not await uow.join_requests.process(
                request.id, JoinRequestStatus.REJECTED, alice.id
            )
            await uow.commit()

        async with uow_factory() as uow:
            stored = await uow.join_requests.get(request.id)
            assert not await uow.join_requests.has_user_requested_to_join(group_id, bob.id)

        assert stored is not None
        assert stored.status == JoinRequestStatus.APPROVED
        assert stored.processed_by == alice.id
        assert stored.processed_at is not None

    @pytest.mark.asyncio
    async def test_one_pending_request_per_user(
        self, uow_factory: UowFactory, register_user: RegisterUser
    ):
        alice = await register_user("alice")
        bob = await register_user("bob")
        group_id = await _make_group(uow_factory, alice)

        async with uow_factory() as uow:
            await uow.join_requests.create(group_id, bob.id)
            await uow.commit()

        with pytest.raises(StorageError):
            async with uow_factory() as uow:
                await uow.join_requests.create(group_id, bob.id)

        async with uow_factory() as uow:
            pending = await uow.join_requests.get_pending_for_group(group_id)
        assert len(pending) == 1


class TestNotificationRepository:
    @pytest.mark.asyncio
    async def test_resolve_once(self, uow_factory: UowFactory, register_user: RegisterUser):
        alice = await register_user("alice")
        bob = await register_user("bob", "Bob")
        group_id = await _make_group(uow_factory, alice)

        async with uow_factory() as uow:
            created = await uow.notifications.create(
                GroupApprovalNotification(group_id=group_id, from_user=bob, group_name="Study01")
            )
            await uow.commit()
        assert created.id is not None

        async with uow_factory() as uow:
            assert not await uow.notifications.resolve(
                created.id, NotificationStatus.APPROVED, bob.id
            )
            assert await uow.notifications.resolve(
                created.id, NotificationStatus.DENIED, alice.id
            )
            assert not await uow.notifications.resolve(
                created.id, NotificationStatus.APPROVED, alice.id
            )
            await uow.commit()

        async with uow_factory() as uow:
            stored = await uow.notifications.get(created.id)

        assert isinstance(stored, GroupApprovalNotification)
        assert stored.is_denied
        assert stored.resolved_by == alice.id
        assert stored.group_name == "Study01"
        assert stored.from_user.username == "bob"


class TestUserRepository:
    @pytest.mark.asyncio
    async def test_find_user_by_each_key(
        self, uow_factory: UowFactory, register_user: RegisterUser
    ):
        alice = await register_user("alice", "Alice")

        async with uow_factory() as uow:
            by_id = await uow.users.find_user(UserLookupKey.ID, str(alice.id))
            by_name = await uow.users.find_user(UserLookupKey.USERNAME, "alice")
            by_email = await uow.users.find_user(UserLookupKey.EMAIL, "alice@example.com")
            bad_id = await uow.users.find_user(UserLookupKey.ID, "not-a-uuid")
            missing = await uow.users.find_user(UserLookupKey.USERNAME, "nobody")

        assert by_id == by_name == by_email == alice
        assert bad_id is None
        assert missing is None
