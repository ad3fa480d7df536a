"""Unit tests for the Group entity and role ordering."""

from uuid import uuid4

import pytest

from domain.entities.group import Group, GroupMember, GroupRole, has_permission


class TestGroupRole:
    def test_total_order(self):
        assert GroupRole.MEMBER < GroupRole.ADMIN < GroupRole.OWNER

    def test_has_permission(self):
        assert has_permission(GroupRole.OWNER, GroupRole.ADMIN)
        assert has_permission(GroupRole.ADMIN, GroupRole.ADMIN)
        assert not has_permission(GroupRole.MEMBER, GroupRole.ADMIN)

    def test_non_member_has_no_permission(self):
        assert not has_permission(None, GroupRole.MEMBER)


class TestGroupCreation:
    def test_owner_is_admin_member(self):
        owner_id = uuid4()
        group = Group(name="Study01", owner_id=owner_id)

        assert group.members == [owner_id]
        assert group.role_of(owner_id) == GroupRole.ADMIN
        assert group.has_admin_rights(owner_id)

    def test_owner_role_corrected_on_creation(self):
        owner_id = uuid4()
        group = Group(
            name="Study01",
            owner_id=owner_id,
            members=[owner_id],
            roles={owner_id: GroupRole.MEMBER},
        )

        assert group.role_of(owner_id) == GroupRole.ADMIN


class TestRoleLookup:
    def test_tri_state(self):
        owner_id, member_id, stranger_id = uuid4(), uuid4(), uuid4()
        group = Group(name="Study01", owner_id=owner_id)
        group.add_member(member_id)

        assert group.role_of(stranger_id) is None
        assert group.role_of(member_id) == GroupRole.MEMBER
        assert group.role_of(owner_id) == GroupRole.ADMIN

    def test_admins_lists_owner_and_admins(self):
        owner_id, admin_id, member_id = uuid4(), uuid4(), uuid4()
        group = Group(name="Study01", owner_id=owner_id)
        group.add_member(admin_id, GroupRole.ADMIN)
        group.add_member(member_id)

        assert group.admins() == [owner_id, admin_id]


class TestAssignId:
    def test_assigns_once(self):
        group = Group(name="Study01", owner_id=uuid4())
        group.assign_id(7)
        group.assign_id(7)

        assert group.id == 7

    def test_refuses_to_change_id(self):
        group = Group(name="Study01", owner_id=uuid4(), id=3)

        with pytest.raises(ValueError):
            group.assign_id(4)


class TestMutators:
    def test_add_member_is_not_duplicated(self):
        group = Group(name="Study01", owner_id=uuid4())
        user_id = uuid4()
        group.add_member(user_id)
        group.add_member(user_id)

        assert group.member_count == 2

    def test_owner_cannot_be_removed(self):
        owner_id = uuid4()
        group = Group(name="Study01", owner_id=owner_id)

        with pytest.raises(ValueError):
            group.remove_member(owner_id)
        assert group.is_member(owner_id)

    def test_owner_cannot_be_demoted(self):
        owner_id = uuid4()
        group = Group(name="Study01", owner_id=owner_id)

        with pytest.raises(ValueError):
            group.set_member_role(owner_id, GroupRole.MEMBER)

    def test_owner_role_is_not_assignable(self):
        group = Group(name="Study01", owner_id=uuid4())

        with pytest.raises(ValueError):
            group.add_member(uuid4(), GroupRole.OWNER)

    def test_set_role_of_non_member(self):
        group = Group(name="Study01", owner_id=uuid4())

        with pytest.raises(KeyError):
            group.set_member_role(uuid4(), GroupRole.ADMIN)

    def test_remove_member(self):
        group = Group(name="Study01", owner_id=uuid4())
        user_id = uuid4()
        group.add_member(user_id)
        group.remove_member(user_id)

        assert group.role_of(user_id) is None
        assert user_id not in group.members

    def test_replace_members_keeps_owner(self):
        owner_id, other_id = uuid4(), uuid4()
        group = Group(name="Study01", owner_id=owner_id, id=1)
        group.add_member(uuid4())

        group.replace_members(
            [GroupMember(group_id=1, user_id=other_id, role=GroupRole.ADMIN)]
        )

        assert group.members == [owner_id, other_id]
        assert group.role_of(owner_id) == GroupRole.ADMIN
        assert group.role_of(other_id) == GroupRole.ADMIN
