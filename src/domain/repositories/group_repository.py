"""Group repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.group import Group, GroupMember, GroupRole


class IGroupRepository(Protocol):
    """Repository interface for Group entities and their memberships.

    ``remove_member``, ``promote_to_admin`` and ``demote_admin`` are
    conditional writes: they only apply when ``acting_admin_id`` is an
    admin of the group in storage and the target row is in the expected
    state. A ``False`` return means nothing was written.
    """

    async def get(self, id: int) -> Group | None:
        """Get a group snapshot (members and roles loaded) by ID."""
        ...

    async def get_by_name(self, name: str) -> Group | None:
        """Get a group snapshot by its unique name."""
        ...

    async def search_by_name(self, fragment: str) -> list[Group]:
        """Find groups whose name contains the fragment."""
        ...

    async def get_for_user(self, user_id: UUID) -> list[Group]:
        """Get all groups a user belongs to."""
        ...

    async def exists(self, group: Group) -> bool:
        """Check whether the group is persisted."""
        ...

    async def exists_by_name(self, name: str) -> bool:
        """Check whether a group with this name exists."""
        ...

    async def add(self, group: Group) -> int:
        """Persist a group and its owner membership. Returns the new ID."""
        ...

    async def add_member(
        self, group_id: int, user_id: UUID, role: GroupRole = GroupRole.MEMBER
    ) -> GroupMember:
        """Add a member to a group."""
        ...

    async def remove_member(
        self, group_id: int, user_id: UUID, acting_admin_id: UUID
    ) -> bool:
        """Remove a non-owner member. Conditional write."""
        ...

    async def is_member(self, group_id: int, user_id: UUID) -> bool:
        """Check stored membership."""
        ...

    async def is_admin(self, group_id: int, user_id: UUID) -> bool:
        """Check stored admin role."""
        ...

    async def promote_to_admin(
        self, group_id: int, user_id: UUID, acting_admin_id: UUID
    ) -> bool:
        """Change member -> admin. Conditional write."""
        ...

    async def demote_admin(
        self, group_id: int, user_id: UUID, acting_admin_id: UUID
    ) -> bool:
        """Change admin -> member for a non-owner. Conditional write."""
        ...

    async def set_require_approval(self, group_id: int, flag: bool) -> bool:
        """Update the approval flag."""
        ...

    async def delete(self, id: int) -> bool:
        """Delete a group together with its memberships and requests."""
        ...

    async def get_members(self, group_id: int) -> list[GroupMember]:
        """Get all members of a group in join order."""
        ...
