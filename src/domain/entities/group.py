"""Group domain entities."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from uuid import UUID


class GroupRole(IntEnum):
    """Group role hierarchy. Higher value = more permissions.

    Only ADMIN and MEMBER are ever stored. OWNER is derived from
    ``Group.owner_id`` by identity comparison.
    """

    MEMBER = 10
    ADMIN = 20
    OWNER = 30


def has_permission(user_role: GroupRole | None, required_role: GroupRole) -> bool:
    """Check if a user role meets the required permission level."""
    if user_role is None:
        return False
    return user_role >= required_role


@dataclass
class GroupMember:
    """Domain entity for a stored group membership."""

    group_id: int
    user_id: UUID
    role: GroupRole = GroupRole.MEMBER
    joined_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class Group:
    """In-memory snapshot of a study group.

    ``members`` keeps join order. ``roles`` always holds an entry for every
    member, so ``role_of`` can tell "not a member" (``None``) apart from a
    plain member.
    """

    name: str
    owner_id: UUID
    description: str = ""
    require_approval: bool = False
    id: int | None = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    members: list[UUID] = field(default_factory=list)
    roles: dict[UUID, GroupRole] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """The owner is always a member with admin rights."""
        if self.owner_id not in self.members:
            self.members.insert(0, self.owner_id)
        self.roles[self.owner_id] = GroupRole.ADMIN

    def assign_id(self, group_id: int) -> None:
        """Set the storage-assigned id. Refuses to change an existing one."""
        if self.id is not None and self.id != group_id:
            raise ValueError(f"Group already has id {self.id}")
        self.id = group_id

    def is_owner(self, user_id: UUID) -> bool:
        return user_id == self.owner_id

    def is_member(self, user_id: UUID) -> bool:
        return user_id in self.roles

    def role_of(self, user_id: UUID) -> GroupRole | None:
        """Stored role of a member, or None for a non-member."""
        return self.roles.get(user_id)

    def has_admin_rights(self, user_id: UUID) -> bool:
        return self.is_owner(user_id) or self.role_of(user_id) == GroupRole.ADMIN

    def admins(self) -> list[UUID]:
        """Member ids with admin rights, owner included."""
        return [uid for uid in self.members if self.has_admin_rights(uid)]

    @property
    def member_count(self) -> int:
        return len(self.members)

    # --- Mutators (called only after storage accepted the change) ---

    def add_member(self, user_id: UUID, role: GroupRole = GroupRole.MEMBER) -> None:
        if role == GroupRole.OWNER:
            raise ValueError("OWNER is not an assignable role")
        if user_id not in self.roles:
            self.members.append(user_id)
        self.roles[user_id] = role

    def remove_member(self, user_id: UUID) -> None:
        if self.is_owner(user_id):
            raise ValueError("The group owner cannot be removed")
        if user_id in self.roles:
            self.members.remove(user_id)
            del self.roles[user_id]

    def set_member_role(self, user_id: UUID, role: GroupRole) -> None:
        if user_id not in self.roles:
            raise KeyError(user_id)
        if role == GroupRole.OWNER:
            raise ValueError("OWNER is not an assignable role")
        if self.is_owner(user_id) and role != GroupRole.ADMIN:
            raise ValueError("The group owner cannot be demoted")
        self.roles[user_id] = role

    def replace_members(self, members: Iterable[GroupMember]) -> None:
        """Rebuild the member list and role map from stored rows."""
        self.members = []
        self.roles = {}
        for member in members:
            self.members.append(member.user_id)
            self.roles[member.user_id] = member.role
        if self.owner_id not in self.roles:
            self.members.insert(0, self.owner_id)
        self.roles[self.owner_id] = GroupRole.ADMIN
