"""Authorization checks for group actions."""

from enum import StrEnum

from domain.entities.group import Group, GroupRole, has_permission
from domain.entities.user import User


class Permission(StrEnum):
    """Closed set of actions that can be checked against a group."""

    VIEW_GROUP = "view_group"
    CREATE_SESSION = "create_session"
    UPLOAD_FILES = "upload_files"
    POST_MESSAGES = "post_messages"
    EDIT_GROUP = "edit_group"
    MANAGE_MEMBERS = "manage_members"
    EDIT_SESSION = "edit_session"
    DELETE_SESSION = "delete_session"
    DELETE_FILES = "delete_files"
    DELETE_GROUP = "delete_group"


REQUIRED_ROLE: dict[Permission, GroupRole] = {
    Permission.VIEW_GROUP: GroupRole.MEMBER,
    Permission.CREATE_SESSION: GroupRole.MEMBER,
    Permission.UPLOAD_FILES: GroupRole.MEMBER,
    Permission.POST_MESSAGES: GroupRole.MEMBER,
    Permission.EDIT_GROUP: GroupRole.ADMIN,
    Permission.MANAGE_MEMBERS: GroupRole.ADMIN,
    Permission.EDIT_SESSION: GroupRole.ADMIN,
    Permission.DELETE_SESSION: GroupRole.ADMIN,
    Permission.DELETE_FILES: GroupRole.ADMIN,
    Permission.DELETE_GROUP: GroupRole.OWNER,
}


class AuthorizationService:
    """Stateless role and permission lookups over a Group snapshot.

    Every method is a pure function of its arguments. Non-members get
    ``None`` / ``False``, never an exception.
    """

    def get_user_role(self, user: User, group: Group) -> GroupRole | None:
        """OWNER by identity, otherwise the stored role, or None."""
        if group.is_owner(user.id):
            return GroupRole.OWNER
        return group.role_of(user.id)

    def has_permission(self, user: User, group: Group, permission: Permission) -> bool:
        return has_permission(
            self.get_user_role(user, group), REQUIRED_ROLE[permission]
        )

    def has_admin_privileges(self, user: User, group: Group) -> bool:
        return has_permission(self.get_user_role(user, group), GroupRole.ADMIN)

    def can_manage_members(self, user: User, group: Group) -> bool:
        return self.has_permission(user, group, Permission.MANAGE_MEMBERS)

    def can_edit_group_settings(self, user: User, group: Group) -> bool:
        return self.has_permission(user, group, Permission.EDIT_GROUP)

    def can_delete_group(self, user: User, group: Group) -> bool:
        return self.has_permission(user, group, Permission.DELETE_GROUP)

    def can_create_session(self, user: User, group: Group) -> bool:
        return self.has_permission(user, group, Permission.CREATE_SESSION)

    def can_upload_files(self, user: User, group: Group) -> bool:
        return self.has_permission(user, group, Permission.UPLOAD_FILES)
