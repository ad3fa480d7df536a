"""Custom exceptions and error codes."""

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Standardized error codes for the study group core."""

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_GROUP_NAME = "INVALID_GROUP_NAME"

    # Duplicate errors
    DUPLICATE_GROUP = "DUPLICATE_GROUP"

    # Not found errors
    USER_NOT_FOUND = "USER_NOT_FOUND"
    GROUP_NOT_FOUND = "GROUP_NOT_FOUND"
    GROUP_MEMBER_NOT_FOUND = "GROUP_MEMBER_NOT_FOUND"
    JOIN_REQUEST_NOT_FOUND = "JOIN_REQUEST_NOT_FOUND"
    NOTIFICATION_NOT_FOUND = "NOTIFICATION_NOT_FOUND"

    # Permission errors
    INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"
    OWNER_PROTECTED = "OWNER_PROTECTED"

    # Conflict errors
    ALREADY_A_GROUP_MEMBER = "ALREADY_A_GROUP_MEMBER"
    JOIN_REQUEST_ALREADY_PROCESSED = "JOIN_REQUEST_ALREADY_PROCESSED"
    ROLE_CHANGE_FAILED = "ROLE_CHANGE_FAILED"
    MEMBER_REMOVAL_FAILED = "MEMBER_REMOVAL_FAILED"
    GROUP_DELETION_FAILED = "GROUP_DELETION_FAILED"
    NOTIFICATION_ALREADY_RESOLVED = "NOTIFICATION_ALREADY_RESOLVED"
    NOTIFICATION_NOT_APPROVED = "NOTIFICATION_NOT_APPROVED"

    # Storage errors
    DATABASE_ERROR = "DATABASE_ERROR"


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        details: Any | None = None,
    ) -> None:
        self.error_code = error_code
        self.message = message
        self.details = details
        super().__init__(self.message)


# --- Error kinds ---


class ValidationError(AppException):
    """Input rejected before any persistence attempt."""


class DuplicateError(AppException):
    """A uniquely named resource already exists."""


class NotFoundError(AppException):
    """A referenced resource does not exist."""


class PermissionDeniedError(AppException):
    """The acting user's role does not allow the operation."""


class ConflictError(AppException):
    """The stored state no longer matches what the operation expected."""


class StorageError(AppException):
    """I/O failure reported by the persistence layer."""

    def __init__(self, message: str = "Storage operation failed") -> None:
        super().__init__(
            error_code=ErrorCode.DATABASE_ERROR,
            message=message,
        )


# --- Validation ---


class GroupValidationError(ValidationError):
    """Group name or description failed validation."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(
            error_code=ErrorCode.INVALID_GROUP_NAME
            if field == "name"
            else ErrorCode.VALIDATION_ERROR,
            message=message,
            details={"field": field} if field else None,
        )


# --- Duplicates ---


class DuplicateGroupError(DuplicateError):
    """A group with this name already exists."""

    def __init__(self, name: str) -> None:
        super().__init__(
            error_code=ErrorCode.DUPLICATE_GROUP,
            message=f"A group named '{name}' already exists",
            details={"name": name},
        )


# --- Not found ---


class UserNotFoundError(NotFoundError):
    """User not found."""

    def __init__(self, key: str, value: str) -> None:
        super().__init__(
            error_code=ErrorCode.USER_NOT_FOUND,
            message=f"User not found: {value}",
            details={key: value},
        )


class GroupNotFoundError(NotFoundError):
    """Group not found."""

    def __init__(self, group_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.GROUP_NOT_FOUND,
            message=f"Group not found: {group_id}",
            details={"group_id": group_id},
        )


class GroupMemberNotFoundError(NotFoundError):
    """Group member not found."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.GROUP_MEMBER_NOT_FOUND,
            message="User is not a member of this group",
            details={"user_id": user_id},
        )


class JoinRequestNotFoundError(NotFoundError):
    """Join request not found."""

    def __init__(self, request_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.JOIN_REQUEST_NOT_FOUND,
            message=f"Join request not found: {request_id}",
            details={"request_id": request_id},
        )


class NotificationNotFoundError(NotFoundError):
    """Notification not found."""

    def __init__(self, notification_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.NOTIFICATION_NOT_FOUND,
            message=f"Notification not found: {notification_id}",
            details={"notification_id": notification_id},
        )


# --- Permissions ---


class InsufficientPermissionsError(PermissionDeniedError):
    """User does not have sufficient permissions."""

    def __init__(self, required_role: str = "admin") -> None:
        super().__init__(
            error_code=ErrorCode.INSUFFICIENT_PERMISSIONS,
            message=f"Insufficient permissions. Required role: {required_role}",
            details={"required_role": required_role},
        )


class OwnerProtectedError(PermissionDeniedError):
    """The group owner cannot be removed or demoted."""

    def __init__(self, action: str) -> None:
        super().__init__(
            error_code=ErrorCode.OWNER_PROTECTED,
            message=f"The group owner cannot be {action}",
            details={"action": action},
        )


# --- Conflicts ---


class AlreadyAGroupMemberError(ConflictError):
    """User is already a member of the group."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.ALREADY_A_GROUP_MEMBER,
            message="User is already a member of this group",
            details={"user_id": user_id},
        )


class JoinRequestAlreadyProcessedError(ConflictError):
    """Join request has already left the pending state."""

    def __init__(self, request_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.JOIN_REQUEST_ALREADY_PROCESSED,
            message="This join request has already been processed",
            details={"request_id": request_id},
        )


class RoleChangeFailedError(ConflictError):
    """Conditional role update matched no row."""

    def __init__(self, user_id: str, role: str) -> None:
        super().__init__(
            error_code=ErrorCode.ROLE_CHANGE_FAILED,
            message=f"Could not change role to {role}; membership changed meanwhile",
            details={"user_id": user_id, "role": role},
        )


class MemberRemovalFailedError(ConflictError):
    """Conditional member removal matched no row."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.MEMBER_REMOVAL_FAILED,
            message="Could not remove member; membership changed meanwhile",
            details={"user_id": user_id},
        )


class GroupDeletionFailedError(ConflictError):
    """Group row was already gone when deletion ran."""

    def __init__(self, group_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.GROUP_DELETION_FAILED,
            message=f"Could not delete group: {group_id}",
            details={"group_id": group_id},
        )


class NotificationAlreadyResolvedError(ConflictError):
    """Notification was already approved or denied."""

    def __init__(self, notification_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.NOTIFICATION_ALREADY_RESOLVED,
            message="This request has already been handled",
            details={"notification_id": notification_id},
        )


class NotificationNotApprovedError(ConflictError):
    """Notification did not end up in the approved state."""

    def __init__(self, notification_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.NOTIFICATION_NOT_APPROVED,
            message="Notification was not approved",
            details={"notification_id": notification_id},
        )
