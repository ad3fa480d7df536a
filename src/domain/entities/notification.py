"""Notification domain entities."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import ClassVar
from uuid import UUID

from domain.entities.user import User


class NotificationStatus(StrEnum):
    """Decision state. Leaves PENDING at most once and never returns."""

    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"


class NotificationKinds:
    """Notification kind constants stored alongside each row."""

    GROUP_APPROVAL = "group.approval_request"


@dataclass
class Notification(ABC):
    """Base domain entity for a notification carrying a pending decision."""

    group_id: int
    from_user: User
    id: int | None = None
    status: NotificationStatus = NotificationStatus.PENDING
    created_at: datetime = field(default_factory=datetime.utcnow)
    resolved_at: datetime | None = None
    resolved_by: UUID | None = None

    kind: ClassVar[str] = ""

    @property
    def is_pending(self) -> bool:
        return self.status == NotificationStatus.PENDING

    @property
    def is_approved(self) -> bool:
        return self.status == NotificationStatus.APPROVED

    @property
    def is_denied(self) -> bool:
        return self.status == NotificationStatus.DENIED

    @property
    @abstractmethod
    def message(self) -> str:
        """Text shown to the admins deciding on the notification."""

    def mark_resolved(
        self, status: NotificationStatus, resolved_by: UUID, resolved_at: datetime
    ) -> None:
        """Mirror a decision that storage has already accepted."""
        if status == NotificationStatus.PENDING:
            raise ValueError("A notification cannot be resolved back to pending")
        if not self.is_pending:
            raise ValueError(f"Notification already {self.status.value}")
        self.status = status
        self.resolved_by = resolved_by
        self.resolved_at = resolved_at


@dataclass
class GroupApprovalNotification(Notification):
    """A user asked to join a group that requires approval."""

    group_name: str = ""

    kind: ClassVar[str] = NotificationKinds.GROUP_APPROVAL

    @property
    def message(self) -> str:
        return (
            f"{self.from_user.name} ({self.from_user.username}) "
            f"requested to join group: {self.group_name}"
        )
