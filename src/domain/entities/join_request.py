"""Join request domain entity."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID


class JoinRequestStatus(StrEnum):
    """Join request lifecycle. APPROVED and REJECTED are terminal."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


@dataclass
class JoinRequest:
    """Domain entity for a request to join a restricted group."""

    group_id: int
    user_id: UUID
    id: int | None = None
    status: JoinRequestStatus = JoinRequestStatus.PENDING
    requested_at: datetime = field(default_factory=datetime.utcnow)
    processed_at: datetime | None = None
    processed_by: UUID | None = None

    @property
    def is_pending(self) -> bool:
        return self.status == JoinRequestStatus.PENDING
