"""User domain entity."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID, uuid4


class UserLookupKey(StrEnum):
    """Columns a user can be looked up by."""

    ID = "id"
    USERNAME = "username"
    EMAIL = "email"


@dataclass
class User:
    """Domain entity for a registered user. Read-only inside this core."""

    username: str
    email: str
    id: UUID = field(default_factory=uuid4)
    display_name: str | None = None
    created_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def name(self) -> str:
        return self.display_name or self.username
