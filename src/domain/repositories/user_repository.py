"""User repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.user import User, UserLookupKey


class IUserRepository(Protocol):
    """Repository interface for User lookups."""

    async def get(self, id: UUID) -> User | None:
        """Get a user by ID."""
        ...

    async def find_user(self, key: UserLookupKey, value: str) -> User | None:
        """Find a user by id, username or email."""
        ...

    async def add(self, user: User) -> User:
        """Register a user."""
        ...
