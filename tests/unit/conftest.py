"""Shared fixtures for unit tests."""

from typing import Any
from unittest.mock import AsyncMock

import pytest

from domain.entities.group import Group
from domain.entities.user import User


class FakeUnitOfWork:
    """Fake Unit of Work with all 4 repository mocks for unit testing."""

    def __init__(self) -> None:
        self.groups = AsyncMock()
        self.join_requests = AsyncMock()
        self.users = AsyncMock()
        self.notifications = AsyncMock()
        self.committed = False
        self.rolled_back = False

    async def commit(self) -> None:
        self.committed = True

    async def rollback(self) -> None:
        self.rolled_back = True

    async def __aenter__(self) -> "FakeUnitOfWork":
        return self

    async def __aexit__(self, *args: Any) -> None:
        pass


@pytest.fixture
def uow() -> FakeUnitOfWork:
    """Create a fresh FakeUnitOfWork."""
    return FakeUnitOfWork()


@pytest.fixture
def owner() -> User:
    """Group owner."""
    return User(username="alice", email="alice@example.com", display_name="Alice")


@pytest.fixture
def member() -> User:
    """A plain member of the group fixture."""
    return User(username="bob", email="bob@example.com", display_name="Bob")


@pytest.fixture
def outsider() -> User:
    """A user who is not in the group fixture."""
    return User(username="carol", email="carol@example.com")


@pytest.fixture
def group(owner: User, member: User) -> Group:
    """Persisted restricted group with the owner and one member."""
    g = Group(
        id=1,
        name="Study01",
        description="Algorithms revision",
        require_approval=True,
        owner_id=owner.id,
    )
    g.add_member(member.id)
    return g
