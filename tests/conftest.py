"""Pytest configuration and fixtures."""

import sys
from collections.abc import AsyncGenerator, Awaitable, Callable
from pathlib import Path

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from bootstrap import Services, build_services
from domain.entities.user import User
from infrastructure.database.models import Base
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork

RegisterUser = Callable[..., Awaitable[User]]


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """Per-test SQLite file database with all tables created."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'study_groups.db'}",
        echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create session factory."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
def uow_factory(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[[], SQLAlchemyUnitOfWork]:
    """Factory producing real units of work against the test database."""
    return lambda: SQLAlchemyUnitOfWork(session_factory)


@pytest.fixture
def services(session_factory: async_sessionmaker[AsyncSession]) -> Services:
    """Fully wired services against the test database."""
    return build_services(session_factory)


@pytest.fixture
def register_user(uow_factory: Callable[[], SQLAlchemyUnitOfWork]) -> RegisterUser:
    """Insert a user row and return the entity."""

    async def _register(username: str, display_name: str | None = None) -> User:
        async with uow_factory() as uow:
            user = await uow.users.add(
                User(
                    username=username,
                    email=f"{username}@example.com",
                    display_name=display_name,
                )
            )
            await uow.commit()
        return user

    return _register
