"""Explicit service wiring for the study group core.

A UI or API layer builds one ``Services`` bundle at startup and passes it
around; nothing here is a process-wide singleton.
"""

from collections.abc import Sequence
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from core.config import Settings, settings
from core.logging import setup_logging
from domain.services.authorization_service import AuthorizationService
from domain.services.membership_service import GroupDeletedHook, MembershipService
from domain.services.notifier import Notifier
from domain.services.role_service import RoleService
from infrastructure.database.session import (
    create_engine,
    create_session_factory,
    init_models,
)
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork


@dataclass
class Services:
    """Constructed services sharing one session factory."""

    authorization: AuthorizationService
    roles: RoleService
    notifier: Notifier
    membership: MembershipService


def build_services(
    session_factory: async_sessionmaker[AsyncSession],
    group_deleted_hooks: Sequence[GroupDeletedHook] = (),
) -> Services:
    """Wire services together around a session factory."""

    def uow_factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(session_factory)

    authorization = AuthorizationService()
    roles = RoleService(uow_factory, authorization)
    notifier = Notifier(uow_factory)
    membership = MembershipService(
        uow_factory,
        role_service=roles,
        notifier=notifier,
        group_deleted_hooks=group_deleted_hooks,
    )
    return Services(
        authorization=authorization,
        roles=roles,
        notifier=notifier,
        membership=membership,
    )


async def startup(
    config: Settings | None = None,
    group_deleted_hooks: Sequence[GroupDeletedHook] = (),
) -> tuple[AsyncEngine, Services]:
    """Configure logging, create missing tables and return the engine plus services.

    The caller owns the engine and should ``await engine.dispose()`` on exit.
    """
    config = config or settings
    setup_logging(config)
    engine = create_engine(config)
    if config.create_tables:
        await init_models(engine)
    return engine, build_services(create_session_factory(engine), group_deleted_hooks)
