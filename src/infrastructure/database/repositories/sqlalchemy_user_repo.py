"""SQLAlchemy implementation of User repository."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.user import User, UserLookupKey
from infrastructure.database.models import UserModel

_LOOKUP_COLUMNS = {
    UserLookupKey.ID: UserModel.id,
    UserLookupKey.USERNAME: UserModel.username,
    UserLookupKey.EMAIL: UserModel.email,
}


class SQLAlchemyUserRepository:
    """SQLAlchemy implementation of IUserRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: UUID) -> User | None:
        model = await self._session.get(UserModel, id)
        return self._to_entity(model) if model else None

    async def find_user(self, key: UserLookupKey, value: str) -> User | None:
        """Find a user by id, username or email. Unknown ids yield None."""
        lookup: str | UUID = value
        if key == UserLookupKey.ID:
            try:
                lookup = UUID(value)
            except ValueError:
                return None

        stmt = select(UserModel).where(_LOOKUP_COLUMNS[key] == lookup)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def add(self, user: User) -> User:
        model = UserModel(
            id=user.id,
            username=user.username,
            email=user.email,
            display_name=user.display_name,
            created_at=user.created_at,
        )
        self._session.add(model)
        await self._session.flush()
        return self._to_entity(model)

    def _to_entity(self, model: UserModel) -> User:
        """Convert ORM model to domain entity."""
        return User(
            id=model.id,
            username=model.username,
            email=model.email,
            display_name=model.display_name,
            created_at=model.created_at,
        )
