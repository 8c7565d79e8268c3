"""
Base repository with common data access operations.

Provides lookups and keyed upserts for feature repositories.
Uses SQLAlchemy async session for non-blocking database access.

Usage:
    class StravaConnectionRepository(BaseRepository[StravaConnection]):
        def __init__(self, db: AsyncSession):
            super().__init__(db, StravaConnection)

        async def get_by_user_id(self, user_id: str) -> StravaConnection | None:
            return await self.get_by(user_id=user_id)
"""

from typing import Any, TypeVar, Generic, Type
from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

T = TypeVar("T")

_DIALECT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class BaseRepository(Generic[T]):
    """
    Base repository for database operations.

    All methods are async for use with AsyncSession. Writes are flushed but
    not committed; transaction boundaries belong to the caller.
    """

    def __init__(self, db: AsyncSession, model: Type[T]):
        """
        Initialize repository.

        Args:
            db: Async database session
            model: SQLAlchemy model class
        """
        self.db = db
        self.model = model

    async def get_by(self, **kwargs) -> T | None:
        """
        Get single entity by arbitrary field values.

        Args:
            **kwargs: Field name-value pairs to filter by

        Returns:
            First matching entity or None
        """
        query = select(self.model).execution_options(populate_existing=True)
        for key, value in kwargs.items():
            query = query.where(getattr(self.model, key) == value)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_all(self, **kwargs) -> list[T]:
        """
        Get all entities matching criteria.

        Args:
            **kwargs: Field name-value pairs to filter by

        Returns:
            List of matching entities
        """
        query = select(self.model).execution_options(populate_existing=True)
        for key, value in kwargs.items():
            query = query.where(getattr(self.model, key) == value)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def upsert(self, key: str, values: dict[str, Any]) -> None:
        """
        Insert a row or overwrite the existing one sharing the same key.

        Every column in `values` except the key is replaced on conflict,
        so repeated calls with the same key are idempotent.

        Args:
            key: Name of the uniquely constrained column used as conflict target
            values: Column values for the row (must include `key`)
        """
        dialect = self.db.get_bind().dialect.name
        insert = _DIALECT_INSERTS.get(dialect)
        if insert is None:
            raise NotImplementedError(f"Upsert is not supported for dialect {dialect!r}")

        stmt = insert(self.model).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[key],
            set_={column: stmt.excluded[column] for column in values if column != key},
        )
        await self.db.execute(stmt)
        await self.db.flush()
