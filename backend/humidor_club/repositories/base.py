"""
Base repository class with common database operations.

Entity repositories extend this with their own queries, and own every
conditional update that guards a ledger invariant.
"""
from typing import Any, Generic, Sequence, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from humidor_club.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Base repository implementing common database operations.

    Usage:
        class UserRepository(BaseRepository[User]):
            def __init__(self, db: AsyncSession):
                super().__init__(User, db)

            async def find_by_email(self, email: str) -> User | None:
                return await self.find_one_by(email=email)
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        self.model = model
        self.db = db

    def _filtered(self, query, filters: dict[str, Any]):
        for key, value in filters.items():
            if hasattr(self.model, key):
                query = query.where(getattr(self.model, key) == value)
        return query

    async def get_by_id(self, id: int) -> ModelType | None:
        """
        Get a single record by its primary key.

        Args:
            id: Primary key value

        Returns:
            Model instance or None if not found
        """
        result = await self.db.execute(
            select(self.model).where(self.model.id == id)
        )
        return result.scalar_one_or_none()

    async def find_one_by(self, **kwargs: Any) -> ModelType | None:
        """
        Find the first record matching column values, lowest id first.

        Args:
            **kwargs: Column name/value pairs to filter by

        Returns:
            Model instance or None if not found
        """
        query = self._filtered(select(self.model), kwargs)
        result = await self.db.execute(query.order_by(self.model.id).limit(1))
        return result.scalars().first()

    async def find_by(
        self,
        *,
        skip: int = 0,
        limit: int = 100,
        order_by: str | None = None,
        order_desc: bool = False,
        **kwargs: Any,
    ) -> Sequence[ModelType]:
        """
        Find records by column values.

        Args:
            skip: Number of records to skip
            limit: Maximum records to return
            order_by: Column name to order by
            order_desc: If True, order descending
            **kwargs: Column name/value pairs to filter by

        Returns:
            Sequence of model instances
        """
        query = self._filtered(select(self.model), kwargs)

        if order_by and hasattr(self.model, order_by):
            column = getattr(self.model, order_by)
            query = query.order_by(column.desc() if order_desc else column)

        query = query.offset(skip).limit(limit)
        result = await self.db.execute(query)
        return result.scalars().all()

    async def count(self, **kwargs: Any) -> int:
        """Count records, optionally filtered by column values."""
        query = self._filtered(select(func.count()).select_from(self.model), kwargs)
        result = await self.db.execute(query)
        return result.scalar() or 0

    async def exists(self, **kwargs: Any) -> bool:
        """Check if any record exists matching the criteria."""
        return await self.count(**kwargs) > 0

    async def create(self, **kwargs: Any) -> ModelType:
        """
        Create a new record.

        The row is flushed so database defaults and constraints apply
        before the caller continues.
        """
        instance = self.model(**kwargs)
        self.db.add(instance)
        await self.db.flush()
        await self.db.refresh(instance)
        return instance

    async def update(self, instance: ModelType, **kwargs: Any) -> ModelType:
        """
        Apply column values to a loaded instance and flush.

        Args:
            instance: Instance to update
            **kwargs: Column name/value pairs to update

        Returns:
            The refreshed instance
        """
        for key, value in kwargs.items():
            if hasattr(instance, key):
                setattr(instance, key, value)

        await self.db.flush()
        await self.db.refresh(instance)
        return instance

    async def delete(self, instance: ModelType) -> None:
        """Delete a loaded instance."""
        await self.db.delete(instance)
        await self.db.flush()

    async def reload(self, instance: ModelType) -> ModelType:
        """Re-read an instance after a bulk UPDATE bypassed the identity map."""
        await self.db.refresh(instance)
        return instance
