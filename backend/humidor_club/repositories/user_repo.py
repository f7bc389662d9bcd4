"""
User repository.
"""
from typing import Sequence

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from humidor_club.models.user import User
from humidor_club.repositories.base import BaseRepository
from humidor_club.utils.sanitize import escape_like


class UserRepository(BaseRepository[User]):
    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def find_by_email(self, email: str) -> User | None:
        """Case-insensitive lookup; emails are stored lower-cased."""
        result = await self.db.execute(
            select(User).where(func.lower(User.email) == email.lower())
        )
        return result.scalar_one_or_none()

    async def search_members(
        self,
        *,
        exclude_user_id: int | None = None,
        search: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[Sequence[User], int]:
        """
        Active members matching a name or email fragment, by display name.

        Returns:
            Tuple of (page of users, total matching count)
        """
        conditions = [User.is_active.is_(True)]
        if exclude_user_id is not None:
            conditions.append(User.id != exclude_user_id)
        if search:
            pattern = f"%{escape_like(search)}%"
            conditions.append(
                or_(
                    User.display_name.ilike(pattern, escape="\\"),
                    User.email.ilike(pattern, escape="\\"),
                )
            )

        total = (await self.db.execute(select(func.count(User.id)).where(*conditions))).scalar() or 0

        result = await self.db.execute(
            select(User)
            .where(*conditions)
            .order_by(User.display_name.asc().nulls_last(), User.id)
            .limit(limit)
            .offset(offset)
        )
        return result.scalars().all(), total
