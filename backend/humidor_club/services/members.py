"""
Member profiles and the member directory.
"""
from typing import Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from humidor_club.core.errors import translate_persistence_errors
from humidor_club.models.user import User
from humidor_club.repositories.user_repo import UserRepository
from humidor_club.schemas.profile import ProfileUpdate
from humidor_club.services.ownership import require_found
from humidor_club.utils.sanitize import clean_text

logger = get_logger()

PROFILE_TEXT_LIMITS = {
    "display_name": 100,
    "avatar_url": 500,
    "bio": 2000,
    "city": 100,
    "region": 100,
    "country": 100,
}


class MemberService:
    """Service for member profiles."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.users = UserRepository(db)

    @translate_persistence_errors("members.get_profile")
    async def get_profile(self, user_id: int) -> User:
        return require_found(await self.users.get_by_id(user_id), "User")

    @translate_persistence_errors("members.update_profile")
    async def update_profile(self, user_id: int, data: ProfileUpdate) -> User:
        """Apply only the fields sent. Blank text clears a field."""
        user = require_found(await self.users.get_by_id(user_id), "User")

        changes = {
            key: clean_text(value, PROFILE_TEXT_LIMITS[key])
            for key, value in data.model_dump(exclude_unset=True).items()
        }
        await self.users.update(user, **changes)

        logger.info("Profile updated", user_id=user_id, fields=sorted(changes))
        return user

    @translate_persistence_errors("members.search")
    async def search(
        self,
        viewer_id: int,
        search: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[Sequence[User], int]:
        """Other active members, optionally matching a name or email fragment."""
        return await self.users.search_members(
            exclude_user_id=viewer_id,
            search=clean_text(search, 100),
            limit=limit,
            offset=offset,
        )
