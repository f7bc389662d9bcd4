"""
Listing repository for marketplace queries.
"""
from typing import Sequence

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from humidor_club.models.catalog import Cigar, Line
from humidor_club.models.listing import Listing, ListingStatus, ListingType
from humidor_club.repositories.base import BaseRepository


class ListingRepository(BaseRepository[Listing]):
    """Data access for marketplace listings."""

    def __init__(self, db: AsyncSession):
        super().__init__(Listing, db)

    def _with_relations(self):
        return (
            selectinload(Listing.user),
            selectinload(Listing.cigar).selectinload(Cigar.line).selectinload(Line.brand),
        )

    async def get_with_relations(self, listing_id: int) -> Listing | None:
        result = await self.db.execute(
            select(Listing)
            .options(*self._with_relations())
            .where(Listing.id == listing_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def search(
        self,
        *,
        listing_type: ListingType | None = None,
        status: ListingStatus | None = ListingStatus.ACTIVE,
        region: str | None = None,
        min_price: int | None = None,
        max_price: int | None = None,
        user_id: int | None = None,
        cigar_id: int | None = None,
        limit: int = 24,
        offset: int = 0,
    ) -> tuple[Sequence[Listing], int]:
        """
        Filter listings, most recently published first.

        Returns:
            Tuple of (page of listings, total matching count)
        """
        conditions = []
        if listing_type:
            conditions.append(Listing.type == listing_type)
        if status:
            conditions.append(Listing.status == status)
        if region:
            conditions.append(Listing.region == region)
        if min_price is not None:
            conditions.append(Listing.price_cents >= min_price)
        if max_price is not None:
            conditions.append(Listing.price_cents <= max_price)
        if user_id is not None:
            conditions.append(Listing.user_id == user_id)
        if cigar_id is not None:
            conditions.append(Listing.cigar_id == cigar_id)

        count_stmt = select(func.count(Listing.id)).where(*conditions)
        total = (await self.db.execute(count_stmt)).scalar() or 0

        stmt = (
            select(Listing)
            .options(*self._with_relations())
            .where(*conditions)
            .order_by(
                Listing.published_at.desc().nulls_last(),
                Listing.created_at.desc(),
                Listing.id.desc(),
            )
            .offset(offset)
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return result.scalars().all(), total

    async def increment_views(self, listing_id: int) -> None:
        """Atomically bump view_count by one."""
        await self.db.execute(
            update(Listing)
            .where(Listing.id == listing_id)
            .values(view_count=Listing.view_count + 1)
            .execution_options(synchronize_session=False)
        )

    async def count_active_for_user(self, user_id: int) -> int:
        return await self.count(user_id=user_id, status=ListingStatus.ACTIVE)
