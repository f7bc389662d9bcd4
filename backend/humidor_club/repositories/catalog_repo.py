"""
Catalog repositories for brands, lines and cigars.
"""
from typing import Any, Sequence

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from humidor_club.models.catalog import Brand, Cigar, Line
from humidor_club.repositories.base import BaseRepository
from humidor_club.utils.sanitize import escape_like


def _contains(search: str) -> str:
    return f"%{escape_like(search)}%"


class BrandRepository(BaseRepository[Brand]):
    def __init__(self, db: AsyncSession):
        super().__init__(Brand, db)

    async def search(self, search: str | None = None, limit: int = 100) -> Sequence[Brand]:
        stmt = select(Brand)
        if search:
            stmt = stmt.where(Brand.name.ilike(_contains(search), escape="\\"))
        stmt = stmt.order_by(Brand.name).limit(limit)
        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def find_by_name(self, name: str) -> Brand | None:
        """Case-insensitive exact name match."""
        result = await self.db.execute(
            select(Brand).where(func.lower(Brand.name) == name.strip().lower()).limit(1)
        )
        return result.scalars().first()

    async def slug_exists(self, slug: str) -> bool:
        return await self.exists(slug=slug)


class LineRepository(BaseRepository[Line]):
    def __init__(self, db: AsyncSession):
        super().__init__(Line, db)

    async def search(
        self,
        brand_id: int | None = None,
        search: str | None = None,
        limit: int = 100,
    ) -> Sequence[Line]:
        stmt = select(Line).options(selectinload(Line.brand))
        if brand_id is not None:
            stmt = stmt.where(Line.brand_id == brand_id)
        if search:
            stmt = stmt.where(Line.name.ilike(_contains(search), escape="\\"))
        stmt = stmt.order_by(Line.name).limit(limit)
        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def get_with_brand(self, line_id: int) -> Line | None:
        result = await self.db.execute(
            select(Line)
            .options(selectinload(Line.brand))
            .where(Line.id == line_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def find_by_name(self, brand_id: int, name: str) -> Line | None:
        result = await self.db.execute(
            select(Line)
            .where(Line.brand_id == brand_id, func.lower(Line.name) == name.strip().lower())
            .limit(1)
        )
        return result.scalars().first()

    async def slug_exists(self, brand_id: int, slug: str) -> bool:
        return await self.exists(brand_id=brand_id, slug=slug)


class CigarRepository(BaseRepository[Cigar]):
    """Cigar lookups with line and brand eagerly loaded."""

    # Fields offered as autocomplete suggestions; "origin" is the country.
    SUGGESTION_COLUMNS = {
        "vitola": Cigar.vitola,
        "country": Cigar.country,
        "origin": Cigar.country,
        "wrapper": Cigar.wrapper,
        "binder": Cigar.binder,
        "filler": Cigar.filler,
    }

    def __init__(self, db: AsyncSession):
        super().__init__(Cigar, db)

    def _with_line(self):
        return selectinload(Cigar.line).selectinload(Line.brand)

    async def get_with_line(self, cigar_id: int) -> Cigar | None:
        result = await self.db.execute(
            select(Cigar)
            .options(self._with_line())
            .where(Cigar.id == cigar_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_recent(self, limit: int = 50, search: str | None = None) -> Sequence[Cigar]:
        """
        Newest cigars first, optionally matching vitola, line or brand name.
        """
        stmt = select(Cigar).options(self._with_line())
        if search:
            pattern = _contains(search)
            stmt = (
                stmt.join(Line, Line.id == Cigar.line_id)
                .join(Brand, Brand.id == Line.brand_id)
                .where(
                    or_(
                        Cigar.vitola.ilike(pattern, escape="\\"),
                        Line.name.ilike(pattern, escape="\\"),
                        Brand.name.ilike(pattern, escape="\\"),
                    )
                )
            )
        stmt = stmt.order_by(Cigar.created_at.desc(), Cigar.id.desc()).limit(limit)
        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def distinct_values(self, field: str, search: str | None = None, limit: int = 25) -> list[str]:
        """Distinct non-empty values of a suggestion column, alphabetical."""
        column = self.SUGGESTION_COLUMNS[field]
        stmt = select(column).distinct().where(column.is_not(None), column != "")
        if search:
            stmt = stmt.where(column.ilike(_contains(search), escape="\\"))
        stmt = stmt.order_by(column).limit(limit)
        result = await self.db.execute(stmt)
        return [value for value in result.scalars().all()]

    async def catalog_totals(self) -> dict[str, Any]:
        """Club-wide cigar count and summed catalog price."""
        price = func.coalesce(
            func.nullif(Cigar.typical_street_cents, 0),
            func.nullif(Cigar.msrp_cents, 0),
            0,
        )
        row = (
            await self.db.execute(
                select(func.count(Cigar.id), func.coalesce(func.sum(price), 0))
            )
        ).one()
        return {"total_cigars": int(row[0]), "total_value_cents": int(row[1])}
