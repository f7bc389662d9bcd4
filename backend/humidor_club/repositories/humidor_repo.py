"""
Humidor repository.

Every write that can break the reservation invariant is a single
conditional UPDATE here; callers inspect the returned flag instead of
reading, checking and writing back.
"""
from datetime import datetime
from typing import Any, Sequence

from sqlalchemy import case, distinct, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from humidor_club.models.catalog import Cigar, Line
from humidor_club.models.humidor import HumidorItem
from humidor_club.repositories.base import BaseRepository


def _with_catalog():
    return selectinload(HumidorItem.cigar).selectinload(Cigar.line).selectinload(Line.brand)


class HumidorRepository(BaseRepository[HumidorItem]):
    """Data access for humidor items."""

    def __init__(self, db: AsyncSession):
        super().__init__(HumidorItem, db)

    async def get_user_items(
        self,
        user_id: int,
        *,
        in_stock_only: bool = False,
    ) -> Sequence[HumidorItem]:
        """
        Get a user's items, newest first, with cigar, line and brand loaded.

        Args:
            user_id: Owner ID
            in_stock_only: Skip items whose quantity has reached zero

        Returns:
            Sequence of humidor items
        """
        stmt = (
            select(HumidorItem)
            .options(_with_catalog())
            .where(HumidorItem.user_id == user_id)
        )
        if in_stock_only:
            stmt = stmt.where(HumidorItem.quantity > 0)

        stmt = stmt.order_by(HumidorItem.created_at.desc(), HumidorItem.id.desc())
        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def get_with_cigar(self, item_id: int) -> HumidorItem | None:
        result = await self.db.execute(
            select(HumidorItem)
            .options(_with_catalog())
            .where(HumidorItem.id == item_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def first_for_cigar(self, user_id: int, cigar_id: int) -> HumidorItem | None:
        """Oldest row for a (user, cigar) pair; several may exist."""
        return await self.find_one_by(user_id=user_id, cigar_id=cigar_id)

    async def smoke(
        self,
        item_id: int,
        user_id: int,
        count: int,
        smoked_at: datetime,
    ) -> bool:
        """
        Decrement quantity by ``count`` if at least that many remain.

        Reservations are clamped in the same statement, sale first and then
        trade, so their sum never exceeds the new quantity.

        Returns:
            True if the row was updated, False if too few remained
        """
        remaining = HumidorItem.quantity - count
        new_sale = case(
            (HumidorItem.available_for_sale > remaining, remaining),
            else_=HumidorItem.available_for_sale,
        )
        new_trade = case(
            (HumidorItem.available_for_trade > remaining - new_sale, remaining - new_sale),
            else_=HumidorItem.available_for_trade,
        )

        stmt = (
            update(HumidorItem)
            .where(
                HumidorItem.id == item_id,
                HumidorItem.user_id == user_id,
                HumidorItem.quantity >= count,
            )
            .values(
                quantity=remaining,
                smoked_count=HumidorItem.smoked_count + count,
                available_for_sale=new_sale,
                available_for_trade=new_trade,
                last_smoked_date=smoked_at,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount == 1

    async def set_reservations(
        self,
        item_id: int,
        user_id: int,
        for_sale: int,
        for_trade: int,
    ) -> bool:
        """
        Overwrite both reservation counters if their sum fits in quantity.

        Returns:
            True if the row was updated
        """
        stmt = (
            update(HumidorItem)
            .where(
                HumidorItem.id == item_id,
                HumidorItem.user_id == user_id,
                HumidorItem.quantity >= for_sale + for_trade,
            )
            .values(available_for_sale=for_sale, available_for_trade=for_trade)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount == 1

    async def update_details(
        self,
        item_id: int,
        user_id: int,
        *,
        quantity: int | None = None,
        **fields: Any,
    ) -> bool:
        """
        Update descriptive fields and optionally quantity in one statement.

        A new quantity only applies if it still covers both reservations.

        Returns:
            True if the row was updated
        """
        values = {k: v for k, v in fields.items() if hasattr(HumidorItem, k)}
        conditions = [HumidorItem.id == item_id, HumidorItem.user_id == user_id]
        if quantity is not None:
            values["quantity"] = quantity
            conditions.append(
                HumidorItem.available_for_sale + HumidorItem.available_for_trade <= quantity
            )

        if not values:
            return True

        stmt = (
            update(HumidorItem)
            .where(*conditions)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount == 1

    async def get_stats(self, user_id: int, *, in_stock_only: bool = False) -> dict[str, int]:
        """
        Aggregate a user's humidor in one query.

        Unit value is the first non-zero of purchase price, street price and
        MSRP; items with no price data count as zero.

        Returns:
            Dict with total_cigars, total_smoked, unique_cigars,
            total_value_cents and total_items
        """
        unit_price = func.coalesce(
            func.nullif(HumidorItem.purchase_price_cents, 0),
            func.nullif(Cigar.typical_street_cents, 0),
            func.nullif(Cigar.msrp_cents, 0),
            0,
        )
        stmt = (
            select(
                func.coalesce(func.sum(HumidorItem.quantity), 0),
                func.coalesce(func.sum(HumidorItem.smoked_count), 0),
                func.count(distinct(HumidorItem.cigar_id)),
                func.coalesce(func.sum(HumidorItem.quantity * unit_price), 0),
                func.count(HumidorItem.id),
            )
            .select_from(HumidorItem)
            .outerjoin(Cigar, Cigar.id == HumidorItem.cigar_id)
            .where(HumidorItem.user_id == user_id)
        )
        if in_stock_only:
            stmt = stmt.where(HumidorItem.quantity > 0)

        row = (await self.db.execute(stmt)).one()
        return {
            "total_cigars": int(row[0]),
            "total_smoked": int(row[1]),
            "unique_cigars": int(row[2]),
            "total_value_cents": int(row[3]),
            "total_items": int(row[4]),
        }
