"""
Humidor ledger.

Tracks how many of each cigar a member has on hand, how many they have
smoked, and how many are reserved for sale or trade. Reservations never
exceed quantity: every write that could break that is a single conditional
UPDATE whose affected-row count decides success.
"""
from datetime import datetime, timezone
from typing import Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from humidor_club.core.errors import (
    InsufficientQuantityError,
    ValidationError,
    translate_persistence_errors,
)
from humidor_club.models.humidor import HumidorItem
from humidor_club.repositories.catalog_repo import CigarRepository
from humidor_club.repositories.humidor_repo import HumidorRepository
from humidor_club.repositories.user_repo import UserRepository
from humidor_club.schemas.humidor import HumidorItemCreate, HumidorItemUpdate, HumidorStats
from humidor_club.services.ownership import require_found, require_ownership
from humidor_club.utils.sanitize import clean_text

logger = get_logger()

RESOURCE = "Humidor item"


class HumidorLedger:
    """Service for a member's humidor."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.items = HumidorRepository(db)
        self.cigars = CigarRepository(db)

    async def _get_owned(self, item_id: int, user_id: int) -> HumidorItem:
        item = require_found(await self.items.get_by_id(item_id), RESOURCE)
        require_ownership(item, user_id, RESOURCE)
        return item

    async def _loaded(self, item_id: int) -> HumidorItem:
        return require_found(await self.items.get_with_cigar(item_id), RESOURCE)

    @translate_persistence_errors("humidor.list")
    async def list_items(self, user_id: int) -> tuple[Sequence[HumidorItem], HumidorStats]:
        """A member's items, newest first, with their stats."""
        items = await self.items.get_user_items(user_id)
        stats = await self.get_stats(user_id)
        return items, stats

    @translate_persistence_errors("humidor.list_public")
    async def list_public_items(self, owner_id: int) -> tuple[Sequence[HumidorItem], HumidorStats]:
        """Another member's in-stock items and stats over them."""
        require_found(await UserRepository(self.db).get_by_id(owner_id), "User")
        items = await self.items.get_user_items(owner_id, in_stock_only=True)
        stats = HumidorStats(**await self.items.get_stats(owner_id, in_stock_only=True))
        return items, stats

    @translate_persistence_errors("humidor.stats")
    async def get_stats(self, user_id: int) -> HumidorStats:
        """
        Totals across all of a member's items.

        Each unit is valued at its purchase price, falling back to the
        cigar's street price and then MSRP; missing prices count as zero.
        """
        return HumidorStats(**await self.items.get_stats(user_id))

    @translate_persistence_errors("humidor.add")
    async def add_item(self, user_id: int, data: HumidorItemCreate) -> HumidorItem:
        """
        Add a new acquisition batch.

        Repeated adds of the same cigar create separate rows; quantity is
        at least 1.
        """
        require_found(await self.cigars.get_by_id(data.cigar_id), "Cigar")

        item = await self.items.create(
            user_id=user_id,
            cigar_id=data.cigar_id,
            quantity=max(1, data.quantity),
            smoked_count=0,
            available_for_sale=0,
            available_for_trade=0,
            purchase_price_cents=data.purchase_price_cents,
            purchase_date=data.purchase_date,
            acquired_from=clean_text(data.acquired_from, 255),
            location=clean_text(data.location, 255),
            condition=clean_text(data.condition, 50),
            notes=clean_text(data.notes),
        )

        logger.info(
            "Humidor item added",
            user_id=user_id,
            item_id=item.id,
            cigar_id=data.cigar_id,
            quantity=item.quantity,
        )
        return await self._loaded(item.id)

    @translate_persistence_errors("humidor.update")
    async def update_item(self, item_id: int, user_id: int, data: HumidorItemUpdate) -> HumidorItem:
        """
        Edit descriptive fields and optionally quantity.

        Raises:
            ValidationError: If the new quantity is below the current reservations
        """
        item = await self._get_owned(item_id, user_id)

        fields = data.model_dump(exclude_unset=True)
        quantity = fields.pop("quantity", None)
        for key in ("acquired_from", "location", "condition", "notes"):
            if key in fields:
                fields[key] = clean_text(fields[key])

        updated = await self.items.update_details(item.id, user_id, quantity=quantity, **fields)
        if not updated:
            await self.items.reload(item)
            reserved = item.available_for_sale + item.available_for_trade
            raise ValidationError(
                f"Quantity cannot be less than the {reserved} reserved for sale or trade",
                {"reserved": reserved},
            )

        logger.info("Humidor item updated", user_id=user_id, item_id=item.id, fields=sorted(data.model_fields_set))
        return await self._loaded(item.id)

    @translate_persistence_errors("humidor.remove")
    async def remove_item(self, item_id: int, user_id: int) -> None:
        item = await self._get_owned(item_id, user_id)
        await self.items.delete(item)
        logger.info("Humidor item removed", user_id=user_id, item_id=item_id)

    @translate_persistence_errors("humidor.smoke")
    async def smoke(
        self,
        item_id: int,
        user_id: int,
        count: int = 1,
        smoked_at: Optional[datetime] = None,
    ) -> HumidorItem:
        """
        Record smoking ``count`` cigars from an item.

        Quantity drops by exactly ``count`` and smoked_count rises by the
        same amount. Reservations above the new quantity are clamped down,
        sale first.

        Raises:
            ValidationError: If count is below 1
            InsufficientQuantityError: If fewer than count remain; nothing changes
        """
        if count < 1:
            raise ValidationError("Smoke count must be at least 1", {"count": count})

        item = await self._get_owned(item_id, user_id)
        smoked_at = smoked_at or datetime.now(timezone.utc)

        if not await self.items.smoke(item.id, user_id, count, smoked_at):
            await self.items.reload(item)
            raise InsufficientQuantityError(requested=count, available=item.quantity)

        item = await self._loaded(item.id)
        logger.info(
            "Cigars smoked",
            user_id=user_id,
            item_id=item.id,
            count=count,
            remaining=item.quantity,
        )
        return item

    @translate_persistence_errors("humidor.marketplace")
    async def set_marketplace_availability(
        self,
        item_id: int,
        user_id: int,
        for_sale: Optional[int] = None,
        for_trade: Optional[int] = None,
    ) -> HumidorItem:
        """
        Overwrite the for-sale and for-trade reservations together.

        An omitted counter keeps its current value.

        Raises:
            ValidationError: If a counter is negative or their sum exceeds quantity
        """
        item = await self._get_owned(item_id, user_id)

        sale = item.available_for_sale if for_sale is None else for_sale
        trade = item.available_for_trade if for_trade is None else for_trade
        if sale < 0 or trade < 0:
            raise ValidationError(
                "Available quantities cannot be negative",
                {"available_for_sale": sale, "available_for_trade": trade},
            )

        if not await self.items.set_reservations(item.id, user_id, sale, trade):
            await self.items.reload(item)
            raise ValidationError(
                f"Total available (sale + trade) cannot exceed available quantity ({item.quantity})",
                {"limit": item.quantity, "requested": sale + trade},
            )

        logger.info(
            "Marketplace availability updated",
            user_id=user_id,
            item_id=item.id,
            available_for_sale=sale,
            available_for_trade=trade,
        )
        return await self._loaded(item.id)

    @translate_persistence_errors("humidor.toggle")
    async def toggle(self, user_id: int, cigar_id: int) -> tuple[bool, Optional[HumidorItem]]:
        """
        Remove the first item for a cigar, or add one with quantity 1.

        Returns:
            Tuple of (now in humidor, added item or None when removed)
        """
        existing = await self.items.first_for_cigar(user_id, cigar_id)
        if existing is not None:
            await self.items.delete(existing)
            logger.info("Humidor toggle removed", user_id=user_id, item_id=existing.id, cigar_id=cigar_id)
            return False, None

        item = await self.add_item(user_id, HumidorItemCreate(cigar_id=cigar_id, quantity=1))
        logger.info("Humidor toggle added", user_id=user_id, item_id=item.id, cigar_id=cigar_id)
        return True, item
