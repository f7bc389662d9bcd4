"""
Marketplace listing lifecycle.

Listings move DRAFT -> ACTIVE -> SOLD, and any listing can be withdrawn.
PENDING and FROZEN are set out-of-band (deal in progress, moderation) and
cannot be chosen by the owner. A listing backed by a humidor item may not
offer more than that item can supply.
"""
from datetime import datetime, timezone
from typing import Callable, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from humidor_club.core.errors import (
    ListingFrozenError,
    ValidationError,
    translate_persistence_errors,
)
from humidor_club.models.humidor import HumidorItem
from humidor_club.models.listing import Listing, ListingStatus, ListingType
from humidor_club.repositories.catalog_repo import CigarRepository
from humidor_club.repositories.humidor_repo import HumidorRepository
from humidor_club.repositories.listing_repo import ListingRepository
from humidor_club.schemas.listing import ListingCreate, ListingUpdate
from humidor_club.services.ownership import require_found, require_ownership
from humidor_club.utils.sanitize import clean_text

logger = get_logger()

RESOURCE = "Listing"

CREATABLE_STATUSES = {ListingStatus.DRAFT, ListingStatus.ACTIVE}

# Owner-driven transitions; WITHDRAWN is also reachable from anywhere via withdraw().
ALLOWED_TRANSITIONS: dict[ListingStatus, set[ListingStatus]] = {
    ListingStatus.DRAFT: {ListingStatus.ACTIVE, ListingStatus.WITHDRAWN},
    ListingStatus.ACTIVE: {ListingStatus.SOLD, ListingStatus.WITHDRAWN},
    ListingStatus.PENDING: {ListingStatus.WITHDRAWN},
    ListingStatus.SOLD: {ListingStatus.WITHDRAWN},
    ListingStatus.WITHDRAWN: set(),
    ListingStatus.FROZEN: set(),
}


def listing_quantity_cap(item: HumidorItem, listing_type: ListingType) -> int:
    """
    Most a listing of this type may offer from a humidor item.

    The matching reservation (for-sale for WTS, for-trade for WTT) caps the
    listing when it has been set; otherwise remaining quantity does.
    """
    if listing_type == ListingType.WTS:
        reservation = item.available_for_sale
    elif listing_type == ListingType.WTT:
        reservation = item.available_for_trade
    else:
        reservation = 0

    if reservation > 0:
        return min(reservation, item.quantity)
    return item.quantity


def listing_update_cap(item: HumidorItem, listing_type: ListingType) -> int:
    """
    Most an existing listing may be raised to.

    Edits are held to the reservation itself: for-sale for WTS, for-trade
    for every other type. An unset reservation allows nothing.
    """
    if listing_type == ListingType.WTS:
        reservation = item.available_for_sale
    else:
        reservation = item.available_for_trade
    return max(0, min(reservation, item.quantity))


def _require_price(listing_type: ListingType, price_cents: Optional[int]) -> None:
    if listing_type == ListingType.WTS and (price_cents is None or price_cents <= 0):
        raise ValidationError("Price is required for WTS listings", {"field": "price_cents"})


class ListingService:
    """Service for marketplace listings."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.listings = ListingRepository(db)
        self.humidor = HumidorRepository(db)
        self.cigars = CigarRepository(db)

    async def _get_owned(self, listing_id: int, user_id: int) -> Listing:
        listing = require_found(await self.listings.get_by_id(listing_id), RESOURCE)
        require_ownership(listing, user_id, RESOURCE)
        return listing

    async def _loaded(self, listing_id: int) -> Listing:
        return require_found(await self.listings.get_with_relations(listing_id), RESOURCE)

    async def _check_quantity(
        self,
        item_id: int,
        user_id: int,
        listing_type: ListingType,
        qty: int,
        cap_for: Callable[[HumidorItem, ListingType], int] = listing_quantity_cap,
    ) -> HumidorItem:
        item = require_found(await self.humidor.get_by_id(item_id), "Humidor item")
        require_ownership(item, user_id, "Humidor item")

        cap = cap_for(item, listing_type)
        if qty > cap:
            raise ValidationError(
                f"Quantity exceeds available quantity ({cap})",
                {"limit": cap, "requested": qty},
            )
        return item

    @translate_persistence_errors("listings.search")
    async def search(self, **filters) -> tuple[Sequence[Listing], int]:
        return await self.listings.search(**filters)

    @translate_persistence_errors("listings.create")
    async def create(self, user_id: int, data: ListingCreate) -> Listing:
        """
        Create a listing from a humidor item or a free cigar reference.

        Raises:
            ValidationError: Bad status, missing WTS price, or qty over the cap
            ForbiddenError: The humidor item belongs to someone else
            NotFoundError: The humidor item or cigar does not exist
        """
        if data.status not in CREATABLE_STATUSES:
            raise ValidationError(
                "Listings can only be created as DRAFT or ACTIVE",
                {"status": data.status.value},
            )
        if data.qty < 1:
            raise ValidationError("Quantity must be at least 1", {"field": "qty"})
        _require_price(data.type, data.price_cents)

        cigar_id = data.cigar_id
        if data.humidor_item_id is not None:
            item = await self._check_quantity(data.humidor_item_id, user_id, data.type, data.qty)
            cigar_id = cigar_id or item.cigar_id
        if cigar_id is not None:
            require_found(await self.cigars.get_by_id(cigar_id), "Cigar")

        now = datetime.now(timezone.utc)
        listing = await self.listings.create(
            user_id=user_id,
            type=data.type,
            status=data.status,
            title=data.title.strip(),
            description=data.description.strip(),
            cigar_id=cigar_id,
            humidor_item_id=data.humidor_item_id,
            qty=data.qty,
            condition=clean_text(data.condition, 50),
            price_cents=data.price_cents,
            currency=data.currency.upper(),
            region=clean_text(data.region, 100),
            city=clean_text(data.city, 100),
            meet_up_only=data.meet_up_only,
            will_ship=data.will_ship,
            image_urls=list(data.image_urls),
            view_count=0,
            published_at=now if data.status == ListingStatus.ACTIVE else None,
        )

        logger.info(
            "Listing created",
            user_id=user_id,
            listing_id=listing.id,
            listing_type=data.type.value,
            status=data.status.value,
            humidor_item_id=data.humidor_item_id,
            qty=data.qty,
        )
        return await self._loaded(listing.id)

    @translate_persistence_errors("listings.update")
    async def update(self, listing_id: int, user_id: int, data: ListingUpdate) -> Listing:
        """
        Apply an owner's edit.

        Publishing stamps published_at and selling stamps sold_at. Any qty sent
        for a humidor-backed listing is checked against the item's current
        reservation for the listing type.

        Raises:
            ForbiddenError: Caller is not the owner
            ListingFrozenError: A moderator froze the listing
            ValidationError: Illegal transition, missing WTS price, or qty over the cap
        """
        listing = await self._get_owned(listing_id, user_id)
        if listing.status == ListingStatus.FROZEN:
            raise ListingFrozenError()

        changes = data.model_dump(exclude_unset=True)
        now = datetime.now(timezone.utc)

        new_status = changes.get("status")
        if new_status is None:
            changes.pop("status", None)
        elif new_status != listing.status:
            if new_status not in ALLOWED_TRANSITIONS[listing.status]:
                raise ValidationError(
                    f"Cannot change listing status from {listing.status.value} to {new_status.value}",
                    {"from": listing.status.value, "to": new_status.value},
                )
            if new_status == ListingStatus.ACTIVE:
                changes["published_at"] = now
            elif new_status == ListingStatus.SOLD:
                changes["sold_at"] = now

        if "price_cents" in changes:
            _require_price(listing.type, changes["price_cents"])

        if "qty" in changes:
            if changes["qty"] is None or changes["qty"] < 1:
                raise ValidationError("Quantity must be at least 1", {"field": "qty"})
            if listing.humidor_item_id is not None:
                await self._check_quantity(
                    listing.humidor_item_id,
                    user_id,
                    listing.type,
                    changes["qty"],
                    cap_for=listing_update_cap,
                )

        for key in ("title", "description"):
            if key in changes:
                if changes[key] is None:
                    raise ValidationError(f"{key.capitalize()} cannot be empty", {"field": key})
                changes[key] = changes[key].strip()
        for key in ("meet_up_only", "will_ship", "currency", "image_urls"):
            if key in changes and changes[key] is None:
                changes.pop(key)
        if "currency" in changes:
            changes["currency"] = changes["currency"].upper()
        for key in ("condition", "region", "city"):
            if key in changes:
                changes[key] = clean_text(changes[key])

        await self.listings.update(listing, **changes)

        logger.info(
            "Listing updated",
            user_id=user_id,
            listing_id=listing.id,
            fields=sorted(data.model_fields_set),
            status=listing.status.value,
        )
        return await self._loaded(listing.id)

    @translate_persistence_errors("listings.withdraw")
    async def withdraw(self, listing_id: int, user_id: int) -> Listing:
        """Soft delete: the listing is kept with status WITHDRAWN."""
        listing = await self._get_owned(listing_id, user_id)
        if listing.status != ListingStatus.WITHDRAWN:
            await self.listings.update(listing, status=ListingStatus.WITHDRAWN)
        logger.info("Listing withdrawn", user_id=user_id, listing_id=listing.id)
        return await self._loaded(listing.id)

    @translate_persistence_errors("listings.view")
    async def view(self, listing_id: int) -> Listing:
        """Fetch a listing, counting every fetch as a view."""
        require_found(await self.listings.get_by_id(listing_id), RESOURCE)
        await self.listings.increment_views(listing_id)
        return await self._loaded(listing_id)
