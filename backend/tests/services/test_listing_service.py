"""Tests for the marketplace listing service."""
import pytest

from humidor_club.core.errors import (
    ForbiddenError,
    ListingFrozenError,
    NotFoundError,
    ValidationError,
)
from humidor_club.models import HumidorItem, ListingStatus, ListingType
from humidor_club.schemas.listing import ListingCreate, ListingUpdate
from humidor_club.services.listings import ListingService, listing_quantity_cap, listing_update_cap


@pytest.fixture
def service(db_session):
    return ListingService(db_session)


def _wts(**overrides) -> ListingCreate:
    values = {
        "type": ListingType.WTS,
        "title": "Padrón 1964 Toro",
        "description": "Box-aged for two years, stored at 65%.",
        "qty": 1,
        "price_cents": 1000,
    }
    values.update(overrides)
    return ListingCreate(**values)


class TestListingQuantityCap:
    """The cap is the matching reservation when set, else remaining quantity."""

    def test_wts_uses_sale_reservation(self):
        item = HumidorItem(quantity=10, available_for_sale=4, available_for_trade=2)
        assert listing_quantity_cap(item, ListingType.WTS) == 4

    def test_wtt_uses_trade_reservation(self):
        item = HumidorItem(quantity=10, available_for_sale=4, available_for_trade=2)
        assert listing_quantity_cap(item, ListingType.WTT) == 2

    def test_unset_reservation_falls_back_to_quantity(self):
        item = HumidorItem(quantity=7, available_for_sale=0, available_for_trade=3)
        assert listing_quantity_cap(item, ListingType.WTS) == 7

    def test_wtb_ignores_reservations(self):
        item = HumidorItem(quantity=7, available_for_sale=2, available_for_trade=3)
        assert listing_quantity_cap(item, ListingType.WTB) == 7

    def test_reservation_is_bounded_by_quantity(self):
        item = HumidorItem(quantity=3, available_for_sale=5, available_for_trade=0)
        assert listing_quantity_cap(item, ListingType.WTS) == 3


class TestListingUpdateCap:
    """Edits are held to the matching reservation with no quantity fallback."""

    def test_wts_uses_sale_reservation(self):
        item = HumidorItem(quantity=10, available_for_sale=4, available_for_trade=2)
        assert listing_update_cap(item, ListingType.WTS) == 4

    def test_unset_reservation_allows_nothing(self):
        item = HumidorItem(quantity=10, available_for_sale=0, available_for_trade=0)
        assert listing_update_cap(item, ListingType.WTS) == 0

    @pytest.mark.parametrize("listing_type", [ListingType.WTB, ListingType.WTT])
    def test_other_types_use_trade_reservation(self, listing_type):
        item = HumidorItem(quantity=10, available_for_sale=6, available_for_trade=2)
        assert listing_update_cap(item, listing_type) == 2

    def test_bounded_by_quantity(self):
        item = HumidorItem(quantity=1, available_for_sale=0, available_for_trade=3)
        assert listing_update_cap(item, ListingType.WTT) == 1


class TestCreateListing:
    async def test_create_at_cap_from_humidor_item(self, service, test_user, make_item):
        item = await make_item(quantity=5, available_for_sale=5)

        listing = await service.create(test_user.id, _wts(qty=5, humidor_item_id=item.id))

        assert listing.qty == 5
        assert listing.status == ListingStatus.DRAFT
        assert listing.published_at is None
        assert listing.cigar_id == item.cigar_id

    async def test_create_over_cap_names_the_limit(self, service, test_user, make_item):
        item = await make_item(quantity=5, available_for_sale=5)

        with pytest.raises(ValidationError) as exc_info:
            await service.create(test_user.id, _wts(qty=6, humidor_item_id=item.id))

        assert "(5)" in exc_info.value.message
        assert exc_info.value.details["limit"] == 5

    async def test_active_listing_is_published(self, service, test_user, test_cigar):
        listing = await service.create(test_user.id, _wts(cigar_id=test_cigar.id, status=ListingStatus.ACTIVE))

        assert listing.status == ListingStatus.ACTIVE
        assert listing.published_at is not None
        assert listing.cigar.vitola == "Toro"

    @pytest.mark.parametrize("price", [None, 0])
    async def test_wts_requires_positive_price(self, service, test_user, price):
        with pytest.raises(ValidationError, match="Price is required"):
            await service.create(test_user.id, _wts(price_cents=price))

    async def test_wtb_needs_no_price(self, service, test_user):
        listing = await service.create(
            test_user.id, _wts(type=ListingType.WTB, price_cents=None, title="Looking for Opus X")
        )
        assert listing.price_cents is None
        assert listing.type == ListingType.WTB

    async def test_wtt_capped_by_trade_reservation(self, service, test_user, make_item):
        item = await make_item(quantity=10, available_for_trade=2)

        with pytest.raises(ValidationError):
            await service.create(
                test_user.id, _wts(type=ListingType.WTT, price_cents=None, qty=3, humidor_item_id=item.id)
            )

    @pytest.mark.parametrize("status", [ListingStatus.SOLD, ListingStatus.FROZEN, ListingStatus.PENDING])
    async def test_only_draft_or_active_on_create(self, service, test_user, status):
        with pytest.raises(ValidationError):
            await service.create(test_user.id, _wts(status=status))

    async def test_other_members_humidor_item_is_forbidden(self, service, test_user_2, make_item):
        item = await make_item(quantity=5)
        with pytest.raises(ForbiddenError):
            await service.create(test_user_2.id, _wts(humidor_item_id=item.id))

    async def test_unknown_cigar_is_not_found(self, service, test_user):
        with pytest.raises(NotFoundError):
            await service.create(test_user.id, _wts(cigar_id=9999))


class TestUpdateListing:
    async def test_publish_then_sell_stamps_dates(self, service, test_user):
        listing = await service.create(test_user.id, _wts())

        published = await service.update(listing.id, test_user.id, ListingUpdate(status=ListingStatus.ACTIVE))
        assert published.published_at is not None
        assert published.sold_at is None

        sold = await service.update(listing.id, test_user.id, ListingUpdate(status=ListingStatus.SOLD))
        assert sold.status == ListingStatus.SOLD
        assert sold.sold_at is not None

    async def test_draft_cannot_jump_to_sold(self, service, test_user):
        listing = await service.create(test_user.id, _wts())
        with pytest.raises(ValidationError):
            await service.update(listing.id, test_user.id, ListingUpdate(status=ListingStatus.SOLD))

    @pytest.mark.parametrize("status", [ListingStatus.FROZEN, ListingStatus.PENDING])
    async def test_owner_cannot_set_administrative_states(self, service, test_user, status):
        listing = await service.create(test_user.id, _wts(status=ListingStatus.ACTIVE))
        with pytest.raises(ValidationError):
            await service.update(listing.id, test_user.id, ListingUpdate(status=status))

    async def test_non_owner_is_forbidden(self, service, test_user, test_user_2):
        listing = await service.create(test_user.id, _wts())
        with pytest.raises(ForbiddenError):
            await service.update(listing.id, test_user_2.id, ListingUpdate(title="Hijacked listing"))

    async def test_frozen_listing_cannot_be_edited(self, service, db_session, test_user):
        listing = await service.create(test_user.id, _wts(status=ListingStatus.ACTIVE))
        listing.status = ListingStatus.FROZEN
        await db_session.flush()

        with pytest.raises(ListingFrozenError):
            await service.update(listing.id, test_user.id, ListingUpdate(title="Trying to edit"))

    async def test_qty_change_revalidated_against_item(self, service, test_user, make_item):
        item = await make_item(quantity=10, available_for_sale=3)
        listing = await service.create(test_user.id, _wts(qty=2, humidor_item_id=item.id))

        with pytest.raises(ValidationError) as exc_info:
            await service.update(listing.id, test_user.id, ListingUpdate(qty=4))
        assert exc_info.value.details["limit"] == 3

        updated = await service.update(listing.id, test_user.id, ListingUpdate(qty=3))
        assert updated.qty == 3

    async def test_qty_edit_without_sale_reservation_is_rejected(self, service, test_user, make_item):
        item = await make_item(quantity=10, available_for_sale=0)
        listing = await service.create(test_user.id, _wts(qty=2, humidor_item_id=item.id))

        with pytest.raises(ValidationError) as exc_info:
            await service.update(listing.id, test_user.id, ListingUpdate(qty=8))

        assert exc_info.value.details == {"limit": 0, "requested": 8}

    async def test_resending_same_qty_is_still_checked(self, service, db_session, test_user, make_item):
        item = await make_item(quantity=10, available_for_sale=3)
        listing = await service.create(test_user.id, _wts(qty=3, humidor_item_id=item.id))
        item.available_for_sale = 1
        await db_session.flush()

        with pytest.raises(ValidationError):
            await service.update(listing.id, test_user.id, ListingUpdate(qty=3))

    @pytest.mark.parametrize("listing_type", [ListingType.WTB, ListingType.WTT])
    async def test_non_sale_listings_use_trade_reservation(self, service, test_user, make_item, listing_type):
        item = await make_item(quantity=10, available_for_sale=8, available_for_trade=2)
        listing = await service.create(
            test_user.id,
            _wts(type=listing_type, price_cents=None, qty=1, humidor_item_id=item.id),
        )

        with pytest.raises(ValidationError) as exc_info:
            await service.update(listing.id, test_user.id, ListingUpdate(qty=3))
        assert exc_info.value.details["limit"] == 2

        updated = await service.update(listing.id, test_user.id, ListingUpdate(qty=2))
        assert updated.qty == 2

    async def test_clearing_wts_price_is_rejected(self, service, test_user):
        listing = await service.create(test_user.id, _wts())
        with pytest.raises(ValidationError):
            await service.update(listing.id, test_user.id, ListingUpdate(price_cents=None))

    async def test_partial_update_keeps_other_fields(self, service, test_user):
        listing = await service.create(test_user.id, _wts(region="Texas", will_ship=True))

        updated = await service.update(listing.id, test_user.id, ListingUpdate(price_cents=1250))

        assert updated.price_cents == 1250
        assert updated.region == "Texas"
        assert updated.will_ship is True
        assert updated.title == "Padrón 1964 Toro"


class TestWithdrawAndView:
    async def test_withdraw_keeps_the_record(self, service, test_user):
        listing = await service.create(test_user.id, _wts(status=ListingStatus.ACTIVE))

        withdrawn = await service.withdraw(listing.id, test_user.id)

        assert withdrawn.status == ListingStatus.WITHDRAWN
        assert await service.listings.get_by_id(listing.id) is not None

    async def test_frozen_listing_can_still_be_withdrawn(self, service, db_session, test_user):
        listing = await service.create(test_user.id, _wts(status=ListingStatus.ACTIVE))
        listing.status = ListingStatus.FROZEN
        await db_session.flush()

        withdrawn = await service.withdraw(listing.id, test_user.id)
        assert withdrawn.status == ListingStatus.WITHDRAWN

    async def test_withdraw_by_non_owner_is_forbidden(self, service, test_user, test_user_2):
        listing = await service.create(test_user.id, _wts())
        with pytest.raises(ForbiddenError):
            await service.withdraw(listing.id, test_user_2.id)

    async def test_every_view_increments_count(self, service, test_user):
        listing = await service.create(test_user.id, _wts(status=ListingStatus.ACTIVE))

        await service.view(listing.id)
        viewed = await service.view(listing.id)

        assert viewed.view_count == 2

    async def test_view_missing_listing_is_not_found(self, service):
        with pytest.raises(NotFoundError):
            await service.view(9999)

    async def test_search_defaults_to_active(self, service, test_user):
        await service.create(test_user.id, _wts())
        active = await service.create(test_user.id, _wts(status=ListingStatus.ACTIVE))

        items, total = await service.search()

        assert total == 1
        assert [i.id for i in items] == [active.id]
