"""Tests for catalog lookup-or-create."""
from unittest.mock import AsyncMock, patch

import pytest

from humidor_club.core.errors import ConflictError, NotFoundError, ValidationError
from humidor_club.models import Brand, Cigar, HumidorItem
from humidor_club.schemas.catalog import (
    BrandCreate,
    CigarCreate,
    CigarRecordRequest,
    CigarUpdate,
    LineCreate,
    Strength,
)
from humidor_club.services.catalog import CatalogService, length_to_mm


@pytest.fixture
def service(db_session):
    return CatalogService(db_session)


class TestBrands:
    async def test_create_brand_builds_ascii_slug(self, service):
        brand = await service.create_brand(BrandCreate(name="  Padrón Family  ", country="Nicaragua"))

        assert brand.name == "Padrón Family"
        assert brand.slug == "padron-family"

    async def test_duplicate_name_conflicts_ignoring_case(self, service, test_brand):
        with pytest.raises(ConflictError):
            await service.create_brand(BrandCreate(name="PADRÓN"))

    async def test_slug_collisions_get_a_suffix(self, service):
        first = await service.create_brand(BrandCreate(name="La Aroma!"))
        second = await service.create_brand(BrandCreate(name="La Aroma"))

        assert first.slug == "la-aroma"
        assert second.slug == "la-aroma-1"

    async def test_search_matches_substring(self, service, test_brand):
        await service.create_brand(BrandCreate(name="Oliva"))

        results = await service.list_brands("adr")

        assert [b.name for b in results] == ["Padrón"]

    async def test_search_treats_wildcards_literally(self, service, test_brand):
        assert await service.list_brands("%") == []


class TestLines:
    async def test_create_line_under_brand(self, service, test_brand):
        line = await service.create_line(LineCreate(brand_id=test_brand.id, name="Family Reserve"))

        assert line.slug == "family-reserve"
        assert line.brand.name == "Padrón"

    async def test_missing_brand_is_not_found(self, service):
        with pytest.raises(NotFoundError):
            await service.create_line(LineCreate(brand_id=9999, name="Ghost Line"))

    async def test_duplicate_line_in_brand_conflicts(self, service, test_line):
        with pytest.raises(ConflictError):
            await service.create_line(LineCreate(brand_id=test_line.brand_id, name="1964 anniversary series"))

    async def test_filter_lines_by_brand(self, service, test_line, db_session):
        other = Brand(name="Oliva", slug="oliva")
        db_session.add(other)
        await db_session.flush()
        await service.create_line(LineCreate(brand_id=other.id, name="Serie V"))

        lines = await service.list_lines(brand_id=test_line.brand_id)

        assert [line.name for line in lines] == ["1964 Anniversary Series"]


class TestCreateCigar:
    async def test_new_cigar_lands_in_creator_humidor(self, service, test_user, test_line, db_session):
        cigar, item = await service.create_cigar(
            test_user.id,
            CigarCreate(line_id=test_line.id, vitola=" Torpedo ", length_inches=6.5, strength=Strength.FULL),
        )

        assert cigar.vitola == "Torpedo"
        assert cigar.length_mm == 165
        assert cigar.strength == "Full"
        assert cigar.created_by_id == test_user.id
        assert cigar.line.brand.name == "Padrón"

        assert item is not None
        assert item.user_id == test_user.id
        assert item.cigar_id == cigar.id
        assert item.quantity == 1

    async def test_missing_line_is_not_found(self, service, test_user):
        with pytest.raises(NotFoundError):
            await service.create_cigar(test_user.id, CigarCreate(line_id=9999, vitola="Robusto"))

    async def test_humidor_failure_keeps_the_cigar(self, service, test_user, test_line, db_session):
        with patch(
            "humidor_club.services.catalog.HumidorLedger.add_item",
            new=AsyncMock(side_effect=ValidationError("Humidor unavailable")),
        ):
            cigar, item = await service.create_cigar(
                test_user.id, CigarCreate(line_id=test_line.id, vitola="Churchill")
            )

        assert item is None
        assert await db_session.get(Cigar, cigar.id) is not None
        assert await service.cigars.count() == 1
        assert await service.brands.count() == 1
        assert await db_session.get(HumidorItem, 1) is None


class TestRecordCigar:
    async def test_reuses_existing_brand_and_line(self, service, test_user, test_line):
        cigar, item = await service.record_cigar(
            test_user.id,
            CigarRecordRequest(brand_name="padrón", line_name="1964 ANNIVERSARY SERIES", vitola="Exclusivo"),
        )

        assert cigar.line_id == test_line.id
        assert await service.brands.count() == 1
        assert item is not None

    async def test_creates_missing_brand_and_line(self, service, test_user):
        cigar, _ = await service.record_cigar(
            test_user.id,
            CigarRecordRequest(
                brand_name="Arturo Fuente",
                brand_country="Dominican Republic",
                line_name="Opus X",
                vitola="Perfecxion No. 2",
            ),
        )

        assert cigar.line.name == "Opus X"
        assert cigar.line.slug == "opus-x"
        assert cigar.line.brand.slug == "arturo-fuente"
        assert cigar.line.brand.country == "Dominican Republic"

    async def test_each_record_creates_a_new_cigar(self, service, test_user, test_line):
        request = CigarRecordRequest(brand_name="Padrón", line_name=test_line.name, vitola="Toro")

        first, _ = await service.record_cigar(test_user.id, request)
        second, _ = await service.record_cigar(test_user.id, request)

        assert first.id != second.id


class TestUpdateAndLookup:
    async def test_update_recomputes_length_mm(self, service, test_cigar):
        cigar = await service.update_cigar(test_cigar.id, CigarUpdate(length_inches=7.0, wrapper="Ecuador"))

        assert cigar.length_mm == 178
        assert cigar.wrapper == "Ecuador"
        assert cigar.vitola == "Toro"

    async def test_update_to_missing_line_is_not_found(self, service, test_cigar):
        with pytest.raises(NotFoundError):
            await service.update_cigar(test_cigar.id, CigarUpdate(line_id=9999))

    async def test_get_missing_cigar(self, service):
        with pytest.raises(NotFoundError):
            await service.get_cigar(9999)

    async def test_list_cigars_searches_brand_name(self, service, test_cigar):
        assert [c.id for c in await service.list_cigars(search="padr")] == [test_cigar.id]
        assert await service.list_cigars(search="cohiba") == []


class TestSuggestions:
    async def test_distinct_values(self, service, test_cigar, db_session):
        db_session.add(Cigar(line_id=test_cigar.line_id, vitola="Robusto", wrapper="Nicaraguan Maduro"))
        db_session.add(Cigar(line_id=test_cigar.line_id, vitola="Belicoso", wrapper="Nicaraguan Natural"))
        await db_session.flush()

        assert await service.suggestions("wrapper") == ["Nicaraguan Maduro", "Nicaraguan Natural"]
        assert await service.suggestions("vitola", "ro") == ["Robusto", "Toro"]

    async def test_origin_is_country(self, service, test_cigar):
        assert await service.suggestions("origin") == ["Nicaragua"]

    async def test_unknown_field_lists_allowed(self, service):
        with pytest.raises(ValidationError, match="Must be one of: vitola"):
            await service.suggestions("price")


def test_length_to_mm():
    assert length_to_mm(None) is None
    assert length_to_mm(5.0) == 127
    assert length_to_mm(6.0) == 152
