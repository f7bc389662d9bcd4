"""
Catalog service: brand, line and cigar lookup-or-create.

Creating a cigar also drops one into the creator's humidor. That add runs
in a savepoint so a failure there never loses the new catalog entry.
"""
from typing import Any, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from humidor_club.core.errors import AppError, ConflictError, ValidationError, translate_persistence_errors
from humidor_club.db.transaction import savepoint
from humidor_club.models.catalog import Brand, Cigar, Line
from humidor_club.models.humidor import HumidorItem
from humidor_club.repositories.catalog_repo import BrandRepository, CigarRepository, LineRepository
from humidor_club.schemas.catalog import (
    BrandCreate,
    CigarCreate,
    CigarFields,
    CigarRecordRequest,
    CigarUpdate,
    LineCreate,
    SuggestionField,
)
from humidor_club.schemas.humidor import HumidorItemCreate
from humidor_club.services.humidor import HumidorLedger
from humidor_club.services.ownership import require_found
from humidor_club.utils.sanitize import clean_text, slugify

logger = get_logger()

MM_PER_INCH = 25.4
MAX_SUGGESTIONS = 25


def length_to_mm(length_inches: Optional[float]) -> Optional[int]:
    if length_inches is None:
        return None
    return int(round(length_inches * MM_PER_INCH))


def _cigar_values(data: CigarFields) -> dict[str, Any]:
    values = data.model_dump(include=set(CigarFields.model_fields))
    for key in ("wrapper", "binder", "filler", "country", "factory"):
        values[key] = clean_text(values[key])
    values["vitola"] = data.vitola.strip()
    values["strength"] = data.strength.value if data.strength else None
    values["body"] = data.body.value if data.body else None
    values["filler_tobaccos"] = [t.strip() for t in data.filler_tobaccos if t and t.strip()]
    values["image_urls"] = list(data.image_urls)
    values["length_mm"] = length_to_mm(data.length_inches)
    return values


class CatalogService:
    """Service for brands, lines and cigars."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.brands = BrandRepository(db)
        self.lines = LineRepository(db)
        self.cigars = CigarRepository(db)

    async def _unique_slug(self, name: str, exists) -> str:
        base = slugify(name) or "item"
        slug = base
        counter = 1
        while await exists(slug):
            slug = f"{base}-{counter}"
            counter += 1
        return slug

    # Brands

    @translate_persistence_errors("catalog.list_brands")
    async def list_brands(self, search: Optional[str] = None) -> Sequence[Brand]:
        return await self.brands.search(search)

    @translate_persistence_errors("catalog.create_brand")
    async def create_brand(self, data: BrandCreate) -> Brand:
        """
        Raises:
            ConflictError: A brand with this name exists, ignoring case
        """
        name = data.name.strip()
        if not name:
            raise ValidationError("Brand name is required", {"field": "name"})
        if await self.brands.find_by_name(name):
            raise ConflictError(f"Brand '{name}' already exists")

        slug = await self._unique_slug(name, self.brands.slug_exists)
        brand = await self.brands.create(
            name=name,
            slug=slug,
            country=clean_text(data.country),
            founded=data.founded,
            description=clean_text(data.description, 5000),
            website=clean_text(data.website),
            logo_url=clean_text(data.logo_url),
        )
        logger.info("Brand created", brand_id=brand.id, slug=slug)
        return brand

    # Lines

    @translate_persistence_errors("catalog.list_lines")
    async def list_lines(self, brand_id: Optional[int] = None, search: Optional[str] = None) -> Sequence[Line]:
        return await self.lines.search(brand_id, search)

    @translate_persistence_errors("catalog.create_line")
    async def create_line(self, data: LineCreate) -> Line:
        """
        Raises:
            NotFoundError: The brand does not exist
            ConflictError: The brand already has a line with this name
        """
        name = data.name.strip()
        if not name:
            raise ValidationError("Line name is required", {"field": "name"})
        require_found(await self.brands.get_by_id(data.brand_id), "Brand")
        if await self.lines.find_by_name(data.brand_id, name):
            raise ConflictError(f"Line '{name}' already exists for this brand")

        slug = await self._unique_slug(
            name, lambda candidate: self.lines.slug_exists(data.brand_id, candidate)
        )
        line = await self.lines.create(
            brand_id=data.brand_id,
            name=name,
            slug=slug,
            description=clean_text(data.description, 5000),
            release_year=data.release_year,
            discontinued=data.discontinued,
        )
        logger.info("Line created", line_id=line.id, brand_id=data.brand_id, slug=slug)
        return require_found(await self.lines.get_with_brand(line.id), "Line")

    # Cigars

    @translate_persistence_errors("catalog.list_cigars")
    async def list_cigars(self, limit: int = 50, search: Optional[str] = None) -> Sequence[Cigar]:
        return await self.cigars.list_recent(limit=limit, search=search)

    @translate_persistence_errors("catalog.get_cigar")
    async def get_cigar(self, cigar_id: int) -> Cigar:
        return require_found(await self.cigars.get_with_line(cigar_id), "Cigar")

    async def _add_to_creator_humidor(self, user_id: int, cigar_id: int) -> Optional[HumidorItem]:
        try:
            async with savepoint(self.db, "auto_add_to_humidor"):
                return await HumidorLedger(self.db).add_item(
                    user_id, HumidorItemCreate(cigar_id=cigar_id, quantity=1)
                )
        except (AppError, SQLAlchemyError) as e:
            logger.warning(
                "Failed to add new cigar to humidor",
                user_id=user_id,
                cigar_id=cigar_id,
                error=str(e),
            )
            return None

    async def _create_cigar(
        self,
        line_id: int,
        data: CigarFields,
        user_id: int,
    ) -> tuple[Cigar, Optional[HumidorItem]]:
        cigar = await self.cigars.create(line_id=line_id, created_by_id=user_id, **_cigar_values(data))
        logger.info("Cigar created", cigar_id=cigar.id, line_id=line_id, user_id=user_id)

        item = await self._add_to_creator_humidor(user_id, cigar.id)
        return await self.get_cigar(cigar.id), item

    @translate_persistence_errors("catalog.create_cigar")
    async def create_cigar(self, user_id: int, data: CigarCreate) -> tuple[Cigar, Optional[HumidorItem]]:
        """
        Create a cigar under an existing line and add it to the creator's humidor.

        Returns:
            Tuple of (cigar, humidor item or None if the add failed)
        """
        require_found(await self.lines.get_by_id(data.line_id), "Line")
        return await self._create_cigar(data.line_id, data, user_id)

    @translate_persistence_errors("catalog.record_cigar")
    async def record_cigar(self, user_id: int, data: CigarRecordRequest) -> tuple[Cigar, Optional[HumidorItem]]:
        """
        Lookup-or-create flow used when a member records a new cigar.

        Brand and line are matched by name ignoring case, and created when
        missing; the cigar itself is always new.
        """
        brand = await self.brands.find_by_name(data.brand_name)
        if brand is None:
            brand = await self.create_brand(BrandCreate(name=data.brand_name, country=data.brand_country))

        line = await self.lines.find_by_name(brand.id, data.line_name)
        if line is None:
            line = await self.create_line(LineCreate(brand_id=brand.id, name=data.line_name))

        return await self._create_cigar(line.id, data, user_id)

    @translate_persistence_errors("catalog.update_cigar")
    async def update_cigar(self, cigar_id: int, data: CigarUpdate) -> Cigar:
        cigar = require_found(await self.cigars.get_by_id(cigar_id), "Cigar")

        changes = data.model_dump(exclude_unset=True)
        if changes.get("line_id") is not None:
            require_found(await self.lines.get_by_id(changes["line_id"]), "Line")
        elif "line_id" in changes:
            changes.pop("line_id")
        if "vitola" in changes:
            if not changes["vitola"] or not changes["vitola"].strip():
                raise ValidationError("Vitola is required", {"field": "vitola"})
            changes["vitola"] = changes["vitola"].strip()
        if "length_inches" in changes:
            changes["length_mm"] = length_to_mm(changes["length_inches"])
        for key in ("strength", "body"):
            if changes.get(key) is not None:
                changes[key] = changes[key].value
        for key in ("filler_tobaccos", "image_urls"):
            if key in changes and changes[key] is None:
                changes[key] = []

        await self.cigars.update(cigar, **changes)
        logger.info("Cigar updated", cigar_id=cigar_id, fields=sorted(changes))
        return await self.get_cigar(cigar_id)

    @translate_persistence_errors("catalog.suggestions")
    async def suggestions(self, field: str, search: Optional[str] = None) -> list[str]:
        """
        Distinct known values for an autocomplete field.

        Raises:
            ValidationError: Unknown field
        """
        try:
            field = SuggestionField(field).value
        except ValueError as e:
            allowed = ", ".join(f.value for f in SuggestionField)
            raise ValidationError(f"Invalid field. Must be one of: {allowed}", {"field": field}) from e

        return await self.cigars.distinct_values(field, search, limit=MAX_SUGGESTIONS)
