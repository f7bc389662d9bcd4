"""
Catalog schemas: brands, lines and cigars.
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Strength(str, Enum):
    MILD = "Mild"
    MEDIUM = "Medium"
    FULL = "Full"


class Body(str, Enum):
    LIGHT = "Light"
    MEDIUM = "Medium"
    FULL = "Full"


class SuggestionField(str, Enum):
    """Cigar columns offered as autocomplete suggestions."""
    VITOLA = "vitola"
    COUNTRY = "country"
    ORIGIN = "origin"
    WRAPPER = "wrapper"
    BINDER = "binder"
    FILLER = "filler"


# Brands
class BrandCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    country: Optional[str] = Field(None, max_length=100)
    founded: Optional[int] = Field(None, ge=1800, le=2100)
    description: Optional[str] = None
    website: Optional[str] = Field(None, max_length=500)
    logo_url: Optional[str] = Field(None, max_length=500)


class BrandResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    slug: str
    country: Optional[str] = None
    founded: Optional[int] = None
    description: Optional[str] = None
    website: Optional[str] = None
    logo_url: Optional[str] = None


# Lines
class LineCreate(BaseModel):
    brand_id: int
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    release_year: Optional[int] = Field(None, ge=1800, le=2100)
    discontinued: bool = False


class LineResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    brand_id: int
    name: str
    slug: str
    description: Optional[str] = None
    release_year: Optional[int] = None
    discontinued: bool = False
    brand: Optional[BrandResponse] = None


# Cigars
class CigarFields(BaseModel):
    """Descriptive cigar attributes shared by create and record requests."""
    vitola: str = Field(..., min_length=1, max_length=100)
    ring_gauge: Optional[int] = Field(None, ge=20, le=100)
    length_inches: Optional[float] = Field(None, gt=0, le=12)
    wrapper: Optional[str] = Field(None, max_length=100)
    binder: Optional[str] = Field(None, max_length=100)
    filler: Optional[str] = Field(None, max_length=255)
    filler_tobaccos: list[str] = Field(default_factory=list)
    strength: Optional[Strength] = None
    body: Optional[Body] = None
    msrp_cents: Optional[int] = Field(None, ge=0)
    typical_street_cents: Optional[int] = Field(None, ge=0)
    country: Optional[str] = Field(None, max_length=100)
    factory: Optional[str] = Field(None, max_length=200)
    image_urls: list[str] = Field(default_factory=list, max_length=8)


class CigarCreate(CigarFields):
    """Create a cigar under an existing line."""
    line_id: int


class CigarRecordRequest(CigarFields):
    """
    Record a cigar by brand and line name.

    Unknown brands and lines are created on the fly.
    """
    brand_name: str = Field(..., min_length=1, max_length=200)
    brand_country: Optional[str] = Field(None, max_length=100)
    line_name: str = Field(..., min_length=1, max_length=200)


class CigarUpdate(BaseModel):
    """Partial cigar update; only fields sent are changed."""
    line_id: Optional[int] = None
    vitola: Optional[str] = Field(None, min_length=1, max_length=100)
    ring_gauge: Optional[int] = Field(None, ge=20, le=100)
    length_inches: Optional[float] = Field(None, gt=0, le=12)
    wrapper: Optional[str] = Field(None, max_length=100)
    binder: Optional[str] = Field(None, max_length=100)
    filler: Optional[str] = Field(None, max_length=255)
    filler_tobaccos: Optional[list[str]] = None
    strength: Optional[Strength] = None
    body: Optional[Body] = None
    msrp_cents: Optional[int] = Field(None, ge=0)
    typical_street_cents: Optional[int] = Field(None, ge=0)
    country: Optional[str] = Field(None, max_length=100)
    factory: Optional[str] = Field(None, max_length=200)
    image_urls: Optional[list[str]] = Field(None, max_length=8)


class CigarResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    line_id: int
    vitola: str
    ring_gauge: Optional[int] = None
    length_inches: Optional[float] = None
    length_mm: Optional[int] = None
    wrapper: Optional[str] = None
    binder: Optional[str] = None
    filler: Optional[str] = None
    filler_tobaccos: list[str] = []
    strength: Optional[str] = None
    body: Optional[str] = None
    msrp_cents: Optional[int] = None
    typical_street_cents: Optional[int] = None
    country: Optional[str] = None
    factory: Optional[str] = None
    image_urls: list[str] = []
    avg_rating: Optional[float] = None
    total_ratings: int = 0
    created_at: datetime
    line: Optional[LineResponse] = None


class CigarCreateResponse(BaseModel):
    """A newly created cigar and whether it landed in the creator's humidor."""
    cigar: CigarResponse
    added_to_humidor: bool
    humidor_item_id: Optional[int] = None


class SuggestionResponse(BaseModel):
    field: SuggestionField
    values: list[str]
