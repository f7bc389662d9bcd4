"""
Marketplace listing schemas.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from humidor_club.models.listing import ListingStatus, ListingType
from humidor_club.schemas.auth import UserSummary
from humidor_club.schemas.catalog import CigarResponse

MAX_LISTING_IMAGES = 8


class ListingCreate(BaseModel):
    """Create a listing; status may only start as DRAFT or ACTIVE."""
    type: ListingType
    title: str = Field(..., min_length=5, max_length=200)
    description: str = Field(..., min_length=10)
    cigar_id: Optional[int] = None
    humidor_item_id: Optional[int] = None
    qty: int = Field(..., ge=1)
    condition: Optional[str] = Field(None, max_length=50)
    price_cents: Optional[int] = Field(None, ge=0)
    currency: str = Field("USD", min_length=3, max_length=3)
    region: Optional[str] = Field(None, max_length=100)
    city: Optional[str] = Field(None, max_length=100)
    meet_up_only: bool = True
    will_ship: bool = False
    image_urls: list[str] = Field(default_factory=list, max_length=MAX_LISTING_IMAGES)
    status: ListingStatus = ListingStatus.DRAFT


class ListingUpdate(BaseModel):
    """Owner edit; only fields sent are changed."""
    title: Optional[str] = Field(None, min_length=5, max_length=200)
    description: Optional[str] = Field(None, min_length=10)
    qty: Optional[int] = Field(None, ge=1)
    condition: Optional[str] = Field(None, max_length=50)
    price_cents: Optional[int] = Field(None, ge=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    region: Optional[str] = Field(None, max_length=100)
    city: Optional[str] = Field(None, max_length=100)
    meet_up_only: Optional[bool] = None
    will_ship: Optional[bool] = None
    image_urls: Optional[list[str]] = Field(None, max_length=MAX_LISTING_IMAGES)
    status: Optional[ListingStatus] = None


class ListingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    type: ListingType
    status: ListingStatus
    title: str
    description: str
    cigar_id: Optional[int] = None
    humidor_item_id: Optional[int] = None
    qty: int
    condition: Optional[str] = None
    price_cents: Optional[int] = None
    currency: str
    region: Optional[str] = None
    city: Optional[str] = None
    meet_up_only: bool
    will_ship: bool
    image_urls: list[str] = []
    view_count: int
    published_at: Optional[datetime] = None
    sold_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    user: Optional[UserSummary] = None
    cigar: Optional[CigarResponse] = None


class ListingListResponse(BaseModel):
    items: list[ListingResponse]
    total: int
    limit: int
    offset: int
