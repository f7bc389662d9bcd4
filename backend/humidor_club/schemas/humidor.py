"""
Humidor schemas.
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from humidor_club.schemas.catalog import CigarResponse


class HumidorItemCreate(BaseModel):
    """Add a cigar to the caller's humidor."""
    cigar_id: int
    quantity: int = Field(1, description="Values below 1 are raised to 1")
    purchase_price_cents: Optional[int] = Field(None, ge=0)
    purchase_date: Optional[datetime] = None
    acquired_from: Optional[str] = Field(None, max_length=255)
    location: Optional[str] = Field(None, max_length=255)
    condition: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = None


class HumidorItemUpdate(BaseModel):
    """Edit an item; only fields sent are changed."""
    quantity: Optional[int] = Field(None, ge=0)
    purchase_price_cents: Optional[int] = Field(None, ge=0)
    purchase_date: Optional[datetime] = None
    acquired_from: Optional[str] = Field(None, max_length=255)
    location: Optional[str] = Field(None, max_length=255)
    condition: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = None


class SmokeRequest(BaseModel):
    item_id: int
    count: int = Field(1, ge=1)
    smoked_date: Optional[datetime] = None


class MarketplaceAvailabilityUpdate(BaseModel):
    """Reservation counters; an omitted counter keeps its current value."""
    available_for_sale: Optional[int] = None
    available_for_trade: Optional[int] = None


class HumidorItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    cigar_id: int
    quantity: int
    smoked_count: int
    available_for_sale: int
    available_for_trade: int
    purchase_price_cents: Optional[int] = None
    purchase_date: Optional[datetime] = None
    acquired_from: Optional[str] = None
    last_smoked_date: Optional[datetime] = None
    location: Optional[str] = None
    condition: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    cigar: Optional[CigarResponse] = None


class HumidorStats(BaseModel):
    total_cigars: int = 0
    total_smoked: int = 0
    unique_cigars: int = 0
    total_value_cents: int = 0
    total_items: int = 0


class HumidorResponse(BaseModel):
    items: list[HumidorItemResponse]
    stats: HumidorStats


class ToggleAction(str, Enum):
    ADDED = "added"
    REMOVED = "removed"


class ToggleResponse(BaseModel):
    action: ToggleAction
    in_humidor: bool
    item: Optional[HumidorItemResponse] = None
