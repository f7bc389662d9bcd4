"""
Valuation index schemas.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from humidor_club.services.valuation import ConfidenceLevel


class CompInput(BaseModel):
    """A comparable sale."""
    date: datetime
    price_cents: int = Field(..., ge=0)
    qty: int = Field(1, ge=1)


class ValuationRequest(BaseModel):
    comps: list[CompInput] = Field(default_factory=list, max_length=1000)
    reference_date: Optional[datetime] = None


class ChartPoint(BaseModel):
    date: str
    price: float


class ValuationResponse(BaseModel):
    score_cents: Optional[int] = None
    confidence: ConfidenceLevel
    comps_used: int
    delta_7d: Optional[float] = None
    delta_30d: Optional[float] = None
    delta_90d: Optional[float] = None
    chart: list[ChartPoint]
