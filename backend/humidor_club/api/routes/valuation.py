"""
Valuation index endpoint.
"""
from fastapi import APIRouter

from humidor_club.schemas.valuation import ChartPoint, ValuationRequest, ValuationResponse
from humidor_club.services.valuation import Comp, calculate_index, prepare_chart_data

router = APIRouter()


@router.post("/index", response_model=ValuationResponse)
async def compute_valuation_index(body: ValuationRequest):
    """
    Compute the valuation index for a set of comparable sales.

    Score is in cents; deltas are percentage changes against the index
    7, 30 and 90 days before the reference date.
    """
    comps = [Comp(date=c.date, price_cents=c.price_cents, qty=c.qty) for c in body.comps]
    result = calculate_index(comps, body.reference_date)
    return ValuationResponse(
        score_cents=result.score_cents,
        confidence=result.confidence,
        comps_used=result.comps_used,
        delta_7d=result.delta_7d,
        delta_30d=result.delta_30d,
        delta_90d=result.delta_90d,
        chart=[ChartPoint(**point) for point in prepare_chart_data(comps)],
    )
