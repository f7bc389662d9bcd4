"""
Valuation index for cigar releases.

The index is a time-weighted median of comparable sales over the last 90
days: 60% for 0-30 days, 30% for 31-60 days and 10% for 61-90 days, with
weights renormalized over the buckets that actually hold sales. Every
function here is pure; the reference date is always passed in or defaulted.
"""
import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Iterable, Optional, Sequence

import numpy as np

WINDOW_DAYS = 90
MIN_COMPS = 3
HIGH_CONFIDENCE_COMPS = 10

# (max age in days, weight) per bucket, youngest first
BUCKETS = (
    (30, 0.6),
    (60, 0.3),
    (90, 0.1),
)

DELTA_PERIODS = (7, 30, 90)

_SECONDS_PER_DAY = 24 * 60 * 60


class ConfidenceLevel(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


@dataclass(frozen=True)
class Comp:
    """A comparable sale."""
    date: datetime
    price_cents: int
    qty: int = 1


@dataclass(frozen=True)
class IndexValuation:
    score_cents: Optional[int]
    confidence: ConfidenceLevel
    comps_used: int
    delta_7d: Optional[float]
    delta_30d: Optional[float]
    delta_90d: Optional[float]


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _age_days(comp: Comp, reference: datetime) -> float:
    return (reference - _as_utc(comp.date)).total_seconds() / _SECONDS_PER_DAY


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def comps_in_window(comps: Iterable[Comp], reference_date: Optional[datetime] = None) -> list[Comp]:
    """Comps dated within the 90 days up to the reference date; future comps are dropped."""
    reference = _as_utc(reference_date or datetime.now(timezone.utc))
    return [c for c in comps if 0 <= _age_days(c, reference) <= WINDOW_DAYS]


def calculate_index_score(
    comps: Sequence[Comp],
    reference_date: Optional[datetime] = None,
) -> Optional[int]:
    """
    Weighted median price in cents, or None with fewer than three usable comps.

    Args:
        comps: Comparable sales
        reference_date: Date the index is computed for (defaults to now)

    Returns:
        Index score rounded half-up to whole cents
    """
    reference = _as_utc(reference_date or datetime.now(timezone.utc))
    window = comps_in_window(comps, reference)
    if len(window) < MIN_COMPS:
        return None

    buckets: list[list[int]] = [[] for _ in BUCKETS]
    for comp in window:
        age = _age_days(comp, reference)
        for index, (max_age, _weight) in enumerate(BUCKETS):
            if age <= max_age:
                buckets[index].append(comp.price_cents)
                break

    weighted_sum = 0.0
    total_weight = 0.0
    for prices, (_max_age, weight) in zip(buckets, BUCKETS):
        if prices:
            weighted_sum += float(np.median(prices)) * weight
            total_weight += weight

    if total_weight == 0:
        return None

    return _round_half_up(weighted_sum / total_weight)


def calculate_index_delta(current_score: float, previous_score: float) -> float:
    """Percentage change from the previous score; 0 when the previous score is 0."""
    if previous_score == 0:
        return 0.0
    return (current_score - previous_score) / previous_score * 100


def get_confidence_level(comps_count: int) -> ConfidenceLevel:
    if comps_count < MIN_COMPS:
        return ConfidenceLevel.LOW
    if comps_count < HIGH_CONFIDENCE_COMPS:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.HIGH


def calculate_historical_scores(
    comps: Sequence[Comp],
    reference_date: Optional[datetime] = None,
) -> dict[str, Optional[float]]:
    """
    Current score plus percentage deltas against 7, 30 and 90 days earlier.

    Each past score re-filters the full comp list against its own shifted
    reference date. A delta is None when either score is None.
    """
    reference = _as_utc(reference_date or datetime.now(timezone.utc))
    current = calculate_index_score(comps, reference)

    result: dict[str, Optional[float]] = {"current": current}
    for days in DELTA_PERIODS:
        past = calculate_index_score(comps, reference - timedelta(days=days))
        if current is None or past is None:
            result[f"delta_{days}d"] = None
        else:
            result[f"delta_{days}d"] = calculate_index_delta(current, past)
    return result


def calculate_index(
    comps: Sequence[Comp],
    reference_date: Optional[datetime] = None,
) -> IndexValuation:
    """Score, confidence and deltas for one set of comps."""
    reference = _as_utc(reference_date or datetime.now(timezone.utc))
    history = calculate_historical_scores(comps, reference)
    used = len(comps_in_window(comps, reference))
    return IndexValuation(
        score_cents=history["current"],
        confidence=get_confidence_level(used),
        comps_used=used,
        delta_7d=history["delta_7d"],
        delta_30d=history["delta_30d"],
        delta_90d=history["delta_90d"],
    )


def prepare_chart_data(comps: Iterable[Comp]) -> list[dict]:
    """Comps sorted by date as ``{"date": "YYYY-MM-DD", "price": dollars}``."""
    ordered = sorted(comps, key=lambda c: _as_utc(c.date))
    return [
        {"date": _as_utc(c.date).date().isoformat(), "price": c.price_cents / 100}
        for c in ordered
    ]
