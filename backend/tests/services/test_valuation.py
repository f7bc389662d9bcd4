"""Tests for the cigar valuation index."""
from datetime import datetime, timedelta, timezone

import numpy as np
import pytest

from humidor_club.services.valuation import (
    Comp,
    ConfidenceLevel,
    calculate_historical_scores,
    calculate_index,
    calculate_index_delta,
    calculate_index_score,
    comps_in_window,
    get_confidence_level,
    prepare_chart_data,
)

REFERENCE = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


def comp(days_ago: float, price_cents: int, qty: int = 1) -> Comp:
    return Comp(date=REFERENCE - timedelta(days=days_ago), price_cents=price_cents, qty=qty)


class TestIndexScore:
    """Time-weighted median of recent sales."""

    def test_recent_and_old_buckets_are_weighted(self):
        """(1050 * 0.6 + 900 * 0.1) / 0.7 = 1028.57 -> 1029."""
        comps = [comp(10, 1000), comp(20, 1100), comp(70, 900)]
        assert calculate_index_score(comps, REFERENCE) == 1029

    def test_fewer_than_three_comps_has_no_score(self):
        assert calculate_index_score([comp(1, 1000), comp(2, 1100)], REFERENCE) is None

    def test_no_comps_has_no_score(self):
        assert calculate_index_score([], REFERENCE) is None

    def test_comps_outside_window_are_ignored(self):
        comps = [comp(5, 1000), comp(6, 1000), comp(91, 5000), comp(-2, 5000)]
        assert calculate_index_score(comps, REFERENCE) is None

    def test_single_bucket_is_renormalized(self):
        """Only the 31-60 day bucket has sales, so its median is the score."""
        comps = [comp(40, 1200), comp(45, 1300), comp(50, 1400)]
        assert calculate_index_score(comps, REFERENCE) == 1300

    def test_half_cent_rounds_up(self):
        comps = [comp(1, 1000), comp(2, 1000), comp(3, 1001), comp(4, 1001)]
        assert calculate_index_score(comps, REFERENCE) == 1001

    def test_bucket_edges_are_inclusive(self):
        """A sale exactly 30 days old still counts as recent."""
        comps = [comp(30, 2000), comp(30, 2000), comp(90, 1000)]
        # (2000 * 0.6 + 1000 * 0.1) / 0.7 = 1857.14
        assert calculate_index_score(comps, REFERENCE) == 1857

    def test_naive_dates_are_treated_as_utc(self):
        naive = REFERENCE.replace(tzinfo=None)
        comps = [Comp(date=naive - timedelta(days=d), price_cents=1500) for d in (1, 2, 3)]
        assert calculate_index_score(comps, REFERENCE) == 1500

    def test_even_bucket_takes_mean_of_middle_prices(self):
        prices = [1000, 1800, 1200, 5000]
        comps = [comp(day, price) for day, price in zip((1, 2, 3, 4), prices)]

        assert np.median(prices) == 1500
        assert calculate_index_score(comps, REFERENCE) == 1500

    def test_quantity_does_not_weight_the_median(self):
        comps = [comp(1, 1000, qty=20), comp(2, 2000), comp(3, 3000)]
        assert calculate_index_score(comps, REFERENCE) == 2000


class TestConfidence:
    @pytest.mark.parametrize(
        "count,expected",
        [
            (0, ConfidenceLevel.LOW),
            (2, ConfidenceLevel.LOW),
            (3, ConfidenceLevel.MEDIUM),
            (9, ConfidenceLevel.MEDIUM),
            (10, ConfidenceLevel.HIGH),
            (50, ConfidenceLevel.HIGH),
        ],
    )
    def test_levels(self, count, expected):
        assert get_confidence_level(count) == expected

    def test_confidence_counts_only_usable_comps(self):
        comps = [comp(d, 1000) for d in range(1, 10)] + [comp(120, 1000), comp(200, 1000)]
        result = calculate_index(comps, REFERENCE)
        assert result.comps_used == 9
        assert result.confidence == ConfidenceLevel.MEDIUM


class TestDeltas:
    def test_percentage_change(self):
        assert calculate_index_delta(1100, 1000) == pytest.approx(10.0)
        assert calculate_index_delta(900, 1000) == pytest.approx(-10.0)

    def test_zero_previous_score_is_zero_change(self):
        assert calculate_index_delta(1000, 0) == 0

    def test_historical_scores_refilter_per_period(self):
        comps = [comp(1, 1200), comp(1, 1200), comp(1, 1200), comp(10, 1000), comp(10, 1000), comp(10, 1000)]

        history = calculate_historical_scores(comps, REFERENCE)

        assert history["current"] == 1100
        # Seven days back only the older sales existed.
        assert history["delta_7d"] == pytest.approx(10.0)
        # Thirty days back there were no sales at all.
        assert history["delta_30d"] is None
        assert history["delta_90d"] is None

    def test_delta_is_none_without_current_score(self):
        history = calculate_historical_scores([comp(1, 1000)], REFERENCE)
        assert history["current"] is None
        assert history["delta_7d"] is None


class TestCalculateIndex:
    def test_worked_example(self):
        comps = [comp(10, 1000), comp(20, 1100), comp(70, 900)]

        result = calculate_index(comps, REFERENCE)

        assert result.score_cents == 1029
        assert result.confidence == ConfidenceLevel.MEDIUM
        assert result.comps_used == 3
        assert result.delta_7d == pytest.approx(0.0)
        assert result.delta_30d is None

    def test_high_confidence_with_ten_comps(self):
        comps = [comp(d, 1000 + d) for d in range(1, 11)]
        result = calculate_index(comps, REFERENCE)
        assert result.confidence == ConfidenceLevel.HIGH

    def test_inputs_are_not_modified(self):
        comps = [comp(70, 900), comp(10, 1000), comp(20, 1100)]
        snapshot = list(comps)

        calculate_index(comps, REFERENCE)
        prepare_chart_data(comps)

        assert comps == snapshot


class TestWindowAndChart:
    def test_window_keeps_zero_to_ninety_days(self):
        comps = [comp(0, 1), comp(90, 2), comp(90.5, 3), comp(-0.5, 4)]
        assert [c.price_cents for c in comps_in_window(comps, REFERENCE)] == [1, 2]

    def test_chart_is_sorted_and_in_dollars(self):
        comps = [comp(3, 1250), comp(30, 999), comp(10, 1100)]

        chart = prepare_chart_data(comps)

        assert [point["price"] for point in chart] == [9.99, 11.0, 12.5]
        assert chart[0]["date"] == "2026-05-02"
        assert chart[-1]["date"] == "2026-05-29"

    def test_empty_chart(self):
        assert prepare_chart_data([]) == []
