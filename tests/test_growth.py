"""Tests for growth policies, comparison rows and month trends."""

from __future__ import annotations

import pandas as pd
import pytest

from copa_unique.performance.bucketing import bucket_by_month
from copa_unique.performance.growth import (
    GrowthPolicy,
    best_comparison_month,
    build_comparison_rows,
    comparison_totals,
    compute_growth,
    last_n_months,
    month_over_month,
    month_trend,
    previous_month,
    sold_vs_executed,
)
from copa_unique.performance.models import MonthlyBucket


def _series(*revenues: float) -> list:
    return [MonthlyBucket(year=2025, month=i + 1, revenue=r) for i, r in enumerate(revenues)]


# ===================================================================
# compute_growth
# ===================================================================


class TestComputeGrowth:
    def test_positive_base(self) -> None:
        assert compute_growth(150, 100) == pytest.approx(50.0)
        assert compute_growth(50, 100) == pytest.approx(-50.0)

    @pytest.mark.parametrize("prior", [0, -10])
    def test_zero_policy(self, prior: float) -> None:
        assert compute_growth(500, prior) == 0.0

    def test_from_zero_is_100(self) -> None:
        assert compute_growth(500, 0, GrowthPolicy.FROM_ZERO_IS_100) == 100.0
        assert compute_growth(0, 0, GrowthPolicy.FROM_ZERO_IS_100) == 0.0
        assert compute_growth(500, -1, GrowthPolicy.FROM_ZERO_IS_100) == 0.0

    def test_undefined_policy(self) -> None:
        assert compute_growth(500, 0, GrowthPolicy.UNDEFINED) is None
        assert compute_growth(150, 100, GrowthPolicy.UNDEFINED) == pytest.approx(50.0)

    def test_never_nan_or_infinite(self) -> None:
        assert compute_growth(float("nan"), 100) == pytest.approx(-100.0)
        assert compute_growth(100, float("inf")) == 0.0
        assert compute_growth(None, None) == 0.0


# ===================================================================
# Comparison rows
# ===================================================================


class TestComparisonRows:
    def test_same_month_growth(self, revenue_df: pd.DataFrame) -> None:
        rows = build_comparison_rows(bucket_by_month(revenue_df), 2025, years_back=1, through_month=3)
        assert [r.month for r in rows] == [1, 2, 3]
        march = rows[2]
        assert march.years == [2025, 2024]
        assert march.revenue == [3000.0, 2000.0]
        assert march.revenue_growth == pytest.approx(50.0)
        assert march.quantity_growth == 0.0

    def test_missing_prior_month_reads_zero_growth(self, revenue_df: pd.DataFrame) -> None:
        rows = build_comparison_rows(bucket_by_month(revenue_df), 2025, through_month=3)
        assert rows[0].revenue == [1500.0, 0.0]
        assert rows[0].revenue_growth == 0.0

    def test_three_years_and_single_month(self, revenue_df: pd.DataFrame) -> None:
        rows = build_comparison_rows(bucket_by_month(revenue_df), 2025, years_back=2, month=3)
        assert len(rows) == 1
        assert rows[0].years == [2025, 2024, 2023]
        assert rows[0].revenue == [3000.0, 2000.0, 0.0]

    @pytest.mark.parametrize("years_back", [0, 3])
    def test_years_back_validation(self, years_back: int) -> None:
        with pytest.raises(ValueError, match="years_back"):
            build_comparison_rows({}, 2025, years_back=years_back)

    def test_through_month_validation(self) -> None:
        with pytest.raises(ValueError, match="through_month"):
            build_comparison_rows({}, 2025, through_month=13)

    def test_totals(self, revenue_df: pd.DataFrame) -> None:
        rows = build_comparison_rows(bucket_by_month(revenue_df), 2025, through_month=3)
        totals = comparison_totals(rows)
        assert totals['current_revenue'] == 5000.0
        assert totals['compare_revenue'] == 2000.0
        assert totals['revenue_growth'] == pytest.approx(150.0)
        assert totals['current_quantity'] == 4
        assert totals['current_avg_ticket'] == pytest.approx(1250.0)
        assert totals['avg_ticket_growth'] == pytest.approx(25.0)

    def test_ticket_growth_needs_both_periods(self, revenue_df: pd.DataFrame) -> None:
        rows = build_comparison_rows(bucket_by_month(revenue_df), 2025, through_month=2)
        totals = comparison_totals(rows)
        assert totals['compare_quantity'] == 0
        assert totals['avg_ticket_growth'] == 0.0

    def test_best_month(self, revenue_df: pd.DataFrame) -> None:
        rows = build_comparison_rows(bucket_by_month(revenue_df), 2025, through_month=3)
        assert best_comparison_month(rows).month == 3
        assert best_comparison_month([]) is None


# ===================================================================
# Month over month
# ===================================================================


class TestMonthOverMonth:
    def test_previous_month_wraps_year(self) -> None:
        assert previous_month(2025, 1) == (2024, 12)
        assert previous_month(2025, 7) == (2025, 6)

    def test_last_n_months_oldest_first(self, revenue_df: pd.DataFrame) -> None:
        series = last_n_months(bucket_by_month(revenue_df), 2025, 2, n=3)
        assert [(b.year, b.month) for b in series] == [(2024, 12), (2025, 1), (2025, 2)]
        assert [b.revenue for b in series] == [0.0, 1500.0, 500.0]

    def test_month_over_month(self) -> None:
        result = month_over_month(1200, 1000)
        assert result['change'] == 200
        assert result['growth'] == pytest.approx(20.0)

    def test_trend_needs_two_months(self) -> None:
        assert month_trend([]) is None
        assert month_trend(_series(100)) is None

    def test_two_months_are_stable(self) -> None:
        trend = month_trend(_series(100, 150))
        assert trend['mom_growth'] == pytest.approx(50.0)
        assert trend['previous_growth'] is None
        assert trend['trend'] == "stable"

    def test_accelerating(self) -> None:
        trend = month_trend(_series(100, 100, 200))
        assert trend['trend'] == "accelerating"
        assert trend['best_month'].month == 3

    def test_decelerating(self) -> None:
        trend = month_trend(_series(100, 200, 200))
        assert trend['trend'] == "decelerating"

    def test_within_band_is_stable(self) -> None:
        trend = month_trend(_series(100, 110, 122))
        assert trend['trend'] == "stable"

    def test_average_and_extremes(self) -> None:
        trend = month_trend(_series(300, 100, 200))
        assert trend['average'] == pytest.approx(200.0)
        assert trend['vs_average'] == pytest.approx(0.0)
        assert trend['worst_month'].month == 2


class TestSoldVsExecuted:
    def test_rate(self) -> None:
        result = sold_vs_executed(1000, 800)
        assert result['difference'] == 200
        assert result['execution_rate'] == pytest.approx(80.0)

    def test_nothing_sold(self) -> None:
        assert sold_vs_executed(0, 500)['execution_rate'] == 0.0
