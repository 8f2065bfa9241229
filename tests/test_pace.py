"""Tests for the period calendar, pace labels and goal progress."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from copa_unique.performance.pace import (
    PeriodCalendar,
    achieved_label,
    achieved_level,
    calculate_pace_metrics,
    expected_value_for_day,
    format_pace_diff,
    goal_progress,
    pace_difference,
    pace_icon,
    pace_label,
)

# March 2025 starts on a Saturday; the 10th is a Monday.
MARCH_10 = date(2025, 3, 10)


# ===================================================================
# PeriodCalendar
# ===================================================================


class TestPeriodCalendar:
    def test_current_month(self) -> None:
        period = PeriodCalendar.for_month(2025, 3, MARCH_10)
        assert period.is_current_month
        assert period.days_in_month == 31
        assert period.days_passed == 10
        assert period.days_remaining == 21
        assert period.business_days_remaining == 15

    def test_accepts_datetime(self) -> None:
        period = PeriodCalendar.for_month(2025, 3, datetime(2025, 3, 10, 18, 30))
        assert period.days_passed == 10

    def test_past_month_fully_elapsed(self) -> None:
        period = PeriodCalendar.for_month(2025, 2, MARCH_10)
        assert not period.is_current_month
        assert period.days_passed == 28
        assert period.days_remaining == 0
        assert period.business_days_remaining == 0

    def test_future_month_not_started(self) -> None:
        period = PeriodCalendar.for_month(2025, 4, MARCH_10)
        assert period.days_passed == 0
        assert period.days_remaining == 30
        assert period.business_days_remaining == 22

    def test_last_day_of_month(self) -> None:
        period = PeriodCalendar.for_month(2025, 3, date(2025, 3, 31))
        assert period.days_remaining == 0
        assert period.business_days_remaining == 0

    def test_leap_february(self) -> None:
        assert PeriodCalendar.for_month(2024, 2, MARCH_10).days_in_month == 29

    def test_invalid_month(self) -> None:
        with pytest.raises(ValueError):
            PeriodCalendar.for_month(2025, 13, MARCH_10)


# ===================================================================
# Pace
# ===================================================================


class TestExpectedValue:
    def test_linear(self) -> None:
        assert expected_value_for_day(3000, 15, 30) == pytest.approx(1500.0)

    def test_business_days_round_half_up(self) -> None:
        # 30 * 0.7 = 21 days, day 15 * 0.7 = 10.5 -> 11
        assert expected_value_for_day(3000, 15, 30, use_business_days=True) == pytest.approx(3000 / 21 * 11)

    @pytest.mark.parametrize("goal,day,days", [(0, 10, 30), (1000, 0, 30), (1000, 10, 0)])
    def test_degenerate_inputs(self, goal: float, day: int, days: int) -> None:
        assert expected_value_for_day(goal, day, days) == 0.0


class TestPaceLabels:
    @pytest.mark.parametrize("percent,label", [
        (35, "Excelente"),
        (20, "Excelente"),
        (15, "Acima"),
        (0, "No Ritmo"),
        (-5, "Atenção"),
        (-10, "Atenção"),
        (-20, "Abaixo"),
        (-25, "Abaixo"),
        (-30, "Crítico"),
    ])
    def test_label(self, percent: float, label: str) -> None:
        assert pace_label(percent) == label

    def test_icons(self) -> None:
        assert pace_icon(25) == "🚀"
        assert pace_icon(-90) == "🔴"

    def test_format_diff(self) -> None:
        assert format_pace_diff(12.4) == "+12%"
        assert format_pace_diff(-8.2) == "-8%"

    def test_difference_without_expectation(self) -> None:
        result = pace_difference(500, 0)
        assert result['percent_diff'] == 0.0
        assert result['is_above']

    def test_on_track_threshold(self) -> None:
        assert pace_difference(900, 1000)['is_on_track']
        assert not pace_difference(899, 1000)['is_on_track']

    def test_pace_metrics(self) -> None:
        metrics = calculate_pace_metrics(goal=3000, value=1800, day=15, days_in_month=30)
        assert metrics['expected'] == pytest.approx(1500.0)
        assert metrics['percent_diff'] == pytest.approx(20.0)
        assert metrics['label'] == "Excelente"
        assert metrics['daily_target'] == pytest.approx(100.0)
        assert metrics['current_daily_average'] == pytest.approx(120.0)


# ===================================================================
# Goal progress
# ===================================================================


class TestGoalProgress:
    def test_progress_is_capped(self) -> None:
        period = PeriodCalendar.for_month(2025, 3, MARCH_10)
        result = goal_progress(150, 100, 200, 300, period, quantity=3)
        assert result['meta1_progress'] == 100.0
        assert result['meta2_progress'] == pytest.approx(75.0)
        assert result['missing_meta1'] == 0.0
        assert result['missing_meta3'] == 150.0
        assert result['avg_ticket'] == pytest.approx(50.0)
        assert result['achieved_label'] == "Meta 1"

    def test_daily_figures(self) -> None:
        period = PeriodCalendar.for_month(2025, 3, MARCH_10)
        result = goal_progress(1000, 2500, 3000, 4000, period)
        assert result['daily_avg'] == pytest.approx(100.0)
        assert result['daily_needed'] == pytest.approx(100.0)
        assert result['projection'] == pytest.approx(3100.0)
        assert result['achieved_level'] is None

    def test_no_business_days_left(self) -> None:
        period = PeriodCalendar.for_month(2025, 2, MARCH_10)
        assert goal_progress(10, 100, 200, 300, period)['daily_needed'] == 0.0

    def test_zero_goals(self) -> None:
        period = PeriodCalendar.for_month(2025, 3, MARCH_10)
        result = goal_progress(500, 0, 0, 0, period)
        assert result['meta1_progress'] == 0.0
        assert result['achieved_level'] is None

    def test_achieved_level(self) -> None:
        assert achieved_level(310, 100, 200, 300) == 3
        assert achieved_level(250, 100, 200, 300) == 2
        assert achieved_level(50, 100, 200, 300) is None
        assert achieved_label(None) == "Não atingiu"
