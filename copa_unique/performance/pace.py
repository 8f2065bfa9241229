# copa_unique/performance/pace.py
"""
Period calendar and pace analysis.

Compares what has been sold so far with what a linear path to the goal
would expect on the same day of the month. "Now" is always an explicit
argument: nothing in this module reads the clock.
"""

import calendar
import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Dict, Optional, Union

from .constants import (
    BUSINESS_DAY_FACTOR,
    ON_TRACK_THRESHOLD,
    PACE_LABELS,
    PACE_LABEL_FLOOR,
)


@dataclass(frozen=True)
class PeriodCalendar:
    """Day counts for one calendar month as seen from a given date."""
    year: int
    month: int
    days_in_month: int
    days_passed: int
    days_remaining: int
    business_days_remaining: int
    is_current_month: bool

    @classmethod
    def for_month(cls, year: int, month: int, now: Union[date, datetime]) -> "PeriodCalendar":
        """
        Past months count as fully elapsed, future months as not started.
        Business days remaining are weekdays strictly after today.
        """
        if not 1 <= month <= 12:
            raise ValueError(f"month must be in 1..12, got {month}")

        today = now.date() if isinstance(now, datetime) else now
        days_in_month = calendar.monthrange(year, month)[1]
        first_day = date(year, month, 1)
        last_day = date(year, month, days_in_month)

        is_current = today.year == year and today.month == month
        if is_current:
            days_passed = today.day
            start = today + timedelta(days=1)
        elif today > last_day:
            days_passed = days_in_month
            start = None
        else:
            days_passed = 0
            start = first_day

        business_days = 0
        if start is not None:
            day = start
            while day <= last_day:
                if day.weekday() < 5:
                    business_days += 1
                day += timedelta(days=1)

        return cls(
            year=year,
            month=month,
            days_in_month=days_in_month,
            days_passed=days_passed,
            days_remaining=max(0, days_in_month - days_passed),
            business_days_remaining=business_days,
            is_current_month=is_current,
        )


# =====================================================================
# PACE
# =====================================================================

def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def expected_value_for_day(
    goal: float,
    day: int,
    days_in_month: int,
    use_business_days: bool = False
) -> float:
    """
    Linear expectation for the given day of the month.

    With use_business_days, both the day and the month length are scaled to
    70% and rounded.
    """
    if goal <= 0 or day <= 0 or days_in_month <= 0:
        return 0.0

    if use_business_days:
        effective_days = _round_half_up(days_in_month * BUSINESS_DAY_FACTOR)
        effective_day = _round_half_up(day * BUSINESS_DAY_FACTOR)
    else:
        effective_days = days_in_month
        effective_day = day

    if effective_days <= 0:
        return 0.0
    return goal / effective_days * effective_day


def pace_difference(actual: float, expected: float) -> Dict:
    difference = actual - expected
    percent_diff = ((actual - expected) / expected * 100) if expected > 0 else 0.0
    return {
        'difference': difference,
        'percent_diff': percent_diff,
        'is_above': difference >= 0,
        'is_on_track': percent_diff >= ON_TRACK_THRESHOLD,
    }


def pace_label(percent_diff: float) -> str:
    """Excelente / Acima / No Ritmo / Atenção / Abaixo / Crítico"""
    for threshold, label, _icon in PACE_LABELS:
        if percent_diff >= threshold:
            return label
    return PACE_LABEL_FLOOR[0]


def pace_icon(percent_diff: float) -> str:
    for threshold, _label, icon in PACE_LABELS:
        if percent_diff >= threshold:
            return icon
    return PACE_LABEL_FLOOR[1]


def format_pace_diff(percent_diff: float) -> str:
    """'+12%' / '-8%'"""
    sign = "+" if percent_diff >= 0 else ""
    return f"{sign}{percent_diff:.0f}%"


def calculate_pace_metrics(goal: float, value: float, day: int, days_in_month: int) -> Dict:
    """
    Full pace snapshot for one goal.

    Returns:
        Dict with expected, difference, percent_diff, is_above, is_on_track,
        label, icon, daily_target, current_daily_average
    """
    expected = expected_value_for_day(goal, day, days_in_month)
    pace = pace_difference(value, expected)
    return {
        'expected': expected,
        **pace,
        'label': pace_label(pace['percent_diff']),
        'icon': pace_icon(pace['percent_diff']),
        'daily_target': goal / days_in_month if days_in_month > 0 else 0.0,
        'current_daily_average': value / day if day > 0 else 0.0,
    }


# =====================================================================
# GOAL PROGRESS
# =====================================================================

def achieved_level(total: float, meta1: float, meta2: float, meta3: float) -> Optional[int]:
    """Highest goal level reached (3, 2, 1) or None."""
    for level, goal in ((3, meta3), (2, meta2), (1, meta1)):
        if goal > 0 and total >= goal:
            return level
    return None


def achieved_label(level: Optional[int]) -> str:
    return f"Meta {level}" if level else "Não atingiu"


def goal_progress(
    total: float,
    meta1: float,
    meta2: float,
    meta3: float,
    period: PeriodCalendar,
    quantity: int = 0
) -> Dict:
    """
    Progress against the three goal levels for one month.

    Progress is capped at 100. The daily amount needed spreads what is
    missing for Meta 1 over the remaining business days.
    """
    def _progress(goal: float) -> float:
        return min(100.0, total / goal * 100) if goal > 0 else 0.0

    missing1 = max(0.0, meta1 - total)
    daily_avg = total / period.days_passed if period.days_passed > 0 else 0.0
    daily_needed = (
        missing1 / period.business_days_remaining if period.business_days_remaining > 0 else 0.0
    )
    level = achieved_level(total, meta1, meta2, meta3)

    return {
        'total': total,
        'meta1_progress': _progress(meta1),
        'meta2_progress': _progress(meta2),
        'meta3_progress': _progress(meta3),
        'missing_meta1': missing1,
        'missing_meta2': max(0.0, meta2 - total),
        'missing_meta3': max(0.0, meta3 - total),
        'avg_ticket': total / quantity if quantity > 0 else 0.0,
        'daily_avg': daily_avg,
        'daily_needed': daily_needed,
        'projection': daily_avg * period.days_in_month,
        'achieved_level': level,
        'achieved_label': achieved_label(level),
    }


__all__ = [
    'PeriodCalendar',
    'expected_value_for_day',
    'pace_difference',
    'pace_label',
    'pace_icon',
    'format_pace_diff',
    'calculate_pace_metrics',
    'achieved_level',
    'achieved_label',
    'goal_progress',
]
