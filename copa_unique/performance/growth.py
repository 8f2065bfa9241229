# copa_unique/performance/growth.py
"""
Growth and period comparison.

compute_growth() is the single place where a percentage change is computed.
A zero or negative base never yields NaN or infinity: the caller picks how
that case reads through a GrowthPolicy.

Policies in use:
- ZERO             comparison rows, totals, seasonality, month over month
- UNDEFINED        year cards (rendered as "—")
- FROM_ZERO_IS_100 available for views that read "new" as +100%
"""

import logging
import math
from enum import Enum
from typing import Dict, List, Optional, Sequence

from .constants import TREND_BAND_PP
from .models import ComparisonRow, MonthlyBucket
from .bucketing import get_bucket

logger = logging.getLogger(__name__)


class GrowthPolicy(Enum):
    """What compute_growth returns when the prior value is not positive."""
    ZERO = "zero"
    FROM_ZERO_IS_100 = "from_zero_is_100"
    UNDEFINED = "undefined"


def _as_float(value) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def compute_growth(
    current: float,
    prior: float,
    policy: GrowthPolicy = GrowthPolicy.ZERO
) -> Optional[float]:
    """
    Percentage change from prior to current.

    Returns ((current - prior) / prior) * 100 when prior > 0. Otherwise:
    ZERO -> 0, FROM_ZERO_IS_100 -> 100 if prior == 0 and current > 0 else 0,
    UNDEFINED -> None.
    """
    current = _as_float(current)
    prior = _as_float(prior)

    if prior > 0:
        return ((current - prior) / prior) * 100

    if policy is GrowthPolicy.UNDEFINED:
        return None
    if policy is GrowthPolicy.FROM_ZERO_IS_100:
        return 100.0 if prior == 0 and current > 0 else 0.0
    return 0.0


# =====================================================================
# YEAR OVER YEAR
# =====================================================================

def build_comparison_rows(
    buckets: Dict[str, MonthlyBucket],
    current_year: int,
    years_back: int = 1,
    through_month: int = 12,
    month: Optional[int] = None
) -> List[ComparisonRow]:
    """
    One row per calendar month with the same-month values for consecutive years.

    Args:
        buckets: Output of bucket_by_month
        current_year: Newest year in each row
        years_back: 1 (two years) or 2 (three years)
        through_month: Last month included (YTD views)
        month: Restrict to a single month

    Returns:
        Rows ordered by month; values ordered newest year first
    """
    if years_back not in (1, 2):
        raise ValueError(f"years_back must be 1 or 2, got {years_back}")
    if not 1 <= through_month <= 12:
        raise ValueError(f"through_month must be in 1..12, got {through_month}")

    years = [current_year - i for i in range(years_back + 1)]
    months = [month] if month is not None else range(1, through_month + 1)

    rows = []
    for m in months:
        per_year = [get_bucket(buckets, y, m) for y in years]
        current, prior = per_year[0], per_year[1]
        rows.append(ComparisonRow(
            month=m,
            years=years,
            revenue=[b.revenue for b in per_year],
            executed=[b.executed for b in per_year],
            qtd_sold=[b.qtd_sold for b in per_year],
            revenue_growth=compute_growth(current.revenue, prior.revenue),
            executed_growth=compute_growth(current.executed, prior.executed),
            quantity_growth=compute_growth(current.qtd_sold, prior.qtd_sold),
        ))

    return rows


def comparison_totals(rows: Sequence[ComparisonRow]) -> Dict:
    """
    Current vs compare totals over comparison rows.

    Ticket growth is 0 unless both periods sold at least one item.
    """
    current_revenue = sum(r.revenue[0] for r in rows)
    compare_revenue = sum(r.revenue[1] for r in rows)
    current_executed = sum(r.executed[0] for r in rows)
    compare_executed = sum(r.executed[1] for r in rows)
    current_qty = sum(r.qtd_sold[0] for r in rows)
    compare_qty = sum(r.qtd_sold[1] for r in rows)

    current_ticket = current_revenue / current_qty if current_qty > 0 else 0.0
    compare_ticket = compare_revenue / compare_qty if compare_qty > 0 else 0.0

    if current_qty > 0 and compare_qty > 0:
        ticket_growth = compute_growth(current_ticket, compare_ticket)
    else:
        ticket_growth = 0.0

    return {
        'current_revenue': current_revenue,
        'compare_revenue': compare_revenue,
        'revenue_growth': compute_growth(current_revenue, compare_revenue),
        'current_executed': current_executed,
        'compare_executed': compare_executed,
        'executed_growth': compute_growth(current_executed, compare_executed),
        'current_quantity': current_qty,
        'compare_quantity': compare_qty,
        'quantity_growth': compute_growth(current_qty, compare_qty),
        'current_avg_ticket': current_ticket,
        'compare_avg_ticket': compare_ticket,
        'avg_ticket_growth': ticket_growth,
    }


def best_comparison_month(rows: Sequence[ComparisonRow]) -> Optional[ComparisonRow]:
    """Row with the highest current-year revenue (first wins on ties)."""
    best = None
    for row in rows:
        if best is None or row.current_revenue > best.current_revenue:
            best = row
    return best


# =====================================================================
# MONTH OVER MONTH
# =====================================================================

def previous_month(year: int, month: int) -> tuple:
    """(year, month) of the calendar month before."""
    return (year - 1, 12) if month == 1 else (year, month - 1)


def last_n_months(
    buckets: Dict[str, MonthlyBucket],
    year: int,
    month: int,
    n: int = 6
) -> List[MonthlyBucket]:
    """The n months ending at (year, month), oldest first. Missing months are zero."""
    series = []
    y, m = year, month
    for _ in range(n):
        series.append(get_bucket(buckets, y, m))
        y, m = previous_month(y, m)
    return list(reversed(series))


def month_over_month(current: float, previous: float) -> Dict:
    """Absolute and percentage change against the previous month."""
    return {
        'current': current,
        'previous': previous,
        'change': current - previous,
        'growth': compute_growth(current, previous),
    }


def month_trend(monthly_series: Sequence[MonthlyBucket]) -> Optional[Dict]:
    """
    Trend over a short monthly series (oldest first).

    Trend is "accelerating" when this month's growth beats last month's by
    more than 5 pp, "decelerating" when it trails by more than 5 pp, else
    "stable".

    Returns:
        Dict with mom_growth, average, vs_average, previous_growth, trend,
        best_month, worst_month; None with fewer than two months
    """
    if len(monthly_series) < 2:
        return None

    current = monthly_series[-1]
    previous = monthly_series[-2]

    mom_growth = compute_growth(current.revenue, previous.revenue)
    average = sum(b.revenue for b in monthly_series) / len(monthly_series)
    vs_average = compute_growth(current.revenue, average)

    trend = "stable"
    previous_growth = None
    if len(monthly_series) >= 3:
        previous_growth = compute_growth(previous.revenue, monthly_series[-3].revenue)
        if mom_growth > previous_growth + TREND_BAND_PP:
            trend = "accelerating"
        elif mom_growth < previous_growth - TREND_BAND_PP:
            trend = "decelerating"

    ranked = sorted(monthly_series, key=lambda b: b.revenue, reverse=True)

    return {
        'current': current,
        'previous': previous,
        'mom_growth': mom_growth,
        'average': average,
        'vs_average': vs_average,
        'previous_growth': previous_growth,
        'trend': trend,
        'best_month': ranked[0],
        'worst_month': ranked[-1],
    }


# =====================================================================
# SOLD VS EXECUTED
# =====================================================================

def sold_vs_executed(total_sold: float, total_executed: float) -> Dict:
    """Gap between sold and executed, and executed as a share of sold."""
    return {
        'sold': total_sold,
        'executed': total_executed,
        'difference': total_sold - total_executed,
        'execution_rate': (total_executed / total_sold * 100) if total_sold > 0 else 0.0,
    }


__all__ = [
    'GrowthPolicy',
    'compute_growth',
    'build_comparison_rows',
    'comparison_totals',
    'best_comparison_month',
    'previous_month',
    'last_n_months',
    'month_over_month',
    'month_trend',
    'sold_vs_executed',
]
