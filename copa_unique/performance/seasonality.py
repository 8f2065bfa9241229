# copa_unique/performance/seasonality.py
"""
Quarterly seasonality: revenue and executed amounts per quarter per year,
with growth against the same quarter of the prior year.
"""

from typing import Dict, List, Optional

from .constants import QUARTER_MONTHS
from .models import MonthlyBucket, QuarterSummary
from .bucketing import available_years, get_bucket
from .growth import compute_growth, GrowthPolicy


def compute_seasonality(
    buckets: Dict[str, MonthlyBucket],
    years: Optional[List[int]] = None
) -> List[QuarterSummary]:
    """
    Quarter summaries for every year in the buckets (or the given years).

    Returns:
        Summaries ordered by year, then quarter
    """
    if years is None:
        years = available_years(buckets)
    years = sorted(set(int(y) for y in years))

    totals = {}
    for year in years + [y - 1 for y in years]:
        for quarter, months in QUARTER_MONTHS.items():
            month_buckets = [get_bucket(buckets, year, m) for m in months]
            totals[(year, quarter)] = (
                sum(b.revenue for b in month_buckets),
                sum(b.executed for b in month_buckets),
            )

    summaries = []
    for year in years:
        for quarter in QUARTER_MONTHS:
            revenue, executed = totals[(year, quarter)]
            prior_revenue, _ = totals[(year - 1, quarter)]
            summaries.append(QuarterSummary(
                year=year,
                quarter=quarter,
                revenue=revenue,
                executed=executed,
                growth=compute_growth(revenue, prior_revenue, GrowthPolicy.ZERO),
            ))

    return summaries


def strongest_quarter(summaries: List[QuarterSummary], year: int) -> Optional[QuarterSummary]:
    """Quarter with the highest revenue in the given year, None without revenue."""
    candidates = [s for s in summaries if s.year == year and s.revenue > 0]
    if not candidates:
        return None
    return max(candidates, key=lambda s: s.revenue)


__all__ = [
    'compute_seasonality',
    'strongest_quarter',
]
