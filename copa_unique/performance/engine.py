# copa_unique/performance/engine.py
"""
Metrics Engine - single entry point for every dashboard view.

Built once per loaded record set. Frames are normalized on construction and
results are memoized per (record-set fingerprint, period, operation) in a
bounded LRU owned by the instance. The fingerprint hashes frame contents, so
a refreshed record set simply produces new keys.

Usage:
    engine = MetricsEngine(revenue_df, executed_df)
    rows, totals = engine.comparison(2025, years_back=1, through_month=3)
    top = engine.ranking('procedure_name', year=2025, n=10)
"""

import hashlib
import logging
from collections import OrderedDict
from datetime import date, datetime
from typing import Callable, Dict, List, Optional, Tuple, Union

import pandas as pd

from .constants import ENGINE_CACHE_SIZE, DEFAULT_TOP_N
from .models import (
    ComparisonRow,
    DepartmentBucket,
    MonthlyBucket,
    QuarterSummary,
    RankingEntry,
    YearTotals,
    Insight,
)
from .normalization import normalize_records
from .bucketing import (
    bucket_by_month,
    bucket_by_department,
    bucket_by_day,
    get_bucket,
    year_totals,
    available_years,
)
from .growth import (
    GrowthPolicy,
    compute_growth,
    build_comparison_rows,
    comparison_totals,
    best_comparison_month,
    last_n_months,
    month_trend,
    previous_month,
    sold_vs_executed,
)
from .ranking import rank_by, rank_sellers, department_share
from .seasonality import compute_seasonality
from .pace import PeriodCalendar, calculate_pace_metrics, goal_progress
from .pipeline import lead_metrics, cancellation_metrics, rfv_metrics
from .insights import InsightMetrics, generate_insights

logger = logging.getLogger(__name__)


def frame_fingerprint(df: Optional[pd.DataFrame]) -> str:
    """Content hash of a frame (column names included, index ignored)."""
    if df is None:
        return "none"
    digest = hashlib.sha1()
    digest.update("|".join(map(str, df.columns)).encode("utf-8"))
    if len(df):
        hashed = pd.util.hash_pandas_object(df.astype(str), index=False)
        digest.update(hashed.values.tobytes())
    return digest.hexdigest()


class MetricsEngine:
    """
    Aggregation facade over normalized record frames.

    Args:
        revenue: Sold records
        executed: Executed records
        leads, cancellations, rfv: Pipeline inputs (optional)
        aliases: Department alias table (defaults to the configured table)
        cache_size: Maximum memoized results kept
    """

    def __init__(
        self,
        revenue,
        executed=None,
        leads=None,
        cancellations=None,
        rfv=None,
        aliases: Optional[Dict[str, str]] = None,
        cache_size: int = ENGINE_CACHE_SIZE
    ):
        self.revenue = normalize_records(revenue, 'revenue', aliases)
        self.executed = normalize_records(executed, 'executed', aliases)
        self.leads = normalize_records(leads, 'lead')
        self.cancellations = normalize_records(cancellations, 'cancellation')
        self.rfv = normalize_records(rfv, 'rfv')
        self.aliases = aliases

        self.fingerprint = "/".join(
            frame_fingerprint(df)[:12]
            for df in (self.revenue, self.executed, self.leads, self.cancellations, self.rfv)
        )

        self._cache: "OrderedDict[tuple, object]" = OrderedDict()
        self._cache_size = max(1, cache_size)
        self.hits = 0
        self.misses = 0

        logger.info(
            f"MetricsEngine ready: {len(self.revenue)} sold, {len(self.executed)} executed "
            f"(fingerprint {self.fingerprint[:12]})"
        )

    # =====================================================================
    # MEMOIZATION
    # =====================================================================

    def _memo(self, operation: str, period: tuple, compute: Callable):
        key = (self.fingerprint, period, operation)
        if key in self._cache:
            self._cache.move_to_end(key)
            self.hits += 1
            logger.debug(f"Engine cache hit: {operation} {period}")
            return self._cache[key]

        self.misses += 1
        result = compute()
        self._cache[key] = result
        if len(self._cache) > self._cache_size:
            self._cache.popitem(last=False)
        return result

    def clear_cache(self):
        self._cache.clear()

    # =====================================================================
    # PERIOD HELPERS
    # =====================================================================

    @staticmethod
    def _filter_period(df: pd.DataFrame, year: Optional[int] = None, month: Optional[int] = None,
                       date_col: str = 'date') -> pd.DataFrame:
        if df.empty or (year is None and month is None):
            return df
        mask = pd.Series(True, index=df.index)
        if year is not None:
            mask &= df[date_col].dt.year == int(year)
        if month is not None:
            if not 1 <= int(month) <= 12:
                raise ValueError(f"month must be in 1..12, got {month}")
            mask &= df[date_col].dt.month == int(month)
        return df.loc[mask]

    def sold_for(self, year: Optional[int] = None, month: Optional[int] = None) -> pd.DataFrame:
        return self._filter_period(self.revenue, year, month)

    def executed_for(self, year: Optional[int] = None, month: Optional[int] = None) -> pd.DataFrame:
        return self._filter_period(self.executed, year, month)

    # =====================================================================
    # BUCKETS
    # =====================================================================

    def monthly_buckets(self) -> Dict[str, MonthlyBucket]:
        return self._memo('monthly_buckets', (), lambda: bucket_by_month(self.revenue, self.executed))

    def month(self, year: int, month: int) -> MonthlyBucket:
        return get_bucket(self.monthly_buckets(), year, month)

    def available_years(self) -> List[int]:
        return available_years(self.monthly_buckets())

    def year_totals(self, years: Tuple[int, ...], through_month: int = 12) -> Dict[int, YearTotals]:
        years = tuple(int(y) for y in years)
        return self._memo(
            'year_totals', (years, through_month),
            lambda: year_totals(self.monthly_buckets(), years, through_month)
        )

    def department_breakdown(self, year: int) -> Dict[str, DepartmentBucket]:
        return self._memo(
            'department_breakdown', (year,),
            lambda: bucket_by_department(self.revenue, year, self.executed, aliases=self.aliases)
        )

    def department_share(self, year: int) -> Dict[str, float]:
        return department_share(self.department_breakdown(year))

    def daily(self, year: int, month: int, executed: bool = False) -> pd.DataFrame:
        source = self.executed_for(year, month) if executed else self.sold_for(year, month)
        return self._memo('daily', (year, month, executed), lambda: bucket_by_day(source))

    # =====================================================================
    # COMPARISON
    # =====================================================================

    def comparison(
        self,
        current_year: int,
        years_back: int = 1,
        through_month: int = 12,
        month: Optional[int] = None
    ) -> Tuple[List[ComparisonRow], Dict]:
        """Comparison rows and their totals for the selected period."""
        def _compute():
            rows = build_comparison_rows(
                self.monthly_buckets(), current_year, years_back, through_month, month
            )
            return rows, comparison_totals(rows)

        return self._memo('comparison', (current_year, years_back, through_month, month), _compute)

    def year_cards(self, years: Tuple[int, ...], through_month: int = 12) -> List[Dict]:
        """
        One card per year with totals and growth against the year before.

        Every year covers January through through_month, so cards compare
        periods of the same length. Growth is None (rendered "—") when the
        prior year has no revenue.
        """
        years = tuple(sorted((int(y) for y in years), reverse=True))

        def _compute():
            totals = year_totals(
                self.monthly_buckets(), years + tuple(y - 1 for y in years), through_month
            )
            return [
                {
                    'year': y,
                    'through_month': through_month,
                    'totals': totals[y],
                    'revenue_growth': compute_growth(
                        totals[y].revenue, totals[y - 1].revenue, GrowthPolicy.UNDEFINED
                    ),
                }
                for y in years
            ]

        return self._memo('year_cards', (years, through_month), _compute)

    def month_trend(self, year: int, month: int, n: int = 6) -> Optional[Dict]:
        return self._memo(
            'month_trend', (year, month, n),
            lambda: month_trend(last_n_months(self.monthly_buckets(), year, month, n))
        )

    def seasonality(self, years: Optional[Tuple[int, ...]] = None) -> List[QuarterSummary]:
        key = tuple(years) if years else ()
        return self._memo(
            'seasonality', key,
            lambda: compute_seasonality(self.monthly_buckets(), list(years) if years else None)
        )

    def sold_vs_executed(self, year: int, month: Optional[int] = None) -> Dict:
        sold = float(self.sold_for(year, month)['amount'].sum())
        executed = float(self.executed_for(year, month)['amount'].sum())
        return sold_vs_executed(sold, executed)

    # =====================================================================
    # RANKINGS
    # =====================================================================

    def ranking(
        self,
        field: str,
        year: Optional[int] = None,
        month: Optional[int] = None,
        n: int = DEFAULT_TOP_N,
        executed: bool = False,
        sort_key: str = 'revenue'
    ) -> List[RankingEntry]:
        """Top-n entries by department, procedure_name, origin, country, executor_name."""
        def _compute():
            source = self.executed_for(year, month) if executed else self.sold_for(year, month)
            return rank_by(source, field, n=n, sort_key=sort_key)

        return self._memo(f'ranking:{field}:{sort_key}:{executed}', (year, month, n), _compute)

    def seller_ranking(
        self,
        names: Dict[str, str],
        year: Optional[int] = None,
        month: Optional[int] = None,
        n: int = DEFAULT_TOP_N
    ) -> List[RankingEntry]:
        names_key = tuple(sorted((str(k), str(v)) for k, v in (names or {}).items()))
        return self._memo(
            'seller_ranking', (year, month, n, names_key),
            lambda: rank_sellers(self.sold_for(year, month), names, n=n)
        )

    # =====================================================================
    # GOALS AND PACE
    # =====================================================================

    def goal_progress(
        self,
        year: int,
        month: int,
        goals: Dict[str, float],
        now: Union[date, datetime]
    ) -> Dict:
        period = PeriodCalendar.for_month(year, month, now)
        bucket = self.month(year, month)
        result = goal_progress(
            bucket.revenue,
            goals.get('meta1', 0.0),
            goals.get('meta2', 0.0),
            goals.get('meta3', 0.0),
            period,
            quantity=bucket.qtd_sold,
        )
        result['period'] = period
        return result

    def pace(self, goal: float, year: int, month: int, now: Union[date, datetime]) -> Dict:
        period = PeriodCalendar.for_month(year, month, now)
        return calculate_pace_metrics(goal, self.month(year, month).revenue,
                                      period.days_passed, period.days_in_month)

    # =====================================================================
    # PIPELINE
    # =====================================================================

    def lead_metrics(self, year: Optional[int] = None, month: Optional[int] = None) -> Dict:
        """Lead figures for leads created in the period (whole record set when omitted)."""
        return self._memo(
            'lead_metrics', (year, month),
            lambda: lead_metrics(self._filter_period(self.leads, year, month, 'created_at'))
        )

    def cancellation_metrics(self, year: Optional[int] = None, month: Optional[int] = None) -> Dict:
        """Cancellation figures for requests made in the period."""
        return self._memo(
            'cancellation_metrics', (year, month),
            lambda: cancellation_metrics(self._filter_period(self.cancellations, year, month, 'request_date'))
        )

    def rfv_metrics(self) -> Dict:
        return self._memo('rfv_metrics', (), lambda: rfv_metrics(self.rfv))

    # =====================================================================
    # INSIGHTS
    # =====================================================================

    def insight_metrics(
        self,
        year: int,
        month: int,
        goals: Dict[str, float],
        now: Union[date, datetime],
        active_campaigns: int = 0
    ) -> InsightMetrics:
        """Collect every input of the insight rules for one month."""
        progress = self.goal_progress(year, month, goals, now)
        rows, totals = self.comparison(year, years_back=1, through_month=month)
        best = best_comparison_month(rows)

        prev_year, prev_month = previous_month(year, month)
        current = self.month(year, month).revenue
        previous = self.month(prev_year, prev_month).revenue

        months_with_sales = [r for r in rows if r.current_revenue > 0]

        return InsightMetrics(
            meta1_progress=progress['meta1_progress'],
            daily_needed=progress['daily_needed'],
            daily_avg=progress['daily_avg'],
            yoy_growth=totals['revenue_growth'],
            compare_year=year - 1,
            hot_leads=self.lead_metrics(year, month)['hot_leads'],
            at_risk_customers=self.rfv_metrics()['at_risk'],
            active_campaigns=active_campaigns,
            mom_growth=compute_growth(current, previous),
            avg_ticket_growth=totals['avg_ticket_growth'],
            quantity_growth=totals['quantity_growth'],
            comparison_months=len(months_with_sales),
            best_month=best.month if best and best.current_revenue > 0 else None,
            best_month_revenue=best.current_revenue if best else 0.0,
        )

    def insights(
        self,
        year: int,
        month: int,
        goals: Dict[str, float],
        now: Union[date, datetime],
        active_campaigns: int = 0
    ) -> List[Insight]:
        goals_key = tuple(sorted(goals.items()))
        today = now.date() if isinstance(now, datetime) else now
        return self._memo(
            'insights', (year, month, goals_key, today, active_campaigns),
            lambda: generate_insights(
                self.insight_metrics(year, month, goals, now, active_campaigns)
            )
        )


__all__ = [
    'MetricsEngine',
    'frame_fingerprint',
]
