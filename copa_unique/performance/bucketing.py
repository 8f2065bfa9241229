# copa_unique/performance/bucketing.py
"""
Calendar and department bucketing.

Every record lands in exactly one bucket. Buckets are created lazily: a key
missing from the map means "all zeros", and get_bucket() returns that
zero-valued default instead of raising.
"""

import logging
from typing import Dict, Iterable, List, Optional

import pandas as pd

from .models import MonthlyBucket, DepartmentBucket, YearTotals, month_key
from .normalization import to_frame, normalize_department

logger = logging.getLogger(__name__)


def _dated_frame(records, date_col: str = 'date', amount_field: str = 'amount') -> pd.DataFrame:
    """Frame with a datetime date column and a numeric amount column."""
    df = to_frame(records)
    if df.empty or date_col not in df.columns:
        return pd.DataFrame(columns=[date_col, amount_field])

    df[date_col] = pd.to_datetime(df[date_col], errors='coerce')
    df = df.loc[df[date_col].notna()].copy()
    if amount_field not in df.columns:
        df[amount_field] = 0.0
    df[amount_field] = pd.to_numeric(df[amount_field], errors='coerce').fillna(0).astype(float)
    return df


def _year_month(df: pd.DataFrame) -> List[pd.Series]:
    return [df['date'].dt.year.rename('year'), df['date'].dt.month.rename('month')]


def _group_sums(df: pd.DataFrame, keys: List, amount_field: str) -> pd.DataFrame:
    if df.empty:
        return pd.DataFrame(columns=['total', 'count'])
    return df.groupby(keys)[amount_field].agg(total='sum', count='count')


# =====================================================================
# MONTHLY
# =====================================================================

def bucket_by_month(
    sold,
    executed=None,
    amount_field: str = 'amount'
) -> Dict[str, MonthlyBucket]:
    """
    Group sold (and optionally executed) records by calendar year and month.

    Args:
        sold: Revenue records (DataFrame or sequence)
        executed: Executed records, same shape
        amount_field: Column holding the monetary value

    Returns:
        Dict keyed by "{year}-{month}" (1-indexed month)
    """
    buckets: Dict[str, MonthlyBucket] = {}

    def _bucket(year: int, month: int) -> MonthlyBucket:
        key = month_key(year, month)
        if key not in buckets:
            buckets[key] = MonthlyBucket(year=int(year), month=int(month))
        return buckets[key]

    sold_df = _dated_frame(sold, amount_field=amount_field)
    if not sold_df.empty:
        sums = _group_sums(sold_df, _year_month(sold_df), amount_field)
        for (year, month), row in sums.iterrows():
            bucket = _bucket(year, month)
            bucket.revenue += float(row['total'])
            bucket.qtd_sold += int(row['count'])

    if executed is not None:
        exec_df = _dated_frame(executed, amount_field=amount_field)
        if not exec_df.empty:
            sums = _group_sums(exec_df, _year_month(exec_df), amount_field)
            for (year, month), row in sums.iterrows():
                bucket = _bucket(year, month)
                bucket.executed += float(row['total'])
                bucket.qtd_executed += int(row['count'])

    logger.debug(f"Bucketed records into {len(buckets)} month(s)")
    return buckets


def get_bucket(buckets: Dict[str, MonthlyBucket], year: int, month: int) -> MonthlyBucket:
    """Bucket for (year, month), or an all-zero bucket when absent."""
    if not 1 <= int(month) <= 12:
        raise ValueError(f"month must be in 1..12, got {month}")
    return buckets.get(month_key(year, month)) or MonthlyBucket(year=int(year), month=int(month))


# =====================================================================
# DEPARTMENT
# =====================================================================

def bucket_by_department(
    sold,
    year: int,
    executed=None,
    aliases: Optional[Dict[str, str]] = None
) -> Dict[str, DepartmentBucket]:
    """
    Per-department rollup for one year, keyed by normalized department.

    share_percent is the department's share of the year's sold revenue.
    """
    buckets: Dict[str, DepartmentBucket] = {}

    def _rollup(records, is_executed: bool):
        df = _dated_frame(records)
        if df.empty:
            return
        df = df.loc[df['date'].dt.year == int(year)].copy()
        if df.empty:
            return
        if 'department' not in df.columns:
            df['department'] = None
        df['department'] = df['department'].map(lambda v: normalize_department(v, aliases))

        for dept, row in _group_sums(df, 'department', 'amount').iterrows():
            bucket = buckets.setdefault(dept, DepartmentBucket(year=int(year), department=dept))
            if is_executed:
                bucket.executed += float(row['total'])
                bucket.qtd_executed += int(row['count'])
            else:
                bucket.revenue += float(row['total'])
                bucket.qtd_sold += int(row['count'])

    _rollup(sold, is_executed=False)
    if executed is not None:
        _rollup(executed, is_executed=True)

    total = sum(b.revenue for b in buckets.values())
    for bucket in buckets.values():
        bucket.share_percent = (bucket.revenue / total * 100) if total > 0 else 0.0

    return buckets


# =====================================================================
# DAILY
# =====================================================================

def bucket_by_day(records, amount_field: str = 'amount') -> pd.DataFrame:
    """
    Daily sums sorted by date.

    Returns:
        DataFrame with columns: date, amount, count
    """
    df = _dated_frame(records, amount_field=amount_field)
    if df.empty:
        return pd.DataFrame(columns=['date', 'amount', 'count'])

    daily = (
        df.groupby(df['date'].dt.normalize())[amount_field]
        .agg(amount='sum', count='count')
        .reset_index()
        .sort_values('date')
        .reset_index(drop=True)
    )
    return daily


# =====================================================================
# YEARS
# =====================================================================

def year_totals(
    buckets: Dict[str, MonthlyBucket],
    years: Iterable[int],
    through_month: int = 12
) -> Dict[int, YearTotals]:
    """
    Per-year totals of January through through_month.

    A year with no buckets yields an all-zero entry.
    """
    if not 1 <= int(through_month) <= 12:
        raise ValueError(f"through_month must be in 1..12, got {through_month}")

    totals = {int(y): YearTotals(year=int(y)) for y in years}
    for bucket in buckets.values():
        entry = totals.get(bucket.year)
        if entry is None or bucket.month > through_month:
            continue
        entry.revenue += bucket.revenue
        entry.executed += bucket.executed
        entry.qtd_sold += bucket.qtd_sold
        entry.qtd_executed += bucket.qtd_executed
    return totals


def available_years(buckets: Dict[str, MonthlyBucket]) -> List[int]:
    """Years present in the buckets, newest first."""
    return sorted({b.year for b in buckets.values()}, reverse=True)


__all__ = [
    'bucket_by_month',
    'get_bucket',
    'bucket_by_department',
    'bucket_by_day',
    'year_totals',
    'available_years',
]
