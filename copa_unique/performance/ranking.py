# copa_unique/performance/ranking.py
"""
Top-N rankings by department, procedure, origin, executor, seller and country.
"""

import logging
from typing import Dict, List, Optional, Sequence

import pandas as pd

from .constants import RANKING_FIELDS, FIELD_SENTINEL, SELLER_SENTINEL
from .models import DepartmentBucket, RankingEntry
from .normalization import to_frame

logger = logging.getLogger(__name__)


def top_n(entries: Sequence, n: int, sort_key: str = 'revenue') -> List:
    """
    Sort descending by sort_key and keep the first n.

    The sort is stable, so ties keep their input order. Returns
    min(n, len(entries)) items and is idempotent.

    Raises:
        ValueError: if n is negative
    """
    if n < 0:
        raise ValueError(f"n must be non-negative, got {n}")

    def _key(entry):
        value = entry[sort_key] if isinstance(entry, dict) else getattr(entry, sort_key)
        return value or 0

    return sorted(entries, key=_key, reverse=True)[:n]


def rank_by(
    records,
    field: str,
    n: int = 10,
    sentinel: Optional[str] = None,
    amount_field: str = 'amount',
    sort_key: str = 'revenue'
) -> List[RankingEntry]:
    """
    Count and sum records per value of field, then keep the top n.

    Args:
        records: Normalized records (DataFrame or sequence)
        field: department, procedure_name, origin, country, executor_name, seller_id
        n: Number of entries to keep
        sentinel: Name used for missing values (defaults per field)
        amount_field: Column summed into revenue
        sort_key: 'revenue' or 'count'
    """
    if sentinel is None:
        sentinel = RANKING_FIELDS.get(field, FIELD_SENTINEL)

    df = to_frame(records)
    if df.empty:
        return []

    if field not in df.columns:
        df[field] = None
    if amount_field not in df.columns:
        df[amount_field] = 0.0

    keys = df[field].astype("object").where(df[field].notna(), None)
    keys = keys.map(lambda v: sentinel if v is None or not str(v).strip() else str(v))
    amounts = pd.to_numeric(df[amount_field], errors='coerce').fillna(0)

    grouped = amounts.groupby(keys, sort=False).agg(['count', 'sum'])
    entries = [
        RankingEntry(name=name, count=int(row['count']), revenue=float(row['sum']))
        for name, row in grouped.iterrows()
    ]

    return top_n(entries, n, sort_key=sort_key)


def rank_sellers(
    records,
    names: Dict[str, str],
    n: int = 10,
    amount_field: str = 'amount'
) -> List[RankingEntry]:
    """
    Seller ranking by revenue, with user ids resolved to display names.

    Attribution is seller_id when present (normalized records), else
    attributed_to_user_id, else user_id. Unknown ids read "Desconhecido".
    """
    df = to_frame(records)
    if df.empty:
        return []

    if 'seller_id' not in df.columns:
        attributed = df.get('attributed_to_user_id', pd.Series(index=df.index, dtype=object))
        fallback = df.get('user_id', pd.Series(index=df.index, dtype=object))
        df['seller_id'] = attributed.where(attributed.notna(), fallback)

    lookup = {str(k): v for k, v in (names or {}).items()}
    ranked = rank_by(df, 'seller_id', n=len(df), sentinel=SELLER_SENTINEL, amount_field=amount_field)
    for entry in ranked:
        entry.name = lookup.get(entry.name, SELLER_SENTINEL)

    return top_n(ranked, n)


def department_share(buckets: Dict[str, DepartmentBucket]) -> Dict[str, float]:
    """
    Percentage of the year's revenue per department, largest first.

    A single department holding all revenue yields exactly 100.0.
    """
    total = sum(b.revenue for b in buckets.values())
    shares = {
        name: (bucket.revenue / total * 100) if total > 0 else 0.0
        for name, bucket in buckets.items()
    }
    return dict(sorted(shares.items(), key=lambda item: item[1], reverse=True))


__all__ = [
    'top_n',
    'rank_by',
    'rank_sellers',
    'department_share',
]
