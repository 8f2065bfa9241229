# copa_unique/performance/pipeline.py
"""
Lead pipeline, retention and customer segment metrics.

Statuses and segment labels are produced by the CRM and the RFV job;
they are only counted here, never computed.
"""

from datetime import date, datetime
from typing import Dict, Optional, Union

import pandas as pd

from .constants import (
    LEAD_WON_STATUSES,
    HOT_TEMPERATURE,
    CANCELLATION_RETAINED,
    CANCELLATION_CANCELLED,
    RFV_AT_RISK_SEGMENTS,
    RFV_CHAMPIONS_SEGMENT,
)
from .normalization import normalize_records


def lead_metrics(leads) -> Dict:
    """Total, converted (ganho/operou), conversion rate and hot leads."""
    df = normalize_records(leads, 'lead')
    total = len(df)
    converted = int(df['status'].isin(LEAD_WON_STATUSES).sum()) if total else 0
    hot = int((df['temperature'] == HOT_TEMPERATURE).sum()) if total else 0

    return {
        'total': total,
        'converted': converted,
        'conversion_rate': (converted / total * 100) if total > 0 else 0.0,
        'hot_leads': hot,
    }


def cancellation_metrics(cancellations) -> Dict:
    """Requests, retained contracts and the value actually lost."""
    df = normalize_records(cancellations, 'cancellation')
    if df.empty:
        return {'total': 0, 'retained': 0, 'cancelled': 0, 'cancelled_value': 0.0,
                'retention_rate': 0.0}

    retained = int((df['status'] == CANCELLATION_RETAINED).sum())
    cancelled_mask = df['status'].isin(CANCELLATION_CANCELLED)

    return {
        'total': len(df),
        'retained': retained,
        'cancelled': int(cancelled_mask.sum()),
        'cancelled_value': float(df.loc[cancelled_mask, 'contract_value'].sum()),
        'retention_rate': retained / len(df) * 100,
    }


def rfv_metrics(rows) -> Dict:
    """Customers per RFV segment, at-risk customers and champions."""
    df = normalize_records(rows, 'rfv')
    counts: Dict[str, int] = (
        df['segment'].value_counts().to_dict() if not df.empty else {}
    )
    values: Dict[str, float] = (
        df.groupby('segment')['total_value'].sum().to_dict() if not df.empty else {}
    )

    return {
        'segments': {str(k): int(v) for k, v in counts.items()},
        'segment_values': {str(k): float(v) for k, v in values.items()},
        'at_risk': sum(int(counts.get(s, 0)) for s in RFV_AT_RISK_SEGMENTS),
        'champions': int(counts.get(RFV_CHAMPIONS_SEGMENT, 0)),
        'total': len(df),
    }


def active_campaigns(campaigns: pd.DataFrame, today: Optional[Union[date, datetime]] = None) -> int:
    """
    Campaigns flagged active that have not ended yet.

    A missing is_active column counts every row as active; end_date is only
    checked when today is given. A campaign ending today still counts.
    """
    if campaigns is None or len(campaigns) == 0:
        return 0

    mask = pd.Series(True, index=campaigns.index)
    if 'is_active' in campaigns.columns:
        mask &= campaigns['is_active'].fillna(False).astype(bool)
    if today is not None and 'end_date' in campaigns.columns:
        if isinstance(today, datetime):
            today = today.date()
        end_dates = pd.to_datetime(campaigns['end_date'], errors='coerce').dt.normalize()
        mask &= end_dates >= pd.Timestamp(today).normalize()
    return int(mask.sum())


__all__ = [
    'lead_metrics',
    'cancellation_metrics',
    'rfv_metrics',
    'active_campaigns',
]
