# copa_unique/performance/scoring.py
"""
Copa Unique League Scoring

Turns engagement events (NPS, testimonials, referrals, other indicators)
and disciplinary cards into team points.

Scoring table (constants.py):
- Revenue:         1 point per R$ 1.000 of team revenue
- NPS 9-10:        5 points, 10 when a team member is cited
- Testimonials:    google 10, video 30, gold 50
- Referrals:       5 per lead collected, 20 per consultation, 50 per surgery
- Other:           ambassador 50, unilover 30, Instagram mention 5
- Cards:           stored points; by type blue +20, white +10, yellow -15, red -40
"""

import logging
import math
from typing import Dict, List, Mapping

import pandas as pd

from .constants import (
    REVENUE_POINTS_DIVISOR,
    NPS_PROMOTER_MIN,
    NPS_POINTS,
    NPS_CITED_POINTS,
    TESTIMONIAL_POINTS,
    REFERRAL_POINTS,
    OTHER_INDICATOR_POINTS,
    CARD_POINTS,
    ENGAGEMENT_KINDS,
)
from .models import TeamScore
from .normalization import to_frame, text_or_default

logger = logging.getLogger(__name__)


def _count(row: Mapping, key: str) -> float:
    value = row.get(key)
    if value is None:
        return 0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    return 0 if math.isnan(number) else number


def revenue_points(revenue: float) -> int:
    """Whole thousands of reais."""
    return int(math.floor(max(0.0, revenue) / REVENUE_POINTS_DIVISOR))


def score_engagement(kind: str, row: Mapping) -> float:
    """
    Points for one engagement event or card.

    Args:
        kind: nps, testimonial, referral, other_indicator or card
        row: Raw fields of the event (score, cited_member, type, collected, ...)
    """
    if kind == 'nps':
        if _count(row, 'score') < NPS_PROMOTER_MIN:
            return 0
        cited = row.get('cited_member')
        if cited is None or pd.isna(cited) or not bool(cited):
            return NPS_POINTS
        return NPS_CITED_POINTS

    if kind == 'testimonial':
        return TESTIMONIAL_POINTS.get(str(row.get('type') or '').lower(), 0)

    if kind == 'referral':
        return sum(_count(row, field) * pts for field, pts in REFERRAL_POINTS.items())

    if kind == 'other_indicator':
        return sum(_count(row, field) * pts for field, pts in OTHER_INDICATOR_POINTS.items())

    if kind == 'card':
        stored = row.get('points')
        if stored is not None and not pd.isna(stored):
            return float(stored)
        return CARD_POINTS.get(str(row.get('type') or '').lower(), 0)

    raise ValueError(f"Unknown engagement kind: {kind}")


def engagement_records(frames: Dict[str, pd.DataFrame]) -> pd.DataFrame:
    """
    Flatten per-table engagement rows into engagement records.

    Args:
        frames: kind -> raw rows (team_id, user_id, date or created_at plus kind fields)

    Returns:
        DataFrame with columns: date, kind, user_id, team_id, points
    """
    parts = []
    for kind, records in (frames or {}).items():
        if kind not in ENGAGEMENT_KINDS:
            raise ValueError(f"Unknown engagement kind: {kind}")
        df = to_frame(records).reset_index(drop=True)
        if df.empty:
            continue
        parts.append(pd.DataFrame({
            'date': pd.to_datetime(df['date'] if 'date' in df.columns else df.get('created_at'), errors='coerce'),
            'kind': kind,
            'user_id': df.get('user_id'),
            'team_id': df.get('team_id'),
            'points': [score_engagement(kind, row) for row in df.to_dict('records')],
        }))

    if not parts:
        return pd.DataFrame(columns=['date', 'kind', 'user_id', 'team_id', 'points'])
    return pd.concat(parts, ignore_index=True)


def team_scoreboard(teams, revenue, engagement, cards=None) -> List[TeamScore]:
    """
    Rank teams by total points.

    Args:
        teams: Records with id and name
        revenue: Revenue records with team_id and amount
        engagement: Engagement records with team_id and points
        cards: Card records with team_id, type and stored points

    Returns:
        TeamScore list, highest total first (stable on ties)
    """
    teams_df = to_frame(teams)
    revenue_df = to_frame(revenue)
    engagement_df = to_frame(engagement)
    cards_df = to_frame(cards)

    def _sum_by_team(df: pd.DataFrame, value_col: str) -> Dict[str, float]:
        if df.empty or 'team_id' not in df.columns or value_col not in df.columns:
            return {}
        values = pd.to_numeric(df[value_col], errors='coerce').fillna(0)
        return values.groupby(df['team_id'].astype(str)).sum().to_dict()

    revenue_by_team = _sum_by_team(revenue_df, 'amount')
    quality_by_team = _sum_by_team(engagement_df, 'points')

    details_by_team: Dict[str, Dict[str, float]] = {}
    if not engagement_df.empty and 'kind' in engagement_df.columns:
        detail_values = pd.to_numeric(engagement_df['points'], errors='coerce').fillna(0)
        grouped = detail_values.groupby([engagement_df['team_id'].astype(str), engagement_df['kind']]).sum()
        for (team_id, kind), value in grouped.items():
            details_by_team.setdefault(team_id, {})[str(kind)] = float(value)

    if not cards_df.empty:
        cards_df = cards_df.copy()
        cards_df['points'] = [score_engagement('card', row) for row in cards_df.to_dict('records')]
    modifier_by_team = _sum_by_team(cards_df, 'points')

    scores = []
    for team in teams_df.to_dict('records'):
        team_id = str(team.get('id'))
        team_revenue = float(revenue_by_team.get(team_id, 0.0))
        scores.append(TeamScore(
            team_id=team_id,
            team_name=text_or_default(team.get('name'), team_id),
            revenue=team_revenue,
            revenue_points=revenue_points(team_revenue),
            quality_points=float(quality_by_team.get(team_id, 0.0)),
            modifier_points=float(modifier_by_team.get(team_id, 0.0)),
            details=details_by_team.get(team_id, {}),
        ))

    scores.sort(key=lambda s: s.total_points, reverse=True)
    logger.debug(f"Scored {len(scores)} team(s)")
    return scores


__all__ = [
    'revenue_points',
    'score_engagement',
    'engagement_records',
    'team_scoreboard',
]
