# copa_unique/performance/queries.py
"""
SQL Queries and Data Loading for Performance Views

Handles all record store interactions:
- Sales and executed procedures (revenue_records, executed_records)
- Engagement events (nps, testimonials, referrals, other indicators) and cards
- CRM leads, cancellations, RFV segments, campaigns
- Goals (predefined_goals, department_goals), profiles and teams

Every table read goes through fetch_all_paginated so the engine always
receives complete sets; a failure raises RecordFetchError and no partial
frame is ever returned. Uses @st.cache_data for performance.
"""

import logging
from datetime import date
from typing import Dict, List, Optional, Tuple

import pandas as pd
import streamlit as st

from ..config import config
from ..db import fetch_all_paginated
from .access_control import AccessControl

logger = logging.getLogger(__name__)

CACHE_TTL_SECONDS = config.get_app_setting("CACHE_TTL_SECONDS", 300)

RECORD_COLUMNS = """
    id,
    date,
    amount,
    department,
    procedure_name,
    origin,
    patient_name,
    attributed_to_user_id,
    user_id,
    team_id,
    COALESCE(attributed_to_user_id, user_id) AS seller_id
"""

ENGAGEMENT_TABLES = {
    'nps': ("nps_records", "score, cited_member"),
    'testimonial': ("testimonial_records", "type"),
    'referral': ("referral_records", "collected, to_consultation, to_surgery"),
    'other_indicator': ("other_indicators", "ambassadors, unilovers, instagram_mentions"),
}


class RecordQueries:
    """
    Data loading class for performance views.

    Usage:
        access = AccessControl(auth.get_current_user())
        queries = RecordQueries(access)

        revenue_df = queries.get_revenue_records(start_date, end_date)
        goals_df = queries.get_department_goals(2025, 3)
    """

    def __init__(self, access_control: AccessControl, use_cache: bool = True):
        """
        Args:
            access_control: AccessControl instance for filtering
            use_cache: Route reads through st.cache_data
        """
        self.access = access_control
        self.use_cache = use_cache

    def _fetch(self, query: str, params: Dict, label: str) -> pd.DataFrame:
        if self.use_cache:
            return _fetch_cached(query, tuple(sorted(params.items())), label)
        return fetch_all_paginated(query, params, label=label)

    # =========================================================================
    # SALES AND EXECUTION
    # =========================================================================

    def get_revenue_records(
        self,
        start_date: date,
        end_date: date,
        apply_access: bool = True
    ) -> pd.DataFrame:
        """
        Sold records between two dates (inclusive).

        Args:
            apply_access: Restrict to rows the current user may see. League
                views that compare every team pass False.
        """
        query = f"""
            SELECT {RECORD_COLUMNS}
            FROM revenue_records
            WHERE date BETWEEN :start_date AND :end_date
            ORDER BY date, id
        """
        df = self._fetch(query, {'start_date': start_date, 'end_date': end_date}, "revenue_records")
        return self.access.filter_dataframe(df) if apply_access else df

    def get_executed_records(
        self,
        start_date: date,
        end_date: date,
        apply_access: bool = True
    ) -> pd.DataFrame:
        """Executed records between two dates (inclusive)."""
        query = f"""
            SELECT {RECORD_COLUMNS}, executor_name
            FROM executed_records
            WHERE date BETWEEN :start_date AND :end_date
            ORDER BY date, id
        """
        df = self._fetch(query, {'start_date': start_date, 'end_date': end_date}, "executed_records")
        return self.access.filter_dataframe(df) if apply_access else df

    # =========================================================================
    # ENGAGEMENT
    # =========================================================================

    def get_engagement_frames(self, start_date: date, end_date: date) -> Dict[str, pd.DataFrame]:
        """Raw engagement rows per kind, ready for scoring.engagement_records."""
        frames = {}
        for kind, (table, columns) in ENGAGEMENT_TABLES.items():
            query = f"""
                SELECT id, date, created_at, team_id,
                       COALESCE(attributed_to_user_id, user_id) AS user_id,
                       {columns}
                FROM {table}
                WHERE date BETWEEN :start_date AND :end_date
                ORDER BY date, id
            """
            frames[kind] = self._fetch(query, {'start_date': start_date, 'end_date': end_date}, table)
        return frames

    def get_cards(self, start_date: date, end_date: date) -> pd.DataFrame:
        query = """
            SELECT id, date, team_id, type, points, reason
            FROM cards
            WHERE date BETWEEN :start_date AND :end_date
            ORDER BY date, id
        """
        return self._fetch(query, {'start_date': start_date, 'end_date': end_date}, "cards")

    # =========================================================================
    # PIPELINE
    # =========================================================================

    def get_leads(self, start_date: date, end_date: date) -> pd.DataFrame:
        query = """
            SELECT id, created_at, status, temperature, team_id
            FROM referral_leads
            WHERE created_at BETWEEN :start_date AND :end_date
            ORDER BY created_at, id
        """
        return self._fetch(query, {'start_date': start_date, 'end_date': end_date}, "referral_leads")

    def get_cancellations(self, start_date: date, end_date: date) -> pd.DataFrame:
        query = """
            SELECT id, cancellation_request_date AS request_date, status, contract_value, team_id
            FROM cancellations
            WHERE cancellation_request_date BETWEEN :start_date AND :end_date
            ORDER BY cancellation_request_date, id
        """
        return self._fetch(query, {'start_date': start_date, 'end_date': end_date}, "cancellations")

    def get_rfv_segments(self) -> pd.DataFrame:
        """Segment label and lifetime value per customer (labels computed upstream)."""
        query = """
            SELECT id, segment, total_value
            FROM rfv_customers
            ORDER BY id
        """
        return self._fetch(query, {}, "rfv_customers")

    def get_active_campaigns(self, today: date) -> pd.DataFrame:
        """Campaigns flagged active that end today or later."""
        query = """
            SELECT id, name, start_date, end_date, is_active
            FROM campaigns
            WHERE is_active = TRUE
              AND end_date >= :today
            ORDER BY start_date, id
        """
        return self._fetch(query, {'today': today}, "campaigns")

    # =========================================================================
    # GOALS
    # =========================================================================

    def get_predefined_goals(self, year: int, month: int) -> pd.DataFrame:
        """Individual Meta 1/2/3 per seller."""
        query = """
            SELECT id, matched_user_id, first_name, department,
                   meta1_goal, meta2_goal, meta3_goal
            FROM predefined_goals
            WHERE year = :year AND month = :month
            ORDER BY id
        """
        return self._fetch(query, {'year': year, 'month': month}, "predefined_goals")

    def get_department_goals(self, year: int, month: int) -> pd.DataFrame:
        query = """
            SELECT id, department_name, meta1_goal, meta2_goal, meta3_goal
            FROM department_goals
            WHERE year = :year AND month = :month
            ORDER BY id
        """
        return self._fetch(query, {'year': year, 'month': month}, "department_goals")

    def get_clinic_goals(self, year: int, month: int) -> Dict[str, float]:
        """
        Clinic Meta 1/2/3: sum of department goals, or the configured
        CLINIC_META_* values when none are registered for the month.
        """
        goals = self.get_department_goals(year, month)
        fallback = config.get_clinic_goals()
        if goals.empty:
            return fallback

        totals = {}
        for level in ('meta1', 'meta2', 'meta3'):
            value = float(pd.to_numeric(goals[f'{level}_goal'], errors='coerce').fillna(0).sum())
            totals[level] = value if value > 0 else fallback[level]
        return totals

    # =========================================================================
    # LOOKUPS
    # =========================================================================

    def get_profiles(self) -> pd.DataFrame:
        query = """
            SELECT id, user_id, full_name, team_id, position, department
            FROM profiles
            ORDER BY full_name, id
        """
        return self._fetch(query, {}, "profiles")

    def get_teams(self) -> pd.DataFrame:
        query = """
            SELECT id, name, motto
            FROM teams
            ORDER BY name, id
        """
        return self._fetch(query, {}, "teams")

    def get_seller_names(self) -> Dict[str, str]:
        """user_id -> full name"""
        profiles = self.get_profiles()
        if profiles.empty:
            return {}
        return {
            str(row['user_id']): row['full_name']
            for _, row in profiles.iterrows()
            if pd.notna(row['user_id'])
        }

    def get_available_years(self) -> List[int]:
        """Years with sales, newest first."""
        query = """
            SELECT DISTINCT EXTRACT(YEAR FROM date) AS year
            FROM revenue_records
            ORDER BY year DESC
        """
        df = self._fetch(query, {}, "available_years")
        return [int(y) for y in df['year'].dropna()] if not df.empty else []


# =============================================================================
# CACHED QUERY FUNCTIONS (Module-level for st.cache_data)
# =============================================================================

@st.cache_data(ttl=CACHE_TTL_SECONDS, show_spinner=False)
def _fetch_cached(query: str, params: Tuple, label: str) -> pd.DataFrame:
    """
    Cached paginated fetch.
    Note: params is a sorted tuple of items for cache key compatibility.
    """
    return fetch_all_paginated(query, dict(params), label=label)


__all__ = [
    'RecordQueries',
]
