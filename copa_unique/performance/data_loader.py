# copa_unique/performance/data_loader.py
"""
Record Set Loader for Performance Pages

Load ONCE per period, compute MANY times.

1. Every table needed by a page is fetched completely (paginated reads)
2. The MetricsEngine built over the record set is kept in session_state,
   so its memoized results survive reruns of the same period
3. A new period or a new role produces a new cache key and a fresh engine

A failed read raises RecordFetchError; pages show an error state instead of
computing over partial data.
"""

import logging
import time
from datetime import date, datetime
from typing import Dict, Optional

import pandas as pd
import streamlit as st

from ..config import config
from .engine import MetricsEngine
from .queries import RecordQueries
from .scoring import engagement_records

logger = logging.getLogger(__name__)

CACHE_KEY_RECORD_SET = "_copa_record_set"


class RecordSetLoader:
    """
    Load and cache the record set of one page.

    Usage:
        loader = RecordSetLoader(queries)
        data = loader.load(start_date, end_date, include_pipeline=True)
        engine = data['engine']
    """

    def __init__(self, queries: RecordQueries):
        self.queries = queries

    def _cache_key(self, start_date: date, end_date: date, apply_access: bool,
                   include_pipeline: bool, include_league: bool) -> tuple:
        user = self.queries.access.user
        return (
            start_date, end_date, apply_access, include_pipeline, include_league,
            user.user_id, user.role, user.team_id,
        )

    def load(
        self,
        start_date: date,
        end_date: date,
        apply_access: bool = True,
        include_pipeline: bool = False,
        include_league: bool = False
    ) -> Dict:
        """
        Record set for a period, reused from session_state when unchanged.

        Args:
            start_date, end_date: Inclusive date range
            apply_access: Restrict sales rows to the viewer's scope
            include_pipeline: Also load leads, cancellations, RFV and campaigns
            include_league: Also load teams, engagement events and cards

        Returns:
            Dict with raw frames, 'engine' and '_loaded_at'

        Raises:
            RecordFetchError: when any table read fails
        """
        key = self._cache_key(start_date, end_date, apply_access, include_pipeline, include_league)
        cached = st.session_state.get(CACHE_KEY_RECORD_SET)
        if cached is not None and cached.get('_key') == key:
            logger.debug("Reusing cached record set")
            return cached

        data = self._load_all(start_date, end_date, apply_access, include_pipeline, include_league)
        data['_key'] = key
        st.session_state[CACHE_KEY_RECORD_SET] = data
        return data

    def _load_all(
        self,
        start_date: date,
        end_date: date,
        apply_access: bool,
        include_pipeline: bool,
        include_league: bool
    ) -> Dict:
        q = self.queries
        data: Dict = {}
        total_start = time.perf_counter()

        progress_bar = st.progress(0, text="🔄 Carregando dados...")
        try:
            progress_bar.progress(10, text="💰 Carregando vendas...")
            data['revenue'] = q.get_revenue_records(start_date, end_date, apply_access)

            progress_bar.progress(35, text="🩺 Carregando procedimentos executados...")
            data['executed'] = q.get_executed_records(start_date, end_date, apply_access)

            data['leads'] = pd.DataFrame()
            data['cancellations'] = pd.DataFrame()
            data['rfv'] = pd.DataFrame()
            data['campaigns'] = pd.DataFrame()
            if include_pipeline:
                progress_bar.progress(55, text="📇 Carregando leads e cancelamentos...")
                data['leads'] = q.get_leads(start_date, end_date)
                data['cancellations'] = q.get_cancellations(start_date, end_date)
                data['rfv'] = q.get_rfv_segments()
                data['campaigns'] = q.get_active_campaigns(config.now().date())

            if include_league:
                progress_bar.progress(75, text="🏆 Carregando indicadores da Copa...")
                data['teams'] = q.get_teams()
                data['engagement'] = engagement_records(q.get_engagement_frames(start_date, end_date))
                data['cards'] = q.get_cards(start_date, end_date)

            progress_bar.progress(95, text="⚙️ Calculando métricas...")
            data['engine'] = MetricsEngine(
                data['revenue'],
                data['executed'],
                leads=data['leads'],
                cancellations=data['cancellations'],
                rfv=data['rfv'],
            )
            progress_bar.progress(100, text="✅ Dados carregados!")
        finally:
            time.sleep(0.3)
            progress_bar.empty()

        data['_loaded_at'] = datetime.now()
        logger.info(
            f"Record set loaded in {time.perf_counter() - total_start:.2f}s: "
            f"revenue={len(data['revenue'])}, executed={len(data['executed'])}, "
            f"leads={len(data['leads'])}, cancellations={len(data['cancellations'])}"
        )
        return data

    @staticmethod
    def clear_cache():
        if CACHE_KEY_RECORD_SET in st.session_state:
            del st.session_state[CACHE_KEY_RECORD_SET]


__all__ = [
    'RecordSetLoader',
    'CACHE_KEY_RECORD_SET',
]
