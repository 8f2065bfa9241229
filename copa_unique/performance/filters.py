# copa_unique/performance/filters.py
"""
Sidebar Filter Components for Performance Views

Renders filter UI elements:
- Year and month selector
- Comparison depth (2 or 3 years)
- Ranking size (top 5/6/8/10)
- Seller selector (role-based)
"""

import calendar
import logging
from datetime import date, datetime
from typing import Dict, List, Optional, Tuple

import pandas as pd
import streamlit as st

from .constants import ALLOWED_TOP_N, DEFAULT_TOP_N, FULL_MONTH_NAMES
from .access_control import AccessControl

logger = logging.getLogger(__name__)


def period_date_range(year: int, month: Optional[int] = None, years_back: int = 0) -> Tuple[date, date]:
    """
    Date range covering the selected period and the years it is compared with.

    Args:
        year: Newest year
        month: Last month of the range (December when None)
        years_back: Extra years loaded before the selected one

    Returns:
        (first day of January of the oldest year, last day of the selected month)
    """
    end_month = month or 12
    if not 1 <= end_month <= 12:
        raise ValueError(f"month must be in 1..12, got {month}")
    start = date(year - years_back, 1, 1)
    end = date(year, end_month, calendar.monthrange(year, end_month)[1])
    return start, end


class PerformanceFilters:
    """
    Sidebar filter renderer.

    Usage:
        filters = PerformanceFilters(access)
        values = filters.render_period_filters(available_years, now=datetime.now())
    """

    def __init__(self, access_control: AccessControl):
        self.access = access_control

    # =========================================================================
    # PERIOD
    # =========================================================================

    def render_period_filters(
        self,
        available_years: List[int],
        now: datetime,
        show_comparison: bool = False,
        show_top_n: bool = False
    ) -> Dict:
        """
        Render period filters and return selected values.

        Returns:
            Dict with year, month, years_back, top_n, start_date, end_date
        """
        st.sidebar.header("🎛️ Filtros")

        years = sorted(set(available_years) | {now.year}, reverse=True)
        col1, col2 = st.sidebar.columns(2)
        with col1:
            year = st.selectbox("Ano", options=years, index=0, key="filter_year")
        with col2:
            month = st.selectbox(
                "Mês",
                options=list(range(1, 13)),
                index=now.month - 1,
                format_func=lambda m: FULL_MONTH_NAMES[m],
                key="filter_month",
            )

        years_back = 1
        if show_comparison:
            years_back = st.sidebar.radio(
                "Comparar com",
                options=[1, 2],
                format_func=lambda n: "Ano anterior" if n == 1 else "Últimos 2 anos",
                horizontal=True,
                key="filter_years_back",
            )

        top_n = DEFAULT_TOP_N
        if show_top_n:
            top_n = st.sidebar.select_slider(
                "Tamanho do ranking", options=ALLOWED_TOP_N, value=DEFAULT_TOP_N, key="filter_top_n"
            )

        # One extra year so month-over-month and seasonality have a base
        start_date, end_date = period_date_range(int(year), int(month), years_back + 1)

        st.sidebar.divider()
        self._render_access_info()

        return {
            'year': int(year),
            'month': int(month),
            'years_back': int(years_back),
            'top_n': int(top_n),
            'start_date': start_date,
            'end_date': end_date,
        }

    # =========================================================================
    # SELLER
    # =========================================================================

    def render_seller_filter(self, profiles: pd.DataFrame) -> Optional[str]:
        """
        Seller picker. Self-access users get their own id without a widget.
        """
        my_id = self.access.user.user_id
        if not self.access.can_select_seller() or profiles.empty:
            return my_id

        options = profiles
        if self.access.get_access_level() == 'team':
            options = profiles[profiles['team_id'].astype(str) == str(self.access.user.team_id)]

        id_map = dict(zip(options['full_name'], options['user_id'].astype(str)))
        if not id_map:
            st.sidebar.warning("Nenhum vendedor disponível")
            return my_id

        names = list(id_map.keys())
        default_index = 0
        for i, name in enumerate(names):
            if id_map[name] == str(my_id):
                default_index = i
                break

        selected = st.sidebar.selectbox("👤 Vendedor(a)", options=names, index=default_index,
                                        key="filter_seller")
        return id_map.get(selected, my_id)

    # =========================================================================
    # ACCESS INFO
    # =========================================================================

    def _render_access_info(self):
        """Display access level info in sidebar."""
        access_level = self.access.get_access_level()

        if access_level == 'full':
            icon, label = "🔓", "Acesso completo"
        elif access_level == 'team':
            icon, label = "👥", "Acesso da equipe"
        else:
            icon, label = "👤", "Visão pessoal"

        st.sidebar.caption(f"{icon} {label}")


__all__ = [
    'PerformanceFilters',
    'period_date_range',
]
