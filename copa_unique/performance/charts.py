# copa_unique/performance/charts.py
"""
Altair Chart Builders for Performance Views

All visualization components using Altair:
- Year over year monthly bars and cumulative lines
- Department share
- Quarterly seasonality
- Ranking bars
- Daily sales against the goal pace line
- Copa team points
"""

import logging
from typing import Dict, List, Optional, Sequence

import altair as alt
import numpy as np
import pandas as pd

from .constants import COLORS, YEAR_COLORS, MONTH_ORDER, MONTH_MAPPING, CHART_WIDTH, CHART_HEIGHT
from .models import ComparisonRow, DepartmentBucket, QuarterSummary, RankingEntry, TeamScore

logger = logging.getLogger(__name__)


class PerformanceCharts:
    """
    Chart builders for the performance dashboard.

    All methods are static - can be called without instantiation.

    Usage:
        chart = PerformanceCharts.build_yoy_bar_chart(rows)
        st.altair_chart(chart, use_container_width=True)
    """

    # =========================================================================
    # DATA SHAPING
    # =========================================================================

    @staticmethod
    def comparison_frame(rows: Sequence[ComparisonRow], metric: str = 'revenue') -> pd.DataFrame:
        """
        Long-format frame (month, year, amount) from comparison rows.

        Args:
            metric: 'revenue', 'executed' or 'qtd_sold'
        """
        records = []
        for row in rows:
            values = getattr(row, metric)
            for year, amount in zip(row.years, values):
                records.append({
                    'month': MONTH_MAPPING[row.month],
                    'month_num': row.month,
                    'year': str(year),
                    'amount': float(amount),
                })
        return pd.DataFrame(records, columns=['month', 'month_num', 'year', 'amount'])

    # =========================================================================
    # YEAR OVER YEAR
    # =========================================================================

    @staticmethod
    def build_yoy_bar_chart(
        rows: Sequence[ComparisonRow],
        metric: str = 'revenue',
        title: str = ""
    ) -> alt.Chart:
        """Grouped bars per month, one bar per year."""
        df = PerformanceCharts.comparison_frame(rows, metric)
        if df.empty or df['amount'].sum() == 0:
            return PerformanceCharts._empty_chart("Sem dados no período")

        years = sorted(df['year'].unique(), reverse=True)
        color_scale = alt.Scale(domain=years, range=YEAR_COLORS[:len(years)])

        bars = alt.Chart(df).mark_bar().encode(
            x=alt.X('month:N', sort=MONTH_ORDER, title='Mês'),
            y=alt.Y('amount:Q', title='R$', axis=alt.Axis(format='~s')),
            color=alt.Color('year:N', scale=color_scale, title='Ano', legend=alt.Legend(orient='bottom')),
            xOffset=alt.XOffset('year:N', sort=years),
            tooltip=[
                alt.Tooltip('month:N', title='Mês'),
                alt.Tooltip('year:N', title='Ano'),
                alt.Tooltip('amount:Q', title='Valor', format=',.0f'),
            ]
        )

        return bars.properties(
            width=CHART_WIDTH,
            height=CHART_HEIGHT,
            title=title or "Comparativo mensal por ano"
        )

    @staticmethod
    def build_cumulative_chart(rows: Sequence[ComparisonRow], title: str = "") -> alt.Chart:
        """Running revenue total per year across the months of the rows."""
        df = PerformanceCharts.comparison_frame(rows, 'revenue')
        if df.empty or df['amount'].sum() == 0:
            return PerformanceCharts._empty_chart("Sem dados no período")

        df = df.sort_values(['year', 'month_num'])
        df['cumulative'] = df.groupby('year')['amount'].cumsum()

        years = sorted(df['year'].unique(), reverse=True)
        color_scale = alt.Scale(domain=years, range=YEAR_COLORS[:len(years)])

        lines = alt.Chart(df).mark_line(point=True, strokeWidth=2).encode(
            x=alt.X('month:N', sort=MONTH_ORDER, title='Mês'),
            y=alt.Y('cumulative:Q', title='Acumulado (R$)', axis=alt.Axis(format='~s')),
            color=alt.Color('year:N', scale=color_scale, title='Ano', legend=alt.Legend(orient='bottom')),
            tooltip=[
                alt.Tooltip('month:N', title='Mês'),
                alt.Tooltip('year:N', title='Ano'),
                alt.Tooltip('cumulative:Q', title='Acumulado', format=',.0f'),
            ]
        )

        return lines.properties(width=CHART_WIDTH, height=CHART_HEIGHT, title=title or "Receita acumulada")

    # =========================================================================
    # DEPARTMENTS AND SEASONALITY
    # =========================================================================

    @staticmethod
    def build_department_share_chart(buckets: Dict[str, DepartmentBucket], title: str = "") -> alt.Chart:
        """Horizontal bars of revenue per department with share tooltip."""
        df = pd.DataFrame([
            {'department': b.department, 'revenue': b.revenue, 'share': b.share_percent / 100}
            for b in buckets.values() if b.revenue > 0
        ])
        if df.empty:
            return PerformanceCharts._empty_chart("Sem vendas por departamento")

        bars = alt.Chart(df).mark_bar(color=COLORS['revenue']).encode(
            x=alt.X('revenue:Q', title='R$', axis=alt.Axis(format='~s')),
            y=alt.Y('department:N', sort='-x', title=None),
            tooltip=[
                alt.Tooltip('department:N', title='Departamento'),
                alt.Tooltip('revenue:Q', title='Valor', format=',.0f'),
                alt.Tooltip('share:Q', title='Participação', format='.1%'),
            ]
        )
        text = bars.mark_text(align='left', dx=3, fontSize=10, color=COLORS['text_dark']).encode(
            text=alt.Text('share:Q', format='.1%')
        )

        return alt.layer(bars, text).properties(
            width=CHART_WIDTH, height=max(200, 28 * len(df)), title=title or "Vendas por departamento"
        )

    @staticmethod
    def build_seasonality_chart(summaries: Sequence[QuarterSummary], title: str = "") -> alt.Chart:
        df = pd.DataFrame([
            {'quarter': s.label, 'year': str(s.year), 'revenue': s.revenue, 'growth': s.growth}
            for s in summaries
        ])
        if df.empty or df['revenue'].sum() == 0:
            return PerformanceCharts._empty_chart("Sem dados de sazonalidade")

        years = sorted(df['year'].unique(), reverse=True)
        color_scale = alt.Scale(domain=years, range=YEAR_COLORS[:len(years)])

        bars = alt.Chart(df).mark_bar().encode(
            x=alt.X('quarter:N', title='Trimestre'),
            y=alt.Y('revenue:Q', title='R$', axis=alt.Axis(format='~s')),
            color=alt.Color('year:N', scale=color_scale, title='Ano'),
            xOffset=alt.XOffset('year:N', sort=years),
            tooltip=[
                alt.Tooltip('quarter:N', title='Trimestre'),
                alt.Tooltip('year:N', title='Ano'),
                alt.Tooltip('revenue:Q', title='Valor', format=',.0f'),
                alt.Tooltip('growth:Q', title='Cresc. %', format='+.1f'),
            ]
        )
        return bars.properties(width=CHART_WIDTH, height=CHART_HEIGHT, title=title or "Sazonalidade")

    # =========================================================================
    # RANKINGS
    # =========================================================================

    @staticmethod
    def build_ranking_chart(
        entries: Sequence[RankingEntry],
        title: str = "",
        color: Optional[str] = None
    ) -> alt.Chart:
        df = pd.DataFrame([{'name': e.name, 'count': e.count, 'revenue': e.revenue} for e in entries])
        if df.empty:
            return PerformanceCharts._empty_chart("Sem dados para o ranking")

        bars = alt.Chart(df).mark_bar(color=color or COLORS['revenue']).encode(
            x=alt.X('revenue:Q', title='R$', axis=alt.Axis(format='~s')),
            y=alt.Y('name:N', sort='-x', title=None),
            tooltip=[
                alt.Tooltip('name:N', title='Nome'),
                alt.Tooltip('count:Q', title='Qtd.'),
                alt.Tooltip('revenue:Q', title='Valor', format=',.0f'),
            ]
        )
        return bars.properties(width=CHART_WIDTH, height=max(180, 30 * len(df)), title=title)

    @staticmethod
    def build_team_points_chart(scores: Sequence[TeamScore], title: str = "") -> alt.Chart:
        """Stacked points per team: revenue, quality, modifiers."""
        records = []
        for s in scores:
            records.extend([
                {'team': s.team_name, 'component': 'Receita', 'points': s.revenue_points},
                {'team': s.team_name, 'component': 'Qualidade', 'points': s.quality_points},
                {'team': s.team_name, 'component': 'Cartões', 'points': s.modifier_points},
            ])
        df = pd.DataFrame(records)
        if df.empty:
            return PerformanceCharts._empty_chart("Nenhuma equipe cadastrada")

        order = [s.team_name for s in scores]
        bars = alt.Chart(df).mark_bar().encode(
            x=alt.X('points:Q', title='Pontos', stack='zero'),
            y=alt.Y('team:N', sort=order, title=None),
            color=alt.Color(
                'component:N',
                scale=alt.Scale(domain=['Receita', 'Qualidade', 'Cartões'],
                                range=[COLORS['revenue'], COLORS['executed'], COLORS['meta1']]),
                title=None,
                legend=alt.Legend(orient='bottom')
            ),
            tooltip=[
                alt.Tooltip('team:N', title='Equipe'),
                alt.Tooltip('component:N', title='Origem'),
                alt.Tooltip('points:Q', title='Pontos', format=',.0f'),
            ]
        )
        return bars.properties(width=CHART_WIDTH, height=max(180, 45 * len(scores)),
                               title=title or "Pontuação da Copa")

    # =========================================================================
    # DAILY PACE
    # =========================================================================

    @staticmethod
    def build_daily_pace_chart(
        daily_df: pd.DataFrame,
        goal: float,
        days_in_month: int,
        title: str = ""
    ) -> alt.Chart:
        """Cumulative daily sales against the linear path to the goal."""
        if daily_df is None or daily_df.empty:
            return PerformanceCharts._empty_chart("Sem vendas no mês")

        df = daily_df.copy()
        df['day'] = pd.to_datetime(df['date']).dt.day
        df = df.sort_values('day')
        df['cumulative'] = df['amount'].cumsum()

        days = np.arange(1, days_in_month + 1)
        daily_goal = goal / days_in_month if days_in_month > 0 else 0.0
        pace = pd.DataFrame({'day': days, 'expected': daily_goal * days})

        actual = alt.Chart(df).mark_area(
            line={'color': COLORS['revenue']}, color=COLORS['revenue'], opacity=0.3
        ).encode(
            x=alt.X('day:Q', title='Dia', scale=alt.Scale(domain=[1, days_in_month])),
            y=alt.Y('cumulative:Q', title='Acumulado (R$)', axis=alt.Axis(format='~s')),
            tooltip=[
                alt.Tooltip('day:Q', title='Dia'),
                alt.Tooltip('amount:Q', title='No dia', format=',.0f'),
                alt.Tooltip('cumulative:Q', title='Acumulado', format=',.0f'),
            ]
        )
        expected = alt.Chart(pace).mark_line(strokeDash=[5, 5], color=COLORS['meta1']).encode(
            x='day:Q',
            y='expected:Q',
            tooltip=[alt.Tooltip('expected:Q', title='Esperado', format=',.0f')]
        )

        return alt.layer(actual, expected).properties(
            width=CHART_WIDTH, height=CHART_HEIGHT, title=title or "Ritmo do mês"
        )

    # =========================================================================
    # HELPERS
    # =========================================================================

    @staticmethod
    def _empty_chart(message: str = "Sem dados") -> alt.Chart:
        """Create an empty chart with a message."""
        return alt.Chart(pd.DataFrame({'note': [message]})).mark_text(
            text=message,
            fontSize=16,
            color=COLORS['text_light']
        ).properties(
            width=CHART_WIDTH,
            height=200
        )


__all__ = [
    'PerformanceCharts',
]
