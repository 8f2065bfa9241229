# copa_unique/performance/fragments.py
"""
Streamlit Rendering Components for Performance Views

KPI cards, goal progress, insights, rankings and the league scoreboard.
Sections with their own widgets use @st.fragment so changing them only
reruns the section, NOT the whole page.
"""

import logging
from typing import Dict, List, Optional, Sequence

import pandas as pd
import streamlit as st

from .charts import PerformanceCharts
from .constants import FULL_MONTH_NAMES, MONTH_MAPPING, RANKING_FIELDS, ALLOWED_TOP_N, DEFAULT_TOP_N
from .engine import MetricsEngine
from .formatting import format_brl, format_brl_compact, format_growth, format_percent
from .models import Insight, RankingEntry, SellerInsight, TeamScore
from .pace import format_pace_diff

logger = logging.getLogger(__name__)

INSIGHT_RENDERERS = {
    'success': st.success,
    'warning': st.warning,
    'danger': st.error,
    'info': st.info,
}

STATUS_BADGES = {
    'achieved': "🏆 Meta batida",
    'on-track': "✅ No caminho",
    'warning': "⚠️ Atenção",
    'danger': "🔴 Crítico",
}

RANKING_LABELS = {
    'department': "Departamento",
    'procedure_name': "Procedimento",
    'origin': "Origem",
    'country': "País",
    'executor_name': "Executor",
}


# =============================================================================
# KPI CARDS
# =============================================================================

def render_kpi_cards(totals: Dict, compare_label: str = "ano anterior"):
    """
    Summary cards for a comparison period.

    Args:
        totals: Output of comparison_totals
        compare_label: Text shown in the delta, e.g. "vs 2024"
    """
    with st.container(border=True):
        st.markdown("**💰 RESULTADO DO PERÍODO**")
        col1, col2, col3, col4 = st.columns(4)

        with col1:
            st.metric(
                label="Vendido",
                value=format_brl(totals['current_revenue']),
                delta=f"{format_growth(totals['revenue_growth'])} {compare_label}",
                help="Soma dos valores vendidos no período"
            )
        with col2:
            st.metric(
                label="Executado",
                value=format_brl(totals['current_executed']),
                delta=f"{format_growth(totals['executed_growth'])} {compare_label}",
                help="Soma dos procedimentos executados no período"
            )
        with col3:
            st.metric(
                label="Vendas",
                value=f"{totals['current_quantity']:,}".replace(",", "."),
                delta=f"{format_growth(totals['quantity_growth'])} {compare_label}",
                help="Quantidade de vendas registradas"
            )
        with col4:
            st.metric(
                label="Ticket Médio",
                value=format_brl(totals['current_avg_ticket']),
                delta=f"{format_growth(totals['avg_ticket_growth'])} {compare_label}",
                help="Vendido / quantidade de vendas"
            )


def render_year_cards(cards: List[Dict]):
    """One card per year (year to date when cut short); growth shows "—" when the prior year is empty."""
    if not cards:
        st.info("Nenhum ano disponível")
        return

    columns = st.columns(len(cards))
    for col, card in zip(columns, cards):
        totals = card['totals']
        growth = card['revenue_growth']
        with col:
            with st.container(border=True):
                through_month = card.get('through_month', 12)
                period = "" if through_month == 12 else f" · Jan a {MONTH_MAPPING[through_month]}"
                st.metric(
                    label=f"📅 {card['year']}{period}",
                    value=format_brl_compact(totals.revenue),
                    delta=format_growth(growth) if growth is not None else None,
                )
                st.caption(
                    f"{totals.qtd_sold} vendas · ticket {format_brl(totals.avg_ticket)}"
                    + ("" if growth is not None else " · —")
                )


# =============================================================================
# GOALS
# =============================================================================

def render_goal_progress(progress: Dict, goals: Dict[str, float]):
    """Three goal bars plus the daily numbers behind them."""
    period = progress.get('period')

    with st.container(border=True):
        st.markdown(f"**🎯 METAS** · {progress['achieved_label']}")
        for level in (1, 2, 3):
            key = f'meta{level}'
            value = progress[f'{key}_progress']
            st.progress(
                min(1.0, value / 100),
                text=f"Meta {level}: {format_percent(value)} de {format_brl(goals.get(key, 0))} "
                     f"(faltam {format_brl(progress[f'missing_{key}'])})"
            )

        col1, col2, col3, col4 = st.columns(4)
        with col1:
            st.metric("Média diária", format_brl(progress['daily_avg']))
        with col2:
            st.metric(
                "Necessário por dia útil",
                format_brl(progress['daily_needed']),
                help="Falta para a Meta 1 dividido pelos dias úteis restantes"
            )
        with col3:
            st.metric("Projeção do mês", format_brl(progress['projection']))
        with col4:
            remaining = period.business_days_remaining if period else 0
            st.metric("Dias úteis restantes", remaining)


def render_month_trend(trend: Optional[Dict]):
    """Month over month card. Needs at least two months of history."""
    if trend is None:
        st.caption("Histórico insuficiente para tendência.")
        return

    trend_text = {
        'accelerating': "📈 Acelerando",
        'decelerating': "📉 Desacelerando",
        'stable': "➡️ Estável",
    }[trend['trend']]
    best, worst = trend['best_month'], trend['worst_month']

    with st.container(border=True):
        st.markdown(f"**📆 TENDÊNCIA** · {trend_text}")
        col1, col2, col3 = st.columns(3)
        with col1:
            st.metric("vs mês anterior", format_brl(trend['current'].revenue),
                      delta=format_growth(trend['mom_growth']))
        with col2:
            st.metric("Média do período", format_brl(trend['average']),
                      delta=f"{format_growth(trend['vs_average'])} atual vs média", delta_color="off")
        with col3:
            st.metric("Melhor mês", f"{FULL_MONTH_NAMES[best.month]}/{best.year}",
                      delta=format_brl_compact(best.revenue), delta_color="off")
        st.caption(f"Mês mais fraco: {FULL_MONTH_NAMES[worst.month]}/{worst.year} "
                   f"({format_brl(worst.revenue)})")


def render_sold_vs_executed(result: Dict):
    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Vendido", format_brl(result['sold']))
    with col2:
        st.metric("Executado", format_brl(result['executed']))
    with col3:
        st.metric(
            "Taxa de execução",
            format_percent(result['execution_rate'], 1),
            delta=f"{format_brl(result['difference'])} a executar",
            delta_color="off",
            help="Executado / vendido no período. Vendas e execuções não são vinculadas por registro."
        )


def render_pace_badge(pace: Dict, goal_name: str = "Meta 1"):
    """Compact pace indicator: icon, label and difference vs expected."""
    text = (
        f"{pace['icon']} **{pace['label']}** · {format_pace_diff(pace['percent_diff'])} "
        f"vs esperado para {goal_name} ({format_brl(pace['expected'])})"
    )
    if pace['is_on_track']:
        st.success(text)
    else:
        st.warning(text)


# =============================================================================
# INSIGHTS
# =============================================================================

def render_insights(insights: Sequence[Insight]):
    st.subheader("💡 Insights")
    if not insights:
        st.caption("Nenhum destaque para o período.")
        return

    for insight in insights:
        renderer = INSIGHT_RENDERERS.get(insight.kind, st.info)
        renderer(f"{insight.icon} {insight.message}")


def render_seller_board(sellers: Sequence[SellerInsight], suggestions: Sequence[Dict]):
    """Per-seller status table followed by manager suggestions."""
    st.subheader("👥 Vendedoras")
    if not sellers:
        st.info("Nenhuma meta individual cadastrada para o mês")
        return

    df = pd.DataFrame([{
        'Vendedora': s.name,
        'Status': STATUS_BADGES.get(s.status, s.status),
        'Vendido': s.sold,
        'Meta 1': s.goal,
        '%': s.percent,
        'Falta': s.remaining,
        'Por dia': s.daily_needed,
        'Sugestão': s.suggestion,
    } for s in sellers])

    st.dataframe(
        df,
        hide_index=True,
        use_container_width=True,
        column_config={
            'Vendido': st.column_config.NumberColumn(format="R$ %.0f"),
            'Meta 1': st.column_config.NumberColumn(format="R$ %.0f"),
            '%': st.column_config.ProgressColumn(min_value=0, max_value=100, format="%d%%"),
            'Falta': st.column_config.NumberColumn(format="R$ %.0f"),
            'Por dia': st.column_config.NumberColumn(format="R$ %.0f"),
        }
    )

    for suggestion in suggestions:
        st.markdown(f"{suggestion['icon']} {suggestion['text']}")


# =============================================================================
# RANKINGS
# =============================================================================

def render_ranking_table(entries: Sequence[RankingEntry], label: str):
    if not entries:
        st.info("Sem dados para o ranking")
        return

    df = pd.DataFrame([
        {'#': i + 1, label: e.name, 'Qtd.': e.count, 'Valor': e.revenue}
        for i, e in enumerate(entries)
    ])
    st.dataframe(
        df,
        hide_index=True,
        use_container_width=True,
        column_config={'Valor': st.column_config.NumberColumn(format="R$ %.0f")}
    )


@st.fragment
def rankings_fragment(
    engine: MetricsEngine,
    year: int,
    month: Optional[int] = None,
    default_top_n: int = DEFAULT_TOP_N,
    fragment_key: str = "rankings"
):
    """Ranking section with its own dimension and size pickers."""
    col1, col2, col3 = st.columns([3, 2, 2])
    fields = [f for f in RANKING_FIELDS if f in RANKING_LABELS]
    with col1:
        field = st.selectbox(
            "Ranking por", options=fields, format_func=lambda f: RANKING_LABELS[f],
            key=f"{fragment_key}_field"
        )
    with col2:
        top_n = st.selectbox(
            "Top", options=ALLOWED_TOP_N,
            index=ALLOWED_TOP_N.index(default_top_n) if default_top_n in ALLOWED_TOP_N else 0,
            key=f"{fragment_key}_top_n"
        )
    with col3:
        sort_key = st.radio(
            "Ordenar por", options=['revenue', 'count'],
            format_func=lambda k: "Valor" if k == 'revenue' else "Quantidade",
            horizontal=True, key=f"{fragment_key}_sort"
        )

    executed = field == 'executor_name'
    entries = engine.ranking(field, year=year, month=month, n=top_n, executed=executed, sort_key=sort_key)

    chart_col, table_col = st.columns([3, 2])
    with chart_col:
        st.altair_chart(
            PerformanceCharts.build_ranking_chart(entries, title=f"Top {top_n} · {RANKING_LABELS[field]}"),
            use_container_width=True
        )
    with table_col:
        render_ranking_table(entries, RANKING_LABELS[field])


# =============================================================================
# YEAR OVER YEAR
# =============================================================================

@st.fragment
def yoy_comparison_fragment(
    engine: MetricsEngine,
    year: int,
    years_back: int,
    through_month: int,
    fragment_key: str = "yoy"
):
    """Monthly comparison with metric toggle, cumulative line and table."""
    metric = st.radio(
        "Métrica",
        options=['revenue', 'executed', 'qtd_sold'],
        format_func={'revenue': "Vendido", 'executed': "Executado", 'qtd_sold': "Quantidade"}.get,
        horizontal=True,
        key=f"{fragment_key}_metric"
    )

    rows, totals = engine.comparison(year, years_back=years_back, through_month=through_month)
    compare_year = year - years_back
    render_kpi_cards(totals, compare_label=f"vs {year - 1}")

    tab_bars, tab_cumulative, tab_table = st.tabs(["📊 Mensal", "📈 Acumulado", "📋 Tabela"])
    with tab_bars:
        st.altair_chart(
            PerformanceCharts.build_yoy_bar_chart(
                rows, metric, title=f"{compare_year}–{year} até {FULL_MONTH_NAMES[through_month]}"
            ),
            use_container_width=True
        )
    with tab_cumulative:
        st.altair_chart(PerformanceCharts.build_cumulative_chart(rows), use_container_width=True)
    with tab_table:
        if not rows:
            st.info("Sem dados no período")
            return
        table = pd.DataFrame([{
            'Mês': FULL_MONTH_NAMES[r.month],
            **{str(y): v for y, v in zip(r.years, r.revenue)},
            'Cresc. vendido': format_growth(r.revenue_growth),
            'Cresc. executado': format_growth(r.executed_growth),
            'Cresc. qtd.': format_growth(r.quantity_growth),
        } for r in rows])
        st.dataframe(table, hide_index=True, use_container_width=True)


# =============================================================================
# LEAGUE
# =============================================================================

def render_scoreboard(scores: Sequence[TeamScore]):
    """League table with podium medals."""
    if not scores:
        st.info("Nenhuma equipe cadastrada")
        return

    medals = {0: "🥇", 1: "🥈", 2: "🥉"}
    df = pd.DataFrame([{
        'Pos.': f"{medals.get(i, '')} {i + 1}".strip(),
        'Equipe': s.team_name,
        'Receita': s.revenue,
        'Pts. receita': s.revenue_points,
        'Pts. qualidade': s.quality_points,
        'Cartões': s.modifier_points,
        'Total': s.total_points,
    } for i, s in enumerate(scores)])

    st.dataframe(
        df,
        hide_index=True,
        use_container_width=True,
        column_config={
            'Receita': st.column_config.NumberColumn(format="R$ %.0f"),
            'Total': st.column_config.NumberColumn(format="%.0f"),
        }
    )


__all__ = [
    'render_kpi_cards',
    'render_year_cards',
    'render_goal_progress',
    'render_pace_badge',
    'render_month_trend',
    'render_sold_vs_executed',
    'render_insights',
    'render_seller_board',
    'render_ranking_table',
    'rankings_fragment',
    'yoy_comparison_fragment',
    'render_scoreboard',
]
