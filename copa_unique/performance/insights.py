# copa_unique/performance/insights.py
"""
Rule-Based Insights Generator

Evaluates a fixed, ordered set of rules over pre-computed metrics. Each rule
appends zero or one Insight and never stops the others from running, so the
output is deterministic for a given input.

Thresholds are tunable in constants.py:
    DAILY_NEEDED_DANGER_RATIO, YOY_SUCCESS_THRESHOLD, AT_RISK_CUSTOMERS_THRESHOLD,
    MOM_THRESHOLD, AVG_TICKET_GROWTH_THRESHOLD, QUANTITY_GROWTH_THRESHOLD

Also covers the per-seller status board and manager suggestions.

Usage:
    metrics = InsightMetrics(meta1_progress=84.0, daily_needed=52000, daily_avg=30000)
    for insight in generate_insights(metrics):
        st.markdown(f"{insight.icon} {insight.message}")
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import pandas as pd

from .constants import (
    DAILY_NEEDED_DANGER_RATIO,
    YOY_SUCCESS_THRESHOLD,
    AT_RISK_CUSTOMERS_THRESHOLD,
    MOM_THRESHOLD,
    AVG_TICKET_GROWTH_THRESHOLD,
    QUANTITY_GROWTH_THRESHOLD,
    FULL_MONTH_NAMES,
    SELLER_SENTINEL,
)
from .formatting import format_brl
from .models import Insight, SellerInsight
from .normalization import to_frame, text_or_default

logger = logging.getLogger(__name__)


@dataclass
class InsightMetrics:
    """Inputs for generate_insights. Unknown values stay at their neutral default."""
    meta1_progress: float = 0.0
    daily_needed: float = 0.0
    daily_avg: float = 0.0
    yoy_growth: Optional[float] = None
    compare_year: Optional[int] = None
    hot_leads: int = 0
    at_risk_customers: int = 0
    active_campaigns: int = 0
    mom_growth: Optional[float] = None
    avg_ticket_growth: float = 0.0
    quantity_growth: float = 0.0
    comparison_months: int = 0
    best_month: Optional[int] = None
    best_month_revenue: float = 0.0


# =====================================================================
# RULES
# =====================================================================

def _rule_goal(m: InsightMetrics) -> Optional[Insight]:
    if m.meta1_progress >= 100:
        return Insight('success', "Meta 1 batida! Continue para Meta 2.", "🏆", 'goal')

    if m.daily_needed > m.daily_avg * DAILY_NEEDED_DANGER_RATIO:
        if m.daily_avg > 0:
            extra = round((m.daily_needed / m.daily_avg - 1) * 100)
            message = f"Ritmo atual insuficiente. Precisa +{extra}% por dia."
        else:
            message = f"Nenhuma venda no período. Precisa {format_brl(m.daily_needed)} por dia."
        return Insight('danger', message, "⚠️", 'goal')
    return None


def _rule_year_over_year(m: InsightMetrics) -> Optional[Insight]:
    if m.yoy_growth is None:
        return None
    period = f" comparado ao mesmo período de {m.compare_year}" if m.compare_year else ""
    if m.yoy_growth > YOY_SUCCESS_THRESHOLD:
        return Insight('success', f"Crescimento! A receita cresceu {m.yoy_growth:.1f}%{period}.",
                       "📈", 'year_over_year')
    if m.yoy_growth < 0:
        return Insight('danger', f"Atenção! A receita caiu {abs(m.yoy_growth):.1f}%{period}.",
                       "📉", 'year_over_year')
    return None


def _rule_hot_leads(m: InsightMetrics) -> Optional[Insight]:
    if m.hot_leads > 0:
        return Insight('warning', f"{m.hot_leads} leads quentes aguardando ação!", "🔥", 'hot_leads')
    return None


def _rule_at_risk(m: InsightMetrics) -> Optional[Insight]:
    if m.at_risk_customers > AT_RISK_CUSTOMERS_THRESHOLD:
        return Insight('warning',
                       f"{m.at_risk_customers} clientes em risco de perda. Ativar reativação!",
                       "👥", 'at_risk')
    return None


def _rule_campaigns(m: InsightMetrics) -> Optional[Insight]:
    if m.active_campaigns > 0:
        return Insight('info', f"{m.active_campaigns} campanha(s) ativa(s) no momento.", "⚡", 'campaigns')
    return None


def _rule_month_over_month(m: InsightMetrics) -> Optional[Insight]:
    if m.mom_growth is None:
        return None
    if m.mom_growth > MOM_THRESHOLD:
        return Insight('success', f"+{m.mom_growth:.0f}% vs mês anterior. Excelente!", "📈", 'month_over_month')
    if m.mom_growth < -MOM_THRESHOLD:
        return Insight('danger', f"{m.mom_growth:.0f}% vs mês anterior. Atenção!", "📉", 'month_over_month')
    return None


def _rule_avg_ticket(m: InsightMetrics) -> Optional[Insight]:
    if m.avg_ticket_growth > AVG_TICKET_GROWTH_THRESHOLD:
        return Insight('info', f"Ticket Médio Subiu! Aumento de {m.avg_ticket_growth:.1f}% no valor por venda.",
                       "💎", 'avg_ticket')
    return None


def _rule_quantity(m: InsightMetrics) -> Optional[Insight]:
    if m.quantity_growth > QUANTITY_GROWTH_THRESHOLD:
        return Insight('info', f"Mais Vendas! Volume de vendas cresceu {m.quantity_growth:.1f}%.",
                       "🛒", 'quantity')
    return None


def _rule_best_month(m: InsightMetrics) -> Optional[Insight]:
    if m.comparison_months >= 2 and m.best_month:
        name = FULL_MONTH_NAMES.get(m.best_month, str(m.best_month))
        return Insight('info', f"Melhor mês: {name} com {format_brl(m.best_month_revenue)} em vendas.",
                       "⭐", 'best_month')
    return None


INSIGHT_RULES = [
    _rule_goal,
    _rule_year_over_year,
    _rule_hot_leads,
    _rule_at_risk,
    _rule_campaigns,
    _rule_month_over_month,
    _rule_avg_ticket,
    _rule_quantity,
    _rule_best_month,
]


def generate_insights(metrics: InsightMetrics) -> List[Insight]:
    """Evaluate every rule in order and collect the insights that fire."""
    insights = []
    for rule in INSIGHT_RULES:
        insight = rule(metrics)
        if insight is not None:
            insights.append(insight)

    logger.debug(f"Generated {len(insights)} insight(s)")
    return insights


# =====================================================================
# SELLER STATUS BOARD
# =====================================================================

def classify_seller(sold: float, goal: float, days_remaining: int) -> Dict:
    """
    Status and suggestion for one seller against Meta 1.

    Returns:
        Dict with status, suggestion, percent, remaining, daily_needed
    """
    remaining = max(0.0, goal - sold)
    percent = round(sold / goal * 100) if goal > 0 else 0
    daily_needed = remaining / days_remaining if days_remaining > 0 else remaining

    if percent >= 100:
        status, suggestion = 'achieved', "Meta batida! Foque na Meta 2."
    elif percent < 50 and days_remaining < 15:
        status = 'danger'
        suggestion = f"Urgente: Precisa {format_brl(daily_needed)}/dia. Ação imediata necessária!"
    elif percent < 70 and days_remaining < 10:
        status = 'warning'
        suggestion = f"Atenção: Acelerar vendas. Meta diária: {format_brl(daily_needed)}."
    elif percent >= 80:
        status, suggestion = 'on-track', f"Bom ritmo! Falta {format_brl(remaining)}."
    else:
        status, suggestion = 'on-track', f"Meta diária: {format_brl(daily_needed)}."

    return {
        'status': status,
        'suggestion': suggestion,
        'percent': percent,
        'remaining': remaining,
        'daily_needed': daily_needed,
    }


def build_seller_insights(
    profiles,
    goals: Dict[str, float],
    revenue,
    days_remaining: int
) -> List[SellerInsight]:
    """
    Status board for every seller with a positive Meta 1 goal, weakest first.

    Args:
        profiles: Records with user_id and full_name
        goals: user_id -> Meta 1 value
        revenue: Revenue records (seller_id or user_id attribution)
        days_remaining: Calendar days left in the month
    """
    profiles_df = to_frame(profiles)
    revenue_df = to_frame(revenue)

    if not revenue_df.empty:
        id_col = 'seller_id' if 'seller_id' in revenue_df.columns else 'user_id'
        amounts = pd.to_numeric(revenue_df['amount'], errors='coerce').fillna(0)
        sold_by_user = amounts.groupby(revenue_df[id_col].astype(str)).sum().to_dict()
    else:
        sold_by_user = {}

    goal_lookup = {str(k): float(v) for k, v in (goals or {}).items()}

    results = []
    for _, profile in profiles_df.iterrows():
        user_id = str(profile.get('user_id'))
        goal = goal_lookup.get(user_id)
        if goal is None or goal <= 0:
            continue

        sold = float(sold_by_user.get(user_id, 0.0))
        status = classify_seller(sold, goal, days_remaining)
        results.append(SellerInsight(
            user_id=user_id,
            name=text_or_default(profile.get('full_name'), SELLER_SENTINEL),
            status=status['status'],
            sold=sold,
            goal=goal,
            percent=status['percent'],
            remaining=status['remaining'],
            daily_needed=status['daily_needed'],
            suggestion=status['suggestion'],
        ))

    return sorted(results, key=lambda s: s.percent)


def team_suggestions(seller_insights: Sequence[SellerInsight], days_remaining: int) -> List[Dict]:
    """Manager-facing suggestions derived from the seller board."""
    danger = sum(1 for s in seller_insights if s.status == 'danger')
    warning = sum(1 for s in seller_insights if s.status == 'warning')
    achieved = sum(1 for s in seller_insights if s.status == 'achieved')

    suggestions = []
    if danger > 0:
        plural = "s" if danger > 1 else ""
        suggestions.append({
            'icon': "⚠️",
            'priority': 'high',
            'text': f"{danger} vendedora{plural} em situação crítica! "
                    f"Considere campanha relâmpago ou ação de recuperação.",
        })
    if days_remaining <= 5:
        suggestions.append({
            'icon': "⏰",
            'priority': 'high',
            'text': "Últimos dias do mês! Foque em fechamentos pendentes e follow-up de propostas.",
        })
    if 5 < days_remaining <= 10:
        suggestions.append({
            'icon': "⚡",
            'priority': 'medium',
            'text': "Semana final! Hora de intensificar contatos e ofertas especiais.",
        })
    if achieved > 0:
        suggestions.append({
            'icon': "🏆",
            'priority': 'low',
            'text': f"{achieved} já bateram Meta 1! Incentive a busca pela Meta 2 com bonificações.",
        })
    if warning > 2:
        suggestions.append({
            'icon': "👥",
            'priority': 'medium',
            'text': "Múltiplas vendedoras precisando de suporte. Considere reunião de alinhamento.",
        })

    return suggestions


__all__ = [
    'InsightMetrics',
    'INSIGHT_RULES',
    'generate_insights',
    'classify_seller',
    'build_seller_insights',
    'team_suggestions',
]
