"""Tests for the rule-based insights and the seller status board."""

from __future__ import annotations

import pandas as pd
import pytest

from copa_unique.performance.constants import SELLER_SENTINEL
from copa_unique.performance.insights import (
    INSIGHT_RULES,
    InsightMetrics,
    build_seller_insights,
    classify_seller,
    generate_insights,
    team_suggestions,
)
from copa_unique.performance.models import SellerInsight


def _rules(insights: list) -> list:
    return [i.rule for i in insights]


# ===================================================================
# Individual rules
# ===================================================================


class TestGoalRule:
    def test_meta1_reached(self) -> None:
        insights = generate_insights(InsightMetrics(meta1_progress=100))
        assert insights[0].kind == 'success'
        assert insights[0].rule == 'goal'

    def test_pace_insufficient(self) -> None:
        insights = generate_insights(InsightMetrics(meta1_progress=40, daily_needed=3000, daily_avg=1000))
        assert insights[0].kind == 'danger'
        assert "+200%" in insights[0].message

    def test_no_sales_yet(self) -> None:
        insights = generate_insights(InsightMetrics(daily_needed=5000, daily_avg=0))
        assert insights[0].message == "Nenhuma venda no período. Precisa R$ 5.000 por dia."

    def test_on_pace_is_silent(self) -> None:
        assert generate_insights(InsightMetrics(meta1_progress=50, daily_needed=1400, daily_avg=1000)) == []


class TestYearOverYearRule:
    def test_strong_growth(self) -> None:
        insights = generate_insights(InsightMetrics(yoy_growth=25.0, compare_year=2024))
        assert insights[0].kind == 'success'
        assert "25.0%" in insights[0].message
        assert "2024" in insights[0].message

    def test_decline(self) -> None:
        insights = generate_insights(InsightMetrics(yoy_growth=-5.0))
        assert insights[0].kind == 'danger'
        assert "caiu 5.0%" in insights[0].message

    @pytest.mark.parametrize("growth", [None, 0.0, 20.0])
    def test_quiet_band(self, growth) -> None:
        assert generate_insights(InsightMetrics(yoy_growth=growth)) == []


class TestPipelineRules:
    def test_hot_leads(self) -> None:
        insights = generate_insights(InsightMetrics(hot_leads=3))
        assert insights[0].message == "3 leads quentes aguardando ação!"

    def test_at_risk_threshold_is_exclusive(self) -> None:
        assert generate_insights(InsightMetrics(at_risk_customers=20)) == []
        assert _rules(generate_insights(InsightMetrics(at_risk_customers=21))) == ['at_risk']

    def test_campaigns(self) -> None:
        insights = generate_insights(InsightMetrics(active_campaigns=2))
        assert insights[0].kind == 'info'


class TestTrendRules:
    def test_month_over_month(self) -> None:
        assert generate_insights(InsightMetrics(mom_growth=15))[0].kind == 'success'
        assert generate_insights(InsightMetrics(mom_growth=-15))[0].kind == 'danger'
        assert generate_insights(InsightMetrics(mom_growth=5)) == []

    def test_ticket_and_quantity(self) -> None:
        insights = generate_insights(InsightMetrics(avg_ticket_growth=6, quantity_growth=11))
        assert _rules(insights) == ['avg_ticket', 'quantity']

    def test_best_month_needs_two_months(self) -> None:
        metrics = InsightMetrics(comparison_months=2, best_month=3, best_month_revenue=3000)
        assert generate_insights(metrics)[0].message == "Melhor mês: Março com R$ 3.000 em vendas."
        metrics.comparison_months = 1
        assert generate_insights(metrics) == []


class TestRuleOrder:
    def test_every_rule_fires_in_order(self) -> None:
        metrics = InsightMetrics(
            meta1_progress=100,
            yoy_growth=30,
            compare_year=2024,
            hot_leads=1,
            at_risk_customers=50,
            active_campaigns=1,
            mom_growth=20,
            avg_ticket_growth=10,
            quantity_growth=20,
            comparison_months=3,
            best_month=2,
            best_month_revenue=100,
        )
        assert _rules(generate_insights(metrics)) == [
            'goal', 'year_over_year', 'hot_leads', 'at_risk', 'campaigns',
            'month_over_month', 'avg_ticket', 'quantity', 'best_month',
        ]
        assert len(INSIGHT_RULES) == 9

    def test_deterministic(self) -> None:
        metrics = InsightMetrics(hot_leads=2, mom_growth=-40)
        assert generate_insights(metrics) == generate_insights(metrics)

    def test_defaults_are_silent(self) -> None:
        assert generate_insights(InsightMetrics()) == []


# ===================================================================
# Seller board
# ===================================================================


class TestClassifySeller:
    def test_achieved(self) -> None:
        assert classify_seller(1000, 1000, 10)['status'] == 'achieved'

    def test_danger(self) -> None:
        result = classify_seller(400, 1000, 10)
        assert result['status'] == 'danger'
        assert result['daily_needed'] == pytest.approx(60.0)
        assert "R$ 60/dia" in result['suggestion']

    def test_warning(self) -> None:
        assert classify_seller(600, 1000, 5)['status'] == 'warning'

    def test_on_track_close_to_goal(self) -> None:
        result = classify_seller(850, 1000, 20)
        assert result['status'] == 'on-track'
        assert result['suggestion'] == "Bom ritmo! Falta R$ 150."

    def test_on_track_early_in_month(self) -> None:
        result = classify_seller(500, 1000, 20)
        assert result['status'] == 'on-track'
        assert result['suggestion'] == "Meta diária: R$ 25."

    def test_last_day(self) -> None:
        assert classify_seller(300, 1000, 0)['daily_needed'] == 700.0


class TestBuildSellerInsights:
    def test_weakest_first_and_only_sellers_with_goals(self) -> None:
        profiles = pd.DataFrame([
            {'user_id': 'u1', 'full_name': 'Ana'},
            {'user_id': 'u2', 'full_name': 'Bia'},
            {'user_id': 'u3', 'full_name': 'Carla'},
        ])
        revenue = pd.DataFrame([
            {'seller_id': 'u1', 'amount': 1000},
            {'seller_id': 'u2', 'amount': 300},
            {'seller_id': 'u2', 'amount': 200},
        ])
        board = build_seller_insights(profiles, {'u1': 1000, 'u2': 2000}, revenue, days_remaining=20)
        assert [(s.name, s.status, s.percent) for s in board] == [
            ('Bia', 'on-track', 25),
            ('Ana', 'achieved', 100),
        ]

    def test_seller_without_sales(self) -> None:
        profiles = [{'user_id': 'u1', 'full_name': 'Ana'}]
        board = build_seller_insights(profiles, {'u1': 1000}, [], days_remaining=3)
        assert board[0].sold == 0.0
        assert board[0].status == 'danger'

    def test_zero_goal_is_skipped(self) -> None:
        profiles = [{'user_id': 'u1', 'full_name': 'Ana'}, {'user_id': 'u2', 'full_name': 'Bia'}]
        board = build_seller_insights(profiles, {'u1': 0.0, 'u2': 1000}, [], days_remaining=5)
        assert [s.user_id for s in board] == ['u2']

    def test_missing_name_uses_placeholder(self) -> None:
        profiles = pd.DataFrame({'user_id': ['u1'], 'full_name': [float("nan")]})
        board = build_seller_insights(profiles, {'u1': 1000}, [], days_remaining=20)
        assert board[0].name == SELLER_SENTINEL


class TestTeamSuggestions:
    @staticmethod
    def _seller(status: str) -> SellerInsight:
        return SellerInsight(
            user_id='x', name='X', status=status, sold=0, goal=1, percent=0,
            remaining=0, daily_needed=0, suggestion='',
        )

    def test_last_days_and_critical(self) -> None:
        board = [self._seller('danger'), self._seller('danger'), self._seller('achieved')]
        suggestions = team_suggestions(board, days_remaining=3)
        assert [s['icon'] for s in suggestions] == ["⚠️", "⏰", "🏆"]
        assert suggestions[0]['text'].startswith("2 vendedoras")

    def test_final_week(self) -> None:
        suggestions = team_suggestions([], days_remaining=7)
        assert [s['priority'] for s in suggestions] == ['medium']

    def test_many_warnings(self) -> None:
        board = [self._seller('warning') for _ in range(3)]
        suggestions = team_suggestions(board, days_remaining=20)
        assert [s['icon'] for s in suggestions] == ["👥"]

    def test_nothing_to_suggest(self) -> None:
        assert team_suggestions([self._seller('on-track')], days_remaining=20) == []
