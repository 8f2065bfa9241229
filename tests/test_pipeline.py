"""Tests for lead, cancellation and RFV metrics."""

from __future__ import annotations

from datetime import date, datetime

import pandas as pd
import pytest

from copa_unique.performance.pipeline import (
    active_campaigns,
    cancellation_metrics,
    lead_metrics,
    rfv_metrics,
)


class TestLeadMetrics:
    def test_conversion_and_hot_leads(self) -> None:
        leads = [
            {'created_at': '2025-03-01', 'status': 'Ganho', 'temperature': 'hot'},
            {'created_at': '2025-03-02', 'status': 'operou', 'temperature': 'HOT '},
            {'created_at': '2025-03-03', 'status': 'perdido', 'temperature': 'cold'},
            {'created_at': '2025-03-04', 'status': None, 'temperature': None},
        ]
        result = lead_metrics(leads)
        assert result['total'] == 4
        assert result['converted'] == 2
        assert result['conversion_rate'] == pytest.approx(50.0)
        assert result['hot_leads'] == 2

    def test_empty(self) -> None:
        assert lead_metrics(None) == {'total': 0, 'converted': 0, 'conversion_rate': 0.0, 'hot_leads': 0}


class TestCancellationMetrics:
    def test_retention_and_lost_value(self) -> None:
        rows = pd.DataFrame([
            {'request_date': '2025-03-01', 'status': 'retained', 'contract_value': 3000},
            {'request_date': '2025-03-02', 'status': 'cancelled_with_fine', 'contract_value': 1000},
            {'request_date': '2025-03-03', 'status': 'cancelled_no_fine', 'contract_value': 500},
            {'request_date': '2025-03-04', 'status': 'pending', 'contract_value': 800},
        ])
        result = cancellation_metrics(rows)
        assert result['total'] == 4
        assert result['retained'] == 1
        assert result['cancelled'] == 2
        assert result['cancelled_value'] == 1500.0
        assert result['retention_rate'] == pytest.approx(25.0)

    def test_empty(self) -> None:
        result = cancellation_metrics([])
        assert result['total'] == 0
        assert result['retention_rate'] == 0.0


class TestRfvMetrics:
    def test_segments(self) -> None:
        rows = [
            {'segment': 'Em Risco', 'total_value': 100},
            {'segment': 'Em Risco', 'total_value': 50},
            {'segment': 'Não Podem Perder', 'total_value': 900},
            {'segment': 'Campeões', 'total_value': 5000},
            {'segment': None, 'total_value': 10},
        ]
        result = rfv_metrics(rows)
        assert result['total'] == 5
        assert result['at_risk'] == 3
        assert result['champions'] == 1
        assert result['segments']['Não informado'] == 1
        assert result['segment_values']['Em Risco'] == 150.0

    def test_empty(self) -> None:
        result = rfv_metrics(None)
        assert result['segments'] == {}
        assert result['at_risk'] == 0


class TestActiveCampaigns:
    def test_counts_flagged_rows(self) -> None:
        campaigns = pd.DataFrame({'name': ['a', 'b', 'c'], 'is_active': [True, False, True]})
        assert active_campaigns(campaigns) == 2

    def test_without_flag_column(self) -> None:
        assert active_campaigns(pd.DataFrame({'name': ['a', 'b']})) == 2

    def test_empty(self) -> None:
        assert active_campaigns(None) == 0
        assert active_campaigns(pd.DataFrame()) == 0

    def test_ended_campaigns_are_excluded(self) -> None:
        campaigns = pd.DataFrame({
            'name': ['past', 'today', 'future', 'inactive'],
            'is_active': [True, True, True, False],
            'end_date': ['2025-03-09', '2025-03-10', '2025-04-30', '2025-04-30'],
        })
        assert active_campaigns(campaigns, date(2025, 3, 10)) == 2
        assert active_campaigns(campaigns, datetime(2025, 3, 10, 18, 30)) == 2
        assert active_campaigns(campaigns) == 3
