"""Tests for top-N rankings and department share."""

from __future__ import annotations

import pandas as pd
import pytest

from copa_unique.performance.models import DepartmentBucket, RankingEntry
from copa_unique.performance.normalization import normalize_records
from copa_unique.performance.ranking import department_share, rank_by, rank_sellers, top_n


class TestTopN:
    def test_ties_keep_input_order(self) -> None:
        entries = [
            {'name': 'a', 'revenue': 5},
            {'name': 'b', 'revenue': 5},
            {'name': 'c', 'revenue': 10},
        ]
        assert [e['name'] for e in top_n(entries, 3)] == ['c', 'a', 'b']

    def test_idempotent(self) -> None:
        entries = [RankingEntry(name=str(i), revenue=float(i % 4)) for i in range(12)]
        once = top_n(entries, 5)
        assert top_n(once, 5) == once

    def test_length_is_min_of_n_and_input(self) -> None:
        entries = [RankingEntry(name='x', revenue=1.0), RankingEntry(name='y', revenue=2.0)]
        assert len(top_n(entries, 10)) == 2
        assert top_n(entries, 0) == []

    def test_negative_n(self) -> None:
        with pytest.raises(ValueError):
            top_n([], -1)

    def test_sort_by_count(self) -> None:
        entries = [RankingEntry(name='x', count=1, revenue=100.0), RankingEntry(name='y', count=3, revenue=10.0)]
        assert top_n(entries, 1, sort_key='count')[0].name == 'y'


class TestRankBy:
    def test_procedures_by_revenue(self, revenue_df: pd.DataFrame, aliases: dict) -> None:
        ranked = rank_by(normalize_records(revenue_df, 'revenue', aliases), 'procedure_name', n=2)
        assert [(e.name, e.count, e.revenue) for e in ranked] == [
            ('Rinoplastia', 2, 3000.0),
            ('Drenagem', 2, 2000.0),
        ]

    def test_missing_values_use_sentinel(self) -> None:
        records = [{'origin': None, 'amount': 10}, {'origin': '', 'amount': 5}, {'origin': 'Google', 'amount': 1}]
        ranked = rank_by(records, 'origin')
        assert ranked[0].name == "Não informado"
        assert ranked[0].count == 2

    def test_executor_sentinel(self) -> None:
        ranked = rank_by([{'amount': 10}], 'executor_name')
        assert ranked[0].name == "Não identificado"

    def test_absent_country_column(self) -> None:
        ranked = rank_by([{'amount': 10}, {'amount': 20}], 'country')
        assert [(e.name, e.revenue) for e in ranked] == [("Não informado", 30.0)]

    def test_empty(self) -> None:
        assert rank_by([], 'origin') == []


class TestRankSellers:
    def test_names_resolved(self, revenue_df: pd.DataFrame, aliases: dict) -> None:
        records = normalize_records(revenue_df, 'revenue', aliases)
        ranked = rank_sellers(records, {'u1': 'Ana', 'u2': 'Bia'})
        assert [(e.name, e.revenue) for e in ranked] == [('Ana', 3500.0), ('Bia', 3500.0)]

    def test_unknown_seller(self) -> None:
        ranked = rank_sellers([{'user_id': 'u7', 'amount': 10}], {'u1': 'Ana'})
        assert ranked[0].name == "Desconhecido"

    def test_attribution_without_seller_column(self) -> None:
        records = [
            {'attributed_to_user_id': 'u1', 'user_id': 'u2', 'amount': 100},
            {'attributed_to_user_id': None, 'user_id': 'u2', 'amount': 40},
        ]
        ranked = rank_sellers(records, {'u1': 'Ana', 'u2': 'Bia'})
        assert [(e.name, e.revenue) for e in ranked] == [('Ana', 100.0), ('Bia', 40.0)]


class TestDepartmentShare:
    def test_single_department_is_100(self) -> None:
        buckets = {'Luxskin': DepartmentBucket(year=2025, department='Luxskin', revenue=700.0)}
        assert department_share(buckets) == {'Luxskin': 100.0}

    def test_largest_first(self) -> None:
        buckets = {
            'A': DepartmentBucket(year=2025, department='A', revenue=250.0),
            'B': DepartmentBucket(year=2025, department='B', revenue=750.0),
        }
        assert list(department_share(buckets).items()) == [('B', 75.0), ('A', 25.0)]

    def test_no_revenue(self) -> None:
        buckets = {'A': DepartmentBucket(year=2025, department='A')}
        assert department_share(buckets) == {'A': 0.0}
