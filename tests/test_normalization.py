"""Tests for department aliasing and record normalization."""

from __future__ import annotations

import json
from datetime import date

import pandas as pd
import pytest

from copa_unique.performance.models import RevenueRecord
from copa_unique.performance.normalization import (
    load_department_aliases,
    normalize_department,
    normalize_records,
    to_frame,
)


# ===================================================================
# normalize_department
# ===================================================================


class TestNormalizeDepartment:
    def test_blank_values_become_outros(self, aliases: dict) -> None:
        assert normalize_department(None, aliases) == "Outros"
        assert normalize_department("", aliases) == "Outros"
        assert normalize_department("   ", aliases) == "Outros"
        assert normalize_department(float("nan"), aliases) == "Outros"

    def test_alias_lookup_is_trimmed_and_case_insensitive(self, aliases: dict) -> None:
        assert normalize_department("cirurgia_plastica", aliases) == "01 - CIRURGIA PLÁSTICA"
        assert normalize_department("  Cirurgia Plástica ", aliases) == "01 - CIRURGIA PLÁSTICA"
        assert normalize_department("LUXSKIN", aliases) == "Luxskin"

    def test_canonical_name_passes_unchanged(self, aliases: dict) -> None:
        assert normalize_department("07 - ALREADY CODED", aliases) == "07 - ALREADY CODED"

    def test_unknown_value_passes_verbatim(self, aliases: dict) -> None:
        assert normalize_department("Odontologia", aliases) == "Odontologia"

    def test_bundled_table_covers_known_departments(self) -> None:
        bundled = load_department_aliases()
        assert normalize_department("harmonizacao_facial_corporal", bundled) == (
            "08 - HARMONIZAÇÃO FACIAL E CORPORAL"
        )
        assert normalize_department("unique_travel", bundled) == "25 - UNIQUE TRAVEL EXPERIENCE"


class TestLoadDepartmentAliases:
    def test_keys_are_lowercased(self, tmp_path) -> None:
        path = tmp_path / "aliases.json"
        path.write_text(json.dumps({" Spa ": "09 - SPA E ESTÉTICA"}), encoding="utf-8")
        assert load_department_aliases(str(path)) == {"spa": "09 - SPA E ESTÉTICA"}

    def test_rejects_non_object(self, tmp_path) -> None:
        path = tmp_path / "aliases.json"
        path.write_text(json.dumps(["a", "b"]), encoding="utf-8")
        with pytest.raises(ValueError, match="JSON object"):
            load_department_aliases(str(path))


# ===================================================================
# normalize_records
# ===================================================================


class TestNormalizeRecords:
    def test_invalid_dates_are_dropped(self, aliases: dict) -> None:
        records = [
            {'date': '2025-03-01', 'amount': 100},
            {'date': 'not a date', 'amount': 200},
            {'date': None, 'amount': 300},
        ]
        df = normalize_records(records, 'revenue', aliases)
        assert len(df) == 1
        assert df['amount'].tolist() == [100.0]

    def test_invalid_amount_becomes_zero(self, aliases: dict) -> None:
        df = normalize_records([{'date': '2025-03-01', 'amount': 'abc'}], 'revenue', aliases)
        assert df['amount'].tolist() == [0.0]

    def test_sentinels_fill_missing_text(self, aliases: dict) -> None:
        df = normalize_records([{'date': '2025-03-01', 'amount': 1, 'origin': '  '}], 'revenue', aliases)
        row = df.iloc[0]
        assert row['department'] == "Outros"
        assert row['origin'] == "Não informado"
        assert row['procedure_name'] == "Não informado"
        assert row['country'] == "Não informado"

    def test_executor_sentinel(self, aliases: dict) -> None:
        df = normalize_records([{'date': '2025-03-01', 'amount': 1}], 'executed', aliases)
        assert df.iloc[0]['executor_name'] == "Não identificado"

    def test_seller_prefers_attribution(self, revenue_df: pd.DataFrame, aliases: dict) -> None:
        df = normalize_records(revenue_df, 'revenue', aliases)
        assert df.loc[0, 'seller_id'] == 'u1'
        assert df.loc[1, 'seller_id'] == 'u2'

    def test_accepts_dataclasses(self, aliases: dict) -> None:
        records = [RevenueRecord(date=date(2025, 3, 1), amount=250.0, department="spa_estetica")]
        df = normalize_records(records, 'revenue', aliases)
        assert df.iloc[0]['department'] == "09 - SPA E ESTÉTICA"

    def test_input_frame_is_not_mutated(self, revenue_df: pd.DataFrame, aliases: dict) -> None:
        before = revenue_df.copy()
        normalize_records(revenue_df, 'revenue', aliases)
        pd.testing.assert_frame_equal(revenue_df, before)

    def test_empty_input_has_every_column(self) -> None:
        df = normalize_records(None, 'lead')
        assert df.empty
        assert {'created_at', 'status', 'temperature'} <= set(df.columns)

    def test_unknown_kind(self) -> None:
        with pytest.raises(ValueError, match="Unknown record kind"):
            normalize_records([], 'invoice')

    def test_to_frame_rejects_other_types(self) -> None:
        with pytest.raises(TypeError):
            to_frame([1, 2, 3])
