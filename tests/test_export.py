"""Tests for the Excel report."""

from __future__ import annotations

from datetime import date

import pandas as pd
import pytest
from openpyxl import load_workbook

from copa_unique.performance.engine import MetricsEngine
from copa_unique.performance.export import PerformanceExport

FILTERS = {'year': 2025, 'month': 3, 'years_back': 1}


@pytest.fixture()
def engine(revenue_df: pd.DataFrame, executed_df: pd.DataFrame, aliases: dict) -> MetricsEngine:
    return MetricsEngine(revenue_df, executed_df, aliases=aliases)


class TestCreateReport:
    def test_minimal_report(self, engine: MetricsEngine) -> None:
        rows, totals = engine.comparison(2025, through_month=3)
        wb = load_workbook(PerformanceExport().create_report(rows, totals, filters=FILTERS))
        assert wb.sheetnames == ["Resumo", "Comparativo Mensal"]

        summary = wb["Resumo"]
        assert summary["B3"].value == "Março 2025"
        assert summary["A9"].value == "Vendido"
        assert summary["B9"].value == 5000.0
        assert summary["C9"].value == 2000.0

    def test_monthly_sheet(self, engine: MetricsEngine) -> None:
        rows, totals = engine.comparison(2025, through_month=3)
        wb = load_workbook(PerformanceExport().create_report(rows, totals, filters=FILTERS))
        ws = wb["Comparativo Mensal"]
        assert [c.value for c in ws[1]][:3] == ["Mês", "Vendido 2025", "Vendido 2024"]
        assert ws["A4"].value == "Março"
        assert ws["B4"].value == 3000.0
        assert ws["F4"].value == pytest.approx(50.0)

    def test_full_report(self, engine: MetricsEngine) -> None:
        rows, totals = engine.comparison(2025, through_month=3)
        goals = {'meta1': 6000.0, 'meta2': 7000.0, 'meta3': 8000.0}
        report = PerformanceExport().create_report(
            rows,
            totals,
            filters=FILTERS,
            departments=engine.department_breakdown(2025),
            rankings={"Procedimentos": engine.ranking('procedure_name', year=2025, n=3)},
            insights=engine.insights(2025, 3, goals, date(2025, 3, 10)),
            goal_progress=engine.goal_progress(2025, 3, goals, date(2025, 3, 10)),
        )
        wb = load_workbook(report)
        assert wb.sheetnames == ["Resumo", "Comparativo Mensal", "Departamentos", "Rankings", "Insights"]
        assert wb["Departamentos"]["A2"].value == "01 - CIRURGIA PLÁSTICA"
        assert wb["Rankings"]["A1"].value == "Procedimentos"
        assert wb["Rankings"]["B3"].value == "Rinoplastia"
        assert wb["Insights"].max_row > 1

    def test_empty_period(self) -> None:
        wb = load_workbook(PerformanceExport().create_report([], {}, filters={'year': 2025}))
        assert wb["Comparativo Mensal"]["A1"].value == "Sem dados no período"
        assert wb["Resumo"]["B3"].value == "2025"
