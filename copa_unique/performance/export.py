# copa_unique/performance/export.py
"""
Formatted Excel Export for Performance Views

Creates Excel reports with:
- Summary sheet with period totals and goal progress
- Monthly comparison across years
- Department breakdown
- Rankings (one block per dimension)
- Insights

Uses openpyxl for formatting capabilities.
"""

import logging
from datetime import datetime
from io import BytesIO
from typing import Dict, List, Optional, Sequence

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, Border, Side, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.formatting.rule import ColorScaleRule

from .constants import EXCEL_STYLES, FULL_MONTH_NAMES
from .models import ComparisonRow, DepartmentBucket, Insight, RankingEntry

logger = logging.getLogger(__name__)

SHEET_SUMMARY = "Resumo"
SHEET_MONTHLY = "Comparativo Mensal"
SHEET_DEPARTMENTS = "Departamentos"
SHEET_RANKINGS = "Rankings"
SHEET_INSIGHTS = "Insights"


class PerformanceExport:
    """
    Excel report generator.

    Usage:
        exporter = PerformanceExport()
        excel_bytes = exporter.create_report(rows, totals, filters=filters)

        st.download_button(
            label="Baixar relatório",
            data=excel_bytes,
            file_name="copa_unique.xlsx",
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )
    """

    def __init__(self):
        self.wb = None
        self._init_styles()

    def _init_styles(self):
        """Initialize reusable styles."""
        self.header_fill = PatternFill(
            start_color=EXCEL_STYLES['header_fill_color'],
            end_color=EXCEL_STYLES['header_fill_color'],
            fill_type='solid'
        )
        self.header_font = Font(bold=True, color=EXCEL_STYLES['header_font_color'], size=11)
        self.title_font = Font(bold=True, size=16)
        self.subtitle_font = Font(bold=True, size=12)

        thin_border = Side(style='thin', color='000000')
        self.cell_border = Border(left=thin_border, right=thin_border, top=thin_border, bottom=thin_border)

        self.center_align = Alignment(horizontal='center', vertical='center')
        self.right_align = Alignment(horizontal='right', vertical='center')
        self.wrap_align = Alignment(horizontal='left', vertical='top', wrap_text=True)

        self.currency_format = EXCEL_STYLES['currency_format']
        self.percent_format = EXCEL_STYLES['percent_format']

    # =========================================================================
    # MAIN EXPORT METHOD
    # =========================================================================

    def create_report(
        self,
        rows: Sequence[ComparisonRow],
        totals: Dict,
        filters: Dict,
        departments: Optional[Dict[str, DepartmentBucket]] = None,
        rankings: Optional[Dict[str, List[RankingEntry]]] = None,
        insights: Optional[Sequence[Insight]] = None,
        goal_progress: Optional[Dict] = None
    ) -> BytesIO:
        """
        Create formatted Excel report with multiple sheets.

        Args:
            rows: Monthly comparison rows
            totals: Comparison totals
            filters: Selected year, month, years_back
            departments: Department buckets of the selected year
            rankings: Title -> ranking entries
            insights: Generated insights
            goal_progress: Goal progress dict for the selected month

        Returns:
            BytesIO containing Excel file
        """
        self.wb = Workbook()

        self._create_summary_sheet(totals, filters, goal_progress)
        self._create_monthly_sheet(rows)
        if departments:
            self._create_department_sheet(departments)
        if rankings:
            self._create_rankings_sheet(rankings)
        if insights:
            self._create_insights_sheet(insights)

        output = BytesIO()
        self.wb.save(output)
        output.seek(0)

        logger.info(f"Excel report created with sheets: {', '.join(self.wb.sheetnames)}")
        return output

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _write_header(self, ws, row: int, columns: Sequence):
        for col_idx, (header, width) in enumerate(columns, 1):
            cell = ws.cell(row=row, column=col_idx, value=header)
            cell.fill = self.header_fill
            cell.font = self.header_font
            cell.alignment = self.center_align
            cell.border = self.cell_border
            ws.column_dimensions[get_column_letter(col_idx)].width = width

    def _write_cell(self, ws, row: int, column: int, value, number_format: Optional[str] = None):
        cell = ws.cell(row=row, column=column, value=value)
        cell.border = self.cell_border
        if number_format:
            cell.number_format = number_format
            cell.alignment = self.right_align
        return cell

    # =========================================================================
    # SHEETS
    # =========================================================================

    def _create_summary_sheet(self, totals: Dict, filters: Dict, goal_progress: Optional[Dict]):
        ws = self.wb.active
        ws.title = SHEET_SUMMARY

        row = 1
        ws.cell(row=row, column=1, value="Copa Unique League - Relatório de Performance")
        ws.cell(row=row, column=1).font = self.title_font
        ws.merge_cells(start_row=row, start_column=1, end_row=row, end_column=4)
        row += 2

        month = filters.get('month')
        period = f"{FULL_MONTH_NAMES[month]} {filters.get('year', '')}" if month else str(filters.get('year', ''))
        info_rows = [
            ("Período:", period),
            ("Comparado com:", f"{filters.get('years_back', 1)} ano(s) anterior(es)"),
            ("Gerado em:", datetime.now().strftime('%d/%m/%Y %H:%M')),
        ]
        for label, value in info_rows:
            ws.cell(row=row, column=1, value=label)
            ws.cell(row=row, column=2, value=value)
            row += 1
        row += 1

        ws.cell(row=row, column=1, value="Totais")
        ws.cell(row=row, column=1).font = self.subtitle_font
        row += 1
        self._write_header(ws, row, [("Indicador", 28), ("Atual", 18), ("Comparação", 18), ("Cresc. %", 12)])
        row += 1

        total_rows = [
            ("Vendido", 'revenue', self.currency_format),
            ("Executado", 'executed', self.currency_format),
            ("Quantidade", 'quantity', '#,##0'),
            ("Ticket médio", 'avg_ticket', self.currency_format),
        ]
        for label, key, fmt in total_rows:
            self._write_cell(ws, row, 1, label)
            self._write_cell(ws, row, 2, totals.get(f'current_{key}', 0), fmt)
            self._write_cell(ws, row, 3, totals.get(f'compare_{key}', 0), fmt)
            self._write_cell(ws, row, 4, totals.get(f'{key}_growth', 0), self.percent_format)
            row += 1

        if goal_progress:
            row += 1
            ws.cell(row=row, column=1, value="Metas")
            ws.cell(row=row, column=1).font = self.subtitle_font
            row += 1
            self._write_header(ws, row, [("Meta", 28), ("Progresso %", 18), ("Falta", 18)])
            row += 1
            for level in (1, 2, 3):
                self._write_cell(ws, row, 1, f"Meta {level}")
                self._write_cell(ws, row, 2, goal_progress[f'meta{level}_progress'], self.percent_format)
                self._write_cell(ws, row, 3, goal_progress[f'missing_meta{level}'], self.currency_format)
                row += 1
            ws.cell(row=row, column=1, value="Status:")
            ws.cell(row=row, column=2, value=goal_progress.get('achieved_label', ''))

    def _create_monthly_sheet(self, rows: Sequence[ComparisonRow]):
        ws = self.wb.create_sheet(SHEET_MONTHLY)
        if not rows:
            ws.cell(row=1, column=1, value="Sem dados no período")
            return

        years = rows[0].years
        columns = [("Mês", 14)]
        columns += [(f"Vendido {y}", 16) for y in years]
        columns += [(f"Executado {y}", 16) for y in years]
        columns += [("Cresc. vendido %", 16), ("Cresc. executado %", 18), ("Cresc. qtd. %", 14)]
        self._write_header(ws, 1, columns)

        for row_idx, r in enumerate(rows, 2):
            col = 1
            self._write_cell(ws, row_idx, col, FULL_MONTH_NAMES[r.month])
            for value in list(r.revenue) + list(r.executed):
                col += 1
                self._write_cell(ws, row_idx, col, value, self.currency_format)
            for value in (r.revenue_growth, r.executed_growth, r.quantity_growth):
                col += 1
                self._write_cell(ws, row_idx, col, value, self.percent_format)

        growth_col = get_column_letter(2 + 2 * len(years))
        ws.conditional_formatting.add(
            f'{growth_col}2:{growth_col}{len(rows) + 1}',
            ColorScaleRule(
                start_type='num', start_value=-25, start_color='F8696B',
                mid_type='num', mid_value=0, mid_color='FFEB84',
                end_type='num', end_value=25, end_color='63BE7B'
            )
        )
        ws.freeze_panes = 'B2'

    def _create_department_sheet(self, departments: Dict[str, DepartmentBucket]):
        ws = self.wb.create_sheet(SHEET_DEPARTMENTS)
        self._write_header(ws, 1, [
            ("Departamento", 42), ("Vendido", 16), ("Executado", 16),
            ("Qtd. vendida", 12), ("Participação %", 14), ("Ticket médio", 16),
        ])

        buckets = sorted(departments.values(), key=lambda b: b.revenue, reverse=True)
        for row_idx, b in enumerate(buckets, 2):
            self._write_cell(ws, row_idx, 1, b.department)
            self._write_cell(ws, row_idx, 2, b.revenue, self.currency_format)
            self._write_cell(ws, row_idx, 3, b.executed, self.currency_format)
            self._write_cell(ws, row_idx, 4, b.qtd_sold, '#,##0')
            self._write_cell(ws, row_idx, 5, b.share_percent, self.percent_format)
            self._write_cell(ws, row_idx, 6, b.avg_ticket, self.currency_format)
        ws.freeze_panes = 'A2'

    def _create_rankings_sheet(self, rankings: Dict[str, List[RankingEntry]]):
        ws = self.wb.create_sheet(SHEET_RANKINGS)
        row = 1
        for title, entries in rankings.items():
            ws.cell(row=row, column=1, value=title)
            ws.cell(row=row, column=1).font = self.subtitle_font
            row += 1
            self._write_header(ws, row, [("#", 6), ("Nome", 40), ("Qtd.", 10), ("Valor", 16)])
            row += 1
            for position, entry in enumerate(entries, 1):
                self._write_cell(ws, row, 1, position)
                self._write_cell(ws, row, 2, entry.name)
                self._write_cell(ws, row, 3, entry.count, '#,##0')
                self._write_cell(ws, row, 4, entry.revenue, self.currency_format)
                row += 1
            row += 1

    def _create_insights_sheet(self, insights: Sequence[Insight]):
        ws = self.wb.create_sheet(SHEET_INSIGHTS)
        self._write_header(ws, 1, [("Tipo", 12), ("Insight", 90)])
        for row_idx, insight in enumerate(insights, 2):
            self._write_cell(ws, row_idx, 1, insight.kind)
            cell = self._write_cell(ws, row_idx, 2, f"{insight.icon} {insight.message}".strip())
            cell.alignment = self.wrap_align


__all__ = [
    'PerformanceExport',
]
