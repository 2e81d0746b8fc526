"""Excel export functionality.

Exports baker's percentage tables and analysis findings to Excel with
formatting. Values are rounded here, at display time, using the formula's
display preferences.
"""

from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import Iterable, List, Sequence

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from domain.exceptions import ExportError
from domain.models import Formula
from domain.services.formula_analyzer import FormulaAnalysis
from domain.services.percentage_table import (
    BakersPercentageRow,
    BakersPercentageTable,
    ComponentBreakdown,
)

ROW_HEADERS = ["Ingredient", "Category", "Weight (g)", "Baker's %"]
PERCENT_PLACES = 2


class ExcelExporter:
    """Export formulas to Excel format."""

    def export_formula(
        self,
        formula: Formula,
        table: BakersPercentageTable,
        analysis: FormulaAnalysis,
        output_path: Path | str,
    ) -> None:
        """Export a formula's percentage table and findings to Excel.

        Args:
            formula: Formula being exported (name, yield, rounding)
            table: Baker's percentage table of the formula
            analysis: Analysis of the formula
            output_path: Path to save Excel file

        Raises:
            ExportError: If export fails
        """
        try:
            wb = Workbook()
            wb.remove(wb.active)  # Remove default sheet

            weight_places = formula.display.rounding.decimal_places
            self._create_total_formula_sheet(wb, formula, table, weight_places)
            self._create_rows_sheet(wb, "Final Mix", table.final_mix, weight_places)
            self._create_breakdown_sheet(wb, "Preferments", table.preferments, weight_places)
            self._create_breakdown_sheet(wb, "Soakers", table.soakers, weight_places)
            self._create_analysis_sheet(wb, analysis)

            wb.save(output_path)

        except Exception as exc:
            raise ExportError(f"Failed to export to Excel: {exc}") from exc

    def _create_total_formula_sheet(
        self,
        wb: Workbook,
        formula: Formula,
        table: BakersPercentageTable,
        weight_places: int,
    ) -> None:
        ws = wb.create_sheet("Total Formula")
        ws.append(ROW_HEADERS)
        _style_header(ws, 1, len(ROW_HEADERS))

        for row in table.total_formula:
            ws.append(_row_values(row, weight_places))

        ws.append([])
        ws.append(["Formula", formula.name])
        ws.append(["Version", formula.version])
        ws.append(["Pieces", formula.yield_.pieces])
        ws.append(["Weight per piece (g)", _rounded(formula.yield_.weight_per_piece, weight_places)])
        _auto_size(ws)

    def _create_rows_sheet(
        self,
        wb: Workbook,
        title: str,
        rows: Sequence[BakersPercentageRow],
        weight_places: int,
    ) -> None:
        ws = wb.create_sheet(title)
        ws.append(ROW_HEADERS)
        _style_header(ws, 1, len(ROW_HEADERS))

        for row in rows:
            ws.append(_row_values(row, weight_places))

        _auto_size(ws)

    def _create_breakdown_sheet(
        self,
        wb: Workbook,
        title: str,
        breakdowns: Iterable[ComponentBreakdown],
        weight_places: int,
    ) -> None:
        """One block per component: name line, header, rows, subtotal."""
        ws = wb.create_sheet(title)

        for breakdown in breakdowns:
            ws.append([breakdown.name])
            ws.cell(ws.max_row, 1).font = Font(bold=True)
            ws.append(ROW_HEADERS)
            _style_header(ws, ws.max_row, len(ROW_HEADERS))
            for row in breakdown.rows:
                ws.append(_row_values(row, weight_places))
            ws.append(
                [
                    "TOTAL",
                    "",
                    _rounded(breakdown.total_weight, weight_places),
                    _rounded(breakdown.total_percentage, PERCENT_PLACES),
                ]
            )
            ws.append([])

        _auto_size(ws)

    def _create_analysis_sheet(self, wb: Workbook, analysis: FormulaAnalysis) -> None:
        ws = wb.create_sheet("Analysis")

        metrics = [
            ("Total flour (g)", analysis.total_flour),
            ("Total water (g)", analysis.total_water),
            ("Total weight (g)", analysis.total_weight),
            ("Hydration (%)", analysis.hydration),
            ("Salt (%)", analysis.salt_percentage),
            ("Prefermented flour (%)", analysis.prefermented_flour_percentage),
        ]
        ws.append(["Metric", "Value"])
        _style_header(ws, 1, 2)
        for label, value in metrics:
            ws.append([label, _rounded(value, PERCENT_PLACES)])

        ws.append([])
        headers = ["Severity", "Category", "Message", "Value"]
        ws.append(headers)
        _style_header(ws, ws.max_row, len(headers))
        for finding in analysis.findings:
            ws.append(
                [
                    finding.severity.value,
                    finding.category,
                    finding.message,
                    "" if finding.value is None else _rounded(finding.value, PERCENT_PLACES),
                ]
            )

        _auto_size(ws, max_width=80)


def _rounded(value: Decimal, places: int) -> float:
    quant = Decimal(1).scaleb(-places)
    return float(value.quantize(quant, rounding=ROUND_HALF_UP))


def _row_values(row: BakersPercentageRow, weight_places: int) -> List[object]:
    return [
        row.ingredient,
        row.category,
        _rounded(row.weight, weight_places),
        _rounded(row.percentage, PERCENT_PLACES),
    ]


def _style_header(ws: Worksheet, row_number: int, width: int) -> None:
    header_fill = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
    for col_num in range(1, width + 1):
        cell = ws.cell(row_number, col_num)
        cell.fill = header_fill
        cell.alignment = Alignment(horizontal="center", vertical="center")


def _auto_size(ws: Worksheet, max_width: int = 50) -> None:
    for column in ws.columns:
        max_length = 0
        column_letter = get_column_letter(column[0].column)
        for cell in column:
            if cell.value:
                max_length = max(max_length, len(str(cell.value)))
        ws.column_dimensions[column_letter].width = min(max_length + 2, max_width)
