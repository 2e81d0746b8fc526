"""Integration tests for ExcelExporter."""

from pathlib import Path

import pytest
from openpyxl import load_workbook

from domain.exceptions import ExportError
from domain.models import Formula
from domain.services.formula_analyzer import FormulaAnalyzer
from domain.services.percentage_table import build_table
from infrastructure.persistence.excel_exporter import ExcelExporter


@pytest.fixture
def exporter() -> ExcelExporter:
    return ExcelExporter()


class TestExportFormula:
    def test_writes_all_sheets(
        self,
        exporter: ExcelExporter,
        country_sourdough: Formula,
        tmp_path: Path,
    ) -> None:
        output = tmp_path / "country.xlsx"

        exporter.export_formula(
            country_sourdough,
            build_table(country_sourdough),
            FormulaAnalyzer().analyze(country_sourdough),
            output,
        )

        wb = load_workbook(output)
        assert wb.sheetnames == ["Total Formula", "Final Mix", "Preferments", "Soakers", "Analysis"]

        ws = wb["Total Formula"]
        assert [cell.value for cell in ws[1]] == ["Ingredient", "Category", "Weight (g)", "Baker's %"]
        assert [cell.value for cell in ws[2]] == ["Bread Flour", "Flour", 750, 75]
        assert [cell.value for cell in ws[4]] == ["Water", "Liquid", 790, 79]

        preferments = wb["Preferments"]
        assert preferments["A1"].value == "Levain"
        assert preferments["A6"].value == "TOTAL"
        assert preferments["C6"].value == 220

    def test_analysis_sheet_lists_findings(
        self,
        exporter: ExcelExporter,
        basic_formula: Formula,
        tmp_path: Path,
    ) -> None:
        output = tmp_path / "basic.xlsx"

        exporter.export_formula(
            basic_formula,
            build_table(basic_formula),
            FormulaAnalyzer().analyze(basic_formula),
            output,
        )

        ws = load_workbook(output)["Analysis"]
        rows = [[cell.value for cell in row] for row in ws.iter_rows()]
        assert ["Hydration (%)", 60] in [row[:2] for row in rows]
        assert ["Severity", "Category", "Message", "Value"] in rows
        assert rows[-2][:2] == ["warning", "Leavening"]
        assert rows[-1][:2] == ["info", "Yeast"]

    def test_failure_becomes_export_error(
        self,
        exporter: ExcelExporter,
        basic_formula: Formula,
        tmp_path: Path,
    ) -> None:
        missing_dir = tmp_path / "missing" / "out.xlsx"

        with pytest.raises(ExportError, match="Failed to export"):
            exporter.export_formula(
                basic_formula,
                build_table(basic_formula),
                FormulaAnalyzer().analyze(basic_formula),
                missing_dir,
            )
