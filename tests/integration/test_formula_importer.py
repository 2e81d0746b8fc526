"""Integration tests for FormulaSheetImporter."""

from decimal import Decimal
from pathlib import Path

import pandas as pd
import pytest

from domain.exceptions import FormulaImportError
from domain.models import AdditionStage, EnrichmentKind, FlourType, PrefermentKind
from domain.services.totals import hydration, total_flour, total_weight
from infrastructure.persistence.formula_importer import FormulaSheetImporter

SHEET_CSV = """section,component,ingredient,amount,unit,kind,hydration,hours,stage
final,,Bread flour,800,g,,,,
final,,Whole wheat flour,0.1,kg,,,,
final,,Water,"620",g,,,,
final,,Salt,20,,,,,
final,,Walnuts,100,g,,,,folding
final,,Butter,50,g,,,,
preferment,Levain,Flour,100,g,levain,,14,
preferment,Levain,Water,100,g,,,,
preferment,Levain,Starter,20,g,,80,,
soaker,Seeds,Flax,50,g,,,,
soaker,Seeds,Water,60,g,,,,
soaker,Seeds,Salt,1,g,,,,
final,,Cardamom,3,cups,,,,
mystery,,Sugar,10,g,,,,
"""


@pytest.fixture
def importer() -> FormulaSheetImporter:
    return FormulaSheetImporter()


@pytest.fixture
def sheet_csv(tmp_path: Path) -> Path:
    path = tmp_path / "Seeded Loaf.csv"
    path.write_text(SHEET_CSV, encoding="utf-8")
    return path


class TestImportCsv:
    def test_builds_final_mix(self, importer: FormulaSheetImporter, sheet_csv: Path) -> None:
        formula = importer.import_file(sheet_csv).formula
        mix = formula.final_mix

        assert formula.name == "Seeded Loaf"
        assert [(f.flour_type, f.weight) for f in mix.flours] == [
            (FlourType.BREAD, Decimal("800")),
            (FlourType.WHOLE_WHEAT, Decimal("100")),
        ]
        assert mix.water == Decimal("620")
        assert mix.salt == Decimal("20")
        assert mix.inclusions[0].name == "Walnuts"
        assert mix.inclusions[0].addition_stage is AdditionStage.FOLDING
        assert mix.enrichments[0].kind is EnrichmentKind.BUTTER

    def test_groups_preferments_and_soakers(
        self,
        importer: FormulaSheetImporter,
        sheet_csv: Path,
    ) -> None:
        formula = importer.import_file(sheet_csv).formula

        levain = formula.preferments[0]
        assert levain.name == "Levain"
        assert levain.kind is PrefermentKind.LEVAIN
        assert levain.flour_weight == Decimal("100")
        assert levain.starter is not None
        assert levain.starter.weight == Decimal("20")
        assert levain.starter.hydration == Decimal("80")
        assert levain.build_hours == Decimal("14")

        seeds = formula.soakers[0]
        assert [g.name for g in seeds.grains] == ["Flax"]
        assert seeds.water == Decimal("60")
        assert seeds.salt == Decimal("1")

    def test_yield_matches_imported_weight(
        self,
        importer: FormulaSheetImporter,
        sheet_csv: Path,
    ) -> None:
        formula = importer.import_file(sheet_csv).formula

        assert formula.yield_.pieces == 1
        assert formula.yield_.weight_per_piece == total_weight(formula)
        assert total_flour(formula) > Decimal("1000")
        assert hydration(formula) > Decimal("0")

    def test_bad_rows_become_warnings(
        self,
        importer: FormulaSheetImporter,
        sheet_csv: Path,
    ) -> None:
        warnings = importer.import_file(sheet_csv).warnings

        assert len(warnings) == 2
        assert "Cardamom" in warnings[0]
        assert "unknown section" in warnings[1]

    def test_name_override(self, importer: FormulaSheetImporter, sheet_csv: Path) -> None:
        assert importer.import_file(sheet_csv, formula_name="Mine").formula.name == "Mine"


class TestImportExcel:
    def test_reads_xlsx(self, importer: FormulaSheetImporter, tmp_path: Path) -> None:
        path = tmp_path / "poolish.xlsx"
        pd.DataFrame(
            {
                "Section": ["final", "final", "final", "pre-ferment", "pre-ferment", "pre-ferment"],
                "Component": ["", "", "", "Poolish", "Poolish", "Poolish"],
                "Ingredient": ["Flour", "Water", "Salt", "Flour", "Water", "Instant yeast"],
                "Amount": ["700", "400", "20", "300", "300", "0,5"],
                "Unit": ["g", "g", "g", "g", "g", "g"],
            }
        ).to_excel(path, index=False)

        formula = importer.import_file(path).formula

        assert formula.final_mix.flours[0].flour_type is FlourType.BREAD
        poolish = formula.preferments[0]
        assert poolish.kind is PrefermentKind.POOLISH
        assert poolish.yeast == Decimal("0.5")
        assert total_flour(formula) == Decimal("1000")


class TestImportErrors:
    def test_missing_columns(self, importer: FormulaSheetImporter, tmp_path: Path) -> None:
        path = tmp_path / "bad.csv"
        path.write_text("name,grams\nFlour,500\n", encoding="utf-8")

        with pytest.raises(FormulaImportError, match="Missing required columns"):
            importer.import_file(path)

    def test_unsupported_file_type(self, importer: FormulaSheetImporter, tmp_path: Path) -> None:
        path = tmp_path / "formula.txt"
        path.write_text("section,ingredient,amount\n", encoding="utf-8")

        with pytest.raises(FormulaImportError, match="Unsupported file type"):
            importer.import_file(path)

    def test_missing_file(self, importer: FormulaSheetImporter, tmp_path: Path) -> None:
        with pytest.raises(FormulaImportError, match="Could not read"):
            importer.import_file(tmp_path / "missing.csv")

    def test_no_usable_rows(self, importer: FormulaSheetImporter, tmp_path: Path) -> None:
        path = tmp_path / "empty_rows.csv"
        path.write_text("section,ingredient,amount\nfinal,Flour,abc\n", encoding="utf-8")

        with pytest.raises(FormulaImportError, match="No usable ingredient rows"):
            importer.import_file(path)
