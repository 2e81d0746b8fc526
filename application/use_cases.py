"""Application use cases.

Use cases orchestrate domain services and infrastructure to fulfill
baking workflows.
"""

import logging
from decimal import Decimal
from pathlib import Path
from typing import Mapping

from domain.exceptions import InvalidFormulaError
from domain.ingredient_identifier import IngredientIdentifier
from domain.models import Formula
from domain.services.formula_analyzer import FormulaAnalysis, FormulaAnalyzer
from domain.services.percentage_table import BakersPercentageCalculator, BakersPercentageTable
from domain.services.scaling_service import FormulaScalingService, MisweighCorrectionResult
from infrastructure.persistence.excel_exporter import ExcelExporter
from infrastructure.persistence.formula_importer import FormulaSheetImporter, ImportResult
from infrastructure.persistence.json_repository import JSONFormulaRepository


class AnalyzeFormulaUseCase:
    """Compute totals and findings for a formula."""

    def __init__(self, analyzer: FormulaAnalyzer) -> None:
        self._analyzer = analyzer

    def execute(self, formula: Formula) -> FormulaAnalysis:
        return self._analyzer.analyze(formula)


class BuildPercentageTableUseCase:
    """Build the baker's percentage table of a formula."""

    def __init__(self, calculator: BakersPercentageCalculator) -> None:
        self._calculator = calculator

    def execute(self, formula: Formula) -> BakersPercentageTable:
        return self._calculator.build_table(formula)


class ScaleFormulaUseCase:
    """Scale a formula by yield, by one ingredient, by flour on hand or to a mixer."""

    def __init__(self, scaling_service: FormulaScalingService) -> None:
        self._service = scaling_service

    def to_yield(
        self,
        formula: Formula,
        pieces: int,
        weight_per_piece: Decimal,
    ) -> Formula:
        """Scale to a requested yield.

        Args:
            formula: Formula to scale
            pieces: Number of pieces (at least 1)
            weight_per_piece: Grams per piece (must be positive)

        Returns:
            Scaled formula

        Raises:
            InvalidFormulaError: If pieces or weight_per_piece is not positive
        """
        if pieces < 1:
            raise InvalidFormulaError(f"Pieces must be at least 1, got {pieces}")
        _require_positive(weight_per_piece, "Weight per piece")
        return self._service.scale_by_yield(formula, pieces, weight_per_piece)

    def to_ingredient_weight(
        self,
        formula: Formula,
        identifier: IngredientIdentifier,
        target_weight: Decimal,
    ) -> Formula:
        _require_positive(target_weight, "Target weight")
        return self._service.scale_by_ingredient(formula, identifier, target_weight)

    def to_available_flour(self, formula: Formula, available_flour: Decimal) -> Formula:
        _require_positive(available_flour, "Available flour")
        return self._service.scale_by_available_flour(formula, available_flour)

    def to_mixer_capacity(self, formula: Formula, capacity_kg: Decimal) -> Formula:
        _require_positive(capacity_kg, "Mixer capacity")
        return self._service.scale_to_mixer_capacity(formula, capacity_kg)


class CorrectMisweighUseCase:
    """Rebuild a formula around an ingredient that was weighed wrong."""

    def __init__(self, scaling_service: FormulaScalingService) -> None:
        self._service = scaling_service

    def execute(
        self,
        formula: Formula,
        identifier: IngredientIdentifier,
        actual_weight: Decimal,
    ) -> MisweighCorrectionResult:
        """Correct a formula after a misweigh.

        Args:
            formula: Formula that was being weighed out
            identifier: Ingredient that was misweighed
            actual_weight: What actually went into the bowl

        Returns:
            Correction result with the rebuilt formula and applied factor
        """
        if actual_weight < 0:
            raise InvalidFormulaError(f"Actual weight cannot be negative, got {actual_weight}")
        return self._service.correct_misweigh(formula, {identifier: actual_weight})


class SaveFormulaUseCase:
    """Save formula to file."""

    def __init__(self, json_repository: JSONFormulaRepository) -> None:
        self._repository = json_repository

    def execute(self, formula: Formula, filename: str) -> Path:
        """Save formula.

        Args:
            formula: Formula to save
            filename: Filename

        Returns:
            Path to saved file
        """
        return self._repository.save(formula, filename)


class LoadFormulaUseCase:
    """Load formula from file."""

    def __init__(self, json_repository: JSONFormulaRepository) -> None:
        self._repository = json_repository

    def execute(self, filename: str) -> Formula:
        return self._repository.load(filename)


class ExportFormulaUseCase:
    """Export formula to Excel."""

    def __init__(
        self,
        calculator: BakersPercentageCalculator,
        analyzer: FormulaAnalyzer,
        exporter: ExcelExporter,
    ) -> None:
        self._calculator = calculator
        self._analyzer = analyzer
        self._exporter = exporter

    def execute(
        self,
        formula: Formula,
        output_path: Path | str,
    ) -> None:
        """Export formula to Excel.

        Args:
            formula: Formula to export
            output_path: Output file path
        """
        table = self._calculator.build_table(formula)
        analysis = self._analyzer.analyze(formula)
        self._exporter.export_formula(formula, table, analysis, output_path)
        logging.info("Exported formula %s to %s", formula.id, output_path)


class ImportFormulaSheetUseCase:
    """Import a formula from a CSV / Excel ingredient list."""

    def __init__(self, importer: FormulaSheetImporter) -> None:
        self._importer = importer

    def execute(self, path: Path | str, formula_name: str | None = None) -> ImportResult:
        return self._importer.import_file(path, formula_name=formula_name)


def _require_positive(value: Decimal, label: str) -> None:
    if value <= 0:
        raise InvalidFormulaError(f"{label} must be positive, got {value}")
