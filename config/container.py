"""Dependency Injection container.

Provides centralized dependency management for the application.
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from application.use_cases import (
    AnalyzeFormulaUseCase,
    BuildPercentageTableUseCase,
    CorrectMisweighUseCase,
    ExportFormulaUseCase,
    ImportFormulaSheetUseCase,
    LoadFormulaUseCase,
    SaveFormulaUseCase,
    ScaleFormulaUseCase,
)
from config.constants import (
    EXPORTS_DIRECTORY,
    EXPORTS_DIRECTORY_ENV,
    SAVES_DIRECTORY,
    SAVES_DIRECTORY_ENV,
)
from domain.services.formula_analyzer import FormulaAnalyzer, Thresholds
from domain.services.percentage_table import BakersPercentageCalculator
from domain.services.scaling_service import FormulaScalingService
from infrastructure.persistence.excel_exporter import ExcelExporter
from infrastructure.persistence.formula_importer import FormulaSheetImporter
from infrastructure.persistence.json_repository import JSONFormulaRepository

load_dotenv()


class Container:
    """Dependency injection container.

    Provides singleton instances of services and use cases.
    """

    def __init__(
        self,
        saves_directory: Optional[str | Path] = None,
        exports_directory: Optional[str | Path] = None,
        thresholds: Optional[Thresholds] = None,
    ) -> None:
        """Initialize container.

        Args:
            saves_directory: Where formulas are stored (if None, reads
                FORMULA_SAVES_DIR from the environment)
            exports_directory: Where workbooks are written (if None, reads
                FORMULA_EXPORT_DIR from the environment)
            thresholds: Analyzer thresholds (if None, uses the defaults)
        """
        self._saves_directory = Path(
            saves_directory or os.getenv(SAVES_DIRECTORY_ENV) or SAVES_DIRECTORY
        )
        self._exports_directory = Path(
            exports_directory or os.getenv(EXPORTS_DIRECTORY_ENV) or EXPORTS_DIRECTORY
        )
        self._thresholds = thresholds if thresholds is not None else Thresholds()

        # Lazy-initialized singletons
        self._json_repository: Optional[JSONFormulaRepository] = None
        self._excel_exporter: Optional[ExcelExporter] = None
        self._formula_importer: Optional[FormulaSheetImporter] = None

        self._percentage_calculator: Optional[BakersPercentageCalculator] = None
        self._scaling_service: Optional[FormulaScalingService] = None
        self._analyzer: Optional[FormulaAnalyzer] = None

        self._analyze_formula_use_case: Optional[AnalyzeFormulaUseCase] = None
        self._build_table_use_case: Optional[BuildPercentageTableUseCase] = None
        self._scale_formula_use_case: Optional[ScaleFormulaUseCase] = None
        self._correct_misweigh_use_case: Optional[CorrectMisweighUseCase] = None
        self._save_formula_use_case: Optional[SaveFormulaUseCase] = None
        self._load_formula_use_case: Optional[LoadFormulaUseCase] = None
        self._export_formula_use_case: Optional[ExportFormulaUseCase] = None
        self._import_formula_use_case: Optional[ImportFormulaSheetUseCase] = None

    @property
    def saves_directory(self) -> Path:
        return self._saves_directory

    @property
    def exports_directory(self) -> Path:
        return self._exports_directory

    # Infrastructure
    @property
    def json_repository(self) -> JSONFormulaRepository:
        """Get JSON formula repository."""
        if self._json_repository is None:
            self._json_repository = JSONFormulaRepository(
                base_directory=self._saves_directory
            )
        return self._json_repository

    @property
    def excel_exporter(self) -> ExcelExporter:
        """Get Excel exporter."""
        if self._excel_exporter is None:
            self._excel_exporter = ExcelExporter()
        return self._excel_exporter

    @property
    def formula_importer(self) -> FormulaSheetImporter:
        """Get ingredient sheet importer."""
        if self._formula_importer is None:
            self._formula_importer = FormulaSheetImporter()
        return self._formula_importer

    # Domain Services
    @property
    def percentage_calculator(self) -> BakersPercentageCalculator:
        """Get baker's percentage calculator."""
        if self._percentage_calculator is None:
            self._percentage_calculator = BakersPercentageCalculator()
        return self._percentage_calculator

    @property
    def scaling_service(self) -> FormulaScalingService:
        """Get formula scaling service."""
        if self._scaling_service is None:
            self._scaling_service = FormulaScalingService()
        return self._scaling_service

    @property
    def analyzer(self) -> FormulaAnalyzer:
        """Get formula analyzer."""
        if self._analyzer is None:
            self._analyzer = FormulaAnalyzer(self._thresholds)
        return self._analyzer

    # Use Cases
    @property
    def analyze_formula(self) -> AnalyzeFormulaUseCase:
        if self._analyze_formula_use_case is None:
            self._analyze_formula_use_case = AnalyzeFormulaUseCase(self.analyzer)
        return self._analyze_formula_use_case

    @property
    def build_table(self) -> BuildPercentageTableUseCase:
        if self._build_table_use_case is None:
            self._build_table_use_case = BuildPercentageTableUseCase(
                self.percentage_calculator
            )
        return self._build_table_use_case

    @property
    def scale_formula(self) -> ScaleFormulaUseCase:
        if self._scale_formula_use_case is None:
            self._scale_formula_use_case = ScaleFormulaUseCase(self.scaling_service)
        return self._scale_formula_use_case

    @property
    def correct_misweigh(self) -> CorrectMisweighUseCase:
        if self._correct_misweigh_use_case is None:
            self._correct_misweigh_use_case = CorrectMisweighUseCase(self.scaling_service)
        return self._correct_misweigh_use_case

    @property
    def save_formula(self) -> SaveFormulaUseCase:
        """Get save formula use case."""
        if self._save_formula_use_case is None:
            self._save_formula_use_case = SaveFormulaUseCase(self.json_repository)
        return self._save_formula_use_case

    @property
    def load_formula(self) -> LoadFormulaUseCase:
        """Get load formula use case."""
        if self._load_formula_use_case is None:
            self._load_formula_use_case = LoadFormulaUseCase(self.json_repository)
        return self._load_formula_use_case

    @property
    def export_formula(self) -> ExportFormulaUseCase:
        """Get export formula use case."""
        if self._export_formula_use_case is None:
            self._export_formula_use_case = ExportFormulaUseCase(
                calculator=self.percentage_calculator,
                analyzer=self.analyzer,
                exporter=self.excel_exporter,
            )
        return self._export_formula_use_case

    @property
    def import_formula_sheet(self) -> ImportFormulaSheetUseCase:
        """Get ingredient sheet import use case."""
        if self._import_formula_use_case is None:
            self._import_formula_use_case = ImportFormulaSheetUseCase(self.formula_importer)
        return self._import_formula_use_case
