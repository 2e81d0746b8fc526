"""Formula analysis and validation.

Classifies a formula's derived metrics into an ordered list of findings.
Critical checks run first; when any of them is an error the remaining rule
groups are skipped so a broken formula does not produce cascading noise.
Findings are data, never exceptions.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Iterable, Optional

from config import constants
from domain.models import Formula, Preferment, PrefermentKind, Soaker
from domain.services.totals import (
    FormulaTotals,
    calculate_totals,
    is_significant,
    percentage_of_flour,
)


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Finding:
    """A single validation result."""

    severity: Severity
    category: str
    message: str
    value: Optional[Decimal] = None


@dataclass(frozen=True)
class Thresholds:
    """Band limits used by the analyzer, as percentages unless noted."""

    hydration_error_low: Decimal = constants.HYDRATION_ERROR_LOW
    hydration_warning_low: Decimal = constants.HYDRATION_WARNING_LOW
    hydration_warning_high: Decimal = constants.HYDRATION_WARNING_HIGH
    hydration_error_high: Decimal = constants.HYDRATION_ERROR_HIGH
    salt_warning_low: Decimal = constants.SALT_WARNING_LOW
    salt_info_low: Decimal = constants.SALT_INFO_LOW
    salt_info_high: Decimal = constants.SALT_INFO_HIGH
    salt_warning_high: Decimal = constants.SALT_WARNING_HIGH
    prefermented_flour_info: Decimal = constants.PREFERMENTED_FLOUR_INFO
    prefermented_flour_warning: Decimal = constants.PREFERMENTED_FLOUR_WARNING
    yeast_warning_high: Decimal = constants.YEAST_WARNING_HIGH
    yeast_info_low: Decimal = constants.YEAST_INFO_LOW
    poolish_target_hydration: Decimal = constants.POOLISH_TARGET_HYDRATION
    poolish_hydration_tolerance: Decimal = constants.POOLISH_HYDRATION_TOLERANCE
    biga_hydration_min: Decimal = constants.BIGA_HYDRATION_MIN
    biga_hydration_max: Decimal = constants.BIGA_HYDRATION_MAX
    build_hours_short: Decimal = constants.BUILD_HOURS_SHORT
    build_hours_long: Decimal = constants.BUILD_HOURS_LONG
    soaker_hydration_low: Decimal = constants.SOAKER_HYDRATION_LOW
    soaker_hydration_high: Decimal = constants.SOAKER_HYDRATION_HIGH
    soak_hours_short: Decimal = constants.SOAK_HOURS_SHORT
    inclusion_warning: Decimal = constants.INCLUSION_WARNING
    enrichment_info: Decimal = constants.ENRICHMENT_INFO
    whole_grain_info: Decimal = constants.WHOLE_GRAIN_INFO


@dataclass(frozen=True)
class ValidationSummary:
    error_count: int
    warning_count: int
    info_count: int

    @property
    def has_errors(self) -> bool:
        return self.error_count > 0

    @property
    def is_valid(self) -> bool:
        return self.error_count == 0

    @property
    def total_issues(self) -> int:
        return self.error_count + self.warning_count + self.info_count

    @property
    def status_message(self) -> str:
        if self.has_errors:
            return f"Formula has {self.error_count} error(s)"
        if self.warning_count:
            return f"Formula has {self.warning_count} warning(s)"
        if self.info_count:
            return f"Formula validated with {self.info_count} note(s)"
        return "Formula validated successfully"


@dataclass(frozen=True)
class FormulaAnalysis:
    """Aggregate metrics of a formula together with its findings."""

    totals: FormulaTotals
    findings: tuple[Finding, ...] = field(default_factory=tuple)

    @property
    def total_flour(self) -> Decimal:
        return self.totals.flour

    @property
    def total_water(self) -> Decimal:
        return self.totals.water

    @property
    def total_weight(self) -> Decimal:
        return self.totals.weight

    @property
    def hydration(self) -> Decimal:
        return self.totals.hydration

    @property
    def salt_percentage(self) -> Decimal:
        return self.totals.salt_percentage

    @property
    def prefermented_flour_percentage(self) -> Decimal:
        return self.totals.prefermented_flour_percentage


class FormulaAnalyzer:
    """Stateless rule evaluator over a formula and its totals."""

    def __init__(self, thresholds: Optional[Thresholds] = None) -> None:
        self._thresholds = thresholds or Thresholds()

    @property
    def thresholds(self) -> Thresholds:
        return self._thresholds

    def analyze(self, formula: Formula) -> FormulaAnalysis:
        totals = calculate_totals(formula)
        return FormulaAnalysis(
            totals=totals,
            findings=tuple(self._evaluate(formula, totals)),
        )

    def validate(self, formula: Formula) -> list[Finding]:
        """Return the ordered findings for formula."""
        return self._evaluate(formula, calculate_totals(formula))

    def summarize(self, findings: Iterable[Finding]) -> ValidationSummary:
        counts = {severity: 0 for severity in Severity}
        for finding in findings:
            counts[finding.severity] += 1
        return ValidationSummary(
            error_count=counts[Severity.ERROR],
            warning_count=counts[Severity.WARNING],
            info_count=counts[Severity.INFO],
        )

    def _evaluate(self, formula: Formula, totals: FormulaTotals) -> list[Finding]:
        findings = self._critical_checks(formula, totals)
        if any(f.severity is Severity.ERROR for f in findings):
            return findings

        findings.extend(self._hydration_checks(totals.hydration))
        findings.extend(self._salt_checks(totals.salt_percentage))
        findings.extend(self._prefermented_flour_checks(totals.prefermented_flour_percentage))
        findings.extend(self._yeast_checks(formula, totals))
        for preferment in formula.preferments:
            findings.extend(self._preferment_checks(preferment))
        for soaker in formula.soakers:
            findings.extend(self._soaker_checks(soaker))
        findings.extend(self._proportion_checks(formula, totals))
        return findings

    # ------------------------------------------------------------------
    # Critical requirements
    # ------------------------------------------------------------------

    def _critical_checks(self, formula: Formula, totals: FormulaTotals) -> list[Finding]:
        findings: list[Finding] = []
        if not is_significant(totals.flour):
            findings.append(
                Finding(Severity.ERROR, "Flour", "Formula must contain flour", totals.flour)
            )
        if not is_significant(totals.water):
            findings.append(
                Finding(Severity.ERROR, "Water", "Formula must contain water", totals.water)
            )

        has_yeast = is_significant(formula.final_mix.yeast or Decimal("0")) or any(
            is_significant(p.yeast or Decimal("0")) for p in formula.preferments
        )
        if not has_yeast and not formula.has_starter:
            findings.append(
                Finding(Severity.WARNING, "Leavening", "No yeast or sourdough starter detected")
            )
        return findings

    # ------------------------------------------------------------------
    # Formula-wide bands
    # ------------------------------------------------------------------

    def _hydration_checks(self, hydration: Decimal) -> list[Finding]:
        t = self._thresholds
        if hydration < t.hydration_error_low:
            return [
                Finding(
                    Severity.ERROR,
                    "Hydration",
                    "Extremely low hydration - check water amounts",
                    hydration,
                )
            ]
        if hydration < t.hydration_warning_low:
            return [
                Finding(
                    Severity.WARNING,
                    "Hydration",
                    "Very dry dough (bagel/pretzel range)",
                    hydration,
                )
            ]
        if hydration >= t.hydration_error_high:
            return [
                Finding(
                    Severity.ERROR,
                    "Hydration",
                    "Extremely high hydration - check calculations",
                    hydration,
                )
            ]
        if hydration >= t.hydration_warning_high:
            return [
                Finding(
                    Severity.WARNING,
                    "Hydration",
                    "High hydration (very wet dough)",
                    hydration,
                )
            ]
        return []

    def _salt_checks(self, salt_percentage: Decimal) -> list[Finding]:
        t = self._thresholds
        if salt_percentage == 0:
            return [Finding(Severity.ERROR, "Salt", "No salt in formula", salt_percentage)]
        if salt_percentage < t.salt_warning_low:
            return [
                Finding(
                    Severity.WARNING,
                    "Salt",
                    "Very low salt (may affect flavor and fermentation)",
                    salt_percentage,
                )
            ]
        if salt_percentage < t.salt_info_low:
            return [Finding(Severity.INFO, "Salt", "Low salt content", salt_percentage)]
        if salt_percentage >= t.salt_warning_high:
            return [
                Finding(
                    Severity.WARNING,
                    "Salt",
                    "Very high salt (may inhibit fermentation)",
                    salt_percentage,
                )
            ]
        if salt_percentage >= t.salt_info_high:
            return [Finding(Severity.INFO, "Salt", "High salt content", salt_percentage)]
        return []

    def _prefermented_flour_checks(self, percentage: Decimal) -> list[Finding]:
        t = self._thresholds
        if percentage >= t.prefermented_flour_warning:
            return [
                Finding(
                    Severity.WARNING,
                    "Preferment",
                    "Very high prefermented flour (may overferment)",
                    percentage,
                )
            ]
        if percentage >= t.prefermented_flour_info:
            return [
                Finding(
                    Severity.INFO,
                    "Preferment",
                    "High prefermented flour percentage",
                    percentage,
                )
            ]
        return []

    def _yeast_checks(self, formula: Formula, totals: FormulaTotals) -> list[Finding]:
        t = self._thresholds
        yeast_percentage = totals.yeast_percentage
        if yeast_percentage >= t.yeast_warning_high:
            return [
                Finding(
                    Severity.WARNING,
                    "Yeast",
                    "High yeast content (may ferment too quickly)",
                    yeast_percentage,
                )
            ]
        if yeast_percentage < t.yeast_info_low and not formula.has_starter:
            return [
                Finding(
                    Severity.INFO,
                    "Yeast",
                    "Low yeast content (long fermentation expected)",
                    yeast_percentage,
                )
            ]
        return []

    # ------------------------------------------------------------------
    # Components
    # ------------------------------------------------------------------

    def _preferment_checks(self, preferment: Preferment) -> list[Finding]:
        t = self._thresholds
        findings: list[Finding] = []
        name = preferment.display_name
        hydration = preferment.hydration

        if preferment.kind is PrefermentKind.POOLISH:
            if abs(hydration - t.poolish_target_hydration) > t.poolish_hydration_tolerance:
                findings.append(
                    Finding(
                        Severity.INFO,
                        "Preferment",
                        f"{name}: Poolish typically has 100% hydration",
                        hydration,
                    )
                )
        elif preferment.kind is PrefermentKind.BIGA:
            if hydration < t.biga_hydration_min or hydration > t.biga_hydration_max:
                findings.append(
                    Finding(
                        Severity.INFO,
                        "Preferment",
                        f"{name}: Biga typically has 45-65% hydration",
                        hydration,
                    )
                )

        if preferment.build_hours < t.build_hours_short:
            findings.append(
                Finding(
                    Severity.WARNING,
                    "Timing",
                    f"{name}: Very short fermentation time",
                    preferment.build_hours,
                )
            )
        elif preferment.build_hours > t.build_hours_long:
            findings.append(
                Finding(
                    Severity.INFO,
                    "Timing",
                    f"{name}: Long fermentation time",
                    preferment.build_hours,
                )
            )
        return findings

    def _soaker_checks(self, soaker: Soaker) -> list[Finding]:
        t = self._thresholds
        findings: list[Finding] = []
        name = soaker.display_name
        hydration = soaker.hydration

        if hydration < t.soaker_hydration_low:
            findings.append(
                Finding(
                    Severity.WARNING,
                    "Soaker",
                    f"{name}: Low hydration may not fully soften grains",
                    hydration,
                )
            )
        elif hydration > t.soaker_hydration_high:
            findings.append(
                Finding(Severity.INFO, "Soaker", f"{name}: High hydration", hydration)
            )

        if soaker.soak_hours < t.soak_hours_short and not soaker.boiling_water:
            findings.append(
                Finding(
                    Severity.WARNING,
                    "Timing",
                    f"{name}: Short soak time without boiling water",
                    soaker.soak_hours,
                )
            )
        return findings

    def _proportion_checks(self, formula: Formula, totals: FormulaTotals) -> list[Finding]:
        t = self._thresholds
        findings: list[Finding] = []
        flour = totals.flour
        final_mix = formula.final_mix

        inclusion_percentage = percentage_of_flour(final_mix.inclusion_weight, flour)
        if inclusion_percentage > t.inclusion_warning:
            findings.append(
                Finding(
                    Severity.WARNING,
                    "Inclusions",
                    "High inclusion percentage may affect dough structure",
                    inclusion_percentage,
                )
            )

        enrichment_percentage = percentage_of_flour(final_mix.enrichment_weight, flour)
        if enrichment_percentage > t.enrichment_info:
            findings.append(
                Finding(
                    Severity.INFO,
                    "Enrichments",
                    "Enriched dough detected",
                    enrichment_percentage,
                )
            )

        whole_grain = sum(
            (f.weight for f in final_mix.flours if f.flour_type.is_whole_grain),
            Decimal("0"),
        )
        whole_grain_percentage = percentage_of_flour(whole_grain, flour)
        if whole_grain_percentage > t.whole_grain_info:
            findings.append(
                Finding(
                    Severity.INFO,
                    "Flour",
                    "High whole grain content",
                    whole_grain_percentage,
                )
            )
        return findings
