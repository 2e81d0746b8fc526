"""Baker's percentage table.

Builds the categorized weight / percentage breakdown of a formula. Every
percentage, including those inside preferment and soaker breakdowns, is taken
against the formula-wide total flour.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from uuid import UUID

from domain.models import FinalMix, Formula, Preferment, Soaker
from domain.services.totals import (
    FormulaTotals,
    calculate_totals,
    is_significant,
    percentage_of_flour,
)

ZERO = Decimal("0")


@dataclass(frozen=True)
class BakersPercentageRow:
    """A single ingredient line."""

    ingredient: str
    weight: Decimal
    percentage: Decimal
    category: str


@dataclass(frozen=True)
class ComponentBreakdown:
    """Rows of one preferment or soaker."""

    component_id: UUID
    name: str
    rows: tuple[BakersPercentageRow, ...] = field(default_factory=tuple)

    @property
    def total_weight(self) -> Decimal:
        return sum((row.weight for row in self.rows), ZERO)

    @property
    def total_percentage(self) -> Decimal:
        return sum((row.percentage for row in self.rows), ZERO)


@dataclass(frozen=True)
class BakersPercentageTable:
    total_formula: tuple[BakersPercentageRow, ...] = field(default_factory=tuple)
    final_mix: tuple[BakersPercentageRow, ...] = field(default_factory=tuple)
    preferments: tuple[ComponentBreakdown, ...] = field(default_factory=tuple)
    soakers: tuple[ComponentBreakdown, ...] = field(default_factory=tuple)

    def is_empty(self) -> bool:
        return not (self.total_formula or self.final_mix or self.preferments or self.soakers)

    def find_row(self, ingredient: str) -> BakersPercentageRow | None:
        """First total-formula row with the given label."""
        for row in self.total_formula:
            if row.ingredient == ingredient:
                return row
        return None


class BakersPercentageCalculator:
    """Build baker's percentage tables for formulas."""

    def build_table(self, formula: Formula) -> BakersPercentageTable:
        """Build the full table.

        Args:
            formula: The formula to tabulate

        Returns:
            Table grouped as total formula, final mix, per-preferment and
            per-soaker rows. Empty when the formula has no flour.
        """
        totals = calculate_totals(formula)
        if not totals.has_flour:
            return BakersPercentageTable()

        flour = totals.flour
        return BakersPercentageTable(
            total_formula=tuple(self._total_formula_rows(formula, totals)),
            final_mix=tuple(self._final_mix_rows(formula.final_mix, flour)),
            preferments=tuple(
                self._preferment_breakdown(preferment, flour)
                for preferment in formula.preferments
            ),
            soakers=tuple(
                self._soaker_breakdown(soaker, flour) for soaker in formula.soakers
            ),
        )

    def _total_formula_rows(
        self,
        formula: Formula,
        totals: FormulaTotals,
    ) -> list[BakersPercentageRow]:
        flour = totals.flour
        rows: list[BakersPercentageRow] = []

        # One row per flour type, in order of first appearance
        by_type: dict[str, Decimal] = {}
        for item in formula.final_mix.flours:
            label = item.flour_type.value
            by_type[label] = by_type.get(label, ZERO) + item.weight
        for label, weight in by_type.items():
            rows.append(_row(label, weight, flour, "Flour"))

        rows.append(
            BakersPercentageRow(
                ingredient="Water",
                weight=totals.water,
                percentage=totals.hydration,
                category="Liquid",
            )
        )

        if totals.salt > 0:
            rows.append(
                BakersPercentageRow(
                    ingredient="Salt",
                    weight=totals.salt,
                    percentage=totals.salt_percentage,
                    category="Salt",
                )
            )

        if totals.yeast > 0:
            rows.append(_row("Yeast", totals.yeast, flour, "Yeast"))

        for preferment in formula.preferments:
            rows.append(
                _row(preferment.display_name, preferment.total_weight, flour, "Preferment")
            )

        for soaker in formula.soakers:
            rows.append(_row(soaker.display_name, soaker.total_weight, flour, "Soaker"))

        for inclusion in formula.final_mix.inclusions:
            rows.append(_row(inclusion.name, inclusion.weight, flour, "Inclusion"))

        for enrichment in formula.final_mix.enrichments:
            rows.append(
                _row(enrichment.name, enrichment.weight, flour, enrichment.kind.category)
            )

        return rows

    def _final_mix_rows(
        self,
        final_mix: FinalMix,
        flour: Decimal,
    ) -> list[BakersPercentageRow]:
        rows = [
            _row(item.flour_type.value, item.weight, flour, "Flour")
            for item in final_mix.flours
        ]
        if is_significant(final_mix.water):
            rows.append(_row("Water", final_mix.water, flour, "Liquid"))
        if is_significant(final_mix.salt):
            rows.append(_row("Salt", final_mix.salt, flour, "Salt"))
        if final_mix.yeast is not None and is_significant(final_mix.yeast):
            rows.append(_row("Yeast", final_mix.yeast, flour, "Yeast"))
        return rows

    def _preferment_breakdown(
        self,
        preferment: Preferment,
        flour: Decimal,
    ) -> ComponentBreakdown:
        rows = [
            _row("Flour", preferment.flour_weight, flour, "Flour"),
            _row("Water", preferment.water_weight, flour, "Liquid"),
        ]
        if preferment.starter is not None:
            starter = preferment.starter
            label = f"Starter ({starter.hydration.normalize():f}% hydration)"
            rows.append(_row(label, starter.weight, flour, "Starter"))
        if preferment.yeast is not None and is_significant(preferment.yeast):
            rows.append(_row("Yeast", preferment.yeast, flour, "Yeast"))
        return ComponentBreakdown(
            component_id=preferment.id,
            name=preferment.display_name,
            rows=tuple(rows),
        )

    def _soaker_breakdown(self, soaker: Soaker, flour: Decimal) -> ComponentBreakdown:
        rows = [_row(grain.name, grain.weight, flour, "Grain") for grain in soaker.grains]
        if is_significant(soaker.water):
            rows.append(_row("Water", soaker.water, flour, "Liquid"))
        if soaker.salt is not None and is_significant(soaker.salt):
            rows.append(_row("Salt", soaker.salt, flour, "Salt"))
        return ComponentBreakdown(
            component_id=soaker.id,
            name=soaker.display_name,
            rows=tuple(rows),
        )


def _row(ingredient: str, weight: Decimal, flour: Decimal, category: str) -> BakersPercentageRow:
    return BakersPercentageRow(
        ingredient=ingredient,
        weight=weight,
        percentage=percentage_of_flour(weight, flour),
        category=category,
    )


def build_table(formula: Formula) -> BakersPercentageTable:
    """Build a baker's percentage table with the default calculator."""
    return BakersPercentageCalculator().build_table(formula)
