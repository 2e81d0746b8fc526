"""Formula scaling service.

Rescales a formula by a single multiplicative factor derived from a target
yield, a target weight for one ingredient, or an actually-measured weight.
Every operation returns a new Formula; the input is never modified.
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Dict, Mapping, Optional

from config.constants import (
    BAKING_HOURS,
    BULK_FERMENTATION_HOURS,
    DIVIDE_AND_SHAPE_HOURS,
    FINAL_PROOF_HOURS,
    GRAMS_PER_KG,
    MIXING_HOURS_PER_BATCH,
)
from domain.ingredient_identifier import (
    EnrichmentWeight,
    FinalFlour,
    FinalSalt,
    FinalWater,
    FinalYeast,
    InclusionWeight,
    IngredientIdentifier,
    PrefermentFlour,
    PrefermentTotal,
    PrefermentWater,
    SoakerTotal,
)
from domain.models import Formula, FormulaYield
from domain.services.totals import is_significant, total_flour, total_weight

ZERO = Decimal("0")
ONE = Decimal("1")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def apply_factor(formula: Formula, factor: Decimal) -> Formula:
    """Multiply every weight-bearing leaf of the formula by factor.

    Ratios (starter hydration), names, kinds, stages, hours and temperatures
    are left untouched. Version and timestamps are the caller's concern.
    """
    return replace(
        formula,
        final_mix=formula.final_mix.scale(factor),
        preferments=tuple(p.scale(factor) for p in formula.preferments),
        soakers=tuple(s.scale(factor) for s in formula.soakers),
    )


def _weight_or_zero(item: Optional[Any], attribute: str = "weight") -> Decimal:
    return getattr(item, attribute) if item is not None else ZERO


_WEIGHT_RESOLVERS: Dict[type, Callable[[Any, Formula], Decimal]] = {
    FinalFlour: lambda i, f: _weight_or_zero(f.find_flour(i.flour_id)),
    FinalWater: lambda i, f: f.final_mix.water,
    FinalSalt: lambda i, f: f.final_mix.salt,
    FinalYeast: lambda i, f: f.final_mix.yeast or ZERO,
    PrefermentTotal: lambda i, f: _weight_or_zero(
        f.find_preferment(i.preferment_id), "total_weight"
    ),
    PrefermentFlour: lambda i, f: _weight_or_zero(
        f.find_preferment(i.preferment_id), "flour_weight"
    ),
    PrefermentWater: lambda i, f: _weight_or_zero(
        f.find_preferment(i.preferment_id), "water_weight"
    ),
    SoakerTotal: lambda i, f: _weight_or_zero(f.find_soaker(i.soaker_id), "total_weight"),
    InclusionWeight: lambda i, f: _weight_or_zero(f.find_inclusion(i.inclusion_id)),
    EnrichmentWeight: lambda i, f: _weight_or_zero(f.find_enrichment(i.enrichment_id)),
}


def resolve_weight(identifier: IngredientIdentifier, formula: Formula) -> Decimal:
    """Current weight of the referenced quantity.

    Returns 0 for an id that no longer resolves, so a stale reference turns
    the dependent scaling operation into a no-op.
    """
    resolver = _WEIGHT_RESOLVERS.get(type(identifier))
    if resolver is None:
        raise TypeError(f"Unsupported ingredient identifier: {identifier!r}")
    return resolver(identifier, formula)


@dataclass(frozen=True)
class MisweighReference:
    """What was expected versus what actually went into the bowl."""

    identifier: IngredientIdentifier
    expected_weight: Decimal
    actual_weight: Decimal

    @property
    def delta(self) -> Decimal:
        return self.actual_weight - self.expected_weight


@dataclass(frozen=True)
class MisweighCorrectionResult:
    corrected_formula: Formula
    applied_factor: Decimal
    reference: Optional[MisweighReference]


@dataclass(frozen=True)
class ProductionTimeline:
    """Production schedule in hours, relative to the start of mixing."""

    preferment_start: Decimal = ZERO  # negative: hours before mixing
    mixing_duration: Decimal = ZERO
    bulk_fermentation: Decimal = ZERO
    divide_and_shape: Decimal = ZERO
    final_proof: Decimal = ZERO
    baking: Decimal = ZERO

    @property
    def total_time(self) -> Decimal:
        return (
            abs(self.preferment_start)
            + self.mixing_duration
            + self.bulk_fermentation
            + self.divide_and_shape
            + self.final_proof
            + self.baking
        )


@dataclass(frozen=True)
class BatchProductionCard:
    formula: Formula
    batch_count: int
    pieces_per_batch: int
    weight_per_piece: Decimal
    timeline: ProductionTimeline

    @property
    def total_pieces(self) -> int:
        return self.pieces_per_batch * self.batch_count

    @property
    def batch_weight(self) -> Decimal:
        return self.pieces_per_batch * self.weight_per_piece

    @property
    def total_weight(self) -> Decimal:
        return self.total_pieces * self.weight_per_piece


class FormulaScalingService:
    """Service for formula scaling operations."""

    def __init__(self, clock: Callable[[], datetime] = _utc_now) -> None:
        self._clock = clock

    def scale_by_yield(
        self,
        formula: Formula,
        target_pieces: int,
        weight_per_piece: Decimal,
    ) -> Formula:
        """Scale the formula to produce target_pieces of weight_per_piece.

        Args:
            formula: The formula to scale (not modified)
            target_pieces: Desired piece count (at least 1)
            weight_per_piece: Desired weight of each piece in grams

        Returns:
            New formula whose yield is exactly the requested one, or the
            input itself when it has no significant weight.
        """
        requested = FormulaYield(pieces=target_pieces, weight_per_piece=weight_per_piece)
        current_weight = total_weight(formula)
        if not is_significant(current_weight):
            logging.debug("scale_by_yield skipped: formula %s has no weight", formula.id)
            return formula

        factor = requested.total_weight / current_weight
        logging.debug(
            "scale_by_yield formula=%s pieces=%s weight_per_piece=%s factor=%s",
            formula.id,
            requested.pieces,
            requested.weight_per_piece,
            factor,
        )
        scaled = replace(apply_factor(formula, factor), yield_=requested)
        return scaled.touch(self._clock())

    def scale_by_ingredient(
        self,
        formula: Formula,
        identifier: IngredientIdentifier,
        target_weight: Decimal,
    ) -> Formula:
        """Scale the whole formula so one ingredient weighs target_weight.

        Piece count is held; weight per piece follows the new total.
        """
        current_weight = resolve_weight(identifier, formula)
        if not is_significant(current_weight):
            logging.debug(
                "scale_by_ingredient skipped: %s resolves to no weight", identifier
            )
            return formula

        factor = max(ZERO, target_weight) / current_weight
        logging.debug("scale_by_ingredient %s factor=%s", identifier, factor)
        return self._rescale_holding_pieces(formula, factor)

    def correct_misweigh(
        self,
        formula: Formula,
        measured_weights: Mapping[IngredientIdentifier, Decimal],
    ) -> MisweighCorrectionResult:
        """Rebuild the formula around an actually-measured ingredient weight.

        Only the first observation drives the correction; every other
        ingredient is rescaled so baker's percentages are preserved.
        """
        if not measured_weights:
            return MisweighCorrectionResult(
                corrected_formula=formula,
                applied_factor=ONE,
                reference=None,
            )

        identifier, actual = next(iter(measured_weights.items()))
        expected = resolve_weight(identifier, formula)
        reference = MisweighReference(
            identifier=identifier,
            expected_weight=expected,
            actual_weight=actual,
        )
        if not is_significant(expected):
            logging.debug("correct_misweigh skipped: %s resolves to no weight", identifier)
            return MisweighCorrectionResult(
                corrected_formula=formula,
                applied_factor=ONE,
                reference=reference,
            )

        factor = max(ZERO, actual) / expected
        logging.debug(
            "correct_misweigh %s expected=%s actual=%s factor=%s",
            identifier,
            expected,
            actual,
            factor,
        )
        return MisweighCorrectionResult(
            corrected_formula=self._rescale_holding_pieces(formula, factor),
            applied_factor=factor,
            reference=reference,
        )

    def scale_by_available_flour(
        self,
        formula: Formula,
        available_flour: Decimal,
    ) -> Formula:
        """Scale so the formula uses exactly the flour on hand."""
        current_flour = total_flour(formula)
        if not is_significant(current_flour):
            logging.debug("scale_by_available_flour skipped: formula has no flour")
            return formula

        factor = max(ZERO, available_flour) / current_flour
        return self._rescale_holding_pieces(formula, factor)

    def scale_to_mixer_capacity(
        self,
        formula: Formula,
        mixer_capacity_kg: Decimal,
    ) -> Formula:
        """Reduce the piece count until the dough fits the mixer.

        Formulas that already fit are returned unchanged.
        """
        capacity_g = mixer_capacity_kg * GRAMS_PER_KG
        current_weight = total_weight(formula)
        if not is_significant(current_weight) or current_weight <= capacity_g:
            return formula

        factor = capacity_g / current_weight
        pieces = max(1, int(formula.yield_.pieces * factor))
        logging.debug(
            "scale_to_mixer_capacity weight=%s capacity=%s pieces=%s",
            current_weight,
            capacity_g,
            pieces,
        )
        return self.scale_by_yield(formula, pieces, formula.yield_.weight_per_piece)

    def create_batch_production(
        self,
        formula: Formula,
        number_of_batches: int,
    ) -> BatchProductionCard:
        """Scale up for several batches and lay out a production timeline."""
        batches = max(1, number_of_batches)
        pieces_per_batch = formula.yield_.pieces
        weight_per_piece = formula.yield_.weight_per_piece
        batch_formula = self.scale_by_yield(
            formula,
            pieces_per_batch * batches,
            weight_per_piece,
        )
        return BatchProductionCard(
            formula=batch_formula,
            batch_count=batches,
            pieces_per_batch=pieces_per_batch,
            weight_per_piece=weight_per_piece,
            timeline=self._production_timeline(batch_formula, batches),
        )

    def _rescale_holding_pieces(self, formula: Formula, factor: Decimal) -> Formula:
        scaled = apply_factor(formula, factor)
        pieces = scaled.yield_.pieces
        new_yield = FormulaYield(
            pieces=pieces,
            weight_per_piece=total_weight(scaled) / pieces,
        )
        return replace(scaled, yield_=new_yield).touch(self._clock())

    def _production_timeline(self, formula: Formula, batches: int) -> ProductionTimeline:
        longest_build = max((p.build_hours for p in formula.preferments), default=ZERO)
        return ProductionTimeline(
            preferment_start=-longest_build,
            mixing_duration=MIXING_HOURS_PER_BATCH * batches,
            bulk_fermentation=BULK_FERMENTATION_HOURS,
            divide_and_shape=DIVIDE_AND_SHAPE_HOURS,
            final_proof=FINAL_PROOF_HOURS,
            baking=BAKING_HOURS,
        )
