"""Tests for FormulaScalingService."""

from dataclasses import fields
from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from domain.ingredient_identifier import (
    IDENTIFIER_TYPES,
    EnrichmentWeight,
    FinalFlour,
    FinalSalt,
    FinalWater,
    FinalYeast,
    InclusionWeight,
    PrefermentFlour,
    PrefermentTotal,
    PrefermentWater,
    SoakerTotal,
)
from domain.models import Formula
from domain.services.scaling_service import (
    FormulaScalingService,
    apply_factor,
    resolve_weight,
)
from domain.services.totals import hydration, total_flour, total_weight

SCALED_AT = datetime(2025, 2, 3, 4, 5, tzinfo=timezone.utc)


@pytest.fixture
def service() -> FormulaScalingService:
    """Create FormulaScalingService with a fixed clock."""
    return FormulaScalingService(clock=lambda: SCALED_AT)


class TestApplyFactor:
    def test_scales_every_weight(self, country_sourdough: Formula) -> None:
        scaled = apply_factor(country_sourdough, Decimal("2"))

        assert total_weight(scaled) == Decimal("4040")
        assert scaled.preferments[0].starter.weight == Decimal("40")
        assert scaled.preferments[0].starter.hydration == Decimal("100")
        assert scaled.soakers[0].grains[0].weight == Decimal("80")
        assert scaled.final_mix.inclusions[0].weight == Decimal("200")
        assert scaled.final_mix.enrichments[0].weight == Decimal("60")

    def test_keeps_non_weight_fields(self, country_sourdough: Formula) -> None:
        scaled = apply_factor(country_sourdough, Decimal("3"))

        preferment = scaled.preferments[0]
        original = country_sourdough.preferments[0]
        assert preferment.id == original.id
        assert preferment.build_hours == original.build_hours
        assert preferment.temperature == original.temperature
        assert scaled.soakers[0].soak_hours == country_sourdough.soakers[0].soak_hours
        assert scaled.version == country_sourdough.version


class TestResolveWeight:
    def test_resolves_every_identifier(self, country_sourdough: Formula) -> None:
        mix = country_sourdough.final_mix
        preferment = country_sourdough.preferments[0]
        soaker = country_sourdough.soakers[0]

        expected = [
            (FinalFlour(mix.flours[1].id), Decimal("140")),
            (FinalWater(), Decimal("600")),
            (FinalSalt(), Decimal("20")),
            (FinalYeast(), Decimal("0")),
            (PrefermentTotal(preferment.id), Decimal("220")),
            (PrefermentFlour(preferment.id), Decimal("100")),
            (PrefermentWater(preferment.id), Decimal("100")),
            (SoakerTotal(soaker.id), Decimal("160")),
            (InclusionWeight(mix.inclusions[0].id), Decimal("100")),
            (EnrichmentWeight(mix.enrichments[0].id), Decimal("30")),
        ]
        for identifier, weight in expected:
            assert resolve_weight(identifier, country_sourdough) == weight, identifier

    def test_stale_id_resolves_to_zero(self, basic_formula: Formula) -> None:
        assert resolve_weight(FinalFlour(uuid4()), basic_formula) == 0
        assert resolve_weight(SoakerTotal(uuid4()), basic_formula) == 0

    @pytest.mark.parametrize("identifier_type", IDENTIFIER_TYPES)
    def test_every_identifier_type_resolves(
        self,
        identifier_type: type,
        basic_formula: Formula,
    ) -> None:
        identifier = identifier_type(*(uuid4() for _ in fields(identifier_type)))

        assert resolve_weight(identifier, basic_formula) >= 0

    def test_rejects_non_identifier(self, basic_formula: Formula) -> None:
        with pytest.raises(TypeError, match="Unsupported ingredient identifier"):
            resolve_weight("water", basic_formula)  # type: ignore[arg-type]


class TestScaleByYield:
    def test_four_pieces_of_700(
        self,
        service: FormulaScalingService,
        basic_formula: Formula,
    ) -> None:
        scaled = service.scale_by_yield(basic_formula, 4, Decimal("700"))

        assert scaled.yield_.pieces == 4
        assert scaled.yield_.weight_per_piece == Decimal("700")
        assert scaled.yield_.total_weight == Decimal("2800")
        assert total_weight(scaled) == pytest.approx(Decimal("2800"))
        assert hydration(scaled) == pytest.approx(Decimal("60"))

    def test_bumps_version_and_timestamp(
        self,
        service: FormulaScalingService,
        basic_formula: Formula,
    ) -> None:
        scaled = service.scale_by_yield(basic_formula, 4, Decimal("700"))

        assert scaled.version == basic_formula.version + 1
        assert scaled.last_modified == SCALED_AT
        assert scaled.created_date == basic_formula.created_date

    def test_does_not_mutate_input(
        self,
        service: FormulaScalingService,
        basic_formula: Formula,
    ) -> None:
        service.scale_by_yield(basic_formula, 10, Decimal("1000"))

        assert basic_formula.final_mix.flours[0].weight == Decimal("800")
        assert basic_formula.preferments[0].flour_weight == Decimal("200")
        assert basic_formula.version == 1

    def test_empty_formula_is_returned_unchanged(self, service: FormulaScalingService) -> None:
        formula = Formula(name="Empty")

        assert service.scale_by_yield(formula, 4, Decimal("700")) is formula


class TestScaleByIngredient:
    def test_final_flour_to_1200(
        self,
        service: FormulaScalingService,
        basic_formula: Formula,
    ) -> None:
        flour_id = basic_formula.final_mix.flours[0].id

        scaled = service.scale_by_ingredient(basic_formula, FinalFlour(flour_id), Decimal("1200"))

        assert scaled.final_mix.flours[0].weight == Decimal("1200")
        assert hydration(scaled) == Decimal("60")
        assert scaled.yield_.pieces == basic_formula.yield_.pieces
        assert scaled.yield_.weight_per_piece == Decimal("1212")
        assert scaled.version == 2

    def test_stale_identifier_is_no_op(
        self,
        service: FormulaScalingService,
        basic_formula: Formula,
    ) -> None:
        result = service.scale_by_ingredient(basic_formula, FinalFlour(uuid4()), Decimal("500"))

        assert result is basic_formula

    def test_zero_weight_ingredient_is_no_op(
        self,
        service: FormulaScalingService,
        basic_formula: Formula,
    ) -> None:
        assert service.scale_by_ingredient(basic_formula, FinalYeast(), Decimal("5")) is basic_formula


class TestCorrectMisweigh:
    def test_closes_the_loop(self, service: FormulaScalingService, basic_formula: Formula) -> None:
        result = service.correct_misweigh(basic_formula, {FinalWater(): Decimal("440")})

        corrected = result.corrected_formula
        assert result.applied_factor == Decimal("1.1")
        assert resolve_weight(FinalWater(), corrected) == Decimal("440")
        assert hydration(corrected) == pytest.approx(hydration(basic_formula))
        assert total_flour(corrected) == Decimal("1100")

    def test_reference_records_delta(
        self,
        service: FormulaScalingService,
        basic_formula: Formula,
    ) -> None:
        preferment_id = basic_formula.preferments[0].id

        result = service.correct_misweigh(
            basic_formula, {PrefermentFlour(preferment_id): Decimal("180")}
        )

        reference = result.reference
        assert reference is not None
        assert reference.identifier == PrefermentFlour(preferment_id)
        assert reference.expected_weight == Decimal("200")
        assert reference.actual_weight == Decimal("180")
        assert reference.delta == Decimal("-20")

    def test_empty_observations(self, service: FormulaScalingService, basic_formula: Formula) -> None:
        result = service.correct_misweigh(basic_formula, {})

        assert result.corrected_formula is basic_formula
        assert result.applied_factor == 1
        assert result.reference is None

    def test_stale_identifier_keeps_formula(
        self,
        service: FormulaScalingService,
        basic_formula: Formula,
    ) -> None:
        result = service.correct_misweigh(basic_formula, {FinalFlour(uuid4()): Decimal("900")})

        assert result.corrected_formula is basic_formula
        assert result.applied_factor == 1
        assert result.reference is not None
        assert result.reference.expected_weight == 0


class TestProductionScaling:
    def test_scale_by_available_flour(
        self,
        service: FormulaScalingService,
        basic_formula: Formula,
    ) -> None:
        scaled = service.scale_by_available_flour(basic_formula, Decimal("500"))

        assert total_flour(scaled) == Decimal("500")
        assert scaled.yield_.pieces == 2
        assert scaled.yield_.weight_per_piece == Decimal("404")

    def test_mixer_capacity_reduces_pieces(
        self,
        service: FormulaScalingService,
        basic_formula: Formula,
    ) -> None:
        scaled = service.scale_to_mixer_capacity(basic_formula, Decimal("1"))

        assert scaled.yield_.pieces == 1
        assert scaled.yield_.weight_per_piece == Decimal("808")
        assert total_weight(scaled) == pytest.approx(Decimal("808"))

    def test_mixer_capacity_fits(
        self,
        service: FormulaScalingService,
        basic_formula: Formula,
    ) -> None:
        assert service.scale_to_mixer_capacity(basic_formula, Decimal("2")) is basic_formula

    def test_batch_production_card(
        self,
        service: FormulaScalingService,
        basic_formula: Formula,
    ) -> None:
        card = service.create_batch_production(basic_formula, 3)

        assert card.batch_count == 3
        assert card.total_pieces == 6
        assert card.batch_weight == Decimal("1616")
        assert card.total_weight == Decimal("4848")
        assert total_weight(card.formula) == Decimal("4848")
        assert card.timeline.preferment_start == Decimal("-12")
        assert card.timeline.mixing_duration == Decimal("0.75")
        assert card.timeline.total_time == Decimal("18.5")
