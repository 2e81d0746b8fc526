"""Shared fixtures: reference formulas used across unit and integration tests."""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable

import pytest

from domain.models import (
    Enrichment,
    EnrichmentKind,
    FinalMix,
    Flour,
    FlourType,
    Formula,
    FormulaYield,
    Grain,
    Inclusion,
    Preferment,
    PrefermentKind,
    Soaker,
    Starter,
)

FIXED_NOW = datetime(2024, 5, 1, 8, 30, tzinfo=timezone.utc)


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    """Clock that always returns the same instant."""
    return lambda: FIXED_NOW


@pytest.fixture
def make_formula() -> Callable[..., Formula]:
    """Factory for the basic levain formula (scenario A).

    800g bread flour, 400g water, 16g salt and a levain of 200g flour and
    200g water: 1000g total flour, 60% hydration, 20% prefermented flour.
    Keyword arguments override Formula fields.
    """

    def _make(**overrides) -> Formula:
        fields = dict(
            name="Basic Levain Loaf",
            created_date=FIXED_NOW,
            last_modified=FIXED_NOW,
            yield_=FormulaYield(pieces=2, weight_per_piece=Decimal("808")),
            preferments=(
                Preferment(
                    name="Levain",
                    kind=PrefermentKind.LEVAIN,
                    flour_weight=Decimal("200"),
                    water_weight=Decimal("200"),
                ),
            ),
            final_mix=FinalMix(
                flours=(Flour(flour_type=FlourType.BREAD, weight=Decimal("800")),),
                water=Decimal("400"),
                salt=Decimal("16"),
            ),
        )
        fields.update(overrides)
        return Formula(**fields)

    return _make


@pytest.fixture
def basic_formula(make_formula: Callable[..., Formula]) -> Formula:
    return make_formula()


@pytest.fixture
def country_sourdough() -> Formula:
    """A fuller formula: mixed flours, starter-built levain, soaker, extras."""
    return Formula(
        name="Country Sourdough",
        notes="Seeded country loaf",
        created_date=FIXED_NOW,
        last_modified=FIXED_NOW,
        yield_=FormulaYield(pieces=2, weight_per_piece=Decimal("900")),
        preferments=(
            Preferment(
                name="Levain",
                kind=PrefermentKind.LEVAIN,
                flour_weight=Decimal("100"),
                water_weight=Decimal("100"),
                starter=Starter(weight=Decimal("20"), hydration=Decimal("100")),
            ),
        ),
        soakers=(
            Soaker(
                name="Seed Soaker",
                grains=(
                    Grain(name="Flax", weight=Decimal("40")),
                    Grain(name="Sunflower", weight=Decimal("40")),
                ),
                water=Decimal("80"),
                soak_hours=Decimal("8"),
            ),
        ),
        final_mix=FinalMix(
            flours=(
                Flour(flour_type=FlourType.BREAD, weight=Decimal("700")),
                Flour(flour_type=FlourType.WHOLE_WHEAT, weight=Decimal("140")),
                Flour(flour_type=FlourType.BREAD, weight=Decimal("50")),
            ),
            water=Decimal("600"),
            salt=Decimal("20"),
            inclusions=(Inclusion(name="Walnuts", weight=Decimal("100")),),
            enrichments=(
                Enrichment(name="Olive Oil", weight=Decimal("30"), kind=EnrichmentKind.OIL),
            ),
        ),
    )
