"""Tests for formula totals."""

from decimal import Decimal
from typing import Callable

from domain.models import (
    FinalMix,
    Flour,
    FlourType,
    Formula,
    Grain,
    Preferment,
    Soaker,
    Starter,
)
from domain.services.totals import (
    calculate_totals,
    hydration,
    is_significant,
    prefermented_flour_percentage,
    salt_percentage,
    total_flour,
    total_salt,
    total_water,
    total_weight,
    total_yeast,
)


class TestScenarios:
    """Reference formulas with known totals."""

    def test_basic_levain_formula(self, basic_formula: Formula) -> None:
        assert total_flour(basic_formula) == Decimal("1000")
        assert total_water(basic_formula) == Decimal("600")
        assert hydration(basic_formula) == Decimal("60")
        assert prefermented_flour_percentage(basic_formula) == Decimal("20")
        assert salt_percentage(basic_formula) == Decimal("1.6")
        assert total_weight(basic_formula) == Decimal("1616")

    def test_soaker_adds_water_but_no_flour(
        self,
        make_formula: Callable[..., Formula],
    ) -> None:
        formula = make_formula(soakers=(Soaker(water=Decimal("50")),))

        assert total_water(formula) == Decimal("650")
        assert total_flour(formula) == Decimal("1000")

    def test_country_sourdough(self, country_sourdough: Formula) -> None:
        totals = calculate_totals(country_sourdough)

        assert totals.flour == Decimal("1000")
        assert totals.water == Decimal("790")
        assert totals.salt == Decimal("20")
        assert totals.weight == Decimal("2020")
        assert totals.prefermented_flour == Decimal("110")
        assert totals.hydration == Decimal("79")
        assert totals.salt_percentage == Decimal("2")


class TestFlourAccounting:
    def test_starter_flour_counts_and_grains_do_not(self) -> None:
        formula = Formula(
            preferments=(
                Preferment(
                    flour_weight=Decimal("100"),
                    water_weight=Decimal("60"),
                    starter=Starter(weight=Decimal("30"), hydration=Decimal("50")),
                ),
            ),
            soakers=(Soaker(grains=(Grain("Rye chops", Decimal("300")),), water=Decimal("300")),),
            final_mix=FinalMix(flours=(Flour(FlourType.RYE, Decimal("400")),)),
        )

        assert total_flour(formula) == Decimal("520")
        assert total_water(formula) == Decimal("370")

    def test_salt_ignores_preferments(self) -> None:
        formula = Formula(
            preferments=(Preferment(flour_weight=Decimal("100")),),
            soakers=(Soaker(water=Decimal("10"), salt=Decimal("3")),),
            final_mix=FinalMix(salt=Decimal("7")),
        )

        assert total_salt(formula) == Decimal("10")

    def test_yeast_from_final_mix_and_preferments(self) -> None:
        formula = Formula(
            preferments=(Preferment(flour_weight=Decimal("100"), yeast=Decimal("0.2")),),
            final_mix=FinalMix(yeast=Decimal("5")),
        )

        assert total_yeast(formula) == Decimal("5.2")


class TestZeroFlourGuard:
    def test_percentages_are_zero_without_flour(self) -> None:
        formula = Formula(final_mix=FinalMix(water=Decimal("500"), salt=Decimal("10")))

        assert hydration(formula) == 0
        assert salt_percentage(formula) == 0
        assert prefermented_flour_percentage(formula) == 0

    def test_noise_is_not_significant(self) -> None:
        assert not is_significant(Decimal("1e-20"))
        assert not is_significant(Decimal("0"))
        assert is_significant(Decimal("0.001"))
        assert is_significant(Decimal("-0.001"))

    def test_negative_weights_propagate(self) -> None:
        formula = Formula(
            final_mix=FinalMix(
                flours=(Flour(FlourType.BREAD, Decimal("100")),),
                water=Decimal("-10"),
            )
        )

        assert total_water(formula) == Decimal("-10")
        assert hydration(formula) == Decimal("-10")
