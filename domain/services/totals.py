"""Formula totals.

Aggregates flour, water, salt, yeast and weight across the final mix,
preferments and soakers, and derives the baker's ratios from them.
Pure functions: no rounding, no side effects, O(n) in ingredient count.
"""

from dataclasses import dataclass
from decimal import Decimal

from config.constants import WEIGHT_EPSILON
from domain.models import Formula

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def is_significant(value: Decimal) -> bool:
    """True when value is distinguishable from floating-point noise."""
    return abs(value) > WEIGHT_EPSILON


def percentage_of_flour(weight: Decimal, flour: Decimal) -> Decimal:
    """Baker's percentage of weight against flour (0 without flour)."""
    if not is_significant(flour):
        return ZERO
    return weight / flour * HUNDRED


def total_flour(formula: Formula) -> Decimal:
    """Final-mix flour plus preferment flour, starters included.

    Soaker grains never count as flour.
    """
    return formula.final_mix.total_flour_weight + prefermented_flour(formula)


def prefermented_flour(formula: Formula) -> Decimal:
    return sum((p.total_flour for p in formula.preferments), ZERO)


def total_water(formula: Formula) -> Decimal:
    preferment_water = sum((p.total_water for p in formula.preferments), ZERO)
    soaker_water = sum((s.water for s in formula.soakers), ZERO)
    return formula.final_mix.water + preferment_water + soaker_water


def total_salt(formula: Formula) -> Decimal:
    """Final-mix and soaker salt; preferments carry no salt."""
    soaker_salt = sum((s.salt or ZERO for s in formula.soakers), ZERO)
    return formula.final_mix.salt + soaker_salt


def total_yeast(formula: Formula) -> Decimal:
    preferment_yeast = sum((p.yeast or ZERO for p in formula.preferments), ZERO)
    return (formula.final_mix.yeast or ZERO) + preferment_yeast


def total_weight(formula: Formula) -> Decimal:
    """Dough weight: final mix plus every preferment and soaker."""
    preferment_weight = sum((p.total_weight for p in formula.preferments), ZERO)
    soaker_weight = sum((s.total_weight for s in formula.soakers), ZERO)
    return formula.final_mix.total_weight + preferment_weight + soaker_weight


def hydration(formula: Formula) -> Decimal:
    return percentage_of_flour(total_water(formula), total_flour(formula))


def salt_percentage(formula: Formula) -> Decimal:
    return percentage_of_flour(total_salt(formula), total_flour(formula))


def yeast_percentage(formula: Formula) -> Decimal:
    return percentage_of_flour(total_yeast(formula), total_flour(formula))


def prefermented_flour_percentage(formula: Formula) -> Decimal:
    return percentage_of_flour(prefermented_flour(formula), total_flour(formula))


@dataclass(frozen=True)
class FormulaTotals:
    """Snapshot of every aggregate figure for one formula."""

    flour: Decimal
    water: Decimal
    salt: Decimal
    yeast: Decimal
    weight: Decimal
    prefermented_flour: Decimal

    @property
    def has_flour(self) -> bool:
        return is_significant(self.flour)

    @property
    def hydration(self) -> Decimal:
        return percentage_of_flour(self.water, self.flour)

    @property
    def salt_percentage(self) -> Decimal:
        return percentage_of_flour(self.salt, self.flour)

    @property
    def yeast_percentage(self) -> Decimal:
        return percentage_of_flour(self.yeast, self.flour)

    @property
    def prefermented_flour_percentage(self) -> Decimal:
        return percentage_of_flour(self.prefermented_flour, self.flour)


def calculate_totals(formula: Formula) -> FormulaTotals:
    """Compute all totals once so callers do not re-walk the formula."""
    return FormulaTotals(
        flour=total_flour(formula),
        water=total_water(formula),
        salt=total_salt(formula),
        yeast=total_yeast(formula),
        weight=total_weight(formula),
        prefermented_flour=prefermented_flour(formula),
    )
