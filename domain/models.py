"""Domain models.

Core business entities that describe a bread formula and its components.
These models are framework-agnostic value objects: every entity is frozen
and collections are tuples, so a Formula is replaced rather than patched.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from config.constants import (
    DEFAULT_BUILD_HOURS,
    DEFAULT_FINAL_MIX_TEMPERATURE,
    DEFAULT_PIECE_WEIGHT_G,
    DEFAULT_SOAK_HOURS,
    DEFAULT_STARTER_HYDRATION,
    DEFAULT_TEMPERATURE,
    WEIGHT_EPSILON,
)

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _ratio_percent(part: Decimal, base: Decimal) -> Decimal:
    if abs(base) <= WEIGHT_EPSILON:
        return ZERO
    return part / base * HUNDRED


# ============================================================================
# Final mix
# ============================================================================


class FlourType(str, Enum):
    BREAD = "Bread Flour"
    ALL_PURPOSE = "All-Purpose Flour"
    WHOLE_WHEAT = "Whole Wheat"
    RYE = "Rye"
    SPELT = "Spelt"
    EINKORN = "Einkorn"
    KAMUT = "Kamut"
    DURUM = "Durum"
    SEMOLINA = "Semolina"
    CAKE = "Cake Flour"
    PASTRY = "Pastry Flour"
    OTHER = "Other"

    @property
    def protein_content(self) -> Decimal:
        """Typical protein percentage for the flour type."""
        return _FLOUR_PROTEIN[self]

    @property
    def is_whole_grain(self) -> bool:
        return self in _WHOLE_GRAIN_FLOURS


_FLOUR_PROTEIN = {
    FlourType.BREAD: Decimal("12.5"),
    FlourType.ALL_PURPOSE: Decimal("10.5"),
    FlourType.WHOLE_WHEAT: Decimal("14.0"),
    FlourType.RYE: Decimal("9.0"),
    FlourType.SPELT: Decimal("12.0"),
    FlourType.EINKORN: Decimal("18.0"),
    FlourType.KAMUT: Decimal("14.0"),
    FlourType.DURUM: Decimal("13.0"),
    FlourType.SEMOLINA: Decimal("12.5"),
    FlourType.CAKE: Decimal("8.0"),
    FlourType.PASTRY: Decimal("9.0"),
    FlourType.OTHER: Decimal("11.0"),
}

_WHOLE_GRAIN_FLOURS = frozenset(
    {
        FlourType.WHOLE_WHEAT,
        FlourType.RYE,
        FlourType.SPELT,
        FlourType.EINKORN,
        FlourType.KAMUT,
    }
)


@dataclass(frozen=True)
class Flour:
    """A single flour item of the final mix."""

    flour_type: FlourType
    weight: Decimal
    id: UUID = field(default_factory=uuid4)

    def scale(self, factor: Decimal) -> "Flour":
        return replace(self, weight=self.weight * factor)


class AdditionStage(str, Enum):
    MIXING = "During Mixing"
    FOLDING = "During Folding"
    SHAPING = "During Shaping"
    TOPPING = "As Topping"


@dataclass(frozen=True)
class Inclusion:
    """Nuts, seeds, dried fruit and similar add-ins."""

    name: str
    weight: Decimal
    addition_stage: AdditionStage = AdditionStage.MIXING
    id: UUID = field(default_factory=uuid4)

    def scale(self, factor: Decimal) -> "Inclusion":
        return replace(self, weight=self.weight * factor)


class EnrichmentKind(str, Enum):
    BUTTER = "Butter"
    OIL = "Oil"
    SUGAR = "Sugar"
    HONEY = "Honey"
    MILK = "Milk"
    EGG = "Egg"
    OTHER = "Other"

    @property
    def category(self) -> str:
        """Table category: Fat, Sweetener, Dairy, Egg or Other."""
        return _ENRICHMENT_CATEGORY[self]


_ENRICHMENT_CATEGORY = {
    EnrichmentKind.BUTTER: "Fat",
    EnrichmentKind.OIL: "Fat",
    EnrichmentKind.SUGAR: "Sweetener",
    EnrichmentKind.HONEY: "Sweetener",
    EnrichmentKind.MILK: "Dairy",
    EnrichmentKind.EGG: "Egg",
    EnrichmentKind.OTHER: "Other",
}


@dataclass(frozen=True)
class Enrichment:
    """Fats, sweeteners, dairy and eggs added at final mix."""

    name: str
    weight: Decimal
    kind: EnrichmentKind = EnrichmentKind.OTHER
    id: UUID = field(default_factory=uuid4)

    def scale(self, factor: Decimal) -> "Enrichment":
        return replace(self, weight=self.weight * factor)


class MixMethod(str, Enum):
    STANDARD = "Standard"
    AUTOLYSE = "Autolyse"
    NO_KNEAD = "No-Knead"
    INTENSIVE = "Intensive Mix"
    GENTLE = "Gentle Mix"


@dataclass(frozen=True)
class FinalMix:
    """Ingredients added at final mixing, excluding preferments and soakers."""

    flours: tuple[Flour, ...] = field(default_factory=tuple)
    water: Decimal = ZERO
    salt: Decimal = ZERO
    yeast: Optional[Decimal] = None
    inclusions: tuple[Inclusion, ...] = field(default_factory=tuple)
    enrichments: tuple[Enrichment, ...] = field(default_factory=tuple)
    mix_method: MixMethod = MixMethod.STANDARD
    target_temperature: Decimal = DEFAULT_FINAL_MIX_TEMPERATURE

    @property
    def total_flour_weight(self) -> Decimal:
        return sum((flour.weight for flour in self.flours), ZERO)

    @property
    def inclusion_weight(self) -> Decimal:
        return sum((inclusion.weight for inclusion in self.inclusions), ZERO)

    @property
    def enrichment_weight(self) -> Decimal:
        return sum((enrichment.weight for enrichment in self.enrichments), ZERO)

    @property
    def total_weight(self) -> Decimal:
        """Weight of the final mix alone."""
        return (
            self.total_flour_weight
            + self.water
            + self.salt
            + (self.yeast or ZERO)
            + self.inclusion_weight
            + self.enrichment_weight
        )

    @property
    def hydration(self) -> Decimal:
        """Hydration of the final mix against its own flour."""
        return _ratio_percent(self.water, self.total_flour_weight)

    def flour_weight_for(self, flour_type: FlourType) -> Decimal:
        return sum(
            (flour.weight for flour in self.flours if flour.flour_type == flour_type),
            ZERO,
        )

    def scale(self, factor: Decimal) -> "FinalMix":
        """Return a new FinalMix with every weight multiplied by factor."""
        return replace(
            self,
            flours=tuple(flour.scale(factor) for flour in self.flours),
            water=self.water * factor,
            salt=self.salt * factor,
            yeast=None if self.yeast is None else self.yeast * factor,
            inclusions=tuple(inclusion.scale(factor) for inclusion in self.inclusions),
            enrichments=tuple(
                enrichment.scale(factor) for enrichment in self.enrichments
            ),
        )


# ============================================================================
# Preferments
# ============================================================================


class PrefermentKind(str, Enum):
    POOLISH = "Poolish"
    BIGA = "Biga"
    LEVAIN = "Levain"
    PATE_FERMENTEE = "Pâte Fermentée"
    SPONGE = "Sponge"

    @property
    def default_hydration(self) -> Decimal:
        return _PREFERMENT_DEFAULT_HYDRATION[self]

    @property
    def uses_starter(self) -> bool:
        return self in (PrefermentKind.LEVAIN, PrefermentKind.PATE_FERMENTEE)

    @property
    def uses_yeast(self) -> bool:
        return self in (
            PrefermentKind.POOLISH,
            PrefermentKind.BIGA,
            PrefermentKind.SPONGE,
        )


_PREFERMENT_DEFAULT_HYDRATION = {
    PrefermentKind.POOLISH: Decimal("100"),
    PrefermentKind.BIGA: Decimal("55"),
    PrefermentKind.LEVAIN: Decimal("100"),
    PrefermentKind.PATE_FERMENTEE: Decimal("65"),
    PrefermentKind.SPONGE: Decimal("100"),
}


@dataclass(frozen=True)
class Starter:
    """Seed culture used to build a sourdough-style preferment.

    The starter's own flour and water are derived from its weight and
    hydration, so its hydration may differ from the preferment's.
    """

    weight: Decimal
    hydration: Decimal = DEFAULT_STARTER_HYDRATION

    @property
    def flour_contribution(self) -> Decimal:
        if self.hydration <= -HUNDRED:
            return ZERO
        return self.weight / (1 + self.hydration / HUNDRED)

    @property
    def water_contribution(self) -> Decimal:
        return self.weight - self.flour_contribution

    def scale(self, factor: Decimal) -> "Starter":
        # Hydration is a ratio and stays put.
        return replace(self, weight=self.weight * factor)


@dataclass(frozen=True)
class Preferment:
    """A portion of dough fermented before the final mix."""

    name: str = ""
    kind: PrefermentKind = PrefermentKind.LEVAIN
    flour_weight: Decimal = ZERO
    water_weight: Decimal = ZERO
    starter: Optional[Starter] = None
    yeast: Optional[Decimal] = None
    build_hours: Decimal = DEFAULT_BUILD_HOURS
    temperature: Decimal = DEFAULT_TEMPERATURE
    id: UUID = field(default_factory=uuid4)

    @property
    def hydration(self) -> Decimal:
        """Apparent hydration (preferment water over preferment flour)."""
        return _ratio_percent(self.water_weight, self.flour_weight)

    @property
    def total_weight(self) -> Decimal:
        starter_weight = self.starter.weight if self.starter else ZERO
        return self.flour_weight + self.water_weight + starter_weight + (self.yeast or ZERO)

    @property
    def total_flour(self) -> Decimal:
        """Flour including the starter's flour contribution."""
        if self.starter is None:
            return self.flour_weight
        return self.flour_weight + self.starter.flour_contribution

    @property
    def total_water(self) -> Decimal:
        """Water including the starter's water contribution."""
        if self.starter is None:
            return self.water_weight
        return self.water_weight + self.starter.water_contribution

    @property
    def display_name(self) -> str:
        return self.name or "Preferment"

    def scale(self, factor: Decimal) -> "Preferment":
        return replace(
            self,
            flour_weight=self.flour_weight * factor,
            water_weight=self.water_weight * factor,
            starter=None if self.starter is None else self.starter.scale(factor),
            yeast=None if self.yeast is None else self.yeast * factor,
        )


# ============================================================================
# Soakers
# ============================================================================


@dataclass(frozen=True)
class Grain:
    name: str
    weight: Decimal
    id: UUID = field(default_factory=uuid4)

    def scale(self, factor: Decimal) -> "Grain":
        return replace(self, weight=self.weight * factor)


@dataclass(frozen=True)
class Soaker:
    """Hydrated grains or seeds; contributes water but never flour."""

    name: str = ""
    grains: tuple[Grain, ...] = field(default_factory=tuple)
    water: Decimal = ZERO
    salt: Optional[Decimal] = None
    soak_hours: Decimal = DEFAULT_SOAK_HOURS
    temperature: Decimal = DEFAULT_TEMPERATURE
    boiling_water: bool = False
    id: UUID = field(default_factory=uuid4)

    @property
    def total_grain_weight(self) -> Decimal:
        return sum((grain.weight for grain in self.grains), ZERO)

    @property
    def total_weight(self) -> Decimal:
        return self.total_grain_weight + self.water + (self.salt or ZERO)

    @property
    def hydration(self) -> Decimal:
        return _ratio_percent(self.water, self.total_grain_weight)

    @property
    def display_name(self) -> str:
        return self.name or "Soaker"

    def scale(self, factor: Decimal) -> "Soaker":
        return replace(
            self,
            grains=tuple(grain.scale(factor) for grain in self.grains),
            water=self.water * factor,
            salt=None if self.salt is None else self.salt * factor,
        )


# ============================================================================
# Formula
# ============================================================================


@dataclass(frozen=True)
class FormulaYield:
    """Piece count times weight per piece."""

    pieces: int = 1
    weight_per_piece: Decimal = DEFAULT_PIECE_WEIGHT_G

    def __post_init__(self) -> None:
        """Clamp to at least one piece and a non-negative piece weight."""
        if self.pieces < 1:
            object.__setattr__(self, "pieces", 1)
        if self.weight_per_piece < 0:
            object.__setattr__(self, "weight_per_piece", ZERO)

    @property
    def total_weight(self) -> Decimal:
        return self.pieces * self.weight_per_piece


class DisplayMode(str, Enum):
    BAKERS_PERCENTAGE = "Baker's %"
    WEIGHT = "Weight"
    BOTH = "Both"


class Rounding(str, Enum):
    WHOLE_GRAM = "1g"
    TENTH_GRAM = "0.1g"
    HUNDREDTH_GRAM = "0.01g"

    @property
    def decimal_places(self) -> int:
        return {
            Rounding.WHOLE_GRAM: 0,
            Rounding.TENTH_GRAM: 1,
            Rounding.HUNDREDTH_GRAM: 2,
        }[self]


@dataclass(frozen=True)
class DisplayPreferences:
    mode: DisplayMode = DisplayMode.BOTH
    rounding: Rounding = Rounding.WHOLE_GRAM


@dataclass(frozen=True)
class Formula:
    """A complete bread formula.

    Aggregate root: preferments, soakers and exactly one final mix. Engines
    read it without mutation; scaling returns a new Formula with a higher
    version.
    """

    name: str = ""
    version: int = 1
    notes: str = ""
    yield_: FormulaYield = field(default_factory=FormulaYield)
    preferments: tuple[Preferment, ...] = field(default_factory=tuple)
    soakers: tuple[Soaker, ...] = field(default_factory=tuple)
    final_mix: FinalMix = field(default_factory=FinalMix)
    display: DisplayPreferences = field(default_factory=DisplayPreferences)
    created_date: datetime = field(default_factory=_utc_now)
    last_modified: datetime = field(default_factory=_utc_now)
    recipe_id: Optional[UUID] = None
    id: UUID = field(default_factory=uuid4)

    def find_flour(self, flour_id: UUID) -> Optional[Flour]:
        return next((f for f in self.final_mix.flours if f.id == flour_id), None)

    def find_preferment(self, preferment_id: UUID) -> Optional[Preferment]:
        return next((p for p in self.preferments if p.id == preferment_id), None)

    def find_soaker(self, soaker_id: UUID) -> Optional[Soaker]:
        return next((s for s in self.soakers if s.id == soaker_id), None)

    def find_inclusion(self, inclusion_id: UUID) -> Optional[Inclusion]:
        return next(
            (i for i in self.final_mix.inclusions if i.id == inclusion_id), None
        )

    def find_enrichment(self, enrichment_id: UUID) -> Optional[Enrichment]:
        return next(
            (e for e in self.final_mix.enrichments if e.id == enrichment_id), None
        )

    @property
    def has_starter(self) -> bool:
        """True when any preferment is built from a starter."""
        return any(p.starter is not None for p in self.preferments)

    def touch(self, now: datetime) -> "Formula":
        """Return a copy with the version bumped and last_modified set."""
        return replace(self, version=self.version + 1, last_modified=now)
