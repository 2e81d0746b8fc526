"""Ingredient identifiers.

A closed set of references into the nested Formula structure. Callers name
which quantity to hold fixed or correct without traversing the formula.
"""

from dataclasses import dataclass
from typing import Union
from uuid import UUID


@dataclass(frozen=True)
class FinalFlour:
    flour_id: UUID

    @property
    def label(self) -> str:
        return "Final mix flour"


@dataclass(frozen=True)
class FinalWater:
    @property
    def label(self) -> str:
        return "Final mix water"


@dataclass(frozen=True)
class FinalSalt:
    @property
    def label(self) -> str:
        return "Final mix salt"


@dataclass(frozen=True)
class FinalYeast:
    @property
    def label(self) -> str:
        return "Final mix yeast"


@dataclass(frozen=True)
class PrefermentTotal:
    """A whole preferment, by its total weight."""

    preferment_id: UUID

    @property
    def label(self) -> str:
        return "Preferment"


@dataclass(frozen=True)
class PrefermentFlour:
    preferment_id: UUID

    @property
    def label(self) -> str:
        return "Preferment flour"


@dataclass(frozen=True)
class PrefermentWater:
    preferment_id: UUID

    @property
    def label(self) -> str:
        return "Preferment water"


@dataclass(frozen=True)
class SoakerTotal:
    """A whole soaker, by its total weight."""

    soaker_id: UUID

    @property
    def label(self) -> str:
        return "Soaker"


@dataclass(frozen=True)
class InclusionWeight:
    inclusion_id: UUID

    @property
    def label(self) -> str:
        return "Inclusion"


@dataclass(frozen=True)
class EnrichmentWeight:
    enrichment_id: UUID

    @property
    def label(self) -> str:
        return "Enrichment"


IngredientIdentifier = Union[
    FinalFlour,
    FinalWater,
    FinalSalt,
    FinalYeast,
    PrefermentTotal,
    PrefermentFlour,
    PrefermentWater,
    SoakerTotal,
    InclusionWeight,
    EnrichmentWeight,
]

IDENTIFIER_TYPES = (
    FinalFlour,
    FinalWater,
    FinalSalt,
    FinalYeast,
    PrefermentTotal,
    PrefermentFlour,
    PrefermentWater,
    SoakerTotal,
    InclusionWeight,
    EnrichmentWeight,
)
