"""JSON persistence for formulas.

Handles lossless encoding of formulas to JSON and saving / loading them to
files, either one formula per file or a whole collection in one file.
Identifiers survive the round trip so ingredient references keep resolving.
"""

import json
import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, List, Optional
from uuid import UUID

from config.constants import COLLECTION_FILE, FORMAT_VERSION
from domain.exceptions import FormulaNotFoundError, InvalidFormulaFileError
from domain.models import (
    AdditionStage,
    DisplayMode,
    DisplayPreferences,
    Enrichment,
    EnrichmentKind,
    FinalMix,
    Flour,
    FlourType,
    Formula,
    FormulaYield,
    Grain,
    Inclusion,
    MixMethod,
    Preferment,
    PrefermentKind,
    Rounding,
    Soaker,
    Starter,
)


class JSONFormulaRepository:
    """Repository for persisting formulas as JSON files."""

    def __init__(self, base_directory: str | Path = "saves") -> None:
        """Initialize repository.

        Args:
            base_directory: Base directory for saving formulas
        """
        self._base_dir = Path(base_directory)
        self._base_dir.mkdir(parents=True, exist_ok=True)

    @property
    def base_directory(self) -> Path:
        return self._base_dir

    def save(self, formula: Formula, filename: str) -> Path:
        """Save formula to JSON file.

        Args:
            formula: Formula to save
            filename: Filename (without path)

        Returns:
            Full path to saved file
        """
        file_path = self._base_dir / filename
        self._write(file_path, self.encode(formula))
        logging.info("Saved formula %s to %s", formula.id, file_path)
        return file_path

    def load(self, filename: str) -> Formula:
        """Load formula from JSON file.

        Raises:
            FormulaNotFoundError: If file doesn't exist
            InvalidFormulaFileError: If file is malformed
        """
        data = self._read(filename)
        try:
            return self.decode(data)
        except (KeyError, ValueError, TypeError, AttributeError, InvalidOperation) as exc:
            raise InvalidFormulaFileError(f"Invalid formula file: {filename}") from exc

    def save_collection(
        self,
        formulas: List[Formula],
        filename: str = COLLECTION_FILE,
    ) -> Path:
        """Replace the stored collection with formulas."""
        file_path = self._base_dir / filename
        payload = {
            "format_version": FORMAT_VERSION,
            "formulas": [self.encode(formula) for formula in formulas],
        }
        self._write(file_path, payload)
        logging.info("Saved %d formulas to %s", len(formulas), file_path)
        return file_path

    def load_collection(self, filename: str = COLLECTION_FILE) -> List[Formula]:
        """Load a stored collection; a missing collection file is empty."""
        if not (self._base_dir / filename).exists():
            return []
        data = self._read(filename)
        try:
            return [self.decode(item) for item in data["formulas"]]
        except (KeyError, ValueError, TypeError, AttributeError, InvalidOperation) as exc:
            raise InvalidFormulaFileError(f"Invalid formula collection: {filename}") from exc

    def list_files(self) -> List[str]:
        """List all formula JSON files."""
        if not self._base_dir.exists():
            return []

        return sorted([f.name for f in self._base_dir.glob("*.json")])

    def delete(self, filename: str) -> None:
        """Delete a formula file.

        Raises:
            FormulaNotFoundError: If file doesn't exist
        """
        file_path = self._base_dir / filename

        if not file_path.exists():
            raise FormulaNotFoundError(f"Formula file not found: {filename}")

        file_path.unlink()

    def _write(self, file_path: Path, data: Dict[str, Any]) -> None:
        with open(file_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False, sort_keys=True)

    def _read(self, filename: str) -> Dict[str, Any]:
        file_path = self._base_dir / filename

        if not file_path.exists():
            raise FormulaNotFoundError(f"Formula file not found: {filename}")

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as exc:
            logging.error("Malformed JSON in %s: %s", file_path, exc)
            raise InvalidFormulaFileError(f"Invalid formula file: {filename}") from exc

    # ------------------------------------------------------------------
    # Encoding
    # ------------------------------------------------------------------

    def encode(self, formula: Formula) -> Dict[str, Any]:
        """Convert Formula to a JSON-compatible dictionary."""
        final_mix = formula.final_mix
        return {
            "id": str(formula.id),
            "recipe_id": _uuid_str(formula.recipe_id),
            "name": formula.name,
            "version": formula.version,
            "notes": formula.notes,
            "yield": {
                "pieces": formula.yield_.pieces,
                "weight_per_piece": str(formula.yield_.weight_per_piece),
            },
            "preferments": [_preferment_to_dict(p) for p in formula.preferments],
            "soakers": [_soaker_to_dict(s) for s in formula.soakers],
            "final_mix": {
                "flours": [
                    {"id": str(f.id), "type": f.flour_type.value, "weight": str(f.weight)}
                    for f in final_mix.flours
                ],
                "water": str(final_mix.water),
                "salt": str(final_mix.salt),
                "yeast": _decimal_str(final_mix.yeast),
                "inclusions": [
                    {
                        "id": str(i.id),
                        "name": i.name,
                        "weight": str(i.weight),
                        "addition_stage": i.addition_stage.value,
                    }
                    for i in final_mix.inclusions
                ],
                "enrichments": [
                    {
                        "id": str(e.id),
                        "name": e.name,
                        "weight": str(e.weight),
                        "kind": e.kind.value,
                    }
                    for e in final_mix.enrichments
                ],
                "mix_method": final_mix.mix_method.value,
                "target_temperature": str(final_mix.target_temperature),
            },
            "display": {
                "mode": formula.display.mode.value,
                "rounding": formula.display.rounding.value,
            },
            "created_date": formula.created_date.isoformat(),
            "last_modified": formula.last_modified.isoformat(),
        }

    def decode(self, data: Dict[str, Any]) -> Formula:
        """Convert dictionary to Formula."""
        yield_data = data.get("yield", {})
        display = data.get("display", {})
        return Formula(
            id=UUID(data["id"]),
            recipe_id=_optional_uuid(data.get("recipe_id")),
            name=data["name"],
            version=int(data.get("version", 1)),
            notes=data.get("notes", ""),
            yield_=FormulaYield(
                pieces=int(yield_data.get("pieces", 1)),
                weight_per_piece=Decimal(str(yield_data.get("weight_per_piece", "1000"))),
            ),
            preferments=tuple(_dict_to_preferment(p) for p in data.get("preferments", [])),
            soakers=tuple(_dict_to_soaker(s) for s in data.get("soakers", [])),
            final_mix=_dict_to_final_mix(data.get("final_mix", {})),
            display=DisplayPreferences(
                mode=DisplayMode(display.get("mode", DisplayMode.BOTH.value)),
                rounding=Rounding(display.get("rounding", Rounding.WHOLE_GRAM.value)),
            ),
            created_date=datetime.fromisoformat(data["created_date"]),
            last_modified=datetime.fromisoformat(data["last_modified"]),
        )


def _decimal_str(value: Optional[Decimal]) -> Optional[str]:
    return None if value is None else str(value)


def _optional_decimal(value: Any) -> Optional[Decimal]:
    return None if value is None else Decimal(str(value))


def _uuid_str(value: Optional[UUID]) -> Optional[str]:
    return None if value is None else str(value)


def _optional_uuid(value: Any) -> Optional[UUID]:
    return None if value is None else UUID(value)


def _preferment_to_dict(preferment: Preferment) -> Dict[str, Any]:
    starter = preferment.starter
    return {
        "id": str(preferment.id),
        "name": preferment.name,
        "kind": preferment.kind.value,
        "flour_weight": str(preferment.flour_weight),
        "water_weight": str(preferment.water_weight),
        "starter": None
        if starter is None
        else {"weight": str(starter.weight), "hydration": str(starter.hydration)},
        "yeast": _decimal_str(preferment.yeast),
        "build_hours": str(preferment.build_hours),
        "temperature": str(preferment.temperature),
    }


def _dict_to_preferment(data: Dict[str, Any]) -> Preferment:
    starter_data = data.get("starter")
    starter = None
    if starter_data is not None:
        starter = Starter(
            weight=Decimal(str(starter_data["weight"])),
            hydration=Decimal(str(starter_data["hydration"])),
        )
    return Preferment(
        id=UUID(data["id"]),
        name=data.get("name", ""),
        kind=PrefermentKind(data["kind"]),
        flour_weight=Decimal(str(data["flour_weight"])),
        water_weight=Decimal(str(data["water_weight"])),
        starter=starter,
        yeast=_optional_decimal(data.get("yeast")),
        build_hours=Decimal(str(data["build_hours"])),
        temperature=Decimal(str(data["temperature"])),
    )


def _soaker_to_dict(soaker: Soaker) -> Dict[str, Any]:
    return {
        "id": str(soaker.id),
        "name": soaker.name,
        "grains": [
            {"id": str(g.id), "name": g.name, "weight": str(g.weight)}
            for g in soaker.grains
        ],
        "water": str(soaker.water),
        "salt": _decimal_str(soaker.salt),
        "soak_hours": str(soaker.soak_hours),
        "temperature": str(soaker.temperature),
        "boiling_water": soaker.boiling_water,
    }


def _dict_to_soaker(data: Dict[str, Any]) -> Soaker:
    return Soaker(
        id=UUID(data["id"]),
        name=data.get("name", ""),
        grains=tuple(
            Grain(id=UUID(g["id"]), name=g["name"], weight=Decimal(str(g["weight"])))
            for g in data.get("grains", [])
        ),
        water=Decimal(str(data["water"])),
        salt=_optional_decimal(data.get("salt")),
        soak_hours=Decimal(str(data["soak_hours"])),
        temperature=Decimal(str(data["temperature"])),
        boiling_water=bool(data.get("boiling_water", False)),
    )


def _dict_to_final_mix(data: Dict[str, Any]) -> FinalMix:
    return FinalMix(
        flours=tuple(
            Flour(
                id=UUID(f["id"]),
                flour_type=FlourType(f["type"]),
                weight=Decimal(str(f["weight"])),
            )
            for f in data.get("flours", [])
        ),
        water=Decimal(str(data.get("water", "0"))),
        salt=Decimal(str(data.get("salt", "0"))),
        yeast=_optional_decimal(data.get("yeast")),
        inclusions=tuple(
            Inclusion(
                id=UUID(i["id"]),
                name=i["name"],
                weight=Decimal(str(i["weight"])),
                addition_stage=AdditionStage(i["addition_stage"]),
            )
            for i in data.get("inclusions", [])
        ),
        enrichments=tuple(
            Enrichment(
                id=UUID(e["id"]),
                name=e["name"],
                weight=Decimal(str(e["weight"])),
                kind=EnrichmentKind(e["kind"]),
            )
            for e in data.get("enrichments", [])
        ),
        mix_method=MixMethod(data.get("mix_method", MixMethod.STANDARD.value)),
        target_temperature=Decimal(str(data.get("target_temperature", "24"))),
    )
