from __future__ import annotations

import logging
import re
import unicodedata
from collections import OrderedDict
from dataclasses import dataclass, field, replace
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from config.constants import DEFAULT_STARTER_HYDRATION
from domain.exceptions import FormulaImportError
from domain.models import (
    AdditionStage,
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
from domain.services.number_parser import parse_mass, parse_user_number
from domain.services.totals import total_weight
from domain.services.unit_normalizer import is_mass_unit

ZERO = Decimal("0")

REQUIRED_COLUMNS = ("section", "ingredient", "amount")

_SECTION_ALIASES = {
    "final": "final",
    "final mix": "final",
    "final dough": "final",
    "dough": "final",
    "preferment": "preferment",
    "pre ferment": "preferment",
    "soaker": "soaker",
    "soak": "soaker",
}

_ENRICHMENT_KEYWORDS = (
    ("butter", EnrichmentKind.BUTTER),
    ("oil", EnrichmentKind.OIL),
    ("sugar", EnrichmentKind.SUGAR),
    ("honey", EnrichmentKind.HONEY),
    ("milk", EnrichmentKind.MILK),
    ("egg", EnrichmentKind.EGG),
)

_STARTER_KEYWORDS = ("starter", "levain", "culture", "mother")


@dataclass(frozen=True)
class ImportResult:
    """Imported formula plus the rows that had to be skipped."""

    formula: Formula
    warnings: tuple[str, ...] = field(default_factory=tuple)


@dataclass
class _PrefermentRows:
    name: str
    kind: Optional[PrefermentKind] = None
    flour: Decimal = ZERO
    water: Decimal = ZERO
    starter: Optional[Decimal] = None
    starter_hydration: Optional[Decimal] = None
    yeast: Optional[Decimal] = None
    build_hours: Optional[Decimal] = None


@dataclass
class _SoakerRows:
    name: str
    grains: List[Grain] = field(default_factory=list)
    water: Decimal = ZERO
    salt: Optional[Decimal] = None
    soak_hours: Optional[Decimal] = None


class FormulaSheetImporter:
    """Turn a CSV or Excel ingredient list into a Formula.

    Expected columns: section, component, ingredient, amount, unit. Optional
    columns: kind, hydration, hours, stage. Sections are "final",
    "preferment" and "soaker"; the component column names the preferment or
    soaker a row belongs to.
    """

    def import_file(self, path: str | Path, formula_name: str | None = None) -> ImportResult:
        """Read an ingredient sheet and build a formula from it.

        Raises:
            FormulaImportError: If the file can't be read, lacks required
                columns or holds no usable rows
        """
        path = Path(path)
        df = self._read(path)
        cols_norm: Dict[str, str] = {normalize_label(c): c for c in df.columns}
        missing = [c for c in REQUIRED_COLUMNS if c not in cols_norm]
        if missing:
            raise FormulaImportError(
                f"Missing required columns in {path.name}: {', '.join(missing)}"
            )

        warnings: List[str] = []
        flours: List[Flour] = []
        inclusions: List[Inclusion] = []
        enrichments: List[Enrichment] = []
        water = ZERO
        salt = ZERO
        yeast: Optional[Decimal] = None
        preferments: "OrderedDict[str, _PrefermentRows]" = OrderedDict()
        soakers: "OrderedDict[str, _SoakerRows]" = OrderedDict()
        used_rows = 0

        for index, row in df.iterrows():
            line = int(index) + 2  # header is line 1
            section_text = normalize_label(_cell(row, cols_norm, "section"))
            ingredient = str(_cell(row, cols_norm, "ingredient")).strip()
            if not section_text and not ingredient:
                continue

            section = _SECTION_ALIASES.get(section_text)
            if section is None:
                warnings.append(f"Line {line}: unknown section '{section_text}', row skipped.")
                continue
            if not ingredient:
                warnings.append(f"Line {line}: missing ingredient name, row skipped.")
                continue

            unit = str(_cell(row, cols_norm, "unit")).strip() or None
            if unit is not None and not is_mass_unit(unit):
                warnings.append(f"Line {line}: unsupported unit '{unit}' for '{ingredient}', row skipped.")
                continue

            amount = parse_mass(_cell(row, cols_norm, "amount"), default_unit=unit)
            if amount is None:
                warnings.append(f"Line {line}: unreadable amount for '{ingredient}', row skipped.")
                continue
            if amount < 0:
                warnings.append(f"Line {line}: negative amount for '{ingredient}', row skipped.")
                continue

            label = normalize_label(ingredient)
            component = str(_cell(row, cols_norm, "component")).strip()

            if section == "final":
                if _has_word(label, "water"):
                    water += amount
                elif _has_word(label, "salt"):
                    salt += amount
                elif "yeast" in label:
                    yeast = (yeast or ZERO) + amount
                elif _flour_type(label) is not None:
                    flours.append(Flour(flour_type=_flour_type(label), weight=amount))
                elif _enrichment_kind(label) is not None:
                    kind = _enrichment_kind(label)
                    enrichments.append(Enrichment(name=ingredient, weight=amount, kind=kind))
                else:
                    stage = _addition_stage(_cell(row, cols_norm, "stage"))
                    inclusions.append(
                        Inclusion(name=ingredient, weight=amount, addition_stage=stage)
                    )

            elif section == "preferment":
                name = component or "Preferment"
                entry = preferments.setdefault(name, _PrefermentRows(name=name))
                entry.kind = entry.kind or _preferment_kind(_cell(row, cols_norm, "kind"))
                hours = parse_user_number(_cell(row, cols_norm, "hours"))
                if hours is not None:
                    entry.build_hours = hours
                if any(key in label for key in _STARTER_KEYWORDS):
                    entry.starter = (entry.starter or ZERO) + amount
                    hydration = parse_user_number(_cell(row, cols_norm, "hydration"))
                    if hydration is not None:
                        entry.starter_hydration = hydration
                elif "yeast" in label:
                    entry.yeast = (entry.yeast or ZERO) + amount
                elif "flour" in label or _flour_type(label) is not None:
                    entry.flour += amount
                elif _has_word(label, "water"):
                    entry.water += amount
                else:
                    warnings.append(
                        f"Line {line}: '{ingredient}' is not a preferment ingredient, row skipped."
                    )
                    continue

            else:
                name = component or "Soaker"
                entry_s = soakers.setdefault(name, _SoakerRows(name=name))
                hours = parse_user_number(_cell(row, cols_norm, "hours"))
                if hours is not None:
                    entry_s.soak_hours = hours
                if _has_word(label, "water"):
                    entry_s.water += amount
                elif _has_word(label, "salt"):
                    entry_s.salt = (entry_s.salt or ZERO) + amount
                else:
                    entry_s.grains.append(Grain(name=ingredient, weight=amount))

            used_rows += 1

        if used_rows == 0:
            raise FormulaImportError(f"No usable ingredient rows in {path.name}")

        formula = Formula(
            name=formula_name or path.stem,
            preferments=tuple(_build_preferment(p) for p in preferments.values()),
            soakers=tuple(_build_soaker(s) for s in soakers.values()),
            final_mix=FinalMix(
                flours=tuple(flours),
                water=water,
                salt=salt,
                yeast=yeast,
                inclusions=tuple(inclusions),
                enrichments=tuple(enrichments),
            ),
        )
        formula = replace(
            formula,
            yield_=FormulaYield(pieces=1, weight_per_piece=total_weight(formula)),
        )
        for warning in warnings:
            logging.warning("%s: %s", path.name, warning)
        logging.info("Imported %d rows from %s", used_rows, path)
        return ImportResult(formula=formula, warnings=tuple(warnings))

    def _read(self, path: Path) -> pd.DataFrame:
        suffix = path.suffix.lower()
        try:
            if suffix == ".csv":
                df = pd.read_csv(path, dtype=str)
            elif suffix in (".xlsx", ".xlsm", ".xls"):
                df = pd.read_excel(path, dtype=str)
            else:
                raise FormulaImportError(f"Unsupported file type: {path.suffix}")
        except FormulaImportError:
            raise
        except Exception as exc:
            logging.error("Could not read %s: %s", path, exc)
            raise FormulaImportError(f"Could not read {path.name}: {exc}") from exc

        if df.empty:
            raise FormulaImportError(f"{path.name} has no rows to import")
        return df


def normalize_label(label: Any) -> str:
    """Normalize labels for loose matching (casefold + strip accents)."""
    if label is None:
        return ""
    text = str(label)
    text = unicodedata.normalize("NFKD", text)
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    text = text.replace("_", " ").replace("-", " ")
    return re.sub(r"\s+", " ", text).strip().lower()


def _cell(row: pd.Series, cols_norm: Dict[str, str], name: str) -> Any:
    column = cols_norm.get(name)
    if column is None:
        return ""
    value = row.get(column)
    if value is None or pd.isna(value):
        return ""
    return value


def _has_word(label: str, word: str) -> bool:
    return re.search(rf"\b{word}\b", label) is not None


def _strip_flour(label: str) -> str:
    return re.sub(r"\bflour\b", "", label).strip()


_FLOUR_LABELS = {
    _strip_flour(normalize_label(t.value)): t for t in FlourType
}


def _flour_type(label: str) -> Optional[FlourType]:
    """Flour type for an ingredient label, None when it isn't a flour.

    A bare "flour" is bread flour; unknown "... flour" labels are Other.
    """
    key = _strip_flour(label)
    if key in _FLOUR_LABELS and (key != "other" or "flour" in label):
        return _FLOUR_LABELS[key]
    if re.search(r"\bflour\b", label):
        return FlourType.BREAD if not key else FlourType.OTHER
    return None


def _enrichment_kind(label: str) -> Optional[EnrichmentKind]:
    for keyword, kind in _ENRICHMENT_KEYWORDS:
        if re.search(rf"\b{keyword}s?\b", label):
            return kind
    return None


def _matching_enum(text: Any, enum_type):
    wanted = normalize_label(text)
    if not wanted:
        return None
    for member in enum_type:
        if normalize_label(member.value) == wanted:
            return member
    return None


def _preferment_kind(text: Any) -> Optional[PrefermentKind]:
    return _matching_enum(text, PrefermentKind)


def _addition_stage(text: Any) -> AdditionStage:
    wanted = normalize_label(text)
    for member in AdditionStage:
        if wanted and wanted in normalize_label(member.value):
            return member
    return AdditionStage.MIXING


def _build_preferment(rows: _PrefermentRows) -> Preferment:
    kind = rows.kind or _preferment_kind(rows.name) or PrefermentKind.LEVAIN
    starter = None
    if rows.starter is not None:
        starter = Starter(
            weight=rows.starter,
            hydration=rows.starter_hydration
            if rows.starter_hydration is not None
            else DEFAULT_STARTER_HYDRATION,
        )
    preferment = Preferment(
        name=rows.name,
        kind=kind,
        flour_weight=rows.flour,
        water_weight=rows.water,
        starter=starter,
        yeast=rows.yeast,
    )
    if rows.build_hours is not None:
        preferment = replace(preferment, build_hours=rows.build_hours)
    return preferment


def _build_soaker(rows: _SoakerRows) -> Soaker:
    soaker = Soaker(
        name=rows.name,
        grains=tuple(rows.grains),
        water=rows.water,
        salt=rows.salt,
    )
    if rows.soak_hours is not None:
        soaker = replace(soaker, soak_hours=rows.soak_hours)
    return soaker
