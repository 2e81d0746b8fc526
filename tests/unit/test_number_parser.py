"""Tests for number parsing and mass unit conversion."""

from decimal import Decimal

import pytest

from domain.services.number_parser import parse_mass, parse_user_number
from domain.services.unit_normalizer import (
    convert_mass,
    is_mass_unit,
    mass_to_g,
    normalize_mass_unit,
)


class TestParseUserNumber:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("12", Decimal("12")),
            ("12.5", Decimal("12.5")),
            ("12,5", Decimal("12.5")),
            ("1,234", Decimal("1234")),
            ("1,234.5", Decimal("1234.5")),
            ("1.234,5", Decimal("1234.5")),
            (" 2 500 ", Decimal("2500")),
            (7, Decimal("7")),
            (0.5, Decimal("0.5")),
        ],
    )
    def test_parses(self, raw, expected: Decimal) -> None:
        assert parse_user_number(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "abc", True, float("nan")])
    def test_rejects(self, raw) -> None:
        assert parse_user_number(raw) is None


class TestParseMass:
    def test_unit_in_text(self) -> None:
        assert parse_mass("1,2 kg") == Decimal("1200")
        assert parse_mass("350g") == Decimal("350")

    def test_default_unit(self) -> None:
        assert parse_mass("2", default_unit="lb") == Decimal("907.18474")
        assert parse_mass(Decimal("5")) == Decimal("5")

    def test_unknown_unit(self) -> None:
        assert parse_mass("3 cups") is None
        assert parse_mass("not a number") is None


class TestUnitNormalizer:
    def test_aliases(self) -> None:
        assert normalize_mass_unit("Grams") == "g"
        assert normalize_mass_unit("KG") == "kg"
        assert normalize_mass_unit("oz.") == "oz"
        assert normalize_mass_unit("ml") == ""
        assert is_mass_unit("pounds")
        assert not is_mass_unit(None)

    def test_conversions(self) -> None:
        assert convert_mass(Decimal("1"), "kg", "g") == Decimal("1000")
        assert convert_mass(Decimal("500"), "g", "kg") == Decimal("0.5")
        assert convert_mass(Decimal("1"), "cup", "g") is None
        assert mass_to_g(Decimal("250"), None) == Decimal("250")
        assert mass_to_g(Decimal("2000"), "mg") == Decimal("2")
