"""Tests for amount parsing and unit conversion."""

import asyncio
import logging
from dataclasses import dataclass

import pytest

from nutrition_validator.domain.nutrition import ConversionConfidence
from nutrition_validator.services.conversions import (
    DENSITY_MULTIPLIERS,
    ITEM_WEIGHTS_GRAMS,
    StaticUnitConverter,
    parse_amount,
)


@pytest.mark.parametrize(
    ("amount", "expected"),
    [
        ("2", 2.0),
        ("1.5", 1.5),
        (".5", 0.5),
        ("1/2", 0.5),
        ("1 1/2", 1.5),
        ("3 large", 3.0),
        ("to taste", None),
        ("", None),
        ("1/0", None),
    ],
)
def test_parse_amount(amount: str, expected: float | None) -> None:
    assert parse_amount(amount) == expected


@pytest.mark.parametrize(
    ("amount", "unit", "name", "grams", "confidence"),
    [
        ("2", "large", "eggs", 100, ConversionConfidence.HIGH),
        ("2", "", "chicken breasts", 348, ConversionConfidence.HIGH),
        ("200", "g", "chicken breast", 200, ConversionConfidence.HIGH),
        ("8", "oz", "salmon", 226.796, ConversionConfidence.HIGH),
        ("1", "cup", "rice", 180, ConversionConfidence.HIGH),
        ("1", "cup", "mystery mix", 240, ConversionConfidence.MEDIUM),
        ("1", "bunch", "banana", 118, ConversionConfidence.MEDIUM),
        ("3", "handfuls", "mystery", 300, ConversionConfidence.LOW),
        ("to taste", "", "salt", 100, ConversionConfidence.LOW),
    ],
)
def test_static_converter(
    amount: str,
    unit: str,
    name: str,
    grams: float,
    confidence: ConversionConfidence,
) -> None:
    result = StaticUnitConverter().convert_sync(amount, unit, name)

    assert result.grams == pytest.approx(grams)
    assert result.confidence is confidence


def test_density_lookup_matches_longest_phrase() -> None:
    converter = StaticUnitConverter()

    result = asyncio.run(converter.convert("2", "tbsp", "Extra Virgin Olive Oil"))

    assert result.grams == pytest.approx(2 * 15 * 0.92)
    assert result.confidence is ConversionConfidence.HIGH


def test_custom_tables() -> None:
    converter = StaticUnitConverter(densities={}, item_weights={"dumpling": 25})

    assert converter.convert_sync("4", "", "dumpling").grams == 100
    assert (
        converter.convert_sync("1", "cup", "rice").confidence
        is ConversionConfidence.MEDIUM
    )


@pytest.mark.parametrize(
    ("amount", "name", "grams", "confidence"),
    [
        ("1", "eggplant", 100, ConversionConfidence.LOW),
        ("1", "pineapple", 100, ConversionConfidence.LOW),
        ("2", "baby potatoes", 300, ConversionConfidence.HIGH),
    ],
)
def test_item_lookup_matches_whole_words(
    amount: str, name: str, grams: float, confidence: ConversionConfidence
) -> None:
    result = StaticUnitConverter().convert_sync(amount, "", name)

    assert result.grams == pytest.approx(grams)
    assert result.confidence is confidence


@dataclass
class FakeConversionTables:
    densities: dict[str, float]
    item_weights: dict[str, float]
    error: Exception | None = None
    loads: int = 0

    def load_densities(self) -> dict[str, float]:
        self.loads += 1
        if self.error is not None:
            raise self.error
        return self.densities

    def load_item_weights(self) -> dict[str, float]:
        return self.item_weights


def test_loaded_tables_are_reused_until_expiry() -> None:
    tables = FakeConversionTables(densities={"rice": 0.5}, item_weights={"egg": 60})
    converter = StaticUnitConverter(tables=tables)

    first = asyncio.run(converter.convert("1", "cup", "rice"))
    second = asyncio.run(converter.convert("2", "", "egg"))

    assert first.grams == pytest.approx(120)
    assert second.grams == pytest.approx(120)
    assert tables.loads == 1


def test_expired_tables_are_reloaded() -> None:
    tables = FakeConversionTables(densities={"rice": 0.5}, item_weights={"egg": 60})
    converter = StaticUnitConverter(tables=tables, refresh_seconds=0)

    asyncio.run(converter.convert("1", "cup", "rice"))
    tables.densities = {"rice": 1.0}
    result = asyncio.run(converter.convert("1", "cup", "rice"))

    assert result.grams == pytest.approx(240)
    assert tables.loads == 2


def test_empty_table_falls_back_to_built_ins() -> None:
    tables = FakeConversionTables(densities={}, item_weights={"dumpling": 25})
    converter = StaticUnitConverter(tables=tables)

    rice = asyncio.run(converter.convert("1", "cup", "rice"))
    dumplings = asyncio.run(converter.convert("4", "", "dumpling"))

    assert converter.densities == DENSITY_MULTIPLIERS
    assert rice.grams == pytest.approx(180)
    assert dumplings.grams == pytest.approx(100)


def test_failed_load_uses_built_ins(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    monkeypatch.setattr(logging.getLogger("nutrition_validator"), "propagate", True)
    tables = FakeConversionTables(
        densities={"rice": 0.5},
        item_weights={"egg": 60},
        error=RuntimeError("database unavailable"),
    )
    converter = StaticUnitConverter(densities={}, item_weights={}, tables=tables)

    with caplog.at_level(logging.ERROR, logger="nutrition_validator"):
        result = asyncio.run(converter.convert("2", "large", "eggs"))

    assert result.grams == pytest.approx(100)
    assert converter.item_weights == ITEM_WEIGHTS_GRAMS
    assert "Failed to load conversion tables" in caplog.text
