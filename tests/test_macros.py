"""Tests for macro arithmetic."""

import pytest

from nutrition_validator.domain.nutrition import (
    ZERO_MACROS,
    MacroProfile,
    ResolvedIngredient,
)
from nutrition_validator.domain.plans import IngredientCategory
from nutrition_validator.services.macros import (
    build_meal,
    estimate_for_category,
    macros_for_amount,
    round_half_up,
    share_of_estimate,
    sum_macros,
)
from tests.conftest import make_day, make_detail

RICE = ResolvedIngredient(
    name="white rice",
    fdc_id=169756,
    calories_per_100g=130,
    protein_per_100g=2.7,
    carbs_per_100g=28.2,
    fat_per_100g=0.3,
)


def test_macros_for_amount_scales_per_100g() -> None:
    assert macros_for_amount(RICE, 200) == MacroProfile(260, 5.4, 56.4, 0.6)
    assert macros_for_amount(RICE, 0) == ZERO_MACROS


def test_macros_for_amount_is_linear() -> None:
    single = macros_for_amount(RICE, 100)
    triple = macros_for_amount(RICE, 300)

    assert triple.calories == pytest.approx(single.calories * 3)
    assert triple.protein_g == pytest.approx(single.protein_g * 3)
    assert triple.carbs_g == pytest.approx(single.carbs_g * 3)
    assert triple.fat_g == pytest.approx(single.fat_g * 3)


def test_round_half_up() -> None:
    assert round_half_up(2.5) == 3
    assert round_half_up(0.125, 2) == 0.13
    assert round_half_up(4.35, 1) == 4.4


def test_category_estimate() -> None:
    assert estimate_for_category(IngredientCategory.PROTEIN, 200) == MacroProfile(
        330, 50, 0, 14
    )


def test_share_of_estimate_splits_evenly() -> None:
    share = share_of_estimate(MacroProfile(600, 40, 60, 20), 3)

    assert share == MacroProfile(200, 13.3, 20, 6.7)
    assert share_of_estimate(MacroProfile(600, 40, 60, 20), 0) == ZERO_MACROS


def test_meal_and_day_totals_are_sums() -> None:
    oats = make_detail("oats", macros=MacroProfile(150, 5.1, 27.0, 2.6))
    milk = make_detail("milk", macros=MacroProfile(122, 8.1, 11.7, 4.8))

    meal = build_meal("Breakfast", "breakfast", [oats, milk])
    day = make_day("Monday", oats, milk)

    assert meal.macros == sum_macros([oats.macros, milk.macros])
    assert meal.macros.calories == 272
    assert day.daily_totals == meal.macros
