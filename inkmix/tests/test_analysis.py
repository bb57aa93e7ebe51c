from __future__ import annotations

from datetime import datetime, timezone

import pytest

from inkmix.src.mixing_engine.analysis import (
    BLACK_ALTERNATIVE,
    CLEAN_EXPLANATION,
    analyze_black_usage,
    analyze_color_cleanliness,
    analyze_color_temperature,
    analyze_problematic_combinations,
    analyze_recipe,
)
from inkmix.src.mixing_engine.colors import color_from_hex
from inkmix.src.mixing_engine.errors import ColorNotFound
from inkmix.src.mixing_engine.models import Recipe, RecipeIngredient, UserPalette

PALETTE = UserPalette(
    colors=(
        color_from_hex("#FF0000", id="red", name="Red"),
        color_from_hex("#00FFFF", id="cyan", name="Cyan"),
        color_from_hex("#0000FF", id="blue", name="Blue"),
        color_from_hex("#000000", id="black", name="Black"),
    )
)


def _recipe(target: str, result: str, *ingredients: tuple[str, float]) -> Recipe:
    now = datetime.now(timezone.utc)
    return Recipe(
        id="recipe-test",
        target_color=color_from_hex(target),
        result_color=color_from_hex(result),
        ingredients=tuple(RecipeIngredient(color_id=c, proportion=p) for c, p in ingredients),
        created_at=now,
        updated_at=now,
    )


def test_temperature_of_red_is_fully_warm():
    temperature = analyze_color_temperature(color_from_hex("#FF0000"))

    assert temperature.is_warm and not temperature.is_cool
    assert temperature.temperature == pytest.approx(1.0)
    assert "red" in temperature.explanation


def test_temperature_of_blue_is_cool():
    temperature = analyze_color_temperature(color_from_hex("#0000FF"))

    assert temperature.is_cool
    assert temperature.temperature == pytest.approx(-(1.0 - (60.0 / 90.0) * 0.5))
    assert "violet" in temperature.explanation


def test_temperature_of_gray_is_neutral():
    temperature = analyze_color_temperature(color_from_hex("#808080"))

    assert temperature.is_neutral
    assert temperature.temperature == 0.0


@pytest.mark.parametrize(
    "hex_value, dirty, severity",
    [
        ("#FF0000", False, None),
        ("#996666", True, "medium"),
        ("#6B7A6B", True, "high"),
        ("#808080", True, "high"),
    ],
)
def test_cleanliness(hex_value, dirty, severity):
    cleanliness = analyze_color_cleanliness(color_from_hex(hex_value))

    assert cleanliness.is_dirty is dirty
    assert cleanliness.is_clean is not dirty
    assert cleanliness.severity == severity


def test_black_usage_with_chromatic_target_is_high_severity():
    recipe = _recipe("#336699", "#2A4A6A", ("blue", 0.9), ("black", 0.1))

    usage = analyze_black_usage(recipe, PALETTE.get_color_by_id)

    assert usage.has_issue
    assert usage.warning.type == "black_usage"
    assert usage.warning.severity == "high"
    assert usage.alternative == BLACK_ALTERNATIVE


def test_black_usage_ignored_for_achromatic_target():
    recipe = _recipe("#333333", "#333333", ("black", 0.8), ("cyan", 0.2))

    assert not analyze_black_usage(recipe, PALETTE.get_color_by_id).has_issue


def test_complementary_pair_in_equal_parts_warns():
    equal = _recipe("#808080", "#808080", ("red", 0.5), ("cyan", 0.5))
    lopsided = _recipe("#FF3333", "#FF3333", ("red", 0.8), ("cyan", 0.2))

    warnings = analyze_problematic_combinations(equal, PALETTE.get_color_by_id)

    assert len(warnings) == 1
    assert warnings[0].type == "dirty"
    assert warnings[0].severity == "medium"
    assert analyze_problematic_combinations(lopsided, PALETTE.get_color_by_id) == []


def test_clean_recipe_gets_fallback_explanation():
    recipe = _recipe("#FF0000", "#FF0000", ("red", 1.0))

    analysis, warnings = analyze_recipe(recipe, PALETTE.get_color_by_id)

    assert warnings == []
    assert analysis.is_clean and not analysis.is_dirty
    assert analysis.is_warm
    assert analysis.explanations[-1] == CLEAN_EXPLANATION


def test_explanations_follow_rule_order():
    recipe = _recipe("#336699", "#6B7A6B", ("blue", 0.5), ("black", 0.5))

    analysis, warnings = analyze_recipe(recipe, PALETTE.get_color_by_id)

    assert [w.type for w in warnings] == ["dirty", "black_usage"]
    assert analysis.is_dirty
    assert analysis.explanations[2] == BLACK_ALTERNATIVE
    assert CLEAN_EXPLANATION not in analysis.explanations
    assert list(analysis.warnings) == [w.message for w in warnings]


def test_missing_ingredient_raises():
    recipe = _recipe("#336699", "#336699", ("missing", 1.0))

    with pytest.raises(ColorNotFound):
        analyze_recipe(recipe, PALETTE.get_color_by_id)
