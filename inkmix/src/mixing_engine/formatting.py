from __future__ import annotations

from functools import reduce
from math import gcd
from typing import Literal, Sequence

from .models import ColorLookup, Recipe, RecipeIngredient

RecipeFormat = Literal["parts", "percentages", "ratio"]
RECIPE_FORMATS = ("parts", "percentages", "ratio")


def _ingredient_label(ingredient: RecipeIngredient, get_color_by_id: ColorLookup) -> str:
    color = get_color_by_id(ingredient.color_id)
    if color is None:
        return f"color {ingredient.color_id}"
    return color.label


def _integer_parts(ingredients: Sequence[RecipeIngredient]) -> list[int]:
    # Proportions relative to the smallest one, kept to a tenth, then reduced.
    smallest = min(i.proportion for i in ingredients)
    tenths = [max(1, round(i.proportion / smallest * 10)) for i in ingredients]
    divisor = reduce(gcd, tenths)
    return [t // divisor for t in tenths]


def format_as_parts(
    ingredients: Sequence[RecipeIngredient], get_color_by_id: ColorLookup
) -> str:
    if not ingredients:
        return "no ingredients"
    parts = _integer_parts(ingredients)
    return ", ".join(
        f"{count} {'part' if count == 1 else 'parts'} "
        f"{_ingredient_label(ingredient, get_color_by_id)}"
        for ingredient, count in zip(ingredients, parts)
    )


def format_as_percentages(
    ingredients: Sequence[RecipeIngredient], get_color_by_id: ColorLookup
) -> str:
    if not ingredients:
        return "no ingredients"
    return ", ".join(
        f"{round(ingredient.proportion * 100)}% "
        f"{_ingredient_label(ingredient, get_color_by_id)}"
        for ingredient in ingredients
    )


def format_as_ratio(ingredients: Sequence[RecipeIngredient]) -> str:
    if not ingredients:
        return "0:0"
    return ":".join(str(count) for count in _integer_parts(ingredients))


def format_recipe(
    recipe: Recipe,
    get_color_by_id: ColorLookup,
    style: RecipeFormat = "parts",
) -> str:
    if style == "parts":
        text = format_as_parts(recipe.ingredients, get_color_by_id)
    elif style == "percentages":
        text = format_as_percentages(recipe.ingredients, get_color_by_id)
    elif style == "ratio":
        text = format_as_ratio(recipe.ingredients)
    else:
        raise ValueError(f"unknown recipe format '{style}'")
    return f"Mix: {text}"
