from __future__ import annotations

from typing import Sequence

import numpy as np

from .conversions import cmyk_array_to_rgb, rgb_array_to_cmyk
from .errors import ColorNotFound, ZeroWeightMixture
from .models import RGB, Color, ColorLookup, RecipeIngredient


def blend_cmyk(rgbs: Sequence[RGB], weights: Sequence[float]) -> RGB:
    """Proportion-weighted CMYK average of ``rgbs`` converted back to RGB.

    Non-positive weights are ignored; the remaining weights are normalized.
    """
    if len(rgbs) != len(weights):
        raise ValueError("rgbs and weights must have the same length")

    weight_arr = np.clip(np.asarray(weights, dtype=np.float64), 0.0, None)
    total = float(weight_arr.sum()) if len(rgbs) else 0.0
    if total <= 0:
        raise ZeroWeightMixture("cannot mix colors: total weight is zero")

    used = weight_arr > 0
    if int(used.sum()) == 1:
        r, g, b = rgbs[int(np.argmax(used))]
        return int(r), int(g), int(b)

    cmyk = rgb_array_to_cmyk(np.asarray(rgbs, dtype=np.float64))
    mixed = (weight_arr / total) @ cmyk
    rgb = cmyk_array_to_rgb(mixed)
    return int(rgb[0]), int(rgb[1]), int(rgb[2])


def _resolve(
    ingredients: Sequence[RecipeIngredient], get_color_by_id: ColorLookup
) -> list[Color]:
    resolved: list[Color] = []
    for ingredient in ingredients:
        color = get_color_by_id(ingredient.color_id)
        if color is None:
            raise ColorNotFound(ingredient.color_id)
        resolved.append(color)
    return resolved


def mix_colors_subtractive(
    ingredients: Sequence[RecipeIngredient], get_color_by_id: ColorLookup
) -> RGB:
    if not ingredients:
        raise ZeroWeightMixture("cannot mix colors: no ingredients provided")

    colors = _resolve(ingredients, get_color_by_id)
    return blend_cmyk([c.rgb for c in colors], [i.proportion for i in ingredients])


def mix_colors_sequential(
    ingredients: Sequence[RecipeIngredient], get_color_by_id: ColorLookup
) -> RGB:
    """Fold ingredients left to right in the order they are added.

    After each step the running mixture is rounded back to RGB and weighted
    by the cumulative proportion poured so far before the next pigment goes
    in, so the result depends on the mixing order.
    """
    if not ingredients:
        raise ZeroWeightMixture("cannot mix colors: no ingredients provided")

    colors = _resolve(ingredients, get_color_by_id)
    steps = [
        (color.rgb, float(ingredient.proportion))
        for color, ingredient in zip(colors, ingredients)
        if ingredient.proportion > 0
    ]
    if not steps:
        raise ZeroWeightMixture("cannot mix colors: total weight is zero")

    running, cumulative = steps[0]
    for rgb, weight in steps[1:]:
        running = blend_cmyk([running, rgb], [cumulative, weight])
        cumulative += weight
    return running
