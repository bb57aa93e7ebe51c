from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from itertools import combinations_with_replacement, islice, product
from typing import Iterable, Iterator, Sequence

import numpy as np

from .analysis import analyze_recipe
from .colors import color_from_hsl, color_from_rgb, has_hue_near, hue_difference
from .colors import is_black_pigment, is_chromatic
from .config import EngineConfig
from .conversions import cmyk_array_to_rgb, rgb_array_to_cmyk, rgb_array_to_lab
from .errors import (
    EmptyPalette,
    InsufficientChromaticPalette,
    InsufficientPalette,
    PaletteTooLarge,
)
from .metric import color_distance, delta_e_to_target, find_nearest_color
from .mixing import mix_colors_sequential, mix_colors_subtractive
from .models import (
    Color,
    Recipe,
    RecipeIngredient,
    RecipeResult,
    RecipeWarning,
    UserPalette,
    new_id,
)

logger = logging.getLogger(__name__)

# Number of palette combinations evaluated per vectorized batch.
COMBINATION_BATCH_SIZE = 2048

UNREACHABLE_GAP = 20.0
HUE_TOLERANCE = 30.0
SUGGESTION_SATURATION_RANGE = (40.0, 80.0)
SUGGESTION_LIGHTNESS_RANGE = (20.0, 45.0)


@dataclass(frozen=True)
class _Candidate:
    indices: tuple[int, ...]
    proportions: tuple[float, ...]
    distance: float


def proportion_grid(count: int, step: float) -> np.ndarray:
    """All proportion vectors of ``count`` entries on a ``step`` grid.

    Every entry is at least one step and rows sum to 1. Rows are ordered the
    way nested loops over the leading entries would visit them, with the last
    entry implied as the remainder.
    """
    if count < 1:
        raise ValueError("count must be at least 1")
    if count == 1:
        return np.ones((1, 1), dtype=np.float64)

    units = max(1, int(round(1.0 / step)))
    rows = [
        parts + (units - sum(parts),)
        for parts in product(range(1, units), repeat=count - 1)
        if units - sum(parts) >= 1
    ]
    return np.asarray(rows, dtype=np.float64).reshape(-1, count) / units


def _batched(items: Iterable[tuple[int, ...]], size: int) -> Iterator[list[tuple[int, ...]]]:
    iterator = iter(items)
    while True:
        batch = list(islice(iterator, size))
        if not batch:
            return
        yield batch


def _as_palette(palette: UserPalette | Sequence[Color]) -> UserPalette:
    if isinstance(palette, UserPalette):
        return palette
    return UserPalette(colors=tuple(palette))


class RecipeOptimizer:
    def __init__(self, config: EngineConfig | None = None) -> None:
        self.config = config or EngineConfig()

    def find_recipe(
        self,
        target: Color,
        palette: UserPalette | Sequence[Color],
        max_ingredients: int | None = None,
    ) -> RecipeResult:
        palette = _as_palette(palette)
        max_ingredients = (
            self.config.max_ingredients if max_ingredients is None else max_ingredients
        )
        self._validate(palette, max_ingredients)

        nearest, nearest_distance = find_nearest_color(
            target, palette.colors, metric=self.config.metric
        )
        if nearest_distance < self.config.exact_match_threshold:
            logger.debug(
                "direct match %s for %s (distance %.3f)",
                nearest.id,
                target.hex,
                nearest_distance,
            )
            ingredients = (RecipeIngredient(color_id=nearest.id, proportion=1.0),)
            return self._build_result(
                target, palette, ingredients, nearest, nearest_distance, palette.colors
            )

        usable = self._usable_colors(target, palette)
        best = self._search(target, usable, max_ingredients)
        ingredients = self._order_ingredients(target, usable, best)

        lookup = palette.get_color_by_id
        result_rgb = mix_colors_subtractive(ingredients, lookup)
        result_color = color_from_rgb(result_rgb)
        distance = color_distance(target, result_color, self.config.metric)

        sequential_rgb = mix_colors_sequential(ingredients, lookup)
        if sequential_rgb != result_rgb:
            sequential_color = color_from_rgb(sequential_rgb)
            sequential_distance = color_distance(
                target, sequential_color, self.config.metric
            )
            if sequential_distance < distance:
                logger.debug(
                    "sequential mix is closer (%.3f < %.3f)",
                    sequential_distance,
                    distance,
                )
                result_color, distance = sequential_color, sequential_distance

        return self._build_result(
            target, palette, ingredients, result_color, distance, usable
        )

    def _validate(self, palette: UserPalette, max_ingredients: int) -> None:
        if len(palette) == 0:
            raise EmptyPalette("the palette is empty; add colors to the palette")
        if len(palette) < 2:
            raise InsufficientPalette("the palette must contain at least 2 colors")
        if len(palette) > self.config.max_palette_size:
            raise PaletteTooLarge(
                f"the palette has {len(palette)} colors; at most "
                f"{self.config.max_palette_size} are supported"
            )
        if not 1 <= int(max_ingredients) <= 4:
            raise ValueError("max_ingredients must be between 1 and 4")

    def _usable_colors(self, target: Color, palette: UserPalette) -> tuple[Color, ...]:
        if not is_chromatic(target):
            return palette.colors

        usable = tuple(c for c in palette.colors if not is_black_pigment(c))
        if len(usable) < 2:
            raise InsufficientChromaticPalette(
                "a chromatic target needs at least 2 non-black colors in the palette"
            )
        if len(usable) < len(palette):
            logger.debug(
                "excluded %d black pigment(s) for chromatic target %s",
                len(palette) - len(usable),
                target.hex,
            )
        return usable

    def _search(
        self, target: Color, usable: Sequence[Color], max_ingredients: int
    ) -> _Candidate:
        exact_threshold = self.config.exact_match_threshold
        cmyk = rgb_array_to_cmyk(np.asarray([c.rgb for c in usable], dtype=np.float64))
        best: _Candidate | None = None
        evaluated = 0

        for count in range(1, max_ingredients + 1):
            grid = proportion_grid(count, self.config.step_for(count))
            combos = combinations_with_replacement(range(len(usable)), count)
            for batch in _batched(combos, COMBINATION_BATCH_SIZE):
                indices = np.asarray(batch, dtype=np.intp)
                mixed = np.einsum("pk,mkc->mpc", grid, cmyk[indices])
                labs = rgb_array_to_lab(cmyk_array_to_rgb(mixed))
                distances = delta_e_to_target(labs, target.lab, self.config.metric)
                evaluated += distances.size

                flat = distances.reshape(-1)
                hits = np.flatnonzero(flat < exact_threshold)
                flat_idx = int(hits[0]) if hits.size else int(np.argmin(flat))
                combo_idx, grid_idx = divmod(flat_idx, grid.shape[0])
                distance = float(flat[flat_idx])

                if best is None or distance < best.distance:
                    best = _Candidate(
                        indices=tuple(int(i) for i in indices[combo_idx]),
                        proportions=tuple(float(p) for p in grid[grid_idx]),
                        distance=distance,
                    )
                if best.distance < exact_threshold:
                    logger.debug(
                        "exact match after %d candidates (distance %.3f)",
                        evaluated,
                        best.distance,
                    )
                    return best

        if best is None:
            raise InsufficientPalette("no candidate mixtures could be evaluated")
        logger.debug(
            "searched %d candidates, best distance %.3f", evaluated, best.distance
        )
        return best

    def _order_ingredients(
        self, target: Color, usable: Sequence[Color], best: _Candidate
    ) -> tuple[RecipeIngredient, ...]:
        merged: dict[int, float] = {}
        for index, proportion in zip(best.indices, best.proportions):
            merged[index] = merged.get(index, 0.0) + proportion
        total = sum(merged.values())

        def sort_key(item: tuple[int, float]) -> tuple[float, float]:
            index, proportion = item
            return (
                -round(proportion, 9),
                color_distance(usable[index], target, self.config.metric),
            )

        ordered = sorted(merged.items(), key=sort_key)
        return tuple(
            RecipeIngredient(color_id=usable[index].id, proportion=proportion / total)
            for index, proportion in ordered
        )

    def _build_result(
        self,
        target: Color,
        palette: UserPalette,
        ingredients: tuple[RecipeIngredient, ...],
        result_color: Color,
        distance: float,
        usable: Sequence[Color],
    ) -> RecipeResult:
        now = datetime.now(timezone.utc)
        recipe = Recipe(
            id=new_id("recipe"),
            target_color=target,
            result_color=result_color,
            ingredients=ingredients,
            created_at=now,
            updated_at=now,
        )
        analysis, warnings = analyze_recipe(recipe, palette.get_color_by_id)

        if distance > self.config.unreachable_threshold:
            logger.info(
                "target %s is unreachable with this palette (distance %.2f)",
                target.hex,
                distance,
            )
            warnings.append(self._unreachable_warning(target, result_color, usable))

        return RecipeResult(
            recipe=recipe,
            analysis=analysis,
            warnings=tuple(warnings),
            is_exact_match=distance < self.config.exact_match_threshold,
            distance=distance,
        )

    def _unreachable_warning(
        self, target: Color, result: Color, usable: Sequence[Color]
    ) -> RecipeWarning:
        reasons: list[str] = []
        if target.saturation > result.saturation + UNREACHABLE_GAP:
            reasons.append("the target is more saturated than the palette allows")
        if target.lightness > result.lightness + UNREACHABLE_GAP:
            reasons.append("the target is lighter than the palette allows")
        elif target.lightness < result.lightness - UNREACHABLE_GAP:
            reasons.append("the target is darker than the palette allows")
        if hue_difference(target.hue, result.hue) > HUE_TOLERANCE:
            reasons.append("the palette lacks the required hue")

        if reasons:
            message = (
                f"{target.hex} cannot be reached because {', '.join(reasons)}. "
                f"The closest mix is {result.hex}."
            )
        else:
            gap = round(result.saturation - target.saturation)
            message = (
                f"{target.hex} cannot be reached with the current palette. The "
                f"closest mix {result.hex} differs by {gap} saturation points."
            )

        if is_chromatic(target) and target.lightness < result.lightness:
            complementary_hue = (target.hue + 180.0) % 360.0
            if not has_hue_near(usable, complementary_hue, HUE_TOLERANCE):
                suggestion = color_from_hsl(
                    (
                        complementary_hue,
                        float(np.clip(target.saturation, *SUGGESTION_SATURATION_RANGE)),
                        float(np.clip(target.lightness, *SUGGESTION_LIGHTNESS_RANGE)),
                    )
                )
                message += (
                    f" To darken without black, add a pigment near {suggestion.hex} "
                    f"(complementary hue {round(complementary_hue)}°)."
                )

        return RecipeWarning(type="unreachable", message=message, severity="high")


def find_recipe(
    target: Color,
    palette: UserPalette | Sequence[Color],
    max_ingredients: int | None = None,
    config: EngineConfig | None = None,
) -> RecipeResult:
    return RecipeOptimizer(config).find_recipe(target, palette, max_ingredients)
