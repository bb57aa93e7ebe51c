from __future__ import annotations

from dataclasses import dataclass
from itertools import combinations

from .colors import hue_difference, is_black_pigment, is_chromatic
from .errors import ColorNotFound
from .models import Color, ColorAnalysis, ColorLookup, Recipe, RecipeWarning, Severity

LOW_SATURATION_THRESHOLD = 25.0
MEDIUM_LIGHTNESS_MIN = 20.0
MEDIUM_LIGHTNESS_MAX = 80.0
GRAYISH_THRESHOLD = 15.0

COMPLEMENTARY_MIN_HUE_DIFF = 150.0
COMPLEMENTARY_MAX_HUE_DIFF = 210.0
# Proportions within 30% of each other count as "equal parts".
COMPLEMENTARY_MIN_RATIO = 0.7

NEUTRAL_SATURATION_THRESHOLD = 20.0
WARM_HUE_START = 270.0
WARM_HUE_END = 90.0

CLEAN_EXPLANATION = "The color looks clean and should heal well in skin."
BLACK_EXPLANATION = (
    "Black is not recommended for darkening chromatic colors: it muddies the "
    "color instead of deepening it."
)
BLACK_ALTERNATIVE = (
    "Darken through the complementary color or use a deeper shade of the base "
    "pigment instead of black."
)
COMPLEMENTARY_EXPLANATION = (
    "Mixing complementary colors in near-equal parts can produce a gray tone."
)
DIRTY_EXPLANATION = (
    "The color has low saturation or a grayish cast and may lose chroma in skin."
)


@dataclass(frozen=True)
class ColorTemperature:
    is_warm: bool
    is_cool: bool
    is_neutral: bool
    temperature: float
    explanation: str


@dataclass(frozen=True)
class Cleanliness:
    is_clean: bool
    is_dirty: bool
    reason: str | None = None
    severity: Severity | None = None


@dataclass(frozen=True)
class BlackUsage:
    has_issue: bool
    warning: RecipeWarning | None = None
    alternative: str | None = None


def analyze_color_temperature(color: Color) -> ColorTemperature:
    hue = color.hue
    if color.saturation < NEUTRAL_SATURATION_THRESHOLD:
        return ColorTemperature(
            is_warm=False,
            is_cool=False,
            is_neutral=True,
            temperature=0.0,
            explanation="The color is neutral and close to gray; low saturation "
            "leaves it without a clear temperature.",
        )

    if hue >= WARM_HUE_START or hue <= WARM_HUE_END:
        if hue >= WARM_HUE_START:
            temperature = 0.5 + ((hue - WARM_HUE_START) / 90.0) * 0.5
        else:
            temperature = 1.0 - (hue / WARM_HUE_END) * 0.7
        temperature = min(1.0, max(0.3, temperature))

        if hue >= 330.0 or hue <= 30.0:
            tone = "red"
        elif hue <= 60.0:
            tone = "orange"
        elif hue <= 90.0:
            tone = "yellow"
        else:
            tone = "red-violet"
        return ColorTemperature(
            is_warm=True,
            is_cool=False,
            is_neutral=False,
            temperature=temperature,
            explanation=f"The color is warm, dominated by {tone} tones.",
        )

    temperature = -(1.0 - (abs(hue - 180.0) / 90.0) * 0.5)
    temperature = min(-0.5, max(-1.0, temperature))
    if hue < 150.0:
        tone = "green"
    elif hue < 210.0:
        tone = "blue"
    else:
        tone = "violet"
    return ColorTemperature(
        is_warm=False,
        is_cool=True,
        is_neutral=False,
        temperature=temperature,
        explanation=f"The color is cool, dominated by {tone} tones.",
    )


def analyze_color_cleanliness(color: Color) -> Cleanliness:
    saturation = color.saturation
    lightness = color.lightness

    if (
        saturation < LOW_SATURATION_THRESHOLD
        and MEDIUM_LIGHTNESS_MIN <= lightness <= MEDIUM_LIGHTNESS_MAX
    ):
        return Cleanliness(
            is_clean=False,
            is_dirty=True,
            reason=f"Low saturation ({round(saturation)}%) at medium lightness "
            "may lose chroma in skin.",
            severity="high" if saturation < GRAYISH_THRESHOLD else "medium",
        )

    if saturation < GRAYISH_THRESHOLD:
        return Cleanliness(
            is_clean=False,
            is_dirty=True,
            reason="The color has a grayish cast that may look dirty in skin.",
            severity="high",
        )

    return Cleanliness(is_clean=True, is_dirty=False)


def _ingredient_colors(
    recipe: Recipe, get_color_by_id: ColorLookup
) -> list[tuple[Color, float]]:
    resolved: list[tuple[Color, float]] = []
    for ingredient in recipe.ingredients:
        color = get_color_by_id(ingredient.color_id)
        if color is None:
            raise ColorNotFound(ingredient.color_id)
        resolved.append((color, float(ingredient.proportion)))
    return resolved


def analyze_black_usage(recipe: Recipe, get_color_by_id: ColorLookup) -> BlackUsage:
    if not is_chromatic(recipe.target_color):
        return BlackUsage(has_issue=False)

    for color, proportion in _ingredient_colors(recipe, get_color_by_id):
        if not is_black_pigment(color):
            continue
        return BlackUsage(
            has_issue=True,
            warning=RecipeWarning(
                type="black_usage",
                message=f"Using black ({round(proportion * 100)}%) to darken a "
                "chromatic color muddies it and may look dirty in skin.",
                severity="high",
            ),
            alternative=BLACK_ALTERNATIVE,
        )
    return BlackUsage(has_issue=False)


def analyze_problematic_combinations(
    recipe: Recipe, get_color_by_id: ColorLookup
) -> list[RecipeWarning]:
    warnings: list[RecipeWarning] = []
    for (first, p1), (second, p2) in combinations(
        _ingredient_colors(recipe, get_color_by_id), 2
    ):
        diff = hue_difference(first.hue, second.hue)
        if not COMPLEMENTARY_MIN_HUE_DIFF < diff < COMPLEMENTARY_MAX_HUE_DIFF:
            continue
        if max(p1, p2) <= 0 or min(p1, p2) / max(p1, p2) <= COMPLEMENTARY_MIN_RATIO:
            continue
        warnings.append(
            RecipeWarning(
                type="dirty",
                message=f"{first.label} and {second.label} are near-complementary "
                "and mixed in close proportions; the mix may gray out.",
                severity="medium",
            )
        )
    return warnings


def analyze_recipe(
    recipe: Recipe, get_color_by_id: ColorLookup
) -> tuple[ColorAnalysis, list[RecipeWarning]]:
    warnings: list[RecipeWarning] = []
    explanations: list[str] = []

    cleanliness = analyze_color_cleanliness(recipe.result_color)
    if cleanliness.is_dirty:
        warnings.append(
            RecipeWarning(
                type="dirty",
                message=cleanliness.reason or DIRTY_EXPLANATION,
                severity=cleanliness.severity or "high",
            )
        )
        explanations.append(DIRTY_EXPLANATION)

    black_usage = analyze_black_usage(recipe, get_color_by_id)
    if black_usage.has_issue and black_usage.warning is not None:
        warnings.append(black_usage.warning)
        explanations.append(BLACK_EXPLANATION)
        if black_usage.alternative:
            explanations.append(black_usage.alternative)

    combination_warnings = analyze_problematic_combinations(recipe, get_color_by_id)
    if combination_warnings:
        warnings.extend(combination_warnings)
        explanations.append(COMPLEMENTARY_EXPLANATION)

    temperature = analyze_color_temperature(recipe.result_color)
    explanations.append(temperature.explanation)

    if not warnings:
        explanations.append(CLEAN_EXPLANATION)

    is_dirty = cleanliness.is_dirty or black_usage.has_issue
    analysis = ColorAnalysis(
        is_clean=not is_dirty,
        is_dirty=is_dirty,
        is_warm=temperature.is_warm,
        is_cool=temperature.is_cool,
        warnings=tuple(w.message for w in warnings),
        explanations=tuple(explanations),
    )
    return analysis, warnings
