from __future__ import annotations

from typing import Iterable

from .conversions import (
    hex_to_rgb,
    hsl_to_rgb,
    rgb_to_hex,
    rgb_to_hsl,
    rgb_to_lab,
    validate_rgb,
)
from .models import Color, new_id

BLACK_PIGMENT_NAMES = ("black", "чёрный", "черный")

# Strict thresholds used to spot a black pigment in a palette.
BLACK_PIGMENT_MAX_LIGHTNESS = 15.0
BLACK_PIGMENT_MAX_SATURATION = 5.0

BLACK_LIGHTNESS_THRESHOLD = 30.0
WHITE_LIGHTNESS_THRESHOLD = 70.0
WHITE_SATURATION_THRESHOLD = 20.0
GRAY_SATURATION_THRESHOLD = 10.0


def color_from_rgb(
    rgb: tuple[float, float, float],
    id: str | None = None,
    name: str | None = None,
    population: int | None = None,
) -> Color:
    canonical = validate_rgb(rgb)
    return Color(
        id=id or new_id("color"),
        name=name,
        rgb=canonical,
        hsl=rgb_to_hsl(canonical),
        hex=rgb_to_hex(canonical),
        lab=rgb_to_lab(canonical),
        population=population,
    )


def color_from_hex(
    value: str,
    id: str | None = None,
    name: str | None = None,
    population: int | None = None,
) -> Color:
    return color_from_rgb(hex_to_rgb(value), id=id, name=name, population=population)


def color_from_hsl(
    hsl: tuple[float, float, float],
    id: str | None = None,
    name: str | None = None,
    population: int | None = None,
) -> Color:
    return color_from_rgb(hsl_to_rgb(hsl), id=id, name=name, population=population)


def is_black_color(color: Color, threshold: float = BLACK_LIGHTNESS_THRESHOLD) -> bool:
    return color.lightness < threshold


def is_white_color(
    color: Color,
    threshold: float = WHITE_LIGHTNESS_THRESHOLD,
    saturation_threshold: float = WHITE_SATURATION_THRESHOLD,
) -> bool:
    return color.lightness > threshold and color.saturation < saturation_threshold


def is_gray_color(
    color: Color, saturation_threshold: float = GRAY_SATURATION_THRESHOLD
) -> bool:
    return color.saturation < saturation_threshold


def is_chromatic(color: Color) -> bool:
    return not (is_black_color(color) or is_white_color(color) or is_gray_color(color))


def is_black_pigment(color: Color) -> bool:
    if (
        color.lightness < BLACK_PIGMENT_MAX_LIGHTNESS
        and color.saturation < BLACK_PIGMENT_MAX_SATURATION
    ):
        return True
    name = (color.name or "").casefold()
    return any(token in name for token in BLACK_PIGMENT_NAMES)


def hue_difference(first: float, second: float) -> float:
    diff = abs(first - second) % 360.0
    return 360.0 - diff if diff > 180.0 else diff


def has_hue_near(colors: Iterable[Color], hue: float, tolerance: float = 30.0) -> bool:
    return any(
        is_chromatic(c) and hue_difference(c.hue, hue) <= tolerance for c in colors
    )
