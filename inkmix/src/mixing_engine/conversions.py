from __future__ import annotations

import colorsys
import math
import re
from numbers import Real

import numpy as np
from skimage import color as skcolor

from .errors import InvalidHex, InvalidHsl, InvalidRgb
from .models import CMYK, HSL, LAB, RGB

_HEX_PATTERN = re.compile(r"#?[0-9A-Fa-f]{6}")
_RGB_STRING_PATTERN = re.compile(r"^rgb\(|\)$", re.IGNORECASE)


def is_valid_hex(value: object) -> bool:
    return isinstance(value, str) and bool(_HEX_PATTERN.fullmatch(value))


def hex_to_rgb(value: str) -> RGB:
    if not is_valid_hex(value):
        raise InvalidHex(f"invalid hex color '{value}'")

    normalized = value[1:] if value.startswith("#") else value
    return (
        int(normalized[0:2], 16),
        int(normalized[2:4], 16),
        int(normalized[4:6], 16),
    )


def normalize_hex(value: str) -> str:
    return rgb_to_hex(hex_to_rgb(value))


def rgb_to_hex(rgb: tuple[float, float, float]) -> str:
    r, g, b = normalize_rgb(rgb)
    return f"#{r:02X}{g:02X}{b:02X}"


def _is_number(value: object) -> bool:
    return (
        isinstance(value, (Real, np.number))
        and not isinstance(value, bool)
        and math.isfinite(float(value))
    )


def is_valid_rgb(rgb: object) -> bool:
    try:
        validate_rgb(rgb)  # type: ignore[arg-type]
    except InvalidRgb:
        return False
    return True


def validate_rgb(rgb: tuple[float, float, float]) -> RGB:
    try:
        channels = tuple(rgb)
    except TypeError as exc:
        raise InvalidRgb(f"rgb must be a triple, got {rgb!r}") from exc
    if len(channels) != 3 or not all(_is_number(v) for v in channels):
        raise InvalidRgb(f"rgb must be three finite numbers, got {rgb!r}")
    if not all(0 <= float(v) <= 255 for v in channels):
        raise InvalidRgb(f"rgb channels must be within [0, 255], got {rgb!r}")
    return normalize_rgb(channels)  # type: ignore[arg-type]


def normalize_rgb(rgb: tuple[float, float, float]) -> RGB:
    r, g, b = (int(np.clip(round(float(v)), 0, 255)) for v in rgb)
    return r, g, b


def parse_rgb_string(value: str) -> RGB:
    clean = _RGB_STRING_PATTERN.sub("", value.strip()).strip()
    parts = [p.strip() for p in clean.split(",")]
    try:
        channels = tuple(int(p) for p in parts)
    except ValueError as exc:
        raise InvalidRgb(f"invalid rgb string '{value}'") from exc
    if len(channels) != 3:
        raise InvalidRgb(f"invalid rgb string '{value}'")
    return normalize_rgb(channels)  # type: ignore[arg-type]


def is_valid_hsl(hsl: object) -> bool:
    try:
        validate_hsl(hsl)  # type: ignore[arg-type]
    except InvalidHsl:
        return False
    return True


def validate_hsl(hsl: tuple[float, float, float]) -> HSL:
    try:
        channels = tuple(hsl)
    except TypeError as exc:
        raise InvalidHsl(f"hsl must be a triple, got {hsl!r}") from exc
    if len(channels) != 3 or not all(_is_number(v) for v in channels):
        raise InvalidHsl(f"hsl must be three finite numbers, got {hsl!r}")
    h, s, l = (float(v) for v in channels)
    if not (0 <= h <= 360 and 0 <= s <= 100 and 0 <= l <= 100):
        raise InvalidHsl(
            f"hsl out of range (h 0-360, s 0-100, l 0-100), got {hsl!r}"
        )
    return h % 360.0, s, l


def normalize_hsl(hsl: tuple[float, float, float]) -> HSL:
    h, s, l = (float(v) for v in hsl)
    return (
        float(np.clip(h, 0.0, 360.0)) % 360.0,
        float(np.clip(s, 0.0, 100.0)),
        float(np.clip(l, 0.0, 100.0)),
    )


def rgb_to_hsl(rgb: tuple[float, float, float]) -> HSL:
    r, g, b = validate_rgb(rgb)
    h, l, s = colorsys.rgb_to_hls(r / 255.0, g / 255.0, b / 255.0)
    return (h * 360.0) % 360.0, s * 100.0, l * 100.0


def hsl_to_rgb(hsl: tuple[float, float, float]) -> RGB:
    h, s, l = validate_hsl(hsl)
    r, g, b = colorsys.hls_to_rgb(h / 360.0, l / 100.0, s / 100.0)
    return normalize_rgb((r * 255.0, g * 255.0, b * 255.0))


def rgb_to_lab(rgb: tuple[float, float, float]) -> LAB:
    lab = rgb_array_to_lab(np.asarray(validate_rgb(rgb), dtype=np.float64))
    return float(lab[0]), float(lab[1]), float(lab[2])


def lab_to_rgb(lab: tuple[float, float, float]) -> RGB:
    lab_arr = np.asarray(lab, dtype=np.float64).reshape(1, 1, 3)
    rgb = skcolor.lab2rgb(lab_arr).reshape(3)
    clipped = np.clip(np.round(rgb * 255.0), 0, 255).astype(np.uint8)
    return int(clipped[0]), int(clipped[1]), int(clipped[2])


def rgb_to_cmyk(rgb: tuple[float, float, float]) -> CMYK:
    cmyk = rgb_array_to_cmyk(np.asarray(validate_rgb(rgb), dtype=np.float64))
    return float(cmyk[0]), float(cmyk[1]), float(cmyk[2]), float(cmyk[3])


def cmyk_to_rgb(cmyk: tuple[float, float, float, float]) -> RGB:
    rgb = cmyk_array_to_rgb(np.asarray(cmyk, dtype=np.float64))
    return int(rgb[0]), int(rgb[1]), int(rgb[2])


def rgb_array_to_lab(rgb: np.ndarray) -> np.ndarray:
    """Convert an (..., 3) array of 0-255 RGB values to CIELAB (D65)."""
    rgb = np.asarray(rgb, dtype=np.float64)
    flat = np.clip(rgb.reshape(-1, 1, 3) / 255.0, 0.0, 1.0)
    lab = skcolor.rgb2lab(flat, illuminant="D65", observer="2")
    return lab.reshape(rgb.shape)


def rgb_array_to_cmyk(rgb: np.ndarray) -> np.ndarray:
    """Convert an (..., 3) array of 0-255 RGB values to 0-100 CMYK.

    Pure black (K=100) is returned as (0, 0, 0, 100) instead of dividing by
    zero.
    """
    unit = np.asarray(rgb, dtype=np.float64) / 255.0
    k = 1.0 - unit.max(axis=-1)
    denom = 1.0 - k
    safe = np.where(denom > 0, denom, 1.0)
    cmy = np.where(
        (denom > 0)[..., None],
        (1.0 - unit - k[..., None]) / safe[..., None],
        0.0,
    )
    return np.concatenate([cmy, k[..., None]], axis=-1) * 100.0


def cmyk_array_to_rgb(cmyk: np.ndarray) -> np.ndarray:
    """Convert an (..., 4) array of 0-100 CMYK values to rounded 0-255 RGB."""
    clipped = np.clip(np.asarray(cmyk, dtype=np.float64), 0.0, 100.0) / 100.0
    cmy = clipped[..., :3]
    k = clipped[..., 3:4]
    rgb = 255.0 * (1.0 - cmy) * (1.0 - k)
    return np.clip(np.rint(rgb), 0, 255)
