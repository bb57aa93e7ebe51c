from __future__ import annotations

import csv
import hashlib
import json
from dataclasses import dataclass
from itertools import combinations
from pathlib import Path
from typing import Iterable, Mapping

import numpy as np

from .colors import color_from_hex, color_from_rgb
from .conversions import is_valid_hex
from .errors import InvalidRgb, PaletteValidationError
from .models import Color, UserPalette

MIN_PALETTE_COLORS = 2
# Euclidean RGB distance under which two palette colors count as duplicates.
DUPLICATE_RGB_DISTANCE = 5.0


@dataclass(frozen=True)
class PaletteReport:
    is_valid: bool
    errors: tuple[str, ...]
    warnings: tuple[str, ...]

    def to_dict(self) -> dict[str, object]:
        return {
            "isValid": self.is_valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
        }


def default_palette() -> UserPalette:
    return UserPalette(
        colors=(
            color_from_hex("#FF0000", id="red-1", name="Red"),
            color_from_hex("#0000FF", id="blue-1", name="Blue"),
            color_from_hex("#FFFF00", id="yellow-1", name="Yellow"),
            color_from_hex("#FF00FF", id="magenta-1", name="Magenta"),
            color_from_hex("#FFFFFF", id="white-1", name="White"),
            color_from_hex("#000000", id="black-1", name="Black"),
        )
    )


def load_palette(palette_path: str | Path | None) -> UserPalette:
    if palette_path is None:
        return default_palette()

    path = Path(palette_path)
    if not path.exists():
        raise PaletteValidationError(f"palette file does not exist: {path}")

    if path.suffix.lower() == ".csv":
        colors = _load_csv(path)
    elif path.suffix.lower() == ".json":
        colors = _load_json(path)
    else:
        raise PaletteValidationError(
            f"unsupported palette format '{path.suffix}'. Use .csv or .json"
        )

    if not colors:
        raise PaletteValidationError(f"palette has no usable entries: {path}")
    return _unique_palette(colors, str(path))


def palette_from_records(
    records: Iterable[Mapping[str, object]], source: str = "palette"
) -> UserPalette:
    colors = [
        _parse_entry(dict(record), f"{source}:{idx}")
        for idx, record in enumerate(records, start=1)
    ]
    return _unique_palette(colors, source)


def _unique_palette(colors: list[Color], source: str) -> UserPalette:
    seen: dict[str, int] = {}
    for idx, color in enumerate(colors, start=1):
        if color.id in seen:
            raise PaletteValidationError(
                f"{source}: duplicate color id '{color.id}' "
                f"(entries {seen[color.id]} and {idx})"
            )
        seen[color.id] = idx
    return UserPalette(colors=tuple(colors))


def save_palette_json(palette: UserPalette, output_path: str | Path) -> None:
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = json.dumps(palette.to_dict(), indent=2, ensure_ascii=False)
    path.write_text(payload + "\n", encoding="utf-8")


def validate_palette(palette: UserPalette) -> PaletteReport:
    errors: list[str] = []
    warnings: list[str] = []

    if len(palette) < MIN_PALETTE_COLORS:
        errors.append(f"palette must contain at least {MIN_PALETTE_COLORS} colors")

    for first, second in combinations(palette.colors, 2):
        distance = float(
            np.linalg.norm(
                np.asarray(first.rgb, dtype=np.float64)
                - np.asarray(second.rgb, dtype=np.float64)
            )
        )
        if distance < DUPLICATE_RGB_DISTANCE:
            warnings.append(
                f"similar colors: {first.label} and {second.label} "
                f"(distance: {distance:.1f})"
            )

    return PaletteReport(
        is_valid=not errors, errors=tuple(errors), warnings=tuple(warnings)
    )


def palette_color_id(name: str | None, hex_value: str) -> str:
    digest = hashlib.sha1(f"{name or ''}|{hex_value}".encode("utf-8")).hexdigest()
    return f"color-{digest[:12]}"


def _load_csv(path: Path) -> list[Color]:
    with path.open("r", encoding="utf-8", newline="") as handle:
        reader = csv.DictReader(handle)
        if not reader.fieldnames:
            raise PaletteValidationError(f"palette csv has no header: {path}")

        colors: list[Color] = []
        for idx, row in enumerate(reader, start=2):
            colors.append(_parse_entry(row, f"{path}:{idx}"))
        return colors


def _load_json(path: Path) -> list[Color]:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise PaletteValidationError(f"invalid json palette at {path}: {exc}") from exc

    if isinstance(payload, dict):
        if "colors" not in payload or not isinstance(payload["colors"], list):
            raise PaletteValidationError(
                f"json palette at {path} must be a list or include a 'colors' list"
            )
        records = payload["colors"]
    elif isinstance(payload, list):
        records = payload
    else:
        raise PaletteValidationError(
            f"json palette at {path} must be a list or object with 'colors'"
        )

    colors: list[Color] = []
    for idx, record in enumerate(records, start=1):
        if not isinstance(record, dict):
            raise PaletteValidationError(
                f"invalid palette entry at {path}:{idx} (expected object)"
            )
        colors.append(_parse_entry(record, f"{path}:{idx}"))
    return colors


def _parse_entry(raw_entry: dict[str, object], location: str) -> Color:
    normalized: dict[str, object] = {
        str(key).strip().lower(): value
        for key, value in raw_entry.items()
        if key is not None
    }

    name = _as_clean_str(normalized.get("name"))
    color_id = _as_clean_str(normalized.get("id"))
    hex_value = _as_clean_str(normalized.get("hex"))

    if hex_value:
        if not is_valid_hex(hex_value):
            raise PaletteValidationError(f"{location}: invalid hex color '{hex_value}'")
        color = color_from_hex(hex_value, name=name)
    else:
        rgb = _entry_rgb(normalized, location)
        try:
            color = color_from_rgb(rgb, name=name)
        except InvalidRgb as exc:
            raise PaletteValidationError(f"{location}: {exc}") from exc

    return Color(
        id=color_id or palette_color_id(name, color.hex),
        name=name,
        rgb=color.rgb,
        hsl=color.hsl,
        hex=color.hex,
        lab=color.lab,
    )


def _entry_rgb(
    normalized: dict[str, object], location: str
) -> tuple[float, float, float]:
    r_raw = normalized.get("r")
    g_raw = normalized.get("g")
    b_raw = normalized.get("b")

    if r_raw is None or g_raw is None or b_raw is None:
        raise PaletteValidationError(
            f"{location}: provide either 'hex' or numeric 'r','g','b' values"
        )

    try:
        return (float(r_raw), float(g_raw), float(b_raw))
    except (TypeError, ValueError) as exc:
        raise PaletteValidationError(
            f"{location}: invalid RGB values, expected numeric r/g/b"
        ) from exc


def _as_clean_str(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text if text else None
