from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Literal

RGB = tuple[int, int, int]
HSL = tuple[float, float, float]
LAB = tuple[float, float, float]
CMYK = tuple[float, float, float, float]

WarningType = Literal["dirty", "black_usage", "unreachable", "other"]
Severity = Literal["low", "medium", "high"]
SelectionMethod = Literal["representative", "dominant"]


def new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


@dataclass(frozen=True)
class Color:
    id: str
    rgb: RGB
    hsl: HSL
    hex: str
    lab: LAB
    name: str | None = None
    population: int | None = None

    @property
    def hue(self) -> float:
        return self.hsl[0]

    @property
    def saturation(self) -> float:
        return self.hsl[1]

    @property
    def lightness(self) -> float:
        return self.hsl[2]

    @property
    def label(self) -> str:
        return self.name or self.hex

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "hex": self.hex,
            "rgb": {"r": self.rgb[0], "g": self.rgb[1], "b": self.rgb[2]},
            "hsl": {
                "h": round(float(self.hsl[0]), 2),
                "s": round(float(self.hsl[1]), 2),
                "l": round(float(self.hsl[2]), 2),
            },
            "lab": {
                "l": round(float(self.lab[0]), 4),
                "a": round(float(self.lab[1]), 4),
                "b": round(float(self.lab[2]), 4),
            },
        }
        if self.population is not None:
            payload["population"] = int(self.population)
        return payload


ColorLookup = Callable[[str], "Color | None"]


@dataclass(frozen=True)
class UserPalette:
    colors: tuple[Color, ...] = ()
    _index: dict[str, Color] = field(
        init=False, repr=False, compare=False, default_factory=dict
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "colors", tuple(self.colors))
        object.__setattr__(self, "_index", {c.id: c for c in self.colors})

    def __len__(self) -> int:
        return len(self.colors)

    def __iter__(self):
        return iter(self.colors)

    def get_color_by_id(self, color_id: str) -> Color | None:
        return self._index.get(color_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "colors": [
                {"id": c.id, "name": c.name, "hex": c.hex} for c in self.colors
            ]
        }


@dataclass(frozen=True)
class RecipeIngredient:
    color_id: str
    proportion: float

    def to_dict(self) -> dict[str, Any]:
        return {"colorId": self.color_id, "proportion": float(self.proportion)}


@dataclass(frozen=True)
class Recipe:
    id: str
    target_color: Color
    result_color: Color
    ingredients: tuple[RecipeIngredient, ...]
    created_at: datetime
    updated_at: datetime
    notes: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "targetColor": self.target_color.to_dict(),
            "resultColor": self.result_color.to_dict(),
            "ingredients": [i.to_dict() for i in self.ingredients],
            "notes": self.notes,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }


@dataclass(frozen=True)
class RecipeWarning:
    type: WarningType
    message: str
    severity: Severity

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "message": self.message, "severity": self.severity}


@dataclass(frozen=True)
class ColorAnalysis:
    is_clean: bool
    is_dirty: bool
    is_warm: bool
    is_cool: bool
    warnings: tuple[str, ...]
    explanations: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "isClean": self.is_clean,
            "isDirty": self.is_dirty,
            "isWarm": self.is_warm,
            "isCool": self.is_cool,
            "warnings": list(self.warnings),
            "explanations": list(self.explanations),
        }


@dataclass(frozen=True)
class RecipeResult:
    recipe: Recipe
    analysis: ColorAnalysis
    warnings: tuple[RecipeWarning, ...]
    is_exact_match: bool
    distance: float

    @property
    def is_unreachable(self) -> bool:
        return any(w.type == "unreachable" for w in self.warnings)

    def to_dict(self) -> dict[str, Any]:
        return {
            "recipe": self.recipe.to_dict(),
            "analysis": self.analysis.to_dict(),
            "warnings": [w.to_dict() for w in self.warnings],
            "isExactMatch": self.is_exact_match,
            "distance": float(self.distance),
        }


@dataclass(frozen=True)
class QuantizedColor:
    hex: str
    population: int

    def to_dict(self) -> dict[str, Any]:
        return {"hex": self.hex, "population": int(self.population)}


@dataclass(frozen=True)
class ImageAnalysisResult:
    colors: tuple[Color, ...]
    quantized: tuple[QuantizedColor, ...]
    iterations: int
    converged: bool

    @property
    def hex_colors(self) -> list[str]:
        return [c.hex for c in self.colors]

    def to_dict(self) -> dict[str, Any]:
        return {
            "colors": self.hex_colors,
            "quantized": [q.to_dict() for q in self.quantized],
            "iterations": self.iterations,
            "converged": self.converged,
        }
