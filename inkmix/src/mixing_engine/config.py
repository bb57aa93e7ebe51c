from __future__ import annotations

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Mapping

from .errors import ConfigError

SELECTION_METHODS = ("representative", "dominant")
METRICS = ("ciede2000", "cie76")


def _default_proportion_steps() -> dict[int, float]:
    return {2: 0.05, 3: 0.05, 4: 0.10}


@dataclass(frozen=True)
class EngineConfig:
    max_ingredients: int = 4
    exact_match_threshold: float = 2.0
    unreachable_threshold: float = 15.0
    proportion_steps: Mapping[int, float] = field(
        default_factory=_default_proportion_steps
    )
    metric: str = "ciede2000"
    max_palette_size: int = 40

    def __post_init__(self) -> None:
        if not 1 <= int(self.max_ingredients) <= 4:
            raise ConfigError("max_ingredients must be between 1 and 4")
        if self.metric not in METRICS:
            raise ConfigError(f"unknown metric '{self.metric}'")
        if self.exact_match_threshold >= self.unreachable_threshold:
            raise ConfigError(
                "exact_match_threshold must be below unreachable_threshold"
            )
        steps = {int(k): float(v) for k, v in self.proportion_steps.items()}
        if not steps:
            raise ConfigError("proportion_steps must not be empty")
        for count, step in steps.items():
            if count < 2 or not 0.0 < step < 1.0:
                raise ConfigError(f"invalid proportion step {count}: {step}")
        object.__setattr__(self, "proportion_steps", steps)

    def step_for(self, ingredient_count: int) -> float:
        if ingredient_count in self.proportion_steps:
            return self.proportion_steps[ingredient_count]
        # Larger counts reuse the coarsest configured grid.
        return max(self.proportion_steps.values())


@dataclass(frozen=True)
class KMeansConfig:
    max_iterations: int = 20
    convergence_threshold: float = 1.0
    random_state: int | None = None

    def __post_init__(self) -> None:
        if self.max_iterations < 1:
            raise ConfigError("max_iterations must be at least 1")
        if self.convergence_threshold < 0:
            raise ConfigError("convergence_threshold must be non-negative")


@dataclass(frozen=True)
class ClusterConfig:
    similarity_threshold: float = 20.0
    achromatic_threshold: float = 10.0
    selection_method: str = "representative"

    def __post_init__(self) -> None:
        if self.selection_method not in SELECTION_METHODS:
            raise ConfigError(
                f"selection_method must be one of {', '.join(SELECTION_METHODS)}"
            )
        if self.similarity_threshold <= 0:
            raise ConfigError("similarity_threshold must be positive")


@dataclass(frozen=True)
class Settings:
    engine: EngineConfig = field(default_factory=EngineConfig)
    kmeans: KMeansConfig = field(default_factory=KMeansConfig)
    cluster: ClusterConfig = field(default_factory=ClusterConfig)


def load_config(path_like: str | Path | None) -> Settings:
    if path_like is None:
        return Settings()

    path = Path(path_like)
    if not path.exists():
        raise ConfigError(f"config file does not exist: {path}")
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigError(f"config file is not valid json: {path}") from exc
    if not isinstance(payload, dict):
        raise ConfigError(f"config at {path} must be a json object")
    return settings_from_mapping(payload)


def settings_from_mapping(payload: Mapping[str, Any]) -> Settings:
    unknown = set(payload) - {"engine", "kmeans", "cluster"}
    if unknown:
        raise ConfigError(f"unknown config sections: {', '.join(sorted(unknown))}")

    engine_raw = dict(payload.get("engine") or {})
    if "proportion_steps" in engine_raw:
        engine_raw["proportion_steps"] = {
            int(k): float(v) for k, v in engine_raw["proportion_steps"].items()
        }
    return Settings(
        engine=_build(EngineConfig, engine_raw, "engine"),
        kmeans=_build(KMeansConfig, dict(payload.get("kmeans") or {}), "kmeans"),
        cluster=_build(ClusterConfig, dict(payload.get("cluster") or {}), "cluster"),
    )


def _build(cls: type, raw: dict[str, Any], section: str) -> Any:
    allowed = {f.name for f in fields(cls)}
    unknown = set(raw) - allowed
    if unknown:
        raise ConfigError(
            f"unknown keys in '{section}': {', '.join(sorted(unknown))}"
        )
    return cls(**raw)
