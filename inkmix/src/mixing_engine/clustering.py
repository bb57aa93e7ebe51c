from __future__ import annotations

from functools import cmp_to_key
from typing import Any, Iterable, Mapping

import numpy as np

from .analysis import analyze_color_temperature
from .colors import color_from_hex
from .config import ClusterConfig
from .metric import delta_e_to_target
from .models import Color, QuantizedColor

NEAR_WHITE_LIGHTNESS = 94.0
NEAR_WHITE_SOFT_LIGHTNESS = 80.0
NEAR_WHITE_SOFT_SATURATION = 15.0
NEAR_BLACK_LIGHTNESS = 6.0
NEAR_BLACK_SOFT_LIGHTNESS = 18.0
NEAR_BLACK_SOFT_SATURATION = 12.0

LARGE_CLUSTER_SIZE = 4
SATURATION_SPREAD = 15.0
HUE_TIE_DEGREES = 10.0


def is_near_white(color: Color) -> bool:
    return color.lightness >= NEAR_WHITE_LIGHTNESS or (
        color.lightness > NEAR_WHITE_SOFT_LIGHTNESS
        and color.saturation < NEAR_WHITE_SOFT_SATURATION
    )


def is_near_black(color: Color) -> bool:
    return color.lightness < NEAR_BLACK_LIGHTNESS or (
        color.lightness < NEAR_BLACK_SOFT_LIGHTNESS
        and color.saturation < NEAR_BLACK_SOFT_SATURATION
    )


def _coerce(item: QuantizedColor | Mapping[str, Any] | str) -> tuple[str, int | None]:
    if isinstance(item, QuantizedColor):
        return item.hex, item.population
    if isinstance(item, Mapping):
        population = item.get("population")
        return str(item["hex"]), None if population is None else int(population)
    return str(item), None


def to_colors(
    quantized: Iterable[QuantizedColor | Mapping[str, Any] | str],
) -> list[Color]:
    colors: list[Color] = []
    for index, item in enumerate(quantized):
        hex_value, population = _coerce(item)
        hex_value = hex_value.strip()
        if not hex_value.startswith("#"):
            hex_value = f"#{hex_value}"
        colors.append(
            color_from_hex(
                hex_value.upper(), id=f"quantized-{index}", population=population
            )
        )
    return colors


def cluster_similar_colors(colors: Iterable[Color], threshold: float) -> list[list[Color]]:
    """Greedy first-pass clustering by CIEDE2000.

    Each color joins the cluster holding its nearest already-placed member if
    that member is closer than ``threshold``; otherwise it starts a new
    cluster. The result depends on input order.
    """
    clusters: list[list[Color]] = []
    member_labs: list[tuple[float, float, float]] = []
    member_cluster: list[int] = []

    for color in colors:
        target_cluster: int | None = None
        if member_labs:
            distances = delta_e_to_target(
                np.asarray(member_labs, dtype=np.float64), color.lab
            )
            nearest = int(np.argmin(distances))
            if distances[nearest] < threshold:
                target_cluster = member_cluster[nearest]

        if target_cluster is None:
            clusters.append([color])
            target_cluster = len(clusters) - 1
        else:
            clusters[target_cluster].append(color)
        member_labs.append(color.lab)
        member_cluster.append(target_cluster)

    return clusters


def select_representatives(cluster: list[Color]) -> list[Color]:
    if len(cluster) <= 1:
        return list(cluster)

    by_lightness = sorted(cluster, key=lambda c: c.lightness)
    by_saturation = sorted(cluster, key=lambda c: c.saturation, reverse=True)
    most_saturated = by_saturation[0]

    selected: dict[str, Color] = {}
    for color in (by_lightness[0], by_lightness[-1], most_saturated):
        selected.setdefault(color.id, color)

    if len(cluster) >= LARGE_CLUSTER_SIZE:
        by_temperature = sorted(
            cluster, key=lambda c: analyze_color_temperature(c).temperature
        )
        for color in (by_temperature[0], by_temperature[-1]):
            selected.setdefault(color.id, color)

        least_saturated = by_saturation[-1]
        if least_saturated.saturation < most_saturated.saturation - SATURATION_SPREAD:
            selected.setdefault(least_saturated.id, least_saturated)

    return list(selected.values())


def select_dominant(cluster: list[Color]) -> Color:
    return max(cluster, key=lambda c: c.population or 0)


def _compare_chromatic(first: Color, second: Color) -> float:
    if abs(first.hue - second.hue) > HUE_TIE_DEGREES:
        return first.hue - second.hue
    return second.lightness - first.lightness


def sort_for_presentation(colors: Iterable[Color], achromatic_threshold: float) -> list[Color]:
    chromatic: list[Color] = []
    achromatic: list[Color] = []
    for color in colors:
        if color.saturation < achromatic_threshold:
            achromatic.append(color)
        else:
            chromatic.append(color)

    chromatic.sort(key=cmp_to_key(_compare_chromatic))
    achromatic.sort(key=lambda c: c.lightness, reverse=True)
    return chromatic + achromatic


class PerceptualClusterer:
    def __init__(self, config: ClusterConfig | None = None) -> None:
        self.config = config or ClusterConfig()

    def run(
        self,
        quantized: Iterable[QuantizedColor | Mapping[str, Any] | str],
    ) -> list[Color]:
        candidates = [
            c for c in to_colors(quantized) if not (is_near_white(c) or is_near_black(c))
        ]
        if not candidates:
            return []

        clusters = cluster_similar_colors(candidates, self.config.similarity_threshold)
        if self.config.selection_method == "dominant":
            picked = [select_dominant(cluster) for cluster in clusters if cluster]
        else:
            picked = [c for cluster in clusters for c in select_representatives(cluster)]
        return sort_for_presentation(picked, self.config.achromatic_threshold)


def postprocess_quantized_colors(
    quantized: Iterable[QuantizedColor | Mapping[str, Any] | str],
    selection_method: str = "representative",
    similarity_threshold: float = 20.0,
    achromatic_threshold: float = 10.0,
) -> list[str]:
    clusterer = PerceptualClusterer(
        ClusterConfig(
            similarity_threshold=similarity_threshold,
            achromatic_threshold=achromatic_threshold,
            selection_method=selection_method,
        )
    )
    return [c.hex for c in clusterer.run(quantized)]
