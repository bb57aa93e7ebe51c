from __future__ import annotations

from typing import Sequence

import numpy as np
from skimage.color import deltaE_cie76, deltaE_ciede2000

from .models import LAB, Color

EXACT_MATCH_THRESHOLD = 2.0
UNREACHABLE_THRESHOLD = 15.0

DISTANCE_BANDS = (
    "indistinguishable",
    "very close",
    "similar",
    "noticeably different",
    "very different",
)


def delta_e_cie76(lab1: LAB, lab2: LAB) -> float:
    first = np.asarray(lab1, dtype=np.float64).reshape(1, 1, 3)
    second = np.asarray(lab2, dtype=np.float64).reshape(1, 1, 3)
    return float(deltaE_cie76(first, second).reshape(-1)[0])


def delta_e_ciede2000(lab1: LAB, lab2: LAB) -> float:
    first = np.asarray(lab1, dtype=np.float64).reshape(1, 1, 3)
    second = np.asarray(lab2, dtype=np.float64).reshape(1, 1, 3)
    return float(deltaE_ciede2000(first, second).reshape(-1)[0])


def delta_e_to_target(
    labs: np.ndarray, target_lab: LAB, metric: str = "ciede2000"
) -> np.ndarray:
    """Distances from every LAB row in an (..., 3) array to one target."""
    labs = np.asarray(labs, dtype=np.float64)
    flat = labs.reshape(1, -1, 3)
    target = np.asarray(target_lab, dtype=np.float64).reshape(1, 1, 3)
    if metric == "cie76":
        distances = deltaE_cie76(flat, target)
    else:
        distances = deltaE_ciede2000(flat, target)
    return np.asarray(distances, dtype=np.float64).reshape(labs.shape[:-1])


def color_distance(first: Color, second: Color, metric: str = "ciede2000") -> float:
    if metric == "cie76":
        return delta_e_cie76(first.lab, second.lab)
    return delta_e_ciede2000(first.lab, second.lab)


def interpret_distance(distance: float) -> str:
    if distance < 2.0:
        return DISTANCE_BANDS[0]
    if distance < 5.0:
        return DISTANCE_BANDS[1]
    if distance < 10.0:
        return DISTANCE_BANDS[2]
    if distance <= 20.0:
        return DISTANCE_BANDS[3]
    return DISTANCE_BANDS[4]


def find_nearest_color(
    target: Color, colors: Sequence[Color], metric: str = "ciede2000"
) -> tuple[Color, float]:
    if not colors:
        raise ValueError("cannot find nearest color in an empty sequence")

    labs = np.asarray([c.lab for c in colors], dtype=np.float64)
    distances = delta_e_to_target(labs, target.lab, metric=metric)
    best_idx = int(np.argmin(distances))
    return colors[best_idx], float(distances[best_idx])
