from __future__ import annotations

import numpy as np
import pytest

from inkmix.src.mixing_engine.colors import color_from_hex
from inkmix.src.mixing_engine.metric import (
    delta_e_cie76,
    delta_e_ciede2000,
    delta_e_to_target,
    find_nearest_color,
    interpret_distance,
)

# Reference pairs from Sharma, Wu and Dalal (2005).
SHARMA_PAIRS = [
    ((50.0, 2.6772, -79.7751), (50.0, 0.0, -82.7485), 2.0425),
    ((50.0, 0.0, 0.0), (50.0, -1.0, 2.0), 2.3669),
    ((50.0, 2.49, -0.001), (50.0, -2.49, 0.0009), 7.1792),
    ((50.0, 2.5, 0.0), (73.0, 25.0, -18.0), 27.1492),
    ((60.2574, -34.0099, 36.2677), (60.4626, -34.1751, 39.4387), 1.2644),
]


@pytest.mark.parametrize("lab1, lab2, expected", SHARMA_PAIRS)
def test_ciede2000_reference_values(lab1, lab2, expected):
    assert delta_e_ciede2000(lab1, lab2) == pytest.approx(expected, abs=1e-4)


def test_cie76_is_euclidean():
    assert delta_e_cie76((0.0, 0.0, 0.0), (3.0, 4.0, 0.0)) == pytest.approx(5.0)


def test_vectorized_distances_match_scalar():
    labs = np.array([pair[0] for pair in SHARMA_PAIRS])
    target = SHARMA_PAIRS[0][1]

    distances = delta_e_to_target(labs, target)

    expected = [delta_e_ciede2000(tuple(lab), target) for lab in labs]
    assert distances.tolist() == pytest.approx(expected)


@pytest.mark.parametrize(
    "distance, band",
    [
        (0.0, "indistinguishable"),
        (1.99, "indistinguishable"),
        (2.0, "very close"),
        (5.0, "similar"),
        (10.0, "noticeably different"),
        (20.0, "noticeably different"),
        (20.01, "very different"),
    ],
)
def test_interpret_distance_bands(distance, band):
    assert interpret_distance(distance) == band


def test_find_nearest_color():
    red = color_from_hex("#FF0000", id="red")
    blue = color_from_hex("#0000FF", id="blue")

    nearest, distance = find_nearest_color(color_from_hex("#F01010"), [blue, red])

    assert nearest.id == "red"
    assert distance < 5.0
    with pytest.raises(ValueError):
        find_nearest_color(red, [])
