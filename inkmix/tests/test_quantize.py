from __future__ import annotations

import numpy as np
import pytest

from inkmix.src.mixing_engine.config import KMeansConfig
from inkmix.src.mixing_engine.errors import InvalidRgb
from inkmix.src.mixing_engine.quantize import KMeansQuantizer, as_pixel_array, quantize_colors


def _two_tone_pixels(seed: int = 7) -> np.ndarray:
    rng = np.random.default_rng(seed)
    reds = np.clip(rng.normal([220, 30, 30], 6, size=(300, 3)), 0, 255)
    blues = np.clip(rng.normal([30, 40, 200], 6, size=(200, 3)), 0, 255)
    return np.vstack([reds, blues])


def test_returns_unique_colors_when_k_exceeds_them():
    pixels = [(255, 0, 0)] * 3 + [(0, 0, 255)] * 2 + [(255, 0, 0)]

    colors = quantize_colors(pixels, 5)

    assert [c.hex for c in colors] == ["#FF0000", "#0000FF"]
    assert [c.population for c in colors] == [4, 2]
    assert sum(c.population for c in colors) == len(pixels)


def test_accepts_pixel_mappings():
    pixels = [{"r": 10, "g": 20, "b": 30}, {"r": 10, "g": 20, "b": 30}]

    colors = quantize_colors(pixels, 3)

    assert [(c.hex, c.population) for c in colors] == [("#0A141E", 2)]


def test_populations_sum_to_pixel_count():
    pixels = _two_tone_pixels()

    result = KMeansQuantizer(KMeansConfig(random_state=0)).quantize(pixels, 4)

    assert result.total_population == pixels.shape[0]
    assert 1 <= len(result.colors) <= 4
    assert len({c.hex for c in result.colors}) == len(result.colors)


def test_convergence_or_iteration_limit():
    config = KMeansConfig(random_state=3)
    pixels = _two_tone_pixels()

    result = KMeansQuantizer(config).quantize(pixels, 2)

    if result.converged:
        assert result.max_shift <= config.convergence_threshold
    else:
        assert result.iterations == config.max_iterations


def test_iteration_limit_is_respected():
    config = KMeansConfig(max_iterations=1, convergence_threshold=0.0, random_state=1)
    pixels = _two_tone_pixels()

    result = KMeansQuantizer(config).quantize(pixels, 3)

    assert result.iterations == 1


def test_same_seed_gives_same_palette():
    pixels = _two_tone_pixels()

    first = quantize_colors(pixels, 3, KMeansConfig(random_state=42))
    second = quantize_colors(pixels, 3, KMeansConfig(random_state=42))

    assert first == second


def test_rejects_bad_input():
    with pytest.raises(ValueError):
        quantize_colors([], 3)
    with pytest.raises(ValueError):
        quantize_colors([(1, 2, 3)], 0)
    with pytest.raises(InvalidRgb):
        as_pixel_array([(300, 0, 0)])
    with pytest.raises(InvalidRgb):
        as_pixel_array([(1, 2)])
