from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

import numpy as np
from sklearn.metrics import pairwise_distances_argmin

from .config import KMeansConfig
from .conversions import rgb_to_hex
from .errors import InvalidRgb
from .models import QuantizedColor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuantizationResult:
    colors: list[QuantizedColor]
    iterations: int
    converged: bool
    max_shift: float

    @property
    def total_population(self) -> int:
        return sum(c.population for c in self.colors)


def as_pixel_array(pixels: np.ndarray | Iterable[Any]) -> np.ndarray:
    """Coerce pixels (an (..., 3) array, RGB triples or ``{r, g, b}``
    mappings) into an (N, 3) float array of 0-255 values."""
    if isinstance(pixels, np.ndarray):
        raw: Any = pixels
    else:
        items = list(pixels)
        if items and isinstance(items[0], Mapping):
            try:
                raw = [[item["r"], item["g"], item["b"]] for item in items]
            except (KeyError, TypeError) as exc:
                raise InvalidRgb("pixel mappings must provide r, g and b") from exc
        else:
            raw = items

    try:
        data = np.asarray(raw, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise InvalidRgb("pixels must be numeric RGB triples") from exc
    if data.size == 0:
        return data.reshape(0, 3)
    if data.shape[-1] != 3:
        raise InvalidRgb(f"pixels must have 3 channels, got shape {data.shape}")

    data = data.reshape(-1, 3)
    if not np.all(np.isfinite(data)) or data.min() < 0 or data.max() > 255:
        raise InvalidRgb("pixel channels must be within [0, 255]")
    return data


class KMeansQuantizer:
    def __init__(self, config: KMeansConfig | None = None) -> None:
        self.config = config or KMeansConfig()
        self._rng = np.random.default_rng(self.config.random_state)

    def quantize(
        self, pixels: np.ndarray | Iterable[Any], k: int
    ) -> QuantizationResult:
        data = as_pixel_array(pixels)
        if data.shape[0] == 0:
            raise ValueError("pixel list is empty")
        if k <= 0:
            raise ValueError("color count must be greater than 0")

        unique, first_seen, counts = np.unique(
            np.rint(data).astype(np.int64),
            axis=0,
            return_index=True,
            return_counts=True,
        )
        if k > unique.shape[0]:
            order = np.argsort(first_seen, kind="stable")
            colors = [
                QuantizedColor(hex=rgb_to_hex(tuple(unique[i])), population=int(counts[i]))
                for i in order
            ]
            return QuantizationResult(
                colors=colors, iterations=0, converged=True, max_shift=0.0
            )

        centroids = self._initial_centroids(data, k)
        labels = np.zeros(data.shape[0], dtype=np.intp)
        max_shift = float("inf")
        converged = False
        iterations = 0

        for iterations in range(1, self.config.max_iterations + 1):
            labels = pairwise_distances_argmin(data, centroids)
            updated = self._update_centroids(data, labels, centroids)
            max_shift = float(np.max(np.linalg.norm(updated - centroids, axis=1)))
            centroids = updated
            if max_shift <= self.config.convergence_threshold:
                converged = True
                break

        logger.debug(
            "k-means k=%d finished after %d iteration(s), converged=%s, shift=%.3f",
            k,
            iterations,
            converged,
            max_shift,
        )
        return QuantizationResult(
            colors=self._summarize(centroids, labels),
            iterations=iterations,
            converged=converged,
            max_shift=max_shift,
        )

    def _initial_centroids(self, data: np.ndarray, k: int) -> np.ndarray:
        sample_size = min(k, data.shape[0])
        indices = self._rng.choice(data.shape[0], size=sample_size, replace=False)
        centroids = data[indices].copy()
        if sample_size < k:
            padding = self._rng.integers(0, 256, size=(k - sample_size, 3))
            centroids = np.vstack([centroids, padding.astype(np.float64)])
        return centroids

    def _update_centroids(
        self, data: np.ndarray, labels: np.ndarray, centroids: np.ndarray
    ) -> np.ndarray:
        k = centroids.shape[0]
        counts = np.bincount(labels, minlength=k)
        sums = np.zeros((k, 3), dtype=np.float64)
        np.add.at(sums, labels, data)

        updated = np.empty_like(centroids)
        filled = counts > 0
        updated[filled] = sums[filled] / counts[filled, None]
        empty = int(np.count_nonzero(~filled))
        if empty:
            updated[~filled] = self._rng.integers(0, 256, size=(empty, 3))
        return updated

    def _summarize(
        self, centroids: np.ndarray, labels: np.ndarray
    ) -> list[QuantizedColor]:
        counts = np.bincount(labels, minlength=centroids.shape[0])
        populations: dict[str, int] = {}
        for centroid, count in zip(centroids, counts):
            if count == 0:
                continue
            hex_value = rgb_to_hex(tuple(centroid))
            populations[hex_value] = populations.get(hex_value, 0) + int(count)
        return [QuantizedColor(hex=h, population=p) for h, p in populations.items()]


def quantize_colors(
    pixels: np.ndarray | Iterable[Any],
    k: int,
    config: KMeansConfig | None = None,
) -> list[QuantizedColor]:
    return KMeansQuantizer(config).quantize(pixels, k).colors
