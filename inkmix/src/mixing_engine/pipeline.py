from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable

import numpy as np

from .clustering import PerceptualClusterer
from .config import ClusterConfig, KMeansConfig
from .io import image_to_pixels, read_image_rgb
from .models import ImageAnalysisResult
from .quantize import KMeansQuantizer


class ImageAnalysisPipeline:
    def __init__(
        self,
        kmeans: KMeansConfig | None = None,
        cluster: ClusterConfig | None = None,
    ) -> None:
        self.quantizer = KMeansQuantizer(kmeans)
        self.clusterer = PerceptualClusterer(cluster)

    def run(
        self, pixels: np.ndarray | Iterable[Any], color_count: int
    ) -> ImageAnalysisResult:
        quantized = self.quantizer.quantize(pixels, color_count)
        colors = self.clusterer.run(quantized.colors)
        return ImageAnalysisResult(
            colors=tuple(colors),
            quantized=tuple(quantized.colors),
            iterations=quantized.iterations,
            converged=quantized.converged,
        )

    def run_image(
        self,
        image_path: str | Path,
        color_count: int,
        max_side: int = 150,
    ) -> ImageAnalysisResult:
        image_rgb = read_image_rgb(image_path)
        return self.run(image_to_pixels(image_rgb, max_side=max_side), color_count)
