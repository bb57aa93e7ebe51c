from __future__ import annotations

import io
import json
from pathlib import Path
from typing import Any

import numpy as np
import requests
from PIL import Image


def read_image_rgb(image_path: str | Path) -> np.ndarray:
    path_str = str(image_path)
    if path_str.startswith(("http://", "https://")):
        response = requests.get(path_str, timeout=10)
        response.raise_for_status()
        image_data = io.BytesIO(response.content)
        with Image.open(image_data) as image:
            rgb = image.convert("RGB")
            return np.asarray(rgb, dtype=np.uint8)

    path = Path(image_path)
    with Image.open(path) as image:
        rgb = image.convert("RGB")
        return np.asarray(rgb, dtype=np.uint8)


def image_to_pixels(image_rgb: np.ndarray, max_side: int = 150) -> np.ndarray:
    """Downsize an RGB image so neither side exceeds ``max_side`` and flatten it.

    Aspect ratio is preserved; images already small enough are not upscaled.
    """
    if image_rgb.ndim != 3 or image_rgb.shape[2] != 3:
        raise ValueError("image must be an HxWx3 RGB array")
    if max_side <= 0:
        raise ValueError("max_side must be positive")

    height, width = image_rgb.shape[:2]
    if max(height, width) > max_side:
        image = Image.fromarray(image_rgb.astype(np.uint8))
        image.thumbnail((max_side, max_side), Image.Resampling.BILINEAR)
        image_rgb = np.asarray(image, dtype=np.uint8)
    return image_rgb.reshape(-1, 3)


def write_result_json(result: Any, output_path: str | Path) -> None:
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = result.to_dict() if hasattr(result, "to_dict") else result
    payload = json.dumps(data, indent=2, ensure_ascii=False)
    path.write_text(payload + "\n", encoding="utf-8")
