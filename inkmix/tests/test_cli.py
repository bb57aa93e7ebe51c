from __future__ import annotations

import json
import subprocess
import sys
from pathlib import Path

import numpy as np
from PIL import Image

REPO_ROOT = Path(__file__).resolve().parents[2]


def test_cli_extract_smoke(tmp_path):
    image = np.zeros((80, 80, 3), dtype=np.uint8)
    image[:, :] = [30, 120, 210]

    image_path = tmp_path / "cli.png"
    Image.fromarray(image).save(image_path)

    out_path = tmp_path / "out" / "result.json"

    cmd = [
        sys.executable,
        "-m",
        "inkmix.main",
        "extract",
        "--image",
        str(image_path),
        "--colors",
        "3",
        "--seed",
        "1",
        "--out",
        str(out_path),
    ]

    completed = subprocess.run(
        cmd, cwd=REPO_ROOT, check=True, capture_output=True, text=True
    )

    assert completed.returncode == 0
    payload = json.loads(out_path.read_text(encoding="utf-8"))
    assert payload["colors"] == ["#1E78D2"]
    assert payload["quantized"] == [{"hex": "#1E78D2", "population": 6400}]


def test_cli_recipe_smoke(tmp_path):
    palette_path = tmp_path / "palette.csv"
    palette_path.write_text(
        "id,name,hex\nr,Red,#FF0000\nb,Blue,#0000FF\n", encoding="utf-8"
    )

    cmd = [
        sys.executable,
        "-m",
        "inkmix.main",
        "recipe",
        "--target",
        "#800080",
        "--palette",
        str(palette_path),
        "--format",
        "ratio",
    ]

    completed = subprocess.run(
        cmd, cwd=REPO_ROOT, check=True, capture_output=True, text=True
    )

    payload = json.loads(completed.stdout)
    assert {i["colorId"] for i in payload["recipe"]["ingredients"]} == {"r", "b"}
    assert payload["formatted"].startswith("Mix: ")
    assert payload["distance"] < 15.0


def test_cli_reports_bad_target():
    completed = subprocess.run(
        [sys.executable, "-m", "inkmix.main", "recipe", "--target", "nothex"],
        cwd=REPO_ROOT,
        capture_output=True,
        text=True,
    )

    assert completed.returncode == 2
    assert "invalid hex color" in completed.stderr
