from __future__ import annotations

import json

import pytest

from inkmix.src.mixing_engine.config import (
    ClusterConfig,
    EngineConfig,
    KMeansConfig,
    Settings,
    load_config,
    settings_from_mapping,
)
from inkmix.src.mixing_engine.errors import ConfigError


def test_defaults():
    settings = load_config(None)

    assert settings == Settings()
    assert settings.engine.max_ingredients == 4
    assert settings.engine.step_for(2) == 0.05
    assert settings.engine.step_for(4) == 0.10
    assert settings.kmeans.max_iterations == 20
    assert settings.cluster.similarity_threshold == 20.0


def test_load_config_overrides(tmp_path):
    config_file = tmp_path / "inkmix.json"
    config_file.write_text(
        json.dumps(
            {
                "engine": {"metric": "cie76", "proportion_steps": {"2": 0.1}},
                "kmeans": {"random_state": 5},
                "cluster": {"selection_method": "dominant"},
            }
        ),
        encoding="utf-8",
    )

    settings = load_config(config_file)

    assert settings.engine.metric == "cie76"
    assert settings.engine.step_for(2) == 0.1
    # counts without their own step fall back to the coarsest one
    assert settings.engine.step_for(3) == 0.1
    assert settings.kmeans.random_state == 5
    assert settings.cluster.selection_method == "dominant"
    assert settings.cluster.achromatic_threshold == 10.0


@pytest.mark.parametrize(
    "payload",
    [
        {"optimizer": {}},
        {"engine": {"max_ingredient": 3}},
        {"engine": {"max_ingredients": 6}},
        {"engine": {"metric": "rgb"}},
        {"engine": {"proportion_steps": {}}},
        {"engine": {"exact_match_threshold": 20.0}},
        {"kmeans": {"max_iterations": 0}},
        {"cluster": {"selection_method": "median"}},
    ],
)
def test_invalid_settings_raise(payload):
    with pytest.raises(ConfigError):
        settings_from_mapping(payload)


def test_missing_or_malformed_file_raises(tmp_path):
    broken = tmp_path / "broken.json"
    broken.write_text("[1, 2]", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path / "missing.json")
    with pytest.raises(ConfigError):
        load_config(broken)


def test_direct_construction_validates():
    with pytest.raises(ConfigError):
        EngineConfig(max_ingredients=0)
    with pytest.raises(ConfigError):
        KMeansConfig(convergence_threshold=-1)
    with pytest.raises(ConfigError):
        ClusterConfig(similarity_threshold=0)
