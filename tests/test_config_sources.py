from __future__ import annotations
import pytest

from chpkcodec.config import DiffConfig

ENV_KEYS = ["CHPK_BLOCK_SIZE", "CHPK_DIFF_THRESHOLD", "CHPK_COLOR_DISTANCE",
            "CHPK_TOLERANCE_RATIO", "CHPK_COMPRESS_LEVEL"]


def test_defaults():
    cfg = DiffConfig()
    assert cfg.block_size == 32
    assert cfg.diff_threshold == 0
    assert cfg.color_distance_threshold == 0.0
    assert cfg.diff_tolerance_ratio == 0.0
    assert cfg.compress_level == 6
    assert cfg.strict and not cfg.uses_color_distance


@pytest.mark.parametrize("kwargs", [
    {"block_size": 0},
    {"diff_threshold": 256},
    {"diff_threshold": -1},
    {"color_distance_threshold": -0.5},
    {"diff_tolerance_ratio": 1.5},
    {"compress_level": 10},
])
def test_invalid_values_raise(kwargs):
    with pytest.raises(ValueError):
        DiffConfig(**kwargs)


def test_from_sources_layers_dict_then_env(monkeypatch):
    for k in ENV_KEYS:
        monkeypatch.delenv(k, raising=False)
    cfg = DiffConfig.from_sources({"block_size": 16, "diff_threshold": 3, "unknown": 1})
    assert cfg.block_size == 16 and cfg.diff_threshold == 3

    monkeypatch.setenv("CHPK_BLOCK_SIZE", "8")
    monkeypatch.setenv("CHPK_TOLERANCE_RATIO", "0.25")
    cfg = DiffConfig.from_sources({"block_size": 16})
    assert cfg.block_size == 8
    assert cfg.diff_tolerance_ratio == 0.25
    assert not cfg.strict

    # read_env=False ignore l'environnement
    assert DiffConfig.from_sources({"block_size": 16}, read_env=False).block_size == 16


def test_config_is_frozen():
    cfg = DiffConfig()
    with pytest.raises(AttributeError):
        cfg.block_size = 4  # type: ignore[misc]
