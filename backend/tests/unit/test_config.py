"""Tests for YAML config loading and environment overrides."""
from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
import yaml

from pfbresampler import config as config_module
from pfbresampler.config import (
    AppConfig,
    ResamplerConfig,
    coerce_env_value,
    config_to_dict,
    load_config,
)


@pytest.fixture(autouse=True)
def no_env(monkeypatch):
    monkeypatch.setattr(config_module, "os_environ_items", lambda: [])


def _write(path: Path, data: dict) -> str:
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return str(path)


def test_defaults_without_file() -> None:
    config = load_config(None)
    assert isinstance(config, AppConfig)
    assert config.resampler.rate == 1.0
    assert config.resampler.num_filters == 32
    assert config.resampler.stop_band_attenuation == 100.0
    assert config.resampler.dtype == np.complex64
    assert config.logging.level == "INFO"


def test_missing_file_uses_defaults(tmp_path: Path) -> None:
    config = load_config(str(tmp_path / "missing.yaml"))
    assert config.resampler == ResamplerConfig()


def test_load_yaml_sections(tmp_path: Path) -> None:
    path = _write(
        tmp_path / "resampler.yaml",
        {
            "resampler": {"rate": 2, "num_filters": 16, "sample_type": "float32"},
            "logging": {"level": "debug"},
        },
    )
    config = load_config(path)
    assert config.resampler.rate == 2.0
    assert isinstance(config.resampler.rate, float)
    assert config.resampler.num_filters == 16
    assert config.resampler.dtype == np.float32
    assert config.logging.level == "debug"


def test_env_overrides(tmp_path: Path, monkeypatch) -> None:
    path = _write(tmp_path / "resampler.yaml", {"resampler": {"rate": 0.5}})
    monkeypatch.setattr(
        config_module,
        "os_environ_items",
        lambda: [
            ("PFBRESAMPLER__RESAMPLER__RATE", "0.75"),
            ("PFBRESAMPLER__RESAMPLER__DEBUG", "true"),
            ("PFBRESAMPLER__LOGGING__LEVEL", "WARNING"),
            ("PFBRESAMPLER__OTHER__KEY", "1"),
            ("UNRELATED", "x"),
        ],
    )
    config = load_config(path)
    assert config.resampler.rate == 0.75
    assert config.resampler.debug is True
    assert config.logging.level == "WARNING"


def test_invalid_values_rejected(tmp_path: Path) -> None:
    path = _write(tmp_path / "bad.yaml", {"resampler": {"rate": -1.0, "num_filters": 0}})
    with pytest.raises(ValueError) as excinfo:
        load_config(path)
    assert "rate" in str(excinfo.value)
    assert "num_filters" in str(excinfo.value)


def test_non_mapping_root_rejected(tmp_path: Path) -> None:
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(str(path))


def test_load_taps_file(tmp_path: Path) -> None:
    taps_path = tmp_path / "taps.npy"
    np.save(taps_path, np.ones(9, dtype=np.float32))
    cfg = ResamplerConfig(taps_file=str(taps_path))
    taps = cfg.load_taps()
    assert taps is not None
    assert len(taps) == 9
    assert ResamplerConfig().load_taps() is None


def test_load_taps_file_rejects_bad_taps(tmp_path: Path) -> None:
    taps_path = tmp_path / "taps.npy"
    np.save(taps_path, np.array([1.0, np.inf]))
    with pytest.raises(ValueError):
        ResamplerConfig(taps_file=str(taps_path)).load_taps()


def test_config_to_dict_round_trips_through_yaml() -> None:
    data = config_to_dict(load_config(None))
    assert yaml.safe_load(yaml.safe_dump(data)) == data
    assert data["resampler"]["rate"] == 1.0


@pytest.mark.parametrize(
    "raw,expected",
    [("true", True), ("False", False), ("12", 12), ("0.5", 0.5), ("abc", "abc")],
)
def test_coerce_env_value(raw, expected) -> None:
    assert coerce_env_value(raw) == expected
