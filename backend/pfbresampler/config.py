from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Literal

import numpy as np
import yaml

from pfbresampler.dsp.pfb_kernel import DEFAULT_NUM_FILTERS
from pfbresampler.dsp.pfb_resampler import DEFAULT_STOP_BAND_ATTENUATION
from pfbresampler.utils.log_levels import DEFAULT_LOG_FORMAT
from pfbresampler.validation import (
    validate_attenuation,
    validate_num_filters,
    validate_rate,
    validate_sample_type,
    validate_taps,
)

SampleType = Literal["complex64", "float32"]

ENV_PREFIX = "PFBRESAMPLER__"


@dataclass
class ResamplerConfig:
    # Output/input sample rate ratio
    rate: float = 1.0
    num_filters: int = DEFAULT_NUM_FILTERS
    stop_band_attenuation: float = DEFAULT_STOP_BAND_ATTENUATION
    # Optional .npy file with prototype taps; skips automatic design
    taps_file: str | None = None
    sample_type: SampleType = "complex64"
    # Per-call trace logging in the stream adapter
    debug: bool = False

    @property
    def dtype(self) -> np.dtype[Any]:
        return np.dtype(self.sample_type)

    def load_taps(self) -> np.ndarray | None:
        """Load prototype taps from taps_file, if configured."""
        if not self.taps_file:
            return None
        taps = np.load(Path(self.taps_file))
        ok, reason = validate_taps(np.asarray(taps))
        if not ok:
            raise ValueError(f"{self.taps_file}: {reason}")
        return np.asarray(taps)


@dataclass
class LoggingConfig:
    level: str = "INFO"
    format: str = DEFAULT_LOG_FORMAT


@dataclass
class AppConfig:
    resampler: ResamplerConfig = field(default_factory=ResamplerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError("Config root must be a mapping")
        return data


def validate_resampler_config(cfg: ResamplerConfig) -> None:
    checks = (
        validate_rate(cfg.rate),
        validate_num_filters(cfg.num_filters),
        validate_attenuation(cfg.stop_band_attenuation),
        validate_sample_type(cfg.sample_type),
    )
    errors = [reason for ok, reason in checks if not ok]
    if errors:
        raise ValueError("Invalid resampler config: " + "; ".join(errors))


def load_config(path_str: str | None) -> AppConfig:
    raw: dict[str, Any] = _read_yaml(Path(path_str)) if path_str else {}

    # Environment overrides (prefix PFBRESAMPLER__SECTION__KEY)
    # Example: PFBRESAMPLER__RESAMPLER__RATE=2.5
    for k, v in os_environ_items():
        if not k.startswith(ENV_PREFIX):
            continue
        parts = k[len(ENV_PREFIX) :].split("__")
        if len(parts) != 2:
            continue
        section, key = parts[0].lower(), parts[1].lower()
        if section not in ("resampler", "logging"):
            continue
        section_raw = raw.setdefault(section, {})
        if isinstance(section_raw, dict):
            section_raw[key] = coerce_env_value(v)

    resampler = ResamplerConfig(**(raw.get("resampler") or {}))
    resampler.rate = float(resampler.rate)
    resampler.stop_band_attenuation = float(resampler.stop_band_attenuation)
    validate_resampler_config(resampler)

    logging_cfg = LoggingConfig(**(raw.get("logging") or {}))
    logging_cfg.level = str(logging_cfg.level)

    return AppConfig(resampler=resampler, logging=logging_cfg)


def config_to_dict(config: AppConfig) -> dict[str, Any]:
    """Plain dict form of the config, suitable for yaml.safe_dump."""
    return asdict(config)


def coerce_env_value(val: str) -> Any:
    # Basic bool/int/float coercion for convenience
    lower = val.lower()
    if lower in {"true", "false"}:
        return lower == "true"
    try:
        return int(val)
    except ValueError:
        pass
    try:
        return float(val)
    except ValueError:
        return val


def os_environ_items() -> list[tuple[str, str]]:
    # Wrapped for testability
    from os import environ

    return [(k, v) for k, v in environ.items()]
