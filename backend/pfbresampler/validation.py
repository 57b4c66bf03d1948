from __future__ import annotations

import math
from typing import Any

import numpy as np

RATE_MIN = 1e-6
RATE_MAX = 1e6

NUM_FILTERS_MIN = 1
NUM_FILTERS_MAX = 4096

ATTENUATION_MIN_DB = 1.0
ATTENUATION_MAX_DB = 300.0

SAMPLE_TYPES = ("complex64", "float32")


def validate_finite_array(values: np.ndarray) -> bool:
    return bool(np.isfinite(values).all())


def validate_taps(taps: np.ndarray) -> tuple[bool, str]:
    if taps.ndim != 1:
        return False, f"taps must be one-dimensional (got shape {taps.shape})"
    if taps.size == 0:
        return False, "taps are empty"
    if not validate_finite_array(taps):
        return False, "non-finite taps"
    if np.iscomplexobj(taps) and np.any(taps.imag != 0):
        return False, "complex taps must have a zero imaginary part"
    return True, ""


def validate_float_range(
    value: Any,
    min_value: float,
    max_value: float,
    label: str,
) -> tuple[bool, str]:
    try:
        float_value = float(value)
    except (TypeError, ValueError):
        return False, f"{label} is not a float"
    if not math.isfinite(float_value):
        return False, f"{label} is not finite"
    if float_value < min_value or float_value > max_value:
        return (
            False,
            f"{label} out of range {min_value}-{max_value} (got {float_value})",
        )
    return True, ""


def validate_int_range(
    value: Any,
    min_value: int,
    max_value: int,
    label: str,
) -> tuple[bool, str]:
    if isinstance(value, bool):
        return False, f"{label} is not an int"
    try:
        int_value = int(value)
    except (TypeError, ValueError):
        return False, f"{label} is not an int"
    if int_value < min_value or int_value > max_value:
        return (
            False,
            f"{label} out of range {min_value}-{max_value} (got {int_value})",
        )
    return True, ""


def validate_rate(rate: Any) -> tuple[bool, str]:
    return validate_float_range(rate, RATE_MIN, RATE_MAX, "rate")


def validate_num_filters(num_filters: Any) -> tuple[bool, str]:
    return validate_int_range(num_filters, NUM_FILTERS_MIN, NUM_FILTERS_MAX, "num_filters")


def validate_attenuation(attenuation_db: Any) -> tuple[bool, str]:
    return validate_float_range(
        attenuation_db, ATTENUATION_MIN_DB, ATTENUATION_MAX_DB, "stop_band_attenuation"
    )


def validate_sample_type(sample_type: Any) -> tuple[bool, str]:
    if sample_type not in SAMPLE_TYPES:
        return False, f"sample_type must be one of {', '.join(SAMPLE_TYPES)} (got {sample_type!r})"
    return True, ""
