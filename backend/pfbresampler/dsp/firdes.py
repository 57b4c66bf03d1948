"""Window-method FIR low-pass design.

Used by the taps designer for decimating ratios (rate < 1), where a
Blackman-Harris windowed sinc is cheap to compute and never fails to
converge.
"""

from __future__ import annotations

import logging

import numpy as np

from pfbresampler.dsp.window import (
    DEFAULT_KAISER_BETA,
    WindowType,
    build_window,
    max_attenuation,
)
from pfbresampler.errors import SamplingSanityViolation
from pfbresampler.typing import NDArrayFloat

logger = logging.getLogger(__name__)


def sanity_check_1f(sampling_freq: float, fa: float, transition_width: float) -> None:
    """Validate single-cutoff design parameters."""
    if sampling_freq <= 0.0:
        raise SamplingSanityViolation("firdes check failed: sampling_freq > 0")
    if fa <= 0.0 or fa > sampling_freq / 2:
        raise SamplingSanityViolation("firdes check failed: 0 < fa <= sampling_freq / 2")
    if transition_width <= 0:
        raise SamplingSanityViolation("firdes check failed: transition_width > 0")


def _force_odd(ntaps: int) -> int:
    return ntaps + 1 if ntaps % 2 == 0 else ntaps


def compute_ntaps_windes(
    sampling_freq: float, transition_width: float, attenuation_db: float
) -> int:
    """Tap count for a given stopband attenuation and transition width (always odd)."""
    return _force_odd(int(round(attenuation_db * sampling_freq / (22.0 * transition_width))))


def compute_ntaps(
    sampling_freq: float,
    transition_width: float,
    window_type: WindowType,
    beta: float = DEFAULT_KAISER_BETA,
) -> int:
    """Tap count for the nominal attenuation of a window type (always odd)."""
    return compute_ntaps_windes(sampling_freq, transition_width, max_attenuation(window_type, beta))


def _windowed_sinc(
    gain: float, sampling_freq: float, cutoff_freq: float, window: NDArrayFloat
) -> NDArrayFloat:
    ntaps = len(window)
    m = (ntaps - 1) // 2
    n = np.arange(-m, m + 1, dtype=np.float64)
    fwt0 = 2.0 * np.pi * cutoff_freq / sampling_freq

    # sin(n*fwT0) / (n*pi), with the n == 0 limit fwT0 / pi
    taps = (fwt0 / np.pi) * np.sinc(n * fwt0 / np.pi) * window.astype(np.float64)

    fmax = taps[m] + 2.0 * np.sum(taps[m + 1 :])
    scale = gain / fmax if fmax != 0.0 else 1.0
    return (taps * scale).astype(np.float32)


def low_pass_2(
    gain: float,
    sampling_freq: float,
    cutoff_freq: float,
    transition_width: float,
    attenuation_db: float,
    window_type: WindowType = WindowType.BLACKMAN_HARRIS,
    beta: float = DEFAULT_KAISER_BETA,
) -> NDArrayFloat:
    """Design a low-pass filter sized by the requested stopband attenuation.

    Args:
        gain: Passband (DC) gain of the result
        sampling_freq: Sampling frequency the band edges refer to
        cutoff_freq: Center of the transition band
        transition_width: Width of the transition band
        attenuation_db: Required stopband attenuation, drives the tap count
        window_type: Window applied to the ideal sinc
        beta: Kaiser beta (only for WindowType.KAISER)

    Returns:
        Odd-length float32 taps whose sum equals gain
    """
    sanity_check_1f(sampling_freq, cutoff_freq, transition_width)
    ntaps = compute_ntaps_windes(sampling_freq, transition_width, attenuation_db)
    window = build_window(window_type, ntaps, beta)
    taps = _windowed_sinc(gain, sampling_freq, cutoff_freq, window)
    logger.debug(
        f"low_pass_2: fs={sampling_freq:g} fc={cutoff_freq:g} tw={transition_width:g} "
        f"atten={attenuation_db:g}dB -> {ntaps} taps"
    )
    return taps


def low_pass(
    gain: float,
    sampling_freq: float,
    cutoff_freq: float,
    transition_width: float,
    window_type: WindowType = WindowType.HAMMING,
    beta: float = DEFAULT_KAISER_BETA,
) -> NDArrayFloat:
    """Design a low-pass filter sized by the window's nominal attenuation."""
    sanity_check_1f(sampling_freq, cutoff_freq, transition_width)
    ntaps = compute_ntaps(sampling_freq, transition_width, window_type, beta)
    window = build_window(window_type, ntaps, beta)
    return _windowed_sinc(gain, sampling_freq, cutoff_freq, window)
