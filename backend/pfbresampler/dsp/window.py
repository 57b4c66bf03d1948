"""Window functions for window-method FIR design.

The Blackman-Harris family is exposed through its attenuation presets
(61, 67, 74 and 92 dB sidelobe levels). The other types are the classic
windows used by ``firdes.low_pass`` and are built from scipy's symmetric
window generators.
"""

from __future__ import annotations

from enum import IntEnum

import numpy as np
from scipy.signal import windows

from pfbresampler.errors import SamplingSanityViolation
from pfbresampler.typing import NDArrayFloat


class WindowType(IntEnum):
    HAMMING = 0
    HANN = 1
    BLACKMAN = 2
    RECTANGULAR = 3
    KAISER = 4
    BLACKMAN_HARRIS = 5


# Cosine-sum coefficients keyed by sidelobe attenuation in dB
BLACKMAN_HARRIS_PRESETS: dict[int, tuple[float, ...]] = {
    61: (0.42323, 0.49755, 0.07922),
    67: (0.44959, 0.49364, 0.05677),
    74: (0.40271, 0.49703, 0.09392, 0.00183),
    92: (0.35875, 0.48829, 0.14128, 0.01168),
}

DEFAULT_BLACKMAN_HARRIS_ATTEN = 92

DEFAULT_KAISER_BETA = 6.76


def blackman_harris(ntaps: int, atten: int = DEFAULT_BLACKMAN_HARRIS_ATTEN) -> NDArrayFloat:
    """Symmetric Blackman-Harris window for one of the attenuation presets.

    Args:
        ntaps: Window length
        atten: Sidelobe attenuation preset in dB (61, 67, 74 or 92)

    Returns:
        float32 window of length ntaps
    """
    coeffs = BLACKMAN_HARRIS_PRESETS.get(atten)
    if coeffs is None:
        raise SamplingSanityViolation(
            f"blackman_harris: unknown attenuation preset {atten} "
            f"(expected one of {sorted(BLACKMAN_HARRIS_PRESETS)})"
        )
    # general_cosine alternates coefficient signs, matching c0 - c1*cos + c2*cos - c3*cos
    return windows.general_cosine(ntaps, list(coeffs), sym=True).astype(np.float32)


def max_attenuation(window_type: WindowType, beta: float = DEFAULT_KAISER_BETA) -> float:
    """Nominal stopband attenuation in dB reachable with a window type."""
    if window_type == WindowType.HAMMING:
        return 53.0
    if window_type == WindowType.HANN:
        return 44.0
    if window_type == WindowType.BLACKMAN:
        return 74.0
    if window_type == WindowType.RECTANGULAR:
        return 21.0
    if window_type == WindowType.KAISER:
        return beta / 0.1102 + 8.7
    return float(DEFAULT_BLACKMAN_HARRIS_ATTEN)


def build_window(
    window_type: WindowType, ntaps: int, beta: float = DEFAULT_KAISER_BETA
) -> NDArrayFloat:
    """Build a symmetric window of the given type."""
    if ntaps <= 0:
        raise SamplingSanityViolation(f"window length must be positive (got {ntaps})")

    if window_type == WindowType.BLACKMAN_HARRIS:
        return blackman_harris(ntaps, DEFAULT_BLACKMAN_HARRIS_ATTEN)
    if window_type == WindowType.HAMMING:
        w = windows.get_window("hamming", ntaps, fftbins=False)
    elif window_type == WindowType.HANN:
        w = windows.get_window("hann", ntaps, fftbins=False)
    elif window_type == WindowType.BLACKMAN:
        w = windows.get_window("blackman", ntaps, fftbins=False)
    elif window_type == WindowType.RECTANGULAR:
        w = np.ones(ntaps)
    elif window_type == WindowType.KAISER:
        w = windows.get_window(("kaiser", beta), ntaps, fftbins=False)
    else:
        raise SamplingSanityViolation(f"unsupported window type {window_type!r}")
    return np.asarray(w, dtype=np.float32)
