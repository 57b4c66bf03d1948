"""Optimal (equiripple) FIR filter design.

Estimates the minimum filter order for a band specification with the
Herrmann/Rabiner/Chan regression and hands the result to the Remez exchange
solver. Used by the taps designer for interpolating ratios (rate >= 1).

Reference: Herrmann, Rabiner, Chan, "Practical design rules for optimum
finite impulse response low-pass digital filters", BSTJ 1973.
"""

from __future__ import annotations

import logging
import math
from typing import Sequence

from pfbresampler.dsp.remez import DEFAULT_GRID_DENSITY, pm_remez
from pfbresampler.errors import DesignOrderUnresolved, InvalidBandSpec
from pfbresampler.typing import NDArrayFloat

logger = logging.getLogger(__name__)

# Safety margin added on top of the estimated order. Empirical; kept
# overridable through the extra_taps argument.
DEFAULT_EXTRA_TAPS = 2


def stopband_atten_to_dev(atten_db: float) -> float:
    """Convert a stopband attenuation in dB to an absolute deviation."""
    return 10.0 ** (-atten_db / 20.0)


def passband_ripple_to_dev(ripple_db: float) -> float:
    """Convert passband ripple spec expressed in dB to an absolute value."""
    g = 10.0 ** (ripple_db / 20.0)
    return (g - 1.0) / (g + 1.0)


def lporder(freq1: float, freq2: float, delta_p: float, delta_s: float) -> float:
    """Estimate the order of a low-pass filter.

    Args:
        freq1: Passband edge (normalized to the sampling frequency)
        freq2: Stopband edge (normalized to the sampling frequency)
        delta_p: Passband deviation
        delta_s: Stopband deviation

    Returns:
        Estimated (fractional) filter length
    """
    df = abs(freq2 - freq1)
    ddp = math.log10(delta_p)
    dds = math.log10(delta_s)

    a1 = 5.309e-3
    a2 = 7.114e-2
    a3 = -4.761e-1
    a4 = -2.66e-3
    a5 = -5.941e-1
    a6 = -4.278e-1

    b1 = 11.01217
    b2 = 0.5124401

    t1 = a1 * ddp * ddp
    t2 = a2 * ddp
    t3 = a4 * ddp * ddp
    t4 = a5 * ddp

    dinf = ((t1 + t2 + a3) * dds) + (t3 + t4 + a6)
    ff = b1 + b2 * (ddp - dds)
    return dinf / df - ff * df + 1.0


def remezord(
    fcuts: Sequence[float],
    mags: Sequence[float],
    devs: Sequence[float],
    fsamp: float = 2.0,
) -> tuple[int, list[float], list[float], list[float]]:
    """FIR order estimator (lowpass, highpass, bandpass, multiband).

    Args:
        fcuts: Band edges, two per transition band
        mags: Desired magnitude of each band
        devs: Maximum deviation of each band
        fsamp: Sampling frequency the edges refer to

    Returns:
        (order, bands, amplitudes, weights) ready for pm_remez, with bands
        normalized so that 1.0 is Nyquist and amplitudes given per edge
    """
    f = [float(v) / fsamp for v in fcuts]
    a = [float(v) for v in mags]
    d = [float(v) for v in devs]

    nbands = len(a)
    if len(a) != len(d):
        raise InvalidBandSpec("remezord: length of mags and devs must be equal")
    if nbands < 2 or len(f) != 2 * (nbands - 1):
        raise InvalidBandSpec("remezord: length of f must be 2 * len(mags) - 2")

    # Deviations relative to the band magnitude
    d = [dev / mag if mag != 0.0 else dev for dev, mag in zip(d, a)]

    f1 = f[0::2]
    f2 = f[1::2]

    min_idx = 0
    min_delta = 2.0
    for i in range(len(f1)):
        if f2[i] - f1[i] < min_delta:
            min_delta = f2[i] - f1[i]
            min_idx = i

    if nbands == 2:
        length = lporder(f1[min_idx], f2[min_idx], d[0], d[1])
    else:
        length = 0.0
        for i in range(1, nbands - 1):
            l1 = lporder(f1[i - 1], f2[i - 1], d[i], d[i - 1])
            l2 = lporder(f1[i], f2[i], d[i], d[i + 1])
            length = max(length, l1, l2)

    n = int(math.ceil(length)) - 1

    ff = [0.0] + [v * 2.0 for v in f] + [1.0]
    aa = [v for v in a for _ in range(2)]

    max_dev = max(d)
    wts = [max_dev / dev for dev in d]

    return n, ff, aa, wts


def low_pass(
    gain: float,
    fs: float,
    freq1: float,
    freq2: float,
    passband_ripple_db: float,
    stopband_atten_db: float,
    extra_taps: int = DEFAULT_EXTRA_TAPS,
) -> NDArrayFloat:
    """Optimal FIR low-pass filter.

    Args:
        gain: Passband gain
        fs: Sampling frequency
        freq1: End of the pass band
        freq2: Start of the stop band
        passband_ripple_db: Allowed passband ripple in dB
        stopband_atten_db: Required stopband attenuation in dB
        extra_taps: Taps added to the estimated order

    Returns:
        float64 taps
    """
    if freq2 <= freq1:
        raise InvalidBandSpec("low pass filter must have pass band below stop band")

    passband_dev = passband_ripple_to_dev(passband_ripple_db)
    stopband_dev = stopband_atten_to_dev(stopband_atten_db)

    n, fo, ao, w = remezord([freq1, freq2], [gain, 0.0], [passband_dev, stopband_dev], fs)
    if n <= 0:
        raise DesignOrderUnresolved("can't determine sufficient order for filter")

    logger.debug(
        f"optfir.low_pass: order={n} (+{extra_taps}) ripple={passband_ripple_db:.2f}dB "
        f"atten={stopband_atten_db:g}dB"
    )
    return pm_remez(n + extra_taps, fo, ao, w, "bandpass", DEFAULT_GRID_DENSITY)


def high_pass(
    gain: float,
    fs: float,
    freq1: float,
    freq2: float,
    passband_ripple_db: float,
    stopband_atten_db: float,
    extra_taps: int = DEFAULT_EXTRA_TAPS,
) -> NDArrayFloat:
    """Optimal FIR high-pass filter.

    freq1 is the end of the stop band and freq2 the start of the pass band.
    The tap count is forced odd, as an even-length type II filter cannot
    pass Nyquist.
    """
    if freq2 <= freq1:
        raise InvalidBandSpec("high pass filter must have stop band below pass band")

    passband_dev = passband_ripple_to_dev(passband_ripple_db)
    stopband_dev = stopband_atten_to_dev(stopband_atten_db)

    n, fo, ao, w = remezord([freq1, freq2], [0.0, gain], [stopband_dev, passband_dev], fs)
    if n <= 0:
        raise DesignOrderUnresolved("can't determine sufficient order for filter")

    numtaps = n + extra_taps
    if numtaps % 2 == 0:
        numtaps += 1
    return pm_remez(numtaps, fo, ao, w, "bandpass", DEFAULT_GRID_DENSITY)


__all__ = [
    "DEFAULT_EXTRA_TAPS",
    "high_pass",
    "low_pass",
    "lporder",
    "passband_ripple_to_dev",
    "remezord",
    "stopband_atten_to_dev",
]
