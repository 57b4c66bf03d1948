"""Prototype taps designer for the arbitrary resampler.

Taps are designed at num_filters times the sub-filter rate, with a passband
gain of num_filters so that each polyphase row has unity DC gain.

- rate < 1 (decimation): Blackman-Harris windowed sinc cut at a fraction of
  the output half-band. Window design always succeeds.
- rate >= 1 (interpolation): equiripple design. The order estimate and the
  Remez solver can fail for tight specs, so the passband ripple is relaxed in
  0.01 dB steps up to 1 dB before giving up.
"""

from __future__ import annotations

import logging

import numpy as np
import numpy.typing as npt

from pfbresampler.dsp import firdes, optfir
from pfbresampler.dsp.window import WindowType
from pfbresampler.errors import DesignOrderUnresolved
from pfbresampler.typing import TapsArray

logger = logging.getLogger(__name__)

# Fraction of the half-band kept as passband
PASSBAND_PERCENT = 0.80

INITIAL_RIPPLE_DB = 0.1
RIPPLE_STEP_DB = 0.01
MAX_RIPPLE_DB = 1.0


def _cast_taps(real_taps: npt.ArrayLike, dtype: npt.DTypeLike) -> TapsArray:
    target = np.dtype(dtype)
    taps = np.asarray(real_taps, dtype=np.float64)
    if np.issubdtype(target, np.complexfloating):
        return (taps + 0j).astype(target)
    return taps.astype(target)


def design_taps(
    rate: float,
    num_filters: int,
    attenuation_db: float,
    dtype: npt.DTypeLike = np.float32,
) -> TapsArray:
    """Design prototype taps for a polyphase arbitrary resampler.

    Args:
        rate: Output/input sample rate ratio (> 0)
        num_filters: Number of polyphase sub-filters
        attenuation_db: Stopband attenuation in dB
        dtype: Element type of the returned taps (real or complex)

    Returns:
        Prototype taps at num_filters times the sub-filter rate

    Raises:
        DesignOrderUnresolved: Equiripple design failed at every ripple up to 1 dB
    """
    if rate <= 0.0:
        raise ValueError(f"rate must be positive (got {rate})")
    num_filters = max(1, int(num_filters))
    nf = float(num_filters)

    if rate < 1.0:
        halfband = 0.5 * rate
        bw = PASSBAND_PERCENT * halfband
        tb = (PASSBAND_PERCENT / 2.0) * halfband

        real_taps = firdes.low_pass_2(
            nf, nf, bw, tb, attenuation_db, WindowType.BLACKMAN_HARRIS
        )
        logger.info(
            f"Designed {len(real_taps)} windowed-sinc taps "
            f"(rate={rate:g}, filters={num_filters}, atten={attenuation_db:g}dB)"
        )
        return _cast_taps(real_taps, dtype)

    halfband = 0.5
    bw = PASSBAND_PERCENT * halfband
    tb = (PASSBAND_PERCENT / 2.0) * halfband

    ripple = INITIAL_RIPPLE_DB
    while True:
        try:
            real_taps = optfir.low_pass(nf, nf, bw, bw + tb, ripple, attenuation_db)
        except DesignOrderUnresolved as exc:
            ripple += RIPPLE_STEP_DB
            if ripple >= MAX_RIPPLE_DB:
                logger.warning(
                    f"Equiripple design failed up to {MAX_RIPPLE_DB} dB ripple "
                    f"(rate={rate:g}, filters={num_filters}, atten={attenuation_db:g}dB)"
                )
                raise
            logger.debug(f"Equiripple design failed ({exc}), relaxing ripple to {ripple:.2f} dB")
            continue

        logger.info(
            f"Designed {len(real_taps)} equiripple taps "
            f"(rate={rate:g}, filters={num_filters}, atten={attenuation_db:g}dB, ripple={ripple:.2f}dB)"
        )
        return _cast_taps(real_taps, dtype)
