"""Parks-McClellan (Remez exchange) solver adapter.

The solver itself is scipy's McClellan implementation. This module pins its
contract: band edges are normalized so that 1.0 is the Nyquist frequency,
amplitudes are given per band edge (two equal values per band), and failure to
converge is reported as ``DesignOrderUnresolved`` so the ripple escalation in
the taps designer can react to it.
"""

from __future__ import annotations

import logging
from typing import Literal, Sequence

import numpy as np
from scipy import signal

from pfbresampler.errors import DesignOrderUnresolved, InvalidBandSpec
from pfbresampler.typing import NDArrayFloat

logger = logging.getLogger(__name__)

FilterType = Literal["bandpass", "differentiator", "hilbert"]

DEFAULT_GRID_DENSITY = 16
MAX_ITERATIONS = 40


def pm_remez(
    numtaps: int,
    bands: Sequence[float],
    amplitudes: Sequence[float],
    weights: Sequence[float],
    filter_type: FilterType = "bandpass",
    grid_density: int = DEFAULT_GRID_DENSITY,
) -> NDArrayFloat:
    """Design an equiripple FIR filter.

    Args:
        numtaps: Number of taps to produce
        bands: Band edges, ascending, in [0, 1] where 1 is Nyquist
        amplitudes: Desired amplitude at each band edge
        weights: One weight per band
        filter_type: 'bandpass', 'differentiator' or 'hilbert'
        grid_density: Frequency grid density of the solver

    Returns:
        float64 taps of length numtaps

    Raises:
        InvalidBandSpec: Vector lengths or band edges are inconsistent
        DesignOrderUnresolved: The exchange iteration did not converge
    """
    band_arr = np.asarray(bands, dtype=np.float64)
    ampl_arr = np.asarray(amplitudes, dtype=np.float64)
    weight_arr = np.asarray(weights, dtype=np.float64)

    if numtaps < 3:
        raise InvalidBandSpec(f"pm_remez: numtaps must be >= 3 (got {numtaps})")
    if band_arr.size < 2 or band_arr.size % 2 != 0:
        raise InvalidBandSpec("pm_remez: bands must hold an even number of edges")
    if ampl_arr.size != band_arr.size:
        raise InvalidBandSpec("pm_remez: amplitudes must match bands in length")
    if weight_arr.size != band_arr.size // 2:
        raise InvalidBandSpec("pm_remez: one weight per band is required")
    if np.any(np.diff(band_arr) < 0) or band_arr[0] < 0.0 or band_arr[-1] > 1.0:
        raise InvalidBandSpec("pm_remez: band edges must be ascending within [0, 1]")

    try:
        taps = signal.remez(
            numtaps,
            band_arr,
            ampl_arr[::2],
            weight=weight_arr,
            type=filter_type,
            maxiter=MAX_ITERATIONS,
            grid_density=grid_density,
            fs=2.0,
        )
    except ValueError as exc:
        logger.debug(f"pm_remez: solver failed for {numtaps} taps: {exc}")
        raise DesignOrderUnresolved(f"remez exchange failed for {numtaps} taps: {exc}") from exc

    if not np.all(np.isfinite(taps)):
        raise DesignOrderUnresolved(f"remez exchange produced non-finite taps for {numtaps} taps")
    return np.asarray(taps, dtype=np.float64)
