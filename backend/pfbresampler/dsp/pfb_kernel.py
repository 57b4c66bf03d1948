"""Polyphase filterbank arbitrary resampler kernel.

A prototype low-pass filter designed at num_filters times the sub-filter rate
is split into num_filters polyphase rows. Each output sample is the dot
product of one row with the current input window, plus a linear correction
from the matching row of the differentiated prototype:

    y = taps[j] . x + acc * dtaps[j] . x

where j is the current filter index and acc the fractional position between
rows j and j+1. Per output the index advances by

    decimation_rate + floor(acc)   with   acc += fractional_rate (mod 1)

which tracks the exact, possibly irrational, ratio num_filters / rate without
redesigning any filter. Whenever j walks past the last row, the input window
moves forward by j // num_filters samples.

Reference: fred harris, "Multirate Signal Processing for Communications
Systems", ch. 7.
"""

from __future__ import annotations

import logging
import math

import numpy as np
import numpy.typing as npt
from numpy.lib.stride_tricks import sliding_window_view

from pfbresampler.errors import ConfigurationError
from pfbresampler.typing import SampleArray, TapsArray

logger = logging.getLogger(__name__)

TWO_PI = 2.0 * math.pi

DEFAULT_NUM_FILTERS = 32


def _lround(value: float) -> int:
    """Round half away from zero."""
    if value >= 0.0:
        return int(math.floor(value + 0.5))
    return -int(math.floor(-value + 0.5))


def create_diff_taps(taps: TapsArray) -> TapsArray:
    """First difference of adjacent taps, with a trailing zero sentinel."""
    if taps.size == 0:
        return taps.copy()
    return np.append(np.diff(taps), np.zeros(1, dtype=taps.dtype)).astype(taps.dtype)


def create_polyphase_taps(taps: TapsArray, num_filters: int) -> TapsArray:
    """Split prototype taps into num_filters rows.

    Row i holds taps[i], taps[i + num_filters], taps[i + 2*num_filters], ...
    with the tail zero padded so every row has ceil(len(taps) / num_filters)
    entries.

    Returns:
        Array of shape (num_filters, taps_per_filter)
    """
    taps_per_filter = int(math.ceil(taps.size / num_filters))
    padded = np.zeros(num_filters * taps_per_filter, dtype=taps.dtype)
    padded[: taps.size] = taps
    return np.ascontiguousarray(padded.reshape(taps_per_filter, num_filters).T)


class PfbArbResamplerKernel:
    """Stateful arbitrary-ratio resampling engine.

    The kernel is not thread safe: configuration calls must not overlap with
    filter(). The sample dtype is fixed at construction (float32 or
    complex64 typically) and every output is produced in that dtype.

    Example usage:
        kernel = PfbArbResamplerKernel(2.4321, design_taps(2.4321, 32, 80), 32)
        produced, consumed = kernel.filter(samples, n, out, len(out))
    """

    def __init__(
        self,
        rate: float = 1.0,
        taps: npt.ArrayLike | None = None,
        num_filters: int = DEFAULT_NUM_FILTERS,
        dtype: npt.DTypeLike = np.complex64,
    ):
        """Initialize the kernel.

        Args:
            rate: Output/input sample rate ratio
            taps: Prototype taps (None leaves the kernel idle until set_taps)
            num_filters: Number of polyphase rows (interpolation rate)
            dtype: Sample element type
        """
        self.dtype = np.dtype(dtype)

        self._int_rate = max(1, int(num_filters))
        self._rate = 1.0
        self._dec_rate = 1
        self._flt_rate = 0.0
        self._acc = 0.0
        self._last_filter = 0
        self._start_filter = 0
        # Input samples already stepped over but not yet reported as consumed
        self._pending_skip = 0
        self._taps_per_filter = 0
        self._delay = 0
        self._est_phase_change = 0.0

        self._proto_taps: TapsArray = np.zeros(0, dtype=np.float32)
        self._taps: TapsArray = np.zeros((self._int_rate, 0), dtype=np.float32)
        self._dtaps: TapsArray = np.zeros((self._int_rate, 0), dtype=np.float32)
        # Rows reversed so that a forward input window can be dotted directly
        self._taps_rev: TapsArray = self._taps
        self._dtaps_rev: TapsArray = self._dtaps

        self.set_rate(rate)
        if taps is not None:
            self.set_taps(taps)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def set_num_filters(self, num_filters: int) -> None:
        """Change the number of polyphase rows and rebuild the bank."""
        self._int_rate = max(1, int(num_filters))
        self.set_rate(self._rate)
        if self._proto_taps.size:
            self.set_taps(self._proto_taps)

    def set_taps(self, taps: npt.ArrayLike) -> None:
        """Install new prototype taps and rebuild both filter sets."""
        proto = np.array(taps).ravel()
        if not np.issubdtype(self.dtype, np.complexfloating) and np.iscomplexobj(proto):
            # Complex taps carry a zero imaginary part; real streams use the real part
            proto = proto.real.copy()
        self._proto_taps = proto

        self._last_filter = (proto.size // 2) % self._int_rate
        self._start_filter = self._last_filter
        self._pending_skip = 0

        dtaps = create_diff_taps(proto)
        self._taps = create_polyphase_taps(proto, self._int_rate)
        self._dtaps = create_polyphase_taps(dtaps, self._int_rate)
        self._taps_per_filter = self._taps.shape[1]
        self._taps_rev = np.ascontiguousarray(self._taps[:, ::-1])
        self._dtaps_rev = np.ascontiguousarray(self._dtaps[:, ::-1])

        self._update_delay_and_phase()
        logger.debug(
            f"PFB kernel: {proto.size} taps -> {self._int_rate} x {self._taps_per_filter}, "
            f"delay={self._delay}"
        )

    def set_rate(self, rate: float) -> None:
        """Set the output/input ratio; non-positive values fall back to 1.0."""
        rate = float(rate)
        self._rate = rate if (math.isfinite(rate) and rate > 0.0) else 1.0
        ratio = self._int_rate / self._rate
        self._dec_rate = int(math.floor(ratio))
        self._flt_rate = ratio - self._dec_rate
        self._update_delay_and_phase()

    def set_phase(self, ph: float) -> None:
        """Set the filter index from a phase in radians, 0 <= ph < 2*pi."""
        if not math.isfinite(ph) or ph < 0.0 or ph >= TWO_PI:
            raise ConfigurationError(
                f"PfbArbResampler: set_phase value {ph} out of bounds [0, 2pi)."
            )
        ph_diff = TWO_PI / self._int_rate
        self._last_filter = min(int(ph / ph_diff), self._int_rate - 1)

    def reset(self) -> None:
        """Clear the accumulator and return to the initial filter index."""
        self._acc = 0.0
        self._last_filter = self._start_filter
        self._pending_skip = 0

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def rate(self) -> float:
        return self._rate

    @property
    def phase(self) -> float:
        """Current filter index expressed as a phase in radians."""
        return self._last_filter * (TWO_PI / self._int_rate)

    @property
    def taps_per_filter(self) -> int:
        return self._taps_per_filter

    @property
    def interpolation_rate(self) -> int:
        return self._int_rate

    @property
    def decimation_rate(self) -> int:
        return self._dec_rate

    @property
    def fractional_rate(self) -> float:
        return self._flt_rate

    @property
    def group_delay(self) -> int:
        """Filter delay in output samples."""
        return self._delay

    @property
    def last_filter(self) -> int:
        return self._last_filter

    @property
    def accumulator(self) -> float:
        return self._acc

    @property
    def taps(self) -> TapsArray:
        """Polyphase filter set, shape (num_filters, taps_per_filter)."""
        return self._taps.copy()

    @property
    def diff_taps(self) -> TapsArray:
        """Differentiator filter set, same shape as taps."""
        return self._dtaps.copy()

    def phase_offset(self, freq: float, fs: float) -> float:
        """Carrier phase shift introduced at frequency freq for sample rate fs."""
        adj = TWO_PI * (freq / fs) / self._int_rate
        return -adj * self._est_phase_change

    def _update_delay_and_phase(self) -> None:
        if self._taps_per_filter == 0:
            self._delay = 0
            self._est_phase_change = 0.0
            return

        self._delay = _lround(self._rate * (self._taps_per_filter - 1.0) / 2.0)

        accum = self._delay * self._flt_rate
        accum_int = int(accum)
        accum_frac = accum - accum_int
        end_filter = _lround(
            math.fmod(
                self._last_filter + self._delay * self._dec_rate + accum_int,
                self._int_rate,
            )
        )
        self._est_phase_change = self._last_filter - (end_filter + accum_frac)

    # ------------------------------------------------------------------
    # Filtering
    # ------------------------------------------------------------------

    def filter(
        self,
        samples: npt.ArrayLike,
        n_to_read: int,
        output: SampleArray,
        output_capacity: int | None = None,
    ) -> tuple[int, int]:
        """Resample as much input as the budgets allow.

        Output sample i_out is computed from the window
        samples[i_in : i_in + taps_per_filter], so samples must hold
        taps_per_filter - 1 samples of history ahead of the first new one.

        Args:
            samples: Input including convolution history
            n_to_read: Number of window positions available for consumption
            output: Destination buffer, written from index 0
            output_capacity: Maximum outputs to produce (default len(output))

        Returns:
            Tuple of (produced, consumed)
        """
        k = self._taps_per_filter
        if k == 0:
            return 0, 0

        x = np.asarray(samples)
        capacity = len(output) if output_capacity is None else min(int(output_capacity), len(output))
        n_to_read = min(int(n_to_read), len(x) - k + 1)
        if n_to_read <= 0 or capacity <= 0:
            return 0, 0

        int_rate = self._int_rate
        dec_rate = self._dec_rate
        flt_rate = self._flt_rate

        # Walk the phase state machine first; dot products are batched after
        phases = np.empty(capacity, dtype=np.intp)
        offsets = np.empty(capacity, dtype=np.intp)
        fracs = np.empty(capacity, dtype=np.float64)

        if self._pending_skip >= n_to_read:
            self._pending_skip -= n_to_read
            return 0, n_to_read

        i_in = self._pending_skip
        i_out = 0
        j = self._last_filter
        acc = self._acc
        while i_in < n_to_read and i_out < capacity:
            while j < int_rate and i_out < capacity:
                phases[i_out] = j
                offsets[i_out] = i_in
                fracs[i_out] = acc
                i_out += 1

                acc += flt_rate
                j += dec_rate + int(math.floor(acc))
                acc = math.fmod(acc, 1.0)
            i_in += j // int_rate
            j %= int_rate

        self._last_filter = j
        self._acc = acc
        # A step of several input samples may overshoot the window; carry the rest
        self._pending_skip = max(0, i_in - n_to_read)
        consumed = min(i_in, n_to_read)

        if i_out:
            windows = sliding_window_view(x[: n_to_read + k - 1], k)[offsets[:i_out]]
            rows = phases[:i_out]
            o0 = np.einsum("ij,ij->i", windows, self._taps_rev[rows])
            o1 = np.einsum("ij,ij->i", windows, self._dtaps_rev[rows])
            result = o0 + o1 * fracs[:i_out]
            if not np.iscomplexobj(output):
                result = result.real
            output[:i_out] = result

        return i_out, consumed
