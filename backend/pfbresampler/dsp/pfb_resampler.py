"""Streaming wrapper around the polyphase arbitrary resampler kernel.

PfbArbResampler owns the sample history so that arbitrarily small buffers can
be pushed one call at a time. Each call appends the new input, runs the kernel
over every complete convolution window, drops what the kernel consumed and
keeps the remainder (at least taps_per_filter - 1 samples) for the next call.

Settings mirror a flowgraph block: rate, taps, num_filters,
stop_band_attenuation, plus the read-only sample_delay (kernel group delay).
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

import numpy as np
import numpy.typing as npt

from pfbresampler.dsp.history import HistoryBuffer
from pfbresampler.dsp.pfb_kernel import DEFAULT_NUM_FILTERS, PfbArbResamplerKernel
from pfbresampler.dsp.taps import design_taps
from pfbresampler.typing import SampleArray, TapsArray

logger = logging.getLogger(__name__)

SAMPLE_RATE_KEY = "sample_rate"

DEFAULT_STOP_BAND_ATTENUATION = 100.0

# Nominal samples per scheduling call on the fixed side of the ratio
BASE_CHUNK_SIZE = 1024

# Extra history capacity beyond one chunk plus the filter span
HISTORY_GUARD = 128

SETTING_NAMES = ("rate", "taps", "num_filters", "stop_band_attenuation")
READ_ONLY_SETTINGS = ("sample_delay",)


@dataclass
class Tag:
    """Stream metadata attached to a sample index."""

    index: int
    map: dict[str, Any] = field(default_factory=dict)


@dataclass
class ProcessResult:
    """Outcome of one process_bulk call.

    Attributes:
        output: Produced samples
        consumed: Input samples taken from the caller (always all of them)
        produced: Number of output samples
        tags: Output tags, indices relative to output[0]
    """

    output: SampleArray
    consumed: int
    produced: int
    tags: list[Tag] = field(default_factory=list)


class PfbArbResampler:
    """Polyphase filterbank arbitrary resampler for sample streams.

    Example usage:
        resampler = PfbArbResampler(rate=48_000 / 44_100, dtype=np.float32)
        for chunk in chunks:
            result = resampler.process_bulk(chunk)
            sink.write(result.output)
    """

    def __init__(
        self,
        rate: float = 1.0,
        taps: npt.ArrayLike | None = None,
        num_filters: int = DEFAULT_NUM_FILTERS,
        stop_band_attenuation: float = DEFAULT_STOP_BAND_ATTENUATION,
        dtype: npt.DTypeLike = np.complex64,
        debug: bool = False,
    ):
        """Initialize the resampler.

        Args:
            rate: Output/input sample rate ratio
            taps: Explicit prototype taps; designed automatically when None
            num_filters: Number of polyphase sub-filters
            stop_band_attenuation: Attenuation in dB for automatic designs
            dtype: Stream sample type
            debug: Log a trace line per process_bulk call
        """
        self.dtype = np.dtype(dtype)
        self.debug = debug

        self.rate = float(rate)
        self.taps: TapsArray | None = None if taps is None else np.asarray(taps).ravel()
        self.num_filters = int(num_filters)
        self.stop_band_attenuation = float(stop_band_attenuation)
        self._user_taps = self.taps is not None and self.taps.size > 0

        self.input_chunk_size = BASE_CHUNK_SIZE
        self.output_chunk_size = BASE_CHUNK_SIZE

        self._kernel = PfbArbResamplerKernel(dtype=self.dtype)
        self._history = HistoryBuffer(BASE_CHUNK_SIZE, dtype=self.dtype)
        self._taps_per_filter = 0
        self._sample_delay = 0
        self._call_count = 0

        self.settings_changed({name: getattr(self, name) for name in SETTING_NAMES})

    @property
    def sample_delay(self) -> int:
        """Group delay of the filter in output samples."""
        return self._sample_delay

    @property
    def kernel(self) -> PfbArbResamplerKernel:
        return self._kernel

    @property
    def taps_per_filter(self) -> int:
        return self._taps_per_filter

    @property
    def history_size(self) -> int:
        return len(self._history)

    def apply_settings(self, **settings: Any) -> None:
        """Update settings by name and reconfigure.

        Raises:
            AttributeError: A read-only setting was given
            KeyError: An unknown setting was given
        """
        for name in settings:
            if name in READ_ONLY_SETTINGS:
                raise AttributeError(f"setting '{name}' is read-only")
            if name not in SETTING_NAMES:
                raise KeyError(f"unknown setting '{name}'")

        for name, value in settings.items():
            if name == "taps":
                self.taps = None if value is None else np.asarray(value).ravel()
                self._user_taps = self.taps is not None and self.taps.size > 0
            elif name == "num_filters":
                self.num_filters = int(value)
            else:
                setattr(self, name, float(value))

        self.settings_changed(settings)

    def settings_changed(self, new_settings: Mapping[str, Any]) -> None:
        """Push changed settings into the kernel and resize buffers."""
        rate_changed = "rate" in new_settings
        taps_changed = any(
            name in new_settings for name in ("taps", "num_filters", "stop_band_attenuation")
        )

        if not (math.isfinite(self.rate) and self.rate > 0.0):
            logger.warning(f"Invalid resampler rate {self.rate}, using 1.0")
            self.rate = 1.0
        if self.num_filters < 1:
            self.num_filters = 1

        # Automatically designed taps follow the rate; explicit taps are kept as given
        if not self._user_taps and (
            self.taps is None or self.taps.size == 0 or rate_changed or taps_changed
        ):
            self.taps = design_taps(
                self.rate, self.num_filters, self.stop_band_attenuation, np.float32
            )
            taps_changed = True

        self._kernel.set_num_filters(self.num_filters)
        if rate_changed:
            self._kernel.set_rate(self.rate)
        if taps_changed and self.taps is not None:
            self._kernel.set_taps(self.taps)

        self._taps_per_filter = self._kernel.taps_per_filter
        self._sample_delay = max(0, self._kernel.group_delay)

        self._choose_chunk_sizes()
        self._resize_history_buffer()

        logger.info(
            f"PFB resampler configured: rate={self.rate:g} filters={self.num_filters} "
            f"taps_per_filter={self._taps_per_filter} delay={self._sample_delay} "
            f"chunks={self.input_chunk_size}->{self.output_chunk_size}"
        )

    def _choose_chunk_sizes(self) -> None:
        rate = max(self.rate, 1e-9)
        in_chunk = BASE_CHUNK_SIZE
        out_chunk = max(1, int(math.floor(in_chunk * rate)))
        if self.rate < 1.0:
            out_chunk = BASE_CHUNK_SIZE
            in_chunk = max(1, int(math.floor(out_chunk / rate)))
        self.input_chunk_size = in_chunk
        self.output_chunk_size = out_chunk

    def _resize_history_buffer(self) -> None:
        cap = self._taps_per_filter + max(self.input_chunk_size, 1) + HISTORY_GUARD
        self._history.resize(cap)

        prefill = max(0, self._taps_per_filter - 1) - len(self._history)
        if prefill > 0:
            self._history.extend(np.zeros(prefill, dtype=self.dtype))

    def reset(self) -> None:
        """Drop buffered input and restart the kernel phase."""
        self._history.clear()
        self._kernel.reset()
        self._resize_history_buffer()

    def process_bulk(
        self,
        in_samples: npt.ArrayLike,
        output_capacity: int | None = None,
        tags: Iterable[Tag] = (),
    ) -> ProcessResult:
        """Resample one buffer of input.

        Args:
            in_samples: New input samples
            output_capacity: Maximum samples to produce (default: everything
                the buffered input allows)
            tags: Input tags; a sample_rate entry is re-emitted scaled by rate

        Returns:
            ProcessResult with the produced samples and output tags
        """
        samples = np.asarray(in_samples, dtype=self.dtype).ravel()
        nin = samples.size
        self._history.extend(samples)

        if output_capacity is None:
            output_capacity = int(math.ceil(len(self._history) * self.rate)) + 1
        output = np.zeros(max(0, output_capacity), dtype=self.dtype)

        produced = 0
        consumed = 0
        k = self._taps_per_filter
        if k > 0 and len(self._history) >= k and output_capacity > 0:
            available = len(self._history) - k + 1
            produced, consumed = self._kernel.filter(
                self._history.view(), available, output, output_capacity
            )
            self._history.pop_front(consumed)

        if self.debug:
            self._call_count += 1
            logger.debug(
                f"[PfbArbResampler] call={self._call_count} nin={nin} nout={output_capacity} "
                f"produced={produced} consumed={consumed} hist={len(self._history)}"
            )

        return ProcessResult(
            output=output[:produced],
            consumed=nin,
            produced=produced,
            tags=self._forward_tags(tags),
        )

    def _forward_tags(self, tags: Iterable[Tag]) -> list[Tag]:
        merged: dict[str, Any] = {}
        for tag in tags:
            merged.update(tag.map)

        value = merged.get(SAMPLE_RATE_KEY)
        if value is None:
            return []
        try:
            new_rate = float(value) * self.rate
        except (TypeError, ValueError):
            logger.warning(f"Ignoring non-numeric {SAMPLE_RATE_KEY} tag value {value!r}")
            return []
        return [Tag(0, {SAMPLE_RATE_KEY: new_rate})]

    def process(self, samples: npt.ArrayLike) -> SampleArray:
        """Resample a whole array by streaming it through in input chunks."""
        data = np.asarray(samples, dtype=self.dtype).ravel()
        chunks: list[SampleArray] = []
        for start in range(0, data.size, self.input_chunk_size):
            result = self.process_bulk(data[start : start + self.input_chunk_size])
            chunks.append(result.output)
        if not chunks:
            return np.zeros(0, dtype=self.dtype)
        return np.concatenate(chunks)
