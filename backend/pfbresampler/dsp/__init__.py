"""Polyphase filterbank DSP components.

This module provides the pieces of the arbitrary-rate resampler:
- Window and windowed-sinc low-pass design (window, firdes)
- Equiripple low-pass design on top of the Remez exchange (optfir, remez)
- Prototype taps selection for a given ratio (taps)
- The phase-tracking polyphase kernel and its streaming wrapper
"""

from pfbresampler.dsp.history import HistoryBuffer
from pfbresampler.dsp.pfb_kernel import PfbArbResamplerKernel
from pfbresampler.dsp.pfb_resampler import PfbArbResampler, ProcessResult, Tag
from pfbresampler.dsp.taps import design_taps

__all__ = [
    "HistoryBuffer",
    "PfbArbResampler",
    "PfbArbResamplerKernel",
    "ProcessResult",
    "Tag",
    "design_taps",
]
