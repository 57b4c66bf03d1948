"""PfbResampler: arbitrary-rate polyphase filterbank resampling."""

from pfbresampler.dsp.pfb_kernel import PfbArbResamplerKernel
from pfbresampler.dsp.pfb_resampler import PfbArbResampler, ProcessResult, Tag
from pfbresampler.dsp.taps import design_taps

__all__ = [
    "__version__",
    "PfbArbResampler",
    "PfbArbResamplerKernel",
    "ProcessResult",
    "Tag",
    "design_taps",
]

__version__ = "0.1.0"
