"""Error taxonomy for filter design and resampler configuration.

Every error carries an ``ErrorKind`` so callers can branch on the failure
without parsing messages. Only ``DESIGN_ORDER_UNRESOLVED`` is retryable, and
the only automatic retry is the passband ripple escalation in
``pfbresampler.dsp.taps.design_taps``.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    PHASE_OUT_OF_RANGE = "phase_out_of_range"
    DESIGN_ORDER_UNRESOLVED = "design_order_unresolved"
    INVALID_BAND_SPEC = "invalid_band_spec"
    SAMPLING_SANITY_VIOLATION = "sampling_sanity_violation"


class PfbError(Exception):
    """Base class for all resampler errors."""

    kind: ErrorKind
    retryable: bool = False

    def __init__(self, message: str, kind: ErrorKind | None = None):
        super().__init__(message)
        if kind is not None:
            self.kind = kind


class ConfigurationError(PfbError, ValueError):
    """Kernel phase requested outside [0, 2*pi)."""

    kind = ErrorKind.PHASE_OUT_OF_RANGE


class DesignOrderUnresolved(PfbError, RuntimeError):
    """Equiripple order estimation or the Remez solver did not converge."""

    kind = ErrorKind.DESIGN_ORDER_UNRESOLVED
    retryable = True


class InvalidBandSpec(PfbError, ValueError):
    """Band edge, magnitude and deviation vectors are inconsistent."""

    kind = ErrorKind.INVALID_BAND_SPEC


class SamplingSanityViolation(PfbError, ValueError):
    """Window-method design parameters are outside their valid ranges."""

    kind = ErrorKind.SAMPLING_SANITY_VIOLATION


__all__ = [
    "ConfigurationError",
    "DesignOrderUnresolved",
    "ErrorKind",
    "InvalidBandSpec",
    "PfbError",
    "SamplingSanityViolation",
]
