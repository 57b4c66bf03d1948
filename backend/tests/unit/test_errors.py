import pytest

from pfbresampler.errors import (
    ConfigurationError,
    DesignOrderUnresolved,
    ErrorKind,
    InvalidBandSpec,
    PfbError,
    SamplingSanityViolation,
)


@pytest.mark.parametrize(
    "exc_type,kind,retryable",
    [
        (ConfigurationError, ErrorKind.PHASE_OUT_OF_RANGE, False),
        (DesignOrderUnresolved, ErrorKind.DESIGN_ORDER_UNRESOLVED, True),
        (InvalidBandSpec, ErrorKind.INVALID_BAND_SPEC, False),
        (SamplingSanityViolation, ErrorKind.SAMPLING_SANITY_VIOLATION, False),
    ],
)
def test_error_kinds(exc_type, kind, retryable) -> None:
    exc = exc_type("boom")
    assert isinstance(exc, PfbError)
    assert exc.kind == kind
    assert exc.retryable is retryable
    assert str(exc) == "boom"


def test_value_errors_are_value_errors() -> None:
    for exc_type in (ConfigurationError, InvalidBandSpec, SamplingSanityViolation):
        assert issubclass(exc_type, ValueError)
    assert issubclass(DesignOrderUnresolved, RuntimeError)


def test_kind_override() -> None:
    exc = PfbError("custom", ErrorKind.INVALID_BAND_SPEC)
    assert exc.kind == ErrorKind.INVALID_BAND_SPEC
    assert exc.kind.value == "invalid_band_spec"
