"""Shared pytest fixtures for PfbResampler tests."""

import numpy as np
import pytest
from pathlib import Path


@pytest.fixture
def sample_rate() -> float:
    """Default input sample rate for tests."""
    return 5000.0


@pytest.fixture
def tone_freq() -> float:
    """Test tone frequency, deliberately not a divisor of the sample rate."""
    return 211.123


@pytest.fixture
def sig_source_c():
    """Factory to generate a complex exponential tone."""
    def _generate(
        sample_rate: float,
        freq: float,
        n_samples: int,
    ) -> np.ndarray:
        """Generate exp(j*2*pi*freq*t).

        Args:
            sample_rate: Sample rate in Hz
            freq: Tone frequency in Hz
            n_samples: Number of samples

        Returns:
            complex64 samples
        """
        t = np.arange(n_samples, dtype=np.float64) / sample_rate
        return np.exp(2j * np.pi * freq * t).astype(np.complex64)

    return _generate


@pytest.fixture
def generate_tone():
    """Factory to generate single tone real signals."""
    def _generate(
        sample_rate: float,
        n_samples: int,
        frequency: float,
        amplitude: float = 0.5,
    ) -> np.ndarray:
        t = np.arange(n_samples, dtype=np.float64) / sample_rate
        return (amplitude * np.sin(2 * np.pi * frequency * t)).astype(np.float32)

    return _generate


@pytest.fixture
def generate_noise():
    """Factory to generate noise signals."""
    def _generate(
        n_samples: int,
        amplitude: float = 0.1,
        seed: int = 42,
        complex_valued: bool = True,
    ) -> np.ndarray:
        rng = np.random.default_rng(seed)
        if complex_valued:
            samples = rng.standard_normal(n_samples) + 1j * rng.standard_normal(n_samples)
            return (amplitude * samples).astype(np.complex64)
        return (amplitude * rng.standard_normal(n_samples)).astype(np.float32)

    return _generate


@pytest.fixture
def short_taps() -> np.ndarray:
    """Small hand-made prototype (4 filters x 3 taps) with unity row gain."""
    return np.array(
        [0.1, 0.2, 0.3, 0.4, 0.8, 0.6, 0.4, 0.2, 0.1, 0.2, 0.3, 0.4],
        dtype=np.float32,
    )


@pytest.fixture
def backend_root() -> Path:
    """Get the backend root directory."""
    return Path(__file__).parent.parent
