"""Unit tests for the streaming resampler wrapper."""

import logging

import numpy as np
import pytest

from pfbresampler.dsp.pfb_resampler import (
    BASE_CHUNK_SIZE,
    PfbArbResampler,
    ProcessResult,
    Tag,
)


def _concat(results: list[ProcessResult], dtype) -> np.ndarray:
    outputs = [r.output for r in results]
    return np.concatenate(outputs) if outputs else np.zeros(0, dtype=dtype)


class TestResamplerSettings:
    """Tests for construction and settings updates."""

    def test_explicit_taps_configure_kernel(self, short_taps):
        resampler = PfbArbResampler(rate=1.0, taps=short_taps, num_filters=4)
        assert resampler.taps_per_filter == 3
        assert resampler.sample_delay == resampler.kernel.group_delay == 1
        # History is primed with taps_per_filter - 1 zeros
        assert resampler.history_size == 2

    @pytest.mark.parametrize(
        "rate,in_chunk,out_chunk",
        [
            (1.0, BASE_CHUNK_SIZE, BASE_CHUNK_SIZE),
            (2.0, BASE_CHUNK_SIZE, 2 * BASE_CHUNK_SIZE),
            (0.5, 2 * BASE_CHUNK_SIZE, BASE_CHUNK_SIZE),
        ],
    )
    def test_chunk_sizes_follow_rate(self, short_taps, rate, in_chunk, out_chunk):
        resampler = PfbArbResampler(rate=rate, taps=short_taps, num_filters=4)
        assert resampler.input_chunk_size == in_chunk
        assert resampler.output_chunk_size == out_chunk

    def test_invalid_rate_falls_back(self, short_taps, caplog):
        with caplog.at_level(logging.WARNING):
            resampler = PfbArbResampler(rate=-3.0, taps=short_taps, num_filters=4)
        assert resampler.rate == 1.0
        assert resampler.kernel.rate == 1.0
        assert "Invalid resampler rate" in caplog.text

    def test_sample_delay_is_read_only(self, short_taps):
        resampler = PfbArbResampler(rate=1.0, taps=short_taps, num_filters=4)
        with pytest.raises(AttributeError):
            resampler.apply_settings(sample_delay=5)
        with pytest.raises(AttributeError):
            resampler.sample_delay = 5

    def test_unknown_setting_rejected(self, short_taps):
        resampler = PfbArbResampler(rate=1.0, taps=short_taps, num_filters=4)
        with pytest.raises(KeyError):
            resampler.apply_settings(cutoff=0.3)

    def test_rate_change_keeps_explicit_taps(self, short_taps):
        resampler = PfbArbResampler(rate=1.0, taps=short_taps, num_filters=4)
        resampler.apply_settings(rate=2.0)
        assert resampler.kernel.rate == 2.0
        assert resampler.sample_delay == 2
        np.testing.assert_array_equal(resampler.taps, short_taps)

    def test_rate_change_redesigns_automatic_taps(self):
        resampler = PfbArbResampler(rate=0.5, num_filters=8, stop_band_attenuation=60.0)
        before = len(resampler.taps)
        resampler.apply_settings(rate=0.25)
        # Narrower output band needs a longer window design
        assert len(resampler.taps) > before
        assert resampler.taps_per_filter == resampler.kernel.taps_per_filter

    def test_num_filters_change(self, short_taps):
        resampler = PfbArbResampler(rate=1.0, taps=short_taps, num_filters=4)
        resampler.apply_settings(num_filters=2)
        assert resampler.kernel.interpolation_rate == 2
        assert resampler.taps_per_filter == 6
        assert resampler.history_size >= 5


class TestProcessBulk:
    """Tests for the streaming process_bulk call."""

    def test_impulse_response(self, short_taps):
        resampler = PfbArbResampler(rate=1.0, taps=short_taps, num_filters=4, dtype=np.float32)
        result = resampler.process_bulk([1.0, 0.0, 0.0, 0.0, 0.0])

        assert result.consumed == 5
        assert result.produced == 5
        np.testing.assert_allclose(result.output, [0.3, 0.4, 0.3, 0.0, 0.0], atol=1e-7)

    def test_empty_input(self, short_taps):
        resampler = PfbArbResampler(rate=1.0, taps=short_taps, num_filters=4)
        result = resampler.process_bulk(np.zeros(0, dtype=np.complex64))
        assert result.consumed == 0
        assert result.produced == 0
        assert result.output.size == 0

    def test_input_always_fully_consumed(self, short_taps, generate_noise):
        resampler = PfbArbResampler(rate=0.3, taps=short_taps, num_filters=4)
        x = generate_noise(101)
        for size in (1, 7, 31, 62):
            result = resampler.process_bulk(x[:size])
            assert result.consumed == size
            assert result.produced == len(result.output)

    @pytest.mark.parametrize("rate", [0.3, 1.0, 2.7])
    @pytest.mark.parametrize("chunk", [1, 5, 64])
    def test_chunking_does_not_change_output(self, short_taps, generate_noise, rate, chunk):
        x = generate_noise(400)

        whole = PfbArbResampler(rate=rate, taps=short_taps, num_filters=4)
        expected = whole.process_bulk(x).output

        streamed = PfbArbResampler(rate=rate, taps=short_taps, num_filters=4)
        results = [streamed.process_bulk(x[i : i + chunk]) for i in range(0, len(x), chunk)]
        np.testing.assert_allclose(_concat(results, np.complex64), expected, atol=1e-6)

    def test_output_capacity_leaves_input_buffered(self, short_taps, generate_noise):
        x = generate_noise(50)
        expected = PfbArbResampler(rate=1.0, taps=short_taps, num_filters=4).process_bulk(x).output

        resampler = PfbArbResampler(rate=1.0, taps=short_taps, num_filters=4)
        first = resampler.process_bulk(x, output_capacity=20)
        assert first.produced == 20
        assert first.consumed == 50
        rest = resampler.process_bulk(np.zeros(0, dtype=np.complex64))

        np.testing.assert_allclose(
            np.concatenate([first.output, rest.output]), expected, atol=1e-6
        )

    def test_process_matches_process_bulk(self, short_taps, generate_noise):
        x = generate_noise(3000)
        expected = PfbArbResampler(rate=1.7, taps=short_taps, num_filters=4).process_bulk(x).output
        got = PfbArbResampler(rate=1.7, taps=short_taps, num_filters=4).process(x)
        np.testing.assert_allclose(got, expected, atol=1e-6)

    def test_reset_restarts_stream(self, short_taps, generate_noise):
        x = generate_noise(60)
        resampler = PfbArbResampler(rate=1.3, taps=short_taps, num_filters=4)
        first = resampler.process_bulk(x).output
        resampler.reset()
        assert resampler.history_size == 2
        second = resampler.process_bulk(x).output
        np.testing.assert_array_equal(first, second)

    def test_debug_trace_logged(self, short_taps, caplog):
        resampler = PfbArbResampler(rate=1.0, taps=short_taps, num_filters=4, debug=True)
        with caplog.at_level(logging.DEBUG, logger="pfbresampler.dsp.pfb_resampler"):
            resampler.process_bulk(np.ones(8, dtype=np.complex64))
        assert "[PfbArbResampler] call=1 nin=8" in caplog.text


class TestTagForwarding:
    """Sample rate tags are rescaled on the way through."""

    def test_sample_rate_tag_scaled(self, short_taps):
        resampler = PfbArbResampler(rate=2.0, taps=short_taps, num_filters=4)
        result = resampler.process_bulk(
            np.ones(4, dtype=np.complex64),
            tags=[Tag(0, {"sample_rate": 1000.0, "note": "x"})],
        )
        assert result.tags == [Tag(0, {"sample_rate": 2000.0})]

    def test_no_tags_by_default(self, short_taps):
        resampler = PfbArbResampler(rate=2.0, taps=short_taps, num_filters=4)
        assert resampler.process_bulk(np.ones(4, dtype=np.complex64)).tags == []

    def test_tag_without_sample_rate_not_forwarded(self, short_taps):
        resampler = PfbArbResampler(rate=2.0, taps=short_taps, num_filters=4)
        result = resampler.process_bulk(np.ones(4, dtype=np.complex64), tags=[Tag(3, {"note": "x"})])
        assert result.tags == []

    def test_non_numeric_sample_rate_ignored(self, short_taps, caplog):
        resampler = PfbArbResampler(rate=2.0, taps=short_taps, num_filters=4)
        with caplog.at_level(logging.WARNING):
            result = resampler.process_bulk(
                np.ones(4, dtype=np.complex64), tags=[Tag(0, {"sample_rate": "fast"})]
            )
        assert result.tags == []
        assert "non-numeric" in caplog.text
