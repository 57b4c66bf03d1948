#!/usr/bin/env python3
"""PfbResampler Command Line Interface.

Usage:
    python -m pfbresampler design-taps --rate 2.4321 -o taps.npy
    python -m pfbresampler info --rate 0.75 --num-filters 32
    python -m pfbresampler resample -i in.wav -o out.wav --rate 1.0884
    python -m pfbresampler resample -i iq.npy -o iq_out.npy --rate 0.5 --chunk 256
    python -m pfbresampler show-config -c resampler.yaml
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
import wave
from pathlib import Path

import numpy as np
import yaml

from pfbresampler.config import (
    AppConfig,
    ResamplerConfig,
    config_to_dict,
    load_config,
    validate_resampler_config,
)
from pfbresampler.dsp.pfb_kernel import PfbArbResamplerKernel
from pfbresampler.dsp.pfb_resampler import PfbArbResampler
from pfbresampler.dsp.taps import design_taps
from pfbresampler.errors import PfbError
from pfbresampler.utils.log_levels import configure_logging

logger = logging.getLogger(__name__)


def _resampler_config(args: argparse.Namespace) -> ResamplerConfig:
    """Config file values overridden by command line flags."""
    cfg: AppConfig = args.app_config
    rcfg = cfg.resampler
    if getattr(args, "rate", None) is not None:
        rcfg.rate = args.rate
    if getattr(args, "num_filters", None) is not None:
        rcfg.num_filters = args.num_filters
    if getattr(args, "attenuation", None) is not None:
        rcfg.stop_band_attenuation = args.attenuation
    if getattr(args, "taps", None) is not None:
        rcfg.taps_file = args.taps
    validate_resampler_config(rcfg)
    return rcfg


def _make_resampler(rcfg: ResamplerConfig, dtype: np.dtype) -> PfbArbResampler:
    return PfbArbResampler(
        rate=rcfg.rate,
        taps=rcfg.load_taps(),
        num_filters=rcfg.num_filters,
        stop_band_attenuation=rcfg.stop_band_attenuation,
        dtype=dtype,
        debug=rcfg.debug,
    )


def cmd_design_taps(args: argparse.Namespace) -> int:
    """Design prototype taps and optionally save them."""
    rcfg = _resampler_config(args)
    taps = design_taps(rcfg.rate, rcfg.num_filters, rcfg.stop_band_attenuation)
    taps_per_filter = -(-len(taps) // rcfg.num_filters)

    print(f"Designed {len(taps)} taps for rate={rcfg.rate:g}")
    print(f"  Filters: {rcfg.num_filters} x {taps_per_filter} taps")
    print(f"  DC gain: {float(np.sum(taps)):.4f}")

    if args.output:
        out_path = Path(args.output)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        np.save(out_path, taps)
        print(f"Saved to {out_path}")
    return 0


def cmd_info(args: argparse.Namespace) -> int:
    """Print kernel parameters for a configuration."""
    rcfg = _resampler_config(args)
    taps = rcfg.load_taps()
    if taps is None:
        taps = design_taps(rcfg.rate, rcfg.num_filters, rcfg.stop_band_attenuation)
    kernel = PfbArbResamplerKernel(rcfg.rate, taps, rcfg.num_filters, dtype=rcfg.dtype)

    print(f"Rate:               {kernel.rate:g}")
    print(f"Prototype taps:     {len(taps)}")
    print(f"Interpolation rate: {kernel.interpolation_rate}")
    print(f"Decimation rate:    {kernel.decimation_rate}")
    print(f"Fractional rate:    {kernel.fractional_rate:.6f}")
    print(f"Taps per filter:    {kernel.taps_per_filter}")
    print(f"Group delay:        {kernel.group_delay} samples")
    if args.freq is not None and args.fs is not None:
        print(f"Phase offset:       {kernel.phase_offset(args.freq, args.fs):.6f} rad")
    return 0


def _read_wav(path: Path) -> tuple[np.ndarray, int]:
    with wave.open(str(path), "rb") as wf:
        if wf.getsampwidth() != 2:
            raise ValueError(f"{path}: only 16-bit PCM WAV is supported")
        n_channels = wf.getnchannels()
        sample_rate = wf.getframerate()
        frames = wf.readframes(wf.getnframes())
    pcm = np.frombuffer(frames, dtype="<i2").astype(np.float32) / 32768.0
    return pcm.reshape(-1, n_channels), sample_rate


def _write_wav(path: Path, audio: np.ndarray, sample_rate: int) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    pcm = np.clip(audio * 32767.0, -32768, 32767).astype("<i2")
    with wave.open(str(path), "wb") as wf:
        wf.setnchannels(audio.shape[1])
        wf.setsampwidth(2)
        wf.setframerate(sample_rate)
        wf.writeframes(pcm.tobytes())


def _stream(resampler: PfbArbResampler, data: np.ndarray, chunk: int) -> np.ndarray:
    outputs = []
    for start in range(0, len(data), chunk):
        result = resampler.process_bulk(data[start : start + chunk])
        outputs.append(result.output)
    if not outputs:
        return np.zeros(0, dtype=resampler.dtype)
    return np.concatenate(outputs)


def cmd_resample(args: argparse.Namespace) -> int:
    """Resample a WAV or .npy file."""
    rcfg = _resampler_config(args)
    in_path = Path(args.input)
    out_path = Path(args.output)

    if in_path.suffix.lower() == ".wav":
        audio, in_rate = _read_wav(in_path)
        channels = []
        for ch in range(audio.shape[1]):
            resampler = _make_resampler(rcfg, np.dtype(np.float32))
            chunk = args.chunk or resampler.input_chunk_size
            channels.append(_stream(resampler, audio[:, ch], chunk))
        n_out = min(len(c) for c in channels)
        out_audio = np.stack([c[:n_out] for c in channels], axis=1)
        out_rate = int(round(in_rate * rcfg.rate))
        _write_wav(out_path, out_audio, out_rate)
        print(f"Resampled {len(audio)} frames @ {in_rate} Hz -> {n_out} frames @ {out_rate} Hz")
    elif in_path.suffix.lower() == ".npy":
        data = np.load(in_path).ravel()
        dtype = np.dtype(np.complex64) if np.iscomplexobj(data) else rcfg.dtype
        if not np.iscomplexobj(data) and np.issubdtype(dtype, np.complexfloating):
            dtype = np.dtype(np.float32)
        resampler = _make_resampler(rcfg, dtype)
        chunk = args.chunk or resampler.input_chunk_size
        out = _stream(resampler, data.astype(dtype), chunk)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        np.save(out_path, out)
        print(f"Resampled {len(data)} samples -> {len(out)} samples (delay {resampler.sample_delay})")
    else:
        print(f"Error: unsupported input format '{in_path.suffix}' (use .wav or .npy)")
        return 1
    return 0


def cmd_show_config(args: argparse.Namespace) -> int:
    """Print the effective configuration as YAML."""
    print(yaml.safe_dump(config_to_dict(args.app_config), sort_keys=False), end="")
    return 0


def _add_design_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("-r", "--rate", type=float, help="Output/input sample rate ratio")
    p.add_argument("-n", "--num-filters", type=int, help="Number of polyphase filters")
    p.add_argument("-a", "--attenuation", type=float, help="Stopband attenuation in dB")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pfbresampler",
        description="Polyphase filterbank arbitrary resampler",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    parser.add_argument(
        "-c",
        "--config",
        default=os.environ.get("PFBRESAMPLER_CONFIG"),
        help="Path to YAML config file",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # design-taps
    p_design = subparsers.add_parser("design-taps", help="Design prototype filter taps")
    _add_design_args(p_design)
    p_design.add_argument("-o", "--output", help="Write taps to a .npy file")
    p_design.set_defaults(func=cmd_design_taps)

    # info
    p_info = subparsers.add_parser("info", help="Show kernel parameters")
    _add_design_args(p_info)
    p_info.add_argument("--taps", help="Prototype taps .npy file")
    p_info.add_argument("--freq", type=float, help="Tone frequency for phase offset (Hz)")
    p_info.add_argument("--fs", type=float, help="Input sample rate for phase offset (Hz)")
    p_info.set_defaults(func=cmd_info)

    # resample
    p_resample = subparsers.add_parser("resample", help="Resample a WAV or .npy file")
    _add_design_args(p_resample)
    p_resample.add_argument("-i", "--input", required=True, help="Input .wav or .npy file")
    p_resample.add_argument("-o", "--output", required=True, help="Output file (same format)")
    p_resample.add_argument("--taps", help="Prototype taps .npy file")
    p_resample.add_argument("--chunk", type=int, help="Input samples per streaming call")
    p_resample.set_defaults(func=cmd_resample)

    # show-config
    p_show = subparsers.add_parser("show-config", help="Print the effective configuration")
    p_show.set_defaults(func=cmd_show_config)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        args.app_config = load_config(args.config)
    except (OSError, ValueError, TypeError) as exc:
        print(f"Error: failed to load config: {exc}")
        return 1

    configure_logging(
        "DEBUG" if args.verbose else args.app_config.logging.level,
        args.app_config.logging.format,
    )

    try:
        result = args.func(args)
    except PfbError as exc:
        logger.error(f"{exc.kind.value}: {exc}")
        return 2
    except ValueError as exc:
        logger.error(str(exc))
        return 1
    return 0 if result is None else int(result)


if __name__ == "__main__":
    sys.exit(main())
