"""smarttremolo CLI -- apply, inspect, and generate audio for the tremolo."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

import numpy as np

from smarttremolo import __version__
from smarttremolo.buffer import AudioBuffer
from smarttremolo.lfo import SHAPES


# ---------------------------------------------------------------------------
# Verbosity levels
# ---------------------------------------------------------------------------

QUIET = 0
NORMAL = 1
VERBOSE = 2


def _verbosity(args: argparse.Namespace) -> int:
    """Return verbosity level from parsed args."""
    if getattr(args, "quiet", False):
        return QUIET
    if getattr(args, "verbose", False):
        return VERBOSE
    return NORMAL


def _log(args: argparse.Namespace, msg: str, level: int = NORMAL) -> None:
    """Print *msg* if verbosity >= *level*."""
    if _verbosity(args) >= level:
        print(msg)


def _log_verbose(args: argparse.Namespace, msg: str) -> None:
    """Print only when --verbose."""
    _log(args, msg, level=VERBOSE)


def _warn(msg: str) -> None:
    print(f"[warn] {msg}", file=sys.stderr)


def _fail(msg: str) -> None:
    print(f"Error: {msg}", file=sys.stderr)
    sys.exit(1)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _read_input(path: str, args: argparse.Namespace | None = None) -> AudioBuffer:
    """Read an audio file, exit on error."""
    from smarttremolo.io import read

    if args:
        _log_verbose(args, f"  Reading {path}")
    try:
        buf = read(path)
    except (OSError, ValueError) as e:
        print(f"Error reading {path}: {e}", file=sys.stderr)
        sys.exit(1)
    if args:
        _log_verbose(
            args,
            f"  Loaded: {buf.channels}ch, {buf.frames} frames, {buf.sample_rate} Hz",
        )
    return buf


def _write_output(
    path: str,
    buf: AudioBuffer,
    bit_depth: int = 16,
    args: argparse.Namespace | None = None,
) -> None:
    """Write an audio file (creating parent directories), exit on error."""
    from smarttremolo.io import write

    if args:
        _log_verbose(args, f"  Writing {path} ({bit_depth}-bit)")
    try:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        write(path, buf, bit_depth=bit_depth)
    except (OSError, ValueError) as e:
        print(f"Error writing {path}: {e}", file=sys.stderr)
        sys.exit(1)


def _signal_stats(buf: AudioBuffer) -> dict:
    """Peak, RMS and ZCR of the mid signal."""
    from smarttremolo.features import rms, zero_crossing_rate

    mid = buf.to_mono().mono
    peak = float(np.max(np.abs(buf.data))) if buf.frames else 0.0
    return {
        "peak_db": round(float(20.0 * np.log10(peak)), 1) if peak > 0 else None,
        "rms": round(rms(mid), 6),
        "zcr": round(zero_crossing_rate(mid), 6),
    }


# ---------------------------------------------------------------------------
# Subcommand: info
# ---------------------------------------------------------------------------


def cmd_info(args: argparse.Namespace) -> None:
    """Print audio file metadata and signal statistics."""
    buf = _read_input(args.file, args)

    ext = Path(args.file).suffix.lower()
    info = {
        "path": str(args.file),
        "format": ext.lstrip(".").upper(),
        "duration": f"{buf.duration:.3f}s",
        "sample_rate": buf.sample_rate,
        "channels": buf.channels,
        "frames": buf.frames,
    }
    info.update(_signal_stats(buf))

    if args.json:
        print(json.dumps(info, indent=2))
    else:
        for k, v in info.items():
            print(f"  {k}: {v}")


# ---------------------------------------------------------------------------
# Subcommand: process
# ---------------------------------------------------------------------------


def _ensure_input(args: argparse.Namespace) -> None:
    """Write a test pad at the input path when it is missing."""
    from smarttremolo.io import write

    path = Path(args.input)
    if path.exists() or not args.generate_missing:
        return
    _log(args, f"[info] Input file not found: {path} -> generating a test pad.")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        write(path, AudioBuffer.test_pad(10.0, 44100))
    except (OSError, ValueError) as e:
        _fail(f"failed to write generated input to {path}: {e}")


def cmd_process(args: argparse.Namespace) -> None:
    """Apply the tremolo to an audio file."""
    from smarttremolo._cli import resolve_rate_sync, validate_params
    from smarttremolo.control import LoudnessFollower, NoOpController
    from smarttremolo.stream import DemoRamp, StreamProcessor
    from smarttremolo.tremolo import Tremolo

    errors = validate_params(args.rate, args.depth, args.wet, args.stereophase)
    if errors:
        for e in errors:
            print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    _ensure_input(args)
    buf = _read_input(args.input, args)

    trem = Tremolo(
        sample_rate=buf.sample_rate,
        rate_hz=args.rate,
        depth=args.depth,
        wet=args.wet,
        stereo_phase_deg=args.stereophase,
        shape=args.shape,
    )

    if args.rate_sync:
        hz, msg = resolve_rate_sync(args.rate_sync)
        if hz is None:
            _warn(msg)
        else:
            _log(args, f"[info] {msg}")
            trem.set_rate_hz(hz)
            trem.reset()

    controller = LoudnessFollower() if args.follow_loudness else NoOpController()
    proc = StreamProcessor(
        trem,
        controller=controller,
        block_size=args.block_size,
        demo_ramp=DemoRamp() if args.demo else None,
    )

    _log(args, "SmartTremolo")
    _log(args, f"  Input          : {args.input}")
    _log(args, f"  Output         : {args.output}")
    _log(args, f"  SampleRate     : {buf.sample_rate}")
    _log(args, f"  Channels       : {buf.channels}")
    _log(args, f"  Duration       : {buf.duration:.3f} s")
    _log(
        args,
        f"  Params         : rate={trem.rate_hz:g} depth={trem.depth:g} "
        f"shape={trem.shape} stereophase={trem.stereo_phase_deg:g} "
        f"wet={trem.wet:g}",
    )

    proc.process(buf)

    if args.analyze:
        for span in proc.analysis:
            _log(
                args,
                f"[analyze] t={span.start_sec:g}s..{span.end_sec:g}s, "
                f"avg RMS={span.mean_rms:.6f} avg ZCR={span.mean_zcr:.6f} "
                f"({span.windows} windows)",
            )

    bit_depth = args.bit_depth or 16
    _write_output(args.output, buf, bit_depth=bit_depth, args=args)
    _log(args, f"Done. Stereo phase offset = {trem.stereo_phase_deg:g} deg.")


# ---------------------------------------------------------------------------
# Subcommand: pad
# ---------------------------------------------------------------------------


def cmd_pad(args: argparse.Namespace) -> None:
    """Write the stereo test pad."""
    if args.seconds <= 0 or args.sample_rate <= 0:
        _fail("--seconds and --sample-rate must be positive")
    buf = AudioBuffer.test_pad(args.seconds, args.sample_rate)
    bit_depth = args.bit_depth or 16
    _write_output(args.output, buf, bit_depth=bit_depth, args=args)
    _log(args, f"Wrote {args.output}")


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser."""
    parser = argparse.ArgumentParser(
        prog="smarttremolo",
        description="smarttremolo - tremolo with smoothed, feedback-driven LFO",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"smarttremolo {__version__}",
    )

    # Global verbosity flags (mutually exclusive)
    verb_group = parser.add_mutually_exclusive_group()
    verb_group.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose output (show details about each step)",
    )
    verb_group.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress all non-essential output",
    )

    sub = parser.add_subparsers(dest="command")

    # --- info ---
    p_info = sub.add_parser("info", help="Show audio file metadata")
    p_info.add_argument("file", help="Input audio file")
    p_info.add_argument("--json", action="store_true", help="Output as JSON")

    # --- process ---
    p_proc = sub.add_parser("process", help="Apply the tremolo to audio")
    p_proc.add_argument("input", help="Input WAV file")
    p_proc.add_argument("-o", "--output", required=True, help="Output WAV file")
    p_proc.add_argument(
        "--rate", type=float, default=5.0, help="LFO rate in Hz (default: 5.0)"
    )
    p_proc.add_argument(
        "--depth", type=float, default=0.6, help="Depth 0..1 (default: 0.6)"
    )
    p_proc.add_argument(
        "--wet", type=float, default=1.0, help="Wet/dry mix 0..1 (default: 1.0)"
    )
    p_proc.add_argument(
        "--stereophase",
        type=float,
        default=0.0,
        help="Right-channel LFO offset in degrees 0..180 (default: 0)",
    )
    p_proc.add_argument(
        "--shape",
        default="sine",
        help=f"LFO shape: {', '.join(SHAPES)} (default: sine)",
    )
    p_proc.add_argument(
        "--rate-sync",
        metavar="bpm:BPM,div:DIV",
        help="Tempo-synced rate, e.g. bpm:120,div:1/8 (overrides --rate)",
    )
    p_proc.add_argument(
        "--analyze",
        action="store_true",
        help="Print per-second RMS/ZCR analysis",
    )
    p_proc.add_argument(
        "--demo",
        action="store_true",
        help="Scripted depth ramp between 5 s and 8 s",
    )
    p_proc.add_argument(
        "--follow-loudness",
        action="store_true",
        help="Let signal loudness drive the depth",
    )
    p_proc.add_argument(
        "--block-size",
        type=int,
        default=512,
        help="Frames per processing block (default: 512)",
    )
    p_proc.add_argument(
        "--generate-missing",
        action="store_true",
        help="Write a 10 s test pad to the input path if it does not exist",
    )
    p_proc.add_argument(
        "-b",
        "--bit-depth",
        type=int,
        choices=[16, 24],
        help="Output bit depth (default: 16)",
    )

    # --- pad ---
    p_pad = sub.add_parser("pad", help="Generate the stereo test pad")
    p_pad.add_argument("output", help="Output WAV file")
    p_pad.add_argument(
        "--seconds", type=float, default=2.0, help="Duration (default: 2.0)"
    )
    p_pad.add_argument(
        "--sample-rate",
        type=int,
        default=44100,
        help="Sample rate (default: 44100)",
    )
    p_pad.add_argument(
        "-b",
        "--bit-depth",
        type=int,
        choices=[16, 24],
        help="Output bit depth (default: 16)",
    )

    return parser


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "process" and args.block_size < 1:
        _fail(f"--block-size must be >= 1, got {args.block_size}")

    dispatch = {
        "info": cmd_info,
        "process": cmd_process,
        "pad": cmd_pad,
    }

    handler = dispatch.get(args.command)
    if handler is None:
        parser.print_help()
        sys.exit(1)

    handler(args)


if __name__ == "__main__":
    main()
