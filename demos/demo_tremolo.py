#!/usr/bin/env python3
"""Demo: tremolo settings on audio.

Renders the input through a range of rates, depths, shapes and stereo
offsets.  Without an input file the built-in test pad is used.
"""

import argparse
import os

from smarttremolo.buffer import AudioBuffer
from smarttremolo.io import read, write
from smarttremolo.stream import process_buffer


def main():
    parser = argparse.ArgumentParser(description="Demo: tremolo settings")
    parser.add_argument("infile", nargs="?", help="Input .wav file")
    parser.add_argument(
        "-o", "--out-dir", default="build/demo-output", help="Output directory"
    )
    args = parser.parse_args()

    os.makedirs(args.out_dir, exist_ok=True)
    if args.infile:
        buf = read(args.infile)
        name = os.path.splitext(os.path.basename(args.infile))[0]
    else:
        buf = AudioBuffer.test_pad(6.0)
        name = "pad"

    demos = [
        ("slow-sine", dict(rate_hz=2.0, depth=0.5)),
        ("fast-sine", dict(rate_hz=9.0, depth=0.8)),
        ("triangle", dict(rate_hz=4.0, depth=0.7, shape="triangle")),
        ("square", dict(rate_hz=5.0, depth=0.9, shape="square")),
        ("square-soft", dict(rate_hz=5.0, depth=0.9, shape="square-soft")),
        ("autopan", dict(rate_hz=3.0, depth=1.0, stereo_phase_deg=180.0)),
        ("half-wet", dict(rate_hz=6.0, depth=1.0, wet=0.5)),
    ]

    for label, params in demos:
        out = process_buffer(buf.copy(), **params)
        path = os.path.join(args.out_dir, f"{name}_trem_{label}.wav")
        write(path, out)
        print(f"  {label} -> {path}")


if __name__ == "__main__":
    main()
