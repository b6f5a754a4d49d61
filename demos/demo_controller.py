#!/usr/bin/env python3
"""Demo: feedback controllers driving the tremolo.

Shows the loudness follower, a custom callback that speeds the LFO up over
time, and the scripted depth ramp, printing the per-second analysis.
"""

import argparse
import os

from smarttremolo.buffer import AudioBuffer
from smarttremolo.control import CallbackController, LoudnessFollower
from smarttremolo.io import read, write
from smarttremolo.stream import DemoRamp, StreamProcessor
from smarttremolo.tremolo import Tremolo


def accelerate(t, rms, zcr, rate_hz, depth):
    """Double the rate every four seconds."""
    return rate_hz * 2.0 ** (t / 4.0), depth


def main():
    parser = argparse.ArgumentParser(description="Demo: feedback controllers")
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
        buf = AudioBuffer.test_pad(10.0)
        name = "pad"

    demos = [
        ("loudness", dict(controller=LoudnessFollower()), dict()),
        ("accelerate", dict(controller=CallbackController(accelerate)), dict()),
        ("ramp", dict(demo_ramp=DemoRamp()), dict(depth=0.9)),
    ]

    for label, proc_kw, trem_kw in demos:
        trem = Tremolo(sample_rate=buf.sample_rate, **trem_kw)
        proc = StreamProcessor(trem, **proc_kw)
        out = proc.process(buf.copy())
        path = os.path.join(args.out_dir, f"{name}_ctrl_{label}.wav")
        write(path, out)
        print(f"  {label} -> {path}")
        for span in proc.analysis:
            print(f"    {span!r}")


if __name__ == "__main__":
    main()
