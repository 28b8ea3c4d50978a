#!/usr/bin/env python3
"""Demo: fades, reverse, trim and crossfade merge.

With one input the file is merged with its own reversed copy; with two
inputs they are joined end to end at several crossfade lengths.
"""

import argparse
import os

from pcmfx.analysis import waveform_summarize
from pcmfx.io import read_wav, write_wav
from pcmfx.ops import fade, merge, reverse, trim
from pcmfx.settings import FadeSettings, MergeSettings, TrimSettings


def sparkline(buf, width=60):
    """One-line text rendering of the waveform overview."""
    levels = " .:-=+*#%@"
    peaks = waveform_summarize(buf, width, normalize=True)
    return "".join(levels[min(int(p * (len(levels) - 1)), len(levels) - 1)] for p in peaks)


def main():
    parser = argparse.ArgumentParser(description="Demo: editing operations")
    parser.add_argument("infile", help="Input .wav file")
    parser.add_argument("second", nargs="?", help="Optional second .wav file")
    parser.add_argument(
        "-o", "--out-dir", default="build/demo-output", help="Output directory"
    )
    args = parser.parse_args()

    os.makedirs(args.out_dir, exist_ok=True)
    buf = read_wav(args.infile)
    other = read_wav(args.second) if args.second else reverse(buf)
    name = os.path.splitext(os.path.basename(args.infile))[0]

    half = buf.duration / 2.0
    demos = [
        ("fade-in-out", lambda: fade(buf, FadeSettings(1.0, 1.0))),
        ("fade-long", lambda: fade(buf, FadeSettings(10.0, 10.0))),
        ("reverse", lambda: reverse(buf)),
        ("trim-middle", lambda: trim(buf, TrimSettings(half / 2.0, half * 1.5))),
        ("merge-cut", lambda: merge(buf, other)),
        ("merge-xf1", lambda: merge(buf, other, MergeSettings(crossfade_seconds=1.0))),
        ("merge-xf5", lambda: merge(
            buf, other, MergeSettings(crossfade_seconds=5.0, volume1=0.8, volume2=1.2)
        )),
    ]

    print(f"  {'input':12s} |{sparkline(buf)}|")
    for label, fn in demos:
        out = fn()
        path = os.path.join(args.out_dir, f"{name}_{label}.wav")
        write_wav(path, out)
        print(f"  {label:12s} |{sparkline(out)}| -> {path}")


if __name__ == "__main__":
    main()
