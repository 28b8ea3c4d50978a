#!/usr/bin/env python3
"""Demo: sidechain ducking and three-band EQ on a WAV file.

Writes one file per setting so the variations can be compared by ear.
"""

import argparse
import os

import numpy as np

from pcmfx.analysis import peak_db
from pcmfx.buffer import AudioBuffer
from pcmfx.effects import equalize, sidechain_compress
from pcmfx.io import read_wav, write_wav
from pcmfx.settings import EqSettings, SidechainSettings


def synth_signal(sample_rate=48000.0, seconds=4.0):
    """Quiet 220 Hz bed with a short noise hit every half second."""
    frames = int(sample_rate * seconds)
    bed = AudioBuffer.sine(
        220.0, channels=2, frames=frames, sample_rate=sample_rate, amplitude=0.3
    )
    hits = AudioBuffer.noise(channels=2, frames=frames, sample_rate=sample_rate, seed=0)
    gate = (np.arange(frames) % int(sample_rate / 2)) < int(sample_rate * 0.05)
    return AudioBuffer(
        bed.data + 0.7 * hits.data * gate, sample_rate=sample_rate, label="test-signal"
    )


def main():
    parser = argparse.ArgumentParser(description="Demo: ducking and EQ")
    parser.add_argument(
        "infile", nargs="?", help="Input .wav file (default: synthesized test signal)"
    )
    parser.add_argument(
        "-o", "--out-dir", default="build/demo-output", help="Output directory"
    )
    args = parser.parse_args()

    os.makedirs(args.out_dir, exist_ok=True)
    buf = read_wav(args.infile) if args.infile else synth_signal()
    name = buf.label

    demos = [
        ("duck-default", lambda b: sidechain_compress(b)),
        ("duck-light", lambda b: sidechain_compress(b, SidechainSettings(depth=0.3))),
        ("duck-full", lambda b: sidechain_compress(b, SidechainSettings(ratio=10.0, depth=1.0))),
        ("duck-slow", lambda b: sidechain_compress(
            b, SidechainSettings(attack_seconds=0.05, release_seconds=0.8)
        )),
        ("eq-warm", lambda b: equalize(b, EqSettings(bass=4.0, treble=-3.0))),
        ("eq-scoop", lambda b: equalize(b, EqSettings(bass=3.0, mid=-6.0, treble=3.0))),
        ("eq-telephone", lambda b: equalize(b, EqSettings(-12.0, 6.0, -12.0))),
    ]

    print(f"  input peak: {peak_db(buf):.1f} dBFS")
    for label, fn in demos:
        out = fn(buf)
        path = os.path.join(args.out_dir, f"{name}_{label}.wav")
        write_wav(path, out)
        print(f"  {label} -> {path} (peak {peak_db(out):.1f} dBFS)")


if __name__ == "__main__":
    main()
