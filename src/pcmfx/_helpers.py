"""Shared private utilities for pcmfx modules."""

from __future__ import annotations

import math

import numpy as np

from pcmfx.buffer import AudioBuffer
from pcmfx.errors import InvalidParameterError


def _hz_to_normalized(freq_hz: float, sample_rate: float) -> float:
    """Hz as a fraction of the sample rate, in [0, 0.5).

    Raises InvalidParameterError if freq_hz is negative or >= Nyquist.
    """
    if freq_hz < 0:
        raise InvalidParameterError(f"Frequency must be non-negative, got {freq_hz}")
    nyquist = sample_rate / 2.0
    if freq_hz >= nyquist:
        raise InvalidParameterError(
            f"Frequency {freq_hz} Hz >= Nyquist ({nyquist} Hz)"
        )
    return freq_hz / sample_rate


def _seconds_to_frames(seconds: float, sample_rate: float) -> int:
    """Round ``seconds * sample_rate`` half up to a whole frame count."""
    return int(math.floor(seconds * sample_rate + 0.5))


def _process_per_channel(buf: AudioBuffer, process_fn) -> AudioBuffer:
    """Run ``process_fn`` on each channel of *buf* and collect the results.

    ``process_fn`` maps a 1D float32 view to a 1D array of the same length.
    """
    out = np.empty(buf.data.shape, dtype=np.float32)
    for ch in range(buf.channels):
        out[ch] = process_fn(buf.channel(ch))
    return buf.like(out)
