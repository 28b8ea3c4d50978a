"""Measurements over whole buffers: waveform overview, peak level."""

from __future__ import annotations

import math

import numpy as np

from pcmfx.buffer import AudioBuffer
from pcmfx.errors import EmptyBufferError, InvalidParameterError
from pcmfx.units import linear_to_db

DEFAULT_BINS = 200

# Smallest divisor when normalizing, so near-silence is not blown up to full scale.
_NORMALIZE_FLOOR = 0.01


def waveform_summarize(
    buf: AudioBuffer,
    bin_count: int = DEFAULT_BINS,
    normalize: bool = False,
) -> np.ndarray:
    """Reduce *buf* to *bin_count* peak magnitudes for drawing.

    Each bin covers ``ceil(frames / bin_count)`` frames and holds the largest
    absolute sample found there in any channel.  Trailing bins that start
    past the end of the buffer are 0.

    Parameters
    ----------
    buf : AudioBuffer
        Audio to summarize.
    bin_count : int
        Number of output values, e.g. the canvas width in pixels.
    normalize : bool
        Scale so the loudest bin is 1.0 (quiet material is divided by at
        most 0.01).

    Returns
    -------
    np.ndarray
        float32 array of length *bin_count*, all values >= 0.
    """
    if bin_count < 0:
        raise InvalidParameterError(f"bin_count must be >= 0, got {bin_count}")
    if bin_count == 0:
        raise EmptyBufferError("Cannot summarize into 0 bins")
    if buf.frames == 0:
        raise EmptyBufferError("Cannot summarize a buffer with no frames")

    frame_peaks = np.max(np.abs(buf.data), axis=0)
    per_bin = math.ceil(buf.frames / bin_count)
    starts = np.arange(0, buf.frames, per_bin)

    peaks = np.zeros(bin_count, dtype=np.float32)
    peaks[: len(starts)] = np.maximum.reduceat(frame_peaks, starts)

    if normalize:
        peaks /= max(float(peaks.max()), _NORMALIZE_FLOOR)
    return peaks


def peak_db(buf: AudioBuffer) -> float:
    """Peak sample level in dBFS, ``-inf`` for digital silence."""
    if buf.frames == 0:
        return float("-inf")
    peak = float(np.max(np.abs(buf.data)))
    if peak == 0.0:
        return float("-inf")
    return linear_to_db(peak)
