"""Gain-shaping effects: shelving/peaking EQ and sidechain ducking."""

from __future__ import annotations

import math

import numpy as np
from scipy.signal import sosfilt

from pcmfx.buffer import AudioBuffer
from pcmfx.envelope import follow_envelope
from pcmfx.settings import (
    BASS_SHELF_HZ,
    MID_PEAK_HZ,
    MID_Q,
    TREBLE_SHELF_HZ,
    EqSettings,
    SidechainSettings,
    check_settings,
)
from pcmfx.units import db_to_linear, linear_to_db
from pcmfx._helpers import _hz_to_normalized, _process_per_channel


# ---------------------------------------------------------------------------
# Biquad design (RBJ audio EQ cookbook)
# ---------------------------------------------------------------------------


def _normalize_section(b0, b1, b2, a0, a1, a2) -> np.ndarray:
    return np.array([b0 / a0, b1 / a0, b2 / a0, 1.0, a1 / a0, a2 / a0])


def _low_shelf_section(norm_freq: float, db: float, slope: float = 1.0) -> np.ndarray:
    A = 10.0 ** (db / 40.0)
    w0 = 2.0 * math.pi * norm_freq
    cos_w0 = math.cos(w0)
    alpha = math.sin(w0) / 2.0 * math.sqrt((A + 1.0 / A) * (1.0 / slope - 1.0) + 2.0)
    two_sqrt_a_alpha = 2.0 * math.sqrt(A) * alpha
    return _normalize_section(
        A * ((A + 1) - (A - 1) * cos_w0 + two_sqrt_a_alpha),
        2 * A * ((A - 1) - (A + 1) * cos_w0),
        A * ((A + 1) - (A - 1) * cos_w0 - two_sqrt_a_alpha),
        (A + 1) + (A - 1) * cos_w0 + two_sqrt_a_alpha,
        -2 * ((A - 1) + (A + 1) * cos_w0),
        (A + 1) + (A - 1) * cos_w0 - two_sqrt_a_alpha,
    )


def _high_shelf_section(norm_freq: float, db: float, slope: float = 1.0) -> np.ndarray:
    A = 10.0 ** (db / 40.0)
    w0 = 2.0 * math.pi * norm_freq
    cos_w0 = math.cos(w0)
    alpha = math.sin(w0) / 2.0 * math.sqrt((A + 1.0 / A) * (1.0 / slope - 1.0) + 2.0)
    two_sqrt_a_alpha = 2.0 * math.sqrt(A) * alpha
    return _normalize_section(
        A * ((A + 1) + (A - 1) * cos_w0 + two_sqrt_a_alpha),
        -2 * A * ((A - 1) + (A + 1) * cos_w0),
        A * ((A + 1) + (A - 1) * cos_w0 - two_sqrt_a_alpha),
        (A + 1) - (A - 1) * cos_w0 + two_sqrt_a_alpha,
        2 * ((A - 1) - (A + 1) * cos_w0),
        (A + 1) - (A - 1) * cos_w0 - two_sqrt_a_alpha,
    )


def _peak_section(norm_freq: float, db: float, q: float) -> np.ndarray:
    A = 10.0 ** (db / 40.0)
    w0 = 2.0 * math.pi * norm_freq
    cos_w0 = math.cos(w0)
    alpha = math.sin(w0) / (2.0 * q)
    return _normalize_section(
        1.0 + alpha * A,
        -2.0 * cos_w0,
        1.0 - alpha * A,
        1.0 + alpha / A,
        -2.0 * cos_w0,
        1.0 - alpha / A,
    )


def _apply_sos(buf: AudioBuffer, sos: np.ndarray) -> AudioBuffer:
    """Run a cascade of second-order sections over every channel."""
    if len(sos) == 0 or buf.frames == 0:
        return buf.copy()
    out = sosfilt(np.atleast_2d(sos), buf.data.astype(np.float64), axis=1)
    return buf.like(out.astype(np.float32))


# ---------------------------------------------------------------------------
# Single-band filters
# ---------------------------------------------------------------------------


def low_shelf_db(
    buf: AudioBuffer,
    freq_hz: float,
    db: float,
    slope: float = 1.0,
) -> AudioBuffer:
    """Low shelf boosting or cutting everything below *freq_hz* by *db*."""
    nf = _hz_to_normalized(freq_hz, buf.sample_rate)
    return _apply_sos(buf, _low_shelf_section(nf, db, slope))


def high_shelf_db(
    buf: AudioBuffer,
    freq_hz: float,
    db: float,
    slope: float = 1.0,
) -> AudioBuffer:
    """High shelf boosting or cutting everything above *freq_hz* by *db*."""
    nf = _hz_to_normalized(freq_hz, buf.sample_rate)
    return _apply_sos(buf, _high_shelf_section(nf, db, slope))


def peak_db(
    buf: AudioBuffer,
    freq_hz: float,
    db: float,
    q: float = 1.0,
) -> AudioBuffer:
    """Bell filter centred on *freq_hz*."""
    nf = _hz_to_normalized(freq_hz, buf.sample_rate)
    return _apply_sos(buf, _peak_section(nf, db, q))


# ---------------------------------------------------------------------------
# Three-band EQ
# ---------------------------------------------------------------------------


def equalize(buf: AudioBuffer, settings: EqSettings | None = None) -> AudioBuffer:
    """Apply bass / mid / treble gain.

    Bass is a low shelf at 200 Hz, mid a Q=1 bell at 1 kHz and treble a
    high shelf at 4 kHz, run in series per channel.  Gains are clamped to
    +/-12 dB.  Bands at 0 dB, and bands at or above Nyquist, are skipped,
    so an all-zero setting returns the input samples unchanged.
    """
    s = check_settings(settings, EqSettings).clamped()
    nyquist = buf.sample_rate / 2.0
    bands = [
        (BASS_SHELF_HZ, s.bass, lambda nf, db: _low_shelf_section(nf, db)),
        (MID_PEAK_HZ, s.mid, lambda nf, db: _peak_section(nf, db, MID_Q)),
        (TREBLE_SHELF_HZ, s.treble, lambda nf, db: _high_shelf_section(nf, db)),
    ]
    sections = [
        design(freq / buf.sample_rate, db)
        for freq, db, design in bands
        if db != 0.0 and freq < nyquist
    ]
    return _apply_sos(buf, np.array(sections))


# ---------------------------------------------------------------------------
# Sidechain ducking
# ---------------------------------------------------------------------------


def ducking_gain(envelope: np.ndarray, settings: SidechainSettings) -> np.ndarray:
    """Per-sample gain for an envelope under a hard-knee ducking curve.

    1.0 wherever the envelope is at or below the threshold.  Above it the
    compressor reduction is blended in by ``depth``.
    """
    s = settings.clamped()
    envelope = np.asarray(envelope, dtype=np.float64)
    gain = np.ones_like(envelope)
    over_mask = envelope > db_to_linear(s.threshold_db)
    if not np.any(over_mask):
        return gain
    over = linear_to_db(envelope[over_mask]) - s.threshold_db
    reduction_db = over - over / s.ratio
    reduction = db_to_linear(-reduction_db)
    gain[over_mask] = 1.0 - (1.0 - reduction) * s.depth
    return gain


def sidechain_compress(
    buf: AudioBuffer,
    settings: SidechainSettings | None = None,
) -> AudioBuffer:
    """Duck each channel by its own attack/release envelope.

    The signal is its own key: whenever a channel's envelope rises above
    ``threshold_db`` that channel is turned down according to ``ratio``,
    and ``depth`` scales how much of the reduction is applied.  Depth 0 or
    ratio 1 leave the signal untouched.
    """
    s = check_settings(settings, SidechainSettings).clamped()
    if s.depth == 0.0:
        return buf.copy()

    def _process(x):
        env = follow_envelope(x, buf.sample_rate, s.attack_seconds, s.release_seconds)
        return x.astype(np.float64) * ducking_gain(env, s)

    return _process_per_channel(buf, _process)
