"""Time-domain editing operations: fades, reverse, merge with crossfade, trim."""

from __future__ import annotations

import math

import numpy as np

from pcmfx.buffer import AudioBuffer
from pcmfx.errors import ShapeMismatchError
from pcmfx.settings import FadeSettings, MergeSettings, TrimSettings, check_settings
from pcmfx._helpers import _seconds_to_frames


# ---------------------------------------------------------------------------
# Fades
# ---------------------------------------------------------------------------


def _fade_lengths(fade_in: int, fade_out: int, frames: int) -> tuple[int, int]:
    """Clamp fade lengths to the buffer and keep the two regions apart.

    When the fades would overlap, each shrinks in proportion and together
    they cover the buffer exactly.
    """
    fade_in = min(max(fade_in, 0), frames)
    fade_out = min(max(fade_out, 0), frames)
    total = fade_in + fade_out
    if total > frames:
        fade_in = fade_in * frames // total
        fade_out = frames - fade_in
    return fade_in, fade_out


def fade(buf: AudioBuffer, settings: FadeSettings | None = None) -> AudioBuffer:
    """Apply linear fade-in and fade-out ramps.

    The fade-in ramps from silence on the first frame to full level on the
    last frame of its region; the fade-out mirrors it, ending silent on the
    last frame of the buffer.
    """
    s = check_settings(settings, FadeSettings).clamped()
    fade_in, fade_out = _fade_lengths(
        _seconds_to_frames(s.fade_in_seconds, buf.sample_rate),
        _seconds_to_frames(s.fade_out_seconds, buf.sample_rate),
        buf.frames,
    )
    out = np.array(buf.data, dtype=np.float32)
    if fade_in:
        ramp = np.linspace(0.0, 1.0, fade_in, dtype=np.float32)
        out[:, :fade_in] *= ramp[np.newaxis, :]
    if fade_out:
        ramp = np.linspace(1.0, 0.0, fade_out, dtype=np.float32)
        out[:, buf.frames - fade_out :] *= ramp[np.newaxis, :]
    return buf.like(out)


# ---------------------------------------------------------------------------
# Reverse
# ---------------------------------------------------------------------------


def reverse(buf: AudioBuffer) -> AudioBuffer:
    """Play every channel backwards."""
    return buf.like(buf.data[:, ::-1])


# ---------------------------------------------------------------------------
# Merge
# ---------------------------------------------------------------------------


def equal_power_gains(t):
    """Outgoing and incoming weights at crossfade position *t* in [0, 1].

    Returns ``(cos(t*pi/2), sin(t*pi/2))``; their squares always sum to 1.
    """
    theta = np.asarray(t, dtype=np.float64) * (np.pi / 2.0)
    return np.cos(theta), np.sin(theta)


def merge(
    buf_a: AudioBuffer,
    buf_b: AudioBuffer,
    settings: MergeSettings | None = None,
) -> AudioBuffer:
    """Append *buf_b* to *buf_a*, overlapping them with an equal-power crossfade.

    Both buffers must share a sample rate.  When channel counts differ the
    narrower buffer's last channel is repeated to match.  The output holds
    ``buf_a.frames + buf_b.frames - crossfade_frames`` frames.
    """
    s = check_settings(settings, MergeSettings).clamped()
    if buf_a.sample_rate != buf_b.sample_rate:
        raise ShapeMismatchError(
            f"Sample rate mismatch: {buf_a.sample_rate} vs {buf_b.sample_rate}"
        )
    channels = max(buf_a.channels, buf_b.channels)
    a = buf_a.to_channels(channels).data.astype(np.float64) * s.volume1
    b = buf_b.to_channels(channels).data.astype(np.float64) * s.volume2

    len_a, len_b = a.shape[1], b.shape[1]
    xf = min(_seconds_to_frames(s.crossfade_seconds, buf_a.sample_rate), len_a, len_b)
    head = len_a - xf

    out = np.empty((channels, len_a + len_b - xf), dtype=np.float64)
    out[:, :head] = a[:, :head]
    if xf:
        fade_out, fade_in = equal_power_gains(np.arange(xf) / xf)
        out[:, head : head + xf] = a[:, head:] * fade_out + b[:, :xf] * fade_in
    out[:, len_a:] = b[:, xf:]

    return AudioBuffer(
        out.astype(np.float32),
        sample_rate=buf_a.sample_rate,
        label=buf_a.label,
    )


# ---------------------------------------------------------------------------
# Trim
# ---------------------------------------------------------------------------


def trim(buf: AudioBuffer, settings: TrimSettings) -> AudioBuffer:
    """Keep only ``[start_seconds, end_seconds)`` of *buf*."""
    s = check_settings(settings, TrimSettings).clamped(buf.duration)
    start = min(int(math.floor(s.start_seconds * buf.sample_rate)), buf.frames)
    end = min(int(math.floor(s.end_seconds * buf.sample_rate)), buf.frames)
    return buf.slice(start, end)
