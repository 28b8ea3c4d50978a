"""Parameter records for each effect, plus their documented ranges.

Values outside a range but still meaningful are clamped by ``clamped()``;
values that cannot be bounded (NaN, ratio below 1, negative time constants)
raise ``InvalidParameterError``.  Effects call ``clamped()`` themselves.
"""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass, fields, replace

from pcmfx.errors import InvalidParameterError

# ---------------------------------------------------------------------------
# Ranges (slider limits of the editor)
# ---------------------------------------------------------------------------

EQ_GAIN_RANGE: tuple[float, float] = (-12.0, 12.0)
FADE_RANGE: tuple[float, float] = (0.0, 10.0)
CROSSFADE_RANGE: tuple[float, float] = (0.0, 5.0)
VOLUME_RANGE: tuple[float, float] = (0.0, 2.0)
DEPTH_RANGE: tuple[float, float] = (0.0, 1.0)

# ---------------------------------------------------------------------------
# EQ band design constants
# ---------------------------------------------------------------------------

BASS_SHELF_HZ = 200.0
MID_PEAK_HZ = 1000.0
MID_Q = 1.0
TREBLE_SHELF_HZ = 4000.0


def _clamp(value: float, bounds: tuple[float, float]) -> float:
    lo, hi = bounds
    return min(max(float(value), lo), hi)


def _check_finite(settings) -> None:
    # numpy scalars are numbers.Real
    for f in fields(settings):
        value = getattr(settings, f.name)
        if isinstance(value, bool) or not isinstance(value, numbers.Real):
            raise InvalidParameterError(
                f"{type(settings).__name__}.{f.name} must be a number, got {value!r}"
            )
        if not math.isfinite(float(value)):
            raise InvalidParameterError(
                f"{type(settings).__name__}.{f.name} must be finite, got {value}"
            )


@dataclass(frozen=True)
class EqSettings:
    """Bass / mid / treble gain in dB."""

    bass: float = 0.0
    mid: float = 0.0
    treble: float = 0.0

    def clamped(self) -> EqSettings:
        _check_finite(self)
        return replace(
            self,
            bass=_clamp(self.bass, EQ_GAIN_RANGE),
            mid=_clamp(self.mid, EQ_GAIN_RANGE),
            treble=_clamp(self.treble, EQ_GAIN_RANGE),
        )


@dataclass(frozen=True)
class FadeSettings:
    fade_in_seconds: float = 0.0
    fade_out_seconds: float = 0.0

    def clamped(self) -> FadeSettings:
        _check_finite(self)
        return replace(
            self,
            fade_in_seconds=_clamp(self.fade_in_seconds, FADE_RANGE),
            fade_out_seconds=_clamp(self.fade_out_seconds, FADE_RANGE),
        )


@dataclass(frozen=True)
class MergeSettings:
    """Crossfade length in seconds and linear input volumes."""

    crossfade_seconds: float = 0.0
    volume1: float = 1.0
    volume2: float = 1.0

    def clamped(self) -> MergeSettings:
        _check_finite(self)
        return replace(
            self,
            crossfade_seconds=_clamp(self.crossfade_seconds, CROSSFADE_RANGE),
            volume1=_clamp(self.volume1, VOLUME_RANGE),
            volume2=_clamp(self.volume2, VOLUME_RANGE),
        )


@dataclass(frozen=True)
class SidechainSettings:
    """Self-keyed ducking compressor parameters.

    Defaults match the editor's initial sidechain state.
    """

    threshold_db: float = -24.0
    ratio: float = 4.0
    attack_seconds: float = 0.003
    release_seconds: float = 0.25
    depth: float = 0.6

    def clamped(self) -> SidechainSettings:
        _check_finite(self)
        if self.ratio < 1.0:
            raise InvalidParameterError(f"ratio must be >= 1, got {self.ratio}")
        if self.attack_seconds < 0.0:
            raise InvalidParameterError(
                f"attack_seconds must be >= 0, got {self.attack_seconds}"
            )
        if self.release_seconds < 0.0:
            raise InvalidParameterError(
                f"release_seconds must be >= 0, got {self.release_seconds}"
            )
        return replace(
            self,
            threshold_db=float(self.threshold_db),
            ratio=float(self.ratio),
            attack_seconds=float(self.attack_seconds),
            release_seconds=float(self.release_seconds),
            depth=_clamp(self.depth, DEPTH_RANGE),
        )


@dataclass(frozen=True)
class TrimSettings:
    """Keep ``[start_seconds, end_seconds)`` of a buffer."""

    start_seconds: float = 0.0
    end_seconds: float = 0.0

    def clamped(self, duration: float) -> TrimSettings:
        _check_finite(self)
        if self.end_seconds < self.start_seconds:
            raise InvalidParameterError(
                f"end_seconds ({self.end_seconds}) is before "
                f"start_seconds ({self.start_seconds})"
            )
        bounds = (0.0, duration)
        return replace(
            self,
            start_seconds=_clamp(self.start_seconds, bounds),
            end_seconds=_clamp(self.end_seconds, bounds),
        )


def check_settings(settings, expected: type):
    """Return *settings*, or a default *expected* instance when None."""
    if settings is None:
        return expected()
    if not isinstance(settings, expected):
        raise InvalidParameterError(
            f"Expected {expected.__name__}, got {type(settings).__name__}"
        )
    return settings
