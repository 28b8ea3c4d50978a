"""Typed failures raised by pcmfx effects.

All of them derive from ``ValueError`` so callers that already guard
numpy-style argument errors keep working.
"""

from __future__ import annotations


class EffectError(ValueError):
    """Base class for every error raised by the effect engine."""


class InvalidParameterError(EffectError):
    """A setting lies outside its domain and cannot be clamped."""


class ShapeMismatchError(EffectError):
    """Buffers disagree on sample rate, or a buffer has an invalid shape."""


class EmptyBufferError(EffectError):
    """The operation is undefined for zero frames or zero bins."""
