"""
pcmfx - offline effects for decoded PCM audio.

Submodules:
    pcmfx.buffer    - AudioBuffer, the immutable [channels, frames] container
    pcmfx.settings  - Parameter records and their ranges
    pcmfx.units     - dB <-> linear conversion
    pcmfx.envelope  - Attack/release envelope follower
    pcmfx.effects   - Three-band EQ, single-band filters, sidechain ducking
    pcmfx.ops       - Fade, reverse, merge with crossfade, trim
    pcmfx.analysis  - Waveform overview, peak level
    pcmfx.runner    - Background execution of effect calls
    pcmfx.io        - PCM WAV read/write
"""

from pcmfx.buffer import AudioBuffer
from pcmfx.errors import (
    EffectError,
    EmptyBufferError,
    InvalidParameterError,
    ShapeMismatchError,
)
from pcmfx.settings import (
    EqSettings,
    FadeSettings,
    MergeSettings,
    SidechainSettings,
    TrimSettings,
)
from pcmfx.effects import equalize, sidechain_compress
from pcmfx.ops import fade, merge, reverse, trim
from pcmfx.analysis import waveform_summarize
from pcmfx.runner import EffectRunner
from pcmfx import analysis, effects, envelope, io, ops, units

__all__ = [
    "AudioBuffer",
    "EffectError",
    "EmptyBufferError",
    "InvalidParameterError",
    "ShapeMismatchError",
    "EqSettings",
    "FadeSettings",
    "MergeSettings",
    "SidechainSettings",
    "TrimSettings",
    "equalize",
    "sidechain_compress",
    "fade",
    "merge",
    "reverse",
    "trim",
    "waveform_summarize",
    "EffectRunner",
    "analysis",
    "effects",
    "envelope",
    "io",
    "ops",
    "units",
]
__version__ = "0.1.0"
