"""AudioBuffer -- immutable, metadata-carrying wrapper around planar float32 numpy arrays.

Every pcmfx effect reads one of these and returns a freshly allocated one;
the sample array behind a buffer is never written after construction.
"""

from __future__ import annotations

import math

import numpy as np

from pcmfx.errors import InvalidParameterError, ShapeMismatchError

_LAYOUTS = {1: "mono", 2: "stereo"}


class AudioBuffer:
    """Decoded PCM audio as a read-only ``[channels, frames]`` float32 array.

    Parameters
    ----------
    data : array-like or AudioBuffer
        Samples, one row per channel.  A 1D sequence becomes a mono buffer.
        The samples are always copied.
    sample_rate : float
        Frames per second; must be positive and finite.
    channel_layout : str or None
        ``'mono'`` or ``'stereo'`` are filled in from the channel count when
        not given.
    label : str or None
        Name carried through effects, e.g. the source file stem.
    """

    __slots__ = ("_data", "_sample_rate", "_channel_layout", "_label")

    def __init__(
        self,
        data,
        sample_rate: float = 48000.0,
        channel_layout: str | None = None,
        label: str | None = None,
    ):
        if isinstance(data, AudioBuffer):
            data = data._data
        samples = np.array(data, dtype=np.float32, order="C", copy=True)
        if samples.ndim == 1:
            samples = samples[np.newaxis, :]
        if samples.ndim != 2:
            raise ShapeMismatchError(
                f"AudioBuffer requires 1D or 2D data, got {samples.ndim}D"
            )
        if samples.shape[0] == 0:
            raise ShapeMismatchError("AudioBuffer requires at least one channel")

        rate = float(sample_rate)
        if not (math.isfinite(rate) and rate > 0):
            raise InvalidParameterError(f"Sample rate must be positive, got {rate}")

        samples.flags.writeable = False
        self._data = samples
        self._sample_rate = rate
        self._channel_layout = channel_layout or _LAYOUTS.get(samples.shape[0])
        self._label = label

    # ------------------------------------------------------------------
    # Shape and metadata
    # ------------------------------------------------------------------

    @property
    def data(self) -> np.ndarray:
        """The read-only sample array."""
        return self._data

    @property
    def sample_rate(self) -> float:
        return self._sample_rate

    @property
    def channels(self) -> int:
        return self._data.shape[0]

    @property
    def frames(self) -> int:
        return self._data.shape[1]

    @property
    def duration(self) -> float:
        """Length in seconds."""
        return self.frames / self._sample_rate

    @property
    def channel_layout(self) -> str | None:
        return self._channel_layout

    @property
    def label(self) -> str | None:
        return self._label

    def channel(self, i: int) -> np.ndarray:
        """Read-only 1D view of channel *i* (no negative indexing)."""
        if not 0 <= i < self.channels:
            raise IndexError(f"No channel {i} in a {self.channels}-channel buffer")
        return self._data[i]

    def same_format(self, other: AudioBuffer) -> bool:
        """True when *other* has the same channel count, frame count and rate."""
        return (
            self._data.shape == other._data.shape
            and self._sample_rate == other._sample_rate
        )

    def __array__(self, dtype=None, copy=None):
        return self._data if dtype is None else self._data.astype(dtype)

    def __len__(self) -> int:
        """Frame count."""
        return self.frames

    def __repr__(self) -> str:
        desc = f"{self.channels}x{self.frames} @ {self._sample_rate:g} Hz"
        if self._channel_layout:
            desc += f", {self._channel_layout}"
        if self._label is not None:
            desc += f", label={self._label!r}"
        return f"AudioBuffer({desc})"

    # ------------------------------------------------------------------
    # Derived buffers
    # ------------------------------------------------------------------

    def like(self, data) -> AudioBuffer:
        """New buffer holding *data* with this buffer's rate and label.

        The layout is kept only when the channel count is unchanged.
        """
        arr = np.asarray(data)
        same_width = arr.ndim == 2 and arr.shape[0] == self.channels
        return AudioBuffer(
            arr,
            sample_rate=self._sample_rate,
            channel_layout=self._channel_layout if same_width else None,
            label=self._label,
        )

    def copy(self) -> AudioBuffer:
        return self.like(self._data)

    def slice(self, start_frame: int, end_frame: int) -> AudioBuffer:
        """Frames ``[start_frame:end_frame]`` as a new buffer."""
        return self.like(self._data[:, start_frame:end_frame])

    def to_channels(self, n: int) -> AudioBuffer:
        """Widen to *n* channels by repeating the last channel.

        Narrowing raises ShapeMismatchError; channels are never dropped.
        """
        if n < self.channels:
            raise ShapeMismatchError(
                f"Cannot reduce {self.channels}-channel buffer to {n} channels"
            )
        rows = [self._data[min(i, self.channels - 1)] for i in range(n)]
        return self.like(np.stack(rows))

    def pipe(self, fn, *args, **kwargs) -> AudioBuffer:
        """``fn(self, *args, **kwargs)``, checked to return an AudioBuffer.

        Lets effects chain left to right::

            out = buf.pipe(equalize, EqSettings(bass=3)).pipe(reverse)
        """
        result = fn(self, *args, **kwargs)
        if not isinstance(result, AudioBuffer):
            raise TypeError(
                f"pipe() requires fn to return AudioBuffer, got {type(result).__name__}"
            )
        return result

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def zeros(cls, channels: int, frames: int, sample_rate: float = 48000.0, **kw) -> AudioBuffer:
        return cls(np.zeros((channels, frames), dtype=np.float32), sample_rate, **kw)

    @classmethod
    def ones(cls, channels: int, frames: int, sample_rate: float = 48000.0, **kw) -> AudioBuffer:
        return cls(np.ones((channels, frames), dtype=np.float32), sample_rate, **kw)

    @classmethod
    def sine(
        cls,
        freq: float,
        channels: int = 1,
        frames: int = 4096,
        sample_rate: float = 48000.0,
        amplitude: float = 1.0,
        **kw,
    ) -> AudioBuffer:
        phase = 2.0 * np.pi * freq * np.arange(frames) / sample_rate
        wave = amplitude * np.sin(phase)
        return cls(np.broadcast_to(wave, (channels, frames)), sample_rate, **kw)

    @classmethod
    def noise(
        cls,
        channels: int = 1,
        frames: int = 4096,
        sample_rate: float = 48000.0,
        seed: int | None = None,
        **kw,
    ) -> AudioBuffer:
        """Uniform white noise in [-1, 1)."""
        rng = np.random.default_rng(seed)
        return cls(rng.uniform(-1.0, 1.0, (channels, frames)), sample_rate, **kw)

    @classmethod
    def from_channels(cls, channels, sample_rate: float = 48000.0, **kw) -> AudioBuffer:
        """Stack equal-length per-channel sequences into one buffer."""
        rows = [np.asarray(ch, dtype=np.float32).ravel() for ch in channels]
        if not rows:
            raise ShapeMismatchError("At least one channel required")
        lengths = sorted({len(r) for r in rows})
        if len(lengths) > 1:
            raise ShapeMismatchError(
                f"All channels must have the same length, got {lengths}"
            )
        return cls(np.stack(rows), sample_rate, **kw)
