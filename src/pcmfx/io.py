"""PCM WAV adapter used by the command line.

The effect engine itself never touches files; this module converts between
WAV data and AudioBuffer so the CLI has something to feed it.

  read  -- 8-bit unsigned, 16/24/32-bit signed PCM, normalised to [-1, 1]
  write -- 16 or 24-bit signed PCM, clipped to [-1, 1]
"""

from __future__ import annotations

import io
import wave
from pathlib import Path

import numpy as np

from pcmfx.buffer import AudioBuffer

_WRITE_DEPTHS = (16, 24)


def _decode_pcm(raw: bytes, sampwidth: int) -> np.ndarray:
    """Interleaved little-endian PCM bytes -> float32 samples in [-1, 1]."""
    if sampwidth == 1:
        samples = np.frombuffer(raw, dtype=np.uint8).astype(np.float32)
        return (samples - 128.0) / 128.0
    if sampwidth == 2:
        return np.frombuffer(raw, dtype="<i2").astype(np.float32) / 32768.0
    if sampwidth == 3:
        triples = np.frombuffer(raw, dtype=np.uint8).reshape(-1, 3).astype(np.int32)
        ints = triples[:, 0] | (triples[:, 1] << 8) | (triples[:, 2] << 16)
        ints = np.where(ints & 0x800000, ints - 0x1000000, ints)
        return ints.astype(np.float32) / 8388608.0
    if sampwidth == 4:
        return np.frombuffer(raw, dtype="<i4").astype(np.float32) / 2147483648.0
    raise ValueError(f"Unsupported sample width: {sampwidth} bytes")


def _encode_pcm(data: np.ndarray, bit_depth: int) -> bytes:
    """Planar float samples -> interleaved little-endian PCM bytes."""
    interleaved = np.clip(data, -1.0, 1.0).T.ravel()
    if bit_depth == 16:
        return (interleaved * 32767.0).astype("<i2").tobytes()
    ints = np.round(interleaved * 8388607.0).astype("<i4")
    return ints.view(np.uint8).reshape(-1, 4)[:, :3].tobytes()


def _read_wave(fh) -> AudioBuffer:
    with wave.open(fh, "rb") as wf:
        n_channels = wf.getnchannels()
        sampwidth = wf.getsampwidth()
        sample_rate = wf.getframerate()
        raw = wf.readframes(wf.getnframes())
    samples = _decode_pcm(raw, sampwidth)
    # [L0, R0, L1, R1, ...] -> [[L0, L1, ...], [R0, R1, ...]]
    data = samples.reshape(-1, n_channels).T
    return AudioBuffer(data, sample_rate=float(sample_rate))


def _write_wave(fh, buf: AudioBuffer, bit_depth: int) -> None:
    if bit_depth not in _WRITE_DEPTHS:
        raise ValueError(f"Unsupported bit_depth: {bit_depth} (use 16 or 24)")
    with wave.open(fh, "wb") as wf:
        wf.setnchannels(buf.channels)
        wf.setsampwidth(bit_depth // 8)
        wf.setframerate(int(round(buf.sample_rate)))
        wf.writeframes(_encode_pcm(buf.data, bit_depth))


def read_wav(path: str | Path) -> AudioBuffer:
    """Read a WAV file into an AudioBuffer labelled with the file stem."""
    path = Path(path)
    with open(path, "rb") as fh:
        buf = _read_wave(fh)
    return AudioBuffer(buf, sample_rate=buf.sample_rate, label=path.stem)


def write_wav(path: str | Path, buf: AudioBuffer, bit_depth: int = 16) -> None:
    """Write *buf* to *path* as 16 or 24-bit PCM."""
    with open(Path(path), "wb") as fh:
        _write_wave(fh, buf, bit_depth)


def read_wav_bytes(raw: bytes) -> AudioBuffer:
    """Decode an in-memory WAV file."""
    return _read_wave(io.BytesIO(raw))


def write_wav_bytes(buf: AudioBuffer, bit_depth: int = 16) -> bytes:
    """Encode *buf* as an in-memory WAV file."""
    out = io.BytesIO()
    _write_wave(out, buf, bit_depth)
    return out.getvalue()


def read(path: str | Path) -> AudioBuffer:
    """Read an audio file, choosing the decoder by extension."""
    path = Path(path)
    ext = path.suffix.lower()
    if ext != ".wav":
        raise ValueError(f"Unsupported audio format '{ext}'. Supported: .wav")
    return read_wav(path)


def write(path: str | Path, buf: AudioBuffer, bit_depth: int = 16) -> None:
    """Write an audio file, choosing the encoder by extension."""
    path = Path(path)
    ext = path.suffix.lower()
    if ext != ".wav":
        raise ValueError(f"Unsupported audio format '{ext}'. Supported: .wav")
    write_wav(path, buf, bit_depth=bit_depth)
