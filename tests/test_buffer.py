"""Tests for pcmfx.buffer.AudioBuffer."""

import numpy as np
import numpy.testing as npt
import pytest

from pcmfx.buffer import AudioBuffer
from pcmfx.errors import InvalidParameterError, ShapeMismatchError


# =========================================================================
# Construction
# =========================================================================


class TestConstruction:
    def test_from_1d_numpy(self):
        buf = AudioBuffer(np.ones(100, dtype=np.float32))
        assert buf.data.shape == (1, 100)
        assert buf.channels == 1
        assert buf.frames == 100

    def test_from_2d_numpy(self):
        buf = AudioBuffer(np.zeros((3, 200), dtype=np.float32))
        assert buf.data.shape == (3, 200)
        assert buf.channels == 3

    def test_from_list(self):
        buf = AudioBuffer([1.0, 2.0, 3.0])
        assert buf.data.dtype == np.float32
        npt.assert_array_equal(buf.channel(0), [1.0, 2.0, 3.0])

    def test_from_audiobuffer(self):
        orig = AudioBuffer.sine(440, label="orig")
        copy = AudioBuffer(orig)
        npt.assert_array_equal(copy.data, orig.data)
        assert copy.data is not orig.data

    def test_float64_converts(self):
        buf = AudioBuffer(np.ones(10, dtype=np.float64))
        assert buf.data.dtype == np.float32

    def test_empty_frames(self):
        buf = AudioBuffer(np.zeros((2, 0), dtype=np.float32))
        assert buf.frames == 0
        assert buf.channels == 2

    def test_3d_raises(self):
        with pytest.raises(ShapeMismatchError, match="1D or 2D"):
            AudioBuffer(np.zeros((2, 3, 4)))

    def test_zero_channels_raises(self):
        with pytest.raises(ShapeMismatchError, match="at least one channel"):
            AudioBuffer(np.zeros((0, 10)))

    @pytest.mark.parametrize("sr", [0, -44100, float("nan"), float("inf")])
    def test_bad_sample_rate_raises(self, sr):
        with pytest.raises(InvalidParameterError, match="Sample rate"):
            AudioBuffer(np.zeros(4), sample_rate=sr)

    def test_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            AudioBuffer(np.zeros(4), sample_rate=0)


# =========================================================================
# Immutability
# =========================================================================


class TestImmutability:
    def test_data_is_read_only(self):
        buf = AudioBuffer.ones(1, 8)
        with pytest.raises(ValueError):
            buf.data[0, 0] = 5.0

    def test_channel_view_is_read_only(self):
        buf = AudioBuffer.ones(2, 8)
        with pytest.raises(ValueError):
            buf.channel(1)[0] = 5.0

    def test_source_array_is_copied(self):
        arr = np.ones((1, 8), dtype=np.float32)
        buf = AudioBuffer(arr)
        arr[0, 0] = 9.0
        assert buf.data[0, 0] == 1.0
        # caller's array stays writable
        assert arr.flags.writeable


# =========================================================================
# Properties
# =========================================================================


class TestProperties:
    def test_channels_frames_duration(self):
        buf = AudioBuffer.zeros(2, 48000, sample_rate=48000.0)
        assert buf.channels == 2
        assert buf.frames == 48000
        assert buf.duration == pytest.approx(1.0)

    def test_layout_inferred(self):
        assert AudioBuffer.zeros(1, 10).channel_layout == "mono"
        assert AudioBuffer.zeros(2, 10).channel_layout == "stereo"
        assert AudioBuffer.zeros(6, 10).channel_layout is None

    def test_label(self):
        assert AudioBuffer.zeros(1, 10, label="kick").label == "kick"

    def test_len_is_frames(self):
        assert len(AudioBuffer.zeros(3, 17)) == 17

    def test_repr(self):
        r = repr(AudioBuffer.zeros(2, 10, sample_rate=44100.0, label="x"))
        assert r == "AudioBuffer(2x10 @ 44100 Hz, stereo, label='x')"

    def test_array_interop(self):
        buf = AudioBuffer.ones(2, 4)
        arr = np.asarray(buf)
        assert arr.shape == (2, 4)
        assert np.asarray(buf, dtype=np.float64).dtype == np.float64


# =========================================================================
# Channel access
# =========================================================================


class TestChannelAccess:
    def test_channel(self):
        buf = AudioBuffer(np.arange(6, dtype=np.float32).reshape(2, 3))
        npt.assert_array_equal(buf.channel(1), [3, 4, 5])

    def test_channel_out_of_range(self):
        with pytest.raises(IndexError):
            AudioBuffer.zeros(2, 4).channel(2)

    def test_negative_channel_rejected(self):
        with pytest.raises(IndexError):
            AudioBuffer.zeros(2, 4).channel(-1)


# =========================================================================
# Factories
# =========================================================================


class TestFactories:
    def test_sine_amplitude(self):
        buf = AudioBuffer.sine(1000.0, frames=4800, sample_rate=48000.0, amplitude=0.5)
        assert np.max(np.abs(buf.data)) == pytest.approx(0.5, abs=1e-3)

    def test_noise_seeded_and_bounded(self):
        a = AudioBuffer.noise(frames=256, seed=3)
        b = AudioBuffer.noise(frames=256, seed=3)
        npt.assert_array_equal(a.data, b.data)
        assert np.max(np.abs(a.data)) <= 1.0

    def test_from_channels(self):
        buf = AudioBuffer.from_channels([[1, 2, 3], [4, 5, 6]], sample_rate=8000)
        assert buf.channels == 2
        assert buf.sample_rate == 8000.0
        npt.assert_array_equal(buf.channel(1), [4, 5, 6])

    def test_from_channels_ragged_raises(self):
        with pytest.raises(ShapeMismatchError, match="same length"):
            AudioBuffer.from_channels([[1, 2, 3], [4, 5]])

    def test_from_channels_empty_raises(self):
        with pytest.raises(ShapeMismatchError):
            AudioBuffer.from_channels([])


# =========================================================================
# Channel operations
# =========================================================================


class TestChannelOps:
    def test_to_channels_repeats_last(self):
        buf = AudioBuffer.from_channels([[1.0, 2.0], [3.0, 4.0]])
        up = buf.to_channels(4)
        assert up.channels == 4
        npt.assert_array_equal(up.data[2], [3.0, 4.0])
        npt.assert_array_equal(up.data[3], [3.0, 4.0])

    def test_to_channels_same_count_copies(self):
        buf = AudioBuffer.ones(2, 4)
        assert buf.to_channels(2).same_format(buf)

    def test_to_channels_refuses_downmix(self):
        with pytest.raises(ShapeMismatchError):
            AudioBuffer.ones(3, 4).to_channels(2)

    def test_slice(self):
        buf = AudioBuffer(np.arange(10, dtype=np.float32), label="s")
        part = buf.slice(2, 5)
        npt.assert_array_equal(part.channel(0), [2, 3, 4])
        assert part.label == "s"

    def test_pipe(self):
        buf = AudioBuffer.ones(1, 4)
        out = buf.pipe(lambda b, n: b.to_channels(n), 2)
        assert isinstance(out, AudioBuffer)
        assert out.channels == 2

    def test_pipe_rejects_non_buffer(self):
        with pytest.raises(TypeError, match="AudioBuffer"):
            AudioBuffer.ones(1, 4).pipe(lambda b: 1.0)

    def test_same_format(self):
        a = AudioBuffer.zeros(2, 10, sample_rate=44100.0)
        assert a.same_format(AudioBuffer.ones(2, 10, sample_rate=44100.0))
        assert not a.same_format(AudioBuffer.ones(2, 10, sample_rate=48000.0))
        assert not a.same_format(AudioBuffer.ones(1, 10, sample_rate=44100.0))
