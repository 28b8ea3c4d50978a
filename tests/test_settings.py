"""Tests for pcmfx.settings."""

import dataclasses

import numpy as np
import numpy.testing as npt
import pytest

from pcmfx.buffer import AudioBuffer
from pcmfx.effects import equalize, sidechain_compress
from pcmfx.errors import InvalidParameterError
from pcmfx.settings import (
    EqSettings,
    FadeSettings,
    MergeSettings,
    SidechainSettings,
    TrimSettings,
    check_settings,
)


class TestDefaults:
    def test_eq_flat(self):
        assert EqSettings() == EqSettings(0.0, 0.0, 0.0)

    def test_sidechain_defaults(self):
        s = SidechainSettings()
        assert s.threshold_db == -24.0
        assert s.ratio == 4.0
        assert s.attack_seconds == 0.003
        assert s.release_seconds == 0.25
        assert s.depth == 0.6

    def test_merge_defaults(self):
        s = MergeSettings()
        assert (s.crossfade_seconds, s.volume1, s.volume2) == (0.0, 1.0, 1.0)

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            EqSettings().bass = 3.0


class TestClamping:
    def test_eq_gains(self):
        s = EqSettings(bass=30.0, mid=-40.0, treble=5.0).clamped()
        assert (s.bass, s.mid, s.treble) == (12.0, -12.0, 5.0)

    def test_fade_range(self):
        s = FadeSettings(fade_in_seconds=-1.0, fade_out_seconds=60.0).clamped()
        assert (s.fade_in_seconds, s.fade_out_seconds) == (0.0, 10.0)

    def test_merge_ranges(self):
        s = MergeSettings(crossfade_seconds=9.0, volume1=-0.5, volume2=3.0).clamped()
        assert (s.crossfade_seconds, s.volume1, s.volume2) == (5.0, 0.0, 2.0)

    def test_depth(self):
        assert SidechainSettings(depth=1.5).clamped().depth == 1.0
        assert SidechainSettings(depth=-0.2).clamped().depth == 0.0

    def test_trim_to_duration(self):
        s = TrimSettings(start_seconds=-1.0, end_seconds=99.0).clamped(2.5)
        assert (s.start_seconds, s.end_seconds) == (0.0, 2.5)

    def test_clamped_returns_new_instance(self):
        s = EqSettings(bass=20.0)
        s.clamped()
        assert s.bass == 20.0


class TestNumpyScalars:
    @pytest.mark.parametrize(
        "value, expected",
        [(np.float32(3.0), 3.0), (np.int64(20), 12.0), (np.float16(-0.5), -0.5)],
    )
    def test_eq_accepts_numpy_scalars(self, value, expected):
        s = EqSettings(bass=value).clamped()
        assert s.bass == expected
        assert type(s.bass) is float

    def test_sidechain_fields_become_float(self):
        s = SidechainSettings(threshold_db=np.float32(-20.0), ratio=np.int64(4)).clamped()
        assert s.threshold_db == -20.0
        assert type(s.threshold_db) is float
        assert type(s.ratio) is float

    def test_effects_match_python_floats(self):
        buf = AudioBuffer.noise(channels=2, frames=2048, seed=5)
        npt.assert_array_equal(
            equalize(buf, EqSettings(bass=np.float32(3.0))).data,
            equalize(buf, EqSettings(bass=3.0)).data,
        )
        npt.assert_array_equal(
            sidechain_compress(buf, SidechainSettings(threshold_db=np.float32(-20.0))).data,
            sidechain_compress(buf, SidechainSettings(threshold_db=-20.0)).data,
        )

    def test_numpy_nan_rejected(self):
        with pytest.raises(InvalidParameterError, match="finite"):
            FadeSettings(fade_in_seconds=np.float32("nan")).clamped()

    def test_numpy_bool_rejected(self):
        with pytest.raises(InvalidParameterError, match="number"):
            MergeSettings(volume2=np.bool_(True)).clamped()


class TestRejection:
    def test_ratio_below_one(self):
        with pytest.raises(InvalidParameterError, match="ratio"):
            SidechainSettings(ratio=0.5).clamped()

    def test_negative_attack(self):
        with pytest.raises(InvalidParameterError, match="attack"):
            SidechainSettings(attack_seconds=-0.001).clamped()

    def test_negative_release(self):
        with pytest.raises(InvalidParameterError, match="release"):
            SidechainSettings(release_seconds=-1.0).clamped()

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite(self, value):
        with pytest.raises(InvalidParameterError, match="finite"):
            EqSettings(bass=value).clamped()

    def test_non_number(self):
        with pytest.raises(InvalidParameterError, match="number"):
            FadeSettings(fade_in_seconds="1").clamped()

    def test_bool_rejected(self):
        with pytest.raises(InvalidParameterError):
            MergeSettings(volume1=True).clamped()

    def test_trim_end_before_start(self):
        with pytest.raises(InvalidParameterError, match="before"):
            TrimSettings(start_seconds=2.0, end_seconds=1.0).clamped(5.0)


class TestCheckSettings:
    def test_none_gives_default(self):
        assert check_settings(None, FadeSettings) == FadeSettings()

    def test_passthrough(self):
        s = EqSettings(bass=3.0)
        assert check_settings(s, EqSettings) is s

    def test_wrong_type(self):
        with pytest.raises(InvalidParameterError, match="Expected EqSettings"):
            check_settings(FadeSettings(), EqSettings)
