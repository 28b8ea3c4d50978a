"""Tests for pcmfx.runner.EffectRunner."""

import threading

import numpy.testing as npt
import pytest

from pcmfx.buffer import AudioBuffer
from pcmfx.effects import equalize, sidechain_compress
from pcmfx.errors import InvalidParameterError
from pcmfx.ops import reverse
from pcmfx.runner import EffectRunner
from pcmfx.settings import EqSettings, SidechainSettings


class TestEffectRunner:
    def test_submit_returns_buffer(self):
        buf = AudioBuffer.noise(frames=1024, seed=1)
        with EffectRunner() as runner:
            out = runner.submit(equalize, buf, EqSettings(bass=3.0)).result()
        assert isinstance(out, AudioBuffer)
        npt.assert_array_equal(out.data, equalize(buf, EqSettings(bass=3.0)).data)

    def test_kwargs_forwarded(self):
        buf = AudioBuffer.noise(frames=256, seed=2)
        with EffectRunner() as runner:
            out = runner.submit(
                sidechain_compress, buf, settings=SidechainSettings(depth=0.0)
            ).result()
        npt.assert_array_equal(out.data, buf.data)

    def test_runs_off_calling_thread(self):
        seen = []

        def record(buf):
            seen.append(threading.current_thread().name)
            return buf

        with EffectRunner() as runner:
            runner.submit(record, AudioBuffer.zeros(1, 4)).result()
        assert seen[0].startswith("pcmfx")

    def test_map_keeps_order(self):
        bufs = [AudioBuffer.noise(frames=128, seed=i) for i in range(6)]
        with EffectRunner(max_workers=3) as runner:
            outs = runner.map(reverse, bufs)
        for buf, out in zip(bufs, outs):
            npt.assert_array_equal(out.data, buf.data[:, ::-1])

    def test_concurrent_calls_match_sequential(self):
        bufs = [AudioBuffer.noise(channels=2, frames=2048, seed=i) for i in range(4)]
        settings = SidechainSettings(depth=1.0)
        with EffectRunner(max_workers=4) as runner:
            outs = runner.map(sidechain_compress, bufs, settings)
        for buf, out in zip(bufs, outs):
            npt.assert_array_equal(out.data, sidechain_compress(buf, settings).data)

    def test_effect_errors_propagate(self):
        with EffectRunner() as runner:
            fut = runner.submit(
                sidechain_compress, AudioBuffer.zeros(1, 8), SidechainSettings(ratio=0.1)
            )
            with pytest.raises(InvalidParameterError):
                fut.result()

    def test_non_buffer_result_rejected(self):
        with EffectRunner() as runner:
            fut = runner.submit(lambda b: b.frames, AudioBuffer.zeros(1, 8))
            with pytest.raises(TypeError, match="expected AudioBuffer"):
                fut.result()

    def test_submit_after_shutdown(self):
        runner = EffectRunner()
        runner.shutdown()
        with pytest.raises(RuntimeError):
            runner.submit(reverse, AudioBuffer.zeros(1, 4))


class TestCancellation:
    @pytest.fixture
    def gate(self):
        """A job that blocks the single worker until released."""
        started = threading.Event()
        release = threading.Event()

        def hold(buf):
            started.set()
            release.wait(timeout=10)
            return reverse(buf)

        yield hold, started, release
        release.set()

    def test_queued_call_can_be_cancelled(self, gate):
        hold, started, release = gate
        buf = AudioBuffer.noise(channels=2, frames=512, seed=4)
        with EffectRunner(max_workers=1) as runner:
            first = runner.submit(hold, buf)
            assert started.wait(timeout=5)
            second = runner.submit(reverse, buf)
            assert second.cancel()
            assert second.cancelled()
            release.set()
            out = first.result(timeout=5)
        assert out.frames == buf.frames
        npt.assert_array_equal(out.data, buf.data[:, ::-1])

    def test_running_call_is_not_cancelled(self, gate):
        hold, started, release = gate
        with EffectRunner(max_workers=1) as runner:
            first = runner.submit(hold, AudioBuffer.zeros(1, 16))
            assert started.wait(timeout=5)
            assert not first.cancel()
            release.set()
            assert first.result(timeout=5).frames == 16

    def test_shutdown_cancels_pending(self, gate):
        hold, started, release = gate
        buf = AudioBuffer.ones(1, 64)
        runner = EffectRunner(max_workers=1)
        first = runner.submit(hold, buf)
        assert started.wait(timeout=5)
        queued = [runner.submit(reverse, buf) for _ in range(3)]
        timer = threading.Timer(0.2, release.set)
        timer.start()
        runner.shutdown(wait=True, cancel_pending=True)
        timer.join()
        assert all(f.cancelled() for f in queued)
        assert first.result(timeout=5).frames == 64
