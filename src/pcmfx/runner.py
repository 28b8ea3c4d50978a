"""Run effect calls on a background thread so the caller stays responsive."""

from __future__ import annotations

import concurrent.futures

from pcmfx.buffer import AudioBuffer


class EffectRunner:
    """Thin wrapper over a thread pool for whole-buffer effect calls.

    Each submitted call is one unit of work: it either runs to completion
    and yields a full buffer, or is cancelled before it starts.  A call that
    is already running cannot be interrupted; drop its future instead.

    Usable as a context manager::

        with EffectRunner() as runner:
            fut = runner.submit(effects.sidechain_compress, buf, settings)
            out = fut.result()
    """

    def __init__(self, max_workers: int = 1):
        self._executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="pcmfx",
        )

    def submit(self, fn, buf: AudioBuffer, *args, **kwargs) -> concurrent.futures.Future:
        """Schedule ``fn(buf, *args, **kwargs)`` and return its future.

        The future's result is checked to be an AudioBuffer.
        """

        def _job():
            result = fn(buf, *args, **kwargs)
            if not isinstance(result, AudioBuffer):
                raise TypeError(
                    f"{getattr(fn, '__name__', fn)!s} returned "
                    f"{type(result).__name__}, expected AudioBuffer"
                )
            return result

        return self._executor.submit(_job)

    def map(self, fn, buffers, *args, **kwargs) -> list[AudioBuffer]:
        """Apply *fn* to every buffer, returning results in input order."""
        futures = [self.submit(fn, b, *args, **kwargs) for b in buffers]
        return [f.result() for f in futures]

    def shutdown(self, wait: bool = True, cancel_pending: bool = False) -> None:
        self._executor.shutdown(wait=wait, cancel_futures=cancel_pending)

    def __enter__(self) -> EffectRunner:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown(wait=True)
