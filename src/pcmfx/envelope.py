"""Attack/release envelope follower."""

from __future__ import annotations

import math

import numpy as np

from pcmfx.errors import InvalidParameterError


def time_constant_coeff(seconds: float, sample_rate: float) -> float:
    """One-pole smoothing coefficient for a time constant in seconds.

    Zero seconds gives 0.0, i.e. the follower jumps straight to the input.
    """
    if seconds < 0:
        raise InvalidParameterError(f"Time constant must be >= 0, got {seconds}")
    if seconds == 0:
        return 0.0
    return math.exp(-1.0 / (seconds * sample_rate))


def follow_envelope(
    x: np.ndarray,
    sample_rate: float,
    attack: float,
    release: float,
) -> np.ndarray:
    """Track the amplitude of *x* with separate attack and release times.

    Parameters
    ----------
    x : np.ndarray
        1D signal.
    sample_rate : float
        Sample rate in Hz.
    attack, release : float
        Rise and fall time constants in seconds.

    Returns
    -------
    np.ndarray
        float64 envelope, one value per input sample.  The follower starts
        at 0 on every call.
    """
    attack_coeff = time_constant_coeff(attack, sample_rate)
    release_coeff = time_constant_coeff(release, sample_rate)

    magnitudes = np.abs(np.asarray(x, dtype=np.float64)).ravel()
    out = np.empty_like(magnitudes)
    env = 0.0
    # plain floats: numpy scalar indexing in this loop is several times slower
    for i, a in enumerate(magnitudes.tolist()):
        coeff = attack_coeff if a > env else release_coeff
        env = a + (env - a) * coeff
        out[i] = env
    return out
