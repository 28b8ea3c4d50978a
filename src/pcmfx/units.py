"""Decibel <-> linear gain conversion."""

from __future__ import annotations

import numpy as np

# Floor applied before taking the log so silence maps to -80 dB, not -inf.
EPSILON = 1e-4


def db_to_linear(db):
    """``10 ** (db / 20)``. Works on scalars and arrays."""
    if isinstance(db, np.ndarray):
        return np.power(10.0, db / 20.0)
    return 10.0 ** (db / 20.0)


def linear_to_db(x):
    """``20 * log10(max(x, EPSILON))``. Works on scalars and arrays."""
    if isinstance(x, np.ndarray):
        return 20.0 * np.log10(np.maximum(x, EPSILON))
    return 20.0 * float(np.log10(max(x, EPSILON)))
