"""Log-space accumulation helpers."""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray


def log_sum(x: ArrayLike) -> float:
    """Return ``log(sum(exp(x)))`` by pairwise log-space addition.

    Examples
    --------
    >>> bool(np.isclose(log_sum(np.log([1.0, 2.0, 3.0])), np.log(6.0)))
    True
    >>> log_sum([-np.inf, -np.inf])
    -inf
    """
    values = np.asarray(x, dtype=np.float64)
    if values.size == 0:
        raise ValueError("log_sum requires at least one value")
    return float(np.logaddexp.reduce(values))


def log_cumsum(x: ArrayLike) -> NDArray[np.float64]:
    """Return ``log(cumsum(exp(x)))`` by pairwise log-space addition."""
    values = np.asarray(x, dtype=np.float64)
    return np.logaddexp.accumulate(values)
