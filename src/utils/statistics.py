# src/utils/statistics.py

"""
Descriptive statistics over demand values.

- ``mean``       : arithmetic mean
- ``std_dev``    : population standard deviation (divide by N)
- ``percentile`` : nearest-rank selection on pre-sorted values

Population (ddof=0) rather than sample deviation is used
throughout the engine so results stay comparable with the
dashboard figures.
"""

import math
from typing import Sequence

import numpy as np

from utils.series_utils import InputError


def _as_array(values: Sequence[float]) -> np.ndarray:
    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        raise InputError("Cannot compute statistics of an empty series.")
    return arr


def mean(values: Sequence[float]) -> float:
    return float(np.mean(_as_array(values)))


def std_dev(values: Sequence[float]) -> float:
    """Population standard deviation: sqrt(mean((x - mean)^2))."""
    return float(np.std(_as_array(values), ddof=0))


def percentile(sorted_values: Sequence[float], p: float) -> float:
    """
    Nearest-rank percentile without interpolation.

    index = floor(p / 100 * n), clamped to [0, n - 1].
    ``sorted_values`` must already be ascending.
    """
    arr = _as_array(sorted_values)
    index = math.floor((p / 100) * arr.size)
    index = min(max(index, 0), arr.size - 1)
    return float(arr[index])
