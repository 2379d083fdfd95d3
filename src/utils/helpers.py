# src/utils/helpers.py

"""
Reusable Helper Utilities
==========================

Small, generic utility functions used across the engine and pipelines.

- Filesystem helpers for output persistence
- Timestamp helper for versioned outputs
- Display rounding (half-up, as shown on the dashboard)
"""

import os
import math
from datetime import datetime


# ==========================================================
# Filesystem Utilities
# ==========================================================

def ensure_directory(path: str) -> None:
    """
    Ensure that a directory exists.

    Safe to call multiple times.
    """
    os.makedirs(path, exist_ok=True)


def generate_timestamp(fmt: str = "%Y%m%d_%H%M") -> str:
    """
    Generate formatted timestamp string.

    Default format:
        YYYYMMDD_HHMM

    Used for versioned output filenames.
    """
    return datetime.now().strftime(fmt)


# ==========================================================
# Rounding Utilities
# ==========================================================

def round_half_up(value: float, decimals: int = 0) -> float:
    """
    Round half-up to ``decimals`` places.

    Python's built-in ``round`` uses banker's rounding
    (``round(2.5) == 2``); engine outputs are rounded the way
    the dashboard displays them (``2.5 -> 3``).

    Parameters
    ----------
    value : float
        Value to round.
    decimals : int, default 0
        Number of decimal places.

    Returns
    -------
    float
        Rounded value. Integral results are still floats;
        callers cast when they need ``int``.
    """
    factor = 10 ** decimals
    return math.floor(value * factor + 0.5) / factor
