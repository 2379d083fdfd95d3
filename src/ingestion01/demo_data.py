# src/ingestion01/demo_data.py

"""
Demo demand generator for cold-start use.

Produces a daily series with:
- a slight upward trend (+0.5 units/day from a base of 100)
- a 30-day sinusoidal cycle (amplitude 20)
- a weekend boost (Friday/Saturday above, mid-week below)
- uniform noise in [-10, 10)

Demand is floored at 50 units and rounded to whole units.
"""

from datetime import date, timedelta
from typing import Optional
import math

import numpy as np
import pandas as pd

from utils.helpers import round_half_up
from utils.series_utils import DATE_COLUMN, DEMAND_COLUMN, InputError


# Sunday .. Saturday
WEEKDAY_EFFECT = (1.0, 0.8, 0.8, 0.85, 0.9, 1.2, 1.3)

DEMAND_FLOOR = 50


def generate_demo_data(
    days: int = 90,
    end_date: Optional[date] = None,
    rng: Optional[np.random.Generator] = None,
) -> pd.DataFrame:
    """
    Synthesize ``days`` consecutive days of demand ending the day
    before ``end_date`` (default: today).

    Parameters
    ----------
    days : int, default 90
    end_date : date, optional
    rng : numpy Generator, optional
        Seedable random source; unseeded when omitted.

    Returns
    -------
    pd.DataFrame
        Demand series (``date``, ``demand``).
    """

    if not isinstance(days, int) or days <= 0:
        raise InputError("days must be a positive integer.")

    rng = rng if rng is not None else np.random.default_rng()
    end_date = end_date or date.today()
    base_date = end_date - timedelta(days=days)

    noise = (rng.random(days) - 0.5) * 20

    dates = []
    demand = []

    for i in range(days):
        current = base_date + timedelta(days=i)

        trend = 100 + i * 0.5
        seasonality = 20 * math.sin((i * 2 * math.pi) / 30)
        # date.weekday() is Monday=0; the effect table starts on Sunday
        weekday_effect = WEEKDAY_EFFECT[(current.weekday() + 1) % 7]

        value = round_half_up((trend + seasonality) * weekday_effect + noise[i])

        dates.append(current)
        demand.append(float(max(DEMAND_FLOOR, value)))

    return pd.DataFrame(
        {DATE_COLUMN: pd.to_datetime(dates), DEMAND_COLUMN: demand}
    )
