# src/forecasting04/exponential_smoothing.py

"""
Local Exponential Smoothing Forecast
====================================

Fallback forecaster used when the remote model is unavailable.

Method
------
- level_0 = first observation
- level_t = α × demand_t + (1 − α) × level_{t−1}
- every future day is forecast at the final level (flat line)

Confidence band
---------------
forecast ± 1.96 × σ, where σ is the population standard deviation
of the full history. The band is constant across the horizon; it
is an approximation, not a prediction interval.
"""

from typing import Any, Dict, Sequence
import logging

import pandas as pd

from utils.helpers import round_half_up
from utils.series_utils import (
    DATE_COLUMN,
    DEMAND_COLUMN,
    InputError,
    SeriesLike,
    validate_demand_series,
)
from utils.statistics import mean, std_dev


logger = logging.getLogger(__name__)


DEFAULT_ALPHA = 0.3
DEFAULT_HORIZON_DAYS = 14
CONFIDENCE_Z = 1.96


def exponential_smoothing(demands: Sequence[float], alpha: float = DEFAULT_ALPHA) -> float:
    """
    Final smoothed level of ``demands``.

    Raises
    ------
    InputError
        Empty input or alpha outside (0, 1].
    """

    if not (0 < alpha <= 1):
        raise InputError("alpha must be in (0, 1].")

    values = list(demands)
    if not values:
        raise InputError("Cannot smooth an empty series.")

    smoothed = float(values[0])
    for value in values[1:]:
        smoothed = alpha * value + (1 - alpha) * smoothed

    return smoothed


def local_forecast(
    series: SeriesLike,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
    alpha: float = DEFAULT_ALPHA,
) -> Dict[str, Any]:
    """
    Flat-line exponential smoothing forecast with a constant band.

    Parameters
    ----------
    series : DataFrame or iterable of {date, demand}
    horizon_days : int, default 14
    alpha : float, default 0.3

    Returns
    -------
    Dict[str, Any]
        historical, forecast (date, demand), demand_mean,
        demand_std_dev, confidence {lower, upper}, source="local".
    """

    if isinstance(horizon_days, bool) or not isinstance(horizon_days, int) or horizon_days <= 0:
        raise InputError("horizon_days must be a positive integer.")

    historical = validate_demand_series(series)
    demands = historical[DEMAND_COLUMN].to_numpy(dtype=float)

    level = round_half_up(exponential_smoothing(demands, alpha))

    demand_mean = mean(demands)
    demand_std = std_dev(demands)

    last_date = historical[DATE_COLUMN].iloc[-1]
    future_dates = pd.date_range(
        start=last_date + pd.Timedelta(days=1),
        periods=horizon_days,
        freq="D",
    )

    forecast = pd.DataFrame(
        {DATE_COLUMN: future_dates, DEMAND_COLUMN: [level] * horizon_days}
    )

    margin = CONFIDENCE_Z * demand_std

    return {
        "historical": historical,
        "forecast": forecast,
        "demand_mean": demand_mean,
        "demand_std_dev": demand_std,
        "confidence": {
            "lower": [level - margin] * horizon_days,
            "upper": [level + margin] * horizon_days,
        },
        "source": "local",
    }
