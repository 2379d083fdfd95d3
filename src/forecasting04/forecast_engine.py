# src/forecasting04/forecast_engine.py

"""
Forecast Engine
===============

Two-path forecaster:

    Primary  : remote model (bounded-timeout request)
    Fallback : local exponential smoothing

Always returns a forecast. The only failure that reaches the
caller is an InputError for an empty or invalid series.
"""

from typing import Any, Dict, Optional
import logging

from forecasting04.exponential_smoothing import (
    DEFAULT_ALPHA,
    DEFAULT_HORIZON_DAYS,
    local_forecast,
)
from remote03.remote_client import RemoteEngineClient
from utils.series_utils import InputError, SeriesLike, validate_demand_series


logger = logging.getLogger(__name__)


class ForecastEngine:
    """
    Parameters
    ----------
    client : RemoteEngineClient, optional
        Remote collaborator; local-only when None.
    alpha : float, default 0.3
        Smoothing factor for the fallback.
    """

    def __init__(
        self,
        client: Optional[RemoteEngineClient] = None,
        alpha: float = DEFAULT_ALPHA,
    ):
        if not (0 < alpha <= 1):
            raise InputError("alpha must be in (0, 1].")

        self.client = client
        self.alpha = alpha

    @classmethod
    def from_config(
        cls,
        config: Dict[str, Any],
        client: Optional[RemoteEngineClient] = None,
    ) -> "ForecastEngine":
        return cls(client=client, alpha=config["forecasting"]["alpha"])

    def forecast(
        self,
        series: SeriesLike,
        horizon_days: int = DEFAULT_HORIZON_DAYS,
    ) -> Dict[str, Any]:

        if isinstance(horizon_days, bool) or not isinstance(horizon_days, int) or horizon_days <= 0:
            raise InputError("horizon_days must be a positive integer.")

        historical = validate_demand_series(series)

        if self.client is not None:
            remote = self.client.forecast(historical, horizon_days)

            if remote is not None:
                return remote

            logger.warning(
                "ML forecast API not available, using local exponential smoothing"
            )

        return local_forecast(historical, horizon_days, self.alpha)
