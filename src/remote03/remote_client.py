# src/remote03/remote_client.py

"""
Remote forecasting / optimization collaborator client.

ROLE
----
Optional HTTP service that can replace the local engine for:

    POST /forecast       {"data": [...], "periods": n}
    POST /safety-stock   {"config": {...}, "data": [...]}
    POST /simulate       {"config": {...}, "data": [...], "num_simulations": n}
    GET  /health

Responses carry camelCase fields and are converted to the engine's
snake_case result dictionaries.

FAILURE CONTRACT
----------------
Public methods never raise for collaborator problems. Timeouts,
connection errors, non-2xx responses and malformed payloads
(missing or non-finite fields, a run count or horizon other than
the one requested, unordered percentiles) are logged at WARNING
and reported as ``None`` so callers branch to the local
implementation. There are no retries.
"""

from functools import partial
from typing import Any, Dict, Optional
import os
import re
import math
import logging

import numpy as np
import requests

from inventory02.inventory_config import SafetyStockConfig
from utils.series_utils import (
    DATE_COLUMN,
    DEMAND_COLUMN,
    SeriesLike,
    as_demand_frame,
    series_to_records,
    validate_demand_series,
)


logger = logging.getLogger(__name__)


DEFAULT_TIMEOUT_SECONDS = 30

URL_ENV_VAR = "SSE_REMOTE_URL"

_ENV_PATTERN = re.compile(r"\$\{(\w+)\}")


class CollaboratorUnavailable(Exception):
    """
    The remote collaborator could not produce a usable answer.

    Raised internally and converted to ``None`` at the public
    boundary of ``RemoteEngineClient``.
    """
    pass


def resolve_base_url(value: str) -> str:
    """
    Resolve ``${VAR}`` placeholders; ``SSE_REMOTE_URL`` overrides
    the configured value entirely when set.
    """

    if os.environ.get(URL_ENV_VAR):
        return os.environ[URL_ENV_VAR]

    def replacer(match):
        var = match.group(1)
        if var not in os.environ:
            raise EnvironmentError(
                f"[REMOTE] Environment variable '{var}' not set"
            )
        return os.environ[var]

    return _ENV_PATTERN.sub(replacer, value)


class RemoteEngineClient:
    """
    Thin ``requests`` client for the optional collaborator.

    Parameters
    ----------
    base_url : str
        Service root, e.g. ``http://localhost:8000``.
    timeout_seconds : float, default 30
        Per-request timeout.
    session : requests.Session, optional
        Injected session (tests pass a stub).
    """

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.session = session if session is not None else requests.Session()

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> Optional["RemoteEngineClient"]:
        """
        Build from the ``remote`` config section; None when disabled.
        """
        remote_cfg = config.get("remote", {})

        if not remote_cfg.get("enabled", False):
            return None

        return cls(
            base_url=resolve_base_url(remote_cfg["base_url"]),
            timeout_seconds=remote_cfg.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS),
        )

    # --------------------------------------------------
    # Transport
    # --------------------------------------------------

    def _request(self, method: str, path: str, payload: Optional[Dict] = None) -> Any:
        url = f"{self.base_url}{path}"

        try:
            response = self.session.request(
                method=method,
                url=url,
                json=payload,
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
            return response.json()
        except requests.RequestException as exc:
            raise CollaboratorUnavailable(f"{method} {url} failed: {exc}") from exc
        except ValueError as exc:
            raise CollaboratorUnavailable(f"{method} {url} returned invalid JSON") from exc

    def _call(self, operation: str, convert, method: str, path: str, payload=None):
        try:
            body = self._request(method, path, payload)
            return convert(body)
        except CollaboratorUnavailable as exc:
            logger.warning(f"[REMOTE] {operation} unavailable: {exc}")
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning(f"[REMOTE] {operation} returned a malformed payload: {exc!r}")
        return None

    # --------------------------------------------------
    # Operations
    # --------------------------------------------------

    def check_health(self) -> bool:
        """True when ``GET /health`` answers with a 2xx status."""
        try:
            response = self.session.request(
                method="GET",
                url=f"{self.base_url}/health",
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.info(f"[REMOTE] Health check failed: {exc}")
            return False
        return True

    def forecast(self, series: SeriesLike, horizon_days: int) -> Optional[Dict[str, Any]]:
        demand = validate_demand_series(series)
        return self._call(
            "forecast",
            partial(_convert_forecast, horizon_days=horizon_days),
            "POST",
            "/forecast",
            {"data": series_to_records(demand), "periods": horizon_days},
        )

    def safety_stock(
        self, config: SafetyStockConfig, series: SeriesLike
    ) -> Optional[Dict[str, Any]]:
        demand = validate_demand_series(series)
        return self._call(
            "safety stock",
            _convert_safety_stock,
            "POST",
            "/safety-stock",
            {"config": config.to_payload(), "data": series_to_records(demand)},
        )

    def simulate(
        self, config: SafetyStockConfig, series: SeriesLike, run_count: int
    ) -> Optional[Dict[str, Any]]:
        demand = validate_demand_series(series)
        return self._call(
            "simulation",
            partial(_convert_simulation, run_count=run_count),
            "POST",
            "/simulate",
            {
                "config": config.to_payload(),
                "data": series_to_records(demand),
                "num_simulations": run_count,
            },
        )


# ==========================================================
# Payload conversion (camelCase -> engine dictionaries)
# ==========================================================
#
# A payload that parses but breaks a result rule raises ValueError,
# which ``_call`` reports as unavailable.

SAFETY_STOCK_FIELDS = {
    "safety_stock": "safetyStock",
    "reorder_point": "reorderPoint",
    "average_demand": "averageDemand",
    "demand_std_dev": "demandStdDev",
    "stockout_probability": "stockoutProbability",
    "expected_annual_holding_cost": "expectedAnnualHoldingCost",
    "expected_annual_stockout_cost": "expectedAnnualStockoutCost",
    "total_cost": "totalCost",
    "service_level": "serviceLevel",
}

PERCENTILE_KEYS = ("p50", "p75", "p90", "p95", "p99")


def _number(value: Any, field: str, minimum: Optional[float] = None) -> Any:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{field} must be a number, got {value!r}")

    if not math.isfinite(value):
        raise ValueError(f"{field} must be finite, got {value!r}")

    if minimum is not None and value < minimum:
        raise ValueError(f"{field} must be >= {minimum}, got {value!r}")

    return value


def _percentage(value: Any, field: str) -> Any:
    value = _number(value, field, minimum=0)
    if value > 100:
        raise ValueError(f"{field} must be a percentage, got {value!r}")
    return value


def _convert_safety_stock(body: Dict[str, Any]) -> Dict[str, Any]:
    result = {
        name: _number(body[key], key, minimum=0)
        for name, key in SAFETY_STOCK_FIELDS.items()
    }

    _percentage(result["stockout_probability"], "stockoutProbability")
    _percentage(result["service_level"], "serviceLevel")

    return result


def _convert_simulation(body: Dict[str, Any], run_count: int) -> Dict[str, Any]:
    draws = [_number(v, "simulations", minimum=0) for v in body["simulations"]]

    if len(draws) != run_count:
        raise ValueError(
            f"expected {run_count} simulations, got {len(draws)}"
        )

    stockout_count = _number(body["stockoutCount"], "stockoutCount", minimum=0)
    if stockout_count != int(stockout_count) or stockout_count > run_count:
        raise ValueError(
            f"stockoutCount must be an integer in [0, {run_count}], got {stockout_count!r}"
        )

    percentiles = {
        key: float(_number(body["percentiles"][key], key))
        for key in PERCENTILE_KEYS
    }
    ordered = [percentiles[key] for key in PERCENTILE_KEYS]
    if any(lo > hi for lo, hi in zip(ordered, ordered[1:])):
        raise ValueError(f"percentiles are not non-decreasing: {percentiles}")

    return {
        "simulations": np.sort(np.asarray(draws, dtype=float)),
        "stockout_count": int(stockout_count),
        "stockout_probability": float(
            _percentage(body["stockoutProbability"], "stockoutProbability")
        ),
        "mean_demand": float(_number(body["meanDemand"], "meanDemand", minimum=0)),
        "percentiles": percentiles,
        "run_count": run_count,
    }


def _convert_forecast(body: Dict[str, Any], horizon_days: int) -> Dict[str, Any]:
    historical = as_demand_frame(body["historical"])
    forecast = as_demand_frame(body["forecast"])

    if len(forecast) != horizon_days:
        raise ValueError(
            f"expected {horizon_days} forecast days, got {len(forecast)}"
        )

    for value in forecast[DEMAND_COLUMN]:
        _number(value, "forecast.demand", minimum=0)

    confidence = body["confidence"]
    lower = [float(_number(v, "confidence.lower")) for v in confidence["lower"]]
    upper = [float(_number(v, "confidence.upper")) for v in confidence["upper"]]

    if len(lower) != horizon_days or len(upper) != horizon_days:
        raise ValueError("confidence bounds are not aligned with the forecast")

    if any(lo > hi for lo, hi in zip(lower, upper)):
        raise ValueError("confidence lower bound exceeds upper bound")

    return {
        "historical": historical,
        "forecast": forecast[[DATE_COLUMN, DEMAND_COLUMN]].reset_index(drop=True),
        "demand_mean": float(_number(body["demandMean"], "demandMean")),
        "demand_std_dev": float(_number(body["demandStdDev"], "demandStdDev", minimum=0)),
        "confidence": {"lower": lower, "upper": upper},
        "source": "remote",
    }
