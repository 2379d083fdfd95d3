import numpy as np
import pytest
import requests

from inventory02.safety_stock import calculate_safety_stock
from remote03.fallback import resolve_safety_stock, resolve_simulation
from remote03.remote_client import RemoteEngineClient, resolve_base_url
from stubs import StubResponse, StubSession


SAFETY_STOCK_PAYLOAD = {
    "safetyStock": 300,
    "reorderPoint": 1200,
    "averageDemand": 127.86,
    "demandStdDev": 8.37,
    "stockoutProbability": 5,
    "expectedAnnualHoldingCost": 1500,
    "expectedAnnualStockoutCost": 116670,
    "totalCost": 118170,
    "serviceLevel": 95,
}

SIMULATION_PAYLOAD = {
    "simulations": [900.0, 880.0, 910.0],
    "stockoutCount": 1,
    "stockoutProbability": 33.3,
    "meanDemand": 896.7,
    "percentiles": {"p50": 900.0, "p75": 910.0, "p90": 910.0, "p95": 910.0, "p99": 910.0},
}


def _client(session, timeout=30):
    return RemoteEngineClient("http://svc/", timeout_seconds=timeout, session=session)


# ---------------------------------------------------------------------
# Wire format
# ---------------------------------------------------------------------

def test_safety_stock_request_and_conversion(golden_config, golden_series):
    session = StubSession(routes={"/safety-stock": StubResponse(payload=SAFETY_STOCK_PAYLOAD)})

    result = _client(session, timeout=5).safety_stock(golden_config, golden_series)

    call = session.calls[0]
    assert call["method"] == "POST"
    assert call["url"] == "http://svc/safety-stock"
    assert call["timeout"] == 5
    assert call["json"]["config"]["serviceLevel"] == 0.95
    assert call["json"]["config"]["leadTimeStdDev"] == 1.5
    assert call["json"]["data"][0] == {"date": "2024-01-01", "demand": 120.0}

    assert result["safety_stock"] == 300
    assert result["expected_annual_stockout_cost"] == 116670


def test_simulation_conversion_sorts_draws(golden_config, golden_series):
    session = StubSession(routes={"/simulate": StubResponse(payload=SIMULATION_PAYLOAD)})

    result = _client(session).simulate(golden_config, golden_series, 3)

    assert session.calls[0]["json"]["num_simulations"] == 3
    assert np.array_equal(result["simulations"], [880.0, 900.0, 910.0])
    assert result["stockout_count"] == 1
    assert result["percentiles"]["p50"] == 900.0


def test_failures_reported_as_none(golden_config, golden_series):
    client = _client(StubSession(error=requests.Timeout("slow")))

    assert client.safety_stock(golden_config, golden_series) is None
    assert client.simulate(golden_config, golden_series, 10) is None
    assert client.forecast(golden_series, 14) is None


def test_health_check():
    assert _client(StubSession(routes={"/health": StubResponse()})).check_health() is True
    assert _client(StubSession(routes={"/health": StubResponse(status_code=500)})).check_health() is False
    assert _client(StubSession(error=requests.ConnectionError())).check_health() is False


# ---------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------

def test_from_config_disabled_returns_none():
    assert RemoteEngineClient.from_config({"remote": {"enabled": False}}) is None


def test_from_config_enabled(monkeypatch):
    monkeypatch.delenv("SSE_REMOTE_URL", raising=False)

    client = RemoteEngineClient.from_config(
        {"remote": {"enabled": True, "base_url": "http://svc:8000/", "timeout_seconds": 12}}
    )

    assert client.base_url == "http://svc:8000"
    assert client.timeout_seconds == 12


def test_env_override_and_placeholders(monkeypatch):
    monkeypatch.delenv("SSE_REMOTE_URL", raising=False)
    monkeypatch.setenv("FORECAST_HOST", "forecast.internal")

    assert resolve_base_url("http://${FORECAST_HOST}:9000") == "http://forecast.internal:9000"

    monkeypatch.setenv("SSE_REMOTE_URL", "http://override")
    assert resolve_base_url("http://${FORECAST_HOST}:9000") == "http://override"


def test_missing_placeholder_variable(monkeypatch):
    monkeypatch.delenv("SSE_REMOTE_URL", raising=False)
    monkeypatch.delenv("NOT_SET_ANYWHERE", raising=False)

    with pytest.raises(EnvironmentError):
        resolve_base_url("http://${NOT_SET_ANYWHERE}")


# ---------------------------------------------------------------------
# Remote-first resolvers
# ---------------------------------------------------------------------

def test_resolvers_local_without_client(golden_config, golden_series, rng):
    assert resolve_safety_stock(golden_config, golden_series) == calculate_safety_stock(
        golden_config, golden_series
    )
    assert len(resolve_simulation(golden_config, golden_series, 50, rng=rng)["simulations"]) == 50


def test_resolvers_prefer_remote(golden_config, golden_series):
    session = StubSession(
        routes={
            "/safety-stock": StubResponse(payload=SAFETY_STOCK_PAYLOAD),
            "/simulate": StubResponse(payload=SIMULATION_PAYLOAD),
        }
    )
    client = _client(session)

    assert resolve_safety_stock(golden_config, golden_series, client)["safety_stock"] == 300
    assert resolve_simulation(golden_config, golden_series, 3, client)["stockout_count"] == 1


def test_resolvers_fall_back(golden_config, golden_series, rng):
    client = _client(StubSession(routes={}))

    assert resolve_safety_stock(golden_config, golden_series, client)["safety_stock"] == 318

    result = resolve_simulation(golden_config, golden_series, 40, client, rng=rng)
    assert len(result["simulations"]) == 40
    assert "lead_time_days" in result


# ---------------------------------------------------------------------
# Malformed payloads
# ---------------------------------------------------------------------

def _with(payload, **changes):
    body = dict(payload)
    body.update(changes)
    return body


@pytest.mark.parametrize(
    "payload",
    [
        {key: None for key in SAFETY_STOCK_PAYLOAD},
        _with(SAFETY_STOCK_PAYLOAD, safetyStock="300"),
        _with(SAFETY_STOCK_PAYLOAD, totalCost=float("nan")),
        _with(SAFETY_STOCK_PAYLOAD, reorderPoint=-5),
        _with(SAFETY_STOCK_PAYLOAD, stockoutProbability=140),
        _with(SAFETY_STOCK_PAYLOAD, serviceLevel=True),
    ],
)
def test_malformed_safety_stock_falls_back(golden_config, golden_series, payload):
    client = _client(StubSession(routes={"/safety-stock": StubResponse(payload=payload)}))

    assert client.safety_stock(golden_config, golden_series) is None
    assert resolve_safety_stock(golden_config, golden_series, client) == calculate_safety_stock(
        golden_config, golden_series
    )


@pytest.mark.parametrize(
    "payload",
    [
        _with(SIMULATION_PAYLOAD, simulations=[900.0, 880.0]),
        _with(SIMULATION_PAYLOAD, stockoutCount=50),
        _with(SIMULATION_PAYLOAD, stockoutCount=1.5),
        _with(SIMULATION_PAYLOAD, simulations=[900.0, float("nan"), 910.0]),
        _with(SIMULATION_PAYLOAD, meanDemand=None),
        _with(
            SIMULATION_PAYLOAD,
            percentiles={"p50": 9.0, "p75": 1.0, "p90": 910.0, "p95": 910.0, "p99": 910.0},
        ),
        _with(SIMULATION_PAYLOAD, percentiles={"p50": 900.0}),
    ],
)
def test_malformed_simulation_falls_back(golden_config, golden_series, rng, payload):
    client = _client(StubSession(routes={"/simulate": StubResponse(payload=payload)}))

    assert client.simulate(golden_config, golden_series, 3) is None

    result = resolve_simulation(golden_config, golden_series, 3, client, rng=rng)
    assert result["run_count"] == 3
    assert "lead_time_days" in result
    assert 0 <= result["stockout_count"] <= 3


def test_simulation_run_count_must_match_request(golden_config, golden_series):
    client = _client(StubSession(routes={"/simulate": StubResponse(payload=SIMULATION_PAYLOAD)}))

    assert client.simulate(golden_config, golden_series, 10000) is None
    assert client.simulate(golden_config, golden_series, 3)["run_count"] == 3
