import pandas as pd
import pytest
import requests

from conftest import make_series
from forecasting04.exponential_smoothing import exponential_smoothing, local_forecast
from forecasting04.forecast_engine import ForecastEngine
from remote03.remote_client import RemoteEngineClient
from stubs import StubResponse, StubSession
from utils.series_utils import InputError


# ---------------------------------------------------------------------
# Local fallback
# ---------------------------------------------------------------------

def test_flat_series_forecast(flat_series):
    result = local_forecast(flat_series, horizon_days=14)

    assert exponential_smoothing(flat_series["demand"]) == 100
    assert list(result["forecast"]["demand"]) == [100] * 14
    assert result["confidence"]["lower"] == [100] * 14
    assert result["confidence"]["upper"] == [100] * 14
    assert result["demand_std_dev"] == 0
    assert result["source"] == "local"


def test_smoothing_recurrence():
    # 10 -> 0.3*20 + 0.7*10 = 13 -> 0.3*10 + 0.7*13 = 12.1
    assert exponential_smoothing([10, 20, 10], alpha=0.3) == pytest.approx(12.1)


def test_alpha_one_tracks_last_value():
    assert exponential_smoothing([5, 9, 42], alpha=1.0) == 42


def test_forecast_dates_follow_history(golden_series):
    result = local_forecast(golden_series, horizon_days=3)

    dates = list(result["forecast"]["date"])
    assert dates == list(pd.date_range("2024-01-08", periods=3, freq="D"))


def test_constant_band_width(golden_series):
    result = local_forecast(golden_series, horizon_days=5)

    widths = [u - l for l, u in zip(result["confidence"]["lower"], result["confidence"]["upper"])]
    expected = 2 * 1.96 * result["demand_std_dev"]

    assert all(w == pytest.approx(expected) for w in widths)
    assert len(result["confidence"]["lower"]) == len(result["forecast"]) == 5


def test_empty_series_is_the_only_hard_failure():
    with pytest.raises(InputError):
        ForecastEngine().forecast(make_series([]))


@pytest.mark.parametrize("horizon", [0, -1, 1.5])
def test_invalid_horizon(golden_series, horizon):
    with pytest.raises(InputError):
        ForecastEngine().forecast(golden_series, horizon)


# ---------------------------------------------------------------------
# Remote-first behaviour
# ---------------------------------------------------------------------

def _remote_payload():
    return {
        "historical": [{"date": "2024-01-01", "demand": 100}],
        "forecast": [
            {"date": "2024-01-02", "demand": 110, "forecast": 110},
            {"date": "2024-01-03", "demand": 111, "forecast": 111},
        ],
        "demandMean": 100.0,
        "demandStdDev": 4.0,
        "confidence": {"lower": [100, 101], "upper": [120, 121]},
    }


def test_remote_result_used_when_available(golden_series):
    session = StubSession(routes={"/forecast": StubResponse(payload=_remote_payload())})
    engine = ForecastEngine(client=RemoteEngineClient("http://svc", session=session))

    result = engine.forecast(golden_series, horizon_days=2)

    assert result["source"] == "remote"
    assert list(result["forecast"]["demand"]) == [110, 111]
    assert session.calls[0]["json"]["periods"] == 2
    assert len(session.calls[0]["json"]["data"]) == 7


@pytest.mark.parametrize(
    "session",
    [
        StubSession(error=requests.Timeout("timed out")),
        StubSession(error=requests.ConnectionError("refused")),
        StubSession(routes={"/forecast": StubResponse(status_code=503)}),
        StubSession(routes={"/forecast": StubResponse(invalid_json=True)}),
        StubSession(routes={"/forecast": StubResponse(payload={"unexpected": True})}),
    ],
)
def test_falls_back_on_any_remote_failure(flat_series, session):
    engine = ForecastEngine(client=RemoteEngineClient("http://svc", session=session))

    result = engine.forecast(flat_series, horizon_days=4)

    assert result["source"] == "local"
    assert list(result["forecast"]["demand"]) == [100] * 4
    assert len(session.calls) == 1


def test_local_only_without_client(flat_series):
    assert ForecastEngine().forecast(flat_series)["source"] == "local"


def _remote_with(**changes):
    body = _remote_payload()
    body.update(changes)
    return body


@pytest.mark.parametrize(
    "payload",
    [
        _remote_with(forecast=[], confidence={"lower": [], "upper": []}, demandMean=float("nan")),
        _remote_with(demandMean=float("nan")),
        _remote_with(demandStdDev=None),
        _remote_with(confidence={"lower": [100], "upper": [120]}),
        _remote_with(confidence={"lower": [100, float("inf")], "upper": [120, 121]}),
        _remote_with(confidence={"lower": [130, 101], "upper": [120, 121]}),
        _remote_with(
            forecast=[
                {"date": "2024-01-02", "demand": float("nan")},
                {"date": "2024-01-03", "demand": 111},
            ]
        ),
    ],
)
def test_malformed_remote_forecast_falls_back(flat_series, payload):
    session = StubSession(routes={"/forecast": StubResponse(payload=payload)})
    engine = ForecastEngine(client=RemoteEngineClient("http://svc", session=session))

    result = engine.forecast(flat_series, horizon_days=2)

    assert result["source"] == "local"
    assert list(result["forecast"]["demand"]) == [100, 100]


def test_remote_forecast_must_cover_requested_horizon(golden_series):
    session = StubSession(routes={"/forecast": StubResponse(payload=_remote_payload())})
    engine = ForecastEngine(client=RemoteEngineClient("http://svc", session=session))

    result = engine.forecast(golden_series, horizon_days=14)

    assert result["source"] == "local"
    assert len(result["forecast"]) == 14
