"""
Shared fixtures for the engine test suite.
"""

import numpy as np
import pandas as pd
import pytest

from inventory02.inventory_config import SafetyStockConfig


GOLDEN_DEMAND = [120, 135, 128, 142, 115, 130, 125]


def make_series(values, start="2024-01-01"):
    return pd.DataFrame(
        {
            "date": pd.date_range(start=start, periods=len(values), freq="D"),
            "demand": [float(v) for v in values],
        }
    )


@pytest.fixture
def golden_series():
    return make_series(GOLDEN_DEMAND)


@pytest.fixture
def flat_series():
    return make_series([100] * 7)


@pytest.fixture
def golden_config():
    return SafetyStockConfig(
        service_level=0.95,
        lead_time=7,
        lead_time_std_dev=1.5,
        review_period=7,
        holding_cost_per_unit=5,
        stockout_cost_per_unit=50,
    )


@pytest.fixture
def rng():
    return np.random.default_rng(42)
