# src/inventory02/safety_stock.py

"""
Safety Stock Calculation Module
================================

Combined demand / lead-time variability formula.

Formula:
--------
SafetyStock  = Z × √(LT × σ_d² + d̄² × σ_LT²)
ReorderPoint = d̄ × LT + SafetyStock

Where:
- Z    = service level factor (see z_score)
- d̄    = average daily demand
- σ_d  = population standard deviation of daily demand
- LT   = mean lead time in days
- σ_LT = lead time standard deviation in days

Both uncertainty sources are assumed independent and normal.

Cost projection (annual):
-------------------------
- Holding  = SafetyStock × holding_cost_per_unit
  (charged on the buffer only, not on cycle stock)
- Stockout = d̄ × 365 × (1 − service_level) × stockout_cost_per_unit

The stockout probability reported here is the nominal
``1 − service_level``. It does not fall when the computed buffer
grows; the Monte Carlo simulator provides the empirical figure.
"""

from typing import Dict
import math
import logging

from inventory02.inventory_config import SafetyStockConfig
from inventory02.z_score import get_z_score
from utils.helpers import round_half_up
from utils.series_utils import SeriesLike, demand_values
from utils.statistics import mean, std_dev


logger = logging.getLogger(__name__)


DAYS_PER_YEAR = 365


def compute_safety_stock(
    z_value: float,
    avg_demand: float,
    demand_std: float,
    lead_time: float,
    lead_time_std: float,
) -> float:
    """
    Unrounded safety stock from pre-computed statistics.
    """
    demand_variance = demand_std ** 2
    lead_time_variance = lead_time_std ** 2

    return z_value * math.sqrt(
        lead_time * demand_variance + avg_demand ** 2 * lead_time_variance
    )


def calculate_safety_stock(
    config: SafetyStockConfig,
    series: SeriesLike,
) -> Dict[str, float]:
    """
    Calculate safety stock, reorder point and annual cost projection.

    Parameters
    ----------
    config : SafetyStockConfig
        Service level, lead time and cost parameters.
    series : DataFrame or iterable of {date, demand}
        Full demand history; no windowing is applied.

    Returns
    -------
    Dict[str, float]
        safety_stock, reorder_point, average_demand, demand_std_dev,
        stockout_probability (%), expected_annual_holding_cost,
        expected_annual_stockout_cost, total_cost, service_level (%).

        Units and currency are rounded to integers, demand statistics
        and stockout probability to 2 decimals.

    Raises
    ------
    InputError
        If the series is empty or contains invalid observations.
    """

    demands = demand_values(series)

    avg_demand = mean(demands)
    demand_std = std_dev(demands)

    z_value = get_z_score(config.service_level)

    safety_stock = compute_safety_stock(
        z_value,
        avg_demand,
        demand_std,
        config.lead_time,
        config.lead_time_std_dev,
    )

    reorder_point = avg_demand * config.lead_time + safety_stock

    expected_annual_holding_cost = safety_stock * config.holding_cost_per_unit

    stockout_probability = 1 - config.service_level

    expected_annual_stockout_units = (
        avg_demand * DAYS_PER_YEAR * stockout_probability
    )
    expected_annual_stockout_cost = (
        expected_annual_stockout_units * config.stockout_cost_per_unit
    )

    total_cost = expected_annual_holding_cost + expected_annual_stockout_cost

    logger.debug(
        "Safety stock: z=%.4f avg=%.4f std=%.4f ss=%.4f",
        z_value, avg_demand, demand_std, safety_stock,
    )

    return {
        "safety_stock": int(round_half_up(safety_stock)),
        "reorder_point": int(round_half_up(reorder_point)),
        "average_demand": round_half_up(avg_demand, 2),
        "demand_std_dev": round_half_up(demand_std, 2),
        "stockout_probability": round_half_up(stockout_probability * 10000) / 100,
        "expected_annual_holding_cost": int(round_half_up(expected_annual_holding_cost)),
        "expected_annual_stockout_cost": int(round_half_up(expected_annual_stockout_cost)),
        "total_cost": int(round_half_up(total_cost)),
        "service_level": config.service_level * 100,
    }
