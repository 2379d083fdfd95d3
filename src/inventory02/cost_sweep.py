# src/inventory02/cost_sweep.py

"""
Service Level Cost Sweep
========================

Evaluates the annual cost trade-off across a grid of service levels
while holding every other parameter fixed.

Higher service level -> larger buffer -> higher holding cost,
but lower nominal stockout cost. The optimal point is the grid
point with minimum total cost; ties keep the first point in
grid order.
"""

from typing import Dict, Iterable, List, Optional, Any
import logging

import numpy as np
import pandas as pd

from inventory02.inventory_config import SafetyStockConfig
from inventory02.safety_stock import calculate_safety_stock
from utils.series_utils import InputError, SeriesLike, validate_demand_series


logger = logging.getLogger(__name__)


SWEEP_COLUMNS = ["service_level", "holding_cost", "stockout_cost", "total_cost"]


def build_service_level_grid(
    start: float = 0.90,
    stop: float = 0.995,
    step: float = 0.005,
) -> List[float]:
    """
    Inclusive service-level grid, rounded to 3 decimals.

    Default: 0.900, 0.905, ..., 0.995 (20 points).
    """

    if step <= 0:
        raise InputError("step must be positive.")

    if start > stop:
        raise InputError("start must not exceed stop.")

    count = int(np.floor((stop - start) / step + 1e-9)) + 1

    return [round(start + i * step, 3) for i in range(count)]


def sweep_service_levels(
    base_config: SafetyStockConfig,
    series: SeriesLike,
    service_level_grid: Optional[Iterable[float]] = None,
) -> Dict[str, Any]:
    """
    Compute cost components for each service level on the grid.

    Parameters
    ----------
    base_config : SafetyStockConfig
        Configuration whose service level is substituted per point.
    series : DataFrame or iterable of {date, demand}
    service_level_grid : iterable of float, optional
        Defaults to ``build_service_level_grid()``.

    Returns
    -------
    Dict[str, Any]
        points  : DataFrame with service_level, holding_cost,
                  stockout_cost, total_cost (grid order)
        optimal : dict for the minimum total cost row
    """

    grid = (
        build_service_level_grid()
        if service_level_grid is None
        else list(service_level_grid)
    )

    if not grid:
        raise InputError("service_level_grid cannot be empty.")

    demand = validate_demand_series(series)

    rows = []
    optimal = None

    for service_level in grid:
        result = calculate_safety_stock(
            base_config.with_service_level(service_level),
            demand,
        )

        row = {
            "service_level": service_level,
            "holding_cost": result["expected_annual_holding_cost"],
            "stockout_cost": result["expected_annual_stockout_cost"],
            "total_cost": result["total_cost"],
        }
        rows.append(row)

        # strict < keeps the first minimum
        if optimal is None or row["total_cost"] < optimal["total_cost"]:
            optimal = row

    logger.info(
        "Cost sweep over %d service levels; optimum at %.3f (total cost %d)",
        len(rows), optimal["service_level"], optimal["total_cost"],
    )

    return {
        "points": pd.DataFrame(rows, columns=SWEEP_COLUMNS),
        "optimal": dict(optimal),
    }


def cost_delta_vs_optimal(
    sweep_result: Dict[str, Any],
    base_config: SafetyStockConfig,
    series: SeriesLike,
    current_service_level: Optional[float] = None,
) -> int:
    """
    Signed annual cost difference between the current service level
    and the sweep optimum.

    Positive means the current setting costs more than the optimum.
    The current point is recomputed, so it need not lie on the grid.
    """

    level = (
        base_config.service_level
        if current_service_level is None
        else current_service_level
    )

    current = calculate_safety_stock(base_config.with_service_level(level), series)

    return current["total_cost"] - sweep_result["optimal"]["total_cost"]
