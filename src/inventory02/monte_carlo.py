# src/inventory02/monte_carlo.py

"""
Monte Carlo Stockout Simulation
===============================

Empirically estimates the lead-time demand distribution and the
probability that it exceeds the reorder point.

Per trial:
1. Draw one daily demand per lead-time day from
   Normal(d̄, σ_d) via the Box–Muller transform
2. Floor each daily draw at 0
3. Sum the days -> lead-time demand
4. Stockout if lead-time demand > safety_stock + d̄ × LT

The closed-form calculator reports the nominal (1 − service level)
stockout rate; this simulation surfaces the realised rate and the
right tail of lead-time demand.

Randomness
----------
Any object exposing ``random(size)`` like ``numpy.random.Generator``
can be injected. Pass ``numpy.random.default_rng(seed)`` for
reproducible runs; the default draws from system entropy.

Trials are generated in batches so 10^5 runs × 90 days stays
within a bounded memory footprint.
"""

from typing import Dict, Optional, Any
import math
import logging

import numpy as np

from inventory02.inventory_config import SafetyStockConfig
from inventory02.safety_stock import calculate_safety_stock
from utils.series_utils import InputError, SeriesLike, demand_values
from utils.statistics import mean, std_dev, percentile


logger = logging.getLogger(__name__)


DEFAULT_RUN_COUNT = 10000
DEFAULT_BATCH_SIZE = 10000

PERCENTILES = (50, 75, 90, 95, 99)


def lead_time_days(lead_time: float) -> int:
    """
    Whole days simulated for a (possibly fractional) lead time.

    A partial day is simulated as a full day: 7.2 -> 8.
    """
    return max(1, int(math.ceil(lead_time)))


def box_muller(rng: Any, size) -> np.ndarray:
    """
    Standard normal draws via the Box–Muller transform.

    ``u1`` is taken from (0, 1] so ``log(u1)`` stays finite.
    """
    u1 = 1.0 - rng.random(size)
    u2 = rng.random(size)
    return np.sqrt(-2.0 * np.log(u1)) * np.cos(2.0 * np.pi * u2)


def simulate_lead_time_demand(
    avg_demand: float,
    demand_std: float,
    days: int,
    run_count: int,
    rng: Any,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> np.ndarray:
    """
    Total lead-time demand for ``run_count`` independent trials
    (unsorted, in draw order).
    """

    totals = np.empty(run_count, dtype=float)

    for start in range(0, run_count, batch_size):
        stop = min(start + batch_size, run_count)

        z0 = box_muller(rng, (stop - start, days))
        daily = np.maximum(0.0, avg_demand + z0 * demand_std)

        totals[start:stop] = daily.sum(axis=1)

    return totals


def run_monte_carlo_simulation(
    config: SafetyStockConfig,
    series: SeriesLike,
    run_count: int = DEFAULT_RUN_COUNT,
    rng: Optional[Any] = None,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> Dict[str, Any]:
    """
    Run the stockout simulation.

    Parameters
    ----------
    config : SafetyStockConfig
    series : DataFrame or iterable of {date, demand}
    run_count : int, default 10000
        Number of independent lead-time trials.
    rng : numpy Generator, optional
        Random source; a fresh unseeded generator when omitted.
    batch_size : int, default 10000
        Trials drawn per vectorised batch.

    Returns
    -------
    Dict[str, Any]
        simulations (sorted ndarray), stockout_count, stockout_probability (%),
        mean_demand, percentiles {p50, p75, p90, p95, p99},
        run_count, lead_time_days.

    Raises
    ------
    InputError
        Invalid series, run_count or batch_size.
    """

    if isinstance(run_count, bool) or not isinstance(run_count, (int, np.integer)) or run_count <= 0:
        raise InputError("run_count must be a positive integer.")

    if isinstance(batch_size, bool) or not isinstance(batch_size, (int, np.integer)) or batch_size <= 0:
        raise InputError("batch_size must be a positive integer.")

    demands = demand_values(series)

    avg_demand = mean(demands)
    demand_std = std_dev(demands)

    available_inventory = calculate_safety_stock(config, series)["safety_stock"]
    threshold = available_inventory + avg_demand * config.lead_time

    rng = rng if rng is not None else np.random.default_rng()
    days = lead_time_days(config.lead_time)

    logger.info(
        "Running %d Monte Carlo trials over %d lead-time days", run_count, days
    )

    totals = simulate_lead_time_demand(
        avg_demand, demand_std, days, int(run_count), rng, int(batch_size)
    )

    stockout_count = int(np.count_nonzero(totals > threshold))
    simulations = np.sort(totals)

    return {
        "simulations": simulations,
        "stockout_count": stockout_count,
        "stockout_probability": stockout_count / run_count * 100,
        "mean_demand": mean(totals),
        "percentiles": {
            f"p{p}": percentile(simulations, p) for p in PERCENTILES
        },
        "run_count": int(run_count),
        "lead_time_days": days,
    }
