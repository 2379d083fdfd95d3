# src/pipelines/run_engine.py

"""
Safety Stock Engine Pipeline
============================

Turns a demand history and an inventory configuration into:

1. Safety stock, reorder point and annual cost projection
2. Monte Carlo stockout estimate and lead-time demand percentiles
3. Short-horizon demand forecast with confidence band
4. Service-level cost sweep with the cost-minimising point

Steps 1-3 are independent reads of the same inputs and run
concurrently; the sweep runs after them.

Design Principles:
------------------
- Fully config-driven
- Strict logging (no print statements)
- Remote collaborator optional; local fallback always available
- Outputs written only when execution.save_outputs is true
"""

import os
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Optional

import numpy as np
import pandas as pd
from tabulate import tabulate

from utils.config_loader import load_config
from utils.logger import get_logger
from utils.helpers import ensure_directory, generate_timestamp
from utils.series_utils import SeriesLike, validate_demand_series

from ingestion01 import csv_ingestion
from ingestion01.demo_data import generate_demo_data
from inventory02.inventory_config import SafetyStockConfig
from inventory02.monte_carlo import DEFAULT_RUN_COUNT
from inventory02.cost_sweep import (
    build_service_level_grid,
    cost_delta_vs_optimal,
    sweep_service_levels,
)
from remote03.fallback import resolve_safety_stock, resolve_simulation
from remote03.remote_client import RemoteEngineClient
from forecasting04.forecast_engine import ForecastEngine


# ==========================================================
# Concurrent Dispatch
# ==========================================================

def compute_all(
    inventory_config: SafetyStockConfig,
    series: SeriesLike,
    forecast_engine: ForecastEngine,
    client: Optional[RemoteEngineClient] = None,
    run_count: int = DEFAULT_RUN_COUNT,
    rng: Optional[Any] = None,
    horizon_days: int = 14,
    batch_size: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Run safety stock, simulation and forecast concurrently and
    gather all three.

    The series is validated once up front and the same frozen
    copy is handed to every task.
    """

    demand = validate_demand_series(series)

    with ThreadPoolExecutor(max_workers=3, thread_name_prefix="sse") as pool:
        safety_future = pool.submit(
            resolve_safety_stock, inventory_config, demand, client
        )
        simulation_future = pool.submit(
            resolve_simulation,
            inventory_config,
            demand,
            run_count,
            client,
            rng,
            batch_size,
        )
        forecast_future = pool.submit(
            forecast_engine.forecast, demand, horizon_days
        )

        return {
            "safety_stock": safety_future.result(),
            "simulation": simulation_future.result(),
            "forecast": forecast_future.result(),
        }


# ==========================================================
# Series Loading
# ==========================================================

def load_demand_series(config: Dict[str, Any], rng: Optional[Any] = None) -> pd.DataFrame:
    """
    Uploaded CSV when ``ingestion.demand_csv`` is set, otherwise
    a generated demo series.
    """

    ingestion_cfg = config["ingestion"]
    csv_path = ingestion_cfg.get("demand_csv")

    if csv_path:
        return csv_ingestion.ingest(
            csv_path,
            rename_map=ingestion_cfg.get("rename_map"),
            delimiter=ingestion_cfg.get("delimiter", ","),
            encoding=ingestion_cfg.get("encoding", "utf-8"),
        )

    return generate_demo_data(
        days=ingestion_cfg.get("demo_days", 90),
        rng=rng,
    )


# ==========================================================
# Summary
# ==========================================================

def summarize(results: Dict[str, Any], sweep: Dict[str, Any], cost_delta: int) -> str:
    """Grid table of headline figures for the log."""

    safety = results["safety_stock"]
    simulation = results["simulation"]
    forecast = results["forecast"]

    rows = [
        ("Service level (%)", safety["service_level"]),
        ("Average daily demand", safety["average_demand"]),
        ("Demand std dev", safety["demand_std_dev"]),
        ("Safety stock", safety["safety_stock"]),
        ("Reorder point", safety["reorder_point"]),
        ("Annual holding cost", safety["expected_annual_holding_cost"]),
        ("Annual stockout cost", safety["expected_annual_stockout_cost"]),
        ("Total annual cost", safety["total_cost"]),
        ("Nominal stockout prob (%)", safety["stockout_probability"]),
        ("Simulated stockout prob (%)", round(simulation["stockout_probability"], 2)),
        ("Simulated P95 lead-time demand", round(simulation["percentiles"]["p95"], 1)),
        ("Forecast source", forecast["source"]),
        ("Optimal service level", sweep["optimal"]["service_level"]),
        ("Optimal total cost", sweep["optimal"]["total_cost"]),
        ("Cost vs optimal", cost_delta),
    ]

    return tabulate(rows, headers=["Metric", "Value"], tablefmt="grid")


# ==========================================================
# Output Persistence
# ==========================================================

def save_outputs(
    output_dir: str,
    results: Dict[str, Any],
    sweep: Dict[str, Any],
) -> Dict[str, str]:
    """
    Write result tables as CSV under a timestamped folder.

    Returns
    -------
    Dict[str, str]
        Logical output name -> file path.
    """

    run_dir = os.path.join(output_dir, generate_timestamp())
    ensure_directory(run_dir)

    forecast = results["forecast"]
    forecast_df = forecast["forecast"].copy()
    forecast_df["lower"] = forecast["confidence"]["lower"]
    forecast_df["upper"] = forecast["confidence"]["upper"]

    simulation = results["simulation"]
    simulation_df = pd.DataFrame(
        [{
            "run_count": len(simulation["simulations"]),
            "stockout_count": simulation["stockout_count"],
            "stockout_probability": simulation["stockout_probability"],
            "mean_demand": simulation["mean_demand"],
            **simulation["percentiles"],
        }]
    )

    tables = {
        "safety_stock": pd.DataFrame([results["safety_stock"]]),
        "simulation_summary": simulation_df,
        "forecast": forecast_df,
        "cost_sweep": sweep["points"],
    }

    paths = {}
    for name, table in tables.items():
        path = os.path.join(run_dir, f"{name}.csv")
        table.to_csv(path, index=False)
        paths[name] = path

    return paths


# ==========================================================
# Main Engine Pipeline
# ==========================================================

def run_engine(config_path: str = "config/config.yaml") -> Dict[str, Any]:
    """
    Execute the full engine workflow and return all results.
    """

    config = load_config(config_path)
    logger = get_logger(config)

    logger.info("========== SAFETY STOCK ENGINE STARTED ==========")

    seed = config["seeds"]["global_seed"]
    rng = np.random.default_rng(seed)

    # ------------------------------------------------------
    # 1. Inputs
    # ------------------------------------------------------

    series = load_demand_series(config, rng=rng)
    logger.info(f"Loaded demand series with {len(series)} days.")

    inventory_config = SafetyStockConfig.from_config(config)

    # ------------------------------------------------------
    # 2. Remote Collaborator (optional)
    # ------------------------------------------------------

    client = RemoteEngineClient.from_config(config)
    remote_available = False

    if client is not None:
        remote_available = client.check_health()
        logger.info(f"Remote collaborator available: {remote_available}")

    forecast_engine = ForecastEngine.from_config(config, client=client)

    # ------------------------------------------------------
    # 3. Independent Computations
    # ------------------------------------------------------

    simulation_cfg = config["simulation"]

    results = compute_all(
        inventory_config,
        series,
        forecast_engine,
        client=client,
        run_count=simulation_cfg["run_count"],
        rng=rng,
        horizon_days=config["forecasting"]["horizon_days"],
        batch_size=simulation_cfg.get("batch_size"),
    )

    # ------------------------------------------------------
    # 4. Cost Sweep
    # ------------------------------------------------------

    sweep_cfg = config["cost_sweep"]
    grid = build_service_level_grid(
        sweep_cfg["start"], sweep_cfg["stop"], sweep_cfg["step"]
    )

    sweep = sweep_service_levels(inventory_config, series, grid)
    cost_delta = cost_delta_vs_optimal(sweep, inventory_config, series)

    logger.info("\n" + summarize(results, sweep, cost_delta))

    # ------------------------------------------------------
    # 5. Outputs
    # ------------------------------------------------------

    output_paths = {}

    if config["execution"].get("save_outputs", False):
        output_paths = save_outputs(config["paths"]["output"], results, sweep)
        logger.info(f"Outputs saved: {output_paths}")

    logger.info("========== SAFETY STOCK ENGINE COMPLETED ==========")

    return {
        **results,
        "cost_sweep": sweep,
        "cost_delta_vs_optimal": cost_delta,
        "remote_available": remote_available,
        "series": series,
        "output_paths": output_paths,
    }
