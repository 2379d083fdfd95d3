# src/remote03/fallback.py

"""
Remote-first resolvers with local fallback.

Each resolver is an explicit two-branch decision:

    client given and remote answer usable -> remote result
    otherwise                             -> local computation

Collaborator failures never reach the caller; InputError from the
local path does.
"""

from typing import Any, Dict, Optional
import logging

from inventory02.inventory_config import SafetyStockConfig
from inventory02.monte_carlo import DEFAULT_RUN_COUNT, run_monte_carlo_simulation
from inventory02.safety_stock import calculate_safety_stock
from remote03.remote_client import RemoteEngineClient
from utils.series_utils import SeriesLike


logger = logging.getLogger(__name__)


def resolve_safety_stock(
    config: SafetyStockConfig,
    series: SeriesLike,
    client: Optional[RemoteEngineClient] = None,
) -> Dict[str, Any]:
    """Safety stock from the collaborator, else the local calculator."""

    remote = client.safety_stock(config, series) if client is not None else None

    if remote is not None:
        return remote

    if client is not None:
        logger.warning("Remote safety stock unavailable, using local calculation")

    return calculate_safety_stock(config, series)


def resolve_simulation(
    config: SafetyStockConfig,
    series: SeriesLike,
    run_count: int = DEFAULT_RUN_COUNT,
    client: Optional[RemoteEngineClient] = None,
    rng: Optional[Any] = None,
    batch_size: Optional[int] = None,
) -> Dict[str, Any]:
    """Simulation from the collaborator, else the local Monte Carlo run."""

    remote = client.simulate(config, series, run_count) if client is not None else None

    if remote is not None:
        return remote

    if client is not None:
        logger.warning("Remote simulation unavailable, using local simulation")

    kwargs = {} if batch_size is None else {"batch_size": batch_size}

    return run_monte_carlo_simulation(config, series, run_count, rng=rng, **kwargs)
