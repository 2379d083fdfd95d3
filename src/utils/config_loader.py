# src/utils/config_loader.py

"""
Centralized configuration loader for the safety stock engine.

Responsibilities:
- Load YAML configuration
- Validate mandatory sections
- Validate numeric domains for inventory, simulation,
  cost sweep, forecasting and remote collaborator settings
- Provide a single, safe config object

Design Principles:
------------------
- Fail-fast validation
- No silent defaults for mandatory keys
- Unknown top-level sections are rejected
"""

from pathlib import Path
from typing import Dict, Any
import math
import logging

import yaml


logger = logging.getLogger(__name__)


REQUIRED_SECTIONS = {
    "paths",
    "logging",
    "seeds",
    "ingestion",
    "inventory",
    "simulation",
    "cost_sweep",
    "forecasting",
    "remote",
    "execution",
}


class ConfigError(Exception):
    """Raised when configuration validation fails."""
    pass


def load_config(config_path: str) -> Dict[str, Any]:
    path = Path(config_path)

    if not path.exists():
        raise ConfigError(
            f"Configuration file not found at path: {path.resolve()}"
        )

    if not path.is_file():
        raise ConfigError(
            f"Configuration path is not a file: {path.resolve()}"
        )

    if path.suffix not in {".yaml", ".yml"}:
        raise ConfigError(
            f"Invalid config file format: {path.name}. Expected a YAML file."
        )

    try:
        with path.open("r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except OSError as exc:
        raise ConfigError(
            f"Failed to read configuration file: {path.resolve()} ({exc})"
        ) from exc
    except yaml.YAMLError as exc:
        raise ConfigError(
            f"Failed to parse YAML configuration: {exc}"
        ) from exc

    if config is None:
        raise ConfigError(
            "Configuration file is empty or contains no valid YAML content."
        )

    if not isinstance(config, dict):
        raise ConfigError(
            "Top-level configuration must be a dictionary."
        )

    validate_config(config)

    logger.info("Configuration loaded and validated successfully.")

    return dict(config)


def validate_config(config: Dict[str, Any]) -> None:
    """
    Validate an already-parsed configuration dictionary.

    Raises
    ------
    ConfigError
        On the first violated rule.
    """

    missing = REQUIRED_SECTIONS - config.keys()
    if missing:
        raise ConfigError(
            f"Missing required config sections: {sorted(missing)}"
        )

    extra_sections = set(config.keys()) - REQUIRED_SECTIONS
    if extra_sections:
        raise ConfigError(
            f"Unknown top-level config sections detected: {sorted(extra_sections)}"
        )

    for section in REQUIRED_SECTIONS:
        if not isinstance(config.get(section), dict):
            raise ConfigError(
                f"Config section '{section}' must be a dictionary."
            )

    _validate_paths(config)
    _validate_logging(config)
    _validate_seeds(config)
    _validate_inventory(config)
    _validate_simulation(config)
    _validate_cost_sweep(config)
    _validate_forecasting(config)
    _validate_remote(config)
    _validate_execution(config)


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def _validate_paths(config: Dict[str, Any]) -> None:
    paths_cfg = config["paths"]

    for key in ("logs", "output"):
        if not isinstance(paths_cfg.get(key), str):
            raise ConfigError(f"paths.{key} must be a string.")


def _validate_logging(config: Dict[str, Any]) -> None:
    logging_cfg = config["logging"]

    required = {"level", "log_to_file", "filename"}
    missing = required - logging_cfg.keys()
    if missing:
        raise ConfigError(
            f"Missing required logging config keys: {sorted(missing)}"
        )

    if not isinstance(logging_cfg["log_to_file"], bool):
        raise ConfigError("logging.log_to_file must be boolean.")


def _validate_seeds(config: Dict[str, Any]) -> None:
    seeds_cfg = config["seeds"]

    if "global_seed" not in seeds_cfg:
        raise ConfigError("Missing 'seeds.global_seed' configuration.")

    seed = seeds_cfg["global_seed"]
    if seed is not None and (not isinstance(seed, int) or isinstance(seed, bool)):
        raise ConfigError("seeds.global_seed must be an integer or null.")


def _validate_inventory(config: Dict[str, Any]) -> None:
    inventory_cfg = config["inventory"]

    required = {
        "service_level",
        "lead_time_days",
        "lead_time_std_days",
        "review_period_days",
        "holding_cost_per_unit",
        "stockout_cost_per_unit",
    }
    missing = required - inventory_cfg.keys()
    if missing:
        raise ConfigError(
            f"Missing inventory config keys: {sorted(missing)}"
        )

    for key in required:
        if not _is_number(inventory_cfg[key]):
            raise ConfigError(f"inventory.{key} must be a finite number.")

    if not (0 < inventory_cfg["service_level"] < 1):
        raise ConfigError("inventory.service_level must be between 0 and 1.")

    for key in ("lead_time_days", "review_period_days"):
        if inventory_cfg[key] <= 0:
            raise ConfigError(f"inventory.{key} must be positive.")

    for key in ("lead_time_std_days", "holding_cost_per_unit", "stockout_cost_per_unit"):
        if inventory_cfg[key] < 0:
            raise ConfigError(f"inventory.{key} cannot be negative.")


def _validate_simulation(config: Dict[str, Any]) -> None:
    simulation_cfg = config["simulation"]

    run_count = simulation_cfg.get("run_count")
    if not isinstance(run_count, int) or isinstance(run_count, bool) or run_count <= 0:
        raise ConfigError("simulation.run_count must be a positive integer.")

    batch_size = simulation_cfg.get("batch_size", 10000)
    if not isinstance(batch_size, int) or isinstance(batch_size, bool) or batch_size <= 0:
        raise ConfigError("simulation.batch_size must be a positive integer.")


def _validate_cost_sweep(config: Dict[str, Any]) -> None:
    sweep_cfg = config["cost_sweep"]

    required = {"start", "stop", "step"}
    missing = required - sweep_cfg.keys()
    if missing:
        raise ConfigError(
            f"Missing cost_sweep config keys: {sorted(missing)}"
        )

    for key in required:
        if not _is_number(sweep_cfg[key]):
            raise ConfigError(f"cost_sweep.{key} must be a finite number.")

    if not (0 < sweep_cfg["start"] <= sweep_cfg["stop"] < 1):
        raise ConfigError(
            "cost_sweep range must satisfy 0 < start <= stop < 1."
        )

    if sweep_cfg["step"] <= 0:
        raise ConfigError("cost_sweep.step must be positive.")


def _validate_forecasting(config: Dict[str, Any]) -> None:
    forecasting_cfg = config["forecasting"]

    horizon = forecasting_cfg.get("horizon_days")
    if not isinstance(horizon, int) or isinstance(horizon, bool) or horizon <= 0:
        raise ConfigError("forecasting.horizon_days must be a positive integer.")

    alpha = forecasting_cfg.get("alpha")
    if not _is_number(alpha) or not (0 < alpha <= 1):
        raise ConfigError("forecasting.alpha must be in (0, 1].")


def _validate_remote(config: Dict[str, Any]) -> None:
    remote_cfg = config["remote"]

    if not isinstance(remote_cfg.get("enabled"), bool):
        raise ConfigError("remote.enabled must be boolean.")

    if not remote_cfg["enabled"]:
        return

    if not isinstance(remote_cfg.get("base_url"), str) or not remote_cfg["base_url"]:
        raise ConfigError("remote.base_url must be a non-empty string.")

    timeout = remote_cfg.get("timeout_seconds")
    if not _is_number(timeout) or timeout <= 0:
        raise ConfigError("remote.timeout_seconds must be a positive number.")


def _validate_execution(config: Dict[str, Any]) -> None:
    execution_cfg = config["execution"]

    if "save_outputs" in execution_cfg and not isinstance(
        execution_cfg["save_outputs"], bool
    ):
        raise ConfigError(
            "execution.save_outputs must be boolean."
        )
