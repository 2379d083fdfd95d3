# src/utils/logger.py

"""
Centralized Logging Configuration
==================================

Provides:
- Console logging
- Optional file logging
- Config-driven log level
- Singleton project logger ("SSE")

Engine packages (ingestion01 .. forecasting04, pipelines and utils)
log through ``logging.getLogger(__name__)``. They never add handlers
themselves; ``get_logger`` attaches the project handlers to their
package loggers so fallback and clamping warnings reach the same sinks
as pipeline messages.
"""

import os
import logging
from typing import Dict, List


LOGGER_NAME = "SSE"

ENGINE_PACKAGES = (
    "ingestion01",
    "inventory02",
    "remote03",
    "forecasting04",
    "pipelines",
    "utils",
)

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

VALID_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def get_logger(config: Dict) -> logging.Logger:
    """
    Create and configure the project-wide logger.

    Safe to call repeatedly; handlers are attached once.
    """

    if not isinstance(config, dict):
        raise ValueError("config must be a dictionary.")

    if "logging" not in config:
        raise ValueError("Missing 'logging' section in configuration.")

    if "paths" not in config or "logs" not in config["paths"]:
        raise ValueError("Missing 'paths.logs' configuration.")

    logger = logging.getLogger(LOGGER_NAME)

    if logger.handlers:
        return logger

    logging_cfg = config["logging"]
    level = _resolve_level(logging_cfg)
    handlers = _build_handlers(logging_cfg, config["paths"]["logs"])

    for name in (LOGGER_NAME,) + ENGINE_PACKAGES:
        target = logging.getLogger(name)
        target.setLevel(level)
        target.propagate = False
        for handler in handlers:
            target.addHandler(handler)

    return logger


def _resolve_level(logging_cfg: Dict) -> int:

    if "level" not in logging_cfg:
        raise ValueError("Missing 'logging.level' in configuration.")

    log_level_str = str(logging_cfg["level"]).upper()

    if log_level_str not in VALID_LEVELS:
        raise ValueError(
            f"Invalid log level '{log_level_str}'. "
            f"Valid options: {list(VALID_LEVELS.keys())}"
        )

    return VALID_LEVELS[log_level_str]


def _build_handlers(logging_cfg: Dict, log_dir: str) -> List[logging.Handler]:

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    handlers: List[logging.Handler] = [console_handler]

    if logging_cfg.get("log_to_file", False):

        filename = logging_cfg.get("filename")

        if not isinstance(filename, str) or not filename.strip():
            raise ValueError("logging.filename must be a non-empty string.")

        os.makedirs(log_dir, exist_ok=True)

        file_handler = logging.FileHandler(
            os.path.join(log_dir, filename),
            encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    return handlers
