# src/inventory02/inventory_config.py

"""
Safety Stock Configuration
==========================

Immutable parameter set for one safety stock computation.

Units
-----
- service_level          : probability in (0, 1), e.g. 0.95
- lead_time              : days
- lead_time_std_dev      : days
- review_period          : days (carried through, unused by the formula)
- holding_cost_per_unit  : currency / unit / year
- stockout_cost_per_unit : currency / unit

Engine components read this value and never modify it; the cost
sweep derives variants with ``with_service_level``.
"""

from dataclasses import dataclass, replace
from typing import Any, Dict
import math

from utils.series_utils import InputError


@dataclass(frozen=True)
class SafetyStockConfig:
    service_level: float = 0.95
    lead_time: float = 7.0
    lead_time_std_dev: float = 1.5
    review_period: float = 7.0
    holding_cost_per_unit: float = 5.0
    stockout_cost_per_unit: float = 50.0

    def __post_init__(self):
        for name in (
            "service_level",
            "lead_time",
            "lead_time_std_dev",
            "review_period",
            "holding_cost_per_unit",
            "stockout_cost_per_unit",
        ):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InputError(f"{name} must be numeric.")
            if not math.isfinite(value):
                raise InputError(f"{name} must be finite.")

        if not (0 < self.service_level < 1):
            raise InputError("service_level must be between 0 and 1.")

        if self.lead_time <= 0:
            raise InputError("lead_time must be positive.")

        if self.review_period <= 0:
            raise InputError("review_period must be positive.")

        if self.lead_time_std_dev < 0:
            raise InputError("lead_time_std_dev cannot be negative.")

        if self.holding_cost_per_unit < 0 or self.stockout_cost_per_unit < 0:
            raise InputError("Cost parameters cannot be negative.")

    def with_service_level(self, service_level: float) -> "SafetyStockConfig":
        """Copy of this config with only the service level substituted."""
        return replace(self, service_level=service_level)

    def to_payload(self) -> Dict[str, float]:
        """camelCase form used by the remote collaborator."""
        return {
            "serviceLevel": self.service_level,
            "leadTime": self.lead_time,
            "leadTimeStdDev": self.lead_time_std_dev,
            "reviewPeriod": self.review_period,
            "holdingCostPerUnit": self.holding_cost_per_unit,
            "stockoutCostPerUnit": self.stockout_cost_per_unit,
        }

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "SafetyStockConfig":
        """
        Build from the ``inventory`` section of the project config.
        """
        if "inventory" not in config:
            raise InputError("Missing 'inventory' configuration.")

        inventory_cfg = config["inventory"]

        return cls(
            service_level=inventory_cfg["service_level"],
            lead_time=inventory_cfg["lead_time_days"],
            lead_time_std_dev=inventory_cfg["lead_time_std_days"],
            review_period=inventory_cfg["review_period_days"],
            holding_cost_per_unit=inventory_cfg["holding_cost_per_unit"],
            stockout_cost_per_unit=inventory_cfg["stockout_cost_per_unit"],
        )
