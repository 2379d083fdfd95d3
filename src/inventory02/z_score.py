# src/inventory02/z_score.py

"""
Service Level -> Z-Score Lookup
===============================

Piecewise-linear approximation of the inverse standard normal CDF,
anchored at the service levels exposed on the dashboard slider.

Supported domain: [0.90, 0.995]
- Exact anchors are returned unchanged.
- Between anchors the z-score is interpolated linearly on the
  service-level axis.
- Outside the domain the nearest anchor is returned (no
  extrapolation) and a DomainApproximationWarning is emitted.

Accuracy outside the supported domain is not meaningful; callers
needing e.g. 0.80 or 0.999 must not rely on this table.
"""

from typing import Tuple
import logging
import warnings

from utils.series_utils import InputError


logger = logging.getLogger(__name__)


Z_SCORE_TABLE: Tuple[Tuple[float, float], ...] = (
    (0.90, 1.282),
    (0.95, 1.645),
    (0.96, 1.751),
    (0.97, 1.881),
    (0.98, 2.054),
    (0.99, 2.326),
    (0.995, 2.576),
)

MIN_SERVICE_LEVEL = Z_SCORE_TABLE[0][0]
MAX_SERVICE_LEVEL = Z_SCORE_TABLE[-1][0]


class DomainApproximationWarning(UserWarning):
    """Service level outside the table's supported range; value clamped."""
    pass


def get_z_score(service_level: float) -> float:
    """
    Z-score for a target service level.

    Parameters
    ----------
    service_level : float
        Probability of not stocking out, e.g. 0.95.

    Returns
    -------
    float
        Standard-normal quantile approximation.

    Examples
    --------
    >>> get_z_score(0.95)
    1.645
    >>> round(get_z_score(0.955), 3)
    1.698
    """

    for level, z in Z_SCORE_TABLE:
        if service_level == level:
            return z

    if service_level < MIN_SERVICE_LEVEL or service_level > MAX_SERVICE_LEVEL:
        clamped_level, clamped_z = (
            Z_SCORE_TABLE[0] if service_level < MIN_SERVICE_LEVEL
            else Z_SCORE_TABLE[-1]
        )
        message = (
            f"Service level {service_level} outside supported range "
            f"[{MIN_SERVICE_LEVEL}, {MAX_SERVICE_LEVEL}]; "
            f"clamped to {clamped_level} (z={clamped_z})."
        )
        logger.warning(message)
        warnings.warn(message, DomainApproximationWarning, stacklevel=2)
        return clamped_z

    for (low_level, low_z), (high_level, high_z) in zip(
        Z_SCORE_TABLE, Z_SCORE_TABLE[1:]
    ):
        if low_level <= service_level <= high_level:
            t = (service_level - low_level) / (high_level - low_level)
            return low_z * (1 - t) + high_z * t

    # NaN fails every comparison above
    raise InputError(f"Invalid service level: {service_level}")
