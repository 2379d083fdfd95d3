# src/utils/series_utils.py

"""
Demand Series Utilities
=======================

A demand series is a pandas DataFrame with two columns:

- ``date``   : datetime64, normalised to day resolution
- ``demand`` : non-negative float

Rows are ordered by date ascending and dates are unique.

The engine never mutates a caller's series; every helper here
returns a fresh frame. A new upload replaces the whole series.
"""

from typing import Any, Iterable, Mapping, Union
import logging

import numpy as np
import pandas as pd


logger = logging.getLogger(__name__)


DATE_COLUMN = "date"
DEMAND_COLUMN = "demand"

MIN_UPLOAD_DAYS = 7

SeriesLike = Union[pd.DataFrame, Iterable[Mapping[str, Any]]]


class InputError(ValueError):
    """
    Raised for caller contract violations: empty or too-short
    demand series, malformed observations, non-finite configuration.

    This is the only engine error that reaches the caller.
    """
    pass


def as_demand_frame(series: SeriesLike) -> pd.DataFrame:
    """
    Coerce a DataFrame or an iterable of ``{date, demand}`` mappings
    into a two-column demand frame.

    No ordering or uniqueness checks are applied here; see
    ``validate_demand_series``.

    Raises
    ------
    InputError
        If columns are missing or values cannot be parsed.
    """

    if isinstance(series, pd.DataFrame):
        frame = series
    else:
        try:
            frame = pd.DataFrame(list(series))
        except TypeError as exc:
            raise InputError(
                "Demand series must be a DataFrame or an iterable of "
                "{date, demand} records."
            ) from exc

    missing = {DATE_COLUMN, DEMAND_COLUMN} - set(frame.columns)
    if missing and not frame.empty:
        raise InputError(
            f"Demand series is missing columns: {sorted(missing)}"
        )

    if frame.empty:
        return pd.DataFrame(
            {
                DATE_COLUMN: pd.Series([], dtype="datetime64[ns]"),
                DEMAND_COLUMN: pd.Series([], dtype=float),
            }
        )

    try:
        dates = pd.to_datetime(frame[DATE_COLUMN], errors="raise").dt.normalize()
        demand = pd.to_numeric(frame[DEMAND_COLUMN], errors="raise").astype(float)
    except (ValueError, TypeError) as exc:
        raise InputError(f"Demand series contains unparseable values: {exc}") from exc

    return pd.DataFrame(
        {DATE_COLUMN: dates.to_numpy(), DEMAND_COLUMN: demand.to_numpy()}
    )


def validate_demand_series(series: SeriesLike, min_days: int = 1) -> pd.DataFrame:
    """
    Validate a demand series and return a clean copy.

    Parameters
    ----------
    series : DataFrame or iterable of mappings
        Demand observations.
    min_days : int, default 1
        Minimum number of distinct dates. Statistics need 1;
        user uploads need ``MIN_UPLOAD_DAYS``.

    Returns
    -------
    pd.DataFrame
        Copy sorted by date with a fresh RangeIndex.

    Raises
    ------
    InputError
        Empty, too short, duplicate dates, non-finite or
        negative demand.
    """

    frame = as_demand_frame(series)

    if frame.empty:
        raise InputError("Demand series is empty.")

    demand = frame[DEMAND_COLUMN].to_numpy()

    if not np.all(np.isfinite(demand)):
        raise InputError("Demand series contains non-finite values.")

    if np.any(demand < 0):
        raise InputError("Demand series contains negative values.")

    if frame[DATE_COLUMN].duplicated().any():
        raise InputError("Demand series contains duplicate dates.")

    if len(frame) < min_days:
        raise InputError(
            f"Need at least {min_days} days of data, got {len(frame)}."
        )

    return frame.sort_values(DATE_COLUMN).reset_index(drop=True)


def demand_values(series: SeriesLike) -> np.ndarray:
    """Validated demand column as a float array."""
    return validate_demand_series(series)[DEMAND_COLUMN].to_numpy(dtype=float)


def series_to_records(series: pd.DataFrame) -> list:
    """
    Render a demand frame as JSON-ready ``[{date, demand}]`` records
    with ISO dates.
    """
    return [
        {"date": ts.strftime("%Y-%m-%d"), "demand": float(value)}
        for ts, value in zip(series[DATE_COLUMN], series[DEMAND_COLUMN])
    ]
