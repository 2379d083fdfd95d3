# src/ingestion01/csv_ingestion.py

"""
CSV ingestion module for demand uploads.

Responsibilities
----------------
- Read an uploaded CSV (path or file-like object)
- Detect the date and demand columns by name
- Parse US-style (M/D/YYYY) and ISO (YYYY-MM-DD) dates
- Skip rows with unparseable dates or invalid demand
- Collapse repeated dates into one daily total
- Enforce the minimum upload length (7 distinct days)

The result is a validated demand series and can be
passed straight to the engine.
"""

from datetime import datetime
from typing import Dict, List, Optional, Union, IO
import logging

import pandas as pd

from utils.schema_utils import (
    normalize_column_names,
    apply_rename_map,
    detect_duplicate_columns,
    detect_column,
)
from utils.series_utils import (
    DATE_COLUMN,
    DEMAND_COLUMN,
    MIN_UPLOAD_DAYS,
    InputError,
    validate_demand_series,
)


logger = logging.getLogger(__name__)


DATE_KEYWORDS = ("date",)
DEMAND_KEYWORDS = ("demand", "quantity", "sales")


def parse_date(value: str) -> Optional[pd.Timestamp]:
    """
    Parse a single date cell.

    - Values containing ``/`` are read as M/D/YYYY; a two-digit
      year is taken as 20YY.
    - Values containing ``-`` are read as ISO dates.
    - Anything else (or an invalid calendar date) returns None.
    """

    text = str(value).strip()

    try:
        if "/" in text:
            month, day, year = text.split("/")
            year = year.strip()
            if len(year) == 2:
                year = "20" + year
            return pd.Timestamp(datetime(int(year), int(month), int(day)))

        if "-" in text:
            return pd.Timestamp(text).normalize()

    except ValueError:
        return None

    return None


def ingest(
    source: Union[str, IO],
    rename_map: Optional[Dict[str, List[str]]] = None,
    delimiter: str = ",",
    encoding: str = "utf-8",
) -> pd.DataFrame:
    """
    Ingest an uploaded demand CSV.

    Parameters
    ----------
    source : str or file-like
        CSV path or open handle.
    rename_map : dict, optional
        Canonical name -> list of aliases, applied after normalization.
    delimiter : str, default ","
    encoding : str, default "utf-8"

    Returns
    -------
    pd.DataFrame
        Demand series (``date``, ``demand``) sorted ascending.

    Raises
    ------
    SchemaValidationError
        If no date or demand column can be identified.
    InputError
        If the file has no data rows or fewer than 7 distinct dates.
    """

    logger.info(f"[CSV INGESTION] Reading demand upload from {source}")

    try:
        raw = pd.read_csv(
            source,
            sep=delimiter,
            encoding=encoding,
            dtype=str,
            skipinitialspace=True,
        )
    except pd.errors.EmptyDataError as exc:
        raise InputError(
            "CSV must have at least a header row and one data row"
        ) from exc

    if raw.empty:
        raise InputError("CSV must have at least a header row and one data row")

    columns = normalize_column_names(raw.columns)
    columns = apply_rename_map(columns, rename_map or {})
    detect_duplicate_columns(columns)
    raw.columns = columns

    date_col = detect_column(columns, DATE_KEYWORDS, role="date")
    demand_col = detect_column(columns, DEMAND_KEYWORDS, role="demand")

    dates = raw[date_col].map(parse_date)
    demand = pd.to_numeric(raw[demand_col].str.strip(), errors="coerce")

    valid = dates.notna() & demand.notna() & (demand >= 0)
    skipped = int((~valid).sum())

    if skipped:
        logger.warning(
            f"[CSV INGESTION] Skipped {skipped} row(s) with invalid date or demand"
        )

    frame = pd.DataFrame(
        {
            DATE_COLUMN: pd.to_datetime(dates[valid].tolist()),
            DEMAND_COLUMN: demand[valid].astype(float).to_numpy(),
        }
    )

    daily = (
        frame.groupby(DATE_COLUMN, as_index=False)[DEMAND_COLUMN]
        .sum()
    )

    if len(daily) < MIN_UPLOAD_DAYS:
        raise InputError(f"Need at least {MIN_UPLOAD_DAYS} days of data")

    series = validate_demand_series(daily, min_days=MIN_UPLOAD_DAYS)

    logger.info(
        f"[CSV INGESTION] Loaded {len(series)} days "
        f"({series[DATE_COLUMN].iloc[0].date()} to {series[DATE_COLUMN].iloc[-1].date()})"
    )

    return series
