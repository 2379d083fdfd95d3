"""
Schema normalization and column detection utilities.

Responsibilities:
- Enforce column naming standards
- Apply configured alias mappings
- Detect schema integrity violations
- Locate the date and demand columns of an uploaded file

Execution order (enforced by csv_ingestion, not this module):
    1. normalize_column_names
    2. apply_rename_map
    3. detect_duplicate_columns
    4. detect_column (once per role)
"""

from typing import Iterable, List, Dict, Sequence
import logging
import re


logger = logging.getLogger(__name__)


class SchemaValidationError(Exception):
    """
    Raised when an uploaded file does not expose the columns
    needed to build a demand series.
    """
    pass


# ---------------------------------------------------------------------
# Column Normalization
# ---------------------------------------------------------------------
def normalize_column_names(columns: Iterable[str]) -> List[str]:
    """
    Normalize column names to snake_case.

    Rules applied:
    - Lowercase all characters
    - Replace spaces and hyphens with underscores
    - Remove non-alphanumeric characters
    - Collapse multiple underscores

    Parameters
    ----------
    columns : Iterable[str]
        Original column names

    Returns
    -------
    List[str]
        Normalized column names
    """

    normalized = []

    for col in columns:
        if not isinstance(col, str):
            raise SchemaValidationError(
                f"Column name must be a string. Found type: {type(col).__name__}"
            )

        col_clean = col.strip().lower()
        col_clean = re.sub(r"[\s\-]+", "_", col_clean)
        col_clean = re.sub(r"[^a-z0-9_]", "", col_clean)
        col_clean = re.sub(r"_+", "_", col_clean)
        col_clean = col_clean.strip("_")

        normalized.append(col_clean)

    logger.debug("Column names normalized.")

    return normalized


# ---------------------------------------------------------------------
# Rename Mapping
# ---------------------------------------------------------------------
def apply_rename_map(columns: Iterable[str], rename_map: Dict[str, List[str]]) -> List[str]:
    """
    Map configured aliases onto canonical names.

    Example: ``{"demand": ["units_sold", "qty"]}`` renames a
    ``units_sold`` column to ``demand``.
    """

    reverse_map = {}

    for canonical, aliases in rename_map.items():
        if not isinstance(aliases, (list, tuple)):
            raise SchemaValidationError(
                f"Rename map for '{canonical}' must be a list of aliases."
            )
        for alias in aliases:
            reverse_map[alias] = canonical

    return [reverse_map.get(col, col) for col in columns]


# ---------------------------------------------------------------------
# Duplicate Detection
# ---------------------------------------------------------------------
def detect_duplicate_columns(columns: Iterable[str]) -> None:
    """
    Raise if two columns share a name after normalization and renaming.
    """

    seen = set()
    duplicates = set()

    for col in columns:
        if col in seen:
            duplicates.add(col)
        else:
            seen.add(col)

    if duplicates:
        raise SchemaValidationError(
            f"Duplicate columns detected after schema processing: {sorted(duplicates)}"
        )


# ---------------------------------------------------------------------
# Column Detection
# ---------------------------------------------------------------------
def detect_column(
    columns: Sequence[str],
    keywords: Sequence[str],
    role: str,
) -> str:
    """
    Return the first column whose name contains any of ``keywords``.

    Parameters
    ----------
    columns : Sequence[str]
        Normalized column names, in file order
    keywords : Sequence[str]
        Substrings identifying the column
    role : str
        Logical role (used in the error message)

    Raises
    ------
    SchemaValidationError
        If no column matches
    """

    for col in columns:
        if any(keyword in col for keyword in keywords):
            logger.debug("Detected %s column: %s", role, col)
            return col

    raise SchemaValidationError(
        f"CSV must have a {role} column (looked for: {list(keywords)}). "
        f"Found: {list(columns)}"
    )
