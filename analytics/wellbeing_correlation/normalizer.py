"""
Key normalization for the well-being correlation pipeline.

Derives the composite join key "<code> <year>" for each row of an input
table and restricts the table to the configured year range.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import pandas as pd

from .config import get_config
from .schemas import CODE_FIELD, YEAR_FIELD
from .table import Table

logger = logging.getLogger(__name__)

KEY_COLUMN = "key"

YEAR_PATTERN = r"-?[0-9]+"


@dataclass
class KeyedTable:
    """Rows of an input table annotated with, and sorted by, the composite key."""

    source: Table
    frame: pd.DataFrame

    @property
    def path(self) -> str:
        return self.source.path

    def column(self, field: str) -> pd.Series:
        return self.frame[self.source.columns[field]]

    def __len__(self) -> int:
        return len(self.frame)


def normalize_keys(
    table: Table,
    year_min: Optional[int] = None,
    year_max: Optional[int] = None,
) -> KeyedTable:
    """
    Annotate a table with its composite key and keep rows inside the year range.

    Rows with an empty entity code, a non-integer year, or a year outside
    [year_min, year_max] are dropped. The result is sorted by key (stable,
    lexicographic) and has the key prepended to the original columns.

    Args:
        table: Loaded input table
        year_min: First year kept (defaults to Config.year_min)
        year_max: Last year kept (defaults to Config.year_max)

    Returns:
        KeyedTable: Key-annotated, key-sorted rows
    """
    config = get_config()
    year_min = config.year_min if year_min is None else year_min
    year_max = config.year_max if year_max is None else year_max

    frame = table.frame
    codes = table.column(CODE_FIELD).str.strip()
    years_text = table.column(YEAR_FIELD).str.strip()

    is_year = years_text.str.fullmatch(YEAR_PATTERN).fillna(False).astype(bool)
    years = pd.to_numeric(years_text.where(is_year), errors="coerce")

    keep = (codes != "") & is_year & years.between(year_min, year_max)

    normalized = frame[keep].copy()
    keys = codes[keep] + " " + years[keep].astype(int).astype(str)
    normalized.insert(0, KEY_COLUMN, keys)
    normalized = normalized.sort_values(KEY_COLUMN, kind="mergesort").reset_index(drop=True)

    dropped = len(frame) - len(normalized)
    logger.debug(
        f"{table.path}: kept {len(normalized)} rows, dropped {dropped} "
        f"outside {year_min}-{year_max} or without a code"
    )
    return KeyedTable(source=table, frame=normalized)
