"""
In-memory tables for the well-being correlation pipeline.

Every cell is kept as the string read from the file so that validity
checks see exactly what the source contained; empty cells stay "".
"""

import csv
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Union

import pandas as pd

from .exceptions import InputFileError, TableFormatError
from .schemas import TableSchema, identify_schema

logger = logging.getLogger(__name__)

# Nonnegative decimal number; anything else counts as missing
NUMERIC_PATTERN = re.compile(r"^[0-9]+(\.[0-9]+)?$")

# Offending line numbers shown in an error message
MAX_REPORTED_LINES = 20


def is_valid_number(value) -> bool:
    """Return True if value is a nonnegative decimal number such as '4.5' or '10000'."""
    if not isinstance(value, str):
        return False
    return NUMERIC_PATTERN.fullmatch(value) is not None


def valid_numeric_mask(series: pd.Series) -> pd.Series:
    """is_valid_number() applied to every cell of a string column."""
    return series.map(is_valid_number).astype(bool)


def to_numeric(series: pd.Series) -> pd.Series:
    """Convert a string column to floats, NaN where the cell is not a valid number."""
    return pd.to_numeric(series.where(valid_numeric_mask(series)), errors="coerce")


def check_cell_counts(path: Union[str, Path]) -> int:
    """
    Check that every row has as many tab-separated cells as the header.

    Blank lines are ignored, as they are when the table is loaded.

    Args:
        path: TSV file to check

    Returns:
        int: Number of header cells

    Raises:
        InputFileError: if the file cannot be read or is not UTF-8 text
        TableFormatError: if the file has no header or any row is misaligned
    """
    path = str(path)
    expected = None
    offending = []

    try:
        with open(path, newline="", encoding="utf-8") as handle:
            for line_number, line in enumerate(handle, start=1):
                line = line.rstrip("\r\n")
                if expected is None:
                    if not line.strip():
                        raise TableFormatError(f"{path}: missing header line", path, [line_number])
                    expected = len(line.split("\t"))
                    continue
                if not line:
                    continue
                if len(line.split("\t")) != expected:
                    offending.append(line_number)
    except UnicodeDecodeError as e:
        raise InputFileError(f"{path}: not UTF-8 text ({e.reason} at byte {e.start})") from e
    except OSError as e:
        raise InputFileError(f"{path}: cannot read file ({e.strerror})") from e

    if expected is None:
        raise TableFormatError(f"{path}: file has no header", path, [])

    if offending:
        shown = ", ".join(str(n) for n in offending[:MAX_REPORTED_LINES])
        if len(offending) > MAX_REPORTED_LINES:
            shown += f", ... ({len(offending)} lines in total)"
        raise TableFormatError(
            f"{path}: expected {expected} cells per row, wrong count on line(s) {shown}",
            path,
            offending,
        )

    return expected


def read_tsv(path: Union[str, Path]) -> pd.DataFrame:
    """Read a TSV file verbatim: every cell a string, no quoting, no NA conversion."""
    return pd.read_csv(
        path,
        sep="\t",
        dtype=str,
        keep_default_na=False,
        quoting=csv.QUOTE_NONE,
        skip_blank_lines=True,
    )


@dataclass
class Table:
    """A loaded input file together with its identified schema."""

    path: str
    frame: pd.DataFrame
    schema: TableSchema
    columns: Dict[str, str]

    @property
    def header(self) -> List[str]:
        return list(self.frame.columns)

    def __len__(self) -> int:
        return len(self.frame)

    def column(self, field: str) -> pd.Series:
        return self.frame[self.columns[field]]


def load_table(path: Union[str, Path]) -> Table:
    """
    Load a TSV input file and identify which known table it is.

    Args:
        path: TSV file

    Returns:
        Table: Loaded table

    Raises:
        TableFormatError: if rows and header disagree on cell count
        SchemaIdentificationError: if the header matches no known schema
    """
    path = str(path)
    check_cell_counts(path)
    frame = read_tsv(path)

    header = list(frame.columns)
    schema = identify_schema(header, path=path)
    columns = schema.resolve_columns(header, path=path)

    logger.info(f"   ✓ Loaded {path}: {len(frame)} rows, '{schema.name}' table")
    return Table(path=path, frame=frame, schema=schema, columns=columns)
