"""
Three-way inner join of the key-annotated input tables.

The merged table always has the columns of schemas.MERGED_COLUMNS, filled
from the inputs as follows:

    Entity                  <- gdp table, Entity column
    Code, Year              <- composite key
    GDP per capita          <- gdp table
    Population              <- gdp table
    Homicide rate           <- homicide table
    Life expectancy         <- life_expectancy table
    Cantril Ladder score    <- gdp table
"""

import logging
from pathlib import Path
from typing import IO, Dict, List, Union

import pandas as pd

from .config import get_config
from .exceptions import DuplicateKeyError, SchemaIdentificationError
from .normalizer import KEY_COLUMN, KeyedTable
from .schemas import (
    CANTRIL_FIELD,
    CANTRIL_LADDER,
    CODE,
    ENTITY,
    ENTITY_FIELD,
    GDP_FIELD,
    GDP_PER_CAPITA,
    HOMICIDE_FIELD,
    HOMICIDE_RATE,
    LIFE_EXPECTANCY,
    LIFE_EXPECTANCY_FIELD,
    MERGED_COLUMNS,
    POPULATION,
    POPULATION_FIELD,
    YEAR,
)
from .table import check_cell_counts, read_tsv

logger = logging.getLogger(__name__)

# Fields each input contributes, keyed by merged column name
GDP_PROJECTION = {
    ENTITY: ENTITY_FIELD,
    GDP_PER_CAPITA: GDP_FIELD,
    POPULATION: POPULATION_FIELD,
    CANTRIL_LADDER: CANTRIL_FIELD,
}
HOMICIDE_PROJECTION = {HOMICIDE_RATE: HOMICIDE_FIELD}
LIFE_EXPECTANCY_PROJECTION = {LIFE_EXPECTANCY: LIFE_EXPECTANCY_FIELD}

MAX_REPORTED_KEYS = 10


def check_unique_keys(keyed: KeyedTable) -> None:
    """
    Reject tables in which a composite key occurs more than once.

    Raises:
        DuplicateKeyError: listing the repeated keys
    """
    duplicated = keyed.frame[KEY_COLUMN][keyed.frame[KEY_COLUMN].duplicated()]
    if duplicated.empty:
        return

    keys = list(dict.fromkeys(duplicated.tolist()))
    shown = ", ".join(repr(key) for key in keys[:MAX_REPORTED_KEYS])
    if len(keys) > MAX_REPORTED_KEYS:
        shown += f", ... ({len(keys)} keys in total)"
    raise DuplicateKeyError(
        f"{keyed.path}: duplicate (code, year) key(s) {shown}",
        keyed.path,
        keys,
    )


def _project(keyed: KeyedTable, projection: Dict[str, str]) -> pd.DataFrame:
    """Select the key plus the projected fields, renamed to merged column names."""
    selected = pd.DataFrame({KEY_COLUMN: keyed.frame[KEY_COLUMN]})
    for merged_column, field in projection.items():
        selected[merged_column] = keyed.column(field).values
    return selected


def inner_join(left: pd.DataFrame, right: pd.DataFrame) -> pd.DataFrame:
    """
    Inner equi-join on the key column.

    Keys present on only one side are dropped. A key repeated on either
    side yields every combination of the matching rows. Left order is kept.
    """
    return left.merge(right, on=KEY_COLUMN, how="inner", sort=False)


def join_tables(
    gdp: KeyedTable,
    homicide: KeyedTable,
    life_expectancy: KeyedTable,
) -> pd.DataFrame:
    """
    Join the three key-annotated tables and project to the merged schema.

    Args:
        gdp: Normalized Cantril ladder + GDP table
        homicide: Normalized homicide rate table
        life_expectancy: Normalized life expectancy + Cantril table

    Returns:
        pd.DataFrame: Rows whose key exists in all three inputs, with
            columns MERGED_COLUMNS, ordered by key

    Raises:
        DuplicateKeyError: if Config.require_unique_keys and any input repeats a key
    """
    config = get_config()

    if config.require_unique_keys:
        for keyed in (gdp, homicide, life_expectancy):
            check_unique_keys(keyed)

    joined = inner_join(_project(gdp, GDP_PROJECTION), _project(homicide, HOMICIDE_PROJECTION))
    logger.info(f"   ✓ Joined gdp and homicide tables: {len(joined)} rows")

    joined = inner_join(joined, _project(life_expectancy, LIFE_EXPECTANCY_PROJECTION))
    logger.info(f"   ✓ Joined life expectancy table: {len(joined)} rows")

    key_parts = joined[KEY_COLUMN].str.rsplit(" ", n=1)
    joined[CODE] = key_parts.str[0]
    joined[YEAR] = key_parts.str[1]

    merged = joined[MERGED_COLUMNS].reset_index(drop=True)
    return merged


def write_merged(merged: pd.DataFrame, stream: IO[str]) -> None:
    """
    Write the merged table as TSV, header first.

    Cells are written verbatim, the same way read_tsv() reads them back;
    they come from tab-split lines and cannot hold a tab or newline.
    """
    stream.write("\t".join(MERGED_COLUMNS) + "\n")
    for row in merged[MERGED_COLUMNS].itertuples(index=False, name=None):
        stream.write("\t".join(str(cell) for cell in row) + "\n")


def read_merged(path: Union[str, Path]) -> pd.DataFrame:
    """
    Load a merged table previously produced by write_merged().

    Raises:
        TableFormatError: if rows and header disagree on cell count
        SchemaIdentificationError: if the header is not the merged header
    """
    path = str(path)
    check_cell_counts(path)
    merged = read_tsv(path)

    header: List[str] = list(merged.columns)
    if header != MERGED_COLUMNS:
        raise SchemaIdentificationError(
            f"{path}: not a merged table; expected header {MERGED_COLUMNS}, got {header}",
            path=path,
        )

    logger.info(f"   ✓ Loaded merged table {path}: {len(merged)} rows")
    return merged
