"""
Pipeline orchestration for the well-being correlation engine.

Runs the stages in order:
1. Validate the input files
2. Load and identify the three input tables
3. Normalize composite keys
4. Join into the merged table
5. Filter entities
6. Compute correlations
"""

import logging
import os
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

import pandas as pd

from .correlation_engine import CorrelationReport, analyze_correlations
from .entity_filter import filter_entities
from .exceptions import InputFileError
from .joiner import join_tables, read_merged
from .normalizer import normalize_keys
from .schemas import KNOWN_SCHEMAS
from .table import Table, load_table

logger = logging.getLogger(__name__)

INPUT_SUFFIX = ".tsv"

PathLike = Union[str, Path]


def validate_input_paths(paths: Sequence[PathLike], expected_count: Optional[int] = None) -> List[str]:
    """
    Check that every input is an existing, readable, non-empty .tsv file.

    Args:
        paths: Input files
        expected_count: Required number of files, if any

    Returns:
        List[str]: The paths as strings

    Raises:
        InputFileError: on the first file that fails a check
    """
    paths = [str(path) for path in paths]

    if expected_count is not None and len(paths) != expected_count:
        raise InputFileError(f"expected {expected_count} input files, got {len(paths)}")

    for path in paths:
        if Path(path).suffix.lower() != INPUT_SUFFIX:
            raise InputFileError(f"{path}: expected a {INPUT_SUFFIX} file")
        if not os.path.exists(path):
            raise InputFileError(f"{path}: no such file")
        if not os.path.isfile(path):
            raise InputFileError(f"{path}: not a regular file")
        if not os.access(path, os.R_OK):
            raise InputFileError(f"{path}: file is not readable")
        if os.path.getsize(path) == 0:
            raise InputFileError(f"{path}: file is empty")

    return paths


def load_inputs(paths: Sequence[PathLike]) -> Dict[str, Table]:
    """
    Load the three input tables, one of each known schema.

    Returns:
        Dict[str, Table]: Tables keyed by schema name ('gdp', 'homicide', 'life_expectancy')

    Raises:
        InputFileError: if a schema is supplied twice or is missing
    """
    tables: Dict[str, Table] = {}
    for path in paths:
        table = load_table(path)
        name = table.schema.name
        if name in tables:
            raise InputFileError(
                f"{table.path}: second '{name}' table (already given {tables[name].path})"
            )
        tables[name] = table

    missing = [schema.name for schema in KNOWN_SCHEMAS if schema.name not in tables]
    if missing:
        raise InputFileError(f"missing input table(s): {missing}")

    return tables


def build_merged_table(paths: Sequence[PathLike]) -> pd.DataFrame:
    """
    Validate, load, normalize and join the three input files.

    Args:
        paths: The three input TSV files, in any order

    Returns:
        pd.DataFrame: Merged table with schemas.MERGED_COLUMNS
    """
    logger.info("=" * 80)
    logger.info("BUILDING MERGED TABLE")
    logger.info("=" * 80)

    paths = validate_input_paths(paths, expected_count=len(KNOWN_SCHEMAS))

    logger.info("\n1. Loading input tables...")
    tables = load_inputs(paths)

    logger.info("\n2. Normalizing composite keys...")
    keyed = {name: normalize_keys(table) for name, table in tables.items()}
    for name, table in keyed.items():
        logger.info(f"   ✓ {name}: {len(table)} rows in range")

    logger.info("\n3. Joining tables...")
    merged = join_tables(keyed["gdp"], keyed["homicide"], keyed["life_expectancy"])

    if merged.empty:
        logger.warning("   ⚠️  No (code, year) key is present in all three tables")

    logger.info(f"   ✓ Merged table: {len(merged)} rows")
    return merged


def run_correlation(paths: Sequence[PathLike]) -> CorrelationReport:
    """
    Filter a merged table and compute the predictor report.

    Args:
        paths: Either one merged TSV file or the three raw input files

    Returns:
        CorrelationReport: Entity-level coefficients, verdicts and the best predictor
    """
    if len(paths) == 1:
        (path,) = validate_input_paths(paths)
        merged = read_merged(path)
    elif len(paths) == len(KNOWN_SCHEMAS):
        merged = build_merged_table(paths)
    else:
        raise InputFileError(
            f"expected 1 merged file or {len(KNOWN_SCHEMAS)} input files, got {len(paths)}"
        )

    logger.info("\nFiltering entities...")
    filtered = filter_entities(merged)

    return analyze_correlations(filtered)
