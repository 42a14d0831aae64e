"""
Entity filter for the merged well-being table.

Keeps only entities with enough valid Cantril ladder observations to
support a correlation.
"""

import logging
from typing import Optional

import pandas as pd

from .config import get_config
from .schemas import CANTRIL_LADDER, ENTITY
from .table import valid_numeric_mask

logger = logging.getLogger(__name__)


def count_valid_observations(merged: pd.DataFrame) -> pd.Series:
    """Number of rows with a valid Cantril ladder score, per entity."""
    valid = valid_numeric_mask(merged[CANTRIL_LADDER])
    return merged.loc[valid, ENTITY].value_counts(sort=False)


def filter_entities(merged: pd.DataFrame, min_observations: Optional[int] = None) -> pd.DataFrame:
    """
    Drop invalid target rows and entities with too few valid observations.

    A row is kept when its Cantril ladder score is a nonnegative decimal
    number and its entity has at least min_observations such rows. Row
    order and columns are preserved; a header-only table stays header-only.

    Args:
        merged: Output of join_tables() or read_merged()
        min_observations: Threshold (defaults to Config.min_observations)

    Returns:
        pd.DataFrame: Filtered copy of the merged table
    """
    if min_observations is None:
        min_observations = get_config().min_observations

    valid = valid_numeric_mask(merged[CANTRIL_LADDER])

    # First pass: tally valid rows per entity
    counts = count_valid_observations(merged)
    qualifying = counts[counts >= min_observations].index

    # Second pass: stream the rows through the precomputed counts
    keep = valid & merged[ENTITY].isin(qualifying)
    filtered = merged[keep].reset_index(drop=True)

    logger.info(
        f"   ✓ Kept {len(filtered)} / {len(merged)} rows from "
        f"{len(qualifying)} / {merged[ENTITY].nunique()} entities "
        f"(min {min_observations} valid Cantril observations)"
    )
    return filtered
