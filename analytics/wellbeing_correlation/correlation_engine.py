"""
Correlation engine for the well-being correlation pipeline.

Computes Pearson's r between each predictor (GDP per capita, population,
homicide rate, life expectancy) and the Cantril ladder score separately
for every entity, averages the per-entity coefficients for each
predictor, and picks the predictor with the largest absolute mean.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd
from scipy import stats

from .config import get_config
from .schemas import (
    CANTRIL_LADDER,
    ENTITY,
    GDP_PER_CAPITA,
    HOMICIDE_RATE,
    LIFE_EXPECTANCY,
    POPULATION,
)
from .table import to_numeric, valid_numeric_mask

logger = logging.getLogger(__name__)

# Canonical predictor order; earlier predictors win ties
PREDICTORS: List[Tuple[str, str]] = [
    ("GDP per capita", GDP_PER_CAPITA),
    ("Population", POPULATION),
    ("Homicide Rate", HOMICIDE_RATE),
    ("Life Expectancy", LIFE_EXPECTANCY),
]

ENTITY_RESULT_COLUMNS = ["entity", "predictor", "correlation", "p_value", "n_samples"]

# Relative size below which nΣx² − (Σx)² counts as zero
SPREAD_TOLERANCE = 1e-12


@dataclass
class CorrelationSample:
    """Running sums for Pearson's r over (x, y) pairs."""

    n: int = 0
    sum_x: float = 0.0
    sum_y: float = 0.0
    sum_xx: float = 0.0
    sum_yy: float = 0.0
    sum_xy: float = 0.0

    def add(self, x: float, y: float) -> None:
        self.n += 1
        self.sum_x += x
        self.sum_y += y
        self.sum_xx += x * x
        self.sum_yy += y * y
        self.sum_xy += x * y

    def correlation(self, min_pairs: int = 3) -> Optional[float]:
        """
        Pearson's r from the accumulated sums.

        r = (nΣxy − ΣxΣy) / (√(nΣx² − (Σx)²) · √(nΣy² − (Σy)²))

        Returns:
            Optional[float]: r clipped to [-1, 1], or None when there are
                fewer than min_pairs pairs or x or y has no variance
        """
        if self.n < min_pairs:
            return None

        numerator = self.n * self.sum_xy - self.sum_x * self.sum_y
        spread_x = self.n * self.sum_xx - self.sum_x ** 2
        spread_y = self.n * self.sum_yy - self.sum_y ** 2

        # Constant decimals can leave rounding residue instead of an exact zero
        if spread_x <= SPREAD_TOLERANCE * self.n * self.sum_xx:
            return None
        if spread_y <= SPREAD_TOLERANCE * self.n * self.sum_yy:
            return None

        r = numerator / (math.sqrt(spread_x) * math.sqrt(spread_y))
        return max(-1.0, min(1.0, r))


def correlation_p_value(r: float, n: int) -> float:
    """Two-sided p-value of the t-test for a Pearson coefficient."""
    if n <= 2 or np.isnan(r):
        return np.nan
    if abs(r) >= 1.0:
        return 0.0
    t_stat = r * math.sqrt((n - 2) / (1.0 - r * r))
    return float(2.0 * stats.t.sf(abs(t_stat), n - 2))


def compute_correlation(
    x: pd.Series,
    y: pd.Series,
    min_pairs: Optional[int] = None,
) -> Dict[str, float]:
    """
    Compute Pearson's r between two string columns.

    Pairs where either cell is not a nonnegative decimal number are
    discarded before anything is summed.

    Args:
        x: Predictor cells
        y: Target cells
        min_pairs: Fewest valid pairs for a defined r (defaults to Config.min_pairs)

    Returns:
        dict: {
            'correlation': float (nan if undefined),
            'p_value': float (nan if undefined),
            'n_samples': int
        }
    """
    if min_pairs is None:
        min_pairs = get_config().min_pairs

    valid_mask = valid_numeric_mask(x) & valid_numeric_mask(y)
    x_clean = to_numeric(x[valid_mask]).to_numpy()
    y_clean = to_numeric(y[valid_mask]).to_numpy()

    sample = CorrelationSample()
    for x_value, y_value in zip(x_clean, y_clean):
        sample.add(float(x_value), float(y_value))
    r = sample.correlation(min_pairs=min_pairs)

    if r is None:
        return {
            "correlation": np.nan,
            "p_value": np.nan,
            "n_samples": sample.n
        }

    return {
        "correlation": r,
        "p_value": correlation_p_value(r, sample.n),
        "n_samples": sample.n
    }


def compute_entity_correlations(
    filtered: pd.DataFrame,
    predictors: Optional[List[Tuple[str, str]]] = None,
    min_pairs: Optional[int] = None,
) -> pd.DataFrame:
    """
    Pearson's r of every predictor against the Cantril score, per entity.

    Entity/predictor pairs with too few valid pairs or no variance are
    left out rather than reported as zero.

    Args:
        filtered: Output of filter_entities()
        predictors: Ordered (name, column) pairs (defaults to PREDICTORS)
        min_pairs: Fewest valid pairs per entity and predictor

    Returns:
        pd.DataFrame: One row per defined coefficient with columns
            entity, predictor, correlation, p_value, n_samples
    """
    predictors = PREDICTORS if predictors is None else predictors
    if min_pairs is None:
        min_pairs = get_config().min_pairs

    rows = []
    for entity, group in filtered.groupby(ENTITY, sort=False):
        for name, column in predictors:
            result = compute_correlation(group[column], group[CANTRIL_LADDER], min_pairs=min_pairs)
            if np.isnan(result["correlation"]):
                logger.debug(
                    f"Skipping {entity} / {name}: {result['n_samples']} valid pairs, "
                    f"no defined correlation"
                )
                continue
            rows.append({
                "entity": entity,
                "predictor": name,
                "correlation": result["correlation"],
                "p_value": result["p_value"],
                "n_samples": result["n_samples"]
            })

    return pd.DataFrame(rows, columns=ENTITY_RESULT_COLUMNS)


@dataclass
class PredictorVerdict:
    """Mean per-entity correlation of one predictor with the Cantril score."""

    name: str
    column: str
    mean_correlation: Optional[float]
    n_entities: int = 0

    @property
    def magnitude(self) -> Optional[float]:
        if self.mean_correlation is None:
            return None
        return abs(self.mean_correlation)

    def rounded(self, digits: int = 3) -> Optional[float]:
        if self.mean_correlation is None:
            return None
        return round(self.mean_correlation, digits)


@dataclass
class CorrelationReport:
    """Entity-level coefficients, one verdict per predictor and the winner."""

    entity_correlations: pd.DataFrame
    verdicts: List[PredictorVerdict] = field(default_factory=list)
    best: Optional[PredictorVerdict] = None


def aggregate_predictors(
    entity_correlations: pd.DataFrame,
    predictors: Optional[List[Tuple[str, str]]] = None,
) -> List[PredictorVerdict]:
    """
    Average the per-entity coefficients of each predictor.

    Returns:
        List[PredictorVerdict]: In predictor order; mean_correlation is None
            for a predictor no entity qualified for
    """
    predictors = PREDICTORS if predictors is None else predictors

    verdicts = []
    for name, column in predictors:
        values = entity_correlations.loc[entity_correlations["predictor"] == name, "correlation"]
        if values.empty:
            verdicts.append(PredictorVerdict(name=name, column=column, mean_correlation=None))
            continue
        verdicts.append(PredictorVerdict(
            name=name,
            column=column,
            mean_correlation=float(values.mean()),
            n_entities=len(values),
        ))
    return verdicts


def select_best_predictor(
    verdicts: List[PredictorVerdict],
    round_before_compare: bool = False,
    digits: int = 3,
) -> Optional[PredictorVerdict]:
    """
    Predictor with the strictly largest absolute mean correlation.

    Verdicts without a mean are skipped. On equal magnitude the earlier
    verdict is kept. With round_before_compare, magnitudes are compared
    after rounding to digits decimals.
    """
    best: Optional[PredictorVerdict] = None
    best_magnitude = -1.0

    for verdict in verdicts:
        if verdict.mean_correlation is None:
            continue
        magnitude = abs(verdict.rounded(digits)) if round_before_compare else verdict.magnitude
        if magnitude > best_magnitude:
            best, best_magnitude = verdict, magnitude

    return best


def analyze_correlations(
    filtered: pd.DataFrame,
    predictors: Optional[List[Tuple[str, str]]] = None,
) -> CorrelationReport:
    """
    Run the correlation stage over a filtered merged table.

    Args:
        filtered: Output of filter_entities()
        predictors: Ordered (name, column) pairs (defaults to PREDICTORS)

    Returns:
        CorrelationReport: Entity-level coefficients, verdicts and the best predictor
    """
    logger.info("=" * 80)
    logger.info("COMPUTING CORRELATIONS")
    logger.info("=" * 80)

    config = get_config()
    predictors = PREDICTORS if predictors is None else predictors

    entity_correlations = compute_entity_correlations(
        filtered, predictors=predictors, min_pairs=config.min_pairs
    )
    logger.info(
        f"   ✓ Computed {len(entity_correlations)} entity-level correlations "
        f"over {filtered[ENTITY].nunique()} entities"
    )

    verdicts = aggregate_predictors(entity_correlations, predictors)
    for verdict in verdicts:
        if verdict.mean_correlation is None:
            logger.warning(f"   ⚠️  {verdict.name}: no entity has a defined correlation")
        else:
            logger.info(
                f"   ✓ {verdict.name:20} mean r={verdict.mean_correlation:+.4f} "
                f"over {verdict.n_entities} entities"
            )

    best = select_best_predictor(
        verdicts,
        round_before_compare=config.round_before_compare,
        digits=config.round_digits,
    )
    if best is None:
        logger.warning("   ⚠️  No predictor qualifies")

    return CorrelationReport(entity_correlations=entity_correlations, verdicts=verdicts, best=best)


def _format_value(value: Optional[float], digits: int) -> str:
    if value is None:
        return "N/A"
    return f"{round(value, digits):.{digits}f}"


def format_report(report: CorrelationReport, digits: Optional[int] = None) -> List[str]:
    """Report lines: one per predictor, then the most predictive one."""
    if digits is None:
        digits = get_config().round_digits

    lines = [
        f"Mean correlation of {verdict.name} with Cantril ladder is "
        f"{_format_value(verdict.mean_correlation, digits)}"
        for verdict in report.verdicts
    ]

    if report.best is None:
        lines.append("Most predictive mean correlation with the Cantril ladder is N/A")
    else:
        lines.append(
            f"Most predictive mean correlation with the Cantril ladder is "
            f"{report.best.name} (r = {_format_value(report.best.mean_correlation, digits)})"
        )
    return lines
