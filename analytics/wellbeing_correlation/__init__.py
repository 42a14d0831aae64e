"""
Well-being correlation pipeline.

Joins three country-year tables (Cantril ladder + GDP, homicide rate,
life expectancy), keeps entities with enough Cantril observations, and
finds which predictor correlates most strongly with the Cantril ladder.

Modules:
- config: Configuration management and environment variables
- schemas: Known input schemas and the merged output schema
- table: TSV loading, cell-count validation, numeric validity
- normalizer: Composite (code, year) keys and year-range restriction
- joiner: Three-way inner join and merged-table I/O
- entity_filter: Keep entities with enough valid target observations
- correlation_engine: Per-entity Pearson correlation and predictor ranking
- pipeline: Stage orchestration and input-file validation
- run: CLI entry point
"""

__version__ = "1.0.0"
__author__ = "Data Engineering Team"

from .config import Config, get_config
from .exceptions import (
    DuplicateKeyError,
    InputFileError,
    PipelineError,
    SchemaIdentificationError,
    TableFormatError,
)
from .table import load_table
from .normalizer import normalize_keys
from .joiner import join_tables
from .entity_filter import filter_entities
from .correlation_engine import analyze_correlations, format_report
from .pipeline import build_merged_table, run_correlation

__all__ = [
    "Config",
    "get_config",
    "PipelineError",
    "InputFileError",
    "SchemaIdentificationError",
    "TableFormatError",
    "DuplicateKeyError",
    "load_table",
    "normalize_keys",
    "join_tables",
    "filter_entities",
    "analyze_correlations",
    "format_report",
    "build_merged_table",
    "run_correlation",
]
