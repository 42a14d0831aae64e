#!/usr/bin/env python3
"""
CLI entry point for the well-being correlation pipeline.

Commands:
    merge FILE FILE FILE        Join the three input tables, print the merged TSV
    correlate FILE [FILE FILE]  Print the mean correlation of each predictor with
                                the Cantril ladder and the most predictive one;
                                takes a merged TSV or the three input tables

Usage:
    python -m analytics.wellbeing_correlation.run merge gdp.tsv homicide.tsv life.tsv
    python -m analytics.wellbeing_correlation.run correlate merged.tsv

Options:
    --quiet     Reduce logging verbosity
    --help      Show this help message
"""

import sys
import argparse
import logging
from typing import List, Optional

from .config import get_config
from .correlation_engine import format_report
from .exceptions import PipelineError
from .joiner import write_merged
from .pipeline import build_merged_table, run_correlation


def setup_logging(verbose: bool = True, level_name: str = "INFO"):
    """Set up logging configuration; logs go to stderr, results to stdout."""
    level = getattr(logging, level_name.upper(), logging.INFO) if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wellbeing-correlation",
        description="Join well-being tables and find the best predictor of the Cantril ladder",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  wellbeing-correlation merge gdp.tsv homicide.tsv life.tsv > merged.tsv
  wellbeing-correlation correlate merged.tsv
  wellbeing-correlation correlate gdp.tsv homicide.tsv life.tsv
        """
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Reduce logging verbosity"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    merge = subparsers.add_parser("merge", help="Print the merged table as TSV")
    merge.add_argument("files", nargs=3, metavar="FILE", help="The three input .tsv files")

    correlate = subparsers.add_parser("correlate", help="Print the predictor report")
    correlate.add_argument(
        "files",
        nargs="+",
        metavar="FILE",
        help="A merged .tsv file, or the three input .tsv files"
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the pipeline."""
    args = build_parser().parse_args(argv)

    config = get_config()
    setup_logging(verbose=config.verbose and not args.quiet, level_name=config.log_level)
    logger = logging.getLogger(__name__)

    try:
        if args.command == "merge":
            merged = build_merged_table(args.files)
            write_merged(merged, sys.stdout)
        else:
            report = run_correlation(args.files)
            for line in format_report(report, digits=config.round_digits):
                print(line)
        return 0

    except PipelineError as e:
        logger.error(f"❌ {e}")
        return 1

    except KeyboardInterrupt:
        logger.warning("\n\n⚠️  Pipeline interrupted by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
