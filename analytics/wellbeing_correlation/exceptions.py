"""
Fatal input errors raised by the pipeline.

Row-level data problems (empty or non-numeric cells) and insufficient
samples are not errors; they are excluded where they occur.
"""

from typing import List, Optional


class PipelineError(ValueError):
    """Base class for errors that abort the pipeline before any output."""


class InputFileError(PipelineError):
    """Missing, unreadable, empty or wrongly named input file, or wrong file count."""


class SchemaIdentificationError(PipelineError):
    """Header does not match any of the known table schemas."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class TableFormatError(PipelineError):
    """Rows whose cell count differs from the header's."""

    def __init__(self, message: str, path: str, line_numbers: List[int]):
        super().__init__(message)
        self.path = path
        self.line_numbers = line_numbers


class DuplicateKeyError(PipelineError):
    """The same (code, year) key appears more than once in one input table."""

    def __init__(self, message: str, path: str, keys: List[str]):
        super().__init__(message)
        self.path = path
        self.keys = keys
