"""
Known table schemas for the well-being correlation pipeline.

Each input file is one of three Our World in Data style extracts. The
role of a file is decided by a phrase in its header line, and the
columns it contributes are located by header phrase rather than by
position.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .exceptions import SchemaIdentificationError

logger = logging.getLogger(__name__)

# Field names shared by the input schemas
ENTITY_FIELD = "entity"
CODE_FIELD = "code"
YEAR_FIELD = "year"
GDP_FIELD = "gdp_per_capita"
POPULATION_FIELD = "population"
HOMICIDE_FIELD = "homicide_rate"
LIFE_EXPECTANCY_FIELD = "life_expectancy"
CANTRIL_FIELD = "cantril_ladder"

# Merged (output) column headers, in output order
ENTITY = "Entity"
CODE = "Code"
YEAR = "Year"
GDP_PER_CAPITA = "GDP per capita, PPP (constant 2017 international $)"
POPULATION = "Population (historical estimates)"
HOMICIDE_RATE = "Homicide rate per 100,000 population - Both sexes - All ages"
LIFE_EXPECTANCY = "Life expectancy - Sex: all - Age: at birth - Variant: estimates"
CANTRIL_LADDER = "Cantril Ladder score"

MERGED_COLUMNS = [
    ENTITY,
    CODE,
    YEAR,
    GDP_PER_CAPITA,
    POPULATION,
    HOMICIDE_RATE,
    LIFE_EXPECTANCY,
    CANTRIL_LADDER,
]


@dataclass(frozen=True)
class TableSchema:
    """A known input table: the header phrase that identifies it and the fields it carries."""

    name: str
    marker: str
    fields: Dict[str, str] = field(default_factory=dict)

    def matches(self, header: List[str]) -> bool:
        line = "\t".join(header).lower()
        return self.marker.lower() in line

    def resolve_columns(self, header: List[str], path: Optional[str] = None) -> Dict[str, str]:
        """
        Map each schema field to the header column that holds it.

        An exact (case-insensitive) header match wins; otherwise the first
        column containing the phrase is used.

        Raises:
            SchemaIdentificationError: if a field has no matching column
        """
        resolved = {}
        lowered = [column.lower() for column in header]
        for field_name, phrase in self.fields.items():
            phrase_lower = phrase.lower()
            if phrase_lower in lowered:
                resolved[field_name] = header[lowered.index(phrase_lower)]
                continue
            candidates = [header[i] for i, col in enumerate(lowered) if phrase_lower in col]
            if not candidates:
                raise SchemaIdentificationError(
                    f"{path or '<table>'}: header looks like a '{self.name}' table "
                    f"but has no column matching '{phrase}'",
                    path=path,
                )
            resolved[field_name] = candidates[0]
        return resolved


GDP_SCHEMA = TableSchema(
    name="gdp",
    marker="GDP per capita",
    fields={
        ENTITY_FIELD: "Entity",
        CODE_FIELD: "Code",
        YEAR_FIELD: "Year",
        CANTRIL_FIELD: "Cantril ladder score",
        GDP_FIELD: "GDP per capita",
        POPULATION_FIELD: "Population",
    },
)

HOMICIDE_SCHEMA = TableSchema(
    name="homicide",
    marker="Homicide rate",
    fields={
        ENTITY_FIELD: "Entity",
        CODE_FIELD: "Code",
        YEAR_FIELD: "Year",
        HOMICIDE_FIELD: "Homicide rate",
    },
)

LIFE_EXPECTANCY_SCHEMA = TableSchema(
    name="life_expectancy",
    marker="Life expectancy",
    fields={
        ENTITY_FIELD: "Entity",
        CODE_FIELD: "Code",
        YEAR_FIELD: "Year",
        LIFE_EXPECTANCY_FIELD: "Life expectancy",
        CANTRIL_FIELD: "Cantril ladder score",
    },
)

KNOWN_SCHEMAS = [GDP_SCHEMA, HOMICIDE_SCHEMA, LIFE_EXPECTANCY_SCHEMA]


def identify_schema(header: List[str], path: Optional[str] = None) -> TableSchema:
    """
    Identify which known table a header belongs to.

    Args:
        header: Column names from the first line of the file
        path: Source file, used in error messages

    Returns:
        TableSchema: The single schema whose marker phrase appears in the header

    Raises:
        SchemaIdentificationError: if no schema, or more than one, matches
    """
    matches = [schema for schema in KNOWN_SCHEMAS if schema.matches(header)]

    if not matches:
        raise SchemaIdentificationError(
            f"{path or '<table>'}: unrecognised header; expected one of "
            f"{[schema.marker for schema in KNOWN_SCHEMAS]}",
            path=path,
        )
    if len(matches) > 1:
        raise SchemaIdentificationError(
            f"{path or '<table>'}: ambiguous header matches "
            f"{[schema.name for schema in matches]}",
            path=path,
        )

    logger.debug(f"Identified {path or '<table>'} as '{matches[0].name}' table")
    return matches[0]
