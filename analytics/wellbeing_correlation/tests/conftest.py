"""
Shared fixtures: small well-being input tables written to tmp_path.
"""

import pytest

# Import functions to test
import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))))

from analytics.wellbeing_correlation.config import reset_config

GDP_HEADER = [
    "Entity",
    "Code",
    "Year",
    "Cantril ladder score",
    "GDP per capita, PPP (constant 2017 international $)",
    "Population (historical estimates)",
    "Continent",
]
HOMICIDE_HEADER = [
    "Entity",
    "Code",
    "Year",
    "Homicide rate per 100,000 population - Both sexes - All ages",
]
LIFE_HEADER = [
    "Entity",
    "Code",
    "Year",
    "Life expectancy - Sex: all - Age: at birth - Variant: estimates",
    "Cantril ladder score",
    "Population (historical estimates)",
    "Continent",
]

# Alphaland (AAA): 4 joined years; Betaland (BBB): 2 joined years;
# Gammaland (CCC): 3 joined years (2014 has no homicide row), exactly linear.
GDP_ROWS = [
    ["Alphaland", "AAA", "2010", "3.9", "9000", "90", "Asia"],
    ["Alphaland", "AAA", "2011", "4.1", "10000", "100", "Asia"],
    ["Alphaland", "AAA", "2012", "4.3", "10500", "110", "Asia"],
    ["Alphaland", "AAA", "2013", "4.5", "11000", "120", "Asia"],
    ["Alphaland", "AAA", "2014", "4.0", "10800", "130", "Asia"],
    ["Alphaland", "AAA", "2022", "4.6", "12000", "140", "Asia"],
    ["Betaland", "BBB", "2011", "6.1", "30000", "50", "Europe"],
    ["Betaland", "BBB", "2012", "6.3", "31000", "51", "Europe"],
    ["Gammaland", "CCC", "2011", "5.0", "20000", "300", "Africa"],
    ["Gammaland", "CCC", "2012", "5.5", "21000", "200", "Africa"],
    ["Gammaland", "CCC", "2013", "6.0", "22000", "100", "Africa"],
    ["Gammaland", "CCC", "2014", "6.5", "23000", "50", "Africa"],
    ["World", "", "2015", "5.2", "15000", "8000", ""],
]
HOMICIDE_ROWS = [
    ["Gammaland", "CCC", "2013", "3.0"],
    ["Gammaland", "CCC", "2012", "2.0"],
    ["Gammaland", "CCC", "2011", "1.0"],
    ["Betaland", "BBB", "2012", "0.8"],
    ["Betaland", "BBB", "2011", "0.9"],
    ["Alphaland", "AAA", "2014", "6.0"],
    ["Alphaland", "AAA", "2013", "3.0"],
    ["Alphaland", "AAA", "2012", "4.0"],
    ["Alphaland", "AAA", "2011", "5.0"],
    ["Deltaland", "DDD", "2011", "7.0"],
]
LIFE_ROWS = [
    ["Alphaland", "AAA", "2011", "70", "4.1", "100", "Asia"],
    ["Alphaland", "AAA", "2012", "71", "4.3", "110", "Asia"],
    ["Alphaland", "AAA", "2013", "72", "4.5", "120", "Asia"],
    ["Alphaland", "AAA", "2014", "69", "4.0", "130", "Asia"],
    ["Betaland", "BBB", "2011", "81", "6.1", "50", "Europe"],
    ["Betaland", "BBB", "2012", "81.5", "6.3", "51", "Europe"],
    ["Gammaland", "CCC", "2011", "60", "5.0", "300", "Africa"],
    ["Gammaland", "CCC", "2012", "60", "5.5", "200", "Africa"],
    ["Gammaland", "CCC", "2013", "60", "6.0", "100", "Africa"],
    ["Gammaland", "CCC", "2014", "60", "6.5", "50", "Africa"],
]


def write_table(path, header, rows):
    lines = ["\t".join(header)] + ["\t".join(row) for row in rows]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def fresh_config(monkeypatch):
    """Every test starts from default configuration."""
    for name in list(os.environ):
        if name.startswith("WELLBEING_"):
            monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def input_files(tmp_path):
    """Paths of the three input tables, in (gdp, homicide, life) order."""
    return [
        str(write_table(tmp_path / "gdp-vs-happiness.tsv", GDP_HEADER, GDP_ROWS)),
        str(write_table(tmp_path / "homicide-rate.tsv", HOMICIDE_HEADER, HOMICIDE_ROWS)),
        str(write_table(tmp_path / "life-expectancy-vs-happiness.tsv", LIFE_HEADER, LIFE_ROWS)),
    ]
