"""
Unit tests for the entity_filter module.
"""

import pytest
import pandas as pd

from analytics.wellbeing_correlation.entity_filter import count_valid_observations, filter_entities
from analytics.wellbeing_correlation.schemas import CANTRIL_LADDER, ENTITY, MERGED_COLUMNS


def _merged(rows):
    """Merged table from (entity, year, cantril) triples; other cells filled in."""
    return pd.DataFrame(
        [[entity, entity[:3].upper(), year, "1000", "50", "1.0", "70", cantril]
         for entity, year, cantril in rows],
        columns=MERGED_COLUMNS,
    )


def test_filter_entities_drops_entities_below_threshold():
    """Test that an entity with only 2 valid Cantril rows is removed."""
    merged = _merged([
        ("Wonderland", "2011", "4.1"),
        ("Wonderland", "2012", "4.3"),
        ("Wonderland", "2013", "4.5"),
        ("Wonderland", "2014", "4.0"),
        ("Oz", "2011", "5.0"),
        ("Oz", "2012", "5.1"),
    ])

    filtered = filter_entities(merged)

    assert filtered[ENTITY].unique().tolist() == ["Wonderland"]
    assert len(filtered) == 4


def test_filter_entities_invalid_target_rows_excluded():
    """Test that invalid Cantril rows neither count nor survive."""
    merged = _merged([
        ("Oz", "2011", "5.0"),
        ("Oz", "2012", ""),
        ("Oz", "2013", "-1.0"),
        ("Oz", "2014", "5.2"),
        ("Oz", "2015", "abc"),
        ("Oz", "2016", "5.4"),
        ("Kansas", "2011", "3.0"),
        ("Kansas", "2012", ""),
        ("Kansas", "2013", "3.5"),
    ])

    filtered = filter_entities(merged)

    assert filtered[CANTRIL_LADDER].tolist() == ["5.0", "5.2", "5.4"]
    assert "Kansas" not in filtered[ENTITY].values


def test_filter_entities_preserves_order_and_columns():
    """Test that kept rows keep their original relative order."""
    merged = _merged([
        ("Oz", "2011", "5.0"),
        ("Wonderland", "2011", "4.1"),
        ("Oz", "2012", "5.1"),
        ("Wonderland", "2012", "4.3"),
        ("Oz", "2013", "5.2"),
        ("Wonderland", "2013", "4.5"),
    ])

    filtered = filter_entities(merged)

    assert list(filtered.columns) == MERGED_COLUMNS
    assert filtered[ENTITY].tolist() == ["Oz", "Wonderland"] * 3


def test_filter_entities_is_idempotent():
    """Test that filtering twice equals filtering once."""
    merged = _merged([
        ("Oz", "2011", "5.0"),
        ("Oz", "2012", ""),
        ("Oz", "2013", "5.2"),
        ("Oz", "2014", "5.3"),
        ("Kansas", "2011", "3.0"),
        ("Kansas", "2012", "3.2"),
    ])

    once = filter_entities(merged)
    twice = filter_entities(once)

    pd.testing.assert_frame_equal(once, twice)


def test_filter_entities_header_only():
    """Test that an empty merged table yields an empty table, not an error."""
    merged = pd.DataFrame(columns=MERGED_COLUMNS)

    filtered = filter_entities(merged)

    assert filtered.empty
    assert list(filtered.columns) == MERGED_COLUMNS


def test_filter_entities_custom_threshold():
    """Test an explicit minimum number of observations."""
    merged = _merged([
        ("Oz", "2011", "5.0"),
        ("Oz", "2012", "5.1"),
        ("Kansas", "2011", "3.0"),
    ])

    filtered = filter_entities(merged, min_observations=2)

    assert filtered[ENTITY].tolist() == ["Oz", "Oz"]


def test_count_valid_observations():
    """Test per-entity tally of valid Cantril rows."""
    merged = _merged([
        ("Oz", "2011", "5.0"),
        ("Oz", "2012", ""),
        ("Kansas", "2011", "3.0"),
    ])

    counts = count_valid_observations(merged)

    assert counts.to_dict() == {"Oz": 1, "Kansas": 1}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
