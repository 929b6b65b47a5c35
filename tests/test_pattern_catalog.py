import math

import pytest

from turnip_calc.core.custom_types import Pattern
from turnip_calc.patterns.catalog import PRIOR_TABLE, prior


def test_every_row_sums_to_one():
    assert set(PRIOR_TABLE) == {None, *Pattern}
    for previous, row in PRIOR_TABLE.items():
        assert set(row) == set(Pattern)
        assert math.isclose(sum(row.values()), 1.0), previous


def test_prior_lookup():
    assert prior(Pattern.RANDOM) == 0.35
    assert prior(Pattern.LARGE_SPIKE, Pattern.DECREASING) == 0.45
    assert prior(Pattern.LARGE_SPIKE, Pattern.LARGE_SPIKE) == 0.05
    assert prior(Pattern.RANDOM, Pattern.LARGE_SPIKE) == 0.50


def test_table_is_read_only():
    with pytest.raises(TypeError):
        PRIOR_TABLE[None] = {}
    with pytest.raises(TypeError):
        PRIOR_TABLE[None][Pattern.RANDOM] = 1.0


def test_pattern_codes_round_trip_and_unknown_codes():
    assert [p.code for p in Pattern] == [1, 2, 3, 4]
    for pattern in Pattern:
        assert Pattern.from_code(pattern.code) is pattern
    assert Pattern.from_code(0) is None
    assert Pattern.from_code(5) is None
    assert Pattern.from_code(255) is None


def test_pattern_names():
    assert Pattern.from_name("smallspike") is Pattern.SMALL_SPIKE
    assert Pattern.from_name("LargeSpike") is Pattern.LARGE_SPIKE
    assert Pattern.from_name("small_spike") is Pattern.SMALL_SPIKE
    assert Pattern.from_name("Decreasing") is Pattern.DECREASING
    assert Pattern.SMALL_SPIKE.display_name == "SmallSpike"
    with pytest.raises(ValueError):
        Pattern.from_name("sideways")
