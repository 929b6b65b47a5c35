import math

import pytest

from turnip_calc.core.config import EngineSettings, Settings
from turnip_calc.core.custom_types import Pattern
from turnip_calc.patterns.builder import (
    MAX_HALF_DAYS,
    random_roots,
    random_second_decreasing_duration,
    random_second_increasing_duration,
    remaining_duration,
    root_phases,
    small_spike_roots,
    spike_chain,
)
from turnip_calc.patterns.transitions import PhaseTreeError, terminator


def test_roots_cover_every_pattern_in_catalog_order():
    roots = root_phases(100)
    assert [r.pattern for r in roots] == [
        Pattern.DECREASING,
        Pattern.RANDOM, Pattern.RANDOM,
        Pattern.SMALL_SPIKE, Pattern.SMALL_SPIKE,
        Pattern.LARGE_SPIKE,
    ]
    assert math.isclose(math.fsum(r.probability for r in roots), 1.0)


def test_roots_follow_previous_pattern():
    roots = root_phases(100, Pattern.DECREASING)
    by_pattern = {}
    for r in roots:
        by_pattern[r.pattern] = by_pattern.get(r.pattern, 0.0) + r.probability
    assert by_pattern[Pattern.LARGE_SPIKE] == pytest.approx(0.45)
    assert by_pattern[Pattern.DECREASING] == pytest.approx(0.05)


def test_optional_leading_phase_is_split_into_two_roots():
    with_phase, skipped = random_roots(100, None)
    assert with_phase.name == "Initial Increasing"
    assert with_phase.probability == pytest.approx(0.35 * 6 / 7)
    assert skipped.name == "Initial Decreasing"
    assert skipped.probability == pytest.approx(0.35 / 7)
    assert skipped.phase_lengths == (0,)
    assert (skipped.min_duration, skipped.max_duration) == (2, 3)

    with_phase, skipped = small_spike_roots(100, None)
    assert with_phase.probability == pytest.approx(0.25 * 7 / 8)
    assert (with_phase.min_duration, with_phase.max_duration) == (1, 7)
    assert skipped.name == "Spike"
    assert skipped.probability == pytest.approx(0.25 / 8)
    assert skipped.phase_lengths == (0,)


def test_base_price_bounds_are_inclusive():
    assert root_phases(90)
    assert root_phases(110)
    assert root_phases(89) == []
    assert root_phases(111) == []
    assert root_phases(0) == []


def test_base_price_bounds_come_from_settings():
    wide = Settings(engine=EngineSettings(min_base_price=50, max_base_price=200))
    assert root_phases(150, settings=wide)
    assert root_phases(150) == []


def test_spike_chain_visits_intervals_in_order():
    intervals = [(0.9, 1.4), (1.4, 2.0), (2.0, 6.0)]
    node = spike_chain(Pattern.LARGE_SPIKE, "Spike", 100, intervals, terminator())
    seen = []
    while not node.is_terminator:
        assert (node.min_duration, node.max_duration) == (1, 1)
        seen.append((node.min_ratio, node.max_ratio))
        [node] = node.children(None)
    assert seen == intervals
    assert node.phase_lengths == (1, 1, 1)


def test_spike_chain_needs_intervals():
    with pytest.raises(PhaseTreeError):
        spike_chain(Pattern.SMALL_SPIKE, "Spike", 100, [], terminator())


def test_duration_rules():
    assert remaining_duration(()) == (MAX_HALF_DAYS, MAX_HALF_DAYS)
    assert remaining_duration((3, 2, 1)) == (6, 6)
    assert remaining_duration((7, 5)) == (0, 0)
    with pytest.raises(PhaseTreeError):
        remaining_duration((10, 3))

    assert random_second_decreasing_duration((1, 2)) == (3, 3)
    assert random_second_decreasing_duration((0, 3)) == (2, 2)
    with pytest.raises(PhaseTreeError):
        random_second_decreasing_duration((1, 4))
    with pytest.raises(PhaseTreeError):
        random_second_decreasing_duration((1,))

    assert random_second_increasing_duration((0, 3)) == (1, 7)
    assert random_second_increasing_duration((6, 2)) == (1, 1)
    with pytest.raises(PhaseTreeError):
        random_second_increasing_duration((7, 2))


def test_every_path_fills_exactly_one_week():
    # With no prices every branch survives; after twelve half-days every leaf
    # must have reached its terminator.
    for root in root_phases(100):
        live = [root]
        for _ in range(MAX_HALF_DAYS):
            live = [child for p in live for child in p.children(None)]
        for leaf in live:
            assert leaf.is_terminator or (leaf.min_duration, leaf.max_duration) == (0, 0), leaf.describe()
            history = leaf.phase_lengths if leaf.is_terminator else leaf.phase_lengths + (0,)
            assert sum(history) == MAX_HALF_DAYS, leaf.describe()
