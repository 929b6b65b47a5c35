"""Pattern tree builder.

Hand-assembled phase chains for the four weekly patterns. Ratios are factors
of the base (Sunday) price, durations are in half-days. Chains are built back
to front so every phase can point at the transition into the next one.

Patterns with an optional leading phase get two roots: one that runs the
leading phase, and one that skips it with a zero-length placeholder in its
length history so later duration rules see the same indices either way.
"""
from dataclasses import replace
from typing import List, Optional, Sequence, Tuple

from turnip_calc.core.config import DEFAULT_SETTINGS, Settings
from turnip_calc.core.custom_types import Pattern
from .catalog import prior
from .phase import Phase
from .transitions import PhaseTreeError, Transition, conditional, simple, terminator

MAX_HALF_DAYS = 12

# Durations of phases built through a conditional transition are filled in
# when the transition fires; these are placeholders until then.
_DEFERRED = 0


# ---------------- Duration rules -----------------
def remaining_duration(lengths: Tuple[int, ...]) -> Tuple[int, int]:
    """Whatever is left of the week."""
    remaining = MAX_HALF_DAYS - sum(lengths)
    if remaining < 0:
        raise PhaseTreeError(f"phase lengths {lengths} exceed {MAX_HALF_DAYS} half-days")
    return remaining, remaining


def random_second_decreasing_duration(lengths: Tuple[int, ...]) -> Tuple[int, int]:
    """Both decreasing phases of the random pattern add up to 5 half-days."""
    if len(lengths) < 2 or lengths[1] not in (2, 3):
        raise PhaseTreeError(f"first decreasing phase must last 2 or 3 half-days, got {lengths}")
    length = 5 - lengths[1]
    return length, length


def random_second_increasing_duration(lengths: Tuple[int, ...]) -> Tuple[int, int]:
    """Second increasing phase lasts 1..(7 - first increasing phase)."""
    if not lengths or not 0 <= lengths[0] <= 6:
        raise PhaseTreeError(f"first increasing phase must last 0..6 half-days, got {lengths}")
    return 1, 7 - lengths[0]


# ---------------- Chains -----------------
def spike_chain(pattern: Pattern, name: str, base_price: int,
                intervals: Sequence[Tuple[float, float]], successor: Transition) -> Phase:
    """Single half-day phases, one per ratio interval, ending in ``successor``."""
    if not intervals:
        raise PhaseTreeError("spike chain needs at least one interval")

    node = None
    for min_ratio, max_ratio in reversed(intervals):
        node = Phase(
            pattern=pattern,
            name=name,
            base_price=base_price,
            probability=1.0,
            min_duration=1,
            max_duration=1,
            min_ratio=min_ratio,
            max_ratio=max_ratio,
            successor=successor,
        )
        successor = simple(node)
    return node


def decreasing_roots(base_price: int, previous: Optional[Pattern]) -> List[Phase]:
    return [Phase(
        pattern=Pattern.DECREASING,
        name="Decreasing",
        base_price=base_price,
        probability=prior(Pattern.DECREASING, previous),
        min_duration=MAX_HALF_DAYS,
        max_duration=MAX_HALF_DAYS,
        min_ratio=0.85,
        max_ratio=0.90,
        decrement=(0.03, 0.05),
        successor=terminator(),
    )]


def random_roots(base_price: int, previous: Optional[Pattern]) -> List[Phase]:
    """Increasing, decreasing, increasing, decreasing, increasing.

    The first increasing phase lasts 0..6 half-days (0 with chance 1/7), the
    first decreasing 2..3, the two decreasing phases 5 together and the final
    increasing phase takes whatever is left.
    """
    pattern = Pattern.RANDOM

    def phase(name, min_ratio, max_ratio, decrement, successor, min_duration=_DEFERRED,
              max_duration=_DEFERRED, probability=1.0):
        return Phase(
            pattern=pattern,
            name=name,
            base_price=base_price,
            probability=probability,
            min_duration=min_duration,
            max_duration=max_duration,
            min_ratio=min_ratio,
            max_ratio=max_ratio,
            decrement=decrement,
            successor=successor,
        )

    final_increasing = conditional(
        phase("Final Increasing", 0.90, 1.40, None, terminator()),
        remaining_duration)
    second_decreasing = conditional(
        phase("Second Decreasing", 0.60, 0.80, (0.04, 0.10), final_increasing),
        random_second_decreasing_duration)
    second_increasing = conditional(
        phase("Second Increasing", 0.90, 1.40, None, second_decreasing),
        random_second_increasing_duration)

    initial_decreasing = phase("Initial Decreasing", 0.60, 0.80, (0.04, 0.10), second_increasing,
                               min_duration=2, max_duration=3)

    p = prior(pattern, previous)
    initial_increasing = phase("Initial Increasing", 0.90, 1.40, None, simple(initial_decreasing),
                               min_duration=1, max_duration=6, probability=p * 6.0 / 7.0)
    skipped = replace(initial_decreasing, probability=p / 7.0, phase_lengths=(0,))
    return [initial_increasing, skipped]


def small_spike_roots(base_price: int, previous: Optional[Pattern]) -> List[Phase]:
    """Decreasing for 0..7 half-days (0 with chance 1/8), a five step spike
    topping out at 1.4-2.0, then decreasing for the rest of the week."""
    pattern = Pattern.SMALL_SPIKE

    final_decreasing = conditional(Phase(
        pattern=pattern,
        name="Final Decreasing",
        base_price=base_price,
        probability=1.0,
        min_duration=_DEFERRED,
        max_duration=_DEFERRED,
        min_ratio=0.40,
        max_ratio=0.90,
        decrement=(0.03, 0.05),
        successor=terminator(),
    ), remaining_duration)

    # TODO: the game caps the spike peak relative to its neighbours; the
    # intervals below are the unconstrained envelope.
    spike = spike_chain(pattern, "Spike", base_price, [
        (0.90, 1.40), (0.90, 1.40),
        (1.40, 2.00), (1.40, 2.00), (1.40, 2.00),
    ], final_decreasing)

    p = prior(pattern, previous)
    initial_decreasing = Phase(
        pattern=pattern,
        name="Initial Decreasing",
        base_price=base_price,
        probability=p * 7.0 / 8.0,
        min_duration=1,
        max_duration=7,
        min_ratio=0.40,
        max_ratio=0.90,
        decrement=(0.03, 0.05),
        successor=simple(spike),
    )
    skipped = replace(spike, probability=p / 8.0, phase_lengths=(0,))
    return [initial_decreasing, skipped]


def large_spike_roots(base_price: int, previous: Optional[Pattern]) -> List[Phase]:
    """Decreasing for 1..7 half-days, a five step spike peaking at 2.0-6.0,
    then a flat low band for the rest of the week."""
    pattern = Pattern.LARGE_SPIKE

    final_decreasing = conditional(Phase(
        pattern=pattern,
        name="Final Decreasing",
        base_price=base_price,
        probability=1.0,
        min_duration=_DEFERRED,
        max_duration=_DEFERRED,
        min_ratio=0.40,
        max_ratio=0.90,
        successor=terminator(),
    ), remaining_duration)

    spike = spike_chain(pattern, "Spike", base_price, [
        (0.90, 1.40), (1.40, 2.00), (2.00, 6.00),
        (1.40, 2.00), (0.90, 1.40),
    ], final_decreasing)

    return [Phase(
        pattern=pattern,
        name="Initial Decreasing",
        base_price=base_price,
        probability=prior(pattern, previous),
        min_duration=1,
        max_duration=7,
        min_ratio=0.85,
        max_ratio=0.90,
        decrement=(0.03, 0.05),
        successor=simple(spike),
    )]


def root_phases(base_price: int, previous: Optional[Pattern] = None,
                settings: Settings = DEFAULT_SETTINGS) -> List[Phase]:
    """Fresh root nodes for every pattern, or none for an impossible base price."""
    engine = settings.engine
    if not engine.min_base_price <= base_price <= engine.max_base_price:
        return []

    roots: List[Phase] = []
    roots.extend(decreasing_roots(base_price, previous))
    roots.extend(random_roots(base_price, previous))
    roots.extend(small_spike_roots(base_price, previous))
    roots.extend(large_spike_roots(base_price, previous))
    return roots
