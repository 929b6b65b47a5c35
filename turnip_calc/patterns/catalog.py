"""Pattern catalog: prior probability of each pattern given last week's.

The table mirrors the game's weekly pattern transition matrix. The row keyed by
``None`` is the one used when last week's pattern is unknown.
"""
from types import MappingProxyType
from typing import Mapping, Optional

from turnip_calc.core.custom_types import Pattern

D, R, S, L = Pattern.DECREASING, Pattern.RANDOM, Pattern.SMALL_SPIKE, Pattern.LARGE_SPIKE

PRIOR_TABLE: Mapping[Optional[Pattern], Mapping[Pattern, float]] = MappingProxyType({
    None: MappingProxyType({D: 0.15, R: 0.35, S: 0.25, L: 0.25}),
    D: MappingProxyType({D: 0.05, R: 0.25, S: 0.25, L: 0.45}),
    R: MappingProxyType({D: 0.15, R: 0.20, S: 0.35, L: 0.30}),
    S: MappingProxyType({D: 0.15, R: 0.45, S: 0.15, L: 0.25}),
    L: MappingProxyType({D: 0.20, R: 0.50, S: 0.25, L: 0.05}),
})

del D, R, S, L


def prior(candidate: Pattern, previous: Optional[Pattern] = None) -> float:
    """Probability of ``candidate`` this week before any price is observed."""
    return PRIOR_TABLE[previous][candidate]
