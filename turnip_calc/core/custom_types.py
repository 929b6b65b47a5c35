"""
Custom Type Definitions
-----------------------

Centralized, reusable types shared by the phase-tree engine and its outer
surfaces (CLI and binding boundary).

- Price: an observed sell price, or None when the sample was missed.
- Pattern: the closed set of weekly price patterns being inferred.
- PatternResult / CalcResult: the flat result shapes handed across the
  binding boundary, where patterns travel as small integer codes.
"""
from __future__ import annotations
from enum import Enum
from typing import Dict, Optional, Tuple
from dataclasses import dataclass, field

# An observed sell price; None marks a missed half-day sample.
Price = Optional[int]


class Pattern(str, Enum):
    DECREASING = "decreasing"
    RANDOM = "random"
    SMALL_SPIKE = "small_spike"
    LARGE_SPIKE = "large_spike"

    @property
    def code(self) -> int:
        """Integer code used across the binding boundary (1-based)."""
        return _PATTERN_CODES[self]

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @classmethod
    def from_code(cls, code: int) -> Optional["Pattern"]:
        """Map a binding code back to a Pattern; anything unknown maps to None."""
        for pattern, value in _PATTERN_CODES.items():
            if value == code:
                return pattern
        return None

    @classmethod
    def from_name(cls, name: str) -> "Pattern":
        """Parse a CLI-style name (``smallspike``) or an enum value (``small_spike``)."""
        key = name.strip().lower()
        for pattern in cls:
            if key in (pattern.value, pattern.value.replace("_", "")):
                return pattern
        raise ValueError(f"Unknown pattern name: {name!r}")


_PATTERN_CODES: Dict[Pattern, int] = {
    Pattern.DECREASING: 1,
    Pattern.RANDOM: 2,
    Pattern.SMALL_SPIKE: 3,
    Pattern.LARGE_SPIKE: 4,
}

_DISPLAY_NAMES: Dict[Pattern, str] = {
    Pattern.DECREASING: "Decreasing",
    Pattern.RANDOM: "Random",
    Pattern.SMALL_SPIKE: "SmallSpike",
    Pattern.LARGE_SPIKE: "LargeSpike",
}


@dataclass(frozen=True)
class PatternResult:
    """One (pattern code, probability) pair as seen by a foreign caller."""

    pattern: int
    probability: float


@dataclass(frozen=True)
class CalcResult:
    """
    Outcome of a boundary call.

    ``success`` is False both when no pattern matched and when the engine hit
    an internal defect; ``results`` is empty in either case.
    """

    success: bool
    results: Tuple[PatternResult, ...] = field(default_factory=tuple)
