"""Phase nodes of the pattern trees.

Spelling out every node of every pattern tree would take thousands of nodes,
so one ``Phase`` value stands for a whole phase: a stretch of half-days that
share one ratio rule and one duration rule. ``children()`` advances it by one
observed (or missing) price, either staying inside the phase or handing over
to the next one through its ``Transition``.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple

from turnip_calc.core.custom_types import Pattern, Price
from .transitions import PhaseTreeError, Transition, after

# Prices are integers rounded up from a float ratio, so the interval check
# needs a little slack for floating point error.
RATIO_EPSILON = 0.0001


@dataclass(frozen=True)
class Phase:
    pattern: Pattern
    name: str
    base_price: int
    # Unnormalized mass of the path leading to this node.
    probability: float
    # Remaining half-days before the phase must / may end.
    min_duration: int
    max_duration: int
    # Valid range of price / base_price for the current half-day.
    min_ratio: float
    max_ratio: float
    # Optional (min, max) amount subtracted from the ratio range every step.
    decrement: Optional[Tuple[float, float]] = None
    length: int = 1
    # Lengths of the phases completed before this one.
    phase_lengths: Tuple[int, ...] = ()
    successor: Optional[Transition] = field(default=None, repr=False)

    def __post_init__(self):
        if self.min_duration > self.max_duration:
            raise PhaseTreeError(
                f"{self.name}: min_duration {self.min_duration} > max_duration {self.max_duration}")
        if self.min_ratio > self.max_ratio:
            raise PhaseTreeError(f"{self.name}: min_ratio {self.min_ratio} > max_ratio {self.max_ratio}")
        if self.probability < 0:
            raise PhaseTreeError(f"{self.name}: negative probability {self.probability}")

    @property
    def is_terminator(self) -> bool:
        return self.successor is None

    def ratio_bounds(self, price: int) -> Tuple[float, float]:
        """Bounds on the true ratio behind an integer price.

        The game rounds ``ratio * base_price`` up, so the ratio lies in
        ``((price - 1) / base, price / base]``.
        """
        return (price - 1) / self.base_price, price / self.base_price

    def children(self, price: Price, epsilon: float = RATIO_EPSILON) -> List["Phase"]:
        """All nodes this one can turn into after consuming ``price``.

        Returns an empty list when the price falsifies this path.
        """
        if self.is_terminator:
            raise PhaseTreeError(
                f"{self.pattern.value}: tree terminated early, cannot advance past '{self.name}'")

        if price is not None:
            low, high = self.ratio_bounds(price)
            if high + epsilon < self.min_ratio or low - epsilon > self.max_ratio:
                return []
            # A narrow range is more likely than a wide one to have produced
            # this particular price.
            chance = 1.0 / (self.max_ratio - self.min_ratio)
        else:
            chance = 1.0

        if self.min_duration > 1:
            return [self._next(price, chance)]
        if self.max_duration > 1:
            return [self._next(price, chance), self._after(chance)]
        return [self._after(chance)]

    def describe(self) -> str:
        """Single-line dump used by the engine's debug output."""
        return (
            f"{self.pattern.display_name} {self.probability:.4f} | {self.name} | "
            f"length {self.length} | remaining ({self.min_duration}, {self.max_duration}) | "
            f"previous {list(self.phase_lengths)} | "
            f"ratios ({self.min_ratio:.4f}, {self.max_ratio:.4f}) | decrement {self.decrement}"
        )

    @property
    def _at_branch(self) -> bool:
        return self.min_duration <= 1 and self.max_duration > 1

    def _next(self, price: Price, chance: float) -> "Phase":
        if self.decrement is None:
            min_ratio, max_ratio = self.min_ratio, self.max_ratio
        else:
            dec_min, dec_max = self.decrement
            if price is not None:
                # Anchor the drift on what was actually observed.
                low, high = self.ratio_bounds(price)
                min_ratio, max_ratio = low - dec_max, high - dec_min
            else:
                min_ratio, max_ratio = self.min_ratio - dec_max, self.max_ratio - dec_min

        if self._at_branch:
            chance *= (self.max_duration - 1) / self.max_duration

        return replace(
            self,
            probability=self.probability * chance,
            min_duration=self.min_duration - 1,
            max_duration=self.max_duration - 1,
            min_ratio=min_ratio,
            max_ratio=max_ratio,
            length=self.length + 1,
        )

    def _after(self, chance: float) -> "Phase":
        if self._at_branch:
            chance *= 1.0 / self.max_duration
        return after(self.successor, self, chance)
