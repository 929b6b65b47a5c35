"""What happens when a phase ends.

A ``Transition`` is a closed tagged variant rather than an open class
hierarchy: every chain is wired from the same three kinds and ``after()`` is
the only dispatch point.

  SIMPLE       copy a template phase, carrying probability and length history
  CONDITIONAL  as SIMPLE, then derive the template's duration bounds from the
               lengths of the phases already taken
  TERMINATOR   end of chain; yields a sentinel phase that cannot be advanced
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING, Callable, Optional, Tuple

if TYPE_CHECKING:
    from .phase import Phase

# Maps the completed phase lengths to (min_duration, max_duration).
DurationRule = Callable[[Tuple[int, ...]], Tuple[int, int]]


class PhaseTreeError(Exception):
    """A fixed pattern chain was walked in a way it was never built for.

    Raised for defects in the chains themselves (advancing a terminator,
    inconsistent length history), never for prices that fail to match.
    """
    pass


class TransitionKind(Enum):
    SIMPLE = "simple"
    CONDITIONAL = "conditional"
    TERMINATOR = "terminator"


@dataclass(frozen=True)
class Transition:
    kind: TransitionKind
    template: Optional["Phase"] = None
    duration_rule: Optional[DurationRule] = None

    def __post_init__(self):
        if self.kind is not TransitionKind.TERMINATOR and self.template is None:
            raise PhaseTreeError(f"{self.kind.value} transition requires a template phase")
        if self.kind is TransitionKind.CONDITIONAL and self.duration_rule is None:
            raise PhaseTreeError("conditional transition requires a duration rule")


def simple(template: "Phase") -> Transition:
    return Transition(TransitionKind.SIMPLE, template)


def conditional(template: "Phase", rule: DurationRule) -> Transition:
    return Transition(TransitionKind.CONDITIONAL, template, rule)


def terminator() -> Transition:
    return Transition(TransitionKind.TERMINATOR)


def _sentinel(prev: "Phase") -> "Phase":
    # Keeps the pattern so the probability mass is still attributed correctly.
    return replace(
        prev,
        name="Terminator",
        probability=1.0,
        min_duration=0,
        max_duration=0,
        min_ratio=0.0,
        max_ratio=0.0,
        decrement=None,
        length=0,
        phase_lengths=(),
        successor=None,
    )


def after(transition: Transition, prev: "Phase", chance: float) -> "Phase":
    """Build the first node of the phase following ``prev``.

    ``chance`` is the probability of moving on at this step, already including
    the selection-bias factor for the observed price.
    """
    if transition.kind is TransitionKind.TERMINATOR:
        template = _sentinel(prev)
    else:
        template = transition.template

    lengths = prev.phase_lengths + (prev.length,)
    successor = replace(
        template,
        probability=template.probability * (prev.probability * chance),
        phase_lengths=lengths,
    )

    if transition.kind is TransitionKind.CONDITIONAL:
        min_duration, max_duration = transition.duration_rule(lengths)
        successor = replace(successor, min_duration=min_duration, max_duration=max_duration)
    return successor
