"""Phase tree walker.

Runs every live phase of every pattern tree forward one price at a time and
turns the surviving leaves into a posterior over patterns.

  roots = builder.root_phases(base_price, previous)
  for price in prices:                 # None for a missed half-day
      phases = step(phases, price)     # prune + branch, never mutate
  aggregate(phases) -> [(Pattern, probability), ...]  normalized, descending

An empty result means no pattern is consistent with the inputs. Defects in the
chains themselves surface as ``PhaseTreeError`` and are not turned into an
empty result here.
"""
from __future__ import annotations

import math
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from loguru import logger

from turnip_calc.core.config import DEFAULT_SETTINGS, Settings
from turnip_calc.core.custom_types import Pattern, Price
from .builder import root_phases
from .phase import RATIO_EPSILON, Phase


def step(phases: Iterable[Phase], price: Price, epsilon: float = RATIO_EPSILON) -> List[Phase]:
    """Next generation of phases after consuming one price."""
    out: List[Phase] = []
    for phase in phases:
        out.extend(phase.children(price, epsilon))
    return out


def aggregate(phases: Iterable[Phase]) -> List[Tuple[Pattern, float]]:
    """Normalized probability per pattern, most likely first.

    Sums use ``math.fsum`` so the result does not depend on the order in which
    children were generated. Ties keep first-encounter order.
    """
    masses: Dict[Pattern, List[float]] = {}
    for phase in phases:
        masses.setdefault(phase.pattern, []).append(phase.probability)

    totals = [(pattern, math.fsum(values)) for pattern, values in masses.items()]
    grand_total = math.fsum(total for _, total in totals)
    if grand_total > 0:
        totals = [(pattern, total / grand_total) for pattern, total in totals]

    totals.sort(key=lambda item: item[1], reverse=True)
    return totals


def _dump(label: str, phases: Sequence[Phase]) -> None:
    logger.debug(f"{label}: {len(phases)} live phase(s)")
    for phase in phases:
        logger.debug(f"  {phase.describe()}")


def run(previous: Optional[Pattern], base_price: int, prices: Sequence[Price],
        debug: bool = False, settings: Optional[Settings] = None) -> List[Tuple[Pattern, float]]:
    """Posterior probability of each pattern given the observed prices.

    Args:
        previous: Last week's pattern, or None if unknown.
        base_price: The Sunday buying price.
        prices: Observed sell prices in half-day order; None marks a gap.
        debug: Dump every generation of live phases at DEBUG level.
        settings: Engine bounds and tolerances; defaults apply when omitted.

    Returns:
        (pattern, probability) pairs summing to 1, sorted descending, or an
        empty list when no pattern fits.

    Raises:
        PhaseTreeError: If the chains are walked past their end (more prices
            than half-days in a week) or are otherwise inconsistent.
    """
    settings = settings or DEFAULT_SETTINGS
    debug = debug or settings.logging.debug_dumps
    epsilon = settings.engine.ratio_epsilon

    phases = root_phases(base_price, previous, settings)
    if not phases:
        logger.debug(f"run.invalid_base_price base_price={base_price}")
        return []
    if debug:
        _dump("roots", phases)

    for index, price in enumerate(prices):
        phases = step(phases, price, epsilon)
        if debug:
            _dump(f"after price #{index + 1} ({price if price is not None else '?'})", phases)
        if not phases:
            logger.debug(f"run.exhausted at price #{index + 1} of {len(prices)}")
            break

    results = aggregate(phases)
    logger.debug(
        f"run.complete previous={previous.value if previous else None} base_price={base_price} "
        f"observations={len(prices)} results="
        + ", ".join(f"{p.value}={prob:.4f}" for p, prob in results)
    )
    return results
