"""Phase tree engine package.

Bayesian filter over the four weekly turnip price patterns. Each pattern is a
fixed chain of phases (see builder); the engine advances every live phase one
observed price at a time, pruning paths the price falsifies and splitting at
phase boundaries, then normalizes the surviving probability mass per pattern.

Library use is silent: loguru output from ``turnip_calc`` is disabled until an
application (the CLI) calls ``logger.enable("turnip_calc")``.
"""
from loguru import logger

from .catalog import PRIOR_TABLE, prior
from .phase import Phase
from .transitions import PhaseTreeError, Transition, TransitionKind
from .builder import MAX_HALF_DAYS, root_phases
from .engine import run

__all__ = [
    "PRIOR_TABLE",
    "prior",
    "Phase",
    "PhaseTreeError",
    "Transition",
    "TransitionKind",
    "MAX_HALF_DAYS",
    "root_phases",
    "run",
]

logger.disable("turnip_calc")
