"""Flat-argument entry point for foreign callers (JNI/ctypes style shims).

Everything crossing this boundary is a plain integer or float:
  - previous pattern as a code (1..4); any other value means unknown
  - prices as integers; 0 marks a missed half-day
  - results as CalcResult(success, ((code, probability), ...))

Nothing raised by the engine is allowed to escape into the host: defects are
logged and reported as ``success=False``, the same shape as "no pattern
matched".
"""
from typing import Optional, Sequence

from loguru import logger

from turnip_calc.core.config import Settings
from turnip_calc.core.custom_types import CalcResult, Pattern, PatternResult
from turnip_calc.patterns.engine import run

MISSING_PRICE = 0

_FAILURE = CalcResult(success=False, results=())


def calculate(prev_code: int, base_price: int, prices: Sequence[int],
              settings: Optional[Settings] = None) -> CalcResult:
    previous = Pattern.from_code(prev_code)

    try:
        observed = [None if price == MISSING_PRICE else int(price) for price in prices]
        results = run(previous, int(base_price), observed, settings=settings)
    except Exception:
        logger.exception(
            f"binding.calculate failed prev_code={prev_code} base_price={base_price} prices={list(prices)}")
        return _FAILURE

    if not results:
        return _FAILURE
    return CalcResult(
        success=True,
        results=tuple(PatternResult(pattern.code, probability) for pattern, probability in results),
    )
