"""Small example walking a week of turnip prices through the engine.

Run:
  python examples/example_calc.py

Feeds a large spike week in one price at a time and prints how the posterior
over patterns sharpens as each half-day is observed.
"""
from turnip_calc.apps.binding import calculate
from turnip_calc.core.custom_types import Pattern
from turnip_calc.patterns.engine import run

BASE_PRICE = 104
WEEK = [90, 86, None, 165, 455, 147, 143, 57, 53, 43, 94, 42]


def main():
    for seen in range(len(WEEK) + 1):
        results = run(Pattern.DECREASING, BASE_PRICE, WEEK[:seen])
        summary = ", ".join(f"{p.display_name}={prob:.1%}" for p, prob in results)
        print(f"{seen:2d} price(s): {summary or 'no match'}")

    # Same week through the flat boundary: 0 marks the missed price.
    flat = calculate(Pattern.DECREASING.code, BASE_PRICE, [p or 0 for p in WEEK])
    print(f"binding success={flat.success} results={flat.results}")


if __name__ == '__main__':
    main()
