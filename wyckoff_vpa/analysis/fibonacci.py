"""Fibonacci Level Calculator

Maps the canonical retracement and extension ratios onto a trading range and
checks which structural price points sit on (or very near) those levels.

Levels are measured up from the range low:
    level = range_low + (range_high - range_low) * ratio

so ratio 0 is the range low, ratio 1 is the range high, and 1.618 / 2.618 are
extensions above the range.
"""

from typing import Iterable, List, Optional, Sequence

from wyckoff_vpa.shared.models.wyckoff import FibStrength

# Canonical ratios, in output order
FIB_RATIOS: List[float] = [0.0, 0.236, 0.382, 0.5, 0.618, 0.786, 1.0, 1.618, 2.618]

FIB_RATIO_NAMES: List[str] = [
    "fib_0", "fib_236", "fib_382", "fib_500", "fib_618",
    "fib_786", "fib_1000", "fib_1618", "fib_2618",
]


def calculate_fib_levels(
    range_low: float,
    range_high: float,
    ratios: Optional[Sequence[float]] = None,
) -> List[float]:
    """
    Calculate Fibonacci levels over a range.

    Ratio 0 and ratio 1 return the range extremes exactly so that
    ``levels[0] == range_low`` and ``levels[6] == range_high`` hold without
    floating point drift.

    Args:
        range_low: Lowest low of the range
        range_high: Highest high of the range
        ratios: Optional custom ratios (defaults to FIB_RATIOS)

    Returns:
        List of levels in ratio order (non-decreasing for range_high >= range_low)
    """
    ratios = FIB_RATIOS if ratios is None else ratios
    range_size = range_high - range_low
    levels = []

    for ratio in ratios:
        if ratio == 0.0:
            levels.append(range_low)
        elif ratio == 1.0:
            levels.append(range_high)
        else:
            levels.append(range_low + range_size * ratio)

    return levels


def is_near_level(price: float, levels: Iterable[float], tolerance: float) -> bool:
    """
    True when ``price`` is strictly within ``tolerance`` of any level.

    Strict comparison means a zero tolerance (flat range) never matches.
    """
    return any(abs(price - level) < tolerance for level in levels)


def find_aligned_points(
    points: Iterable[float],
    fib_levels: Sequence[float],
    tolerance: float,
) -> List[float]:
    """
    Return the points lying within tolerance of a Fibonacci level.

    Args:
        points: Structural points (range extremes, swing highs/lows)
        fib_levels: Levels from calculate_fib_levels
        tolerance: Maximum absolute distance (exclusive)

    Returns:
        Deduplicated aligned points in input order
    """
    aligned: List[float] = []
    for point in points:
        if point in aligned:
            continue
        if is_near_level(point, fib_levels, tolerance):
            aligned.append(point)
    return aligned


def grade_confluence(aligned_count: int, strong_count: int = 3, moderate_count: int = 2) -> FibStrength:
    """Grade confluence from the number of distinct aligned points."""
    if aligned_count >= strong_count:
        return FibStrength.STRONG
    if aligned_count == moderate_count:
        return FibStrength.MODERATE
    return FibStrength.WEAK


def find_nearest_fib(price: float, fib_levels: Sequence[float]) -> Optional[float]:
    """
    Find the level closest to ``price``.

    Returns:
        Nearest level or None if no levels
    """
    if not fib_levels:
        return None

    return min(fib_levels, key=lambda level: abs(level - price))
