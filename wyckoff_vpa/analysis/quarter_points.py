"""
Quarter-Point / Fibonacci Confluence Analyzer

Quarter points are the structurally significant prices of the recent range:
the range extremes plus the earliest swing highs and lows. Confluence is
measured by how many of those points coincide with a Fibonacci level of the
same range (within 2% of the range size).
"""

from typing import List, Optional
import logging

from wyckoff_vpa.analysis.fibonacci import (
    FIB_RATIOS,
    calculate_fib_levels,
    find_aligned_points,
    grade_confluence,
)
from wyckoff_vpa.shared.config.defaults import (
    DEFAULT_THRESHOLDS,
    DEFAULT_WINDOWS,
    WindowSizes,
    WyckoffThresholds,
)
from wyckoff_vpa.shared.models.data import CandleInput, candles_to_dataframe
from wyckoff_vpa.shared.models.wyckoff import FibStrength, RangeAnalysis
from wyckoff_vpa.strategy.wyckoff.swing_points import detect_swing_points

logger = logging.getLogger(__name__)


def degenerate_range_analysis() -> RangeAnalysis:
    """Result for windows too short to analyze: unscaled ratios, no points."""
    return RangeAnalysis(
        range_high=0.0,
        range_low=0.0,
        swing_highs=[],
        swing_lows=[],
        quarterly_points=[],
        fib_levels=list(FIB_RATIOS),
        aligned_points=[],
        tolerance=0.0,
        strength=FibStrength.WEAK,
    )


def analyze_confluence(
    candles: CandleInput,
    windows: Optional[WindowSizes] = None,
    thresholds: Optional[WyckoffThresholds] = None,
) -> RangeAnalysis:
    """
    Analyze quarter-point / Fibonacci confluence of the recent range.

    Args:
        candles: Candle sequence or OHLCV DataFrame, oldest first
        windows: Window sizes (defaults to DEFAULT_WINDOWS)
        thresholds: Thresholds (defaults to DEFAULT_THRESHOLDS)

    Returns:
        RangeAnalysis; a degenerate WEAK result when fewer than
        ``windows.min_candles`` candles are supplied
    """
    windows = windows or DEFAULT_WINDOWS
    thresholds = thresholds or DEFAULT_THRESHOLDS

    df = candles_to_dataframe(candles)
    if len(df) < windows.min_candles:
        logger.debug("Confluence skipped: %d candles < %d", len(df), windows.min_candles)
        return degenerate_range_analysis()

    window = df.iloc[-windows.confluence_lookback:]

    range_high = float(window['high'].max())
    range_low = float(window['low'].min())
    range_size = range_high - range_low

    swings = detect_swing_points(
        window,
        radius=windows.swing_radius,
        max_swings=windows.max_swings,
    )

    quarterly_points: List[float] = []
    for point in [range_high, range_low] + swings.high_prices + swings.low_prices:
        if point not in quarterly_points:
            quarterly_points.append(point)

    fib_levels = calculate_fib_levels(range_low, range_high)
    tolerance = range_size * thresholds.fib_tolerance_ratio
    aligned_points = find_aligned_points(quarterly_points, fib_levels, tolerance)

    strength = grade_confluence(
        len(aligned_points),
        strong_count=thresholds.strong_aligned_count,
        moderate_count=thresholds.moderate_aligned_count,
    )

    logger.debug(
        "Confluence: range %.5f-%.5f, %d quarter points, %d aligned (%s)",
        range_low, range_high, len(quarterly_points), len(aligned_points), strength.value
    )

    return RangeAnalysis(
        range_high=range_high,
        range_low=range_low,
        swing_highs=swings.high_prices,
        swing_lows=swings.low_prices,
        quarterly_points=quarterly_points,
        fib_levels=fib_levels,
        aligned_points=aligned_points,
        tolerance=tolerance,
        strength=strength,
    )
