"""
Wyckoff Structural Event Detection

Scans the most recent candle against the structure window for:
- SPRING: wick below support that closes back above it (bear trap)
- UPTHRUST: wick above resistance that closes back below it (bull trap)
- TEST_SUPPORT: bullish candle revisiting the recent 10-bar low
- TEST_RESISTANCE: bearish candle revisiting the recent 10-bar high

Spring/upthrust confidence decays with volume: a false break on light volume
is read as absorption, a false break on heavy volume as genuine supply or
demand. Events at a level that coincides with an aligned Fibonacci quarter
point receive a confluence bonus.
"""

from typing import Iterable, Optional
import pandas as pd
from loguru import logger

from wyckoff_vpa.analysis.fibonacci import is_near_level
from wyckoff_vpa.shared.config.defaults import DEFAULT_THRESHOLDS, WyckoffThresholds
from wyckoff_vpa.shared.models.wyckoff import EventType, StructuralEvent


NO_EVENT = StructuralEvent(event_type=EventType.NONE, confidence=0.0)


def trap_confidence(
    level: float,
    volume_ratio: Optional[float],
    aligned_points: Iterable[float],
    tolerance: float,
    thresholds: WyckoffThresholds = DEFAULT_THRESHOLDS,
) -> float:
    """
    Confidence for a spring or upthrust.

    max(0.5, 1 - volume_ratio / 3), plus 0.2 (capped at 1.0) when the broken
    level sits on an aligned quarter point. Without volume the floor is used.
    """
    t = thresholds
    if volume_ratio is None:
        confidence = t.trap_min_confidence
    else:
        confidence = max(t.trap_min_confidence, 1 - volume_ratio / t.trap_volume_divisor)

    if is_near_level(level, aligned_points, tolerance):
        confidence = min(1.0, confidence + t.trap_aligned_bonus)

    return confidence


def retest_confidence(
    level: float,
    aligned_points: Iterable[float],
    tolerance: float,
    thresholds: WyckoffThresholds = DEFAULT_THRESHOLDS,
) -> float:
    """Confidence for a support/resistance test: 0.7, +0.15 near an aligned point."""
    t = thresholds
    confidence = t.test_base_confidence
    if is_near_level(level, aligned_points, tolerance):
        confidence = min(1.0, confidence + t.test_aligned_bonus)
    return confidence


def detect_event(
    current: pd.Series,
    recent: pd.DataFrame,
    support: float,
    resistance: float,
    aligned_points: Iterable[float],
    volume_ratio: Optional[float],
    thresholds: Optional[WyckoffThresholds] = None,
) -> StructuralEvent:
    """
    Detect the structural event on the current candle.

    Checks run in order (spring, upthrust, test support, test resistance) and
    the first match wins.

    Args:
        current: Current candle (open, high, low, close)
        recent: The candles immediately before ``current`` (10 by default)
        support: Structure window support (lowest low)
        resistance: Structure window resistance (highest high)
        aligned_points: Aligned quarter points from the confluence analysis
        volume_ratio: Current volume / window average, None without volume
        thresholds: Rule thresholds (defaults to DEFAULT_THRESHOLDS)

    Returns:
        StructuralEvent (EventType.NONE with confidence 0 when nothing matches)
    """
    t = thresholds or DEFAULT_THRESHOLDS
    aligned = list(aligned_points)
    tolerance = (resistance - support) * t.fib_tolerance_ratio

    high = float(current['high'])
    low = float(current['low'])
    open_ = float(current['open'])
    close = float(current['close'])

    if low < support and close > support * t.spring_reclaim_factor:
        confidence = trap_confidence(support, volume_ratio, aligned, tolerance, t)
        logger.debug(f"Spring: low {low:.5f} < support {support:.5f}, close {close:.5f} reclaimed")
        return StructuralEvent(EventType.SPRING, confidence, support)

    if high > resistance and close < resistance * t.upthrust_reclaim_factor:
        confidence = trap_confidence(resistance, volume_ratio, aligned, tolerance, t)
        logger.debug(f"Upthrust: high {high:.5f} > resistance {resistance:.5f}, close {close:.5f} rejected")
        return StructuralEvent(EventType.UPTHRUST, confidence, resistance)

    if len(recent) == 0:
        return NO_EVENT

    swing_low = float(recent['low'].min())
    if low <= swing_low * t.test_support_factor and close > open_:
        confidence = retest_confidence(swing_low, aligned, tolerance, t)
        logger.debug(f"Support test at {swing_low:.5f} with bullish close")
        return StructuralEvent(EventType.TEST_SUPPORT, confidence, swing_low)

    swing_high = float(recent['high'].max())
    if high >= swing_high * t.test_resistance_factor and close < open_:
        confidence = retest_confidence(swing_high, aligned, tolerance, t)
        logger.debug(f"Resistance test at {swing_high:.5f} with bearish close")
        return StructuralEvent(EventType.TEST_RESISTANCE, confidence, swing_high)

    return NO_EVENT
