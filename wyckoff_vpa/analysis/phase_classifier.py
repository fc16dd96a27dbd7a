"""
Wyckoff Phase Classifier

Labels the market regime of a structure window from three metrics:
- compression: how small the average candle is relative to the whole range
- price position: where the last close sits inside the range (0 = support)
- volume trend: signed imbalance between up-candle and down-candle volume

Rules are checked in order and the first match wins:
    ACCUMULATION  compressed, selling volume, near support
    DISTRIBUTION  compressed, buying volume, near resistance
    MARKUP        buying volume, upper half of the range
    MARKDOWN      selling volume, lower half of the range
    RANGE         anything else
"""

from typing import Optional
import logging
import pandas as pd

from wyckoff_vpa.indicators.volatility import compute_average_spread
from wyckoff_vpa.indicators.volume import compute_volume_trend
from wyckoff_vpa.shared.config.defaults import (
    DEFAULT_THRESHOLDS,
    DEFAULT_WINDOWS,
    WindowSizes,
    WyckoffThresholds,
)
from wyckoff_vpa.shared.models.wyckoff import PhaseState, WyckoffPhase

logger = logging.getLogger(__name__)


def compute_compression(
    window: pd.DataFrame,
    epsilon: float = DEFAULT_THRESHOLDS.epsilon,
    lookback: int = DEFAULT_WINDOWS.structure_lookback,
) -> float:
    """
    1 - (avg candle range * lookback) / (resistance - support + eps).

    Positive and approaching 1 when the market has coiled into small candles
    spread across a wider range. The multiplier is the configured structure
    lookback, so a short window is scored as if it were a full one.
    """
    support = float(window['low'].min())
    resistance = float(window['high'].max())
    avg_range = compute_average_spread(window)
    return 1 - (avg_range * lookback / (resistance - support + epsilon))


def compute_price_position(window: pd.DataFrame, epsilon: float = DEFAULT_THRESHOLDS.epsilon) -> float:
    """Position of the last close within [support, resistance], roughly 0..1."""
    support = float(window['low'].min())
    resistance = float(window['high'].max())
    last_close = float(window['close'].iloc[-1])
    return (last_close - support) / (resistance - support + epsilon)


def classify_phase(
    window: pd.DataFrame,
    thresholds: Optional[WyckoffThresholds] = None,
    windows: Optional[WindowSizes] = None,
) -> PhaseState:
    """
    Classify the Wyckoff phase of a structure window.

    Args:
        window: OHLCV DataFrame (normally the 50 candles before the current one)
        thresholds: Rule thresholds (defaults to DEFAULT_THRESHOLDS)
        windows: Window sizes; structure_lookback scales compression

    Returns:
        PhaseState with phase, confidence and the metrics behind it

    Raises:
        ValueError: If the window is empty
    """
    t = thresholds or DEFAULT_THRESHOLDS
    w = windows or DEFAULT_WINDOWS

    if len(window) == 0:
        raise ValueError("Cannot classify phase of an empty window")

    support = float(window['low'].min())
    resistance = float(window['high'].max())
    compression = compute_compression(window, t.epsilon, w.structure_lookback)
    price_position = compute_price_position(window, t.epsilon)
    volume_trend = compute_volume_trend(window)

    if (compression > t.compression_min
            and volume_trend < -t.range_volume_trend
            and price_position < t.accumulation_max_position):
        phase, confidence = WyckoffPhase.ACCUMULATION, t.range_phase_confidence
    elif (compression > t.compression_min
            and volume_trend > t.range_volume_trend
            and price_position > t.distribution_min_position):
        phase, confidence = WyckoffPhase.DISTRIBUTION, t.range_phase_confidence
    elif volume_trend > t.trend_volume_trend and price_position > t.trend_position_pivot:
        phase, confidence = WyckoffPhase.MARKUP, t.trend_phase_confidence
    elif volume_trend < -t.trend_volume_trend and price_position < t.trend_position_pivot:
        phase, confidence = WyckoffPhase.MARKDOWN, t.trend_phase_confidence
    else:
        phase, confidence = WyckoffPhase.RANGE, t.neutral_phase_confidence

    logger.debug(
        "Phase: %s (%.2f) - compression=%.3f, position=%.3f, volume_trend=%.3f",
        phase.value, confidence, compression, price_position, volume_trend
    )

    return PhaseState(
        phase=phase,
        confidence=confidence,
        support=support,
        resistance=resistance,
        compression=compression,
        price_position=price_position,
        volume_trend=volume_trend,
    )
