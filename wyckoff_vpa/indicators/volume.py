"""
Volume Indicators Module

Volume price analysis (VPA) helpers:
- Up / down volume split by candle direction
- Volume trend (signed up/down imbalance)
- Relative volume of the current candle
- VPA snapshot (volume ratio, spread %, up/down ratio)

FX feeds frequently carry no volume. A window whose volume sums to zero is
reported as "no volume" (None) rather than as a ratio of zero.
"""

from typing import Optional, Tuple
import pandas as pd
import logging

from wyckoff_vpa.indicators.volatility import compute_average_spread
from wyckoff_vpa.shared.models.wyckoff import VPAMetrics

logger = logging.getLogger(__name__)


def compute_up_down_volume(df: pd.DataFrame) -> Tuple[float, float]:
    """
    Sum volume of bullish (close > open) and bearish (close < open) candles.

    Doji candles (close == open) count toward neither side.

    Returns:
        (up_volume, down_volume)
    """
    if 'volume' not in df.columns:
        return 0.0, 0.0

    up_volume = float(df.loc[df['close'] > df['open'], 'volume'].sum())
    down_volume = float(df.loc[df['close'] < df['open'], 'volume'].sum())
    return up_volume, down_volume


def compute_volume_trend(df: pd.DataFrame) -> float:
    """
    Signed volume imbalance: (up - down) / (up + down + 1).

    The +1 keeps the result finite (0.0) when the window has no volume.
    """
    up_volume, down_volume = compute_up_down_volume(df)
    return (up_volume - down_volume) / (up_volume + down_volume + 1)


def has_volume(df: pd.DataFrame) -> bool:
    return 'volume' in df.columns and float(df['volume'].sum()) > 0


def compute_volume_ratio(current_volume: Optional[float], window: pd.DataFrame) -> Optional[float]:
    """
    Relative volume of the current candle against the window average.

    Args:
        current_volume: Volume of the candle being evaluated
        window: Reference window (the structure window)

    Returns:
        current / mean(window volume), or None when the window has no volume
    """
    if not has_volume(window):
        logger.debug("No volume in reference window - volume ratio unavailable")
        return None

    avg_volume = float(window['volume'].mean())
    return float(current_volume or 0.0) / avg_volume


def compute_vpa_metrics(current: pd.Series, window: pd.DataFrame) -> VPAMetrics:
    """
    Build the VPA snapshot for the current candle.

    Args:
        current: Current candle row (open, high, low, close, volume)
        window: Structure window the candle is compared against

    Returns:
        VPAMetrics
    """
    volume_ratio = compute_volume_ratio(current.get('volume', 0.0), window)

    avg_spread = compute_average_spread(window)
    current_spread = float(current['high'] - current['low'])
    spread_pct = (current_spread / avg_spread * 100) if avg_spread > 0 else 0.0

    up_volume, down_volume = compute_up_down_volume(window)
    up_down_ratio = (up_volume / down_volume) if down_volume > 0 else None

    return VPAMetrics(
        volume_ratio=volume_ratio,
        spread_pct=spread_pct,
        up_down_ratio=up_down_ratio,
    )
