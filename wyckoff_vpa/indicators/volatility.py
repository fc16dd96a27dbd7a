"""
Volatility Indicators Module

- True Range
- ATR (Average True Range) as a simple mean of the latest true ranges
- Average candle spread

ATR here is the plain arithmetic mean over the lookback, not Wilder's
smoothing, so stop distances are reproducible from the raw candles.
"""

import pandas as pd
import logging

logger = logging.getLogger(__name__)


def compute_true_range(df: pd.DataFrame) -> pd.Series:
    """
    Compute the per-candle True Range.

    True Range is the greatest of:
    - Current High - Current Low
    - |Current High - Previous Close|
    - |Current Low - Previous Close|

    The first candle has no previous close and falls back to high - low.

    Args:
        df: DataFrame with 'high', 'low', 'close' columns

    Returns:
        pd.Series: True range per candle

    Raises:
        ValueError: If required columns are missing
    """
    required_cols = ['high', 'low', 'close']
    missing_cols = [col for col in required_cols if col not in df.columns]
    if missing_cols:
        raise ValueError(f"DataFrame missing required columns: {missing_cols}")

    prev_close = df['close'].shift()
    high_low = df['high'] - df['low']
    high_close = (df['high'] - prev_close).abs()
    low_close = (df['low'] - prev_close).abs()

    # max(axis=1) skips the NaN produced by shift() on the first row
    return pd.concat([high_low, high_close, low_close], axis=1).max(axis=1)


def compute_atr(df: pd.DataFrame, period: int = 14) -> float:
    """
    Compute ATR as the mean true range of the last ``period`` candles.

    Uses every candle available when the frame is shorter than ``period``.

    Args:
        df: DataFrame with 'high', 'low', 'close' columns
        period: ATR lookback (default 14)

    Returns:
        float: ATR value (0.0 for an empty frame)
    """
    if period <= 0:
        raise ValueError(f"ATR period must be positive, got {period}")
    if len(df) == 0:
        return 0.0

    true_range = compute_true_range(df)
    return float(true_range.iloc[-period:].mean())


def compute_average_spread(df: pd.DataFrame) -> float:
    """Mean high-low range of the frame."""
    if len(df) == 0:
        return 0.0
    return float((df['high'] - df['low']).mean())
