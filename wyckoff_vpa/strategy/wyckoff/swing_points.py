"""
Swing Point Detection

Finds local swing highs and lows used as quarter points for Fibonacci
confluence. A candle is a swing high when its high is the highest of the
neighbourhood ``[i - radius, i + radius)`` and a swing low when its low is the
lowest of that neighbourhood.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional
import pandas as pd
from loguru import logger


@dataclass(frozen=True)
class SwingPoint:
    """A swing high or low."""
    price: float
    timestamp: Optional[datetime]
    is_high: bool
    index: int  # Bar index in the window

    def __repr__(self):
        kind = "SH" if self.is_high else "SL"
        return f"{kind} @ {self.price:.5f} (bar {self.index})"


@dataclass(frozen=True)
class SwingPoints:
    """Earliest swing highs and lows of a window, chronological."""
    highs: List[SwingPoint] = field(default_factory=list)
    lows: List[SwingPoint] = field(default_factory=list)

    @property
    def high_prices(self) -> List[float]:
        return [sp.price for sp in self.highs]

    @property
    def low_prices(self) -> List[float]:
        return [sp.price for sp in self.lows]


def detect_swing_points(
    df: pd.DataFrame,
    radius: int = 5,
    max_swings: int = 3,
) -> SwingPoints:
    """
    Detect the first ``max_swings`` swing highs and swing lows.

    Only bars with at least ``radius`` candles on each side are eligible.
    The neighbourhood is ``radius`` bars before the candidate and
    ``radius - 1`` bars after it (10 candles for the default radius).

    Args:
        df: OHLCV DataFrame
        radius: Candles on each side of a candidate
        max_swings: Maximum swing highs and swing lows to keep

    Returns:
        SwingPoints with chronological highs and lows
    """
    n = len(df)
    if n < radius * 2 + 1:
        logger.debug(f"Not enough candles for swing detection (need {radius * 2 + 1}, got {n})")
        return SwingPoints()

    highs = df['high'].to_numpy()
    lows = df['low'].to_numpy()
    index = df.index

    swing_highs: List[SwingPoint] = []
    swing_lows: List[SwingPoint] = []

    for i in range(radius, n - radius):
        window_start = i - radius
        window_end = i + radius

        if len(swing_highs) < max_swings and highs[i] == highs[window_start:window_end].max():
            swing_highs.append(SwingPoint(
                price=float(highs[i]),
                timestamp=_to_datetime(index[i]),
                is_high=True,
                index=i,
            ))

        if len(swing_lows) < max_swings and lows[i] == lows[window_start:window_end].min():
            swing_lows.append(SwingPoint(
                price=float(lows[i]),
                timestamp=_to_datetime(index[i]),
                is_high=False,
                index=i,
            ))

        if len(swing_highs) >= max_swings and len(swing_lows) >= max_swings:
            break

    return SwingPoints(highs=swing_highs, lows=swing_lows)


def _to_datetime(value) -> Optional[datetime]:
    if hasattr(value, 'to_pydatetime'):
        return value.to_pydatetime()
    if isinstance(value, datetime):
        return value
    return None
