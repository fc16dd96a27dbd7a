"""
Data models for OHLC(V) candles.

Candles are immutable value objects owned by the caller. The analysis
pipeline works on a pandas DataFrame view of them, built once per call.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence, Union
import pandas as pd


OHLCV_COLUMNS = ['open', 'high', 'low', 'close', 'volume']


@dataclass(frozen=True)
class Candle:
    """
    Single OHLC(V) candlestick.

    Attributes:
        timestamp: Candle open time
        open: Opening price
        high: Highest price during period
        low: Lowest price during period
        close: Closing price
        volume: Tick/trade volume, None when the source has no volume
    """
    timestamp: datetime
    open: float
    high: float
    low: float
    close: float
    volume: Optional[float] = None

    def __post_init__(self):
        """Validate OHLC relationships."""
        if self.high < self.low:
            raise ValueError(f"High ({self.high}) cannot be less than Low ({self.low})")
        if self.high < self.close or self.high < self.open:
            raise ValueError(f"High ({self.high}) must be >= Open ({self.open}) and Close ({self.close})")
        if self.low > self.close or self.low > self.open:
            raise ValueError(f"Low ({self.low}) must be <= Open ({self.open}) and Close ({self.close})")
        if self.volume is not None and self.volume < 0:
            raise ValueError(f"Volume ({self.volume}) cannot be negative")

    @property
    def is_bullish(self) -> bool:
        return self.close > self.open

    @property
    def is_bearish(self) -> bool:
        return self.close < self.open

    @property
    def spread(self) -> float:
        return self.high - self.low

    def to_dict(self) -> dict:
        return {
            'time': self.timestamp.isoformat(),
            'open': self.open,
            'high': self.high,
            'low': self.low,
            'close': self.close,
            'volume': self.volume,
        }


CandleInput = Union[Sequence[Candle], pd.DataFrame]


def candles_to_dataframe(candles: CandleInput) -> pd.DataFrame:
    """
    Build the OHLCV DataFrame used by the analysis pipeline.

    Accepts either a sequence of Candle objects or an existing DataFrame
    (returned as a copy with a float ``volume`` column). Missing volume is
    stored as 0.0.

    Returns:
        DataFrame indexed by timestamp with columns open, high, low, close, volume
    """
    if isinstance(candles, pd.DataFrame):
        df = candles.copy()
        if 'timestamp' in df.columns:
            df = df.set_index('timestamp')
        missing_cols = [col for col in OHLCV_COLUMNS[:4] if col not in df.columns]
        if missing_cols:
            raise ValueError(f"DataFrame missing required columns: {missing_cols}")
        if 'volume' not in df.columns:
            df['volume'] = 0.0
        df['volume'] = df['volume'].fillna(0.0).astype(float)
        return df[OHLCV_COLUMNS]

    if not candles:
        return pd.DataFrame(columns=OHLCV_COLUMNS, dtype=float)

    df = pd.DataFrame(
        {
            'open': [c.open for c in candles],
            'high': [c.high for c in candles],
            'low': [c.low for c in candles],
            'close': [c.close for c in candles],
            'volume': [c.volume if c.volume is not None else 0.0 for c in candles],
        },
        index=pd.Index([c.timestamp for c in candles], name='timestamp'),
    )
    return df.astype(float)


def dataframe_to_candles(df: pd.DataFrame) -> List[Candle]:
    """Convert an OHLCV DataFrame (timestamp index or column) into Candles."""
    frame = df.set_index('timestamp') if 'timestamp' in df.columns else df
    candles = []
    for ts, row in frame.iterrows():
        volume = row['volume'] if 'volume' in frame.columns and pd.notna(row['volume']) else None
        candles.append(Candle(
            timestamp=ts.to_pydatetime() if hasattr(ts, 'to_pydatetime') else ts,
            open=float(row['open']),
            high=float(row['high']),
            low=float(row['low']),
            close=float(row['close']),
            volume=float(volume) if volume is not None else None,
        ))
    return candles
