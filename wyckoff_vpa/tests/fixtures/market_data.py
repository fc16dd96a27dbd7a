"""
Reusable market data fixtures for testing.

Builds deterministic EUR_USD-style candle windows for each Wyckoff scenario:

- Accumulation: 50-candle structure window coiled between 1.0800 and 1.0900,
  heavier down-volume, last close near support.
- Distribution: the accumulation window mirrored around 1.0850.
- A final candle that springs below support (or upthrusts above resistance)
  and closes back inside the range.

Layout of every scenario (oldest first):
    9 lead candles | 50 structure candles | 1 current candle
"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional

import pandas as pd

from wyckoff_vpa.shared.models.data import Candle


START = datetime(2024, 1, 1, tzinfo=timezone.utc)
INTERVAL = timedelta(minutes=5)

SUPPORT = 1.0800
RESISTANCE = 1.0900
MIRROR_AXIS = 1.0850

LEAD_CANDLES = 9
STRUCTURE_CANDLES = 50

UP_VOLUME = 500.0
DOWN_VOLUME = 1500.0
# 25 up candles at 500 and 25 down candles at 1500
STRUCTURE_AVG_VOLUME = 1000.0

BODY = 0.00002
WICK = 0.00003


def _timestamp(i: int) -> datetime:
    return START + INTERVAL * i


def make_candle(
    i: int,
    center: float,
    bullish: bool,
    volume: Optional[float],
) -> Candle:
    """Small candle with a 4-pip body and 6-pip range around ``center``."""
    center = round(center, 5)
    open_price = center - BODY if bullish else center + BODY
    close_price = center + BODY if bullish else center - BODY
    return Candle(
        timestamp=_timestamp(i),
        open=round(open_price, 5),
        high=round(center + WICK, 5),
        low=round(center - WICK, 5),
        close=round(close_price, 5),
        volume=volume,
    )


def _structure_center(k: int) -> float:
    """Path of the structure window: resistance touch, drift down, support touch."""
    if k == 0:
        return RESISTANCE - WICK
    if k == 45:
        return SUPPORT + WICK
    # 1.0890 at k=1 down to 1.0812 at k=49
    return 1.0890 - (k - 1) * (0.0078 / 48)


def accumulation_history(with_volume: bool = True) -> List[Candle]:
    """Lead candles plus the accumulation structure window (59 candles)."""
    candles = []
    for i in range(LEAD_CANDLES):
        candles.append(make_candle(i, 1.0885, i % 2 == 1, 1000.0 if with_volume else None))

    for k in range(STRUCTURE_CANDLES):
        bullish = k % 2 == 1
        volume = (UP_VOLUME if bullish else DOWN_VOLUME) if with_volume else None
        candles.append(make_candle(LEAD_CANDLES + k, _structure_center(k), bullish, volume))

    return candles


def spring_candle(volume: Optional[float] = 800.0) -> Candle:
    """Wick to 1.0795 under support, close back at 1.0850."""
    return Candle(
        timestamp=_timestamp(LEAD_CANDLES + STRUCTURE_CANDLES),
        open=1.0812,
        high=1.0852,
        low=1.0795,
        close=1.0850,
        volume=volume,
    )


def mirror_candle(candle: Candle, axis: float = MIRROR_AXIS) -> Candle:
    """Reflect a candle around ``axis`` (highs become lows, up becomes down)."""
    return Candle(
        timestamp=candle.timestamp,
        open=round(2 * axis - candle.open, 5),
        high=round(2 * axis - candle.low, 5),
        low=round(2 * axis - candle.high, 5),
        close=round(2 * axis - candle.close, 5),
        volume=candle.volume,
    )


def spring_scenario(volume: Optional[float] = 800.0) -> List[Candle]:
    """Accumulation window followed by a spring (BUY setup at volume < 1.5x)."""
    return accumulation_history() + [spring_candle(volume)]


def upthrust_scenario(volume: Optional[float] = 800.0) -> List[Candle]:
    """
    Distribution window followed by an upthrust.

    Mirror of spring_scenario: the final candle wicks to 1.0905 above
    resistance and closes at 1.0850.
    """
    return [mirror_candle(c) for c in spring_scenario(volume)]


QUIET_CANDLES = 14


def quiet_spring_scenario() -> List[Candle]:
    """
    Spring that closes under support after a flat stretch.

    The last 14 structure candles sit flat on 1.0800, so the 14-candle ATR
    comes only from the current candle (0.0005 / 14). The close at 1.0795
    is inside the 0.1% reclaim band, and the target lands between entry and
    the 1.0800 stop.
    """
    candles = accumulation_history()[:LEAD_CANDLES + STRUCTURE_CANDLES - QUIET_CANDLES]
    for k in range(STRUCTURE_CANDLES - QUIET_CANDLES, STRUCTURE_CANDLES):
        candles.append(Candle(
            timestamp=_timestamp(LEAD_CANDLES + k),
            open=SUPPORT, high=SUPPORT, low=SUPPORT, close=SUPPORT,
            volume=STRUCTURE_AVG_VOLUME,
        ))
    candles.append(Candle(
        timestamp=_timestamp(LEAD_CANDLES + STRUCTURE_CANDLES),
        open=SUPPORT,
        high=SUPPORT,
        low=1.0795,
        close=1.0795,
        volume=800.0,
    ))
    return candles


def quiet_upthrust_scenario() -> List[Candle]:
    """Mirror of quiet_spring_scenario: closes at 1.0905 over 1.0900 resistance."""
    return [mirror_candle(c) for c in quiet_spring_scenario()]


def no_volume_spring_scenario() -> List[Candle]:
    """Spring scenario from a feed without volume."""
    return accumulation_history(with_volume=False) + [spring_candle(volume=None)]


def flat_candles(n: int = 60, price: float = 1.0850) -> List[Candle]:
    """Identical candles: zero range, zero true range, doji bodies."""
    return [
        Candle(timestamp=_timestamp(i), open=price, high=price, low=price, close=price, volume=1000.0)
        for i in range(n)
    ]


def to_dataframe(candles: List[Candle]) -> pd.DataFrame:
    """OHLCV DataFrame indexed by timestamp."""
    return pd.DataFrame(
        {
            'open': [c.open for c in candles],
            'high': [c.high for c in candles],
            'low': [c.low for c in candles],
            'close': [c.close for c in candles],
            'volume': [c.volume if c.volume is not None else 0.0 for c in candles],
        },
        index=pd.Index([c.timestamp for c in candles], name='timestamp'),
    )


def invert_prices(df: pd.DataFrame) -> pd.DataFrame:
    """Negate every price; highs become lows. Volume is unchanged."""
    return df.assign(
        open=-df['open'],
        high=-df['low'],
        low=-df['high'],
        close=-df['close'],
    )


def make_ohlcv_df(rows: List[tuple]) -> pd.DataFrame:
    """DataFrame from (open, high, low, close, volume) tuples, 5-minute spacing."""
    return pd.DataFrame(
        rows,
        columns=['open', 'high', 'low', 'close', 'volume'],
        index=pd.date_range(start=START, periods=len(rows), freq='5min'),
    )
