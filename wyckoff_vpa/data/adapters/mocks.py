"""
Synthetic FX candle generator.

Produces a random-walk series around each pair's base price. Used as the
fallback when no broker connection is configured or the broker call fails,
and as deterministic test data when a seed is supplied.
"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional
import numpy as np

from wyckoff_vpa.shared.config.pairs import get_base_price, normalize_pair, price_decimals
from wyckoff_vpa.shared.models.data import Candle


JPY_VOLATILITY = 0.3
DEFAULT_VOLATILITY = 0.0015
WICK_FRACTION = 0.2


def generate_sample_candles(
    pair: str,
    count: int = 100,
    interval_minutes: int = 5,
    end: Optional[datetime] = None,
    seed: Optional[int] = None,
) -> List[Candle]:
    """
    Generate ``count + 1`` synthetic candles ending at ``end``.

    Each candle moves by a uniform random step of +/- volatility / 2, with wicks
    of up to 20% of volatility and volume between 100 and 1099. Prices are
    rounded to the pair's quote precision.

    Args:
        pair: Currency pair (e.g. 'EUR_USD')
        count: Number of candles requested (one extra is returned)
        interval_minutes: Candle spacing
        end: Timestamp of the last candle (defaults to now, UTC)
        seed: Random seed for reproducibility

    Returns:
        List of Candle, oldest first
    """
    if count < 0:
        raise ValueError(f"count must be non-negative, got {count}")

    pair = normalize_pair(pair)
    rng = np.random.default_rng(seed)
    decimals = price_decimals(pair)
    volatility = JPY_VOLATILITY if 'JPY' in pair else DEFAULT_VOLATILITY
    end = end or datetime.now(timezone.utc).replace(second=0, microsecond=0)

    candles = []
    price = get_base_price(pair)

    for i in range(count, -1, -1):
        change = (rng.random() - 0.5) * volatility
        open_price = price
        close_price = price + change
        high = max(open_price, close_price) + rng.random() * volatility * WICK_FRACTION
        low = min(open_price, close_price) - rng.random() * volatility * WICK_FRACTION

        candles.append(Candle(
            timestamp=end - timedelta(minutes=i * interval_minutes),
            open=round(open_price, decimals),
            high=round(high, decimals),
            low=round(low, decimals),
            close=round(close_price, decimals),
            volume=float(rng.integers(100, 1100)),
        ))

        price = close_price

    return candles
