"""
Candle feed with sample fallback.

Wraps a broker adapter so callers always receive a usable candle window:
live candles when the adapter works, synthetic samples (flagged as such)
when credentials are missing or the broker call fails.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from loguru import logger

from wyckoff_vpa.data.adapters.mocks import generate_sample_candles
from wyckoff_vpa.shared.config.pairs import normalize_pair
from wyckoff_vpa.shared.models.data import Candle


CREDENTIALS_MISSING = "OANDA credentials not configured"

# Sample candle spacing per OANDA granularity, in minutes
GRANULARITY_MINUTES = {
    'M1': 1, 'M5': 5, 'M15': 15, 'M30': 30,
    'H1': 60, 'H4': 240, 'D': 1440, 'W': 10080,
}


@dataclass
class FeedResult:
    """Candles returned by the feed plus their provenance."""
    pair: str
    timeframe: str
    candles: List[Candle] = field(default_factory=list)
    sample: bool = False
    error: Optional[str] = None

    def to_dict(self) -> dict:
        result = {
            'pair': self.pair,
            'timeframe': self.timeframe,
            'count': len(self.candles),
            'data': [c.to_dict() for c in self.candles],
            'sample': self.sample,
        }
        if self.error:
            result['error'] = self.error
        return result


class CandleFeed:
    """
    Fetches candles from a broker adapter, falling back to samples.

    Usage:
        feed = CandleFeed(OandaAdapter.from_env())
        result = feed.fetch("EUR_USD", "M5", 100)
    """

    def __init__(self, adapter=None, sample_seed: Optional[int] = None):
        """
        Args:
            adapter: Object with fetch_candles(pair, granularity, count), or None
            sample_seed: Seed for fallback samples (None = random)
        """
        self.adapter = adapter
        self.sample_seed = sample_seed

    @property
    def is_live(self) -> bool:
        return self.adapter is not None

    def fetch(self, pair: str, timeframe: str = 'M5', count: int = 100) -> FeedResult:
        """
        Fetch candles for a pair, never raising for broker failures.

        Args:
            pair: Currency pair
            timeframe: OANDA granularity label
            count: Candles requested

        Returns:
            FeedResult; ``sample`` is True and ``error`` set when samples were used
        """
        pair = normalize_pair(pair)
        timeframe = timeframe.upper()

        if self.adapter is None:
            return self._sample(pair, timeframe, count, CREDENTIALS_MISSING)

        try:
            candles = self.adapter.fetch_candles(pair, timeframe, count)
        except Exception as e:
            logger.warning(f"Candle fetch failed for {pair} {timeframe}, using samples: {e}")
            return self._sample(pair, timeframe, count, str(e))

        return FeedResult(pair=pair, timeframe=timeframe, candles=candles, sample=False)

    def _sample(self, pair: str, timeframe: str, count: int, error: str) -> FeedResult:
        candles = generate_sample_candles(
            pair,
            count,
            interval_minutes=GRANULARITY_MINUTES.get(timeframe, 5),
            seed=self.sample_seed,
        )
        logger.debug(f"Generated {len(candles)} sample candles for {pair} {timeframe}")
        return FeedResult(pair=pair, timeframe=timeframe, candles=candles, sample=True, error=error)
