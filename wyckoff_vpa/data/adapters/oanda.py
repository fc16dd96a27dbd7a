"""
OANDA v3 REST adapter for fetching FX candles.

Reads mid-price candles for an instrument and granularity. Credentials come
from the environment (OANDA_API_KEY / OANDA_ACCOUNT_ID); nothing is stored.
"""

import os
from typing import Any, Dict, List, Optional

import pandas as pd
import requests
from loguru import logger

from wyckoff_vpa.data.adapters.retry import RateLimitError, retry_on_rate_limit
from wyckoff_vpa.shared.config.pairs import normalize_pair
from wyckoff_vpa.shared.models.data import Candle


PRACTICE_URL = "https://api-fxpractice.oanda.com/v3"
LIVE_URL = "https://api-fxtrade.oanda.com/v3"

GRANULARITIES = ('S5', 'M1', 'M5', 'M15', 'M30', 'H1', 'H4', 'D', 'W', 'M')
MAX_COUNT = 5000


class OandaAPIError(Exception):
    """Raised when OANDA returns a non-success response."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"OANDA API error: {status_code} {message}".strip())
        self.status_code = status_code


class OandaAdapter:
    """
    Adapter for the OANDA v20 REST API using requests.
    """

    def __init__(
        self,
        api_key: str,
        account_id: str,
        practice: bool = True,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the OANDA connection.

        Args:
            api_key: Personal access token
            account_id: OANDA account id
            practice: Use the fxPractice host instead of fxTrade
            timeout: Request timeout in seconds
            session: Optional requests session (shared connection pool)
        """
        if not api_key or not account_id:
            raise ValueError("OANDA api_key and account_id are required")

        self.account_id = account_id
        self.base_url = PRACTICE_URL if practice else LIVE_URL
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            'Authorization': f'Bearer {api_key}',
            'Content-Type': 'application/json',
        })

        mode = "PRACTICE" if practice else "LIVE"
        logger.info(f"OANDA adapter initialized in {mode} mode")

    @classmethod
    def from_env(cls) -> Optional['OandaAdapter']:
        """
        Build an adapter from OANDA_API_KEY / OANDA_ACCOUNT_ID.

        Returns:
            OandaAdapter, or None when credentials are not configured
        """
        api_key = os.getenv('OANDA_API_KEY')
        account_id = os.getenv('OANDA_ACCOUNT_ID')
        if not api_key or not account_id:
            return None
        practice = os.getenv('OANDA_PRACTICE', '1').lower() not in ('0', 'false', 'no')
        return cls(api_key=api_key, account_id=account_id, practice=practice)

    @retry_on_rate_limit(max_retries=3)
    def fetch_candles(self, pair: str, granularity: str = 'M5', count: int = 100) -> List[Candle]:
        """
        Fetch mid-price candles.

        Args:
            pair: Instrument (e.g. 'EUR_USD')
            granularity: OANDA granularity (e.g. 'M5', 'H1', 'D')
            count: Number of candles (1..5000)

        Returns:
            List of Candle, oldest first

        Raises:
            ValueError: For an unknown granularity or out-of-range count
            RateLimitError: On HTTP 429 (retried by the decorator)
            OandaAPIError: On any other non-2xx response
        """
        granularity = granularity.upper()
        if granularity not in GRANULARITIES:
            raise ValueError(f"Unsupported granularity: {granularity}")
        if not 1 <= count <= MAX_COUNT:
            raise ValueError(f"count must be between 1 and {MAX_COUNT}, got {count}")

        instrument = normalize_pair(pair)
        response = self.session.get(
            f"{self.base_url}/instruments/{instrument}/candles",
            params={'granularity': granularity, 'count': count, 'price': 'M'},
            timeout=self.timeout,
        )

        if response.status_code == 429:
            raise RateLimitError(f"OANDA rate limit for {instrument}")
        if not response.ok:
            raise OandaAPIError(response.status_code, response.reason or "")

        payload = response.json()
        candles = [self._parse_candle(raw) for raw in payload.get('candles', [])]
        logger.debug(f"Fetched {len(candles)} {granularity} candles for {instrument}")
        return candles

    @staticmethod
    def _parse_candle(raw: Dict[str, Any]) -> Candle:
        mid = raw['mid']
        timestamp = pd.Timestamp(raw['time'])
        if timestamp.tzinfo is None:
            timestamp = timestamp.tz_localize('UTC')
        return Candle(
            timestamp=timestamp.to_pydatetime(),
            open=float(mid['o']),
            high=float(mid['h']),
            low=float(mid['l']),
            close=float(mid['c']),
            volume=float(raw['volume']) if raw.get('volume') is not None else None,
        )
