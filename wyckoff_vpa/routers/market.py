"""
Market Router - pair, candle and signal endpoints.

- /api/pairs - Supported FX pairs
- /api/candles/{pair} - OHLCV candles (live or sample fallback)
- /api/signal/{pair} - Wyckoff signal for the latest window

The candle feed is injected via configure_market_router() so tests and the
API server can swap the broker adapter.
"""

from enum import Enum
from typing import Any, Dict, List, Optional
import logging

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from wyckoff_vpa.data.candle_feed import CandleFeed
from wyckoff_vpa.services.signal_service import configure_signal_service, get_signal_service
from wyckoff_vpa.shared.config.pairs import FX_PAIRS, is_supported_pair, normalize_pair

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Market Data"])


class Granularity(str, Enum):
    """Supported OANDA granularities."""
    M1 = "M1"
    M5 = "M5"
    M15 = "M15"
    M30 = "M30"
    H1 = "H1"
    H4 = "H4"
    D = "D"


class PairsResponse(BaseModel):
    pairs: List[str]


class SignalResponse(BaseModel):
    pair: str
    timeframe: str
    sample: bool
    error: Optional[str] = None
    signal: Optional[Dict[str, Any]] = None


# =============================================================================
# Dependency Injection
# =============================================================================

def configure_market_router(feed: CandleFeed) -> None:
    """Configure router with the candle feed used by all endpoints."""
    configure_signal_service(feed=feed)


def get_feed() -> CandleFeed:
    return get_signal_service().feed


def _resolve_pair(pair: str) -> str:
    normalized = normalize_pair(pair)
    if not is_supported_pair(normalized):
        raise HTTPException(status_code=404, detail=f"Unknown pair: {pair}")
    return normalized


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/api/pairs", response_model=PairsResponse)
async def list_pairs():
    """List available currency pairs."""
    return PairsResponse(pairs=FX_PAIRS)


@router.get("/api/candles/{pair}")
def get_candles(
    pair: str,
    timeframe: Granularity = Query(default=Granularity.M5),
    count: int = Query(default=100, ge=1, le=5000),
):
    """
    Get candles for a pair.

    Falls back to sample candles (``sample: true`` plus ``error``) when the
    broker is not configured or the request fails.
    """
    pair = _resolve_pair(pair)
    result = get_feed().fetch(pair, timeframe.value, count)
    return result.to_dict()


@router.get("/api/signal/{pair}", response_model=SignalResponse)
def get_signal(
    pair: str,
    timeframe: Granularity = Query(default=Granularity.M5),
    count: int = Query(default=120, ge=1, le=5000),
):
    """Derive the Wyckoff signal for the latest candle window of a pair."""
    pair = _resolve_pair(pair)
    feed_result, signal = get_signal_service().analyze_pair(pair, timeframe.value, count)
    if signal is None:
        logger.info("No signal for %s %s: %d candles", pair, timeframe.value, len(feed_result.candles))

    return SignalResponse(
        pair=pair,
        timeframe=timeframe.value,
        sample=feed_result.sample,
        error=feed_result.error,
        signal=signal.to_dict() if signal is not None else None,
    )
