"""
FastAPI server for the Wyckoff + VPA signal engine.

Provides REST API endpoints for the dashboard UI.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from wyckoff_vpa import __version__
from wyckoff_vpa.data.adapters.oanda import OandaAdapter
from wyckoff_vpa.data.candle_feed import CandleFeed
from wyckoff_vpa.routers.market import configure_market_router, get_feed, router as market_router

logger = logging.getLogger(__name__)


def create_app(feed: CandleFeed = None) -> FastAPI:
    """
    Build the API application.

    Args:
        feed: Candle feed to serve from (defaults to OANDA from env, else samples)
    """
    app = FastAPI(title="Wyckoff + VPA Trading System", version=__version__)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    if feed is None:
        feed = CandleFeed(OandaAdapter.from_env())
    configure_market_router(feed)
    logger.info("Candle feed configured (live=%s)", feed.is_live)

    @app.get("/api/health")
    async def health():
        """Health check with broker configuration status."""
        return {"status": "ok", "oandaConfigured": get_feed().is_live}

    app.include_router(market_router)
    return app


app = create_app()
