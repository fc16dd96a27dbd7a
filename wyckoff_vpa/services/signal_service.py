"""
Signal Service - runs the Wyckoff signal pipeline for one candle window.

Pipeline (each stage a pure function of its inputs):
    candles → confluence analysis → phase classification
            → event detection → signal synthesis → output policy

Window layout for a call with N >= 50 candles (oldest first):
    current   = candle N-1
    structure = the 50 candles before current (support, resistance, phase, volume average)
    recent    = the 10 candles before current (test levels)
    confluence= the last 100 candles including current
"""

from typing import Optional

from loguru import logger

from wyckoff_vpa.analysis.phase_classifier import classify_phase
from wyckoff_vpa.analysis.quarter_points import analyze_confluence
from wyckoff_vpa.data.candle_feed import CandleFeed, FeedResult
from wyckoff_vpa.indicators.validation_utils import validate_ohlcv
from wyckoff_vpa.indicators.volatility import compute_atr
from wyckoff_vpa.indicators.volume import compute_vpa_metrics
from wyckoff_vpa.shared.config.defaults import (
    DEFAULT_THRESHOLDS,
    DEFAULT_WINDOWS,
    WindowSizes,
    WyckoffThresholds,
)
from wyckoff_vpa.shared.config.pairs import normalize_pair
from wyckoff_vpa.shared.models.data import CandleInput, candles_to_dataframe
from wyckoff_vpa.shared.models.wyckoff import TradeSignal
from wyckoff_vpa.shared.utils.error_policy import enforce_complete_signal
from wyckoff_vpa.shared.utils.logging_utils import (
    log_pipeline_stage,
    log_rejection,
    time_operation,
)
from wyckoff_vpa.strategy.planner.signal_planner import synthesize_signal
from wyckoff_vpa.strategy.wyckoff.events import detect_event


def derive_signal(
    pair: str,
    candles: CandleInput,
    timeframe: str,
    thresholds: Optional[WyckoffThresholds] = None,
    windows: Optional[WindowSizes] = None,
) -> Optional[TradeSignal]:
    """
    Derive a trade signal from a single-timeframe candle window.

    Args:
        pair: Currency pair (label only)
        candles: Candle sequence or OHLCV DataFrame, oldest first
        timeframe: Timeframe label used in the rationale
        thresholds: Rule thresholds (defaults to DEFAULT_THRESHOLDS)
        windows: Window sizes (defaults to DEFAULT_WINDOWS)

    Returns:
        TradeSignal, or None when fewer than ``windows.min_candles`` candles

    Raises:
        DataValidationError: If candles contain NaN, non-positive or inverted prices
    """
    thresholds = thresholds or DEFAULT_THRESHOLDS
    windows = windows or DEFAULT_WINDOWS

    df = candles_to_dataframe(candles)

    if len(df) < windows.min_candles:
        log_rejection(
            pair,
            "INPUT",
            f"Insufficient data: {len(df)} candles < {windows.min_candles}",
            level="DEBUG",
        )
        return None

    validate_ohlcv(df, require_volume=False)

    with time_operation("derive_signal", pair):
        current = df.iloc[-1]
        history = df.iloc[:-1]
        structure = history.iloc[-windows.structure_lookback:]
        recent = history.iloc[-windows.recent_lookback:]

        confluence = analyze_confluence(df, windows=windows, thresholds=thresholds)
        log_pipeline_stage("CONFLUENCE", pair, "COMPLETE", {
            'strength': confluence.strength.value,
            'aligned_points': confluence.aligned_count,
        })

        phase = classify_phase(structure, thresholds, windows)
        log_pipeline_stage("PHASE", pair, "COMPLETE", {
            'phase': phase.phase.value,
            'support': phase.support,
            'resistance': phase.resistance,
        })

        vpa = compute_vpa_metrics(current, structure)

        event = detect_event(
            current,
            recent,
            support=phase.support,
            resistance=phase.resistance,
            aligned_points=confluence.aligned_points,
            volume_ratio=vpa.volume_ratio,
            thresholds=thresholds,
        )
        log_pipeline_stage("EVENT", pair, "COMPLETE", {
            'event': event.event_type.value,
            'confidence': round(event.confidence, 3),
        })

        atr = compute_atr(df, period=windows.atr_period)

        signal = synthesize_signal(
            pair=pair,
            timeframe=timeframe,
            current_close=float(current['close']),
            phase=phase,
            event=event,
            volume_ratio=vpa.volume_ratio,
            confluence=confluence,
            atr=atr,
            vpa=vpa,
            thresholds=thresholds,
        )

    enforce_complete_signal(signal)

    if not signal.is_actionable:
        log_rejection(pair, "SYNTHESIS", "No actionable setup", {
            'phase': phase.phase.value,
            'event': event.event_type.value,
            'volume_ratio': vpa.volume_ratio if vpa.volume_ratio is not None else "n/a",
        }, level="DEBUG")

    return signal


class SignalService:
    """
    Service for deriving signals, optionally fetching candles first.

    Usage:
        service = SignalService(feed=CandleFeed(OandaAdapter.from_env()))
        feed_result, signal = service.analyze_pair("EUR_USD", "M5", 120)
    """

    def __init__(
        self,
        feed: Optional[CandleFeed] = None,
        thresholds: Optional[WyckoffThresholds] = None,
        windows: Optional[WindowSizes] = None,
    ):
        self.feed = feed or CandleFeed()
        self.thresholds = thresholds or DEFAULT_THRESHOLDS
        self.windows = windows or DEFAULT_WINDOWS

    def derive(self, pair: str, candles: CandleInput, timeframe: str) -> Optional[TradeSignal]:
        return derive_signal(pair, candles, timeframe, self.thresholds, self.windows)

    def analyze_pair(self, pair: str, timeframe: str = 'M5', count: int = 120):
        """
        Fetch candles for a pair and derive its signal.

        Returns:
            (FeedResult, Optional[TradeSignal])
        """
        pair = normalize_pair(pair)
        feed_result: FeedResult = self.feed.fetch(pair, timeframe, count)

        if feed_result.sample:
            logger.info(f"{pair} {timeframe}: using sample candles ({feed_result.error})")

        signal = self.derive(pair, feed_result.candles, feed_result.timeframe)
        return feed_result, signal


_signal_service: Optional[SignalService] = None


def get_signal_service() -> SignalService:
    """Get the singleton SignalService, creating a sample-backed one if needed."""
    global _signal_service
    if _signal_service is None:
        _signal_service = SignalService()
    return _signal_service


def configure_signal_service(
    feed: Optional[CandleFeed] = None,
    thresholds: Optional[WyckoffThresholds] = None,
    windows: Optional[WindowSizes] = None,
) -> SignalService:
    """Configure and return the singleton SignalService."""
    global _signal_service
    _signal_service = SignalService(feed=feed, thresholds=thresholds, windows=windows)
    return _signal_service
