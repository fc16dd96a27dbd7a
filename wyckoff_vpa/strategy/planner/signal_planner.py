"""
Signal Planner - fuses phase, event, volume and confluence into a trade signal.

Only two setups are traded:
- BUY:  spring inside accumulation on non-climactic volume
- SELL: upthrust inside distribution on non-climactic volume

Stops sit at the broken structure level (support for longs, resistance for
shorts). Targets project ``ATR * atr_stop_multiplier * risk_reward`` from the
close. Everything else is a HOLD with zeroed levels and a rationale that
explains what is missing.
"""

from typing import List, Optional
from loguru import logger

from wyckoff_vpa.shared.config.defaults import DEFAULT_THRESHOLDS, WyckoffThresholds
from wyckoff_vpa.shared.config.pairs import format_price
from wyckoff_vpa.shared.models.wyckoff import (
    Direction,
    EventType,
    PhaseState,
    RangeAnalysis,
    StructuralEvent,
    TradeSignal,
    VPAMetrics,
    WyckoffPhase,
)


def volume_confirms(volume_ratio: Optional[float], thresholds: WyckoffThresholds = DEFAULT_THRESHOLDS) -> bool:
    """
    True when volume is below the climax gate.

    Missing volume cannot show a climax, so it passes the gate.
    """
    return volume_ratio is None or volume_ratio < thresholds.max_volume_ratio


def score_confidence(
    phase: PhaseState,
    event: StructuralEvent,
    volume_ratio: Optional[float],
    confluence: RangeAnalysis,
    thresholds: WyckoffThresholds = DEFAULT_THRESHOLDS,
) -> float:
    """
    Weighted confidence for a trade signal.

        phase * 0.25 + event * 0.35 + (2 - volume_ratio) * 0.25 + qp_bonus

    capped at 1.0 and floored at 0.0. The volume term is dropped when volume is
    unavailable; qp_bonus is 0.15 with two or more aligned quarter points.
    """
    t = thresholds
    volume_term = 0.0 if volume_ratio is None else (t.volume_ceiling - volume_ratio) * t.volume_weight
    qp_bonus = t.qp_bonus if confluence.aligned_count >= t.qp_bonus_min_aligned else 0.0

    raw = (
        phase.confidence * t.phase_weight
        + event.confidence * t.event_weight
        + volume_term
        + qp_bonus
    )
    return max(0.0, min(1.0, raw))


def _describe_volume(volume_ratio: Optional[float], thresholds: WyckoffThresholds) -> str:
    if volume_ratio is None:
        return "Volume: unavailable (no volume confirmation)"
    if volume_ratio < thresholds.max_volume_ratio:
        return f"Volume ratio: {volume_ratio:.2f}x average (below {thresholds.max_volume_ratio:.1f}x climax gate)"
    return f"Volume ratio: {volume_ratio:.2f}x average (climactic, above {thresholds.max_volume_ratio:.1f}x gate)"


def _describe_event(event: StructuralEvent, pair: str) -> str:
    if not event.detected:
        return "Event: none detected"
    label = {
        EventType.SPRING: "Spring at support zone",
        EventType.UPTHRUST: "Upthrust at resistance zone",
        EventType.TEST_SUPPORT: "Test of support",
        EventType.TEST_RESISTANCE: "Test of resistance",
    }[event.event_type]
    return f"{label} {format_price(event.level, pair)} ({event.confidence:.0%})"


def _describe_confluence(confluence: RangeAnalysis) -> str:
    return (
        f"Fibonacci confluence: {confluence.strength.value.upper()} "
        f"({confluence.aligned_count} aligned quarter points)"
    )


def _hold_signal(
    pair: str,
    timeframe: str,
    entry: float,
    phase: PhaseState,
    event: StructuralEvent,
    volume_ratio: Optional[float],
    confluence: RangeAnalysis,
    atr: float,
    vpa: VPAMetrics,
    thresholds: WyckoffThresholds,
) -> TradeSignal:
    reasons = [
        f"Timeframe: {timeframe}",
        f"Wyckoff: {phase.phase.value.capitalize()} phase ({phase.confidence:.0%})",
        _describe_event(event, pair),
        _describe_volume(volume_ratio, thresholds),
        _describe_confluence(confluence),
        "Waiting for alignment",
    ]
    return TradeSignal(
        pair=pair,
        timeframe=timeframe,
        direction=Direction.HOLD,
        entry=entry,
        stop_loss=0.0,
        take_profit=0.0,
        confidence=0.0,
        phase=phase,
        event=event,
        reasons=reasons,
        risk_reward=0.0,
        atr=atr,
        confluence=confluence,
        vpa=vpa,
    )


def synthesize_signal(
    pair: str,
    timeframe: str,
    current_close: float,
    phase: PhaseState,
    event: StructuralEvent,
    volume_ratio: Optional[float],
    confluence: RangeAnalysis,
    atr: float,
    vpa: VPAMetrics,
    thresholds: Optional[WyckoffThresholds] = None,
) -> TradeSignal:
    """
    Combine pipeline outputs into a BUY, SELL or HOLD signal.

    Args:
        pair: Currency pair (e.g. 'EUR_USD')
        timeframe: Label used in the rationale only
        current_close: Close of the most recent candle (entry price)
        phase: Classified phase of the structure window
        event: Event detected on the most recent candle
        volume_ratio: Current volume / window average, None without volume
        confluence: Quarter-point / Fibonacci analysis
        atr: Average true range of the last 14 candles
        vpa: VPA snapshot carried on the signal
        thresholds: Rule thresholds (defaults to DEFAULT_THRESHOLDS)

    Returns:
        TradeSignal
    """
    t = thresholds or DEFAULT_THRESHOLDS
    volume_ok = volume_confirms(volume_ratio, t)

    if phase.phase is WyckoffPhase.ACCUMULATION and event.event_type is EventType.SPRING and volume_ok:
        direction = Direction.BUY
        stop_loss = phase.support
        take_profit = current_close + atr * t.atr_stop_multiplier * t.risk_reward
    elif phase.phase is WyckoffPhase.DISTRIBUTION and event.event_type is EventType.UPTHRUST and volume_ok:
        direction = Direction.SELL
        stop_loss = phase.resistance
        take_profit = current_close - atr * t.atr_stop_multiplier * t.risk_reward
    else:
        logger.debug(
            f"{pair} HOLD: phase={phase.phase.value}, event={event.event_type.value}, "
            f"volume_ratio={volume_ratio}"
        )
        return _hold_signal(
            pair, timeframe, current_close, phase, event, volume_ratio, confluence, atr, vpa, t
        )

    confidence = score_confidence(phase, event, volume_ratio, confluence, t)

    phase_label = phase.phase.value.capitalize()
    reasons: List[str] = [
        f"Timeframe: {timeframe}",
        f"Wyckoff: {phase_label} phase detected ({phase.confidence:.0%})",
        _describe_event(event, pair),
        _describe_volume(volume_ratio, t),
        _describe_confluence(confluence),
        f"Risk:Reward 1:{t.risk_reward:.1f}",
        f"Stop loss {format_price(stop_loss, pair)} | Take profit {format_price(take_profit, pair)}",
    ]

    logger.info(
        f"🎯 {pair} [{timeframe}] {direction.value} @ {format_price(current_close, pair)} "
        f"SL {format_price(stop_loss, pair)} TP {format_price(take_profit, pair)} "
        f"confidence {confidence:.0%}"
    )

    return TradeSignal(
        pair=pair,
        timeframe=timeframe,
        direction=direction,
        entry=current_close,
        stop_loss=stop_loss,
        take_profit=take_profit,
        confidence=confidence,
        phase=phase,
        event=event,
        reasons=reasons,
        risk_reward=t.risk_reward,
        atr=atr,
        confluence=confluence,
        vpa=vpa,
    )
