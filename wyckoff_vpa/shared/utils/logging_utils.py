"""
Logging utilities for the signal pipeline.

Stage, rejection and timing lines share one layout so a single pair can be
followed through the log:

    🔄 [PHASE] EUR_USD started
    ✅ [PHASE] EUR_USD completed | phase=accumulation support=1.08000
    🚫 [SYNTHESIS] EUR_USD no signal: No actionable setup | event=none
"""

import time
from typing import Any, Dict, Optional
from loguru import logger

from wyckoff_vpa.shared.config.pairs import format_price


STAGE_ICONS = {
    "START": "🔄",
    "COMPLETE": "✅",
    "FAILED": "❌",
}

# (upper bound in ms, icon)
TIMING_ICONS = ((100.0, "⚡"), (1000.0, "⏱️"))
SLOW_ICON = "🐌"


def _format_value(value: Any) -> str:
    if isinstance(value, float):
        return f"{value:.5f}"
    return str(value)


def _format_fields(data: Optional[Dict[str, Any]]) -> str:
    if not data:
        return ""
    return " | " + " ".join(f"{key}={_format_value(value)}" for key, value in data.items())


def _log_at(level: str):
    return getattr(logger, level.lower(), logger.debug)


def log_pipeline_stage(
    stage_name: str,
    pair: str,
    status: str = "START",
    data: Optional[Dict[str, Any]] = None,
    level: str = "DEBUG"
) -> None:
    """
    Log one pipeline stage transition on a single line.

    Args:
        stage_name: Pipeline stage (e.g. "CONFLUENCE", "PHASE", "EVENT")
        pair: Currency pair being processed
        status: "START", "COMPLETE" or "FAILED"
        data: Key/value details appended to the line
        level: loguru level name
    """
    icon = STAGE_ICONS.get(status, "•")
    verb = {"START": "started", "COMPLETE": "completed", "FAILED": "failed"}.get(status, status.lower())
    _log_at(level)(f"{icon} [{stage_name}] {pair} {verb}{_format_fields(data)}")


def log_rejection(
    pair: str,
    stage: str,
    reason: str,
    diagnostics: Optional[Dict[str, Any]] = None,
    level: str = "INFO"
) -> None:
    """
    Log a window that produced no trade (insufficient data or HOLD).

    Args:
        pair: Currency pair
        stage: Stage that stopped the signal
        reason: Human-readable reason
        diagnostics: Metrics behind the decision
        level: loguru level name
    """
    _log_at(level)(f"🚫 [{stage}] {pair} no signal: {reason}{_format_fields(diagnostics)}")


def log_timing(
    operation_name: str,
    duration_ms: float,
    pair: Optional[str] = None,
    level: str = "DEBUG"
) -> None:
    """Log how long an operation took, with a speed icon."""
    icon = next((icon for limit, icon in TIMING_ICONS if duration_ms < limit), SLOW_ICON)
    target = f" [{pair}]" if pair else ""
    _log_at(level)(f"{icon} {operation_name}{target}: {duration_ms:.0f}ms")


def format_signal_summary(signal) -> str:
    """
    Format a signal for console output.

    Args:
        signal: TradeSignal

    Returns:
        Multi-line summary string
    """
    pair = signal.pair
    lines = [
        "=" * 60,
        f"📊 {pair} [{signal.timeframe}] → {signal.direction.value}",
        "=" * 60,
        f"Phase:      {signal.phase.phase.value} ({signal.phase.confidence:.0%})",
        f"Event:      {signal.event.event_type.value} ({signal.event.confidence:.0%})",
        f"Entry:      {format_price(signal.entry, pair)}",
    ]

    if signal.is_actionable:
        lines.extend([
            f"Stop:       {format_price(signal.stop_loss, pair)}",
            f"Target:     {format_price(signal.take_profit, pair)}",
            f"Confidence: {signal.confidence:.0%}",
            f"R:R:        1:{signal.risk_reward:.1f}",
        ])

    lines.append("")
    lines.append("Reasons:")
    lines.extend(f"  • {reason}" for reason in signal.reasons)
    lines.append("=" * 60)

    return "\n".join(lines)


class TimingContext:
    """Times a block and logs the duration on exit, including on error."""

    def __init__(self, operation_name: str, pair: Optional[str] = None):
        self.operation_name = operation_name
        self.pair = pair
        self._started: Optional[float] = None
        self.duration_ms: Optional[float] = None

    def __enter__(self) -> "TimingContext":
        self._started = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.duration_ms = (time.perf_counter() - self._started) * 1000
        log_timing(self.operation_name, self.duration_ms, self.pair)
        return False


def time_operation(operation_name: str, pair: Optional[str] = None) -> TimingContext:
    """
    Usage:
        with time_operation("derive_signal", "EUR_USD") as timer:
            ...
        timer.duration_ms
    """
    return TimingContext(operation_name, pair)
