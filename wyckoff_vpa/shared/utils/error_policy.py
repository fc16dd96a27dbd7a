"""
Error policy enforcement for signal outputs.

Trade signals handed to consumers (dashboards, paper ledgers) must be
internally consistent: stops and targets on the correct side of entry, a
bounded confidence and a non-empty rationale. HOLD signals must carry no
levels at all.
"""

import math
from typing import Optional

from wyckoff_vpa.shared.models.wyckoff import Direction, TradeSignal


class IncompleteSignalError(Exception):
    """Raised when a TradeSignal has missing or contradictory fields."""


def _check_finite(name: str, value: float) -> None:
    if value is None or not math.isfinite(value):
        raise IncompleteSignalError(f"{name} is not a finite number: {value}")


def enforce_complete_signal(signal: Optional[TradeSignal]) -> None:
    """
    Ensure a signal is complete and consistent.

    Raises:
        IncompleteSignalError: If any required field is missing or contradictory
    """
    if signal is None:
        raise IncompleteSignalError("TradeSignal is None")

    if not signal.pair:
        raise IncompleteSignalError("pair is empty")
    if not signal.reasons:
        raise IncompleteSignalError("reasons list is empty")

    for name in ('entry', 'stop_loss', 'take_profit', 'confidence', 'risk_reward', 'atr'):
        _check_finite(name, getattr(signal, name))

    if not 0.0 <= signal.confidence <= 1.0:
        raise IncompleteSignalError(f"confidence out of range: {signal.confidence}")

    if signal.direction is Direction.HOLD:
        if signal.stop_loss != 0 or signal.take_profit != 0 or signal.confidence != 0:
            raise IncompleteSignalError(
                f"HOLD signal carries levels: stop={signal.stop_loss}, "
                f"target={signal.take_profit}, confidence={signal.confidence}"
            )
        return

    if signal.risk_reward <= 0:
        raise IncompleteSignalError(f"Invalid risk_reward: {signal.risk_reward}")

    # Only the target is ordered against entry. A spring may close under
    # support and a quiet ATR may put the target on the far side of the stop.
    if signal.direction is Direction.BUY:
        if not signal.entry < signal.take_profit:
            raise IncompleteSignalError(
                f"BUY levels out of order: stop={signal.stop_loss}, "
                f"entry={signal.entry}, target={signal.take_profit}"
            )
    elif signal.direction is Direction.SELL:
        if not signal.take_profit < signal.entry:
            raise IncompleteSignalError(
                f"SELL levels out of order: stop={signal.stop_loss}, "
                f"entry={signal.entry}, target={signal.take_profit}"
            )
