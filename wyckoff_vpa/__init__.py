"""Wyckoff + VPA signal engine for FX pairs."""

from wyckoff_vpa.analysis.quarter_points import analyze_confluence
from wyckoff_vpa.services.signal_service import derive_signal
from wyckoff_vpa.shared.models.data import Candle
from wyckoff_vpa.shared.models.wyckoff import (
    Direction,
    EventType,
    FibStrength,
    RangeAnalysis,
    TradeSignal,
    WyckoffPhase,
)

__version__ = "0.1.0"

__all__ = [
    "analyze_confluence",
    "derive_signal",
    "Candle",
    "Direction",
    "EventType",
    "FibStrength",
    "RangeAnalysis",
    "TradeSignal",
    "WyckoffPhase",
]
