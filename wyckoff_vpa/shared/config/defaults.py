"""
Default configuration for the Wyckoff + VPA signal engine.

Every threshold used by the phase classifier, event detector and signal
planner lives here.
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class WyckoffThresholds:
    """Decision thresholds for phase, event and signal rules."""
    # Phase classification
    compression_min: float = 0.6
    range_volume_trend: float = 0.2       # accumulation / distribution bias
    trend_volume_trend: float = 0.3       # markup / markdown bias
    accumulation_max_position: float = 0.4
    distribution_min_position: float = 0.6
    trend_position_pivot: float = 0.5
    range_phase_confidence: float = 0.85  # accumulation / distribution
    trend_phase_confidence: float = 0.75  # markup / markdown
    neutral_phase_confidence: float = 0.5

    # Event detection
    spring_reclaim_factor: float = 0.999
    upthrust_reclaim_factor: float = 1.001
    test_support_factor: float = 1.002
    test_resistance_factor: float = 0.998
    trap_min_confidence: float = 0.5
    trap_volume_divisor: float = 3.0
    trap_aligned_bonus: float = 0.2
    test_base_confidence: float = 0.7
    test_aligned_bonus: float = 0.15

    # Confluence
    fib_tolerance_ratio: float = 0.02
    strong_aligned_count: int = 3
    moderate_aligned_count: int = 2

    # Signal synthesis
    max_volume_ratio: float = 1.5         # climax gate
    atr_stop_multiplier: float = 1.5
    risk_reward: float = 2.0
    phase_weight: float = 0.25
    event_weight: float = 0.35
    volume_weight: float = 0.25
    volume_ceiling: float = 2.0
    qp_bonus: float = 0.15
    qp_bonus_min_aligned: int = 2

    # Guard for flat ranges
    epsilon: float = 1e-10


@dataclass(frozen=True)
class WindowSizes:
    """Candle window lengths."""
    min_candles: int = 50
    confluence_lookback: int = 100
    structure_lookback: int = 50
    recent_lookback: int = 10
    swing_radius: int = 5
    max_swings: int = 3
    atr_period: int = 14


# Default instances
DEFAULT_THRESHOLDS = WyckoffThresholds()
DEFAULT_WINDOWS = WindowSizes()
