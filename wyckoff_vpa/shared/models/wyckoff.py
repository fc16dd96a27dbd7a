"""
Wyckoff signal models.

Value objects produced by the signal pipeline:
- RangeAnalysis: Quarter-point / Fibonacci confluence of the trading range
- PhaseState: Market regime (accumulation, distribution, markup, markdown, range)
- StructuralEvent: Spring, upthrust or support/resistance test on the last candle
- TradeSignal: Final BUY / SELL / HOLD recommendation

All of them are recomputed on every call and never mutated afterwards.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional


class FibStrength(str, Enum):
    """Confluence grade from the number of aligned quarter points."""
    WEAK = "weak"
    MODERATE = "moderate"
    STRONG = "strong"


class WyckoffPhase(str, Enum):
    """
    Wyckoff market phase.

    - ACCUMULATION: Coiled range near support, selling volume being absorbed
    - DISTRIBUTION: Coiled range near resistance, buying volume being supplied
    - MARKUP: Up-volume dominant with price in the upper half of the range
    - MARKDOWN: Down-volume dominant with price in the lower half of the range
    - RANGE: No clear bias
    """
    ACCUMULATION = "accumulation"
    DISTRIBUTION = "distribution"
    MARKUP = "markup"
    MARKDOWN = "markdown"
    RANGE = "range"


class EventType(str, Enum):
    """Structural event on the most recent candle."""
    SPRING = "spring"
    UPTHRUST = "upthrust"
    TEST_SUPPORT = "test_support"
    TEST_RESISTANCE = "test_resistance"
    NONE = "none"


class Direction(str, Enum):
    BUY = "BUY"
    SELL = "SELL"
    HOLD = "HOLD"


@dataclass(frozen=True)
class RangeAnalysis:
    """
    Quarter-point / Fibonacci confluence of a candle window.

    Attributes:
        range_high: Highest high of the window
        range_low: Lowest low of the window
        swing_highs: First swing highs found, chronological
        swing_lows: First swing lows found, chronological
        quarterly_points: Range extremes plus swing points, deduplicated
        fib_levels: Nine levels for ratios 0 .. 2.618 mapped onto the range
        aligned_points: Quarterly points within tolerance of a fib level
        tolerance: Alignment tolerance (2% of the range)
        strength: Confluence grade
    """
    range_high: float
    range_low: float
    swing_highs: List[float]
    swing_lows: List[float]
    quarterly_points: List[float]
    fib_levels: List[float]
    aligned_points: List[float]
    tolerance: float
    strength: FibStrength

    @property
    def range_size(self) -> float:
        return self.range_high - self.range_low

    @property
    def aligned_count(self) -> int:
        return len(self.aligned_points)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'rangeHigh': self.range_high,
            'rangeLow': self.range_low,
            'swingHighs': list(self.swing_highs),
            'swingLows': list(self.swing_lows),
            'quarterlyPoints': list(self.quarterly_points),
            'fibLevels': list(self.fib_levels),
            'alignedPoints': list(self.aligned_points),
            'tolerance': self.tolerance,
            'strength': self.strength.value,
        }


@dataclass(frozen=True)
class PhaseState:
    """Classified Wyckoff phase with the metrics that produced it."""
    phase: WyckoffPhase
    confidence: float
    support: float
    resistance: float
    compression: float
    price_position: float
    volume_trend: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'phase': self.phase.value,
            'confidence': self.confidence,
            'support': self.support,
            'resistance': self.resistance,
            'compression': self.compression,
            'pricePosition': self.price_position,
            'volumeTrend': self.volume_trend,
        }


@dataclass(frozen=True)
class StructuralEvent:
    """Detected event and the level it interacted with."""
    event_type: EventType
    confidence: float
    level: Optional[float] = None

    @property
    def detected(self) -> bool:
        return self.event_type is not EventType.NONE

    def to_dict(self) -> Dict[str, Any]:
        return {
            'event': self.event_type.value,
            'confidence': self.confidence,
            'level': self.level,
        }


@dataclass(frozen=True)
class VPAMetrics:
    """
    Volume price analysis snapshot for the current candle.

    Attributes:
        volume_ratio: Current volume / structure-window average (None without volume)
        spread_pct: Current candle range as % of the average window range
        up_down_ratio: Up-volume / down-volume across the window (None without down volume)
    """
    volume_ratio: Optional[float]
    spread_pct: float
    up_down_ratio: Optional[float]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'volumeRatio': self.volume_ratio,
            'spreadPct': self.spread_pct,
            'upDownRatio': self.up_down_ratio,
        }


@dataclass(frozen=True)
class TradeSignal:
    """
    Final signal for one pair / timeframe window.

    HOLD signals carry zeroed stop, target, confidence and risk:reward.
    ``entry`` is always the close of the most recent candle.
    """
    pair: str
    timeframe: str
    direction: Direction
    entry: float
    stop_loss: float
    take_profit: float
    confidence: float
    phase: PhaseState
    event: StructuralEvent
    reasons: List[str]
    risk_reward: float
    atr: float
    confluence: RangeAnalysis
    vpa: VPAMetrics

    @property
    def is_actionable(self) -> bool:
        return self.direction is not Direction.HOLD

    def to_dict(self) -> Dict[str, Any]:
        return {
            'pair': self.pair,
            'timeframe': self.timeframe,
            'direction': self.direction.value,
            'entry': self.entry,
            'stopLoss': self.stop_loss,
            'takeProfit': self.take_profit,
            'confidence': self.confidence,
            'phase': self.phase.phase.value,
            'phaseConfidence': self.phase.confidence,
            'event': self.event.event_type.value,
            'eventConfidence': self.event.confidence,
            'reasons': list(self.reasons),
            'riskReward': self.risk_reward,
            'atr': self.atr,
            'support': self.phase.support,
            'resistance': self.phase.resistance,
            'confluence': self.confluence.to_dict(),
            'vpaMetrics': self.vpa.to_dict(),
        }
