"""
Unit tests for Wyckoff phase classification and structural event detection.
"""

import pandas as pd
import pytest

from wyckoff_vpa.analysis.phase_classifier import (
    classify_phase,
    compute_compression,
    compute_price_position,
)
from wyckoff_vpa.shared.config.defaults import WindowSizes
from wyckoff_vpa.shared.models.wyckoff import EventType, WyckoffPhase
from wyckoff_vpa.strategy.wyckoff.events import (
    NO_EVENT,
    detect_event,
    retest_confidence,
    trap_confidence,
)
from wyckoff_vpa.tests.fixtures.market_data import (
    accumulation_history,
    flat_candles,
    make_ohlcv_df,
    mirror_candle,
    to_dataframe,
)


SUPPORT = 1.0800
RESISTANCE = 1.0900


def structure_window(mirrored: bool = False) -> pd.DataFrame:
    candles = accumulation_history()
    if mirrored:
        candles = [mirror_candle(c) for c in candles]
    return to_dataframe(candles).iloc[-50:]


def candle(open_, high, low, close, volume=1000.0) -> pd.Series:
    return pd.Series({'open': open_, 'high': high, 'low': low, 'close': close, 'volume': volume})


@pytest.fixture
def recent():
    """Ten quiet candles between 1.0820 and 1.0840."""
    return make_ohlcv_df([(1.0828, 1.0840, 1.0820, 1.0832, 1000.0)] * 10)


class TestPhaseClassifier:
    """Test classify_phase rule table."""

    def test_accumulation(self):
        state = classify_phase(structure_window())

        assert state.phase is WyckoffPhase.ACCUMULATION
        assert state.confidence == 0.85
        assert state.support == pytest.approx(SUPPORT)
        assert state.resistance == pytest.approx(RESISTANCE)
        assert state.compression == pytest.approx(0.7, abs=1e-3)
        assert state.price_position == pytest.approx(0.122, abs=1e-4)
        assert state.volume_trend < -0.2

    def test_distribution(self):
        state = classify_phase(structure_window(mirrored=True))

        assert state.phase is WyckoffPhase.DISTRIBUTION
        assert state.confidence == 0.85
        assert state.price_position == pytest.approx(0.878, abs=1e-4)
        assert state.volume_trend > 0.2

    def test_markup(self):
        window = make_ohlcv_df([
            (1.00, 1.03, 1.00, 1.02, 1000.0),
            (1.02, 1.05, 1.02, 1.04, 1000.0),
            (1.04, 1.07, 1.04, 1.06, 1000.0),
        ])

        state = classify_phase(window)

        assert state.phase is WyckoffPhase.MARKUP
        assert state.confidence == 0.75

    def test_markdown(self):
        window = make_ohlcv_df([
            (1.07, 1.07, 1.04, 1.05, 1000.0),
            (1.05, 1.05, 1.02, 1.03, 1000.0),
            (1.03, 1.03, 1.00, 1.01, 1000.0),
        ])

        state = classify_phase(window)

        assert state.phase is WyckoffPhase.MARKDOWN
        assert state.confidence == 0.75

    def test_range_without_volume(self):
        window = structure_window()
        window = window.assign(volume=0.0)

        state = classify_phase(window)

        assert state.volume_trend == 0.0
        assert state.phase is WyckoffPhase.RANGE
        assert state.confidence == 0.5

    def test_flat_window_is_finite(self):
        window = to_dataframe(flat_candles(50))

        state = classify_phase(window)

        assert state.phase is WyckoffPhase.RANGE
        assert state.compression == 1.0
        assert state.price_position == 0.0

    def test_empty_window_raises(self):
        with pytest.raises(ValueError, match="empty window"):
            classify_phase(make_ohlcv_df([]))

    def test_compression_scales_by_structure_lookback(self):
        short = structure_window().iloc[-25:]
        spread = float((short['high'] - short['low']).mean())
        span = float(short['high'].max() - short['low'].min())

        assert compute_compression(short) == pytest.approx(1 - spread * 50 / span)
        assert classify_phase(short).compression == pytest.approx(1 - spread * 50 / span)
        resized = classify_phase(short, windows=WindowSizes(structure_lookback=25))
        assert resized.compression == pytest.approx(1 - spread * 25 / span)

    def test_metric_helpers(self):
        window = structure_window()

        assert compute_compression(window) == pytest.approx(classify_phase(window).compression)
        assert compute_price_position(window) == pytest.approx(classify_phase(window).price_position)


class TestEventDetection:
    """Test detect_event priority and confidence rules."""

    def test_spring(self, recent):
        current = candle(1.0812, 1.0852, 1.0795, 1.0850)

        event = detect_event(current, recent, SUPPORT, RESISTANCE, [], volume_ratio=0.6)

        assert event.event_type is EventType.SPRING
        assert event.level == SUPPORT
        assert event.confidence == pytest.approx(0.8)

    def test_spring_aligned_bonus_capped(self, recent):
        current = candle(1.0812, 1.0852, 1.0795, 1.0850)

        event = detect_event(current, recent, SUPPORT, RESISTANCE, [1.0801], volume_ratio=0.3)

        assert event.event_type is EventType.SPRING
        assert event.confidence == 1.0

    @pytest.mark.parametrize("volume_ratio", [None, 1.5, 3.0, 6.0])
    def test_spring_confidence_floor(self, recent, volume_ratio):
        current = candle(1.0812, 1.0852, 1.0795, 1.0850)

        event = detect_event(current, recent, SUPPORT, RESISTANCE, [], volume_ratio=volume_ratio)

        assert event.event_type is EventType.SPRING
        assert event.confidence == pytest.approx(0.5)

    def test_break_without_reclaim_is_not_spring(self, recent):
        # closes below support * 0.999
        current = candle(1.0790, 1.0795, 1.0775, 1.0780)

        event = detect_event(current, recent, SUPPORT, RESISTANCE, [], volume_ratio=0.8)

        assert event == NO_EVENT

    def test_spring_closing_inside_reclaim_band(self, recent):
        # 1.0795 is under support but over support * 0.999 = 1.07892
        current = candle(1.0800, 1.0801, 1.0790, 1.0795)

        event = detect_event(current, recent, SUPPORT, RESISTANCE, [], volume_ratio=0.8)

        assert event.event_type is EventType.SPRING
        assert event.level == SUPPORT

    def test_close_under_reclaim_band_is_not_spring(self, recent):
        current = candle(1.0800, 1.0801, 1.0785, 1.0789)

        event = detect_event(current, recent, SUPPORT, RESISTANCE, [], volume_ratio=0.8)

        assert event == NO_EVENT

    def test_upthrust_closing_inside_reclaim_band(self, recent):
        # 1.0905 is over resistance but under resistance * 1.001 = 1.0909
        current = candle(1.0900, 1.0910, 1.0899, 1.0905)

        event = detect_event(current, recent, SUPPORT, RESISTANCE, [], volume_ratio=0.8)

        assert event.event_type is EventType.UPTHRUST
        assert event.level == RESISTANCE

    def test_close_over_reclaim_band_is_not_upthrust(self, recent):
        current = candle(1.0900, 1.0915, 1.0899, 1.0911)

        event = detect_event(current, recent, SUPPORT, RESISTANCE, [], volume_ratio=0.8)

        assert event == NO_EVENT

    def test_upthrust(self, recent):
        current = candle(1.0888, 1.0905, 1.0848, 1.0850)

        event = detect_event(current, recent, SUPPORT, RESISTANCE, [], volume_ratio=0.8)

        assert event.event_type is EventType.UPTHRUST
        assert event.level == RESISTANCE
        assert event.confidence == pytest.approx(1 - 0.8 / 3)

    def test_test_support(self, recent):
        current = candle(1.0822, 1.0832, 1.0821, 1.0830)

        event = detect_event(current, recent, SUPPORT, RESISTANCE, [], volume_ratio=1.0)

        assert event.event_type is EventType.TEST_SUPPORT
        assert event.level == pytest.approx(1.0820)
        assert event.confidence == pytest.approx(0.7)

    def test_test_support_aligned_bonus(self, recent):
        current = candle(1.0822, 1.0832, 1.0821, 1.0830)

        event = detect_event(current, recent, SUPPORT, RESISTANCE, [1.0821], volume_ratio=1.0)

        assert event.confidence == pytest.approx(0.85)

    def test_test_resistance(self):
        recent = make_ohlcv_df([(1.0870, 1.0884, 1.0866, 1.0876, 1000.0)] * 10)
        current = candle(1.0880, 1.0885, 1.0870, 1.0872)

        event = detect_event(current, recent, SUPPORT, RESISTANCE, [], volume_ratio=1.0)

        assert event.event_type is EventType.TEST_RESISTANCE
        assert event.level == pytest.approx(1.0884)
        assert event.confidence == pytest.approx(0.7)

    def test_bearish_candle_at_lows_is_not_support_test(self):
        recent = make_ohlcv_df([(1.0850, 1.0880, 1.0820, 1.0860, 1000.0)] * 10)
        current = candle(1.0830, 1.0832, 1.0821, 1.0822)

        event = detect_event(current, recent, SUPPORT, RESISTANCE, [], volume_ratio=1.0)

        assert event.event_type is EventType.NONE
        assert event.confidence == 0.0

    def test_spring_takes_priority_over_test(self):
        recent = make_ohlcv_df([(1.0805, 1.0810, 1.0801, 1.0806, 1000.0)] * 10)
        current = candle(1.0801, 1.0812, 1.0795, 1.0810)

        event = detect_event(current, recent, SUPPORT, RESISTANCE, [], volume_ratio=0.9)

        assert event.event_type is EventType.SPRING

    def test_no_recent_candles(self):
        current = candle(1.0850, 1.0855, 1.0845, 1.0852)

        event = detect_event(current, make_ohlcv_df([]), SUPPORT, RESISTANCE, [], volume_ratio=1.0)

        assert event == NO_EVENT

    def test_confidence_helpers(self):
        assert trap_confidence(1.08, 0.0, [], 0.0002) == 1.0
        assert trap_confidence(1.08, None, [1.08], 0.0002) == pytest.approx(0.7)
        assert retest_confidence(1.08, [1.09], 0.0002) == pytest.approx(0.7)
        assert retest_confidence(1.08, [1.08], 0.0002) == pytest.approx(0.85)
