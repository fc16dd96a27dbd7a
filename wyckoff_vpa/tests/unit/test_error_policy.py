"""
Tests for the signal output policy (enforce_complete_signal).
"""

from dataclasses import replace

import pytest

from wyckoff_vpa.services.signal_service import derive_signal
from wyckoff_vpa.shared.models.wyckoff import Direction
from wyckoff_vpa.shared.utils.error_policy import IncompleteSignalError, enforce_complete_signal
from wyckoff_vpa.tests.fixtures.market_data import spring_scenario, upthrust_scenario


@pytest.fixture(scope="module")
def buy_signal():
    return derive_signal("EUR_USD", spring_scenario(), "M5")


@pytest.fixture(scope="module")
def sell_signal():
    return derive_signal("EUR_USD", upthrust_scenario(), "M5")


@pytest.fixture(scope="module")
def hold_signal():
    return derive_signal("EUR_USD", spring_scenario(volume=2000.0), "M5")


def test_valid_signals_pass(buy_signal, sell_signal, hold_signal):
    for signal in (buy_signal, sell_signal, hold_signal):
        enforce_complete_signal(signal)


def test_none_signal():
    with pytest.raises(IncompleteSignalError, match="None"):
        enforce_complete_signal(None)


def test_empty_reasons(buy_signal):
    with pytest.raises(IncompleteSignalError, match="reasons"):
        enforce_complete_signal(replace(buy_signal, reasons=[]))


def test_empty_pair(buy_signal):
    with pytest.raises(IncompleteSignalError, match="pair"):
        enforce_complete_signal(replace(buy_signal, pair=""))


@pytest.mark.parametrize("field_name", ["entry", "stop_loss", "take_profit", "atr"])
def test_non_finite_levels(buy_signal, field_name):
    with pytest.raises(IncompleteSignalError, match="not a finite number"):
        enforce_complete_signal(replace(buy_signal, **{field_name: float('nan')}))


@pytest.mark.parametrize("confidence", [-0.01, 1.01])
def test_confidence_out_of_range(buy_signal, confidence):
    with pytest.raises(IncompleteSignalError, match="confidence out of range"):
        enforce_complete_signal(replace(buy_signal, confidence=confidence))


def test_buy_target_below_entry(buy_signal):
    broken = replace(buy_signal, take_profit=buy_signal.entry - 0.001)

    with pytest.raises(IncompleteSignalError, match="BUY levels out of order"):
        enforce_complete_signal(broken)


def test_buy_with_target_short_of_stop_passes(buy_signal):
    # spring closed under support and the ATR target stops short of it
    quiet = replace(buy_signal, entry=1.0795, stop_loss=1.0800, take_profit=1.0796)

    enforce_complete_signal(quiet)


def test_sell_with_target_short_of_stop_passes(sell_signal):
    quiet = replace(sell_signal, entry=1.0905, stop_loss=1.0900, take_profit=1.0904)

    enforce_complete_signal(quiet)


def test_sell_target_above_entry(sell_signal):
    broken = replace(sell_signal, take_profit=sell_signal.entry + 0.001)

    with pytest.raises(IncompleteSignalError, match="SELL levels out of order"):
        enforce_complete_signal(broken)


def test_trade_requires_positive_risk_reward(buy_signal):
    with pytest.raises(IncompleteSignalError, match="risk_reward"):
        enforce_complete_signal(replace(buy_signal, risk_reward=0.0))


def test_hold_with_levels(hold_signal):
    assert hold_signal.direction is Direction.HOLD

    with pytest.raises(IncompleteSignalError, match="HOLD signal carries levels"):
        enforce_complete_signal(replace(hold_signal, stop_loss=1.08))
