"""
Tests for the signal state machine and level validation.
"""
from datetime import datetime
from decimal import Decimal
from types import SimpleNamespace

import pytest

from pipdesk.exceptions import IllegalTransitionError, InvalidPriceError, InvalidSignalLevelsError
from pipdesk.signal_lifecycle import (
    SignalStatus,
    cancel_signal,
    close_signal,
    result_from_outcome,
    summarize_signals,
    validate_signal_levels,
)


def make_signal(**overrides):
    fields = dict(
        id=1,
        pair="EURUSD",
        direction="BUY",
        entry_price=Decimal("1.0820"),
        take_profit_price=Decimal("1.0850"),
        take_profit_2_price=Decimal("1.0880"),
        stop_loss_price=Decimal("1.0800"),
        status="active",
        result=None,
        closed_at=None,
    )
    fields.update(overrides)
    return SimpleNamespace(**fields)


class TestTransitions:
    """active -> closed | cancelled, both terminal."""

    def test_close_sets_result_and_time(self):
        signal = make_signal()
        now = datetime(2024, 5, 1, 12, 0)
        close_signal(signal, "30", "admin", now=now)
        assert signal.status == SignalStatus.CLOSED.value
        assert signal.result == Decimal("30")
        assert signal.closed_at == now

    def test_close_keeps_negative_result(self):
        signal = close_signal(make_signal(), -20, "admin")
        assert signal.result == Decimal("-20")

    def test_close_requires_result(self):
        with pytest.raises(InvalidPriceError):
            close_signal(make_signal(), None, "admin")

    def test_cancel(self):
        signal = cancel_signal(make_signal(), "admin")
        assert signal.status == SignalStatus.CANCELLED.value
        assert signal.result is None

    @pytest.mark.parametrize("status", ["closed", "cancelled"])
    def test_terminal_states_reject_every_transition(self, status):
        signal = make_signal(status=status)
        with pytest.raises(IllegalTransitionError):
            close_signal(signal, 10, "admin")
        with pytest.raises(IllegalTransitionError):
            cancel_signal(signal, "admin")
        assert signal.status == status

    def test_non_admin_cannot_transition(self):
        signal = make_signal()
        with pytest.raises(IllegalTransitionError):
            close_signal(signal, 10, "user")
        with pytest.raises(IllegalTransitionError):
            cancel_signal(signal, "user")
        assert signal.status == "active"

    def test_unknown_status(self):
        with pytest.raises(IllegalTransitionError):
            close_signal(make_signal(status="paused"), 10, "admin")

    def test_is_terminal(self):
        assert not SignalStatus.ACTIVE.is_terminal
        assert SignalStatus.CLOSED.is_terminal
        assert SignalStatus.CANCELLED.is_terminal


class TestOutcomes:
    def test_tp1(self):
        assert result_from_outcome(make_signal(), "TP1") == Decimal("30")

    def test_tp2(self):
        assert result_from_outcome(make_signal(), "tp2") == Decimal("60")

    def test_stop_loss_is_negative(self):
        assert result_from_outcome(make_signal(), "SL") == Decimal("-20")

    def test_missing_tp2(self):
        with pytest.raises(InvalidPriceError):
            result_from_outcome(make_signal(take_profit_2_price=None), "TP2")

    def test_unknown_outcome(self):
        with pytest.raises(InvalidPriceError):
            result_from_outcome(make_signal(), "BE")


class TestLevelValidation:
    def test_valid_buy_and_sell(self):
        validate_signal_levels("BUY", "1.0820", "1.0850", "1.0800", "1.0880")
        validate_signal_levels("SELL_LIMIT", "110.50", "110.00", "111.00")

    @pytest.mark.parametrize("tp, sl, tp2", [
        ("1.0800", "1.0790", None),   # tp below entry
        ("1.0850", "1.0830", None),   # sl above entry
        ("1.0850", "1.0800", "1.0810"),  # tp2 below entry
        ("1.0850", "1.0820", None),   # sl at entry
    ])
    def test_invalid_buy_levels(self, tp, sl, tp2):
        with pytest.raises(InvalidSignalLevelsError):
            validate_signal_levels("BUY", "1.0820", tp, sl, tp2)

    def test_invalid_sell_levels(self):
        with pytest.raises(InvalidSignalLevelsError):
            validate_signal_levels("SELL", "110.50", "111.00", "112.00")

    def test_level_errors_are_price_errors(self):
        assert issubclass(InvalidSignalLevelsError, InvalidPriceError)


class TestSummary:
    def test_counts_and_win_rate(self):
        signals = [
            make_signal(status="closed", result=Decimal("30")),
            make_signal(status="closed", result=Decimal("-20")),
            make_signal(status="closed", result=Decimal("50")),
            make_signal(status="closed", result=Decimal("0")),
            make_signal(status="cancelled"),
            make_signal(),
        ]
        stats = summarize_signals(signals)
        assert stats["total_signals"] == 6
        assert stats["active_signals"] == 1
        assert stats["closed_signals"] == 4
        assert stats["cancelled_signals"] == 1
        assert stats["winning_signals"] == 2
        assert stats["losing_signals"] == 1
        assert stats["breakeven_signals"] == 1
        assert stats["win_rate"] == Decimal("50")
        assert stats["total_pips"] == Decimal("60")

    def test_empty(self):
        stats = summarize_signals([])
        assert stats["win_rate"] == 0
        assert stats["total_signals"] == 0
