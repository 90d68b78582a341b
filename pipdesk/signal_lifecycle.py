# pipdesk/signal_lifecycle.py
"""
Signal lifecycle

    active --close(result)--> closed     (terminal, carries result in pips)
    active --cancel-------->  cancelled  (terminal, no result)

Only admins transition signals. Deleting a signal is not a transition and
is handled by the caller from any state.
"""
import logging
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Iterable, Optional

from .calculators import TradeDirection, parse_signed, compute_pips, parse_price
from .exceptions import IllegalTransitionError, InvalidPriceError, InvalidSignalLevelsError
from .instruments import InstrumentRegistry, default_registry

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"


class SignalStatus(str, Enum):
    ACTIVE = "active"
    CLOSED = "closed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self is not SignalStatus.ACTIVE


class SignalOutcome(str, Enum):
    TP1 = "TP1"
    TP2 = "TP2"
    SL = "SL"


def _status_of(signal) -> SignalStatus:
    try:
        return SignalStatus(signal.status)
    except ValueError:
        raise IllegalTransitionError(f"Signal has unknown status '{signal.status}'") from None


def _check_transition(signal, actor_role: str, action: str) -> None:
    if actor_role != ADMIN_ROLE:
        raise IllegalTransitionError(f"Only admins can {action} a signal")
    status = _status_of(signal)
    if status.is_terminal:
        raise IllegalTransitionError(f"Cannot {action} a signal that is already {status.value}")


def close_signal(signal, result_pips, actor_role: str, now: Optional[datetime] = None):
    """Move an active signal to closed, storing the realized result as given"""
    _check_transition(signal, actor_role, "close")
    if result_pips is None:
        raise InvalidPriceError("A closed signal needs a result")
    signal.result = parse_signed(result_pips, "result")
    signal.status = SignalStatus.CLOSED.value
    signal.closed_at = now or datetime.utcnow()
    logger.info(f"Signal {getattr(signal, 'id', None)} closed with {signal.result} pips")
    return signal


def cancel_signal(signal, actor_role: str, now: Optional[datetime] = None):
    _check_transition(signal, actor_role, "cancel")
    signal.status = SignalStatus.CANCELLED.value
    signal.result = None
    signal.closed_at = now or datetime.utcnow()
    logger.info(f"Signal {getattr(signal, 'id', None)} cancelled")
    return signal


def validate_signal_levels(direction, entry, take_profit, stop_loss, take_profit_2=None) -> None:
    """
    BUY side: every take-profit above entry, stop-loss below.
    SELL side: mirrored. Raises InvalidSignalLevelsError otherwise.
    """
    side = TradeDirection.parse(direction).side
    entry_p = parse_price(entry, "entry price")
    sl = parse_price(stop_loss, "stop loss price")
    targets = [("take profit", parse_price(take_profit, "take profit price"))]
    if take_profit_2 is not None:
        targets.append(("take profit 2", parse_price(take_profit_2, "take profit 2 price")))

    if side is TradeDirection.BUY:
        if sl >= entry_p:
            raise InvalidSignalLevelsError("Stop loss must be below entry for a BUY signal")
        for name, tp in targets:
            if tp <= entry_p:
                raise InvalidSignalLevelsError(f"{name.capitalize()} must be above entry for a BUY signal")
    else:
        if sl <= entry_p:
            raise InvalidSignalLevelsError("Stop loss must be above entry for a SELL signal")
        for name, tp in targets:
            if tp >= entry_p:
                raise InvalidSignalLevelsError(f"{name.capitalize()} must be below entry for a SELL signal")


def result_from_outcome(signal, outcome, registry: InstrumentRegistry = default_registry) -> Decimal:
    """Signed pips for a signal that hit TP1, TP2 or SL, from its own levels"""
    try:
        outcome = SignalOutcome(str(outcome).upper())
    except ValueError:
        raise InvalidPriceError(f"Unknown signal outcome '{outcome}'") from None

    if outcome is SignalOutcome.TP1:
        exit_price = signal.take_profit_price
    elif outcome is SignalOutcome.TP2:
        exit_price = signal.take_profit_2_price
        if exit_price is None:
            raise InvalidPriceError("Signal has no second take profit")
    else:
        exit_price = signal.stop_loss_price
    return compute_pips(signal.direction, signal.entry_price, exit_price, signal.pair, registry)


def summarize_signals(signals: Iterable) -> dict:
    """Aggregate statistics recomputed from the full signal set"""
    active = closed = cancelled = wins = losses = breakeven = 0
    total_pips = Decimal("0")
    for signal in signals:
        status = signal.status
        if status == SignalStatus.ACTIVE.value:
            active += 1
        elif status == SignalStatus.CANCELLED.value:
            cancelled += 1
        elif status == SignalStatus.CLOSED.value:
            closed += 1
            result = parse_signed(signal.result, "result") if signal.result is not None else Decimal("0")
            total_pips += result
            if result > 0:
                wins += 1
            elif result < 0:
                losses += 1
            else:
                breakeven += 1

    win_rate = Decimal(wins) / Decimal(closed) * 100 if closed else Decimal("0")
    return {
        "total_signals": active + closed + cancelled,
        "active_signals": active,
        "closed_signals": closed,
        "cancelled_signals": cancelled,
        "winning_signals": wins,
        "losing_signals": losses,
        "breakeven_signals": breakeven,
        "win_rate": win_rate,
        "total_pips": total_pips,
    }
