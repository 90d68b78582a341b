# pipdesk/calculators.py
"""
Trading outcome calculators

Single implementation of the pip, profit and risk/reward formulas used by
the journal, the signal board and the dashboard. Everything works on
Decimal so quoted prices keep their exact value:

    compute_pips("BUY", "1.0850", "1.0900", "EURUSD")    -> Decimal('50')
    compute_pips("SELL", "110.50", "110.00", "USDJPY")   -> Decimal('50')
    compute_risk_reward("BUY", 1.0820, 1.0850, 1.0800)   -> '1:1.5'

Invalid input raises; nothing is silently coerced to zero.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum
from typing import Union

from .exceptions import InvalidDirectionError, InvalidLotSizeError, InvalidPriceError
from .instruments import Instrument, InstrumentRegistry, default_registry

Number = Union[str, int, float, Decimal]

RISK_REWARD_UNDEFINED = "N/A"

# Finest lot size the journal stores (matches the lot_size columns)
LOT_SIZE_STEP = Decimal("0.0001")


class TradeDirection(str, Enum):
    BUY = "BUY"
    SELL = "SELL"
    BUY_LIMIT = "BUY_LIMIT"
    SELL_LIMIT = "SELL_LIMIT"

    @classmethod
    def parse(cls, value) -> "TradeDirection":
        if isinstance(value, cls):
            return value
        key = str(value or "").strip().upper().replace(" ", "_").replace("-", "_")
        try:
            return cls(key)
        except ValueError:
            raise InvalidDirectionError(f"Unknown trade direction '{value}'") from None

    @property
    def side(self) -> "TradeDirection":
        """BUY_LIMIT / SELL_LIMIT behave as BUY / SELL in every calculation"""
        if self in (TradeDirection.BUY, TradeDirection.BUY_LIMIT):
            return TradeDirection.BUY
        return TradeDirection.SELL

    @property
    def is_buy(self) -> bool:
        return self.side is TradeDirection.BUY


def _to_decimal(value: Number) -> Decimal:
    if isinstance(value, bool):
        raise TypeError("bool is not a number")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # repr keeps the shortest round-tripping form: 1.085 -> '1.085'
        return Decimal(repr(value))
    if isinstance(value, int):
        return Decimal(value)
    text = str(value).strip().replace(",", ".") if value is not None else ""
    return Decimal(text)


def parse_price(value: Number, field: str = "price") -> Decimal:
    """Parse a quote price; must be finite and > 0"""
    try:
        price = _to_decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidPriceError(f"Invalid {field}: {value!r}") from None
    if not price.is_finite() or price <= 0:
        raise InvalidPriceError(f"Invalid {field}: {value!r}")
    return price


def parse_lot_size(value: Number) -> Decimal:
    """Parse a lot size; fractional (micro) lots such as 0.01 are valid"""
    try:
        lot_size = _to_decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidLotSizeError(f"Invalid lot size: {value!r}") from None
    if not lot_size.is_finite() or lot_size <= 0:
        raise InvalidLotSizeError(f"Invalid lot size: {value!r}")
    try:
        finer_than_step = lot_size % LOT_SIZE_STEP != 0
    except InvalidOperation:
        raise InvalidLotSizeError(f"Invalid lot size: {value!r}") from None
    if finer_than_step:
        raise InvalidLotSizeError(f"Lot size {value!r} is finer than {LOT_SIZE_STEP}")
    return lot_size


def parse_signed(value: Number, field: str) -> Decimal:
    try:
        number = _to_decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidPriceError(f"Invalid {field}: {value!r}") from None
    if not number.is_finite():
        raise InvalidPriceError(f"Invalid {field}: {value!r}")
    return number


def _resolve(instrument, registry: InstrumentRegistry) -> Instrument:
    return registry.get(instrument)


def compute_pips(
    direction,
    entry_price: Number,
    exit_price: Number,
    instrument,
    registry: InstrumentRegistry = default_registry,
) -> Decimal:
    """
    Signed pip distance between entry and exit.

    Positive when the trade made money in price terms. Full precision is
    kept; use round_pips() for display.
    """
    side = TradeDirection.parse(direction).side
    entry = parse_price(entry_price, "entry price")
    exit_ = parse_price(exit_price, "exit price")
    spec = _resolve(instrument, registry)

    if side is TradeDirection.BUY:
        distance = exit_ - entry
    else:
        distance = entry - exit_
    return distance * spec.pip_multiplier


def round_pips(pips: Number) -> Decimal:
    return parse_signed(pips, "pips").quantize(Decimal("1"), rounding=ROUND_HALF_UP)


def round_money(amount: Number) -> Decimal:
    return parse_signed(amount, "amount").quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def pip_value(
    lot_size: Number,
    instrument,
    registry: InstrumentRegistry = default_registry,
) -> Decimal:
    """Monetary value of one pip for the position size"""
    lots = parse_lot_size(lot_size)
    spec = _resolve(instrument, registry)
    return spec.pip_size * spec.units_per_lot(lots) * lots


def compute_profit(
    pips: Number,
    lot_size: Number,
    instrument,
    registry: InstrumentRegistry = default_registry,
) -> Decimal:
    """
    Profit/loss for a pip distance.

    Lot sizes >= 1 are priced at the instrument's standard contract size,
    smaller lots at its mini contract size. Sign follows `pips`.
    """
    per_pip = pip_value(lot_size, instrument, registry)
    return parse_signed(pips, "pips") * per_pip


def risk_reward_ratio(direction, entry: Number, take_profit: Number, stop_loss: Number):
    """Reward / risk as a Decimal, or None when the risk distance is zero"""
    side = TradeDirection.parse(direction).side
    entry_p = parse_price(entry, "entry price")
    tp = parse_price(take_profit, "take profit price")
    sl = parse_price(stop_loss, "stop loss price")

    if side is TradeDirection.BUY:
        profit_distance = abs(tp - entry_p)
        loss_distance = abs(entry_p - sl)
    else:
        profit_distance = abs(entry_p - tp)
        loss_distance = abs(sl - entry_p)

    if loss_distance == 0:
        return None
    return profit_distance / loss_distance


def compute_risk_reward(direction, entry: Number, take_profit: Number, stop_loss: Number) -> str:
    """'1:N.N', or 'N/A' when entry == stop loss"""
    ratio = risk_reward_ratio(direction, entry, take_profit, stop_loss)
    if ratio is None:
        return RISK_REWARD_UNDEFINED
    return f"1:{ratio.quantize(Decimal('0.1'), rounding=ROUND_HALF_UP)}"
