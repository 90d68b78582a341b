# pipdesk/instruments.py
"""
Instrument registry

Every symbol the calculators accept must be registered here with an explicit
pip scale. Lookups are exact (after normalising separators and case); a
symbol is never guessed from a substring such as "JPY".

    pip_scale 4 -> 1 pip = 0.0001  (EURUSD, GBPUSD, ...)
    pip_scale 2 -> 1 pip = 0.01    (USDJPY, EURJPY, ...)
    pip_scale 1 -> 1 pip = 0.1     (XAUUSD)
    pip_scale 0 -> 1 pip = 1.0     (BTCUSD, US30, ...)
"""
import logging
import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from .exceptions import UnknownInstrumentError

logger = logging.getLogger(__name__)

FX_STANDARD_UNITS = Decimal("100000")
FX_MINI_UNITS = Decimal("10000")


@dataclass(frozen=True)
class Instrument:
    symbol: str
    pip_scale: int
    asset_class: str = "forex"
    standard_units: Decimal = FX_STANDARD_UNITS
    mini_units: Decimal = FX_MINI_UNITS

    @property
    def pip_size(self) -> Decimal:
        return Decimal(1).scaleb(-self.pip_scale)

    @property
    def pip_multiplier(self) -> Decimal:
        return Decimal(1).scaleb(self.pip_scale)

    def units_per_lot(self, lot_size: Decimal) -> Decimal:
        """Contract units for the lot tier (standard lot vs mini/micro lot)"""
        return self.standard_units if lot_size >= 1 else self.mini_units


_FX_MAJORS = [
    "EURUSD", "GBPUSD", "AUDUSD", "NZDUSD", "USDCHF", "USDCAD",
    "EURGBP", "EURCHF", "EURAUD", "EURCAD", "EURNZD",
    "GBPCHF", "GBPAUD", "GBPCAD", "GBPNZD",
    "AUDCAD", "AUDCHF", "AUDNZD", "NZDCAD", "NZDCHF", "CADCHF",
]
_FX_JPY = [
    "USDJPY", "EURJPY", "GBPJPY", "CHFJPY", "AUDJPY", "CADJPY", "NZDJPY",
]

DEFAULT_INSTRUMENTS: List[Instrument] = (
    [Instrument(symbol, 4) for symbol in _FX_MAJORS]
    + [Instrument(symbol, 2) for symbol in _FX_JPY]
    + [
        Instrument("XAUUSD", 1, "metal", Decimal("100"), Decimal("10")),
        Instrument("XAGUSD", 3, "metal", Decimal("5000"), Decimal("500")),
        Instrument("BTCUSD", 0, "crypto", Decimal("1"), Decimal("0.1")),
        Instrument("ETHUSD", 0, "crypto", Decimal("1"), Decimal("0.1")),
        Instrument("US30", 0, "index", Decimal("1"), Decimal("0.1")),
        Instrument("NAS100", 0, "index", Decimal("1"), Decimal("0.1")),
        Instrument("SPX500", 0, "index", Decimal("1"), Decimal("0.1")),
        Instrument("GER40", 0, "index", Decimal("1"), Decimal("0.1")),
    ]
)

_SEPARATORS = re.compile(r"[\s/\-_.]")


def normalize_symbol(symbol: str) -> str:
    """'eur/usd' -> 'EURUSD'"""
    if symbol is None:
        return ""
    return _SEPARATORS.sub("", str(symbol)).upper()


class InstrumentRegistry:
    def __init__(self, instruments: Optional[Iterable[Instrument]] = None):
        self._instruments: Dict[str, Instrument] = {}
        for instrument in instruments or ():
            self.register(instrument)

    def register(self, instrument: Instrument) -> Instrument:
        symbol = normalize_symbol(instrument.symbol)
        if not symbol:
            raise ValueError("Instrument symbol must not be empty")
        if instrument.pip_scale < 0:
            raise ValueError(f"Invalid pip scale {instrument.pip_scale} for {symbol}")
        if symbol != instrument.symbol:
            instrument = Instrument(
                symbol,
                instrument.pip_scale,
                instrument.asset_class,
                instrument.standard_units,
                instrument.mini_units,
            )
        self._instruments[symbol] = instrument
        return instrument

    def get(self, symbol) -> Instrument:
        if isinstance(symbol, Instrument):
            return symbol
        key = normalize_symbol(symbol)
        instrument = self._instruments.get(key)
        if instrument is None:
            raise UnknownInstrumentError(str(symbol))
        return instrument

    def __contains__(self, symbol) -> bool:
        return normalize_symbol(symbol) in self._instruments

    def __len__(self) -> int:
        return len(self._instruments)

    def all(self) -> List[Instrument]:
        return sorted(self._instruments.values(), key=lambda i: (i.asset_class, i.symbol))


def parse_instrument_spec(spec: str) -> List[Instrument]:
    """Parse 'US500:1,UKOIL:2' into instruments (asset class 'custom')"""
    instruments = []
    for chunk in (spec or "").split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        symbol, sep, scale = chunk.partition(":")
        if not sep or not scale.strip().isdigit():
            raise ValueError(f"Invalid instrument spec '{chunk}', expected SYMBOL:scale")
        instruments.append(
            Instrument(normalize_symbol(symbol), int(scale), "custom", Decimal("1"), Decimal("0.1"))
        )
    return instruments


def load_extra_instruments(registry: InstrumentRegistry, spec: str) -> int:
    """Register instruments from the EXTRA_INSTRUMENTS setting"""
    count = 0
    for instrument in parse_instrument_spec(spec):
        registry.register(instrument)
        logger.info(f"Registered instrument {instrument.symbol} (pip scale {instrument.pip_scale})")
        count += 1
    return count


default_registry = InstrumentRegistry(DEFAULT_INSTRUMENTS)
