# pipdesk/exceptions.py


class PipDeskError(Exception):
    """Base class for domain errors raised by the calculation core"""

    status_code = 422

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidPriceError(PipDeskError):
    """Price is non-positive, non-numeric or failed to parse"""


class InvalidSignalLevelsError(InvalidPriceError):
    """Take-profit / stop-loss on the wrong side of the entry"""


class InvalidLotSizeError(PipDeskError):
    """Lot size is non-positive or failed to parse"""


class InvalidDirectionError(PipDeskError):
    pass


class UnknownInstrumentError(PipDeskError):
    """No pip scale configured for the symbol"""

    def __init__(self, symbol: str):
        super().__init__(f"No pip scale configured for instrument '{symbol}'")
        self.symbol = symbol


class IllegalTransitionError(PipDeskError):
    """Lifecycle transition from a terminal state, or without admin role"""

    status_code = 409
