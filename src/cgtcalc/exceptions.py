class CgtCalcError(Exception):
    """Base class for all errors raised by cgtcalc."""


class CurrencyMismatchError(CgtCalcError, TypeError):
    """Arithmetic or ordering attempted between Money of different currencies."""


class InvalidTradeError(CgtCalcError):
    """A trade the engine cannot process (e.g. both legs in GBP)."""


class MissingPriceError(CgtCalcError):
    """No historical price exists for a conversion the calculation needs."""


class TradeParseError(CgtCalcError):
    """Upstream trade data could not be parsed."""


class UnknownCurrencyError(TradeParseError):
    def __init__(self, code: str) -> None:
        super().__init__(f"Unknown currency {code!r}")
        self.code = code


class InvalidDateError(TradeParseError):
    def __init__(self, value: str) -> None:
        super().__init__(f"Invalid date_time {value!r}")
        self.value = value


class InvalidOrderTypeError(TradeParseError):
    def __init__(self, value: str) -> None:
        super().__init__(f"Invalid order type {value!r}")
        self.value = value


class InvalidSymbolError(TradeParseError):
    def __init__(self, value: str) -> None:
        super().__init__(f"Invalid market symbol {value!r}, expected BASE-QUOTE")
        self.value = value


class ExternalServiceError(CgtCalcError):
    """An exchange or price-feed API returned an error."""
