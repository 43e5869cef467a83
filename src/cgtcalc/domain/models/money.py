"""Currency and Money value types.

Money keeps an exact Decimal amount tagged with its Currency. Arithmetic and
ordering between two Money values require the same currency; mixing them is a
programming error and raises CurrencyMismatchError. Scaling by a plain number
is always allowed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from cgtcalc.exceptions import CurrencyMismatchError, UnknownCurrencyError


@dataclass(frozen=True)
class Currency:
    """A currency or crypto-asset. Identity is the code alone."""

    code: str
    name: str = field(default="", compare=False)
    decimal_places: int = field(default=2, compare=False)

    def __str__(self) -> str:
        return self.code


GBP = Currency("GBP", "Pound Sterling", 2)
USD = Currency("USD", "US Dollar", 2)
EUR = Currency("EUR", "Euro", 2)
BTC = Currency("BTC", "Bitcoin", 8)
ETH = Currency("ETH", "Ethereum", 18)
USDC = Currency("USDC", "USD Coin", 6)
USDT = Currency("USDT", "Tether", 6)
LTC = Currency("LTC", "Litecoin", 8)
XRP = Currency("XRP", "Ripple", 6)
BNB = Currency("BNB", "Binance Coin", 8)
BCH = Currency("BCH", "Bitcoin Cash", 8)
XLM = Currency("XLM", "Stellar Lumens", 7)
ADA = Currency("ADA", "Cardano", 6)
DOT = Currency("DOT", "Polkadot", 10)
SOL = Currency("SOL", "Solana", 9)
LINK = Currency("LINK", "Chainlink", 18)

CURRENCIES: dict[str, Currency] = {
    c.code: c
    for c in (GBP, USD, EUR, BTC, ETH, USDC, USDT, LTC, XRP, BNB, BCH, XLM, ADA, DOT, SOL, LINK)
}


def find(code: str) -> Currency | None:
    """Look up a known currency by code (case-insensitive)."""
    return CURRENCIES.get(code.strip().upper())


def require(code: str) -> Currency:
    """Like find(), but raises UnknownCurrencyError for unknown codes."""
    currency = find(code)
    if currency is None:
        raise UnknownCurrencyError(code)
    return currency


@dataclass(frozen=True)
class Money:
    amount: Decimal
    currency: Currency

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, "amount", Decimal(str(self.amount)))

    def _check(self, other: object) -> Money:
        if not isinstance(other, Money):
            raise TypeError(f"Expected Money, got {type(other).__name__}")
        if other.currency != self.currency:
            raise CurrencyMismatchError(
                f"Currency mismatch: {self.currency.code} vs {other.currency.code}"
            )
        return other

    def __add__(self, other: Money) -> Money:
        other = self._check(other)
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: Money) -> Money:
        other = self._check(other)
        return Money(self.amount - other.amount, self.currency)

    def __mul__(self, factor: Decimal | int) -> Money:
        if isinstance(factor, Money):
            return NotImplemented
        return Money(self.amount * Decimal(factor), self.currency)

    __rmul__ = __mul__

    def __truediv__(self, divisor: Decimal | int) -> Money:
        if isinstance(divisor, Money):
            return NotImplemented
        return Money(self.amount / Decimal(divisor), self.currency)

    def __neg__(self) -> Money:
        return Money(-self.amount, self.currency)

    def __abs__(self) -> Money:
        return Money(abs(self.amount), self.currency)

    def __lt__(self, other: Money) -> bool:
        return self.amount < self._check(other).amount

    def __le__(self, other: Money) -> bool:
        return self.amount <= self._check(other).amount

    def __gt__(self, other: Money) -> bool:
        return self.amount > self._check(other).amount

    def __ge__(self, other: Money) -> bool:
        return self.amount >= self._check(other).amount

    def is_zero(self) -> bool:
        return self.amount == 0

    def is_positive(self) -> bool:
        return self.amount > 0

    def display(self) -> str:
        """Amount rounded to the currency's decimal places, with its code."""
        places = Decimal(1).scaleb(-self.currency.decimal_places)
        return f"{self.amount.quantize(places)} {self.currency.code}"

    def __str__(self) -> str:
        return f"{self.amount} {self.currency.code}"


def zero(currency: Currency) -> Money:
    return Money(Decimal(0), currency)


def amount(code: str, value: Decimal | str) -> Money:
    """Build Money from a currency code, raising UnknownCurrencyError if unknown."""
    return Money(Decimal(str(value)), require(code))
