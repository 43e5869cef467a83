"""Currency pairs and historical price quotes."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from cgtcalc.domain.models.money import GBP, Currency, Money


@dataclass(frozen=True)
class CurrencyPair:
    """Ordered (base, quote) pair. Equality and hash cover both currencies."""

    base: Currency
    quote: Currency

    def __str__(self) -> str:
        return f"{self.base.code}/{self.quote.code}"


class Price(BaseModel):
    """One quote of `pair.base` in terms of `pair.quote`, matched by calendar date."""

    model_config = ConfigDict(frozen=True)

    pair: CurrencyPair
    date_time: datetime
    rate: Decimal

    def convert_to_gbp(self, money: Money, trade_rate: Decimal) -> Money:
        """Value `money` in GBP.

        GBP is returned as is. The pair's base currency is multiplied by this
        price's rate. Any other currency is the trade's own base asset, so it is
        first converted into the pair's base through `trade_rate`.
        """
        if self.pair.quote != GBP:
            raise ValueError(f"Price {self.pair} is not quoted in GBP")
        if money.currency == GBP:
            return money
        if money.currency == self.pair.base:
            return Money(money.amount * self.rate, GBP)
        return Money(money.amount * trade_rate * self.rate, GBP)
