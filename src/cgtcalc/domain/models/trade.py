"""Trade — one exchange event as produced by the importers."""

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, field_validator

from cgtcalc.domain.enums.trade import TradeKind
from cgtcalc.domain.models.money import GBP, Currency, Money


class TradeKey(NamedTuple):
    """Stable identity of a trade across a calculation run."""

    date_time: datetime
    kind: TradeKind
    buy: Money
    sell: Money
    fee: Money
    rate: Decimal
    exchange: str | None


class Trade(BaseModel):
    """Sold `sell` to acquire `buy`. `kind` says which leg is the tracked asset."""

    model_config = ConfigDict(frozen=True)

    date_time: datetime  # naive UTC
    kind: TradeKind
    buy: Money
    sell: Money
    fee: Money
    rate: Decimal  # quote per unit of base at trade time
    exchange: str | None = None

    @field_validator("date_time")
    @classmethod
    def _naive_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    def key(self) -> TradeKey:
        return TradeKey(
            self.date_time, self.kind, self.buy, self.sell, self.fee, self.rate, self.exchange,
        )

    @property
    def trade_date(self) -> date:
        return self.date_time.date()

    @property
    def base(self) -> Currency:
        """The tracked asset: bought on a Buy, sold on a Sell."""
        return self.buy.currency if self.kind == TradeKind.BUY else self.sell.currency

    @property
    def quote(self) -> Currency:
        """The currency the tracked asset was priced in."""
        return self.sell.currency if self.kind == TradeKind.BUY else self.buy.currency

    def is_acquisition(self) -> bool:
        return self.buy.currency != GBP

    def is_disposal(self) -> bool:
        return self.sell.currency != GBP

    def describe(self) -> str:
        return f"buy: {self.buy} sell: {self.sell} at {self.date_time.isoformat()}"
