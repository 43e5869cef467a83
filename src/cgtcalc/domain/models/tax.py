"""Domain types for UK capital gains: disposals, tax years and the report."""

from collections.abc import Iterator
from dataclasses import dataclass, field
from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from cgtcalc.domain.models.money import GBP, Currency, Money, zero
from cgtcalc.domain.models.price import Price
from cgtcalc.domain.models.trade import Trade


class PoolSnapshot(BaseModel):
    """State of a Section 104 pool at one point in the run."""

    model_config = ConfigDict(frozen=True)

    currency: Currency
    total: Money
    costs: Money  # GBP

    def cost_basis(self) -> Decimal:
        if self.total.is_zero():
            return Decimal(0)
        return self.costs.amount / self.total.amount


class Disposal(BaseModel):
    """The tax record computed for one trade, with all values in GBP."""

    model_config = ConfigDict(frozen=True)

    trade: Trade
    tax_year: int
    buy_value: Money
    sell_value: Money
    fee_value: Money
    price: Price
    allowable_costs: Money
    buy_pool: PoolSnapshot | None = None  # after this trade
    sell_pool: PoolSnapshot | None = None  # after this trade

    def proceeds(self) -> Money:
        return self.sell_value

    def fee(self) -> Money:
        return self.fee_value

    def gain(self) -> Money:
        return self.sell_value - self.allowable_costs - self.fee_value


class TaxYear(BaseModel):
    """A UK fiscal year, named by the calendar year in which it ends."""

    year: int
    disposals: list[Disposal] = []


@dataclass(frozen=True)
class Gains:
    """Disposals of one tax year (or all years) in trade order, with GBP totals."""

    year: int | None = None
    gains: list[Disposal] = field(default_factory=list)

    def __iter__(self) -> Iterator[Disposal]:
        return iter(self.gains)

    def __len__(self) -> int:
        return len(self.gains)

    def total_proceeds(self) -> Money:
        return sum((g.proceeds() for g in self.gains), zero(GBP))

    def total_allowable_costs(self) -> Money:
        return sum((g.allowable_costs for g in self.gains), zero(GBP))

    def total_fees(self) -> Money:
        return sum((g.fee() for g in self.gains), zero(GBP))

    def total_gain(self) -> Money:
        return sum((g.gain() for g in self.gains), zero(GBP))


class TaxReport(BaseModel):
    """Output of one calculation run."""

    model_config = ConfigDict(frozen=True)

    trades: list[Trade]
    years: dict[int, TaxYear]
    pools: dict[str, PoolSnapshot]

    @classmethod
    def build(
        cls,
        trades: list[Trade],
        disposals: list[Disposal],
        pools: dict[str, PoolSnapshot],
    ) -> "TaxReport":
        years: dict[int, TaxYear] = {}
        for disposal in disposals:
            years.setdefault(disposal.tax_year, TaxYear(year=disposal.tax_year)).disposals.append(disposal)
        return cls(trades=list(trades), years=years, pools=pools)

    def tax_years(self) -> list[int]:
        return sorted(self.years)

    def gains(self, year: int | None = None) -> Gains:
        if year is None:
            disposals = [d for ty in self.years.values() for d in ty.disposals]
        elif year in self.years:
            disposals = list(self.years[year].disposals)
        else:
            disposals = []
        disposals.sort(key=lambda d: d.trade.date_time)
        return Gains(year=year, gains=disposals)
