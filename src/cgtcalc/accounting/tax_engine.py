"""TaxEngine — orchestrates Section 104 pooling + bed-and-breakfast matching."""

import logging
from collections.abc import Iterable

from cgtcalc.accounting.bed_and_breakfast import (
    DEFAULT_WINDOW_DAYS,
    RemainingBuys,
    find_future_buys,
    match_future_buys,
    remaining_buy_amount,
)
from cgtcalc.accounting.pool import Pool
from cgtcalc.accounting.tax_year import uk_tax_year
from cgtcalc.config import Settings
from cgtcalc.domain.models.money import GBP, Money, zero
from cgtcalc.domain.models.price import CurrencyPair, Price
from cgtcalc.domain.models.tax import Disposal, TaxReport
from cgtcalc.domain.models.trade import Trade, TradeKey
from cgtcalc.exceptions import InvalidTradeError, MissingPriceError
from cgtcalc.infra.price.prices import Prices

logger = logging.getLogger(__name__)


def resolve_price(trade: Trade, prices: Prices) -> Price:
    """GBP price for valuing `trade`.

    A trade quoted in GBP carries its own rate. Anything else needs the quote
    currency's GBP price on the trade's calendar date.
    """
    base, quote = trade.base, trade.quote
    if quote == GBP:
        return Price(pair=CurrencyPair(base, GBP), date_time=trade.date_time, rate=trade.rate)

    price = prices.get(CurrencyPair(quote, GBP), trade.trade_date)
    if price is None:
        raise MissingPriceError(f"Should have price for {trade.describe()} ({quote.code}/GBP)")
    return price


class TaxEngine:
    """Calculate UK capital gains for a list of trades.

    All mutable state (pools, the bed-and-breakfast side-table and the set of
    acquisitions already pooled) lives for the duration of one calculate() call.
    """

    def __init__(self, prices: Prices, window_days: int = DEFAULT_WINDOW_DAYS) -> None:
        self._prices = prices
        self._window_days = window_days

    def calculate(self, trades: Iterable[Trade]) -> TaxReport:
        ordered = sorted(trades, key=lambda t: t.date_time)
        logger.info("Calculating gains for %d trades", len(ordered))

        pools: dict[str, Pool] = {}
        remaining: RemainingBuys = {}
        pooled: set[TradeKey] = set()
        disposals = [self._process(trade, ordered, pools, remaining, pooled) for trade in ordered]

        report = TaxReport.build(
            ordered,
            disposals,
            {code: pool.snapshot() for code, pool in pools.items()},
        )
        logger.info("Calculated %d disposals over tax years %s", len(disposals), report.tax_years())
        return report

    def _process(
        self,
        trade: Trade,
        trades: list[Trade],
        pools: dict[str, Pool],
        remaining: RemainingBuys,
        pooled: set[TradeKey],
    ) -> Disposal:
        if not trade.is_acquisition() and not trade.is_disposal():
            raise InvalidTradeError(f"Trade has no non-GBP leg: {trade.describe()}")

        price = resolve_price(trade, self._prices)
        buy_pool = sell_pool = None
        allowable_costs = zero(GBP)

        if trade.is_acquisition():
            # only what earlier disposals have not already claimed enters the pool
            buy_amount = remaining_buy_amount(trade, remaining)
            costs = price.convert_to_gbp(buy_amount, trade.rate)
            pool = _pool_for(pools, trade.buy)
            pool.buy(buy_amount, costs)
            pooled.add(trade.key())
            buy_pool = pool.snapshot()

        if trade.is_disposal():
            candidates = find_future_buys(trade, trades, self._window_days)
            matched = match_future_buys(
                trade, candidates, remaining, lambda t: resolve_price(t, self._prices),
            )
            pool = _pool_for(pools, trade.sell)
            for match in matched.matches:
                # a same-day acquisition already pooled leaves the pool at its own cost
                if match.buy_trade.key() in pooled:
                    pool.withdraw(match.quantity, match.cost)
            allowable_costs = pool.sell(matched.unmatched) + matched.allowable_costs
            sell_pool = pool.snapshot()

        disposal = Disposal(
            trade=trade,
            tax_year=uk_tax_year(trade.date_time),
            buy_value=self._to_gbp(trade.buy, trade, price),
            sell_value=self._to_gbp(trade.sell, trade, price),
            fee_value=self._to_gbp(trade.fee, trade, price),
            price=price,
            allowable_costs=allowable_costs,
            buy_pool=buy_pool,
            sell_pool=sell_pool,
        )
        logger.debug("Disposal %s: allowable costs %s", trade.describe(), allowable_costs.display())
        return disposal

    def _to_gbp(self, money: Money, trade: Trade, price: Price) -> Money:
        if money.currency == GBP:
            return money
        if money.currency in (trade.buy.currency, trade.sell.currency):
            return price.convert_to_gbp(money, trade.rate)
        if money.is_zero():
            return zero(GBP)
        # e.g. an exchange token fee: value it directly
        direct = self._prices.get(CurrencyPair(money.currency, GBP), trade.trade_date)
        if direct is None:
            raise MissingPriceError(
                f"Should have price for fee {money} ({money.currency.code}/GBP) on {trade.describe()}"
            )
        return Money(money.amount * direct.rate, GBP)


def _pool_for(pools: dict[str, Pool], money: Money) -> Pool:
    code = money.currency.code
    if code not in pools:
        pools[code] = Pool(money.currency)
    return pools[code]


def calculate(trades: Iterable[Trade], prices: Prices, settings: Settings | None = None) -> TaxReport:
    """Run the calculation over `trades`, raising MissingPriceError if any price is unavailable."""
    window_days = settings.bed_and_breakfast_days if settings is not None else DEFAULT_WINDOW_DAYS
    return TaxEngine(prices, window_days=window_days).calculate(trades)
