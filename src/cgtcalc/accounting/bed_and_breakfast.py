"""Bed-and-breakfast matching — pure functions over an explicit side-table.

A disposal followed within 30 days by acquisitions of the same asset is matched
against those acquisitions first, at their own prices, before anything is taken
from the Section 104 pool. The `remaining` side-table records how much of each
acquisition is still unmatched; it is the only channel through which trades
influence each other.
"""

import logging
from collections.abc import Callable, Iterable
from datetime import timedelta

from pydantic import BaseModel, ConfigDict

from cgtcalc.domain.models.money import GBP, Money, zero
from cgtcalc.domain.models.price import Price
from cgtcalc.domain.models.trade import Trade, TradeKey

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 30

RemainingBuys = dict[TradeKey, Money]


class FutureBuyMatch(BaseModel):
    """Part of a disposal matched against one later acquisition."""

    model_config = ConfigDict(frozen=True)

    buy_trade: Trade
    quantity: Money
    cost: Money


class BedAndBreakfastResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    matches: list[FutureBuyMatch] = []
    allowable_costs: Money
    unmatched: Money  # left for the main pool


def find_future_buys(
    disposal: Trade,
    trades: Iterable[Trade],
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> list[Trade]:
    """Acquisitions of the disposed asset from the disposal's date up to `window_days` later."""
    asset = disposal.sell.currency
    start = disposal.trade_date
    end = disposal.date_time + timedelta(days=window_days)
    return [
        t for t in trades
        if t.buy.currency == asset
        and t.trade_date >= start
        and t.date_time < end
    ]


def remaining_buy_amount(trade: Trade, remaining: RemainingBuys) -> Money:
    """Quantity of an acquisition not yet claimed by an earlier disposal."""
    return remaining.get(trade.key(), trade.buy)


def match_future_buys(
    disposal: Trade,
    candidates: Iterable[Trade],
    remaining: RemainingBuys,
    resolve_price: Callable[[Trade], Price],
) -> BedAndBreakfastResult:
    """Match `disposal` against `candidates` in order, consuming `remaining` in place.

    Each matched quantity is costed with the acquisition's own price and rate.
    """
    unmatched = disposal.sell
    special_costs = zero(GBP)
    matches: list[FutureBuyMatch] = []

    for future_buy in candidates:
        if not unmatched.is_positive():
            break
        key = future_buy.key()
        available = remaining.setdefault(key, future_buy.buy)
        if not available.is_positive():
            continue

        matched = available if available <= unmatched else unmatched
        remaining[key] = available - matched

        buy_price = resolve_price(future_buy)
        cost = buy_price.convert_to_gbp(matched, future_buy.rate)
        logger.debug(
            "Deducting SELL of %s from future BUY at %s, cost: %s",
            matched.display(), future_buy.date_time.isoformat(), cost.display(),
        )

        unmatched = unmatched - matched
        special_costs = special_costs + cost
        matches.append(FutureBuyMatch(buy_trade=future_buy, quantity=matched, cost=cost))

    return BedAndBreakfastResult(matches=matches, allowable_costs=special_costs, unmatched=unmatched)
