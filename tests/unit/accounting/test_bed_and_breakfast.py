"""Tests for 30-day bed-and-breakfast matching — pure functions."""

from datetime import datetime, timedelta
from decimal import Decimal

from cgtcalc.accounting.bed_and_breakfast import (
    find_future_buys,
    match_future_buys,
    remaining_buy_amount,
)
from cgtcalc.accounting.tax_engine import resolve_price
from cgtcalc.domain.enums.trade import TradeKind
from cgtcalc.domain.models.money import BTC, ETH, GBP, Money
from cgtcalc.domain.models.trade import Trade
from cgtcalc.infra.price.prices import Prices

SELL_TIME = datetime(2018, 8, 30, 12, 0, 0)


def _buy(qty: str, rate: str, when: datetime, asset=BTC) -> Trade:
    return Trade(
        date_time=when,
        kind=TradeKind.BUY,
        buy=Money(Decimal(qty), asset),
        sell=Money(Decimal(qty) * Decimal(rate), GBP),
        fee=Money(Decimal(0), GBP),
        rate=Decimal(rate),
    )


def _sell(qty: str, rate: str, when: datetime = SELL_TIME) -> Trade:
    return Trade(
        date_time=when,
        kind=TradeKind.SELL,
        buy=Money(Decimal(qty) * Decimal(rate), GBP),
        sell=Money(Decimal(qty), BTC),
        fee=Money(Decimal(0), GBP),
        rate=Decimal(rate),
    )


def _resolve(trade: Trade):
    return resolve_price(trade, Prices())


class TestFindFutureBuys:
    def test_within_window(self):
        sell = _sell("10", "2000")
        inside = _buy("1", "1500", SELL_TIME + timedelta(days=29))
        assert find_future_buys(sell, [sell, inside]) == [inside]

    def test_window_end_is_exclusive(self):
        sell = _sell("10", "2000")
        edge = _buy("1", "1500", SELL_TIME + timedelta(days=30))
        assert find_future_buys(sell, [sell, edge]) == []

    def test_earlier_day_excluded(self):
        sell = _sell("10", "2000")
        before = _buy("1", "1500", SELL_TIME - timedelta(days=1))
        assert find_future_buys(sell, [before, sell]) == []

    def test_same_calendar_day_included(self):
        sell = _sell("10", "2000")
        later_same_day = _buy("1", "1500", SELL_TIME.replace(hour=18))
        assert find_future_buys(sell, [sell, later_same_day]) == [later_same_day]

    def test_other_asset_excluded(self):
        sell = _sell("10", "2000")
        eth = _buy("1", "100", SELL_TIME + timedelta(days=1), asset=ETH)
        assert find_future_buys(sell, [sell, eth]) == []

    def test_custom_window(self):
        sell = _sell("10", "2000")
        buy = _buy("1", "1500", SELL_TIME + timedelta(days=10))
        assert find_future_buys(sell, [sell, buy], window_days=7) == []


class TestMatchFutureBuys:
    def test_partial_match_leaves_remainder_for_pool(self):
        sell = _sell("4000", "40")
        buy = _buy("500", "35", datetime(2018, 9, 11))
        remaining: dict = {}

        result = match_future_buys(sell, [buy], remaining, _resolve)

        assert result.allowable_costs == Money(Decimal("17500"), GBP)
        assert result.unmatched == Money(Decimal("3500"), BTC)
        assert remaining[buy.key()].is_zero()
        assert len(result.matches) == 1

    def test_buy_larger_than_disposal(self):
        sell = _sell("4000", "40")
        buy = _buy("5000", "35", datetime(2018, 9, 11))
        remaining: dict = {}

        result = match_future_buys(sell, [buy], remaining, _resolve)

        assert result.allowable_costs == Money(Decimal("140000"), GBP)
        assert result.unmatched.is_zero()
        assert remaining[buy.key()] == Money(Decimal("1000"), BTC)

    def test_consumes_buys_in_order_at_their_own_rates(self):
        sell = _sell("3", "2000")
        first = _buy("2", "1000", datetime(2018, 9, 1))
        second = _buy("2", "1500", datetime(2018, 9, 2))
        remaining: dict = {}

        result = match_future_buys(sell, [first, second], remaining, _resolve)

        # 2 @ 1000 + 1 @ 1500
        assert result.allowable_costs == Money(Decimal("3500"), GBP)
        assert [m.quantity for m in result.matches] == [Money(Decimal("2"), BTC), Money(Decimal("1"), BTC)]
        assert remaining[first.key()].is_zero()
        assert remaining[second.key()] == Money(Decimal("1"), BTC)

    def test_buy_shared_between_two_disposals(self):
        buy = _buy("10", "1500", datetime(2018, 9, 11))
        remaining: dict = {}

        first = match_future_buys(_sell("6", "2000"), [buy], remaining, _resolve)
        second = match_future_buys(_sell("6", "2000", SELL_TIME + timedelta(days=2)), [buy], remaining, _resolve)

        assert first.unmatched.is_zero()
        assert second.unmatched == Money(Decimal("2"), BTC)
        assert second.allowable_costs == Money(Decimal("6000"), GBP)
        assert remaining[buy.key()].is_zero()

    def test_no_candidates(self):
        sell = _sell("1", "2000")
        result = match_future_buys(sell, [], {}, _resolve)
        assert result.unmatched == sell.sell
        assert result.allowable_costs.is_zero()
        assert result.matches == []


class TestRemainingBuyAmount:
    def test_defaults_to_full_buy(self):
        buy = _buy("5", "100", datetime(2018, 9, 1))
        assert remaining_buy_amount(buy, {}) == buy.buy

    def test_uses_side_table(self):
        buy = _buy("5", "100", datetime(2018, 9, 1))
        assert remaining_buy_amount(buy, {buy.key(): Money(Decimal("2"), BTC)}) == Money(Decimal("2"), BTC)
