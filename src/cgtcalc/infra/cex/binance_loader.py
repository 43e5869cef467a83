"""BinanceTradeLoader — turns Binance fills for one market into Trades."""

import logging
from datetime import datetime, timezone

from cgtcalc.domain.enums.trade import TradeKind
from cgtcalc.domain.models.money import Currency, Money, amount, require
from cgtcalc.domain.models.trade import Trade
from cgtcalc.exceptions import InvalidSymbolError, TradeParseError
from cgtcalc.infra.cex.binance_client import BinanceClient
from cgtcalc.infra.cex.fields import decimal_field, text_field

logger = logging.getLogger(__name__)

EXCHANGE = "Binance"


def parse_symbol(symbol: str) -> tuple[Currency, Currency]:
    """Split a BASE-QUOTE market symbol, e.g. ETH-BTC."""
    base_code, sep, quote_code = symbol.strip().partition("-")
    if not sep or not base_code or not quote_code:
        raise InvalidSymbolError(symbol)
    return require(base_code), require(quote_code)


def fill_to_trade(fill: dict, base: Currency, quote: Currency) -> Trade:
    qty = decimal_field(fill, "qty")
    price = decimal_field(fill, "price")
    base_amount = Money(qty, base)  # ETH in ETH/BTC
    quote_amount = Money(qty * price, quote)  # BTC in ETH/BTC

    is_buyer = fill.get("isBuyer")
    if is_buyer is None:
        raise TradeParseError("Missing column 'isBuyer'")

    if is_buyer:
        kind, buy, sell = TradeKind.BUY, base_amount, quote_amount
    else:
        kind, buy, sell = TradeKind.SELL, quote_amount, base_amount

    return Trade(
        date_time=datetime.fromtimestamp(int(decimal_field(fill, "time")) / 1000, tz=timezone.utc),
        kind=kind,
        buy=buy,
        sell=sell,
        fee=amount(text_field(fill, "commissionAsset"), decimal_field(fill, "commission")),
        rate=price,
        exchange=EXCHANGE,
    )


class BinanceTradeLoader:
    def __init__(self, client: BinanceClient) -> None:
        self._client = client

    async def load(self, symbol: str) -> list[Trade]:
        base, quote = parse_symbol(symbol)
        fills = await self._client.get_trade_history(f"{base.code}{quote.code}")
        trades = [fill_to_trade(f, base, quote) for f in fills]
        logger.info("Binance import: %d trades for %s", len(trades), symbol)
        return trades
