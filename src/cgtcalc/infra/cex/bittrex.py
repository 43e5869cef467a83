"""Bittrex order history CSV importer."""

import csv
import logging
from datetime import datetime
from typing import IO

from cgtcalc.domain.enums.trade import TradeKind
from cgtcalc.domain.models.money import amount
from cgtcalc.domain.models.trade import Trade
from cgtcalc.exceptions import InvalidDateError, InvalidOrderTypeError, InvalidSymbolError
from cgtcalc.infra.cex.fields import decimal_field, text_field

logger = logging.getLogger(__name__)

EXCHANGE = "Bittrex"
DATE_FORMAT = "%m/%d/%Y %I:%M:%S %p"  # 12/15/2017 6:20:35 PM


def record_to_trade(row: dict) -> Trade:
    closed = text_field(row, "Closed")
    try:
        date_time = datetime.strptime(closed, DATE_FORMAT)
    except ValueError as e:
        raise InvalidDateError(closed) from e

    # markets are written QUOTE-BASE, e.g. BTC-ETH
    market = text_field(row, "Exchange")
    quote_code, sep, base_code = market.partition("-")
    if not sep or not base_code or not quote_code:
        raise InvalidSymbolError(market)

    base_amount = amount(base_code, decimal_field(row, "Quantity"))
    quote_amount = amount(quote_code, decimal_field(row, "Price"))

    order_type = text_field(row, "Type").upper()
    if order_type == "LIMIT_BUY":
        kind, sell, buy = TradeKind.BUY, quote_amount, base_amount
    elif order_type == "LIMIT_SELL":
        kind, sell, buy = TradeKind.SELL, base_amount, quote_amount
    else:
        raise InvalidOrderTypeError(order_type)

    return Trade(
        date_time=date_time,
        kind=kind,
        buy=buy,
        sell=sell,
        fee=amount(quote_code, decimal_field(row, "CommissionPaid")),
        rate=decimal_field(row, "Limit"),
        exchange=EXCHANGE,
    )


def read_orders(stream: IO[str]) -> list[Trade]:
    trades = [record_to_trade(row) for row in csv.DictReader(stream)]
    logger.info("Bittrex import: %d trades", len(trades))
    return trades
