"""Coinbase Pro fills CSV importer.

    trade id,product,side,created at,size,size unit,price,fee,total,price/fee/total unit
    155157,ETH-GBP,SELL,2018-11-20T21:39:45.667Z,5.41307455,ETH,101.86,1.654127320989,549.721646342011,GBP
"""

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

EXCHANGE = "Coinbase Pro"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def record_to_trade(row: dict) -> Trade:
    created_at = text_field(row, "created at")
    try:
        date_time = datetime.strptime(created_at, DATE_FORMAT)
    except ValueError as e:
        raise InvalidDateError(created_at) from e

    product = text_field(row, "product")
    base_code, sep, quote_code = product.partition("-")
    if not sep or not base_code or not quote_code:
        raise InvalidSymbolError(product)

    base_amount = amount(base_code, decimal_field(row, "size"))
    quote_amount = amount(quote_code, decimal_field(row, "total"))

    side = text_field(row, "side").upper()
    if side == "BUY":
        # total is negative for buys
        kind, sell, buy = TradeKind.BUY, quote_amount * -1, base_amount
    elif side == "SELL":
        kind, sell, buy = TradeKind.SELL, base_amount, quote_amount
    else:
        raise InvalidOrderTypeError(side)

    return Trade(
        date_time=date_time,
        kind=kind,
        buy=buy,
        sell=sell,
        fee=amount(text_field(row, "price/fee/total unit"), decimal_field(row, "fee")),
        rate=decimal_field(row, "price"),
        exchange=EXCHANGE,
    )


def read_fills(stream: IO[str]) -> list[Trade]:
    trades = [record_to_trade(row) for row in csv.DictReader(stream)]
    logger.info("Coinbase import: %d trades", len(trades))
    return trades
