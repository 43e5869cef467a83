"""Normalised trades CSV — the hand-off format between importers and the report."""

import csv
import logging
from collections.abc import Iterable
from typing import IO

from cgtcalc.domain.enums.trade import TradeKind
from cgtcalc.domain.models.money import amount
from cgtcalc.domain.models.trade import Trade
from cgtcalc.exceptions import InvalidOrderTypeError
from cgtcalc.infra.cex.fields import decimal_field, text_field
from cgtcalc.infra.price.prices import parse_rfc3339

logger = logging.getLogger(__name__)

CSV_FIELDS = [
    "date_time",
    "kind",
    "buy_currency",
    "buy_amount",
    "sell_currency",
    "sell_amount",
    "fee_currency",
    "fee_amount",
    "rate",
    "exchange",
]


def _kind(value: str) -> TradeKind:
    for kind in TradeKind:
        if kind.value.lower() == value.strip().lower():
            return kind
    raise InvalidOrderTypeError(value)


def row_to_trade(row: dict) -> Trade:
    sell_currency = text_field(row, "sell_currency")
    fee_currency = (row.get("fee_currency") or "").strip() or sell_currency
    return Trade(
        date_time=parse_rfc3339(text_field(row, "date_time")),
        kind=_kind(text_field(row, "kind")),
        buy=amount(text_field(row, "buy_currency"), decimal_field(row, "buy_amount", blank_as_zero=True)),
        sell=amount(sell_currency, decimal_field(row, "sell_amount", blank_as_zero=True)),
        fee=amount(fee_currency, decimal_field(row, "fee_amount", blank_as_zero=True)),
        rate=decimal_field(row, "rate", blank_as_zero=True),
        exchange=(row.get("exchange") or "").strip() or None,
    )


def trade_to_row(trade: Trade) -> dict:
    return {
        "date_time": trade.date_time.isoformat(),
        "kind": trade.kind.value,
        "buy_currency": trade.buy.currency.code,
        "buy_amount": str(trade.buy.amount),
        "sell_currency": trade.sell.currency.code,
        "sell_amount": str(trade.sell.amount),
        "fee_currency": trade.fee.currency.code,
        "fee_amount": str(trade.fee.amount),
        "rate": str(trade.rate),
        "exchange": trade.exchange or "",
    }


def read_trades(stream: IO[str]) -> list[Trade]:
    trades = [row_to_trade(row) for row in csv.DictReader(stream)]
    logger.info("Read %d trades", len(trades))
    return trades


def write_trades(trades: Iterable[Trade], stream: IO[str]) -> int:
    writer = csv.DictWriter(stream, fieldnames=CSV_FIELDS)
    writer.writeheader()
    count = 0
    for trade in trades:
        writer.writerow(trade_to_row(trade))
        count += 1
    return count
