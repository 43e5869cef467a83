"""Tests for the disposals CSV export."""

import csv
import io
from datetime import datetime
from decimal import Decimal

from cgtcalc.accounting.tax_engine import calculate
from cgtcalc.domain.enums.trade import TradeKind
from cgtcalc.domain.models.money import BTC, GBP, Money
from cgtcalc.domain.models.tax import Gains
from cgtcalc.domain.models.trade import Trade
from cgtcalc.report.csv_writer import CSV_FIELDS, write_disposals


class TestWriteDisposals:
    def test_header_only_when_empty(self):
        stream = io.StringIO()
        write_disposals(Gains(), stream)
        assert stream.getvalue().strip() == ",".join(CSV_FIELDS)

    def test_rows_keep_exact_amounts(self, prices):
        trades = [
            Trade(
                date_time=datetime(2018, 1, 1),
                kind=TradeKind.BUY,
                buy=Money(Decimal("4"), BTC),
                sell=Money(Decimal("1000"), GBP),
                fee=Money(Decimal("0"), GBP),
                rate=Decimal("250"),
            ),
            Trade(
                date_time=datetime(2018, 2, 1),
                kind=TradeKind.SELL,
                buy=Money(Decimal("500"), GBP),
                sell=Money(Decimal("1"), BTC),
                fee=Money(Decimal("1.5"), GBP),
                rate=Decimal("500"),
            ),
        ]
        gains = calculate(trades, prices).gains(2018)
        stream = io.StringIO()

        write_disposals(gains, stream)

        stream.seek(0)
        rows = list(csv.DictReader(stream))
        assert len(rows) == 2
        sell = rows[1]
        assert sell["kind"] == "Sell"
        assert sell["tax_year"] == "2018"
        assert sell["proceeds_gbp"] == "500"
        assert sell["fee_gbp"] == "1.5"
        assert Decimal(sell["allowable_costs_gbp"]) == Decimal("250")
