"""Disposals CSV export."""

import csv
from typing import IO

from cgtcalc.domain.models.tax import Gains

CSV_FIELDS = [
    "date_time",
    "tax_year",
    "exchange",
    "kind",
    "buy_currency",
    "buy_amount",
    "sell_currency",
    "sell_amount",
    "rate",
    "buy_value_gbp",
    "proceeds_gbp",
    "fee_gbp",
    "allowable_costs_gbp",
    "gain_gbp",
]


def write_disposals(gains: Gains, stream: IO[str]) -> None:
    """Write one row per disposal, amounts kept as exact decimals."""
    writer = csv.writer(stream)
    writer.writerow(CSV_FIELDS)
    for d in gains:
        t = d.trade
        writer.writerow([
            t.date_time.isoformat(),
            d.tax_year,
            t.exchange or "",
            t.kind.value,
            t.buy.currency.code,
            t.buy.amount,
            t.sell.currency.code,
            t.sell.amount,
            t.rate,
            d.buy_value.amount,
            d.sell_value.amount,
            d.fee_value.amount,
            d.allowable_costs.amount,
            d.gain().amount,
        ])
