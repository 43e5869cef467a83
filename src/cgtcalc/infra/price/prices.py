"""Prices — in-memory index of historical daily rates, loadable from CSV."""

import csv
import logging
from collections.abc import Iterable
from datetime import date, datetime, timezone
from typing import IO

from cgtcalc.domain.models.money import require
from cgtcalc.domain.models.price import CurrencyPair, Price
from cgtcalc.exceptions import InvalidDateError
from cgtcalc.infra.cex.fields import decimal_field, text_field

logger = logging.getLogger(__name__)

CSV_FIELDS = ["base_currency", "quote_currency", "date_time", "rate"]


def parse_rfc3339(value: str) -> datetime:
    """Parse an RFC 3339 timestamp into a naive UTC datetime."""
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError as e:
        raise InvalidDateError(value) from e
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


class Prices:
    """Historical prices keyed by currency pair, queried by calendar date."""

    def __init__(self, prices: Iterable[Price] = ()) -> None:
        self._prices: dict[CurrencyPair, list[Price]] = {}
        self._by_date: dict[CurrencyPair, dict[date, Price]] = {}
        for price in prices:
            self.add(price)

    def add(self, price: Price) -> None:
        self._prices.setdefault(price.pair, []).append(price)
        # first observation on a date wins
        self._by_date.setdefault(price.pair, {}).setdefault(price.date_time.date(), price)

    def get(self, pair: CurrencyPair, at: date) -> Price | None:
        """Daily price for `pair` on calendar date `at`, if one exists."""
        return self._by_date.get(pair, {}).get(at)

    def pairs(self) -> list[CurrencyPair]:
        return list(self._prices)

    def series(self, pair: CurrencyPair) -> list[Price]:
        return list(self._prices.get(pair, []))

    def __len__(self) -> int:
        return sum(len(p) for p in self._prices.values())

    @classmethod
    def read_csv(cls, stream: IO[str]) -> "Prices":
        """Load prices from a CSV with columns base_currency,quote_currency,date_time,rate."""
        prices = cls()
        reader = csv.DictReader(stream)
        for row in reader:
            base = require(text_field(row, "base_currency"))
            quote = require(text_field(row, "quote_currency"))
            prices.add(Price(
                pair=CurrencyPair(base, quote),
                date_time=parse_rfc3339(text_field(row, "date_time")),
                rate=decimal_field(row, "rate"),
            ))
        logger.info("Loaded %d prices for %d pairs", len(prices), len(prices.pairs()))
        return prices

    def write_csv(self, stream: IO[str]) -> None:
        writer = csv.DictWriter(stream, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for pair in self.pairs():
            for price in self.series(pair):
                writer.writerow({
                    "base_currency": pair.base.code,
                    "quote_currency": pair.quote.code,
                    "date_time": price.date_time.replace(tzinfo=timezone.utc).isoformat(),
                    "rate": str(price.rate),
                })
