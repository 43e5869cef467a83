"""Field access for exchange export rows, raising TradeParseError on bad input."""

from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from typing import Any

from cgtcalc.exceptions import TradeParseError


def text_field(row: Mapping[str, Any], column: str) -> str:
    value = row.get(column)
    if value is None:
        raise TradeParseError(f"Missing column {column!r}")
    return str(value).strip()


def decimal_field(row: Mapping[str, Any], column: str, blank_as_zero: bool = False) -> Decimal:
    """Exact decimal from `column`; a blank cell is an error unless `blank_as_zero`."""
    if blank_as_zero and not str(row.get(column) or "").strip():
        return Decimal(0)
    value = text_field(row, column)
    try:
        return Decimal(value)
    except InvalidOperation as e:
        raise TradeParseError(f"Invalid {column} {value!r}") from e
