from enum import Enum


class TradeKind(str, Enum):
    """Which leg of a trade is the tracked asset."""

    BUY = "Buy"
    SELL = "Sell"
