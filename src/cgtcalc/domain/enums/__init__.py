from cgtcalc.domain.enums.trade import TradeKind

__all__ = [
    "TradeKind",
]
