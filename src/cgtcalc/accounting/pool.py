"""Section 104 pool — running holding and allowable cost of one asset."""

import logging
from decimal import Decimal

from cgtcalc.domain.models.money import GBP, Currency, Money, zero
from cgtcalc.domain.models.tax import PoolSnapshot

logger = logging.getLogger(__name__)


class Pool:
    """Running total of an asset and the GBP cost of what is still held.

    Costs leave the pool in proportion to the quantity sold, so the average
    cost per unit never changes on a disposal.
    """

    def __init__(self, currency: Currency) -> None:
        self.currency = currency
        self.total: Money = zero(currency)
        self.costs: Money = zero(GBP)

    def buy(self, amount: Money, cost: Money) -> None:
        self.total = self.total + amount
        self.costs = self.costs + cost
        logger.debug("Pool BUY %s, costs: %s", amount.display(), cost.display())
        logger.debug("Pool: %r", self)

    def sell(self, amount: Money) -> Money:
        """Remove `amount` from the pool and return the allowable cost it takes with it."""
        if amount > self.total:
            logger.warning(
                "Selling %s from %s pool holding only %s, consuming all remaining costs",
                amount.display(), self.currency.code, self.total.display(),
            )
            costs = self.costs
            self.total = zero(self.currency)
            self.costs = zero(GBP)
        elif self.total.is_zero():
            costs = zero(GBP)
        else:
            # proportional share: costs * amount / total
            costs = Money(self.costs.amount * amount.amount / self.total.amount, GBP)
            self.total = self.total - amount
            self.costs = self.costs - costs
        logger.debug("Pool SELL %s, costs: %s", amount.display(), costs.display())
        logger.debug("Pool: %r", self)
        return costs

    def withdraw(self, amount: Money, cost: Money) -> None:
        """Take back `amount` that entered the pool at a known `cost`."""
        if amount > self.total:
            logger.warning(
                "Withdrawing %s from %s pool holding only %s",
                amount.display(), self.currency.code, self.total.display(),
            )
            amount = self.total
        self.total = self.total - amount
        self.costs = self.costs - cost if cost < self.costs else zero(GBP)
        logger.debug("Pool WITHDRAW %s, costs: %s", amount.display(), cost.display())
        logger.debug("Pool: %r", self)

    def cost_basis(self) -> Decimal:
        """Average GBP cost per unit held; zero for an empty pool."""
        if self.total.is_zero():
            return Decimal(0)
        return self.costs.amount / self.total.amount

    def snapshot(self) -> PoolSnapshot:
        return PoolSnapshot(currency=self.currency, total=self.total, costs=self.costs)

    def __repr__(self) -> str:
        return f"currency: {self.currency.code}, total: {self.total.display()}, costs: {self.costs.display()}"
