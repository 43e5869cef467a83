from datetime import datetime
from decimal import Decimal

import pytest

from cgtcalc.domain.models.money import ETH, GBP
from cgtcalc.domain.models.price import CurrencyPair, Price
from cgtcalc.infra.price.prices import Prices


@pytest.fixture()
def prices() -> Prices:
    return Prices()


@pytest.fixture()
def eth_prices() -> Prices:
    """ETH/GBP daily closes for early 2018."""
    pair = CurrencyPair(ETH, GBP)
    return Prices([
        Price(pair=pair, date_time=datetime(2018, 2, 1), rate=Decimal("500")),
        Price(pair=pair, date_time=datetime(2018, 2, 2), rate=Decimal("520")),
        Price(pair=pair, date_time=datetime(2018, 2, 15), rate=Decimal("600")),
    ])
