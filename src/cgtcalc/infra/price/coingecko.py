"""CoinGecko price provider — fetches full daily price history in GBP."""

import asyncio
import logging
from datetime import datetime, timezone
from decimal import Decimal

from cgtcalc.domain.models.money import GBP, Currency, require
from cgtcalc.domain.models.price import CurrencyPair, Price
from cgtcalc.exceptions import ExternalServiceError
from cgtcalc.infra.http.rate_limited_client import RateLimitedClient
from cgtcalc.infra.price.prices import Prices

logger = logging.getLogger(__name__)

# Currency code → CoinGecko coin ID
SYMBOL_TO_COINGECKO: dict[str, str] = {
    "BTC": "bitcoin",
    "ETH": "ethereum",
    "USDC": "usd-coin",
    "USDT": "tether",
    "LTC": "litecoin",
    "XRP": "ripple",
    "BNB": "binancecoin",
    "BCH": "bitcoin-cash",
    "XLM": "stellar",
    "ADA": "cardano",
    "DOT": "polkadot",
    "SOL": "solana",
    "LINK": "chainlink",
}

BASE_URL = "https://api.coingecko.com"

MAX_RETRIES = 3


class CoinGeckoProvider:
    """Fetch daily historical prices from the CoinGecko market_chart API with rate-limit retry."""

    def __init__(self, http_client: RateLimitedClient, api_key: str = "") -> None:
        self._http = http_client
        self._api_key = api_key

    async def fetch_daily_prices(self, currency: Currency, quote: Currency = GBP) -> list[Price]:
        """All daily prices of `currency` in `quote` since CoinGecko started tracking it.

        Retries with exponential backoff on 429; raises ExternalServiceError otherwise.
        """
        coin_id = SYMBOL_TO_COINGECKO.get(currency.code)
        if coin_id is None:
            raise ExternalServiceError(f"No CoinGecko ID mapping for {currency.code}")

        params: dict[str, str] = {
            "vs_currency": quote.code.lower(),
            "interval": "daily",
            "days": "max",
        }
        if self._api_key:
            params["x_cg_demo_api_key"] = self._api_key

        url = f"{BASE_URL}/api/v3/coins/{coin_id}/market_chart"

        for attempt in range(MAX_RETRIES):
            response = await self._http.get(url, params=params)

            if response.status_code == 429:
                wait = 2 ** (attempt + 1)  # 2, 4, 8 seconds
                logger.info("CoinGecko 429 rate limit for %s, waiting %ds...", coin_id, wait)
                await asyncio.sleep(wait)
                continue

            if response.status_code != 200:
                raise ExternalServiceError(f"CoinGecko returned {response.status_code} for {coin_id}")

            data = response.json()
            pair = CurrencyPair(currency, quote)
            prices = [
                Price(
                    pair=pair,
                    date_time=datetime.fromtimestamp(ts_ms // 1000, tz=timezone.utc).replace(tzinfo=None),
                    rate=Decimal(str(rate)),
                )
                for ts_ms, rate in data.get("prices", [])
            ]
            logger.info("%d %s prices fetched", len(prices), coin_id)
            return prices

        raise ExternalServiceError(f"CoinGecko exhausted retries for {coin_id}")

    async def load_prices(self, codes: list[str], quote: Currency = GBP) -> Prices:
        """Build a Prices index for each currency code in `codes`."""
        prices = Prices()
        for code in codes:
            for price in await self.fetch_daily_prices(require(code), quote):
                prices.add(price)
        return prices
