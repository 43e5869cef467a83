"""Tests for CoinGeckoProvider with mocked HTTP."""

from datetime import date, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from cgtcalc.domain.models.money import BTC, ETH, GBP, Currency
from cgtcalc.domain.models.price import CurrencyPair
from cgtcalc.exceptions import ExternalServiceError
from cgtcalc.infra.price.coingecko import SYMBOL_TO_COINGECKO, CoinGeckoProvider


def _response(status_code: int, data: dict | None = None) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = data or {}
    return resp


class TestCoinGeckoProvider:
    def test_symbol_mapping_coverage(self):
        assert SYMBOL_TO_COINGECKO["BTC"] == "bitcoin"
        assert SYMBOL_TO_COINGECKO["ETH"] == "ethereum"
        assert SYMBOL_TO_COINGECKO["USDC"] == "usd-coin"

    async def test_successful_fetch(self):
        mock_http = MagicMock()
        mock_http.get = AsyncMock(return_value=_response(200, {
            "prices": [
                [1514764800000, 9936.84],  # 2018-01-01
                [1514851200000, 9782.15],  # 2018-01-02
            ]
        }))
        provider = CoinGeckoProvider(http_client=mock_http)

        prices = await provider.fetch_daily_prices(BTC)

        assert len(prices) == 2
        assert prices[0].pair == CurrencyPair(BTC, GBP)
        assert prices[0].date_time == datetime(2018, 1, 1)
        assert prices[0].rate == Decimal("9936.84")

    async def test_request_params(self):
        mock_http = MagicMock()
        mock_http.get = AsyncMock(return_value=_response(200, {"prices": []}))
        provider = CoinGeckoProvider(http_client=mock_http, api_key="demo")

        await provider.fetch_daily_prices(ETH)

        url = mock_http.get.call_args[0][0]
        params = mock_http.get.call_args[1]["params"]
        assert url.endswith("/api/v3/coins/ethereum/market_chart")
        assert params["vs_currency"] == "gbp"
        assert params["interval"] == "daily"
        assert params["days"] == "max"
        assert params["x_cg_demo_api_key"] == "demo"

    async def test_unmapped_currency_raises(self):
        provider = CoinGeckoProvider(http_client=MagicMock())
        with pytest.raises(ExternalServiceError):
            await provider.fetch_daily_prices(Currency("NOPE"))

    async def test_api_error_raises(self):
        mock_http = MagicMock()
        mock_http.get = AsyncMock(return_value=_response(500))
        provider = CoinGeckoProvider(http_client=mock_http)

        with pytest.raises(ExternalServiceError):
            await provider.fetch_daily_prices(BTC)

    async def test_rate_limit_retries_then_gives_up(self):
        mock_http = MagicMock()
        mock_http.get = AsyncMock(return_value=_response(429))
        provider = CoinGeckoProvider(http_client=mock_http)

        with patch("cgtcalc.infra.price.coingecko.asyncio.sleep", new=AsyncMock()):
            with pytest.raises(ExternalServiceError):
                await provider.fetch_daily_prices(BTC)
        assert mock_http.get.call_count == 3

    async def test_rate_limit_then_success(self):
        mock_http = MagicMock()
        mock_http.get = AsyncMock(side_effect=[
            _response(429),
            _response(200, {"prices": [[1514764800000, 100]]}),
        ])
        provider = CoinGeckoProvider(http_client=mock_http)

        with patch("cgtcalc.infra.price.coingecko.asyncio.sleep", new=AsyncMock()):
            prices = await provider.fetch_daily_prices(BTC)
        assert len(prices) == 1

    async def test_load_prices_builds_index(self):
        mock_http = MagicMock()
        mock_http.get = AsyncMock(return_value=_response(200, {"prices": [[1514764800000, 700]]}))
        provider = CoinGeckoProvider(http_client=mock_http)

        prices = await provider.load_prices(["BTC", "ETH"])

        assert prices.get(CurrencyPair(ETH, GBP), date(2018, 1, 1)).rate == Decimal("700")
        assert prices.get(CurrencyPair(BTC, GBP), date(2018, 1, 1)) is not None
