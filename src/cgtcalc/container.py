from dependency_injector import containers, providers

from cgtcalc.config import Settings
from cgtcalc.infra.cex.binance_client import BinanceClient
from cgtcalc.infra.cex.binance_loader import BinanceTradeLoader
from cgtcalc.infra.http.rate_limited_client import RateLimitedClient
from cgtcalc.infra.price.coingecko import CoinGeckoProvider


class Container(containers.DeclarativeContainer):
    settings = providers.Singleton(Settings)

    coingecko_http = providers.Factory(
        RateLimitedClient,
        rate_per_second=settings.provided.coingecko_rate_per_second,
        timeout=settings.provided.http_timeout,
    )

    binance_http = providers.Factory(
        RateLimitedClient,
        rate_per_second=settings.provided.binance_rate_per_second,
        timeout=settings.provided.http_timeout,
    )

    coingecko = providers.Factory(
        CoinGeckoProvider,
        http_client=coingecko_http,
        api_key=settings.provided.coingecko_api_key,
    )

    binance_client = providers.Factory(
        BinanceClient,
        api_key=settings.provided.binance_api_key,
        api_secret=settings.provided.binance_api_secret,
        http_client=binance_http,
    )

    binance_loader = providers.Factory(BinanceTradeLoader, client=binance_client)
