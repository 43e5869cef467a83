"""Binance REST API client with HMAC-SHA256 authentication."""

import hashlib
import hmac
import logging
import time
from urllib.parse import urlencode

from tenacity import retry, retry_if_not_exception_type, stop_after_attempt, wait_exponential

from cgtcalc.exceptions import ExternalServiceError
from cgtcalc.infra.http.rate_limited_client import RateLimitedClient

logger = logging.getLogger(__name__)

BASE_URL = "https://api.binance.com"
PAGE_LIMIT = 200


class BinanceClient:
    """Authenticated Binance REST API client."""

    def __init__(self, api_key: str, api_secret: str, http_client: RateLimitedClient) -> None:
        self._api_key = api_key
        self._api_secret = api_secret
        self._http = http_client

    def _sign(self, params: dict) -> dict:
        """Add timestamp and HMAC-SHA256 signature to request params."""
        params["timestamp"] = int(time.time() * 1000)
        query_string = urlencode(params)
        signature = hmac.new(
            self._api_secret.encode(), query_string.encode(), hashlib.sha256
        ).hexdigest()
        params["signature"] = signature
        return params

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(min=1, max=10),
        retry=retry_if_not_exception_type(ExternalServiceError),
        reraise=True,
    )
    async def _get(self, path: str, params: dict) -> list | dict:
        signed = self._sign(dict(params))
        resp = await self._http.get(
            f"{BASE_URL}{path}",
            params=signed,
            headers={"X-MBX-APIKEY": self._api_key},
        )
        data = resp.json()
        if isinstance(data, dict) and "code" in data and data["code"] != 200:
            raise ExternalServiceError(f"Binance API error {data.get('code')}: {data.get('msg', '')}")
        return data

    async def get_trades(self, symbol: str, from_id: int = 0, limit: int = PAGE_LIMIT) -> list[dict]:
        """GET /api/v3/myTrades — one page of fills for `symbol` starting at trade id `from_id`."""
        logger.info("Fetching %s trades from_id %d", symbol, from_id)
        result = await self._get("/api/v3/myTrades", {"symbol": symbol, "fromId": from_id, "limit": limit})
        return result if isinstance(result, list) else []

    async def get_trade_history(self, symbol: str) -> list[dict]:
        """Page through the entire fill history for `symbol` (e.g. ETHBTC)."""
        trades: list[dict] = []
        next_from_id = 0
        while True:
            batch = await self.get_trades(symbol, from_id=next_from_id)
            if not batch:
                break
            trades.extend(batch)
            next_from_id = max(t["id"] for t in batch) + 1
        logger.info("Fetched a total of %d %s trades", len(trades), symbol)
        return trades
