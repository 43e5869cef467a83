"""Rate-limited async HTTP client shared by the exchange and price-feed adapters."""

import asyncio
import logging
import time

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from cgtcalc.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

USER_AGENT = "cgtcalc"


class RateLimitedClient:
    """httpx.AsyncClient that sends at most `rate_per_second` requests.

    Connection failures are retried a few times and then raised as
    ExternalServiceError. Status codes are left to the caller.
    """

    def __init__(
        self,
        rate_per_second: float = 5.0,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._min_interval = 1.0 / rate_per_second
        self._last_request_at = 0.0
        self._lock = asyncio.Lock()
        self._client = httpx.AsyncClient(
            timeout=timeout,
            headers={"User-Agent": USER_AGENT},
            transport=transport,
        )

    async def _throttle(self) -> None:
        async with self._lock:
            wait = self._min_interval - (time.monotonic() - self._last_request_at)
            if wait > 0:
                logger.debug("Throttling for %.3fs", wait)
                await asyncio.sleep(wait)
            self._last_request_at = time.monotonic()

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, max=2),
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True,
    )
    async def _send(self, url: str, params: dict | None, headers: dict | None) -> httpx.Response:
        await self._throttle()
        return await self._client.get(url, params=params, headers=headers)

    async def get(
        self,
        url: str,
        params: dict | None = None,
        headers: dict | None = None,
    ) -> httpx.Response:
        try:
            resp = await self._send(url, params, headers)
        except httpx.TransportError as e:
            raise ExternalServiceError(f"GET {url} failed: {e}") from e
        logger.debug("GET %s -> %d", url, resp.status_code)
        return resp

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "RateLimitedClient":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
