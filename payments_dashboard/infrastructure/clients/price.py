"""BTC price client with a short-lived cache and retry on transient failures"""

import asyncio
import time

import httpx

from payments_dashboard.config import settings
from payments_dashboard.domain.exceptions import PriceFeedError
from payments_dashboard.infrastructure.observability.metrics import price_feed_failures_counter

SATS_PER_BTC = 100_000_000


def sats_to_usd(sats: int, btc_price: float) -> float:
    """Convert sats to USD at the given BTC price, rounded to cents"""
    return round(sats / SATS_PER_BTC * btc_price, 2)


class PriceClient:
    """Client for the BTC/USD price feed"""

    def __init__(
        self,
        url: str | None = None,
        cache_seconds: float | None = None,
        max_retries: int = 3,
        backoff_base: float = 0.5,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.url = url or settings.price_api_url
        self.cache_seconds = settings.price_cache_seconds if cache_seconds is None else cache_seconds
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        self.transport = transport
        self._cached: tuple[float, float] | None = None  # (price, fetched_at monotonic)

    async def get_btc_price(self) -> float:
        """
        Current BTC price in USD.

        Retry strategy:
        - Served from cache while younger than cache_seconds
        - Exponential backoff: base, 2*base, 4*base ... (base * 2^(attempt-1))
        - Retries on 5xx errors and network failures; 4xx fails at once

        Raises:
            PriceFeedError: After all retries fail or on a malformed payload
        """
        if self._cached is not None:
            price, fetched_at = self._cached
            if time.monotonic() - fetched_at < self.cache_seconds:
                return price

        attempt = 0
        async with httpx.AsyncClient(transport=self.transport, timeout=settings.http_timeout_seconds) as client:
            while True:
                try:
                    response = await client.get(self.url)
                    response.raise_for_status()
                    price = float(response.json()["USD"])
                    self._cached = (price, time.monotonic())
                    return price

                except (KeyError, ValueError, TypeError) as e:
                    price_feed_failures_counter.inc()
                    raise PriceFeedError(f"Invalid price payload: {e}") from e

                except httpx.HTTPStatusError as e:
                    price_feed_failures_counter.inc()
                    if e.response.status_code < 500:
                        raise PriceFeedError(f"Price feed rejected request: {e.response.status_code}") from e

                    attempt += 1
                    if attempt >= self.max_retries:
                        raise PriceFeedError(f"Price feed unavailable after {attempt} attempts") from e

                    backoff = self.backoff_base * (2 ** (attempt - 1))
                    await asyncio.sleep(backoff)

                except httpx.RequestError as e:
                    attempt += 1
                    price_feed_failures_counter.inc()

                    if attempt >= self.max_retries:
                        raise PriceFeedError(f"Price feed unavailable after {attempt} attempts") from e

                    backoff = self.backoff_base * (2 ** (attempt - 1))
                    await asyncio.sleep(backoff)

    async def sats_to_usd(self, sats: int) -> float:
        return sats_to_usd(sats, await self.get_btc_price())
