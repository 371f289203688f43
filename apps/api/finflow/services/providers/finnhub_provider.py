from __future__ import annotations

import logging

import httpx

from finflow.core.cache import Cache, NullCache, cache_key
from finflow.core.errors import ConfigurationError, SourceUnavailable
from finflow.services.providers.base import ArticleSource

logger = logging.getLogger(__name__)


class FinnhubProvider(ArticleSource):
    name = "finnhub"

    def __init__(
        self,
        api_key: str | None,
        *,
        base_url: str = "https://finnhub.io/api/v1",
        cache: Cache | None = None,
        general_ttl_seconds: int = 1800,
        timeout: float = 20,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.cache = cache or NullCache()
        self.general_ttl_seconds = general_ttl_seconds
        self.timeout = timeout
        self._transport = transport

    def _ready(self) -> bool:
        return bool(self.api_key)

    def require_configured(self) -> None:
        if not self._ready():
            raise ConfigurationError("FINNHUB_API_KEY is not configured")

    async def _get_json(self, path: str, params: dict) -> list[dict]:
        self.require_configured()
        url = f"{self.base_url}{path}"
        query = {**params, "token": self.api_key}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(url, params=query)
        except httpx.HTTPError as exc:
            raise SourceUnavailable(f"{type(exc).__name__} for {url}: {exc}") from exc

        if not response.is_success:
            raise SourceUnavailable(f"{response.reason_phrase} for {url}: {response.text}", status_code=response.status_code)

        try:
            payload = response.json()
        except ValueError as exc:
            raise SourceUnavailable(f"Invalid JSON from {url}", status_code=response.status_code) from exc

        if not isinstance(payload, list):
            logger.debug("Unexpected payload shape from %s: %s", url, type(payload).__name__)
            return []
        return payload

    async def fetch_general(self, from_date: str, to_date: str) -> list[dict]:
        # the general feed has no date filter, the window only scopes company news
        params = {"category": "general"}
        key = cache_key("finnhub:news", **params)
        return await self.cache.remember(key, lambda: self._get_json("/news", params), ttl_seconds=self.general_ttl_seconds)

    async def fetch_for_symbol(self, symbol: str, from_date: str, to_date: str) -> list[dict]:
        params = {"symbol": symbol, "from": from_date, "to": to_date}
        return await self._get_json("/company-news", params)
