"""USD price oracle backed by the CoinGecko simple-price API."""

from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass
from typing import Any, Literal

import httpx

from wallet_gate.core.settings import settings
from wallet_gate.services.cache import TTLCache, get_price_cache
from wallet_gate.services.errors import PriceUnavailable

logger = logging.getLogger(__name__)

PriceMode = Literal["coin_id", "onchain"]

DEFAULT_PLATFORM = "solana"
API_KEY_HEADER = "x-cg-demo-api-key"


@dataclass(frozen=True)
class PriceSource:
    """Where a USD unit price is looked up: a coin id, or platform + contract."""

    mode: PriceMode = "coin_id"
    coin_id: str | None = None
    platform: str | None = None
    token_address: str | None = None

    @property
    def cache_key(self) -> str:
        if self.mode == "coin_id":
            return f"cg:price:coin:{self.coin_id}:usd"
        return f"cg:price:onchain:{self.resolved_platform}:{self.resolved_address}:usd"

    @property
    def resolved_platform(self) -> str:
        return (self.platform or DEFAULT_PLATFORM).strip()

    @property
    def resolved_address(self) -> str:
        return (self.token_address or "").strip()


def _positive_price(value: Any) -> float:
    """Coerce an upstream price, rejecting anything but a finite positive number."""
    if isinstance(value, bool):
        raise PriceUnavailable("Invalid CoinGecko price")
    try:
        price = float(value)
    except (TypeError, ValueError) as exc:
        raise PriceUnavailable("Invalid CoinGecko price") from exc
    if not math.isfinite(price) or price <= 0:
        raise PriceUnavailable("Invalid CoinGecko price")
    return price


class CoinGeckoPriceOracle:
    """Resolves USD unit prices, caching each successful lookup for a short TTL."""

    def __init__(
        self,
        cache: TTLCache,
        *,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout_seconds: float | None = None,
        cache_ttl_seconds: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._cache = cache
        self.base_url = (base_url or settings.coingecko_base_url).rstrip("/")
        self._api_key = api_key if api_key is not None else settings.coingecko_api_key
        self._timeout = timeout_seconds or settings.price_timeout_seconds
        self.cache_ttl_seconds = cache_ttl_seconds or settings.price_cache_ttl_seconds
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._client_lock = asyncio.Lock()

    async def _ensure_client(self) -> httpx.AsyncClient:
        async with self._client_lock:
            if self._client is None:
                headers = {"accept": "application/json"}
                if self._api_key:
                    headers[API_KEY_HEADER] = self._api_key
                self._client = httpx.AsyncClient(
                    base_url=self.base_url,
                    headers=headers,
                    timeout=httpx.Timeout(self._timeout),
                    transport=self._transport,
                )
        return self._client

    async def _get_json(self, path: str, params: dict[str, str]) -> Any:
        client = await self._ensure_client()
        try:
            response = await client.get(path, params=params)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as exc:
            logger.warning("CoinGecko responded with %s for %s", exc.response.status_code, path)
            raise PriceUnavailable(f"CoinGecko error: {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            logger.warning("CoinGecko request to %s failed: %s", path, exc)
            raise PriceUnavailable(f"CoinGecko request failed: {exc}") from exc
        except ValueError as exc:
            raise PriceUnavailable("CoinGecko returned invalid JSON") from exc

    async def _fetch(self, source: PriceSource) -> float:
        if source.mode == "coin_id":
            if not source.coin_id:
                raise PriceUnavailable("Missing CoinGecko coin id")
            data = await self._get_json(
                "/simple/price",
                {"ids": source.coin_id, "vs_currencies": "usd"},
            )
            entry = data.get(source.coin_id) if isinstance(data, dict) else None
        elif source.mode == "onchain":
            address = source.resolved_address
            if not address:
                raise PriceUnavailable("Missing token address for onchain mode")
            data = await self._get_json(
                f"/simple/token_price/{source.resolved_platform}",
                {"contract_addresses": address, "vs_currencies": "usd"},
            )
            # CoinGecko keys the response by lowercase contract address.
            entry = data.get(address.lower()) if isinstance(data, dict) else None
        else:
            raise PriceUnavailable(f"Unknown price mode: {source.mode}")

        return _positive_price(entry.get("usd") if isinstance(entry, dict) else None)

    async def get_usd_price(self, source: PriceSource) -> float:
        """Return the USD unit price for `source`.

        Raises:
            PriceUnavailable: If the lookup fails or yields a non-positive price.
        """
        key = source.cache_key
        cached = await self._cache.get(key)
        if cached is not None:
            try:
                return _positive_price(cached)
            except PriceUnavailable:
                logger.warning("Ignoring invalid cached price under %s", key)

        price = await self._fetch(source)
        await self._cache.set(key, repr(price), self.cache_ttl_seconds)
        return price

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


_price_oracle: CoinGeckoPriceOracle | None = None


def get_price_oracle() -> CoinGeckoPriceOracle:
    """Return the shared price oracle wired to the Redis price cache."""
    global _price_oracle
    if _price_oracle is None:
        _price_oracle = CoinGeckoPriceOracle(get_price_cache())
    return _price_oracle


async def close_price_oracle() -> None:
    global _price_oracle
    if _price_oracle is not None:
        await _price_oracle.close()
        _price_oracle = None
