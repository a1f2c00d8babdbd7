"""CoinGecko spot price source with TTL cache."""

from __future__ import annotations

import logging

import httpx

from binary_edge.common.cache import TTLCache
from binary_edge.common.errors import TransportError
from binary_edge.common.http import HttpClient
from binary_edge.common.types import Clock, utcnow
from binary_edge.config import Settings, get_settings
from binary_edge.markets.models import SpotPrice

logger = logging.getLogger(__name__)

_CACHE_KEY = "spot"

# CoinGecko id -> ticker symbol
SYMBOL_MAP: dict[str, str] = {
    "bitcoin": "BTC",
    "ethereum": "ETH",
    "solana": "SOL",
    "ripple": "XRP",
    "pax-gold": "GOLD",
}


def parse_simple_price(payload: dict) -> list[SpotPrice]:
    """Convert a /simple/price payload to SpotPrices.

    Coins missing from the payload, or quoted without a positive usd value,
    are left out: they are unavailable, not worth zero.
    """
    as_of = utcnow()
    prices: list[SpotPrice] = []
    for coin_id, symbol in SYMBOL_MAP.items():
        entry = payload.get(coin_id)
        if not isinstance(entry, dict):
            continue
        usd = entry.get("usd")
        if usd is None or float(usd) <= 0:
            logger.debug("No usd quote for %s", coin_id)
            continue
        prices.append(
            SpotPrice(
                coin_id=coin_id,
                symbol=symbol,
                value=float(usd),
                as_of=as_of,
                change_24h=entry.get("usd_24h_change"),
                volume_24h=entry.get("usd_24h_vol"),
            )
        )
    return prices


class CoinGeckoPriceSource:
    """Spot prices for the reference assets.

    Serves the last cached quotes when a refresh fails (HTTP 429 included);
    raises TransportError only when nothing is cached.
    """

    def __init__(self, settings: Settings | None = None, clock: Clock | None = None) -> None:
        self._settings = settings or get_settings()
        self._cache: TTLCache[list[SpotPrice]] = TTLCache(
            self._settings.price_cache_ttl, clock=clock,
        )

    async def _fetch(self) -> list[SpotPrice]:
        async with HttpClient(
            base_url=self._settings.coingecko_api_url,
            timeout=self._settings.http_timeout,
        ) as client:
            resp = await client.get(
                "/simple/price",
                params={
                    "ids": ",".join(SYMBOL_MAP),
                    "vs_currencies": "usd",
                    "include_24hr_change": "true",
                    "include_24hr_vol": "true",
                },
            )
            payload = resp.json()
        if not isinstance(payload, dict):
            raise ValueError(f"expected an object, got {type(payload).__name__}")
        return parse_simple_price(payload)

    async def get_spot_prices(self) -> list[SpotPrice]:
        cached = self._cache.get(_CACHE_KEY)
        if cached is not None:
            return cached

        try:
            prices = await self._fetch()
        except (httpx.HTTPError, ValueError, TypeError) as exc:
            stale = self._cache.get_stale(_CACHE_KEY)
            if stale is not None:
                logger.warning(
                    "CoinGecko refresh failed (%s), serving quotes %.0fs old",
                    exc, self._cache.age(_CACHE_KEY) or 0.0,
                )
                return stale
            raise TransportError(f"CoinGecko price fetch failed: {exc}") from exc

        self._cache.put(_CACHE_KEY, prices)
        return prices

    async def get_spot_price(self, symbol: str) -> SpotPrice | None:
        """Spot price for one ticker, or None if the asset is unavailable."""
        wanted = symbol.upper()
        for price in await self.get_spot_prices():
            if price.symbol == wanted:
                return price
        return None
