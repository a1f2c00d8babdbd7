"""Polymarket Gamma API market source (read-only).

Markets come from the events endpoint: each event is filtered into one
curated category and contributes its single best market.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime

import httpx

from binary_edge.common.cache import TTLCache
from binary_edge.common.errors import TransportError
from binary_edge.common.http import HttpClient
from binary_edge.common.types import Clock
from binary_edge.config import Settings, get_settings
from binary_edge.markets.models import Market, MarketCategory

logger = logging.getLogger(__name__)

_CACHE_KEY = "categorized"

CATEGORY_ALLOW: dict[MarketCategory, re.Pattern[str]] = {
    MarketCategory.CRYPTO: re.compile(
        r"bitcoin|btc|ethereum|eth|solana|sol|xrp|ripple|crypto|stablecoin|defi|web3|"
        r"cardano|dogecoin|coinbase|microstrategy|megaeth",
        re.IGNORECASE,
    ),
    MarketCategory.AI: re.compile(
        r"\bai\b|artificial intelligence|openai|gpt|anthropic|claude|deepseek|llm|"
        r"machine learning|gemini|chatgpt|frontier model",
        re.IGNORECASE,
    ),
    MarketCategory.SPORTS: re.compile(
        r"nba|nfl|mlb|nhl|premier league|champions league|super bowl|world cup|ufc|boxing|"
        r"tennis|grand slam|olympics|formula 1|\bf1\b|world series|playoffs|mvp|championship|"
        r"serie a|la liga|bundesliga|march madness|stanley cup|australian open",
        re.IGNORECASE,
    ),
    MarketCategory.POLITICS: re.compile(
        r"president|election|congress|senate|governor|supreme court|legislation|policy|"
        r"democrat|republican|vote|ballot|cabinet|impeach|approval|parliament|tariff|"
        r"federal reserve|fed chair|fed rate|treasury secretary|ceasefire|prime minister|"
        r"coalition",
        re.IGNORECASE,
    ),
}

# Meme/noise event titles never considered
BLOCKLIST = re.compile(
    r"elon.*tweet|tweet.*count|musk.*post|big brother|love island|reality tv|influencer|"
    r"celebrity|jersey number|kanye|kardashian|tier list|zodiac|astrology|onlyfans|"
    r"stranger things|jesus christ|\bgta\b|greenland",
    re.IGNORECASE,
)


def _parse_iso(s: str | None) -> datetime | None:
    if not s:
        return None
    try:
        return datetime.fromisoformat(s.replace("Z", "+00:00"))
    except ValueError:
        return None


def _parse_pair(raw: object) -> list:
    """Gamma encodes pairs as JSON strings like '["0.55","0.45"]'."""
    if isinstance(raw, list):
        return raw
    if isinstance(raw, str) and raw:
        value = json.loads(raw)
        if isinstance(value, list):
            return value
    return []


def parse_outcome_prices(raw: object) -> tuple[float, float]:
    """Parse (yes, no) prices; unparseable input gives (0.0, 0.0).

    A zero yes-price falls outside the tradeable band, so a malformed market
    is filtered rather than priced at a made-up 50%.
    """
    try:
        prices = _parse_pair(raw)
        yes = float(prices[0]) if len(prices) > 0 else 0.0
        no = float(prices[1]) if len(prices) > 1 else 0.0
    except (json.JSONDecodeError, ValueError, TypeError):
        return 0.0, 0.0
    return yes, no


def raw_to_market(raw: dict) -> Market:
    """Convert a raw Gamma API market dict to a Market."""
    market_id = str(raw.get("id", ""))
    yes_price, no_price = parse_outcome_prices(raw.get("outcomePrices", ""))

    if not (0.0 <= yes_price <= 1.0 and 0.0 <= no_price <= 1.0):
        logger.warning(
            "Market %s has out-of-range prices: YES=%.4f, NO=%.4f",
            market_id, yes_price, no_price,
        )
        yes_price, no_price = 0.0, 0.0

    yes_token, no_token = "", ""
    try:
        tokens = _parse_pair(raw.get("clobTokenIds", ""))
        if len(tokens) >= 2:
            yes_token, no_token = str(tokens[0]), str(tokens[1])
    except (json.JSONDecodeError, TypeError):
        logger.debug("Failed to parse clobTokenIds for market %s", market_id)

    return Market(
        market_id=market_id,
        question=raw.get("question", "") or "",
        outcome_yes_price=yes_price,
        outcome_no_price=no_price,
        volume=float(raw.get("volume", 0) or 0),
        liquidity=float(raw.get("liquidity", 0) or 0),
        active=bool(raw.get("active", True)),
        condition_id=raw.get("conditionId", raw.get("condition_id", "")) or "",
        slug=raw.get("slug", "") or "",
        end_date=_parse_iso(raw.get("endDate") or raw.get("end_date_iso")),
        yes_token_id=yes_token,
        no_token_id=no_token,
    )


def pick_best_market(
    markets: list[Market],
    min_price: float = 0.02,
    max_price: float = 0.98,
) -> Market | None:
    """Pick the most balanced, highest-volume market of an event.

    score = 0.7 * balance + 0.3 * min(volume / 1e7, 1), where balance is 1.0
    at 50/50 and 0.0 at the edges. Lopsided markets are skipped.
    """
    best: Market | None = None
    best_score = -1.0
    for m in markets:
        yes = m.outcome_yes_price
        if yes <= min_price or yes >= max_price:
            continue
        balance = 1.0 - abs(yes - 0.5) * 2.0
        score = balance * 0.7 + min(m.volume / 1e7, 1.0) * 0.3
        if score > best_score:
            best_score = score
            best = m
    return best


def categorize_events(
    events: list[dict],
    per_category: int = 3,
    min_price: float = 0.02,
    max_price: float = 0.98,
) -> dict[MarketCategory, list[Market]]:
    """Assign each event to at most one category and keep its best market."""
    result: dict[MarketCategory, list[Market]] = {cat: [] for cat in MarketCategory}

    for event in events:
        title = event.get("title") or ""
        if BLOCKLIST.search(title):
            continue

        for cat in MarketCategory:
            if len(result[cat]) >= per_category:
                continue
            if not CATEGORY_ALLOW[cat].search(title):
                continue

            markets = [
                raw_to_market(raw)
                for raw in event.get("markets") or []
                if raw.get("active", True) and not raw.get("closed", False)
            ]
            best = pick_best_market(markets, min_price, max_price)
            if best is not None:
                result[cat].append(best)
                break

    return result


async def fetch_events(settings: Settings) -> list[dict]:
    """Fetch active events ordered by volume from the Gamma API."""
    async with HttpClient(base_url=settings.gamma_api_url, timeout=settings.http_timeout) as client:
        resp = await client.get(
            "/events",
            params={
                "active": "true",
                "closed": "false",
                "order": "volume",
                "ascending": "false",
                "limit": 50,
            },
        )
        events = resp.json()
    if not isinstance(events, list):
        raise ValueError(f"expected a list of events, got {type(events).__name__}")
    return events


class GammaMarketSource:
    """Curated candidate markets with a TTL cache.

    A failed refresh serves the last cached snapshot if there is one;
    otherwise it raises TransportError.
    """

    def __init__(self, settings: Settings | None = None, clock: Clock | None = None) -> None:
        self._settings = settings or get_settings()
        self._cache: TTLCache[dict[MarketCategory, list[Market]]] = TTLCache(
            self._settings.market_cache_ttl, clock=clock,
        )

    async def get_categorized_markets(self) -> dict[MarketCategory, list[Market]]:
        cached = self._cache.get(_CACHE_KEY)
        if cached is not None:
            return cached

        try:
            events = await fetch_events(self._settings)
        except (httpx.HTTPError, ValueError) as exc:
            stale = self._cache.get_stale(_CACHE_KEY)
            if stale is not None:
                logger.warning("Gamma refresh failed (%s), serving stale markets", exc)
                return stale
            raise TransportError(f"Gamma events fetch failed: {exc}") from exc

        categorized = categorize_events(
            events,
            per_category=self._settings.markets_per_category,
            min_price=self._settings.min_tradeable_price,
            max_price=self._settings.max_tradeable_price,
        )
        self._cache.put(_CACHE_KEY, categorized)
        logger.info(
            "Fetched %d event(s): %s",
            len(events),
            ", ".join(f"{cat.value}={len(ms)}" for cat, ms in categorized.items()),
        )
        return categorized

    async def get_candidate_markets(self, category: MarketCategory | str) -> list[Market]:
        """Active candidate markets for one category."""
        wanted = MarketCategory(category)
        categorized = await self.get_categorized_markets()
        return list(categorized.get(wanted, []))
