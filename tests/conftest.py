"""Shared test fixtures."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from binary_edge.config import Settings
from binary_edge.engine.models import EdgeSignal, Side
from binary_edge.markets.models import Market, SpotPrice
from binary_edge.venue.models import OpenOrder
from binary_edge.venue.paper import PaperVenue


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_market(
    market_id: str = "m1",
    question: str = "Bitcoin Up or Down - 5 minute",
    yes: float = 0.45,
    **kwargs,
) -> Market:
    return Market(
        market_id=market_id,
        question=question,
        outcome_yes_price=yes,
        outcome_no_price=round(1.0 - yes, 4),
        volume=kwargs.pop("volume", 250000.0),
        liquidity=kwargs.pop("liquidity", 40000.0),
        yes_token_id=kwargs.pop("yes_token_id", f"tok-yes-{market_id}"),
        no_token_id=kwargs.pop("no_token_id", f"tok-no-{market_id}"),
        **kwargs,
    )


def make_signal(
    asset: str = "BTC",
    model_fair: float = 55.0,
    market_price: float = 50.0,
    side: Side | None = None,
    market: Market | None = None,
) -> EdgeSignal:
    divergence = model_fair - market_price
    if side is None:
        side = Side.BUY if divergence > 0 else Side.SELL
    return EdgeSignal(
        asset=asset,
        market=market or make_market(market_id=f"m-{asset}", yes=market_price / 100.0),
        model_fair=model_fair,
        market_price=market_price,
        divergence=divergence,
        side=side,
        d2=0.0,
        nd2=model_fair / 100.0,
    )


def open_order(
    price: float = 0.50,
    original_size: float = 100.0,
    size_matched: float = 0.0,
    asset: str = "tok-1",
    side: str = "BUY",
) -> OpenOrder:
    return OpenOrder(
        order_id=f"o-{asset}",
        asset=asset,
        side=side,
        price=price,
        original_size=original_size,
        size_matched=size_matched,
    )


@pytest.fixture
def settings():
    """Default engine settings, independent of the environment."""
    return Settings(_env_file=None)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def now():
    return datetime.now(timezone.utc)


@pytest.fixture
def spot_prices(now):
    return [
        SpotPrice(coin_id="bitcoin", symbol="BTC", value=66235.0, as_of=now),
        SpotPrice(coin_id="ethereum", symbol="ETH", value=3450.0, as_of=now),
        SpotPrice(coin_id="solana", symbol="SOL", value=145.0, as_of=now),
        SpotPrice(coin_id="ripple", symbol="XRP", value=0.52, as_of=now),
    ]


@pytest.fixture
def paper_venue():
    return PaperVenue(balance=1000.0)


@pytest.fixture
def mock_venue():
    """Venue with AsyncMock methods; configure return values per test."""
    venue = MagicMock()
    venue.get_balance = AsyncMock(return_value=1000.0)
    venue.get_open_orders = AsyncMock(return_value=[])
    venue.place_order = AsyncMock()
    return venue


# --- Mock API response fixtures ---


@pytest.fixture
def gamma_events_response():
    """Mock Gamma /events response spanning categories, noise and lopsided markets."""
    return [
        {
            "title": "Bitcoin Up or Down - 5 minute",
            "slug": "btc-updown-5m",
            "volume": "2500000",
            "markets": [
                {
                    "id": "btc-5m",
                    "conditionId": "cond-btc",
                    "question": "Bitcoin Up or Down - 5 minute",
                    "outcomePrices": '["0.45","0.55"]',
                    "clobTokenIds": '["111","222"]',
                    "volume": "2500000",
                    "liquidity": "50000",
                    "active": True,
                    "closed": False,
                    "slug": "btc-updown-5m",
                    "endDate": "2026-10-19T12:05:00Z",
                },
            ],
        },
        {
            "title": "Ethereum above $4k by Friday?",
            "slug": "eth-4k",
            "volume": "900000",
            "markets": [
                {
                    "id": "eth-4k-lopsided",
                    "question": "Ethereum above $4k by Friday?",
                    "outcomePrices": '["0.99","0.01"]',
                    "volume": "900000",
                },
                {
                    "id": "eth-4k-balanced",
                    "question": "Ethereum above $3.5k by Friday?",
                    "outcomePrices": '["0.52","0.48"]',
                    "volume": "400000",
                },
            ],
        },
        {
            "title": "Elon tweet count this week",
            "slug": "elon-tweets",
            "volume": "5000000",
            "markets": [
                {
                    "id": "noise",
                    "question": "Will Elon tweet 200 times?",
                    "outcomePrices": '["0.50","0.50"]',
                },
            ],
        },
        {
            "title": "Who will win the presidential election?",
            "slug": "election",
            "volume": "10000000",
            "markets": [
                {
                    "id": "pres",
                    "question": "Will the incumbent win the election?",
                    "outcomePrices": '["0.48","0.52"]',
                    "volume": "10000000",
                },
            ],
        },
    ]


@pytest.fixture
def coingecko_response():
    """Mock CoinGecko /simple/price response (ripple missing, gold zero)."""
    return {
        "bitcoin": {"usd": 66235.0, "usd_24h_change": 1.2, "usd_24h_vol": 3.1e10},
        "ethereum": {"usd": 3450.5, "usd_24h_change": -0.4, "usd_24h_vol": 1.2e10},
        "solana": {"usd": 145.2, "usd_24h_change": 2.5, "usd_24h_vol": 2.0e9},
        "pax-gold": {"usd": 0, "usd_24h_change": None, "usd_24h_vol": None},
    }
