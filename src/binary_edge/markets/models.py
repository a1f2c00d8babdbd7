"""Market data models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class MarketCategory(Enum):
    """Curated market category."""

    CRYPTO = "crypto"
    AI = "ai"
    SPORTS = "sports"
    POLITICS = "politics"


@dataclass(frozen=True)
class Market:
    """A Polymarket binary market snapshot.

    Read-only to the engine; a new snapshot is built on every fetch.
    """

    market_id: str
    question: str
    outcome_yes_price: float  # Current YES price (0-1, proxy for market probability)
    outcome_no_price: float
    volume: float = 0.0
    liquidity: float = 0.0
    active: bool = True
    condition_id: str = ""
    slug: str = ""
    end_date: datetime | None = None
    yes_token_id: str = ""
    no_token_id: str = ""

    @property
    def outcome_prices(self) -> tuple[float, float]:
        """Ordered (yes, no) price pair."""
        return (self.outcome_yes_price, self.outcome_no_price)

    @property
    def order_token_id(self) -> str:
        """Token orders are routed to: the YES token, or the market id if unknown."""
        return self.yes_token_id or self.market_id


@dataclass(frozen=True)
class SpotPrice:
    """Spot quote for a reference asset.

    ``value`` is always a real quote; an unavailable asset is represented by
    the absence of a SpotPrice, never by a zero value.
    """

    coin_id: str
    symbol: str
    value: float
    as_of: datetime
    change_24h: float | None = None
    volume_24h: float | None = None
