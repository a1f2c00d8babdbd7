"""Order book data models."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class OrderRequest:
    """A limit order to place."""

    token_id: str
    price: float
    size: int
    side: str  # "BUY" or "SELL"
    expiration: int = 0

    def to_payload(self) -> dict:
        return {
            "tokenID": self.token_id,
            "price": self.price,
            "size": self.size,
            "side": self.side,
            "expiration": self.expiration,
        }


@dataclass(frozen=True)
class OrderResponse:
    order_id: str
    status: str


@dataclass(frozen=True)
class OpenOrder:
    """A resting order on the book.

    Attributes:
        order_id: venue order id
        asset: token id the order trades
        side: "BUY" or "SELL"
        price: limit price (0-1)
        original_size: shares at placement
        size_matched: shares filled so far
    """

    order_id: str
    asset: str
    side: str
    price: float
    original_size: float
    size_matched: float
    market: str = ""
    status: str = ""

    @property
    def remaining_size(self) -> float:
        return max(0.0, self.original_size - self.size_matched)

    @property
    def remaining_notional(self) -> float:
        """USD still at risk on the unfilled part of the order."""
        return self.price * self.remaining_size

    @classmethod
    def from_api(cls, raw: dict) -> OpenOrder:
        return cls(
            order_id=str(raw.get("id", "")),
            asset=str(raw.get("asset_id", "")),
            side=str(raw.get("side", "")),
            price=float(raw.get("price", 0) or 0),
            original_size=float(raw.get("original_size", 0) or 0),
            size_matched=float(raw.get("size_matched", 0) or 0),
            market=str(raw.get("market", "")),
            status=str(raw.get("status", "")),
        )


@dataclass(frozen=True)
class FilledOrder:
    """A matched trade."""

    trade_id: str
    asset: str
    side: str
    price: float
    size: float
    market: str = ""
    status: str = ""
    match_time: int = 0

    @classmethod
    def from_api(cls, raw: dict) -> FilledOrder:
        return cls(
            trade_id=str(raw.get("id", "")),
            asset=str(raw.get("asset_id", "")),
            side=str(raw.get("side", "")),
            price=float(raw.get("price", 0) or 0),
            size=float(raw.get("size", 0) or 0),
            market=str(raw.get("market", "")),
            status=str(raw.get("status", "")),
            match_time=int(raw.get("match_time", 0) or 0),
        )
