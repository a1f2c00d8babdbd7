"""Collaborator protocols consumed by the engine."""

from __future__ import annotations

from typing import Protocol

from binary_edge.engine.models import LogEntry
from binary_edge.markets.models import Market, MarketCategory, SpotPrice
from binary_edge.venue.models import OpenOrder, OrderRequest, OrderResponse


class SpotPriceSource(Protocol):
    async def get_spot_prices(self) -> list[SpotPrice]:
        """All currently available reference spot prices."""
        ...

    async def get_spot_price(self, symbol: str) -> SpotPrice | None:
        """Spot price for ``symbol``, or None when unavailable."""
        ...


class MarketSource(Protocol):
    async def get_candidate_markets(self, category: MarketCategory | str) -> list[Market]:
        """Active, unsettled markets for a category."""
        ...


class VenueClient(Protocol):
    """Account and order routing. Each call may raise TransportError."""

    async def get_balance(self) -> float:
        ...

    async def get_open_orders(self) -> list[OpenOrder]:
        ...

    async def place_order(self, order: OrderRequest) -> OrderResponse:
        ...


class LogSink(Protocol):
    async def write(self, cycle_id: str, logs: list[LogEntry]) -> None:
        """Accept the ordered log of one completed cycle."""
        ...
