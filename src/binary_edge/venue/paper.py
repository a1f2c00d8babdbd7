"""In-process venue for dry runs: nothing leaves the machine."""

from __future__ import annotations

import itertools
import logging

from binary_edge.venue.models import OpenOrder, OrderRequest, OrderResponse

logger = logging.getLogger(__name__)


class PaperVenue:
    """Venue stand-in with a fixed balance that records placed orders.

    Placed orders rest unfilled, so they count toward open exposure on the
    next cycle exactly like live orders would.
    """

    def __init__(self, balance: float, open_orders: list[OpenOrder] | None = None) -> None:
        self.balance = balance
        self.open_orders: list[OpenOrder] = list(open_orders or [])
        self.placed: list[OrderRequest] = []
        self._ids = itertools.count(1)

    async def get_balance(self) -> float:
        return self.balance

    async def get_open_orders(self) -> list[OpenOrder]:
        return list(self.open_orders)

    async def place_order(self, order: OrderRequest) -> OrderResponse:
        order_id = f"paper-{next(self._ids)}"
        self.placed.append(order)
        self.open_orders.append(
            OpenOrder(
                order_id=order_id,
                asset=order.token_id,
                side=order.side,
                price=order.price,
                original_size=float(order.size),
                size_matched=0.0,
                status="LIVE",
            )
        )
        logger.info("[paper] %s %d @ %.2f on %s", order.side, order.size, order.price, order.token_id)
        return OrderResponse(order_id=order_id, status="LIVE")
