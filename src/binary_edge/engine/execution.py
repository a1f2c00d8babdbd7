"""Order routing for sized positions with per-order failure isolation."""

from __future__ import annotations

import logging
import math

from binary_edge.common.errors import TransportError
from binary_edge.common.types import clamp
from binary_edge.config import Settings, get_settings
from binary_edge.engine.base import VenueClient
from binary_edge.engine.models import LogAction, LogEntry, SizedPosition, TradeResult
from binary_edge.venue.models import OrderRequest

logger = logging.getLogger(__name__)


def round_to_tick(price: float, tick_size: float) -> float:
    """Round to the nearest tick and keep the result inside [tick, 1 - tick]."""
    decimals = max(0, -math.floor(math.log10(tick_size)))
    ticked = round(round(price / tick_size) * tick_size, decimals)
    return clamp(ticked, tick_size, round(1.0 - tick_size, decimals))


def build_order(position: SizedPosition, tick_size: float) -> OrderRequest:
    """Limit order for ``position`` at the tick-rounded price.

    Share count is re-checked against the rounded price so the order notional
    never exceeds the sized USD amount.
    """
    signal = position.signal
    price = round_to_tick(position.execution_price, tick_size)
    return OrderRequest(
        token_id=signal.market.order_token_id,
        price=price,
        size=min(position.shares, math.floor(position.size_usd / price)),
        side=signal.side.value,
    )


async def execute_trades(
    positions: list[SizedPosition],
    venue: VenueClient,
    settings: Settings | None = None,
) -> tuple[list[TradeResult], list[LogEntry]]:
    """Place one limit order per position, in order.

    A failed placement logs ERROR for that position's asset and the batch
    continues; successes log TRADE with enough detail to rebuild the decision.
    """
    if settings is None:
        settings = get_settings()

    results: list[TradeResult] = []
    logs: list[LogEntry] = []

    for pos in positions:
        signal = pos.signal
        order = build_order(pos, settings.tick_size)
        if order.size <= 0:
            logs.append(
                LogEntry(LogAction.SKIP, f"Below one share at {order.price * 100:.0f}c", signal.asset)
            )
            continue

        try:
            response = await venue.place_order(order)
        except TransportError as exc:
            logger.warning("Order failed for %s on %s: %s", signal.asset, order.token_id, exc)
            logs.append(LogEntry(LogAction.ERROR, f"Order failed: {exc}", signal.asset))
            continue

        results.append(TradeResult(position=pos, order_id=response.order_id, status=response.status))
        logs.append(
            LogEntry(
                LogAction.TRADE,
                f"{signal.side.value} @{order.price * 100:.0f}c ${round(pos.size_usd)} "
                f"edge:{abs(signal.divergence):.2f}% kelly:{pos.kelly_fraction * 100:.1f}% "
                f"orderID:{response.order_id}",
                signal.asset,
            )
        )

    return results, logs
