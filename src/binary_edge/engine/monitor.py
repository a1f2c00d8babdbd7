"""Fill-state reporting for resting orders."""

from __future__ import annotations

from binary_edge.common.errors import TransportError
from binary_edge.engine.base import VenueClient
from binary_edge.engine.models import LogAction, LogEntry


async def monitor_positions(venue: VenueClient) -> list[LogEntry]:
    """One SCAN entry per open order with fills; one ERROR entry if the lookup fails.

    Reports state only. No P&L, no exits.
    """
    logs: list[LogEntry] = []

    try:
        open_orders = await venue.get_open_orders()
    except TransportError as exc:
        logs.append(LogEntry(LogAction.ERROR, f"Monitor failed: {exc}"))
        return logs

    for order in open_orders:
        if order.size_matched > 0:
            logs.append(
                LogEntry(
                    LogAction.SCAN,
                    f"Monitoring {order.asset} {order.side} @{order.price * 100:.0f}c "
                    f"matched:{order.size_matched:.0f}",
                )
            )

    return logs
