"""Fractional-Kelly position sizing under per-position and aggregate exposure caps."""

from __future__ import annotations

import logging
import math

from binary_edge.common.errors import RiskHalt, TransportError
from binary_edge.common.types import clamp
from binary_edge.config import Settings, get_settings
from binary_edge.engine.base import VenueClient
from binary_edge.engine.models import (
    EdgeSignal,
    LogAction,
    LogEntry,
    RiskState,
    Side,
    SizedPosition,
)

logger = logging.getLogger(__name__)


def kelly_fraction(
    model_prob: float,
    market_prob: float,
    side: Side,
    multiplier: float = 0.25,
    cap: float = 0.05,
) -> float:
    """Fraction of bankroll to stake on ``side``.

    Kelly = (p * b - q) / b
    where b = 1 / market_prob - 1 for BUY (payout odds on YES)
    and   b = 1 / (1 - market_prob) - 1 for SELL,
    p = model_prob and q = 1 - p.

    Args:
        model_prob: Model probability of YES (0-1)
        market_prob: Market-implied probability of YES (0-1)
        side: Direction of the trade
        multiplier: Kelly fraction (0.25 = quarter-Kelly)
        cap: Upper bound on the returned fraction

    Returns:
        multiplier * Kelly clamped to [0, cap]; 0 for degenerate odds
    """
    if not 0.0 < market_prob < 1.0:
        return 0.0

    if side is Side.BUY:
        odds = 1.0 / market_prob - 1.0
    else:
        odds = 1.0 / (1.0 - market_prob) - 1.0
    if odds <= 0:
        return 0.0

    p = model_prob
    q = 1.0 - p
    full_kelly = (p * odds - q) / odds
    return clamp(full_kelly * multiplier, 0.0, cap)


async def seed_exposure(
    venue: VenueClient, state: RiskState, logs: list[LogEntry],
) -> None:
    """Add the unfilled notional of resting orders to ``state``.

    On lookup failure exposure stays at zero and an ERROR entry records
    the assumption.
    """
    try:
        open_orders = await venue.get_open_orders()
    except TransportError as exc:
        logger.warning("Open-order lookup failed, assuming zero existing exposure: %s", exc)
        logs.append(
            LogEntry(
                LogAction.ERROR,
                f"Open-order lookup failed; assuming zero existing exposure ({exc})",
            )
        )
        return

    for order in open_orders:
        state.total_exposure += order.remaining_notional


def _check_exposure(state: RiskState) -> None:
    if state.halted:
        raise RiskHalt(f"Max exposure reached: {state.exposure_pct:.1f}%")


async def size_positions(
    signals: list[EdgeSignal],
    venue: VenueClient,
    settings: Settings | None = None,
) -> tuple[list[SizedPosition], list[LogEntry]]:
    """Size signals into positions against the live balance.

    Balance lookup failure logs ERROR and a non-positive balance logs HALT;
    both return no positions. Sizing stops with a HALT entry as soon as
    exposure reaches the aggregate cap. Each position is capped by the
    per-position limit and by the remaining headroom under the aggregate cap.
    """
    if settings is None:
        settings = get_settings()

    logs: list[LogEntry] = []
    positions: list[SizedPosition] = []

    try:
        balance = await venue.get_balance()
    except TransportError as exc:
        logs.append(LogEntry(LogAction.ERROR, f"Failed to fetch CLOB balance: {exc}"))
        return positions, logs

    state = RiskState(
        balance=balance,
        max_position_pct=settings.max_position_pct,
        max_total_exposure_pct=settings.max_total_exposure_pct,
    )

    try:
        if balance <= 0:
            raise RiskHalt("Zero trading balance")

        await seed_exposure(venue, state, logs)

        for signal in signals:
            _check_exposure(state)

            fraction = kelly_fraction(
                signal.model_fair / 100.0,
                signal.market_price / 100.0,
                signal.side,
                multiplier=settings.kelly_fraction,
                cap=settings.max_position_pct,
            )
            if fraction <= 0:
                continue

            size_usd = min(balance * fraction, state.max_position_usd, state.headroom)
            price = signal.execution_price
            if price <= 0:
                continue
            shares = math.floor(size_usd / price)
            if shares <= 0:
                continue

            positions.append(
                SizedPosition(signal=signal, kelly_fraction=fraction, size_usd=size_usd, shares=shares)
            )
            state.total_exposure += size_usd
    except RiskHalt as halt:
        logs.append(LogEntry(LogAction.HALT, str(halt)))

    logger.info(
        "Sized %d of %d signal(s); exposure %.2f / %.2f",
        len(positions), len(signals), state.total_exposure, state.exposure_cap,
    )
    return positions, logs
