"""Avellaneda-Stoikov quoting in logit space.

Quotes are centered on the model probability's logit and shifted by the
optimal half-spread, then mapped back through the logistic function so both
sides stay valid probabilities near 0 and 1. Display only: nothing here
feeds the trade-or-skip decision.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from binary_edge.common.errors import DomainError


@dataclass(frozen=True)
class Quote:
    """Bid/ask around a fair probability."""

    fair: float
    reservation: float
    half_spread: float
    bid: float
    ask: float

    @property
    def width(self) -> float:
        return self.ask - self.bid


def logit(p: float) -> float:
    if not 0.0 < p < 1.0:
        raise DomainError(f"probability must be in (0, 1), got {p}")
    return math.log(p / (1.0 - p))


def logistic(x: float) -> float:
    # Split on sign to avoid overflow in exp for large |x|
    if x >= 0:
        return 1.0 / (1.0 + math.exp(-x))
    z = math.exp(x)
    return z / (1.0 + z)


def half_spread(gamma: float, sigma_b: float, horizon: float, k: float) -> float:
    """Optimal half-spread: gamma * sigma_b^2 * T / 2 + ln(1 + gamma / k) / gamma."""
    if gamma <= 0:
        raise DomainError(f"risk aversion must be > 0, got {gamma}")
    if k <= 0:
        raise DomainError(f"arrival decay must be > 0, got {k}")
    return gamma * sigma_b * sigma_b * horizon / 2.0 + (1.0 / gamma) * math.log(1.0 + gamma / k)


def quote(
    fair_prob: float,
    gamma: float,
    sigma_b: float,
    horizon: float,
    k: float,
    inventory: float = 0.0,
) -> Quote:
    """Bid/ask probabilities around ``fair_prob``.

    Inventory skews the reservation logit, r_x = x_t - q * gamma * sigma_b^2 * T,
    so a long book quotes lower on both sides.
    """
    x_t = logit(fair_prob)
    reservation = x_t - inventory * gamma * sigma_b * sigma_b * horizon
    delta = half_spread(gamma, sigma_b, horizon, k)
    return Quote(
        fair=fair_prob,
        reservation=logistic(reservation),
        half_spread=delta,
        bid=logistic(reservation - delta),
        ask=logistic(reservation + delta),
    )
