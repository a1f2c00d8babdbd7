"""Closed-form fair value for a cash-or-nothing binary contract.

Black-Scholes digital call: the discounted risk-neutral probability that the
underlying finishes above the strike,

    d2 = (ln(S/K) + (r - sigma^2 / 2) * T) / (sigma * sqrt(T))
    C  = exp(-r * T) * N(d2)

reported on a 0-100 percentage-point scale so it compares directly with a
market's yes-price in cents.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from binary_edge.common.errors import DomainError

# Abramowitz & Stegun 7.1.26 coefficients for erf
_A1 = 0.254829592
_A2 = -0.284496736
_A3 = 1.421413741
_A4 = -1.453152027
_A5 = 1.061405429
_P = 0.3275911


@dataclass(frozen=True)
class BinaryPrice:
    """Pricing terms for one contract.

    Attributes:
        d2: standardized log-distance to the strike under the drift
        nd2: N(d2), risk-neutral probability of finishing in the money
        fair_value: discounted N(d2) in percentage points (0-100)
    """

    d2: float
    nd2: float
    fair_value: float


def normal_cdf(x: float) -> float:
    """Standard normal CDF via the Abramowitz-Stegun erf approximation.

    Absolute error below 1e-6 for |x| <= 6 (A&S bound: |eps| <= 1.5e-7 on erf).
    """
    sign = -1.0 if x < 0 else 1.0
    z = abs(x) / math.sqrt(2.0)
    t = 1.0 / (1.0 + _P * z)
    poly = ((((_A5 * t + _A4) * t + _A3) * t + _A2) * t + _A1) * t
    y = 1.0 - poly * math.exp(-z * z)
    return 0.5 * (1.0 + sign * y)


def price_binary(
    spot: float,
    strike: float,
    sigma: float,
    horizon: float,
    rate: float,
) -> BinaryPrice:
    """Price a binary call paying 1 if spot finishes above strike.

    Raises:
        DomainError: if sigma, horizon, spot or strike is non-positive.
    """
    if sigma <= 0:
        raise DomainError(f"sigma must be > 0, got {sigma}")
    if horizon <= 0:
        raise DomainError(f"horizon must be > 0, got {horizon}")
    if spot <= 0 or strike <= 0:
        raise DomainError(f"spot and strike must be > 0, got spot={spot} strike={strike}")

    vol_sqrt_t = sigma * math.sqrt(horizon)
    d2 = (math.log(spot / strike) + (rate - 0.5 * sigma * sigma) * horizon) / vol_sqrt_t
    nd2 = normal_cdf(d2)
    fair_value = math.exp(-rate * horizon) * nd2 * 100.0
    return BinaryPrice(d2=d2, nd2=nd2, fair_value=fair_value)


def price_at_the_money(spot: float, sigma: float, horizon: float, rate: float) -> BinaryPrice:
    """Price with strike pinned to spot, so the log-moneyness term vanishes.

    Short-horizon up/down markets are struck at the current spot, which
    leaves only the drift/volatility terms in d2.
    """
    return price_binary(spot, spot, sigma, horizon, rate)
