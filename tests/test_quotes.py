"""Tests for Avellaneda-Stoikov quoting."""

from __future__ import annotations

import math

import pytest

from binary_edge.common.errors import DomainError
from binary_edge.pricing.quotes import half_spread, logistic, logit, quote

GAMMA = 0.10
SIGMA_B = 0.328
T_EXP = 0.0000095
K_DECAY = 1.50


def test_half_spread_formula():
    expected = GAMMA * SIGMA_B**2 * T_EXP / 2 + (1 / GAMMA) * math.log(1 + GAMMA / K_DECAY)
    assert half_spread(GAMMA, SIGMA_B, T_EXP, K_DECAY) == pytest.approx(expected, rel=1e-12)
    # Arrival term dominates at a 5 minute horizon
    assert half_spread(GAMMA, SIGMA_B, T_EXP, K_DECAY) == pytest.approx(0.6454, abs=1e-4)


def test_half_spread_widens_with_horizon():
    short = half_spread(GAMMA, SIGMA_B, T_EXP, K_DECAY)
    long = half_spread(GAMMA, SIGMA_B, 10.0, K_DECAY)
    assert long > short


def test_half_spread_narrows_with_faster_arrivals():
    assert half_spread(GAMMA, SIGMA_B, T_EXP, 5.0) < half_spread(GAMMA, SIGMA_B, T_EXP, 1.0)


@pytest.mark.parametrize("gamma,k", [(0.0, 1.5), (-0.1, 1.5), (0.1, 0.0), (0.1, -1.0)])
def test_half_spread_domain(gamma, k):
    with pytest.raises(DomainError):
        half_spread(gamma, SIGMA_B, T_EXP, k)


def test_logit_logistic_inverse():
    for p in [0.001, 0.1, 0.5, 0.73, 0.999]:
        assert logistic(logit(p)) == pytest.approx(p, rel=1e-12)


def test_logistic_no_overflow():
    assert logistic(1000.0) == pytest.approx(1.0)
    assert logistic(-1000.0) == pytest.approx(0.0)


@pytest.mark.parametrize("p", [0.0, 1.0, -0.2, 1.3])
def test_logit_domain(p):
    with pytest.raises(DomainError):
        logit(p)


def test_quote_brackets_fair():
    q = quote(0.4998, GAMMA, SIGMA_B, T_EXP, K_DECAY)
    assert 0.0 < q.bid < q.fair < q.ask < 1.0
    assert q.width > 0
    assert q.reservation == pytest.approx(q.fair, rel=1e-12)


def test_quote_symmetric_in_logit_space():
    q = quote(0.5, GAMMA, SIGMA_B, T_EXP, K_DECAY)
    assert q.bid + q.ask == pytest.approx(1.0, abs=1e-12)


def test_quote_valid_near_boundaries():
    """Logit-space spread keeps both sides inside (0, 1) even at extremes."""
    for p in [0.001, 0.01, 0.99, 0.999]:
        q = quote(p, GAMMA, SIGMA_B, T_EXP, K_DECAY)
        assert 0.0 < q.bid < q.ask < 1.0


def test_inventory_skews_quotes_down():
    flat = quote(0.5, GAMMA, SIGMA_B, 1.0, K_DECAY)
    long = quote(0.5, GAMMA, SIGMA_B, 1.0, K_DECAY, inventory=10.0)
    short = quote(0.5, GAMMA, SIGMA_B, 1.0, K_DECAY, inventory=-10.0)
    assert long.bid < flat.bid and long.ask < flat.ask
    assert short.bid > flat.bid and short.ask > flat.ask
    assert long.half_spread == flat.half_spread
