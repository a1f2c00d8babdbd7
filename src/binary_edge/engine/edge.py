"""Edge detection: model fair value vs. market quote, per candidate market."""

from __future__ import annotations

import logging
import re

from binary_edge.common.errors import DomainError
from binary_edge.config import Settings, get_settings
from binary_edge.engine.models import EdgeSignal, LogAction, LogEntry, Side
from binary_edge.markets.models import Market, SpotPrice
from binary_edge.pricing.binary import price_at_the_money

logger = logging.getLogger(__name__)


def _mentions(text: str, term: str) -> bool:
    return re.search(rf"\b{re.escape(term.lower())}\b", text) is not None


def match_asset(question: str, spot_prices: list[SpotPrice]) -> SpotPrice | None:
    """First spot asset whose symbol or CoinGecko id appears as a word in the question."""
    text = question.lower()
    for price in spot_prices:
        if _mentions(text, price.symbol) or _mentions(text, price.coin_id):
            return price
    return None


def scan_for_edge(
    markets: list[Market],
    spot_prices: list[SpotPrice],
    settings: Settings | None = None,
) -> tuple[list[EdgeSignal], list[LogEntry]]:
    """Price every tradeable market and emit signals where the edge clears the threshold.

    Each evaluated market logs exactly one SCAN entry, followed by a SKIP
    entry when its edge is below the threshold. Markets priced at or beyond
    the tradeable band are treated as settled and skipped without a log.
    An unmatched market is priced against the default asset rather than
    dropped; the SCAN entry records ``spot:default`` when that happens.
    """
    if settings is None:
        settings = get_settings()

    signals: list[EdgeSignal] = []
    logs: list[LogEntry] = []

    for market in markets:
        yes_price = market.outcome_yes_price
        if not market.active:
            continue
        if yes_price <= settings.min_tradeable_price or yes_price >= settings.max_tradeable_price:
            continue

        market_price = yes_price * 100.0

        matched = match_asset(market.question, spot_prices)
        if matched is not None:
            asset, spot, spot_source = matched.symbol, matched.value, "live"
        else:
            asset, spot, spot_source = settings.default_asset, settings.default_spot, "default"
            logger.info(
                "No asset match for market %s, using default %s @ %.2f",
                market.market_id, asset, spot,
            )

        try:
            priced = price_at_the_money(
                spot, settings.sigma, settings.horizon, settings.risk_free_rate,
            )
        except DomainError as exc:
            logs.append(LogEntry(LogAction.ERROR, f"Pricing failed for {market.market_id}: {exc}", asset))
            continue

        divergence = priced.fair_value - market_price

        logs.append(
            LogEntry(
                LogAction.SCAN,
                f"d2:{priced.d2:.6f} N(d2):{priced.nd2:.5f} "
                f"sigma_b:{settings.belief_volatility:.3f} "
                f"mkt:{market_price:.1f}% model:{priced.fair_value:.1f}% "
                f"spot:{spot_source}",
                asset,
            )
        )

        if abs(divergence) >= settings.edge_threshold:
            side = Side.BUY if divergence > 0 else Side.SELL
            signals.append(
                EdgeSignal(
                    asset=asset,
                    market=market,
                    model_fair=priced.fair_value,
                    market_price=market_price,
                    divergence=divergence,
                    side=side,
                    d2=priced.d2,
                    nd2=priced.nd2,
                )
            )
            logger.debug("%s signal on %s: edge %+.2fpp", side.value, market.market_id, divergence)
        else:
            logs.append(
                LogEntry(
                    LogAction.SKIP,
                    f"edge:{abs(divergence):.2f}% < {settings.edge_threshold}% threshold",
                    asset,
                )
            )

    return signals, logs
