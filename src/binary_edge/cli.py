"""Typer CLI: binary-edge run, loop, scan, quote, price, orders, fills, cancel, logs."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from binary_edge.common.errors import BinaryEdgeError, ConfigurationError
from binary_edge.config import Settings, get_settings

app = typer.Typer(
    name="binary-edge",
    help="Binary outcome market edge detection and execution engine",
    no_args_is_help=True,
)
console = Console()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(name)s: %(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _settings_with(**overrides: object) -> Settings:
    settings = get_settings()
    updates = {k: v for k, v in overrides.items() if v is not None}
    return settings.model_copy(update=updates) if updates else settings


async def _run_cycles(
    settings: Settings,
    live: bool,
    balance: float,
    store: bool,
    output: str,
    max_cycles: int | None,
    interval: float | None,
) -> None:
    from binary_edge.engine.cycle import CycleOrchestrator
    from binary_edge.engine.formatters import format_cycle, format_cycle_json
    from binary_edge.engine.models import CycleResult
    from binary_edge.engine.sinks import SqliteLogSink
    from binary_edge.markets.client import GammaMarketSource
    from binary_edge.markets.prices import CoinGeckoPriceSource
    from binary_edge.venue.clob import ClobClient
    from binary_edge.venue.paper import PaperVenue

    def _print(result: CycleResult) -> None:
        if output == "json":
            console.print_json(format_cycle_json(result))
        else:
            format_cycle(result, console)

    sink = SqliteLogSink(settings.db_path) if store else None
    markets = GammaMarketSource(settings)
    prices = CoinGeckoPriceSource(settings)

    if live:
        async with ClobClient.from_settings(settings) as venue:
            orchestrator = CycleOrchestrator(markets, prices, venue, sink, settings)
            await orchestrator.run_forever(interval, max_cycles, on_result=_print)
    else:
        console.print(f"[dim]Paper trading with ${balance:,.2f} (use --live to route orders)[/dim]")
        orchestrator = CycleOrchestrator(markets, prices, PaperVenue(balance), sink, settings)
        await orchestrator.run_forever(interval, max_cycles, on_result=_print)


@app.command()
def run(
    live: bool = typer.Option(False, "--live", help="Route orders to the CLOB"),
    balance: float = typer.Option(1000.0, "--balance", help="Paper balance in USD"),
    output: str = typer.Option("table", "--output", "-o", help="Output format: table, json"),
    store: bool = typer.Option(True, "--store/--no-store", help="Persist the cycle log to SQLite"),
    edge_threshold: Optional[float] = typer.Option(
        None, "--edge-threshold", help="Override edge threshold in percentage points",
    ),
) -> None:
    """Run one trading cycle: scan, size, execute, monitor."""
    settings = _settings_with(edge_threshold=edge_threshold)
    try:
        asyncio.run(_run_cycles(settings, live, balance, store, output, max_cycles=1, interval=0))
    except ConfigurationError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)


@app.command()
def loop(
    interval: Optional[float] = typer.Option(None, "--interval", help="Seconds between cycles"),
    max_cycles: Optional[int] = typer.Option(None, "--max-cycles", help="Stop after N cycles"),
    live: bool = typer.Option(False, "--live", help="Route orders to the CLOB"),
    balance: float = typer.Option(1000.0, "--balance", help="Paper balance in USD"),
    store: bool = typer.Option(True, "--store/--no-store", help="Persist cycle logs to SQLite"),
) -> None:
    """Run cycles on a fixed interval, one at a time."""
    settings = get_settings()
    try:
        asyncio.run(_run_cycles(settings, live, balance, store, "table", max_cycles, interval))
    except ConfigurationError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)
    except KeyboardInterrupt:
        console.print("[dim]Stopped.[/dim]")


@app.command()
def scan(
    category: Optional[str] = typer.Option(
        None, "--category", "-c", help="Market category: crypto, ai, sports, politics",
    ),
    edge_threshold: Optional[float] = typer.Option(
        None, "--edge-threshold", help="Override edge threshold in percentage points",
    ),
) -> None:
    """Scan markets for edge without touching the venue."""

    async def _run() -> None:
        from binary_edge.engine.edge import scan_for_edge
        from binary_edge.engine.formatters import format_signal_table
        from binary_edge.engine.models import LogAction
        from binary_edge.markets.client import GammaMarketSource
        from binary_edge.markets.prices import CoinGeckoPriceSource
        from binary_edge.pricing.quotes import quote

        settings = _settings_with(edge_threshold=edge_threshold, market_category=category)
        markets, prices = await asyncio.gather(
            GammaMarketSource(settings).get_candidate_markets(settings.market_category),
            CoinGeckoPriceSource(settings).get_spot_prices(),
        )
        console.print(
            f"Scanning {len(markets)} {settings.market_category} market(s) "
            f"against {len(prices)} spot price(s)"
        )

        signals, logs = scan_for_edge(markets, prices, settings)
        quotes: dict[str, tuple[float, float]] = {}
        for s in signals:
            q = quote(
                s.model_fair / 100.0,
                settings.risk_aversion,
                settings.belief_volatility,
                settings.horizon,
                settings.arrival_decay,
            )
            quotes[s.market.market_id] = (q.bid, q.ask)

        format_signal_table(signals, quotes, console)
        skips = sum(1 for entry in logs if entry.action is LogAction.SKIP)
        console.print(f"[dim]{skips} market(s) below the {settings.edge_threshold}pp threshold[/dim]")

    try:
        asyncio.run(_run())
    except (BinaryEdgeError, ValueError) as exc:
        console.print(f"[red]Scan failed: {exc}[/red]")
        raise typer.Exit(code=1)


@app.command()
def price(
    spot: Optional[float] = typer.Option(None, "--spot", help="Spot price (defaults to default_spot)"),
    strike: Optional[float] = typer.Option(None, "--strike", help="Strike (defaults to spot)"),
    sigma: Optional[float] = typer.Option(None, "--sigma", help="Volatility"),
    horizon: Optional[float] = typer.Option(None, "--horizon", help="Time to expiry in years"),
    rate: Optional[float] = typer.Option(None, "--rate", help="Risk-free rate"),
) -> None:
    """Show the binary fair value for a set of model inputs."""
    from binary_edge.pricing.binary import price_binary

    settings = get_settings()
    s = spot if spot is not None else settings.default_spot
    k = strike if strike is not None else s
    try:
        priced = price_binary(
            s,
            k,
            sigma if sigma is not None else settings.sigma,
            horizon if horizon is not None else settings.horizon,
            rate if rate is not None else settings.risk_free_rate,
        )
    except BinaryEdgeError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)

    console.print(f"  d2:         {priced.d2:.6f}")
    console.print(f"  N(d2):      {priced.nd2:.6f}")
    console.print(f"  Fair value: [bold]{priced.fair_value:.4f}[/bold]")


@app.command(name="quote")
def quote_cmd(
    probability: Optional[float] = typer.Argument(
        None, help="Fair probability (0-1); defaults to the model's at-the-money value",
    ),
    inventory: float = typer.Option(0.0, "--inventory", "-q", help="Signed inventory in shares"),
) -> None:
    """Show Avellaneda-Stoikov bid/ask around a fair probability."""
    from binary_edge.pricing.binary import price_at_the_money
    from binary_edge.pricing.quotes import quote

    settings = get_settings()
    if probability is None:
        priced = price_at_the_money(
            settings.default_spot, settings.sigma, settings.horizon, settings.risk_free_rate,
        )
        probability = priced.fair_value / 100.0

    try:
        q = quote(
            probability,
            settings.risk_aversion,
            settings.belief_volatility,
            settings.horizon,
            settings.arrival_decay,
            inventory=inventory,
        )
    except BinaryEdgeError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)

    console.print(f"  Fair:        {q.fair:.4%}")
    console.print(f"  Reservation: {q.reservation:.4%}")
    console.print(f"  Half-spread: {q.half_spread:.4f} (logit)")
    console.print(f"  Bid / Ask:   [green]{q.bid:.4%}[/green] / [red]{q.ask:.4%}[/red]")


@app.command()
def orders() -> None:
    """List open orders on the CLOB."""

    async def _run() -> None:
        from binary_edge.venue.clob import ClobClient

        async with ClobClient.from_settings(get_settings()) as client:
            open_orders = await client.get_open_orders()

        if not open_orders:
            console.print("[yellow]No open orders.[/yellow]")
            return

        table = Table(title="Open Orders")
        table.add_column("Order ID", width=14)
        table.add_column("Asset", width=14)
        table.add_column("Side", width=5)
        table.add_column("Price", justify="right", width=6)
        table.add_column("Size", justify="right", width=8)
        table.add_column("Matched", justify="right", width=8)
        table.add_column("At risk", justify="right", width=10)
        for o in open_orders:
            table.add_row(
                o.order_id[:14], o.asset[:14], o.side, f"{o.price:.2f}",
                f"{o.original_size:.0f}", f"{o.size_matched:.0f}", f"${o.remaining_notional:,.2f}",
            )
        console.print(table)

    try:
        asyncio.run(_run())
    except BinaryEdgeError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)


@app.command()
def fills() -> None:
    """List matched trades on the CLOB."""

    async def _run() -> None:
        from binary_edge.venue.clob import ClobClient

        async with ClobClient.from_settings(get_settings()) as client:
            trades = await client.get_filled_orders()

        if not trades:
            console.print("[yellow]No fills.[/yellow]")
            return

        table = Table(title="Fills")
        table.add_column("Trade ID", width=14)
        table.add_column("Asset", width=14)
        table.add_column("Side", width=5)
        table.add_column("Price", justify="right", width=6)
        table.add_column("Size", justify="right", width=8)
        for t in trades:
            table.add_row(t.trade_id[:14], t.asset[:14], t.side, f"{t.price:.2f}", f"{t.size:.0f}")
        console.print(table)

    try:
        asyncio.run(_run())
    except BinaryEdgeError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)


@app.command()
def cancel(order_id: str = typer.Argument(help="CLOB order ID to cancel")) -> None:
    """Cancel one open order."""

    async def _run() -> bool:
        from binary_edge.venue.clob import ClobClient

        async with ClobClient.from_settings(get_settings()) as client:
            return await client.cancel_order(order_id)

    try:
        ok = asyncio.run(_run())
    except BinaryEdgeError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)

    if ok:
        console.print(f"[green]Cancelled {order_id}[/green]")
    else:
        console.print(f"[yellow]Venue did not confirm cancellation of {order_id}[/yellow]")
        raise typer.Exit(code=1)


@app.command()
def logs(
    limit: int = typer.Option(1, "--limit", "-n", help="Number of recent cycles to show"),
) -> None:
    """Show stored cycle logs, newest first."""

    async def _run() -> None:
        from binary_edge.engine.formatters import format_log_table
        from binary_edge.engine.sinks import SqliteLogSink

        sink = SqliteLogSink(get_settings().db_path)
        cycle_ids = await sink.recent_cycle_ids(limit)
        if not cycle_ids:
            console.print("[yellow]No stored cycles.[/yellow]")
            return
        for cycle_id in cycle_ids:
            entries = await sink.read_cycle(cycle_id)
            format_log_table(entries, console, title=f"Cycle {cycle_id}")

    asyncio.run(_run())


if __name__ == "__main__":
    app()
