"""Cycle output formatters: Rich tables and JSON."""

from __future__ import annotations

import json

from rich.console import Console
from rich.table import Table

from binary_edge.engine.models import CycleResult, EdgeSignal, LogAction, LogEntry

_ACTION_STYLE = {
    LogAction.SCAN: "dim",
    LogAction.TRADE: "green",
    LogAction.SKIP: "yellow",
    LogAction.HALT: "magenta",
    LogAction.ERROR: "red",
}


def format_log_table(
    logs: list[LogEntry],
    console: Console | None = None,
    title: str = "Cycle Log",
) -> None:
    """Print log entries in cycle order."""
    if console is None:
        console = Console()

    if not logs:
        console.print("[yellow]Empty cycle log.[/yellow]")
        return

    table = Table(title=title, show_lines=False)
    table.add_column("#", justify="right", width=4)
    table.add_column("Time (UTC)", width=12)
    table.add_column("Action", width=6)
    table.add_column("Asset", width=6)
    table.add_column("Details", no_wrap=False)

    for i, entry in enumerate(logs, start=1):
        style = _ACTION_STYLE[entry.action]
        table.add_row(
            str(i),
            entry.timestamp.strftime("%H:%M:%S.%f")[:12],
            f"[{style}]{entry.action.value}[/{style}]",
            entry.asset or "",
            entry.details,
        )

    console.print(table)


def format_cycle(result: CycleResult, console: Console | None = None) -> None:
    """Print a cycle's log followed by its summary line."""
    if console is None:
        console = Console()

    format_log_table(result.logs, console, title=f"Cycle {result.cycle_id}")
    s = result.summary
    console.print(
        f"[bold]{s.trades}[/bold] trade(s), {s.skips} skip(s), "
        f"[red]{s.errors}[/red] error(s), {s.halts} halt(s) "
        f"[dim]({s.total_logs} entries)[/dim]"
    )


def format_cycle_json(result: CycleResult) -> str:
    return json.dumps(result.to_dict(), indent=2)


def format_signal_table(
    signals: list[EdgeSignal],
    quotes: dict[str, tuple[float, float]] | None = None,
    console: Console | None = None,
) -> None:
    """Print edge signals sorted by absolute divergence (descending).

    ``quotes`` maps market id to (bid, ask) probabilities for display.
    """
    if console is None:
        console = Console()

    if not signals:
        console.print("[yellow]No signals (no market with sufficient edge).[/yellow]")
        return

    quotes = quotes or {}
    table = Table(title="Edge Signals", show_lines=True)
    table.add_column("Side", style="bold", width=5)
    table.add_column("Asset", width=6)
    table.add_column("Edge", justify="right", width=8)
    table.add_column("Model", justify="right", width=7)
    table.add_column("Market", justify="right", width=7)
    table.add_column("Bid/Ask", justify="right", width=13)
    table.add_column("Question", width=50, no_wrap=False)

    for s in sorted(signals, key=lambda s: abs(s.divergence), reverse=True):
        color = "green" if s.divergence > 0 else "red"
        bid_ask = quotes.get(s.market.market_id)
        table.add_row(
            f"[{color}]{s.side.value}[/{color}]",
            s.asset,
            f"[{color}]{s.divergence:+.2f}pp[/{color}]",
            f"{s.model_fair:.2f}",
            f"{s.market_price:.2f}",
            f"{bid_ask[0]:.1%}/{bid_ask[1]:.1%}" if bid_ask else "-",
            s.market.question[:80],
        )

    console.print(table)
    console.print(f"\n[dim]{len(signals)} signal(s) total[/dim]")
