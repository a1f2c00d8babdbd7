"""Trading cycle orchestrator.

Wires together: market + spot fetch → edge scan → sizing → execution → monitor.
The two data fetches run concurrently; everything after is sequential because
each step depends on the balance/exposure state left by the previous one.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Callable

from binary_edge.common.types import utcnow
from binary_edge.config import Settings, get_settings
from binary_edge.engine.base import LogSink, MarketSource, SpotPriceSource, VenueClient
from binary_edge.engine.edge import scan_for_edge
from binary_edge.engine.execution import execute_trades
from binary_edge.engine.models import CycleResult, LogAction, LogEntry, TradeResult
from binary_edge.engine.monitor import monitor_positions
from binary_edge.engine.sizing import size_positions
from binary_edge.markets.models import Market, SpotPrice

logger = logging.getLogger(__name__)


class CycleOrchestrator:
    """Runs one scan → size → execute → monitor cycle at a time.

    A trigger that arrives while a cycle is in flight is rejected with a
    single HALT entry instead of running concurrently.
    """

    def __init__(
        self,
        market_source: MarketSource,
        price_source: SpotPriceSource,
        venue: VenueClient,
        sink: LogSink | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._markets = market_source
        self._prices = price_source
        self._venue = venue
        self._sink = sink
        self._settings = settings or get_settings()
        self._lock = asyncio.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    async def _fetch_inputs(self, logs: list[LogEntry]) -> tuple[list[Market], list[SpotPrice]]:
        markets_result, prices_result = await asyncio.gather(
            self._markets.get_candidate_markets(self._settings.market_category),
            self._prices.get_spot_prices(),
            return_exceptions=True,
        )

        markets: list[Market] = []
        prices: list[SpotPrice] = []

        if isinstance(markets_result, Exception):
            logger.warning("Market fetch failed: %s", markets_result)
            logs.append(LogEntry(LogAction.ERROR, f"Market fetch failed: {markets_result}"))
        elif isinstance(markets_result, BaseException):
            raise markets_result
        else:
            markets = markets_result

        if isinstance(prices_result, Exception):
            logger.warning("Spot price fetch failed: %s", prices_result)
            logs.append(
                LogEntry(LogAction.ERROR, f"Spot price fetch failed, using default spot: {prices_result}")
            )
        elif isinstance(prices_result, BaseException):
            raise prices_result
        else:
            prices = prices_result

        return markets, prices

    async def _run_steps(self, logs: list[LogEntry], results: list[TradeResult]) -> None:
        markets, prices = await self._fetch_inputs(logs)

        # Scan
        signals, scan_logs = scan_for_edge(markets, prices, self._settings)
        logs.extend(scan_logs)
        if not signals:
            logs.append(LogEntry(LogAction.SKIP, "No edge signals found"))
            return

        # Size
        positions, size_logs = await size_positions(signals, self._venue, self._settings)
        logs.extend(size_logs)
        if not positions:
            logs.append(LogEntry(LogAction.SKIP, "No positions sized (risk limits or zero balance)"))
            return

        # Execute
        trade_results, exec_logs = await execute_trades(positions, self._venue, self._settings)
        results.extend(trade_results)
        logs.extend(exec_logs)

        # Monitor
        logs.extend(await monitor_positions(self._venue))

    async def run_cycle(self) -> CycleResult:
        """Run one full cycle and hand its log to the sink.

        Always returns a result with a finite, ordered log.
        """
        cycle_id = uuid.uuid4().hex[:12]
        started_at = utcnow()

        if self.busy:
            logger.warning("Cycle trigger rejected: previous cycle still running")
            return CycleResult(
                cycle_id=cycle_id,
                logs=[LogEntry(LogAction.HALT, "Cycle already in progress")],
                results=[],
                started_at=started_at,
                finished_at=utcnow(),
            )

        logs: list[LogEntry] = []
        results: list[TradeResult] = []

        async with self._lock:
            try:
                await self._run_steps(logs, results)
            except Exception as exc:
                logger.exception("Cycle %s aborted", cycle_id)
                logs.append(LogEntry(LogAction.ERROR, f"Cycle aborted: {exc}"))

        result = CycleResult(
            cycle_id=cycle_id,
            logs=logs,
            results=results,
            started_at=started_at,
            finished_at=utcnow(),
        )
        summary = result.summary
        logger.info(
            "Cycle %s: %d trade(s), %d skip(s), %d error(s), %d halt(s)",
            cycle_id, summary.trades, summary.skips, summary.errors, summary.halts,
        )

        if self._sink is not None:
            try:
                await self._sink.write(cycle_id, logs)
            except Exception:
                logger.warning("Failed to write cycle %s to log sink", cycle_id, exc_info=True)

        return result

    async def run_forever(
        self,
        interval: float | None = None,
        max_cycles: int | None = None,
        on_result: Callable[[CycleResult], None] | None = None,
    ) -> int:
        """Run cycles back to back, sleeping ``interval`` seconds between them.

        Returns the number of cycles run. Cycles never overlap: the next one
        starts only after the previous one finishes.
        """
        if interval is None:
            interval = self._settings.cycle_interval

        count = 0
        while max_cycles is None or count < max_cycles:
            result = await self.run_cycle()
            count += 1
            if on_result is not None:
                on_result(result)
            if max_cycles is not None and count >= max_cycles:
                break
            await asyncio.sleep(interval)
        return count
