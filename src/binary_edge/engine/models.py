"""Engine data models: signals, sized positions, trade results, log entries."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from binary_edge.common.types import utcnow
from binary_edge.markets.models import Market


class Side(Enum):
    BUY = "BUY"
    SELL = "SELL"


class LogAction(Enum):
    """Audit log entry kind."""

    SCAN = "SCAN"
    TRADE = "TRADE"
    SKIP = "SKIP"
    HALT = "HALT"  # policy stop, not a failure
    ERROR = "ERROR"


@dataclass(frozen=True)
class LogEntry:
    action: LogAction
    details: str
    asset: str | None = None
    timestamp: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict:
        return {
            "action": self.action.value,
            "asset": self.asset,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class EdgeSignal:
    """Model-vs-market divergence on one market.

    Attributes:
        asset: reference asset the market was priced against
        market: market snapshot the signal was computed from
        model_fair: model fair value (0-100)
        market_price: market yes-price (0-100)
        divergence: model_fair - market_price, in percentage points
        side: BUY when the model is above the market, SELL when below
        d2: pricing d2 term
        nd2: N(d2)
    """

    asset: str
    market: Market
    model_fair: float
    market_price: float
    divergence: float
    side: Side
    d2: float
    nd2: float

    @property
    def execution_price(self) -> float:
        """Price of the side being bought: yes-price for BUY, 1 - yes-price for SELL."""
        market_p = self.market_price / 100.0
        return market_p if self.side is Side.BUY else 1.0 - market_p


@dataclass(frozen=True)
class SizedPosition:
    signal: EdgeSignal
    kelly_fraction: float
    size_usd: float
    shares: int

    @property
    def execution_price(self) -> float:
        return self.signal.execution_price


@dataclass(frozen=True)
class TradeResult:
    position: SizedPosition
    order_id: str
    status: str
    timestamp: datetime = field(default_factory=utcnow)


@dataclass
class RiskState:
    """Balance and running exposure for one sizing pass. Never persisted."""

    balance: float
    max_position_pct: float
    max_total_exposure_pct: float
    total_exposure: float = 0.0

    @property
    def exposure_cap(self) -> float:
        return self.balance * self.max_total_exposure_pct

    @property
    def max_position_usd(self) -> float:
        return self.balance * self.max_position_pct

    @property
    def headroom(self) -> float:
        return max(0.0, self.exposure_cap - self.total_exposure)

    @property
    def halted(self) -> bool:
        return self.total_exposure >= self.exposure_cap

    @property
    def exposure_pct(self) -> float:
        return self.total_exposure / self.balance * 100.0 if self.balance > 0 else 0.0


@dataclass(frozen=True)
class CycleSummary:
    trades: int
    skips: int
    errors: int
    halts: int
    total_logs: int

    @classmethod
    def from_logs(cls, logs: list[LogEntry]) -> CycleSummary:
        counts = Counter(entry.action for entry in logs)
        return cls(
            trades=counts[LogAction.TRADE],
            skips=counts[LogAction.SKIP],
            errors=counts[LogAction.ERROR],
            halts=counts[LogAction.HALT],
            total_logs=len(logs),
        )

    def to_dict(self) -> dict:
        return {
            "trades": self.trades,
            "skips": self.skips,
            "errors": self.errors,
            "halts": self.halts,
            "totalLogs": self.total_logs,
        }


@dataclass
class CycleResult:
    """Outcome of one trading cycle: the ordered audit log plus trades placed."""

    cycle_id: str
    logs: list[LogEntry]
    results: list[TradeResult]
    started_at: datetime
    finished_at: datetime

    @property
    def summary(self) -> CycleSummary:
        return CycleSummary.from_logs(self.logs)

    def to_dict(self) -> dict:
        return {
            "cycleId": self.cycle_id,
            "startedAt": self.started_at.isoformat(),
            "finishedAt": self.finished_at.isoformat(),
            "summary": self.summary.to_dict(),
            "logs": [entry.to_dict() for entry in self.logs],
        }
