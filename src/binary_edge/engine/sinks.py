"""Log sinks for completed cycle logs: in-memory and SQLite."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import aiosqlite

from binary_edge.config import get_settings
from binary_edge.engine.models import LogAction, LogEntry

_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS cycle_logs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    cycle_id TEXT NOT NULL,
    seq INTEGER NOT NULL,
    action TEXT NOT NULL,
    asset TEXT,
    details TEXT NOT NULL,
    timestamp TEXT NOT NULL
);
"""

_CREATE_INDEX = """
CREATE INDEX IF NOT EXISTS idx_cycle_logs_cycle_id ON cycle_logs(cycle_id);
"""


class MemoryLogSink:
    """Keeps the most recent cycle's log in memory."""

    def __init__(self) -> None:
        self.cycle_id: str | None = None
        self.logs: list[LogEntry] = []

    async def write(self, cycle_id: str, logs: list[LogEntry]) -> None:
        self.cycle_id = cycle_id
        self.logs = list(logs)


class SqliteLogSink:
    """Append-only cycle log store backed by aiosqlite.

    Rows keep their in-cycle sequence number so a cycle reads back in the
    order it was written.
    """

    def __init__(self, db_path: Path | None = None) -> None:
        self._db_path = db_path or get_settings().db_path

    async def _ensure_db(self) -> None:
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute(_CREATE_TABLE)
            await db.execute(_CREATE_INDEX)
            await db.commit()

    async def write(self, cycle_id: str, logs: list[LogEntry]) -> None:
        await self._ensure_db()
        rows = [
            (
                cycle_id,
                seq,
                entry.action.value,
                entry.asset,
                entry.details,
                entry.timestamp.isoformat(),
            )
            for seq, entry in enumerate(logs)
        ]
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.executemany(
                """INSERT INTO cycle_logs (cycle_id, seq, action, asset, details, timestamp)
                   VALUES (?, ?, ?, ?, ?, ?)""",
                rows,
            )
            await db.commit()

    async def recent_cycle_ids(self, limit: int = 5) -> list[str]:
        """Most recent cycle ids, newest first."""
        await self._ensure_db()
        async with aiosqlite.connect(str(self._db_path)) as db:
            cursor = await db.execute(
                """SELECT cycle_id FROM cycle_logs
                   GROUP BY cycle_id ORDER BY MAX(id) DESC LIMIT ?""",
                (limit,),
            )
            rows = await cursor.fetchall()
        return [row[0] for row in rows]

    async def read_cycle(self, cycle_id: str) -> list[LogEntry]:
        await self._ensure_db()
        async with aiosqlite.connect(str(self._db_path)) as db:
            cursor = await db.execute(
                """SELECT action, asset, details, timestamp FROM cycle_logs
                   WHERE cycle_id = ? ORDER BY seq""",
                (cycle_id,),
            )
            rows = await cursor.fetchall()
        return [
            LogEntry(
                action=LogAction(action),
                details=details,
                asset=asset,
                timestamp=datetime.fromisoformat(timestamp),
            )
            for action, asset, details, timestamp in rows
        ]
