"""
Durable local queue using async SQLite for buffering line-protocol records.

The InfluxDB sink writes every encoded line to the spool before any write
attempt and deletes lines only after InfluxDB acknowledged them. The spool
is a SQLite database file in WAL mode, so lines that could not be delivered
survive until the next run.

Operations:
- enqueue(payload) / enqueue_many(payloads): INSERT payload rows.
- peek(n): SELECT up to n oldest rows with their rowids (FIFO).
- ack(rowids): DELETE only the specified rows.
- count(): SELECT COUNT(*) of pending rows.
- close(): Close the underlying database connection.

Supports the async context manager protocol.

CHANGELOG:
- 2026-10-16: Add enqueue_many for batch inserts of encoded points
- 2026-10-16: Initial creation

TODO:
- None
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

import aiosqlite

_CREATE_TABLE_SQL = """\
CREATE TABLE IF NOT EXISTS spool (
    rowid INTEGER PRIMARY KEY AUTOINCREMENT,
    payload TEXT NOT NULL,
    created_at TEXT NOT NULL DEFAULT (datetime('now'))
);
"""

_INSERT_SQL = """\
INSERT INTO spool (payload) VALUES (?);
"""

_PEEK_SQL = """\
SELECT rowid, payload
FROM spool
ORDER BY rowid ASC
LIMIT ?;
"""

_COUNT_SQL = "SELECT COUNT(*) FROM spool;"


class Spool:
    """Durable local async FIFO queue backed by a SQLite database.

    Payloads are opaque TEXT values (one line-protocol record each).

    Args:
        path: Filesystem path for the SQLite database file.

    Usage::

        async with Spool(path="/data/photon-spool.db") as spool:
            await spool.enqueue_many(lines)
            rows = await spool.peek(5000)
            await spool.ack([rowid for rowid, _ in rows])
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._db: aiosqlite.Connection | None = None

    async def open(self) -> None:
        """Open the SQLite connection and initialize the schema."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._db = await aiosqlite.connect(str(self._path))
        await self._db.execute("PRAGMA journal_mode=WAL;")
        await self._db.execute(_CREATE_TABLE_SQL)
        await self._db.commit()

    async def close(self) -> None:
        if self._db is not None:
            await self._db.close()
            self._db = None

    async def __aenter__(self) -> Spool:
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def enqueue(self, payload: str) -> None:
        """Insert a single payload into the spool."""
        assert self._db is not None, "Spool not opened. Call open() or use async with."
        await self._db.execute(_INSERT_SQL, (payload,))
        await self._db.commit()

    async def enqueue_many(self, payloads: Iterable[str]) -> None:
        """Insert several payloads in one transaction, preserving order."""
        assert self._db is not None, "Spool not opened. Call open() or use async with."
        await self._db.executemany(_INSERT_SQL, ((p,) for p in payloads))
        await self._db.commit()

    async def peek(self, n: int) -> list[tuple[int, str]]:
        """Return up to *n* oldest pending payloads without removing them.

        Returns:
            List of ``(rowid, payload)`` tuples, oldest first. Empty when
            the spool is empty or n < 1.
        """
        assert self._db is not None, "Spool not opened. Call open() or use async with."
        if n < 1:
            return []
        cursor = await self._db.execute(_PEEK_SQL, (n,))
        rows = await cursor.fetchall()
        return [(row[0], row[1]) for row in rows]

    async def ack(self, rowids: list[int]) -> None:
        """Delete acknowledged rows. Unknown rowids are ignored."""
        assert self._db is not None, "Spool not opened. Call open() or use async with."
        if not rowids:
            return
        placeholders = ",".join("?" for _ in rowids)
        sql = f"DELETE FROM spool WHERE rowid IN ({placeholders});"  # noqa: S608
        await self._db.execute(sql, rowids)
        await self._db.commit()

    async def count(self) -> int:
        assert self._db is not None, "Spool not opened. Call open() or use async with."
        cursor = await self._db.execute(_COUNT_SQL)
        row = await cursor.fetchone()
        return row[0]
