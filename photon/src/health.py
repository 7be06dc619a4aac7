"""
Health file writer for the photon crawler.

Writes a JSON health file with four fields:
- last_run_ts: ISO timestamp of the most recent run attempt.
- last_success_ts: ISO timestamp of the most recent successful run.
- points_written: Number of points delivered by the last successful run.
- last_error: Message of the last failed run, cleared on success.

The file is rewritten after every run so a container HEALTHCHECK or a
monitoring probe can inspect it.

CHANGELOG:
- 2026-10-16: Initial creation

TODO:
- None
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path


class HealthWriter:
    """Writes crawler health status to a JSON file.

    Args:
        path: Filesystem path for the health JSON file.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._last_run_ts: str | None = None
        self._last_success_ts: str | None = None
        self._points_written: int = 0
        self._last_error: str | None = None

    def record_success(self, points_written: int) -> None:
        """Record a successful run and write health file."""
        now = datetime.now(tz=UTC).isoformat()
        self._last_run_ts = now
        self._last_success_ts = now
        self._points_written = points_written
        self._last_error = None
        self._write()

    def record_failure(self, error: BaseException) -> None:
        """Record a failed run and write health file."""
        self._last_run_ts = datetime.now(tz=UTC).isoformat()
        self._last_error = f"{type(error).__name__}: {error}"
        self._write()

    def _write(self) -> None:
        data = {
            "last_run_ts": self._last_run_ts,
            "last_success_ts": self._last_success_ts,
            "points_written": self._points_written,
            "last_error": self._last_error,
        }
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data))
        tmp.replace(self.path)
