"""
InfluxDB sink: writes points over the InfluxDB v2 HTTP write API.

Points are encoded in line protocol (nanosecond precision) and POSTed to the
configured write URL with ``org``/``bucket`` query parameters and token
authentication. Points without a timestamp are stamped with a single "now"
taken at the start of the call.

Delivery:
- Lines are sent in chunks of at most ``batch_size``.
- Transport errors, 429 and 5xx responses are retried with exponential
  backoff (1s -> 2s -> ... capped at ``max_backoff_s``), up to
  ``max_retries`` times per chunk. Other 4xx responses fail immediately.
- Without a spool, a chunk that still fails raises InfluxError.
- With ``spool_path`` set, lines are written to a SQLite spool first and
  acknowledged only after a successful write. A chunk that still fails stops
  the flush; the remaining lines stay spooled for the next run and no error
  is raised.

CHANGELOG:
- 2026-10-16: Report unparsable hosts as validation errors
- 2026-10-16: Initial creation

TODO:
- None
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from datetime import UTC, datetime

import httpx
from influxdb_client import Point as InfluxPoint
from influxdb_client import WritePrecision
from pydantic import Field, field_validator

from photon.src.point import Point, Points
from photon.src.sinks.base import Sink, SinkConfig, SinkError, register
from photon.src.spool import Spool

logger = logging.getLogger(__name__)

_INITIAL_BACKOFF_S = 1.0
_DEFAULT_MAX_BACKOFF_S = 300.0

# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class InfluxError(SinkError):
    """Base class for InfluxDB write errors."""

    retryable = False


class InfluxRequestError(InfluxError):
    """The write request could not be sent (connection, timeout...)."""

    retryable = True


class InfluxWriteError(InfluxError):
    """InfluxDB answered the write with a non-success status."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(
            "write request resulted in a non-success status code "
            f"{status_code} with error: {body}"
        )
        self.status_code = status_code
        self.body = body
        self.retryable = status_code == 429 or status_code >= 500


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def to_line(point: Point, default_ts: datetime) -> str:
    """Encode *point* as one line-protocol record.

    Args:
        point: Point to encode.
        default_ts: Timestamp used when the point has none.

    Returns:
        The line, or an empty string when the point has no field.
    """
    record = InfluxPoint(point.name)
    for key, value in point.tags.items():
        record.tag(key, value)
    for key, value in point.fields.items():
        record.field(key, value)
    record.time(point.timestamp or default_ts, WritePrecision.NS)
    return record.to_line_protocol()


def encode_points(points: Iterable[Point], default_ts: datetime) -> list[str]:
    lines = []
    for point in points:
        line = to_line(point, default_ts)
        if line:
            lines.append(line)
        else:
            logger.warning("Skipping point '%s' without fields", point.name)
    return lines


def _chunks(lines: list[str], size: int) -> Iterable[list[str]]:
    for start in range(0, len(lines), size):
        yield lines[start : start + size]


# ---------------------------------------------------------------------------
# Sink
# ---------------------------------------------------------------------------


class InfluxDBSink(Sink):
    """Line-protocol writer for an InfluxDB v2 bucket.

    Args:
        host: Full write endpoint URL (e.g. ``https://db/api/v2/write``).
        token: API token.
        org: Organization name.
        bucket: Destination bucket.
        auth_scheme: Authorization scheme prefix (``Token`` or ``Bearer``).
        batch_size: Maximum lines per request.
        timeout_s: Request timeout.
        spool_path: Optional SQLite spool for durable delivery.
        max_retries: Retries per chunk after the first attempt.
        max_backoff_s: Backoff cap in seconds.
    """

    def __init__(
        self,
        *,
        host: str,
        token: str,
        org: str,
        bucket: str,
        auth_scheme: str = "Token",
        batch_size: int = 5000,
        timeout_s: float = 10.0,
        spool_path: str | None = None,
        max_retries: int = 3,
        max_backoff_s: float = _DEFAULT_MAX_BACKOFF_S,
    ) -> None:
        self._host = host
        self._token = token
        self._org = org
        self._bucket = bucket
        self._auth_scheme = auth_scheme
        self._batch_size = batch_size
        self._timeout_s = timeout_s
        self._spool_path = spool_path
        self._max_retries = max_retries
        self._max_backoff_s = max_backoff_s
        self._current_backoff = _INITIAL_BACKOFF_S

    @property
    def current_backoff(self) -> float:
        """Delay before the next retry; doubles per failure, resets on success."""
        return self._current_backoff

    async def sink(self, points: Points) -> None:
        lines = encode_points(points, datetime.now(tz=UTC))
        logger.debug("Encoded %d points into %d lines", len(points), len(lines))

        async with httpx.AsyncClient(timeout=self._timeout_s, verify=True) as client:
            if self._spool_path is None:
                for chunk in _chunks(lines, self._batch_size):
                    await self._write_with_retry(client, chunk)
                logger.info("Wrote %d lines to bucket %s", len(lines), self._bucket)
                return

            async with Spool(self._spool_path) as spool:
                if lines:
                    await spool.enqueue_many(lines)
                await self._flush(client, spool)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _flush(self, client: httpx.AsyncClient, spool: Spool) -> None:
        """Write spooled lines oldest first, acking each delivered chunk."""
        written = 0
        while rows := await spool.peek(self._batch_size):
            rowids = [rowid for rowid, _ in rows]
            try:
                await self._write_with_retry(client, [line for _, line in rows])
            except InfluxError as exc:
                pending = await spool.count()
                logger.warning(
                    "InfluxDB write failed, %d lines kept in spool: %s", pending, exc
                )
                return
            await spool.ack(rowids)
            written += len(rows)
        logger.info("Wrote %d spooled lines to bucket %s", written, self._bucket)

    async def _write_with_retry(
        self, client: httpx.AsyncClient, lines: list[str]
    ) -> None:
        attempt = 0
        while True:
            try:
                await self._write(client, lines)
            except InfluxError as exc:
                if not exc.retryable or attempt >= self._max_retries:
                    self._increase_backoff()
                    raise
                attempt += 1
                logger.warning(
                    "InfluxDB write attempt %d failed, retrying in %.1fs: %s",
                    attempt,
                    self._current_backoff,
                    exc,
                )
                await asyncio.sleep(self._current_backoff)
                self._increase_backoff()
                continue
            self._reset_backoff()
            return

    async def _write(self, client: httpx.AsyncClient, lines: list[str]) -> None:
        logger.debug("Sending %d lines", len(lines))
        try:
            response = await client.post(
                self._host,
                params={"org": self._org, "bucket": self._bucket, "precision": "ns"},
                content="\n".join(lines).encode("utf-8"),
                headers={
                    "Authorization": f"{self._auth_scheme} {self._token}",
                    "Content-Type": "text/plain; charset=utf-8",
                },
            )
        except httpx.HTTPError as exc:
            raise InfluxRequestError(f"failed to send request: {exc}") from exc

        if not response.is_success:
            raise InfluxWriteError(response.status_code, response.text)

    def _increase_backoff(self) -> None:
        self._current_backoff = min(self._current_backoff * 2, self._max_backoff_s)

    def _reset_backoff(self) -> None:
        self._current_backoff = _INITIAL_BACKOFF_S


@register("influxdb")
class InfluxDBConfig(SinkConfig):
    """Config of the ``influxdb`` sink."""

    host: str
    token: str
    org: str
    bucket: str
    auth_scheme: str = "Token"
    batch_size: int = Field(default=5000, ge=1, le=10000)
    timeout_s: float = Field(default=10.0, gt=0)
    spool_path: str | None = None
    max_retries: int = Field(default=3, ge=0)
    max_backoff_s: float = Field(default=_DEFAULT_MAX_BACKOFF_S, ge=1)

    @field_validator("host")
    @classmethod
    def host_must_be_http_url(cls, v: str) -> str:
        """Validate that host is an absolute http(s) URL."""
        try:
            url = httpx.URL(v)
        except httpx.InvalidURL as exc:
            raise ValueError(f"host must be an http(s) URL (got: '{v}')") from exc
        if url.scheme not in ("http", "https") or not url.host:
            raise ValueError(f"host must be an http(s) URL (got: '{v}')")
        return v

    def build(self) -> Sink:
        return InfluxDBSink(
            host=self.host,
            token=self.token,
            org=self.org,
            bucket=self.bucket,
            auth_scheme=self.auth_scheme,
            batch_size=self.batch_size,
            timeout_s=self.timeout_s,
            spool_path=self.spool_path,
            max_retries=self.max_retries,
            max_backoff_s=self.max_backoff_s,
        )
