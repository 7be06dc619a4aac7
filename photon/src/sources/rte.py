"""
RTE eco2mix source: daily French electricity production files.

For each day of the configured range the source downloads the eco2mix zip
archive published by RTE, extracts the tab-separated file it contains, and
turns every quarter-hour row into an ``eco2mix`` point.

Pipeline per day:
- download(date, folder): fetch ``eco2mixDl?date=DD/MM/YYYY`` to a zip file.
- extract(path): unpack the first archive member next to the archive.
- read_rows(path): parse rows until the trailing RTE disclaimer.

Each stage wraps its failures in its own error type (DownloadError,
ExtractionError, DataError) so the log says where a day failed.

CHANGELOG:
- 2026-10-16: Reject wall times skipped by DST; clean up after failed extraction
- 2026-10-16: Initial creation

TODO:
- None
"""

from __future__ import annotations

import asyncio
import csv
import logging
import tempfile
import zipfile
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from pathlib import Path
from zoneinfo import ZoneInfo

import httpx

from photon.src.point import Point, Points
from photon.src.sources.base import (
    DataSource,
    DataSourceConfig,
    GlobalConfig,
    SourceError,
    register,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

ECO2MIX_DATA_URL = "https://eco2mix.rte-france.com/curves/eco2mixDl"

END_RECORD = "RTE ne pourra"
"""Prefix of the disclaimer row that terminates the data rows."""

PARIS = ZoneInfo("Europe/Paris")

FILE_ENCODING = "latin-1"

DOWNLOAD_TIMEOUT_S = 60.0

# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class RteError(SourceError):
    """Base class for eco2mix collection errors."""


class DownloadError(RteError):
    """The daily archive could not be downloaded or saved."""


class ExtractionError(RteError):
    """The daily archive could not be unpacked."""


class DataError(RteError):
    """A row of the daily file is invalid."""


class InvalidScopeError(DataError):
    def __init__(self, scope: str) -> None:
        super().__init__(f"invalid scope {scope} (expected France)")
        self.scope = scope


class MissingFieldError(DataError):
    def __init__(self, field_name: str) -> None:
        super().__init__(f"missing field {field_name}")
        self.field_name = field_name


class FieldParseError(DataError):
    def __init__(self, field_name: str, raw: str) -> None:
        super().__init__(f"error parsing field {field_name}: {raw!r}")
        self.field_name = field_name
        self.raw = raw


# ---------------------------------------------------------------------------
# Row model
# ---------------------------------------------------------------------------


_INT_COLUMNS: tuple[tuple[str, int, str], ...] = (
    ("generation_total", 4, "Generation"),
    ("prediction_yesterday", 5, "Prediction D-1"),
    ("prediction_now", 6, "Prediction"),
    ("oil", 7, "Oil"),
    ("coal", 8, "Coal"),
    ("gas", 9, "Gas"),
    ("nuclear", 10, "Nuclear"),
    ("wind", 11, "Wind"),
    ("solar", 12, "Solar"),
    ("hydro", 13, "Hydro"),
    ("pumped_storage", 14, "Pumped storage"),
    ("bioenergy", 15, "Bioenergy"),
    ("co2", 17, "CO2"),
)
"""(attribute, column index, display name) of every integer column."""


@dataclass(frozen=True)
class DailyRow:
    """One quarter-hour row of an eco2mix daily file.

    Power values are in MW, co2 in g/kWh. ``pumped_storage`` is negative
    while pumping.
    """

    timestamp: datetime
    generation_total: int
    prediction_yesterday: int
    prediction_now: int
    oil: int
    coal: int
    gas: int
    nuclear: int
    wind: int
    solar: int
    hydro: int
    pumped_storage: int
    bioenergy: int
    co2: int

    @classmethod
    def from_record(cls, record: list[str]) -> DailyRow:
        """Parse a raw tab-separated record.

        Raises:
            InvalidScopeError: If the scope column is not ``France``.
            MissingFieldError: If a required column is absent.
            FieldParseError: If a date, time or number cannot be parsed.
        """
        scope = _get(record, 0, "Perimetre")
        if scope != "France":
            raise InvalidScopeError(scope)

        raw_date = _get(record, 2, "Date")
        raw_time = _get(record, 3, "Time")
        try:
            day = datetime.strptime(raw_date, "%Y-%m-%d").date()
        except ValueError as exc:
            raise FieldParseError("Date", raw_date) from exc
        try:
            time_of_day = datetime.strptime(raw_time, "%H:%M").time()
        except ValueError as exc:
            raise FieldParseError("Time", raw_time) from exc

        local = datetime.combine(day, time_of_day, tzinfo=PARIS)
        # Wall times skipped by the spring DST change do not survive a round trip.
        round_trip = local.astimezone(UTC).astimezone(PARIS)
        if round_trip.replace(tzinfo=None) != local.replace(tzinfo=None):
            raise FieldParseError("Time", f"{raw_date} {raw_time}")

        values: dict[str, int] = {}
        for attr, index, display in _INT_COLUMNS:
            raw = _get(record, index, display)
            try:
                values[attr] = int(raw)
            except ValueError as exc:
                raise FieldParseError(display, raw) from exc

        return cls(timestamp=local.astimezone(UTC), **values)

    def to_point(self) -> Point:
        point = Point("eco2mix")
        for attr, _, _ in _INT_COLUMNS:
            point.field(attr, getattr(self, attr))
        return point.at(self.timestamp)


def _get(record: list[str], index: int, name: str) -> str:
    if index >= len(record):
        raise MissingFieldError(name)
    return record[index].strip()


# ---------------------------------------------------------------------------
# Pipeline stages
# ---------------------------------------------------------------------------


def iter_days(from_date: date, to_date: date) -> Iterator[date]:
    """Yield every day from *from_date* to *to_date*, both inclusive."""
    current = from_date
    while current <= to_date:
        yield current
        current += timedelta(days=1)


def format_url(day: date) -> str:
    return f"{ECO2MIX_DATA_URL}?date={day.strftime('%d/%m/%Y')}"


async def download(client: httpx.AsyncClient, day: date, folder: Path) -> Path:
    """Download the eco2mix archive of *day* into *folder*.

    Returns:
        Path of the written zip file.

    Raises:
        DownloadError: On transport failure, non-2xx status, or write failure.
    """
    url = format_url(day)
    file_path = folder / f"eco2mix-{day.isoformat()}.zip"

    logger.info("Downloading data file url=%s path=%s", url, file_path)

    try:
        response = await client.get(url)
        response.raise_for_status()
    except httpx.HTTPError as exc:
        raise DownloadError(f"http request error: {exc}") from exc

    try:
        file_path.write_bytes(response.content)
    except OSError as exc:
        raise DownloadError(f"error creating file {file_path}: {exc}") from exc

    return file_path


def extract(path: Path) -> Path:
    """Extract the first member of the zip archive at *path*.

    The member is written into the archive's folder under its base name, so
    a crafted member path cannot escape the folder.

    Raises:
        ExtractionError: If the archive is unreadable, empty, or the member
            cannot be written.
    """
    try:
        with zipfile.ZipFile(path) as archive:
            members = [m for m in archive.infolist() if not m.is_dir()]
            if not members:
                raise ExtractionError("could not find file in archive")
            member = members[0]
            out_path = path.parent / Path(member.filename).name

            logger.info("Extracting file out_path=%s", out_path)

            with archive.open(member) as src, out_path.open("wb") as dst:
                while chunk := src.read(64 * 1024):
                    dst.write(chunk)
    except zipfile.BadZipFile as exc:
        raise ExtractionError(f"zip error: {exc}") from exc
    except OSError as exc:
        raise ExtractionError(f"error extracting data: {exc}") from exc

    return out_path


def is_end_record(record: list[str]) -> bool:
    return bool(record) and record[0].startswith(END_RECORD)


def read_rows(path: Path) -> list[DailyRow]:
    """Parse the extracted eco2mix file.

    Rows may have a variable number of columns. Blank rows are skipped and
    parsing stops at the disclaimer row.

    Raises:
        DataError: If the file cannot be read or a row is invalid.
    """
    rows: list[DailyRow] = []
    try:
        with path.open(encoding=FILE_ENCODING, newline="") as fh:
            reader = csv.reader(fh, delimiter="\t")
            next(reader, None)
            for record in reader:
                if is_end_record(record):
                    break
                if not any(cell.strip() for cell in record):
                    continue
                rows.append(DailyRow.from_record(record))
    except OSError as exc:
        raise DataError(f"error reading {path}: {exc}") from exc
    except csv.Error as exc:
        raise DataError(f"malformed file {path}: {exc}") from exc
    return rows


# ---------------------------------------------------------------------------
# Source
# ---------------------------------------------------------------------------


class RteSource(DataSource):
    """eco2mix source over the global date range.

    Args:
        global_config: Shared date range.
        download_folder: Folder for archives and extracted files.
        keep_files: Keep the downloaded and extracted files after parsing.
    """

    def __init__(
        self,
        global_config: GlobalConfig,
        download_folder: Path,
        keep_files: bool = True,
    ) -> None:
        self._global = global_config
        self._download_folder = download_folder
        self._keep_files = keep_files

    async def collect(self) -> Points:
        points = Points()
        self._download_folder.mkdir(parents=True, exist_ok=True)

        async with httpx.AsyncClient(timeout=DOWNLOAD_TIMEOUT_S, verify=True) as client:
            for day in iter_days(self._global.from_date, self._global.to_date):
                logger.info("Collecting data for %s", day)
                points.merge_with(await self._collect_day(client, day))

        return points

    async def _collect_day(self, client: httpx.AsyncClient, day: date) -> Points:
        archive = await download(client, day, self._download_folder)
        data_file: Path | None = None
        try:
            data_file = await asyncio.to_thread(extract, archive)
            rows = await asyncio.to_thread(read_rows, data_file)
        finally:
            if not self._keep_files:
                archive.unlink(missing_ok=True)
                if data_file is not None:
                    data_file.unlink(missing_ok=True)

        logger.info("Parsed %d rows for %s", len(rows), day)
        return Points(row.to_point() for row in rows)


@register("rte")
class RteConfig(DataSourceConfig):
    """Config of the ``rte`` source.

    Attributes:
        download_folder: Where archives are written (default: temp dir).
        keep_files: Keep archives and extracted files after parsing.
    """

    download_folder: str | None = None
    keep_files: bool = True

    def build(self, global_config: GlobalConfig) -> DataSource:
        folder = (
            Path(self.download_folder)
            if self.download_folder
            else Path(tempfile.gettempdir())
        )
        return RteSource(global_config, folder, keep_files=self.keep_files)
