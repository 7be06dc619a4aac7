"""
Unit tests for the RTE eco2mix source.

Tests verify:
- iter_days yields an inclusive, ascending day range.
- Download URL format and archive file naming.
- Row parsing: scope check, Paris local time to UTC, integer columns, errors.
- read_rows stops at the RTE disclaimer and skips blank rows.
- extract writes the first member next to the archive, by base name.
- Each stage wraps failures in its own error type.
- RteSource.collect runs the full pipeline for every day.

CHANGELOG:
- 2026-10-16: Initial creation

TODO:
- None
"""

from __future__ import annotations

import zipfile
from datetime import UTC, date, datetime
from pathlib import Path
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from photon.src.sources import GlobalConfig, SourceConfigError, build_source
from photon.src.sources.rte import (
    DailyRow,
    DataError,
    DownloadError,
    ExtractionError,
    FieldParseError,
    InvalidScopeError,
    MissingFieldError,
    RteSource,
    download,
    extract,
    format_url,
    iter_days,
    read_rows,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_ROW = (
    "France\tDonnées temps réel\t2022-05-01\t00:00\t45000\t44800\t44900\t"
    "120\t5\t2500\t38000\t3200\t0\t4800\t-1200\t900\t-3000\t30"
).split("\t")


def _response(status_code: int = 200, content: bytes = b"") -> httpx.Response:
    return httpx.Response(
        status_code,
        content=content,
        request=httpx.Request("GET", "https://eco2mix.rte-france.com/curves/eco2mixDl"),
    )


def _mock_client(get: AsyncMock) -> AsyncMock:
    client = AsyncMock()
    client.get = get
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=False)
    return client


# ---------------------------------------------------------------------------
# Day range and URL
# ---------------------------------------------------------------------------


class TestIterDays:
    def test_single_day(self) -> None:
        assert list(iter_days(date(2022, 5, 1), date(2022, 5, 1))) == [date(2022, 5, 1)]

    def test_inclusive_range(self) -> None:
        assert list(iter_days(date(2022, 5, 1), date(2022, 5, 4))) == [
            date(2022, 5, 1),
            date(2022, 5, 2),
            date(2022, 5, 3),
            date(2022, 5, 4),
        ]

    def test_crosses_month_boundary(self) -> None:
        days = list(iter_days(date(2022, 4, 30), date(2022, 5, 1)))
        assert days == [date(2022, 4, 30), date(2022, 5, 1)]

    def test_empty_when_from_after_to(self) -> None:
        assert list(iter_days(date(2022, 5, 2), date(2022, 5, 1))) == []


class TestFormatUrl:
    def test_uses_day_month_year(self) -> None:
        assert format_url(date(2022, 5, 1)) == (
            "https://eco2mix.rte-france.com/curves/eco2mixDl?date=01/05/2022"
        )


# ---------------------------------------------------------------------------
# Row parsing
# ---------------------------------------------------------------------------


class TestDailyRow:
    def test_parses_valid_row(self) -> None:
        row = DailyRow.from_record(_ROW)

        assert row.generation_total == 45000
        assert row.prediction_yesterday == 44800
        assert row.prediction_now == 44900
        assert row.oil == 120
        assert row.coal == 5
        assert row.gas == 2500
        assert row.nuclear == 38000
        assert row.wind == 3200
        assert row.solar == 0
        assert row.hydro == 4800
        assert row.pumped_storage == -1200
        assert row.bioenergy == 900
        assert row.co2 == 30

    def test_paris_summer_time_converted_to_utc(self) -> None:
        row = DailyRow.from_record(_ROW)
        assert row.timestamp == datetime(2022, 4, 30, 22, 0, tzinfo=UTC)

    def test_paris_winter_time_converted_to_utc(self) -> None:
        record = list(_ROW)
        record[2] = "2022-01-15"
        record[3] = "12:30"

        row = DailyRow.from_record(record)

        assert row.timestamp == datetime(2022, 1, 15, 11, 30, tzinfo=UTC)

    def test_time_skipped_by_spring_dst_rejected(self) -> None:
        record = list(_ROW)
        record[2] = "2022-03-27"
        record[3] = "02:15"

        with pytest.raises(FieldParseError, match="2022-03-27 02:15"):
            DailyRow.from_record(record)

    def test_times_around_spring_dst_converted(self) -> None:
        before = list(_ROW)
        before[2], before[3] = "2022-03-27", "01:45"
        after = list(_ROW)
        after[2], after[3] = "2022-03-27", "03:15"

        assert DailyRow.from_record(before).timestamp == datetime(
            2022, 3, 27, 0, 45, tzinfo=UTC
        )
        assert DailyRow.from_record(after).timestamp == datetime(
            2022, 3, 27, 1, 15, tzinfo=UTC
        )

    def test_invalid_scope_rejected(self) -> None:
        record = list(_ROW)
        record[0] = "Grand-Est"

        with pytest.raises(InvalidScopeError, match="Grand-Est"):
            DailyRow.from_record(record)

    def test_missing_column_rejected(self) -> None:
        with pytest.raises(MissingFieldError) as exc_info:
            DailyRow.from_record(_ROW[:10])
        assert exc_info.value.field_name == "Nuclear"

    def test_unparsable_number_rejected(self) -> None:
        record = list(_ROW)
        record[12] = "ND"

        with pytest.raises(FieldParseError) as exc_info:
            DailyRow.from_record(record)
        assert exc_info.value.field_name == "Solar"

    def test_unparsable_date_rejected(self) -> None:
        record = list(_ROW)
        record[2] = "01/05/2022"

        with pytest.raises(FieldParseError, match="Date"):
            DailyRow.from_record(record)

    def test_errors_are_data_errors(self) -> None:
        record = list(_ROW)
        record[3] = "25:99"

        with pytest.raises(DataError):
            DailyRow.from_record(record)

    def test_to_point(self) -> None:
        point = DailyRow.from_record(_ROW).to_point()

        assert point.name == "eco2mix"
        assert point.timestamp == datetime(2022, 4, 30, 22, 0, tzinfo=UTC)
        assert point.fields["nuclear"] == 38000
        assert point.fields["pumped_storage"] == -1200
        assert point.fields["co2"] == 30
        assert set(point.fields) == {
            "generation_total",
            "prediction_yesterday",
            "prediction_now",
            "oil",
            "coal",
            "gas",
            "nuclear",
            "wind",
            "solar",
            "hydro",
            "pumped_storage",
            "bioenergy",
            "co2",
        }


# ---------------------------------------------------------------------------
# File stages
# ---------------------------------------------------------------------------


class TestReadRows:
    def test_reads_rows_until_disclaimer(self, tmp_path: Path, eco2mix_text: str) -> None:
        data = eco2mix_text + "garbage\tafter\tdisclaimer\n"
        path = tmp_path / "eco2mix.xls"
        path.write_bytes(data.encode("latin-1"))

        rows = read_rows(path)

        assert len(rows) == 2
        assert rows[1].nuclear == 37900

    def test_skips_blank_rows(self, tmp_path: Path, eco2mix_text: str) -> None:
        header, first, *rest = eco2mix_text.split("\n")
        path = tmp_path / "eco2mix.xls"
        path.write_bytes("\n".join([header, first, "", *rest]).encode("latin-1"))

        assert len(read_rows(path)) == 2

    def test_missing_file_raises_data_error(self, tmp_path: Path) -> None:
        with pytest.raises(DataError):
            read_rows(tmp_path / "missing.xls")


class TestExtract:
    def test_extracts_first_member_next_to_archive(
        self, tmp_path: Path, eco2mix_zip: bytes
    ) -> None:
        archive = tmp_path / "eco2mix-2022-05-01.zip"
        archive.write_bytes(eco2mix_zip)

        out = extract(archive)

        assert out == tmp_path / "eCO2mix_RTE_2022-05-01.xls"
        assert out.read_bytes().startswith("Périmètre".encode("latin-1"))

    def test_member_path_reduced_to_base_name(self, tmp_path: Path) -> None:
        archive = tmp_path / "evil.zip"
        with zipfile.ZipFile(archive, "w") as zf:
            zf.writestr("../../escape.xls", b"data")

        out = extract(archive)

        assert out == tmp_path / "escape.xls"
        assert out.read_bytes() == b"data"

    def test_bad_zip_raises(self, tmp_path: Path) -> None:
        archive = tmp_path / "bad.zip"
        archive.write_bytes(b"<html>not a zip</html>")

        with pytest.raises(ExtractionError, match="zip error"):
            extract(archive)

    def test_empty_zip_raises(self, tmp_path: Path) -> None:
        archive = tmp_path / "empty.zip"
        with zipfile.ZipFile(archive, "w"):
            pass

        with pytest.raises(ExtractionError, match="could not find file"):
            extract(archive)


class TestDownload:
    @pytest.mark.asyncio
    async def test_writes_archive(self, tmp_path: Path) -> None:
        client = _mock_client(AsyncMock(return_value=_response(200, b"zipbytes")))

        path = await download(client, date(2022, 5, 1), tmp_path)

        assert path == tmp_path / "eco2mix-2022-05-01.zip"
        assert path.read_bytes() == b"zipbytes"
        client.get.assert_awaited_once_with(
            "https://eco2mix.rte-france.com/curves/eco2mixDl?date=01/05/2022"
        )

    @pytest.mark.asyncio
    async def test_http_error_status_raises(self, tmp_path: Path) -> None:
        client = _mock_client(AsyncMock(return_value=_response(503)))

        with pytest.raises(DownloadError, match="http request error"):
            await download(client, date(2022, 5, 1), tmp_path)

    @pytest.mark.asyncio
    async def test_connection_error_raises(self, tmp_path: Path) -> None:
        client = _mock_client(AsyncMock(side_effect=httpx.ConnectError("refused")))

        with pytest.raises(DownloadError):
            await download(client, date(2022, 5, 1), tmp_path)

    @pytest.mark.asyncio
    async def test_unwritable_folder_raises(self, tmp_path: Path) -> None:
        client = _mock_client(AsyncMock(return_value=_response(200, b"zip")))

        with pytest.raises(DownloadError, match="error creating file"):
            await download(client, date(2022, 5, 1), tmp_path / "missing")


# ---------------------------------------------------------------------------
# Source
# ---------------------------------------------------------------------------


class TestRteSource:
    @pytest.mark.asyncio
    async def test_collects_every_day(self, tmp_path: Path, eco2mix_zip: bytes) -> None:
        client = _mock_client(AsyncMock(return_value=_response(200, eco2mix_zip)))
        source = RteSource(
            GlobalConfig(from_date=date(2022, 5, 1), to_date=date(2022, 5, 2)),
            tmp_path,
        )

        with patch("photon.src.sources.rte.httpx.AsyncClient", return_value=client):
            points = await source.collect()

        assert len(points) == 4
        assert all(p.name == "eco2mix" for p in points)
        urls = [call.args[0] for call in client.get.await_args_list]
        assert urls == [format_url(date(2022, 5, 1)), format_url(date(2022, 5, 2))]
        assert (tmp_path / "eco2mix-2022-05-01.zip").exists()

    @pytest.mark.asyncio
    async def test_removes_files_when_not_kept(
        self, tmp_path: Path, eco2mix_zip: bytes
    ) -> None:
        client = _mock_client(AsyncMock(return_value=_response(200, eco2mix_zip)))
        source = RteSource(
            GlobalConfig(from_date=date(2022, 5, 1), to_date=date(2022, 5, 1)),
            tmp_path,
            keep_files=False,
        )

        with patch("photon.src.sources.rte.httpx.AsyncClient", return_value=client):
            points = await source.collect()

        assert len(points) == 2
        assert list(tmp_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_removes_archive_when_extraction_fails(self, tmp_path: Path) -> None:
        page = _response(200, b"<html>maintenance</html>")
        client = _mock_client(AsyncMock(return_value=page))
        source = RteSource(
            GlobalConfig(from_date=date(2022, 5, 1), to_date=date(2022, 5, 1)),
            tmp_path,
            keep_files=False,
        )

        with patch("photon.src.sources.rte.httpx.AsyncClient", return_value=client):
            with pytest.raises(ExtractionError):
                await source.collect()

        assert list(tmp_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_failed_day_aborts_collection(self, tmp_path: Path) -> None:
        client = _mock_client(AsyncMock(return_value=_response(404)))
        source = RteSource(
            GlobalConfig(from_date=date(2022, 5, 1), to_date=date(2022, 5, 3)),
            tmp_path,
        )

        with patch("photon.src.sources.rte.httpx.AsyncClient", return_value=client):
            with pytest.raises(DownloadError):
                await source.collect()

        client.get.assert_awaited_once()


class TestRteConfig:
    def test_builds_from_table(self, tmp_path: Path) -> None:
        source = build_source(
            "rte",
            {"download_folder": str(tmp_path)},
            GlobalConfig(from_date=date(2022, 5, 1), to_date=date(2022, 5, 1)),
        )
        assert isinstance(source, RteSource)

    def test_defaults_to_temp_dir(self) -> None:
        source = build_source(
            "rte", {}, GlobalConfig(from_date=date(2022, 5, 1), to_date=date(2022, 5, 1))
        )
        assert isinstance(source, RteSource)

    def test_unknown_option_rejected(self) -> None:
        with pytest.raises(SourceConfigError, match="rte"):
            build_source(
                "rte",
                {"folder": "/tmp"},
                GlobalConfig(from_date=date(2022, 5, 1), to_date=date(2022, 5, 1)),
            )
