"""
Shared test fixtures for photon tests.

All PHOTON_* env vars are cleaned before each test, and the working
directory is moved to tmp_path so no .env file is picked up by
pydantic-settings. Also provides sample eco2mix files.

CHANGELOG:
- 2026-10-16: Initial creation

TODO:
- None
"""

from __future__ import annotations

import io
import zipfile
from pathlib import Path

import pytest

_ALL_PHOTON_ENV_VARS = (
    "PHOTON_LOG_LEVEL",
    "PHOTON_HEALTH_PATH",
    "PHOTON_RUN_INTERVAL_S",
)

_ECO2MIX_HEADER = (
    "Périmètre\tNature\tDate\tHeures\tConsommation\tPrévision J-1\tPrévision J\t"
    "Fioul\tCharbon\tGaz\tNucléaire\tEolien\tSolaire\tHydraulique\tPompage\t"
    "Bioénergies\tEch. physiques\tTaux de Co2"
)

_ECO2MIX_ROWS = (
    "France\tDonnées temps réel\t2022-05-01\t00:00\t45000\t44800\t44900\t"
    "120\t5\t2500\t38000\t3200\t0\t4800\t-1200\t900\t-3000\t30",
    "France\tDonnées temps réel\t2022-05-01\t00:15\t44500\t44300\t44400\t"
    "118\t5\t2450\t37900\t3300\t0\t4700\t-1500\t880\t-2900\t29",
)

_ECO2MIX_DISCLAIMER = (
    "RTE ne pourra être tenu responsable de l'usage qui est fait des données"
)


@pytest.fixture(autouse=True)
def _clean_photon_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Remove photon env vars and isolate from .env files before each test."""
    for var in _ALL_PHOTON_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture()
def eco2mix_text() -> str:
    """Two France rows followed by the RTE disclaimer row."""
    return "\n".join((_ECO2MIX_HEADER, *_ECO2MIX_ROWS, _ECO2MIX_DISCLAIMER)) + "\n"


@pytest.fixture()
def eco2mix_zip(eco2mix_text: str) -> bytes:
    """In-memory eco2mix archive holding one latin-1 TSV member."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        archive.writestr("eCO2mix_RTE_2022-05-01.xls", eco2mix_text.encode("latin-1"))
    return buffer.getvalue()
