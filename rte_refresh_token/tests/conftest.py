"""
Shared test fixtures for rte-refresh-token tests.

All RTE_* env vars and KUBECONFIG are cleaned before each test, and the
working directory is moved to tmp_path so no .env file is picked up.

CHANGELOG:
- 2026-10-16: Initial creation

TODO:
- None
"""

from __future__ import annotations

from pathlib import Path

import pytest

_ALL_RTE_ENV_VARS = (
    "RTE_CLIENT_ID",
    "RTE_CLIENT_SECRET",
    "RTE_LOG_LEVEL",
    "KUBECONFIG",
)


@pytest.fixture(autouse=True)
def _clean_rte_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Remove rte-refresh-token env vars and isolate from .env files."""
    for var in _ALL_RTE_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture()
def token_payload() -> dict[str, object]:
    """A token endpoint response body."""
    return {"access_token": "rte-access-token", "token_type": "Bearer", "expires_in": 7200}
