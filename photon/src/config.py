"""
Topology configuration file loader.

Reads the TOML file describing the collection window, the sources and the
sinks, and builds a Topology from it::

    from_date = "yesterday"
    to_date = "today"

    [sources.rte]
    download_folder = "/var/lib/photon"

    [sources.rte-ecowatt]
    token = "${RTE_ECOWATT_TOKEN}"

    [sinks.influxdb]
    host = "https://influx.example.com/api/v2/write"
    token = "${INFLUX_TOKEN}"
    org = "home"
    bucket = "energy"

Dates accept ``today``, ``yesterday`` (case-insensitive, resolved against the
current UTC date when the file is read) or ``YYYY-MM-DD``. ``${VAR}``
references in string values are replaced with environment variables so
tokens can stay out of the file.

CHANGELOG:
- 2026-10-16: Initial creation

TODO:
- None
"""

from __future__ import annotations

import logging
import os
import re
import tomllib
from datetime import UTC, date, datetime, timedelta
from pathlib import Path
from typing import Any

from photon.src.sinks import SinkError, build_sink
from photon.src.sources import GlobalConfig, SourceError, build_source
from photon.src.topology import Component, Topology

logger = logging.getLogger(__name__)

_ENV_REF = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")

# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class ConfigError(Exception):
    """Base class for configuration file errors."""


class ConfigReadError(ConfigError):
    def __init__(self, path: Path, cause: OSError) -> None:
        super().__init__(f"error reading file {path}: {cause}")
        self.path = path


class ConfigFormatError(ConfigError):
    """The file is not valid TOML or lacks a required key."""


class DateFormatError(ConfigError):
    def __init__(self, key: str, value: object) -> None:
        super().__init__(f"invalid date format for {key}: {value!r}")
        self.key = key


class InvalidSourceError(ConfigError):
    def __init__(self, name: str, cause: SourceError) -> None:
        super().__init__(f"invalid data source {name}: {cause}")
        self.name = name


class InvalidSinkError(ConfigError):
    def __init__(self, name: str, cause: SinkError) -> None:
        super().__init__(f"invalid sink {name}: {cause}")
        self.name = name


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------


def parse_date(value: object, key: str, *, today: date | None = None) -> date:
    """Parse a ``today`` / ``yesterday`` / ``YYYY-MM-DD`` value.

    TOML native dates are accepted as-is.

    Args:
        value: Raw TOML value.
        key: Config key, used in the error message.
        today: Reference day (default: current UTC date).

    Raises:
        DateFormatError: If the value is not a recognised date.
    """
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        raise DateFormatError(key, value)

    if today is None:
        today = datetime.now(tz=UTC).date()

    keyword = value.strip().lower()
    if keyword == "today":
        return today
    if keyword == "yesterday":
        return today - timedelta(days=1)
    try:
        return date.fromisoformat(value.strip())
    except ValueError as exc:
        raise DateFormatError(key, value) from exc


def expand_env(value: Any, environ: dict[str, str] | None = None) -> Any:
    """Recursively replace ``${VAR}`` references in string values.

    Raises:
        ConfigError: If a referenced variable is not set.
    """
    env = os.environ if environ is None else environ

    if isinstance(value, str):

        def _replace(match: re.Match[str]) -> str:
            var = match.group(1)
            if var not in env:
                raise ConfigError(f"environment variable {var} is not set")
            return env[var]

        return _ENV_REF.sub(_replace, value)
    if isinstance(value, dict):
        return {k: expand_env(v, env) for k, v in value.items()}
    if isinstance(value, list):
        return [expand_env(v, env) for v in value]
    return value


def _table(raw: dict[str, Any], key: str) -> dict[str, dict[str, Any]]:
    section = raw.get(key, {})
    if not isinstance(section, dict):
        raise ConfigFormatError(f"'{key}' must be a table")
    for name, options in section.items():
        if not isinstance(options, dict):
            raise ConfigFormatError(f"'{key}.{name}' must be a table")
    return section


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load(content: str, *, today: date | None = None) -> Topology:
    """Build a Topology from TOML text.

    Raises:
        ConfigError: On any invalid content.
    """
    try:
        raw = tomllib.loads(content)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigFormatError(f"invalid toml format: {exc}") from exc

    raw = expand_env(raw)

    for key in ("from_date", "to_date"):
        if key not in raw:
            raise ConfigFormatError(f"missing required key '{key}'")

    global_config = GlobalConfig(
        from_date=parse_date(raw["from_date"], "from_date", today=today),
        to_date=parse_date(raw["to_date"], "to_date", today=today),
    )
    if global_config.from_date > global_config.to_date:
        raise ConfigError(
            f"from_date {global_config.from_date} is after "
            f"to_date {global_config.to_date}"
        )

    topology = Topology()

    for name, options in _table(raw, "sources").items():
        try:
            source = build_source(name, options, global_config)
        except SourceError as exc:
            raise InvalidSourceError(name, exc) from exc
        topology.sources.append(Component(name=name, component=source))

    for name, options in _table(raw, "sinks").items():
        try:
            sink = build_sink(name, options)
        except SinkError as exc:
            raise InvalidSinkError(name, exc) from exc
        topology.sinks.append(Component(name=name, component=sink))

    logger.info(
        "Loaded topology from_date=%s to_date=%s sources=%s sinks=%s",
        global_config.from_date,
        global_config.to_date,
        [c.name for c in topology.sources],
        [c.name for c in topology.sinks],
    )
    return topology


def read(path: str | Path, *, today: date | None = None) -> Topology:
    """Read the config file at *path* and build its Topology.

    Raises:
        ConfigReadError: If the file cannot be read.
        ConfigError: On any invalid content.
    """
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigReadError(path, exc) from exc
    return load(content, today=today)
