"""
Data source contract and registry.

Every source type provides a pydantic config model registered under a type
name. The config file names each source instance with its TOML table; the
optional ``type`` key selects the registered type and defaults to the table
name, so ``[sources.rte]`` and ``[sources.paris] type = "rte"`` both build an
eco2mix source.

CHANGELOG:
- 2026-10-16: Reject non-string type keys; make build abstract
- 2026-10-16: Initial creation

TODO:
- None
"""

from __future__ import annotations

import abc
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError

from photon.src.point import Points

# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class SourceError(Exception):
    """Base class for data source errors."""


class UnknownSourceError(SourceError):
    """No source type is registered under the requested name."""

    def __init__(self, type_name: str) -> None:
        super().__init__(f"unknown source {type_name}")
        self.type_name = type_name


class SourceConfigError(SourceError):
    """The TOML table of a source failed validation or could not be built."""

    def __init__(self, name: str, cause: Exception) -> None:
        super().__init__(f"invalid configuration for {name}: {cause}")
        self.name = name
        self.cause = cause


# ---------------------------------------------------------------------------
# Contract
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GlobalConfig:
    """Settings shared by every source.

    Attributes:
        from_date: First day to collect (inclusive).
        to_date: Last day to collect (inclusive).
    """

    from_date: date
    to_date: date


class DataSource(abc.ABC):
    """A producer of points."""

    @abc.abstractmethod
    async def collect(self) -> Points:
        """Fetch the data for this source and return it as points."""


class DataSourceConfig(BaseModel):
    """Base class for per-type source configuration models."""

    model_config = ConfigDict(extra="forbid")

    @abc.abstractmethod
    def build(self, global_config: GlobalConfig) -> DataSource:
        """Create the source described by this config."""


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

_C = TypeVar("_C", bound=type[DataSourceConfig])

_REGISTRY: dict[str, type[DataSourceConfig]] = {}


def register(type_name: str) -> Callable[[_C], _C]:
    """Class decorator registering a source config model under *type_name*."""

    def decorator(config_cls: _C) -> _C:
        if type_name in _REGISTRY:
            raise ValueError(f"source type '{type_name}' already registered")
        _REGISTRY[type_name] = config_cls
        return config_cls

    return decorator


def registered_types() -> list[str]:
    return sorted(_REGISTRY)


def build_source(
    name: str,
    table: dict[str, Any],
    global_config: GlobalConfig,
) -> DataSource:
    """Validate a source TOML table and build the source instance.

    Args:
        name: Source instance name (the TOML table name).
        table: Raw TOML table content.
        global_config: Shared date range.

    Raises:
        UnknownSourceError: If the resolved type is not registered.
        SourceConfigError: If validation or construction fails.
    """
    options = dict(table)
    type_name = options.pop("type", name)
    if not isinstance(type_name, str):
        raise SourceConfigError(
            name, ValueError(f"type must be a string (got: {type_name!r})")
        )

    config_cls = _REGISTRY.get(type_name)
    if config_cls is None:
        raise UnknownSourceError(type_name)

    try:
        config = config_cls.model_validate(options)
        return config.build(global_config)
    except (ValidationError, ValueError) as exc:
        raise SourceConfigError(name, exc) from exc
