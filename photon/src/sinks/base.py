"""
Sink contract and registry.

Mirrors the source registry: each sink type registers a pydantic config
model, the TOML table name is the sink instance name, and an optional
``type`` key selects the registered type (default: the table name).

CHANGELOG:
- 2026-10-16: Reject non-string type keys; make build abstract
- 2026-10-16: Initial creation

TODO:
- None
"""

from __future__ import annotations

import abc
from typing import Any, Callable, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError

from photon.src.point import Points


class SinkError(Exception):
    """Base class for sink errors."""


class UnknownSinkError(SinkError):
    def __init__(self, type_name: str) -> None:
        super().__init__(f"unknown sink {type_name}")
        self.type_name = type_name


class SinkConfigError(SinkError):
    def __init__(self, name: str, cause: Exception) -> None:
        super().__init__(f"invalid configuration for {name}: {cause}")
        self.name = name
        self.cause = cause


class Sink(abc.ABC):
    """A consumer of point batches."""

    @abc.abstractmethod
    async def sink(self, points: Points) -> None:
        """Deliver *points*."""

    async def close(self) -> None:
        """Release held resources. Default: nothing to release."""


class SinkConfig(BaseModel):
    """Base class for per-type sink configuration models."""

    model_config = ConfigDict(extra="forbid")

    @abc.abstractmethod
    def build(self) -> Sink:
        """Create the sink described by this config."""


_C = TypeVar("_C", bound=type[SinkConfig])

_REGISTRY: dict[str, type[SinkConfig]] = {}


def register(type_name: str) -> Callable[[_C], _C]:
    """Class decorator registering a sink config model under *type_name*."""

    def decorator(config_cls: _C) -> _C:
        if type_name in _REGISTRY:
            raise ValueError(f"sink type '{type_name}' already registered")
        _REGISTRY[type_name] = config_cls
        return config_cls

    return decorator


def registered_types() -> list[str]:
    return sorted(_REGISTRY)


def build_sink(name: str, table: dict[str, Any]) -> Sink:
    """Validate a sink TOML table and build the sink instance.

    Raises:
        UnknownSinkError: If the resolved type is not registered.
        SinkConfigError: If validation or construction fails.
    """
    options = dict(table)
    type_name = options.pop("type", name)
    if not isinstance(type_name, str):
        raise SinkConfigError(
            name, ValueError(f"type must be a string (got: {type_name!r})")
        )

    config_cls = _REGISTRY.get(type_name)
    if config_cls is None:
        raise UnknownSinkError(type_name)

    try:
        config = config_cls.model_validate(options)
        return config.build()
    except (ValidationError, ValueError) as exc:
        raise SinkConfigError(name, exc) from exc
