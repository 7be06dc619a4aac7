"""
Sinks. Importing this package registers every built-in sink type.
"""

from photon.src.sinks import console, influxdb
from photon.src.sinks.base import (
    Sink,
    SinkConfig,
    SinkConfigError,
    SinkError,
    UnknownSinkError,
    build_sink,
    register,
    registered_types,
)

__all__ = [
    "Sink",
    "SinkConfig",
    "SinkConfigError",
    "SinkError",
    "UnknownSinkError",
    "build_sink",
    "console",
    "influxdb",
    "register",
    "registered_types",
]
