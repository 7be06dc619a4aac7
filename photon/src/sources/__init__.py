"""
Data sources. Importing this package registers every built-in source type.
"""

from photon.src.sources import ecowatt, rte
from photon.src.sources.base import (
    DataSource,
    DataSourceConfig,
    GlobalConfig,
    SourceConfigError,
    SourceError,
    UnknownSourceError,
    build_source,
    register,
    registered_types,
)

__all__ = [
    "DataSource",
    "DataSourceConfig",
    "GlobalConfig",
    "SourceConfigError",
    "SourceError",
    "UnknownSourceError",
    "build_source",
    "ecowatt",
    "register",
    "registered_types",
    "rte",
]
