"""
Process-level settings for the photon crawler, loaded from the environment.

The topology (sources, sinks, dates) lives in the TOML config file; these
settings only control how the process runs.

CHANGELOG:
- 2026-10-16: Initial creation

TODO:
- None
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class PhotonSettings(BaseSettings):
    """Photon runtime configuration.

    Attributes:
        log_level: Root log level (``PHOTON_LOG_LEVEL``, default INFO).
        health_path: Optional health JSON file path (``PHOTON_HEALTH_PATH``).
        run_interval_s: Seconds between runs in scheduled mode
            (``PHOTON_RUN_INTERVAL_S``). 0 runs once and exits.
    """

    log_level: str = "INFO"
    health_path: str | None = None
    run_interval_s: int = 0

    model_config = SettingsConfigDict(
        env_prefix="PHOTON_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def log_level_must_be_known(cls, v: str) -> str:
        level = v.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"PHOTON_LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)}")
        return level

    @field_validator("run_interval_s")
    @classmethod
    def run_interval_must_be_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("PHOTON_RUN_INTERVAL_S must be >= 0")
        return v
