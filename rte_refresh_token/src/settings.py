"""
Environment fallbacks for the rte-refresh-token CLI.

CHANGELOG:
- 2026-10-16: Initial creation

TODO:
- None
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class TokenSettings(BaseSettings):
    """Values used when the matching CLI option is not given.

    Attributes:
        client_id: ``RTE_CLIENT_ID``.
        client_secret: ``RTE_CLIENT_SECRET``.
        log_level: ``RTE_LOG_LEVEL`` (default INFO).
    """

    client_id: str | None = None
    client_secret: str | None = None
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="RTE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def log_level_must_be_known(cls, v: str) -> str:
        level = v.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"RTE_LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)}")
        return level
