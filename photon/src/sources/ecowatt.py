"""
RTE EcoWatt source: grid tension signals.

Calls the EcoWatt v4 signals API with a bearer token (see the
rte-refresh-token tool) and turns today's signal into ``ecowatt_signal``
points: one daily value at midnight plus one value per hour.

Signal values: 1 = normal, 2 = tense, 3 = very tense grid.

CHANGELOG:
- 2026-10-16: Initial creation

TODO:
- None
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta

import httpx
from pydantic import BaseModel, Field, ValidationError

from photon.src.point import Point, Points
from photon.src.sources.base import (
    DataSource,
    DataSourceConfig,
    GlobalConfig,
    SourceError,
    register,
)

logger = logging.getLogger(__name__)

ECOWATT_URL = "https://digital.iservices.rte-france.com/open_api/ecowatt/v4/signals"
ECOWATT_SANDBOX_URL = (
    "https://digital.iservices.rte-france.com/open_api/ecowatt/v4/sandbox/signals"
)

REQUEST_TIMEOUT_S = 30.0


class EcoWattError(SourceError):
    """Base class for EcoWatt errors."""


class NoSignalError(EcoWattError):
    def __init__(self) -> None:
        super().__init__("no EcoWatt signal returned from RTE")


# ---------------------------------------------------------------------------
# API models
# ---------------------------------------------------------------------------


class EcoWattValue(BaseModel):
    hour: int = Field(alias="pas")
    value: int = Field(alias="hvalue")


class EcoWattSignal(BaseModel):
    day: datetime = Field(alias="jour")
    day_value: int = Field(alias="dvalue")
    message: str
    values: list[EcoWattValue]


class EcoWattResponse(BaseModel):
    signals: list[EcoWattSignal]


def signal_points(signal: EcoWattSignal) -> Points:
    """Convert one daily signal into points."""
    day = signal.day.astimezone(UTC)
    points = Points()
    points.add(Point("ecowatt_signal").field("value", signal.day_value).at(day))
    for hourly in signal.values:
        ts = day + timedelta(hours=hourly.hour)
        points.add(Point("ecowatt_signal").field("value", hourly.value).at(ts))
    return points


class EcoWattSource(DataSource):
    """Fetch today's EcoWatt signal.

    Args:
        token: OAuth bearer token issued by the RTE portal.
        url: Signals endpoint (production or sandbox).
    """

    def __init__(self, token: str, url: str = ECOWATT_URL) -> None:
        self._token = token
        self._url = url

    async def collect(self) -> Points:
        try:
            async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT_S, verify=True) as client:
                response = await client.get(
                    self._url,
                    headers={"Authorization": f"Bearer {self._token}"},
                )
                response.raise_for_status()
        except httpx.HTTPError as exc:
            raise EcoWattError(f"EcoWatt request failed: {exc}") from exc

        try:
            payload = EcoWattResponse.model_validate_json(response.content)
        except ValidationError as exc:
            raise EcoWattError(f"invalid EcoWatt response: {exc}") from exc

        if not payload.signals:
            raise NoSignalError()

        today = payload.signals[0]
        logger.info(
            "EcoWatt signal for %s: value=%d message=%s",
            today.day.date(),
            today.day_value,
            today.message,
        )
        return signal_points(today)


@register("rte-ecowatt")
class EcoWattConfig(DataSourceConfig):
    """Config of the ``rte-ecowatt`` source.

    Attributes:
        token: Bearer token for the EcoWatt API.
        sandbox: Use the sandbox endpoint (fixed test data).
    """

    token: str
    sandbox: bool = False

    def build(self, global_config: GlobalConfig) -> DataSource:
        url = ECOWATT_SANDBOX_URL if self.sandbox else ECOWATT_URL
        return EcoWattSource(self.token, url)
