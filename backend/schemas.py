"""
Temperature Profile Schemas
===========================

Pydantic models for the profile payload. The same models validate the form
on the client and the request body on the server, so both sides enforce
identical bounds.
"""

import re
from typing import Annotated
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

MIN_LEVEL = -10
MAX_LEVEL = 10

TIME_PATTERN = re.compile(r"([01]\d|2[0-3]):[0-5]\d")
TIME_FORMAT_MESSAGE = "Must be in HH:MM format"


def _check_time(value: str) -> str:
    if not TIME_PATTERN.fullmatch(value):
        raise ValueError(TIME_FORMAT_MESSAGE)
    return value


TimeOfDay = Annotated[str, AfterValidator(_check_time)]
# Strict: no bool or numeric-string coercion
SleepLevel = Annotated[int, Field(ge=MIN_LEVEL, le=MAX_LEVEL, strict=True)]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MidStageTemperature(_CamelModel):
    """One intermediate setpoint tagged with a time of day."""

    time: TimeOfDay
    temperature: SleepLevel


class TimezoneOption(_CamelModel):
    """Timezone as picked in the form (only `value` is persisted)."""

    value: str
    alt_name: str | None = None
    abbrev: str | None = None

    @field_validator("value")
    @classmethod
    def known_zone(cls, v: str) -> str:
        if not v:
            raise ValueError("Timezone is required")
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone: {v}")
        return v


class TemperatureProfileInput(_CamelModel):
    """Payload accepted by updateUserTemperatureProfile."""

    bed_time: TimeOfDay
    wakeup_time: TimeOfDay
    initial_sleep_level: SleepLevel
    mid_stage_temperatures: list[MidStageTemperature] = Field(default_factory=list)
    final_sleep_level: SleepLevel
    timezone: TimezoneOption

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "bedTime": "22:00",
                "wakeupTime": "06:00",
                "initialSleepLevel": 0,
                "midStageTemperatures": [{"time": "02:00", "temperature": -2}],
                "finalSleepLevel": 1,
                "timezone": {"value": "America/New_York"},
            }
        }
    )

    def to_payload(self) -> dict:
        """Wire form: camelCase keys, unset optional fields dropped."""
        return self.model_dump(by_alias=True, exclude_none=True)


class TemperatureProfile(TemperatureProfileInput):
    """Stored profile as returned by getUserTemperatureProfile."""


def field_errors(exc) -> dict[str, str]:
    """Flatten a pydantic (or FastAPI request) validation error into {"field.path": "message"}."""
    errors = {}
    for err in exc.errors():
        path = ".".join(str(part) for part in err["loc"] if part not in ("body",))
        message = err["msg"]
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.setdefault(path or "__root__", message)
    return errors
