"""Validation bounds shared by the form and the server."""

import pytest
from pydantic import ValidationError

from backend.schemas import TIME_FORMAT_MESSAGE, TemperatureProfileInput, field_errors


def make_payload(**overrides):
    payload = {
        "bedTime": "22:00",
        "wakeupTime": "06:00",
        "initialSleepLevel": 0,
        "midStageTemperatures": [],
        "finalSleepLevel": 0,
        "timezone": {"value": "America/New_York"},
    }
    payload.update(overrides)
    return payload


@pytest.mark.parametrize("value", ["00:00", "06:30", "12:00", "19:59", "23:59"])
def test_accepts_24_hour_times(value):
    data = TemperatureProfileInput.model_validate(make_payload(bedTime=value, wakeupTime=value))
    assert data.bed_time == value


@pytest.mark.parametrize("value", ["24:00", "7:00", "07:60", "0700", "07:00:00", "", "ab:cd", " 07:00", "22:00\n"])
def test_rejects_malformed_times(value):
    with pytest.raises(ValidationError) as exc:
        TemperatureProfileInput.model_validate(make_payload(bedTime=value))
    assert field_errors(exc.value) == {"bedTime": TIME_FORMAT_MESSAGE}


@pytest.mark.parametrize("level", [-10, -1, 0, 5, 10])
def test_accepts_levels_in_range(level):
    data = TemperatureProfileInput.model_validate(
        make_payload(initialSleepLevel=level, finalSleepLevel=level)
    )
    assert data.initial_sleep_level == level
    assert data.final_sleep_level == level


@pytest.mark.parametrize("field", ["initialSleepLevel", "finalSleepLevel"])
@pytest.mark.parametrize("level", [-11, 11, 100])
def test_rejects_levels_out_of_range(field, level):
    with pytest.raises(ValidationError) as exc:
        TemperatureProfileInput.model_validate(make_payload(**{field: level}))
    assert list(field_errors(exc.value)) == [field]


def test_mid_stage_entries_are_validated_per_index():
    payload = make_payload(midStageTemperatures=[
        {"time": "01:00", "temperature": -3},
        {"time": "2:00", "temperature": 12},
    ])
    with pytest.raises(ValidationError) as exc:
        TemperatureProfileInput.model_validate(payload)
    errors = field_errors(exc.value)
    assert set(errors) == {"midStageTemperatures.1.time", "midStageTemperatures.1.temperature"}
    assert errors["midStageTemperatures.1.time"] == TIME_FORMAT_MESSAGE


def test_mid_stage_list_may_be_empty_or_omitted():
    payload = make_payload()
    del payload["midStageTemperatures"]
    assert TemperatureProfileInput.model_validate(payload).mid_stage_temperatures == []


def test_timezone_optional_fields_round_trip_in_payload():
    data = TemperatureProfileInput.model_validate(make_payload(
        timezone={"value": "Europe/Berlin", "altName": "Central European Time", "abbrev": "CET"}
    ))
    assert data.to_payload()["timezone"] == {
        "value": "Europe/Berlin",
        "altName": "Central European Time",
        "abbrev": "CET",
    }


def test_to_payload_drops_unset_timezone_fields():
    data = TemperatureProfileInput.model_validate(make_payload())
    assert data.to_payload()["timezone"] == {"value": "America/New_York"}


@pytest.mark.parametrize("zone", ["", "Mars/Olympus_Mons"])
def test_rejects_unknown_timezone(zone):
    with pytest.raises(ValidationError) as exc:
        TemperatureProfileInput.model_validate(make_payload(timezone={"value": zone}))
    assert list(field_errors(exc.value)) == ["timezone.value"]


def test_missing_fields_are_reported():
    with pytest.raises(ValidationError) as exc:
        TemperatureProfileInput.model_validate({"bedTime": "22:00"})
    errors = field_errors(exc.value)
    assert {"wakeupTime", "initialSleepLevel", "finalSleepLevel", "timezone"} <= set(errors)


@pytest.mark.parametrize("field", ["initialSleepLevel", "finalSleepLevel"])
@pytest.mark.parametrize("level", [True, False, "5", 2.0])
def test_levels_must_be_real_integers(field, level):
    with pytest.raises(ValidationError) as exc:
        TemperatureProfileInput.model_validate(make_payload(**{field: level}))
    assert list(field_errors(exc.value)) == [field]


@pytest.mark.parametrize("temperature", [True, "-3"])
def test_mid_stage_temperature_must_be_real_integer(temperature):
    payload = make_payload(midStageTemperatures=[{"time": "02:00", "temperature": temperature}])
    with pytest.raises(ValidationError) as exc:
        TemperatureProfileInput.model_validate(payload)
    assert list(field_errors(exc.value)) == ["midStageTemperatures.0.temperature"]
