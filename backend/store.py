"""
Profile store: fetch-by-user and upsert-by-user for temperature profiles.

Every function takes a request-scoped SQLAlchemy session; nothing here holds
module-level state.
"""

from datetime import datetime, time

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backend import models
from backend.schemas import TemperatureProfile, TemperatureProfileInput, field_errors


class ProfileStoreError(Exception):
    """Base class for profile store failures."""


class UnknownUserError(ProfileStoreError):
    """No users row exists for the identity; a profile cannot reference it."""

    def __init__(self, email: str):
        super().__init__(f"Unknown user: {email}")
        self.email = email


class ProfileValidationError(ProfileStoreError):
    """Payload failed the same bounds the form enforces."""

    def __init__(self, errors: dict[str, str]):
        super().__init__("Invalid temperature profile")
        self.errors = errors


def parse_time(value: str) -> time:
    return datetime.strptime(value, "%H:%M").time()


def format_time(value: time) -> str:
    return value.strftime("%H:%M")


def _validated(payload) -> TemperatureProfileInput:
    if isinstance(payload, TemperatureProfileInput):
        return payload
    try:
        return TemperatureProfileInput.model_validate(payload)
    except ValidationError as e:
        raise ProfileValidationError(field_errors(e)) from e


def _to_schema(profile: models.TemperatureProfile) -> TemperatureProfile:
    return TemperatureProfile(
        bed_time=format_time(profile.bed_time),
        wakeup_time=format_time(profile.wakeup_time),
        initial_sleep_level=profile.initial_sleep_level,
        mid_stage_temperatures=[
            {"time": format_time(m.time), "temperature": m.temperature}
            for m in profile.mid_stage_temperatures
        ],
        final_sleep_level=profile.final_sleep_level,
        timezone={"value": profile.timezone},
    )


def _apply(profile: models.TemperatureProfile, data: TemperatureProfileInput, now: datetime):
    """Copy scalar fields and replace the mid-stage rows wholesale."""
    profile.bed_time = parse_time(data.bed_time)
    profile.wakeup_time = parse_time(data.wakeup_time)
    profile.initial_sleep_level = data.initial_sleep_level
    profile.final_sleep_level = data.final_sleep_level
    profile.timezone = data.timezone.value
    profile.updated_at = now

    stages = data.mid_stage_temperatures
    profile.mid_stage_time = parse_time(stages[0].time) if stages else None
    # Old rows become orphans and are deleted on flush; new ids follow list order
    profile.mid_stage_temperatures = [
        models.MidStageTemperature(
            time=parse_time(stage.time),
            temperature=stage.temperature,
            created_at=now,
            updated_at=now,
        )
        for stage in stages
    ]


def get_user_temperature_profile(db: Session, email: str) -> TemperatureProfile | None:
    """Return the user's profile with its mid-stage entries, or None if unset."""
    profile = db.get(models.TemperatureProfile, email)
    if profile is None:
        return None
    return _to_schema(profile)


def update_user_temperature_profile(db: Session, email: str, payload) -> TemperatureProfile:
    """
    Create or replace the user's profile.

    `payload` may be a TemperatureProfileInput or a raw camelCase mapping;
    raw mappings are validated here again. Raises ProfileValidationError
    before touching the database, and UnknownUserError if the user row is
    missing.
    """
    data = _validated(payload)

    if db.get(models.User, email) is None:
        raise UnknownUserError(email)

    now = models.utcnow()
    profile = db.get(models.TemperatureProfile, email)
    if profile is None:
        profile = models.TemperatureProfile(email=email, created_at=now)
        _apply(profile, data, now)
        db.add(profile)
        try:
            db.flush()
        except IntegrityError:
            # Another request inserted the row first; treat as an update
            db.rollback()
            profile = db.get(models.TemperatureProfile, email)
            if profile is None:
                raise
            _apply(profile, data, now)
    else:
        _apply(profile, data, now)

    db.commit()
    print(f"[profile] saved {email}: {len(data.mid_stage_temperatures)} mid-stage entries")
    return _to_schema(profile)


def delete_user_temperature_profile(db: Session, email: str) -> bool:
    """Delete the user's profile; the database cascades to mid-stage rows."""
    deleted = db.query(models.TemperatureProfile).filter(
        models.TemperatureProfile.email == email
    ).delete()
    db.commit()
    if deleted:
        print(f"[profile] deleted {email}")
    return bool(deleted)
