"""Database models for nightly temperature profiles."""

from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime, Text, Time, ForeignKey
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def utcnow():
    """Naive UTC timestamp for the DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(Base):
    """A user linked to an external sleep-tracking account (keyed by email)."""

    __tablename__ = "users"

    email = Column(String(255), primary_key=True)
    eight_user_id = Column(String(255), nullable=False)
    access_token = Column(Text, nullable=False)
    refresh_token = Column(Text, nullable=False)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    temperature_profile = relationship(
        "TemperatureProfile", back_populates="user", uselist=False
    )


class TemperatureProfile(Base):
    """Nightly temperature schedule (at most one row per user)."""

    __tablename__ = "temperature_profile"

    email = Column(String(255), ForeignKey("users.email"), primary_key=True)
    bed_time = Column(Time, nullable=False)
    wakeup_time = Column(Time, nullable=False)
    initial_sleep_level = Column(Integer, nullable=False)  # -10..10
    mid_stage_time = Column(Time)  # Legacy single mid-stage; mirrors first entry
    final_sleep_level = Column(Integer, nullable=False)  # -10..10
    timezone = Column(String(50), nullable=False)  # IANA zone, e.g. America/New_York
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship("User", back_populates="temperature_profile")
    mid_stage_temperatures = relationship(
        "MidStageTemperature",
        back_populates="profile",
        order_by="MidStageTemperature.id",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class MidStageTemperature(Base):
    """Intermediate setpoint between the initial and final levels."""

    __tablename__ = "mid_stage_temperatures"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(
        String(255),
        ForeignKey("temperature_profile.email", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    time = Column(Time, nullable=False)
    temperature = Column(Integer, nullable=False)  # -10..10
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    profile = relationship("TemperatureProfile", back_populates="mid_stage_temperatures")
