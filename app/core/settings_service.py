"""
Settings store.

Settings are plain key/value rows. This module owns the defaults, the
validation of known keys and the conversion of rows into an
``AttendancePolicy``.
"""

import math
from typing import Optional

import pytz
from sqlmodel import Session, select

from app.core.attendance_policy import (
    DEFAULT_HALF_DAY_THRESHOLD_HOURS,
    DEFAULT_LATE_THRESHOLD_MINUTES,
    DEFAULT_WORK_END,
    DEFAULT_WORK_START,
    AttendancePolicy,
    parse_hhmm,
)
from app.core.clock import utcnow
from app.core.config import settings as app_settings
from app.core.exceptions import ValidationError
from app.core.logging import get_logger
from app.models.setting import Setting, SettingItem

logger = get_logger(__name__)

WORK_START_TIME = "work_start_time"
WORK_END_TIME = "work_end_time"
LATE_THRESHOLD_MINUTES = "late_threshold_minutes"
HALF_DAY_THRESHOLD = "half_day_threshold"
TIMEZONE = "timezone"
COMPANY_NAME = "company_name"

# Keys the admin settings form has used under a different name
KEY_ALIASES = {"late_threshold": LATE_THRESHOLD_MINUTES}

# One day
MAX_LATE_THRESHOLD_MINUTES = 24 * 60

DEFAULT_SETTINGS: list[tuple[str, str, str]] = [
    (WORK_START_TIME, DEFAULT_WORK_START, "Official work start time"),
    (WORK_END_TIME, DEFAULT_WORK_END, "Official work end time"),
    (
        LATE_THRESHOLD_MINUTES,
        str(DEFAULT_LATE_THRESHOLD_MINUTES),
        "Minutes after start time to mark as late",
    ),
    (
        HALF_DAY_THRESHOLD,
        f"{DEFAULT_HALF_DAY_THRESHOLD_HOURS:g}",
        "Hours below which a day counts as half day",
    ),
    (TIMEZONE, app_settings.DEFAULT_TIMEZONE, "Time zone for attendance days"),
    (COMPANY_NAME, app_settings.APP_NAME, "Company name"),
    ("company_email", "", "Company contact email"),
    ("allow_remote_checkin", "true", "Allow check-in away from the office"),
    ("require_location", "true", "Require geolocation on check-in"),
    ("max_checkin_distance", "100", "Maximum check-in distance in metres"),
]


def _check_time(value: str) -> None:
    parse_hhmm(value)


def _check_threshold_minutes(value: str) -> None:
    minutes = int(value)
    if minutes < 0:
        raise ValueError("must not be negative")
    if minutes > MAX_LATE_THRESHOLD_MINUTES:
        raise ValueError(f"must be at most {MAX_LATE_THRESHOLD_MINUTES} minutes")


def _check_positive_number(value: str) -> None:
    number = float(value)
    if not math.isfinite(number) or number <= 0:
        raise ValueError("must be a positive number")


def _check_timezone(value: str) -> None:
    try:
        pytz.timezone(value)
    except pytz.UnknownTimeZoneError:
        raise ValueError(f"unknown time zone '{value}'")


_VALIDATORS = {
    WORK_START_TIME: _check_time,
    WORK_END_TIME: _check_time,
    LATE_THRESHOLD_MINUTES: _check_threshold_minutes,
    HALF_DAY_THRESHOLD: _check_positive_number,
    TIMEZONE: _check_timezone,
}


def canonical_key(key: str) -> str:
    key = key.strip()
    return KEY_ALIASES.get(key, key)


def validate_setting(key: str, value: str) -> None:
    """Raise ``ValidationError`` when ``value`` is not valid for a known key."""
    check = _VALIDATORS.get(key)
    if check is None:
        return
    try:
        check(value.strip())
    except ValueError as e:
        raise ValidationError(f"Invalid value for {key}: {e}")


def list_settings(session: Session) -> list[Setting]:
    return list(session.exec(select(Setting).order_by(Setting.key)).all())


def get_setting_value(
    session: Session, key: str, default: Optional[str] = None
) -> Optional[str]:
    setting = session.exec(select(Setting).where(Setting.key == key)).first()
    if setting is None:
        return default
    return setting.value


def upsert_settings(session: Session, items: list[SettingItem]) -> list[Setting]:
    """
    Insert or update every item in one transaction.

    All values are validated before anything is written.
    """
    normalized = [(canonical_key(item.key), item.value.strip()) for item in items]
    for key, value in normalized:
        if not value:
            raise ValidationError("Value is required")
        validate_setting(key, value)

    for key, value in normalized:
        existing = session.exec(select(Setting).where(Setting.key == key)).first()
        if existing:
            existing.value = value
            existing.updated_at = utcnow()
            session.add(existing)
        else:
            session.add(Setting(key=key, value=value))
    session.commit()
    logger.info(f"Updated settings: {', '.join(k for k, _ in normalized)}")
    return list_settings(session)


def seed_default_settings(session: Session) -> int:
    """Create missing default rows without touching existing values."""
    existing = {s.key for s in session.exec(select(Setting)).all()}
    created = 0
    for key, value, description in DEFAULT_SETTINGS:
        if key in existing:
            continue
        session.add(Setting(key=key, value=value, description=description))
        created += 1
    if created:
        session.commit()
        logger.info(f"Seeded {created} default setting(s)")
    return created


def load_attendance_policy(session: Session) -> AttendancePolicy:
    """
    Build the attendance policy from the settings rows.

    Missing or malformed values fall back to the defaults.
    """
    values = {s.key: s.value for s in session.exec(select(Setting)).all()}

    def read(key, parse, default):
        raw = values.get(key)
        if raw is None:
            return default
        try:
            validate_setting(key, raw)
            return parse(raw.strip())
        except (ValidationError, ValueError):
            logger.warning(f"Ignoring invalid setting {key}={raw!r}, using default")
            return default

    if LATE_THRESHOLD_MINUTES not in values and "late_threshold" in values:
        values[LATE_THRESHOLD_MINUTES] = values["late_threshold"]

    return AttendancePolicy(
        work_start_time=read(
            WORK_START_TIME, parse_hhmm, parse_hhmm(DEFAULT_WORK_START)
        ),
        work_end_time=read(WORK_END_TIME, parse_hhmm, parse_hhmm(DEFAULT_WORK_END)),
        late_threshold_minutes=read(
            LATE_THRESHOLD_MINUTES, int, DEFAULT_LATE_THRESHOLD_MINUTES
        ),
        half_day_threshold_hours=read(
            HALF_DAY_THRESHOLD, float, DEFAULT_HALF_DAY_THRESHOLD_HOURS
        ),
        timezone=read(TIMEZONE, str, app_settings.DEFAULT_TIMEZONE),
    )
