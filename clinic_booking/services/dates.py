"""Date normalisation for appointment, locked-slot and waiting-list dates.

Stored and incoming dates arrive in three shapes: native ``date``/``datetime``
objects, ISO-8601 strings, and serialised timestamps carrying epoch seconds
(``{"_seconds": ...}`` or ``{"seconds": ...}``). Everything is converted to a
naive UTC ``datetime`` here so the services never branch on input shape.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Mapping

from clinic_booking.services.errors import ValidationFailed

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class DateFormatError(ValidationFailed):
    """Raised when a date value cannot be normalised."""


def _from_epoch(seconds: float, nanos: float = 0) -> datetime:
    try:
        instant = datetime.fromtimestamp(seconds, tz=timezone.utc) + timedelta(microseconds=nanos / 1000)
    except (OverflowError, OSError, ValueError) as exc:
        raise DateFormatError("Invalid date: timestamp out of range") from exc
    return instant.replace(tzinfo=None)


def _to_naive_utc(value: datetime) -> datetime:
    try:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    except (OverflowError, ValueError) as exc:
        raise DateFormatError("Invalid date: out of range") from exc


def to_instant(value: Any) -> datetime:
    """Return ``value`` as a naive UTC datetime.

    Plain ``YYYY-MM-DD`` strings and ``date`` objects map to UTC midnight so a
    date string always lands on the same calendar day.
    """

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = _to_naive_utc(value)
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, Mapping):
        for key in ("_seconds", "seconds"):
            seconds = value.get(key)
            if isinstance(seconds, (int, float)) and not isinstance(seconds, bool):
                nanos = value.get("_nanoseconds", value.get("nanoseconds", 0)) or 0
                return _from_epoch(seconds, nanos)
        raise DateFormatError("Invalid date: timestamp object without seconds")
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise DateFormatError("Invalid date: empty value")
        if DATE_RE.match(text):
            return parse_date_key(text)
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError as exc:
            raise DateFormatError(f"Invalid date: {text}") from exc
        return to_instant(parsed)
    raise DateFormatError("Invalid date")


def parse_date_key(value: str) -> datetime:
    """Parse a ``YYYY-MM-DD`` string as UTC midnight."""

    if not isinstance(value, str) or not DATE_RE.match(value):
        raise DateFormatError("date must be in YYYY-MM-DD format")
    try:
        return datetime.strptime(value, "%Y-%m-%d")
    except ValueError as exc:
        raise DateFormatError("Invalid date") from exc


def to_date_key(value: Any) -> str:
    """Calendar day (``YYYY-MM-DD``, UTC) of any supported date shape."""

    return to_instant(value).strftime("%Y-%m-%d")


def safe_date_key(value: Any) -> str | None:
    """Like :func:`to_date_key` but ``None`` for missing or unreadable values."""

    if value is None:
        return None
    try:
        return to_date_key(value)
    except ValidationFailed:
        return None


def day_of_week(date_key: str) -> int:
    """Day of week for a ``YYYY-MM-DD`` string with Sunday as 0.

    Computed from the UTC calendar date so the answer never depends on the
    server's local timezone.
    """

    return (parse_date_key(date_key).weekday() + 1) % 7


def validate_time(value: Any, field: str = "time") -> str:
    if not isinstance(value, str) or not TIME_RE.match(value.strip()):
        raise ValidationFailed(f"{field} must be in HH:MM format")
    return value.strip()


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def isoformat(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.replace(microsecond=0).isoformat() + "Z"
