from datetime import date, datetime, timedelta, timezone

import pytest

from clinic_booking.services.dates import (
    DateFormatError,
    day_of_week,
    safe_date_key,
    to_date_key,
    to_instant,
    validate_time,
)
from clinic_booking.services.errors import ValidationFailed

# Epoch seconds of 2024-03-11T00:00:00Z.
MONDAY_EPOCH = 1710115200


def test_known_sunday_is_day_zero():
    assert day_of_week("2024-03-10") == 0
    assert day_of_week("2024-03-11") == 1
    assert day_of_week("2024-03-16") == 6


def test_day_of_week_ignores_local_timezone(monkeypatch):
    monkeypatch.setenv("TZ", "Pacific/Kiritimati")
    assert day_of_week("2024-03-10") == 0
    monkeypatch.setenv("TZ", "America/Adak")
    assert day_of_week("2024-03-10") == 0


@pytest.mark.parametrize(
    "value",
    [
        "2024-03-11",
        "2024-03-11T00:00:00.000Z",
        "2024-03-11T09:30:00Z",
        "2024-03-11T11:00:00+02:00",
        {"_seconds": MONDAY_EPOCH, "_nanoseconds": 0},
        {"seconds": MONDAY_EPOCH + 3600},
        date(2024, 3, 11),
        datetime(2024, 3, 11, 15, 0),
        datetime(2024, 3, 11, 23, 0, tzinfo=timezone(timedelta(hours=-1))) - timedelta(hours=1),
    ],
)
def test_every_shape_lands_on_the_same_day(value):
    assert to_date_key(value) == "2024-03-11"


def test_timestamp_object_becomes_naive_utc():
    assert to_instant({"_seconds": MONDAY_EPOCH}) == datetime(2024, 3, 11)


def test_aware_datetimes_are_converted_to_utc():
    local = datetime(2024, 3, 11, 1, 0, tzinfo=timezone(timedelta(hours=3)))
    assert to_instant(local) == datetime(2024, 3, 10, 22, 0)


@pytest.mark.parametrize(
    "value",
    ["", "not-a-date", "2024-13-40", {"nanos": 5}, 42, {"_seconds": 10**20}, "0001-01-01T00:00:00+05:00"],
)
def test_malformed_dates_raise_validation_errors(value):
    with pytest.raises(DateFormatError):
        to_instant(value)


def test_date_format_error_is_a_validation_error():
    assert issubclass(DateFormatError, ValidationFailed)
    assert DateFormatError.status_code == 400


def test_safe_date_key_tolerates_garbage():
    assert safe_date_key(None) is None
    assert safe_date_key("garbage") is None
    assert safe_date_key("2024-03-11") == "2024-03-11"


def test_validate_time():
    assert validate_time(" 09:05 ") == "09:05"
    with pytest.raises(ValidationFailed):
        validate_time("24:00")
    with pytest.raises(ValidationFailed):
        validate_time("9:5")
