"""Doctor weekly schedules: templates, UI conversion and slot generation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence

from clinic_booking.services.dates import TIME_RE
from clinic_booking.services.errors import ValidationFailed

DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")


class ScheduleError(ValidationFailed):
    """Raised for malformed schedule entries or unknown presets."""


@dataclass(frozen=True)
class DoctorSchedule:
    """One recurring weekly availability window."""

    day_of_week: int
    start_time: str
    end_time: str
    slot_duration: int
    type: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "day_of_week": self.day_of_week,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "slot_duration": self.slot_duration,
        }
        if self.type:
            data["type"] = self.type
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DoctorSchedule":
        return cls(
            day_of_week=int(data["day_of_week"]),
            start_time=str(data["start_time"]),
            end_time=str(data["end_time"]),
            slot_duration=int(data["slot_duration"]),
            type=data.get("type") or None,
        )


def _to_minutes(value: str) -> int:
    hour, minute = value.split(":")
    return int(hour) * 60 + int(minute)


def _format_minutes(total: int) -> str:
    return f"{total // 60:02d}:{total % 60:02d}"


def generate_time_slots(entry: DoctorSchedule) -> list[str]:
    """Return the bookable HH:MM start times of one schedule window.

    Slots start at ``start_time`` and step by ``slot_duration``; a slot is kept
    only while its start is strictly before ``end_time``.
    """

    if entry.slot_duration <= 0:
        return []
    current = _to_minutes(entry.start_time)
    end = _to_minutes(entry.end_time)
    slots: list[str] = []
    while current < end:
        slots.append(_format_minutes(current))
        current += entry.slot_duration
    return slots


def day_name(day: int) -> str:
    if isinstance(day, int) and 0 <= day < len(DAY_NAMES):
        return DAY_NAMES[day]
    return "Unknown"


def entries_for_day(
    schedule: Iterable[DoctorSchedule],
    day: int,
    service_type: str | None = None,
) -> list[DoctorSchedule]:
    """Schedule entries for ``day``; untyped entries match every service type."""

    matches = [entry for entry in schedule if entry.day_of_week == day]
    if service_type:
        matches = [entry for entry in matches if not entry.type or entry.type == service_type]
    return matches


def slots_for_entries(entries: Iterable[DoctorSchedule]) -> list[str]:
    """Merged, de-duplicated and sorted slots of several windows."""

    slots: set[str] = set()
    for entry in entries:
        slots.update(generate_time_slots(entry))
    # HH:MM is fixed width, so string order is time order.
    return sorted(slots)


def _weekly(days: Sequence[int], start: str, end: str, minutes: int) -> list[DoctorSchedule]:
    return [DoctorSchedule(day, start, end, minutes) for day in days]


def split_shift_week() -> list[DoctorSchedule]:
    """Mornings every day plus Sunday/Tuesday/Wednesday/Thursday evenings, 10 minute slots."""

    return _weekly(range(7), "08:00", "12:00", 10) + _weekly((0, 2, 3, 4), "16:00", "20:00", 10)


def evenings_friday_midday() -> list[DoctorSchedule]:
    """Sunday to Tuesday evenings and Friday late morning, 15 minute slots."""

    return _weekly((0, 1, 2), "17:00", "20:00", 15) + _weekly((5,), "11:00", "13:00", 15)


def evenings_friday_afternoon() -> list[DoctorSchedule]:
    """Sunday/Monday/Wednesday/Thursday evenings and Friday afternoon, 10 minute slots."""

    return _weekly((0, 1, 3, 4), "17:00", "20:00", 10) + _weekly((5,), "14:00", "16:00", 10)


SCHEDULE_PRESETS = {
    "split_shift_week": split_shift_week,
    "evenings_friday_midday": evenings_friday_midday,
    "evenings_friday_afternoon": evenings_friday_afternoon,
}


def preset_schedule(name: str | None) -> list[DoctorSchedule]:
    key = (name or "").strip().lower().replace(" ", "_").replace("-", "_")
    factory = SCHEDULE_PRESETS.get(key)
    if factory is None:
        raise ScheduleError("Invalid schedule preset. Use: " + ", ".join(SCHEDULE_PRESETS))
    return factory()


def validate_entry(raw: Mapping[str, Any]) -> DoctorSchedule:
    """Validate one stored-format entry (day_of_week/start_time/end_time/slot_duration/type)."""

    day = raw.get("day_of_week")
    if isinstance(day, bool) or not isinstance(day, int) or not 0 <= day <= 6:
        raise ScheduleError("dayOfWeek must be a number between 0 and 6")
    for field in ("start_time", "end_time"):
        value = raw.get(field)
        if not isinstance(value, str) or not TIME_RE.match(value):
            raise ScheduleError(f"{field} must be in HH:MM format")
    duration = raw.get("slot_duration")
    if isinstance(duration, bool) or not isinstance(duration, int):
        raise ScheduleError("slotDuration must be a whole number of minutes")
    kind = raw.get("type")
    return DoctorSchedule(
        day_of_week=day,
        start_time=raw["start_time"],
        end_time=raw["end_time"],
        slot_duration=duration,
        type=str(kind) if kind not in (None, "") else None,
    )


def clean_schedule(entries: Iterable[Mapping[str, Any]] | None) -> list[DoctorSchedule]:
    # Same-day overlapping windows are accepted; the slot merge de-duplicates them.
    return [validate_entry(entry) for entry in entries or []]


def expand_schedule_entries(
    entries: Any,
    specialties: Sequence[str] | None = None,
) -> list[DoctorSchedule]:
    """Convert UI entries (``days`` list + times) into one window per day."""

    if not isinstance(entries, list):
        raise ScheduleError("scheduleEntries array is required")
    default_type = specialties[0] if specialties and len(specialties) == 1 else None
    schedule: list[DoctorSchedule] = []
    for entry in entries:
        days = entry.get("days") if isinstance(entry, Mapping) else None
        if not isinstance(days, list):
            raise ScheduleError("Each schedule entry must have a days array")
        for day in days:
            schedule.append(
                validate_entry(
                    {
                        "day_of_week": day,
                        "start_time": entry.get("start_time"),
                        "end_time": entry.get("end_time"),
                        "slot_duration": entry.get("slot_duration"),
                        "type": entry.get("type") or default_type,
                    }
                )
            )
    return schedule
