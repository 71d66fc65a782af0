"""Slot availability for a doctor on a calendar date."""

from __future__ import annotations

from typing import Any

from flask import current_app

from clinic_booking.models import ACTIVE_APPOINTMENT_STATUSES
from clinic_booking.services.dates import day_of_week, parse_date_key, safe_date_key
from clinic_booking.services.doctors import DoctorService, schedule_of
from clinic_booking.services.errors import ValidationFailed
from clinic_booking.services.locked_slots import LockedSlotService
from clinic_booking.services.schedules import day_name, entries_for_day, slots_for_entries
from clinic_booking.services.store import DocumentStore


def booked_times(appointments: list[dict[str, Any]], date_key: str) -> set[str]:
    """Times on ``date_key`` held by an active appointment."""

    booked: set[str] = set()
    for appt in appointments:
        if appt.get("status") not in ACTIVE_APPOINTMENT_STATUSES:
            continue
        if not appt.get("appointment_time"):
            continue
        if safe_date_key(appt.get("appointment_date")) == date_key:
            booked.add(appt["appointment_time"])
    return booked


class AvailabilityResolver:
    def __init__(self, store: DocumentStore, doctors: DoctorService, locked_slots: LockedSlotService) -> None:
        self._store = store
        self._doctors = doctors
        self._locked_slots = locked_slots

    def _locked_times(self, doctor_id: str, date_key: str) -> set[str]:
        # Lock data is supplementary; a failed lookup degrades to "nothing locked".
        try:
            return {slot["time"] for slot in self._locked_slots.locked_slots_for_date(doctor_id, date_key)}
        except Exception as exc:
            current_app.logger.warning("Failed to fetch locked slots for %s on %s: %s", doctor_id, date_key, exc)
            return set()

    def available_slots(self, doctor_id: str, date_key: str | None, service_type: str | None = None) -> dict[str, Any]:
        if not date_key:
            raise ValidationFailed("date query parameter is required (YYYY-MM-DD)")
        parse_date_key(date_key)
        weekday = day_of_week(date_key)
        doctor = self._doctors.require_doctor(doctor_id)
        service_type = service_type or None

        result: dict[str, Any] = {
            "doctor_id": doctor["id"],
            "doctor_name": doctor["full_name"],
            "date": date_key,
            "day_of_week": weekday,
            "day_name": day_name(weekday),
            "service_type": service_type,
        }

        entries = entries_for_day(schedule_of(doctor), weekday, service_type)
        if not entries:
            if service_type:
                message = f"Doctor is not available for {service_type} on this day"
            else:
                message = "Doctor is not available on this day"
            result.update(slots=[], total_slots=0, available_slots=0, booked_slots=0, message=message)
            return result

        candidates = slots_for_entries(entries)
        # Single-field query on doctor_id; date and status are matched in memory.
        appointments = self._store.query("appointments", "doctor_id", "==", doctor_id)
        booked = booked_times(appointments, date_key)
        locked = self._locked_times(doctor_id, date_key)

        slots = [
            {"time": time, "available": time not in booked and time not in locked, "locked": time in locked}
            for time in candidates
        ]
        available = sum(1 for slot in slots if slot["available"])
        result.update(
            slots=slots,
            total_slots=len(slots),
            available_slots=available,
            booked_slots=len(slots) - available,
        )
        return result

    def slots_for_day_of_week(self, doctor_id: str, weekday: Any) -> dict[str, Any]:
        """Raw schedule slots for a weekday, without booking data."""

        try:
            day = int(weekday)
        except (TypeError, ValueError):
            raise ValidationFailed("dayOfWeek must be a number between 0 and 6") from None
        if not 0 <= day <= 6:
            raise ValidationFailed("dayOfWeek must be a number between 0 and 6")
        doctor = self._doctors.require_doctor(doctor_id)
        entries = entries_for_day(schedule_of(doctor), day)
        result: dict[str, Any] = {
            "doctor_id": doctor["id"],
            "doctor_name": doctor["full_name"],
            "day_of_week": day,
            "day_name": day_name(day),
            "schedules": [entry.to_dict() for entry in entries],
            "slots": slots_for_entries(entries),
        }
        if not entries:
            result["message"] = "Doctor is not available on this day"
        return result

    def weekly_schedule(self, doctor_id: str) -> dict[str, Any]:
        doctor = self._doctors.require_doctor(doctor_id)
        schedule = schedule_of(doctor)
        week = []
        for day in range(7):
            entries = entries_for_day(schedule, day)
            slots = slots_for_entries(entries)
            week.append(
                {
                    "day_of_week": day,
                    "day_name": day_name(day),
                    "schedules": [entry.to_dict() for entry in entries],
                    "total_slots": len(slots),
                    "slots": slots,
                }
            )
        return {
            "doctor_id": doctor["id"],
            "doctor_name": doctor["full_name"],
            "specialties": doctor.get("specialties") or [],
            "weekly_schedule": week,
        }
