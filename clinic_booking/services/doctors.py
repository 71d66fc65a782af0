"""Doctor records and their weekly schedules."""

from __future__ import annotations

from typing import Any, Mapping

from clinic_booking.services.dates import utcnow
from clinic_booking.services.errors import NotFound, ValidationFailed
from clinic_booking.services.schedules import (
    DoctorSchedule,
    clean_schedule,
    expand_schedule_entries,
    preset_schedule,
)
from clinic_booking.services.store import DocumentStore

EDITABLE_FIELDS = ("full_name", "specialties", "qualifications", "bio", "image_url", "is_active", "user_id")


class DoctorNotFound(NotFound):
    default_message = "Doctor not found"


def _string_list(value: Any, field: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValidationFailed(f"{field} must be a list of strings")
    return [item.strip() for item in value if item.strip()]


def schedule_of(doctor: Mapping[str, Any]) -> list[DoctorSchedule]:
    return [DoctorSchedule.from_dict(entry) for entry in doctor.get("schedule") or []]


class DoctorService:
    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    def get_doctor(self, doctor_id: str) -> dict[str, Any] | None:
        return self._store.get("doctors", doctor_id)

    def require_doctor(self, doctor_id: str) -> dict[str, Any]:
        doctor = self.get_doctor(doctor_id)
        if doctor is None:
            raise DoctorNotFound()
        return doctor

    def list_doctors(self, active_only: bool = False) -> list[dict[str, Any]]:
        if active_only:
            doctors = self._store.query("doctors", "is_active", "==", True)
        else:
            doctors = self._store.all("doctors")
        return sorted(doctors, key=lambda d: (d.get("full_name") or "").lower())

    def doctors_by_specialty(self, specialty: str) -> list[dict[str, Any]]:
        return [d for d in self.list_doctors(active_only=True) if specialty in (d.get("specialties") or [])]

    def create_doctor(self, data: Mapping[str, Any], schedule: list[DoctorSchedule] | None = None) -> dict[str, Any]:
        full_name = data.get("full_name")
        if not isinstance(full_name, str) or not full_name.strip():
            raise ValidationFailed("fullName is required")
        if schedule is None:
            schedule = clean_schedule(data.get("schedule"))
        record = {
            "user_id": data.get("user_id"),
            "full_name": full_name.strip(),
            "specialties": _string_list(data.get("specialties"), "specialties"),
            "qualifications": _string_list(data.get("qualifications"), "qualifications"),
            "bio": data.get("bio") or None,
            "image_url": data.get("image_url") or None,
            "schedule": [entry.to_dict() for entry in schedule],
            "is_active": True,
            "created_at": utcnow(),
        }
        doctor_id = self._store.add("doctors", record)
        return self.require_doctor(doctor_id)

    def create_doctor_with_entries(self, data: Mapping[str, Any]) -> dict[str, Any]:
        """Create a doctor from UI schedule entries (one ``days`` list per window)."""

        specialties = _string_list(data.get("specialties"), "specialties")
        schedule = expand_schedule_entries(data.get("schedule_entries"), specialties)
        return self.create_doctor(data, schedule)

    def update_doctor(self, doctor_id: str, data: Mapping[str, Any]) -> dict[str, Any]:
        self.require_doctor(doctor_id)
        changes: dict[str, Any] = {}
        for field in EDITABLE_FIELDS:
            if field in data:
                changes[field] = data[field]
        for field in ("specialties", "qualifications"):
            if field in changes:
                changes[field] = _string_list(changes[field], field)
        if "full_name" in changes:
            if not isinstance(changes["full_name"], str) or not changes["full_name"].strip():
                raise ValidationFailed("fullName cannot be empty")
            changes["full_name"] = changes["full_name"].strip()
        if isinstance(data.get("schedule_entries"), list):
            specialties = changes.get("specialties", data.get("specialties"))
            schedule = expand_schedule_entries(data["schedule_entries"], specialties)
            changes["schedule"] = [entry.to_dict() for entry in schedule]
        elif "schedule" in data:
            changes["schedule"] = [entry.to_dict() for entry in clean_schedule(data["schedule"])]
        self._store.update("doctors", doctor_id, changes)
        return self.require_doctor(doctor_id)

    def apply_preset(self, doctor_id: str, preset: str) -> dict[str, Any]:
        schedule = preset_schedule(preset)
        self.require_doctor(doctor_id)
        self._store.update("doctors", doctor_id, {"schedule": [entry.to_dict() for entry in schedule]})
        return self.require_doctor(doctor_id)

    def delete_doctor(self, doctor_id: str) -> None:
        if not self._store.delete("doctors", doctor_id):
            raise DoctorNotFound()
