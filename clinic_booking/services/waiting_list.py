"""Waiting list queue and its conversion into appointments."""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Mapping

from clinic_booking.auth import SYSTEM_ADMIN
from clinic_booking.models import WAITING_LIST_STATUSES
from clinic_booking.services.appointments import AppointmentService, BookingRequest
from clinic_booking.services.audit import AuditTrail
from clinic_booking.services.dates import safe_date_key, to_instant, utcnow
from clinic_booking.services.doctors import DoctorService
from clinic_booking.services.errors import NotFound, ValidationFailed
from clinic_booking.services.patients import PatientService
from clinic_booking.services.store import DocumentStore


class WaitingListEntryNotFound(NotFound):
    default_message = "Waiting list entry not found"


class WaitingListEntryInactive(ValidationFailed):
    default_message = "This waiting list entry is no longer active"


def _queue_order(entry: Mapping[str, Any]):
    # Entries without a preferred date go last.
    preferred = entry.get("preferred_date")
    return (preferred is None, preferred or 0, entry.get("priority") or 0)


def _priority(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValidationFailed("priority must be a positive integer")
    return value


class WaitingListService:
    def __init__(
        self,
        store: DocumentStore,
        patients: PatientService,
        doctors: DoctorService,
        appointments: AppointmentService,
        audit: AuditTrail,
        booking_minutes: int = 15,
    ) -> None:
        self._store = store
        self._patients = patients
        self._doctors = doctors
        self._appointments = appointments
        self._audit = audit
        self._booking_minutes = booking_minutes

    def get_entry(self, entry_id: str) -> dict[str, Any] | None:
        return self._store.get("waiting_list", entry_id)

    def require_entry(self, entry_id: str) -> dict[str, Any]:
        entry = self.get_entry(entry_id)
        if entry is None:
            raise WaitingListEntryNotFound()
        return entry

    def _next_priority(self, doctor_id: str) -> int:
        waiting = [e for e in self._store.query("waiting_list", "doctor_id", "==", doctor_id) if e["status"] == "waiting"]
        return max((e.get("priority") or 0 for e in waiting), default=0) + 1

    def add_to_waiting_list(self, data: Mapping[str, Any], actor=None) -> dict[str, Any]:
        if not data.get("patient_id") or not data.get("doctor_id"):
            raise ValidationFailed("patientId and doctorId are required")
        patient = self._patients.require_patient(data["patient_id"])
        doctor = self._doctors.require_doctor(data["doctor_id"])

        priority = data.get("priority")
        priority = _priority(priority) if priority is not None else self._next_priority(doctor["id"])
        preferred = data.get("preferred_date")
        now = utcnow()
        entry_id = self._store.add(
            "waiting_list",
            {
                "patient_id": patient["id"],
                "patient_name": patient.get("full_name") or "",
                "doctor_id": doctor["id"],
                "doctor_name": doctor.get("full_name") or "",
                "service_type": data.get("service_type") or "",
                "preferred_date": to_instant(preferred) if preferred else None,
                "status": "waiting",
                "priority": priority,
                "notes": data.get("notes"),
                "created_at": now,
                "updated_at": now,
                "created_by": getattr(actor, "uid", None),
            },
        )
        return self.require_entry(entry_id)

    def list_waiting(
        self,
        *,
        doctor_id: str | None = None,
        patient_id: str | None = None,
        status: str | None = None,
        date: str | None = None,
    ) -> list[dict[str, Any]]:
        if doctor_id:
            entries = self._store.query("waiting_list", "doctor_id", "==", doctor_id)
        elif patient_id:
            entries = self._store.query("waiting_list", "patient_id", "==", patient_id)
        else:
            entries = self._store.all("waiting_list")
        if patient_id:
            entries = [e for e in entries if e["patient_id"] == patient_id]
        if status:
            entries = [e for e in entries if e["status"] == status]
        if date:
            entries = [e for e in entries if safe_date_key(e.get("preferred_date")) == date]
        return sorted(entries, key=_queue_order)

    def update_entry(self, entry_id: str, data: Mapping[str, Any]) -> dict[str, Any]:
        self.require_entry(entry_id)
        changes: dict[str, Any] = {}
        if data.get("status") is not None:
            if data["status"] not in WAITING_LIST_STATUSES:
                raise ValidationFailed("status must be one of: " + ", ".join(WAITING_LIST_STATUSES))
            changes["status"] = data["status"]
        if data.get("priority") is not None:
            changes["priority"] = _priority(data["priority"])
        if "preferred_date" in data:
            preferred = data["preferred_date"]
            changes["preferred_date"] = to_instant(preferred) if preferred else None
        if "notes" in data:
            changes["notes"] = data["notes"]
        changes["updated_at"] = utcnow()
        self._store.update("waiting_list", entry_id, changes)
        return self.require_entry(entry_id)

    def remove_from_waiting_list(self, entry_id: str) -> None:
        if not self._store.delete("waiting_list", entry_id):
            raise WaitingListEntryNotFound()

    def book_from_waiting_list(
        self,
        entry_id: str,
        appointment_date: Any,
        appointment_time: str | None,
        actor=None,
    ) -> dict[str, Any]:
        """Book the queued patient into a concrete slot, then dequeue them.

        Runs with admin rights since only staff convert entries. The entry is
        deleted only after the appointment was written, so a failed booking
        leaves the queue untouched.
        """

        entry = self.require_entry(entry_id)
        if entry["status"] != "waiting":
            raise WaitingListEntryInactive()
        if not appointment_date or not appointment_time:
            raise ValidationFailed("appointmentDate and appointmentTime are required")

        staff = replace(SYSTEM_ADMIN, uid=actor.uid) if actor is not None else SYSTEM_ADMIN
        appointment = self._appointments.create_appointment(
            BookingRequest(
                patient_id=entry["patient_id"],
                doctor_id=entry["doctor_id"],
                appointment_date=appointment_date,
                appointment_time=appointment_time,
                service_type=entry.get("service_type") or "",
                duration=self._booking_minutes,
                notes=entry.get("notes"),
            ),
            staff,
        )
        self._store.delete("waiting_list", entry_id)
        self._audit.write_event(
            staff.uid,
            "waiting_list.book",
            entity="waiting_list",
            entity_id=entry_id,
            meta={"appointment_id": appointment["id"]},
        )
        return appointment
