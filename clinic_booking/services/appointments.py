"""Appointment booking and management."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping

from clinic_booking.models import ACTIVE_APPOINTMENT_STATUSES, APPOINTMENT_STATUSES, TERMINAL_APPOINTMENT_STATUSES
from clinic_booking.services.audit import AuditTrail
from clinic_booking.services.availability import booked_times
from clinic_booking.services.dates import (
    parse_date_key,
    safe_date_key,
    to_date_key,
    to_instant,
    utcnow,
    validate_time,
)
from clinic_booking.services.doctors import DoctorService
from clinic_booking.services.errors import Conflict, NotFound, PermissionDenied, ValidationFailed
from clinic_booking.services.patients import PatientService
from clinic_booking.services.store import DocumentStore, DuplicateDocument

SLOT_UNAVAILABLE_MESSAGE = "This time slot is no longer available. Please select another time."


class AppointmentNotFound(NotFound):
    default_message = "Appointment not found"


class SlotUnavailable(Conflict):
    """Raised when the requested (doctor, date, time) is already occupied."""

    default_message = SLOT_UNAVAILABLE_MESSAGE


@dataclass
class BookingRequest:
    patient_id: str
    doctor_id: str
    appointment_date: Any
    appointment_time: str | None
    service_type: str
    duration: int
    notes: str | None = None


class AppointmentService:
    def __init__(
        self,
        store: DocumentStore,
        patients: PatientService,
        doctors: DoctorService,
        audit: AuditTrail,
    ) -> None:
        self._store = store
        self._patients = patients
        self._doctors = doctors
        self._audit = audit

    # -- booking -------------------------------------------------------------

    def _ensure_slot_free(self, doctor_id: str, date_key: str, time: str, *, exclude_id: str | None = None) -> None:
        appointments = self._store.query("appointments", "doctor_id", "==", doctor_id)
        if exclude_id:
            appointments = [appt for appt in appointments if appt["id"] != exclude_id]
        if time in booked_times(appointments, date_key):
            raise SlotUnavailable()

    def create_appointment(self, booking: BookingRequest, actor) -> dict[str, Any]:
        """Validate and persist a new appointment in status ``scheduled``.

        The slot is re-checked right before the write. The active-slot unique
        index turns a concurrent duplicate that passed the re-check into the
        same ``SlotUnavailable`` error at write time.
        """

        patient = self._patients.require_patient(booking.patient_id)
        doctor = self._doctors.require_doctor(booking.doctor_id)

        owns_record = actor.uid in (patient["id"], patient.get("user_id"))
        if not actor.has_permission("appointments:book_any") and not owns_record:
            raise PermissionDenied("You can only book appointments for your own patient record")

        if booking.duration is None or booking.duration <= 0:
            raise ValidationFailed("duration must be a positive number of minutes")

        instant = to_instant(booking.appointment_date)
        date_key = to_date_key(instant)
        time = validate_time(booking.appointment_time, "appointmentTime") if booking.appointment_time else None

        if time:
            self._ensure_slot_free(doctor["id"], date_key, time)

        now = utcnow()
        record = {
            "patient_id": patient["id"],
            "patient_name": patient.get("full_name") or "",
            "doctor_id": doctor["id"],
            "doctor_name": doctor.get("full_name") or "",
            "appointment_date": instant,
            "appointment_day": date_key,
            "appointment_time": time,
            "service_type": booking.service_type,
            "duration": booking.duration,
            "status": "scheduled",
            "notes": booking.notes,
            "created_at": now,
            "updated_at": now,
            "created_by": actor.uid,
        }
        try:
            appt_id = self._store.add("appointments", record)
        except DuplicateDocument as exc:
            raise SlotUnavailable() from exc

        self._audit.write_event(
            actor.uid,
            "appointment.create",
            entity="appointment",
            entity_id=appt_id,
            meta={"doctor_id": doctor["id"], "date": date_key, "time": time, "notes": booking.notes},
        )
        return self.require_appointment(appt_id)

    # -- reads ---------------------------------------------------------------

    def get_appointment(self, appt_id: str) -> dict[str, Any] | None:
        return self._store.get("appointments", appt_id)

    def require_appointment(self, appt_id: str) -> dict[str, Any]:
        appt = self.get_appointment(appt_id)
        if appt is None:
            raise AppointmentNotFound()
        return appt

    def list_appointments(
        self,
        *,
        status: str | None = None,
        doctor_id: str | None = None,
        patient_id: str | None = None,
        start_date: Any = None,
        end_date: Any = None,
    ) -> list[dict[str, Any]]:
        if doctor_id:
            rows = self._store.query("appointments", "doctor_id", "==", doctor_id)
        elif patient_id:
            rows = self._store.query("appointments", "patient_id", "==", patient_id)
        else:
            rows = self._store.all("appointments")
        start = to_instant(start_date) if start_date else None
        end = to_instant(end_date) if end_date else None
        if end is not None and isinstance(end_date, str) and len(end_date) == 10:
            end = end.replace(hour=23, minute=59, second=59)
        filtered = []
        for appt in rows:
            if status and appt.get("status") != status:
                continue
            if patient_id and appt.get("patient_id") != patient_id:
                continue
            when: datetime = appt["appointment_date"]
            if start is not None and when < start:
                continue
            if end is not None and when > end:
                continue
            filtered.append(appt)
        filtered.sort(key=lambda a: (a["appointment_date"], a.get("appointment_time") or ""), reverse=True)
        return filtered

    def list_for_patient(self, patient_id: str) -> list[dict[str, Any]]:
        return self.list_appointments(patient_id=patient_id)

    def list_for_user(self, uid: str) -> list[dict[str, Any]]:
        """Appointments of every patient record the user owns."""

        patient_ids = {uid} | {p["id"] for p in self._store.query("patients", "user_id", "==", uid)}
        rows: list[dict[str, Any]] = []
        for patient_id in sorted(patient_ids):
            rows.extend(self._store.query("appointments", "patient_id", "==", patient_id))
        rows.sort(key=lambda a: (a["appointment_date"], a.get("appointment_time") or ""), reverse=True)
        return rows

    def today_appointments(self, doctor_id: str | None = None) -> list[dict[str, Any]]:
        today = utcnow().strftime("%Y-%m-%d")
        rows = self.list_appointments(doctor_id=doctor_id, start_date=today, end_date=today)
        return sorted(rows, key=lambda a: a.get("appointment_time") or "")

    # -- mutations -----------------------------------------------------------

    def update_appointment(self, appt_id: str, data: Mapping[str, Any], actor=None) -> dict[str, Any]:
        current = self.require_appointment(appt_id)
        changes: dict[str, Any] = {}

        if data.get("status") is not None:
            if data["status"] not in APPOINTMENT_STATUSES:
                raise ValidationFailed("status must be one of: " + ", ".join(APPOINTMENT_STATUSES))
            changes["status"] = data["status"]
        if data.get("duration") is not None:
            duration = data["duration"]
            if isinstance(duration, bool) or not isinstance(duration, int) or duration <= 0:
                raise ValidationFailed("duration must be a positive number of minutes")
            changes["duration"] = duration
        if "notes" in data:
            changes["notes"] = data["notes"]
        if data.get("appointment_date") is not None:
            instant = to_instant(data["appointment_date"])
            changes["appointment_date"] = instant
            changes["appointment_day"] = to_date_key(instant)
        if data.get("appointment_time") is not None:
            changes["appointment_time"] = validate_time(data["appointment_time"], "appointmentTime")

        status = changes.get("status", current["status"])
        date_key = changes.get("appointment_day", current["appointment_day"])
        time = changes.get("appointment_time", current.get("appointment_time"))
        slot_changed = any(key in changes for key in ("status", "appointment_day", "appointment_time"))
        if slot_changed and time and status in ACTIVE_APPOINTMENT_STATUSES:
            self._ensure_slot_free(current["doctor_id"], date_key, time, exclude_id=appt_id)

        changes["updated_at"] = utcnow()
        try:
            self._store.update("appointments", appt_id, changes)
        except DuplicateDocument as exc:
            raise SlotUnavailable() from exc
        if "status" in changes:
            self._audit.write_event(
                getattr(actor, "uid", None),
                "appointment.status",
                entity="appointment",
                entity_id=appt_id,
                meta={"from": current["status"], "to": changes["status"]},
            )
        return self.require_appointment(appt_id)

    def delete_appointment(self, appt_id: str, actor=None) -> None:
        if not self._store.delete("appointments", appt_id):
            raise AppointmentNotFound()
        self._audit.write_event(getattr(actor, "uid", None), "appointment.delete", entity="appointment", entity_id=appt_id)

    def clear_history(self, *, before: str | None = None, doctor_id: str | None = None, actor=None) -> int:
        """Delete finished appointments dated before ``before`` (default: today)."""

        cutoff = before or utcnow().strftime("%Y-%m-%d")
        parse_date_key(cutoff)
        if doctor_id:
            candidates = self._store.query("appointments", "doctor_id", "==", doctor_id)
        else:
            candidates = self._store.query("appointments", "status", "in", TERMINAL_APPOINTMENT_STATUSES)
        doomed = [
            appt["id"]
            for appt in candidates
            if appt.get("status") in TERMINAL_APPOINTMENT_STATUSES
            and (safe_date_key(appt.get("appointment_date")) or "") < cutoff
        ]
        removed = self._store.batch_delete("appointments", doomed)
        self._audit.write_event(
            getattr(actor, "uid", None),
            "appointment.clear_history",
            entity="appointment",
            meta={"before": cutoff, "doctor_id": doctor_id, "removed": removed},
        )
        return removed
