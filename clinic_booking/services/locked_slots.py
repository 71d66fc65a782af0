"""Administratively blocked slots, independent of appointments."""

from __future__ import annotations

from typing import Any

from clinic_booking.services.dates import parse_date_key, safe_date_key, utcnow, validate_time
from clinic_booking.services.errors import Conflict, NotFound, ValidationFailed
from clinic_booking.services.store import DocumentStore

DEFAULT_LOCK_REASON = "Admin locked"


class SlotAlreadyLocked(Conflict):
    default_message = "This slot is already locked"


class LockedSlotNotFound(NotFound):
    default_message = "Locked slot not found"


class LockedSlotService:
    """Lookups query by doctor only and match date/time in memory."""

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    def _for_doctor(self, doctor_id: str) -> list[dict[str, Any]]:
        return self._store.query("locked_slots", "doctor_id", "==", doctor_id)

    def locked_slots_for_date(self, doctor_id: str, date_key: str) -> list[dict[str, Any]]:
        parse_date_key(date_key)
        return [slot for slot in self._for_doctor(doctor_id) if safe_date_key(slot.get("date")) == date_key]

    def locked_slots_for_doctor(self, doctor_id: str) -> list[dict[str, Any]]:
        slots = self._for_doctor(doctor_id)
        return sorted(slots, key=lambda slot: (slot.get("date"), slot.get("time") or ""), reverse=True)

    def get_locked_slot(self, doctor_id: str, date_key: str, time: str) -> dict[str, Any] | None:
        for slot in self.locked_slots_for_date(doctor_id, date_key):
            if slot.get("time") == time:
                return slot
        return None

    def is_slot_locked(self, doctor_id: str, date_key: str, time: str) -> bool:
        return self.get_locked_slot(doctor_id, date_key, time) is not None

    def create_locked_slot(
        self,
        doctor_id: str,
        date_key: str,
        time: str,
        *,
        reason: str | None = None,
        created_by: str | None = None,
    ) -> dict[str, Any]:
        if not doctor_id:
            raise ValidationFailed("doctorId, date, and time are required")
        day = parse_date_key(date_key)
        time = validate_time(time)
        if self.get_locked_slot(doctor_id, date_key, time):
            raise SlotAlreadyLocked()
        slot_id = self._store.add(
            "locked_slots",
            {
                "doctor_id": doctor_id,
                "date": day,
                "time": time,
                "reason": (reason or "").strip() or DEFAULT_LOCK_REASON,
                "created_by": created_by or "system",
                "created_at": utcnow(),
            },
        )
        return self._store.get("locked_slots", slot_id)  # type: ignore[return-value]

    def delete_locked_slot(self, slot_id: str) -> None:
        if not self._store.delete("locked_slots", slot_id):
            raise LockedSlotNotFound()

    def delete_locked_slot_by_details(self, doctor_id: str, date_key: str, time: str) -> int:
        matches = [slot["id"] for slot in self.locked_slots_for_date(doctor_id, date_key) if slot.get("time") == time]
        if not matches:
            raise LockedSlotNotFound()
        return self._store.batch_delete("locked_slots", matches)
