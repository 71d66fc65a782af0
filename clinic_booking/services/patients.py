"""Patient records shared by booking and the waiting list."""

from __future__ import annotations

from typing import Any, Mapping

from clinic_booking.services.dates import to_instant, utcnow
from clinic_booking.services.errors import NotFound, ValidationFailed
from clinic_booking.services.store import DocumentStore

GENDERS = {"male", "female", "other"}
EDITABLE_FIELDS = (
    "full_name",
    "user_id",
    "id_number",
    "date_of_birth",
    "gender",
    "phone_number",
    "email",
    "address",
    "medical_history",
    "allergies",
)


class PatientNotFound(NotFound):
    default_message = "Patient not found"


def _clean(data: Mapping[str, Any]) -> dict[str, Any]:
    cleaned: dict[str, Any] = {}
    for field in EDITABLE_FIELDS:
        if field not in data:
            continue
        value = data[field]
        if field == "date_of_birth" and value not in (None, ""):
            value = to_instant(value)
        elif field == "gender" and value not in (None, ""):
            if value not in GENDERS:
                raise ValidationFailed("gender must be one of: male, female, other")
        elif field == "allergies":
            if value is None:
                value = []
            elif not isinstance(value, list):
                raise ValidationFailed("allergies must be a list")
        elif isinstance(value, str):
            value = value.strip() or None
        cleaned[field] = value
    return cleaned


class PatientService:
    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    def get_patient(self, patient_id: str) -> dict[str, Any] | None:
        return self._store.get("patients", patient_id)

    def require_patient(self, patient_id: str) -> dict[str, Any]:
        patient = self.get_patient(patient_id)
        if patient is None:
            raise PatientNotFound()
        return patient

    def list_patients(self) -> list[dict[str, Any]]:
        patients = self._store.all("patients")
        return sorted(patients, key=lambda p: (p.get("full_name") or "").lower())

    def create_patient(self, data: Mapping[str, Any], patient_id: str | None = None) -> dict[str, Any]:
        record = _clean(data)
        if not record.get("full_name"):
            raise ValidationFailed("fullName is required")
        now = utcnow()
        record.update(created_at=now, updated_at=now)
        if patient_id:
            record["id"] = patient_id
        new_id = self._store.add("patients", record)
        return self.require_patient(new_id)

    def ensure_for_actor(self, actor) -> dict[str, Any]:
        """Patient record keyed by the actor's uid, created on first use."""

        existing = self.get_patient(actor.uid)
        if existing is not None:
            return existing
        owned = self._store.query("patients", "user_id", "==", actor.uid)
        if owned:
            return min(owned, key=lambda p: p.get("created_at") or utcnow())
        return self.create_patient(
            {
                "full_name": actor.name or "Patient",
                "email": actor.email,
                "user_id": actor.uid,
            },
            patient_id=actor.uid,
        )

    def update_patient(self, patient_id: str, data: Mapping[str, Any]) -> dict[str, Any]:
        self.require_patient(patient_id)
        changes = _clean(data)
        if "full_name" in changes and not changes["full_name"]:
            raise ValidationFailed("fullName cannot be empty")
        changes["updated_at"] = utcnow()
        self._store.update("patients", patient_id, changes)
        return self.require_patient(patient_id)

    def delete_patient(self, patient_id: str) -> None:
        if not self._store.delete("patients", patient_id):
            raise PatientNotFound()
