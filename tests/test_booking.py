from datetime import datetime

import pytest

from clinic_booking.auth import SYSTEM_ADMIN
from clinic_booking.services.appointments import AppointmentNotFound, BookingRequest, SlotUnavailable
from clinic_booking.services.doctors import DoctorNotFound
from clinic_booking.services.errors import PermissionDenied, ValidationFailed
from clinic_booking.services.patients import PatientNotFound
from clinic_booking.services.store import DuplicateDocument

MONDAY = "2024-03-11"


def _request(patient, doctor, **overrides):
    values = dict(
        patient_id=patient["id"],
        doctor_id=doctor["id"],
        appointment_date=MONDAY,
        appointment_time="17:00",
        service_type="Consultation",
        duration=15,
        notes="first visit",
    )
    values.update(overrides)
    return BookingRequest(**values)


def test_booking_persists_scheduled_appointment(svc, doctor, patient, actors):
    appt = svc.appointments.create_appointment(_request(patient, doctor), actors["user"])
    assert appt["status"] == "scheduled"
    assert appt["patient_name"] == "Omar Khalil"
    assert appt["doctor_name"] == "Dr. Lina Haddad"
    assert appt["appointment_time"] == "17:00"
    assert appt["appointment_day"] == MONDAY
    assert appt["created_by"] == actors["user"].uid

    result = svc.availability.available_slots(doctor["id"], MONDAY)
    slot = next(s for s in result["slots"] if s["time"] == "17:00")
    assert slot["available"] is False


def test_second_booking_of_same_slot_conflicts(svc, doctor, patient, other_patient, actors):
    svc.appointments.create_appointment(_request(patient, doctor), actors["admin"])
    with pytest.raises(SlotUnavailable) as exc:
        svc.appointments.create_appointment(_request(other_patient, doctor), actors["admin"])
    assert exc.value.status_code == 409
    assert exc.value.message == "This time slot is no longer available. Please select another time."
    assert len(svc.appointments.list_appointments(doctor_id=doctor["id"])) == 1


def test_conflict_detected_across_date_shapes(svc, doctor, patient, other_patient, actors):
    svc.appointments.create_appointment(
        _request(patient, doctor, appointment_date={"_seconds": 1710115200}), actors["admin"]
    )
    with pytest.raises(SlotUnavailable):
        svc.appointments.create_appointment(
            _request(other_patient, doctor, appointment_date="2024-03-11T08:00:00.000Z"), actors["admin"]
        )


def test_cancelled_slot_can_be_rebooked(svc, doctor, patient, other_patient, actors):
    first = svc.appointments.create_appointment(_request(patient, doctor), actors["admin"])
    svc.appointments.update_appointment(first["id"], {"status": "cancelled"}, actors["admin"])
    second = svc.appointments.create_appointment(_request(other_patient, doctor), actors["admin"])
    assert second["status"] == "scheduled"


def test_unique_index_catches_race_past_recheck(svc, doctor, patient, other_patient, actors, monkeypatch):
    svc.appointments.create_appointment(_request(patient, doctor), actors["admin"])
    # Simulate a concurrent request that read the slot as free.
    monkeypatch.setattr(svc.appointments, "_ensure_slot_free", lambda *args, **kwargs: None)
    with pytest.raises(SlotUnavailable):
        svc.appointments.create_appointment(_request(other_patient, doctor), actors["admin"])
    assert len(svc.appointments.list_appointments(doctor_id=doctor["id"])) == 1


def test_store_reports_duplicate_active_slot(svc, doctor, patient):
    record = {
        "patient_id": patient["id"],
        "doctor_id": doctor["id"],
        "appointment_date": datetime(2024, 3, 11),
        "appointment_day": MONDAY,
        "appointment_time": "18:00",
        "service_type": "Consultation",
        "duration": 15,
        "status": "scheduled",
    }
    svc.store.add("appointments", record)
    with pytest.raises(DuplicateDocument):
        svc.store.add("appointments", dict(record))


def test_user_cannot_book_for_someone_else(svc, doctor, other_patient, actors):
    with pytest.raises(PermissionDenied):
        svc.appointments.create_appointment(_request(other_patient, doctor), actors["user"])
    assert svc.appointments.list_appointments() == []


def test_user_owns_record_keyed_by_their_uid(svc, doctor, accounts, actors):
    uid = accounts["user"]["id"]
    record = svc.patients.create_patient({"full_name": "Omar Khalil", "user_id": uid}, patient_id=uid)
    svc.patients.update_patient(record["id"], {"user_id": None})
    appt = svc.appointments.create_appointment(_request(record, doctor), actors["user"])
    assert appt["patient_id"] == uid


@pytest.mark.parametrize("role", ["admin", "doctor"])
def test_staff_may_book_for_any_patient(svc, doctor, other_patient, actors, role):
    appt = svc.appointments.create_appointment(_request(other_patient, doctor), actors[role])
    assert appt["patient_id"] == other_patient["id"]


def test_missing_patient_or_doctor(svc, doctor, patient):
    with pytest.raises(PatientNotFound):
        svc.appointments.create_appointment(_request({"id": "nope"}, doctor), SYSTEM_ADMIN)
    with pytest.raises(DoctorNotFound):
        svc.appointments.create_appointment(_request(patient, {"id": "nope"}), SYSTEM_ADMIN)
    assert svc.appointments.list_appointments() == []


@pytest.mark.parametrize(
    "overrides",
    [{"duration": 0}, {"appointment_date": "11/03/2024"}, {"appointment_time": "25:00"}],
)
def test_invalid_input_has_no_side_effects(svc, doctor, patient, overrides):
    with pytest.raises(ValidationFailed):
        svc.appointments.create_appointment(_request(patient, doctor, **overrides), SYSTEM_ADMIN)
    assert svc.appointments.list_appointments() == []


def test_booking_without_time_skips_slot_check(svc, doctor, patient, other_patient):
    svc.appointments.create_appointment(_request(patient, doctor, appointment_time=None), SYSTEM_ADMIN)
    appt = svc.appointments.create_appointment(_request(other_patient, doctor, appointment_time=None), SYSTEM_ADMIN)
    assert appt["appointment_time"] is None


def test_booking_is_audited_without_notes(svc, doctor, patient):
    svc.appointments.create_appointment(_request(patient, doctor), SYSTEM_ADMIN)
    events = svc.audit.events("appointment.create")
    assert len(events) == 1
    assert "first visit" not in events[0]["meta_json_redacted"]
    assert "[redacted]" in events[0]["meta_json_redacted"]


def test_moving_onto_occupied_slot_conflicts(svc, doctor, patient, other_patient):
    svc.appointments.create_appointment(_request(patient, doctor), SYSTEM_ADMIN)
    second = svc.appointments.create_appointment(
        _request(other_patient, doctor, appointment_time="17:15"), SYSTEM_ADMIN
    )
    with pytest.raises(SlotUnavailable):
        svc.appointments.update_appointment(second["id"], {"appointment_time": "17:00"})
    moved = svc.appointments.update_appointment(second["id"], {"appointment_time": "17:30", "duration": 30})
    assert moved["appointment_time"] == "17:30"
    assert moved["duration"] == 30


def test_update_rejects_unknown_status(svc, doctor, patient):
    appt = svc.appointments.create_appointment(_request(patient, doctor), SYSTEM_ADMIN)
    with pytest.raises(ValidationFailed):
        svc.appointments.update_appointment(appt["id"], {"status": "done"})


def test_delete_and_missing(svc, doctor, patient):
    appt = svc.appointments.create_appointment(_request(patient, doctor), SYSTEM_ADMIN)
    svc.appointments.delete_appointment(appt["id"])
    with pytest.raises(AppointmentNotFound):
        svc.appointments.delete_appointment(appt["id"])


def test_clear_history_only_removes_finished_past_appointments(svc, doctor, patient, other_patient):
    done = svc.appointments.create_appointment(_request(patient, doctor), SYSTEM_ADMIN)
    svc.appointments.update_appointment(done["id"], {"status": "completed"})
    cancelled = svc.appointments.create_appointment(
        _request(other_patient, doctor, appointment_time="17:15"), SYSTEM_ADMIN
    )
    svc.appointments.update_appointment(cancelled["id"], {"status": "cancelled"})
    upcoming = svc.appointments.create_appointment(
        _request(other_patient, doctor, appointment_time="17:30"), SYSTEM_ADMIN
    )
    later = svc.appointments.create_appointment(
        _request(patient, doctor, appointment_date="2024-03-18"), SYSTEM_ADMIN
    )
    svc.appointments.update_appointment(later["id"], {"status": "completed"})

    removed = svc.appointments.clear_history(before="2024-03-12")
    assert removed == 2
    remaining = {a["id"] for a in svc.appointments.list_appointments()}
    assert remaining == {upcoming["id"], later["id"]}


def test_list_filters_and_order(svc, doctor, patient, other_patient):
    early = svc.appointments.create_appointment(_request(patient, doctor), SYSTEM_ADMIN)
    late = svc.appointments.create_appointment(
        _request(other_patient, doctor, appointment_date="2024-03-18"), SYSTEM_ADMIN
    )
    assert [a["id"] for a in svc.appointments.list_appointments()] == [late["id"], early["id"]]
    assert [a["id"] for a in svc.appointments.list_for_patient(patient["id"])] == [early["id"]]
    window = svc.appointments.list_appointments(start_date="2024-03-12", end_date="2024-03-18")
    assert [a["id"] for a in window] == [late["id"]]
