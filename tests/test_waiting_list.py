import pytest

from clinic_booking.services.appointments import SlotUnavailable
from clinic_booking.services.errors import ValidationFailed
from clinic_booking.services.patients import PatientNotFound
from clinic_booking.services.waiting_list import WaitingListEntryInactive, WaitingListEntryNotFound

MONDAY = "2024-03-11"


def _enqueue(svc, patient, doctor, **extra):
    data = {"patient_id": patient["id"], "doctor_id": doctor["id"], "service_type": "Consultation"}
    data.update(extra)
    return svc.waiting_list.add_to_waiting_list(data)


def test_priority_is_auto_assigned_per_doctor(svc, doctor, patient, other_patient):
    first = _enqueue(svc, patient, doctor)
    second = _enqueue(svc, other_patient, doctor)
    assert first["priority"] == 1
    assert second["priority"] == 2
    assert first["status"] == "waiting"
    assert first["doctor_name"] == "Dr. Lina Haddad"


def test_auto_priority_ignores_inactive_entries(svc, doctor, patient, other_patient):
    first = _enqueue(svc, patient, doctor, priority=7)
    svc.waiting_list.update_entry(first["id"], {"status": "cancelled"})
    second = _enqueue(svc, other_patient, doctor)
    assert second["priority"] == 1


def test_entry_requires_existing_patient(svc, doctor):
    with pytest.raises(PatientNotFound):
        svc.waiting_list.add_to_waiting_list({"patient_id": "ghost", "doctor_id": doctor["id"]})


def test_list_sorted_by_preferred_date_then_priority(svc, doctor, patient, other_patient):
    late = _enqueue(svc, patient, doctor, preferred_date="2024-03-18")
    early_low = _enqueue(svc, other_patient, doctor, preferred_date=MONDAY, priority=5)
    early_high = _enqueue(svc, patient, doctor, preferred_date=MONDAY, priority=1)
    ordered = [e["id"] for e in svc.waiting_list.list_waiting(doctor_id=doctor["id"])]
    assert ordered == [early_high["id"], early_low["id"], late["id"]]
    on_monday = svc.waiting_list.list_waiting(date=MONDAY)
    assert {e["id"] for e in on_monday} == {early_high["id"], early_low["id"]}


def test_booking_converts_entry_into_appointment(svc, doctor, patient, actors):
    entry = _enqueue(svc, patient, doctor, notes="prefers evenings")
    appt = svc.waiting_list.book_from_waiting_list(entry["id"], MONDAY, "17:00", actor=actors["doctor"])
    assert appt["patient_id"] == patient["id"]
    assert appt["service_type"] == "Consultation"
    assert appt["duration"] == 15
    assert appt["notes"] == "prefers evenings"
    assert appt["created_by"] == actors["doctor"].uid
    assert svc.waiting_list.get_entry(entry["id"]) is None


def test_failed_booking_keeps_entry(svc, doctor, patient, other_patient, actors):
    svc.waiting_list.book_from_waiting_list(_enqueue(svc, other_patient, doctor)["id"], MONDAY, "17:00")
    entry = _enqueue(svc, patient, doctor)
    with pytest.raises(SlotUnavailable):
        svc.waiting_list.book_from_waiting_list(entry["id"], MONDAY, "17:00", actor=actors["admin"])
    kept = svc.waiting_list.get_entry(entry["id"])
    assert kept is not None
    assert kept["status"] == "waiting"


def test_only_waiting_entries_can_be_booked(svc, doctor, patient):
    entry = _enqueue(svc, patient, doctor)
    svc.waiting_list.update_entry(entry["id"], {"status": "notified"})
    with pytest.raises(WaitingListEntryInactive) as exc:
        svc.waiting_list.book_from_waiting_list(entry["id"], MONDAY, "17:00")
    assert exc.value.message == "This waiting list entry is no longer active"
    assert svc.appointments.list_appointments() == []


def test_unknown_entry(svc):
    with pytest.raises(WaitingListEntryNotFound):
        svc.waiting_list.book_from_waiting_list("missing", MONDAY, "17:00")
    with pytest.raises(WaitingListEntryNotFound):
        svc.waiting_list.remove_from_waiting_list("missing")


def test_update_validates_status_and_priority(svc, doctor, patient):
    entry = _enqueue(svc, patient, doctor)
    with pytest.raises(ValidationFailed):
        svc.waiting_list.update_entry(entry["id"], {"status": "done"})
    with pytest.raises(ValidationFailed):
        svc.waiting_list.update_entry(entry["id"], {"priority": 0})
    updated = svc.waiting_list.update_entry(entry["id"], {"priority": 3, "preferred_date": MONDAY})
    assert updated["priority"] == 3
    assert updated["preferred_date"].strftime("%Y-%m-%d") == MONDAY
