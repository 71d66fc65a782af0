from datetime import datetime

import pytest

from clinic_booking.services.doctors import DoctorNotFound
from clinic_booking.services.errors import ValidationFailed

MONDAY = "2024-03-11"
TUESDAY = "2024-03-12"


def _add_appointment(svc, doctor, patient, time, status="scheduled", date=MONDAY):
    """Write an appointment document directly, bypassing the booking checks."""
    return svc.store.add(
        "appointments",
        {
            "patient_id": patient["id"],
            "patient_name": patient["full_name"],
            "doctor_id": doctor["id"],
            "doctor_name": doctor["full_name"],
            "appointment_date": datetime.strptime(date, "%Y-%m-%d"),
            "appointment_day": date,
            "appointment_time": time,
            "service_type": "Consultation",
            "duration": 15,
            "status": status,
        },
    )


def _slot(result, time):
    return next(slot for slot in result["slots"] if slot["time"] == time)


def test_monday_evening_slots(svc, doctor):
    result = svc.availability.available_slots(doctor["id"], MONDAY)
    assert result["day_of_week"] == 1
    assert result["day_name"] == "Monday"
    assert result["doctor_name"] == "Dr. Lina Haddad"
    times = [slot["time"] for slot in result["slots"]]
    # Two untyped-plus-typed windows: 09:00, 09:30 and twelve evening slots.
    assert times[:2] == ["09:00", "09:30"]
    assert len([t for t in times if t >= "17:00"]) == 12
    assert result["total_slots"] == 14
    assert result["available_slots"] == 14
    assert result["booked_slots"] == 0


def test_scheduled_appointment_blocks_slot(svc, doctor, patient):
    _add_appointment(svc, doctor, patient, "17:00")
    result = svc.availability.available_slots(doctor["id"], MONDAY)
    assert _slot(result, "17:00") == {"time": "17:00", "available": False, "locked": False}
    assert result["booked_slots"] == 1
    assert result["available_slots"] == result["total_slots"] - 1


@pytest.mark.parametrize("status", ["cancelled", "no-show", "pending"])
def test_inactive_appointments_do_not_block(svc, doctor, patient, status):
    _add_appointment(svc, doctor, patient, "17:00", status=status)
    result = svc.availability.available_slots(doctor["id"], MONDAY)
    assert _slot(result, "17:00")["available"] is True


def test_completed_appointment_still_blocks(svc, doctor, patient):
    _add_appointment(svc, doctor, patient, "17:15", status="completed")
    result = svc.availability.available_slots(doctor["id"], MONDAY)
    assert _slot(result, "17:15")["available"] is False


def test_other_days_appointments_ignored(svc, doctor, patient):
    _add_appointment(svc, doctor, patient, "17:00", date="2024-03-18")
    result = svc.availability.available_slots(doctor["id"], MONDAY)
    assert _slot(result, "17:00")["available"] is True


def test_locked_slot_without_appointment(svc, doctor):
    svc.locked_slots.create_locked_slot(doctor["id"], MONDAY, "17:30", created_by="admin")
    result = svc.availability.available_slots(doctor["id"], MONDAY)
    assert _slot(result, "17:30") == {"time": "17:30", "available": False, "locked": True}


def test_service_type_filter_keeps_untyped_windows(svc, doctor):
    laser = svc.availability.available_slots(doctor["id"], MONDAY, "Laser")
    assert laser["service_type"] == "Laser"
    assert laser["total_slots"] == 14

    other = svc.availability.available_slots(doctor["id"], MONDAY, "Dermatology")
    times = [slot["time"] for slot in other["slots"]]
    assert "09:00" not in times
    assert len(times) == 12


def test_day_without_schedule_returns_message(svc, doctor):
    result = svc.availability.available_slots(doctor["id"], TUESDAY)
    assert result["slots"] == []
    assert result["total_slots"] == 0
    assert result["message"] == "Doctor is not available on this day"


def test_service_type_message(svc, doctor):
    result = svc.availability.available_slots(doctor["id"], TUESDAY, "Laser")
    assert result["message"] == "Doctor is not available for Laser on this day"


def test_lock_lookup_failure_degrades_to_unlocked(svc, doctor, monkeypatch, caplog):
    def boom(*args, **kwargs):
        raise RuntimeError("lock store offline")

    monkeypatch.setattr(svc.locked_slots, "locked_slots_for_date", boom)
    result = svc.availability.available_slots(doctor["id"], MONDAY)
    assert result["available_slots"] == result["total_slots"]
    assert all(slot["locked"] is False for slot in result["slots"])
    assert "lock store offline" in caplog.text


def test_unknown_doctor(svc):
    with pytest.raises(DoctorNotFound):
        svc.availability.available_slots("missing", MONDAY)


@pytest.mark.parametrize("value", [None, "", "11/03/2024", "2024-02-30"])
def test_malformed_date(svc, doctor, value):
    with pytest.raises(ValidationFailed):
        svc.availability.available_slots(doctor["id"], value)


def test_weekly_schedule(svc, doctor):
    week = svc.availability.weekly_schedule(doctor["id"])
    assert [day["day_name"] for day in week["weekly_schedule"]][0] == "Sunday"
    monday = week["weekly_schedule"][1]
    assert monday["total_slots"] == 14
    assert week["weekly_schedule"][2]["total_slots"] == 0


def test_slots_for_day_of_week(svc, doctor):
    result = svc.availability.slots_for_day_of_week(doctor["id"], "1")
    assert len(result["slots"]) == 14
    with pytest.raises(ValidationFailed):
        svc.availability.slots_for_day_of_week(doctor["id"], 7)
