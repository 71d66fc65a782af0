import pytest

from clinic_booking.services.errors import ValidationFailed
from clinic_booking.services.locked_slots import LockedSlotNotFound, SlotAlreadyLocked

MONDAY = "2024-03-11"


def test_lock_defaults(svc, doctor):
    slot = svc.locked_slots.create_locked_slot(doctor["id"], MONDAY, "17:00", created_by="admin-1")
    assert slot["reason"] == "Admin locked"
    assert slot["created_by"] == "admin-1"
    assert svc.locked_slots.is_slot_locked(doctor["id"], MONDAY, "17:00")
    assert not svc.locked_slots.is_slot_locked(doctor["id"], MONDAY, "17:15")
    assert not svc.locked_slots.is_slot_locked(doctor["id"], "2024-03-18", "17:00")


def test_duplicate_lock_conflicts(svc, doctor):
    svc.locked_slots.create_locked_slot(doctor["id"], MONDAY, "17:00", reason="Meeting")
    with pytest.raises(SlotAlreadyLocked) as exc:
        svc.locked_slots.create_locked_slot(doctor["id"], MONDAY, "17:00")
    assert exc.value.status_code == 409
    assert exc.value.message == "This slot is already locked"


@pytest.mark.parametrize("date,time", [("11-03-2024", "17:00"), (MONDAY, "5pm")])
def test_lock_validates_date_and_time(svc, doctor, date, time):
    with pytest.raises(ValidationFailed):
        svc.locked_slots.create_locked_slot(doctor["id"], date, time)


def test_delete_by_details(svc, doctor):
    svc.locked_slots.create_locked_slot(doctor["id"], MONDAY, "17:00")
    assert svc.locked_slots.delete_locked_slot_by_details(doctor["id"], MONDAY, "17:00") == 1
    with pytest.raises(LockedSlotNotFound):
        svc.locked_slots.delete_locked_slot_by_details(doctor["id"], MONDAY, "17:00")


def test_doctor_locks_newest_first(svc, doctor):
    svc.locked_slots.create_locked_slot(doctor["id"], MONDAY, "17:00")
    svc.locked_slots.create_locked_slot(doctor["id"], "2024-03-18", "17:00")
    dates = [s["date"].strftime("%Y-%m-%d") for s in svc.locked_slots.locked_slots_for_doctor(doctor["id"])]
    assert dates == ["2024-03-18", MONDAY]


def test_delete_by_id(svc, doctor):
    slot = svc.locked_slots.create_locked_slot(doctor["id"], MONDAY, "17:00")
    svc.locked_slots.delete_locked_slot(slot["id"])
    with pytest.raises(LockedSlotNotFound):
        svc.locked_slots.delete_locked_slot(slot["id"])
