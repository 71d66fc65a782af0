from __future__ import annotations

from flask import Blueprint, jsonify, request

from clinic_booking.forms import validate_payload
from clinic_booking.forms.scheduling import LOCK_FIELDS_REQUIRED, LockedSlotForm
from clinic_booking.services.errors import ValidationFailed
from clinic_booking.services.registry import services
from clinic_booking.services.security import current_actor, require_permission
from clinic_booking.services.wire import request_payload, to_wire

bp = Blueprint("locked_slots", __name__)


def _slot_details() -> tuple[str, str, str]:
    details = {**request_payload(), **{k: v for k, v in request.args.items() if v}}
    doctor_id = details.get("doctor_id") or details.get("doctorId")
    date, time = details.get("date"), details.get("time")
    if not doctor_id or not date or not time:
        raise ValidationFailed(LOCK_FIELDS_REQUIRED)
    return doctor_id, date, time


@bp.route("/locked-slots", methods=["GET"])
@require_permission("slots:lock")
def index():
    doctor_id = request.args.get("doctorId")
    if not doctor_id:
        raise ValidationFailed("doctorId query parameter is required")
    date = request.args.get("date")
    locked = services().locked_slots
    slots = locked.locked_slots_for_date(doctor_id, date) if date else locked.locked_slots_for_doctor(doctor_id)
    return jsonify(to_wire(slots))


@bp.route("/locked-slots/check", methods=["GET"])
@require_permission("slots:lock")
def check():
    doctor_id, date, time = _slot_details()
    return jsonify({"locked": services().locked_slots.is_slot_locked(doctor_id, date, time)})


@bp.route("/locked-slots", methods=["POST"])
@require_permission("slots:lock")
def lock():
    form = validate_payload(LockedSlotForm, request_payload())
    slot = services().locked_slots.create_locked_slot(
        form.doctor_id.data,
        form.date.data,
        form.time.data,
        reason=form.reason.data,
        created_by=current_actor().uid,
    )
    services().audit.write_event(
        current_actor().uid,
        "slot.lock",
        entity="locked_slot",
        entity_id=slot["id"],
        meta={"doctor_id": slot["doctor_id"], "time": slot["time"], "reason": slot["reason"]},
    )
    return jsonify(to_wire(slot)), 201


@bp.route("/locked-slots/<slot_id>", methods=["DELETE"])
@require_permission("slots:lock")
def unlock(slot_id: str):
    services().locked_slots.delete_locked_slot(slot_id)
    services().audit.write_event(current_actor().uid, "slot.unlock", entity="locked_slot", entity_id=slot_id)
    return jsonify({"message": "Slot unlocked"})


@bp.route("/locked-slots", methods=["DELETE"])
@require_permission("slots:lock")
def unlock_by_details():
    doctor_id, date, time = _slot_details()
    removed = services().locked_slots.delete_locked_slot_by_details(doctor_id, date, time)
    services().audit.write_event(
        current_actor().uid,
        "slot.unlock",
        entity="locked_slot",
        meta={"doctor_id": doctor_id, "date": date, "time": time, "removed": removed},
    )
    return jsonify({"deleted": removed})
