"""Doctor directory, schedules and slot availability."""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from clinic_booking.services.errors import ValidationFailed
from clinic_booking.services.registry import services
from clinic_booking.services.security import require_permission
from clinic_booking.services.wire import request_payload, to_wire

bp = Blueprint("doctors", __name__)


def _flag(name: str) -> bool:
    return (request.args.get(name) or "").strip().lower() in {"1", "true", "yes"}


@bp.route("/doctors", methods=["GET"])
def list_doctors():
    return jsonify(to_wire(services().doctors.list_doctors(active_only=_flag("activeOnly"))))


@bp.route("/doctors/specialty/<specialty>", methods=["GET"])
def doctors_by_specialty(specialty: str):
    return jsonify(to_wire(services().doctors.doctors_by_specialty(specialty)))


@bp.route("/doctors/<doctor_id>", methods=["GET"])
def get_doctor(doctor_id: str):
    return jsonify(to_wire(services().doctors.require_doctor(doctor_id)))


@bp.route("/doctors/<doctor_id>/schedule/weekly", methods=["GET"])
def weekly_schedule(doctor_id: str):
    return jsonify(to_wire(services().availability.weekly_schedule(doctor_id)))


@bp.route("/doctors/<doctor_id>/schedule/slots", methods=["GET"])
def slots_for_day(doctor_id: str):
    day = request.args.get("dayOfWeek")
    if day is None or day == "":
        raise ValidationFailed("dayOfWeek query parameter is required (0-6)")
    return jsonify(to_wire(services().availability.slots_for_day_of_week(doctor_id, day)))


@bp.route("/doctors/<doctor_id>/available-slots", methods=["GET"])
def available_slots(doctor_id: str):
    result = services().availability.available_slots(
        doctor_id,
        request.args.get("date"),
        request.args.get("serviceType"),
    )
    return jsonify(to_wire(result))


@bp.route("/doctors", methods=["POST"])
@require_permission("doctors:manage")
def create_doctor():
    doctor = services().doctors.create_doctor(request_payload())
    return jsonify(to_wire(doctor)), 201


@bp.route("/doctors/with-schedule", methods=["POST"])
@require_permission("doctors:manage")
def create_doctor_with_schedule():
    doctor = services().doctors.create_doctor_with_entries(request_payload())
    return jsonify(to_wire(doctor)), 201


@bp.route("/doctors/<doctor_id>", methods=["PUT"])
@require_permission("doctors:manage")
def update_doctor(doctor_id: str):
    return jsonify(to_wire(services().doctors.update_doctor(doctor_id, request_payload())))


@bp.route("/doctors/<doctor_id>/schedule", methods=["PUT"])
@require_permission("doctors:manage")
def apply_schedule_preset(doctor_id: str):
    preset = request_payload().get("preset")
    return jsonify(to_wire(services().doctors.apply_preset(doctor_id, preset)))


@bp.route("/doctors/<doctor_id>", methods=["DELETE"])
@require_permission("doctors:manage")
def delete_doctor(doctor_id: str):
    services().doctors.delete_doctor(doctor_id)
    return jsonify({"message": "Doctor deleted"})
