from __future__ import annotations

from flask import Blueprint, jsonify, request

from clinic_booking.forms import validate_payload
from clinic_booking.forms.scheduling import WaitingListBookingForm, WaitingListForm, WaitingListUpdateForm
from clinic_booking.services.registry import services
from clinic_booking.services.security import current_actor, require_permission
from clinic_booking.services.wire import request_payload, to_wire

bp = Blueprint("waiting_list", __name__)


@bp.route("/waiting-list", methods=["GET"])
@require_permission("waiting_list:manage")
def index():
    args = request.args
    entries = services().waiting_list.list_waiting(
        doctor_id=args.get("doctorId") or None,
        patient_id=args.get("patientId") or None,
        status=args.get("status") or None,
        date=args.get("date") or None,
    )
    return jsonify(to_wire(entries))


@bp.route("/waiting-list/<entry_id>", methods=["GET"])
@require_permission("waiting_list:manage")
def detail(entry_id: str):
    return jsonify(to_wire(services().waiting_list.require_entry(entry_id)))


@bp.route("/waiting-list", methods=["POST"])
@require_permission("waiting_list:manage")
def add():
    payload = request_payload()
    validate_payload(WaitingListForm, payload)
    entry = services().waiting_list.add_to_waiting_list(payload, actor=current_actor())
    return jsonify(to_wire(entry)), 201


@bp.route("/waiting-list/<entry_id>", methods=["PUT"])
@require_permission("waiting_list:manage")
def update(entry_id: str):
    payload = request_payload()
    validate_payload(WaitingListUpdateForm, payload)
    return jsonify(to_wire(services().waiting_list.update_entry(entry_id, payload)))


@bp.route("/waiting-list/<entry_id>", methods=["DELETE"])
@require_permission("waiting_list:manage")
def remove(entry_id: str):
    services().waiting_list.remove_from_waiting_list(entry_id)
    return jsonify({"message": "Removed from waiting list"})


@bp.route("/waiting-list/<entry_id>/book", methods=["POST"])
@require_permission("waiting_list:manage")
def book(entry_id: str):
    payload = request_payload()
    form = validate_payload(WaitingListBookingForm, payload)
    appointment = services().waiting_list.book_from_waiting_list(
        entry_id,
        payload["appointment_date"],
        form.appointment_time.data,
        actor=current_actor(),
    )
    return jsonify(to_wire(appointment)), 201
