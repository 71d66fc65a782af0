from __future__ import annotations

from flask import Blueprint, jsonify

from clinic_booking.services.registry import services
from clinic_booking.services.security import require_permission
from clinic_booking.services.wire import request_payload, to_wire

bp = Blueprint("patients", __name__)


@bp.route("/patients", methods=["GET"])
@require_permission("patients:view")
def list_patients():
    return jsonify(to_wire(services().patients.list_patients()))


@bp.route("/patients/<patient_id>", methods=["GET"])
@require_permission("patients:view")
def get_patient(patient_id: str):
    return jsonify(to_wire(services().patients.require_patient(patient_id)))


@bp.route("/patients", methods=["POST"])
@require_permission("patients:edit")
def create_patient():
    patient = services().patients.create_patient(request_payload())
    return jsonify(to_wire(patient)), 201


@bp.route("/patients/<patient_id>", methods=["PUT"])
@require_permission("patients:edit")
def update_patient(patient_id: str):
    return jsonify(to_wire(services().patients.update_patient(patient_id, request_payload())))


@bp.route("/patients/<patient_id>", methods=["DELETE"])
@require_permission("patients:edit")
def delete_patient(patient_id: str):
    services().patients.delete_patient(patient_id)
    return jsonify({"message": "Patient deleted"})
