"""Appointment booking and management endpoints."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from clinic_booking.forms import validate_payload
from clinic_booking.forms.appointments import (
    AppointmentForm,
    AppointmentUpdateForm,
    ClearHistoryForm,
    SelfBookingForm,
)
from clinic_booking.services.appointments import BookingRequest
from clinic_booking.services.registry import services
from clinic_booking.services.security import current_actor, require_permission
from clinic_booking.services.wire import request_payload, to_wire

bp = Blueprint("appointments", __name__)


def _duration(form) -> int:
    return form.duration.data or current_app.config["DEFAULT_APPOINTMENT_MINUTES"]


@bp.route("/appointments/book", methods=["POST"])
@require_permission("appointments:book")
def book():
    """Self-service booking for the calling user's own patient record."""

    payload = request_payload()
    form = validate_payload(SelfBookingForm, payload)
    actor = current_actor()
    registry = services()
    patient = registry.patients.ensure_for_actor(actor)
    appointment = registry.appointments.create_appointment(
        BookingRequest(
            patient_id=patient["id"],
            doctor_id=form.doctor_id.data,
            appointment_date=payload["appointment_date"],
            appointment_time=form.appointment_time.data,
            service_type=form.service_type.data,
            duration=_duration(form),
            notes=form.notes.data,
        ),
        actor,
    )
    return jsonify(to_wire(appointment)), 201


@bp.route("/appointments/my", methods=["GET"])
@require_permission("appointments:book")
def my_appointments():
    actor = current_actor()
    return jsonify(to_wire(services().appointments.list_for_user(actor.uid)))


@bp.route("/appointments", methods=["POST"])
@require_permission("appointments:edit")
def create():
    payload = request_payload()
    form = validate_payload(AppointmentForm, payload)
    appointment = services().appointments.create_appointment(
        BookingRequest(
            patient_id=form.patient_id.data,
            doctor_id=form.doctor_id.data,
            appointment_date=payload["appointment_date"],
            appointment_time=form.appointment_time.data or None,
            service_type=form.service_type.data,
            duration=_duration(form),
            notes=form.notes.data,
        ),
        current_actor(),
    )
    return jsonify(to_wire(appointment)), 201


@bp.route("/appointments", methods=["GET"])
@require_permission("appointments:view")
def index():
    args = request.args
    appointments = services().appointments.list_appointments(
        status=args.get("status") or None,
        doctor_id=args.get("doctorId") or None,
        patient_id=args.get("patientId") or None,
        start_date=args.get("startDate") or None,
        end_date=args.get("endDate") or None,
    )
    return jsonify(to_wire(appointments))


@bp.route("/appointments/today", methods=["GET"])
@require_permission("appointments:view")
def today():
    doctor_id = request.args.get("doctorId") or None
    return jsonify(to_wire(services().appointments.today_appointments(doctor_id)))


@bp.route("/appointments/<appt_id>", methods=["GET"])
@require_permission("appointments:view")
def detail(appt_id: str):
    return jsonify(to_wire(services().appointments.require_appointment(appt_id)))


@bp.route("/appointments/<appt_id>", methods=["PUT"])
@require_permission("appointments:edit")
def update(appt_id: str):
    payload = request_payload()
    validate_payload(AppointmentUpdateForm, payload)
    appointment = services().appointments.update_appointment(appt_id, payload, actor=current_actor())
    return jsonify(to_wire(appointment))


@bp.route("/appointments/<appt_id>", methods=["DELETE"])
@require_permission("appointments:edit")
def delete(appt_id: str):
    services().appointments.delete_appointment(appt_id, actor=current_actor())
    return jsonify({"message": "Appointment deleted"})


@bp.route("/appointments/clear-history", methods=["POST"])
@require_permission("appointments:delete")
def clear_history():
    form = validate_payload(ClearHistoryForm, request_payload())
    removed = services().appointments.clear_history(
        before=form.before.data or None,
        doctor_id=form.doctor_id.data or None,
        actor=current_actor(),
    )
    return jsonify({"deleted": removed})
