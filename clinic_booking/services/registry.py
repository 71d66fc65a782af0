"""Per-application wiring of the booking services."""

from __future__ import annotations

from dataclasses import dataclass

from flask import Flask, current_app

from clinic_booking.auth import TokenVerifier
from clinic_booking.extensions import db
from clinic_booking.services.appointments import AppointmentService
from clinic_booking.services.audit import AuditTrail
from clinic_booking.services.availability import AvailabilityResolver
from clinic_booking.services.doctors import DoctorService
from clinic_booking.services.locked_slots import LockedSlotService
from clinic_booking.services.patients import PatientService
from clinic_booking.services.store import DocumentStore
from clinic_booking.services.users import UserService
from clinic_booking.services.waiting_list import WaitingListService


@dataclass
class ClinicServices:
    store: DocumentStore
    tokens: TokenVerifier
    audit: AuditTrail
    users: UserService
    doctors: DoctorService
    patients: PatientService
    locked_slots: LockedSlotService
    availability: AvailabilityResolver
    appointments: AppointmentService
    waiting_list: WaitingListService


def build_services(app: Flask) -> ClinicServices:
    store = DocumentStore(db)
    tokens = TokenVerifier(str(app.config["SECRET_KEY"]), app.config["TOKEN_TTL_MINUTES"])
    audit = AuditTrail(store)
    doctors = DoctorService(store)
    patients = PatientService(store)
    locked_slots = LockedSlotService(store)
    appointments = AppointmentService(store, patients, doctors, audit)
    services = ClinicServices(
        store=store,
        tokens=tokens,
        audit=audit,
        users=UserService(store, tokens, audit),
        doctors=doctors,
        patients=patients,
        locked_slots=locked_slots,
        availability=AvailabilityResolver(store, doctors, locked_slots),
        appointments=appointments,
        waiting_list=WaitingListService(
            store,
            patients,
            doctors,
            appointments,
            audit,
            booking_minutes=app.config["WAITING_LIST_BOOKING_MINUTES"],
        ),
    )
    app.extensions["clinic_services"] = services
    return services


def services() -> ClinicServices:
    return current_app.extensions["clinic_services"]
