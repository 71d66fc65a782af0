"""Appointment payload forms."""

from __future__ import annotations

from wtforms import IntegerField, StringField, TextAreaField
from wtforms.validators import AnyOf, DataRequired, Length, NumberRange, Optional

from clinic_booking.forms import ApiForm
from clinic_booking.models import APPOINTMENT_STATUSES


class SelfBookingForm(ApiForm):
    """Patient self-service booking; the patient is the caller."""

    doctor_id = StringField("Doctor", validators=[DataRequired(message="doctorId is required")])
    appointment_date = StringField("Date", validators=[DataRequired(message="appointmentDate is required")])
    appointment_time = StringField("Time", validators=[DataRequired(message="appointmentTime is required")])
    service_type = StringField("Service", validators=[DataRequired(message="serviceType is required"), Length(max=120)])
    duration = IntegerField(
        "Duration",
        validators=[Optional(), NumberRange(min=1, message="duration must be a positive number of minutes")],
    )
    notes = TextAreaField("Notes", validators=[Optional(), Length(max=2000)])


class AppointmentForm(SelfBookingForm):
    patient_id = StringField("Patient", validators=[DataRequired(message="patientId is required")])
    appointment_time = StringField("Time", validators=[Optional()])


class AppointmentUpdateForm(ApiForm):
    status = StringField(
        "Status",
        validators=[Optional(), AnyOf(APPOINTMENT_STATUSES, message="status must be one of: " + ", ".join(APPOINTMENT_STATUSES))],
    )
    duration = IntegerField(
        "Duration",
        validators=[Optional(), NumberRange(min=1, message="duration must be a positive number of minutes")],
    )
    notes = TextAreaField("Notes", validators=[Optional(), Length(max=2000)])


class ClearHistoryForm(ApiForm):
    before = StringField("Before", validators=[Optional(), Length(min=10, max=10, message="before must be in YYYY-MM-DD format")])
    doctor_id = StringField("Doctor", validators=[Optional()])
