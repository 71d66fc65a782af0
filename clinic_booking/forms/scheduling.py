"""Locked slot and waiting list payload forms."""

from __future__ import annotations

from wtforms import IntegerField, StringField, TextAreaField
from wtforms.validators import DataRequired, Length, NumberRange, Optional

from clinic_booking.forms import ApiForm

LOCK_FIELDS_REQUIRED = "doctorId, date, and time are required"


class LockedSlotForm(ApiForm):
    doctor_id = StringField("Doctor", validators=[DataRequired(message=LOCK_FIELDS_REQUIRED)])
    date = StringField("Date", validators=[DataRequired(message=LOCK_FIELDS_REQUIRED)])
    time = StringField("Time", validators=[DataRequired(message=LOCK_FIELDS_REQUIRED)])
    reason = StringField("Reason", validators=[Optional(), Length(max=200)])


class WaitingListForm(ApiForm):
    patient_id = StringField("Patient", validators=[DataRequired(message="patientId is required")])
    doctor_id = StringField("Doctor", validators=[DataRequired(message="doctorId is required")])
    service_type = StringField("Service", validators=[Optional(), Length(max=120)])
    priority = IntegerField("Priority", validators=[Optional(), NumberRange(min=1, message="priority must be a positive integer")])
    notes = TextAreaField("Notes", validators=[Optional(), Length(max=2000)])


class WaitingListUpdateForm(ApiForm):
    status = StringField("Status", validators=[Optional()])
    priority = IntegerField("Priority", validators=[Optional(), NumberRange(min=1, message="priority must be a positive integer")])
    notes = TextAreaField("Notes", validators=[Optional(), Length(max=2000)])


class WaitingListBookingForm(ApiForm):
    appointment_date = StringField("Date", validators=[DataRequired(message="appointmentDate is required")])
    appointment_time = StringField("Time", validators=[DataRequired(message="appointmentTime is required")])
