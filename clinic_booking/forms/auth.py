"""Login and registration payloads."""

from __future__ import annotations

from wtforms import PasswordField, StringField
from wtforms.validators import DataRequired, Length, Optional

from clinic_booking.forms import ApiForm


class LoginForm(ApiForm):
    email = StringField("Email", validators=[DataRequired(message="email is required")])
    password = PasswordField("Password", validators=[DataRequired(message="password is required")])


class RegisterForm(ApiForm):
    email = StringField("Email", validators=[DataRequired(message="email is required"), Length(max=254)])
    password = PasswordField("Password", validators=[DataRequired(message="password is required"), Length(min=8, max=128)])
    display_name = StringField("Name", validators=[Optional(), Length(max=120)])
