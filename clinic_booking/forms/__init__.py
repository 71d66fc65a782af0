"""Payload validation forms for the JSON API."""

from __future__ import annotations

from typing import Any, Mapping, TypeVar

from flask_wtf import FlaskForm
from werkzeug.datastructures import MultiDict

from clinic_booking.services.errors import ValidationFailed

FormT = TypeVar("FormT", bound=FlaskForm)


class ApiForm(FlaskForm):
    """FlaskForm fed from a decoded JSON body instead of request.form."""

    class Meta:
        # Bearer-token API; there is no session cookie to protect.
        csrf = False


def validate_payload(form_cls: type[FormT], payload: Mapping[str, Any]) -> FormT:
    """Bind ``payload`` (snake_case keys) to ``form_cls`` and validate it.

    The first field error becomes the ``ValidationFailed`` message.
    """

    formdata = MultiDict(
        {key: value for key, value in payload.items() if value is not None and not isinstance(value, list)}
    )
    form = form_cls(formdata=formdata)
    if not form.validate():
        for errors in form.errors.values():
            if errors:
                raise ValidationFailed(str(errors[0]))
        raise ValidationFailed()
    return form
