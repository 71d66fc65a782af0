"""camelCase JSON <-> snake_case document conversion."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any

from flask import request

from clinic_booking.services.dates import isoformat
from clinic_booking.services.errors import ValidationFailed

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")

HIDDEN_FIELDS = {"password_hash", "appointment_day"}


def snake(key: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def camel(key: str) -> str:
    head, *rest = key.split("_")
    return head + "".join(part.title() for part in rest)


def to_wire(value: Any) -> Any:
    """Render a document (or list of documents) for a JSON response."""

    if isinstance(value, dict):
        return {camel(k): to_wire(v) for k, v in value.items() if k not in HIDDEN_FIELDS}
    if isinstance(value, (list, tuple)):
        return [to_wire(item) for item in value]
    if isinstance(value, datetime):
        return isoformat(value)
    return value


def from_wire(value: Any) -> Any:
    """Convert an incoming JSON payload's keys to snake_case.

    Serialised timestamp objects (``{"_seconds": ...}``) are left untouched.
    """

    if isinstance(value, dict):
        if any(key.startswith("_") for key in value):
            return value
        return {snake(k): from_wire(v) for k, v in value.items()}
    if isinstance(value, list):
        return [from_wire(item) for item in value]
    return value


def request_payload() -> dict[str, Any]:
    """The JSON body of the current request with snake_case keys."""

    body = request.get_json(silent=True)
    if body is None:
        return {}
    if not isinstance(body, dict):
        raise ValidationFailed("Request body must be a JSON object")
    return from_wire(body)
