"""Route guards for token-authenticated endpoints."""

from __future__ import annotations

from functools import wraps
from typing import Callable, TypeVar

from flask import jsonify
from flask_login import current_user

from clinic_booking.extensions import login_manager

F = TypeVar("F", bound=Callable)


def current_actor():
    """The authenticated actor, or ``None`` on anonymous requests."""

    if current_user and current_user.is_authenticated:
        return current_user._get_current_object()
    return None


def require_login(view: F) -> F:
    @wraps(view)
    def wrapper(*args, **kwargs):
        if current_actor() is None:
            return login_manager.unauthorized()
        return view(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def require_permission(code: str) -> Callable[[F], F]:
    """Reject with 401 when unauthenticated and 403 when the role lacks ``code``."""

    def decorator(view: F) -> F:
        @wraps(view)
        def wrapper(*args, **kwargs):
            actor = current_actor()
            if actor is None:
                return login_manager.unauthorized()
            if not actor.role:
                return jsonify({"error": "Forbidden: Role not assigned"}), 403
            if not actor.has_permission(code):
                return jsonify({"error": "Forbidden: Insufficient permissions"}), 403
            return view(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator
