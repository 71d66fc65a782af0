"""Authentication blueprint."""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from clinic_booking.extensions import limiter
from clinic_booking.forms import validate_payload
from clinic_booking.forms.auth import LoginForm, RegisterForm
from clinic_booking.models_rbac import ROLE_PERMISSIONS, role_label
from clinic_booking.services.errors import ValidationFailed
from clinic_booking.services.registry import services
from clinic_booking.services.security import current_actor, require_login, require_permission
from clinic_booking.services.wire import request_payload, to_wire

bp = Blueprint("auth", __name__)


def _login_rate_key() -> str:
    body = request.get_json(silent=True)
    email = body.get("email", "") if isinstance(body, dict) else ""
    return f"{request.remote_addr}:{email}"


def _user_view(user: dict) -> dict:
    view = to_wire(user)
    view["roleLabel"] = role_label(user.get("role"))
    return view


@bp.route("/auth/register", methods=["POST"])
@limiter.limit("10 per hour", methods=["POST"])
def register():
    payload = request_payload()
    form = validate_payload(RegisterForm, payload)
    users = services().users
    user = users.create_user(form.email.data, form.password.data, display_name=form.display_name.data)
    return jsonify({"user": _user_view(user), "token": users.issue_token(user)}), 201


@bp.route("/auth/login", methods=["POST"])
@limiter.limit("5 per 15 minutes", key_func=_login_rate_key, methods=["POST"])
def login():
    form = validate_payload(LoginForm, request_payload())
    user, token = services().users.login(form.email.data, form.password.data)
    return jsonify({"user": _user_view(user), "token": token})


@bp.route("/auth/me", methods=["GET"])
@require_login
def me():
    actor = current_actor()
    user = services().users.get_user(actor.uid)
    if user is None:
        # Token is valid but the account row is gone; answer from the claims.
        user = {"id": actor.uid, "email": actor.email, "display_name": actor.name, "role": actor.role}
    view = _user_view(user)
    view["permissions"] = sorted(ROLE_PERMISSIONS.get(actor.role or "", set()))
    return jsonify(view)


@bp.route("/auth/users/<uid>/role", methods=["PUT"])
@require_permission("users:manage")
def set_role(uid: str):
    role = request_payload().get("role")
    if not role:
        raise ValidationFailed("role is required")
    user = services().users.set_role(uid, role, actor=current_actor())
    return jsonify(_user_view(user))
