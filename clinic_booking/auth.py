"""Bearer-token authentication wired into Flask-Login."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from flask import current_app, jsonify, request
from flask_login import UserMixin
from jose import JWTError, jwt

from clinic_booking.extensions import login_manager
from clinic_booking.models_rbac import role_has_permission
from clinic_booking.services.errors import NotAuthenticated

ALGORITHM = "HS256"


@dataclass
class Actor(UserMixin):
    """Identity extracted from a verified token."""

    uid: str
    email: str | None = None
    role: str | None = None
    name: str | None = None

    def get_id(self) -> str:
        return self.uid

    @property
    def id(self) -> str:
        return self.uid

    def has_permission(self, code: str) -> bool:
        return role_has_permission(self.role, code)


SYSTEM_ADMIN = Actor(uid="system", role="admin", name="System")


class TokenVerifier:
    """Issue and verify HS256 access tokens."""

    def __init__(self, secret_key: str, ttl_minutes: int = 720) -> None:
        self._secret_key = secret_key
        self._ttl = timedelta(minutes=ttl_minutes)

    def issue(self, uid: str, *, email: str | None = None, role: str | None = None, name: str | None = None) -> str:
        claims = {
            "sub": uid,
            "email": email,
            "role": role,
            "name": name,
            "exp": datetime.now(timezone.utc) + self._ttl,
        }
        return jwt.encode(claims, self._secret_key, algorithm=ALGORITHM)

    def verify(self, token: str) -> Actor:
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[ALGORITHM])
        except JWTError as exc:
            raise NotAuthenticated("Unauthorized: Invalid token") from exc
        uid = payload.get("sub")
        if not uid:
            raise NotAuthenticated("Unauthorized: Invalid token")
        return Actor(
            uid=str(uid),
            email=payload.get("email"),
            role=payload.get("role"),
            name=payload.get("name"),
        )


def bearer_token() -> str | None:
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer "):
        return None
    return header[len("Bearer "):].strip() or None


@login_manager.request_loader
def load_actor_from_request(req) -> Actor | None:
    token = bearer_token()
    if not token:
        return None
    verifier: TokenVerifier = current_app.extensions["clinic_services"].tokens
    try:
        return verifier.verify(token)
    except NotAuthenticated:
        return None


@login_manager.unauthorized_handler
def unauthorized():
    if bearer_token():
        return jsonify({"error": "Unauthorized: Invalid token"}), 401
    return jsonify({"error": "Unauthorized: No token provided"}), 401
