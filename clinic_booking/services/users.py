"""User accounts: registration, password login and role assignment."""

from __future__ import annotations

from typing import Any

from clinic_booking.auth import TokenVerifier
from clinic_booking.models_rbac import ROLES, hash_password, verify_password
from clinic_booking.services.audit import AuditTrail
from clinic_booking.services.dates import utcnow
from clinic_booking.services.errors import Conflict, NotAuthenticated, NotFound, ValidationFailed
from clinic_booking.services.store import DocumentStore, DuplicateDocument

MIN_PASSWORD_LENGTH = 8


class UserNotFound(NotFound):
    default_message = "User not found"


class EmailTaken(Conflict):
    default_message = "Email is already registered"


class UserService:
    def __init__(self, store: DocumentStore, tokens: TokenVerifier, audit: AuditTrail) -> None:
        self._store = store
        self._tokens = tokens
        self._audit = audit

    def get_user(self, uid: str) -> dict[str, Any] | None:
        return self._store.get("users", uid)

    def find_by_email(self, email: str) -> dict[str, Any] | None:
        matches = self._store.query("users", "email", "==", (email or "").strip().lower())
        return matches[0] if matches else None

    def create_user(self, email: str, password: str, *, display_name: str | None = None, role: str = "user") -> dict[str, Any]:
        email = (email or "").strip().lower()
        if not email or "@" not in email:
            raise ValidationFailed("A valid email is required")
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationFailed(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        if role not in ROLES:
            raise ValidationFailed("role must be one of: " + ", ".join(ROLES))
        now = utcnow()
        try:
            uid = self._store.add(
                "users",
                {
                    "email": email,
                    "password_hash": hash_password(password),
                    "display_name": (display_name or "").strip() or None,
                    "role": role,
                    "is_active": True,
                    "created_at": now,
                    "updated_at": now,
                },
            )
        except DuplicateDocument as exc:
            raise EmailTaken() from exc
        return self.get_user(uid)  # type: ignore[return-value]

    def issue_token(self, user: dict[str, Any]) -> str:
        return self._tokens.issue(
            user["id"],
            email=user["email"],
            role=user["role"],
            name=user.get("display_name"),
        )

    def login(self, email: str, password: str) -> tuple[dict[str, Any], str]:
        user = self.find_by_email(email)
        if user is None or not user.get("is_active") or not verify_password(user["password_hash"], password or ""):
            self._audit.write_event(None, "auth.login", entity="user", result="denied", meta={"email": email})
            raise NotAuthenticated("Invalid email or password")
        self._audit.write_event(user["id"], "auth.login", entity="user", entity_id=user["id"])
        return user, self.issue_token(user)

    def set_role(self, uid: str, role: str, actor=None) -> dict[str, Any]:
        if role not in ROLES:
            raise ValidationFailed("role must be one of: " + ", ".join(ROLES))
        if not self._store.update("users", uid, {"role": role, "updated_at": utcnow()}):
            raise UserNotFound()
        self._audit.write_event(
            getattr(actor, "uid", None), "user.role", entity="user", entity_id=uid, meta={"role": role}
        )
        return self.get_user(uid)  # type: ignore[return-value]
