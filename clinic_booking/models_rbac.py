"""User accounts and role permissions."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from werkzeug.security import check_password_hash, generate_password_hash

from clinic_booking.models import Base

ROLES = ("admin", "doctor", "user")

ROLE_DISPLAY = {
    "admin": "Admin",
    "doctor": "Doctor",
    "user": "Patient",
}

ROLE_PERMISSIONS = {
    "admin": {
        "doctors:manage",
        "patients:view",
        "patients:edit",
        "appointments:book",
        "appointments:book_any",
        "appointments:view",
        "appointments:edit",
        "appointments:delete",
        "slots:lock",
        "waiting_list:manage",
        "users:manage",
    },
    "doctor": {
        "patients:view",
        "patients:edit",
        "appointments:book",
        "appointments:book_any",
        "appointments:view",
        "appointments:edit",
        "slots:lock",
        "waiting_list:manage",
    },
    "user": {
        "appointments:book",
    },
}


def role_has_permission(role: str | None, code: str) -> bool:
    return code in ROLE_PERMISSIONS.get((role or "").strip().lower(), set())


def role_label(role: str | None) -> str:
    return ROLE_DISPLAY.get(role or "", role or "")


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password_hash: str | None, password: str) -> bool:
    if not password_hash:
        return False
    return check_password_hash(password_hash, password)


class User(Base):
    __tablename__ = "users"
    __table_args__ = (CheckConstraint("role IN ('admin','doctor','user')", name="ck_users_role"),)

    id: Mapped[str] = mapped_column(String, primary_key=True)
    email: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    display_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    role: Mapped[str] = mapped_column(String, nullable=False, default="user", server_default="user")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="1")
    created_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
