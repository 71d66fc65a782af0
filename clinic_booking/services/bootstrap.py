"""Bootstrap helper to ensure the tables exist for first-time runs."""

from __future__ import annotations

from flask import Flask

from clinic_booking.extensions import db
from clinic_booking.models import Base
from clinic_booking import models_rbac  # noqa: F401  registers the users table


def ensure_base_tables(app: Flask) -> None:
    """Create any missing table; a no-op once migrations have run."""

    Base.metadata.create_all(db.engine, checkfirst=True)
    app.logger.debug("Base tables ensured for %s", app.config["CLINIC_DB"])
