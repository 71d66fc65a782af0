"""Automatically run Alembic migrations when the app starts."""

from __future__ import annotations

import os

from flask import Flask

from clinic_booking.services.migrations import has_migrations, run_migrations


def auto_upgrade(app: Flask) -> None:
    """Run `alembic upgrade head` automatically if enabled."""

    if os.getenv("CLINIC_AUTO_MIGRATE", "1") != "1":
        return
    if not has_migrations(app):
        app.logger.info("No migration scripts found; relying on create_all")
        return

    try:
        run_migrations(app)
    except Exception as exc:  # pragma: no cover - fallback to create_all
        app.logger.warning("Auto migration skipped: %s", exc)
