"""Blueprint registration for the JSON API."""

from __future__ import annotations

from flask import Flask

API_PREFIX = "/api"


def register_blueprints(app: Flask) -> None:
    from .appointments.routes import bp as appointments_bp
    from .auth.routes import bp as auth_bp
    from .doctors.routes import bp as doctors_bp
    from .locked_slots.routes import bp as locked_slots_bp
    from .patients.routes import bp as patients_bp
    from .waiting_list.routes import bp as waiting_list_bp

    for blueprint in (auth_bp, doctors_bp, patients_bp, appointments_bp, locked_slots_bp, waiting_list_bp):
        app.register_blueprint(blueprint, url_prefix=API_PREFIX)
