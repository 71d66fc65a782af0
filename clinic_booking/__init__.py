"""Clinic booking package exposing the Flask application factory."""

from __future__ import annotations

import os
import secrets
from pathlib import Path

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from .blueprints import register_blueprints
from .extensions import init_extensions
from .services.auto_migrate import auto_upgrade
from .services.bootstrap import ensure_base_tables
from .services.errors import ClinicError, record_exception
from .services.registry import build_services
from .cli import register_cli
from . import auth as _auth  # noqa: F401  registers the Flask-Login loaders

APP_HOST = "127.0.0.1"
APP_PORT = 8080


def _data_root(base_dir: Path, override: Path | None = None) -> Path:
    root = override if override else base_dir / "data"
    root.mkdir(parents=True, exist_ok=True)
    (root / "logs").mkdir(parents=True, exist_ok=True)
    return root


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


def create_app() -> Flask:
    project_root = Path(__file__).resolve().parent.parent
    db_override = os.getenv("CLINIC_DB_PATH")
    override_root = Path(db_override).parent if db_override else None
    data_root = _data_root(project_root, override_root)
    db_path = Path(db_override) if db_override else data_root / "app.db"

    app = Flask(__name__)

    secret_key = os.getenv("CLINIC_SECRET_KEY")
    if not secret_key:
        # Tokens issued with a random key stop verifying after a restart.
        secret_key = secrets.token_hex(32)

    app.config.update(
        SECRET_KEY=secret_key,
        SQLALCHEMY_DATABASE_URI=f"sqlite:///{db_path}",
        SQLALCHEMY_ENGINE_OPTIONS={"connect_args": {"check_same_thread": False}},
        RATELIMIT_STORAGE_URI=os.getenv("RATELIMIT_STORAGE_URI", "memory://"),
        RATELIMIT_ENABLED=os.getenv("RATELIMIT_ENABLED", "1") == "1",
        DATA_ROOT=str(data_root),
        CLINIC_DB=str(db_path),
        TOKEN_TTL_MINUTES=_int_env("CLINIC_TOKEN_TTL_MINUTES", 720),
        DEFAULT_APPOINTMENT_MINUTES=_int_env("CLINIC_DEFAULT_APPOINTMENT_MINUTES", 15),
        WAITING_LIST_BOOKING_MINUTES=_int_env("CLINIC_WAITING_LIST_BOOKING_MINUTES", 15),
    )
    app.json.sort_keys = False

    init_extensions(app)
    build_services(app)
    register_blueprints(app)
    auto_upgrade(app)
    ensure_base_tables(app)
    register_cli(app)

    @app.errorhandler(ClinicError)
    def handle_clinic_error(exc: ClinicError):
        return jsonify({"error": exc.message}), exc.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        return jsonify({"error": exc.description or exc.name}), exc.code

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        record_exception("request", exc)
        return jsonify({"error": "Internal server error"}), 500

    return app


__all__ = ["create_app", "APP_HOST", "APP_PORT"]
