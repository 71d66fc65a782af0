"""Application extensions: SQLAlchemy engine, token login manager, rate limiter."""

from __future__ import annotations

from typing import Any, Callable

from flask import Flask
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_login import LoginManager
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import scoped_session, sessionmaker

SQLITE_PRAGMAS = (
    "journal_mode=WAL",
    "busy_timeout=5000",
    "foreign_keys=ON",
)


def _apply_sqlite_pragmas(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    try:
        for pragma in SQLITE_PRAGMAS:
            cursor.execute(f"PRAGMA {pragma}")
    finally:
        cursor.close()


class SQLAlchemyEngine:
    """Engine plus a scoped session that is released at app-context teardown."""

    def __init__(self) -> None:
        self._engine: Engine | None = None
        self._session_factory: Callable[[], Any] | None = None

    def init_app(self, app: Flask) -> None:
        self._engine = create_engine(
            app.config["SQLALCHEMY_DATABASE_URI"],
            future=True,
            **app.config.get("SQLALCHEMY_ENGINE_OPTIONS", {}),
        )
        if self._engine.dialect.name == "sqlite":
            event.listen(self._engine, "connect", _apply_sqlite_pragmas)

        # Rows are read back as dicts after commit, so keep attributes loaded.
        self._session_factory = scoped_session(
            sessionmaker(bind=self._engine, autoflush=False, expire_on_commit=False, future=True)
        )
        app.extensions["db"] = self
        app.teardown_appcontext(self._remove_session)

    def _remove_session(self, exception: BaseException | None) -> None:
        if self._session_factory is not None:
            self._session_factory.remove()

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("SQLAlchemy engine is not initialised")
        return self._engine

    def session(self):
        if self._session_factory is None:
            raise RuntimeError("SQLAlchemy session factory is not initialised")
        return self._session_factory()


db = SQLAlchemyEngine()
login_manager = LoginManager()
# Storage and the on/off switch come from RATELIMIT_* in app.config.
limiter = Limiter(get_remote_address)


def init_extensions(app: Flask) -> None:
    db.init_app(app)
    # Bearer tokens only; no remember-me cookie or session identity checks.
    login_manager.session_protection = None
    login_manager.init_app(app, add_context_processor=False)
    limiter.init_app(app)
