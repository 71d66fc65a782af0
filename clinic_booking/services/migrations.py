"""Locating and running the Alembic revisions shipped next to the package."""

from __future__ import annotations

from pathlib import Path

from alembic import command
from alembic.config import Config
from flask import Flask

INI_NAME = "alembic.ini"
SCRIPTS_DIR = "migrations"


def _project_root(app: Flask) -> Path:
    return Path(app.root_path).parent


def alembic_config(app: Flask) -> Config:
    """Alembic config bound to the app's database; logging stays with Flask."""

    root = _project_root(app)
    cfg = Config(str(root / INI_NAME))
    cfg.set_main_option("script_location", str(root / SCRIPTS_DIR))
    cfg.set_main_option("sqlalchemy.url", app.config["SQLALCHEMY_DATABASE_URI"])
    cfg.attributes["configure_logger"] = False
    return cfg


def has_migrations(app: Flask) -> bool:
    root = _project_root(app)
    return (root / INI_NAME).is_file() and (root / SCRIPTS_DIR / "versions").is_dir()


def run_migrations(app: Flask, revision: str = "head") -> None:
    command.upgrade(alembic_config(app), revision)
