"""Flask CLI commands for migrations, the first admin, and schedule presets."""

from __future__ import annotations

import click
from flask.cli import AppGroup, with_appcontext
from flask import current_app

from clinic_booking.services.errors import ClinicError
from clinic_booking.services.migrations import run_migrations
from clinic_booking.services.registry import services
from clinic_booking.services.schedules import SCHEDULE_PRESETS


def register_cli(app) -> None:
    db_group = AppGroup("db")

    @db_group.command("upgrade")
    @with_appcontext
    def upgrade() -> None:
        run_migrations(current_app)

    app.cli.add_command(db_group)

    @app.cli.command("seed-admin")
    @click.option("--email", default="admin@clinic.local", show_default=True)
    @click.option("--password", default="ChangeMe!123", show_default=True)
    @with_appcontext
    def seed_admin(email: str, password: str) -> None:
        users = services().users
        if users.find_by_email(email):
            click.echo(f"User '{email}' already exists.")
            return
        try:
            users.create_user(email, password, display_name="Administrator", role="admin")
        except ClinicError as exc:
            raise click.ClickException(exc.message) from exc
        click.echo(f"Admin user '{email}' created with the provided password.")

    @app.cli.command("apply-schedule-preset")
    @click.option("--doctor-id", required=True)
    @click.option("--preset", required=True, type=click.Choice(sorted(SCHEDULE_PRESETS)))
    @with_appcontext
    def apply_schedule_preset(doctor_id: str, preset: str) -> None:
        try:
            doctor = services().doctors.apply_preset(doctor_id, preset)
        except ClinicError as exc:
            raise click.ClickException(exc.message) from exc
        click.echo(f"Applied '{preset}' to {doctor['full_name']} ({len(doctor['schedule'])} schedule entries).")
