"""Initial schema for clinic booking."""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    bind = op.get_bind()
    tables = set(sa.inspect(bind).get_table_names())

    if "users" not in tables:
        op.create_table(
            "users",
            sa.Column("id", sa.String(), primary_key=True),
            sa.Column("email", sa.String(), nullable=False, unique=True),
            sa.Column("password_hash", sa.Text(), nullable=False),
            sa.Column("display_name", sa.Text(), nullable=True),
            sa.Column("role", sa.String(), nullable=False, server_default="user"),
            sa.Column("is_active", sa.Boolean(), nullable=False, server_default="1"),
            sa.Column("created_at", sa.DateTime(), nullable=True),
            sa.Column("updated_at", sa.DateTime(), nullable=True),
            sa.CheckConstraint("role IN ('admin','doctor','user')", name="ck_users_role"),
        )

    if "doctors" not in tables:
        op.create_table(
            "doctors",
            sa.Column("id", sa.String(), primary_key=True),
            sa.Column("user_id", sa.String(), nullable=True),
            sa.Column("full_name", sa.Text(), nullable=False),
            sa.Column("specialties", sa.JSON(), nullable=False),
            sa.Column("qualifications", sa.JSON(), nullable=False),
            sa.Column("bio", sa.Text(), nullable=True),
            sa.Column("image_url", sa.Text(), nullable=True),
            sa.Column("schedule", sa.JSON(), nullable=False),
            sa.Column("is_active", sa.Boolean(), nullable=False, server_default="1"),
            sa.Column("created_at", sa.DateTime(), nullable=True),
        )
        op.create_index("ix_doctors_user_id", "doctors", ["user_id"])

    if "patients" not in tables:
        op.create_table(
            "patients",
            sa.Column("id", sa.String(), primary_key=True),
            sa.Column("user_id", sa.String(), nullable=True),
            sa.Column("full_name", sa.Text(), nullable=False),
            sa.Column("id_number", sa.Text(), nullable=True),
            sa.Column("date_of_birth", sa.DateTime(), nullable=True),
            sa.Column("gender", sa.Text(), nullable=True),
            sa.Column("phone_number", sa.Text(), nullable=True),
            sa.Column("email", sa.Text(), nullable=True),
            sa.Column("address", sa.Text(), nullable=True),
            sa.Column("medical_history", sa.Text(), nullable=True),
            sa.Column("allergies", sa.JSON(), nullable=False),
            sa.Column("created_at", sa.DateTime(), nullable=True),
            sa.Column("updated_at", sa.DateTime(), nullable=True),
        )
        op.create_index("ix_patients_user_id", "patients", ["user_id"])

    if "appointments" not in tables:
        op.create_table(
            "appointments",
            sa.Column("id", sa.String(), primary_key=True),
            sa.Column("patient_id", sa.String(), nullable=False),
            sa.Column("patient_name", sa.Text(), nullable=False),
            sa.Column("doctor_id", sa.String(), nullable=False),
            sa.Column("doctor_name", sa.Text(), nullable=False),
            sa.Column("appointment_date", sa.DateTime(), nullable=False),
            sa.Column("appointment_day", sa.String(10), nullable=False),
            sa.Column("appointment_time", sa.String(5), nullable=True),
            sa.Column("service_type", sa.Text(), nullable=False),
            sa.Column("duration", sa.Integer(), nullable=False),
            sa.Column("status", sa.String(), nullable=False),
            sa.Column("notes", sa.Text(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=True),
            sa.Column("updated_at", sa.DateTime(), nullable=True),
            sa.Column("created_by", sa.String(), nullable=True),
        )
        op.create_index("ix_appointments_patient_id", "appointments", ["patient_id"])
        op.create_index("ix_appointments_doctor_id", "appointments", ["doctor_id"])
        # One active appointment per doctor slot.
        op.create_index(
            "uq_appointments_active_slot",
            "appointments",
            ["doctor_id", "appointment_day", "appointment_time"],
            unique=True,
            sqlite_where=sa.text("status IN ('scheduled', 'completed')"),
        )

    if "locked_slots" not in tables:
        op.create_table(
            "locked_slots",
            sa.Column("id", sa.String(), primary_key=True),
            sa.Column("doctor_id", sa.String(), nullable=False),
            sa.Column("date", sa.DateTime(), nullable=False),
            sa.Column("time", sa.String(5), nullable=False),
            sa.Column("reason", sa.Text(), nullable=True),
            sa.Column("created_by", sa.String(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=True),
        )
        op.create_index("ix_locked_slots_doctor_id", "locked_slots", ["doctor_id"])

    if "waiting_list" not in tables:
        op.create_table(
            "waiting_list",
            sa.Column("id", sa.String(), primary_key=True),
            sa.Column("patient_id", sa.String(), nullable=False),
            sa.Column("patient_name", sa.Text(), nullable=False),
            sa.Column("doctor_id", sa.String(), nullable=False),
            sa.Column("doctor_name", sa.Text(), nullable=False),
            sa.Column("service_type", sa.Text(), nullable=False),
            sa.Column("preferred_date", sa.DateTime(), nullable=True),
            sa.Column("status", sa.String(), nullable=False),
            sa.Column("priority", sa.Integer(), nullable=False),
            sa.Column("notes", sa.Text(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=True),
            sa.Column("updated_at", sa.DateTime(), nullable=True),
            sa.Column("created_by", sa.String(), nullable=True),
        )
        op.create_index("ix_waiting_list_patient_id", "waiting_list", ["patient_id"])
        op.create_index("ix_waiting_list_doctor_id", "waiting_list", ["doctor_id"])

    if "audit_log" not in tables:
        op.create_table(
            "audit_log",
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("actor_user_id", sa.String(), nullable=True),
            sa.Column("action", sa.String(), nullable=False),
            sa.Column("entity", sa.String(), nullable=True),
            sa.Column("entity_id", sa.String(), nullable=True),
            sa.Column("ts", sa.Text(), nullable=False),
            sa.Column("result", sa.String(), nullable=False),
            sa.Column("meta_json_redacted", sa.Text(), nullable=False),
        )


def downgrade() -> None:
    for table in ("audit_log", "waiting_list", "locked_slots", "appointments", "patients", "doctors", "users"):
        op.drop_table(table)
