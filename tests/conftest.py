import shutil
import sys
from pathlib import Path

import pytest
from flask import g

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from clinic_booking import create_app
from clinic_booking.extensions import db as db_engine
from clinic_booking.services.schedules import DoctorSchedule

TEST_SECRET = "test-secret"


@pytest.fixture(scope="session")
def _template_db(tmp_path_factory):
    """Migrate one database per session; each test works on a copy of it."""
    db_path = tmp_path_factory.mktemp("template") / "clinic.db"
    with pytest.MonkeyPatch.context() as mp:
        mp.setenv("CLINIC_DB_PATH", str(db_path))
        mp.setenv("CLINIC_SECRET_KEY", TEST_SECRET)
        create_app()
        # Closing pooled connections checkpoints the WAL into the main file.
        db_engine.engine.dispose()
    return db_path


@pytest.fixture
def app(tmp_path, monkeypatch, _template_db):
    db_path = tmp_path / "clinic.db"
    shutil.copy2(_template_db, db_path)
    monkeypatch.setenv("CLINIC_DB_PATH", str(db_path))
    monkeypatch.setenv("CLINIC_SECRET_KEY", TEST_SECRET)
    monkeypatch.setenv("CLINIC_AUTO_MIGRATE", "0")
    flask_app = create_app()
    flask_app.config.update(TESTING=True)

    # ``svc`` keeps an app context open, which requests then share along with
    # its ``g``; drop the login cache so every request loads its own token.
    @flask_app.before_request
    def _reload_actor_per_request():
        g.pop("_login_user", None)

    yield flask_app
    db_engine.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def svc(app):
    """The app's service container inside a pushed app context."""
    with app.app_context():
        yield app.extensions["clinic_services"]


@pytest.fixture
def accounts(svc):
    """One account per role, keyed by role name."""
    created = {}
    for role in ("admin", "doctor", "user"):
        created[role] = svc.users.create_user(
            f"{role}@clinic.test",
            "password123",
            display_name=f"{role.title()} Account",
            role=role,
        )
    return created


@pytest.fixture
def auth_headers(svc, accounts):
    def _headers(role: str) -> dict:
        token = svc.users.issue_token(accounts[role])
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def actors(svc, accounts):
    """Verified actors for each role, as the token loader would build them."""
    return {role: svc.tokens.verify(svc.users.issue_token(user)) for role, user in accounts.items()}


@pytest.fixture
def doctor(svc):
    """Monday evenings 17:00-20:00 in 15 minute slots, plus a typed Monday morning."""
    return svc.doctors.create_doctor(
        {"full_name": "Dr. Lina Haddad", "specialties": ["Dermatology", "Laser"]},
        schedule=[
            DoctorSchedule(1, "17:00", "20:00", 15),
            DoctorSchedule(1, "09:00", "10:00", 30, type="Laser"),
        ],
    )


@pytest.fixture
def patient(svc, accounts):
    """Patient record owned by the ``user`` account."""
    return svc.patients.create_patient(
        {"full_name": "Omar Khalil", "user_id": accounts["user"]["id"], "phone_number": "0101010101"}
    )


@pytest.fixture
def other_patient(svc):
    return svc.patients.create_patient({"full_name": "Sara Nabil"})
