import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTO_CREATE_DB"] = "false"
os.environ["RATE_LIMIT"] = "100000/minute"
os.environ["JWT_SECRET"] = "test-secret"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.auth.security import create_access_token, get_password_hash
from app.db import Base, enable_sqlite_foreign_keys, get_db
from app.main import app
from app.models.models import EventTitle, ShiftHours, User
from app.schemas.reports import ReportPayload
from app.services.permissions import AuthContext


@pytest.fixture
def engine(tmp_path):
    eng = create_engine(
        f"sqlite:///{tmp_path / 'reports.db'}",
        future=True,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_foreign_keys(eng)
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def _get_test_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_test_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def make_user(db, username: str, role: str = "user", full_name: str = None, password: str = "secret") -> User:
    user = User(
        username=username,
        password_hash=get_password_hash(password),
        full_name=full_name or username.title(),
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}


def ctx_for(user: User) -> AuthContext:
    return AuthContext(user_id=user.id, role=user.role)


@pytest.fixture
def admin(db):
    return make_user(db, "admin", role="admin", full_name="Ada Admin")


@pytest.fixture
def alice(db):
    return make_user(db, "alice", full_name="Alice Operator")


@pytest.fixture
def bob(db):
    return make_user(db, "bob", full_name="Bob Operator")


@pytest.fixture
def shift(db):
    row = ShiftHours(name="Morning", start_time="08:00", end_time="16:00")
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


@pytest.fixture
def titles(db):
    rows = [EventTitle(title="Power outage"), EventTitle(title="Network incident")]
    db.add_all(rows)
    db.commit()
    for r in rows:
        db.refresh(r)
    return rows


def report_body(**overrides) -> dict:
    body = {
        "report_date": "2024-05-01",
        "shift_hours_id": None,
        "shift_manager_ids": [],
        "event_title_ids": [],
        "health_power_sources": True,
        "health_humidity_temp": False,
        "health_fire_system": True,
        "events_part3": [],
        "events_part4": [],
    }
    body.update(overrides)
    return body


def report_payload(**overrides) -> ReportPayload:
    return ReportPayload(**report_body(**overrides))


@pytest.fixture
def full_body(alice, bob, shift, titles):
    return report_body(
        shift_hours_id=shift.id,
        shift_manager_ids=[alice.id, bob.id],
        event_title_ids=[t.id for t in titles],
        events_part3=[
            {"event_summary": "UPS alarm", "trigger_info": "Monitoring", "start_time": "08:30",
             "end_time": "09:05", "rca_number": "RCA-17"},
            {"event_summary": "Fan failure", "trigger_info": "Walkthrough", "start_time": "13:00",
             "end_time": "13:40", "rca_number": ""},
        ],
        events_part4=[
            {"event_summary": "Badge reader offline", "trigger_info": "Call", "start_time": "22:10",
             "end_time": "23:55"},
        ],
    )
