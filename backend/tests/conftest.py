"""Pytest configuration: in-memory SQLite database, fake object store and a recording notifier."""

from __future__ import annotations

import os
from datetime import datetime, timezone
from typing import Dict, Generator, List, Optional, Tuple

import email_validator
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Override env BEFORE importing app modules so Settings picks up test values.
os.environ.update(
    {
        "DATABASE_URL": "sqlite://",
        "JWT_SECRET_KEY": "test-secret-key-for-pytest",
        "EMAIL_PROVIDER": "dev",
        "ORPHAN_SWEEP_ENABLED": "false",
        "AUTO_CREATE_TABLES": "false",
        "LOG_LEVEL": "WARNING",
    }
)

# Allow the reserved .test domain used by the fixtures below.
email_validator.TEST_ENVIRONMENT = True

from advocatedesk.api.endpoints.auth import _session_claims  # noqa: E402
from advocatedesk.core.security import create_access_token, get_password_hash  # noqa: E402
from advocatedesk.db.database import Base, get_db  # noqa: E402
from advocatedesk.db import models  # noqa: E402
from advocatedesk.main import app  # noqa: E402
from advocatedesk.services.notification_service import get_notifier  # noqa: E402
from advocatedesk.services.storage_service import StorageError, StoredObject, get_object_store  # noqa: E402

# ── In-memory SQLite engine shared across threads ──────────────────

_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@event.listens_for(_engine, "connect")
def _set_sqlite_pragma(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


_TestSession = sessionmaker(bind=_engine, class_=Session, autoflush=False, expire_on_commit=False)

TEST_PASSWORD = "Secret123"
_PASSWORD_HASH = get_password_hash(TEST_PASSWORD)


# ── Test doubles ───────────────────────────────────────────────────

class FakeObjectStore:
    """In-memory stand-in for S3ObjectStore."""

    bucket = "test-bucket"

    def __init__(self):
        self.objects: Dict[str, Tuple[bytes, str, datetime]] = {}
        self.saved: List[str] = []
        self.fail_save = False
        self.fail_list = False
        self.fail_delete: set = set()

    def put(self, key: str, data: bytes = b"x", last_modified: Optional[datetime] = None):
        self.objects[key] = (data, "application/octet-stream", last_modified or datetime.now(timezone.utc))

    def save(self, key, data, content_type="application/octet-stream", metadata=None):
        if self.fail_save:
            raise StorageError("simulated write failure")
        self.saved.append(key)
        self.objects[key] = (data, content_type, datetime.now(timezone.utc))

    def signed_read_url(self, key, expires_in=None):
        return f"https://signed.example/{key}?expires={expires_in or 86400}"

    def list(self, prefix=""):
        if self.fail_list:
            raise StorageError("simulated list failure")
        return [
            StoredObject(key=key, size=len(data), last_modified=modified)
            for key, (data, _, modified) in sorted(self.objects.items())
            if key.startswith(prefix)
        ]

    def delete(self, key):
        if key in self.fail_delete:
            raise StorageError(f"simulated delete failure for {key}")
        self.objects.pop(key, None)

    def exists(self, key):
        return key in self.objects

    def read(self, key):
        if key not in self.objects:
            raise StorageError("NoSuchKey")
        return self.objects[key][0]

    def ping(self):
        return True


class RecordingNotifier:
    def __init__(self):
        self.sent: List[dict] = []

    def send(self, to, subject, html, data=None):
        self.sent.append({"to": to, "subject": subject, "html": html})
        return True


# ── Fixtures ───────────────────────────────────────────────────────

@pytest.fixture(autouse=True)
def _create_tables():
    """Create all tables before each test and drop after."""
    Base.metadata.create_all(bind=_engine)
    yield
    Base.metadata.drop_all(bind=_engine)


@pytest.fixture()
def db() -> Generator[Session, None, None]:
    session = _TestSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def store() -> FakeObjectStore:
    return FakeObjectStore()


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def client(db: Session, store: FakeObjectStore, notifier: RecordingNotifier) -> Generator[TestClient, None, None]:
    """FastAPI TestClient wired to the in-memory DB and the test doubles."""

    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_object_store] = lambda: store
    app.dependency_overrides[get_notifier] = lambda: notifier
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


# ── Factories ──────────────────────────────────────────────────────

def make_user(
    db: Session,
    name: str,
    email: str,
    roles=("advocate",),
    advocate_id: Optional[str] = None,
    is_main_advocate: bool = False,
    user_id: Optional[str] = None,
) -> models.User:
    user = models.User(
        name=name,
        email=email,
        password_hash=_PASSWORD_HASH,
        roles=list(roles),
        advocate_id=advocate_id,
        is_main_advocate=is_main_advocate,
    )
    if user_id:
        user.id = user_id
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_case(db: Session, advocate: models.User, client: models.User, case_number: str = "CASE-001", **fields) -> models.Case:
    case = models.Case(
        advocate_id=advocate.id,
        client_id=client.id,
        created_by=advocate.id,
        case_number=case_number,
        title=fields.pop("title", f"Matter {case_number}"),
        case_type=fields.pop("case_type", models.CaseType.civil),
        registration_date=fields.pop("registration_date", datetime(2024, 1, 15)),
        **fields,
    )
    db.add(case)
    db.commit()
    db.refresh(case)
    return case


def auth_headers(user: models.User) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(_session_claims(user))}"}


@pytest.fixture()
def tenant_a(db: Session):
    """Advocate A (tenant A1) with one client and one team member."""
    advocate = make_user(db, "Advocate A", "a@firm-a.test", user_id="A1", is_main_advocate=True)
    client_user = make_user(db, "Client One", "c1@example.test", roles=("client",), advocate_id=advocate.id, user_id="C1")
    member = make_user(db, "Clerk A", "clerk@firm-a.test", roles=("team_member",), advocate_id=advocate.id)
    return {"advocate": advocate, "client": client_user, "member": member}


@pytest.fixture()
def tenant_b(db: Session):
    advocate = make_user(db, "Advocate B", "b@firm-b.test", user_id="B1", is_main_advocate=True)
    client_user = make_user(db, "Client Two", "c2@example.test", roles=("client",), advocate_id=advocate.id)
    return {"advocate": advocate, "client": client_user}
