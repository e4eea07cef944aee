"""
Shared fixtures: an in-memory SQLite database, an app wired to it, and
helpers to register / log in identities through the HTTP API.
"""

import os
import tempfile

# Configuration must be in place before any backend module is imported.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-signing-secret-0123456789-abcdefghijklmnop"
os.environ["PBKDF2_ITERATIONS"] = "1000"
os.environ["ACCESS_TOKEN_EXPIRE_MINUTES"] = "60"
os.environ["CLOCK_SKEW_SECONDS"] = "300"
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="smartvillage-log-"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from core.config import Settings
from core.passwords import PasswordHasher
from core.tokens import TokenService
from database import Base, get_db
from auth.store import CredentialStore
import models.user          # noqa: F401
import models.announcement  # noqa: F401
import models.audit_log     # noqa: F401
from main import create_app

ADMIN_EMAIL = "admin@smartvillage.com"
ADMIN_PASSWORD = "Admin@123"


@pytest.fixture
def test_settings() -> Settings:
    return Settings()


@pytest.fixture
def hasher(test_settings) -> PasswordHasher:
    return PasswordHasher.from_settings(test_settings)


@pytest.fixture
def token_service(test_settings) -> TokenService:
    return TokenService.from_settings(test_settings)


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    yield db
    db.close()


@pytest.fixture
def store(db_session, hasher) -> CredentialStore:
    return CredentialStore(db_session, hasher, password_min_length=6)


@pytest.fixture
def app(test_settings, session_factory):
    application = create_app(test_settings)

    def _override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    application.dependency_overrides[get_db] = _override_get_db
    return application


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


# ---------------------------------------------------------------------------
# API helpers
# ---------------------------------------------------------------------------


def registration(email: str, password: str, **overrides) -> dict:
    body = {
        "full_name": "Asha Patil",
        "mobile_no": "9876543210",
        "email": email,
        "state": "Maharashtra",
        "district": "Pune",
        "village": "Khed",
        "address": "12 Temple Road",
        "password": password,
    }
    body.update(overrides)
    return body


def register(client: TestClient, email: str, password: str, **overrides):
    return client.post("/api/auth/register", json=registration(email, password, **overrides))


def login(client: TestClient, email: str, password: str):
    return client.post("/api/auth/login", json={"email": email, "password": password})


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def resident_token(client) -> str:
    assert register(client, "resident@example.com", "secret1").status_code == 201
    resp = login(client, "resident@example.com", "secret1")
    assert resp.status_code == 200
    return resp.json()["access_token"]


@pytest.fixture
def admin_token(client, session_factory, hasher) -> str:
    db = session_factory()
    try:
        CredentialStore(db, hasher).seed_admin(ADMIN_EMAIL, ADMIN_PASSWORD)
    finally:
        db.close()
    resp = login(client, ADMIN_EMAIL, ADMIN_PASSWORD)
    assert resp.status_code == 200
    return resp.json()["access_token"]
