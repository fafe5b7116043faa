# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# Environment variables are set before the app is imported: config.Settings
# is instantiated at import time and the engine is built from DATABASE_URL.
# =============================================================================

import os
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="guard-api-tests-")

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["COOKIE_SECURE"] = "false"
os.environ["COOKIE_SAMESITE"] = "lax"
os.environ["CORS_ORIGIN"] = "http://localhost:5173"
os.environ["STATIC_DIR"] = os.path.join(_TMP_DIR, "public")
os.environ["UPLOAD_TEMP_DIR"] = os.path.join(_TMP_DIR, "public", "temp")
os.environ["CLOUDINARY_CLOUD_NAME"] = "test-cloud"
os.environ["CLOUDINARY_API_KEY"] = "test-key"
os.environ["CLOUDINARY_API_SECRET"] = "test-secret"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient

import main
from database import Base, SessionLocal, engine
from utils.cloudinary import media_client

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def fresh_database():
    """Every test starts from empty tables."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture(autouse=True)
def fake_uploads(monkeypatch):
    """Replace the Cloudinary upload with a local fake and record its calls."""
    calls = []

    async def _upload(local_path, folder=None):
        calls.append({"path": str(local_path), "folder": folder})
        os.remove(local_path)
        name = os.path.basename(str(local_path))
        return {
            "url": f"http://res.cloudinary.com/test-cloud/image/upload/{name}",
            "secure_url": f"https://res.cloudinary.com/test-cloud/image/upload/{name}",
            "public_id": name,
        }

    monkeypatch.setattr(media_client, "upload_image", _upload)
    return calls


@pytest.fixture
def make_client():
    """Factory of independent clients, one cookie jar per actor."""
    clients = []

    def _make():
        c = TestClient(main.app)
        clients.append(c)
        return c

    yield _make
    for c in clients:
        c.close()


@pytest.fixture
def client(make_client):
    return make_client()


@pytest.fixture
def db_session():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


# =============================================================================
# Helpers
# =============================================================================

def register_user(client, **overrides):
    data = {
        "userName": "Alice",
        "fullName": "Alice Doe",
        "email": "alice@example.com",
        "password": "secret123",
    }
    data.update(overrides)
    return client.post(
        "/api/v1/user/register",
        data=data,
        files={"avatar": ("avatar.png", PNG_BYTES, "image/png")},
    )


def register_guard(client, **overrides):
    data = {
        "userName": "gbob",
        "fullName": "Bob Guard",
        "email": "bob@example.com",
        "password": "guardpass",
        "residence": "Pune",
        "description": "Night shift",
        "age": "34",
        "workHistory": '[{"site": "Mall", "years": 2}]',
    }
    data.update(overrides)
    return client.post(
        "/api/v1/guard/register",
        data=data,
        files={"avatar": ("avatar.png", PNG_BYTES, "image/png")},
    )


def login(client, kind, identifier, password):
    key = "email" if "@" in identifier else "userName"
    return client.post(f"/api/v1/{kind}/login", json={key: identifier, "password": password})


@pytest.fixture
def user_client(make_client):
    """Logged-in regular user."""
    c = make_client()
    assert register_user(c).status_code == 201
    assert login(c, "user", "alice@example.com", "secret123").status_code == 200
    return c


@pytest.fixture
def admin_client(make_client):
    """Logged-in admin user."""
    c = make_client()
    resp = register_user(c, userName="root", fullName="Root Admin", email="root@example.com",
                         password="rootpass", role="admin")
    assert resp.status_code == 201
    assert login(c, "user", "root", "rootpass").status_code == 200
    return c


@pytest.fixture
def guard_client(make_client):
    """Logged-in guard."""
    c = make_client()
    assert register_guard(c).status_code == 201
    assert login(c, "guard", "bob@example.com", "guardpass").status_code == 200
    return c
