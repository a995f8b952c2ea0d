import pytest
from fastapi.testclient import TestClient

from library_api.app.core import db
from library_api.app.core.config import settings
from library_api.app.main import create_app

API = "/api/v1"
PASSWORD = "secret123"


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    # Every test gets its own database file and blob storage directory
    monkeypatch.setattr(settings, "database_url", str(tmp_path / "library_test.db"))
    monkeypatch.setattr(settings, "storage_dir", str(tmp_path / "storage"))
    monkeypatch.setattr(settings, "max_contacts_per_user", 0)
    db.init_db()
    yield tmp_path


@pytest.fixture
def client(isolated_settings):
    # Build the app after the settings above so the storage mount uses tmp_path
    return TestClient(create_app())


@pytest.fixture
def register(client):
    def _register(username="test", password=PASSWORD, **overrides):
        payload = {
            "name": "Test User",
            "email": f"{username}@mail.com",
            "username": username,
            "password": password,
            "password_confirmation": password,
        }
        payload.update(overrides)
        return client.post(f"{API}/users/register", json=payload)

    return _register


@pytest.fixture
def login(client):
    def _login(username="test", password=PASSWORD):
        return client.post(f"{API}/users/login", json={"username": username, "password": password})

    return _login


@pytest.fixture
def auth(register, login):
    """Register ``username`` and return bearer headers for a fresh access token."""

    def _auth(username="test"):
        register(username)
        token = login(username).json()["data"]["access_token"]
        return {"Authorization": f"Bearer {token}"}

    return _auth


@pytest.fixture
def headers(auth):
    return auth("test")
