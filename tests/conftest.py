"""
Pytest configuration and shared fixtures.
"""

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from api.config import config
from catalog.database import DatabaseManager

ADMIN_EMAIL = "admin@bookstore.com"
ADMIN_PASSWORD = "P@ssword1"
JWT_KEY = "test-signing-key-0123456789abcdef"


def sqlite_url(path) -> str:
    return f"sqlite+aiosqlite:///{path}"


@pytest.fixture
def api_settings(tmp_path, monkeypatch):
    """Point the global configuration at a throwaway database and known secrets."""
    monkeypatch.setattr(config, "database_url", sqlite_url(tmp_path / "bookstore.db"))
    monkeypatch.setattr(config, "jwt_key", JWT_KEY)
    monkeypatch.setattr(config, "jwt_issuer", "bookstore-tests")
    monkeypatch.setattr(config, "admin_email", ADMIN_EMAIL)
    monkeypatch.setattr(config, "admin_password", ADMIN_PASSWORD)
    monkeypatch.setattr(config, "log_file", None)
    monkeypatch.setattr(config, "debug", False)
    return config


@pytest.fixture
def client(api_settings):
    """Create test client with the application lifespan running."""
    from api.main import app

    with TestClient(app) as test_client:
        yield test_client


def _login(client, email: str, password: str) -> str:
    response = client.post("/api/users/Login", json={"email_address": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["token"]


@pytest.fixture
def login_as(client):
    """Log in through the API and return the raw token."""
    return lambda email, password: _login(client, email, password)


@pytest.fixture
def admin_headers(client):
    """Authorization header for the seeded administrator."""
    return {"Authorization": f"Bearer {_login(client, ADMIN_EMAIL, ADMIN_PASSWORD)}"}


@pytest.fixture
def user_credentials():
    return {"email_address": "reader@bookstore.com", "password": "Reader#42"}


@pytest.fixture
def user_headers(client, user_credentials):
    """Authorization header for a freshly registered customer."""
    response = client.post("/api/users/Register", json=user_credentials)
    assert response.status_code == 200, response.text
    token = _login(client, user_credentials["email_address"], user_credentials["password"])
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def author_payload():
    return {"firstname": "Frank", "lastname": "Herbert", "bio": "American science fiction author"}


@pytest.fixture
def created_author(client, admin_headers, author_payload):
    """An author persisted through the API."""
    response = client.post("/api/authors", json=author_payload, headers=admin_headers)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def book_payload(created_author):
    return {
        "title": "Dune",
        "year": 1965,
        "isbn": "978-0441013593",
        "summary": "A desert planet, a noble family and the spice melange.",
        "image": "images/dune.jpg",
        "price": 9.99,
        "author_id": created_author["id"],
    }


@pytest_asyncio.fixture
async def db_manager(tmp_path):
    """Connected database manager on a temporary SQLite file."""
    manager = DatabaseManager(sqlite_url(tmp_path / "catalog.db"))
    await manager.connect()
    yield manager
    await manager.disconnect()


@pytest_asyncio.fixture
async def db_session(db_manager):
    """Create a new database session for a test."""
    async with db_manager.session() as session:
        yield session
