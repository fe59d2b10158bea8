# tests/conftest.py

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.main import create_app


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """
    Settings for one test: a throwaway SQLite file and the cheapest bcrypt
    cost, so tests stay fast and never touch the developer's database.
    """
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        secret_key="test-secret",
        access_token_expire_minutes=60,
        bcrypt_rounds=4,
    )


@pytest.fixture()
def api(settings: Settings):
    return create_app(settings)


@pytest.fixture()
def client(api):
    # Entering the client runs the startup hook, which creates the tables.
    with TestClient(api) as c:
        yield c


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def register(client):
    """Register a user and return ``(token, user_json)``."""

    def _register(name: str = "User One", email: str = "userone@mail.com", password: str = "nodejs!72"):
        response = client.post("/users", json={"name": name, "email": email, "password": password})
        assert response.status_code == 201, response.text
        body = response.json()
        return body["access_token"], body["user"]

    return _register


@pytest.fixture()
def db_session(api):
    """A session on the app's own database, for checking what a request stored."""
    session = api.state.context.session_factory()
    try:
        yield session
    finally:
        session.close()
