"""Pytest fixtures: the API wired to in-memory backends."""

import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.core.dependencies import get_settings
from app.core.rate_limit import limiter
from app.database.memory_store import InMemoryDocumentStore
from app.database.supabase_client import Backends
from app.main import app
from app.modules.auth.identity import InMemoryIdentityProvider


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        store_backend="memory",
        jwt_secret="test-secret",
        bcrypt_rounds=4,
    )


@pytest.fixture
def backends() -> Backends:
    return Backends(InMemoryDocumentStore(), InMemoryIdentityProvider())


@pytest.fixture
def store(backends: Backends) -> InMemoryDocumentStore:
    return backends.store


@pytest.fixture
def client(backends: Backends, test_settings: Settings):
    limiter.enabled = False
    app.state.backends = backends
    app.dependency_overrides[get_settings] = lambda: test_settings
    yield TestClient(app)
    app.dependency_overrides.clear()
    app.state.backends = None
    limiter.enabled = True


@pytest.fixture
def make_user(client: TestClient):
    """Register and log in a user; returns (user_id, auth headers)."""

    def _make_user(email: str, username: str = "user", password: str = "pw"):
        response = client.post("/api/register", json={
            "email": email,
            "username": username,
            "password": password,
        })
        assert response.status_code == 201, response.text
        user_id = response.json()["userId"]
        response = client.post("/api/login", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        return user_id, {"Authorization": f"Bearer {response.json()['token']}"}

    return _make_user
