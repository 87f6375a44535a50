"""Integration test fixtures for VoiceCollect.

Provides an async HTTP client that talks to the real application over
an in-memory SQLite database with real repository operations.
"""

import pytest
from httpx import ASGITransport, AsyncClient

from src.api.app import create_app
from src.services.storage import database


@pytest.fixture
def app():
    """Create a fresh FastAPI application instance."""
    return create_app()


@pytest.fixture
async def async_client(app, db_engine):
    """AsyncClient backed by the in-memory test engine.

    Injects the test engine into the database module so that all routes
    use the same in-memory SQLite with tables already created.
    """
    database._engine = db_engine
    database._session_factory = None
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    database.reset_engine()


@pytest.fixture
def signup(async_client):
    """Factory: sign up a user through the API and return the response JSON."""

    async def _signup(email: str, role: str = "contributor", password: str = "secret1") -> dict:
        resp = await async_client.post(
            "/api/v1/auth/signup", json={"email": email, "password": password, "role": role}
        )
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _signup


@pytest.fixture
def seed_sentences(async_client):
    """Factory: store sentences through the bulk endpoint."""

    async def _seed(*texts: str) -> None:
        resp = await async_client.post("/api/v1/sentences/bulk", json=[{"text": t} for t in texts])
        assert resp.status_code == 200, resp.text

    return _seed
