"""Shared test fixtures."""

import os

# Settings() requires the admin token; set it before anything imports config.
os.environ.setdefault("ADMIN_API_TOKEN", "test-admin-token")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from src.main import app  # noqa: E402



@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client for the FastAPI app (no lifespan: DB/Redis stay untouched)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
