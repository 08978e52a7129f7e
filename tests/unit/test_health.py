"""
Tests for health check endpoint.

The health endpoint must return:
- HTTP 200 with {"status": "healthy"} when the database answers
- HTTP 503 with {"status": "unhealthy"} when it does not
"""
import pytest
from unittest.mock import AsyncMock, MagicMock
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError


async def _get(path: str, mock_db):
    from main import app
    from core.database import get_db

    async def mock_get_db():
        yield mock_db

    app.dependency_overrides = {}
    app.dependency_overrides[get_db] = mock_get_db
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            return await client.get(path)
    finally:
        app.dependency_overrides = {}


class TestHealthEndpoint:
    """Tests for /health endpoint."""

    @pytest.mark.asyncio
    async def test_health_returns_200_when_database_connected(self):
        mock_db = AsyncMock()
        mock_db.execute = AsyncMock(return_value=MagicMock())

        response = await _get("/health", mock_db)

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "database": "connected"}

    @pytest.mark.asyncio
    async def test_health_returns_503_when_database_disconnected(self):
        mock_db = AsyncMock()
        mock_db.execute = AsyncMock(side_effect=OperationalError("SELECT 1", {}, Exception("Connection refused")))

        response = await _get("/health", mock_db)

        assert response.status_code == 503
        assert response.json() == {"status": "unhealthy", "database": "disconnected"}

    @pytest.mark.asyncio
    async def test_root(self):
        response = await _get("/", AsyncMock())

        assert response.status_code == 200
        assert "Welcome" in response.json()["message"]
