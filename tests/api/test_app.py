"""API tests for application-level routes and middleware."""

import pytest
from httpx import AsyncClient


@pytest.mark.api
class TestApp:
    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    async def test_request_id_echoed(self, client: AsyncClient):
        response = await client.get("/", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Request-ID"] == "req-123"

    async def test_request_id_generated(self, client: AsyncClient):
        response = await client.get("/")

        assert len(response.headers["X-Request-ID"]) == 32
