"""
API tests for SETU endpoints.
"""

import pytest
from httpx import AsyncClient

from tests.factories import auth_headers


def setu_entry(**overrides) -> dict:
    entry = {
        "unit_code": "FIT2099",
        "unit_name": "Object oriented design and implementation",
        "code": "FIT2099_CLAYTON_ON-CAMPUS",
        "season": "2024_S1",
        "responses": 40,
        "invited": 120,
        "response_rate": 33.3,
        "agg_mean": 4.0,
        "agg_median": 4.2,
        "metrics": {"I1": [4.1, 4.0], "I8": [4.2, 4.0]},
    }
    entry.update(overrides)
    return entry


@pytest.mark.api
class TestSetuWrites:
    async def test_create(self, client: AsyncClient, admin_user):
        response = await client.post("/api/v1/setus/", json=setu_entry(), headers=auth_headers(admin_user))

        assert response.status_code == 201
        assert response.json()["unit_code"] == "fit2099"
        assert response.json()["metrics"]["I8"] == [4.2, 4.0]

    async def test_create_duplicate(self, client: AsyncClient, admin_user):
        headers = auth_headers(admin_user)
        await client.post("/api/v1/setus/", json=setu_entry(), headers=headers)

        response = await client.post("/api/v1/setus/", json=setu_entry(), headers=headers)

        assert response.status_code == 409

    async def test_create_requires_admin(self, client: AsyncClient, author):
        response = await client.post("/api/v1/setus/", json=setu_entry(), headers=auth_headers(author))

        assert response.status_code == 403

    async def test_bulk_skips_existing(self, client: AsyncClient, admin_user):
        headers = auth_headers(admin_user)
        await client.post("/api/v1/setus/", json=setu_entry(), headers=headers)

        response = await client.post(
            "/api/v1/setus/bulk",
            json={
                "entries": [
                    setu_entry(),
                    setu_entry(season="2023_S2"),
                    setu_entry(season="2023_S2"),
                    setu_entry(unit_code="fit1045", code="FIT1045_CLAYTON_ON-CAMPUS"),
                ]
            },
            headers=headers,
        )

        assert response.status_code == 201
        assert response.json() == {"total_processed": 4, "created": 2, "skipped": 2}

    async def test_update_and_delete(self, client: AsyncClient, admin_user):
        headers = auth_headers(admin_user)
        created = await client.post("/api/v1/setus/", json=setu_entry(), headers=headers)
        setu_id = created.json()["setu_id"]

        updated = await client.patch(f"/api/v1/setus/{setu_id}", json={"responses": 55}, headers=headers)
        assert updated.json()["responses"] == 55

        deleted = await client.delete(f"/api/v1/setus/{setu_id}", headers=headers)
        assert deleted.status_code == 204

        missing = await client.patch(f"/api/v1/setus/{setu_id}", json={"responses": 1}, headers=headers)
        assert missing.status_code == 404


@pytest.mark.api
class TestSetuReads:
    @pytest.fixture
    async def imported(self, client: AsyncClient, admin_user):
        await client.post(
            "/api/v1/setus/bulk",
            json={
                "entries": [
                    setu_entry(season="2023_S1", agg_mean=3.0, agg_median=3.0, responses=10),
                    setu_entry(season="2024_S1", agg_mean=4.0, agg_median=5.0, responses=30),
                    setu_entry(unit_code="fit1045", code="FIT1045_CLAYTON", season="2024_S1"),
                ]
            },
            headers=auth_headers(admin_user),
        )

    async def test_unit_entries_newest_first(self, client: AsyncClient, imported):
        response = await client.get("/api/v1/setus/unit/FIT2099")

        assert [e["season"] for e in response.json()] == ["2024_S1", "2023_S1"]

    async def test_average(self, client: AsyncClient, imported):
        response = await client.get("/api/v1/setus/average/fit2099")

        assert response.json() == {
            "unit_code": "fit2099",
            "seasons": 2,
            "avg_agg_mean": pytest.approx(3.5),
            "avg_agg_median": pytest.approx(4.0),
            "total_responses": 40,
        }

    async def test_average_without_data(self, client: AsyncClient):
        response = await client.get("/api/v1/setus/average/fit9999")

        assert response.status_code == 404

    async def test_season(self, client: AsyncClient, imported):
        response = await client.get("/api/v1/setus/season/2024_S1")

        assert [e["unit_code"] for e in response.json()] == ["fit1045", "fit2099"]

    async def test_list_all(self, client: AsyncClient, imported):
        response = await client.get("/api/v1/setus/")

        assert len(response.json()) == 3
        assert response.json()[0]["season"] == "2024_S1"
