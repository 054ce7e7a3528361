"""
API tests for user endpoints.
"""

import pytest
from httpx import AsyncClient

from unitreviews.models import Units, Users

from tests.factories import auth_headers, make_review, make_unit


@pytest.mark.api
class TestGetUser:
    async def test_public_profile(self, client: AsyncClient, author, review, other_user):
        await client.post(
            f"/api/v1/reviews/{review.review_id}/reactions",
            json={"kind": "dislike"},
            headers=auth_headers(other_user),
        )

        alice = await client.get("/api/v1/users/alice")
        bob = await client.get("/api/v1/users/bob")

        assert alice.json()["review_ids"] == [review.review_id]
        assert "email" not in alice.json()
        assert bob.json()["disliked_review_ids"] == [review.review_id]
        assert bob.json()["liked_review_ids"] == []

    async def test_unknown_user(self, client: AsyncClient):
        response = await client.get("/api/v1/users/nobody")

        assert response.status_code == 404

    async def test_search(self, client: AsyncClient, author, other_user):
        response = await client.get("/api/v1/users/", params={"search": "ali"})

        assert [u["username"] for u in response.json()["users"]] == ["alice"]


@pytest.mark.api
class TestUpdateUser:
    async def test_rename_self(self, client: AsyncClient, author):
        response = await client.patch(
            f"/api/v1/users/{author.user_id}",
            json={"username": "alice_w"},
            headers=auth_headers(author),
        )

        assert response.status_code == 200
        assert response.json()["username"] == "alice_w"

    async def test_username_taken(self, client: AsyncClient, author, other_user):
        author_id = author.user_id
        headers = auth_headers(author)

        response = await client.patch(
            f"/api/v1/users/{author_id}", json={"username": "bob"}, headers=headers
        )

        assert response.status_code == 409


@pytest.mark.api
class TestDeleteUser:
    async def test_delete_self_cascades(
        self, client: AsyncClient, db_session, unit, author, other_user, review
    ):
        second_unit = await make_unit(db_session, "fit1045")
        bobs = await make_review(db_session, second_unit, other_user, overall_rating=1)
        await make_review(db_session, unit, other_user, overall_rating=2)
        await client.post(
            f"/api/v1/reviews/{review.review_id}/reactions",
            json={"kind": "like"},
            headers=auth_headers(other_user),
        )
        bob_id = other_user.user_id
        bobs_review_id = bobs.review_id
        unit_ids = sorted([unit.unit_id, second_unit.unit_id])

        response = await client.delete(f"/api/v1/users/{bob_id}", headers=auth_headers(other_user))

        assert response.status_code == 200
        data = response.json()
        assert data["user_id"] == bob_id
        assert bobs_review_id in data["deleted_review_ids"]
        assert data["affected_unit_ids"] == unit_ids
        assert await db_session.get(Users, bob_id) is None

        fit2099 = await client.get("/api/v1/units/fit2099")
        assert fit2099.json()["avg_overall_rating"] == pytest.approx(4.0)
        fit1045 = await db_session.get(Units, second_unit.unit_id)
        await db_session.refresh(fit1045)
        assert fit1045.avg_overall_rating == 0.0

        liked = await client.get(f"/api/v1/reviews/{review.review_id}")
        assert liked.json()["likes"] == 0

        notifications = await client.get(
            f"/api/v1/notifications/user/{author.user_id}", headers=auth_headers(author)
        )
        assert notifications.json()["total"] == 0

    async def test_cannot_delete_someone_else(self, client: AsyncClient, author, other_user):
        author_id = author.user_id
        headers = auth_headers(other_user)

        response = await client.delete(f"/api/v1/users/{author_id}", headers=headers)

        assert response.status_code == 403

    async def test_admin_deletes_anyone(self, client: AsyncClient, author, admin_user):
        response = await client.delete(
            f"/api/v1/users/{author.user_id}", headers=auth_headers(admin_user)
        )

        assert response.status_code == 200

    async def test_deleted_user_token_rejected(self, client: AsyncClient, author):
        headers = auth_headers(author)
        await client.delete(f"/api/v1/users/{author.user_id}", headers=headers)

        response = await client.get("/api/v1/auth/me", headers=headers)

        assert response.status_code == 401
