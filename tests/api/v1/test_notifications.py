"""
API tests for notification endpoints.
"""

import pytest
from httpx import AsyncClient

from tests.factories import auth_headers


@pytest.fixture
async def liked_review(client: AsyncClient, review, other_user):
    """The author's review, liked by bob."""
    response = await client.post(
        f"/api/v1/reviews/{review.review_id}/reactions",
        json={"kind": "like"},
        headers=auth_headers(other_user),
    )
    assert response.status_code == 200
    return review


async def _notification_id(client: AsyncClient, user) -> int:
    response = await client.get(f"/api/v1/notifications/user/{user.user_id}", headers=auth_headers(user))
    return response.json()["notifications"][0]["notification_id"]


@pytest.mark.api
class TestNotifications:
    async def test_cannot_read_someone_elses(self, client: AsyncClient, liked_review, author, other_user):
        author_id = author.user_id
        headers = auth_headers(other_user)

        response = await client.get(f"/api/v1/notifications/user/{author_id}", headers=headers)

        assert response.status_code == 403

    async def test_mark_read(self, client: AsyncClient, liked_review, author):
        notification_id = await _notification_id(client, author)

        response = await client.patch(
            f"/api/v1/notifications/{notification_id}/read", headers=auth_headers(author)
        )

        assert response.status_code == 200
        assert response.json()["is_read"] is True

        listed = await client.get(
            f"/api/v1/notifications/user/{author.user_id}", headers=auth_headers(author)
        )
        assert listed.json()["unread"] == 0

    async def test_delete(self, client: AsyncClient, liked_review, author):
        notification_id = await _notification_id(client, author)

        response = await client.delete(
            f"/api/v1/notifications/{notification_id}", headers=auth_headers(author)
        )

        assert response.status_code == 204
        listed = await client.get(
            f"/api/v1/notifications/user/{author.user_id}", headers=auth_headers(author)
        )
        assert listed.json()["total"] == 0

    async def test_non_recipient_cannot_delete(self, client: AsyncClient, liked_review, author, third_user):
        notification_id = await _notification_id(client, author)
        headers = auth_headers(third_user)

        response = await client.delete(f"/api/v1/notifications/{notification_id}", headers=headers)

        assert response.status_code == 403

    async def test_unlike_removes_notification(self, client: AsyncClient, liked_review, author, other_user):
        await client.post(
            f"/api/v1/reviews/{liked_review.review_id}/reactions",
            json={"kind": "like"},
            headers=auth_headers(other_user),
        )

        response = await client.get(
            f"/api/v1/notifications/user/{author.user_id}", headers=auth_headers(author)
        )

        assert response.json()["total"] == 0

    async def test_missing_notification(self, client: AsyncClient, author):
        response = await client.patch("/api/v1/notifications/9999/read", headers=auth_headers(author))

        assert response.status_code == 404
