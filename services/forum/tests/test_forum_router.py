import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import DismissNotificationsRequest, UserThreadLastVisit
from shared.middleware.request_id import REQUEST_ID_HEADER


@pytest.mark.asyncio
async def test_health(async_client: AsyncClient) -> None:
    response = await async_client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["service"] == "forum"
    assert response.headers[REQUEST_ID_HEADER]


@pytest.mark.asyncio
async def test_request_id_is_echoed(async_client: AsyncClient) -> None:
    response = await async_client.get("/health", headers={REQUEST_ID_HEADER: "abc123"})
    assert response.headers[REQUEST_ID_HEADER] == "abc123"


@pytest.mark.asyncio
async def test_activity_anonymous(async_client: AsyncClient, gore_board) -> None:
    response = await async_client.get("/api/v1/boards/gore/activity")
    assert response.status_code == 200
    page = response.json()
    assert page["has_more"] is False
    assert page["next_cursor"] is None
    assert [item["thread_id"] for item in page["items"]] == [
        "thread-comments-on-reply",
        "thread-murder-scene",
        "thread-favorite-character",
    ]
    for item in page["items"]:
        assert item["user_identity"] is None
        assert item["self"] is False
        assert item["friend"] is False
        assert item["new_posts_amount"] == 0


@pytest.mark.asyncio
async def test_activity_exposes_real_identity_to_friends_and_self(
    async_client: AsyncClient, gore_board, auth_headers
) -> None:
    response = await async_client.get(
        "/api/v1/boards/gore/activity", headers=auth_headers("fb_bobatan")
    )
    assert response.status_code == 200
    items = {item["thread_id"]: item for item in response.json()["items"]}

    own = items["thread-favorite-character"]
    assert own["self"] is True
    assert own["user_identity"]["name"] == "bobatan"
    assert own["secret_identity"]["name"] == "Sunglasses Raccoon"

    friend = items["thread-murder-scene"]
    assert friend["friend"] is True
    assert friend["user_identity"]["name"] == "oncest5evah"
    assert friend["new_posts_amount"] == 2

    stranger = items["thread-comments-on-reply"]
    assert stranger["user_identity"] is None
    assert stranger["secret_identity"]["name"] == "Nervous Ferret"


@pytest.mark.asyncio
async def test_activity_invalid_token_is_anonymous(async_client: AsyncClient, gore_board) -> None:
    response = await async_client.get(
        "/api/v1/boards/gore/activity", headers={"Authorization": "Bearer not-a-jwt"}
    )
    assert response.status_code == 200
    assert all(item["self"] is False for item in response.json()["items"])


@pytest.mark.asyncio
async def test_activity_pages_with_cursor(async_client: AsyncClient, gore_board) -> None:
    first = await async_client.get("/api/v1/boards/gore/activity", params={"page_size": 2})
    page = first.json()
    assert [item["thread_id"] for item in page["items"]] == [
        "thread-comments-on-reply",
        "thread-murder-scene",
    ]
    assert page["has_more"] is True
    assert page["next_cursor"]

    second = await async_client.get(
        "/api/v1/boards/gore/activity",
        params={"page_size": 2, "cursor": page["next_cursor"]},
    )
    page = second.json()
    assert [item["thread_id"] for item in page["items"]] == ["thread-favorite-character"]
    assert page["has_more"] is False
    assert page["next_cursor"] is None


@pytest.mark.asyncio
async def test_activity_accepts_timestamp_cursor(async_client: AsyncClient, gore_board) -> None:
    response = await async_client.get(
        "/api/v1/boards/gore/activity", params={"cursor": "2020-05-01T10:05:00"}
    )
    assert response.status_code == 200
    assert [item["thread_id"] for item in response.json()["items"]] == [
        "thread-murder-scene",
        "thread-favorite-character",
    ]


@pytest.mark.asyncio
async def test_activity_unknown_board_is_empty_page(async_client: AsyncClient, gore_board) -> None:
    response = await async_client.get("/api/v1/boards/nope/activity")
    assert response.status_code == 200
    assert response.json() == {"items": [], "next_cursor": None, "has_more": False}


@pytest.mark.asyncio
async def test_activity_rejects_bad_cursor(async_client: AsyncClient, gore_board) -> None:
    response = await async_client.get(
        "/api/v1/boards/gore/activity", params={"cursor": "yesterday"}
    )
    assert response.status_code == 422
    body = response.json()
    assert body["error"]["message"].startswith("Invalid cursor")
    assert "request_id" in body


@pytest.mark.asyncio
async def test_activity_rejects_bad_page_size(async_client: AsyncClient, gore_board) -> None:
    response = await async_client.get("/api/v1/boards/gore/activity", params={"page_size": 0})
    assert response.status_code == 422
    assert response.json()["error"]["code"] == "validation_error"


@pytest.mark.asyncio
async def test_get_board(async_client: AsyncClient, gore_board, auth_headers) -> None:
    response = await async_client.get("/api/v1/boards/gore", headers=auth_headers("fb_bobatan"))
    assert response.status_code == 200
    data = response.json()
    assert data["slug"] == "gore"
    assert data["pinned_order"] == 2
    assert data["permissions"] == [
        "edit_board_details",
        "edit_category_tags",
        "edit_content_notices",
    ]
    assert data["descriptions"][1]["categories"] == ["anime", "blood"]


@pytest.mark.asyncio
async def test_get_unknown_board(async_client: AsyncClient, gore_board) -> None:
    response = await async_client.get("/api/v1/boards/nope")
    assert response.status_code == 404
    assert response.json()["error"] == {"code": "not_found", "message": "Board not found."}


@pytest.mark.asyncio
async def test_get_thread(async_client: AsyncClient, gore_board) -> None:
    response = await async_client.get("/api/v1/threads/thread-favorite-character")
    assert response.status_code == 200
    data = response.json()
    assert data["board_slug"] == "gore"
    assert data["posts"][0]["comments"] is None
    assert len(data["posts"][1]["comments"]) == 2

    missing = await async_client.get("/api/v1/threads/nope")
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_get_thread_identities(async_client: AsyncClient, gore_board) -> None:
    response = await async_client.get("/api/v1/threads/thread-favorite-character/identities")
    assert response.status_code == 200
    assert [i["display_name"] for i in response.json()] == ["Sunglasses Raccoon", "Evil Moth"]

    missing = await async_client.get("/api/v1/threads/nope/identities")
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_mark_thread_visited(
    async_client: AsyncClient, db_session: AsyncSession, gore_board, auth_headers
) -> None:
    response = await async_client.post(
        "/api/v1/threads/thread-murder-scene/visits", headers=auth_headers("fb_bobatan")
    )
    assert response.status_code == 204

    visit = await db_session.get(UserThreadLastVisit, (1, 2))
    assert visit is not None

    activity = await async_client.get(
        "/api/v1/boards/gore/activity", headers=auth_headers("fb_bobatan")
    )
    items = {item["thread_id"]: item for item in activity.json()["items"]}
    assert items["thread-murder-scene"]["new_posts_amount"] == 0


@pytest.mark.asyncio
async def test_mark_thread_visited_requires_login(async_client: AsyncClient, gore_board) -> None:
    response = await async_client.post("/api/v1/threads/thread-murder-scene/visits")
    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_mark_unknown_thread_visited(
    async_client: AsyncClient, gore_board, auth_headers
) -> None:
    response = await async_client.post(
        "/api/v1/threads/nope/visits", headers=auth_headers("fb_bobatan")
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_dismiss_notifications(
    async_client: AsyncClient, db_session: AsyncSession, gore_board, auth_headers
) -> None:
    response = await async_client.post(
        "/api/v1/users/me/notifications/dismiss", headers=auth_headers("fb_bobatan")
    )
    assert response.status_code == 204

    dismissed = (
        await db_session.execute(
            select(DismissNotificationsRequest).where(DismissNotificationsRequest.user_id == 1)
        )
    ).scalar_one_or_none()
    assert dismissed is not None

    anonymous = await async_client.post("/api/v1/users/me/notifications/dismiss")
    assert anonymous.status_code == 401
