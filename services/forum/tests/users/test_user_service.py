from datetime import datetime

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.boards.service import get_board_activity_by_slug
from app.models import DismissNotificationsRequest
from app.users.service import dismiss_notifications, get_user_id_by_firebase_id


@pytest.mark.asyncio
async def test_resolves_firebase_id(db_session: AsyncSession, gore_board) -> None:
    assert await get_user_id_by_firebase_id(db_session, "fb_oncest") == 3
    assert await get_user_id_by_firebase_id(db_session, "fb_nobody") is None
    assert await get_user_id_by_firebase_id(db_session, None) is None


@pytest.mark.asyncio
async def test_dismiss_notifications_upserts(db_session: AsyncSession, gore_board) -> None:
    assert await dismiss_notifications(db_session, "fb_bobatan", at=datetime(2020, 5, 1, 0, 0))
    assert await dismiss_notifications(db_session, "fb_bobatan", at=datetime(2020, 6, 1, 0, 0))

    request = await db_session.get(DismissNotificationsRequest, 1)
    assert request.dismiss_request_time == datetime(2020, 6, 1, 0, 0)


@pytest.mark.asyncio
async def test_dismiss_clears_new_counts(db_session: AsyncSession, gore_board) -> None:
    await dismiss_notifications(db_session, "fb_bobatan", at=datetime(2020, 6, 1, 0, 0))
    rows = await get_board_activity_by_slug(db_session, "gore", firebase_id="fb_bobatan")
    assert all(row.new_posts_amount == 0 for row in rows)
    assert all(row.new_comments_amount == 0 for row in rows)


@pytest.mark.asyncio
async def test_dismiss_for_unknown_user(db_session: AsyncSession, gore_board) -> None:
    assert await dismiss_notifications(db_session, "fb_nobody") is False


@pytest.mark.asyncio
async def test_dismiss_overwrites_concurrent_insert(
    db_session: AsyncSession, gore_board, monkeypatch
) -> None:
    # Another request recorded a dismiss after this session looked for one.
    db_session.add(
        DismissNotificationsRequest(user_id=1, dismiss_request_time=datetime(2020, 5, 1, 0, 0))
    )
    await db_session.flush()

    async def _stale_get(*args, **kwargs):
        return None

    monkeypatch.setattr(AsyncSession, "get", _stale_get)

    assert await dismiss_notifications(db_session, "fb_bobatan", at=datetime(2020, 6, 1, 0, 0))

    requests = (
        (
            await db_session.execute(
                select(DismissNotificationsRequest).execution_options(populate_existing=True)
            )
        )
        .scalars()
        .all()
    )
    assert [(r.user_id, r.dismiss_request_time) for r in requests] == [
        (1, datetime(2020, 6, 1, 0, 0))
    ]
