"""Boards controller — orchestration layer between router and service."""

from sqlalchemy.ext.asyncio import AsyncSession

from app.boards import service
from app.boards.schemas import (
    BoardActivityResponse,
    BoardResponse,
    IdentitySummary,
    ThreadActivityItem,
)
from app.exceptions import InvalidPaginationError, NotFoundError, UnprocessableError
from app.pagination import ActivityCursor, decode_cursor, encode_cursor


def _to_item(row: service.ThreadActivity) -> ThreadActivityItem:
    user_identity = None
    if row.is_self or row.friend:
        user_identity = IdentitySummary(name=row.username, avatar_reference_id=row.user_avatar)
    return ThreadActivityItem(
        thread_id=row.thread_id,
        post_id=row.post_id,
        secret_identity=IdentitySummary(
            name=row.secret_identity, avatar_reference_id=row.secret_avatar
        ),
        user_identity=user_identity,
        created=row.created,
        content=row.content,
        posts_amount=row.posts_amount,
        threads_amount=row.threads_amount,
        comments_amount=row.comments_amount,
        new_posts_amount=row.new_posts_amount,
        new_comments_amount=row.new_comments_amount,
        last_activity=row.last_activity,
        last_comment=row.last_comment,
        friend=row.friend,
        is_self=row.is_self,
        is_new=row.is_new,
    )


async def get_board(slug: str, firebase_id: str | None, db: AsyncSession) -> BoardResponse:
    board = await service.get_board_by_slug(db, slug, firebase_id=firebase_id)
    if board is None:
        raise NotFoundError("Board")
    return BoardResponse.model_validate(board)


async def get_board_activity(
    slug: str,
    firebase_id: str | None,
    db: AsyncSession,
    page_size: int,
    cursor: str | None = None,
) -> BoardActivityResponse:
    try:
        activity_cursor: ActivityCursor | None = decode_cursor(cursor) if cursor else None
        rows = await service.get_board_activity_by_slug(
            db,
            slug,
            firebase_id=firebase_id,
            cursor=activity_cursor,
            page_size=page_size,
        )
    except InvalidPaginationError as exc:
        raise UnprocessableError(str(exc)) from exc

    has_more = len(rows) > page_size
    next_cursor: str | None = None
    if has_more:
        # The sentinel row opens the next page.
        sentinel = rows[page_size]
        next_cursor = encode_cursor(sentinel.last_activity, sentinel.thread_db_id)

    return BoardActivityResponse(
        items=[_to_item(row) for row in rows[:page_size]],
        next_cursor=next_cursor,
        has_more=has_more,
    )
