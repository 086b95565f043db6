"""Boards service — pure business logic, no FastAPI imports.

Board activity
--------------
`get_board_activity_by_slug` lists a board's threads, most recently active
first, annotated with what is new to the viewer since their cutoff:

  cutoff(thread)  = greatest(last visit of the thread, last global dismiss)
  new(row)        = viewer logged in
                    AND row not authored by the viewer
                    AND (no cutoff OR cutoff < row.created)
  last_activity   = greatest(first post, last post, last comment)

Posts and comments are aggregated in separate subqueries, one row per thread
each, so a thread's comment count never multiplies its post count and the
other way around. Everything a thread may lack (comments, a cutoff, a secret
identity, a friendship edge) is left-joined and coalesced.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy import (
    DateTime,
    Integer,
    Select,
    and_,
    case,
    cast,
    exists,
    false,
    func,
    literal_column,
    null,
    or_,
    select,
)
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased
from sqlalchemy.sql.expression import ColumnElement

from app.exceptions import InvalidPaginationError
from app.models.board import (
    Board,
    BoardDescriptionSection,
    BoardDescriptionSectionCategory,
    BoardRestriction,
    Category,
    UserMutedBoard,
    UserPinnedBoard,
)
from app.models.comment import Comment
from app.models.enums import BOARD_PERMISSIONS, DescriptionSectionType, RolePermission
from app.models.post import Post
from app.models.role import BoardUserRole, RealmUserRole, Role
from app.models.social import Friend
from app.models.thread import SecretIdentity, Thread, UserThreadIdentity
from app.models.user import User
from app.models.visit import DismissNotificationsRequest, UserThreadLastVisit
from app.pagination import ActivityCursor, validate_page_size
from app.users.service import get_user_id_by_firebase_id
from shared.database.functions import greatest
from shared.utils.clock import as_naive_utc, utcnow

logger = logging.getLogger(__name__)

# Rendered inline: PostgreSQL cannot type a bare bind parameter inside SUM().
_ZERO = literal_column("0", Integer)
_ONE = literal_column("1", Integer)


@dataclass(frozen=True)
class ThreadActivity:
    """One row of a board's activity feed."""

    thread_db_id: int
    thread_id: str
    post_id: str
    user_id: int
    username: str | None
    user_avatar: str | None
    secret_identity: str | None
    secret_avatar: str | None
    created: datetime
    content: str
    posts_amount: int
    threads_amount: int
    comments_amount: int
    new_posts_amount: int
    new_comments_amount: int
    last_activity: datetime
    last_comment: datetime | None
    friend: bool
    is_self: bool
    is_new: bool


@dataclass(frozen=True)
class BoardDescription:
    id: str
    index: int
    title: str | None
    description: str | None
    type: DescriptionSectionType
    categories: list[str] | None


@dataclass(frozen=True)
class PostingIdentity:
    id: str
    name: str
    avatar_reference_id: str | None


@dataclass(frozen=True)
class BoardDetails:
    slug: str
    tagline: str
    avatar_reference_id: str | None
    settings: dict[str, Any]
    descriptions: list[BoardDescription]
    muted: bool
    pinned_order: int | None
    permissions: list[RolePermission]
    posting_identities: list[PostingIdentity]
    logged_out_restrictions: list[str]
    logged_in_base_restrictions: list[str]


# ===========================================================================
# Board activity
# ===========================================================================


def _cutoff_time(viewer_id: int | None) -> ColumnElement[datetime]:
    """Per-thread cutoff, correlated against `Thread`. NULL means never visited."""
    if viewer_id is None:
        return cast(null(), DateTime)
    last_visit = (
        select(UserThreadLastVisit.last_visit_time)
        .where(
            UserThreadLastVisit.user_id == viewer_id,
            UserThreadLastVisit.thread_id == Thread.id,
        )
        .scalar_subquery()
    )
    last_dismiss = (
        select(DismissNotificationsRequest.dismiss_request_time)
        .where(DismissNotificationsRequest.user_id == viewer_id)
        .scalar_subquery()
    )
    return greatest(last_visit, last_dismiss)


def _new_to_viewer(
    author: ColumnElement[Any],
    created: ColumnElement[datetime],
    cutoff: ColumnElement[datetime],
    viewer_id: int | None,
) -> ColumnElement[int]:
    """1 when the row is new to the viewer, else 0.

    The checks run in order: anonymous viewers see nothing new, the viewer's own
    content is never new whatever its timestamp, and only then is the cutoff
    consulted.
    """
    if viewer_id is None:
        return _ZERO
    return case(
        (author == viewer_id, _ZERO),
        (or_(cutoff.is_(None), cutoff < created), _ONE),
        else_=_ZERO,
    )


def build_board_activity_query(
    board_id: int,
    viewer_id: int | None,
    cursor: ActivityCursor,
    limit: int,
) -> Select:
    first_post_id = (
        select(Post.id)
        .where(Post.parent_thread == Thread.id)
        .order_by(Post.created, Post.id)
        .limit(1)
        .scalar_subquery()
    )
    board_threads = (
        select(
            Thread.id.label("thread_id"),
            Thread.string_id.label("thread_string_id"),
            first_post_id.label("first_post_id"),
            _cutoff_time(viewer_id).label("cutoff_time"),
        )
        .where(Thread.parent_board == board_id)
        .cte("board_threads")
    )

    post_stats = (
        select(
            board_threads.c.thread_id,
            func.count(Post.id).label("posts_amount"),
            func.min(Post.created).label("first_post_time"),
            func.max(Post.created).label("last_post_time"),
            func.sum(
                _new_to_viewer(Post.author, Post.created, board_threads.c.cutoff_time, viewer_id)
            ).label("new_posts_amount"),
        )
        .select_from(board_threads)
        .join(Post, Post.parent_thread == board_threads.c.thread_id)
        .group_by(board_threads.c.thread_id)
        .subquery("post_stats")
    )

    # Comments belong to the thread of their parent post, whichever post that is.
    comment_post = aliased(Post, name="comment_post")
    comment_stats = (
        select(
            board_threads.c.thread_id,
            func.count(Comment.id).label("comments_amount"),
            func.max(Comment.created).label("last_comment_time"),
            func.sum(
                _new_to_viewer(
                    Comment.author, Comment.created, board_threads.c.cutoff_time, viewer_id
                )
            ).label("new_comments_amount"),
        )
        .select_from(board_threads)
        .join(comment_post, comment_post.parent_thread == board_threads.c.thread_id)
        .join(Comment, Comment.parent_post == comment_post.id)
        .group_by(board_threads.c.thread_id)
        .subquery("comment_stats")
    )

    first_post = aliased(Post, name="first_post")
    author = aliased(User, name="author")
    reply = aliased(Post, name="reply")

    threads_amount = (
        select(func.count(reply.id))
        .where(reply.parent_post == first_post.id)
        .correlate(first_post)
        .scalar_subquery()
    )

    if viewer_id is None:
        friend: ColumnElement[bool] = false()
        is_self: ColumnElement[bool] = false()
    else:
        # Only the viewer -> author edge counts; friendship is not symmetric.
        friend = exists().where(
            Friend.user_id == viewer_id,
            Friend.friend_id == first_post.author,
        )
        is_self = func.coalesce(first_post.author == viewer_id, false())

    is_new = (
        _new_to_viewer(
            first_post.author, first_post.created, board_threads.c.cutoff_time, viewer_id
        )
        == _ONE
    )

    last_activity = greatest(
        post_stats.c.first_post_time,
        post_stats.c.last_post_time,
        comment_stats.c.last_comment_time,
    )

    if cursor.thread_id is None:
        in_page = last_activity <= cursor.last_activity
    else:
        in_page = or_(
            last_activity < cursor.last_activity,
            and_(
                last_activity == cursor.last_activity,
                board_threads.c.thread_id <= cursor.thread_id,
            ),
        )

    return (
        select(
            board_threads.c.thread_id.label("thread_db_id"),
            board_threads.c.thread_string_id.label("thread_id"),
            first_post.string_id.label("post_id"),
            first_post.author.label("user_id"),
            author.username.label("username"),
            author.avatar_reference_id.label("user_avatar"),
            SecretIdentity.display_name.label("secret_identity"),
            SecretIdentity.avatar_reference_id.label("secret_avatar"),
            first_post.created.label("created"),
            first_post.content.label("content"),
            func.coalesce(post_stats.c.posts_amount, _ZERO).label("posts_amount"),
            func.coalesce(threads_amount, _ZERO).label("threads_amount"),
            func.coalesce(comment_stats.c.comments_amount, _ZERO).label("comments_amount"),
            func.coalesce(post_stats.c.new_posts_amount, _ZERO).label("new_posts_amount"),
            func.coalesce(comment_stats.c.new_comments_amount, _ZERO).label(
                "new_comments_amount"
            ),
            last_activity.label("last_activity"),
            comment_stats.c.last_comment_time.label("last_comment"),
            friend.label("friend"),
            is_self.label("is_self"),
            is_new.label("is_new"),
        )
        .select_from(board_threads)
        .outerjoin(post_stats, post_stats.c.thread_id == board_threads.c.thread_id)
        .outerjoin(comment_stats, comment_stats.c.thread_id == board_threads.c.thread_id)
        .outerjoin(first_post, first_post.id == board_threads.c.first_post_id)
        .outerjoin(author, author.id == first_post.author)
        .outerjoin(
            UserThreadIdentity,
            and_(
                UserThreadIdentity.thread_id == board_threads.c.thread_id,
                UserThreadIdentity.user_id == first_post.author,
            ),
        )
        .outerjoin(SecretIdentity, SecretIdentity.id == UserThreadIdentity.identity_id)
        .where(in_page)
        # Thread id breaks ties so equal timestamps still page deterministically.
        .order_by(last_activity.desc(), board_threads.c.thread_id.desc())
        .limit(limit)
    )


async def _get_board_id(db: AsyncSession, slug: str) -> int | None:
    result = await db.execute(select(Board.id).where(Board.slug == slug))
    return result.scalar_one_or_none()


async def get_board_activity_by_slug(
    db: AsyncSession,
    board_slug: str,
    firebase_id: str | None = None,
    cursor: ActivityCursor | datetime | None = None,
    page_size: int = 10,
) -> list[ThreadActivity]:
    """Return up to `page_size + 1` threads of the board, most recently active first.

    The extra row only tells the caller that another page exists; its position
    is the cursor of that page. Unknown boards and viewers are not errors: the
    former yield an empty list, the latter are treated as logged out.

    Raises InvalidPaginationError for a non-positive page size or a cursor that
    is not a timestamp.
    """
    validate_page_size(page_size)
    if cursor is None:
        cursor = ActivityCursor(utcnow())
    elif isinstance(cursor, datetime):
        cursor = ActivityCursor(as_naive_utc(cursor))
    elif isinstance(cursor, ActivityCursor):
        cursor = ActivityCursor(as_naive_utc(cursor.last_activity), cursor.thread_id)
    else:
        raise InvalidPaginationError(f"Invalid cursor: {cursor!r}")

    board_id = await _get_board_id(db, board_slug)
    if board_id is None:
        logger.debug("Board %s not found; returning empty activity", board_slug)
        return []
    viewer_id = await get_user_id_by_firebase_id(db, firebase_id)

    query = build_board_activity_query(board_id, viewer_id, cursor, page_size + 1)
    rows = (await db.execute(query)).mappings().all()
    return [
        ThreadActivity(
            **{
                **row,
                "friend": bool(row["friend"]),
                "is_self": bool(row["is_self"]),
                "is_new": bool(row["is_new"]),
            }
        )
        for row in rows
    ]


# ===========================================================================
# Board details
# ===========================================================================


async def _get_descriptions(db: AsyncSession, board_id: int) -> list[BoardDescription]:
    sections = list(
        (
            await db.execute(
                select(BoardDescriptionSection)
                .where(BoardDescriptionSection.board_id == board_id)
                .order_by(BoardDescriptionSection.id)
            )
        )
        .scalars()
        .all()
    )
    if not sections:
        return []

    categories: dict[int, list[str]] = {}
    rows = await db.execute(
        select(BoardDescriptionSectionCategory.section_id, Category.category)
        .join(Category, Category.id == BoardDescriptionSectionCategory.category_id)
        .where(BoardDescriptionSectionCategory.section_id.in_([s.id for s in sections]))
        .order_by(Category.category)
    )
    for section_id, category in rows.all():
        categories.setdefault(section_id, []).append(category)

    return [
        BoardDescription(
            id=section.string_id,
            index=section.index,
            title=section.title,
            description=section.description,
            type=section.type,
            categories=(
                categories.get(section.id, [])
                if section.type == DescriptionSectionType.CATEGORY_FILTER
                else None
            ),
        )
        for section in sections
    ]


async def _get_viewer_roles(db: AsyncSession, board_id: int, viewer_id: int) -> list[Role]:
    """Board role first, then the realm-wide role."""
    board_roles = await db.execute(
        select(Role)
        .join(BoardUserRole, BoardUserRole.role_id == Role.id)
        .where(BoardUserRole.user_id == viewer_id, BoardUserRole.board_id == board_id)
    )
    realm_roles = await db.execute(
        select(Role)
        .join(RealmUserRole, RealmUserRole.role_id == Role.id)
        .where(RealmUserRole.user_id == viewer_id)
    )
    roles: list[Role] = []
    for role in [*board_roles.scalars().all(), *realm_roles.scalars().all()]:
        if all(role.id != seen.id for seen in roles):
            roles.append(role)
    return roles


def _board_permissions(roles: list[Role]) -> list[RolePermission]:
    granted = {p for role in roles for p in role.permissions or []}
    if RolePermission.ALL.value in granted:
        return list(BOARD_PERMISSIONS)
    return [p for p in BOARD_PERMISSIONS if p.value in granted]


def _posting_identities(roles: list[Role]) -> list[PostingIdentity]:
    allowed = {RolePermission.ALL.value, RolePermission.POST_AS_ROLE.value}
    return [
        PostingIdentity(
            id=role.string_id, name=role.name, avatar_reference_id=role.avatar_reference_id
        )
        for role in roles
        if allowed.intersection(role.permissions or [])
    ]


async def _get_pinned_order(db: AsyncSession, board_id: int, viewer_id: int) -> int | None:
    pinned = await db.execute(
        select(UserPinnedBoard.board_id)
        .where(UserPinnedBoard.user_id == viewer_id)
        .order_by(UserPinnedBoard.id)
    )
    for position, pinned_board_id in enumerate(pinned.scalars().all(), start=1):
        if pinned_board_id == board_id:
            return position
    return None


async def get_board_by_slug(
    db: AsyncSession,
    slug: str,
    firebase_id: str | None = None,
) -> BoardDetails | None:
    """Board metadata plus the viewer's relationship to it; None if no such board."""
    board = (await db.execute(select(Board).where(Board.slug == slug))).scalar_one_or_none()
    if board is None:
        return None

    restriction = await db.get(BoardRestriction, board.id)
    descriptions = await _get_descriptions(db, board.id)

    muted = False
    pinned_order: int | None = None
    roles: list[Role] = []
    viewer_id = await get_user_id_by_firebase_id(db, firebase_id)
    if viewer_id is not None:
        muted = (
            await db.execute(
                select(
                    exists().where(
                        UserMutedBoard.user_id == viewer_id,
                        UserMutedBoard.board_id == board.id,
                    )
                )
            )
        ).scalar_one()
        pinned_order = await _get_pinned_order(db, board.id, viewer_id)
        roles = await _get_viewer_roles(db, board.id, viewer_id)

    return BoardDetails(
        slug=board.slug,
        tagline=board.tagline,
        avatar_reference_id=board.avatar_reference_id,
        settings=board.settings or {},
        descriptions=descriptions,
        muted=bool(muted),
        pinned_order=pinned_order,
        permissions=_board_permissions(roles),
        posting_identities=_posting_identities(roles),
        logged_out_restrictions=list(restriction.logged_out_restrictions) if restriction else [],
        logged_in_base_restrictions=(
            list(restriction.logged_in_base_restrictions) if restriction else []
        ),
    )
