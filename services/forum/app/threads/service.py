"""Threads service — thread lookup and visit recording. No FastAPI imports."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.board import Board
from app.models.comment import Comment
from app.models.enums import AnonymityType, PostType
from app.models.post import Post
from app.models.thread import SecretIdentity, Thread, UserThreadIdentity
from app.models.user import User
from app.models.visit import UserThreadLastVisit
from app.users.service import get_user_id_by_firebase_id
from shared.database.upsert import upsert
from shared.utils.clock import as_naive_utc, utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ThreadIdentity:
    user_id: int
    username: str | None
    user_avatar: str | None
    display_name: str
    secret_avatar: str | None


@dataclass(frozen=True)
class ThreadComment:
    id: str
    parent_comment: str | None
    author: int | None
    secret_identity: str | None
    secret_avatar: str | None
    created: datetime
    content: str
    image_reference_id: str | None
    is_deleted: bool
    anonymity_type: AnonymityType


@dataclass(frozen=True)
class ThreadPost:
    id: str
    parent_post: str | None
    author: int
    secret_identity: str | None
    secret_avatar: str | None
    created: datetime
    content: str
    type: PostType
    whisper_tags: list[str]
    is_deleted: bool
    anonymity_type: AnonymityType
    # None rather than empty when the post has no comments
    comments: list[ThreadComment] | None


@dataclass(frozen=True)
class ThreadDetails:
    id: str
    board_slug: str
    options: dict
    posts: list[ThreadPost]


async def _get_thread_id(db: AsyncSession, thread_string_id: str) -> int | None:
    result = await db.execute(select(Thread.id).where(Thread.string_id == thread_string_id))
    return result.scalars().first()


async def _get_secret_identities(
    db: AsyncSession, thread_id: int
) -> dict[int, SecretIdentity]:
    rows = await db.execute(
        select(UserThreadIdentity.user_id, SecretIdentity)
        .join(SecretIdentity, SecretIdentity.id == UserThreadIdentity.identity_id)
        .where(UserThreadIdentity.thread_id == thread_id)
    )
    return {user_id: identity for user_id, identity in rows.all()}


async def get_thread_by_string_id(
    db: AsyncSession, thread_string_id: str
) -> ThreadDetails | None:
    """A thread with its posts and their comments, oldest first; None if not found."""
    row = (
        await db.execute(
            select(Thread, Board.slug)
            .join(Board, Board.id == Thread.parent_board)
            .where(Thread.string_id == thread_string_id)
        )
    ).first()
    if row is None:
        logger.debug("Thread %s not found", thread_string_id)
        return None
    thread, board_slug = row

    posts = list(
        (
            await db.execute(
                select(Post)
                .where(Post.parent_thread == thread.id)
                .order_by(Post.created, Post.id)
            )
        )
        .scalars()
        .all()
    )
    comments: list[Comment] = []
    if posts:
        comments = list(
            (
                await db.execute(
                    select(Comment)
                    .where(Comment.parent_post.in_([p.id for p in posts]))
                    .order_by(Comment.created, Comment.id)
                )
            )
            .scalars()
            .all()
        )
    identities = await _get_secret_identities(db, thread.id)

    post_string_ids = {p.id: p.string_id for p in posts}
    comment_string_ids = {c.id: c.string_id for c in comments}

    comments_by_post: dict[int, list[ThreadComment]] = {}
    for comment in comments:
        identity = identities.get(comment.author) if comment.author is not None else None
        comments_by_post.setdefault(comment.parent_post, []).append(
            ThreadComment(
                id=comment.string_id,
                parent_comment=comment_string_ids.get(comment.parent_comment),
                author=comment.author,
                secret_identity=identity.display_name if identity else None,
                secret_avatar=identity.avatar_reference_id if identity else None,
                created=comment.created,
                content=comment.content,
                image_reference_id=comment.image_reference_id,
                is_deleted=bool(comment.is_deleted),
                anonymity_type=comment.anonymity_type,
            )
        )

    thread_posts = []
    for post in posts:
        identity = identities.get(post.author)
        thread_posts.append(
            ThreadPost(
                id=post.string_id,
                parent_post=post_string_ids.get(post.parent_post),
                author=post.author,
                secret_identity=identity.display_name if identity else None,
                secret_avatar=identity.avatar_reference_id if identity else None,
                created=post.created,
                content=post.content,
                type=post.type,
                whisper_tags=list(post.whisper_tags or []),
                is_deleted=bool(post.is_deleted),
                anonymity_type=post.anonymity_type,
                comments=comments_by_post.get(post.id),
            )
        )

    return ThreadDetails(
        id=thread.string_id,
        board_slug=board_slug,
        options=thread.options or {},
        posts=thread_posts,
    )


async def get_thread_identities_by_string_id(
    db: AsyncSession, thread_string_id: str
) -> list[ThreadIdentity] | None:
    """Secret identities assumed in a thread, by user id; None if the thread is unknown."""
    thread_id = await _get_thread_id(db, thread_string_id)
    if thread_id is None:
        return None
    rows = await db.execute(
        select(
            User.id,
            User.username,
            User.avatar_reference_id,
            SecretIdentity.display_name,
            SecretIdentity.avatar_reference_id,
        )
        .select_from(UserThreadIdentity)
        .join(User, User.id == UserThreadIdentity.user_id)
        .join(SecretIdentity, SecretIdentity.id == UserThreadIdentity.identity_id)
        .where(UserThreadIdentity.thread_id == thread_id)
        .order_by(User.id)
    )
    return [
        ThreadIdentity(
            user_id=user_id,
            username=username,
            user_avatar=user_avatar,
            display_name=display_name,
            secret_avatar=secret_avatar,
        )
        for user_id, username, user_avatar, display_name, secret_avatar in rows.all()
    ]


async def mark_thread_visited(
    db: AsyncSession,
    firebase_id: str,
    thread_string_id: str,
    at: datetime | None = None,
) -> bool:
    """Move the user's last visit of the thread to `at` (default: now).

    Returns False when the user or the thread does not exist.
    """
    user_id = await get_user_id_by_firebase_id(db, firebase_id)
    if user_id is None:
        return False
    thread_id = await _get_thread_id(db, thread_string_id)
    if thread_id is None:
        logger.debug("Thread %s not found; visit not recorded", thread_string_id)
        return False
    visited_at = at or utcnow()

    await upsert(
        db,
        UserThreadLastVisit,
        {"user_id": user_id, "thread_id": thread_id, "last_visit_time": as_naive_utc(visited_at)},
        conflict_columns=("user_id", "thread_id"),
        update_columns=("last_visit_time",),
    )
    return True
