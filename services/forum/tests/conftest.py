from collections.abc import AsyncGenerator, Callable
from dataclasses import dataclass
from datetime import datetime

import jwt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import Settings
from app.database import get_db
from app.dependencies import get_settings
from app.main import app
from app.models import (
    Board,
    BoardDescriptionSection,
    BoardDescriptionSectionCategory,
    BoardRestriction,
    BoardUserRole,
    Category,
    Comment,
    Friend,
    Post,
    RealmUserRole,
    Role,
    SecretIdentity,
    Thread,
    User,
    UserMutedBoard,
    UserPinnedBoard,
    UserThreadIdentity,
)
from app.models.enums import AnonymityType, DescriptionSectionType
from shared.database.postgres import Base, get_async_engine

TEST_DATABASE_URL = "sqlite+aiosqlite://"
TEST_JWT_SECRET = "forum-test-secret-with-at-least-32-bytes"


@dataclass(frozen=True)
class GoreBoard:
    """Ids of the rows seeded by the `gore_board` fixture."""

    board_id: int
    # Threads, most recently active first
    comments_on_reply_thread: str
    murder_scene_thread: str
    favorite_character_thread: str


def at(month: int, day: int, hour: int, minute: int = 0) -> datetime:
    return datetime(2020, month, day, hour, minute)


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    engine = get_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def gore_board(db_session: AsyncSession) -> GoreBoard:
    """Three threads on the "gore" board plus an empty "anime" board.

    bobatan lists oncest5evah as a friend; the edge is one-way.
    """
    db_session.add_all(
        [
            User(id=1, firebase_id="fb_bobatan", username="bobatan"),
            User(id=2, firebase_id="fb_jersey", username="jersey_devil", avatar_reference_id="jersey.png"),
            User(id=3, firebase_id="fb_oncest", username="oncest5evah"),
            User(id=4, firebase_id="fb_lurker", username="lurker"),
            Friend(user_id=1, friend_id=3),
            Board(id=1, slug="anime", tagline="Anime talk"),
            Board(id=2, slug="gore", tagline="Blood! Blood! Blood!", settings={"accent": "red"}),
            SecretIdentity(id=1, display_name="Sunglasses Raccoon"),
            SecretIdentity(id=2, display_name="Evil Moth", avatar_reference_id="moth.png"),
            SecretIdentity(id=3, display_name="Old Time-y Anon"),
            SecretIdentity(id=4, display_name="Nervous Ferret"),
            Thread(id=1, string_id="thread-favorite-character", parent_board=2),
            Thread(id=2, string_id="thread-murder-scene", parent_board=2),
            Thread(id=3, string_id="thread-comments-on-reply", parent_board=2),
            UserThreadIdentity(thread_id=1, user_id=1, identity_id=1),
            UserThreadIdentity(thread_id=1, user_id=3, identity_id=2),
            UserThreadIdentity(thread_id=2, user_id=3, identity_id=3),
            UserThreadIdentity(thread_id=3, user_id=2, identity_id=4),
            # Thread 1: last activity are the comments on the reply, 2020-04-30 05:52
            Post(
                id=1, string_id="post-ocelot", parent_thread=1, author=1,
                created=at(4, 30, 5, 42), content="Revolver Ocelot",
                whisper_tags=["fight me on this"], anonymity_type=AnonymityType.STRANGERS,
            ),
            Post(
                id=2, string_id="post-kermit", parent_thread=1, parent_post=1, author=3,
                created=at(4, 30, 5, 47), content="Kermit the Frog",
                anonymity_type=AnonymityType.EVERYONE,
            ),
            # Thread 2: no comments, last activity 2020-05-01 10:05
            Post(
                id=3, string_id="post-evil-within", parent_thread=2, author=3,
                created=at(5, 1, 10, 0), content="Everything in The Evil Within tbh",
                anonymity_type=AnonymityType.STRANGERS,
            ),
            Post(
                id=4, string_id="post-leon", parent_thread=2, parent_post=3, author=2,
                created=at(5, 1, 10, 5), content="Leon Kennedy!",
                anonymity_type=AnonymityType.STRANGERS,
            ),
            # Thread 3: the latest comment hangs off the reply, 2020-05-02 12:00
            Post(
                id=5, string_id="post-slasher", parent_thread=3, author=2,
                created=at(4, 29, 8, 0), content="Best slasher?",
                anonymity_type=AnonymityType.STRANGERS,
            ),
            Post(
                id=6, string_id="post-scream", parent_thread=3, parent_post=5, author=1,
                created=at(4, 29, 9, 0), content="Scream",
                anonymity_type=AnonymityType.STRANGERS,
            ),
            Comment(
                id=1, string_id="comment-me-too", parent_thread=1, parent_post=2, author=1,
                created=at(4, 30, 5, 52), content="OMG ME TOO",
                anonymity_type=AnonymityType.STRANGERS,
            ),
            Comment(
                id=2, string_id="comment-friends", parent_thread=1, parent_post=2, author=1,
                created=at(4, 30, 5, 52), content="friends!!!!!",
                parent_comment=1, anonymity_type=AnonymityType.STRANGERS,
            ),
            Comment(
                id=3, string_id="comment-ghostface", parent_thread=3, parent_post=6, author=3,
                created=at(5, 2, 12, 0), content="Ghostface forever",
                anonymity_type=AnonymityType.EVERYONE,
            ),
            # Board details
            Category(id=1, category="blood"),
            Category(id=2, category="anime"),
            BoardDescriptionSection(
                id=1, string_id="section-rules", board_id=2, title="Rules",
                description="Be nice.", type=DescriptionSectionType.TEXT, index=1,
            ),
            BoardDescriptionSection(
                id=2, string_id="section-filter", board_id=2, title="Browse",
                type=DescriptionSectionType.CATEGORY_FILTER, index=2,
            ),
            BoardDescriptionSectionCategory(section_id=2, category_id=1),
            BoardDescriptionSectionCategory(section_id=2, category_id=2),
            BoardRestriction(
                board_id=2,
                logged_out_restrictions=["lock_access"],
                logged_in_base_restrictions=[],
            ),
            Role(id=1, string_id="role-gore-czar", name="GoreCzar", permissions=["all"]),
            Role(
                id=2, string_id="role-owner", name="The Owner", avatar_reference_id="owner.png",
                permissions=["edit_category_tags", "post_as_role"],
            ),
            Role(id=3, string_id="role-janitor", name="Janitor", permissions=["edit_content_notices"]),
            BoardUserRole(user_id=1, board_id=2, role_id=1),
            RealmUserRole(user_id=3, role_id=2),
            BoardUserRole(user_id=2, board_id=2, role_id=3),
            UserMutedBoard(user_id=2, board_id=2),
            UserPinnedBoard(id=1, user_id=1, board_id=1),
            UserPinnedBoard(id=2, user_id=1, board_id=2),
        ]
    )
    await db_session.flush()
    return GoreBoard(
        board_id=2,
        comments_on_reply_thread="thread-comments-on-reply",
        murder_scene_thread="thread-murder-scene",
        favorite_character_thread="thread-favorite-character",
    )


@pytest.fixture
def auth_headers() -> Callable[[str], dict[str, str]]:
    def _headers(firebase_id: str) -> dict[str, str]:
        token = jwt.encode({"sub": firebase_id}, TEST_JWT_SECRET, algorithm="HS256")
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def settings() -> Settings:
    return Settings(
        forum_database_url=TEST_DATABASE_URL,
        jwt_secret=TEST_JWT_SECRET,
        jwt_algorithm="HS256",
        activity_page_size=10,
        activity_max_page_size=50,
    )


@pytest_asyncio.fixture
async def async_client(
    db_session: AsyncSession, settings: Settings
) -> AsyncGenerator[AsyncClient, None]:
    async def _get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_settings] = lambda: settings
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()
