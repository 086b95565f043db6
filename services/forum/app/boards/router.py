from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.boards import controller
from app.boards.schemas import BoardActivityResponse, BoardResponse
from app.config import Settings
from app.database import get_db
from app.dependencies import get_optional_viewer, get_settings

router = APIRouter(prefix="/boards", tags=["Boards"])


@router.get(
    "/{slug}",
    response_model=BoardResponse,
    summary="Get a board",
    description=(
        "Returns board metadata, description sections and restrictions. "
        "For logged-in viewers also whether they muted or pinned the board, their "
        "board permissions and the roles they can post as. Returns 404 for unknown slugs."
    ),
)
async def get_board(
    slug: str,
    firebase_id: str | None = Depends(get_optional_viewer),
    db: AsyncSession = Depends(get_db),
) -> BoardResponse:
    return await controller.get_board(slug, firebase_id, db)


@router.get(
    "/{slug}/activity",
    response_model=BoardActivityResponse,
    summary="Board activity feed",
    description=(
        "Threads of the board ordered by latest post or comment, newest first. "
        "Logged-in viewers get counts of posts and comments by others created since "
        "they last visited the thread or dismissed their notifications. "
        "Unknown boards return an empty page. Cursor-based pagination via `cursor`."
    ),
)
async def get_board_activity(
    slug: str,
    cursor: str | None = Query(
        default=None,
        description=(
            "Opaque cursor returned by the previous page, or an ISO-8601 timestamp "
            "bounding the last activity of returned threads (inclusive)."
        ),
    ),
    page_size: int | None = Query(default=None, ge=1, description="Threads per page."),
    firebase_id: str | None = Depends(get_optional_viewer),
    settings: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db),
) -> BoardActivityResponse:
    size = min(page_size or settings.activity_page_size, settings.activity_max_page_size)
    return await controller.get_board_activity(
        slug, firebase_id, db, page_size=size, cursor=cursor
    )
