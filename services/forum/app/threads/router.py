from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import get_current_viewer
from app.threads import controller
from app.threads.schemas import ThreadIdentityResponse, ThreadResponse

router = APIRouter(prefix="/threads", tags=["Threads"])


@router.get(
    "/{thread_id}",
    response_model=ThreadResponse,
    summary="Get a thread",
    description="Returns the thread with its posts and their comments, oldest first.",
)
async def get_thread(
    thread_id: str,
    db: AsyncSession = Depends(get_db),
) -> ThreadResponse:
    return await controller.get_thread(thread_id, db)


@router.get(
    "/{thread_id}/identities",
    response_model=list[ThreadIdentityResponse],
    summary="Secret identities in a thread",
)
async def get_thread_identities(
    thread_id: str,
    db: AsyncSession = Depends(get_db),
) -> list[ThreadIdentityResponse]:
    return await controller.get_thread_identities(thread_id, db)


@router.post(
    "/{thread_id}/visits",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Mark a thread as visited",
    description=(
        "Records that the caller has seen the thread up to now. Posts and comments "
        "created before this moment stop counting as new in the board activity feed."
    ),
)
async def mark_visited(
    thread_id: str,
    firebase_id: str = Depends(get_current_viewer),
    db: AsyncSession = Depends(get_db),
) -> None:
    await controller.mark_visited(thread_id, firebase_id, db)
