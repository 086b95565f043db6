from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import get_current_viewer
from app.users import controller

router = APIRouter(prefix="/users", tags=["Users"])


@router.post(
    "/me/notifications/dismiss",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Dismiss all my notifications",
    description=(
        "Marks every post and comment created so far as seen, on every board. "
        "Threads visited later than this keep their own, more recent, cutoff."
    ),
)
async def dismiss_notifications(
    firebase_id: str = Depends(get_current_viewer),
    db: AsyncSession = Depends(get_db),
) -> None:
    await controller.dismiss_notifications(firebase_id, db)
