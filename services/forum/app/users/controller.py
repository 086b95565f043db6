from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import NotFoundError
from app.users import service


async def dismiss_notifications(firebase_id: str, db: AsyncSession) -> None:
    if not await service.dismiss_notifications(db, firebase_id):
        raise NotFoundError("User")
