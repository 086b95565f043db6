from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import NotFoundError
from app.threads import service
from app.threads.schemas import ThreadIdentityResponse, ThreadResponse


async def get_thread(thread_id: str, db: AsyncSession) -> ThreadResponse:
    thread = await service.get_thread_by_string_id(db, thread_id)
    if thread is None:
        raise NotFoundError("Thread")
    return ThreadResponse.model_validate(thread)


async def get_thread_identities(
    thread_id: str, db: AsyncSession
) -> list[ThreadIdentityResponse]:
    identities = await service.get_thread_identities_by_string_id(db, thread_id)
    if identities is None:
        raise NotFoundError("Thread")
    return [ThreadIdentityResponse.model_validate(i) for i in identities]


async def mark_visited(thread_id: str, firebase_id: str, db: AsyncSession) -> None:
    # Unknown users and unknown threads both read as a missing thread to the caller.
    if not await service.mark_thread_visited(db, firebase_id, thread_id):
        raise NotFoundError("Thread")
