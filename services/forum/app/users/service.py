"""Users service — viewer resolution and notification dismissal. No FastAPI imports."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.models.visit import DismissNotificationsRequest
from shared.database.upsert import upsert
from shared.utils.clock import as_naive_utc, utcnow

logger = logging.getLogger(__name__)


async def get_user_id_by_firebase_id(db: AsyncSession, firebase_id: str | None) -> int | None:
    """Resolve an external id to the internal user id; None when absent or unknown."""
    if firebase_id is None:
        return None
    result = await db.execute(select(User.id).where(User.firebase_id == firebase_id))
    user_id = result.scalar_one_or_none()
    if user_id is None:
        logger.debug("No user for firebase id %s; treating viewer as anonymous", firebase_id)
    return user_id


async def dismiss_notifications(
    db: AsyncSession,
    firebase_id: str,
    at: datetime | None = None,
) -> bool:
    """Record that the user has seen everything up to `at` (default: now).

    Returns False when the user does not exist.
    """
    user_id = await get_user_id_by_firebase_id(db, firebase_id)
    if user_id is None:
        return False
    dismissed_at = at or utcnow()

    await upsert(
        db,
        DismissNotificationsRequest,
        {"user_id": user_id, "dismiss_request_time": as_naive_utc(dismissed_at)},
        conflict_columns=("user_id",),
        update_columns=("dismiss_request_time",),
    )
    return True
