from datetime import datetime

from sqlalchemy import DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from shared.database.postgres import Base
from shared.utils.clock import utcnow

from .types import BigIntId


class UserThreadLastVisit(Base):
    __tablename__ = "user_thread_last_visits"

    user_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("users.id", ondelete="RESTRICT"), primary_key=True
    )
    thread_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("threads.id", ondelete="RESTRICT"), primary_key=True
    )
    last_visit_time: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)


class DismissNotificationsRequest(Base):
    """Latest "mark everything as read" request of a user, across all threads."""

    __tablename__ = "dismiss_notifications_requests"

    user_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("users.id", ondelete="RESTRICT"), primary_key=True
    )
    dismiss_request_time: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )
