from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Text
from sqlalchemy.orm import Mapped, mapped_column

from shared.database.postgres import Base
from shared.utils.clock import utcnow

from .types import BigIntId


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    # Id issued by the external auth provider (firebase)
    firebase_id: Mapped[str] = mapped_column(Text, nullable=False)
    # Username and avatar are optional; clients fall back to defaults
    username: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Reference to the image on the external storage provider
    avatar_reference_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    invited_by: Mapped[int | None] = mapped_column(
        BigIntId, ForeignKey("users.id", ondelete="RESTRICT"), nullable=True
    )
    created_on: Mapped[datetime | None] = mapped_column(DateTime, nullable=True, default=utcnow)

    __table_args__ = (Index("users_firebase_id", "firebase_id", unique=True),)
