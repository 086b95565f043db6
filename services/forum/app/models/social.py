from sqlalchemy import ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column

from shared.database.postgres import Base

from .types import BigIntId


class Friend(Base):
    """Directed friendship edge: `user_id` lists `friend_id` as a friend.

    The relation is not symmetric. Mutual friends have one row in each direction.
    """

    __tablename__ = "friends"

    user_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("users.id", ondelete="RESTRICT"), primary_key=True
    )
    friend_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("users.id", ondelete="RESTRICT"), primary_key=True
    )

    __table_args__ = (Index("friends_user", "user_id"),)
