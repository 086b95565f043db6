from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.database.postgres import Base
from shared.utils.clock import utcnow

from .enums import AnonymityType, anonymity_type_enum
from .types import BigIntId


class Comment(Base):
    __tablename__ = "comments"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    string_id: Mapped[str] = mapped_column(Text, nullable=False)
    # Denormalised; a comment belongs to the thread of its parent post
    parent_thread: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("threads.id", ondelete="RESTRICT"), nullable=False
    )
    parent_post: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("posts.id", ondelete="RESTRICT"), nullable=False
    )
    parent_comment: Mapped[int | None] = mapped_column(
        BigIntId, ForeignKey("comments.id", ondelete="RESTRICT"), nullable=True
    )
    chain_parent_comment: Mapped[int | None] = mapped_column(
        BigIntId, ForeignKey("comments.id", ondelete="RESTRICT"), nullable=True
    )
    author: Mapped[int | None] = mapped_column(
        BigIntId, ForeignKey("users.id", ondelete="RESTRICT"), nullable=True
    )
    # UTC
    created: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    image_reference_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_deleted: Mapped[bool | None] = mapped_column(Boolean, nullable=True, default=False)
    anonymity_type: Mapped[AnonymityType] = mapped_column(anonymity_type_enum, nullable=False)

    post = relationship("Post", back_populates="comments", lazy="noload")

    __table_args__ = (
        Index("comments_string_id", "string_id"),
        Index("comments_parent_thread", "parent_thread"),
        Index("comments_parent_post", "parent_post"),
        Index("comments_author", "author"),
    )
