from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.database.postgres import Base
from shared.utils.clock import utcnow

from .enums import AnonymityType, PostType, anonymity_type_enum, post_type_enum
from .types import BigIntId, JsonDocument, TextArray


class Post(Base):
    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    string_id: Mapped[str] = mapped_column(Text, nullable=False)
    parent_thread: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("threads.id", ondelete="RESTRICT"), nullable=False
    )
    # Post this one replies to; null for the thread's first post
    parent_post: Mapped[int | None] = mapped_column(
        BigIntId, ForeignKey("posts.id", ondelete="RESTRICT"), nullable=True
    )
    author: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )
    # UTC
    created: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[PostType] = mapped_column(post_type_enum, nullable=False, default=PostType.TEXT)
    # Free-text tags that are not indexed
    whisper_tags: Mapped[list[str] | None] = mapped_column(TextArray, nullable=True)
    options: Mapped[dict] = mapped_column(JsonDocument, nullable=False, default=dict)
    # Posts are flagged rather than removed, for moderation
    is_deleted: Mapped[bool | None] = mapped_column(Boolean, nullable=True, default=False)
    anonymity_type: Mapped[AnonymityType] = mapped_column(anonymity_type_enum, nullable=False)

    thread = relationship("Thread", back_populates="posts", lazy="noload")
    comments = relationship("Comment", back_populates="post", lazy="noload")

    __table_args__ = (
        Index("posts_string_id", "string_id"),
        Index("posts_parent_thread", "parent_thread"),
        Index("posts_author", "author"),
    )
