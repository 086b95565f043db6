from sqlalchemy import CheckConstraint, ForeignKey, Index, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.database.postgres import Base

from .types import BigIntId, JsonDocument


class Thread(Base):
    __tablename__ = "threads"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    string_id: Mapped[str] = mapped_column(Text, nullable=False)
    parent_board: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("boards.id", ondelete="RESTRICT"), nullable=False
    )
    options: Mapped[dict] = mapped_column(JsonDocument, nullable=False, default=dict)

    posts = relationship("Post", back_populates="thread", lazy="noload")

    __table_args__ = (
        Index("threads_string_id", "string_id"),
        Index("threads_parent_board", "parent_board"),
    )


class SecretIdentity(Base):
    """A pseudonym users can assume. Identities are assigned per thread."""

    __tablename__ = "secret_identities"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    display_name: Mapped[str] = mapped_column(Text, nullable=False)
    # Null when the avatar is generated on the fly
    avatar_reference_id: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("secret_identities_display_name", "display_name", unique=True),
    )


class UserThreadIdentity(Base):
    """Identity (secret identity or role) a user posts under in a thread.

    Populated by the identity assignment subsystem; read-only here.
    """

    __tablename__ = "user_thread_identities"

    thread_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("threads.id"), primary_key=True
    )
    user_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("users.id", ondelete="RESTRICT"), primary_key=True
    )
    identity_id: Mapped[int | None] = mapped_column(
        BigIntId, ForeignKey("secret_identities.id", ondelete="RESTRICT"), nullable=True
    )
    role_id: Mapped[int | None] = mapped_column(
        BigIntId, ForeignKey("roles.id", ondelete="RESTRICT"), nullable=True
    )

    __table_args__ = (
        CheckConstraint(
            "identity_id IS NOT NULL OR role_id IS NOT NULL",
            name="user_thread_identities_identity_or_role",
        ),
        Index("user_thread_identities_thread_id", "thread_id"),
    )
