from sqlalchemy import ForeignKey, Index, Text
from sqlalchemy.orm import Mapped, mapped_column

from shared.database.postgres import Base

from .types import BigIntId, TextArray


class Role(Base):
    __tablename__ = "roles"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    string_id: Mapped[str] = mapped_column(Text, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    avatar_reference_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    color: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # RolePermission values
    permissions: Mapped[list[str]] = mapped_column(TextArray, nullable=False, default=list)

    __table_args__ = (Index("roles_string_id", "string_id", unique=True),)


class BoardUserRole(Base):
    __tablename__ = "board_user_roles"

    user_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("users.id", ondelete="RESTRICT"), primary_key=True
    )
    board_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("boards.id", ondelete="RESTRICT"), primary_key=True
    )
    role_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("roles.id", ondelete="RESTRICT"), nullable=False
    )


class RealmUserRole(Base):
    __tablename__ = "realm_user_roles"

    user_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("users.id", ondelete="RESTRICT"), primary_key=True
    )
    role_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("roles.id", ondelete="RESTRICT"), nullable=False
    )
