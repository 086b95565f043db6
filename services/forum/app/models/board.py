from sqlalchemy import BigInteger, ForeignKey, Index, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.database.postgres import Base

from .enums import DescriptionSectionType, description_section_type_enum
from .types import BigIntId, JsonDocument, TextArray


class Board(Base):
    __tablename__ = "boards"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    # Textual id used in urls, e.g. "main", "anime", "memes"
    slug: Mapped[str] = mapped_column(Text, nullable=False)
    tagline: Mapped[str] = mapped_column(Text, nullable=False)
    avatar_reference_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    settings: Mapped[dict] = mapped_column(JsonDocument, nullable=False, default=dict)

    description_sections = relationship(
        "BoardDescriptionSection", back_populates="board", lazy="noload"
    )

    __table_args__ = (Index("boards_string_id", "slug", unique=True),)


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    category: Mapped[str] = mapped_column(Text, nullable=False)

    __table_args__ = (Index("categories_category", "category", unique=True),)


class BoardDescriptionSection(Base):
    __tablename__ = "board_description_sections"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    string_id: Mapped[str] = mapped_column(Text, nullable=False)
    board_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("boards.id", ondelete="RESTRICT"), nullable=False
    )
    title: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    type: Mapped[DescriptionSectionType] = mapped_column(
        description_section_type_enum, nullable=False
    )
    index: Mapped[int] = mapped_column(BigInteger, nullable=False)

    board = relationship("Board", back_populates="description_sections", lazy="noload")

    __table_args__ = (
        Index("board_description_sections_board_id", "board_id"),
        Index("board_description_sections_string_id", "string_id"),
    )


class BoardDescriptionSectionCategory(Base):
    __tablename__ = "board_description_section_categories"

    section_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("board_description_sections.id", ondelete="RESTRICT"), primary_key=True
    )
    category_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("categories.id", ondelete="RESTRICT"), primary_key=True
    )


class BoardRestriction(Base):
    __tablename__ = "board_restrictions"

    board_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("boards.id", ondelete="RESTRICT"), primary_key=True
    )
    # RestrictionType values
    logged_out_restrictions: Mapped[list[str]] = mapped_column(
        TextArray, nullable=False, default=list
    )
    logged_in_base_restrictions: Mapped[list[str]] = mapped_column(
        TextArray, nullable=False, default=list
    )


class UserMutedBoard(Base):
    __tablename__ = "user_muted_boards"

    user_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("users.id", ondelete="RESTRICT"), primary_key=True
    )
    board_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("boards.id", ondelete="RESTRICT"), primary_key=True
    )


class UserPinnedBoard(Base):
    __tablename__ = "user_pinned_boards"

    # Insertion order of the pins doubles as their display order
    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )
    board_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("boards.id", ondelete="RESTRICT"), nullable=False
    )

    __table_args__ = (
        Index("user_pinned_boards_entry", "user_id", "board_id", unique=True),
    )
