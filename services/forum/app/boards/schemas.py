"""Boards domain Pydantic V2 schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import DescriptionSectionType, RolePermission
from app.pagination import CursorPage


class IdentitySummary(BaseModel):
    """A name and avatar shown next to content."""

    name: str | None
    avatar_reference_id: str | None = None


class ThreadActivityItem(BaseModel):
    """A thread card in a board's activity feed.

    `secret_identity` is the pseudonym the first post's author uses in this
    thread. `user_identity` is their real profile and is only filled in for the
    author themself and for viewers who list the author as a friend.
    """

    model_config = ConfigDict(populate_by_name=True)

    thread_id: str
    post_id: str = Field(description="String id of the thread's first post.")
    secret_identity: IdentitySummary
    user_identity: IdentitySummary | None = None
    created: datetime = Field(description="Creation time of the first post (UTC).")
    content: str
    posts_amount: int = Field(description="Posts in the thread, first post included.")
    threads_amount: int = Field(description="Direct replies to the first post.")
    comments_amount: int
    new_posts_amount: int = Field(description="Posts by others since the viewer's cutoff.")
    new_comments_amount: int = Field(
        description="Comments by others since the viewer's cutoff."
    )
    last_activity: datetime = Field(description="Latest post or comment time (UTC).")
    last_comment: datetime | None = None
    friend: bool = Field(description="The viewer lists the first post's author as a friend.")
    is_self: bool = Field(alias="self", description="The viewer wrote the first post.")
    is_new: bool = Field(description="The first post itself is new to the viewer.")


class BoardActivityResponse(CursorPage[ThreadActivityItem]):
    """Cursor-paginated activity feed of a board, most recently active thread first."""


class BoardDescriptionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    index: int
    title: str | None
    description: str | None
    type: DescriptionSectionType
    categories: list[str] | None = Field(
        default=None, description="Category names; only set for category_filter sections."
    )


class PostingIdentityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    avatar_reference_id: str | None


class BoardResponse(BaseModel):
    """Board metadata and the viewer's relationship to the board."""

    model_config = ConfigDict(from_attributes=True)

    slug: str
    tagline: str
    avatar_reference_id: str | None
    settings: dict[str, Any]
    descriptions: list[BoardDescriptionResponse]
    muted: bool
    pinned_order: int | None = Field(
        default=None, description="1-based position among the viewer's pinned boards."
    )
    permissions: list[RolePermission]
    posting_identities: list[PostingIdentityResponse]
    logged_out_restrictions: list[str]
    logged_in_base_restrictions: list[str]
