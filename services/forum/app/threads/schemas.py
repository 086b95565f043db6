"""Threads domain Pydantic V2 schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict

from app.models.enums import AnonymityType, PostType


class ThreadCommentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    parent_comment: str | None
    secret_identity: str | None
    secret_avatar: str | None
    created: datetime
    content: str
    image_reference_id: str | None
    is_deleted: bool
    anonymity_type: AnonymityType


class ThreadPostResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    parent_post: str | None
    secret_identity: str | None
    secret_avatar: str | None
    created: datetime
    content: str
    type: PostType
    whisper_tags: list[str]
    is_deleted: bool
    anonymity_type: AnonymityType
    comments: list[ThreadCommentResponse] | None


class ThreadResponse(BaseModel):
    """A thread with every post and comment, oldest first."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    board_slug: str
    options: dict[str, Any]
    posts: list[ThreadPostResponse]


class ThreadIdentityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: int
    username: str | None
    user_avatar: str | None
    display_name: str
    secret_avatar: str | None
