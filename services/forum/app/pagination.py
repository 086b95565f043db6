"""Keyset pagination for the board activity feed.

The activity feed is ordered by (last_activity DESC, thread id DESC). A cursor
points at the first row of the next page, so the next request keeps every
thread whose key is at or below it.
"""

import base64
import binascii
from dataclasses import dataclass
from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

from app.exceptions import InvalidPaginationError
from shared.utils.clock import as_naive_utc

T = TypeVar("T")


class CursorPage(BaseModel, Generic[T]):
    """Cursor-based paginated response.

    `next_cursor` is an opaque string encoding the next page's first (last_activity, thread).
    Pass it as the `cursor` query parameter to fetch the next page.
    """

    items: list[T]
    next_cursor: str | None = Field(
        default=None,
        description="Opaque cursor for the next page. Null when no more pages.",
    )
    has_more: bool = Field(description="True when additional pages exist.")


@dataclass(frozen=True)
class ActivityCursor:
    """Inclusive upper bound on a thread's position in the activity feed.

    Without `thread_id` every thread whose last activity is at or before
    `last_activity` qualifies.
    """

    last_activity: datetime
    thread_id: int | None = None


def encode_cursor(last_activity: datetime, thread_id: int) -> str:
    """Encode a (last_activity, thread id) pair into a URL-safe base64 cursor string."""
    raw = f"{as_naive_utc(last_activity).isoformat()}|{thread_id}"
    return base64.urlsafe_b64encode(raw.encode()).decode()


def decode_cursor(cursor: str) -> ActivityCursor:
    """Decode a cursor produced by `encode_cursor`, or a bare ISO-8601 timestamp.

    Raises InvalidPaginationError on anything else.
    """
    cursor = cursor.strip()
    if not cursor:
        raise InvalidPaginationError("Invalid cursor: empty value")
    try:
        raw = base64.urlsafe_b64decode(cursor.encode()).decode()
        dt_str, id_str = raw.split("|", 1)
        return ActivityCursor(as_naive_utc(datetime.fromisoformat(dt_str)), int(id_str))
    except (binascii.Error, UnicodeDecodeError, ValueError):
        pass
    try:
        return ActivityCursor(as_naive_utc(datetime.fromisoformat(cursor)))
    except ValueError as exc:
        raise InvalidPaginationError(f"Invalid cursor: {exc}") from exc


def validate_page_size(page_size: int) -> int:
    if isinstance(page_size, bool) or not isinstance(page_size, int) or page_size < 1:
        raise InvalidPaginationError(f"Invalid page size: {page_size!r}; expected a positive integer")
    return page_size
