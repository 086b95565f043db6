from datetime import datetime, timezone


def utcnow() -> datetime:
    """Current UTC time without tzinfo.

    Forum tables store UTC in ``timestamp`` (without time zone) columns, and
    asyncpg refuses to bind aware datetimes to them.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_naive_utc(dt: datetime) -> datetime:
    """Convert an aware datetime to naive UTC; naive values are taken as UTC already."""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)
