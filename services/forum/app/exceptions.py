"""Shared HTTP exception classes reused across all forum service domains."""

from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    def __init__(self, resource: str = "Resource") -> None:
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource} not found.",
        )


class UnprocessableError(HTTPException):
    def __init__(self, detail: str = "Unprocessable request.") -> None:
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=detail,
        )


class InvalidPaginationError(ValueError):
    """Raised before any query runs when a page size or cursor is malformed."""
