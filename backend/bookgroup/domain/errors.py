"""Custom exceptions for bookgroup services."""

from __future__ import annotations

from typing import Optional

from fastapi import status


class BookgroupError(Exception):
    """Base class for domain errors surfaced to API callers."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    detail: str = "bookgroup_error"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.detail)
        if detail:
            self.detail = detail


class NotFoundError(BookgroupError):
    """Raised when a book or member key is absent from its collection."""

    status_code = status.HTTP_404_NOT_FOUND
    detail = "not_found"


class ConflictError(BookgroupError):
    """Raised when the presented version token no longer matches the remote."""

    status_code = status.HTTP_409_CONFLICT
    detail = "stale_version"


class ValidationError(BookgroupError):
    """Raised for payload problems not covered by request schema validation."""

    status_code = status.HTTP_400_BAD_REQUEST
    detail = "validation_error"


class UpstreamError(BookgroupError):
    """Raised when the document store or mail relay answers with a failure."""

    status_code = status.HTTP_502_BAD_GATEWAY
    detail = "upstream_error"

    def __init__(self, detail: str | None = None, *, upstream_status: Optional[int] = None) -> None:
        super().__init__(detail)
        self.upstream_status = upstream_status


class ConfigurationError(BookgroupError):
    """Raised when a required credential or setting is missing."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail = "not_configured"
