from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import Field, field_serializer, model_validator

from bookgroup.domain.common import CamelModel


class Book(CamelModel):
    id: str
    title: str
    author: Optional[str] = None
    proposer: str = ""
    isbn: Optional[str] = None
    cover_url: Optional[str] = None
    meeting_date: Optional[datetime] = None
    month: Optional[int] = Field(default=None, ge=1, le=12)
    year: Optional[int] = None

    @model_validator(mode="after")
    def _schedule_all_or_nothing(self) -> "Book":
        present = [value is not None for value in (self.meeting_date, self.month, self.year)]
        if any(present) and not all(present):
            raise ValueError("meetingDate, month and year must be set together")
        return self

    @field_serializer("meeting_date")
    def _serialise_meeting_date(self, value: Optional[datetime]) -> Optional[str]:
        if value is None:
            return None
        # Matches the millisecond ISO form already stored in books.json.
        return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.000Z")

    @property
    def is_dated(self) -> bool:
        return self.meeting_date is not None


class BookPayload(CamelModel):
    """Form fields shared by create and update."""

    title: str = ""
    author: str = ""
    proposer: str = ""
    isbn: str = ""
    month: Optional[int] = Field(default=None, ge=1, le=12)
    year: Optional[int] = Field(default=None, ge=1900, le=2999)
    custom_date: Optional[str] = None


class BookCreateRequest(BookPayload):
    sha: str


class BookUpdateRequest(BookPayload):
    id: str
    sha: str


class BookDeleteRequest(CamelModel):
    id: str
    sha: str


class BookListResponse(CamelModel):
    books: List[Book]
    sha: str


class BookMutationResponse(CamelModel):
    book: Book
    sha: str


class BookDeleteResponse(CamelModel):
    deleted: str
    sha: str
