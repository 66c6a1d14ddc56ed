"""iCalendar feed of upcoming meetings."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

from bookgroup.domain.books.schemas import Book
from bookgroup.settings import settings

_ICS_TIME = "%Y%m%dT%H%M%SZ"
_MAX_LINE_OCTETS = 75


def _escape_ics(value: str) -> str:
    return (
        value.replace("\\", "\\\\")
        .replace("\n", "\\n")
        .replace(",", "\\,")
        .replace(";", "\\;")
    )


def _fold(line: str) -> str:
    """Split a content line into 75-octet physical lines (RFC 5545 section 3.1).

    Continuation lines start with a single space, which counts toward their
    length. Multi-byte characters are never split.
    """
    parts: list[str] = []
    current = ""
    size = 0
    for char in line:
        width = len(char.encode("utf-8"))
        if size + width > _MAX_LINE_OCTETS:
            parts.append(current)
            current = " "
            size = 1
        current += char
        size += width
    parts.append(current)
    return "\r\n".join(parts)


def _summary(book: Book) -> str:
    by = f" by {book.author}" if book.author else ""
    return f"Bookgroup: {book.title}{by}, proposer {book.proposer}"


def _event_lines(book: Book, stamp: datetime) -> list[str]:
    start = book.meeting_date.astimezone(timezone.utc)  # type: ignore[union-attr]
    end = start + timedelta(hours=settings.meeting_duration_hours)
    return [
        "BEGIN:VEVENT",
        f"UID:{book.id}",
        f"DTSTAMP:{stamp.strftime(_ICS_TIME)}",
        f"DTSTART:{start.strftime(_ICS_TIME)}",
        f"DTEND:{end.strftime(_ICS_TIME)}",
        f"SUMMARY:{_escape_ics(_summary(book))}",
        f"DESCRIPTION:{_escape_ics(settings.group_name)}",
        f"LOCATION:{_escape_ics(settings.group_location)}",
        "END:VEVENT",
    ]


def build_calendar(books: Iterable[Book], now: Optional[datetime] = None) -> str:
    """Return an iCalendar document with one event per future meeting."""
    now = now or datetime.now(timezone.utc)
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:-//{settings.group_name}//EN",
        f"X-WR-CALNAME:{_escape_ics(settings.group_name)}",
    ]
    for book in books:
        if book.meeting_date is None or book.meeting_date <= now:
            continue
        lines.extend(_event_lines(book, now))
    lines.append("END:VCALENDAR")
    return "\r\n".join(_fold(line) for line in lines) + "\r\n"
