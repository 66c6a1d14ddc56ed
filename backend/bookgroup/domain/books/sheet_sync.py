"""Bulk import of the historical book list from a published spreadsheet."""

from __future__ import annotations

import csv
import hashlib
import io
import logging
import re
from datetime import date, datetime
from typing import Iterable, List, Optional, Sequence

import httpx

from bookgroup.domain.books.schemas import Book
from bookgroup.domain.books.service import sort_books
from bookgroup.domain.books.dates import local_to_utc
from bookgroup.domain.covers.finder import CoverFinder
from bookgroup.domain.errors import UpstreamError
from bookgroup.settings import settings

logger = logging.getLogger(__name__)

MONTH_NAMES = {
    "january": 1,
    "february": 2,
    "march": 3,
    "april": 4,
    "may": 5,
    "june": 6,
    "july": 7,
    "august": 8,
    "september": 9,
    "october": 10,
    "november": 11,
    "december": 12,
}

# "Tuesday, 21 January 2020"
_MEETING_DATE_RE = re.compile(r"(\d+)\s+(\w+)\s+(\d{4})")


def parse_rows(text: str) -> List[List[str]]:
    return [[cell.strip() for cell in row] for row in csv.reader(io.StringIO(text))]


def parse_meeting_date(value: str) -> Optional[datetime]:
    match = _MEETING_DATE_RE.search(value or "")
    if not match:
        return None
    month = MONTH_NAMES.get(match.group(2).lower())
    if not month:
        return None
    try:
        day = date(int(match.group(3)), month, int(match.group(1)))
    except ValueError:
        return None
    return local_to_utc(day, settings.meeting_hour, settings.meeting_minute)


def stable_id(year: int, month: int, title: str) -> str:
    key = f"{year}-{month}-{title.lower().strip()}"
    return hashlib.sha256(key.encode("utf-8")).hexdigest()[:12]


def _cell(row: Sequence[str], index: int) -> str:
    return row[index] if index < len(row) else ""


def build_books_from_rows(rows: Iterable[Sequence[str]]) -> List[Book]:
    """Turn spreadsheet rows (header excluded) into dated books.

    Columns: year, month name, meeting date, proposer, title, author, isbn.
    Rows without a title or a readable meeting date are skipped.
    """
    books: List[Book] = []
    for row in rows:
        title = _cell(row, 4)
        if not title:
            continue
        meeting_date = parse_meeting_date(_cell(row, 2))
        if meeting_date is None:
            continue
        try:
            year = int(_cell(row, 0))
        except ValueError:
            year = meeting_date.year
        month = MONTH_NAMES.get(_cell(row, 1).lower()) or meeting_date.month
        books.append(
            Book(
                id=stable_id(year, month, title),
                title=title,
                author=_cell(row, 5) or None,
                proposer=_cell(row, 3),
                isbn=_cell(row, 6) or None,
                meeting_date=meeting_date,
                month=month,
                year=year,
            )
        )
    return sort_books(books)


async def fetch_sheet(http: httpx.AsyncClient, url: str) -> str:
    response = await http.get(url, follow_redirects=True)
    if response.status_code >= 400:
        raise UpstreamError("sheet_fetch_failed", upstream_status=response.status_code)
    return response.text


async def attach_covers(books: List[Book], finder: CoverFinder) -> List[Book]:
    lookups = await finder.find_covers((book.title, book.author, book.isbn) for book in books)
    resolved = []
    for book, lookup in zip(books, lookups):
        resolved.append(
            book.model_copy(update={"cover_url": lookup.cover_url, "isbn": book.isbn or lookup.isbn})
        )
    covers = sum(1 for book in resolved if book.cover_url)
    logger.info("sheet covers resolved covers=%s total=%s", covers, len(resolved))
    return resolved


async def sync_from_sheet(http: httpx.AsyncClient, finder: CoverFinder, url: str) -> List[Book]:
    """Download the sheet and return the sorted book list with covers attached."""
    rows = parse_rows(await fetch_sheet(http, url))
    if not rows:
        return []
    logger.info("sheet columns=%s", rows[0])
    books = build_books_from_rows(rows[1:])
    return await attach_covers(books, finder)
