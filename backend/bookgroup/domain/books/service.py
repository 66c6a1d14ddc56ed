from __future__ import annotations

import logging
import secrets
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Tuple

from bookgroup.domain.books import dates, schemas
from bookgroup.domain.covers.finder import CoverFinder
from bookgroup.domain.errors import NotFoundError, ValidationError
from bookgroup.domain.store import JsonCollectionStore

logger = logging.getLogger(__name__)

_FAR_FUTURE = datetime.max.replace(tzinfo=timezone.utc)


def generate_id(taken: Iterable[str] = ()) -> str:
    existing = set(taken)
    while True:
        candidate = secrets.token_hex(6)
        if candidate not in existing:
            return candidate


def sort_books(books: List[schemas.Book]) -> List[schemas.Book]:
    """Dated books by meeting time, then undated books in their current order."""
    return sorted(books, key=lambda book: (book.meeting_date is None, book.meeting_date or _FAR_FUTURE))


def _clean(value: Optional[str]) -> Optional[str]:
    cleaned = (value or "").strip()
    return cleaned or None


def upcoming_books(books: Iterable[schemas.Book], now: Optional[datetime] = None) -> List[schemas.Book]:
    now = now or datetime.now(timezone.utc)
    return sort_books([book for book in books if book.meeting_date is not None and book.meeting_date >= now])


class BookService:
    def __init__(self, store: JsonCollectionStore[schemas.Book], finder: CoverFinder) -> None:
        self._store = store
        self._finder = finder

    async def list_books(self) -> Tuple[List[schemas.Book], str]:
        books, sha = await self._store.fetch()
        return sort_books(books), sha

    async def _build(
        self,
        payload: schemas.BookPayload,
        book_id: str,
        existing: Optional[schemas.Book] = None,
    ) -> schemas.Book:
        title = _clean(payload.title)
        if not title:
            raise ValidationError("title_required")
        author = _clean(payload.author)
        isbn = _clean(payload.isbn)

        content_changed = existing is None or (
            (title, author, isbn) != (existing.title, existing.author, existing.isbn)
        )
        if content_changed:
            lookup = await self._finder.find_cover(title, author, isbn)
            cover_url = lookup.cover_url
            isbn = isbn or lookup.isbn
        else:
            cover_url = existing.cover_url

        schedule = dates.meeting_fields(payload.month, payload.year, payload.custom_date)
        return schemas.Book(
            id=book_id,
            title=title,
            author=author,
            proposer=(payload.proposer or "").strip(),
            isbn=isbn,
            cover_url=cover_url,
            meeting_date=schedule.meeting_date if schedule else None,
            month=schedule.month if schedule else None,
            year=schedule.year if schedule else None,
        )

    async def create_book(self, payload: schemas.BookPayload, sha: str) -> Tuple[schemas.Book, str]:
        if not _clean(payload.title):
            raise ValidationError("title_required")
        books, current_sha = await self._store.fetch_for_update(sha)
        book = await self._build(payload, generate_id(b.id for b in books))
        books = sort_books([*books, book])
        new_sha = await self._store.commit(books, current_sha, f'Add "{book.title}"')
        return book, new_sha

    async def update_book(self, book_id: str, payload: schemas.BookPayload, sha: str) -> Tuple[schemas.Book, str]:
        books, current_sha = await self._store.fetch_for_update(sha)
        index = next((i for i, book in enumerate(books) if book.id == book_id), None)
        if index is None:
            raise NotFoundError("book_not_found")
        updated = await self._build(payload, book_id, existing=books[index])
        books[index] = updated
        new_sha = await self._store.commit(sort_books(books), current_sha, f'Update "{updated.title}"')
        return updated, new_sha

    async def delete_book(self, book_id: str, sha: str) -> Tuple[schemas.Book, str]:
        books, current_sha = await self._store.fetch_for_update(sha)
        index = next((i for i, book in enumerate(books) if book.id == book_id), None)
        if index is None:
            raise NotFoundError("book_not_found")
        removed = books.pop(index)
        new_sha = await self._store.commit(books, current_sha, f'Delete "{removed.title}"')
        logger.info("book deleted id=%s", removed.id)
        return removed, new_sha
