"""Catalog sources queried for book covers and ISBNs.

Every source is best-effort: a failed lookup returns an empty
:class:`CoverLookup` and never raises, so the finder can walk the chain
without knowing anything about the individual catalogs.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Optional, Protocol

import httpx

from bookgroup.domain.covers.validator import is_valid_cover

logger = logging.getLogger(__name__)

OPEN_LIBRARY_SEARCH_URL = "https://openlibrary.org/search.json"
OPEN_LIBRARY_COVERS_URL = "https://covers.openlibrary.org/b"
GOOGLE_BOOKS_URL = "https://www.googleapis.com/books/v1/volumes"
BOOKHUB_SEARCH_URL = "https://bookhub.co.nz/catalog/search"

_ISBN_SEPARATORS = re.compile(r"[-\s]")
_BOOKHUB_COVER = re.compile(r'data-original="(https://storage\.googleapis\.com/circlesoft[^"]+)"')


@dataclass(frozen=True)
class CoverLookup:
    """Outcome of a lookup; both fields are optional."""

    cover_url: Optional[str] = None
    isbn: Optional[str] = None

    @property
    def found(self) -> bool:
        return bool(self.cover_url)


class CoverSource(Protocol):
    """One catalog able to suggest a cover (and maybe an ISBN) for a book."""

    name: str

    async def attempt(self, title: str, author: Optional[str] = None, isbn: Optional[str] = None) -> CoverLookup:
        ...


def _field(payload: Any, key: str) -> Any:
    """Return ``payload[key]`` when payload is a JSON object, else None."""
    return payload.get(key) if isinstance(payload, dict) else None


def _first(items: Any) -> Optional[dict]:
    if isinstance(items, list) and items and isinstance(items[0], dict):
        return items[0]
    return None


def clean_isbn(isbn: str) -> str:
    return _ISBN_SEPARATORS.sub("", isbn)


def open_library_isbn_cover(isbn: str) -> str:
    return f"{OPEN_LIBRARY_COVERS_URL}/isbn/{clean_isbn(isbn)}-M.jpg"


@dataclass
class OpenLibrarySource:
    """Primary catalog; the only source that reports ISBNs."""

    http: httpx.AsyncClient
    name: str = "openlibrary"

    async def attempt(self, title: str, author: Optional[str] = None, isbn: Optional[str] = None) -> CoverLookup:
        if isbn:
            direct = open_library_isbn_cover(isbn)
            if await is_valid_cover(self.http, direct):
                return CoverLookup(cover_url=direct, isbn=isbn)

        params = {"title": title, "limit": "1", "fields": "cover_i,isbn"}
        if author:
            params["author"] = author
        try:
            response = await self.http.get(OPEN_LIBRARY_SEARCH_URL, params=params)
            if not response.is_success:
                return CoverLookup()
            doc = _first(_field(response.json(), "docs"))
        except (httpx.HTTPError, ValueError) as exc:
            logger.debug("open library search failed title=%s error=%s", title, exc)
            return CoverLookup()
        if doc is None:
            return CoverLookup()

        raw_isbns = doc.get("isbn")
        isbns = [str(value) for value in raw_isbns if value] if isinstance(raw_isbns, list) else []
        isbn13 = next((value for value in isbns if len(value) == 13), None)
        found_isbn = isbn or isbn13 or (isbns[0] if isbns else None)

        cover_url: Optional[str] = None
        if doc.get("cover_i"):
            # Covers addressed by Open Library's own id always exist.
            cover_url = f"{OPEN_LIBRARY_COVERS_URL}/id/{doc['cover_i']}-M.jpg"
        elif isbns:
            candidate = open_library_isbn_cover(isbns[0])
            if await is_valid_cover(self.http, candidate):
                cover_url = candidate
        return CoverLookup(cover_url=cover_url, isbn=found_isbn)


@dataclass
class GoogleBooksSource:
    http: httpx.AsyncClient
    name: str = "googlebooks"

    async def attempt(self, title: str, author: Optional[str] = None, isbn: Optional[str] = None) -> CoverLookup:
        query = f"intitle:{title}+inauthor:{author}" if author else title
        try:
            response = await self.http.get(GOOGLE_BOOKS_URL, params={"q": query, "maxResults": "1"})
            if not response.is_success:
                return CoverLookup()
            item = _first(_field(response.json(), "items"))
        except (httpx.HTTPError, ValueError) as exc:
            logger.debug("google books search failed title=%s error=%s", title, exc)
            return CoverLookup()
        thumbnail = _field(_field(item, "volumeInfo"), "imageLinks")
        thumbnail = _field(thumbnail, "thumbnail")
        if not isinstance(thumbnail, str) or not thumbnail:
            logger.debug("google books gave no usable thumbnail title=%s", title)
            return CoverLookup()
        # Thumbnails come back as small plain-http images.
        cover_url = thumbnail.replace("http://", "https://", 1).replace("zoom=1", "zoom=2", 1)
        if await is_valid_cover(self.http, cover_url):
            return CoverLookup(cover_url=cover_url)
        return CoverLookup()


def extract_bookhub_cover(html: str) -> Optional[str]:
    match = _BOOKHUB_COVER.search(html)
    return match.group(1) if match else None


@dataclass
class BookHubSource:
    """Scrapes the BookHub NZ catalog search page.

    This depends on BookHub's page markup and is the first lookup expected to
    stop working when their site changes.
    """

    http: httpx.AsyncClient
    name: str = "bookhub"

    async def attempt(self, title: str, author: Optional[str] = None, isbn: Optional[str] = None) -> CoverLookup:
        keywords = [f"{title} {author}", title] if author else [title]
        for keyword in keywords:
            params = {"utf8": "✓", "keyword": keyword, "search_type": "core^keyword"}
            try:
                response = await self.http.get(BOOKHUB_SEARCH_URL, params=params)
            except httpx.HTTPError as exc:
                logger.debug("bookhub search failed keyword=%s error=%s", keyword, exc)
                return CoverLookup()
            if not response.is_success:
                continue
            cover_url = extract_bookhub_cover(response.text)
            if cover_url and await is_valid_cover(self.http, cover_url):
                return CoverLookup(cover_url=cover_url)
        return CoverLookup()


def default_sources(http: httpx.AsyncClient) -> list[CoverSource]:
    """Catalogs in priority order."""
    return [OpenLibrarySource(http), GoogleBooksSource(http), BookHubSource(http)]
