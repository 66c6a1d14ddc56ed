"""Cover resolution across the catalog chain."""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Optional, Sequence, Tuple

from bookgroup.domain.covers.sources import CoverLookup, CoverSource
from bookgroup.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)

BATCH_SIZE = 10

LookupRequest = Tuple[str, Optional[str], Optional[str]]


class CoverFinder:
    """Walks an ordered list of sources and stops at the first cover.

    The ISBN in the result always comes from the first source in the chain
    (the only one that reports ISBNs), whichever source supplied the cover.
    """

    def __init__(self, sources: Sequence[CoverSource]) -> None:
        if not sources:
            raise ValueError("at least one cover source is required")
        self._sources = list(sources)

    @property
    def sources(self) -> list[CoverSource]:
        return list(self._sources)

    async def find_cover(
        self,
        title: str,
        author: Optional[str] = None,
        isbn: Optional[str] = None,
    ) -> CoverLookup:
        primary_isbn: Optional[str] = None
        for index, source in enumerate(self._sources):
            result = await source.attempt(title, author, isbn)
            if index == 0:
                primary_isbn = result.isbn
            obs_metrics.inc_cover_lookup(source.name, result.found)
            if result.found:
                logger.info("cover found title=%s source=%s", title, source.name)
                return CoverLookup(cover_url=result.cover_url, isbn=primary_isbn)
        logger.info("no cover found title=%s", title)
        return CoverLookup(isbn=primary_isbn)

    async def find_covers(
        self,
        requests: Iterable[LookupRequest],
        *,
        batch_size: int = BATCH_SIZE,
    ) -> list[CoverLookup]:
        """Resolve many books, ``batch_size`` at a time.

        Lookups inside a batch run concurrently; batches run one after another
        so the catalogs never see more than ``batch_size`` books in flight.
        """
        pending = list(requests)
        results: list[CoverLookup] = []
        for start in range(0, len(pending), batch_size):
            batch = pending[start : start + batch_size]
            results.extend(
                await asyncio.gather(*(self.find_cover(title, author, isbn) for title, author, isbn in batch))
            )
            logger.info("cover batch done processed=%s total=%s", len(results), len(pending))
        return results
