"""Cover image validation.

Catalogs answer a cover request for an unknown book with a tiny placeholder
image instead of a 404, so a cover only counts when it is large enough.
"""

from __future__ import annotations

import logging

import httpx

MIN_COVER_BYTES = 1000

logger = logging.getLogger(__name__)


async def is_valid_cover(http: httpx.AsyncClient, url: str) -> bool:
    """Return True when ``url`` serves a real cover image.

    A ``Content-Length`` above the threshold is trusted without downloading
    the body. Failures of any kind count as "not a cover"; nothing is retried.
    """
    try:
        async with http.stream("GET", url, follow_redirects=True) as response:
            if not response.is_success:
                return False
            declared = response.headers.get("content-length")
            if declared and declared.isdigit() and int(declared) > MIN_COVER_BYTES:
                return True
            body = await response.aread()
            return len(body) >= MIN_COVER_BYTES
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        logger.debug("cover validation failed url=%s error=%s", url, exc)
        return False
