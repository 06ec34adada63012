"""
Continuation-token pagination.

Every listing is exposed through the same shape: a page of items plus an
opaque continuation string, or None when the listing is exhausted. The token
is the number of the page to fetch next.
"""

from __future__ import annotations

import logging
from typing import AsyncIterator, Awaitable, Callable, Generic, List, Optional, Tuple, TypeVar

from asmr_catalog.core.dto.pagination import PageDTO, PaginationDTO

T = TypeVar("T")

FIRST_PAGE = 1

FetchPage = Callable[[int], Awaitable[Tuple[List[T], PaginationDTO]]]

logger = logging.getLogger(__name__)


def parse_continuation(continuation: Optional[str]) -> int:
    """Page number carried by `continuation`; page 1 when absent or invalid."""
    if continuation is None:
        return FIRST_PAGE
    try:
        page = int(continuation)
    except (TypeError, ValueError):
        logger.debug(f"Ignoring unparsable continuation {continuation!r}")
        return FIRST_PAGE
    return page if page >= FIRST_PAGE else FIRST_PAGE


class PaginatedListing(Generic[T]):
    def __init__(self, fetch_page: FetchPage):
        self._fetch_page = fetch_page

    async def load(self, continuation: Optional[str] = None) -> PageDTO[T]:
        page = parse_continuation(continuation)
        items, pagination = await self._fetch_page(page)
        return PageDTO(items=list(items), continuation=pagination.next_continuation)

    async def iter_pages(
        self,
        start: Optional[str] = None,
        max_pages: Optional[int] = None,
    ) -> AsyncIterator[PageDTO[T]]:
        continuation = start
        loaded = 0
        while max_pages is None or loaded < max_pages:
            page = await self.load(continuation)
            loaded += 1
            yield page
            if page.continuation is None:
                return
            continuation = page.continuation
