import asyncio

import pytest

from asmr_catalog.core.dto.pagination import PaginationDTO
from asmr_catalog.core.pagination import PaginatedListing, parse_continuation


@pytest.mark.parametrize(
    "token, page",
    [(None, 1), ("1", 1), ("7", 7), ("abc", 1), ("0", 1), ("-3", 1), ("", 1)],
)
def test_parse_continuation(token, page):
    assert parse_continuation(token) == page


def test_has_more_and_next_token():
    assert PaginationDTO(1, 20, 45).next_continuation == "2"
    assert PaginationDTO(3, 20, 45).next_continuation is None
    assert PaginationDTO(2, 20, 40).has_more is False
    assert PaginationDTO.empty().next_continuation is None


def _listing(total, page_size=2):
    requested = []

    async def fetch_page(page):
        requested.append(page)
        start = (page - 1) * page_size
        items = list(range(start, min(start + page_size, total)))
        return items, PaginationDTO(page, page_size, total)

    return PaginatedListing(fetch_page), requested


def test_load_uses_continuation_as_page():
    listing, requested = _listing(5)

    first = asyncio.run(listing.load())
    assert first.items == [0, 1]
    assert first.continuation == "2"

    second = asyncio.run(listing.load(first.continuation))
    assert second.items == [2, 3]
    assert requested == [1, 2]


def test_last_page_has_no_continuation():
    listing, _ = _listing(5)
    page = asyncio.run(listing.load("3"))
    assert page.items == [4]
    assert page.continuation is None


def test_iter_pages_walks_until_exhausted():
    listing, requested = _listing(5)

    async def collect():
        return [page async for page in listing.iter_pages()]

    pages = asyncio.run(collect())
    assert [p.items for p in pages] == [[0, 1], [2, 3], [4]]
    assert requested == [1, 2, 3]


def test_iter_pages_respects_max_pages():
    listing, requested = _listing(100)

    async def collect():
        return [page async for page in listing.iter_pages(start="4", max_pages=2)]

    pages = asyncio.run(collect())
    assert len(pages) == 2
    assert requested == [4, 5]


def test_empty_listing_is_single_exhausted_page():
    async def fetch_page(page):
        return [], PaginationDTO.empty()

    page = asyncio.run(PaginatedListing(fetch_page).load())
    assert page.items == []
    assert page.continuation is None
