from __future__ import annotations

import asyncio

import pytest

from fetch.in_memory import InMemoryPageFetcher
from filters import trucks
from resources.types import PageFailure, Resource
from views.data_fns import PageFetchError, table_data_fn
from views.table import page_count, toggle_direction, visible_pages

PAGES = list(range(10))


@pytest.mark.parametrize(
    "page_index, expected",
    [
        (0, [0, 1, 2, 3, 4]),
        (3, [1, 2, 3, 4, 5]),
        (9, [5, 6, 7, 8, 9]),
    ],
)
def test_visible_pages(page_index, expected):
    assert visible_pages(PAGES, page_index) == expected


def test_visible_pages_with_fewer_pages_than_the_window():
    assert visible_pages([0, 1, 2], 1) == [0, 1, 2]
    assert visible_pages([], 0) == []


def test_page_count():
    assert page_count(0, 10) == 0
    assert page_count(10, 10) == 1
    assert page_count(11, 10) == 2
    with pytest.raises(ValueError):
        page_count(5, 0)


def test_toggle_direction():
    assert toggle_direction(None) == "asc"
    assert toggle_direction("asc") == "desc"
    assert toggle_direction("desc") == "asc"


def _trucks(n: int) -> list[Resource]:
    return [
        Resource(
            id=f"t{i}",
            kind="trucks",
            lon=-9.1,
            lat=38.7,
            props={"createdAt": f"2024-01-{i + 1:02d}T00:00:00Z", "licensePlate": f"AA-{i:02d}"},
        )
        for i in range(n)
    ]


def test_table_data_fn_fetches_the_page_for_the_page_index():
    fetcher = InMemoryPageFetcher("trucks", _trucks(5))
    fetch = table_data_fn(fetcher, trucks.provider_query, page_size=2)

    page = asyncio.run(fetch(trucks.TrucksFilters(page_index=1)))
    assert page.total == 5
    assert [r.id for r in page.items] == ["t2", "t1"]
    assert fetcher.calls == [(2, 2)]

    page = asyncio.run(fetch(trucks.TrucksFilters(license_plate="aa-04")))
    assert [r.id for r in page.items] == ["t4"]
    assert page.total == 1


def test_table_data_fn_raises_on_failed_page():
    class Broken(InMemoryPageFetcher):
        async def fetch_page(self, filters, limit, offset):
            return PageFailure(offset=offset, limit=limit, reason="HTTP 503", status_code=503)

    fetch = table_data_fn(Broken("trucks", []), trucks.provider_query, page_size=10)
    with pytest.raises(PageFetchError) as exc:
        asyncio.run(fetch(trucks.INITIAL_FILTERS))
    assert exc.value.failure.status_code == 503
    assert "503" in str(exc.value)
