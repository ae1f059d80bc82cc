from __future__ import annotations

from dataclasses import dataclass, field
from typing import Awaitable, Callable, TypeVar

from fetch.aggregate import AggregationResult, PaginatedAggregator
from fetch.types import PageFetcher
from resources.types import PageFailure, Resource

F = TypeVar("F")

EMPTY_AGGREGATION = AggregationResult(items=[], total=0, requests=0)


class PageFetchError(RuntimeError):
    def __init__(self, failure: PageFailure):
        super().__init__(failure.reason)
        self.failure = failure


@dataclass(frozen=True)
class TablePage:
    items: list[Resource] = field(default_factory=list)
    total: int = 0


EMPTY_TABLE_PAGE = TablePage()


def map_data_fn(
    aggregator: PaginatedAggregator,
    provider_query: Callable[[F], dict[str, str]],
    page_size: int,
) -> Callable[[F], Awaitable[AggregationResult]]:
    """
    Every resource matching the filters, for the map. Pagination filters
    (page index) are ignored; the aggregator walks all pages.
    """

    async def fetch(filters: F) -> AggregationResult:
        return await aggregator.aggregate(provider_query(filters), page_size)

    return fetch


def table_data_fn(
    fetcher: PageFetcher,
    provider_query: Callable[[F], dict[str, str]],
    page_size: int,
) -> Callable[[F], Awaitable[TablePage]]:
    """
    One page of resources for a table, at `page_index * page_size`.
    """

    async def fetch(filters: F) -> TablePage:
        offset = int(getattr(filters, "page_index", 0)) * page_size
        outcome = await fetcher.fetch_page(provider_query(filters), page_size, offset)
        if isinstance(outcome, PageFailure):
            raise PageFetchError(outcome)
        return TablePage(items=list(outcome.items), total=outcome.total)

    return fetch
