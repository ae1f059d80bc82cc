from __future__ import annotations

from typing import Iterable

from fetch.types import PageFetcher, ProviderFilters
from resources.query import InvalidQueryError, list_page, parse_list_query
from resources.types import Page, PageFailure, PageOutcome, Resource, ResourceKind


class InMemoryPageFetcher(PageFetcher):
    """
    Serves pages from an in-memory resource list with the same filtering and
    ordering rules as the provider service.
    """

    def __init__(self, kind: ResourceKind, resources: Iterable[Resource]):
        self.kind = kind
        self._resources = list(resources)
        self.calls: list[tuple[int, int]] = []

    async def fetch_page(
        self, filters: ProviderFilters, limit: int, offset: int
    ) -> PageOutcome:
        self.calls.append((limit, offset))
        params = {**dict(filters), "limit": str(limit), "offset": str(offset)}
        try:
            q = parse_list_query(self.kind, params)
        except InvalidQueryError as e:
            return PageFailure(offset=offset, limit=limit, reason=str(e), status_code=400)
        items, total = list_page(self._resources, q)
        return Page(items=tuple(items), total=total, offset=offset, limit=limit)
