from __future__ import annotations

from typing import Mapping, Protocol, TypeAlias

from resources.types import PageOutcome, ResourceKind


# Provider-side filter parameters (e.g. {"category": "glass"}), without limit/offset.
ProviderFilters: TypeAlias = Mapping[str, str]


class PageFetcher(Protocol):
    """
    Fetches one bounded page of a filtered collection.

    - HttpPageFetcher: GETs the EcoMap API via an injected httpx.AsyncClient
    - InMemoryPageFetcher: slices a preloaded dataset (tests, local service)

    Implementations must not raise for ordinary failures; they return `PageFailure`.
    """

    kind: ResourceKind

    async def fetch_page(
        self, filters: ProviderFilters, limit: int, offset: int
    ) -> PageOutcome: ...
