from __future__ import annotations

import asyncio
import logging
import math
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from fetch.types import PageFetcher, ProviderFilters
from resources.types import Page, PageFailure, PageOutcome, Resource

if TYPE_CHECKING:
    from telemetry.store import TelemetryStore

logger = logging.getLogger(__name__)


class ProbeFailedError(RuntimeError):
    """
    The first page of an aggregation failed, so there is no total to fan out from.
    """

    def __init__(self, failure: PageFailure):
        super().__init__(f"probe page failed: {failure.reason}")
        self.failure = failure


@dataclass(frozen=True)
class AggregationResult:
    items: list[Resource]
    total: int
    requests: int
    failed_offsets: tuple[int, ...] = field(default_factory=tuple)

    @property
    def complete(self) -> bool:
        # Callers needing completeness check this instead of comparing lengths themselves.
        return not self.failed_offsets and len(self.items) >= self.total


class PaginatedAggregator:
    """
    Assembles the complete result set for a filter from a paginated provider.

    One probe request learns `total`; the remaining pages are then requested
    concurrently. Failed non-probe pages are dropped (partial result).
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        *,
        max_in_flight: int | None = None,
        telemetry: "TelemetryStore | None" = None,
    ):
        if max_in_flight is not None and max_in_flight <= 0:
            raise ValueError("max_in_flight must be positive")
        self.fetcher = fetcher
        self.max_in_flight = max_in_flight
        self.telemetry = telemetry

    async def fetch_all(self, filters: ProviderFilters, page_size: int) -> list[Resource]:
        return (await self.aggregate(filters, page_size)).items

    async def aggregate(
        self, filters: ProviderFilters, page_size: int
    ) -> AggregationResult:
        if page_size <= 0:
            raise ValueError("page_size must be positive")

        t0 = time.perf_counter()
        probe = await self.fetcher.fetch_page(filters, page_size, 0)
        if isinstance(probe, PageFailure):
            logger.warning(
                "aggregation probe failed kind=%s: %s", self.fetcher.kind, probe.reason
            )
            raise ProbeFailedError(probe)

        remaining = math.ceil(probe.total / page_size) - 1
        if remaining <= 0:
            result = AggregationResult(
                items=list(probe.items), total=probe.total, requests=1
            )
            self._finish(filters, result, t0)
            return result

        offsets = [page_size * i for i in range(1, remaining + 1)]
        outcomes = await self._fetch_many(filters, page_size, offsets)

        items: list[Resource] = list(probe.items)
        failed: list[int] = []
        # `gather` preserves argument order, so this walks ascending offsets.
        for offset, outcome in zip(offsets, outcomes):
            if isinstance(outcome, Page):
                items.extend(outcome.items)
                continue
            reason = outcome.reason if isinstance(outcome, PageFailure) else repr(outcome)
            logger.warning(
                "dropping page kind=%s offset=%d: %s", self.fetcher.kind, offset, reason
            )
            failed.append(offset)

        result = AggregationResult(
            items=items,
            total=probe.total,
            requests=1 + len(offsets),
            failed_offsets=tuple(failed),
        )
        self._finish(filters, result, t0)
        return result

    async def _fetch_many(
        self, filters: ProviderFilters, page_size: int, offsets: list[int]
    ) -> list[PageOutcome | BaseException]:
        if self.max_in_flight is None:
            coros = [self.fetcher.fetch_page(filters, page_size, o) for o in offsets]
        else:
            sem = asyncio.Semaphore(self.max_in_flight)

            async def bounded(offset: int) -> PageOutcome:
                async with sem:
                    return await self.fetcher.fetch_page(filters, page_size, offset)

            coros = [bounded(o) for o in offsets]
        # A misbehaving fetcher that raises only loses its own page.
        return list(await asyncio.gather(*coros, return_exceptions=True))

    def _finish(
        self, filters: ProviderFilters, result: AggregationResult, t0: float
    ) -> None:
        duration_ms = (time.perf_counter() - t0) * 1000.0
        logger.info(
            "aggregated kind=%s total=%d received=%d requests=%d failed=%d in %.1fms",
            self.fetcher.kind,
            result.total,
            len(result.items),
            result.requests,
            len(result.failed_offsets),
            duration_ms,
        )
        if self.telemetry is not None:
            self.telemetry.record(
                kind=self.fetcher.kind,
                filters=dict(filters),
                total=result.total,
                received=len(result.items),
                requests=result.requests,
                failed_pages=len(result.failed_offsets),
                complete=result.complete,
                duration_ms=duration_ms,
            )
