from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from fetch.types import PageFetcher, ProviderFilters
from resources.decode import decode_page
from resources.types import PageFailure, PageOutcome, ResourceKind

logger = logging.getLogger(__name__)


class HttpPageFetcher(PageFetcher):
    """
    EcoMap API page fetcher.

    The `httpx.AsyncClient` is owned by the caller (composition root), so there is no
    hidden process-wide request queue. Every failure mode resolves to `PageFailure`.

    Usage:
        async with httpx.AsyncClient(base_url=settings.provider.baseUrl) as client:
            fetcher = HttpPageFetcher(client, "containers")
            outcome = await fetcher.fetch_page({"category": "glass"}, 100, 0)
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        kind: ResourceKind,
        *,
        path: str | None = None,
        token: str | None = None,
    ):
        self.kind = kind
        self._client = client
        self._path = path or f"/{kind}"
        self._token = token

    def _headers(self) -> dict[str, str]:
        if not self._token:
            return {}
        return {"Authorization": f"Bearer {self._token}"}

    async def fetch_page(
        self, filters: ProviderFilters, limit: int, offset: int
    ) -> PageOutcome:
        params = {**dict(filters), "limit": str(limit), "offset": str(offset)}
        try:
            response = await self._client.get(
                self._path, params=params, headers=self._headers()
            )
        except httpx.TimeoutException:
            return self._failure(offset, limit, "provider timeout", 504)
        except httpx.RequestError as e:
            return self._failure(offset, limit, f"request error: {e}", 500)

        if response.status_code >= 400:
            return self._failure(
                offset,
                limit,
                f"provider error: {response.text[:200]}",
                response.status_code,
            )

        try:
            payload = response.json()
        except ValueError:
            return self._failure(offset, limit, "response is not JSON", response.status_code)

        try:
            return decode_page(self.kind, payload, limit=limit, offset=offset)
        except (ValidationError, ValueError) as e:
            return self._failure(
                offset, limit, f"malformed page: {e}", response.status_code
            )

    def _failure(
        self, offset: int, limit: int, reason: str, status_code: int | None
    ) -> PageFailure:
        logger.warning(
            "page fetch failed kind=%s offset=%d limit=%d status=%s: %s",
            self.kind,
            offset,
            limit,
            status_code,
            reason,
        )
        return PageFailure(
            offset=offset, limit=limit, reason=reason, status_code=status_code
        )
