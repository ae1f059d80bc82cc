from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import clusters as clusters_api
from api import provider as provider_api
from api.clusters import FetcherFactory
from fetch.http import HttpPageFetcher
from fetch.in_memory import InMemoryPageFetcher
from resources.seed import Dataset, empty_dataset, load_dataset
from resources.types import ResourceKind
from settings.registry import get_settings
from settings.types import Settings
from telemetry.config import telemetry_enabled, telemetry_path
from telemetry.store import TelemetryStore, open_store

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(
    settings: Settings | None = None,
    *,
    dataset: Dataset | None = None,
    fetcher_factory: FetcherFactory | None = None,
    telemetry: TelemetryStore | None = None,
) -> FastAPI:
    """
    Build the EcoMap service.

    - With a dataset (or `seedPath`), the app serves it as the paginated provider and
      `/clusters` aggregates from it in-process.
    - Without one, `/clusters` aggregates from the remote provider at `provider.baseUrl`.
    """
    cfg = settings or get_settings()
    if dataset is None:
        dataset = load_dataset(Path(cfg.seedPath)) if cfg.seedPath else None

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client: httpx.AsyncClient | None = None
        if app.state.fetcher_factory is None:
            client = httpx.AsyncClient(
                base_url=cfg.provider.baseUrl, timeout=cfg.provider.timeoutS
            )

            def remote(kind: ResourceKind) -> HttpPageFetcher:
                return HttpPageFetcher(client, kind, token=cfg.provider.token)

            app.state.fetcher_factory = remote
        try:
            yield
        finally:
            if client is not None:
                await client.aclose()
            if app.state.telemetry is not None:
                app.state.telemetry.flush()

    app = FastAPI(title="EcoMap", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = cfg
    app.state.dataset = dataset if dataset is not None else empty_dataset()
    if fetcher_factory is None and dataset is not None:
        served = app.state.dataset

        def local(kind: ResourceKind) -> InMemoryPageFetcher:
            return InMemoryPageFetcher(kind, served.get(kind, []))

        fetcher_factory = local
    app.state.fetcher_factory = fetcher_factory

    if telemetry is None and telemetry_enabled(cfg.telemetry):
        telemetry = open_store(telemetry_path(cfg.telemetry))
    app.state.telemetry = telemetry

    app.include_router(provider_api.router)
    app.include_router(clusters_api.router)
    return app


configure_logging(get_settings().logLevel)
app = create_app()
