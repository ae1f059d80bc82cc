from __future__ import annotations

import logging
from typing import Any, Callable

import httpx
from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from api.provider import error_response
from clusters.engine import ClusterRenderEngine
from fetch.aggregate import PaginatedAggregator, ProbeFailedError
from fetch.types import PageFetcher
from filters import containers, trucks, warehouses
from filters.params import FilterCodec
from geo.viewport import Viewport
from grouping.index import LocationGroupingIndex
from render.markers import clusters_payload
from resources.types import ResourceKind
from settings.types import Settings

logger = logging.getLogger(__name__)

router = APIRouter()

CODECS: dict[ResourceKind, FilterCodec[Any]] = {
    "containers": containers.CODEC,
    "trucks": trucks.CODEC,
    "warehouses": warehouses.CODEC,
}

FetcherFactory = Callable[[ResourceKind], PageFetcher]


class ApiCenter(BaseModel):
    lat: float = Field(ge=-90.0, le=90.0)
    lon: float = Field(ge=-180.0, le=180.0)


class ApiView(BaseModel):
    center: ApiCenter
    zoom: float = Field(ge=0.0, le=22.0)
    width: int = Field(default=900, ge=1, le=10_000)
    height: int = Field(default=600, ge=1, le=10_000)


class ClustersRequest(BaseModel):
    kind: ResourceKind
    view: ApiView
    # The page's query string, e.g. "category=glass&location=Lisboa".
    query: str = ""
    selectedIds: list[str] = Field(default_factory=list)
    pixelDistance: float | None = Field(default=None, gt=0.0)


@router.post("/clusters")
async def clusters(body: ClustersRequest, request: Request):
    settings: Settings = request.app.state.settings
    fetcher_factory: FetcherFactory = request.app.state.fetcher_factory

    codec = CODECS[body.kind]
    filters = codec.from_params(httpx.QueryParams(body.query))
    aggregator = PaginatedAggregator(
        fetcher_factory(body.kind), telemetry=request.app.state.telemetry
    )
    try:
        result = await aggregator.aggregate(
            codec.provider_query(filters), settings.provider.pageSize
        )
    except ProbeFailedError as e:
        return error_response(502, "bad_gateway", str(e))

    index = LocationGroupingIndex()
    index.extend(result.items)

    cfg = settings.clustering
    engine = ClusterRenderEngine(
        pixel_distance=cfg.distancePx,
        min_distance=cfg.minDistancePx,
        hit_radius=cfg.hitRadiusPx,
    )
    engine.set_source(index.groups())
    for group_id in body.selectedIds:
        engine.set_selected(group_id, True)

    viewport = Viewport(
        center_lon=body.view.center.lon,
        center_lat=body.view.center.lat,
        zoom=body.view.zoom,
        width=body.view.width,
        height=body.view.height,
    )
    out = engine.clusters_for(viewport, body.pixelDistance)
    return clusters_payload(
        body.kind,
        out,
        settings.layer(body.kind),
        viewport,
        badge_radius=cfg.badgeRadiusPx,
        total=result.total,
        complete=result.complete,
    )


@router.get("/telemetry/summary")
def telemetry_summary(request: Request, kind: str | None = None):
    store = request.app.state.telemetry
    if store is None:
        return {"enabled": False, "summary": []}
    return {"enabled": True, "summary": store.summary(kind=kind)}
