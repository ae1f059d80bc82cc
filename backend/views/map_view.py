from __future__ import annotations

import logging
from typing import Any, Generic, TypeVar

from clusters.engine import Cluster, ClusterRenderEngine
from fetch.aggregate import AggregationResult, PaginatedAggregator
from filters.location import QueryLocation
from filters.params import BACK_OFFICE_BASENAME, FilterCodec
from filters.store import FilterSyncedStore
from geo.viewport import ScreenPoint, Viewport, fit_viewport
from grouping.index import LocationGroupingIndex
from notify.sink import ErrorSink, LoggingErrorSink, Notice
from render.markers import clusters_payload
from resources.types import ResourceKind
from settings.types import ClusteringSettings, LayerSettings
from views.data_fns import EMPTY_AGGREGATION, map_data_fn

logger = logging.getLogger(__name__)

F = TypeVar("F")

MAP_PATHNAME = f"/{BACK_OFFICE_BASENAME}/map"


class ResourceMap(Generic[F]):
    """
    One map layer: filters -> every matching resource -> location groups -> clusters.

    The store owns fetching; each landed result rebuilds the grouping index and
    resets the engine source. Rendering and pointer events go to the engine.
    """

    def __init__(
        self,
        kind: ResourceKind,
        store: FilterSyncedStore[F, AggregationResult],
        *,
        layer: LayerSettings,
        clustering: ClusteringSettings | None = None,
        error_sink: ErrorSink | None = None,
    ):
        self.kind = kind
        self.store = store
        self.layer = layer
        self.clustering = clustering or ClusteringSettings()
        self.index = LocationGroupingIndex()
        self.engine = ClusterRenderEngine(
            pixel_distance=self.clustering.distancePx,
            min_distance=self.clustering.minDistancePx,
            hit_radius=self.clustering.hitRadiusPx,
        )
        self._sink: ErrorSink = error_sink or LoggingErrorSink()
        self._result: AggregationResult = EMPTY_AGGREGATION
        self._unsubscribe = store.subscribe_data(self._on_data)

    @classmethod
    def build(
        cls,
        kind: ResourceKind,
        codec: FilterCodec[F],
        aggregator: PaginatedAggregator,
        location: QueryLocation,
        *,
        page_size: int,
        layer: LayerSettings,
        clustering: ClusteringSettings | None = None,
        error_sink: ErrorSink | None = None,
        pathname: str = MAP_PATHNAME,
    ) -> "ResourceMap[F]":
        sink = error_sink or LoggingErrorSink()
        store: FilterSyncedStore[F, AggregationResult] = FilterSyncedStore(
            pathname,
            EMPTY_AGGREGATION,
            codec.to_params,
            codec.from_params,
            map_data_fn(aggregator, codec.provider_query, page_size),
            location,
            error_sink=sink,
            error_title=f"Failed to load {kind}",
        )
        return cls(kind, store, layer=layer, clustering=clustering, error_sink=sink)

    def _on_data(self, result: AggregationResult) -> None:
        self._result = result
        self.index.clear()
        self.index.extend(result.items)
        self.engine.set_source(self.index.groups())
        if not result.complete:
            missing = result.total - len(result.items)
            logger.warning("incomplete %s result: %d of %d", self.kind, len(result.items), result.total)
            self._sink.show(
                Notice(
                    type="warning",
                    title=f"Some {self.kind} could not be loaded",
                    description=f"{missing} of {result.total} are missing from the map.",
                )
            )

    @property
    def result(self) -> AggregationResult:
        return self._result

    def clusters(self, viewport: Viewport) -> list[Cluster]:
        return self.engine.clusters_for(viewport)

    def render(self, viewport: Viewport) -> dict[str, Any]:
        clusters = self.engine.clusters_for(viewport)
        return clusters_payload(
            self.kind,
            clusters,
            self.layer,
            viewport,
            badge_radius=self.clustering.badgeRadiusPx,
            total=self._result.total,
            complete=self._result.complete,
        )

    def pointer_move(self, point: ScreenPoint) -> bool:
        return self.engine.pointer_move(point)

    @property
    def cursor(self) -> str:
        return self.engine.cursor

    def click(self, point: ScreenPoint) -> Cluster | None:
        return self.engine.click(point)

    def fit(self, *, width: int = 900, height: int = 600) -> Viewport | None:
        return fit_viewport(
            [(g.lon, g.lat) for g in self.index.groups()], width=width, height=height
        )

    def close(self) -> None:
        self._unsubscribe()
        self.store.close()
