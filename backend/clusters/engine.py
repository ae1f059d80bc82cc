from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable

from clusters.greedy import greedy_clusters
from geo.viewport import ScreenPoint, Viewport
from grouping.index import MarkerGroup


DEFAULT_PIXEL_DISTANCE = 50.0
DEFAULT_MIN_DISTANCE = 10.0
DEFAULT_HIT_RADIUS = 20.0


@dataclass(frozen=True)
class Cluster:
    """
    One render unit: an anchor group plus the groups absorbed into it.

    `size` counts resources, not locations.
    """

    point: ScreenPoint
    groups: tuple[MarkerGroup, ...]
    selected: bool = False

    @property
    def id(self) -> str:
        return self.anchor.id

    @property
    def anchor(self) -> MarkerGroup:
        return self.groups[0]

    @property
    def lon(self) -> float:
        return self.anchor.lon

    @property
    def lat(self) -> float:
        return self.anchor.lat

    @property
    def size(self) -> int:
        return sum(g.size for g in self.groups)

    @property
    def group_ids(self) -> list[str]:
        return [g.id for g in self.groups]


class ClusterRenderEngine:
    """
    Screen-space clustering of `MarkerGroup`s with hit-testing and selection state.

    Clusters are recomputed from scratch on every `clusters_for` call; `hit_test`,
    `pointer_move` and `click` work against the most recent result.
    """

    def __init__(
        self,
        *,
        pixel_distance: float = DEFAULT_PIXEL_DISTANCE,
        min_distance: float = DEFAULT_MIN_DISTANCE,
        hit_radius: float = DEFAULT_HIT_RADIUS,
    ):
        self.pixel_distance = pixel_distance
        self.min_distance = min_distance
        self.hit_radius = hit_radius
        self._groups: list[MarkerGroup] = []
        self._selected: set[str] = set()
        self._last: list[Cluster] = []
        self._hovered: Cluster | None = None

    def set_source(self, groups: Iterable[MarkerGroup]) -> None:
        self._groups = list(groups)
        self._last = []
        self._hovered = None

    @property
    def source(self) -> list[MarkerGroup]:
        return list(self._groups)

    def clusters_for(
        self,
        viewport: Viewport,
        pixel_distance: float | None = None,
        *,
        min_distance: float | None = None,
    ) -> list[Cluster]:
        pd = self.pixel_distance if pixel_distance is None else pixel_distance
        md = self.min_distance if min_distance is None else min_distance

        points = viewport.project_many([(g.lon, g.lat) for g in self._groups])
        out: list[Cluster] = []
        for idxs in greedy_clusters(points, pixel_distance=pd, min_distance=md):
            groups = tuple(self._groups[i] for i in idxs)
            out.append(
                Cluster(
                    point=points[idxs[0]],
                    groups=groups,
                    selected=self._is_selected(groups),
                )
            )
        self._last = out
        self._hovered = None
        return list(out)

    @property
    def clusters(self) -> list[Cluster]:
        return list(self._last)

    def hit_test(self, point: ScreenPoint, radius: float | None = None) -> Cluster | None:
        r = self.hit_radius if radius is None else radius
        best: Cluster | None = None
        best_d = float("inf")
        for c in self._last:
            d = c.point.distance_to(point)
            # Strict `<` keeps the earlier cluster on equal distance.
            if d <= r and d < best_d:
                best = c
                best_d = d
        return best

    def set_selected(self, group_id: str, selected: bool) -> None:
        if selected:
            self._selected.add(group_id)
        else:
            self._selected.discard(group_id)
        self._restamp_selection()

    def clear_selection(self) -> None:
        self._selected.clear()
        self._restamp_selection()

    @property
    def selected_ids(self) -> frozenset[str]:
        return frozenset(self._selected)

    def pointer_move(self, point: ScreenPoint) -> bool:
        """
        Track the hovered cluster. Returns True when it changed (caller should redraw).
        """
        hit = self.hit_test(point)
        prev_id = self._hovered.id if self._hovered is not None else None
        new_id = hit.id if hit is not None else None
        self._hovered = hit
        return prev_id != new_id

    @property
    def hovered(self) -> Cluster | None:
        return self._hovered

    @property
    def cursor(self) -> str:
        return "pointer" if self._hovered is not None else ""

    def click(self, point: ScreenPoint) -> Cluster | None:
        """
        Hit-test a click. A single-resource cluster becomes the only selection;
        larger clusters are returned untouched so the caller can zoom into them.
        """
        hit = self.hit_test(point)
        if hit is not None and hit.size == 1:
            self._selected = {hit.id}
            self._restamp_selection()
            hit = self.hit_test(point)
        return hit

    def _is_selected(self, groups: Iterable[MarkerGroup]) -> bool:
        return any(g.id in self._selected for g in groups)

    def _restamp_selection(self) -> None:
        # Keep the last result (and the hovered cluster) in step with the selection.
        self._last = [
            replace(c, selected=self._is_selected(c.groups)) for c in self._last
        ]
        if self._hovered is not None:
            self._hovered = replace(
                self._hovered, selected=self._is_selected(self._hovered.groups)
            )
