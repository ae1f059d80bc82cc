from __future__ import annotations

from typing import Any

from clusters.engine import Cluster
from clusters.style import style_for
from geo.viewport import Viewport
from resources.decode import resource_to_api
from resources.types import ResourceKind
from settings.types import LayerSettings


def cluster_marker(
    cluster: Cluster, layer: LayerSettings, viewport: Viewport, *, badge_radius: int
) -> dict[str, Any]:
    out: dict[str, Any] = {
        "id": cluster.id,
        "lon": cluster.lon,
        "lat": cluster.lat,
        "x": round(cluster.point.x, 2),
        "y": round(cluster.point.y, 2),
        "size": cluster.size,
        "selected": cluster.selected,
        "inView": viewport.contains(cluster.point),
        "groupIds": cluster.group_ids,
        "style": style_for(cluster, layer, badge_radius=badge_radius).to_dict(),
    }
    if len(cluster.groups) == 1:
        # Single location: info-window title and snippet.
        g = cluster.anchor
        out["title"] = g.title
        out["snippet"] = g.snippet
        out["resources"] = [resource_to_api(r) for r in g.members]
    return out


def clusters_payload(
    kind: ResourceKind,
    clusters: list[Cluster],
    layer: LayerSettings,
    viewport: Viewport,
    *,
    badge_radius: int,
    total: int | None = None,
    complete: bool = True,
) -> dict[str, Any]:
    return {
        "kind": kind,
        "title": layer.title,
        "viewport": {
            "center": {"lon": viewport.center_lon, "lat": viewport.center_lat},
            "zoom": viewport.zoom,
            "width": viewport.width,
            "height": viewport.height,
            "bbox": viewport.bbox().as_list(),
        },
        "total": total,
        "complete": complete,
        "resourceCount": sum(c.size for c in clusters),
        "markers": [
            cluster_marker(c, layer, viewport, badge_radius=badge_radius)
            for c in clusters
        ],
    }
