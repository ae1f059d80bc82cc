from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from clusters.engine import Cluster
from settings.types import LayerSettings


DEFAULT_BADGE_RADIUS_PX = 20
BADGE_BORDER_WIDTH_PX = 3
DEFAULT_BORDER_COLOR = "#9ca3af"


@dataclass(frozen=True)
class MarkerStyle:
    kind: Literal["badge", "icon"]
    label: str | None = None
    radius: int | None = None
    border_color: str | None = None
    border_width: int | None = None
    icon_src: str | None = None

    def to_dict(self) -> dict[str, Any]:
        if self.kind == "badge":
            return {
                "kind": "badge",
                "label": self.label,
                "radius": self.radius,
                "stroke": {"color": self.border_color, "width": self.border_width},
            }
        return {"kind": "icon", "src": self.icon_src}


def style_for(
    cluster: Cluster,
    layer: LayerSettings,
    *,
    badge_radius: int = DEFAULT_BADGE_RADIUS_PX,
) -> MarkerStyle:
    if cluster.size >= 2:
        return MarkerStyle(
            kind="badge",
            label=str(cluster.size),
            radius=badge_radius,
            border_color=layer.clusterBorderColor or DEFAULT_BORDER_COLOR,
            border_width=BADGE_BORDER_WIDTH_PX,
        )
    return MarkerStyle(kind="icon", icon_src=icon_for(cluster, layer))


def icon_for(cluster: Cluster, layer: LayerSettings) -> str:
    category = cluster.anchor.first.category
    if cluster.selected:
        if category and category in layer.selectedCategoryIcons:
            return layer.selectedCategoryIcons[category]
        if layer.selectedIconSrc:
            return layer.selectedIconSrc
    if category and category in layer.categoryIcons:
        return layer.categoryIcons[category]
    return layer.iconSrc
