from __future__ import annotations

from typing import Any, Sequence

from shapely.geometry import Point
from shapely.geometry import box as shapely_box
from shapely.strtree import STRtree

from geo.viewport import ScreenPoint


def greedy_clusters(
    points: Sequence[ScreenPoint],
    *,
    pixel_distance: float,
    min_distance: float = 0.0,
) -> list[list[int]]:
    """
    Distance-based greedy clustering over screen points.

    Points are visited in input order. Each unclaimed point anchors a new cluster and
    absorbs every unclaimed point within `pixel_distance` of the anchor that also keeps
    at least `min_distance` from every point absorbed so far (the anchor itself only
    bounds by `pixel_distance`). Returns lists of input indices; each index appears in
    exactly one list and the first index of each list is its anchor.
    """
    if pixel_distance < 0:
        raise ValueError("pixel_distance must be >= 0")
    n = len(points)
    if n == 0:
        return []

    # The STRtree only narrows candidates to the anchor's bounding square.
    tree = STRtree([Point(p.x, p.y) for p in points])
    claimed = [False] * n
    out: list[list[int]] = []

    for i in range(n):
        if claimed[i]:
            continue
        claimed[i] = True
        anchor = points[i]
        members = [i]
        absorbed: list[ScreenPoint] = []

        window = shapely_box(
            anchor.x - pixel_distance,
            anchor.y - pixel_distance,
            anchor.x + pixel_distance,
            anchor.y + pixel_distance,
        )
        for j in sorted(_to_int_list(tree.query(window))):
            if claimed[j]:
                continue
            p = points[j]
            if anchor.distance_to(p) > pixel_distance:
                continue
            if any(p.distance_to(q) < min_distance for q in absorbed):
                continue
            claimed[j] = True
            members.append(j)
            absorbed.append(p)
        out.append(members)

    return out


def _to_int_list(idxs: Any) -> list[int]:
    if idxs is None:
        return []
    return [int(i) for i in idxs]
