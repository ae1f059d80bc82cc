from __future__ import annotations

import pytest

from clusters.engine import ClusterRenderEngine
from clusters.greedy import greedy_clusters
from clusters.style import style_for
from geo.viewport import ScreenPoint, Viewport
from grouping.index import LocationGroupingIndex
from resources.types import Resource
from settings.types import LayerSettings

VP = Viewport(center_lon=-9.14, center_lat=38.72, zoom=15, width=800, height=600)

LAYER = LayerSettings(
    title="Containers",
    iconSrc="/icons/default.svg",
    selectedIconSrc="/icons/default-selected.svg",
    categoryIcons={"glass": "/icons/glass.svg"},
    selectedCategoryIcons={"glass": "/icons/glass-selected.svg"},
    clusterBorderColor="#123456",
)


def _at(id: str, x: float, y: float, category: str = "glass") -> Resource:
    lon, lat = VP.unproject(ScreenPoint(x, y))
    return Resource(id=id, kind="containers", lon=lon, lat=lat, category=category)


def _engine(resources: list[Resource]) -> ClusterRenderEngine:
    idx = LocationGroupingIndex()
    idx.extend(resources)
    engine = ClusterRenderEngine()
    engine.set_source(idx.groups())
    return engine


def _pts(*xy):
    return [ScreenPoint(x, y) for x, y in xy]


def test_greedy_absorbs_within_distance_in_input_order():
    pts = _pts((0, 0), (30, 0), (100, 0))
    assert greedy_clusters(pts, pixel_distance=50, min_distance=10) == [[0, 1], [2]]


def test_greedy_min_separation_between_absorbed_members():
    # (25, 0) is near the anchor but only 5px from the already absorbed (20, 0).
    pts = _pts((0, 0), (20, 0), (25, 0))
    assert greedy_clusters(pts, pixel_distance=50, min_distance=10) == [[0, 1], [2]]
    assert greedy_clusters(pts, pixel_distance=50, min_distance=0) == [[0, 1, 2]]


def test_greedy_chain_does_not_merge_transitively():
    pts = _pts((0, 0), (40, 0), (80, 0), (120, 0))
    assert greedy_clusters(pts, pixel_distance=50, min_distance=10) == [[0, 1], [2, 3]]


def test_greedy_is_deterministic_and_covers_every_point():
    pts = _pts(*[((i * 37) % 400, (i * 53) % 300) for i in range(200)])
    a = greedy_clusters(pts, pixel_distance=50, min_distance=10)
    b = greedy_clusters(pts, pixel_distance=50, min_distance=10)
    assert a == b
    flat = sorted(i for c in a for i in c)
    assert flat == list(range(200))
    for c in a:
        anchor = pts[c[0]]
        assert all(anchor.distance_to(pts[i]) <= 50 for i in c)


def test_greedy_empty_input():
    assert greedy_clusters([], pixel_distance=50) == []


def test_cluster_size_counts_resources_not_locations():
    resources = [
        _at("a", 400, 300),
        _at("b", 400, 300),
        _at("c", 400, 300),
        _at("d", 420, 300),
        _at("far", 700, 100),
    ]
    clusters = _engine(resources).clusters_for(VP)
    sizes = [c.size for c in clusters]
    assert sizes == [4, 1]
    assert sum(sizes) == len(resources)
    assert len(clusters[0].groups) == 2
    assert clusters[0].point.x == pytest.approx(400, abs=0.5)


def test_zooming_out_merges_and_zooming_in_splits():
    resources = [_at("a", 400, 300), _at("b", 440, 300), _at("c", 480, 300)]
    engine = _engine(resources)
    near = engine.clusters_for(VP, pixel_distance=10)
    assert [c.size for c in near] == [1, 1, 1]

    far = Viewport(center_lon=VP.center_lon, center_lat=VP.center_lat, zoom=10)
    merged = engine.clusters_for(far)
    assert len(merged) < 3
    assert sum(c.size for c in merged) == 3
    assert [c.size for c in engine.clusters_for(far, min_distance=0)] == [3]


def test_hit_test_returns_nearest_cluster_within_radius():
    engine = _engine([_at("a", 100, 100), _at("b", 300, 100)])
    assert engine.hit_test(ScreenPoint(0, 0)) is None  # nothing computed yet

    engine.clusters_for(VP)
    hit = engine.hit_test(ScreenPoint(105, 100))
    assert hit is not None and hit.anchor.first.id == "a"
    assert engine.hit_test(ScreenPoint(200, 100)) is None
    assert engine.hit_test(ScreenPoint(200, 100), radius=150).anchor.first.id == "a"


def test_selection_switches_single_icon_to_selected_variant():
    engine = _engine([_at("a", 100, 100), _at("b", 300, 100, category="paper")])
    (a, b) = engine.clusters_for(VP)
    assert style_for(a, LAYER).icon_src == "/icons/glass.svg"
    assert style_for(b, LAYER).icon_src == "/icons/default.svg"

    engine.set_selected(a.id, True)
    engine.set_selected(b.id, True)
    (a, b) = engine.clusters_for(VP)
    assert a.selected and b.selected
    assert style_for(a, LAYER).icon_src == "/icons/glass-selected.svg"
    assert style_for(b, LAYER).icon_src == "/icons/default-selected.svg"

    engine.set_selected(a.id, False)
    assert engine.selected_ids == frozenset({b.id})
    engine.clear_selection()
    assert engine.selected_ids == frozenset()


def test_unknown_category_falls_back_to_layer_icon():
    engine = _engine([_at("a", 100, 100, category="furniture")])
    (a,) = engine.clusters_for(VP)
    assert style_for(a, LAYER).icon_src == LAYER.iconSrc

    engine.set_selected(a.id, True)
    (a,) = engine.clusters_for(VP)
    assert style_for(a, LAYER).icon_src == LAYER.selectedIconSrc


def test_multi_resource_cluster_renders_as_badge():
    engine = _engine([_at("a", 100, 100), _at("b", 110, 100)])
    (c,) = engine.clusters_for(VP)
    style = style_for(c, LAYER, badge_radius=20)
    assert style.kind == "badge"
    assert style.label == "2"
    assert style.radius == 20
    assert style.border_color == "#123456"
    assert style.to_dict()["stroke"] == {"color": "#123456", "width": 3}


def test_pointer_move_tracks_hover_and_cursor():
    engine = _engine([_at("a", 100, 100), _at("b", 300, 100)])
    engine.clusters_for(VP)
    assert engine.cursor == ""

    assert engine.pointer_move(ScreenPoint(101, 100)) is True
    assert engine.cursor == "pointer"
    assert engine.pointer_move(ScreenPoint(102, 101)) is False
    assert engine.pointer_move(ScreenPoint(299, 100)) is True
    assert engine.hovered.anchor.first.id == "b"
    assert engine.pointer_move(ScreenPoint(200, 300)) is True
    assert engine.cursor == ""


def test_click_selects_single_resource_exclusively():
    engine = _engine([_at("a", 100, 100), _at("b", 300, 100), _at("c", 305, 100)])
    a, bc = engine.clusters_for(VP)
    engine.set_selected("stale", True)

    assert engine.click(ScreenPoint(100, 100)).id == a.id
    assert engine.selected_ids == frozenset({a.id})

    # Clicking a multi-resource cluster leaves the selection alone.
    assert engine.click(ScreenPoint(300, 100)).size == 2
    assert engine.selected_ids == frozenset({a.id})
    assert engine.click(ScreenPoint(600, 500)) is None


def test_set_source_replaces_previous_groups():
    engine = _engine([_at("a", 100, 100)])
    engine.clusters_for(VP)
    idx = LocationGroupingIndex()
    idx.extend([_at("x", 200, 200), _at("y", 600, 400)])
    engine.set_source(idx.groups())
    assert engine.clusters == []
    out = engine.clusters_for(VP)
    assert [c.anchor.first.id for c in out] == ["x", "y"]


def test_selection_changes_show_up_without_reclustering():
    engine = _engine([_at("a", 100, 100), _at("b", 300, 100)])
    a, b = engine.clusters_for(VP)

    hit = engine.click(ScreenPoint(100, 100))
    assert hit.selected is True
    assert [c.selected for c in engine.clusters] == [True, False]
    assert engine.hit_test(ScreenPoint(100, 100)).selected is True

    engine.set_selected(b.id, True)
    assert [c.selected for c in engine.clusters] == [True, True]

    engine.pointer_move(ScreenPoint(300, 100))
    engine.clear_selection()
    assert [c.selected for c in engine.clusters] == [False, False]
    assert engine.hovered.selected is False
