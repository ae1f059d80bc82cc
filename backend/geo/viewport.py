from __future__ import annotations

import math
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterable, Sequence

from pyproj import Transformer

from geo.aoi import BBox


TILE_SIZE_PX = 256
_EARTH_RADIUS_M = 6378137.0
_MAX_MERCATOR_LAT = 85.05112878
_MIN_ZOOM = 0.0
_MAX_ZOOM = 22.0


@dataclass(frozen=True)
class ScreenPoint:
    x: float
    y: float

    def distance_to(self, other: "ScreenPoint") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)


@lru_cache(maxsize=1)
def transformer_4326_to_3857() -> Transformer:
    return Transformer.from_crs("EPSG:4326", "EPSG:3857", always_xy=True)


@lru_cache(maxsize=1)
def transformer_3857_to_4326() -> Transformer:
    return Transformer.from_crs("EPSG:3857", "EPSG:4326", always_xy=True)


def meters_per_pixel(zoom: float) -> float:
    return 2.0 * math.pi * _EARTH_RADIUS_M / (TILE_SIZE_PX * 2.0**zoom)


def _clamp_lat(lat: float) -> float:
    return max(-_MAX_MERCATOR_LAT, min(_MAX_MERCATOR_LAT, float(lat)))


@dataclass(frozen=True)
class Viewport:
    """
    What the render surface currently shows: a Web Mercator view of
    `width x height` pixels centred on (center_lon, center_lat) at `zoom`.

    Screen origin is the top-left corner, y grows downwards.
    """

    center_lon: float
    center_lat: float
    zoom: float
    width: int = 900
    height: int = 600

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError("Viewport size must be positive")
        if not _MIN_ZOOM <= self.zoom <= _MAX_ZOOM:
            raise ValueError(f"Viewport zoom must be within [{_MIN_ZOOM}, {_MAX_ZOOM}]")

    def _center_m(self) -> tuple[float, float]:
        return transformer_4326_to_3857().transform(
            self.center_lon, _clamp_lat(self.center_lat)
        )

    def project(self, lon: float, lat: float) -> ScreenPoint:
        return self.project_many([(lon, lat)])[0]

    def project_many(self, coords: Sequence[tuple[float, float]]) -> list[ScreenPoint]:
        if not coords:
            return []
        lons = [float(lon) for lon, _ in coords]
        lats = [_clamp_lat(lat) for _, lat in coords]
        xs, ys = transformer_4326_to_3857().transform(lons, lats)
        cx, cy = self._center_m()
        res = meters_per_pixel(self.zoom)
        half_w = self.width / 2.0
        half_h = self.height / 2.0
        return [
            ScreenPoint(x=half_w + (float(x) - cx) / res, y=half_h - (float(y) - cy) / res)
            for x, y in zip(xs, ys)
        ]

    def unproject(self, point: ScreenPoint) -> tuple[float, float]:
        cx, cy = self._center_m()
        res = meters_per_pixel(self.zoom)
        mx = cx + (point.x - self.width / 2.0) * res
        my = cy - (point.y - self.height / 2.0) * res
        lon, lat = transformer_3857_to_4326().transform(mx, my)
        return float(lon), float(lat)

    def bbox(self) -> BBox:
        min_lon, max_lat = self.unproject(ScreenPoint(0.0, 0.0))
        max_lon, min_lat = self.unproject(ScreenPoint(float(self.width), float(self.height)))
        return BBox(
            min_lon=min_lon, min_lat=min_lat, max_lon=max_lon, max_lat=max_lat
        ).normalized()

    def contains(self, point: ScreenPoint, *, margin_px: float = 0.0) -> bool:
        return (
            -margin_px <= point.x <= self.width + margin_px
            and -margin_px <= point.y <= self.height + margin_px
        )


def fit_viewport(
    coords: Iterable[tuple[float, float]],
    *,
    width: int = 900,
    height: int = 600,
    max_zoom: float = 18.0,
) -> Viewport | None:
    """
    Smallest-zoom-loss viewport that shows every coordinate (lon, lat).
    """
    pts = list(coords)
    if not pts:
        return None
    min_lon = min(lon for lon, _ in pts)
    max_lon = max(lon for lon, _ in pts)
    min_lat = min(lat for _, lat in pts)
    max_lat = max(lat for _, lat in pts)

    pad_lon = max(0.003, (max_lon - min_lon) * 0.1)
    pad_lat = max(0.003, (max_lat - min_lat) * 0.1)
    b = BBox(
        min_lon=min_lon - pad_lon,
        min_lat=_clamp_lat(min_lat - pad_lat),
        max_lon=max_lon + pad_lon,
        max_lat=_clamp_lat(max_lat + pad_lat),
    )
    zoom = bbox_to_zoom(b, width=width, height=height)
    zoom = max(_MIN_ZOOM, min(max_zoom, zoom))
    return Viewport(
        center_lon=(b.min_lon + b.max_lon) / 2.0,
        center_lat=(b.min_lat + b.max_lat) / 2.0,
        zoom=zoom,
        width=width,
        height=height,
    )


def bbox_to_zoom(b: BBox, *, width: int, height: int) -> float:
    # WebMercator bbox -> zoom heuristic.
    def lat_to_rad(lat: float) -> float:
        s = math.sin(lat * math.pi / 180.0)
        return math.log((1 + s) / (1 - s)) / 2.0

    lon_delta = max(b.max_lon - b.min_lon, 1e-6)
    lat_delta = max((lat_to_rad(b.max_lat) - lat_to_rad(b.min_lat)) * 180.0 / math.pi, 1e-6)

    zoom_x = math.log2((width * 360.0) / (TILE_SIZE_PX * lon_delta))
    zoom_y = math.log2((height * 360.0) / (TILE_SIZE_PX * lat_delta))
    return float(min(zoom_x, zoom_y))
