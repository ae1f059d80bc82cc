from __future__ import annotations

import math
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from resources.types import Page, Resource, ResourceKind


class ApiGeometryPoint(BaseModel):
    type: Literal["Point"] = "Point"
    coordinates: list[float] = Field(min_length=2, max_length=3)

    @field_validator("coordinates")
    @classmethod
    def _finite(cls, v: list[float]) -> list[float]:
        if not all(math.isfinite(c) for c in v):
            raise ValueError("coordinates must be finite numbers")
        lon, lat = v[0], v[1]
        if not (-180.0 <= lon <= 180.0 and -90.0 <= lat <= 90.0):
            raise ValueError("coordinates out of WGS84 range")
        return v


class ApiFeatureProperties(BaseModel):
    wayName: str | None = None
    municipalityName: str | None = None


class ApiFeaturePoint(BaseModel):
    type: Literal["Feature"] = "Feature"
    geometry: ApiGeometryPoint
    properties: ApiFeatureProperties = Field(default_factory=ApiFeatureProperties)


class ApiResource(BaseModel):
    """
    Wire shape shared by containers, trucks and warehouses.

    Anything beyond id/category/geoJson is kept as opaque metadata. Categories are
    not checked against the known container set; unknown ones render with the
    layer's default icon.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    category: str | None = None
    geoJson: ApiFeaturePoint

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, v: Any) -> Any:
        # UUIDs and integer ids both arrive; we key on the string form.
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


class ApiPage(BaseModel):
    model_config = ConfigDict(extra="allow")

    total: int = Field(ge=0)
    items: list[ApiResource] | None = None


def resource_from_api(kind: ResourceKind, r: ApiResource) -> Resource:
    lon, lat = r.geoJson.geometry.coordinates[0], r.geoJson.geometry.coordinates[1]
    props = dict(r.model_extra or {})
    return Resource(
        id=r.id,
        kind=kind,
        lon=float(lon),
        lat=float(lat),
        category=r.category,
        way_name=r.geoJson.properties.wayName or None,
        municipality_name=r.geoJson.properties.municipalityName or None,
        props=props,
    )


def resource_to_api(r: Resource) -> dict[str, Any]:
    out: dict[str, Any] = {"id": r.id}
    if r.category is not None:
        out["category"] = r.category
    properties: dict[str, Any] = {}
    if r.way_name:
        properties["wayName"] = r.way_name
    if r.municipality_name:
        properties["municipalityName"] = r.municipality_name
    out["geoJson"] = {
        "type": "Feature",
        "geometry": {"type": "Point", "coordinates": [r.lon, r.lat]},
        "properties": properties,
    }
    out.update(r.props or {})
    return out


def decode_page(
    kind: ResourceKind, payload: Any, *, limit: int, offset: int
) -> Page:
    """
    Validate a provider response body into a typed `Page`.

    The item list may live under `items` or under the kind's plural key
    (e.g. `containers`), which is what the EcoMap API sends.
    Raises `pydantic.ValidationError` / `ValueError` on malformed input.
    """
    if not isinstance(payload, dict):
        raise ValueError(f"Expected a JSON object, got {type(payload).__name__}")

    body = dict(payload)
    if body.get("items") is None and kind in body:
        body["items"] = body.pop(kind)
    api_page = ApiPage.model_validate(body)

    items = tuple(resource_from_api(kind, r) for r in (api_page.items or []))
    return Page(items=items, total=api_page.total, offset=offset, limit=limit)
