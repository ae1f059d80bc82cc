from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Literal, TypeAlias, Union


ResourceKind = Literal["containers", "trucks", "warehouses"]

RESOURCE_KINDS: tuple[ResourceKind, ...] = ("containers", "trucks", "warehouses")

CONTAINER_CATEGORIES: tuple[str, ...] = (
    "general",
    "glass",
    "hazardous",
    "metal",
    "organic",
    "paper",
    "plastic",
)


@dataclass(frozen=True)
class Resource:
    """
    A located resource as returned by the provider.

    `props` holds the opaque provider metadata (timestamps, license plate, ...).
    """

    id: str
    kind: ResourceKind
    lon: float
    lat: float
    category: str | None = None
    way_name: str | None = None
    municipality_name: str | None = None
    props: dict[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self) -> None:
        if not (math.isfinite(self.lon) and math.isfinite(self.lat)):
            raise ValueError(f"Resource {self.id!r} has a non-finite coordinate")


@dataclass(frozen=True)
class Page:
    items: tuple[Resource, ...]
    total: int
    offset: int
    limit: int

    def __post_init__(self) -> None:
        if self.limit <= 0:
            raise ValueError("Page limit must be positive")
        if self.offset < 0 or self.total < 0:
            raise ValueError("Page offset and total must be non-negative")
        if len(self.items) > self.limit:
            raise ValueError(
                f"Page holds {len(self.items)} items but limit is {self.limit}"
            )


@dataclass(frozen=True)
class PageFailure:
    """
    A page that could not be fetched or decoded.

    Fetchers return this instead of raising so callers can tell a failed page apart
    from an empty one.
    """

    offset: int
    limit: int
    reason: str
    status_code: int | None = None


PageOutcome: TypeAlias = Union[Page, PageFailure]
