from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from resources.types import Resource


# 7 decimals is ~1cm, the precision the EcoMap API stores coordinates with.
DEFAULT_KEY_DECIMALS = 7
UNKNOWN_WAY = "Unknown way"


@dataclass(frozen=True)
class LocationKey:
    lon: float
    lat: float

    @property
    def id(self) -> str:
        return f"{self.lon},{self.lat}"


def location_key(lon: float, lat: float, *, decimals: int = DEFAULT_KEY_DECIMALS) -> LocationKey:
    """
    Canonical grouping key. Exact match after rounding; no distance-based merging.
    """
    # `+ 0.0` folds -0.0 into 0.0 so both land on the same key.
    return LocationKey(lon=round(lon, decimals) + 0.0, lat=round(lat, decimals) + 0.0)


@dataclass
class MarkerGroup:
    """
    One or more resources sharing a location. Never empty, never split.
    """

    key: LocationKey
    members: list[Resource] = field(default_factory=list)

    @property
    def id(self) -> str:
        return self.key.id

    @property
    def first(self) -> Resource:
        return self.members[0]

    @property
    def lon(self) -> float:
        return self.first.lon

    @property
    def lat(self) -> float:
        return self.first.lat

    @property
    def size(self) -> int:
        return len(self.members)

    @property
    def categories(self) -> list[str]:
        seen: dict[str, None] = {}
        for r in self.members:
            if r.category:
                seen.setdefault(r.category, None)
        return list(seen)

    @property
    def title(self) -> str:
        return location_name(self.first.way_name, self.first.municipality_name)

    @property
    def snippet(self) -> str:
        return ", ".join(self.categories)


def location_name(way_name: str | None, municipality_name: str | None) -> str:
    name = way_name or UNKNOWN_WAY
    if municipality_name:
        name += f", {municipality_name}"
    return name


class LocationGroupingIndex:
    """
    Merges resources that share a location into `MarkerGroup`s.

    Groups keep first-seen order so re-renders are stable and appendable.
    Single owner, no locking.
    """

    def __init__(self, *, decimals: int = DEFAULT_KEY_DECIMALS):
        self.decimals = decimals
        self._by_key: dict[LocationKey, MarkerGroup] = {}
        self._ordered: list[MarkerGroup] = []
        self._resource_count = 0

    def add(self, resource: Resource) -> MarkerGroup:
        key = location_key(resource.lon, resource.lat, decimals=self.decimals)
        group = self._by_key.get(key)
        if group is None:
            group = MarkerGroup(key=key, members=[resource])
            self._by_key[key] = group
            self._ordered.append(group)
        else:
            group.members.append(resource)
        self._resource_count += 1
        return group

    def extend(self, resources: Iterable[Resource]) -> None:
        for r in resources:
            self.add(r)

    def get(self, key: LocationKey) -> MarkerGroup | None:
        return self._by_key.get(key)

    def groups(self) -> list[MarkerGroup]:
        return list(self._ordered)

    def clear(self) -> None:
        self._by_key.clear()
        self._ordered.clear()
        self._resource_count = 0

    @property
    def resource_count(self) -> int:
        return self._resource_count

    def __len__(self) -> int:
        return len(self._ordered)
