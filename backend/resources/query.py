from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping

from resources.types import Resource, ResourceKind


PAGINATION_LIMIT_MIN = 1
PAGINATION_LIMIT_MAX = 100
DEFAULT_SORT = "createdAt"

SORTABLE_FIELDS: dict[ResourceKind, tuple[str, ...]] = {
    "containers": ("category", "wayName", "municipalityName", "createdAt", "modifiedAt"),
    "trucks": (
        "licensePlate",
        "make",
        "model",
        "personCapacity",
        "wayName",
        "municipalityName",
        "createdAt",
        "modifiedAt",
    ),
    "warehouses": ("wayName", "municipalityName", "createdAt", "modifiedAt"),
}

_FIELD_GETTERS: dict[str, Callable[[Resource], Any]] = {
    "category": lambda r: r.category,
    "wayName": lambda r: r.way_name,
    "municipalityName": lambda r: r.municipality_name,
}


@dataclass(frozen=True)
class ListQuery:
    """
    Provider-side list filter, mirroring the EcoMap list endpoints.
    """

    limit: int = PAGINATION_LIMIT_MAX
    offset: int = 0
    sort: str = DEFAULT_SORT
    order: str = "asc"
    category: str | None = None
    way_name: str | None = None
    municipality_name: str | None = None
    license_plate: str | None = None
    logical_operator: str = "and"


class InvalidQueryError(ValueError):
    def __init__(self, field_name: str):
        super().__init__(f"invalid filter value: {field_name}")
        self.field_name = field_name


def parse_list_query(kind: ResourceKind, params: Mapping[str, str]) -> ListQuery:
    """
    Parse raw query parameters for a list request.

    Unlike the client-side filter codecs this is strict: bad values raise
    `InvalidQueryError`, which the service turns into a 400.
    """
    limit = _parse_int(params.get("limit"), "limit", default=PAGINATION_LIMIT_MAX)
    if not PAGINATION_LIMIT_MIN <= limit <= PAGINATION_LIMIT_MAX:
        raise InvalidQueryError("limit")
    offset = _parse_int(params.get("offset"), "offset", default=0)
    if offset < 0:
        raise InvalidQueryError("offset")

    sort = params.get("sort") or DEFAULT_SORT
    if sort not in SORTABLE_FIELDS[kind]:
        raise InvalidQueryError("sort")
    order = params.get("order") or "asc"
    if order not in {"asc", "desc"}:
        raise InvalidQueryError("order")
    logical_operator = params.get("logicalOperator") or "and"
    if logical_operator not in {"and", "or"}:
        raise InvalidQueryError("logicalOperator")

    return ListQuery(
        limit=limit,
        offset=offset,
        sort=sort,
        order=order,
        category=params.get("category") or None,
        way_name=params.get("wayName") or None,
        municipality_name=params.get("municipalityName") or None,
        license_plate=params.get("licensePlate") or None,
        logical_operator=logical_operator,
    )


def filter_resources(resources: Iterable[Resource], q: ListQuery) -> list[Resource]:
    out: list[Resource] = []
    for r in resources:
        if q.category is not None and r.category != q.category:
            continue
        if q.license_plate and not _contains(r.props.get("licensePlate"), q.license_plate):
            continue

        location_checks = []
        if q.way_name:
            location_checks.append(_contains(r.way_name, q.way_name))
        if q.municipality_name:
            location_checks.append(_contains(r.municipality_name, q.municipality_name))
        if location_checks:
            ok = any(location_checks) if q.logical_operator == "or" else all(location_checks)
            if not ok:
                continue
        out.append(r)
    return out


def sort_resources(resources: list[Resource], *, sort: str, order: str) -> list[Resource]:
    getter = _FIELD_GETTERS.get(sort) or (lambda r: (r.props or {}).get(sort))

    # Stable sorts: pre-sorting by id makes ties deterministic.
    out = sorted(resources, key=lambda r: r.id)
    present = [r for r in out if getter(r) is not None]
    missing = [r for r in out if getter(r) is None]
    present.sort(key=getter, reverse=(order == "desc"))
    # Missing values always go last.
    return [*present, *missing]


def list_page(resources: Iterable[Resource], q: ListQuery) -> tuple[list[Resource], int]:
    """
    Filter, sort and slice. Returns (page_items, total_matching).
    """
    matched = filter_resources(resources, q)
    ordered = sort_resources(matched, sort=q.sort, order=q.order)
    return ordered[q.offset : q.offset + q.limit], len(ordered)


def _contains(value: Any, needle: str) -> bool:
    if value is None:
        return False
    return needle.casefold() in str(value).casefold()


def _parse_int(raw: str | None, field_name: str, *, default: int) -> int:
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise InvalidQueryError(field_name) from None
