from __future__ import annotations

from dataclasses import dataclass

import httpx

from filters.params import (
    BACK_OFFICE_BASENAME,
    SORT_ORDERS,
    FilterCodec,
    parse_choice,
    parse_page_index,
    parse_text,
    with_params,
)
from resources.query import SORTABLE_FIELDS
from resources.types import CONTAINER_CATEGORIES

PATHNAME = f"/{BACK_OFFICE_BASENAME}/containers"


@dataclass(frozen=True)
class ContainersFilters:
    page_index: int = 0
    sort: str = "category"
    order: str = "asc"
    # Free text matched against the way name or the municipality name.
    location: str = ""
    category: str | None = None


INITIAL_FILTERS = ContainersFilters()

PARAM_NAMES = {
    "page_index": "pageIndex",
    "sort": "sort",
    "order": "order",
    "location": "location",
    "category": "category",
}


def params_to_filters(params: httpx.QueryParams) -> ContainersFilters:
    return ContainersFilters(
        page_index=parse_page_index(params.get(PARAM_NAMES["page_index"]), INITIAL_FILTERS.page_index),
        sort=parse_choice(params.get(PARAM_NAMES["sort"]), SORTABLE_FIELDS["containers"], INITIAL_FILTERS.sort),
        order=parse_choice(params.get(PARAM_NAMES["order"]), SORT_ORDERS, INITIAL_FILTERS.order),
        location=parse_text(params.get(PARAM_NAMES["location"]), INITIAL_FILTERS.location),
        category=parse_choice(params.get(PARAM_NAMES["category"]), CONTAINER_CATEGORIES, INITIAL_FILTERS.category),
    )


def filters_to_params(
    filters: ContainersFilters, current: httpx.QueryParams | None = None
) -> httpx.QueryParams:
    return with_params(
        current,
        {
            PARAM_NAMES["page_index"]: str(filters.page_index),
            PARAM_NAMES["sort"]: filters.sort,
            PARAM_NAMES["order"]: filters.order,
            PARAM_NAMES["location"]: filters.location,
            PARAM_NAMES["category"]: filters.category,
        },
    )


def provider_query(filters: ContainersFilters) -> dict[str, str]:
    """
    Filter fields sent to `GET /containers` (pagination is added by the caller).
    """
    q = {"sort": filters.sort, "order": filters.order}
    if filters.category:
        q["category"] = filters.category
    if filters.location:
        q["wayName"] = filters.location
        q["municipalityName"] = filters.location
        q["logicalOperator"] = "or"
    return q


CODEC: FilterCodec[ContainersFilters] = FilterCodec(
    pathname=PATHNAME,
    initial=INITIAL_FILTERS,
    to_params=filters_to_params,
    from_params=params_to_filters,
    provider_query=provider_query,
)
