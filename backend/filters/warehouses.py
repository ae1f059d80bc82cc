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

PATHNAME = f"/{BACK_OFFICE_BASENAME}/warehouses"


@dataclass(frozen=True)
class WarehousesFilters:
    page_index: int = 0
    sort: str = "createdAt"
    order: str = "desc"
    location: str = ""


INITIAL_FILTERS = WarehousesFilters()

PARAM_NAMES = {
    "page_index": "pageIndex",
    "sort": "sort",
    "order": "order",
    "location": "location",
}


def params_to_filters(params: httpx.QueryParams) -> WarehousesFilters:
    return WarehousesFilters(
        page_index=parse_page_index(params.get(PARAM_NAMES["page_index"]), INITIAL_FILTERS.page_index),
        sort=parse_choice(params.get(PARAM_NAMES["sort"]), SORTABLE_FIELDS["warehouses"], INITIAL_FILTERS.sort),
        order=parse_choice(params.get(PARAM_NAMES["order"]), SORT_ORDERS, INITIAL_FILTERS.order),
        location=parse_text(params.get(PARAM_NAMES["location"]), INITIAL_FILTERS.location),
    )


def filters_to_params(
    filters: WarehousesFilters, current: httpx.QueryParams | None = None
) -> httpx.QueryParams:
    return with_params(
        current,
        {
            PARAM_NAMES["page_index"]: str(filters.page_index),
            PARAM_NAMES["sort"]: filters.sort,
            PARAM_NAMES["order"]: filters.order,
            PARAM_NAMES["location"]: filters.location,
        },
    )


def provider_query(filters: WarehousesFilters) -> dict[str, str]:
    q = {"sort": filters.sort, "order": filters.order}
    if filters.location:
        q["wayName"] = filters.location
        q["municipalityName"] = filters.location
        q["logicalOperator"] = "or"
    return q


CODEC: FilterCodec[WarehousesFilters] = FilterCodec(
    pathname=PATHNAME,
    initial=INITIAL_FILTERS,
    to_params=filters_to_params,
    from_params=params_to_filters,
    provider_query=provider_query,
)
