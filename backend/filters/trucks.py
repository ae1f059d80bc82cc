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

PATHNAME = f"/{BACK_OFFICE_BASENAME}/trucks"


@dataclass(frozen=True)
class TrucksFilters:
    page_index: int = 0
    sort: str = "createdAt"
    order: str = "desc"
    license_plate: str = ""


INITIAL_FILTERS = TrucksFilters()

PARAM_NAMES = {
    "page_index": "pageIndex",
    "sort": "sort",
    "order": "order",
    "license_plate": "licensePlate",
}


def params_to_filters(params: httpx.QueryParams) -> TrucksFilters:
    return TrucksFilters(
        page_index=parse_page_index(params.get(PARAM_NAMES["page_index"]), INITIAL_FILTERS.page_index),
        sort=parse_choice(params.get(PARAM_NAMES["sort"]), SORTABLE_FIELDS["trucks"], INITIAL_FILTERS.sort),
        order=parse_choice(params.get(PARAM_NAMES["order"]), SORT_ORDERS, INITIAL_FILTERS.order),
        license_plate=parse_text(params.get(PARAM_NAMES["license_plate"]), INITIAL_FILTERS.license_plate),
    )


def filters_to_params(
    filters: TrucksFilters, current: httpx.QueryParams | None = None
) -> httpx.QueryParams:
    return with_params(
        current,
        {
            PARAM_NAMES["page_index"]: str(filters.page_index),
            PARAM_NAMES["sort"]: filters.sort,
            PARAM_NAMES["order"]: filters.order,
            PARAM_NAMES["license_plate"]: filters.license_plate,
        },
    )


def provider_query(filters: TrucksFilters) -> dict[str, str]:
    q = {"sort": filters.sort, "order": filters.order}
    if filters.license_plate:
        q["licensePlate"] = filters.license_plate
    return q


CODEC: FilterCodec[TrucksFilters] = FilterCodec(
    pathname=PATHNAME,
    initial=INITIAL_FILTERS,
    to_params=filters_to_params,
    from_params=params_to_filters,
    provider_query=provider_query,
)
