from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from resources.decode import resource_to_api
from resources.query import InvalidQueryError, list_page, parse_list_query
from resources.seed import Dataset
from resources.types import RESOURCE_KINDS, ResourceKind

logger = logging.getLogger(__name__)

router = APIRouter()


def error_response(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"code": code, "message": message})


def _dataset(request: Request) -> Dataset:
    return request.app.state.dataset


def list_resources(kind: ResourceKind, request: Request) -> Any:
    params = dict(request.query_params)
    try:
        q = parse_list_query(kind, params)
    except InvalidQueryError as e:
        logger.info("rejected %s list query: %s", kind, e)
        return error_response(400, "bad_request", str(e))

    items, total = list_page(_dataset(request).get(kind, []), q)
    return {"total": total, kind: [resource_to_api(r) for r in items]}


def get_resource(kind: ResourceKind, resource_id: str, request: Request) -> Any:
    for r in _dataset(request).get(kind, []):
        if r.id == resource_id:
            return resource_to_api(r)
    return error_response(404, "not_found", f"{kind[:-1]} not found")


def _register(kind: ResourceKind) -> None:
    async def list_endpoint(request: Request):
        return list_resources(kind, request)

    async def get_endpoint(resource_id: str, request: Request):
        return get_resource(kind, resource_id, request)

    router.add_api_route(f"/{kind}", list_endpoint, methods=["GET"], name=f"list_{kind}")
    router.add_api_route(
        f"/{kind}/{{resource_id}}", get_endpoint, methods=["GET"], name=f"get_{kind}"
    )


for _kind in RESOURCE_KINDS:
    _register(_kind)
