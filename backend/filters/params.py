from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Collection, Generic, Mapping, TypeVar

import httpx

F = TypeVar("F")

BACK_OFFICE_BASENAME = "back-office"
SORT_ORDERS = ("asc", "desc")


@dataclass(frozen=True)
class FilterCodec(Generic[F]):
    """
    Everything a store needs to sync one resource's filters with the query string.
    """

    pathname: str
    initial: F
    to_params: Callable[[F, httpx.QueryParams | None], httpx.QueryParams]
    from_params: Callable[[httpx.QueryParams], F]
    provider_query: Callable[[F], dict[str, str]]


def parse_page_index(raw: str | None, default: int = 0) -> int:
    # Only non-negative ASCII integers; "1.5", "-1", "abc", "²" fall back.
    if raw is None:
        return default
    v = raw.strip()
    if not (v.isascii() and v.isdigit()):
        return default
    try:
        return int(v)
    except ValueError:
        # Longer than the interpreter's int digit limit.
        return default


def parse_choice(raw: str | None, allowed: Collection[str], default: str | None) -> str | None:
    if raw is not None and raw in allowed:
        return raw
    return default


def parse_text(raw: str | None, default: str = "") -> str:
    return raw or default


def with_params(
    current: httpx.QueryParams | None, updates: Mapping[str, str | None]
) -> httpx.QueryParams:
    """
    Apply `updates` on top of `current`: empty values remove the key, everything
    else replaces it. Unrelated keys are kept.
    """
    out = httpx.QueryParams(current or "")
    for key, value in updates.items():
        if value:
            out = out.set(key, value)
        else:
            out = out.remove(key)
    return out
