from __future__ import annotations

from typing import Callable

import httpx

LocationListener = Callable[["QueryLocation"], None]


class QueryLocation:
    """
    The shareable query representation: a pathname plus flat query parameters,
    like a browser URL without the host.

    Listeners run synchronously after every change.
    """

    def __init__(self, pathname: str = "/", params: httpx.QueryParams | str | None = None):
        self._pathname = pathname
        self._params = httpx.QueryParams(params or "")
        self._listeners: list[LocationListener] = []

    @classmethod
    def from_href(cls, href: str) -> "QueryLocation":
        url = httpx.URL(href)
        return cls(url.path or "/", url.params)

    @property
    def pathname(self) -> str:
        return self._pathname

    @property
    def params(self) -> httpx.QueryParams:
        return self._params

    @property
    def href(self) -> str:
        qs = str(self._params)
        return f"{self._pathname}?{qs}" if qs else self._pathname

    def push(self, params: httpx.QueryParams) -> None:
        self.navigate(self._pathname, params)

    def navigate(self, pathname: str, params: httpx.QueryParams | str | None = None) -> None:
        new_params = httpx.QueryParams(params or "")
        if pathname == self._pathname and new_params == self._params:
            return
        self._pathname = pathname
        self._params = new_params
        for listener in list(self._listeners):
            listener(self)

    def subscribe(self, listener: LocationListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
