from __future__ import annotations

import asyncio
from typing import Any, Callable

DEFAULT_WAIT_S = 0.2


class Debouncer:
    """
    Delay a call until `wait_s` seconds pass without another `call`.
    Only the last call's arguments are used. Needs a running event loop.
    """

    def __init__(self, wait_s: float = DEFAULT_WAIT_S):
        if wait_s < 0:
            raise ValueError("wait_s must be >= 0")
        self.wait_s = wait_s
        self._handle: asyncio.TimerHandle | None = None

    def call(self, fn: Callable[..., Any], *args: Any) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.wait_s, self._fire, fn, args)

    def _fire(self, fn: Callable[..., Any], args: tuple[Any, ...]) -> None:
        self._handle = None
        fn(*args)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    @property
    def pending(self) -> bool:
        return self._handle is not None
