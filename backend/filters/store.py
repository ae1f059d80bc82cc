from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Generic, TypeVar

import httpx

from filters.debounce import DEFAULT_WAIT_S, Debouncer
from filters.location import QueryLocation
from filters.params import FilterCodec
from notify.sink import ErrorSink, LoggingErrorSink, Notice

logger = logging.getLogger(__name__)

F = TypeVar("F")
D = TypeVar("D")

Listener = Callable[[Any], None]


class _Observable:
    def __init__(self, value: Any):
        self.value = value
        self._listeners: list[Listener] = []

    def set(self, value: Any) -> None:
        self.value = value
        for listener in list(self._listeners):
            listener(value)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)
        listener(self.value)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe


class FilterSyncedStore(Generic[F, D]):
    """
    Keeps typed filters in sync with a `QueryLocation` and (re)fetches data on change.

    State: Idle(initial) -> Loading -> Idle(new data) | Idle(previous data).
    Each fetch gets a generation number; only the newest generation may write
    `data` or clear `loading`, so a slow earlier fetch can never overwrite a newer
    result. Fetch errors are logged and reported to the error sink, never raised.

    While the location is outside `pathname` nothing is fetched and `data` is
    reset to `initial_data`.
    """

    def __init__(
        self,
        pathname: str,
        initial_data: D,
        filters_to_params: Callable[[F, httpx.QueryParams | None], httpx.QueryParams],
        params_to_filters: Callable[[httpx.QueryParams], F],
        data_fn: Callable[[F], Awaitable[D]],
        location: QueryLocation,
        *,
        error_sink: ErrorSink | None = None,
        error_title: str = "Failed to load data",
        debounce_s: float = DEFAULT_WAIT_S,
    ):
        self.pathname = pathname
        self.initial_data = initial_data
        self._filters_to_params = filters_to_params
        self._params_to_filters = params_to_filters
        self._data_fn = data_fn
        self._location = location
        self._sink: ErrorSink = error_sink or LoggingErrorSink()
        self._error_title = error_title

        self._filters = _Observable(params_to_filters(location.params))
        self._data = _Observable(initial_data)
        self._loading = _Observable(False)
        self._generation = 0
        self._task: asyncio.Task | None = None
        self._debouncer = Debouncer(debounce_s)
        self._unsubscribe_location = location.subscribe(self._on_location)

    @classmethod
    def from_codec(
        cls,
        codec: FilterCodec[F],
        initial_data: D,
        data_fn: Callable[[F], Awaitable[D]],
        location: QueryLocation,
        **kwargs: Any,
    ) -> "FilterSyncedStore[F, D]":
        return cls(
            codec.pathname,
            initial_data,
            codec.to_params,
            codec.from_params,
            data_fn,
            location,
            **kwargs,
        )

    # -- reads

    @property
    def filters(self) -> F:
        return self._filters.value

    @property
    def data(self) -> D:
        return self._data.value

    @property
    def loading(self) -> bool:
        return self._loading.value

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def location(self) -> QueryLocation:
        return self._location

    def is_active(self) -> bool:
        return self._location.pathname == self.pathname

    def subscribe_filters(self, listener: Callable[[F], None]) -> Callable[[], None]:
        return self._filters.subscribe(listener)

    def subscribe_data(self, listener: Callable[[D], None]) -> Callable[[], None]:
        return self._data.subscribe(listener)

    def subscribe_loading(self, listener: Callable[[bool], None]) -> Callable[[], None]:
        return self._loading.subscribe(listener)

    # -- writes

    def set_filters(self, filters: F) -> asyncio.Task | None:
        """
        Write `filters` to the location. The location change triggers the fetch;
        returns the fetch task (None when the store is not active).
        """
        self._debouncer.cancel()
        before = self._generation
        self._location.push(self._filters_to_params(filters, self._location.params))
        if self._generation == before and self.is_active():
            # Same query string as before: the location did not notify.
            self._start_fetch(self.filters)
        return self._task if self.is_active() else None

    def update_filters(self, fn: Callable[[F], F]) -> asyncio.Task | None:
        return self.set_filters(fn(self.filters))

    def set_filters_debounced(self, filters: F) -> None:
        """
        Coalesce rapid edits (typing in a search box) into one location write.
        """
        self._debouncer.call(self.set_filters, filters)

    async def fetch_now(self) -> None:
        if not self.is_active():
            return
        await self._await_task(self._start_fetch(self.filters))

    async def wait(self) -> None:
        """
        Wait until the newest fetch (including ones started meanwhile) finished.
        """
        while self._task is not None and not self._task.done():
            await self._await_task(self._task)

    def close(self) -> None:
        self._debouncer.cancel()
        self._unsubscribe_location()

    # -- internals

    def _on_location(self, location: QueryLocation) -> None:
        filters = self._params_to_filters(location.params)
        self._filters.set(filters)
        if location.pathname == self.pathname:
            self._start_fetch(filters)
            return
        # Leaving the page: forget in-flight work and reset to the initial state.
        self._generation += 1
        self._task = None
        self._data.set(self.initial_data)
        self._loading.set(False)

    def _start_fetch(self, filters: F) -> asyncio.Task:
        self._generation += 1
        generation = self._generation
        self._loading.set(True)
        task = asyncio.get_running_loop().create_task(self._run(generation, filters))
        self._task = task
        return task

    async def _run(self, generation: int, filters: F) -> None:
        try:
            result = await self._data_fn(filters)
        except Exception as e:
            if generation != self._generation:
                logger.debug("ignoring failure of superseded fetch gen=%d", generation)
                return
            logger.exception("fetch failed pathname=%s filters=%r", self.pathname, filters)
            self._loading.set(False)
            self._sink.show(Notice(type="error", title=self._error_title, description=str(e)))
            return

        if generation != self._generation:
            logger.debug("discarding stale result gen=%d (latest=%d)", generation, self._generation)
            return
        self._data.set(result)
        self._loading.set(False)

    @staticmethod
    async def _await_task(task: asyncio.Task) -> None:
        await asyncio.wait({task})
