from __future__ import annotations

import asyncio
import logging

import pytest

from filters.debounce import Debouncer
from notify.sink import CollectingErrorSink, LoggingErrorSink, Notice


def test_debouncer_runs_only_the_last_call():
    async def main():
        calls = []
        d = Debouncer(0.03)
        d.call(calls.append, "a")
        d.call(calls.append, "b")
        assert d.pending
        await asyncio.sleep(0.08)
        assert calls == ["b"]
        assert not d.pending

        d.call(calls.append, "c")
        d.cancel()
        await asyncio.sleep(0.05)
        assert calls == ["b"]

    asyncio.run(main())


def test_debouncer_rejects_negative_wait():
    with pytest.raises(ValueError):
        Debouncer(-1)


def test_logging_sink_maps_notice_type_to_level(caplog):
    sink = LoggingErrorSink()
    with caplog.at_level(logging.INFO, logger="notify.sink"):
        sink.show(Notice(type="error", title="Failed to load trucks", description="HTTP 500"))
        sink.show(Notice(type="success", title="Saved"))
    levels = [r.levelno for r in caplog.records]
    assert levels == [logging.ERROR, logging.INFO]
    assert "Failed to load trucks: HTTP 500" in caplog.records[0].getMessage()


def test_collecting_sink_keeps_order():
    sink = CollectingErrorSink()
    sink.show(Notice(type="warning", title="a"))
    sink.show(Notice(type="error", title="b"))
    assert [n.title for n in sink.notices] == ["a", "b"]
