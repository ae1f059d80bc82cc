from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal, Protocol

logger = logging.getLogger(__name__)

NoticeType = Literal["success", "error", "warning"]


@dataclass(frozen=True)
class Notice:
    type: NoticeType
    title: str
    description: str = ""


class ErrorSink(Protocol):
    """
    Where the application reports user-facing outcomes (toasts, snackbars, logs).
    The core never performs UI side effects itself.
    """

    def show(self, notice: Notice) -> None: ...


class LoggingErrorSink(ErrorSink):
    def show(self, notice: Notice) -> None:
        level = {
            "error": logging.ERROR,
            "warning": logging.WARNING,
        }.get(notice.type, logging.INFO)
        logger.log(level, "%s: %s", notice.title, notice.description)


class CollectingErrorSink(ErrorSink):
    """
    Keeps every notice in memory. Handy for tests and for batch callers that
    want to report all problems at the end.
    """

    def __init__(self) -> None:
        self.notices: list[Notice] = []

    def show(self, notice: Notice) -> None:
        self.notices.append(notice)
