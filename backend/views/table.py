from __future__ import annotations

import math
from typing import Literal, Sequence

SortDirection = Literal["asc", "desc"]

DEFAULT_VISIBLE_PAGES = 5


def page_count(total: int, page_size: int) -> int:
    if page_size <= 0:
        raise ValueError("page_size must be positive")
    return max(0, math.ceil(total / page_size))


def visible_pages(
    pages: Sequence[int], page_index: int, size: int = DEFAULT_VISIBLE_PAGES
) -> list[int]:
    """
    Window of page numbers around `page_index`, shifted to stay `size` wide
    near either end.
    """
    half = size // 2
    right_remainder = half - min(half, len(pages) - 1 - page_index)
    left_remainder = max(0, half - page_index)

    start = max(0, page_index - half - right_remainder)
    end = min(len(pages) - 1, page_index + half + left_remainder)
    return list(pages[start : end + 1])


def toggle_direction(direction: SortDirection | None) -> SortDirection:
    # None -> asc, asc -> desc, desc -> asc
    return "desc" if direction == "asc" else "asc"
