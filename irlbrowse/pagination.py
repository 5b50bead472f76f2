"""Page bookkeeping for listing results."""

from __future__ import annotations

import logging
import math
from typing import List, Tuple, Union

from .models import ELLIPSIS

logger = logging.getLogger(__name__)

ITEMS_PER_PAGE = 16
MAX_VISIBLE_PAGES = 7

PageMarker = Union[int, str]


class Paginator:
    """Tracks the current page against the last server-reported total."""

    def __init__(self, items_per_page: int = ITEMS_PER_PAGE):
        if items_per_page < 1:
            raise ValueError("items_per_page must be at least 1")
        self.items_per_page = items_per_page
        self.current_page = 1
        self.total_items = 0

    @property
    def total_pages(self) -> int:
        return max(1, math.ceil(self.total_items / self.items_per_page))

    @property
    def offset(self) -> int:
        return (self.current_page - 1) * self.items_per_page

    @property
    def has_next(self) -> bool:
        return self.current_page < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.current_page > 1

    def go_to_page(self, page: int) -> bool:
        """Move to ``page``; out-of-range requests are ignored."""
        if page < 1 or page > self.total_pages:
            logger.debug("Ignoring page %d outside 1..%d", page, self.total_pages)
            return False
        self.current_page = page
        return True

    def next_page(self) -> bool:
        return self.go_to_page(self.current_page + 1)

    def previous_page(self) -> bool:
        return self.go_to_page(self.current_page - 1)

    def reset(self) -> None:
        self.current_page = 1

    def update_total(self, total_items: int) -> None:
        """Store a new total and pull the current page back into range."""
        self.total_items = max(0, int(total_items))
        if self.current_page > self.total_pages:
            self.current_page = self.total_pages

    def item_range(self) -> Tuple[int, int]:
        """1-based ``(first, last)`` item numbers shown on the current page."""
        if self.total_items == 0:
            return 0, 0
        start = self.offset + 1
        end = min(self.current_page * self.items_per_page, self.total_items)
        return start, end

    def page_numbers(self) -> List[PageMarker]:
        """Page buttons to render, compressing long runs into ``"..."``."""
        total = self.total_pages
        current = self.current_page
        if total <= MAX_VISIBLE_PAGES:
            return list(range(1, total + 1))

        pages: List[PageMarker] = [1]
        if current > 3:
            pages.append(ELLIPSIS)
        start = max(2, current - 1)
        end = min(total - 1, current + 1)
        pages.extend(range(start, end + 1))
        if current < total - 2:
            pages.append(ELLIPSIS)
        pages.append(total)
        return pages
