"""Discovery workflow: filters, debounce, paging and fetch coordination."""

from __future__ import annotations

import dataclasses
import logging
import threading
import time
from concurrent.futures import Executor, Future
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from .client import ApiError, IrlworkClient, RequestTimedOut
from .debounce import DEFAULT_SEARCH_DELAY, DebouncedValue
from .filters import FilterStore
from .geo import Locator, request_location
from .models import HUMANS, KINDS, TASKS, FetchTicket, FilterState, ListingPage, ResultSet
from .pagination import ITEMS_PER_PAGE, Paginator
from .query import QueryParams, build_query, effective_sort
from .refine import refine_humans, sort_tasks

logger = logging.getLogger(__name__)

INSERT = "INSERT"
UPDATE = "UPDATE"
DELETE = "DELETE"

@dataclass
class DiscoverySession:
    """Coordinates filter edits, page state and listing fetches for one kind."""

    client: IrlworkClient
    kind: str = TASKS
    items_per_page: int = ITEMS_PER_PAGE
    search_delay: float = DEFAULT_SEARCH_DELAY
    locator: Optional[Locator] = None
    initial_filters: Optional[FilterState] = None
    clock: Callable[[], float] = field(default=time.monotonic)

    def __post_init__(self) -> None:
        if self.kind not in KINDS:
            raise ValueError(f"Unknown listing kind: {self.kind}")
        self.filters = FilterStore(self.initial_filters)
        self.paginator = Paginator(items_per_page=self.items_per_page)
        self.filters.on_change(self.paginator.reset)
        self.search = DebouncedValue(self.filters.state.search_text,
                                     delay=self.search_delay,
                                     clock=self.clock)
        self.results = ResultSet()
        self.error: Optional[str] = None
        self.loading = False
        self._last_request_id = 0
        self._lock = threading.Lock()

    @property
    def state(self) -> FilterState:
        return self.filters.state

    @property
    def sort(self) -> str:
        return effective_sort(self.filters.state, self.kind)

    def query(self) -> QueryParams:
        return build_query(self.filters.state,
                           self.paginator.current_page,
                           self.items_per_page,
                           kind=self.kind)

    def visible_items(self) -> List[Dict[str, Any]]:
        """Current rows after the local filter and sort pass."""
        state = dataclasses.replace(self.filters.state, sort_key=self.sort)
        if self.kind == HUMANS:
            return refine_humans(self.results.items, state)
        return sort_tasks(self.results.items, self.sort)

    # Filter edits -------------------------------------------------------

    def type_search(self, text: str) -> None:
        """Feed raw search input; it reaches the filters once typing pauses."""
        self.search.set(text)

    def poll(self) -> bool:
        """Commit a settled search and refetch. Returns True if a fetch ran."""
        if not self.search.poll():
            return False
        if not self.filters.set_field("search_text", self.search.committed):
            return False
        self.refresh()
        return True

    def set_filter(self, name: str, value: Any) -> bool:
        if name == "search_text":
            self.search.set(value)
            self.search.flush()
        return self.filters.set_field(name, value)

    def clear_filter(self, name: str) -> bool:
        if name == "search_text":
            self.search.set("")
            self.search.flush()
        return self.filters.clear_field(name)

    def clear_filters(self) -> bool:
        self.search.set("")
        self.search.flush()
        return self.filters.clear_all()

    def go_to_page(self, page: int) -> bool:
        return self.paginator.go_to_page(page)

    # Geo ----------------------------------------------------------------

    def enable_geo_search(self) -> bool:
        """Center the search on the current location if it can be resolved."""
        point = request_location(self.locator)
        if point is None:
            return False
        self.filters.set_field("geo_center", point)
        return True

    def disable_geo_search(self) -> bool:
        return self.filters.clear_field("geo_center")

    # Fetching -----------------------------------------------------------

    def begin_fetch(self) -> FetchTicket:
        """Issue a ticket for the current parameters; newer tickets supersede older ones."""
        with self._lock:
            self._last_request_id += 1
            ticket = FetchTicket(request_id=self._last_request_id,
                                 params=tuple(self.query()),
                                 page=self.paginator.current_page)
            self.loading = True
            self.error = None
        logger.debug("Issued %s request #%d", self.kind, ticket.request_id)
        return ticket

    def is_current(self, ticket: FetchTicket) -> bool:
        return ticket.request_id == self._last_request_id

    def complete_fetch(self, ticket: FetchTicket, page: ListingPage) -> bool:
        """Apply a response unless a newer request has been issued since."""
        with self._lock:
            if not self.is_current(ticket):
                logger.debug(
                    "Discarding stale %s response #%d (latest #%d)",
                    self.kind,
                    ticket.request_id,
                    self._last_request_id,
                )
                return False
            self.results = ResultSet(items=list(page.items), total=page.total)
            self.paginator.update_total(page.total)
            self.loading = False
        logger.info("Loaded %d of %d %s (page %d/%d)", len(page.items), page.total,
                    self.kind, self.paginator.current_page,
                    self.paginator.total_pages)
        return True

    def fail_fetch(self, ticket: FetchTicket, exc: Exception) -> bool:
        """Record a fetch failure; the previous results stay on display."""
        with self._lock:
            if not self.is_current(ticket):
                logger.debug("Ignoring failure of stale request #%d: %s",
                             ticket.request_id, exc)
                return False
            if isinstance(exc, RequestTimedOut):
                self.error = f"Request timed out: {exc}"
            else:
                self.error = str(exc) or type(exc).__name__
            self.loading = False
        logger.warning("Fetching %s failed: %s", self.kind, exc)
        return True

    def dismiss_error(self) -> None:
        self.error = None

    def refresh(self) -> bool:
        """Fetch the current page synchronously. Returns True if results were applied."""
        ticket = self.begin_fetch()
        try:
            page = self.client.fetch(self.kind, ticket.params)
        except ApiError as exc:
            self.fail_fetch(ticket, exc)
            return False
        return self.complete_fetch(ticket, page)

    def submit_refresh(self, executor: Executor) -> Future:
        """Fetch the current page on ``executor``; only the latest request lands."""
        ticket = self.begin_fetch()
        future = executor.submit(self.client.fetch, self.kind, ticket.params)

        def _apply(done: Future) -> None:
            try:
                page = done.result()
            except ApiError as exc:
                self.fail_fetch(ticket, exc)
                return
            self.complete_fetch(ticket, page)

        future.add_done_callback(_apply)
        return future

    # Realtime -----------------------------------------------------------

    def apply_realtime(self, event: str, row: Dict[str, Any]) -> bool:
        """Splice a pushed change into the displayed results without refetching."""
        row_id = row.get("id")
        with self._lock:
            items: List[Dict[str, Any]] = self.results.items
            if event == INSERT:
                if any(item.get("id") == row_id for item in items):
                    return False
                self.results = ResultSet(items=[row] + items,
                                         total=self.results.total + 1)
            elif event == UPDATE:
                if not any(item.get("id") == row_id for item in items):
                    return False
                self.results = ResultSet(
                    items=[row if item.get("id") == row_id else item for item in items],
                    total=self.results.total,
                )
            elif event == DELETE:
                remaining = [item for item in items if item.get("id") != row_id]
                if len(remaining) == len(items):
                    return False
                self.results = ResultSet(items=remaining,
                                         total=max(0, self.results.total - 1))
            else:
                raise ValueError(f"Unknown realtime event: {event}")
            self.paginator.update_total(self.results.total)
        logger.debug("Applied realtime %s for %s %r", event, self.kind, row_id)
        return True
