"""Debounced input values."""

from __future__ import annotations

import logging
import time
from typing import Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_SEARCH_DELAY = 0.3


class DebouncedValue(Generic[T]):
    """Pair of raw and committed values.

    The committed value follows the raw value only after the raw value has
    been left alone for ``delay`` seconds. Every ``set`` restarts the window,
    so a burst of edits commits once, with its last value.
    """

    def __init__(self,
                 initial: T,
                 delay: float = DEFAULT_SEARCH_DELAY,
                 clock: Callable[[], float] = time.monotonic):
        if delay < 0:
            raise ValueError("delay must not be negative")
        self.delay = delay
        self.clock = clock
        self.raw: T = initial
        self.committed: T = initial
        self._deadline: Optional[float] = None

    @property
    def pending(self) -> bool:
        return self._deadline is not None

    def set(self, value: T) -> None:
        """Record a new raw value, cancelling any pending commit."""
        self.raw = value
        if value == self.committed:
            # Typing back to the committed value leaves nothing to commit.
            self._deadline = None
            return
        self._deadline = self.clock() + self.delay

    def poll(self) -> bool:
        """Commit the raw value if its window has elapsed.

        Returns True only on the call that performs the commit.
        """
        if self._deadline is None or self.clock() < self._deadline:
            return False
        return self._commit()

    def flush(self) -> bool:
        """Commit immediately, skipping whatever is left of the window."""
        if self._deadline is None:
            return False
        return self._commit()

    def _commit(self) -> bool:
        self._deadline = None
        self.committed = self.raw
        logger.debug("Committed debounced value %r", self.committed)
        return True
