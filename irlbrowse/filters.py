"""Filter-state container and input normalization."""

from __future__ import annotations

import dataclasses
import logging
import math
from typing import Any, Callable, List, Optional

from .models import ANYWHERE, FilterState, GeoPoint

logger = logging.getLogger(__name__)

NO_FILTER = FilterState()
FIELD_NAMES = tuple(f.name for f in dataclasses.fields(FilterState))
# Re-sorting keeps the caller on the page they are looking at.
NON_RESETTING_FIELDS = frozenset({"sort_key"})

ResetListener = Callable[[], None]

TEXT_FIELDS = frozenset({"search_text", "category", "city", "country", "country_code", "sort_key"})
FALSE_WORDS = frozenset({"false", "0", "no", "off"})


def parse_max_rate(raw: Any) -> Optional[float]:
    """Return the numeric rate cap, or None when the input is not a usable number."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, str):
        raw = raw.strip()
        if not raw:
            return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value):
        return None
    return value


def parse_radius(raw: Any) -> Optional[float]:
    """Return the radius in km, or None for ``anywhere`` and unparsable input."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, str):
        raw = raw.strip()
        if not raw or raw.lower() == ANYWHERE:
            return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value) or value <= 0:
        return None
    return value


def is_no_filter(name: str, value: Any) -> bool:
    """Whether ``value`` is the "no filter" value for field ``name``."""
    if name == "max_rate":
        return parse_max_rate(value) is None
    if name == "radius_km":
        return parse_radius(value) is None
    if isinstance(value, str):
        return not value.strip()
    return value == getattr(NO_FILTER, name)


def _coerce(name: str, value: Any) -> Any:
    """Normalize raw input (CLI strings, numbers, lists) to the field's stored type."""
    if value is None:
        return getattr(NO_FILTER, name)
    if name in TEXT_FIELDS:
        return str(value)
    if name == "skills":
        if isinstance(value, str):
            value = value.split(",")
        elif not isinstance(value, (list, tuple, set, frozenset)):
            value = [value]
        return tuple(str(skill).strip() for skill in value
                     if skill is not None and str(skill).strip())
    if name == "include_remote":
        if isinstance(value, str):
            return value.strip().lower() not in FALSE_WORDS
        return bool(value)
    if name == "geo_center":
        return _geo_point(value)
    if name in ("max_rate", "radius_km") and not isinstance(value, str):
        return str(value)
    return value


def _geo_point(value: Any) -> Optional[GeoPoint]:
    if isinstance(value, GeoPoint):
        return value
    try:
        latitude, longitude = value
        point = GeoPoint(latitude=float(latitude), longitude=float(longitude))
    except (TypeError, ValueError):
        logger.warning("Ignoring unusable geo center %r", value)
        return None
    if not (math.isfinite(point.latitude) and math.isfinite(point.longitude)):
        logger.warning("Ignoring unusable geo center %r", value)
        return None
    return point


def normalize_state(state: FilterState) -> FilterState:
    """Copy of ``state`` with every field coerced to its stored type."""
    return dataclasses.replace(
        state, **{name: _coerce(name, getattr(state, name)) for name in FIELD_NAMES})


class FilterStore:
    """Holds the current :class:`FilterState` and announces page resets."""

    def __init__(self, state: FilterState | None = None):
        self.state = normalize_state(state) if state is not None else FilterState()
        self._listeners: List[ResetListener] = []

    def on_change(self, listener: ResetListener) -> None:
        """Register a callback invoked whenever a page-resetting field changes."""
        self._listeners.append(listener)

    def set_field(self, name: str, value: Any) -> bool:
        """Update one dimension; returns True if the state changed."""
        if name not in FIELD_NAMES:
            raise KeyError(f"Unknown filter field: {name}")
        value = _coerce(name, value)
        if getattr(self.state, name) == value:
            return False
        self.state = dataclasses.replace(self.state, **{name: value})
        logger.debug("Filter %s set to %r", name, value)
        if name not in NON_RESETTING_FIELDS:
            self._notify()
        return True

    def clear_field(self, name: str) -> bool:
        """Reset one dimension to its "no filter" value."""
        if name not in FIELD_NAMES:
            raise KeyError(f"Unknown filter field: {name}")
        return self.set_field(name, getattr(NO_FILTER, name))

    def clear_all(self) -> bool:
        """Reset every dimension; the page resets if anything changed."""
        if self.state == NO_FILTER:
            return False
        resets = any(
            getattr(self.state, name) != getattr(NO_FILTER, name)
            for name in FIELD_NAMES if name not in NON_RESETTING_FIELDS)
        self.state = FilterState()
        logger.debug("All filters cleared")
        if resets:
            self._notify()
        return True

    def active_filters(self) -> List[str]:
        """Names of the fields currently holding a real filter value."""
        return [
            name for name in FIELD_NAMES
            if not is_no_filter(name, getattr(self.state, name))
        ]

    def _notify(self) -> None:
        for listener in self._listeners:
            listener()
