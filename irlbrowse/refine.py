"""Client-side filtering and sorting of fetched listing rows."""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Tuple

from .filters import parse_max_rate
from .models import FilterState

DEFAULT_HOURLY_RATE = 25.0

Row = Dict[str, Any]


def _lower(value: Any) -> str:
    return str(value or "").lower()


def _number(value: Any, default: float = 0.0) -> float:
    try:
        return float(value) if value not in (None, "") else default
    except (TypeError, ValueError):
        return default


def hourly_rate(row: Row) -> float:
    return _number(row.get("hourly_rate"), DEFAULT_HOURLY_RATE) or DEFAULT_HOURLY_RATE


def task_budget(row: Row) -> float:
    if row.get("budget") not in (None, ""):
        return _number(row.get("budget"))
    return _number(row.get("budget_cents")) / 100


def matches_human(row: Row, state: FilterState) -> bool:
    """Whether a worker row satisfies every active filter in ``state``."""
    skills = [str(skill) for skill in row.get("skills") or []]

    search = state.search_text.strip().lower()
    if search and search not in _lower(row.get("name")) and not any(
            search in skill.lower() for skill in skills):
        return False

    if state.category and state.category not in skills:
        return False

    city = state.city.strip().lower()
    if city and city not in _lower(row.get("city")):
        return False

    if state.country.strip():
        if state.country_code.strip():
            if _lower(row.get("country_code")) != state.country_code.strip().lower():
                return False
        elif state.country.strip().lower() not in _lower(row.get("country")):
            return False

    max_rate = parse_max_rate(state.max_rate)
    if max_rate is not None and hourly_rate(row) > max_rate:
        return False
    return True


# Each sort maps to (key, descending).
HUMAN_SORTS: Dict[str, Tuple[Callable[[Row], Any], bool]] = {
    "rating": (lambda row: _number(row.get("rating")), True),
    "most_reviewed": (lambda row: _number(row.get("total_ratings_count")), True),
    "price_low": (hourly_rate, False),
    "price_high": (hourly_rate, True),
    "newest": (lambda row: str(row.get("created_at") or ""), True),
}

TASK_SORTS: Dict[str, Tuple[Callable[[Row], Any], bool]] = {
    "newest": (lambda row: str(row.get("created_at") or ""), True),
    "pay_high": (task_budget, True),
    "pay_low": (task_budget, False),
    "distance": (lambda row: _number(row.get("distance_km", row.get("distance")), float("inf")), False),
}


def _sorted(rows: List[Row], sort_key: str,
            sorts: Dict[str, Tuple[Callable[[Row], Any], bool]]) -> List[Row]:
    if sort_key not in sorts:
        return rows
    key, descending = sorts[sort_key]
    return sorted(rows, key=key, reverse=descending)


def refine_humans(rows: Iterable[Row], state: FilterState) -> List[Row]:
    """Filter and sort worker rows the way the browse-humans tab does."""
    kept = [row for row in rows if matches_human(row, state)]
    return _sorted(kept, state.sort_key, HUMAN_SORTS)


def sort_tasks(rows: Iterable[Row], sort_key: str) -> List[Row]:
    """Order task rows locally; older API deployments return them unsorted."""
    return _sorted(list(rows), sort_key, TASK_SORTS)
