"""Serialize a filter snapshot into listing request parameters."""

from __future__ import annotations

from typing import List, Tuple

from .filters import normalize_state, parse_max_rate, parse_radius
from .models import HUMANS, TASKS, FilterState

DISTANCE_SORT = "distance"

TASK_SORTS = ("distance", "pay_high", "pay_low", "newest")
HUMAN_SORTS = ("rating", "most_reviewed", "price_low", "price_high", "newest")
SORT_OPTIONS = {TASKS: TASK_SORTS, HUMANS: HUMAN_SORTS}
DEFAULT_SORT = {TASKS: "newest", HUMANS: "rating"}

# The humans directory names the category dimension after worker skills.
CATEGORY_PARAM = {TASKS: "category", HUMANS: "skill"}

QueryParams = List[Tuple[str, str]]


def geo_search_active(state: FilterState) -> bool:
    """Geo search needs both a center and a numeric radius."""
    return state.geo_center is not None and parse_radius(state.radius_km) is not None


def effective_sort(state: FilterState, kind: str = TASKS) -> str:
    """Sort key actually sent, derived without touching the stored choice."""
    state = normalize_state(state)
    if geo_search_active(state):
        return DISTANCE_SORT
    sort_key = state.sort_key.strip()
    # "distance" without a center, or a sort the other listing kind uses.
    if sort_key and (sort_key == DISTANCE_SORT or sort_key not in SORT_OPTIONS.get(kind, ())):
        return DEFAULT_SORT.get(kind, "")
    return sort_key


def build_query(
    state: FilterState,
    current_page: int,
    items_per_page: int,
    kind: str = TASKS,
) -> QueryParams:
    """Build the flat GET parameter list for one listing page.

    Fields holding their "no filter" value are left out entirely. A radius
    of ``anywhere`` also drops the city name, since it means "ignore
    location".
    """
    state = normalize_state(state)
    page = max(1, int(current_page))
    params: QueryParams = [
        ("limit", str(items_per_page)),
        ("offset", str((page - 1) * items_per_page)),
    ]

    sort_key = effective_sort(state, kind)
    if sort_key:
        params.append(("sort", sort_key))

    search = state.search_text.strip()
    if search:
        params.append(("search", search))

    category = state.category.strip()
    if category:
        params.append((CATEGORY_PARAM.get(kind, "category"), category))

    radius = parse_radius(state.radius_km)
    city = state.city.strip()
    if city and radius is not None:
        params.append(("city", city))

    country = state.country.strip()
    if country:
        params.append(("country", country))
    country_code = state.country_code.strip()
    if country_code:
        params.append(("country_code", country_code.upper()))

    max_rate = parse_max_rate(state.max_rate)
    if max_rate is not None:
        params.append(("max_rate", _format_number(max_rate)))

    if radius is not None:
        if state.geo_center is not None:
            params.append(("user_lat", _format_number(state.geo_center.latitude)))
            params.append(("user_lng", _format_number(state.geo_center.longitude)))
        params.append(("radius_km", _format_number(radius)))

    if not state.include_remote:
        params.append(("include_remote", "false"))
    if state.skills:
        params.append(("skills", ",".join(state.skills)))

    return params


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))
