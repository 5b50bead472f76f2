"""Core data models for irlbrowse."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

TASKS = "tasks"
HUMANS = "humans"
KINDS = (TASKS, HUMANS)

ANYWHERE = "anywhere"
ELLIPSIS = "..."


@dataclass(frozen=True)
class GeoPoint:
    """A latitude/longitude pair in decimal degrees."""

    latitude: float
    longitude: float


@dataclass(frozen=True)
class FilterState:
    """Snapshot of every discovery filter dimension.

    Each field's default is its "no filter" value; the query builder omits
    a field while it holds that value.
    """

    search_text: str = ""
    category: str = ""
    city: str = ""
    country: str = ""
    country_code: str = ""
    max_rate: str = ""
    sort_key: str = ""
    radius_km: str = ANYWHERE
    geo_center: Optional[GeoPoint] = None
    include_remote: bool = True
    skills: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ListingPage:
    """Normalized listing response: one page of rows plus the server total."""

    items: List[Dict[str, Any]]
    total: int


@dataclass
class ResultSet:
    """Rows currently displayed for a discovery session."""

    items: List[Dict[str, Any]] = field(default_factory=list)
    total: int = 0


@dataclass(frozen=True)
class FetchTicket:
    """Identifies one issued listing request."""

    request_id: int
    params: Tuple[Tuple[str, str], ...]
    page: int


@dataclass(frozen=True)
class TaskListing:
    """Presentation view of a task row from ``/tasks/available``."""

    task_id: str
    title: str
    category: str
    city: str
    budget: Optional[float]
    created_at: str
    description: str
    is_remote: bool
    distance_km: Optional[float]


@dataclass(frozen=True)
class HumanProfile:
    """Presentation view of a worker row from ``/humans/directory``."""

    human_id: str
    name: str
    skills: Tuple[str, ...]
    city: str
    country: str
    hourly_rate: float
    rating: float
    total_ratings_count: int
    jobs_completed: int
    bio: str
