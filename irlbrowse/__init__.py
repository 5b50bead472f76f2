"""irlbrowse package initialization."""

from .client import (
    ApiError,
    IrlworkClient,
    NetworkError,
    RequestTimedOut,
    ServerError,
    UploadTimedOut,
    build_client_from_env,
    normalize_listing_payload,
)
from .debounce import DebouncedValue
from .filters import FilterStore, parse_max_rate, parse_radius
from .geo import IpLocator, StaticLocator, request_location
from .models import (
    ANYWHERE,
    HUMANS,
    TASKS,
    FetchTicket,
    FilterState,
    GeoPoint,
    ListingPage,
    ResultSet,
)
from .pagination import Paginator
from .query import build_query, effective_sort
from .session import DiscoverySession

__all__ = [
    "ANYWHERE",
    "ApiError",
    "DebouncedValue",
    "DiscoverySession",
    "FetchTicket",
    "FilterState",
    "FilterStore",
    "GeoPoint",
    "HUMANS",
    "IpLocator",
    "IrlworkClient",
    "ListingPage",
    "NetworkError",
    "Paginator",
    "RequestTimedOut",
    "ResultSet",
    "ServerError",
    "StaticLocator",
    "TASKS",
    "UploadTimedOut",
    "build_client_from_env",
    "build_query",
    "effective_sort",
    "normalize_listing_payload",
    "parse_max_rate",
    "parse_radius",
    "request_location",
]
