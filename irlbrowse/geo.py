"""Device location lookup and distance helpers."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Protocol

import requests

from .models import GeoPoint

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0
RADIUS_PRESETS_KM = (5, 10, 25, 50, 100)
IP_LOCATION_ENDPOINT = "https://ipapi.co/json/"


class LocationUnavailable(Exception):
    """Raised by a locator when it cannot produce coordinates."""


class Locator(Protocol):
    """Host capability that resolves the caller's current position."""

    def locate(self) -> GeoPoint:
        ...


@dataclass
class StaticLocator:
    """Locator returning fixed coordinates (e.g. from ``--lat/--lng``)."""

    point: GeoPoint

    def locate(self) -> GeoPoint:
        return self.point


@dataclass
class IpLocator:
    """Approximate position from the public IP address."""

    allowed: bool = False
    endpoint: str = IP_LOCATION_ENDPOINT
    timeout: int = 10
    session: Optional[requests.Session] = None

    def locate(self) -> GeoPoint:
        if not self.allowed:
            raise LocationUnavailable("location permission not granted")
        http = self.session or requests
        response = http.get(self.endpoint, timeout=self.timeout)
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, dict):
            raise LocationUnavailable(f"Unexpected location payload: {payload!r}")
        latitude = _coordinate(payload.get("latitude"))
        longitude = _coordinate(payload.get("longitude"))
        if latitude is None or longitude is None:
            raise LocationUnavailable("location payload has no coordinates")
        return GeoPoint(latitude=latitude, longitude=longitude)


def request_location(locator: Optional[Locator]) -> Optional[GeoPoint]:
    """Resolve the current position, or None if it cannot be obtained.

    Location only refines a search, so every failure is logged and dropped.
    """
    if locator is None:
        logger.debug("No locator configured; geo search unavailable")
        return None
    try:
        point = locator.locate()
    except Exception as exc:  # noqa: BLE001
        logger.debug("Location lookup via %s failed: %s", type(locator).__name__, exc)
        return None
    logger.debug("Resolved location %.4f, %.4f", point.latitude, point.longitude)
    return point


def haversine_km(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance between two points in kilometres."""
    d_lat = math.radians(b.latitude - a.latitude)
    d_lng = math.radians(b.longitude - a.longitude)
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    h = (math.sin(d_lat / 2) ** 2 +
         math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2)
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def filter_by_distance_km(
    rows: Iterable[Dict[str, Any]],
    center: GeoPoint,
    radius_km: float,
    lat_key: str = "latitude",
    lng_key: str = "longitude",
) -> List[Dict[str, Any]]:
    """Rows within ``radius_km`` of ``center``, nearest first.

    Rows without coordinates cannot be placed and are dropped. Each kept row
    is copied with a ``distance_km`` entry added.
    """
    nearby = []
    for row in rows:
        latitude = _coordinate(row.get(lat_key))
        longitude = _coordinate(row.get(lng_key))
        if latitude is None or longitude is None:
            continue
        distance = haversine_km(center, GeoPoint(latitude, longitude))
        if distance <= radius_km:
            nearby.append({**row, "distance_km": distance})
    nearby.sort(key=lambda row: row["distance_km"])
    return nearby


def snap_radius(radius_km: float) -> int:
    """Smallest preset radius covering ``radius_km``, capped at the largest preset."""
    for preset in RADIUS_PRESETS_KM:
        if preset >= radius_km:
            return preset
    return RADIUS_PRESETS_KM[-1]


def _coordinate(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None
