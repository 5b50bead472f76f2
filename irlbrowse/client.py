"""HTTP client for the irlwork.ai listing API."""

from __future__ import annotations

import base64
import logging
import mimetypes
import os
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as DeadlineExceeded
from pathlib import Path
from typing import Any, Sequence, Tuple
from urllib.parse import urljoin

import requests

from .models import HUMANS, TASKS, ListingPage

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.irlwork.ai/api"
DEFAULT_TIMEOUT = 20
UPLOAD_TIMEOUT = 60

LISTING_ENDPOINTS = {
    TASKS: "tasks/available",
    HUMANS: "humans/directory",
}

UPLOAD_MIME_TYPES = {
    "jpg": "image/jpeg",
    "png": "image/png",
    "webp": "image/webp",
    "gif": "image/gif",
}


class ApiError(Exception):
    """Base class for failures talking to the listing API."""


class NetworkError(ApiError):
    """The request never produced an HTTP response."""


class ServerError(ApiError):
    """The API answered with a non-2xx status."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class RequestTimedOut(ApiError):
    """The request exceeded its deadline and was abandoned."""


class UploadTimedOut(RequestTimedOut):
    """An upload exceeded its deadline."""


def normalize_listing_payload(payload: Any, items_key: str) -> ListingPage:
    """Collapse the two listing response shapes into a :class:`ListingPage`.

    Older deployments return a bare array; newer ones wrap it in a mapping
    with the rows under ``items`` or the kind name and an optional ``total``.
    """
    if isinstance(payload, list):
        rows = payload
        total = None
    elif isinstance(payload, dict):
        rows = None
        for key in ("items", items_key):
            if isinstance(payload.get(key), list):
                rows = payload[key]
                break
        if rows is None:
            rows = []
        total = payload.get("total")
    else:
        raise ApiError(f"Unexpected response payload: {payload!r}")

    items = [row for row in rows if isinstance(row, dict)]
    try:
        total = int(total) if total else len(items)
    except (TypeError, ValueError):
        total = len(items)
    return ListingPage(items=items, total=total)


class IrlworkClient:
    """Lightweight wrapper around the irlwork.ai REST API."""

    def __init__(self,
                 base_url: str = DEFAULT_API_URL,
                 token: str | None = None,
                 session: requests.Session | None = None,
                 timeout: int = DEFAULT_TIMEOUT):
        self.base_url = base_url.rstrip("/") + "/"
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "User-Agent": "irlbrowse/1.0",
            "Accept": "application/json",
        })
        if token:
            self.session.headers["Authorization"] = token

    def list_tasks(self, params: Sequence[Tuple[str, str]]) -> ListingPage:
        return self.fetch(TASKS, params)

    def list_humans(self, params: Sequence[Tuple[str, str]]) -> ListingPage:
        return self.fetch(HUMANS, params)

    def fetch(self, kind: str, params: Sequence[Tuple[str, str]]) -> ListingPage:
        """Fetch one listing page for ``kind`` (``tasks`` or ``humans``)."""
        try:
            endpoint = LISTING_ENDPOINTS[kind]
        except KeyError:
            raise ValueError(f"Unknown listing kind: {kind}") from None
        logger.debug("GET %s with %s", endpoint, list(params))
        payload = self._request("GET", endpoint, params=list(params))
        page = normalize_listing_payload(payload, items_key=kind)
        logger.debug("Fetched %d %s (total %d)", len(page.items), kind, page.total)
        return page

    def upload_avatar(self, path: Path | str, timeout: float = UPLOAD_TIMEOUT) -> str:
        """Upload a profile photo and return the URL the API stored it under.

        ``timeout`` is a wall-clock deadline for the whole upload. requests only
        bounds each socket read, so the request runs on a worker thread and is
        abandoned once the deadline passes; that thread finishes when the
        socket-level timeout fires.
        """
        path = Path(path)
        filename, mime_type = _upload_name(path)
        encoded = base64.b64encode(path.read_bytes()).decode("ascii")
        body = {
            "file": f"data:{mime_type};base64,{encoded}",
            "filename": filename,
            "mimeType": mime_type,
        }
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="avatar-upload")
        future = executor.submit(self._request, "POST", "upload/avatar", json=body, timeout=timeout)
        try:
            payload = future.result(timeout=timeout)
        except (DeadlineExceeded, RequestTimedOut) as exc:
            raise UploadTimedOut(
                "Upload timed out - try a stronger connection") from exc
        finally:
            executor.shutdown(wait=False)
        url = payload.get("url") if isinstance(payload, dict) else None
        if not url:
            raise ApiError(f"Upload response has no url: {payload!r}")
        logger.info("Uploaded %s as %s", path.name, url)
        return url

    def _request(self, method: str, endpoint: str, timeout: int | None = None, **kwargs) -> Any:
        url = urljoin(self.base_url, endpoint)
        try:
            response = self.session.request(method,
                                            url,
                                            timeout=timeout or self.timeout,
                                            **kwargs)
        except requests.Timeout as exc:
            raise RequestTimedOut(f"{method} {endpoint} timed out") from exc
        except requests.RequestException as exc:
            raise NetworkError(f"{method} {endpoint} failed: {exc}") from exc

        if not response.ok:
            raise ServerError(_error_message(response), response.status_code)
        try:
            return response.json()
        except ValueError as exc:
            raise ApiError(f"{method} {endpoint} returned invalid JSON") from exc


def _error_message(response: requests.Response) -> str:
    message = f"Server error ({response.status_code})"
    try:
        body = response.json()
    except ValueError:
        return message
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return message


def _upload_name(path: Path) -> Tuple[str, str]:
    """Filename and MIME type the avatar endpoint accepts for ``path``."""
    guessed, _ = mimetypes.guess_type(path.name)
    extension = "jpg"
    for ext, mime in UPLOAD_MIME_TYPES.items():
        if guessed == mime:
            extension = ext
            break
    return f"{path.stem}.{extension}", UPLOAD_MIME_TYPES[extension]


def build_client_from_env() -> IrlworkClient:
    """Construct a client from environment configuration."""
    base_url = (os.getenv("IRLWORK_API_URL") or "").strip() or DEFAULT_API_URL
    token = (os.getenv("IRLWORK_API_TOKEN") or "").strip() or None
    timeout = _env_int("IRLWORK_TIMEOUT", DEFAULT_TIMEOUT)
    return IrlworkClient(base_url=base_url, token=token, timeout=timeout)


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r", name, raw)
        return default


__all__ = [
    "ApiError",
    "IrlworkClient",
    "NetworkError",
    "RequestTimedOut",
    "ServerError",
    "UploadTimedOut",
    "build_client_from_env",
    "normalize_listing_payload",
]
