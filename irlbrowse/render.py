"""Presentation helpers turning listing rows into text cards."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from bs4 import BeautifulSoup

from .models import ELLIPSIS, HUMANS, HumanProfile, TaskListing
from .pagination import Paginator
from .refine import DEFAULT_HOURLY_RATE, task_budget

SNIPPET_LENGTH = 120


def plain_text(markup: str | None, limit: int = SNIPPET_LENGTH) -> str:
    """Strip HTML from user-written text and truncate it to ``limit`` characters."""
    if not markup:
        return ""
    text = BeautifulSoup(markup, "html.parser").get_text(" ")
    text = " ".join(text.split())
    if len(text) > limit:
        text = text[:limit - 1].rstrip() + "…"
    return text


def _float(value: Any) -> Optional[float]:
    try:
        return float(value) if value not in (None, "") else None
    except (TypeError, ValueError):
        return None


def task_from_row(row: Dict[str, Any]) -> TaskListing:
    budget = task_budget(row) if (row.get("budget") or row.get("budget_cents")) else None
    return TaskListing(
        task_id=str(row.get("id", "")),
        title=(row.get("title") or "Untitled task").strip(),
        category=(row.get("category") or "").strip(),
        city=(row.get("city") or row.get("location") or "").strip(),
        budget=budget,
        created_at=row.get("created_at") or "",
        description=plain_text(row.get("description")),
        is_remote=bool(row.get("is_remote")),
        distance_km=_float(row.get("distance_km", row.get("distance"))),
    )


def human_from_row(row: Dict[str, Any]) -> HumanProfile:
    return HumanProfile(
        human_id=str(row.get("id", "")),
        name=(row.get("name") or "Anonymous").strip(),
        skills=tuple(str(skill) for skill in row.get("skills") or []),
        city=(row.get("city") or "").strip(),
        country=(row.get("country") or "").strip(),
        hourly_rate=_float(row.get("hourly_rate")) or DEFAULT_HOURLY_RATE,
        rating=_float(row.get("rating")) or 0.0,
        total_ratings_count=int(_float(row.get("total_ratings_count")) or 0),
        jobs_completed=int(_float(row.get("jobs_completed")) or 0),
        bio=plain_text(row.get("bio")),
    )


def format_task(task: TaskListing) -> str:
    budget = f"${task.budget:,.2f}" if task.budget is not None else "N/A"
    where = "Remote" if task.is_remote else (task.city or "N/A")
    if task.distance_km is not None:
        where = f"{where} ({task.distance_km:.1f} km)"
    line = f"{task.title} | {task.category or 'general'} | {budget} | {where}"
    if task.description:
        line += f" | {task.description}"
    return line


def format_human(human: HumanProfile) -> str:
    location = ", ".join(value for value in (human.city, human.country) if value)
    skills = ", ".join(human.skills[:3]) or "no skills listed"
    return (f"{human.name} | {location or 'N/A'} | ${human.hourly_rate:g}/hr | "
            f"★ {human.rating:.1f} ({human.total_ratings_count}) | {skills}")


def format_cards(rows: Iterable[Dict[str, Any]], kind: str) -> List[str]:
    """Render rows of ``kind`` as one text card per line."""
    if kind == HUMANS:
        return [format_human(human_from_row(row)) for row in rows]
    return [format_task(task_from_row(row)) for row in rows]


def format_page_bar(paginator: Paginator) -> str:
    """``1 … 4 [5] 6 … 10`` style page bar."""
    parts = []
    for marker in paginator.page_numbers():
        if marker == ELLIPSIS:
            parts.append("…")
        elif marker == paginator.current_page:
            parts.append(f"[{marker}]")
        else:
            parts.append(str(marker))
    return " ".join(parts)


def format_summary(paginator: Paginator, kind: str, shown: Optional[int] = None) -> str:
    """Summary such as ``Showing 1-16 of 40 tasks``.

    ``shown`` is the number of rows left after local filtering, when it differs
    from the page the server returned.
    """
    start, end = paginator.item_range()
    fetched = end - start + 1 if end else 0
    if shown is not None and shown != fetched:
        return (f"Showing {shown} matching {kind} from items {start}-{end} "
                f"of {paginator.total_items}")
    return f"Showing {start}-{end} of {paginator.total_items} {kind}"
