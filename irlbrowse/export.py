"""Spreadsheet export of discovery results."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List

from openpyxl import Workbook

from .models import HUMANS

logger = logging.getLogger(__name__)

TASK_COLUMNS = [
    "id",
    "title",
    "category",
    "city",
    "budget",
    "is_remote",
    "distance_km",
    "created_at",
]
HUMAN_COLUMNS = [
    "id",
    "name",
    "skills",
    "city",
    "country",
    "hourly_rate",
    "rating",
    "total_ratings_count",
    "jobs_completed",
]


def _cell(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value)
    if isinstance(value, dict):
        return str(value)
    return value


def export_results_to_xlsx(rows: Iterable[Dict[str, Any]], path: Path, kind: str) -> Path:
    """Write ``rows`` to an xlsx sheet with a header row; returns the written path."""
    columns: List[str] = HUMAN_COLUMNS if kind == HUMANS else TASK_COLUMNS
    workbook = Workbook()
    worksheet = workbook.active
    worksheet.title = kind
    worksheet.append(columns)
    count = 0
    for row in rows:
        worksheet.append([_cell(row.get(column)) for column in columns])
        count += 1

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    workbook.save(path)
    logger.info("Exported %d %s to %s", count, kind, path)
    return path
