"""
Report data projection
----------------------
* `project_for_narrative` turns a day's records into display-resolved rows
  (hour, activity, category name, priority label), dropping untouched hours
* `serialize_tracking_data` is the JSON blob handed to the text generator
* `rank_top_tasks` / `fallback_summary` give a deterministic summary when
  the text generator is unavailable
"""
from __future__ import annotations

import json
from collections import Counter
from typing import Iterable, List, Optional, Sequence

from DayFlow.models import (
    PRIORITY_NOT_SET_LABEL,
    PRIORITY_RANK,
    UNCATEGORIZED_LABEL,
    ActivityLog,
    Category,
    Priority,
    ReportRow,
)

TOP_TASK_LIMIT = 5
_RANK_BY_LABEL = {p.value: rank for p, rank in PRIORITY_RANK.items()}


def resolve_category_name(category_id: Optional[str], categories: Sequence[Category]) -> str:
    """Display name of a category, or "Uncategorized" for null or dangling ids."""
    if category_id:
        for category in categories:
            if category.id == category_id:
                return category.name
    return UNCATEGORIZED_LABEL


def priority_label(priority: Optional[Priority]) -> str:
    return priority.value if priority else PRIORITY_NOT_SET_LABEL


def project_for_narrative(records: Iterable[ActivityLog], categories: Sequence[Category]) -> List[ReportRow]:
    rows = [
        ReportRow(
            hour=r.hour,
            activity=r.description,
            category=resolve_category_name(r.category_id, categories),
            priority=priority_label(r.priority),
        )
        for r in records
        if r.has_content()
    ]
    return sorted(rows, key=lambda row: row.hour)


def serialize_tracking_data(rows: Iterable[ReportRow]) -> str:
    return json.dumps([row.model_dump() for row in rows], ensure_ascii=False)


def rank_top_tasks(rows: Iterable[ReportRow], limit: int = TOP_TASK_LIMIT) -> List[ReportRow]:
    """Prioritised rows only: high before medium before low, then by hour."""
    ranked = [row for row in rows if row.priority in _RANK_BY_LABEL]
    ranked.sort(key=lambda row: (_RANK_BY_LABEL[row.priority], row.hour))
    return ranked[:limit]


def fallback_summary(rows: Sequence[ReportRow]) -> str:
    if not rows:
        return "No activities logged."

    lines = [f"Logged {len(rows)} hour(s) of activity."]

    per_category = Counter(row.category for row in rows)
    allocation = ", ".join(f"{name}: {hours}h" for name, hours in per_category.most_common())
    lines.append(f"Time allocation: {allocation}.")

    top = rank_top_tasks(rows)
    if top:
        lines.append("")
        lines.append("Key Important Tasks:")
        for row in top:
            activity = row.activity or "(no description)"
            lines.append(f"- {activity} at {row.hour:02d}:00 (Priority: {row.priority.capitalize()})")
    return "\n".join(lines)
