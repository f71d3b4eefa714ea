from __future__ import annotations

import csv
import io
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from DayFlow.models import (
    HOURS_PER_DAY,
    ActivityLog,
    Category,
    GrowthReport,
    parse_day_key,
)
from DayFlow.summary.report import priority_label, resolve_category_name
from DayFlow.summary.stats import aggregate

log = logging.getLogger(__name__)

ACTIVITY_HEADER = ["Hour", "Activity", "Category", "Priority"]
CATEGORY_HEADER = ["Category", "Hours"]

Narrative = Tuple[str, str]  # (section title, free text)


def report_filename(key: str) -> str:
    return f"DayFlow_Report_{key}.csv"


def normalize_newlines(text: str) -> str:
    """Every line break in a narrative field becomes CRLF."""
    return text.replace("\r\n", "\n").replace("\r", "\n").replace("\n", "\r\n")


def growth_narratives(report: GrowthReport) -> List[Narrative]:
    return [
        ("Professional Growth Report", report.professional_growth_report),
        ("Improvement Suggestions", report.improvement_suggestions),
    ]


def _full_day(records: Iterable[ActivityLog]) -> List[ActivityLog]:
    by_hour = {r.hour: r for r in records}
    return [by_hour.get(h) or ActivityLog(hour=h) for h in range(HOURS_PER_DAY)]


def export_csv(
    key: str,
    records: Iterable[ActivityLog],
    categories: Sequence[Category],
    narratives: Optional[Iterable[Narrative]] = None,
) -> str:
    """
    Render one day as a CSV document:
    report-date line, all 24 hours, category/hours table, then narrative sections.
    Narrative text is passed through as given; nothing is generated here.
    """
    parse_day_key(key)
    records = list(records)
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")

    writer.writerow(["Report Date", key])
    writer.writerow([])

    writer.writerow(ACTIVITY_HEADER)
    for record in _full_day(records):
        writer.writerow([
            f"{record.hour:02d}:00",
            record.description,
            resolve_category_name(record.category_id, categories),
            priority_label(record.priority),
        ])

    writer.writerow([])
    writer.writerow(CATEGORY_HEADER)
    for ct in aggregate(records, categories):
        writer.writerow([ct.name, ct.hours])

    for title, text in narratives or []:
        writer.writerow([])
        writer.writerow([f"{title}:"])
        writer.writerow([normalize_newlines(text or "")])

    return buffer.getvalue()


def write_csv_report(document: str, out_dir: Path, key: str) -> Path:
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / report_filename(key)
    with open(path, "w", encoding="utf-8", newline="") as fh:
        fh.write(document)
    log.info(f"CSV report for {key} written to {path}")
    return path
