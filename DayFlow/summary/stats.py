from __future__ import annotations

from collections import Counter
from typing import Iterable, List, Sequence

from DayFlow.models import ActivityLog, Category, CategoryTime


def aggregate(records: Iterable[ActivityLog], categories: Sequence[Category]) -> List[CategoryTime]:
    """
    Hours per category for one day, in category-list order.
    Each hourly record counts as exactly one hour; categories with no hours are left out.
    """
    counts = Counter(r.category_id for r in records if r.category_id)
    return [
        CategoryTime(id=c.id, name=c.name, icon=c.icon, hours=counts[c.id])
        for c in categories
        if counts.get(c.id)
    ]


def total_categorized_hours(category_times: Iterable[CategoryTime]) -> int:
    return sum(ct.hours for ct in category_times)
