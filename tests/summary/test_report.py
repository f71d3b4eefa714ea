import json

from DayFlow.models import ActivityLog, Category, ReportRow, default_day
from DayFlow.summary.report import (
    fallback_summary,
    project_for_narrative,
    rank_top_tasks,
    serialize_tracking_data,
)

CATEGORIES = [Category(id="work", name="Work"), Category(id="sleep", name="Sleep")]


def test_untouched_hours_are_dropped_and_rows_sorted():
    records = default_day()
    records[14] = ActivityLog(hour=14, description="Write report", category_id="work", priority="high")
    records[3] = ActivityLog(hour=3, category_id="sleep")
    records[5] = ActivityLog(hour=5, notes_15min=["only a note", "", "", ""])

    rows = project_for_narrative(reversed(records), CATEGORIES)
    assert [r.hour for r in rows] == [3, 14]
    assert rows[1] == ReportRow(hour=14, activity="Write report", category="Work", priority="high")


def test_priority_only_record_is_projected_with_labels():
    records = [ActivityLog(hour=14, priority="low")]
    assert project_for_narrative(records, CATEGORIES) == [
        ReportRow(hour=14, activity="", category="Uncategorized", priority="low")
    ]


def test_dangling_category_resolves_to_uncategorized():
    rows = project_for_narrative([ActivityLog(hour=1, category_id="gone")], CATEGORIES)
    assert rows[0].category == "Uncategorized"
    assert rows[0].priority == "Not set"


def test_serialized_tracking_data_is_a_json_array():
    rows = [ReportRow(hour=9, activity="Café planning", category="Work", priority="medium")]
    data = serialize_tracking_data(rows)
    assert "Café" in data
    assert json.loads(data) == [{"hour": 9, "activity": "Café planning", "category": "Work", "priority": "medium"}]


def _row(hour, priority, activity="task"):
    return ReportRow(hour=hour, activity=activity, category="Work", priority=priority)


def test_top_tasks_rank_by_priority_then_hour():
    rows = [_row(8, "low"), _row(15, "high"), _row(9, "Not set"), _row(10, "medium"), _row(11, "high")]
    assert [(r.hour, r.priority) for r in rank_top_tasks(rows)] == [
        (11, "high"), (15, "high"), (10, "medium"), (8, "low"),
    ]


def test_top_tasks_are_capped():
    rows = [_row(h, "high") for h in range(10)]
    assert len(rank_top_tasks(rows, limit=3)) == 3


def test_fallback_summary_without_rows():
    assert fallback_summary([]) == "No activities logged."


def test_fallback_summary_lists_key_tasks():
    rows = [_row(9, "high", "Ship release"), _row(10, "Not set", ""), _row(11, "low", "")]
    text = fallback_summary(rows)
    assert text.startswith("Logged 3 hour(s) of activity.")
    assert "Time allocation: Work: 3h." in text
    assert "Key Important Tasks:" in text
    assert "- Ship release at 09:00 (Priority: High)" in text
    assert "- (no description) at 11:00 (Priority: Low)" in text
