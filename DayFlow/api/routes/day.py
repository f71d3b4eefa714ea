from fastapi import APIRouter, Depends

from DayFlow.api import schemas
from DayFlow.api.deps import get_tracker
from DayFlow.models import ActivityLog, parse_day_key
from DayFlow.summary.stats import total_categorized_hours
from DayFlow.tracker import DayTracker

router = APIRouter()


@router.get("/{day}", response_model=schemas.DayResponse)
async def get_day_data(day: str, tracker: DayTracker = Depends(get_tracker)):
    parse_day_key(day)
    return {"day": day, "activities": tracker.activities.get_day(day)}


@router.patch("/{day}/{hour}", response_model=ActivityLog)
async def update_activity_field(
    day: str,
    hour: int,
    update: schemas.FieldUpdate,
    tracker: DayTracker = Depends(get_tracker),
):
    return tracker.activities.set_field(day, hour, update.field, update.value)


@router.put("/{day}/{hour}/notes/{interval}", response_model=ActivityLog)
async def update_interval_note(
    day: str,
    hour: int,
    interval: int,
    update: schemas.NoteUpdate,
    tracker: DayTracker = Depends(get_tracker),
):
    return tracker.activities.set_interval_note(day, hour, interval, update.text)


@router.get("/{day}/stats", response_model=schemas.StatsResponse)
async def get_day_stats(day: str, tracker: DayTracker = Depends(get_tracker)):
    category_times = tracker.category_times(day)
    return {
        "day": day,
        "category_times": category_times,
        "total_hours": total_categorized_hours(category_times),
    }


@router.get("/{day}/report-rows", response_model=schemas.ReportRowsResponse)
async def get_report_rows(day: str, tracker: DayTracker = Depends(get_tracker)):
    return {"day": day, "rows": tracker.report_rows(day)}
