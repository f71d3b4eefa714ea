import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from DayFlow.api import schemas
from DayFlow.api.deps import get_narrative_service, get_tracker
from DayFlow.narrative.flows import NarrativeService
from DayFlow.summary.csv_export import growth_narratives, report_filename
from DayFlow.tracker import DayTracker

log = logging.getLogger(__name__)

router = APIRouter()


@router.post("/day/{day}/summary", response_model=schemas.SummaryResponse)
async def generate_summary(
    day: str,
    tracker: DayTracker = Depends(get_tracker),
    service: NarrativeService = Depends(get_narrative_service),
):
    report = await service.summarize(tracker.report_rows(day))
    return {"day": day, "summary_report": report.summary_report, "notice": service.last_notice}


@router.post("/day/{day}/growth", response_model=schemas.GrowthResponse)
async def generate_growth_report(
    day: str,
    tracker: DayTracker = Depends(get_tracker),
    service: NarrativeService = Depends(get_narrative_service),
):
    report = await service.analyze_growth(tracker.report_rows(day))
    return {
        "day": day,
        "professional_growth_report": report.professional_growth_report,
        "improvement_suggestions": report.improvement_suggestions,
        "notice": service.last_notice,
    }


@router.post("/suggestions", response_model=schemas.SuggestionResponse)
async def suggest_activity(
    request: schemas.SuggestionRequest,
    service: NarrativeService = Depends(get_narrative_service),
):
    suggestions = await service.suggest_continuations(request.current_input, request.hour)
    return {"suggestions": suggestions, "notice": service.last_notice}


@router.get("/day/{day}/export.csv")
async def export_day_csv(
    day: str,
    narrative: bool = Query(True, description="Include the LLM growth report sections."),
    tracker: DayTracker = Depends(get_tracker),
    service: NarrativeService = Depends(get_narrative_service),
):
    narratives = []
    if narrative:
        report = await service.analyze_growth(tracker.report_rows(day))
        if service.last_notice:
            log.warning(f"Export for {day}: {service.last_notice}")
        narratives = growth_narratives(report)
    document = tracker.export_csv(day, narratives)
    return Response(
        content=document.encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{report_filename(day)}"'},
    )
