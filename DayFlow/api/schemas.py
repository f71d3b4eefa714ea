from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from DayFlow.models import ActivityLog, Category, CategoryTime, ReportRow, Suggestions


class CategoryCreate(BaseModel):
    name: str = Field(..., json_schema_extra={'example': "Deep Work"})
    icon: Optional[str] = Field(None, json_schema_extra={'example': "Briefcase"})


class CategoryDeleted(BaseModel):
    id: str
    deleted: bool


class FieldUpdate(BaseModel):
    field: Literal["description", "categoryId", "priority"]
    value: Optional[str] = None


class NoteUpdate(BaseModel):
    text: str = ""


class DayResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    day: str
    activities: List[ActivityLog]


class StatsResponse(BaseModel):
    day: str
    category_times: List[CategoryTime]
    total_hours: int


class ReportRowsResponse(BaseModel):
    day: str
    rows: List[ReportRow]


class SummaryResponse(BaseModel):
    day: str
    summary_report: str
    notice: Optional[str] = None


class GrowthResponse(BaseModel):
    day: str
    professional_growth_report: str
    improvement_suggestions: str
    notice: Optional[str] = None


class SuggestionRequest(BaseModel):
    current_input: str = Field("", alias="currentInput")
    hour: Optional[int] = None

    model_config = ConfigDict(populate_by_name=True)


class SuggestionResponse(Suggestions):
    notice: Optional[str] = None


__all__ = [
    "Category", "CategoryCreate", "CategoryDeleted", "FieldUpdate", "NoteUpdate",
    "DayResponse", "StatsResponse", "ReportRowsResponse", "SummaryResponse",
    "GrowthResponse", "SuggestionRequest", "SuggestionResponse",
]
