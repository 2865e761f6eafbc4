"""Pydantic schemas for task request/response validation."""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import date, datetime
from typing import Optional, List, Literal

from daily_tasks.services.duration import parse_hhmm

Category = Literal["advertising", "seo", "new_business", "affiliate", "other"]
Status = Literal["not_started", "in_progress", "done"]
Scope = Literal["mine", "all"]

# seuls champs modifiables après création
UPDATABLE_FIELDS = ("actual_hours", "status", "retrospective", "completion_criteria", "sort_order")


class TaskCreate(BaseModel):
    name: str
    category: Category = "advertising"
    date: date
    start_time: Optional[str] = "09:00"
    end_time: Optional[str] = "18:00"
    completion_criteria: Optional[str] = None
    add_to_calendar: bool = False

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Task name is required")
        return value

    @field_validator("start_time", "end_time")
    @classmethod
    def time_on_grid(cls, value: Optional[str]) -> Optional[str]:
        # None = pas d'horaire, le prévu reste à 0
        if value is not None and parse_hhmm(value) is None:
            raise ValueError("Time must be HH:MM with minutes 00, 15, 30 or 45")
        return value


class TaskUpdate(BaseModel):
    # saisie libre (valeurs négatives comprises), mais un nombre fini
    actual_hours: Optional[float] = Field(default=None, allow_inf_nan=False)
    status: Optional[Status] = None
    retrospective: Optional[str] = None
    completion_criteria: Optional[str] = None
    sort_order: Optional[int] = None

    @field_validator("actual_hours", "status")
    @classmethod
    def not_null(cls, value):
        # omettre le champ pour ne pas le modifier ; null est refusé
        if value is None:
            raise ValueError("Field cannot be null")
        return value


class TaskResponse(BaseModel):
    id: str
    owner_id: str
    member: str
    name: str
    category: str
    planned_hours: float
    display_planned_hours: float
    actual_hours: float
    status: str
    date: date
    created_at: datetime
    retrospective: str = ""
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    completion_criteria: str = ""
    sort_order: Optional[int] = None
    can_edit: bool = False

    model_config = ConfigDict(from_attributes=True)


class TaskCreatedResponse(TaskResponse):
    calendar_event_id: Optional[str] = None
    calendar_error: Optional[str] = None


class ReorderRequest(BaseModel):
    moved_id: str
    target_id: str


class DayTotalsResponse(BaseModel):
    planned: float
    actual: float


class MemberGroup(BaseModel):
    member: str
    tasks: List[TaskResponse]


class DayBoardResponse(BaseModel):
    date: date
    scope: Scope
    member: Optional[str] = None
    groups: List[MemberGroup]
    totals: DayTotalsResponse
