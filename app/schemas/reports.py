from datetime import date, datetime
from typing import Optional, List
from pydantic import BaseModel, field_validator

from .reference import UserOut, ShiftHoursOut, EventTitleOut


class EventPart4In(BaseModel):
    event_summary: Optional[str] = ""
    trigger_info: Optional[str] = ""
    start_time: Optional[str] = ""  # HH:MM
    end_time: Optional[str] = ""  # HH:MM

    @field_validator("event_summary", "trigger_info", "start_time", "end_time", mode="before")
    @classmethod
    def _none_to_empty(cls, v):
        return "" if v is None else v


class EventPart3In(EventPart4In):
    rca_number: Optional[str] = ""

    @field_validator("rca_number", mode="before")
    @classmethod
    def _rca_none_to_empty(cls, v):
        return "" if v is None else v


class ReportPayload(BaseModel):
    """Body of POST/PUT /api/reports. The creator never comes from here."""

    report_date: date
    shift_hours_id: Optional[int] = None
    shift_manager_ids: List[int] = []
    event_title_ids: List[int] = []
    health_power_sources: bool = False
    health_humidity_temp: bool = False
    health_fire_system: bool = False
    events_part3: List[EventPart3In] = []
    events_part4: List[EventPart4In] = []

    @field_validator("shift_manager_ids", "event_title_ids", "events_part3", "events_part4", mode="before")
    @classmethod
    def _null_list(cls, v):
        return [] if v is None else v


class EventPart4Out(BaseModel):
    id: int
    event_summary: str
    trigger_info: str
    start_time: str
    end_time: str


class EventPart3Out(EventPart4Out):
    rca_number: str


class DailyReportOut(BaseModel):
    id: int
    report_date: date
    shift_hours: Optional[ShiftHoursOut] = None
    shift_managers: List[UserOut] = []
    event_titles: List[EventTitleOut] = []
    health_power_sources: bool
    health_humidity_temp: bool
    health_fire_system: bool
    events_part3: List[EventPart3Out] = []
    events_part4: List[EventPart4Out] = []
    created_by: UserOut
    created_at: datetime


class ReportCreatedResponse(BaseModel):
    id: int


class MessageResponse(BaseModel):
    message: str
