"""
Calendar Agent Data Transfer Objects (DTOs)

This module contains all data models used by the calendar agent:
- CalendarAction: discriminated union (create / find / get) produced by extraction
- CalendarResult: discriminated union mirroring the action that was executed
- CalendarEvent: simplified view of a Google Calendar event

Python attributes are snake_case; the JSON the model emits and Google
expects uses camelCase, mapped through field aliases.
"""

from datetime import datetime
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class _ActionModel(BaseModel):
    model_config = ConfigDict(strict=True, populate_by_name=True, extra="ignore")


class EventDateTime(_ActionModel):
    date_time: str = Field(alias="dateTime", min_length=1)
    time_zone: str = Field(alias="timeZone", min_length=1)


class Attendee(_ActionModel):
    email: str


class Reminders(_ActionModel):
    use_default: bool = Field(alias="useDefault")


class EventDescriptor(_ActionModel):
    """Body of an events.insert call."""
    summary: str
    start: EventDateTime
    end: EventDateTime
    description: Optional[str] = None
    location: Optional[str] = None
    attendees: Optional[List[Attendee]] = None
    reminders: Optional[Reminders] = None


class FindQuery(_ActionModel):
    time_min: Optional[str] = Field(default=None, alias="timeMin")
    time_max: Optional[str] = Field(default=None, alias="timeMax")
    search_term: Optional[str] = Field(default=None, alias="searchTerm")
    max_results: int = Field(default=10, alias="maxResults", ge=1)
    order_by: Literal["startTime"] = Field(default="startTime", alias="orderBy")


class CreateEventAction(_ActionModel):
    action: Literal["create"]
    event: EventDescriptor


class FindEventsAction(_ActionModel):
    action: Literal["find"]
    query: FindQuery


class GetEventAction(_ActionModel):
    action: Literal["get"]
    event_id: str = Field(alias="eventId", min_length=1)


CalendarAction = Annotated[
    Union[CreateEventAction, FindEventsAction, GetEventAction],
    Field(discriminator="action"),
]
CALENDAR_ACTION_ADAPTER = TypeAdapter(CalendarAction)


class _ResultModel(BaseModel):
    success: bool
    message: str


class CreateEventResult(_ResultModel):
    action: Literal["create"] = "create"
    event: Dict[str, Any]


class FindEventsResult(_ResultModel):
    action: Literal["find"] = "find"
    events: List[Dict[str, Any]] = []


class GetEventResult(_ResultModel):
    action: Literal["get"] = "get"
    event: Dict[str, Any]


CalendarResult = Annotated[
    Union[CreateEventResult, FindEventsResult, GetEventResult],
    Field(discriminator="action"),
]
CALENDAR_RESULT_ADAPTER = TypeAdapter(CalendarResult)


class CalendarEvent(BaseModel):
    """Simple calendar event data used by the notification pipeline."""
    id: str
    title: str
    description: Optional[str] = None
    location: Optional[str] = None
    start_time: datetime
    end_time: Optional[datetime] = None
    status: Optional[str] = "confirmed"
