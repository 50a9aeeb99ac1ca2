"""
Google Calendar Client

Executes CalendarAction values against one user's primary calendar. The
Google API client is synchronous, so every call runs in a worker thread via
asyncio.to_thread to keep the event loop free.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

import pytz
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build

from skybrief.agents.calendaragent.constants import CALENDAR_SETTINGS, GOOGLE_CALENDAR_SETTINGS
from skybrief.agents.calendaragent.dto import (
    CalendarEvent,
    CreateEventAction,
    CreateEventResult,
    EventDescriptor,
    FindEventsAction,
    FindEventsResult,
    FindQuery,
    GetEventAction,
    GetEventResult,
)
from skybrief.agents.calendaragent.utils.datetime_utils import parse_google_calendar_datetime
from skybrief.exceptions import CalendarError

logger = logging.getLogger(__name__)


class GoogleCalendarClient:
    """
    Google Calendar client bound to a single OAuth access token.

    Args:
        access_token: OAuth access token of the calendar owner
        service_builder: Factory with googleapiclient.discovery.build's signature
    """

    def __init__(self, access_token: str, service_builder: Callable[..., Any] = build):
        self.access_token = access_token
        self.service_builder = service_builder
        self._service = None

    @property
    def service(self):
        if self._service is None:
            creds = Credentials(token=self.access_token)
            self._service = self.service_builder(
                "calendar",
                GOOGLE_CALENDAR_SETTINGS.API_VERSION,
                credentials=creds,
                cache_discovery=False,
            )
        return self._service

    async def execute_action(self, action):
        """
        Dispatch a CalendarAction to the matching API operation.

        Returns:
            CreateEventResult, FindEventsResult or GetEventResult

        Raises:
            CalendarError: the API call failed
        """
        if isinstance(action, CreateEventAction):
            return await self.create_event(action.event)
        if isinstance(action, FindEventsAction):
            return await self.find_events(action.query)
        if isinstance(action, GetEventAction):
            return await self.get_event(action.event_id)
        raise CalendarError(f"Unknown calendar action: {getattr(action, 'action', action)!r}")

    async def create_event(self, event: EventDescriptor) -> CreateEventResult:
        body = event.model_dump(by_alias=True, exclude_none=True)
        try:
            created = await asyncio.to_thread(
                lambda: self.service.events().insert(
                    calendarId=CALENDAR_SETTINGS.PRIMARY_CALENDAR_ID,
                    body=body,
                ).execute()
            )
        except Exception as e:
            logger.error(f"Error creating event: {str(e)}")
            raise CalendarError("Failed to create calendar event", original_error=e) from e

        return CreateEventResult(success=True, event=created, message="Event created successfully")

    async def find_events(self, query: FindQuery, now: Optional[datetime] = None) -> FindEventsResult:
        params: Dict[str, Any] = {
            "calendarId": CALENDAR_SETTINGS.PRIMARY_CALENDAR_ID,
            "timeMin": query.time_min or (now or datetime.now(pytz.UTC)).isoformat(),
            "maxResults": min(query.max_results or CALENDAR_SETTINGS.DEFAULT_MAX_RESULTS, CALENDAR_SETTINGS.MAX_RESULTS_LIMIT),
            "orderBy": query.order_by or CALENDAR_SETTINGS.DEFAULT_ORDER_BY,
            "singleEvents": True,
        }
        if query.time_max:
            params["timeMax"] = query.time_max
        if query.search_term:
            params["q"] = query.search_term

        try:
            response = await asyncio.to_thread(lambda: self.service.events().list(**params).execute())
        except Exception as e:
            logger.error(f"Error finding events: {str(e)}")
            raise CalendarError("Failed to find calendar events", original_error=e) from e

        events: List[Dict[str, Any]] = response.get("items", []) or []
        return FindEventsResult(success=True, events=events, message=f"Found {len(events)} events")

    async def get_event(self, event_id: str) -> GetEventResult:
        try:
            event = await asyncio.to_thread(
                lambda: self.service.events().get(
                    calendarId=CALENDAR_SETTINGS.PRIMARY_CALENDAR_ID,
                    eventId=event_id,
                ).execute()
            )
        except Exception as e:
            logger.error(f"Error getting event {event_id}: {str(e)}")
            raise CalendarError("Failed to get calendar event", original_error=e) from e

        return GetEventResult(success=True, event=event, message="Event retrieved successfully")


def convert_to_calendar_event(google_event: Dict[str, Any], timezone_name: Optional[str] = None) -> Optional[CalendarEvent]:
    """
    Convert a Google Calendar event to a CalendarEvent DTO.

    Returns:
        CalendarEvent, or None when the event has no id or no parseable start
    """
    event_id = google_event.get("id")
    start_time = parse_google_calendar_datetime(google_event.get("start"), timezone_name)
    if not event_id or start_time is None:
        return None

    return CalendarEvent(
        id=event_id,
        title=google_event.get("summary") or "Meeting",
        description=google_event.get("description"),
        location=google_event.get("location"),
        start_time=start_time,
        end_time=parse_google_calendar_datetime(google_event.get("end"), timezone_name),
        status=google_event.get("status", "confirmed"),
    )


class CalendarClientFactory:
    """Creates a GoogleCalendarClient per access token."""

    def __init__(self, service_builder: Callable[..., Any] = build):
        self.service_builder = service_builder

    def create(self, access_token: str) -> GoogleCalendarClient:
        return GoogleCalendarClient(access_token, service_builder=self.service_builder)
