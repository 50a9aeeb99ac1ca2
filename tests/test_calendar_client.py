from datetime import datetime
from unittest.mock import MagicMock

import pytest
import pytz

from skybrief.agents.calendaragent.calendar_client import (
    CalendarClientFactory,
    GoogleCalendarClient,
    convert_to_calendar_event,
)
from skybrief.agents.calendaragent.dto import (
    CALENDAR_ACTION_ADAPTER,
    CreateEventResult,
    FindEventsResult,
    FindQuery,
    GetEventResult,
)
from skybrief.exceptions import CalendarError


class TestGoogleCalendarClient:
    def setup_method(self):
        self.service = MagicMock()
        self.builder = MagicMock(return_value=self.service)
        self.client = GoogleCalendarClient("access-token", service_builder=self.builder)

    def test_service_built_lazily_with_token(self):
        assert self.builder.call_count == 0

        assert self.client.service is self.service
        assert self.client.service is self.service

        self.builder.assert_called_once()
        args, kwargs = self.builder.call_args
        assert args == ("calendar", "v3")
        assert kwargs["credentials"].token == "access-token"
        assert kwargs["cache_discovery"] is False

    @pytest.mark.asyncio
    async def test_find_events(self):
        self.service.events().list().execute.return_value = {
            "items": [
                {"id": "1", "summary": "Standup", "start": {"dateTime": "2024-01-01T10:00:00Z"}},
                {"id": "2", "summary": "Lunch", "start": {"dateTime": "2024-01-01T12:00:00Z"}},
            ]
        }
        query = FindQuery(time_min="2024-01-01T09:00:00+00:00", time_max="2024-01-02T00:00:00+00:00", search_term="lunch")

        result = await self.client.find_events(query)

        assert isinstance(result, FindEventsResult)
        assert result.success
        assert result.message == "Found 2 events"
        assert [event["id"] for event in result.events] == ["1", "2"]
        self.service.events().list.assert_called_with(
            calendarId="primary",
            timeMin="2024-01-01T09:00:00+00:00",
            timeMax="2024-01-02T00:00:00+00:00",
            q="lunch",
            maxResults=10,
            orderBy="startTime",
            singleEvents=True,
        )

    @pytest.mark.asyncio
    async def test_find_events_defaults_time_min_to_now(self):
        self.service.events().list().execute.return_value = {}
        now = datetime(2024, 1, 1, 9, 0, tzinfo=pytz.UTC)

        result = await self.client.find_events(FindQuery(), now=now)

        assert result.events == []
        kwargs = self.service.events().list.call_args.kwargs
        assert kwargs["timeMin"] == now.isoformat()
        assert "timeMax" not in kwargs
        assert "q" not in kwargs

    @pytest.mark.asyncio
    async def test_find_events_caps_page_size(self):
        self.service.events().list().execute.return_value = {}

        await self.client.find_events(FindQuery(max_results=5000))

        assert self.service.events().list.call_args.kwargs["maxResults"] == 2500

    @pytest.mark.asyncio
    async def test_find_events_error(self):
        self.service.events().list().execute.side_effect = Exception("API error")

        with pytest.raises(CalendarError, match="Failed to find calendar events"):
            await self.client.find_events(FindQuery())

    @pytest.mark.asyncio
    async def test_create_event_via_action(self):
        self.service.events().insert().execute.return_value = {"id": "new-event", "summary": "Bike ride"}
        action = CALENDAR_ACTION_ADAPTER.validate_python(
            {
                "action": "create",
                "event": {
                    "summary": "Bike ride",
                    "start": {"dateTime": "2024-01-02T09:00:00+00:00", "timeZone": "UTC"},
                    "end": {"dateTime": "2024-01-02T10:00:00+00:00", "timeZone": "UTC"},
                    "reminders": {"useDefault": True},
                },
            }
        )

        result = await self.client.execute_action(action)

        assert isinstance(result, CreateEventResult)
        assert result.action == "create"
        assert result.event["id"] == "new-event"
        body = self.service.events().insert.call_args.kwargs["body"]
        assert body["start"] == {"dateTime": "2024-01-02T09:00:00+00:00", "timeZone": "UTC"}
        assert body["reminders"] == {"useDefault": True}
        assert "description" not in body

    @pytest.mark.asyncio
    async def test_create_event_error(self):
        self.service.events().insert().execute.side_effect = Exception("API error")
        action = CALENDAR_ACTION_ADAPTER.validate_python(
            {
                "action": "create",
                "event": {
                    "summary": "Bike ride",
                    "start": {"dateTime": "2024-01-02T09:00:00+00:00", "timeZone": "UTC"},
                    "end": {"dateTime": "2024-01-02T10:00:00+00:00", "timeZone": "UTC"},
                },
            }
        )

        with pytest.raises(CalendarError, match="Failed to create calendar event"):
            await self.client.execute_action(action)

    @pytest.mark.asyncio
    async def test_get_event(self):
        self.service.events().get().execute.return_value = {"id": "abc123", "summary": "Review"}

        result = await self.client.execute_action(
            CALENDAR_ACTION_ADAPTER.validate_python({"action": "get", "eventId": "abc123"})
        )

        assert isinstance(result, GetEventResult)
        assert result.event["summary"] == "Review"
        self.service.events().get.assert_called_with(calendarId="primary", eventId="abc123")

    @pytest.mark.asyncio
    async def test_get_event_error(self):
        self.service.events().get().execute.side_effect = Exception("Not Found")

        with pytest.raises(CalendarError, match="Failed to get calendar event"):
            await self.client.get_event("missing")


class TestConvertToCalendarEvent:
    def test_full_event(self):
        event = convert_to_calendar_event(
            {
                "id": "evt",
                "summary": "Client visit",
                "location": "Lyon",
                "start": {"dateTime": "2024-01-01T10:00:00+01:00"},
                "end": {"dateTime": "2024-01-01T11:30:00+01:00"},
            },
            "Europe/Paris",
        )

        assert event.title == "Client visit"
        assert event.location == "Lyon"
        assert (event.end_time - event.start_time).total_seconds() == 90 * 60
        assert event.status == "confirmed"

    def test_missing_title_defaults(self):
        event = convert_to_calendar_event({"id": "evt", "start": {"date": "2024-01-01"}})

        assert event.title == "Meeting"
        assert event.end_time is None

    @pytest.mark.parametrize(
        "raw",
        [
            {"summary": "No id", "start": {"dateTime": "2024-01-01T10:00:00Z"}},
            {"id": "evt", "summary": "No start"},
            {"id": "evt", "start": {"dateTime": "garbage"}},
        ],
    )
    def test_unusable_events(self, raw):
        assert convert_to_calendar_event(raw) is None


class TestCalendarClientFactory:
    def test_creates_client_per_token(self):
        builder = MagicMock()
        factory = CalendarClientFactory(service_builder=builder)

        first = factory.create("token-a")
        second = factory.create("token-b")

        assert first is not second
        assert first.access_token == "token-a"
        assert second.service_builder is builder
