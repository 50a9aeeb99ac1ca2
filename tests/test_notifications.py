import asyncio
import json
from datetime import datetime, timedelta
from unittest.mock import AsyncMock

import pytest
import pytz

from skybrief.agents.calendaragent.dto import CalendarEvent, FindEventsResult
from skybrief.agents.weatheragent.dto import WeatherAPIQuery
from skybrief.db.dto import NotificationPreferences
from skybrief.db.persistence import TokenStore, UserStore
from skybrief.exceptions import CalendarError, GenerationError, InvalidRequestError
from skybrief.notifications.dto import NotificationWeatherContext, NotificationWeatherResult
from skybrief.notifications.scheduler import NotificationScheduler
from skybrief.notifications.service import NotificationService, calculate_meeting_duration
from skybrief.notifications.store import NotificationStore
from skybrief.notifications.weather import NotificationWeatherService, parse_notification_weather_result

NOW = datetime(2024, 1, 1, 9, 0, tzinfo=pytz.UTC)

BRIEFING = {
    "weatherSummary": "Light rain around 10:00, 8°C",
    "actionableAdvice": "Bring an umbrella",
    "severity": "low",
    "relevantAlerts": [],
}


def google_event(event_id, minutes_from_now, **fields):
    start = NOW + timedelta(minutes=minutes_from_now)
    event = {
        "id": event_id,
        "summary": f"Meeting {event_id}",
        "start": {"dateTime": start.isoformat()},
        "end": {"dateTime": (start + timedelta(minutes=30)).isoformat()},
    }
    event.update(fields)
    return event


class FakeCalendar:
    def __init__(self, events=None, error=None):
        self.events = events or []
        self.error = error
        self.queries = []

    async def find_events(self, query, now=None):
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        return FindEventsResult(success=True, events=self.events, message=f"Found {len(self.events)} events")


class FakeCalendarFactory:
    def __init__(self, calendars):
        self.calendars = calendars
        self.tokens = []

    def create(self, access_token):
        self.tokens.append(access_token)
        return self.calendars[access_token]


class FakeNotificationWeather:
    def __init__(self, failing_locations=()):
        self.contexts = []
        self.failing_locations = set(failing_locations)

    async def get_weather_for_notification(self, context):
        self.contexts.append(context)
        if context.meeting_location in self.failing_locations:
            raise GenerationError("Invalid weather notification response format")
        return NotificationWeatherResult.model_validate(BRIEFING)


class TestCalculateMeetingDuration:
    def test_duration(self):
        event = CalendarEvent(id="e", title="t", start_time=NOW, end_time=NOW + timedelta(minutes=45))

        assert calculate_meeting_duration(event) == 45

    def test_missing_or_inverted_end(self):
        assert calculate_meeting_duration(CalendarEvent(id="e", title="t", start_time=NOW)) == 60
        inverted = CalendarEvent(id="e", title="t", start_time=NOW, end_time=NOW - timedelta(minutes=5))
        assert calculate_meeting_duration(inverted) == 60


class TestNotificationService:
    def setup_method(self):
        self.user_store = UserStore()
        self.token_store = TokenStore()
        self.notification_store = NotificationStore()
        self.weather = FakeNotificationWeather(failing_locations={"Broken City"})
        self.sms_client = AsyncMock()
        self.sms_client.send_message.return_value = {"sid": "SM1"}

    def add_user(self, session_id, token, **fields):
        self.user_store.create_user(session_id)
        self.user_store.update_user(session_id, sms_phone_number="+33123456789", **fields)
        self.token_store.store_tokens(session_id, token)

    def make_service(self, calendars, client):
        self.factory = FakeCalendarFactory(calendars)
        return NotificationService(
            user_store=self.user_store,
            token_store=self.token_store,
            notification_store=self.notification_store,
            calendar_factory=self.factory,
            weather_service=self.weather,
            sms_client=self.sms_client,
            client=client,
            clock=lambda: NOW,
        )

    @pytest.mark.asyncio
    async def test_sends_once_for_meeting_in_window(self, fake_client_factory):
        self.add_user("s1", "tok-1", timezone="Europe/Paris", resolved_location="Paris, France")
        calendar = FakeCalendar([google_event("e1", 45, location="Lyon")])
        client = fake_client_factory(["Rain in Lyon at 10:45, bring an umbrella."])
        service = self.make_service({"tok-1": calendar}, client)

        assert await service.process_notifications() == 1
        assert await service.process_notifications() == 0

        self.sms_client.send_message.assert_awaited_once_with(
            "+33123456789", "Rain in Lyon at 10:45, bring an umbrella."
        )
        assert self.notification_store.has_notification_been_sent("s1", "e1")

        context = self.weather.contexts[0]
        assert context.meeting_location == "Lyon"
        assert context.user_timezone == "Europe/Paris"
        assert context.meeting_duration_minutes == 30
        assert context.user_default_location == "Paris, France"

        call = client.calls[0]
        assert call["timeout"] == 15
        assert call["max_tokens"] == 100
        assert "Meeting e1" in call["prompt"]
        assert "10:45 AM" in call["prompt"]
        assert "Bring an umbrella" in call["prompt"]

    @pytest.mark.asyncio
    async def test_calendar_search_window(self, fake_client_factory):
        self.add_user("s1", "tok-1")
        calendar = FakeCalendar([])
        service = self.make_service({"tok-1": calendar}, fake_client_factory(["sms"]))

        await service.process_notifications()

        query = calendar.queries[0]
        assert query.time_min == (NOW + timedelta(minutes=60)).isoformat()
        assert query.time_max == (NOW + timedelta(minutes=120)).isoformat()
        assert query.max_results == 10

    @pytest.mark.asyncio
    async def test_meetings_beyond_send_window_are_skipped(self, fake_client_factory):
        self.add_user("s1", "tok-1")
        calendar = FakeCalendar([google_event("later", 90, location="Lyon")])
        service = self.make_service({"tok-1": calendar}, fake_client_factory(["sms"]))

        assert await service.process_notifications() == 0
        self.sms_client.send_message.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_user_advance_notice_widens_window(self, fake_client_factory):
        self.add_user("s1", "tok-1", notification_preferences=NotificationPreferences(advance_notice_minutes=120))
        calendar = FakeCalendar([google_event("later", 90, location="Lyon")])
        service = self.make_service({"tok-1": calendar}, fake_client_factory(["sms"]))

        assert await service.process_notifications() == 1
        assert self.notification_store.has_notification_been_sent("s1", "later")

    @pytest.mark.asyncio
    async def test_description_used_when_location_missing(self, fake_client_factory):
        self.add_user("s1", "tok-1", default_location="Bordeaux")
        calendar = FakeCalendar([
            google_event("e1", 30, description="Office in Nantes"),
            google_event("e2", 40),
        ])
        service = self.make_service({"tok-1": calendar}, fake_client_factory(["sms"]))

        assert await service.process_notifications() == 2
        assert self.weather.contexts[0].meeting_location == "Office in Nantes"
        assert self.weather.contexts[1].meeting_location == ""
        assert self.weather.contexts[1].user_default_location == "Bordeaux"
        assert self.weather.contexts[1].user_timezone == "UTC"

    @pytest.mark.asyncio
    async def test_failing_user_does_not_stop_scan(self, fake_client_factory):
        self.add_user("broken", "tok-broken")
        self.add_user("ok", "tok-ok")
        calendars = {
            "tok-broken": FakeCalendar(error=CalendarError("Failed to find calendar events")),
            "tok-ok": FakeCalendar([google_event("e1", 20, location="Lyon")]),
        }
        service = self.make_service(calendars, fake_client_factory(["sms"]))

        assert await service.process_notifications() == 1
        assert self.notification_store.has_notification_been_sent("ok", "e1")

    @pytest.mark.asyncio
    async def test_failing_meeting_is_not_marked_sent(self, fake_client_factory):
        self.add_user("s1", "tok-1")
        calendar = FakeCalendar([
            google_event("bad", 20, location="Broken City"),
            google_event("good", 30, location="Lyon"),
        ])
        service = self.make_service({"tok-1": calendar}, fake_client_factory(["sms"]))

        assert await service.process_notifications() == 1
        assert not self.notification_store.has_notification_been_sent("s1", "bad")
        assert self.notification_store.has_notification_been_sent("s1", "good")

    @pytest.mark.asyncio
    async def test_sms_failure_leaves_meeting_unsent(self, fake_client_factory):
        self.add_user("s1", "tok-1")
        self.sms_client.send_message.side_effect = Exception("Twilio down")
        calendar = FakeCalendar([google_event("e1", 30, location="Lyon")])
        service = self.make_service({"tok-1": calendar}, fake_client_factory(["sms"]))

        assert await service.process_notifications() == 0
        assert not self.notification_store.has_notification_been_sent("s1", "e1")

    @pytest.mark.asyncio
    async def test_user_without_tokens_is_skipped(self, fake_client_factory):
        self.user_store.create_user("s1")
        self.user_store.update_user("s1", sms_phone_number="+33123456789")
        service = self.make_service({}, fake_client_factory(["sms"]))

        assert await service.process_notifications() == 0
        assert self.factory.tokens == []

    @pytest.mark.asyncio
    async def test_events_without_start_are_dropped(self, fake_client_factory):
        self.add_user("s1", "tok-1")
        calendar = FakeCalendar([{"id": "no-start", "summary": "???"}, google_event("e1", 30, location="Lyon")])
        service = self.make_service({"tok-1": calendar}, fake_client_factory(["sms"]))

        assert await service.process_notifications() == 1


class TestNotificationWeatherService:
    def setup_method(self):
        self.query_synthesizer = AsyncMock()
        self.query_synthesizer.synthesize_for_notification.return_value = WeatherAPIQuery(q="London", days=1)
        self.weather_client = AsyncMock()
        self.context = NotificationWeatherContext(
            meeting_location="",
            meeting_time=NOW + timedelta(minutes=45),
            user_timezone="Europe/London",
            meeting_duration_minutes=30,
            user_default_location="London",
        )

    @pytest.mark.asyncio
    async def test_briefing(self, fake_client_factory, weather_response):
        self.weather_client.fetch.return_value = weather_response
        client = fake_client_factory([json.dumps(BRIEFING)])
        service = NotificationWeatherService(self.query_synthesizer, self.weather_client, client, timeout=20)

        result = await service.get_weather_for_notification(self.context)

        assert result.actionable_advice == "Bring an umbrella"
        assert result.severity == "low"
        synthesized_context = self.query_synthesizer.synthesize_for_notification.call_args.args[0]
        assert synthesized_context.meeting_location == "London"
        prompt = client.calls[0]["prompt"]
        assert "Light rain" in prompt
        assert "30 minutes" in prompt
        assert client.calls[0]["timeout"] == 20

    @pytest.mark.asyncio
    async def test_invalid_briefing(self, fake_client_factory, weather_response):
        self.weather_client.fetch.return_value = weather_response
        client = fake_client_factory(['{"weatherSummary": "Rain"}'])
        service = NotificationWeatherService(self.query_synthesizer, self.weather_client, client)

        with pytest.raises(GenerationError, match="Invalid weather notification response format"):
            await service.get_weather_for_notification(self.context)

    @pytest.mark.asyncio
    async def test_no_location_available(self, fake_client_factory):
        self.context.user_default_location = None
        service = NotificationWeatherService(self.query_synthesizer, self.weather_client, fake_client_factory(["{}"]))

        with pytest.raises(InvalidRequestError):
            await service.get_weather_for_notification(self.context)
        self.query_synthesizer.synthesize_for_notification.assert_not_awaited()

    def test_parse_rejects_non_json(self):
        with pytest.raises(GenerationError):
            parse_notification_weather_result("Bring an umbrella!")


class TestNotificationScheduler:
    @pytest.mark.asyncio
    async def test_check_failures_are_swallowed(self):
        service = AsyncMock()
        service.process_notifications.side_effect = Exception("scan failed")
        scheduler = NotificationScheduler(service, interval_seconds=300)

        await scheduler.run_notification_check()

        service.process_notifications.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_start_runs_immediately_and_stop_cancels(self):
        service = AsyncMock()
        service.process_notifications.return_value = 0
        scheduler = NotificationScheduler(service, interval_seconds=300)

        scheduler.start()
        scheduler.start()
        for _ in range(3):
            await asyncio.sleep(0)

        assert scheduler.is_running
        service.process_notifications.assert_awaited_once()

        await scheduler.stop()
        assert not scheduler.is_running

    @pytest.mark.asyncio
    async def test_stop_without_start(self):
        scheduler = NotificationScheduler(AsyncMock(), interval_seconds=1)

        await scheduler.stop()

        assert not scheduler.is_running
