"""
Notification Service

One scan of the pre-meeting SMS pipeline. For every user with SMS enabled:
find meetings starting soon, decide per meeting whether a notification is
due, and if so generate the weather briefing and SMS body, send it, and mark
the pair as sent.

Failures are isolated: one user or one meeting failing is logged and the
scan moves on.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional

import pytz

from skybrief.agents.calendaragent.calendar_client import convert_to_calendar_event
from skybrief.agents.calendaragent.dto import CalendarEvent, FindEventsResult, FindQuery
from skybrief.agents.calendaragent.utils.datetime_utils import format_local_time, to_utc_iso
from skybrief.constants import LLM_SETTINGS, NOTIFICATION_SETTINGS
from skybrief.db.dto import UserProfile
from skybrief.llm.generation import generate_text
from skybrief.notifications.dto import NotificationWeatherContext
from skybrief.supervisor.prompts import build_sms_message_prompt

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(pytz.UTC)


def calculate_meeting_duration(event: CalendarEvent) -> int:
    """Meeting length in minutes, 60 when the end is missing or not after the start."""
    if event.end_time is None:
        return NOTIFICATION_SETTINGS.DEFAULT_MEETING_DURATION_MINUTES
    minutes = round((event.end_time - event.start_time).total_seconds() / 60)
    if minutes <= 0:
        return NOTIFICATION_SETTINGS.DEFAULT_MEETING_DURATION_MINUTES
    return minutes


class NotificationService:
    """
    Args:
        user_store: UserStore
        token_store: TokenStore
        notification_store: NotificationStore
        calendar_factory: CalendarClientFactory
        weather_service: NotificationWeatherService
        sms_client: TwilioSMSClient
        client: Chat completion client used for the SMS body
        clock: Returns the current aware datetime
    """

    def __init__(
        self,
        user_store,
        token_store,
        notification_store,
        calendar_factory,
        weather_service,
        sms_client,
        client,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.user_store = user_store
        self.token_store = token_store
        self.notification_store = notification_store
        self.calendar_factory = calendar_factory
        self.weather_service = weather_service
        self.sms_client = sms_client
        self.client = client
        self.clock = clock

    async def process_notifications(self, now: Optional[datetime] = None) -> int:
        """
        Run one scan.

        Returns:
            Number of SMS notifications sent
        """
        now = now or self.clock()
        users = self.user_store.find_users_with_sms()
        logger.info(f"Found {len(users)} users with SMS notifications enabled")

        sent = 0
        for user in users:
            try:
                sent += await self.process_user_notifications(user, now)
            except Exception:
                logger.exception(f"Failed to process notifications for session {user.session_id}")

        self.notification_store.cleanup_old_notifications(now)
        return sent

    async def process_user_notifications(self, user: UserProfile, now: datetime) -> int:
        tokens = self.token_store.get_tokens(user.session_id)
        if tokens is None:
            logger.info(f"No tokens found for session {user.session_id}")
            return 0
        if not user.sms_phone_number:
            return 0

        calendar = self.calendar_factory.create(tokens.access_token)
        meetings = await self.get_upcoming_meetings(calendar, user, now)
        if not meetings:
            logger.info(f"No upcoming meetings found for session {user.session_id}")
            return 0
        logger.info(f"Found {len(meetings)} upcoming meetings for session {user.session_id}")

        sent = 0
        for meeting in meetings:
            try:
                if await self.process_meeting_notification(user, meeting, now):
                    sent += 1
            except Exception:
                logger.exception(f"Failed to send notification for meeting {meeting.id}")
        return sent

    async def get_upcoming_meetings(self, calendar, user: UserProfile, now: datetime) -> List[CalendarEvent]:
        """
        Meetings starting soon enough to notify about.

        The calendar search covers [now + search start, now + search end];
        results are then kept only when they start within the user's advance
        notice.
        Events without an id or parseable start are dropped.
        """
        query = FindQuery(
            time_min=to_utc_iso(now + timedelta(minutes=NOTIFICATION_SETTINGS.SEARCH_WINDOW_START_MINUTES)),
            time_max=to_utc_iso(now + timedelta(minutes=NOTIFICATION_SETTINGS.SEARCH_WINDOW_END_MINUTES)),
            max_results=NOTIFICATION_SETTINGS.MAX_MEETINGS_PER_SCAN,
        )
        result = await calendar.find_events(query, now=now)
        if not isinstance(result, FindEventsResult) or not result.success:
            return []

        meetings = []
        for raw_event in result.events:
            event = convert_to_calendar_event(raw_event, user.timezone)
            if event is None:
                logger.warning(f"Skipping calendar event without id or valid start: {raw_event.get('id')}")
                continue
            minutes_until = (event.start_time - now).total_seconds() / 60
            if minutes_until <= user.notification_preferences.advance_notice_minutes:
                meetings.append(event)
        return meetings

    async def process_meeting_notification(self, user: UserProfile, meeting: CalendarEvent, now: datetime) -> bool:
        """Send the SMS for one meeting when it is due; True when a message went out."""
        advance_notice = user.notification_preferences.advance_notice_minutes
        if not self.notification_store.should_send_notification(
            user.session_id, meeting.id, meeting.start_time, now, send_window_minutes=advance_notice
        ):
            logger.info(f"Skipping notification for meeting {meeting.id}: already sent or outside window")
            return False

        timezone_name = user.timezone or NOTIFICATION_SETTINGS.DEFAULT_TIMEZONE
        context = NotificationWeatherContext(
            meeting_location=meeting.location or meeting.description or "",
            meeting_time=meeting.start_time,
            user_timezone=timezone_name,
            meeting_duration_minutes=calculate_meeting_duration(meeting),
            user_default_location=user.resolved_location or user.default_location,
        )

        weather_result = await self.weather_service.get_weather_for_notification(context)

        prompt = build_sms_message_prompt(
            meeting.title or "Meeting",
            format_local_time(meeting.start_time, timezone_name),
            weather_result,
        )
        body = await generate_text(
            self.client,
            prompt,
            temperature=LLM_SETTINGS.CONVERSATIONAL_TEMPERATURE,
            timeout=LLM_SETTINGS.SMS_MESSAGE_TIMEOUT,
            max_tokens=LLM_SETTINGS.SMS_MAX_TOKENS,
            purpose="SMS message",
        )

        await self.sms_client.send_message(user.sms_phone_number, body)
        self.notification_store.mark_as_sent(user.session_id, meeting.id, now)
        logger.info(f"Sent weather notification for meeting: {meeting.title}")
        return True
