"""
Notification Weather Service

Produces the weather briefing for one upcoming meeting:
resolve location -> synthesize weather query -> fetch weather ->
generate a NotificationWeatherResult.
"""

import json
import logging
from dataclasses import replace

from skybrief.constants import LLM_SETTINGS
from skybrief.exceptions import GenerationError
from skybrief.llm.generation import generate_text
from skybrief.llm.validation import validate
from skybrief.notifications.dto import NotificationWeatherContext, NotificationWeatherResult
from skybrief.supervisor.prompts import build_notification_summary_prompt
from skybrief.utils.location import resolve_meeting_location

logger = logging.getLogger(__name__)


def parse_notification_weather_result(content: str) -> NotificationWeatherResult:
    """
    Parse and validate the model's briefing JSON.

    Raises:
        GenerationError: content is not JSON or does not match NotificationWeatherResult
    """
    try:
        parsed = json.loads(content)
    except json.JSONDecodeError as e:
        logger.error(f"Notification weather result is not JSON: {content!r}")
        raise GenerationError("Invalid weather notification response format") from e

    outcome = validate(NotificationWeatherResult, parsed)
    if not outcome.success:
        logger.error(f"Notification weather result failed validation: {outcome.error}")
        raise GenerationError("Invalid weather notification response format")
    return outcome.value


class NotificationWeatherService:
    """
    Args:
        query_synthesizer: WeatherQuerySynthesizer
        weather_client: WeatherAPIClient
        client: Chat completion client used for the briefing
        timeout: Seconds allowed for the briefing completion
    """

    def __init__(self, query_synthesizer, weather_client, client, timeout: float = LLM_SETTINGS.NOTIFICATION_SUMMARY_TIMEOUT):
        self.query_synthesizer = query_synthesizer
        self.weather_client = weather_client
        self.client = client
        self.timeout = timeout

    async def get_weather_for_notification(self, context: NotificationWeatherContext) -> NotificationWeatherResult:
        location = resolve_meeting_location(context.meeting_location, context.user_default_location)
        resolved_context = replace(context, meeting_location=location)

        query = await self.query_synthesizer.synthesize_for_notification(resolved_context)
        weather = await self.weather_client.fetch(query)

        prompt = build_notification_summary_prompt(
            resolved_context.meeting_location,
            resolved_context.meeting_time,
            resolved_context.user_timezone,
            resolved_context.meeting_duration_minutes,
            weather.to_prompt_payload(),
        )
        content = await generate_text(
            self.client,
            prompt,
            temperature=LLM_SETTINGS.CONVERSATIONAL_TEMPERATURE,
            timeout=self.timeout,
            purpose="weather notification",
        )
        return parse_notification_weather_result(content)
