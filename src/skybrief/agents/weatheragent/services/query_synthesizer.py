"""
Weather Query Synthesis

Turns a user's question (or an upcoming meeting) into validated WeatherAPI
parameters through the structured extraction engine. Null is never an
acceptable answer here: failures surface as ExtractionError.
"""

import logging

from skybrief.agents.weatheragent.dto import WeatherAPIQuery
from skybrief.llm.extraction import StructuredExtractor
from skybrief.supervisor.prompts import (
    build_notification_weather_query_prompt,
    build_weather_query_prompt,
)

logger = logging.getLogger(__name__)


class WeatherQuerySynthesizer:
    """Builds WeatherAPIQuery objects from natural language."""

    def __init__(self, extractor: StructuredExtractor):
        self.extractor = extractor

    async def synthesize(self, user_query: str, today: str, location_name: str) -> WeatherAPIQuery:
        """
        Args:
            user_query: Free-text weather question
            today: ISO date (YYYY-MM-DD) relative dates resolve against
            location_name: Default location when the query names none

        Returns:
            Validated WeatherAPIQuery
        """
        query = await self.extractor.run_or_throw(
            WeatherAPIQuery,
            lambda: build_weather_query_prompt(user_query, today, location_name),
        )
        logger.info(f"Synthesized weather query: {query.model_dump(exclude_none=True)}")
        return query

    async def synthesize_for_notification(self, context) -> WeatherAPIQuery:
        """Weather parameters covering the meeting described by a NotificationWeatherContext."""
        return await self.extractor.run_or_throw(
            WeatherAPIQuery,
            lambda: build_notification_weather_query_prompt(
                context.meeting_location,
                context.meeting_time,
                context.user_timezone,
                context.meeting_duration_minutes,
            ),
        )
