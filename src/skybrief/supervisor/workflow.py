"""
Weather Request Workflow

Strictly sequential pipeline behind GET /weather:

1. Resolve the caller's location and today's date from the client IP
2. Synthesize WeatherAPI parameters from the question
3. Fetch the forecast
4. Synthesize a calendar action (best effort)
5. Execute it against the user's calendar when the session has tokens (best effort)
6. Humanize the weather (and calendar) data into the answer

Steps 2, 3 and 6 are required: their errors fail the request. Steps 4 and 5
only augment the answer: their errors are logged and the answer is produced
without calendar context.
"""

import logging
from typing import Optional, Tuple

from skybrief.config import settings
from skybrief.exceptions import AppError
from skybrief.supervisor.dto import WeatherAnswer
from skybrief.utils.location import get_today_for_timezone

logger = logging.getLogger(__name__)


class WeatherSupervisor:
    """
    Orchestrates one weather request.

    Args:
        geolocation_client: IPGeolocationClient
        query_synthesizer: WeatherQuerySynthesizer
        weather_client: WeatherAPIClient
        action_synthesizer: CalendarActionSynthesizer
        token_store: TokenStore consulted before any calendar call
        calendar_factory: CalendarClientFactory
        humanizer: WeatherResponseHumanizer
        default_location: Location used when the IP cannot be resolved
        default_timezone: Timezone used when the IP cannot be resolved
    """

    def __init__(
        self,
        geolocation_client,
        query_synthesizer,
        weather_client,
        action_synthesizer,
        token_store,
        calendar_factory,
        humanizer,
        default_location: str = settings.DEFAULT_LOCATION,
        default_timezone: str = settings.DEFAULT_TIMEZONE,
    ):
        self.geolocation_client = geolocation_client
        self.query_synthesizer = query_synthesizer
        self.weather_client = weather_client
        self.action_synthesizer = action_synthesizer
        self.token_store = token_store
        self.calendar_factory = calendar_factory
        self.humanizer = humanizer
        self.default_location = default_location
        self.default_timezone = default_timezone

    async def resolve_location(self, client_ip: Optional[str]) -> Tuple[str, str]:
        """(location name, timezone) for ``client_ip``, or the configured defaults."""
        if not client_ip:
            return self.default_location, self.default_timezone
        try:
            location = await self.geolocation_client.resolve(client_ip)
            return location.display_name or self.default_location, location.timezone
        except AppError as e:
            logger.warning(f"Falling back to default location for {client_ip}: {e.message}")
            return self.default_location, self.default_timezone

    def resolve_today(self, timezone_name: str) -> str:
        try:
            return get_today_for_timezone(timezone_name)
        except AppError:
            logger.warning(f"Unknown timezone {timezone_name!r}, using {self.default_timezone}")
            return get_today_for_timezone(self.default_timezone)

    async def augment_with_calendar(self, query: str, weather_summary: str, session_id: Optional[str]):
        """Best-effort calendar step; None whenever no action applies or anything fails."""
        try:
            action = await self.action_synthesizer.synthesize(query, weather_summary)
        except Exception as e:
            logger.warning(f"Calendar action synthesis failed, continuing without calendar: {str(e)}")
            return None

        if action is None or not session_id:
            return None

        tokens = self.token_store.get_tokens(session_id)
        if tokens is None:
            logger.info(f"No calendar tokens for session {session_id}, skipping calendar action")
            return None

        try:
            calendar = self.calendar_factory.create(tokens.access_token)
            return await calendar.execute_action(action)
        except Exception as e:
            logger.error(f"Calendar action failed: {str(e)}")
            return None

    async def process_query(
        self,
        query: str,
        client_ip: Optional[str] = None,
        session_id: Optional[str] = None,
    ) -> WeatherAnswer:
        location_name, timezone_name = await self.resolve_location(client_ip)
        today = self.resolve_today(timezone_name)

        weather_query = await self.query_synthesizer.synthesize(query, today, location_name)
        weather = await self.weather_client.fetch(weather_query)

        calendar_result = await self.augment_with_calendar(query, weather.current.condition.text, session_id)

        forecast = await self.humanizer.humanize(
            weather,
            query,
            calendar_result.model_dump() if calendar_result is not None else None,
        )

        return WeatherAnswer(
            location=weather.location.name,
            forecast=forecast,
            query=query,
            calendar_result=calendar_result,
        )
