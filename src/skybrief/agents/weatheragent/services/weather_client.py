"""
WeatherAPI Client

Fetches forecast.json for a validated WeatherAPIQuery. Non-2xx statuses,
network failures and payloads that do not match WeatherAPIResponse are all
reported as WeatherFetchError.
"""

import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from skybrief.agents.weatheragent.constants import WEATHER_API_SETTINGS
from skybrief.agents.weatheragent.dto import WeatherAPIQuery, WeatherAPIResponse
from skybrief.exceptions import WeatherFetchError

logger = logging.getLogger(__name__)


def build_query_params(api_key: str, query: WeatherAPIQuery) -> Dict[str, Any]:
    """Map a WeatherAPIQuery onto forecast.json query-string parameters."""
    params: Dict[str, Any] = {
        "key": api_key,
        "q": query.q,
        "days": str(query.days),
        "alerts": query.alerts or "yes",
        "aqi": query.aqi or "yes",
        "lang": query.lang or "en",
    }
    if query.dt:
        params["dt"] = query.dt
    if query.hour is not None:
        params["hour"] = str(query.hour)
    return params


class WeatherAPIClient:
    """
    Async client for the WeatherAPI forecast endpoint.

    Args:
        api_key: WeatherAPI key
        api_url: forecast.json URL
        http_client: Optional shared httpx.AsyncClient (a short-lived one is
            opened per request otherwise)
    """

    def __init__(
        self,
        api_key: str = WEATHER_API_SETTINGS.API_KEY,
        api_url: str = WEATHER_API_SETTINGS.API_URL,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = WEATHER_API_SETTINGS.TIMEOUT_SECONDS,
    ):
        self.api_key = api_key
        self.api_url = api_url
        self.http_client = http_client
        self.timeout = timeout

    async def _get(self, params: Dict[str, Any]) -> httpx.Response:
        if self.http_client is not None:
            return await self.http_client.get(self.api_url, params=params)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.get(self.api_url, params=params)

    async def fetch(self, query: WeatherAPIQuery) -> WeatherAPIResponse:
        """
        Fetch forecast data.

        Args:
            query: Validated forecast parameters

        Returns:
            Parsed WeatherAPIResponse

        Raises:
            WeatherFetchError: on transport failure, non-2xx status or schema mismatch
        """
        params = build_query_params(self.api_key, query)

        try:
            response = await self._get(params)
        except httpx.HTTPError as e:
            logger.error(f"WeatherAPI request failed: {str(e)}")
            raise WeatherFetchError("WeatherAPI request failed", original_error=e) from e

        if not response.is_success:
            logger.error("WeatherAPI error response (%s): %s", response.status_code, response.text)
            raise WeatherFetchError(f"WeatherAPI failed with status {response.status_code}")

        try:
            return WeatherAPIResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.error(f"WeatherAPI response validation failed: {str(e)}")
            raise WeatherFetchError("Invalid response from WeatherAPI", original_error=e) from e
