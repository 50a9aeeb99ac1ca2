"""
Location Utilities

This module provides the location helpers used by the weather and
notification flows:
- IPGeolocationClient: resolve city, country and timezone from an IP (ipapi.co)
- get_today_for_timezone: today's ISO date in a timezone
- extract_client_ip: caller IP from a FastAPI request
- resolve_meeting_location: pick the location a meeting notification uses
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import httpx
import pytz

from skybrief.config import settings
from skybrief.exceptions import InvalidRequestError, LocationResolutionError

logger = logging.getLogger(__name__)

IPAPI_URL_TEMPLATE = "https://ipapi.co/{ip}/json/"


@dataclass
class LocationData:
    """Location resolved from an IP address."""
    city: str
    country_name: str
    timezone: str = "UTC"

    @property
    def display_name(self) -> str:
        return ", ".join(part for part in (self.city, self.country_name) if part)


class IPGeolocationClient:
    """
    ipapi.co client.

    Args:
        api_key: ipapi.co key (sent as the ``key`` query parameter when set)
        http_client: Optional shared httpx.AsyncClient
    """

    def __init__(
        self,
        api_key: str = settings.IPAPI_API_KEY,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 5.0,
    ):
        self.api_key = api_key
        self.http_client = http_client
        self.timeout = timeout

    async def _get(self, url: str, params: dict) -> httpx.Response:
        if self.http_client is not None:
            return await self.http_client.get(url, params=params)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.get(url, params=params)

    async def resolve(self, ip: str) -> LocationData:
        """
        Resolve ``ip`` to a city, country and timezone.

        Raises:
            LocationResolutionError: request failed, non-2xx status, or the
                provider reported an error / returned no city
        """
        params = {"key": self.api_key} if self.api_key else {}
        try:
            response = await self._get(IPAPI_URL_TEMPLATE.format(ip=ip), params)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"IP geolocation failed for {ip}: {str(e)}")
            raise LocationResolutionError("Failed to resolve user location", original_error=e) from e

        if data.get("error") or not data.get("city"):
            logger.warning("IP geolocation returned no city for %s: %s", ip, data.get("reason"))
            raise LocationResolutionError(f"Could not resolve location for IP {ip}")

        return LocationData(
            city=data["city"],
            country_name=data.get("country_name") or "",
            timezone=data.get("timezone") or "UTC",
        )


def get_today_for_timezone(timezone_name: str, now: Optional[datetime] = None) -> str:
    """
    Today's date (YYYY-MM-DD) in ``timezone_name``.

    Raises:
        InvalidRequestError: unknown timezone
    """
    try:
        tz = pytz.timezone(timezone_name)
    except pytz.UnknownTimeZoneError as e:
        raise InvalidRequestError(f"Invalid timezone: {timezone_name}. Unable to generate date.") from e
    current = now or datetime.now(pytz.UTC)
    return current.astimezone(tz).date().isoformat()


def extract_client_ip(request) -> str:
    """First x-forwarded-for entry, else the peer address."""
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.client.host if request.client else ""


def resolve_meeting_location(meeting_location: Optional[str], user_default_location: Optional[str] = None) -> str:
    """
    Location used for a meeting's weather: the meeting's own, else the user's default.

    Raises:
        InvalidRequestError: neither is available
    """
    if meeting_location and meeting_location.strip():
        return meeting_location.strip()
    if user_default_location and user_default_location.strip():
        return user_default_location.strip()
    raise InvalidRequestError("No location available for weather notification")
