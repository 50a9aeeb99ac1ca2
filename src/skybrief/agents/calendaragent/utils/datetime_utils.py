"""
Calendar Datetime Utilities

This module provides datetime parsing and formatting utilities:
- get_timezone: Resolve an IANA timezone name with pytz
- parse_google_calendar_datetime: Parse a Google Calendar start/end dict
- to_utc_iso: Convert a datetime to a UTC ISO-8601 string for the API
- format_local_time: Render a time like "3:05 PM" in a user's timezone
"""

from datetime import datetime
from typing import Optional

import pytz

from skybrief.agents.calendaragent.constants import UTC_TIMEZONE


def get_timezone(name: Optional[str]):
    """
    Resolve a timezone name, falling back to UTC for empty or unknown names.

    Args:
        name: IANA timezone name such as "Europe/Paris"
    """
    if not name:
        return UTC_TIMEZONE
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        return UTC_TIMEZONE


def parse_iso_datetime(value: str) -> Optional[datetime]:
    """Parse an ISO-8601 string (a trailing Z is accepted); None when unparseable."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (ValueError, TypeError):
        return None


def parse_google_calendar_datetime(date_dict: Optional[dict], timezone_name: Optional[str] = None) -> Optional[datetime]:
    """
    Parse Google Calendar datetime format to an aware datetime.

    Args:
        date_dict: Google Calendar {"dateTime": ...} or {"date": ...} dict
        timezone_name: Timezone used for all-day events and naive timestamps

    Returns:
        Timezone-aware datetime, or None when the dict carries no usable value
    """
    if not date_dict:
        return None
    tz = get_timezone(timezone_name or date_dict.get("timeZone"))

    if date_dict.get("dateTime"):
        dt = parse_iso_datetime(date_dict["dateTime"])
        if dt is not None and dt.tzinfo is None:
            dt = tz.localize(dt)
        return dt
    if date_dict.get("date"):
        try:
            # All-day event: midnight in the user's timezone
            return tz.localize(datetime.strptime(date_dict["date"], "%Y-%m-%d"))
        except ValueError:
            return None
    return None


def to_utc_iso(dt: datetime) -> str:
    """
    Convert a datetime to UTC ISO format for Google Calendar API.

    Naive datetimes are treated as UTC.
    """
    if dt.tzinfo is None:
        dt = UTC_TIMEZONE.localize(dt)
    return dt.astimezone(pytz.UTC).isoformat()


def format_local_time(dt: datetime, timezone_name: Optional[str] = None) -> str:
    """Format the wall-clock time of ``dt`` in ``timezone_name``, e.g. "3:05 PM"."""
    local = dt.astimezone(get_timezone(timezone_name))
    hour = local.hour % 12 or 12
    return f"{hour}:{local.minute:02d} {'AM' if local.hour < 12 else 'PM'}"
