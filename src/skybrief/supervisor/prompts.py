"""
Prompt Builders for the Weather Assistant

This module contains ALL the prompts sent to the language model: the two
extraction prompts (weather query, calendar action), the weather answer
prompt and the three notification prompts. No prompts should exist outside
this file.
"""

import json
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

WEATHER_QUERY_SCHEMA_HINT = """{
  "q": "string",          // required: location (city name, "lat,lon", postcode)
  "days": number,         // 1 to 14
  "dt": "YYYY-MM-DD",     // optional: a specific date, resolved from relative dates
  "hour": number,         // optional: 0 to 23
  "alerts": "yes" | "no",
  "aqi": "yes" | "no",
  "lang": "en"            // 2-letter language code of the user's query
}"""


def build_weather_query_prompt(user_query: str, today: str, location_name: str) -> str:
    """Prompt that turns a user's weather question into WeatherAPI forecast.json parameters."""
    return f"""You are a weather assistant.

Convert the user's weather request into a JSON object of parameters for the WeatherAPI forecast.json endpoint.

Today's date: {today}

JSON shape:
{WEATHER_QUERY_SCHEMA_HINT}

Rules:
- If the user names no location, use "{location_name}"
- Resolve relative dates such as "tomorrow" or "next Friday" against {today}
- Always set "alerts": "yes" and "aqi": "yes"
- Use "days": 1 unless the user asks about several days
- Set "lang" to the language the user wrote in

Respond ONLY with the JSON object. No extra text.

User query: "{user_query}"
"""


def build_notification_weather_query_prompt(
    meeting_location: str,
    meeting_time: datetime,
    user_timezone: str,
    meeting_duration_minutes: int,
) -> str:
    """Prompt that picks WeatherAPI parameters covering a single upcoming meeting."""
    return f"""You are a weather assistant preparing data for a pre-meeting weather notification.

Meeting:
- Location: {meeting_location}
- Start: {meeting_time.isoformat()}
- Timezone: {user_timezone}
- Duration: {meeting_duration_minutes} minutes

Choose WeatherAPI forecast.json parameters that cover the weather at the meeting location while the meeting takes place:
- "q" is the meeting location
- "dt" is the meeting date (YYYY-MM-DD) in the meeting timezone
- "hour" is the local hour the meeting starts (0 to 23)
- "days" is 1 unless the meeting is more than one day away
- Always set "alerts": "yes" and "aqi": "yes"

JSON shape:
{WEATHER_QUERY_SCHEMA_HINT}

Respond ONLY with the JSON object. No extra text.
"""


def build_calendar_action_prompt(user_query: str, weather_info: Optional[str], now: datetime) -> str:
    """
    Prompt that decides whether a query implies a calendar operation.

    ``now`` must be timezone-aware; now/today/tomorrow anchors are rendered
    as concrete ISO-8601 strings so the model never emits symbolic dates.
    """
    today_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    tomorrow_start = today_start + timedelta(days=1)
    day_after_start = tomorrow_start + timedelta(days=1)

    now_iso = now.isoformat()
    today_iso = today_start.isoformat()
    tomorrow_iso = tomorrow_start.isoformat()
    day_after_iso = day_after_start.isoformat()
    tomorrow_9 = tomorrow_start.replace(hour=9).isoformat()
    tomorrow_10 = tomorrow_start.replace(hour=10).isoformat()
    tz_name = now.tzname() or "UTC"
    weather_text = weather_info or "None"

    return f"""You are a calendar assistant. Decide whether the user's request asks for a calendar operation.

Time anchors (use these exact values, never words like "now" or "tomorrow"):
- now: {now_iso}
- start of today: {today_iso}
- start of tomorrow: {tomorrow_iso}
- start of the day after tomorrow: {day_after_iso}

Supported operations, reply with exactly one of these JSON shapes:

1. create: add an event
{{
  "action": "create",
  "event": {{
    "summary": string,
    "start": {{ "dateTime": ISO-8601 string, "timeZone": string }},
    "end": {{ "dateTime": ISO-8601 string, "timeZone": string }},
    "description": string (optional),
    "location": string (optional),
    "attendees": [{{ "email": string }}] (optional),
    "reminders": {{ "useDefault": boolean }} (optional)
  }}
}}

2. find: search upcoming or past events
{{
  "action": "find",
  "query": {{
    "timeMin": ISO-8601 string (optional),
    "timeMax": ISO-8601 string (optional),
    "searchTerm": string (optional),
    "maxResults": number (optional, default 10),
    "orderBy": "startTime" (optional)
  }}
}}

3. get: fetch one event by id
{{
  "action": "get",
  "eventId": string
}}

Rules:
- If the request needs no calendar operation, respond with exactly: null
- Use the weather information as context when creating events (e.g. in the description)
- Use "{tz_name}" as the timeZone unless the user names another one
- Events without an explicit end last one hour

Examples:
- "What's my next meeting?" -> {{"action": "find", "query": {{"timeMin": "{now_iso}", "maxResults": 1, "orderBy": "startTime"}}}}
- "Show my events for tomorrow" -> {{"action": "find", "query": {{"timeMin": "{tomorrow_iso}", "timeMax": "{day_after_iso}", "orderBy": "startTime"}}}}
- "Add a bike ride tomorrow at 9" -> {{"action": "create", "event": {{"summary": "Bike ride", "start": {{"dateTime": "{tomorrow_9}", "timeZone": "{tz_name}"}}, "end": {{"dateTime": "{tomorrow_10}", "timeZone": "{tz_name}"}}}}}}
- "Get event abc123" -> {{"action": "get", "eventId": "abc123"}}
- "What's the weather?" -> null

Respond ONLY with the JSON object or null. No extra text.

User query: "{user_query}"
Weather info: "{weather_text}"
"""


def build_weather_response_prompt(
    weather_data: Dict[str, Any],
    original_query: str,
    calendar_result: Optional[Dict[str, Any]] = None,
) -> str:
    """Prompt that turns raw weather (and calendar) data into a conversational answer."""
    calendar_section = ""
    if calendar_result:
        calendar_section = f"""
Calendar result:
{json.dumps(calendar_result, indent=2, default=str)}
"""

    return f"""You are a friendly weather assistant. Answer the user's question using the data below.

Weather data:
{json.dumps(weather_data, indent=2, default=str)}
{calendar_section}
User question: "{original_query}"

Instructions:
- Answer the question directly in a natural, conversational tone
- Include relevant details: temperature, conditions, chance of precipitation, wind
- Focus on the dates or hours the user asked about
- Put any weather alerts up front
- Use Celsius or Fahrenheit to match the user's location
- If a calendar result is present, mention what was done or found and relate it to the weather when useful
- If the data lacks what the user asked for, say what is available instead
"""


def build_notification_summary_prompt(
    meeting_location: str,
    meeting_time: datetime,
    user_timezone: str,
    meeting_duration_minutes: int,
    weather_data: Dict[str, Any],
) -> str:
    """Prompt that condenses meeting weather into a NotificationWeatherResult JSON object."""
    location_text = meeting_location or "Unknown location"
    return f"""You are preparing a weather briefing that will be sent by SMS about one hour before a meeting.

Meeting:
- Location: {location_text}
- Start: {meeting_time.isoformat()}
- Duration: {meeting_duration_minutes} minutes
- Timezone: {user_timezone}

Weather data for the meeting:
{json.dumps(weather_data, indent=2, default=str)}

Consider the conditions at the meeting time and place, how they affect getting there, and what the person should bring or prepare.

Respond with a JSON object in exactly this shape:
{{
  "weatherSummary": "short summary of the weather for the meeting",
  "actionableAdvice": "what to bring or prepare",
  "severity": "low" | "medium" | "high",
  "relevantAlerts": ["weather alerts or warnings, empty if none"]
}}

Severity: "low" for minor concerns, "medium" for moderate disruption, "high" for significant or dangerous weather.

Respond ONLY with the JSON object. No extra text.
"""


def build_sms_message_prompt(meeting_title: str, meeting_time: str, weather_result) -> str:
    """Prompt that writes the final SMS body from a NotificationWeatherResult."""
    alerts = ", ".join(weather_result.relevant_alerts) or "None"
    return f"""Write a weather SMS for someone heading to a meeting.

Meeting:
- Title: {meeting_title}
- Time: {meeting_time}

Weather:
- Summary: {weather_result.weather_summary}
- Advice: {weather_result.actionable_advice}
- Severity: {weather_result.severity}
- Alerts: {alerts}

The message must be one or two sentences, under 160 characters, friendly and to the point.
Say what to bring (umbrella, coat, sunscreen...) and clearly warn about severe weather.
Reply with the SMS text only.
"""
