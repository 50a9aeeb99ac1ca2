"""Shared test fixtures and fakes."""

import copy
from typing import Any, List, Optional

import pytest

from skybrief.agents.weatheragent.dto import WeatherAPIResponse
from skybrief.llm.dto import RetryConfig
from skybrief.llm.extraction import StructuredExtractor

WEATHER_PAYLOAD = {
    "location": {
        "name": "London",
        "region": "City of London, Greater London",
        "country": "United Kingdom",
        "lat": 51.52,
        "lon": -0.11,
        "tz_id": "Europe/London",
        "localtime_epoch": 1704103200,
        "localtime": "2024-01-01 10:00",
    },
    "current": {
        "last_updated": "2024-01-01 10:00",
        "temp_c": 8.0,
        "temp_f": 46.4,
        "is_day": 1,
        "condition": {"text": "Light rain", "icon": "//cdn.weatherapi.com/296.png", "code": 1183},
        "wind_kph": 19.1,
        "wind_mph": 11.9,
        "humidity": 87,
        "feelslike_c": 5.2,
        "air_quality": {"pm2_5": 6.2, "us-epa-index": 1},
    },
    "forecast": {
        "forecastday": [
            {
                "date": "2024-01-01",
                "day": {
                    "maxtemp_c": 9.1,
                    "maxtemp_f": 48.4,
                    "mintemp_c": 4.3,
                    "mintemp_f": 39.7,
                    "condition": {"text": "Patchy rain possible", "code": 1063},
                    "daily_chance_of_rain": 80,
                },
            }
        ]
    },
    "alerts": {"alert": []},
}


class FakeCompletionClient:
    """Scripted completion client.

    Each call consumes the next scripted reply; an Exception instance is
    raised instead of returned. The last reply repeats once the script runs out.
    """

    def __init__(self, replies: List[Any]):
        self.replies = list(replies)
        self.calls: List[dict] = []

    async def complete(
        self,
        prompt: str,
        temperature: float,
        timeout: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> Optional[str]:
        self.calls.append(
            {"prompt": prompt, "temperature": temperature, "timeout": timeout, "max_tokens": max_tokens}
        )
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, Exception):
            raise reply
        return reply


class SleepRecorder:
    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def weather_payload() -> dict:
    return copy.deepcopy(WEATHER_PAYLOAD)


@pytest.fixture
def weather_response(weather_payload) -> WeatherAPIResponse:
    return WeatherAPIResponse.model_validate(weather_payload)


@pytest.fixture
def fake_client_factory():
    return FakeCompletionClient


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def make_extractor(sleep_recorder):
    """Build a StructuredExtractor over scripted replies with recorded (not real) sleeps."""

    def _make(replies: List[Any], **retry_kwargs) -> StructuredExtractor:
        client = FakeCompletionClient(replies)
        return StructuredExtractor(client, RetryConfig(**retry_kwargs), sleep=sleep_recorder)

    return _make
