"""
Weather Response Humanizer

Turns raw weather data, plus an optional calendar result, into a
conversational answer.
"""

import logging
from typing import Any, Dict, Optional

from skybrief.agents.weatheragent.dto import WeatherAPIResponse
from skybrief.constants import LLM_SETTINGS
from skybrief.llm.generation import generate_text
from skybrief.supervisor.prompts import build_weather_response_prompt

logger = logging.getLogger(__name__)


class WeatherResponseHumanizer:
    def __init__(self, client, timeout: float = LLM_SETTINGS.WEATHER_RESPONSE_TIMEOUT):
        self.client = client
        self.timeout = timeout

    async def humanize(
        self,
        weather_data: WeatherAPIResponse,
        original_query: str,
        calendar_result: Optional[Dict[str, Any]] = None,
    ) -> str:
        """
        Generate the user-facing answer.

        Raises:
            OperationTimeoutError: no answer within ``timeout`` seconds
            EmptyResponseError: the model returned no content
            GenerationError: "Failed to generate weather response"
        """
        prompt = build_weather_response_prompt(
            weather_data.to_prompt_payload(),
            original_query,
            calendar_result,
        )
        return await generate_text(
            self.client,
            prompt,
            temperature=LLM_SETTINGS.CONVERSATIONAL_TEMPERATURE,
            timeout=self.timeout,
            purpose="weather response",
        )
