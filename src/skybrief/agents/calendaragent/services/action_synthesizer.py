"""
Calendar Action Synthesis

Decides whether a weather query also asks for a calendar operation and, if
so, extracts its typed parameters. A literal null from the model means "no
calendar action".
"""

import logging
from datetime import datetime
from typing import Callable, Optional

import pytz

from skybrief.llm.extraction import StructuredExtractor
from skybrief.agents.calendaragent.dto import CALENDAR_ACTION_ADAPTER
from skybrief.supervisor.prompts import build_calendar_action_prompt

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(pytz.UTC)


class CalendarActionSynthesizer:
    """
    Args:
        extractor: Structured extraction engine
        clock: Returns the current aware datetime used for the prompt's time anchors
    """

    def __init__(self, extractor: StructuredExtractor, clock: Callable[[], datetime] = utc_now):
        self.extractor = extractor
        self.clock = clock

    async def synthesize(self, user_query: str, weather_summary: Optional[str] = None):
        """
        Returns:
            CreateEventAction, FindEventsAction or GetEventAction; None when the
            query has no calendar intent

        Raises:
            ExtractionError: no valid action or null within the attempt budget
        """
        action = await self.extractor.run_or_null(
            CALENDAR_ACTION_ADAPTER,
            lambda: build_calendar_action_prompt(user_query, weather_summary, self.clock()),
        )
        if action is None:
            logger.info("No calendar action for query")
        else:
            logger.info(f"Synthesized calendar action: {action.action}")
        return action
