"""
Structured Extraction Engine

Turns free text into schema-validated values through a language model. Each
call runs a bounded retry loop: build the prompt for the attempt, ask the
model at temperature 0, parse the reply as JSON, validate it, and on failure
retry with an escalated prompt after an exponential backoff.

Outcomes per attempt (see AttemptOutcome):
- SUCCESS: parsed and validated, returned immediately
- NULL: the literal ``null`` when the caller allows it, returned immediately
- PARSE_FAILURE / SCHEMA_FAILURE / TRANSPORT_FAILURE: recorded, then retried
"""

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, List, Optional

from skybrief.constants import LLM_SETTINGS
from skybrief.exceptions import ExternalServiceError, ExtractionError
from skybrief.llm.dto import AttemptOutcome, ExtractionAttempt, ExtractionResult, RetryConfig
from skybrief.llm.retry_prompt import PromptBuilder, create_retry_prompt_builder
from skybrief.llm.validation import Schema, validate

logger = logging.getLogger(__name__)

NULL_SENTINEL = "null"


class StructuredExtractor:
    """
    Bounded-retry JSON extraction over a chat completion client.

    Args:
        client: Object exposing ``async complete(prompt, temperature, ...)``
        retry_config: Attempt budget and backoff schedule
        sleep: Awaitable sleep used between attempts (injectable for tests)
    """

    def __init__(
        self,
        client,
        retry_config: Optional[RetryConfig] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.client = client
        self.retry_config = retry_config or RetryConfig()
        self.sleep = sleep

    async def run_with_trace(
        self,
        schema: Schema,
        prompt_builder: PromptBuilder,
        allow_null: bool = False,
    ) -> ExtractionResult:
        """
        Run the retry loop and return the value together with the attempt trace.

        Raises:
            ExtractionError: every attempt failed; carries the full trace
            ExternalServiceError: transport failure when transport retries are disabled
        """
        config = self.retry_config
        build_prompt = create_retry_prompt_builder(prompt_builder, allow_null)
        trace: List[ExtractionAttempt] = []
        last_error: Optional[str] = None

        for attempt in range(1, config.max_attempts + 1):
            prompt = build_prompt(attempt, last_error)

            try:
                content = await self.client.complete(prompt, temperature=LLM_SETTINGS.EXTRACTION_TEMPERATURE)
            except ExternalServiceError as e:
                if not config.retry_transport_errors:
                    raise
                last_error = str(e.original_error or e)
                trace.append(ExtractionAttempt(attempt, prompt, "", AttemptOutcome.TRANSPORT_FAILURE, last_error))
                logger.warning("Extraction attempt %d/%d transport failure: %s", attempt, config.max_attempts, last_error)
            else:
                raw = content or ""

                if allow_null and raw.strip() == NULL_SENTINEL:
                    trace.append(ExtractionAttempt(attempt, prompt, raw, AttemptOutcome.NULL))
                    return ExtractionResult(value=None, is_null=True, attempts=trace)

                try:
                    parsed = json.loads(raw)
                except json.JSONDecodeError as e:
                    last_error = f"Invalid JSON: {e}"
                    trace.append(ExtractionAttempt(attempt, prompt, raw, AttemptOutcome.PARSE_FAILURE, last_error))
                else:
                    outcome = validate(schema, parsed)
                    if outcome.success:
                        trace.append(ExtractionAttempt(attempt, prompt, raw, AttemptOutcome.SUCCESS))
                        return ExtractionResult(value=outcome.value, is_null=False, attempts=trace)
                    last_error = outcome.error
                    trace.append(ExtractionAttempt(attempt, prompt, raw, AttemptOutcome.SCHEMA_FAILURE, last_error))

                logger.warning(
                    "Extraction attempt %d/%d failed (%s): %s | raw=%r",
                    attempt, config.max_attempts, trace[-1].outcome.value, last_error, raw,
                )

            if attempt < config.max_attempts:
                await self.sleep(config.backoff(attempt))

        logger.error(
            f"Extraction exhausted after {len(trace)} attempts. Raw responses: {[a.raw_response for a in trace]}"
        )
        raise ExtractionError(len(trace), last_error, trace)

    async def run(self, schema: Schema, prompt_builder: PromptBuilder, allow_null: bool = False) -> Any:
        """Return the validated value, or None when the model answered with the null sentinel."""
        result = await self.run_with_trace(schema, prompt_builder, allow_null)
        return result.value

    async def run_or_throw(self, schema: Schema, prompt_builder: PromptBuilder) -> Any:
        """Extraction where null is not an acceptable answer."""
        return await self.run(schema, prompt_builder, allow_null=False)

    async def run_or_null(self, schema: Schema, prompt_builder: PromptBuilder) -> Any:
        """Extraction where a literal null means "nothing applies"."""
        return await self.run(schema, prompt_builder, allow_null=True)
