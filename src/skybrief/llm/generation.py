"""
Free-text Generation

Shared primitive for conversational completions (weather answers,
notification summaries, SMS bodies). Output is not schema-validated; failures
are mapped onto three distinguishable kinds: timeout, empty response and a
generic generation error.
"""

import logging
from typing import Optional

from skybrief.exceptions import (
    AppError,
    EmptyResponseError,
    GenerationError,
    OperationTimeoutError,
)

logger = logging.getLogger(__name__)


async def generate_text(
    client,
    prompt: str,
    temperature: float,
    timeout: Optional[float] = None,
    max_tokens: Optional[int] = None,
    purpose: str = "response",
) -> str:
    """
    Generate free text for ``purpose`` (used in error messages).

    Raises:
        OperationTimeoutError: "<Purpose> generation timed out"
        EmptyResponseError: the model returned no content
        GenerationError: "Failed to generate <purpose>" for anything else
    """
    try:
        content = await client.complete(
            prompt,
            temperature=temperature,
            timeout=timeout,
            max_tokens=max_tokens,
        )
    except OperationTimeoutError as e:
        raise OperationTimeoutError(f"{purpose[:1].upper()}{purpose[1:]} generation timed out") from e
    except AppError as e:
        logger.error(f"{purpose} generation failed: {e.message}")
        raise GenerationError(f"Failed to generate {purpose}") from e
    except Exception as e:
        logger.exception(f"{purpose} generation failed unexpectedly")
        raise GenerationError(f"Failed to generate {purpose}") from e

    if not content or not content.strip():
        raise EmptyResponseError(f"Model returned empty response for {purpose}")

    return content.strip()
