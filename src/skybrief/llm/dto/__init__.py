"""
Structured Extraction Data Transfer Objects (DTOs)

This module contains the data models used by the extraction engine:
- Retry configuration and backoff schedule
- Per-attempt outcome records (the extraction trace)
- Final extraction result
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional

from skybrief.constants import RETRY_SETTINGS


class AttemptOutcome(str, Enum):
    """What a single completion attempt produced."""
    SUCCESS = "success"
    NULL = "null"
    PARSE_FAILURE = "parse_failure"
    SCHEMA_FAILURE = "schema_failure"
    TRANSPORT_FAILURE = "transport_failure"


@dataclass(frozen=True)
class RetryConfig:
    """Attempt budget and exponential backoff (seconds) for extraction."""
    max_attempts: int = RETRY_SETTINGS.MAX_ATTEMPTS
    base_delay: float = RETRY_SETTINGS.BASE_DELAY
    max_delay: float = RETRY_SETTINGS.MAX_DELAY
    retry_transport_errors: bool = True

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    def backoff(self, attempt: int) -> float:
        """Delay to wait after ``attempt`` failed: min(base * 2^(attempt-1), max)."""
        return min(self.base_delay * (2 ** (attempt - 1)), self.max_delay)


@dataclass
class ExtractionAttempt:
    """One completion call and how its output was judged."""
    attempt: int
    prompt: str
    raw_response: str
    outcome: AttemptOutcome
    error: Optional[str] = None


@dataclass
class ExtractionResult:
    """Successful (or explicitly null) extraction with its trace."""
    value: Any
    is_null: bool
    attempts: List[ExtractionAttempt] = field(default_factory=list)

    @property
    def attempt_count(self) -> int:
        return len(self.attempts)

    @property
    def raw_responses(self) -> List[str]:
        return [attempt.raw_response for attempt in self.attempts]
