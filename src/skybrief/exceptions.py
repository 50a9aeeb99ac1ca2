"""
Application Exceptions

Every error raised by skybrief derives from AppError, which carries the HTTP
status the FastAPI exception handler answers with.

Failure taxonomy:
- OperationTimeoutError: a bounded operation exceeded its deadline
- ExternalServiceError and subclasses: a provider call errored or returned non-success
- ExtractionError: the structured extraction retry budget was spent
- EmptyResponseError / GenerationError: free-text generation failures

Parse, schema and null outcomes of a single extraction attempt are not
exceptions; see skybrief.llm.extraction.AttemptOutcome.
"""

from typing import Any, List, Optional


class AppError(Exception):
    """Base exception for all skybrief errors."""

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None, is_operational: bool = True):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.is_operational = is_operational


class InvalidRequestError(AppError):
    """Client supplied invalid input."""

    status_code = 400

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.details = details


class PhoneNumberError(InvalidRequestError):
    """Phone number could not be parsed or formatted."""


class AuthenticationError(AppError):
    """Missing or unknown session."""

    status_code = 401

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message)


class NotFoundError(AppError):
    """Requested resource does not exist."""

    status_code = 404

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message)


class OperationTimeoutError(AppError):
    """A time-bounded operation did not finish in time."""

    status_code = 504

    def __init__(self, message: str = "Operation timed out"):
        super().__init__(message)


class ExternalServiceError(AppError):
    """An upstream provider failed or answered with a non-success status."""

    status_code = 502
    service: str = "external"

    def __init__(self, message: str, service: Optional[str] = None, original_error: Optional[BaseException] = None):
        super().__init__(message)
        if service is not None:
            self.service = service
        self.original_error = original_error


class LLMTransportError(ExternalServiceError):
    service = "llm"


class WeatherFetchError(ExternalServiceError):
    service = "weatherapi"


class CalendarError(ExternalServiceError):
    service = "google-calendar"


class SMSDispatchError(ExternalServiceError):
    service = "twilio"


class LocationResolutionError(ExternalServiceError):
    service = "ipapi"


class EmptyResponseError(ExternalServiceError):
    """The completion endpoint answered without any content."""

    service = "llm"


class GenerationError(AppError):
    """Free-text generation failed for a reason other than timeout or empty content."""


class ExtractionError(AppError):
    """
    Structured extraction exhausted its attempt budget.

    Attributes:
        attempts: Number of completion calls made
        last_error: Failure reason recorded for the final attempt
        trace: Per-attempt records (prompt, raw response, outcome)
    """

    def __init__(self, attempts: int, last_error: Optional[str], trace: Optional[List[Any]] = None):
        super().__init__(
            f"Extraction failed after {attempts} attempts. Last error: {last_error or 'unknown'}"
        )
        self.attempts = attempts
        self.last_error = last_error
        self.trace = trace or []

    @property
    def raw_responses(self) -> List[str]:
        return [attempt.raw_response for attempt in self.trace]
