"""
Application-wide Constants

Static tunables shared across the weather, calendar and notification flows.
Environment-driven values live in skybrief.config.
"""
from skybrief.config import settings


class APP_SETTINGS:
    """FastAPI application metadata"""
    APP_NAME = "Skybrief"
    VERSION = "0.1.0"
    DESCRIPTION = "Weather assistant with calendar context and pre-meeting SMS briefings"


class LLM_SETTINGS:
    """Completion model configuration"""
    API_KEY: str = settings.OPENAI_API_KEY
    PROVIDER: str = settings.LLM_PROVIDER or "openai"
    MODEL: str = settings.LLM_MODEL

    # Extraction must be deterministic, prose may be creative
    EXTRACTION_TEMPERATURE: float = 0.0
    CONVERSATIONAL_TEMPERATURE: float = 0.7

    # Seconds
    WEATHER_RESPONSE_TIMEOUT: float = 30.0
    NOTIFICATION_SUMMARY_TIMEOUT: float = 30.0
    SMS_MESSAGE_TIMEOUT: float = 15.0

    SMS_MAX_TOKENS: int = 100


class RETRY_SETTINGS:
    """Structured extraction retry budget"""
    MAX_ATTEMPTS: int = 3
    BASE_DELAY: float = 1.0
    MAX_DELAY: float = 5.0


class NOTIFICATION_SETTINGS:
    """Pre-meeting notification windows (minutes unless noted)"""
    SEND_WINDOW_MINUTES: int = 60
    SEARCH_WINDOW_START_MINUTES: int = 60
    SEARCH_WINDOW_END_MINUTES: int = 120
    MAX_MEETINGS_PER_SCAN: int = 10
    DEFAULT_MEETING_DURATION_MINUTES: int = 60
    SENT_RECORD_RETENTION_HOURS: int = 24
    DEFAULT_TIMEZONE: str = "UTC"
