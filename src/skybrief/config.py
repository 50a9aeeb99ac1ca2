from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    APP_ENV: str = "development"
    APP_PORT: int = 3000
    LOG_LEVEL: str = "INFO"

    # LLM Configuration
    OPENAI_API_KEY: str = ""
    LLM_PROVIDER: str = "openai"
    LLM_MODEL: str = "gpt-3.5-turbo-0125"

    # Weather / geolocation providers
    WEATHER_API_URL: str = "https://api.weatherapi.com/v1/forecast.json"
    WEATHER_API_KEY: str = ""
    IPAPI_API_KEY: str = ""
    DEFAULT_LOCATION: str = "London, United Kingdom"
    DEFAULT_TIMEZONE: str = "UTC"

    # Google OAuth (calendar access)
    GOOGLE_CLIENT_ID: str = ""
    GOOGLE_CLIENT_SECRET: str = ""
    GOOGLE_REDIRECT_URI: str = "http://localhost:3000/auth/callback"
    FRONTEND_URL: str = "http://localhost:5173"

    # Passphrase for encrypting stored OAuth tokens
    ENCRYPTION_KEY: str = "your-secret-key-32-chars-long"

    # Twilio SMS
    TWILIO_ACCOUNT_SID: str = ""
    TWILIO_AUTH_TOKEN: str = ""
    TWILIO_MESSAGING_SERVICE_SID: str = ""

    # Meeting notifications
    NOTIFICATIONS_ENABLED: bool = True
    NOTIFICATION_INTERVAL_SECONDS: int = 300

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


settings = Settings()


def validate_required_keys(current: Settings = None):
    """Validate that all required API keys are present"""
    current = current or settings
    required_keys = [
        ("OPENAI_API_KEY", current.OPENAI_API_KEY),
        ("WEATHER_API_KEY", current.WEATHER_API_KEY),
    ]

    missing_keys = []
    for key_name, key_value in required_keys:
        if not key_value or key_value.strip() == "":
            missing_keys.append(key_name)

    if missing_keys:
        raise ValueError(
            f"Missing required environment variables: {', '.join(missing_keys)}. "
            f"Please check your .env file."
        )
