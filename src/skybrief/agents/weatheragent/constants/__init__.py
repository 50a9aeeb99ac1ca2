"""
Weather Agent Constants
"""
from skybrief.config import settings


class WEATHER_API_SETTINGS:
    """WeatherAPI forecast.json client settings"""
    API_URL: str = settings.WEATHER_API_URL
    API_KEY: str = settings.WEATHER_API_KEY
    TIMEOUT_SECONDS: float = 10.0
