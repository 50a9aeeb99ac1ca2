"""
Weather Agent Data Transfer Objects (DTOs)

This module contains the data models used by the weather agent:
- WeatherAPIQuery: validated forecast.json parameters produced by extraction
- WeatherAPIResponse and its parts: the forecast.json payload

Response models keep unknown fields (extra="allow") so the full provider
payload reaches the humanizer, while the fields the code relies on are typed.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

YesNo = Literal["yes", "no"]


class WeatherAPIQuery(BaseModel):
    """Parameters for the WeatherAPI forecast.json endpoint."""
    model_config = ConfigDict(strict=True, extra="ignore")

    q: str = Field(min_length=1, description="Location: city name, lat,lon or postcode")
    days: int = Field(ge=1, le=14)
    dt: Optional[str] = Field(default=None, pattern=r"^\d{4}-\d{2}-\d{2}$")
    hour: Optional[int] = Field(default=None, ge=0, le=23)
    alerts: YesNo = "yes"
    aqi: YesNo = "yes"
    lang: str = Field(default="en", pattern=r"^[a-z]{2}$")


class _ProviderModel(BaseModel):
    model_config = ConfigDict(extra="allow")


class WeatherCondition(_ProviderModel):
    text: str
    icon: Optional[str] = None
    code: Optional[int] = None


class WeatherLocation(_ProviderModel):
    name: str
    region: str = ""
    country: str = ""
    lat: float
    lon: float
    tz_id: str
    localtime_epoch: Optional[int] = None
    localtime: str


class AirQuality(_ProviderModel):
    co: Optional[float] = None
    no2: Optional[float] = None
    o3: Optional[float] = None
    so2: Optional[float] = None
    pm2_5: Optional[float] = None
    pm10: Optional[float] = None
    us_epa_index: Optional[int] = Field(default=None, alias="us-epa-index")


class CurrentWeather(_ProviderModel):
    last_updated: str
    temp_c: float
    temp_f: float
    is_day: int
    condition: WeatherCondition
    wind_kph: float
    wind_mph: float
    humidity: float
    feelslike_c: Optional[float] = None
    feelslike_f: Optional[float] = None
    precip_mm: Optional[float] = None
    uv: Optional[float] = None
    air_quality: Optional[AirQuality] = None


class DaySummary(_ProviderModel):
    maxtemp_c: float
    maxtemp_f: float
    mintemp_c: float
    mintemp_f: float
    condition: WeatherCondition
    daily_chance_of_rain: Optional[int] = None
    daily_chance_of_snow: Optional[int] = None
    totalprecip_mm: Optional[float] = None


class HourForecast(_ProviderModel):
    time: str
    temp_c: float
    temp_f: float
    condition: WeatherCondition
    chance_of_rain: Optional[int] = None
    wind_kph: Optional[float] = None


class ForecastDay(_ProviderModel):
    date: str
    day: DaySummary
    hour: Optional[List[HourForecast]] = None


class Forecast(_ProviderModel):
    forecastday: List[ForecastDay]


class WeatherAlert(_ProviderModel):
    headline: str = ""
    severity: str = ""
    event: str = ""
    desc: str = ""
    instruction: str = ""


class WeatherAlerts(_ProviderModel):
    alert: List[WeatherAlert] = []


class WeatherAPIErrorBody(BaseModel):
    code: int
    message: str


class WeatherAPIResponse(_ProviderModel):
    """forecast.json payload."""
    location: WeatherLocation
    current: CurrentWeather
    forecast: Optional[Forecast] = None
    alerts: Optional[WeatherAlerts] = None
    error: Optional[WeatherAPIErrorBody] = None

    def to_prompt_payload(self) -> dict:
        """Provider-shaped dict (original key names) for embedding in prompts."""
        return self.model_dump(by_alias=True, exclude_none=True)
