"""
Service Wiring

Builds every collaborator the routes and the notification scheduler need and
keeps them in one container stored on ``app.state.services``. Tests build
their own container with fakes and pass it to create_app.
"""

from dataclasses import dataclass
from typing import Any, Optional

from fastapi import Request

from skybrief.agents.calendaragent.calendar_client import CalendarClientFactory
from skybrief.agents.calendaragent.services.action_synthesizer import CalendarActionSynthesizer
from skybrief.agents.weatheragent.services.humanize import WeatherResponseHumanizer
from skybrief.agents.weatheragent.services.query_synthesizer import WeatherQuerySynthesizer
from skybrief.agents.weatheragent.services.weather_client import WeatherAPIClient
from skybrief.config import Settings
from skybrief.db.persistence import TokenStore, UserStore
from skybrief.llm.client import ChatCompletionClient
from skybrief.llm.extraction import StructuredExtractor
from skybrief.notifications.scheduler import NotificationScheduler
from skybrief.notifications.service import NotificationService
from skybrief.notifications.sms_client import TwilioSMSClient
from skybrief.notifications.store import NotificationStore
from skybrief.notifications.weather import NotificationWeatherService
from skybrief.supervisor.workflow import WeatherSupervisor
from skybrief.utils.location import IPGeolocationClient
from skybrief.utils.oauth import GoogleOAuthExchanger


@dataclass
class ServiceContainer:
    """Application-scoped collaborators."""
    settings: Settings
    supervisor: WeatherSupervisor
    geolocation_client: Any
    token_store: TokenStore
    user_store: UserStore
    notification_store: NotificationStore
    oauth_exchanger: Optional[GoogleOAuthExchanger] = None
    notification_service: Optional[NotificationService] = None
    scheduler: Optional[NotificationScheduler] = None


def build_services(settings: Settings) -> ServiceContainer:
    """Wire production collaborators from ``settings``."""
    completion_client = ChatCompletionClient(
        model=settings.LLM_MODEL,
        provider=settings.LLM_PROVIDER,
        api_key=settings.OPENAI_API_KEY,
    )
    extractor = StructuredExtractor(completion_client)

    weather_client = WeatherAPIClient(api_key=settings.WEATHER_API_KEY, api_url=settings.WEATHER_API_URL)
    geolocation_client = IPGeolocationClient(api_key=settings.IPAPI_API_KEY)
    query_synthesizer = WeatherQuerySynthesizer(extractor)
    calendar_factory = CalendarClientFactory()

    token_store = TokenStore(encryption_key=settings.ENCRYPTION_KEY)
    user_store = UserStore()
    notification_store = NotificationStore()

    supervisor = WeatherSupervisor(
        geolocation_client=geolocation_client,
        query_synthesizer=query_synthesizer,
        weather_client=weather_client,
        action_synthesizer=CalendarActionSynthesizer(extractor),
        token_store=token_store,
        calendar_factory=calendar_factory,
        humanizer=WeatherResponseHumanizer(completion_client),
        default_location=settings.DEFAULT_LOCATION,
        default_timezone=settings.DEFAULT_TIMEZONE,
    )

    notification_service = NotificationService(
        user_store=user_store,
        token_store=token_store,
        notification_store=notification_store,
        calendar_factory=calendar_factory,
        weather_service=NotificationWeatherService(query_synthesizer, weather_client, completion_client),
        sms_client=TwilioSMSClient(
            account_sid=settings.TWILIO_ACCOUNT_SID,
            auth_token=settings.TWILIO_AUTH_TOKEN,
            messaging_service_sid=settings.TWILIO_MESSAGING_SERVICE_SID,
        ),
        client=completion_client,
    )

    return ServiceContainer(
        settings=settings,
        supervisor=supervisor,
        geolocation_client=geolocation_client,
        token_store=token_store,
        user_store=user_store,
        notification_store=notification_store,
        oauth_exchanger=GoogleOAuthExchanger(
            settings.GOOGLE_CLIENT_ID,
            settings.GOOGLE_CLIENT_SECRET,
            settings.GOOGLE_REDIRECT_URI,
        ),
        notification_service=notification_service,
        scheduler=NotificationScheduler(notification_service, settings.NOTIFICATION_INTERVAL_SECONDS),
    )


def get_services(request: Request) -> ServiceContainer:
    """FastAPI dependency returning the application's ServiceContainer."""
    return request.app.state.services
