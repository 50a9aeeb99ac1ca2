from fastapi import APIRouter, Depends

from skybrief.dependencies import ServiceContainer, get_services
from skybrief.routes.dto import HealthResponse

router = APIRouter()


@router.get("/")
def health_check():
    return {"status": "ok"}


@router.get("/components", response_model=HealthResponse)
def components_health_check(services: ServiceContainer = Depends(get_services)):
    """Report which providers are configured (never their values) and scheduler state."""
    settings = services.settings
    components = {
        "openai": "configured" if settings.OPENAI_API_KEY else "missing",
        "weatherapi": "configured" if settings.WEATHER_API_KEY else "missing",
        "twilio": "configured" if settings.TWILIO_ACCOUNT_SID and settings.TWILIO_AUTH_TOKEN else "missing",
        "google_oauth": "configured" if settings.GOOGLE_CLIENT_ID else "missing",
        "scheduler": "running" if services.scheduler and services.scheduler.is_running else "stopped",
    }
    status = "ok" if components["openai"] == components["weatherapi"] == "configured" else "degraded"
    return HealthResponse(status=status, service="skybrief", components=components)
