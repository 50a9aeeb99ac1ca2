from typing import Optional
import logging

from fastapi import APIRouter, Depends, Header

from skybrief.dependencies import ServiceContainer, get_services
from skybrief.exceptions import AppError, AuthenticationError, NotFoundError
from skybrief.routes.dto import SMSRegistrationRequest, SMSRegistrationResponse, SMSStatusResponse
from skybrief.utils.phone import validate_and_format_phone_number

logger = logging.getLogger(__name__)

router = APIRouter()


def require_session(x_session_id: Optional[str] = Header(None, alias="x-session-id")) -> str:
    """Session id from the x-session-id header; 401 when missing."""
    if not x_session_id:
        raise AuthenticationError("Session ID required")
    return x_session_id


@router.post("/register", response_model=SMSRegistrationResponse)
async def register(
    body: SMSRegistrationRequest,
    session_id: str = Depends(require_session),
    services: ServiceContainer = Depends(get_services),
):
    """
    Register a phone number for pre-meeting weather SMS.

    Location and timezone are resolved from the client IP when possible;
    registration still succeeds without them.
    """
    phone_number = validate_and_format_phone_number(body.phone_number)

    user_store = services.user_store
    if not user_store.has_user(session_id):
        user_store.create_user(session_id)

    updates = {"sms_phone_number": phone_number}
    try:
        location = await services.geolocation_client.resolve(body.client_ip)
        updates["resolved_location"] = location.display_name
        updates["timezone"] = location.timezone
        logger.info(f"Resolved location for session {session_id}: {location.display_name} ({location.timezone})")
    except AppError as e:
        logger.warning(f"Failed to resolve user location, registering without it: {e.message}")

    user_store.update_user(session_id, **updates)
    return SMSRegistrationResponse(success=True, message="SMS phone number registered successfully")


@router.delete("/unregister", response_model=SMSRegistrationResponse)
async def unregister(
    session_id: str = Depends(require_session),
    services: ServiceContainer = Depends(get_services),
):
    if not services.user_store.has_user(session_id):
        raise NotFoundError("User not found")

    services.user_store.update_user(session_id, sms_phone_number=None)
    return SMSRegistrationResponse(success=True, message="SMS phone number unregistered successfully")


@router.get("/status", response_model=SMSStatusResponse)
async def status(
    session_id: str = Depends(require_session),
    services: ServiceContainer = Depends(get_services),
):
    user = services.user_store.get_user(session_id)
    if user is None:
        raise NotFoundError("User not found")

    return SMSStatusResponse(
        notifications_enabled=bool(user.sms_phone_number),
        phone_number=user.sms_phone_number,
    )
