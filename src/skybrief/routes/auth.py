from typing import Optional
from urllib.parse import urlencode
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse

from skybrief.db.persistence import TokenStore
from skybrief.dependencies import ServiceContainer, get_services
from skybrief.exceptions import InvalidRequestError, NotFoundError
from skybrief.routes.dto import SessionStatusResponse, SuccessResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/callback")
async def oauth_callback(
    code: Optional[str] = None,
    services: ServiceContainer = Depends(get_services),
):
    """
    Complete Google's OAuth redirect: exchange the code, keep the tokens
    under a new session id and send the browser back to the frontend.
    """
    if not code:
        raise InvalidRequestError("Authorization code is required")

    tokens = await services.oauth_exchanger.exchange_code(code)

    session_id = TokenStore.generate_session_id()
    services.token_store.store_tokens(
        session_id,
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        expires_in=tokens.expires_in,
    )
    logger.info("OAuth exchange succeeded, new session created")

    redirect_url = f"{services.settings.FRONTEND_URL}?{urlencode({'session_id': session_id})}"
    return RedirectResponse(redirect_url, status_code=302)


@router.get("/session/{session_id}", response_model=SessionStatusResponse)
async def get_session(session_id: str, services: ServiceContainer = Depends(get_services)):
    if not services.token_store.has_tokens(session_id):
        raise NotFoundError("Session not found")
    return SessionStatusResponse(success=True, has_tokens=True)


@router.delete("/session/{session_id}", response_model=SuccessResponse)
async def delete_session(session_id: str, services: ServiceContainer = Depends(get_services)):
    services.token_store.remove_tokens(session_id)
    return SuccessResponse(success=True)
