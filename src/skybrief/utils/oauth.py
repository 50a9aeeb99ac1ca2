"""
Google OAuth Code Exchange

Exchanges the authorization code Google redirects back with for calendar
tokens. The frontend owns the consent screen; the backend only completes the
exchange and keeps the tokens.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import pytz
from google_auth_oauthlib.flow import Flow

from skybrief.agents.calendaragent.constants import GOOGLE_CALENDAR_SETTINGS
from skybrief.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


@dataclass
class OAuthTokens:
    access_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None


class GoogleOAuthExchanger:
    """
    Args:
        client_id: OAuth client id
        client_secret: OAuth client secret
        redirect_uri: Redirect URI registered for this backend
    """

    def __init__(self, client_id: str, client_secret: str, redirect_uri: str):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri

    def _build_flow(self) -> Flow:
        client_config = {
            "web": {
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "auth_uri": GOOGLE_CALENDAR_SETTINGS.AUTH_URI,
                "token_uri": GOOGLE_CALENDAR_SETTINGS.TOKEN_URI,
                "redirect_uris": [self.redirect_uri],
            }
        }
        return Flow.from_client_config(
            client_config,
            scopes=GOOGLE_CALENDAR_SETTINGS.SCOPES,
            redirect_uri=self.redirect_uri,
            autogenerate_code_verifier=False,
        )

    def _exchange_sync(self, code: str) -> OAuthTokens:
        flow = self._build_flow()
        flow.fetch_token(code=code)
        creds = flow.credentials

        expires_in = None
        if creds.expiry is not None:
            expiry = pytz.UTC.localize(creds.expiry) if creds.expiry.tzinfo is None else creds.expiry
            expires_in = max(int((expiry - datetime.now(pytz.UTC)).total_seconds()), 0)

        return OAuthTokens(
            access_token=creds.token,
            refresh_token=creds.refresh_token,
            expires_in=expires_in,
        )

    async def exchange_code(self, code: str) -> OAuthTokens:
        """
        Raises:
            AuthenticationError: Google rejected the code or the request failed
        """
        try:
            return await asyncio.to_thread(self._exchange_sync, code)
        except Exception as e:
            logger.error(f"OAuth code exchange failed: {str(e)}")
            raise AuthenticationError("Failed to exchange code for tokens") from e
