"""
Twilio SMS Client

Sends notification messages through the Twilio REST API using a messaging
service SID as sender.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from skybrief.config import settings
from skybrief.exceptions import SMSDispatchError

logger = logging.getLogger(__name__)

TWILIO_API_BASE = "https://api.twilio.com/2010-04-01"


class TwilioSMSClient:
    """
    Args:
        account_sid: Twilio account SID
        auth_token: Twilio auth token
        messaging_service_sid: Messaging service used as the sender
        http_client: Optional shared httpx.AsyncClient
    """

    def __init__(
        self,
        account_sid: str = settings.TWILIO_ACCOUNT_SID,
        auth_token: str = settings.TWILIO_AUTH_TOKEN,
        messaging_service_sid: str = settings.TWILIO_MESSAGING_SERVICE_SID,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 15.0,
    ):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.messaging_service_sid = messaging_service_sid
        self.http_client = http_client
        self.timeout = timeout

    @property
    def messages_url(self) -> str:
        return f"{TWILIO_API_BASE}/Accounts/{self.account_sid}/Messages.json"

    async def _post(self, data: Dict[str, Any]) -> httpx.Response:
        auth = httpx.BasicAuth(self.account_sid, self.auth_token)
        if self.http_client is not None:
            return await self.http_client.post(self.messages_url, data=data, auth=auth)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(self.messages_url, data=data, auth=auth)

    async def send_message(self, to: str, body: str) -> Dict[str, Any]:
        """
        Send ``body`` to ``to`` (E.164).

        Returns:
            Twilio message resource (sid, status, ...)

        Raises:
            SMSDispatchError: missing credentials, transport failure or non-success status
        """
        if not self.account_sid or not self.auth_token:
            raise SMSDispatchError("Twilio credentials are not configured")

        data = {
            "To": to,
            "Body": body,
            "MessagingServiceSid": self.messaging_service_sid,
        }

        try:
            response = await self._post(data)
        except httpx.HTTPError as e:
            logger.error(f"Twilio request failed: {str(e)}")
            raise SMSDispatchError("Failed to send SMS", original_error=e) from e

        if response.status_code not in (200, 201, 204):
            try:
                error_data = response.json() if response.text else {}
            except ValueError:
                error_data = {}
            message = error_data.get("message", "Unknown Twilio error")
            logger.error("Twilio returned %s: %s", response.status_code, message)
            raise SMSDispatchError(f"Failed to send SMS: http_{response.status_code} {message}")

        try:
            result = response.json()
        except ValueError:
            result = {"status": "ok"}
        logger.info(f"SMS sent to {to} (sid={result.get('sid')})")
        return result
