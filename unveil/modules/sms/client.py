"""
Twilio REST client

Messages are created with a form-encoded POST to
/Accounts/{sid}/Messages.json using basic auth. A Messaging Service SID
takes precedence over a From number when both are configured.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from unveil.config import settings
from unveil.core.validators import mask_phone

logger = logging.getLogger(__name__)


class TwilioError(Exception):
    """Twilio rejected the request or could not be reached"""

    def __init__(self, message: str, code: Optional[int] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.code = code
        self.status_code = status_code


class TwilioClient:
    def __init__(
        self,
        account_sid: Optional[str],
        auth_token: Optional[str],
        phone_number: Optional[str] = None,
        messaging_service_sid: Optional[str] = None,
        base_url: str = "https://api.twilio.com/2010-04-01",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.phone_number = phone_number
        self.messaging_service_sid = messaging_service_sid
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, transport: Optional[httpx.AsyncBaseTransport] = None) -> "TwilioClient":
        return cls(
            account_sid=settings.twilio_account_sid,
            auth_token=settings.twilio_auth_token,
            phone_number=settings.twilio_phone_number,
            messaging_service_sid=settings.twilio_messaging_service_sid,
            base_url=settings.twilio_api_base_url,
            timeout=settings.twilio_timeout_sec,
            transport=transport,
        )

    @property
    def configured(self) -> bool:
        has_sender = bool(self.phone_number or self.messaging_service_sid)
        return bool(self.account_sid and self.auth_token and has_sender)

    async def send_message(self, to: str, body: str) -> Dict[str, Any]:
        """
        Create an outbound message.

        Args:
            to: Recipient in E.164 format
            body: Message text

        Returns:
            Twilio message resource (sid, status, ...)

        Raises:
            TwilioError: not configured, transport failure or non-2xx response
        """
        if not self.configured:
            raise TwilioError("Twilio not configured. Please check your environment variables.")

        data = {"To": to, "Body": body}
        if self.messaging_service_sid:
            data["MessagingServiceSid"] = self.messaging_service_sid
        else:
            data["From"] = self.phone_number

        url = f"{self.base_url}/Accounts/{self.account_sid}/Messages.json"
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                response = await client.post(url, auth=(self.account_sid, self.auth_token), data=data)
        except httpx.HTTPError as e:
            logger.error(f"Twilio API unreachable: {e}")
            raise TwilioError(str(e))

        if response.status_code in (200, 201):
            return response.json()

        try:
            error_data = response.json()
        except ValueError:
            error_data = {}
        message = error_data.get("message") or f"Twilio API error (HTTP {response.status_code})"
        code = error_data.get("code")
        logger.error(f"Twilio API error [{code}] sending to {mask_phone(to)}: {message}")
        raise TwilioError(message, code=code, status_code=response.status_code)


def get_twilio_client() -> TwilioClient:
    return TwilioClient.from_settings()
