"""
Twilio telephony collaborator.

Places outbound calls whose voice webhook points at the public callback URL;
the call bridge behind that URL streams audio to the speech model.
"""

import asyncio
from typing import Optional
from urllib.parse import urlencode

import structlog
from twilio.base.exceptions import TwilioRestException
from twilio.rest import Client

from voice_call_mcp.config import TwilioConfig
from voice_call_mcp.errors import CollaboratorCallError, TelephonyInitializationError

logger = structlog.get_logger(__name__)


class TwilioCallService:
    """Thin async wrapper around the blocking Twilio REST client."""

    def __init__(self, client: Client, from_number: Optional[str], record_calls: bool = False,
                 webhook_path: str = "/call/outgoing"):
        self._client = client
        self._from_number = from_number
        self._record_calls = record_calls
        self._webhook_path = webhook_path

    @classmethod
    def from_config(cls, config: TwilioConfig, webhook_path: str = "/call/outgoing") -> "TwilioCallService":
        if not config.account_sid or not config.auth_token:
            raise TelephonyInitializationError(
                "Twilio credentials are not configured (TWILIO_ACCOUNT_SID / TWILIO_AUTH_TOKEN)"
            )
        try:
            client = Client(config.account_sid, config.auth_token)
        except Exception as e:
            raise TelephonyInitializationError(f"Could not create Twilio client: {e}") from e
        logger.info("Twilio client created", account_sid=config.account_sid, record_calls=config.record_calls)
        return cls(client, config.from_number, record_calls=config.record_calls, webhook_path=webhook_path)

    def build_webhook_url(self, callback_url: str, call_context: str) -> str:
        query = urlencode({"callType": "outgoing", "callContext": call_context})
        return f"{callback_url.rstrip('/')}{self._webhook_path}?{query}"

    async def make_call(self, callback_url: str, to_number: str, call_context: str = "") -> str:
        """
        Place an outbound call.

        Returns:
            The provider's call SID

        Raises:
            CollaboratorCallError: If Twilio rejects or fails the request
        """
        if not self._from_number:
            raise CollaboratorCallError("Originating number is not configured (TWILIO_NUMBER)")

        create_kwargs = {
            "to": to_number,
            "from_": self._from_number,
            "url": self.build_webhook_url(callback_url, call_context),
        }
        if self._record_calls:
            create_kwargs["record"] = True

        def _create_sync():
            return self._client.calls.create(**create_kwargs)

        loop = asyncio.get_running_loop()
        try:
            call = await loop.run_in_executor(None, _create_sync)
        except TwilioRestException as e:
            logger.error("Twilio rejected call", to_number=to_number, status=e.status, code=e.code, error=e.msg)
            raise CollaboratorCallError(e.msg or str(e)) from e
        except Exception as e:
            logger.error("Twilio call placement failed", to_number=to_number, error=str(e))
            raise CollaboratorCallError(str(e)) from e

        logger.info("Call initiated", call_sid=call.sid, to_number=to_number, record=self._record_calls)
        return call.sid
