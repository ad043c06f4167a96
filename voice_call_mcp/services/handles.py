"""
Service handle cache.

Owns the lazily created Twilio call service and the public callback URL.
Each handle is built at most once per process: concurrent callers that
arrive while a construction is in flight wait on the same per-handle lock
and then read the stored value. A failed construction leaves the handle
absent so a later request can retry.
"""

import asyncio
from typing import Any, Callable, Optional

import structlog

from voice_call_mcp.config import AppConfig
from voice_call_mcp.errors import (
    ServiceInitializationError,
    TelephonyInitializationError,
    TunnelProvisioningError,
)
from voice_call_mcp.services.tunnel import NgrokTunnel
from voice_call_mcp.services.twilio_calls import TwilioCallService

logger = structlog.get_logger(__name__)


class ServiceHandles:
    def __init__(
        self,
        config: AppConfig,
        client_factory: Optional[Callable[[AppConfig], Any]] = None,
        tunnel: Optional[Any] = None,
    ):
        self._config = config
        self._client_factory = client_factory or _default_client_factory
        self._tunnel = tunnel if tunnel is not None else NgrokTunnel(config.ngrok.authtoken)

        self._telephony_client = None
        self._callback_url: Optional[str] = None

        # One guard per handle; never shared between handles
        self._telephony_lock = asyncio.Lock()
        self._tunnel_lock = asyncio.Lock()

    @property
    def telephony_client(self):
        return self._telephony_client

    @property
    def callback_url(self) -> Optional[str]:
        return self._callback_url

    async def ensure_telephony_client(self):
        """Return the telephony client, creating it on first use."""
        if self._telephony_client is not None:
            return self._telephony_client

        async with self._telephony_lock:
            if self._telephony_client is None:
                logger.info("Initializing telephony client")
                try:
                    client = self._client_factory(self._config)
                    if asyncio.iscoroutine(client):
                        client = await client
                except ServiceInitializationError:
                    raise
                except Exception as e:
                    raise TelephonyInitializationError(str(e)) from e
                self._telephony_client = client
        return self._telephony_client

    async def ensure_public_callback_url(self, port: int) -> str:
        """Return the public callback URL, provisioning a tunnel to ``port`` on first use."""
        if self._callback_url:
            return self._callback_url

        async with self._tunnel_lock:
            if not self._callback_url:
                logger.info("Provisioning public callback tunnel", port=port)
                try:
                    url = await self._tunnel.forward(port)
                except Exception as e:
                    logger.error("Failed to setup ngrok tunnel", port=port, error=str(e))
                    raise TunnelProvisioningError(str(e)) from e
                if not url:
                    raise TunnelProvisioningError("Failed to obtain ngrok URL")
                self._callback_url = url
        return self._callback_url

    async def close(self) -> None:
        close = getattr(self._tunnel, "close", None)
        if close is not None:
            await close()


def _default_client_factory(config: AppConfig) -> TwilioCallService:
    return TwilioCallService.from_config(config.twilio, webhook_path=config.callback.path)
