"""
ngrok tunnel collaborator.

Exposes the local webhook port under a public URL so Twilio can reach it.
"""

import asyncio
from typing import List, Optional

import ngrok
import structlog

logger = structlog.get_logger(__name__)


class NgrokTunnel:
    def __init__(self, authtoken: Optional[str] = None):
        self._authtoken = authtoken
        self._urls: List[str] = []

    async def forward(self, port: int) -> str:
        """
        Open an HTTP tunnel to ``port`` and return its public URL.

        May return an empty string if ngrok gives no URL; callers treat that
        as a provisioning failure.
        """
        if self._authtoken:
            options = {"authtoken": self._authtoken}
        else:
            options = {"authtoken_from_env": True}

        def _forward_sync():
            return ngrok.forward(port, **options)

        loop = asyncio.get_running_loop()
        listener = await loop.run_in_executor(None, _forward_sync)
        url = listener.url() or ""
        if url:
            self._urls.append(url)
            logger.info("ngrok tunnel established", port=port, url=url)
        return url

    async def close(self) -> None:
        """Disconnect every tunnel opened by this instance."""
        loop = asyncio.get_running_loop()
        while self._urls:
            url = self._urls.pop()
            try:
                await loop.run_in_executor(None, ngrok.disconnect, url)
                logger.info("ngrok tunnel closed", url=url)
            except Exception as e:
                logger.warning("Failed to close ngrok tunnel", url=url, error=str(e))
