"""Webhook HTTP server: aiohttp listener lifecycle around a `Webhook`."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from aiohttp import web

if TYPE_CHECKING:
    from ghwebhook.webhook.receiver import Webhook

logger = logging.getLogger(__name__)


class WebhookServer:
    """Binds a `Webhook` to the configured host and port."""

    def __init__(self, webhook: Webhook) -> None:
        self._webhook = webhook
        self._runner: web.AppRunner | None = None

    @property
    def running(self) -> bool:
        return self._runner is not None

    async def start(self) -> None:
        """Create the aiohttp app and start listening."""
        config = self._webhook.config
        self._runner = web.AppRunner(self._webhook.make_app(), access_log=None)
        await self._runner.setup()
        site = web.TCPSite(self._runner, config.host, config.port)
        await site.start()
        logger.info("Webhook server listening on %s:%d", config.host, config.port)

    async def stop(self) -> None:
        """Stop accepting requests, then let running handlers finish."""
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
        await self._webhook.close()
        logger.info("Webhook server stopped")
