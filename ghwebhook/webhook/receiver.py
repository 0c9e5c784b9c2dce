"""Webhook receiver: the aiohttp request handler tying all checks together.

Per request: address check (when enabled) -> method check -> payload
extraction and signature verification -> event decoding -> background
dispatch -> 200. The response never waits for the event handler.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from http import HTTPStatus

from aiohttp import web

from ghwebhook.config import WebhookConfig
from ghwebhook.errors import ConfigurationError, RequestError, UpstreamError
from ghwebhook.infra.meta import MetaClient
from ghwebhook.log_context import set_log_context
from ghwebhook.security.address import AddressValidator
from ghwebhook.security.trust import HookRangeFetcher, TrustStore
from ghwebhook.webhook.dispatcher import EventDispatcher, EventHandler, HandlerKey, HandlerTable
from ghwebhook.webhook.payload import PayloadExtractor

logger = logging.getLogger(__name__)

DELIVERY_HEADER = "X-GitHub-Delivery"
FORWARDED_FOR_HEADER = "X-Forwarded-For"


def _error(status: int, **headers: str) -> web.Response:
    """Status-only error body; internal details stay in the log."""
    keyword = HTTPStatus(status).phrase.lower().replace(" ", "_")
    return web.json_response({"error": keyword}, status=status, headers=headers or None)


class Webhook:
    """Receiver for GitHub webhooks.

    Example::

        hook = Webhook(
            WebhookConfig(secret="very-secret-string", restrict_addr=True,
                          trust_addrs=["::1/128", "127.0.0.0/8"]),
            {"ping": lambda e: print(e.zen)},
        )
        web.run_app(hook.make_app())
    """

    def __init__(
        self,
        config: WebhookConfig | None = None,
        handlers: HandlerTable | Mapping[HandlerKey, EventHandler] | None = None,
        *,
        meta: HookRangeFetcher | None = None,
    ) -> None:
        self._config = config or WebhookConfig()
        self._owned_meta: MetaClient | None = None
        if meta is None:
            self._owned_meta = MetaClient(
                self._config.meta_url, timeout=self._config.meta_timeout_seconds
            )
            meta = self._owned_meta
        self._trust = TrustStore(self._config.trust_addrs, meta)
        self._validator = AddressValidator(self._trust)
        self._extractor = PayloadExtractor(self._config.secret)
        if not isinstance(handlers, HandlerTable):
            handlers = HandlerTable(handlers)
        self._dispatcher = EventDispatcher(handlers)

    @property
    def config(self) -> WebhookConfig:
        return self._config

    @property
    def trust_store(self) -> TrustStore:
        return self._trust

    @property
    def dispatcher(self) -> EventDispatcher:
        return self._dispatcher

    def make_app(self) -> web.Application:
        """Application routing every path and method to `handle`."""
        app = web.Application(client_max_size=self._config.max_body_bytes)
        app.router.add_route("*", "/{tail:.*}", self.handle)
        return app

    async def handle(self, request: web.Request) -> web.Response:
        set_log_context(operation="wh", delivery_id=request.headers.get(DELIVERY_HEADER))
        logger.debug("Webhook request received method=%s remote=%s", request.method, request.remote)

        if self._config.restrict_addr:
            try:
                await self._trust.ensure_fresh()
            except (ConfigurationError, UpstreamError) as exc:
                logger.error("Webhook rejected: trusted ranges unavailable: %s", exc)
                return _error(500)
            try:
                self._validator.validate(request.remote, request.headers.get(FORWARDED_FOR_HEADER))
            except RequestError as exc:
                logger.warning("Webhook rejected: %s", exc)
                return _error(exc.status)

        if request.method != "POST":
            logger.warning("Webhook rejected: method %s", request.method)
            return _error(405, Allow="POST")

        body = await request.read()
        try:
            payload = self._extractor.extract(
                request.headers.get("Content-Type", ""), request.headers, body
            )
            set_log_context(event_type=payload.event_type)
            self._dispatcher.dispatch(payload.event_type, payload.body)
        except RequestError as exc:
            logger.warning("Webhook rejected: %s", exc)
            return _error(exc.status)

        logger.info("Webhook accepted: %s (%d bytes)", payload.event_type, len(payload.body))
        return web.json_response({"accepted": True})

    async def close(self, timeout: float = 30.0) -> None:
        """Wait for running handlers and release the metadata client."""
        await self._dispatcher.drain(timeout)
        if self._owned_meta is not None:
            await self._owned_meta.close()
