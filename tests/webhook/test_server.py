"""Tests for the webhook server lifecycle."""

from __future__ import annotations

import asyncio
from typing import Any

import aiohttp

from ghwebhook.config import WebhookConfig
from ghwebhook.webhook.receiver import Webhook
from ghwebhook.webhook.server import WebhookServer


class TestWebhookServer:
    async def test_start_serve_stop(self, fake_meta: Any, unused_tcp_port: int) -> None:
        received = asyncio.Event()

        async def on_ping(_event: Any) -> None:
            received.set()

        config = WebhookConfig(port=unused_tcp_port)
        server = WebhookServer(Webhook(config, {"ping": on_ping}, meta=fake_meta))
        await server.start()
        assert server.running
        try:
            async with (
                aiohttp.ClientSession() as session,
                session.post(
                    f"http://127.0.0.1:{unused_tcp_port}/hook",
                    data=b'{"zen":"x"}',
                    headers={"Content-Type": "application/json", "X-GitHub-Event": "ping"},
                ) as resp,
            ):
                assert resp.status == 200
        finally:
            await server.stop()
        assert not server.running
        assert received.is_set()

    async def test_stop_without_start(self, fake_meta: Any) -> None:
        server = WebhookServer(Webhook(meta=fake_meta))
        await server.stop()
        assert not server.running

    async def test_stop_closes_owned_meta_client(self) -> None:
        hook = Webhook()
        owned = hook._owned_meta
        assert owned is not None
        session = owned._get_session()
        await WebhookServer(hook).stop()
        assert session.closed
