"""Webhook ingress: payload extraction, dispatch, receiver and server."""

from ghwebhook.webhook.dispatcher import EventDispatcher, HandlerTable
from ghwebhook.webhook.payload import DecodedPayload, PayloadExtractor
from ghwebhook.webhook.receiver import Webhook
from ghwebhook.webhook.server import WebhookServer

__all__ = [
    "DecodedPayload",
    "EventDispatcher",
    "HandlerTable",
    "PayloadExtractor",
    "Webhook",
    "WebhookServer",
]
