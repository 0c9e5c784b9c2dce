"""Receiver for GitHub webhooks with address restriction and signature checks."""

from ghwebhook.config import WebhookConfig
from ghwebhook.errors import (
    ConfigurationError,
    DecodeError,
    GhWebhookError,
    SignatureError,
    UnsupportedContentTypeError,
    UntrustedAddressError,
    UpstreamError,
)
from ghwebhook.webhook import HandlerTable, Webhook, WebhookServer

__all__ = [
    "ConfigurationError",
    "DecodeError",
    "GhWebhookError",
    "HandlerTable",
    "SignatureError",
    "UnsupportedContentTypeError",
    "UntrustedAddressError",
    "UpstreamError",
    "Webhook",
    "WebhookConfig",
    "WebhookServer",
]
