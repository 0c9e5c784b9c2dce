"""Project-level exception hierarchy."""


class GhWebhookError(Exception):
    """Base for all ghwebhook exceptions."""


class ConfigurationError(GhWebhookError):
    """Operator-supplied configuration is invalid (malformed CIDR, unknown handler)."""


class UpstreamError(GhWebhookError):
    """The GitHub metadata endpoint could not be fetched or parsed."""


class RequestError(GhWebhookError):
    """An inbound request was rejected.

    ``status`` is the HTTP status the receiver answers with.
    """

    status: int = 400


class UntrustedAddressError(RequestError):
    """Remote or forwarded address is outside every trusted range."""

    status = 403


class SignatureError(RequestError):
    """Payload signature is missing or does not match the shared secret."""


class UnsupportedContentTypeError(RequestError):
    """Content type is neither JSON nor form-encoded."""


class DecodeError(RequestError):
    """Event tag is unknown or the payload does not decode into an event."""
