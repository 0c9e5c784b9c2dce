"""Content-type aware payload extraction and signature verification."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from urllib.parse import parse_qs

from ghwebhook.errors import DecodeError, SignatureError, UnsupportedContentTypeError
from ghwebhook.security.signature import signature_from_headers, validate_signature

logger = logging.getLogger(__name__)

EVENT_HEADER = "X-GitHub-Event"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
JSON_CONTENT_TYPE = "application/json"
FORM_PAYLOAD_FIELD = "payload"


@dataclass(frozen=True, slots=True)
class DecodedPayload:
    """Verified JSON bytes plus the tag they should be decoded as."""

    event_type: str
    body: bytes


def media_type(content_type: str) -> str:
    """``"application/json; charset=utf-8"`` -> ``"application/json"``."""
    return content_type.split(";", 1)[0].strip().lower()


def _form_field(body: bytes, name: str) -> str | None:
    values = parse_qs(body.decode("utf-8", errors="replace"), keep_blank_values=True)
    found = values.get(name)
    return found[0] if found else None


class PayloadExtractor:
    """Turns a raw delivery into a `DecodedPayload`.

    With a non-empty secret, the signature is always checked over the raw
    request bytes, before the form field (if any) is unpacked.
    """

    def __init__(self, secret: str = "") -> None:
        self._secret = secret

    def _verify(self, headers: Mapping[str, str], body: bytes) -> None:
        if not validate_signature(body, signature_from_headers(headers), self._secret):
            msg = "payload signature mismatch"
            raise SignatureError(msg)

    def extract(
        self,
        content_type: str,
        headers: Mapping[str, str],
        body: bytes,
        form: Mapping[str, str] | None = None,
    ) -> DecodedPayload:
        """Select and verify the JSON payload of a delivery.

        Args:
            content_type: Raw ``Content-Type`` header value.
            headers: Request headers (signature and event tag are read here).
            body: Raw request body.
            form: Already parsed form fields, used instead of parsing *body*
                when no secret is configured.

        Raises:
            SignatureError: A secret is configured and the signature does not match.
            UnsupportedContentTypeError: Neither JSON nor form-encoded.
            DecodeError: The form has no ``payload`` field or the event tag is missing.
        """
        kind = media_type(content_type)
        if kind == FORM_CONTENT_TYPE:
            if self._secret:
                self._verify(headers, body)
                raw = _form_field(body, FORM_PAYLOAD_FIELD)
            elif form is not None:
                raw = form.get(FORM_PAYLOAD_FIELD)
            else:
                raw = _form_field(body, FORM_PAYLOAD_FIELD)
            if raw is None:
                msg = f"form body has no {FORM_PAYLOAD_FIELD!r} field"
                raise DecodeError(msg)
            payload = raw.encode()
        elif kind == JSON_CONTENT_TYPE:
            if self._secret:
                self._verify(headers, body)
            payload = body
        else:
            msg = f"unsupported content type: {kind or '<empty>'}"
            raise UnsupportedContentTypeError(msg)

        event_type = headers.get(EVENT_HEADER, "").strip()
        if not event_type:
            msg = f"missing {EVENT_HEADER} header"
            raise DecodeError(msg)

        logger.debug("Payload extracted: %s, %d bytes (%s)", event_type, len(payload), kind)
        return DecodedPayload(event_type=event_type, body=payload)
