"""HMAC signature verification for GitHub deliveries."""

from __future__ import annotations

import hashlib
import hmac
import logging
from collections.abc import Mapping

logger = logging.getLogger(__name__)

SIGNATURE_256_HEADER = "X-Hub-Signature-256"
SIGNATURE_HEADER = "X-Hub-Signature"

_HASH_ALGORITHMS: dict[str, str] = {
    "sha1": "sha1",
    "sha256": "sha256",
    "sha512": "sha512",
}


def validate_signature(body: bytes, signature_value: str, secret: str) -> bool:
    """Check a ``<algorithm>=<hex-mac>`` header value against *body*.

    Uses constant-time comparison to prevent timing attacks.
    """
    if not signature_value or not secret:
        logger.warning("Signature check failed: missing signature or secret")
        return False

    algorithm, sep, sig = signature_value.partition("=")
    algo = _HASH_ALGORITHMS.get(algorithm.strip().lower())
    if not sep or algo is None:
        logger.warning("Signature check failed: unsupported format")
        return False

    expected = hmac.new(secret.encode(), body, getattr(hashlib, algo)).hexdigest()
    valid = hmac.compare_digest(sig.strip().lower().encode(errors="replace"), expected.encode())
    if not valid:
        logger.warning("Signature check failed: mismatch (algo=%s)", algo)
    return valid


def signature_from_headers(headers: Mapping[str, str]) -> str:
    """Pick the strongest signature GitHub sent.

    ``X-Hub-Signature-256`` wins over the legacy sha1 ``X-Hub-Signature``.
    """
    return headers.get(SIGNATURE_256_HEADER, "") or headers.get(SIGNATURE_HEADER, "")
