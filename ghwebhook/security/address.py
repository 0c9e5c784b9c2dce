"""Source address checks against the trusted ranges."""

from __future__ import annotations

import ipaddress
import logging

from ghwebhook.errors import UntrustedAddressError
from ghwebhook.security.trust import Address, RangeMembership

logger = logging.getLogger(__name__)


def split_host_port(addr: str) -> str:
    """Return the host part of ``host:port``, ``[v6]:port`` or a bare address."""
    addr = addr.strip()
    if addr.startswith("["):
        end = addr.find("]")
        return addr[1:end] if end != -1 else addr
    if addr.count(":") == 1:
        return addr.split(":", 1)[0]
    return addr


def _parse_ip(value: str) -> Address | None:
    try:
        return ipaddress.ip_address(value)
    except ValueError:
        return None


class AddressValidator:
    """Rejects requests whose socket peer or any forwarded hop is untrusted.

    Every entry of ``X-Forwarded-For`` must be inside a trusted range, not only
    the one nearest to us.
    """

    def __init__(self, ranges: RangeMembership) -> None:
        self._ranges = ranges

    def _check(self, value: str, source: str) -> None:
        ip = _parse_ip(value)
        if ip is None or not self._ranges.contains(ip):
            logger.warning("Untrusted %s address: %r", source, value)
            msg = f"untrusted {source} address: {value!r}"
            raise UntrustedAddressError(msg)

    def validate(self, remote_addr: str | None, forwarded_for: str | None = None) -> None:
        """Raise `UntrustedAddressError` unless every claimed origin is trusted.

        An absent or blank forwarded-for header contributes no hops; an empty
        hop inside a non-empty header is rejected like any unparsable one.
        """
        if forwarded_for and forwarded_for.strip():
            for hop in forwarded_for.split(","):
                self._check(hop.strip(), "forwarded")

        self._check(split_host_port(remote_addr or ""), "remote")
