"""Trusted source ranges for webhook deliveries.

The store holds one immutable `TrustedRanges` snapshot. Readers use whatever
snapshot is current without locking; a refresh builds a complete candidate
and swaps it in with a single assignment, so a reader never observes a
half-built set. Refreshers are serialized by an `asyncio.Lock` and re-check
freshness after acquiring it, which keeps a burst of requests arriving at
expiry down to one outbound fetch.
"""

from __future__ import annotations

import asyncio
import ipaddress
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from ipaddress import IPv4Address, IPv4Network, IPv6Address, IPv6Network
from typing import Protocol

from ghwebhook.errors import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)

REFRESH_INTERVAL = timedelta(hours=24)

Network = IPv4Network | IPv6Network
Address = IPv4Address | IPv6Address


def parse_cidrs(cidrs: Iterable[str]) -> list[Network]:
    """Parse CIDR strings such as ``"192.30.252.0/22"``.

    Host bits are masked off. A bare address without a prefix length is
    rejected. Raises ``ValueError`` naming the first malformed entry.
    """
    networks: list[Network] = []
    for raw in cidrs:
        cidr = raw.strip()
        if "/" not in cidr:
            msg = f"invalid CIDR address: {raw!r}"
            raise ValueError(msg)
        try:
            networks.append(ipaddress.ip_network(cidr, strict=False))
        except ValueError as exc:
            msg = f"invalid CIDR address: {raw!r}"
            raise ValueError(msg) from exc
    return networks


@dataclass(frozen=True, slots=True)
class TrustedRanges:
    """Immutable snapshot of trusted networks and their expiry."""

    networks: tuple[Network, ...] = ()
    expires_at: datetime = datetime.min.replace(tzinfo=UTC)

    def is_fresh(self, now: datetime) -> bool:
        return bool(self.networks) and now < self.expires_at

    def contains(self, ip: Address) -> bool:
        candidates: list[Address] = [ip]
        if isinstance(ip, IPv6Address) and ip.ipv4_mapped is not None:
            candidates.append(ip.ipv4_mapped)
        return any(addr in net for net in self.networks for addr in candidates)


class RangeMembership(Protocol):
    """Read side of the store, as seen by the address validator."""

    def contains(self, ip: Address) -> bool: ...


class HookRangeFetcher(Protocol):
    """Source of GitHub's advertised webhook ranges (see `MetaClient`)."""

    async def fetch_hook_ranges(self) -> list[str]: ...


class TrustStore:
    """Operator ranges plus GitHub's advertised hook ranges, refreshed daily."""

    def __init__(self, static_ranges: Sequence[str], meta: HookRangeFetcher) -> None:
        self._static_ranges = tuple(static_ranges)
        self._meta = meta
        self._snapshot = TrustedRanges()
        self._refresh_lock = asyncio.Lock()

    @property
    def snapshot(self) -> TrustedRanges:
        return self._snapshot

    def contains(self, ip: Address) -> bool:
        return self._snapshot.contains(ip)

    async def ensure_fresh(self, now: datetime | None = None) -> None:
        """Make sure a non-expired range set is loaded.

        Raises `ConfigurationError` for a malformed static range and
        `UpstreamError` when the metadata fetch fails. In both cases the
        previous snapshot stays in place.
        """
        now = now or datetime.now(UTC)
        if self._snapshot.is_fresh(now):
            return

        async with self._refresh_lock:
            if self._snapshot.is_fresh(now):
                logger.debug("Trusted ranges refreshed by a concurrent request")
                return

            try:
                candidate = parse_cidrs(self._static_ranges)
            except ValueError as exc:
                raise ConfigurationError(str(exc)) from exc

            hooks = await self._meta.fetch_hook_ranges()
            try:
                candidate.extend(parse_cidrs(hooks))
            except ValueError as exc:
                msg = f"GitHub meta advertised {exc}"
                raise UpstreamError(msg) from exc

            self._snapshot = TrustedRanges(
                networks=tuple(candidate),
                expires_at=now + REFRESH_INTERVAL,
            )
            logger.info(
                "Trusted ranges refreshed: %d static, %d from GitHub, expires %s",
                len(self._static_ranges),
                len(hooks),
                self._snapshot.expires_at.isoformat(),
            )
