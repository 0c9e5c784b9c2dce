"""Shared test fixtures."""

from __future__ import annotations

import asyncio
from collections.abc import Callable

import pytest

from ghwebhook.errors import UpstreamError

GITHUB_HOOK_RANGES = ["192.30.252.0/22", "185.199.108.0/22", "2a0a:a440::/29"]


class FakeMeta:
    """Stand-in for `MetaClient` that counts fetches."""

    def __init__(
        self,
        ranges: list[str] | None = None,
        *,
        error: Exception | None = None,
        delay: float = 0.0,
    ) -> None:
        self.ranges = list(GITHUB_HOOK_RANGES if ranges is None else ranges)
        self.error = error
        self.delay = delay
        self.calls = 0

    async def fetch_hook_ranges(self) -> list[str]:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.ranges)


@pytest.fixture
def make_meta() -> Callable[..., FakeMeta]:
    """Factory for `FakeMeta` instances with custom ranges or failures."""
    return FakeMeta


@pytest.fixture
def fake_meta() -> FakeMeta:
    return FakeMeta()


@pytest.fixture
def failing_meta() -> FakeMeta:
    return FakeMeta(error=UpstreamError("GitHub meta returned HTTP 503"))
