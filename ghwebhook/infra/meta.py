"""GitHub ``/meta`` client: the advertised webhook source ranges."""

from __future__ import annotations

import logging

import aiohttp

from ghwebhook.config import DEFAULT_META_URL
from ghwebhook.errors import UpstreamError

logger = logging.getLogger(__name__)

_HEADERS = {"Accept": "application/vnd.github+json"}


class MetaClient:
    """Fetches the ``hooks`` CIDR list from the GitHub metadata endpoint.

    A session passed in by the caller is reused and left open; otherwise the
    client lazily creates its own and closes it in `close`.
    """

    def __init__(
        self,
        url: str = DEFAULT_META_URL,
        *,
        timeout: float = 10.0,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._url = url
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session
        self._owns_session = session is None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout, headers=_HEADERS)
            self._owns_session = True
        return self._session

    async def fetch_hook_ranges(self) -> list[str]:
        """Return the CIDR strings GitHub sends webhooks from.

        Raises `UpstreamError` on transport errors, non-200 answers, or a
        document without a list of strings under ``hooks``.
        """
        session = self._get_session()
        try:
            async with session.get(self._url, headers=_HEADERS, timeout=self._timeout) as resp:
                if resp.status != 200:
                    msg = f"GitHub meta returned HTTP {resp.status}"
                    raise UpstreamError(msg)
                data = await resp.json(content_type=None)
        except (aiohttp.ClientError, TimeoutError, ValueError) as exc:
            msg = f"GitHub meta fetch failed: {exc}"
            raise UpstreamError(msg) from exc

        hooks = data.get("hooks") if isinstance(data, dict) else None
        if not isinstance(hooks, list) or not all(isinstance(h, str) for h in hooks):
            msg = "GitHub meta document has no valid 'hooks' list"
            raise UpstreamError(msg)
        logger.debug("GitHub meta advertised %d hook ranges", len(hooks))
        return hooks

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None
