"""Common plumbing for social platform clients."""
import asyncio
import logging
import time
from typing import Optional

import httpx

from shared.schemas import InboundMention, Platform

logger = logging.getLogger(__name__)


class SocialPostError(RuntimeError):
    """A social platform rejected or failed a request."""

    def __init__(self, platform: Platform, message: str, status_code: Optional[int] = None):
        self.platform = platform
        self.status_code = status_code
        super().__init__(f"{platform.value}: {message}")


class RateLimitedError(SocialPostError):
    """The platform answered 429."""


class SocialClient:
    """Base class for platform clients.

    Subclasses set `platform` and implement post, fetch_mentions and reply.
    Posts on one client are spaced at least `min_post_interval` seconds apart.
    """

    platform: Platform
    max_chars: int = 280

    def __init__(self, min_post_interval: float = 0.0, timeout: float = 15.0):
        self.min_post_interval = min_post_interval
        self.timeout = timeout
        self._last_post_at: Optional[float] = None
        self._post_lock = asyncio.Lock()

    @property
    def is_configured(self) -> bool:
        raise NotImplementedError

    async def _spaced(self, coro_factory):
        """Run a posting call after the minimum spacing has elapsed."""
        async with self._post_lock:
            if self._last_post_at is not None and self.min_post_interval > 0:
                wait = self.min_post_interval - (time.monotonic() - self._last_post_at)
                if wait > 0:
                    await asyncio.sleep(wait)
            try:
                return await coro_factory()
            finally:
                self._last_post_at = time.monotonic()

    async def _request(
        self,
        method: str,
        url: str,
        headers: dict,
        **kwargs,
    ) -> dict:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            raise SocialPostError(self.platform, f"request failed: {e}") from e

        if resp.status_code == 429:
            raise RateLimitedError(self.platform, "rate limited", status_code=429)
        if resp.status_code >= 400:
            raise SocialPostError(
                self.platform,
                f"HTTP {resp.status_code}: {resp.text[:200]}",
                status_code=resp.status_code,
            )
        return resp.json() if resp.content else {}

    async def post(self, content: str) -> Optional[str]:
        raise NotImplementedError

    async def fetch_mentions(self) -> list[InboundMention]:
        raise NotImplementedError

    async def reply(self, target_id: str, text: str) -> str:
        raise NotImplementedError
