"""Headline feed handed to the analyzer as context."""
import logging
import xml.etree.ElementTree as ET

import httpx

from shared.schemas import Headline

logger = logging.getLogger(__name__)


class NewsFeed:
    """Reads item titles from an RSS feed."""

    def __init__(self, url: str, timeout: float = 10.0):
        self.url = url
        self.timeout = timeout

    async def fetch_headlines(self, limit: int = 5) -> list[Headline]:
        """Return up to `limit` headlines; an unreachable feed yields []."""
        if not self.url:
            return []
        try:
            async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
                resp = await client.get(self.url)
                resp.raise_for_status()
            root = ET.fromstring(resp.content)
        except (httpx.HTTPError, ET.ParseError) as e:
            logger.warning(f"News feed unavailable: {e}", extra={"url": self.url})
            return []

        headlines = []
        for item in root.iter("item"):
            title = (item.findtext("title") or "").strip()
            if title:
                headlines.append(Headline(title=title, link=(item.findtext("link") or "").strip()))
            if len(headlines) >= limit:
                break
        return headlines
