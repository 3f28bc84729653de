"""Fan-out of one post to every configured platform."""
import asyncio
import logging
from typing import Callable, Optional

from shared.schemas import Platform, PostType, SocialPost
from social.base import SocialClient
from storage.db import Database

logger = logging.getLogger(__name__)

Renderer = Callable[[Platform], str]


class SocialPublisher:
    """Publishes to each platform independently and records what went out.

    Platforms are posted concurrently; a failure on one is logged and does
    not affect the others or the caller.
    """

    def __init__(self, db: Database, clients: list[SocialClient]):
        self.db = db
        self.clients = clients

    @property
    def active_clients(self) -> list[SocialClient]:
        return [c for c in self.clients if c.is_configured]

    async def publish(
        self,
        client: SocialClient,
        post_type: PostType,
        content: str,
        related_trade_id: Optional[int] = None,
    ) -> Optional[SocialPost]:
        """Post to a single platform and persist the record.

        Returns None when the platform accepted nothing (e.g. rate limited).
        Errors propagate to the caller.
        """
        post_id = await client.post(content)
        if not post_id:
            return None
        return await self.db.record_social_post(SocialPost(
            platform=client.platform,
            post_id=post_id,
            content=content,
            post_type=post_type,
            related_trade_id=related_trade_id,
        ))

    async def _render_and_publish(
        self,
        client: SocialClient,
        post_type: PostType,
        render: Renderer,
        related_trade_id: Optional[int],
    ) -> Optional[SocialPost]:
        content = render(client.platform)
        return await self.publish(client, post_type, content, related_trade_id)

    async def broadcast(
        self,
        post_type: PostType,
        render: Renderer,
        related_trade_id: Optional[int] = None,
    ) -> list[SocialPost]:
        """Render and post to every configured platform; never raises."""
        clients = self.active_clients
        if not clients:
            logger.debug("No social platforms configured", extra={"post_type": post_type.value})
            return []

        results = await asyncio.gather(
            *(
                self._render_and_publish(c, post_type, render, related_trade_id)
                for c in clients
            ),
            return_exceptions=True,
        )

        posted = []
        for client, result in zip(clients, results):
            if isinstance(result, BaseException):
                logger.error(
                    f"Failed to publish {post_type.value}: {result}",
                    extra={
                        "platform": client.platform.value,
                        "related_trade_id": related_trade_id,
                    },
                )
            elif result is not None:
                posted.append(result)
        return posted
