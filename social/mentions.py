"""Answer community mentions once each."""
import asyncio
import logging

from council.analyzer import MarketAnalyzer
from shared.schemas import InboundMention, Mention, PostType, SocialPost
from social.base import SocialClient
from storage.db import Database

logger = logging.getLogger(__name__)


class MentionResponder:
    """Replies to new mentions on every configured platform.

    A mention counts as handled as soon as it is persisted, so each
    (platform, mention_id) gets at most one reply even if the reply step
    later fails. Replies on one platform are spaced by `reply_delay` seconds.
    """

    def __init__(
        self,
        db: Database,
        clients: list[SocialClient],
        analyzer: MarketAnalyzer,
        enabled: bool = True,
        reply_delay: float = 2.0,
        sleep=asyncio.sleep,
    ):
        self.db = db
        self.clients = clients
        self.analyzer = analyzer
        self.enabled = enabled
        self.reply_delay = reply_delay
        self._sleep = sleep

    async def process_mentions(self) -> int:
        """Process all platforms; returns the number of replies sent."""
        if not self.enabled:
            logger.info("Mentions disabled by config")
            return 0

        replied = 0
        for client in self.clients:
            if not client.is_configured:
                continue
            try:
                mentions = await client.fetch_mentions()
            except Exception as e:
                logger.error(
                    f"Failed to fetch mentions: {e}",
                    extra={"platform": client.platform.value},
                )
                continue

            for mention in mentions:
                try:
                    if await self._handle(client, mention):
                        replied += 1
                        await self._sleep(self.reply_delay)
                except Exception as e:
                    logger.error(
                        f"Failed to process mention: {e}",
                        extra={"platform": client.platform.value, "mention_id": mention.id},
                    )
        return replied

    async def _handle(self, client: SocialClient, inbound: InboundMention) -> bool:
        platform = client.platform
        if await self.db.get_mention(platform, inbound.id) is not None:
            return False

        inserted = await self.db.record_mention(Mention(
            platform=platform,
            mention_id=inbound.id,
            author=inbound.author,
            content=inbound.text,
            replied=False,
            timestamp=inbound.created_at,
        ))
        if not inserted:
            # Another writer recorded it between the lookup and the insert
            return False

        reply = await self.analyzer.generate_reply(inbound.text)
        reply_id = await client.reply(inbound.id, reply)
        await self.db.mark_mention_replied(platform, inbound.id, reply_id)
        await self.db.record_social_post(SocialPost(
            platform=platform,
            post_id=reply_id,
            content=reply,
            post_type=PostType.REPLY,
        ))

        logger.info(
            "Replied to mention",
            extra={"platform": platform.value, "mention_id": inbound.id, "author": inbound.author},
        )
        return True
