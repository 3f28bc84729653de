"""Per-iteration round summary cast."""
import logging
from typing import Optional

from shared.schemas import PostType, RoundStats, SocialPost
from social import templates
from social.base import SocialClient
from social.publisher import SocialPublisher

logger = logging.getLogger(__name__)


class RoundSummaryPublisher:
    """Posts a short recap of every iteration to one platform.

    Skips with a warning when that platform has no signer configured.
    """

    def __init__(self, client: SocialClient, publisher: SocialPublisher):
        self.client = client
        self.publisher = publisher

    async def publish(self, stats: RoundStats) -> Optional[SocialPost]:
        if not self.client.is_configured:
            logger.warning(
                "Skipping round summary: signer not configured",
                extra={"platform": self.client.platform.value},
            )
            return None

        content = templates.round_summary_post(stats, self.client.platform)
        post = await self.publisher.publish(self.client, PostType.ROUND_SUMMARY, content)
        logger.info(
            "Round summary posted",
            extra={"platform": self.client.platform.value, "posted": post is not None},
        )
        return post
