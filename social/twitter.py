"""X (Twitter) API v2 client using an OAuth 2.0 user access token."""
import logging
from datetime import datetime
from typing import Optional

from shared.schemas import InboundMention, Platform
from social.base import RateLimitedError, SocialClient, SocialPostError

logger = logging.getLogger(__name__)

API_BASE = "https://api.twitter.com/2"


class TwitterClient(SocialClient):
    platform = Platform.TWITTER
    max_chars = 280

    def __init__(
        self,
        access_token: str,
        user_id: str = "",
        min_post_interval: float = 5.0,
        timeout: float = 15.0,
    ):
        super().__init__(min_post_interval=min_post_interval, timeout=timeout)
        self.access_token = access_token
        self.user_id = user_id
        self._since_id: Optional[str] = None

    @property
    def is_configured(self) -> bool:
        return bool(self.access_token)

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
        }

    async def _create_tweet(self, body: dict) -> str:
        data = await self._spaced(
            lambda: self._request("POST", f"{API_BASE}/tweets", self._headers(), json=body)
        )
        tweet_id = (data.get("data") or {}).get("id")
        if not tweet_id:
            raise SocialPostError(self.platform, f"no tweet id in response: {data}")
        return tweet_id

    async def post(self, content: str) -> Optional[str]:
        """Publish a tweet; None when the platform is rate limiting us."""
        try:
            return await self._create_tweet({"text": content})
        except RateLimitedError:
            logger.warning("Tweet skipped, rate limited")
            return None

    async def reply(self, target_id: str, text: str) -> str:
        return await self._create_tweet({
            "text": text,
            "reply": {"in_reply_to_tweet_id": target_id},
        })

    async def fetch_mentions(self) -> list[InboundMention]:
        if not self.user_id:
            return []
        params = {
            "expansions": "author_id",
            "tweet.fields": "created_at",
            "user.fields": "username",
            "max_results": 20,
        }
        if self._since_id:
            params["since_id"] = self._since_id
        data = await self._request(
            "GET",
            f"{API_BASE}/users/{self.user_id}/mentions",
            self._headers(),
            params=params,
        )

        users = {u["id"]: u.get("username", "") for u in (data.get("includes") or {}).get("users", [])}
        mentions = []
        for tweet in data.get("data") or []:
            created = tweet.get("created_at")
            mentions.append(InboundMention(
                id=tweet["id"],
                author=users.get(tweet.get("author_id"), tweet.get("author_id", "")),
                text=tweet.get("text", ""),
                created_at=datetime.fromisoformat(created.replace("Z", "+00:00")) if created else datetime.now().astimezone(),
            ))
        newest = (data.get("meta") or {}).get("newest_id")
        if newest:
            self._since_id = newest
        return mentions
