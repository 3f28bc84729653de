"""Farcaster client backed by the Neynar v2 API."""
import logging
from datetime import datetime
from typing import Optional

from shared.schemas import InboundMention, Platform
from social.base import SocialClient, SocialPostError

logger = logging.getLogger(__name__)

API_BASE = "https://api.neynar.com/v2/farcaster"


class FarcasterClient(SocialClient):
    """Casts through a Neynar managed signer.

    Posting requires both an API key and a signer UUID; reading mentions
    additionally needs the agent's FID.
    """

    platform = Platform.FARCASTER
    max_chars = 1024

    def __init__(
        self,
        api_key: str,
        signer_uuid: str = "",
        fid: str = "",
        min_post_interval: float = 1.0,
        timeout: float = 15.0,
    ):
        super().__init__(min_post_interval=min_post_interval, timeout=timeout)
        self.api_key = api_key
        self.signer_uuid = signer_uuid
        self.fid = fid

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.signer_uuid)

    def _headers(self) -> dict:
        return {"x-api-key": self.api_key, "Content-Type": "application/json"}

    async def _cast(self, text: str, parent: Optional[str] = None) -> str:
        if not self.is_configured:
            raise SocialPostError(self.platform, "FARCASTER_SIGNER_UUID not set")
        body = {"signer_uuid": self.signer_uuid, "text": text}
        if parent:
            body["parent"] = parent
        data = await self._spaced(
            lambda: self._request("POST", f"{API_BASE}/cast", self._headers(), json=body)
        )
        cast_hash = (data.get("cast") or {}).get("hash")
        if not cast_hash:
            raise SocialPostError(self.platform, f"no cast hash in response: {data}")
        return cast_hash

    async def post(self, content: str) -> Optional[str]:
        return await self._cast(content)

    async def reply(self, target_id: str, text: str) -> str:
        return await self._cast(text, parent=target_id)

    async def fetch_mentions(self) -> list[InboundMention]:
        if not (self.api_key and self.fid):
            return []
        data = await self._request(
            "GET",
            f"{API_BASE}/notifications",
            self._headers(),
            params={"fid": self.fid, "type": "mentions"},
        )
        mentions = []
        for note in data.get("notifications") or []:
            cast = note.get("cast") or {}
            if not cast.get("hash"):
                continue
            ts = cast.get("timestamp")
            mentions.append(InboundMention(
                id=cast["hash"],
                author=(cast.get("author") or {}).get("username", ""),
                text=cast.get("text", ""),
                created_at=datetime.fromisoformat(ts.replace("Z", "+00:00")) if ts else datetime.now().astimezone(),
            ))
        return mentions
