"""Commemorate closed trades whose P&L crossed the notable threshold."""
import logging

from shared.schemas import PostType, Trade
from social import templates
from social.publisher import SocialPublisher
from storage.db import Database

logger = logging.getLogger(__name__)


def is_notable(trade: Trade, threshold_bps: int) -> bool:
    return trade.pnl_bps is not None and abs(trade.pnl_bps) >= threshold_bps


class NotableTradePublisher:
    """Announces each notable closed trade once.

    A trade counts as commemorated once a NOTABLE_TRADE post referencing it
    has been recorded; if every platform fails it is retried next iteration.
    """

    def __init__(
        self,
        db: Database,
        publisher: SocialPublisher,
        threshold_bps: int = 2000,
        lookback: int = 50,
    ):
        self.db = db
        self.publisher = publisher
        self.threshold_bps = threshold_bps
        self.lookback = lookback

    async def process(self) -> int:
        """Returns the number of trades commemorated this call."""
        closed = await self.db.get_closed_trades(limit=self.lookback)
        commemorated = 0
        for trade in closed:
            if not is_notable(trade, self.threshold_bps):
                continue
            try:
                if await self.db.has_social_post(trade.id, PostType.NOTABLE_TRADE):
                    continue
                posts = await self.publisher.broadcast(
                    PostType.NOTABLE_TRADE,
                    lambda platform, t=trade: templates.notable_trade_post(t, platform),
                    related_trade_id=trade.id,
                )
            except Exception as e:
                logger.error(f"Failed to commemorate trade: {e}", extra={"trade_id": trade.id})
                continue
            if posts:
                commemorated += 1
                logger.info(
                    "Notable trade commemorated",
                    extra={"trade_id": trade.id, "pnl_bps": trade.pnl_bps},
                )
        return commemorated
