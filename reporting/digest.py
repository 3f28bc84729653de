"""Daily digest: portfolio summary post plus a persisted snapshot."""
import logging
from datetime import datetime

from execution.wallet import Wallet
from shared.schemas import PortfolioSnapshot, PostType
from shared.state import AgentState
from social import templates
from social.publisher import SocialPublisher
from storage.db import Database

logger = logging.getLogger(__name__)


def local_midnight(now: float) -> datetime:
    """Start of the local calendar day containing epoch time `now`."""
    return datetime.fromtimestamp(now).astimezone().replace(
        hour=0, minute=0, second=0, microsecond=0
    )


class DigestPublisher:
    """Publishes at most one digest per interval.

    The interval timer advances whenever a digest fires, even if posting or
    the snapshot write fails, so a broken platform cannot cause a retry on
    every iteration.
    """

    def __init__(
        self,
        wallet: Wallet,
        db: Database,
        publisher: SocialPublisher,
        interval_seconds: float = 24 * 60 * 60,
    ):
        self.wallet = wallet
        self.db = db
        self.publisher = publisher
        self.interval_seconds = interval_seconds

    def is_due(self, state: AgentState, now: float) -> bool:
        return now - state.last_digest_at >= self.interval_seconds

    async def maybe_publish(self, state: AgentState, now: float) -> bool:
        if not self.is_due(state, now):
            return False

        logger.info("Posting daily summary")
        try:
            snapshot = await self._publish(now)
            logger.info(
                "Daily summary posted",
                extra={
                    "total_value": snapshot.total_value,
                    "daily_pnl_bps": snapshot.daily_pnl_bps,
                    "open_positions": snapshot.open_positions_count,
                },
            )
        except Exception as e:
            logger.error(f"Failed to post daily summary: {e}")
        finally:
            state.last_digest_at = now
        return True

    async def _publish(self, now: float) -> PortfolioSnapshot:
        total_value = await self.wallet.balance()
        open_trades = await self.db.get_open_trades()
        closed_today = await self.db.get_closed_trades_entered_since(local_midnight(now))
        daily_pnl_bps = sum(t.pnl_bps or 0 for t in closed_today)

        await self.publisher.broadcast(
            PostType.DAILY_SUMMARY,
            lambda platform: templates.daily_summary_post(
                total_value, daily_pnl_bps, len(closed_today), len(open_trades), platform
            ),
        )

        return await self.db.create_portfolio_snapshot(PortfolioSnapshot(
            timestamp=datetime.fromtimestamp(now).astimezone(),
            total_value=total_value,
            open_positions_count=len(open_trades),
            daily_pnl_bps=daily_pnl_bps,
        ))
