"""Periodic ETH tips to community members."""
import logging
import random
from typing import Optional

from execution.wallet import Wallet
from shared.state import AgentState

logger = logging.getLogger(__name__)


class TipDisburser:
    """Sends one tip per interval to a randomly chosen recipient."""

    def __init__(
        self,
        wallet: Wallet,
        recipients: list[str],
        amount_eth: float,
        interval_seconds: float,
        enabled: bool = True,
        rng: Optional[random.Random] = None,
    ):
        self.wallet = wallet
        self.recipients = recipients
        self.amount_eth = amount_eth
        self.interval_seconds = interval_seconds
        self.enabled = enabled
        self.rng = rng or random.Random()

    def is_due(self, state: AgentState, now: float) -> bool:
        return (
            self.enabled
            and bool(self.recipients)
            and now - state.last_tip_at >= self.interval_seconds
        )

    async def maybe_tip(self, state: AgentState, now: float) -> bool:
        """Send a tip if due. Only a successful send advances the timer."""
        if not self.is_due(state, now):
            return False

        recipient = self.rng.choice(self.recipients)
        try:
            tx_hash = await self.wallet.send_eth(recipient, self.amount_eth)
        except Exception as e:
            logger.error(f"Failed to send tip: {e}", extra={"recipient": recipient})
            return False

        state.last_tip_at = now
        logger.info(
            "Tip sent",
            extra={"recipient": recipient, "amount_eth": self.amount_eth, "tx_hash": tx_hash},
        )
        return True
