"""Pre-iteration health gate."""
import logging

from execution.wallet import Wallet
from shared.schemas import PostType
from social import templates
from social.publisher import SocialPublisher

logger = logging.getLogger(__name__)


class HealthGate:
    """Blocks an iteration unless the wallet holds the minimum balance.

    Fails closed: if the balance cannot be read the iteration is blocked.
    """

    def __init__(self, wallet: Wallet, publisher: SocialPublisher, min_eth_balance: float):
        self.wallet = wallet
        self.publisher = publisher
        self.min_eth_balance = min_eth_balance

    async def check_healthy(self) -> bool:
        try:
            balance = await self.wallet.balance()
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            return False

        if balance >= self.min_eth_balance:
            return True

        logger.warning(
            "Low balance",
            extra={"balance_eth": balance, "minimum_eth": self.min_eth_balance},
        )
        # broadcast() logs and swallows per-platform failures
        await self.publisher.broadcast(
            PostType.BALANCE_ALERT,
            lambda platform: templates.balance_alert_post(balance, self.min_eth_balance, platform),
        )
        return False
