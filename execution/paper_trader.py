"""Paper trading: simulate fills at live market prices."""
import logging
import uuid

from feeds.market_fetcher import MarketFetcher
from shared.schemas import (
    CloseRequest,
    CloseResult,
    Position,
    TradeRequest,
    TradeResult,
)

logger = logging.getLogger(__name__)


def _paper_hash() -> str:
    return f"paper-{uuid.uuid4().hex[:12]}"


class PaperTrader:
    """Simulates trade execution without real money."""

    def __init__(self, market_fetcher: MarketFetcher):
        self.market_fetcher = market_fetcher

    async def get_market_price(self, market_id: str, position: Position) -> float:
        return await self.market_fetcher.get_price(market_id, position)

    async def execute_trade(self, request: TradeRequest) -> TradeResult:
        """Fill at the current quote, or at the expected price if none."""
        try:
            fill_price = await self.get_market_price(request.market_id, request.position)
        except Exception as e:
            logger.warning(
                f"Paper quote failed, filling at expected price: {e}",
                extra={"market_id": request.market_id},
            )
            fill_price = request.expected_price
        else:
            if fill_price <= 0:
                logger.warning(
                    "Paper quote not positive, filling at expected price",
                    extra={"market_id": request.market_id, "quote": fill_price},
                )
                fill_price = request.expected_price

        result = TradeResult(actual_price=fill_price, tx_hash=_paper_hash())
        logger.info(
            "Paper trade executed",
            extra={
                "market_id": request.market_id,
                "position": request.position.value,
                "amount_eth": request.amount_eth,
                "price": fill_price,
                "tx_hash": result.tx_hash,
            },
        )
        return result

    async def close_position(self, request: CloseRequest) -> CloseResult:
        result = CloseResult(tx_hash=_paper_hash())
        logger.info(
            "Paper position closed",
            extra={
                "market_id": request.market_id,
                "position": request.position.value,
                "amount_usd": request.amount_usd,
                "exit_price": request.current_price,
                "tx_hash": result.tx_hash,
            },
        )
        return result
