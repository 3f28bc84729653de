"""Mark open positions to market."""
import asyncio
import logging

from shared.schemas import PositionView, Trade
from strategy.pnl import compute_pnl_bps

logger = logging.getLogger(__name__)


class PositionReconciler:
    """Prices every open trade concurrently and computes its live P&L."""

    def __init__(self, trader):
        self.trader = trader

    async def _view(self, trade: Trade) -> PositionView:
        current_price = await self.trader.get_market_price(trade.market_id, trade.position)
        return PositionView(
            trade_id=trade.id,
            market_id=trade.market_id,
            market_name=trade.market_name,
            position=trade.position,
            entry_price=trade.entry_price,
            current_price=current_price,
            pnl_bps=compute_pnl_bps(trade.entry_price, current_price),
        )

    async def reconcile(self, open_trades: list[Trade]) -> list[PositionView]:
        """Return a view per trade whose price could be fetched.

        A trade whose price lookup fails is logged and left out.
        """
        results = await asyncio.gather(
            *(self._view(t) for t in open_trades),
            return_exceptions=True,
        )

        views = []
        for trade, result in zip(open_trades, results):
            if isinstance(result, BaseException):
                logger.warning(
                    f"Price fetch failed for open trade: {result}",
                    extra={"trade_id": trade.id, "market_id": trade.market_id},
                )
                continue
            views.append(result)

        logger.info(
            "Positions reconciled",
            extra={"open": len(open_trades), "priced": len(views)},
        )
        return views
