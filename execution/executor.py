"""Decision executor: turns analyzer decisions into orders, records and posts."""
import logging
from typing import Optional, Protocol

from shared.schemas import (
    CloseRequest,
    CloseResult,
    Decision,
    DecisionAction,
    ExecutionSummary,
    MarketQuote,
    Position,
    PostType,
    Trade,
    TradeRequest,
    TradeResult,
    TradeStatus,
)
from social import templates
from social.publisher import SocialPublisher
from storage.db import Database
from strategy.pnl import classify_exit, compute_pnl_bps, usd_notional
from strategy.thresholds import (
    DEFAULT_STOP_LOSS_BPS,
    DEFAULT_TAKE_PROFIT_BPS,
    FALLBACK_EXPECTED_PRICE,
)

logger = logging.getLogger(__name__)


class Trader(Protocol):
    """What the executor needs from a trading backend (paper or live)."""

    async def execute_trade(self, request: TradeRequest) -> TradeResult: ...

    async def close_position(self, request: CloseRequest) -> CloseResult: ...

    async def get_market_price(self, market_id: str, position: Position) -> float: ...


class TradeStateError(RuntimeError):
    """A trade could not make the OPEN -> CLOSED transition."""


def expected_price(
    prices: dict[str, MarketQuote], market_id: str, position: Position
) -> float:
    """Snapshot price for the position, or the no-quote sentinel."""
    quote = prices.get(market_id)
    if quote is None:
        return FALLBACK_EXPECTED_PRICE
    return quote.price_for(position)


class DecisionExecutor:
    """Executes one batch of decisions, isolating each decision's failure.

    HOLD is skipped. BUY opens and records a trade. SELL closes the oldest
    open trade on the decision's market; a SELL with nothing to close is
    dropped. Entry and exit announcements are best-effort.
    """

    def __init__(
        self,
        trader: Trader,
        db: Database,
        publisher: SocialPublisher,
        eth_usd_price: float,
        stop_loss_bps: int = DEFAULT_STOP_LOSS_BPS,
        take_profit_bps: int = DEFAULT_TAKE_PROFIT_BPS,
    ):
        self.trader = trader
        self.db = db
        self.publisher = publisher
        self.eth_usd_price = eth_usd_price
        self.stop_loss_bps = stop_loss_bps
        self.take_profit_bps = take_profit_bps

    async def execute(
        self,
        decisions: list[Decision],
        prices: dict[str, MarketQuote],
    ) -> ExecutionSummary:
        logger.info("Executing trading decisions", extra={"count": len(decisions)})
        summary = ExecutionSummary(total=len(decisions))

        for decision in decisions:
            if decision.action == DecisionAction.HOLD:
                summary.skipped += 1
                logger.debug("Skipping HOLD decision", extra={"market": decision.market_name})
                continue

            logger.info(
                "Processing decision",
                extra={
                    "action": decision.action.value,
                    "market_id": decision.market_id,
                    "market": decision.market_name,
                    "position": decision.position.value,
                    "amount_eth": decision.amount_eth,
                },
            )
            try:
                if decision.action == DecisionAction.BUY:
                    await self.open_trade(decision, prices)
                    summary.executed += 1
                elif decision.action == DecisionAction.SELL:
                    if await self.close_trade(decision) is not None:
                        summary.executed += 1
            except Exception as e:
                logger.error(
                    f"Failed to execute trade decision: {e}",
                    extra={"action": decision.action.value, "market_id": decision.market_id},
                )

        logger.info(
            "Trade execution summary",
            extra={
                "executed": summary.executed,
                "skipped": summary.skipped,
                "failed": summary.failed,
            },
        )
        return summary

    async def open_trade(self, decision: Decision, prices: dict[str, MarketQuote]) -> Trade:
        result = await self.trader.execute_trade(TradeRequest(
            market_id=decision.market_id,
            market_name=decision.market_name,
            position=decision.position,
            amount_eth=decision.amount_eth,
            expected_price=expected_price(prices, decision.market_id, decision.position),
        ))

        if result.actual_price <= 0:
            raise ValueError(
                f"fill price must be positive, got {result.actual_price} "
                f"(tx {result.tx_hash})"
            )

        # Exchanges may rewrite ids; later SELLs must match what is stored
        market_id = result.resolved_market_id or decision.market_id

        trade = await self.db.create_trade(Trade(
            market_id=market_id,
            market_name=decision.market_name,
            position=decision.position,
            amount_eth=decision.amount_eth,
            amount_usd=decision.amount_eth * self.eth_usd_price,
            entry_price=result.actual_price,
            entry_tx_hash=result.tx_hash,
            entry_timestamp=result.timestamp,
            status=TradeStatus.OPEN,
        ))

        await self.publisher.broadcast(
            PostType.TRADE_ENTRY,
            lambda platform: templates.trade_entry_post(trade, decision, platform),
            related_trade_id=trade.id,
        )

        logger.info(
            "Trade opened",
            extra={
                "trade_id": trade.id,
                "market_id": market_id,
                "position": trade.position.value,
                "entry_price": trade.entry_price,
            },
        )
        return trade

    async def close_trade(self, decision: Decision) -> Optional[Trade]:
        """Close the oldest open trade on the decision's market, if any."""
        trade = await self.db.find_open_trade(decision.market_id)
        if trade is None:
            logger.info("No open trade to close", extra={"market_id": decision.market_id})
            return None

        current_price = await self.trader.get_market_price(trade.market_id, trade.position)
        # Fails on a bad stored entry before any order goes out
        pnl_bps = compute_pnl_bps(trade.entry_price, current_price)
        exit_reason = classify_exit(pnl_bps, self.stop_loss_bps, self.take_profit_bps)

        amount_usd = usd_notional(
            trade.amount_usd, trade.amount_eth, decision.amount_eth, self.eth_usd_price
        )
        result = await self.trader.close_position(CloseRequest(
            market_name=trade.market_name,
            position=trade.position,
            entry_price=trade.entry_price,
            current_price=current_price,
            amount_usd=amount_usd,
            market_id=trade.market_id,
        ))

        closed = await self.db.close_trade(
            trade.id,
            exit_price=current_price,
            exit_tx_hash=result.tx_hash,
            exit_timestamp=result.timestamp,
            pnl_bps=pnl_bps,
        )
        if not closed:
            raise TradeStateError(f"trade {trade.id} was not OPEN when closing")

        closed_trade = trade.model_copy(update={
            "exit_price": current_price,
            "exit_tx_hash": result.tx_hash,
            "exit_timestamp": result.timestamp,
            "pnl_bps": pnl_bps,
            "status": TradeStatus.CLOSED,
        })

        await self.publisher.broadcast(
            PostType.TRADE_EXIT,
            lambda platform: templates.trade_exit_post(closed_trade, exit_reason, platform),
            related_trade_id=trade.id,
        )

        logger.info(
            "Trade closed",
            extra={
                "trade_id": trade.id,
                "market": trade.market_name,
                "pnl_bps": pnl_bps,
                "exit_reason": exit_reason,
            },
        )
        return closed_trade
