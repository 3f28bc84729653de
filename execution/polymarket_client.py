"""Live trading on the Polymarket CLOB via py-clob-client."""
import asyncio
import logging
from typing import Optional

from py_clob_client.client import ClobClient
from py_clob_client.clob_types import OrderArgs, OrderType
from py_clob_client.order_builder.constants import BUY, SELL
from eth_account import Account

from feeds.market_fetcher import MarketFetcher
from shared.schemas import (
    CloseRequest,
    CloseResult,
    Market,
    Position,
    TradeRequest,
    TradeResult,
)

logger = logging.getLogger(__name__)

CLOB_HOST = "https://clob.polymarket.com"
MIN_PRICE = 0.01
MAX_PRICE = 0.99


class OrderRejectedError(RuntimeError):
    """The CLOB did not accept an order."""


def _limit_price(price: float) -> float:
    """Round to the one-cent tick and keep inside the tradable range."""
    return min(max(round(price, 2), MIN_PRICE), MAX_PRICE)


def _token_for(market: Market, position: Position) -> str:
    token_id = market.yes_token_id if position == Position.YES else market.no_token_id
    if not token_id:
        raise OrderRejectedError(f"market {market.id} has no CLOB token for {position.value}")
    return token_id


class PolymarketClient:
    """Authenticated Polymarket CLOB client for live trading.

    Orders are sized in USD, converting ETH amounts at eth_usd_price.
    Executed trades report the market slug as their resolved id, so later
    price lookups and closes use the canonical identifier.
    """

    def __init__(
        self,
        private_key: str,
        market_fetcher: MarketFetcher,
        chain_id: int = 137,
        eth_usd_price: float = 3000.0,
    ):
        if not private_key:
            raise ValueError("WALLET_PRIVATE_KEY is required for live trading")

        self.market_fetcher = market_fetcher
        self.eth_usd_price = eth_usd_price
        self.account = Account.from_key(private_key)
        self.address = self.account.address

        self.client = ClobClient(
            host=CLOB_HOST,
            key=private_key,
            chain_id=chain_id,
        )

        # Derive API credentials
        self.client.set_api_creds(self.client.derive_api_key())

        logger.info(
            "Polymarket client initialized",
            extra={"address": self.address, "chain_id": chain_id},
        )

    def get_midpoint(self, token_id: str) -> Optional[float]:
        """Get current midpoint for a token."""
        try:
            resp = self.client.get_midpoint(token_id)
            mid = float(resp.get("mid", 0))
            return mid if mid > 0 else None
        except Exception as e:
            logger.error(f"Failed to get midpoint: {e}")
            return None

    def create_and_post_order(
        self,
        token_id: str,
        price: float,
        size: float,
        side: str,
    ) -> Optional[dict]:
        """Create and post a GTC limit order.

        Args:
            token_id: The CLOB token ID
            price: Limit price (0-1 for binary markets)
            size: Number of shares
            side: BUY or SELL
        """
        try:
            order_args = OrderArgs(
                price=price,
                size=size,
                side=side,
                token_id=token_id,
            )
            signed_order = self.client.create_order(order_args)
            resp = self.client.post_order(signed_order, OrderType.GTC)

            logger.info(
                "Order posted",
                extra={
                    "token_id": token_id,
                    "side": side,
                    "price": price,
                    "size": size,
                    "response": str(resp)[:200],
                },
            )
            return resp
        except Exception as e:
            logger.error(f"Failed to post order: {e}")
            return None

    @staticmethod
    def _order_reference(resp: Optional[dict]) -> str:
        if not resp or resp.get("success") is False:
            raise OrderRejectedError(f"order rejected: {resp}")
        hashes = resp.get("transactionsHashes") or []
        reference = hashes[0] if hashes else resp.get("orderID")
        if not reference:
            raise OrderRejectedError(f"order response without id: {resp}")
        return reference

    async def get_market_price(self, market_id: str, position: Position) -> float:
        market = await self.market_fetcher.get_market(market_id)
        mid = await asyncio.to_thread(self.get_midpoint, _token_for(market, position))
        return mid if mid is not None else market.price_for(position)

    async def execute_trade(self, request: TradeRequest) -> TradeResult:
        market = await self.market_fetcher.get_market(request.market_id)
        token_id = _token_for(market, request.position)

        mid = await asyncio.to_thread(self.get_midpoint, token_id)
        price = _limit_price(mid if mid is not None else request.expected_price)
        size = round(request.amount_eth * self.eth_usd_price / price, 2)

        resp = await asyncio.to_thread(self.create_and_post_order, token_id, price, size, BUY)
        reference = self._order_reference(resp)

        logger.info(
            "LIVE trade executed",
            extra={
                "market_id": request.market_id,
                "slug": market.slug,
                "position": request.position.value,
                "price": price,
                "shares": size,
                "reference": reference,
            },
        )
        return TradeResult(
            resolved_market_id=market.slug or market.id,
            actual_price=price,
            tx_hash=reference,
        )

    async def close_position(self, request: CloseRequest) -> CloseResult:
        market = await self.market_fetcher.get_market(request.market_id)
        token_id = _token_for(market, request.position)

        price = _limit_price(request.current_price)
        shares = round(request.amount_usd / request.entry_price, 2)

        resp = await asyncio.to_thread(self.create_and_post_order, token_id, price, shares, SELL)
        reference = self._order_reference(resp)

        logger.info(
            "LIVE position closed",
            extra={
                "market_id": request.market_id,
                "position": request.position.value,
                "price": price,
                "shares": shares,
                "reference": reference,
            },
        )
        return CloseResult(tx_hash=reference)
