"""Test helpers shared across test files."""
from datetime import datetime, timezone
from typing import Optional

from shared.ollama_client import _merge_fields
from shared.schemas import (
    CloseRequest,
    CloseResult,
    Decision,
    DecisionAction,
    InboundMention,
    Platform,
    Position,
    Trade,
    TradeRequest,
    TradeResult,
)
from social.base import SocialClient, SocialPostError


def mcr(response="", thinking="", eval_count=0, eval_duration=0):
    """Build a mock Ollama chat return dict with merged field.

    Use instead of raw dicts so mocks match ollama_client.chat_async() format.
    Short name (mock chat response) for compact test code.
    """
    return {
        "response": response,
        "thinking": thinking,
        "merged": _merge_fields(response, thinking),
        "eval_count": eval_count,
        "eval_duration": eval_duration,
    }


def make_decision(
    action=DecisionAction.BUY,
    market_id="m1",
    position=Position.YES,
    amount_eth=0.02,
    market_name="Will it rain?",
):
    return Decision(
        action=action,
        market_id=market_id,
        market_name=market_name,
        position=position,
        amount_eth=amount_eth,
        reasoning="Test reasoning",
        confidence=0.7,
    )


def make_trade(
    market_id="m1",
    entry_price=0.5,
    position=Position.YES,
    amount_eth=0.02,
    amount_usd: Optional[float] = 60.0,
    entry_timestamp: Optional[datetime] = None,
    tx_hash="0xentry",
):
    return Trade(
        market_id=market_id,
        market_name=f"Market {market_id}",
        position=position,
        amount_eth=amount_eth,
        amount_usd=amount_usd,
        entry_price=entry_price,
        entry_tx_hash=tx_hash,
        entry_timestamp=entry_timestamp or datetime.now(timezone.utc),
    )


class FakeSocialClient(SocialClient):
    """In-memory social client that records posts and replies."""

    def __init__(
        self,
        platform: Platform,
        configured: bool = True,
        fail: bool = False,
        mentions: Optional[list[InboundMention]] = None,
    ):
        super().__init__()
        self.platform = platform
        self.configured = configured
        self.fail = fail
        self.mentions = mentions or []
        self.posts: list[str] = []
        self.replies: list[tuple[str, str]] = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    async def post(self, content):
        if self.fail:
            raise SocialPostError(self.platform, "boom")
        self.posts.append(content)
        return f"{self.platform.value.lower()}-{len(self.posts)}"

    async def fetch_mentions(self):
        return list(self.mentions)

    async def reply(self, target_id, text):
        if self.fail:
            raise SocialPostError(self.platform, "boom")
        self.replies.append((target_id, text))
        return f"reply-{target_id}"


class FakeTrader:
    """Trading backend with scripted prices and call logs."""

    def __init__(self, prices=None, resolved_market_id=None, fill_price=0.5):
        self.prices = prices or {}
        self.resolved_market_id = resolved_market_id
        self.fill_price = fill_price
        self.opened: list[TradeRequest] = []
        self.closed: list[CloseRequest] = []
        self.price_calls: list[tuple[str, Position]] = []

    async def get_market_price(self, market_id, position):
        self.price_calls.append((market_id, position))
        price = self.prices.get(market_id)
        if isinstance(price, Exception):
            raise price
        if price is None:
            raise LookupError(market_id)
        return price

    async def execute_trade(self, request):
        self.opened.append(request)
        return TradeResult(
            resolved_market_id=self.resolved_market_id,
            actual_price=self.fill_price,
            tx_hash=f"0xbuy{len(self.opened)}",
        )

    async def close_position(self, request):
        self.closed.append(request)
        return CloseResult(tx_hash=f"0xsell{len(self.closed)}")

    @property
    def call_count(self):
        return len(self.opened) + len(self.closed) + len(self.price_calls)
