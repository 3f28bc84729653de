"""Pydantic models for all data flowing through an iteration."""
from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Position(str, Enum):
    YES = "YES"
    NO = "NO"


class DecisionAction(str, Enum):
    BUY = "BUY"
    SELL = "SELL"
    HOLD = "HOLD"


class TradeStatus(str, Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"


class Platform(str, Enum):
    TWITTER = "TWITTER"
    FARCASTER = "FARCASTER"


class PostType(str, Enum):
    TRADE_ENTRY = "TRADE_ENTRY"
    TRADE_EXIT = "TRADE_EXIT"
    DAILY_SUMMARY = "DAILY_SUMMARY"
    ROUND_SUMMARY = "ROUND_SUMMARY"
    MARKET_REFLECTION = "MARKET_REFLECTION"
    NOTABLE_TRADE = "NOTABLE_TRADE"
    BALANCE_ALERT = "BALANCE_ALERT"
    LAUNCH = "LAUNCH"
    REPLY = "REPLY"


class Market(BaseModel):
    """A binary prediction market as listed by the market-data feed."""
    id: str
    name: str
    slug: str = ""
    yes_price: float
    no_price: float
    volume_24h: float = 0.0
    yes_token_id: str = ""
    no_token_id: str = ""

    def price_for(self, position: Position) -> float:
        return self.yes_price if position == Position.YES else self.no_price


class MarketQuote(BaseModel):
    """Per-cycle price snapshot entry for one market."""
    yes_price: float
    no_price: float

    def price_for(self, position: Position) -> float:
        return self.yes_price if position == Position.YES else self.no_price


class Headline(BaseModel):
    title: str
    link: str = ""


class Decision(BaseModel):
    """One BUY/SELL/HOLD recommendation produced by the analyzer."""
    action: DecisionAction
    market_id: str
    market_name: str = ""
    position: Position = Position.YES
    amount_eth: float = Field(default=0.0, ge=0.0)
    reasoning: str = ""
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)


class Analysis(BaseModel):
    """Output of the market analyzer for one cycle."""
    decisions: list[Decision] = Field(default_factory=list)
    market_commentary: Optional[str] = None
    risk_assessment: Optional[str] = None
    portfolio_recommendation: Optional[str] = None
    model: str = ""
    latency_ms: float = 0.0


class PositionView(BaseModel):
    """An open trade marked to the current market price."""
    trade_id: Optional[int] = None
    market_id: str
    market_name: str
    position: Position
    entry_price: float
    current_price: float
    pnl_bps: int


class TradeRequest(BaseModel):
    market_id: str
    market_name: str
    position: Position
    amount_eth: float
    expected_price: float


class TradeResult(BaseModel):
    """Fill reported by a trading backend.

    resolved_market_id, when set, is the canonical id the exchange uses for
    this market and replaces the id the decision was made with.
    """
    resolved_market_id: Optional[str] = None
    actual_price: float
    tx_hash: str
    timestamp: datetime = Field(default_factory=utcnow)


class CloseRequest(BaseModel):
    market_name: str
    position: Position
    entry_price: float
    current_price: float
    amount_usd: float
    market_id: str


class CloseResult(BaseModel):
    tx_hash: str
    timestamp: datetime = Field(default_factory=utcnow)


class Trade(BaseModel):
    """Persisted trade record in SQLite."""
    id: Optional[int] = None
    market_id: str
    market_name: str
    position: Position
    amount_eth: float
    amount_usd: Optional[float] = None
    entry_price: float
    entry_tx_hash: str
    entry_timestamp: datetime = Field(default_factory=utcnow)
    exit_price: Optional[float] = None
    exit_tx_hash: Optional[str] = None
    exit_timestamp: Optional[datetime] = None
    pnl_bps: Optional[int] = None
    status: TradeStatus = TradeStatus.OPEN


class SocialPost(BaseModel):
    id: Optional[int] = None
    platform: Platform
    post_id: str
    content: str
    post_type: PostType
    related_trade_id: Optional[int] = None
    timestamp: datetime = Field(default_factory=utcnow)


class InboundMention(BaseModel):
    """A mention as returned by a social client, before persistence."""
    id: str
    author: str = ""
    text: str = ""
    created_at: datetime = Field(default_factory=utcnow)


class Mention(BaseModel):
    id: Optional[int] = None
    platform: Platform
    mention_id: str
    author: str = ""
    content: str = ""
    replied: bool = False
    timestamp: datetime = Field(default_factory=utcnow)
    reply_id: Optional[str] = None


class PortfolioSnapshot(BaseModel):
    id: Optional[int] = None
    timestamp: datetime = Field(default_factory=utcnow)
    total_value: float
    open_positions_count: int
    daily_pnl_bps: int


class ExecutionSummary(BaseModel):
    """Counts reported after a batch of decisions has been executed."""
    total: int = 0
    executed: int = 0
    skipped: int = 0

    @property
    def failed(self) -> int:
        return self.total - self.executed - self.skipped


class RoundStats(BaseModel):
    portfolio_eth: float
    open_positions: int
    markets_scanned: int
    decisions_count: int
    trades_executed: int
    has_commentary: bool = False


class IterationResult(BaseModel):
    ok: bool
    message: str
