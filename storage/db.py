"""SQLite database via aiosqlite."""
import aiosqlite
import logging
import os
from datetime import datetime, timezone
from typing import Optional

from shared.schemas import (
    Mention,
    Platform,
    PortfolioSnapshot,
    PostType,
    SocialPost,
    Trade,
    TradeStatus,
)
from storage.models import ALL_TABLES

logger = logging.getLogger(__name__)


def _ts(value: datetime) -> str:
    """Serialize a datetime as fixed-width UTC ISO-8601.

    Fixed width keeps lexicographic order equal to time order, which the
    range queries below rely on. Naive values are taken as local time.
    """
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f+00:00")


def _parse_ts(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def _row_to_trade(row: dict) -> Trade:
    return Trade(
        id=row["id"],
        market_id=row["market_id"],
        market_name=row["market_name"],
        position=row["position"],
        amount_eth=row["amount_eth"],
        amount_usd=row["amount_usd"],
        entry_price=row["entry_price"],
        entry_tx_hash=row["entry_tx_hash"],
        entry_timestamp=_parse_ts(row["entry_timestamp"]),
        exit_price=row["exit_price"],
        exit_tx_hash=row["exit_tx_hash"],
        exit_timestamp=_parse_ts(row["exit_timestamp"]),
        pnl_bps=row["pnl_bps"],
        status=row["status"],
    )


def _row_to_mention(row: dict) -> Mention:
    return Mention(
        id=row["id"],
        platform=row["platform"],
        mention_id=row["mention_id"],
        author=row["author"] or "",
        content=row["content"] or "",
        replied=bool(row["replied"]),
        timestamp=_parse_ts(row["timestamp"]),
        reply_id=row["reply_id"],
    )


def _row_to_post(row: dict) -> SocialPost:
    return SocialPost(
        id=row["id"],
        platform=row["platform"],
        post_id=row["post_id"],
        content=row["content"],
        post_type=row["post_type"],
        related_trade_id=row["related_trade_id"],
        timestamp=_parse_ts(row["timestamp"]),
    )


class Database:
    """Async SQLite store for trades, social posts, mentions and snapshots."""

    def __init__(self, db_path: str = "data/crabtrader.db"):
        self.db_path = db_path
        self._db: Optional[aiosqlite.Connection] = None

    async def init(self):
        """Initialize database and create tables."""
        directory = os.path.dirname(self.db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        self._db = await aiosqlite.connect(self.db_path)
        self._db.row_factory = aiosqlite.Row
        for statement in ALL_TABLES:
            await self._db.execute(statement)
        await self._db.commit()
        logger.info("Database initialized", extra={"path": self.db_path})

    async def close(self):
        if self._db:
            await self._db.close()
            self._db = None

    async def _fetch_all(self, query: str, params: tuple = ()) -> list[dict]:
        cursor = await self._db.execute(query, params)
        rows = await cursor.fetchall()
        return [dict(row) for row in rows]

    # -- trades -----------------------------------------------------------

    async def create_trade(self, trade: Trade) -> Trade:
        """Insert an OPEN trade and return it with its ID."""
        cursor = await self._db.execute(
            """INSERT INTO trades
               (market_id, market_name, position, amount_eth, amount_usd,
                entry_price, entry_tx_hash, entry_timestamp, status)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                trade.market_id, trade.market_name, trade.position.value,
                trade.amount_eth, trade.amount_usd, trade.entry_price,
                trade.entry_tx_hash, _ts(trade.entry_timestamp),
                TradeStatus.OPEN.value,
            ),
        )
        await self._db.commit()
        return trade.model_copy(update={"id": cursor.lastrowid, "status": TradeStatus.OPEN})

    async def close_trade(
        self,
        trade_id: int,
        exit_price: float,
        exit_tx_hash: str,
        exit_timestamp: datetime,
        pnl_bps: int,
    ) -> bool:
        """Move an OPEN trade to CLOSED with its exit fields in one statement.

        Returns False when no OPEN trade with that id exists.
        """
        cursor = await self._db.execute(
            """UPDATE trades
               SET exit_price=?, exit_tx_hash=?, exit_timestamp=?, pnl_bps=?, status=?
               WHERE id=? AND status=?""",
            (
                exit_price, exit_tx_hash, _ts(exit_timestamp), pnl_bps,
                TradeStatus.CLOSED.value, trade_id, TradeStatus.OPEN.value,
            ),
        )
        await self._db.commit()
        return cursor.rowcount == 1

    async def get_trade(self, trade_id: int) -> Optional[Trade]:
        rows = await self._fetch_all("SELECT * FROM trades WHERE id=?", (trade_id,))
        return _row_to_trade(rows[0]) if rows else None

    async def get_open_trades(self) -> list[Trade]:
        """Get all open trades, oldest entry first."""
        rows = await self._fetch_all(
            "SELECT * FROM trades WHERE status=? ORDER BY entry_timestamp ASC, id ASC",
            (TradeStatus.OPEN.value,),
        )
        return [_row_to_trade(r) for r in rows]

    async def find_open_trade(self, market_id: str) -> Optional[Trade]:
        """Oldest OPEN trade for a market, or None."""
        rows = await self._fetch_all(
            """SELECT * FROM trades WHERE status=? AND market_id=?
               ORDER BY entry_timestamp ASC, id ASC LIMIT 1""",
            (TradeStatus.OPEN.value, market_id),
        )
        return _row_to_trade(rows[0]) if rows else None

    async def get_closed_trades(self, limit: int = 50) -> list[Trade]:
        """Most recently closed trades first."""
        rows = await self._fetch_all(
            "SELECT * FROM trades WHERE status=? ORDER BY exit_timestamp DESC LIMIT ?",
            (TradeStatus.CLOSED.value, limit),
        )
        return [_row_to_trade(r) for r in rows]

    async def get_closed_trades_entered_since(self, since: datetime) -> list[Trade]:
        rows = await self._fetch_all(
            """SELECT * FROM trades WHERE status=? AND entry_timestamp >= ?
               ORDER BY entry_timestamp ASC""",
            (TradeStatus.CLOSED.value, _ts(since)),
        )
        return [_row_to_trade(r) for r in rows]

    # -- social posts -----------------------------------------------------

    async def record_social_post(self, post: SocialPost) -> SocialPost:
        cursor = await self._db.execute(
            """INSERT INTO social_posts
               (platform, post_id, content, post_type, related_trade_id, timestamp)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (
                post.platform.value, post.post_id, post.content,
                post.post_type.value, post.related_trade_id, _ts(post.timestamp),
            ),
        )
        await self._db.commit()
        return post.model_copy(update={"id": cursor.lastrowid})

    async def get_social_posts(
        self,
        post_type: Optional[PostType] = None,
        related_trade_id: Optional[int] = None,
    ) -> list[SocialPost]:
        query = "SELECT * FROM social_posts WHERE 1=1"
        params: list = []
        if post_type is not None:
            query += " AND post_type=?"
            params.append(post_type.value)
        if related_trade_id is not None:
            query += " AND related_trade_id=?"
            params.append(related_trade_id)
        query += " ORDER BY id ASC"
        rows = await self._fetch_all(query, tuple(params))
        return [_row_to_post(r) for r in rows]

    async def has_social_post(self, related_trade_id: int, post_type: PostType) -> bool:
        cursor = await self._db.execute(
            "SELECT 1 FROM social_posts WHERE related_trade_id=? AND post_type=? LIMIT 1",
            (related_trade_id, post_type.value),
        )
        return await cursor.fetchone() is not None

    # -- mentions ---------------------------------------------------------

    async def get_mention(self, platform: Platform, mention_id: str) -> Optional[Mention]:
        rows = await self._fetch_all(
            "SELECT * FROM mentions WHERE platform=? AND mention_id=?",
            (platform.value, mention_id),
        )
        return _row_to_mention(rows[0]) if rows else None

    async def record_mention(self, mention: Mention) -> bool:
        """Insert a mention; False if (platform, mention_id) already exists."""
        cursor = await self._db.execute(
            """INSERT OR IGNORE INTO mentions
               (platform, mention_id, author, content, replied, timestamp, reply_id)
               VALUES (?, ?, ?, ?, ?, ?, ?)""",
            (
                mention.platform.value, mention.mention_id, mention.author,
                mention.content, 1 if mention.replied else 0,
                _ts(mention.timestamp), mention.reply_id,
            ),
        )
        await self._db.commit()
        return cursor.rowcount == 1

    async def mark_mention_replied(
        self, platform: Platform, mention_id: str, reply_id: str
    ) -> bool:
        cursor = await self._db.execute(
            """UPDATE mentions SET replied=1, reply_id=?
               WHERE platform=? AND mention_id=? AND replied=0""",
            (reply_id, platform.value, mention_id),
        )
        await self._db.commit()
        return cursor.rowcount == 1

    # -- portfolio snapshots ----------------------------------------------

    async def create_portfolio_snapshot(self, snapshot: PortfolioSnapshot) -> PortfolioSnapshot:
        cursor = await self._db.execute(
            """INSERT INTO portfolio_snapshots
               (timestamp, total_value, open_positions_count, daily_pnl_bps)
               VALUES (?, ?, ?, ?)""",
            (
                _ts(snapshot.timestamp), snapshot.total_value,
                snapshot.open_positions_count, snapshot.daily_pnl_bps,
            ),
        )
        await self._db.commit()
        return snapshot.model_copy(update={"id": cursor.lastrowid})

    async def get_portfolio_snapshots(self, limit: int = 30) -> list[PortfolioSnapshot]:
        rows = await self._fetch_all(
            "SELECT * FROM portfolio_snapshots ORDER BY timestamp DESC LIMIT ?",
            (limit,),
        )
        return [
            PortfolioSnapshot(
                id=r["id"],
                timestamp=_parse_ts(r["timestamp"]),
                total_value=r["total_value"],
                open_positions_count=r["open_positions_count"],
                daily_pnl_bps=r["daily_pnl_bps"],
            )
            for r in rows
        ]
