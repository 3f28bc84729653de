"""Tests for storage.db."""
from datetime import datetime, timedelta, timezone

import pytest

from helpers import make_trade
from shared.schemas import (
    Mention,
    Platform,
    PortfolioSnapshot,
    PostType,
    SocialPost,
    TradeStatus,
)


@pytest.mark.asyncio
async def test_create_trade_assigns_id_and_opens(db):
    trade = await db.create_trade(make_trade())
    assert trade.id is not None
    assert trade.status == TradeStatus.OPEN

    stored = await db.get_trade(trade.id)
    assert stored.market_id == "m1"
    assert stored.amount_usd == 60.0
    assert stored.exit_price is None


@pytest.mark.asyncio
async def test_find_open_trade_is_fifo(db):
    now = datetime.now(timezone.utc)
    newer = await db.create_trade(make_trade(entry_timestamp=now, tx_hash="0xnew"))
    older = await db.create_trade(make_trade(entry_timestamp=now - timedelta(hours=1), tx_hash="0xold"))

    found = await db.find_open_trade("m1")
    assert found.id == older.id
    assert found.id != newer.id


@pytest.mark.asyncio
async def test_close_trade_sets_exit_fields_once(db):
    trade = await db.create_trade(make_trade())
    exit_ts = datetime.now(timezone.utc)

    assert await db.close_trade(trade.id, 0.6, "0xexit", exit_ts, 2000) is True
    # Second transition is refused
    assert await db.close_trade(trade.id, 0.7, "0xexit2", exit_ts, 4000) is False

    stored = await db.get_trade(trade.id)
    assert stored.status == TradeStatus.CLOSED
    assert stored.exit_price == 0.6
    assert stored.exit_tx_hash == "0xexit"
    assert stored.pnl_bps == 2000
    assert await db.get_open_trades() == []


@pytest.mark.asyncio
async def test_closed_trades_entered_since(db):
    now = datetime.now(timezone.utc)
    today = await db.create_trade(make_trade(market_id="a", entry_timestamp=now))
    old = await db.create_trade(make_trade(market_id="b", entry_timestamp=now - timedelta(days=3)))
    await db.create_trade(make_trade(market_id="c", entry_timestamp=now))  # stays open
    for t in (today, old):
        await db.close_trade(t.id, 0.6, "0xexit", now, 2000)

    result = await db.get_closed_trades_entered_since(now - timedelta(hours=1))
    assert [t.market_id for t in result] == ["a"]


@pytest.mark.asyncio
async def test_record_mention_is_unique_per_platform(db):
    mention = Mention(platform=Platform.TWITTER, mention_id="123", author="alice", content="gm")
    assert await db.record_mention(mention) is True
    assert await db.record_mention(mention) is False
    # Same id on another platform is a different mention
    other = mention.model_copy(update={"platform": Platform.FARCASTER})
    assert await db.record_mention(other) is True


@pytest.mark.asyncio
async def test_mark_mention_replied(db):
    await db.record_mention(Mention(platform=Platform.TWITTER, mention_id="9"))
    assert await db.mark_mention_replied(Platform.TWITTER, "9", "r9") is True

    stored = await db.get_mention(Platform.TWITTER, "9")
    assert stored.replied is True
    assert stored.reply_id == "r9"
    assert await db.get_mention(Platform.FARCASTER, "9") is None


@pytest.mark.asyncio
async def test_social_post_lookup(db):
    trade = await db.create_trade(make_trade())
    await db.record_social_post(SocialPost(
        platform=Platform.TWITTER, post_id="p1", content="hi",
        post_type=PostType.TRADE_ENTRY, related_trade_id=trade.id,
    ))
    assert await db.has_social_post(trade.id, PostType.TRADE_ENTRY) is True
    assert await db.has_social_post(trade.id, PostType.NOTABLE_TRADE) is False
    posts = await db.get_social_posts(post_type=PostType.TRADE_ENTRY)
    assert len(posts) == 1
    assert posts[0].platform == Platform.TWITTER


@pytest.mark.asyncio
async def test_portfolio_snapshot_roundtrip(db):
    await db.create_portfolio_snapshot(PortfolioSnapshot(
        total_value=1.25, open_positions_count=2, daily_pnl_bps=-150,
    ))
    snapshots = await db.get_portfolio_snapshots()
    assert len(snapshots) == 1
    assert snapshots[0].daily_pnl_bps == -150
