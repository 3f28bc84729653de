"""Tests for reporting.notable."""
from datetime import datetime, timezone

import pytest

from helpers import FakeSocialClient, make_trade
from reporting.notable import NotableTradePublisher, is_notable
from shared.schemas import Platform, PostType
from social.publisher import SocialPublisher


def test_is_notable_uses_absolute_pnl():
    assert is_notable(make_trade().model_copy(update={"pnl_bps": 2500}), 2000)
    assert is_notable(make_trade().model_copy(update={"pnl_bps": -2000}), 2000)
    assert not is_notable(make_trade().model_copy(update={"pnl_bps": 1999}), 2000)
    assert not is_notable(make_trade(), 2000)


async def _closed(db, market_id, pnl_bps):
    trade = await db.create_trade(make_trade(market_id=market_id))
    await db.close_trade(trade.id, 0.5, "0xexit", datetime.now(timezone.utc), pnl_bps)
    return trade


@pytest.mark.asyncio
async def test_notable_trades_posted_once(db):
    big = await _closed(db, "big", 4000)
    await _closed(db, "small", 300)
    client = FakeSocialClient(Platform.TWITTER)
    notable = NotableTradePublisher(db, SocialPublisher(db, [client]), threshold_bps=2000)

    assert await notable.process() == 1
    assert await notable.process() == 0

    assert len(client.posts) == 1
    assert await db.has_social_post(big.id, PostType.NOTABLE_TRADE)


@pytest.mark.asyncio
async def test_notable_retried_when_every_platform_fails(db):
    await _closed(db, "big", -3000)
    broken = FakeSocialClient(Platform.TWITTER, fail=True)
    notable = NotableTradePublisher(db, SocialPublisher(db, [broken]), threshold_bps=2000)

    assert await notable.process() == 0
    broken.fail = False
    assert await notable.process() == 1
    assert "Painful lesson" in broken.posts[0]
