"""Tests for reporting.round_summary."""
import pytest

from helpers import FakeSocialClient
from reporting.round_summary import RoundSummaryPublisher
from shared.schemas import Platform, PostType, RoundStats
from social.publisher import SocialPublisher

STATS = RoundStats(
    portfolio_eth=0.75,
    open_positions=2,
    markets_scanned=20,
    decisions_count=3,
    trades_executed=1,
)


@pytest.mark.asyncio
async def test_round_summary_posts_to_its_platform(db):
    client = FakeSocialClient(Platform.FARCASTER)
    other = FakeSocialClient(Platform.TWITTER)
    publisher = SocialPublisher(db, [other, client])

    post = await RoundSummaryPublisher(client, publisher).publish(STATS)

    assert post is not None
    assert post.post_type == PostType.ROUND_SUMMARY
    assert "Scanned 20 markets" in client.posts[0]
    assert other.posts == []


@pytest.mark.asyncio
async def test_round_summary_skips_unconfigured_client(db):
    client = FakeSocialClient(Platform.FARCASTER, configured=False)

    post = await RoundSummaryPublisher(client, SocialPublisher(db, [client])).publish(STATS)

    assert post is None
    assert client.posts == []
    assert await db.get_social_posts(post_type=PostType.ROUND_SUMMARY) == []
