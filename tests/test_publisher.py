"""Tests for social.publisher."""
import pytest

from helpers import FakeSocialClient
from shared.schemas import Platform, PostType
from social.publisher import SocialPublisher


@pytest.mark.asyncio
async def test_broadcast_renders_per_platform(db):
    twitter = FakeSocialClient(Platform.TWITTER)
    farcaster = FakeSocialClient(Platform.FARCASTER)
    publisher = SocialPublisher(db, [twitter, farcaster])

    posts = await publisher.broadcast(PostType.LAUNCH, lambda p: f"hello {p.value}")

    assert twitter.posts == ["hello TWITTER"]
    assert farcaster.posts == ["hello FARCASTER"]
    assert {p.post_id for p in posts} == {"twitter-1", "farcaster-1"}
    assert len(await db.get_social_posts(post_type=PostType.LAUNCH)) == 2


@pytest.mark.asyncio
async def test_broadcast_skips_unconfigured_and_survives_failures(db):
    off = FakeSocialClient(Platform.TWITTER, configured=False)
    broken = FakeSocialClient(Platform.TWITTER, fail=True)
    ok = FakeSocialClient(Platform.FARCASTER)
    publisher = SocialPublisher(db, [off, broken, ok])

    posts = await publisher.broadcast(PostType.DAILY_SUMMARY, lambda p: "gm")

    assert len(posts) == 1
    assert off.posts == []
    assert ok.posts == ["gm"]


@pytest.mark.asyncio
async def test_broadcast_with_no_platforms(db):
    assert await SocialPublisher(db, []).broadcast(PostType.LAUNCH, lambda p: "x") == []


@pytest.mark.asyncio
async def test_publish_without_post_id_is_not_recorded(db):
    class RateLimited(FakeSocialClient):
        async def post(self, content):
            return None

    publisher = SocialPublisher(db, [])
    result = await publisher.publish(RateLimited(Platform.TWITTER), PostType.REPLY, "hi")

    assert result is None
    assert await db.get_social_posts() == []
