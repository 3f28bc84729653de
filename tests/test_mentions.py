"""Tests for social.mentions."""
from unittest.mock import AsyncMock, MagicMock

import pytest

from helpers import FakeSocialClient
from shared.schemas import InboundMention, Platform, PostType
from social.mentions import MentionResponder


def _analyzer(reply="gm, markets look spicy"):
    analyzer = MagicMock()
    analyzer.generate_reply = AsyncMock(return_value=reply)
    return analyzer


def _mention(mention_id="100", text="@crab what do you think?"):
    return InboundMention(id=mention_id, author="alice", text=text)


@pytest.mark.asyncio
async def test_replies_to_new_mention(db):
    client = FakeSocialClient(Platform.TWITTER, mentions=[_mention()])
    sleep = AsyncMock()
    responder = MentionResponder(db, [client], _analyzer(), reply_delay=2.0, sleep=sleep)

    assert await responder.process_mentions() == 1

    assert client.replies == [("100", "gm, markets look spicy")]
    stored = await db.get_mention(Platform.TWITTER, "100")
    assert stored.replied is True
    assert stored.reply_id == "reply-100"
    assert len(await db.get_social_posts(post_type=PostType.REPLY)) == 1
    sleep.assert_awaited_once_with(2.0)


@pytest.mark.asyncio
async def test_same_mention_replied_once(db):
    client = FakeSocialClient(Platform.TWITTER, mentions=[_mention()])
    analyzer = _analyzer()
    responder = MentionResponder(db, [client], analyzer, sleep=AsyncMock())

    assert await responder.process_mentions() == 1
    assert await responder.process_mentions() == 0
    assert len(client.replies) == 1
    assert analyzer.generate_reply.await_count == 1


@pytest.mark.asyncio
async def test_failed_reply_is_not_retried(db):
    client = FakeSocialClient(Platform.TWITTER, fail=True, mentions=[_mention()])
    responder = MentionResponder(db, [client], _analyzer(), sleep=AsyncMock())

    assert await responder.process_mentions() == 0
    client.fail = False
    assert await responder.process_mentions() == 0

    stored = await db.get_mention(Platform.TWITTER, "100")
    assert stored.replied is False


@pytest.mark.asyncio
async def test_one_bad_mention_does_not_block_others(db):
    client = FakeSocialClient(Platform.FARCASTER, mentions=[_mention("1"), _mention("2")])
    analyzer = _analyzer()
    analyzer.generate_reply.side_effect = [RuntimeError("llm down"), "hello"]
    responder = MentionResponder(db, [client], analyzer, sleep=AsyncMock())

    assert await responder.process_mentions() == 1
    assert client.replies == [("2", "hello")]


@pytest.mark.asyncio
async def test_fetch_failure_on_one_platform_is_isolated(db):
    broken = FakeSocialClient(Platform.TWITTER)
    broken.fetch_mentions = AsyncMock(side_effect=RuntimeError("401"))
    healthy = FakeSocialClient(Platform.FARCASTER, mentions=[_mention()])
    responder = MentionResponder(db, [broken, healthy], _analyzer(), sleep=AsyncMock())

    assert await responder.process_mentions() == 1
    assert len(healthy.replies) == 1


@pytest.mark.asyncio
async def test_disabled_or_unconfigured_is_noop(db):
    client = FakeSocialClient(Platform.TWITTER, mentions=[_mention()])
    analyzer = _analyzer()

    disabled = MentionResponder(db, [client], analyzer, enabled=False, sleep=AsyncMock())
    assert await disabled.process_mentions() == 0

    unconfigured = FakeSocialClient(Platform.FARCASTER, configured=False, mentions=[_mention()])
    responder = MentionResponder(db, [unconfigured], analyzer, sleep=AsyncMock())
    assert await responder.process_mentions() == 0

    analyzer.generate_reply.assert_not_awaited()
    assert await db.get_mention(Platform.TWITTER, "100") is None
