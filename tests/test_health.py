"""Tests for execution.health."""
from unittest.mock import AsyncMock, MagicMock

import pytest

from execution.health import HealthGate
from helpers import FakeSocialClient
from shared.schemas import Platform, PostType
from social.publisher import SocialPublisher


def _wallet(balance=None, error=None):
    wallet = MagicMock()
    wallet.balance = AsyncMock(return_value=balance, side_effect=error)
    return wallet


@pytest.mark.asyncio
async def test_healthy_when_balance_above_minimum(db):
    client = FakeSocialClient(Platform.TWITTER)
    gate = HealthGate(_wallet(0.5), SocialPublisher(db, [client]), min_eth_balance=0.01)

    assert await gate.check_healthy() is True
    assert client.posts == []


@pytest.mark.asyncio
async def test_balance_equal_to_minimum_is_healthy(db):
    gate = HealthGate(_wallet(0.01), SocialPublisher(db, []), min_eth_balance=0.01)
    assert await gate.check_healthy() is True


@pytest.mark.asyncio
async def test_low_balance_blocks_and_alerts(db):
    client = FakeSocialClient(Platform.FARCASTER)
    gate = HealthGate(_wallet(0.001), SocialPublisher(db, [client]), min_eth_balance=0.01)

    assert await gate.check_healthy() is False
    assert len(client.posts) == 1
    assert "Low balance" in client.posts[0]
    assert len(await db.get_social_posts(post_type=PostType.BALANCE_ALERT)) == 1


@pytest.mark.asyncio
async def test_low_balance_blocks_even_if_alert_fails(db):
    client = FakeSocialClient(Platform.TWITTER, fail=True)
    gate = HealthGate(_wallet(0.0), SocialPublisher(db, [client]), min_eth_balance=0.01)

    assert await gate.check_healthy() is False


@pytest.mark.asyncio
async def test_balance_error_fails_closed(db):
    client = FakeSocialClient(Platform.TWITTER)
    gate = HealthGate(
        _wallet(error=ConnectionError("rpc down")),
        SocialPublisher(db, [client]),
        min_eth_balance=0.01,
    )

    assert await gate.check_healthy() is False
    assert client.posts == []
