"""Tests for execution.reconciler."""
import asyncio

import pytest

from execution.reconciler import PositionReconciler
from helpers import FakeTrader, make_trade
from shared.schemas import Position


@pytest.mark.asyncio
async def test_reconcile_computes_pnl_per_trade():
    trader = FakeTrader(prices={"a": 0.6, "b": 0.3})
    trades = [
        make_trade(market_id="a", entry_price=0.5),
        make_trade(market_id="b", entry_price=0.4, position=Position.NO),
    ]

    views = await PositionReconciler(trader).reconcile(trades)

    assert [v.market_id for v in views] == ["a", "b"]
    assert views[0].pnl_bps == 2000
    assert views[1].pnl_bps == -2500
    assert ("b", Position.NO) in trader.price_calls


@pytest.mark.asyncio
async def test_reconcile_skips_failed_fetch():
    trader = FakeTrader(prices={"a": 0.6, "b": RuntimeError("timeout")})
    trades = [make_trade(market_id="a"), make_trade(market_id="b"), make_trade(market_id="c")]

    views = await PositionReconciler(trader).reconcile(trades)

    assert [v.market_id for v in views] == ["a"]


@pytest.mark.asyncio
async def test_reconcile_fetches_concurrently():
    in_flight = 0
    peak = 0

    class SlowTrader:
        async def get_market_price(self, market_id, position):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return 0.5

    trades = [make_trade(market_id=f"m{i}") for i in range(4)]
    views = await PositionReconciler(SlowTrader()).reconcile(trades)

    assert len(views) == 4
    assert peak == 4


@pytest.mark.asyncio
async def test_reconcile_empty():
    assert await PositionReconciler(FakeTrader()).reconcile([]) == []
