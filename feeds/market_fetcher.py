"""Market data via the Polymarket Gamma and CLOB APIs."""
import json
import logging
from typing import Optional

import httpx

from shared.schemas import Market, Position

logger = logging.getLogger(__name__)

GAMMA_BASE = "https://gamma-api.polymarket.com"
CLOB_BASE = "https://clob.polymarket.com"


class MarketNotFoundError(LookupError):
    """No market matches the given id or slug."""


def _json_list(value) -> list:
    """Gamma encodes several list fields as JSON strings."""
    if isinstance(value, list):
        return value
    if isinstance(value, str) and value:
        try:
            parsed = json.loads(value)
        except (json.JSONDecodeError, TypeError):
            return []
        return parsed if isinstance(parsed, list) else []
    return []


def _outcome_index(outcomes: list, label: str, default: int) -> int:
    for i, name in enumerate(outcomes):
        if str(name).strip().lower() == label:
            return i
    return default


def parse_market(raw: dict) -> Optional[Market]:
    """Build a Market from a Gamma market payload, or None if not binary."""
    outcomes = _json_list(raw.get("outcomes"))
    prices = _json_list(raw.get("outcomePrices"))
    tokens = _json_list(raw.get("clobTokenIds"))
    if len(prices) != 2:
        return None

    yes_i = _outcome_index(outcomes, "yes", 0)
    no_i = _outcome_index(outcomes, "no", 1)
    try:
        yes_price = float(prices[yes_i])
        no_price = float(prices[no_i])
    except (TypeError, ValueError):
        return None

    return Market(
        id=str(raw.get("id", "")),
        name=raw.get("question", "") or raw.get("title", ""),
        slug=raw.get("slug", "") or "",
        yes_price=yes_price,
        no_price=no_price,
        volume_24h=float(raw.get("volume24hr") or 0.0),
        yes_token_id=str(tokens[yes_i]) if len(tokens) == 2 else "",
        no_token_id=str(tokens[no_i]) if len(tokens) == 2 else "",
    )


class MarketFetcher:
    """Lists active binary markets and quotes outcome prices."""

    def __init__(self, limit: int = 20, timeout: float = 15.0):
        self.limit = limit
        self.timeout = timeout

    async def fetch_markets(self) -> list[Market]:
        """Fetch the most active open markets, highest 24h volume first."""
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.get(
                f"{GAMMA_BASE}/markets",
                params={
                    "active": "true",
                    "closed": "false",
                    "limit": self.limit,
                    "order": "volume24hr",
                    "ascending": "false",
                },
            )
            resp.raise_for_status()
            payload = resp.json()

        markets = [m for m in (parse_market(raw) for raw in payload) if m is not None]
        logger.info(
            "Markets fetched",
            extra={"received": len(payload), "binary": len(markets)},
        )
        return markets

    async def get_market(self, market_id: str) -> Market:
        """Resolve a numeric Gamma id or a market slug."""
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            if market_id.isdigit():
                resp = await client.get(f"{GAMMA_BASE}/markets/{market_id}")
                if resp.status_code == 404:
                    raise MarketNotFoundError(market_id)
                resp.raise_for_status()
                raw = resp.json()
            else:
                resp = await client.get(f"{GAMMA_BASE}/markets", params={"slug": market_id})
                resp.raise_for_status()
                results = resp.json()
                if not results:
                    raise MarketNotFoundError(market_id)
                raw = results[0]

        market = parse_market(raw)
        if market is None:
            raise MarketNotFoundError(f"{market_id} is not a binary market")
        return market

    async def get_midpoint(self, token_id: str) -> Optional[float]:
        """Current CLOB midpoint for an outcome token, None if unavailable."""
        async with httpx.AsyncClient(timeout=10.0) as client:
            resp = await client.get(f"{CLOB_BASE}/midpoint", params={"token_id": token_id})
            if resp.status_code != 200:
                return None
            mid = float(resp.json().get("mid", 0) or 0)
        return mid if mid > 0 else None

    async def get_price(self, market_id: str, position: Position) -> float:
        """Price of the YES or NO token, preferring the live CLOB midpoint."""
        market = await self.get_market(market_id)
        token_id = market.yes_token_id if position == Position.YES else market.no_token_id
        if token_id:
            mid = await self.get_midpoint(token_id)
            if mid is not None:
                return mid
        return market.price_for(position)
