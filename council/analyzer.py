"""Market analyzer: one LLM call per cycle producing trade decisions."""
import json
import logging
import re
import time

from pydantic import ValidationError

from council.prompts import ANALYSIS_PROMPT, REPLY_PROMPT
from shared.ollama_client import OllamaClient
from shared.schemas import (
    Analysis,
    Decision,
    DecisionAction,
    Headline,
    Market,
    PositionView,
)

logger = logging.getLogger(__name__)

THINK_PATTERN = re.compile(r"<think>.*?</think>", re.DOTALL)
JSON_OBJECT_PATTERN = re.compile(r"\{.*\}", re.DOTALL)

# Models sometimes answer in camelCase
_KEY_ALIASES = {
    "marketId": "market_id",
    "marketName": "market_name",
    "amountEth": "amount_eth",
    "marketCommentary": "market_commentary",
    "riskAssessment": "risk_assessment",
    "portfolioRecommendation": "portfolio_recommendation",
}

MAX_REPLY_CHARS = 270


def _normalize_keys(data: dict) -> dict:
    return {_KEY_ALIASES.get(k, k): v for k, v in data.items()}


def _format_positions(positions: list[PositionView]) -> str:
    if not positions:
        return "(none)"
    return "\n".join(
        f"- {p.market_id} | {p.market_name} | {p.position.value} | "
        f"{p.entry_price:.3f} | {p.current_price:.3f} | {p.pnl_bps:+d}"
        for p in positions
    )


def _format_markets(markets: list[Market]) -> str:
    if not markets:
        return "(none)"
    return "\n".join(
        f"- {m.id} | {m.name} | {m.yes_price:.3f} | {m.no_price:.3f} | {m.volume_24h:,.0f}"
        for m in markets
    )


def _format_headlines(headlines: list[Headline]) -> str:
    if not headlines:
        return "(none)"
    return "\n".join(f"- {h.title}" for h in headlines)


def extract_json(text: str) -> dict:
    """Pull the JSON object out of a model answer."""
    clean = THINK_PATTERN.sub("", text).strip()
    match = JSON_OBJECT_PATTERN.search(clean)
    if not match:
        raise ValueError("no JSON object in model output")
    data = json.loads(match.group(0))
    if not isinstance(data, dict):
        raise ValueError("model output is not a JSON object")
    return data


class MarketAnalyzer:
    """Turns portfolio and market context into a list of decisions."""

    def __init__(
        self,
        client: OllamaClient,
        model: str,
        max_position_eth: float = 0.05,
    ):
        self.client = client
        self.model = model
        self.max_position_eth = max_position_eth

    async def analyze(
        self,
        portfolio_value: float,
        positions: list[PositionView],
        markets: list[Market],
        headlines: list[Headline],
    ) -> Analysis:
        """Ask the model for this cycle's decisions.

        Any model or parse failure yields an empty Analysis, i.e. no trades.
        """
        prompt = ANALYSIS_PROMPT.format(
            portfolio_value=portfolio_value,
            max_position_eth=self.max_position_eth,
            positions=_format_positions(positions),
            markets=_format_markets(markets),
            headlines=_format_headlines(headlines),
        )

        start = time.monotonic()
        try:
            result = await self.client.chat_async(
                messages=[{"role": "user", "content": prompt}],
                model=self.model,
                temperature=0.3,
                max_tokens=4096,
                json_mode=True,
            )
            latency = (time.monotonic() - start) * 1000
            return self._parse(result["merged"], markets, latency)

        except Exception as e:
            latency = (time.monotonic() - start) * 1000
            logger.error(f"Market analysis error: {e}")
            return Analysis(model=self.model, latency_ms=latency)

    def _parse(self, merged: str, markets: list[Market], latency_ms: float) -> Analysis:
        data = _normalize_keys(extract_json(merged))
        known = {m.id: m for m in markets}
        known.update({m.slug: m for m in markets if m.slug})

        decisions = []
        for raw in data.get("decisions") or []:
            if not isinstance(raw, dict):
                continue
            decision = self._parse_decision(_normalize_keys(raw), known)
            if decision is not None:
                decisions.append(decision)

        return Analysis(
            decisions=decisions,
            market_commentary=(data.get("market_commentary") or None),
            risk_assessment=(data.get("risk_assessment") or None),
            portfolio_recommendation=(data.get("portfolio_recommendation") or None),
            model=self.model,
            latency_ms=latency_ms,
        )

    def _parse_decision(self, raw: dict, known: dict[str, Market]) -> Decision | None:
        for key in ("action", "position"):
            if isinstance(raw.get(key), str):
                raw[key] = raw[key].strip().upper()
        if raw.get("amount_eth") is not None:
            try:
                raw["amount_eth"] = max(0.0, float(raw["amount_eth"]))
            except (TypeError, ValueError):
                raw["amount_eth"] = 0.0
        if raw.get("confidence") is not None:
            try:
                raw["confidence"] = min(max(float(raw["confidence"]), 0.0), 1.0)
            except (TypeError, ValueError):
                raw["confidence"] = 0.0
        if raw.get("market_id") is not None:
            raw["market_id"] = str(raw["market_id"])

        try:
            decision = Decision.model_validate(raw)
        except ValidationError as e:
            logger.warning("Dropping malformed decision", extra={"raw": raw, "error": str(e)})
            return None

        if decision.action != DecisionAction.BUY:
            return decision

        market = known.get(decision.market_id)
        if market is None:
            logger.warning(
                "Dropping BUY for unknown market",
                extra={"market_id": decision.market_id},
            )
            return None
        if decision.amount_eth <= 0:
            logger.warning(
                "Dropping BUY without size",
                extra={"market_id": decision.market_id},
            )
            return None

        return decision.model_copy(update={
            "amount_eth": min(decision.amount_eth, self.max_position_eth),
            "market_name": decision.market_name or market.name,
        })

    async def generate_reply(self, text: str) -> str:
        """Draft a reply to a community mention."""
        result = await self.client.chat_async(
            messages=[{"role": "user", "content": REPLY_PROMPT.format(text=text)}],
            model=self.model,
            temperature=0.8,
            max_tokens=512,
        )
        reply = THINK_PATTERN.sub("", result["merged"]).strip().strip('"')
        if not reply:
            raise ValueError("model returned an empty reply")
        if len(reply) > MAX_REPLY_CHARS:
            reply = reply[:MAX_REPLY_CHARS - 1].rstrip() + "…"
        return reply
