"""Main entry point: wires all layers together and runs the loop."""
import asyncio
import logging
import random
import signal
import sys
import time
from typing import Callable, Optional

from dotenv import load_dotenv

load_dotenv()

from shared.config import Config, ConfigError
from shared.logging import setup_logging
from shared.ollama_client import OllamaClient
from shared.schemas import IterationResult, MarketQuote, PostType, RoundStats
from shared.state import AgentState
from council.analyzer import MarketAnalyzer
from execution.executor import DecisionExecutor, Trader
from execution.health import HealthGate
from execution.paper_trader import PaperTrader
from execution.reconciler import PositionReconciler
from execution.tips import TipDisburser
from execution.wallet import Wallet, explorer_address_url
from feeds.market_fetcher import MarketFetcher
from feeds.news import NewsFeed
from reporting.digest import DigestPublisher
from reporting.notable import NotableTradePublisher
from reporting.round_summary import RoundSummaryPublisher
from social import templates
from social.base import SocialClient
from social.farcaster import FarcasterClient
from social.mentions import MentionResponder
from social.publisher import SocialPublisher
from social.twitter import TwitterClient
from storage.db import Database
from strategy.thresholds import NEWS_HEADLINE_COUNT

logger = logging.getLogger("crabtrader")


class TradingAgent:
    """Runs iterations: gate, analyze, execute, report, engage, tip.

    Collaborators are passed in so tests can substitute fakes; use
    from_config() to build the production wiring.
    """

    def __init__(
        self,
        config: Config,
        *,
        db: Database,
        wallet: Wallet,
        market_fetcher: MarketFetcher,
        news_feed: NewsFeed,
        analyzer: MarketAnalyzer,
        trader: Trader,
        social_clients: list[SocialClient],
        round_summary_client: SocialClient,
        state: Optional[AgentState] = None,
        clock: Callable[[], float] = time.time,
        rng: Optional[random.Random] = None,
        reply_sleep=asyncio.sleep,
    ):
        self.config = config
        self.db = db
        self.wallet = wallet
        self.market_fetcher = market_fetcher
        self.news_feed = news_feed
        self.analyzer = analyzer
        self.trader = trader
        self.state = state or AgentState()
        self.clock = clock
        self._wake = asyncio.Event()

        self.publisher = SocialPublisher(db, social_clients)
        self.health = HealthGate(wallet, self.publisher, config.MIN_ETH_BALANCE)
        self.reconciler = PositionReconciler(trader)
        self.executor = DecisionExecutor(
            trader,
            db,
            self.publisher,
            eth_usd_price=config.ETH_USD_PRICE,
            stop_loss_bps=config.STOP_LOSS_BPS,
            take_profit_bps=config.TAKE_PROFIT_BPS,
        )
        self.notable = NotableTradePublisher(db, self.publisher, config.NOTABLE_TRADE_BPS)
        self.mentions = MentionResponder(
            db,
            social_clients,
            analyzer,
            enabled=not config.DISABLE_MENTIONS,
            reply_delay=config.MENTION_REPLY_DELAY_SECONDS,
            sleep=reply_sleep,
        )
        self.digest = DigestPublisher(wallet, db, self.publisher, config.DIGEST_INTERVAL_SECONDS)
        self.round_summary = RoundSummaryPublisher(round_summary_client, self.publisher)
        self.tips = TipDisburser(
            wallet,
            config.tip_recipients_list,
            config.TIP_AMOUNT_ETH,
            config.TIP_INTERVAL_SECONDS,
            enabled=config.tips_enabled,
            rng=rng,
        )

    @classmethod
    def from_config(cls, config: Config) -> "TradingAgent":
        market_fetcher = MarketFetcher(limit=config.MARKET_LIMIT)
        if config.is_live:
            from execution.polymarket_client import PolymarketClient
            trader = PolymarketClient(
                config.WALLET_PRIVATE_KEY,
                market_fetcher,
                chain_id=config.POLYMARKET_CHAIN_ID,
                eth_usd_price=config.ETH_USD_PRICE,
            )
        else:
            trader = PaperTrader(market_fetcher)

        ollama = OllamaClient(
            host=config.OLLAMA_HOST,
            model=config.LLM_MODEL,
            api_key=config.OLLAMA_API_KEY or None,
        )
        twitter = TwitterClient(config.TWITTER_ACCESS_TOKEN, config.TWITTER_USER_ID)
        farcaster = FarcasterClient(
            config.FARCASTER_API_KEY,
            signer_uuid=config.FARCASTER_SIGNER_UUID,
            fid=config.FARCASTER_FID,
        )

        return cls(
            config,
            db=Database(config.DB_PATH),
            wallet=Wallet(config.RPC_URL, config.WALLET_PRIVATE_KEY, config.CHAIN_ID),
            market_fetcher=market_fetcher,
            news_feed=NewsFeed(config.NEWS_FEED_URL),
            analyzer=MarketAnalyzer(ollama, config.LLM_MODEL, config.MAX_POSITION_ETH),
            trader=trader,
            social_clients=[twitter, farcaster],
            round_summary_client=farcaster,
        )

    async def start(self):
        await self.db.init()
        if not await self.analyzer.client.is_available():
            logger.warning("LLM endpoint unreachable, analysis will yield no decisions")
        for client in self.publisher.clients:
            logger.info(
                "Social platform",
                extra={"platform": client.platform.value, "enabled": client.is_configured},
            )

    async def close(self):
        await self.db.close()

    async def run_one_iteration(self) -> IterationResult:
        """One full cycle. Never raises; failures come back as ok=False."""
        try:
            logger.info("=== Starting iteration ===")

            if not await self.health.check_healthy():
                logger.warning("Health check failed, skipping iteration")
                return IterationResult(ok=False, message="Health check failed")

            markets = await self.market_fetcher.fetch_markets()
            logger.info("Fetched markets", extra={"count": len(markets)})

            portfolio_value = await self.wallet.balance()
            open_trades = await self.db.get_open_trades()
            positions = await self.reconciler.reconcile(open_trades)
            headlines = await self.news_feed.fetch_headlines(NEWS_HEADLINE_COUNT)

            analysis = await self.analyzer.analyze(portfolio_value, positions, markets, headlines)
            logger.info(
                "AI generated decisions",
                extra={
                    "count": len(analysis.decisions),
                    "decisions": [
                        f"{d.action.value} {d.market_name} {d.position.value} {d.amount_eth}ETH"
                        for d in analysis.decisions
                    ],
                },
            )

            if analysis.market_commentary:
                await self.publisher.broadcast(
                    PostType.MARKET_REFLECTION,
                    lambda platform: templates.market_reflection_post(
                        analysis.market_commentary,
                        analysis.risk_assessment,
                        analysis.portfolio_recommendation,
                        platform,
                    ),
                )

            prices = {
                m.id: MarketQuote(yes_price=m.yes_price, no_price=m.no_price)
                for m in markets
            }
            summary = await self.executor.execute(analysis.decisions, prices)
            logger.info("Iteration summary", extra={"trades_executed": summary.executed})

            try:
                await self.notable.process()
            except Exception as e:
                logger.error(f"Notable trade processing failed: {e}")

            await self.mentions.process_mentions()
            await self.digest.maybe_publish(self.state, self.clock())

            try:
                await self.round_summary.publish(RoundStats(
                    portfolio_eth=portfolio_value,
                    open_positions=len(open_trades),
                    markets_scanned=len(markets),
                    decisions_count=len(analysis.decisions),
                    trades_executed=summary.executed,
                    has_commentary=bool((analysis.market_commentary or "").strip()),
                ))
            except Exception as e:
                logger.error(f"Failed to post round summary: {e}")

            await self.tips.maybe_tip(self.state, self.clock())

            logger.info("=== Iteration complete ===")
            return IterationResult(ok=True, message="Iteration complete")

        except Exception as e:
            logger.exception(f"Error in iteration: {e}")
            return IterationResult(ok=False, message=str(e))

    async def announce_launch(self):
        wallet_url = explorer_address_url(self.config.EXPLORER_URL, self.wallet.address)
        await self.publisher.broadcast(
            PostType.LAUNCH,
            lambda platform: templates.launch_post(wallet_url, platform),
        )

    async def run_forever(self):
        """Iterate until shutdown() with a fixed delay between iterations.

        Shutdown is honoured between iterations only; an iteration in
        progress always runs to completion.
        """
        logger.info(
            "CrabTrader agent starting",
            extra={
                "mode": self.config.TRADING_MODE,
                "loop_interval_s": self.config.LOOP_INTERVAL_SECONDS,
            },
        )
        self.state.running = True
        while self.state.running:
            await self.run_one_iteration()
            if not self.state.running:
                break
            try:
                await asyncio.wait_for(
                    self._wake.wait(), timeout=self.config.LOOP_INTERVAL_SECONDS
                )
            except asyncio.TimeoutError:
                pass
        logger.info("Agent loop stopped")

    def shutdown(self):
        self.state.running = False
        self._wake.set()


async def run_agent_once(config: Optional[Config] = None) -> IterationResult:
    """Validate, build, run a single iteration and release resources.

    Entry point for scheduled external triggers.
    """
    config = config or Config.from_env()
    config.validate_or_raise()
    agent = TradingAgent.from_config(config)
    await agent.start()
    try:
        return await agent.run_one_iteration()
    finally:
        await agent.close()


async def _run(agent: TradingAgent):
    await agent.start()
    try:
        if agent.config.POST_LAUNCH_ANNOUNCEMENT:
            await agent.announce_launch()
        await agent.run_forever()
    finally:
        await agent.close()
        logger.info("Shutdown complete")


def main():
    setup_logging("crabtrader")

    try:
        config = Config.from_env()
        config.validate_or_raise()
    except ConfigError as e:
        logger.error("Invalid configuration", extra={"problems": e.problems})
        sys.exit(1)
    logging.getLogger().setLevel(config.LOG_LEVEL.upper())
    logger.info("Configuration validated")

    agent = TradingAgent.from_config(config)

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    def handle_signal(sig):
        logger.info(f"Received signal {sig.name}, finishing current iteration")
        agent.shutdown()

    # Loop-aware handlers so a signal also wakes the inter-iteration sleep
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, handle_signal, sig)

    try:
        loop.run_until_complete(_run(agent))
    finally:
        loop.close()


if __name__ == "__main__":
    main()
