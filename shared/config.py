"""Configuration management for crabtrader."""
import os
import re
from pydantic import BaseModel

ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")


class ConfigError(ValueError):
    """Raised at startup when the configuration cannot be used."""

    def __init__(self, problems: list[str]):
        self.problems = problems
        super().__init__("; ".join(problems))


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Config(BaseModel):
    """Application configuration loaded from environment variables."""
    TRADING_MODE: str = "paper"
    OLLAMA_HOST: str = "https://ollama.com"
    OLLAMA_API_KEY: str = ""
    LLM_MODEL: str = "gpt-oss:120b"
    RPC_URL: str = "https://mainnet.base.org"
    CHAIN_ID: int = 8453
    EXPLORER_URL: str = "https://basescan.org"
    WALLET_PRIVATE_KEY: str = ""
    POLYMARKET_CHAIN_ID: int = 137
    MIN_ETH_BALANCE: float = 0.01
    LOOP_INTERVAL_SECONDS: float = 300.0
    MAX_POSITION_ETH: float = 0.05
    MARKET_LIMIT: int = 20
    STOP_LOSS_BPS: int = 1500
    TAKE_PROFIT_BPS: int = 3000
    NOTABLE_TRADE_BPS: int = 2000
    DIGEST_INTERVAL_SECONDS: float = 24 * 60 * 60
    TIP_INTERVAL_SECONDS: float = 6 * 60 * 60
    TIP_AMOUNT_ETH: float = 0.0005
    TIP_RECIPIENTS: str = ""
    DISABLE_TIPS: bool = False
    DISABLE_MENTIONS: bool = False
    MENTION_REPLY_DELAY_SECONDS: float = 2.0
    ETH_USD_PRICE: float = 3000.0
    TWITTER_ACCESS_TOKEN: str = ""
    TWITTER_USER_ID: str = ""
    FARCASTER_API_KEY: str = ""
    FARCASTER_SIGNER_UUID: str = ""
    FARCASTER_FID: str = ""
    NEWS_FEED_URL: str = "https://cointelegraph.com/rss"
    POST_LAUNCH_ANNOUNCEMENT: bool = False
    DB_PATH: str = "data/crabtrader.db"
    LOG_LEVEL: str = "INFO"

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables.

        Unparseable numbers are collected and raised together as ConfigError.
        """
        problems = []

        def number(name: str, default: str, cast):
            raw = os.getenv(name, default)
            try:
                return cast(raw)
            except ValueError:
                problems.append(f"{name} must be a number, got {raw!r}")
                return cast(default)

        config = cls(
            TRADING_MODE=os.getenv("TRADING_MODE", "paper"),
            OLLAMA_HOST=os.getenv("OLLAMA_HOST", "https://ollama.com"),
            OLLAMA_API_KEY=os.getenv("OLLAMA_API_KEY", ""),
            LLM_MODEL=os.getenv("LLM_MODEL", "gpt-oss:120b"),
            RPC_URL=os.getenv("RPC_URL", "https://mainnet.base.org"),
            CHAIN_ID=number("CHAIN_ID", "8453", int),
            EXPLORER_URL=os.getenv("EXPLORER_URL", "https://basescan.org"),
            WALLET_PRIVATE_KEY=os.getenv("WALLET_PRIVATE_KEY", ""),
            POLYMARKET_CHAIN_ID=number("POLYMARKET_CHAIN_ID", "137", int),
            MIN_ETH_BALANCE=number("MIN_ETH_BALANCE", "0.01", float),
            LOOP_INTERVAL_SECONDS=number("LOOP_INTERVAL_SECONDS", "300", float),
            MAX_POSITION_ETH=number("MAX_POSITION_ETH", "0.05", float),
            MARKET_LIMIT=number("MARKET_LIMIT", "20", int),
            STOP_LOSS_BPS=number("STOP_LOSS_BPS", "1500", int),
            TAKE_PROFIT_BPS=number("TAKE_PROFIT_BPS", "3000", int),
            NOTABLE_TRADE_BPS=number("NOTABLE_TRADE_BPS", "2000", int),
            DIGEST_INTERVAL_SECONDS=number("DIGEST_INTERVAL_SECONDS", "86400", float),
            TIP_INTERVAL_SECONDS=number("TIP_INTERVAL_SECONDS", "21600", float),
            TIP_AMOUNT_ETH=number("TIP_AMOUNT_ETH", "0.0005", float),
            TIP_RECIPIENTS=os.getenv("TIP_RECIPIENTS", ""),
            DISABLE_TIPS=_env_bool("DISABLE_TIPS"),
            DISABLE_MENTIONS=_env_bool("DISABLE_MENTIONS"),
            MENTION_REPLY_DELAY_SECONDS=number("MENTION_REPLY_DELAY_SECONDS", "2", float),
            ETH_USD_PRICE=number("ETH_USD_PRICE", "3000", float),
            TWITTER_ACCESS_TOKEN=os.getenv("TWITTER_ACCESS_TOKEN", ""),
            TWITTER_USER_ID=os.getenv("TWITTER_USER_ID", ""),
            FARCASTER_API_KEY=os.getenv("FARCASTER_API_KEY", ""),
            FARCASTER_SIGNER_UUID=os.getenv("FARCASTER_SIGNER_UUID", ""),
            FARCASTER_FID=os.getenv("FARCASTER_FID", ""),
            NEWS_FEED_URL=os.getenv("NEWS_FEED_URL", "https://cointelegraph.com/rss"),
            POST_LAUNCH_ANNOUNCEMENT=_env_bool("POST_LAUNCH_ANNOUNCEMENT"),
            DB_PATH=os.getenv("DB_PATH", "data/crabtrader.db"),
            LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
        )
        if problems:
            raise ConfigError(problems)
        return config

    @property
    def tip_recipients_list(self) -> list[str]:
        return [s.strip() for s in self.TIP_RECIPIENTS.split(",") if s.strip()]

    @property
    def is_live(self) -> bool:
        return self.TRADING_MODE == "live"

    @property
    def tips_enabled(self) -> bool:
        return not self.DISABLE_TIPS and bool(self.tip_recipients_list)

    def validate_or_raise(self) -> None:
        """Check the settings the loop cannot run without.

        Collects every problem before raising so a bad deploy shows all of
        them at once.
        """
        problems = []
        if self.TRADING_MODE not in ("paper", "live"):
            problems.append(f"TRADING_MODE must be 'paper' or 'live', got {self.TRADING_MODE!r}")
        if not self.WALLET_PRIVATE_KEY:
            problems.append("WALLET_PRIVATE_KEY is required")
        if not self.RPC_URL:
            problems.append("RPC_URL is required")
        if self.LOOP_INTERVAL_SECONDS <= 0:
            problems.append("LOOP_INTERVAL_SECONDS must be positive")
        if self.MAX_POSITION_ETH <= 0:
            problems.append("MAX_POSITION_ETH must be positive")
        if self.STOP_LOSS_BPS <= 0 or self.TAKE_PROFIT_BPS <= 0:
            problems.append("STOP_LOSS_BPS and TAKE_PROFIT_BPS must be positive")
        if self.ETH_USD_PRICE <= 0:
            problems.append("ETH_USD_PRICE must be positive")
        if self.MIN_ETH_BALANCE < 0:
            problems.append("MIN_ETH_BALANCE cannot be negative")
        if not self.DISABLE_TIPS:
            bad = [a for a in self.tip_recipients_list if not ADDRESS_PATTERN.match(a)]
            if bad:
                problems.append(f"TIP_RECIPIENTS contains invalid addresses: {', '.join(bad)}")
            if self.tip_recipients_list and self.TIP_AMOUNT_ETH <= 0:
                problems.append("TIP_AMOUNT_ETH must be positive when tips are enabled")
        if problems:
            raise ConfigError(problems)
