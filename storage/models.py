"""SQLite table definitions."""

CREATE_TRADES_TABLE = """
CREATE TABLE IF NOT EXISTS trades (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    market_id TEXT NOT NULL,
    market_name TEXT NOT NULL,
    position TEXT NOT NULL CHECK (position IN ('YES', 'NO')),
    amount_eth REAL NOT NULL,
    amount_usd REAL,
    entry_price REAL NOT NULL,
    entry_tx_hash TEXT NOT NULL,
    entry_timestamp TEXT NOT NULL,
    exit_price REAL,
    exit_tx_hash TEXT,
    exit_timestamp TEXT,
    pnl_bps INTEGER,
    status TEXT NOT NULL DEFAULT 'OPEN' CHECK (status IN ('OPEN', 'CLOSED'))
);
"""

CREATE_TRADES_INDEX = """
CREATE INDEX IF NOT EXISTS idx_trades_status_market
    ON trades (status, market_id, entry_timestamp);
"""

CREATE_SOCIAL_POSTS_TABLE = """
CREATE TABLE IF NOT EXISTS social_posts (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    platform TEXT NOT NULL,
    post_id TEXT NOT NULL,
    content TEXT NOT NULL,
    post_type TEXT NOT NULL,
    related_trade_id INTEGER REFERENCES trades (id),
    timestamp TEXT NOT NULL
);
"""

CREATE_MENTIONS_TABLE = """
CREATE TABLE IF NOT EXISTS mentions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    platform TEXT NOT NULL,
    mention_id TEXT NOT NULL,
    author TEXT DEFAULT '',
    content TEXT DEFAULT '',
    replied INTEGER NOT NULL DEFAULT 0,
    timestamp TEXT NOT NULL,
    reply_id TEXT,
    UNIQUE (platform, mention_id)
);
"""

CREATE_PORTFOLIO_SNAPSHOTS_TABLE = """
CREATE TABLE IF NOT EXISTS portfolio_snapshots (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    timestamp TEXT NOT NULL,
    total_value REAL NOT NULL,
    open_positions_count INTEGER NOT NULL,
    daily_pnl_bps INTEGER NOT NULL
);
"""

ALL_TABLES = (
    CREATE_TRADES_TABLE,
    CREATE_TRADES_INDEX,
    CREATE_SOCIAL_POSTS_TABLE,
    CREATE_MENTIONS_TABLE,
    CREATE_PORTFOLIO_SNAPSHOTS_TABLE,
)
