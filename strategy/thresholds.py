"""Constants shared by the execution and reporting layers."""

# Expected price submitted for a BUY when the cycle's snapshot has no quote
# for the market. A sentinel meaning "no quote", not an observed price.
FALLBACK_EXPECTED_PRICE = 0.5

# One basis point is 1/100 of a percent
BPS_PER_UNIT = 10_000

# Default risk-exit thresholds (bps of entry price)
DEFAULT_STOP_LOSS_BPS = 1500
DEFAULT_TAKE_PROFIT_BPS = 3000

# Exit reasons attached to closed trades
EXIT_STOP_LOSS = "stop-loss"
EXIT_TAKE_PROFIT = "take-profit"
EXIT_SIGNAL_SHIFT = "signal-shift"

# Number of headlines handed to the analyzer each cycle
NEWS_HEADLINE_COUNT = 5
