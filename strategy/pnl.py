"""P&L math: basis-point returns and exit classification."""
from strategy.thresholds import (
    BPS_PER_UNIT,
    DEFAULT_STOP_LOSS_BPS,
    DEFAULT_TAKE_PROFIT_BPS,
    EXIT_SIGNAL_SHIFT,
    EXIT_STOP_LOSS,
    EXIT_TAKE_PROFIT,
)


def compute_pnl_bps(entry_price: float, current_price: float) -> int:
    """Return relative to entry in basis points, rounded to an integer.

    The formula is the same for YES and NO positions: both are quoted as the
    price of the held outcome token.
    """
    if entry_price <= 0:
        raise ValueError(f"entry_price must be positive, got {entry_price}")
    return round((current_price - entry_price) / entry_price * BPS_PER_UNIT)


def classify_exit(
    pnl_bps: int,
    stop_loss_bps: int = DEFAULT_STOP_LOSS_BPS,
    take_profit_bps: int = DEFAULT_TAKE_PROFIT_BPS,
) -> str:
    """Name the reason a position is being closed."""
    if pnl_bps <= -stop_loss_bps:
        return EXIT_STOP_LOSS
    if pnl_bps >= take_profit_bps:
        return EXIT_TAKE_PROFIT
    return EXIT_SIGNAL_SHIFT


def usd_notional(
    stored_usd: float | None,
    stored_eth: float | None,
    decision_eth: float,
    eth_usd_price: float,
) -> float:
    """USD size of a position being closed.

    Prefers the stored USD amount, then the stored ETH amount converted at
    eth_usd_price, then the decision's ETH amount.
    """
    if stored_usd is not None:
        return stored_usd
    if stored_eth is not None:
        return stored_eth * eth_usd_price
    return decision_eth * eth_usd_price
