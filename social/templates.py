"""Post templates, one renderer per post type and platform."""
from shared.schemas import Decision, Platform, RoundStats, Trade

PLATFORM_LIMITS = {
    Platform.TWITTER: 280,
    Platform.FARCASTER: 1024,
}


def fit(text: str, platform: Platform) -> str:
    """Trim text to the platform's length limit."""
    limit = PLATFORM_LIMITS[platform]
    text = text.strip()
    if len(text) <= limit:
        return text
    return text[: limit - 1].rstrip() + "…"


def _cents(price: float) -> str:
    return f"{price * 100:.1f}¢"


def _bps(pnl_bps: int) -> str:
    return f"{pnl_bps / 100:+.2f}%"


def _short_hash(tx_hash: str) -> str:
    return tx_hash if len(tx_hash) <= 14 else f"{tx_hash[:8]}…{tx_hash[-4:]}"


def trade_entry_post(trade: Trade, decision: Decision, platform: Platform) -> str:
    head = (
        f"🦀 New position: {trade.position.value} on \"{trade.market_name}\"\n"
        f"Size: {trade.amount_eth:.4f} ETH @ {_cents(trade.entry_price)}\n"
        f"Confidence: {decision.confidence:.0%}"
    )
    if platform == Platform.TWITTER:
        return fit(f"{head}\ntx {_short_hash(trade.entry_tx_hash)}", platform)
    return fit(f"{head}\n\nWhy: {decision.reasoning}\n\ntx {trade.entry_tx_hash}", platform)


def trade_exit_post(trade: Trade, exit_reason: str, platform: Platform) -> str:
    pnl = trade.pnl_bps or 0
    mood = "🟢" if pnl > 0 else "🔴" if pnl < 0 else "⚪"
    head = (
        f"{mood} Closed {trade.position.value} on \"{trade.market_name}\"\n"
        f"{_cents(trade.entry_price)} → {_cents(trade.exit_price or 0.0)} ({_bps(pnl)})\n"
        f"Reason: {exit_reason}"
    )
    if platform == Platform.TWITTER:
        return fit(head, platform)
    return fit(f"{head}\n\ntx {trade.exit_tx_hash or ''}", platform)


def daily_summary_post(
    total_value: float,
    daily_pnl_bps: int,
    trades_today: int,
    open_positions: int,
    platform: Platform,
) -> str:
    text = (
        f"📊 Daily crab report\n"
        f"Wallet: {total_value:.4f} ETH\n"
        f"Closed today: {trades_today} ({_bps(daily_pnl_bps)} summed)\n"
        f"Open positions: {open_positions}"
    )
    if platform == Platform.FARCASTER:
        text += "\n\nStill sideways-walking toward alpha."
    return fit(text, platform)


def market_reflection_post(
    commentary: str,
    risk_assessment: str | None,
    portfolio_recommendation: str | None,
    platform: Platform,
) -> str:
    if platform == Platform.TWITTER:
        return fit(f"🦀 Market read: {commentary}", platform)
    parts = [f"🦀 Market read: {commentary}"]
    if risk_assessment:
        parts.append(f"Risk: {risk_assessment}")
    if portfolio_recommendation:
        parts.append(f"Plan: {portfolio_recommendation}")
    return fit("\n\n".join(parts), platform)


def round_summary_post(stats: RoundStats, platform: Platform) -> str:
    text = (
        f"🔁 Round done\n"
        f"Scanned {stats.markets_scanned} markets, {stats.decisions_count} decisions, "
        f"{stats.trades_executed} trades executed\n"
        f"Open positions: {stats.open_positions} | Wallet: {stats.portfolio_eth:.4f} ETH"
    )
    if stats.has_commentary:
        text += "\nMarket read posted above."
    return fit(text, platform)


def notable_trade_post(trade: Trade, platform: Platform) -> str:
    pnl = trade.pnl_bps or 0
    label = "Big win" if pnl > 0 else "Painful lesson"
    text = (
        f"🏆 {label}: {trade.position.value} on \"{trade.market_name}\" closed at {_bps(pnl)}\n"
        f"{_cents(trade.entry_price)} → {_cents(trade.exit_price or 0.0)}"
    )
    if platform == Platform.FARCASTER:
        text += f"\n\nEntry tx {trade.entry_tx_hash}\nExit tx {trade.exit_tx_hash or ''}"
    return fit(text, platform)


def balance_alert_post(balance_eth: float, minimum_eth: float, platform: Platform) -> str:
    return fit(
        f"⚠️ Low balance alert: {balance_eth:.4f} ETH remaining "
        f"(minimum {minimum_eth:.4f}). Need to refuel soon! 🦀",
        platform,
    )


def launch_post(wallet_url: str, platform: Platform) -> str:
    text = f"🦀 CrabTrader is live. Every trade is on-chain and posted here.\nWallet: {wallet_url}"
    if platform == Platform.FARCASTER:
        text += "\n\nMention me to chat about markets."
    return fit(text, platform)
