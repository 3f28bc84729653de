"""Tests for shared.config."""
import pytest

from shared.config import Config, ConfigError

VALID_KEY = "0x" + "11" * 32
RECIPIENT = "0x" + "ab" * 20


def test_config_defaults():
    cfg = Config()
    assert cfg.TRADING_MODE == "paper"
    assert cfg.STOP_LOSS_BPS == 1500
    assert cfg.TAKE_PROFIT_BPS == 3000
    assert cfg.DIGEST_INTERVAL_SECONDS == 86400
    assert cfg.is_live is False
    assert cfg.tips_enabled is False


def test_config_from_env(monkeypatch):
    monkeypatch.setenv("TRADING_MODE", "live")
    monkeypatch.setenv("MAX_POSITION_ETH", "0.1")
    monkeypatch.setenv("DISABLE_MENTIONS", "true")
    monkeypatch.setenv("TIP_RECIPIENTS", f"{RECIPIENT}, 0x{'cd' * 20}")
    cfg = Config.from_env()
    assert cfg.is_live is True
    assert cfg.MAX_POSITION_ETH == 0.1
    assert cfg.DISABLE_MENTIONS is True
    assert cfg.DISABLE_TIPS is False
    assert cfg.tip_recipients_list == [RECIPIENT, "0x" + "cd" * 20]
    assert cfg.tips_enabled is True


def test_validate_accepts_minimal_config():
    Config(WALLET_PRIVATE_KEY=VALID_KEY).validate_or_raise()


def test_validate_collects_all_problems():
    cfg = Config(TRADING_MODE="yolo", LOOP_INTERVAL_SECONDS=0, ETH_USD_PRICE=-1)
    with pytest.raises(ConfigError) as exc:
        cfg.validate_or_raise()
    problems = " ".join(exc.value.problems)
    assert "TRADING_MODE" in problems
    assert "WALLET_PRIVATE_KEY" in problems
    assert "LOOP_INTERVAL_SECONDS" in problems
    assert "ETH_USD_PRICE" in problems


def test_validate_rejects_bad_tip_recipient():
    cfg = Config(WALLET_PRIVATE_KEY=VALID_KEY, TIP_RECIPIENTS="not-an-address")
    with pytest.raises(ConfigError, match="TIP_RECIPIENTS"):
        cfg.validate_or_raise()


def test_validate_ignores_recipients_when_tips_disabled():
    cfg = Config(WALLET_PRIVATE_KEY=VALID_KEY, TIP_RECIPIENTS="nope", DISABLE_TIPS=True)
    cfg.validate_or_raise()


def test_from_env_collects_unparseable_numbers(monkeypatch):
    monkeypatch.setenv("STOP_LOSS_BPS", "abc")
    monkeypatch.setenv("LOOP_INTERVAL_SECONDS", "five minutes")
    with pytest.raises(ConfigError) as exc:
        Config.from_env()
    problems = " ".join(exc.value.problems)
    assert "STOP_LOSS_BPS" in problems
    assert "LOOP_INTERVAL_SECONDS" in problems
