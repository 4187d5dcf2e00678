import pytest
from pydantic import ValidationError

from bingo_engine.config import BoardConfig


def test_defaults():
    config = BoardConfig()
    assert config.board_pin == "1975"
    assert config.max_cards == 32
    assert config.allowed_origins == ["*"]


def test_from_env(monkeypatch):
    monkeypatch.setenv("BINGO_BOARD_PIN", "8080")
    monkeypatch.setenv("BINGO_MAX_CARDS", "4")
    monkeypatch.setenv("BINGO_PATTERN_CYCLE_MS", "0")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("HOST", "127.0.0.1")
    monkeypatch.setenv("PORT", "9001")
    monkeypatch.setenv("BINGO_ALLOWED_ORIGINS", "http://a.test, http://b.test")
    config = BoardConfig.from_env()
    assert config.board_pin == "8080"
    assert config.max_cards == 4
    assert config.pattern_cycle_ms == 0
    assert config.log_level == "DEBUG"
    assert config.host == "127.0.0.1"
    assert config.port == 9001
    assert config.allowed_origins == ["http://a.test", "http://b.test"]


@pytest.mark.parametrize("pin", ["12", "123456789012"])
def test_invalid_pin(pin):
    with pytest.raises(ValidationError):
        BoardConfig(board_pin=pin)


def test_invalid_bounds():
    with pytest.raises(ValidationError):
        BoardConfig(max_cards=-1)
    with pytest.raises(ValidationError):
        BoardConfig(send_timeout=0)
