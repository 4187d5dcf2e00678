"""
Tests for board access control.
"""

import pytest

from bingo_engine.errors import UnauthorizedError, ValidationError

TTL_SECONDS = 30 * 60


def test_starts_locked(guard):
    assert not guard.is_unlocked()
    with pytest.raises(UnauthorizedError):
        guard.require(None)


def test_unlock_issues_token(guard):
    auth = guard.unlock("1975")
    assert auth["ttlMs"] == TTL_SECONDS * 1000
    assert guard.is_unlocked()
    guard.require(auth["token"])


def test_unlock_trims_pin(guard):
    guard.unlock("  1975 ")
    assert guard.is_unlocked()


@pytest.mark.parametrize("pin", ["", "1976", None, "19750"])
def test_unlock_wrong_pin(guard, pin):
    with pytest.raises(UnauthorizedError):
        guard.unlock(pin)
    assert not guard.is_unlocked()


def test_wrong_token_rejected(guard):
    guard.unlock("1975")
    with pytest.raises(UnauthorizedError) as exc:
        guard.require("not-the-token")
    assert exc.value.message == "board token invalid"


def test_token_expires(guard, clock):
    token = guard.unlock("1975")["token"]
    clock.advance(TTL_SECONDS - 1)
    guard.require(token)
    clock.advance(2)
    assert not guard.is_unlocked()
    with pytest.raises(UnauthorizedError):
        guard.require(token)


def test_refresh_replaces_token(guard, clock):
    old = guard.unlock("1975")["token"]
    clock.advance(TTL_SECONDS - 10)
    new = guard.refresh(old)["token"]
    assert new != old
    with pytest.raises(UnauthorizedError):
        guard.require(old)
    clock.advance(60)
    guard.require(new)


def test_second_unlock_invalidates_first(guard):
    first = guard.unlock("1975")["token"]
    second = guard.unlock("1975")["token"]
    guard.require(second)
    with pytest.raises(UnauthorizedError):
        guard.require(first)


def test_lock(guard):
    token = guard.unlock("1975")["token"]
    guard.lock()
    assert not guard.is_unlocked()
    with pytest.raises(UnauthorizedError):
        guard.require(token)


def test_change_pin(guard):
    token = guard.unlock("1975")["token"]
    guard.change_pin(token, "1975", "24680")
    # The live token survives a pin change
    guard.require(token)
    guard.lock()
    with pytest.raises(UnauthorizedError):
        guard.unlock("1975")
    guard.unlock("24680")


def test_change_pin_requires_token(guard):
    with pytest.raises(UnauthorizedError):
        guard.change_pin(None, "1975", "2468")


def test_change_pin_wrong_current(guard):
    token = guard.unlock("1975")["token"]
    with pytest.raises(ValidationError):
        guard.change_pin(token, "0000", "2468")


@pytest.mark.parametrize("next_pin", ["123", "123456789012", ""])
def test_change_pin_bad_length(guard, next_pin):
    token = guard.unlock("1975")["token"]
    with pytest.raises(ValidationError):
        guard.change_pin(token, "1975", next_pin)
    guard.lock()
    guard.unlock("1975")
