"""Tests for expiry reconciliation and staleness."""

from datetime import datetime, timedelta, timezone

from wi_registry_auth import (
    DEFAULT_REFRESH_MARGIN,
    DEFAULT_REGISTRY_TOKEN_LIFETIME,
    earlier_expiry,
    is_stale,
)

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def test_registry_window_wins_for_long_lived_identity_token():
    """Identity token valid for 12h: registry token expires first."""
    identity_expiry = NOW + timedelta(hours=12)
    result = earlier_expiry(identity_expiry, now=NOW)
    assert result != identity_expiry
    assert result == NOW + DEFAULT_REGISTRY_TOKEN_LIFETIME


def test_identity_expiry_wins_inside_window():
    """Identity token valid for 12m is returned exactly."""
    identity_expiry = NOW + timedelta(minutes=12)
    assert earlier_expiry(identity_expiry, now=NOW) == identity_expiry


def test_default_now_is_current_time():
    """Without an injected clock, a far-future expiry is capped near now + 3h."""
    before = datetime.now(timezone.utc)
    result = earlier_expiry(before + timedelta(hours=12))
    after = datetime.now(timezone.utc)
    assert before + DEFAULT_REGISTRY_TOKEN_LIFETIME <= result <= after + DEFAULT_REGISTRY_TOKEN_LIFETIME


def test_custom_registry_lifetime():
    identity_expiry = NOW + timedelta(hours=2)
    assert earlier_expiry(identity_expiry, now=NOW, registry_token_lifetime=timedelta(hours=1)) == (
        NOW + timedelta(hours=1)
    )


def test_already_expired_identity_token():
    identity_expiry = NOW - timedelta(minutes=1)
    assert earlier_expiry(identity_expiry, now=NOW) == identity_expiry


class TestIsStale:
    """Staleness predicate."""

    def test_expired_is_stale(self):
        assert is_stale(NOW - timedelta(seconds=1), NOW)

    def test_expiring_now_is_stale(self):
        assert is_stale(NOW, NOW, margin=timedelta(0))

    def test_one_hour_out_is_fresh(self):
        assert not is_stale(NOW + timedelta(hours=1), NOW)

    def test_inside_margin_is_stale(self):
        assert is_stale(NOW + DEFAULT_REFRESH_MARGIN - timedelta(seconds=1), NOW)

    def test_just_outside_margin_is_fresh(self):
        assert not is_stale(NOW + DEFAULT_REFRESH_MARGIN + timedelta(seconds=1), NOW)
