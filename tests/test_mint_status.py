"""Tests for the rate limit status view."""

import pytest

from conftest import REFERENCE_TIME, limited_policy
from mintgate.app.exceptions import InvalidPolicyError, InvalidTimestampError
from mintgate.app.services.mint_throttle import (
    LastOperation,
    PolicySnapshot,
    RateLimitStatus,
    status,
)


class TestStatus:
    """Tests for status()."""

    def test_rate_limit_disabled(self):
        """Test status with throttling disabled."""
        policy = PolicySnapshot(None, LastOperation("2026-01-15T12:00:00Z", 100))

        result = status(policy, REFERENCE_TIME)

        assert result == RateLimitStatus(allowed=True, is_rate_limit_enabled=False)

    def test_enabled_and_allowed(self):
        """Test status when a mint is allowed."""
        result = status(limited_policy(ms_ago=5000), REFERENCE_TIME)

        assert result.allowed is True
        assert result.is_rate_limit_enabled is True
        assert result.wait_ms is None
        assert result.wait_seconds is None

    def test_rate_limited(self):
        """Test status when a mint must wait."""
        result = status(limited_policy(max_tps="1", count=5, ms_ago=3000), REFERENCE_TIME)

        assert result.allowed is False
        assert result.is_rate_limit_enabled is True
        assert result.wait_ms == 2000
        assert result.wait_seconds == 2.0

    def test_idempotent(self):
        """Test that repeated calls agree."""
        policy = limited_policy(ms_ago=500)

        assert status(policy, REFERENCE_TIME) == status(policy, REFERENCE_TIME)

    def test_to_dict(self):
        """Test status serialization."""
        allowed = status(PolicySnapshot(), REFERENCE_TIME).to_dict()
        denied = status(limited_policy(ms_ago=750), REFERENCE_TIME).to_dict()

        assert allowed == {"allowed": True, "is_rate_limit_enabled": False}
        assert denied == {
            "allowed": False,
            "is_rate_limit_enabled": True,
            "wait_ms": 250,
            "wait_seconds": 0.25,
        }

    def test_propagates_invalid_policy(self):
        """Test that a malformed rate raises."""
        with pytest.raises(InvalidPolicyError):
            status(limited_policy(max_tps="-1"), REFERENCE_TIME)

    def test_propagates_invalid_timestamp(self):
        """Test that a malformed timestamp raises."""
        with pytest.raises(InvalidTimestampError):
            status(PolicySnapshot("100", LastOperation("yesterday", 1)), REFERENCE_TIME)
