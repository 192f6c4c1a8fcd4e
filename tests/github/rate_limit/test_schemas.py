"""Contract tests for rate limit Pydantic schemas.

These tests verify that schemas correctly parse the GitHub /rate_limit
response.
"""

from datetime import UTC, datetime, timedelta

import pytest
from pydantic import ValidationError

from github_issue_backup.github.rate_limit.schemas import PoolRateLimit, RateLimitPool
from tests.fixtures.rate_limit_responses import (
    RATE_LIMIT_RESPONSE_EXHAUSTED,
    RATE_LIMIT_RESPONSE_HEALTHY,
)


class TestRateLimitPool:
    """Tests for RateLimitPool enum."""

    def test_pool_values_are_strings(self) -> None:
        """Pool enum values should be lowercase strings."""
        for pool in RateLimitPool:
            assert pool.value == pool.value.lower()

    def test_core_pool(self) -> None:
        assert RateLimitPool("core") is RateLimitPool.CORE


class TestPoolRateLimit:
    """Tests for PoolRateLimit schema."""

    def test_from_api_response_healthy(self) -> None:
        """Parse a healthy core pool entry."""
        data = RATE_LIMIT_RESPONSE_HEALTHY["resources"]["core"]
        status = PoolRateLimit.from_api_response(data)

        assert status.pool == RateLimitPool.CORE
        assert status.limit == 5000
        assert status.remaining == 4500
        assert status.used == 500
        assert status.reset_at.tzinfo is not None
        assert not status.is_exhausted

    def test_from_api_response_exhausted(self) -> None:
        """Zero remaining requests mark the pool as exhausted."""
        data = RATE_LIMIT_RESPONSE_EXHAUSTED["resources"]["core"]
        status = PoolRateLimit.from_api_response(data)

        assert status.is_exhausted
        assert 0 < status.seconds_until_reset <= 30

    def test_seconds_until_reset_never_negative(self) -> None:
        status = PoolRateLimit(
            limit=5000,
            remaining=0,
            used=5000,
            reset_at=datetime.now(UTC) - timedelta(minutes=5),
        )
        assert status.seconds_until_reset == 0.0

    def test_negative_remaining_rejected(self) -> None:
        with pytest.raises(ValidationError):
            PoolRateLimit(limit=5000, remaining=-1, used=0, reset_at=datetime.now(UTC))

    def test_is_exhausted_serialized(self) -> None:
        """The computed field is part of the JSON output."""
        data = RATE_LIMIT_RESPONSE_EXHAUSTED["resources"]["core"]
        dumped = PoolRateLimit.from_api_response(data).model_dump()
        assert dumped["is_exhausted"] is True
