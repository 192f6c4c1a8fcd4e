"""Pydantic schemas for GitHub API rate limit data.

These schemas represent rate limit information from the
GET /rate_limit API endpoint.
"""

from datetime import UTC, datetime
from enum import StrEnum
from typing import Self

from pydantic import BaseModel, Field, computed_field


class RateLimitPool(StrEnum):
    """GitHub rate limit resource pools.

    Each pool has its own separate quota. Every call the backup makes
    uses 'core'.
    See: https://docs.github.com/en/rest/rate-limit/rate-limit
    """

    CORE = "core"
    SEARCH = "search"
    GRAPHQL = "graphql"


class PoolRateLimit(BaseModel):
    """Rate limit information for a single resource pool."""

    pool: RateLimitPool = Field(default=RateLimitPool.CORE, description="Resource pool name")
    limit: int = Field(ge=0, description="Maximum requests allowed per hour")
    remaining: int = Field(ge=0, description="Requests remaining in current window")
    used: int = Field(ge=0, description="Requests used in current window")
    reset_at: datetime = Field(description="UTC datetime when limit resets")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_exhausted(self) -> bool:
        """True when no requests remain in the current window."""
        return self.remaining == 0

    @property
    def seconds_until_reset(self) -> float:
        """Seconds until rate limit resets (0 if already past)."""
        delta = self.reset_at - datetime.now(UTC)
        return max(0.0, delta.total_seconds())

    @classmethod
    def from_api_response(
        cls, data: dict[str, int], pool: RateLimitPool = RateLimitPool.CORE
    ) -> Self:
        """Create from one resource entry of the /rate_limit response.

        Args:
            data: Dict with limit, remaining, used, reset (Unix timestamp)
            pool: Which resource pool this entry belongs to

        Returns:
            PoolRateLimit instance
        """
        return cls(
            pool=pool,
            limit=data["limit"],
            remaining=data["remaining"],
            used=data["used"],
            reset_at=datetime.fromtimestamp(data["reset"], tz=UTC),
        )
