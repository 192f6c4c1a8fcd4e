"""Test fixtures for GitHub Issue Backup."""

from .rate_limit_responses import (
    RATE_LIMIT_RESPONSE_EXHAUSTED,
    RATE_LIMIT_RESPONSE_HEALTHY,
    make_rate_limit_response,
)

__all__ = [
    "RATE_LIMIT_RESPONSE_EXHAUSTED",
    "RATE_LIMIT_RESPONSE_HEALTHY",
    "make_rate_limit_response",
]
