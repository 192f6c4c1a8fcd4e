"""GitHub API client module.

This module provides:
- GitHubClient: Async GitHub API client returning raw JSON pages
- RateLimitedExecutor: Single retry point that waits out exhausted rate limits
- collect_pages / Page: Concatenation of paginated list endpoints
"""

from .client import GitHubClient
from .exceptions import (
    GitHubApiError,
    GitHubAuthenticationError,
    GitHubClientError,
    GitHubNotFoundError,
    GitHubRateLimitError,
    GitHubResponseError,
    GitHubTransportError,
)
from .pagination import MAX_PER_PAGE, START_PAGE, Page, collect_pages
from .rate_limit import PoolRateLimit, RateLimitedExecutor, RateLimitPool

__all__ = [
    # Client
    "GitHubClient",
    # Exceptions
    "GitHubApiError",
    "GitHubAuthenticationError",
    "GitHubClientError",
    "GitHubNotFoundError",
    "GitHubRateLimitError",
    "GitHubResponseError",
    "GitHubTransportError",
    # Pagination
    "MAX_PER_PAGE",
    "START_PAGE",
    "Page",
    "collect_pages",
    # Rate limits
    "PoolRateLimit",
    "RateLimitPool",
    "RateLimitedExecutor",
]
