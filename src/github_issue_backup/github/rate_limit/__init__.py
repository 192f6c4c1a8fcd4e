"""Rate limit handling for GitHub API.

This module provides the single retry point of the backup: a request
executor that waits out an exhausted rate limit window once.
"""

from .executor import RateLimitedExecutor
from .schemas import PoolRateLimit, RateLimitPool

__all__ = [
    "PoolRateLimit",
    "RateLimitPool",
    "RateLimitedExecutor",
]
