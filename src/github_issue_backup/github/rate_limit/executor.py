"""Rate limit aware execution of single GitHub API calls.

Every remote call of the backup goes through ``RateLimitedExecutor``.
When GitHub rejects a call, the executor asks the /rate_limit endpoint
whether the core quota is used up. If it is, it sleeps until the window
resets (plus a small margin) and tries the call exactly once more.
No other layer retries.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, TypeVar

from github_issue_backup.github.exceptions import GitHubApiError, GitHubClientError
from github_issue_backup.logging import get_logger

if TYPE_CHECKING:
    from github_issue_backup.github.client import GitHubClient

logger = get_logger(__name__)

T = TypeVar("T")

MAX_ATTEMPTS = 2
"""The original attempt plus one retry after a rate limit reset."""

DEFAULT_RESET_MARGIN_SECONDS = 2.0


class RateLimitedExecutor:
    """Runs GitHub calls with at most one retry after a rate limit wait.

    Usage:
        executor = RateLimitedExecutor(client)
        issue = await executor.execute(
            lambda: client.get_issue("owner", "repo", 7)
        )
    """

    def __init__(
        self,
        client: GitHubClient,
        *,
        reset_margin_seconds: float = DEFAULT_RESET_MARGIN_SECONDS,
    ) -> None:
        """Initialize the executor.

        Args:
            client: Client used to query the current rate limit status
            reset_margin_seconds: Extra wait past GitHub's reset time
        """
        self._client = client
        self._reset_margin = reset_margin_seconds

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        attempt: int = 0,
    ) -> T:
        """Run a remote call, retrying once if the rate limit was exhausted.

        Args:
            operation: Zero-argument coroutine function performing the call
            attempt: Attempts already spent on this call (0 for a fresh call)

        Returns:
            Result of the operation

        Raises:
            GitHubApiError: If GitHub rejected the call and no retry applies
            GitHubClientError: Transport and decoding errors, never retried
        """
        while True:
            try:
                return await operation()
            except GitHubApiError as e:
                if attempt + 1 >= MAX_ATTEMPTS:
                    raise
                if not await self._wait_for_reset(e):
                    raise
                attempt += 1

    async def _wait_for_reset(self, error: GitHubApiError) -> bool:
        """Sleep until the rate limit window resets, if it is exhausted.

        Args:
            error: The rejection that triggered the check

        Returns:
            True if the quota was exhausted and the wait is over,
            False if the rejection had another cause
        """
        try:
            status = await self._client.get_rate_limit()
        except GitHubClientError as status_error:
            logger.warning("Could not query rate limit after '{}': {}", error, status_error)
            return False

        if status.remaining > 0:
            logger.debug(
                "Request rejected with {} requests remaining, not a rate limit: {}",
                status.remaining,
                error,
            )
            return False

        wait_seconds = status.seconds_until_reset + self._reset_margin
        logger.info(
            "GitHub rate limit hit (remaining={}): waiting {:.0f}s until reset at {}",
            status.remaining,
            wait_seconds,
            status.reset_at.isoformat(),
        )
        await asyncio.sleep(wait_seconds)
        logger.info("GitHub rate limit has reset")
        return True
