"""Page-by-page collection of GitHub list endpoints.

GitHub paginates every list endpoint and announces further pages through
the ``Link`` response header. ``collect_pages`` walks such an endpoint one
page at a time, routing every page request through the rate limit
executor, and concatenates the items in the order GitHub returned them.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from functools import partial
from typing import TYPE_CHECKING, Generic, TypeVar

from github_issue_backup.logging import get_logger

if TYPE_CHECKING:
    from .rate_limit.executor import RateLimitedExecutor

logger = get_logger(__name__)

T = TypeVar("T")

START_PAGE = 1
"""GitHub starts page numbering at 1."""

MAX_PER_PAGE = 100
"""Largest page size GitHub accepts."""


@dataclass
class Page(Generic[T]):
    """One page of a list endpoint."""

    items: list[T] = field(default_factory=list)
    """Items of this page in the order GitHub returned them."""

    next_url: str | None = None
    """URL of the next page, None on the last page."""

    @property
    def has_next(self) -> bool:
        """True if GitHub announced another page."""
        return self.next_url is not None


PageFetcher = Callable[[int], Awaitable[Page[T]]]


async def collect_pages(
    fetch_page: PageFetcher[T],
    executor: RateLimitedExecutor,
    *,
    start_page: int = START_PAGE,
    description: str = "items",
) -> list[T]:
    """Fetch every page of a list endpoint and concatenate the items.

    Args:
        fetch_page: Coroutine function returning the page with the given number
        executor: Rate limit executor every page request goes through
        start_page: First page number to request (1-based)
        description: What is being collected, for debug logging

    Returns:
        All items across pages, in remote order

    Raises:
        GitHubClientError: If any page fails; no partial result is returned
    """
    items: list[T] = []
    page_number = start_page
    while True:
        page = await executor.execute(partial(fetch_page, page_number))
        items.extend(page.items)
        logger.debug("Loaded {} {} (page {})", len(items), description, page_number)
        if not page.has_next:
            return items
        page_number += 1
