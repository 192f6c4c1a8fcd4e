"""Entry Enricher - assemble one self-contained record per entry.

An issue needs its timeline events; a pull request needs its full body,
its timeline events and its review comments. The sub-resources of one
entry are independent of each other and fetched concurrently.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from functools import partial
from typing import TYPE_CHECKING, Any

from github_issue_backup.github import GitHubClientError, collect_pages
from github_issue_backup.github.pagination import MAX_PER_PAGE
from github_issue_backup.logging import bind_entry
from github_issue_backup.schemas import (
    EnrichedRecord,
    EntryKind,
    IssueRecord,
    PullRecord,
    RawObject,
)

from .errors import EntryEnrichmentError

if TYPE_CHECKING:
    from github_issue_backup.github import GitHubClient, RateLimitedExecutor

    from .results import WorkItem


async def _gather_all(*aws: Awaitable[Any]) -> list[Any]:
    """Await all sub-fetches, then raise the first failure in call order.

    Unlike a plain gather, no sub-fetch is left running in the
    background when a sibling fails.
    """
    results = await asyncio.gather(*aws, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return results


class EntryEnricher:
    """Fetches the sub-resources of issues and pull requests.

    Usage:
        enricher = EntryEnricher(client, executor, "owner", "repo")
        record = await enricher.enrich(WorkItem(EntryKind.PULL, 42))
    """

    def __init__(
        self,
        client: GitHubClient,
        executor: RateLimitedExecutor,
        owner: str,
        repo: str,
        *,
        per_page: int = MAX_PER_PAGE,
    ) -> None:
        """Initialize the enricher.

        Args:
            client: GitHub API client
            executor: Rate limit executor every remote call goes through
            owner: Repository owner
            repo: Repository name
            per_page: Page size for timeline and review comment pages
        """
        self._client = client
        self._executor = executor
        self._owner = owner
        self._repo = repo
        self._per_page = per_page

    async def enrich(self, item: WorkItem) -> EnrichedRecord:
        """Build the record for a work item.

        Raises:
            EntryEnrichmentError: If any remote call for the entry failed
        """
        if item.kind is EntryKind.ISSUE:
            return await self.enrich_issue(item.number, item.issue)
        return await self.enrich_pull(item.number)

    async def enrich_issue(self, number: int, issue: RawObject | None = None) -> IssueRecord:
        """Build an issue record, reusing the listing payload when available.

        Args:
            number: Issue number
            issue: Issue payload from the listing; fetched by number if None

        Raises:
            EntryEnrichmentError: If the issue or its timeline failed
        """
        log = bind_entry(self._owner, self._repo, EntryKind.ISSUE.value, number)
        try:
            if issue is None:
                issue, events = await _gather_all(
                    self._get_issue(number),
                    self._get_timeline(number),
                )
            else:
                events = await self._get_timeline(number)
        except GitHubClientError as e:
            log.debug("Enriching issue #{} failed: {}", number, e)
            raise EntryEnrichmentError(EntryKind.ISSUE, number, e) from e

        log.debug("Enriched issue #{} ({} events)", number, len(events))
        return IssueRecord(issue=issue, events=events)

    async def enrich_pull(self, number: int) -> PullRecord:
        """Build a pull request record from its body, timeline and review comments.

        Args:
            number: Pull request number

        Raises:
            EntryEnrichmentError: If any of the three fetches failed
        """
        log = bind_entry(self._owner, self._repo, EntryKind.PULL.value, number)
        try:
            pull, events, comments = await _gather_all(
                self._get_pull(number),
                self._get_timeline(number),
                self._get_review_comments(number),
            )
        except GitHubClientError as e:
            log.debug("Enriching pull-request #{} failed: {}", number, e)
            raise EntryEnrichmentError(EntryKind.PULL, number, e) from e

        log.debug(
            "Enriched pull-request #{} ({} events, {} comments)",
            number,
            len(events),
            len(comments),
        )
        return PullRecord(pull=pull, events=events, comments=comments)

    # -------------------------------------------------------------------------
    # Remote calls
    # -------------------------------------------------------------------------
    async def _get_issue(self, number: int) -> RawObject:
        return await self._executor.execute(
            partial(self._client.get_issue, self._owner, self._repo, number)
        )

    async def _get_pull(self, number: int) -> RawObject:
        return await self._executor.execute(
            partial(self._client.get_pull_request, self._owner, self._repo, number)
        )

    async def _get_timeline(self, number: int) -> list[RawObject]:
        fetch_page = partial(
            self._client.list_timeline_page,
            self._owner,
            self._repo,
            number,
            per_page=self._per_page,
        )
        return await collect_pages(
            lambda page: fetch_page(page=page),
            self._executor,
            description=f"timeline events for #{number}",
        )

    async def _get_review_comments(self, number: int) -> list[RawObject]:
        fetch_page = partial(
            self._client.list_review_comments_page,
            self._owner,
            self._repo,
            number,
            per_page=self._per_page,
        )
        return await collect_pages(
            lambda page: fetch_page(page=page),
            self._executor,
            description=f"review comments for pull #{number}",
        )
