"""Fetch Orchestrator - walk the issue listing and feed the writer.

Flow:
    1. Choose the listing mode from the previous backup state
    2. For each listing page: turn its items into work items, enrich
       them and send every finished record to the channel
    3. Retry the entries the previous run failed on
    4. Return the numbers that could not be enriched
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from functools import partial
from typing import TYPE_CHECKING

from github_issue_backup.github import START_PAGE, GitHubClientError
from github_issue_backup.github.pagination import MAX_PER_PAGE
from github_issue_backup.logging import bind_repo
from github_issue_backup.schemas import BackupState, EntryKind

from .enums import ListingMode
from .errors import EntryEnrichmentError, ListingFetchError
from .results import FetchResult, WorkItem

if TYPE_CHECKING:
    from github_issue_backup.github import GitHubClient, RateLimitedExecutor

    from .channel import RecordChannel
    from .enricher import EntryEnricher

FULL_BACKUP_SINCE = datetime(1970, 1, 2, tzinfo=UTC)
"""Lower bound for a full backup.

GitHub ignores ``since`` when given the epoch itself, so the day after
is used instead.
"""


class FetchOrchestrator:
    """Produces enriched records for every changed or previously failed entry.

    Usage:
        orchestrator = FetchOrchestrator(client, executor, enricher, "owner", "repo")
        result = await orchestrator.run(channel, previous_state)
        print(result.failed_issues, result.failed_pulls)
    """

    def __init__(
        self,
        client: GitHubClient,
        executor: RateLimitedExecutor,
        enricher: EntryEnricher,
        owner: str,
        repo: str,
        *,
        per_page: int = MAX_PER_PAGE,
        concurrency: int = 1,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            client: GitHub API client
            executor: Rate limit executor every listing request goes through
            enricher: Builds the record of a single entry
            owner: Repository owner
            repo: Repository name
            per_page: Listing page size
            concurrency: Entries of one page enriched in parallel (1 = one at a time)
        """
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self._client = client
        self._executor = executor
        self._enricher = enricher
        self._owner = owner
        self._repo = repo
        self._per_page = per_page
        self._concurrency = concurrency
        self._log = bind_repo(owner, repo)

    @staticmethod
    def listing_mode(state: BackupState | None) -> ListingMode:
        """Full backup without previous state, incremental otherwise."""
        return ListingMode.FULL if state is None else ListingMode.INCREMENTAL

    @staticmethod
    def listing_since(state: BackupState | None) -> datetime:
        """Lower bound of the listing for the given previous state."""
        return FULL_BACKUP_SINCE if state is None else state.last_backup

    @staticmethod
    def retry_items(state: BackupState | None) -> list[WorkItem]:
        """Work items for the entries the previous run failed on.

        Retried issues are fetched fresh since their listing payload was
        not kept.
        """
        if state is None:
            return []
        return [WorkItem(EntryKind.ISSUE, n) for n in state.failed_issues] + [
            WorkItem(EntryKind.PULL, n) for n in state.failed_pulls
        ]

    async def run(self, channel: RecordChannel, state: BackupState | None) -> FetchResult:
        """Fetch every changed entry plus previous failures into the channel.

        Args:
            channel: Channel the writer drains
            state: Previous backup state, None for a full backup

        Returns:
            FetchResult with the numbers that could not be enriched

        Raises:
            ListingFetchError: If a listing page could not be fetched
            ChannelClosedError: If the writer stopped
        """
        mode = self.listing_mode(state)
        since = self.listing_since(state)
        result = FetchResult()
        processed: set[tuple[EntryKind, int]] = set()

        self._log.info(
            "Start to load issues and pulls for {}/{} ({} backup since {})",
            self._owner,
            self._repo,
            mode.value,
            since.isoformat(),
        )

        page_number = START_PAGE
        while True:
            try:
                page = await self._executor.execute(
                    partial(
                        self._client.list_issues_page,
                        self._owner,
                        self._repo,
                        page=page_number,
                        since=since,
                        sort=mode.sort,
                        per_page=self._per_page,
                    )
                )
            except GitHubClientError as e:
                self._log.error("Could not load issue page {}: {}", page_number, e)
                raise ListingFetchError(self._owner, self._repo, page_number, e) from e

            items = [WorkItem.from_summary(summary) for summary in page.items]
            self._log.debug("Issue page {} lists {} entries", page_number, len(items))
            await self._process(items, channel, result)
            processed.update(item.key for item in items)

            if not page.has_next:
                break
            page_number += 1

        retries = [item for item in self.retry_items(state) if item.key not in processed]
        if retries:
            self._log.info("Retrying {} entries that failed in the previous run", len(retries))
            await self._process(retries, channel, result)

        self._log.info(
            "Loaded {} issues and {} pulls from {}/{}",
            result.loaded_issues,
            result.loaded_pulls,
            self._owner,
            self._repo,
        )
        return result

    async def _process(
        self,
        items: list[WorkItem],
        channel: RecordChannel,
        result: FetchResult,
    ) -> None:
        """Enrich work items with bounded parallelism and send the records."""
        semaphore = asyncio.Semaphore(self._concurrency)

        async def process_one(item: WorkItem) -> None:
            async with semaphore:
                await self._process_item(item, channel, result)

        await asyncio.gather(*(process_one(item) for item in items))

    async def _process_item(
        self,
        item: WorkItem,
        channel: RecordChannel,
        result: FetchResult,
    ) -> None:
        try:
            record = await self._enricher.enrich(item)
        except EntryEnrichmentError as e:
            self._log.error("{}", e)
            result.record_failure(item.kind, item.number)
            return

        await channel.send(record)
        result.record_success(item.kind)
