"""Backup Service - run the fetcher and the writer side by side.

Flow:
    1. Capture the start time and load the previous state
    2. Start the fetch orchestrator as a task feeding a bounded channel
    3. Drain the channel with the writer in the current task
    4. Join the fetch task and, if anything was written, save the new state
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING

from github_issue_backup.config import BackupConfig, get_settings
from github_issue_backup.github import RateLimitedExecutor
from github_issue_backup.logging import LogContext, bind_repo
from github_issue_backup.schemas import BackupState, EntryKind

from .channel import RecordChannel
from .enricher import EntryEnricher
from .errors import BackupError, DirectoryCreationError, TaskJoinError, WriteError
from .orchestrator import FetchOrchestrator
from .results import BackupReport, FetchResult, format_failure_summary
from .state import BackupStateStore
from .writer import RecordWriter

if TYPE_CHECKING:
    from github_issue_backup.github import GitHubClient


class BackupService:
    """Mirrors the issues and pull requests of one repository to a directory.

    Usage:
        async with GitHubClient(token) as client:
            service = BackupService(client, Path("/backups/owner-repo"), "owner", "repo")
            service.prepare_destination()
            report = await service.run()
            sys.exit(report.exit_code)

    Fatal conditions raise a BackupError subclass carrying the exit code.
    Entry-level failures do not raise; they end up in the report.
    """

    def __init__(
        self,
        client: GitHubClient,
        destination: Path,
        owner: str,
        repo: str,
        *,
        config: BackupConfig | None = None,
    ) -> None:
        """Initialize the backup service.

        Args:
            client: GitHub API client
            destination: Backup root directory
            owner: Repository owner
            repo: Repository name
            config: Pipeline configuration (uses settings if not provided)
        """
        self._config = config or get_settings().backup
        self._destination = destination
        self._owner = owner
        self._repo = repo
        self._log = bind_repo(owner, repo)

        executor = RateLimitedExecutor(
            client, reset_margin_seconds=self._config.rate_limit_margin_seconds
        )
        enricher = EntryEnricher(client, executor, owner, repo, per_page=self._config.per_page)
        self._orchestrator = FetchOrchestrator(
            client,
            executor,
            enricher,
            owner,
            repo,
            per_page=self._config.per_page,
            concurrency=self._config.entry_concurrency,
        )
        self._writer = RecordWriter(destination)
        self._store = BackupStateStore(destination)

    @property
    def state_store(self) -> BackupStateStore:
        return self._store

    def prepare_destination(self) -> None:
        """Create the ``issues`` and ``pulls`` directories if missing.

        Raises:
            DirectoryCreationError: If a directory cannot be created
        """
        for kind in EntryKind:
            path = self._destination / kind.directory
            self._log.debug("Ensuring directory {}", path)
            try:
                path.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise DirectoryCreationError(path, e) from e

    async def run(self) -> BackupReport:
        """Run one backup.

        Returns:
            BackupReport for a run without fatal errors

        Raises:
            ListingFetchError: If the issue listing could not be fetched
            WriteError: If a record could not be written
            StateWriteError: If the new state could not be saved
            TaskJoinError: If the fetch task failed unexpectedly
        """
        with LogContext(repo=f"{self._owner}/{self._repo}"):
            started_at = datetime.now(UTC)
            previous_state = self._store.load()
            channel = RecordChannel(self._config.channel_capacity)

            producer = asyncio.create_task(self._produce(channel, previous_state))
            try:
                written = await self._writer.drain(channel)
            except WriteError as e:
                self._log.error("{}", e)
                producer.cancel()
                await asyncio.gather(producer, return_exceptions=True)
                raise

            fetch_result = await self._join(producer)
            report = BackupReport(
                started_at=started_at,
                fetch_result=fetch_result,
                records_written=written,
            )

            if written > 0:
                self._store.save(self._store.build(started_at, fetch_result))
                report.state_written = True

            if fetch_result.has_failures:
                self._log.warning(
                    format_failure_summary(fetch_result.failed_issues, fetch_result.failed_pulls)
                )
            elif written == 0:
                self._log.info("No updated issues or pull requests to save.")

            return report

    async def _produce(
        self, channel: RecordChannel, previous_state: BackupState | None
    ) -> FetchResult:
        """Run the orchestrator and close the channel when it stops."""
        try:
            result = await self._orchestrator.run(channel, previous_state)
        except Exception:
            await channel.close()
            raise
        await channel.close()
        return result

    async def _join(self, producer: asyncio.Task[FetchResult]) -> FetchResult:
        """Wait for the fetch task and map unexpected failures."""
        try:
            return await producer
        except BackupError as e:
            self._log.error("Error loading issues and pulls: {}", e)
            raise
        except Exception as e:
            self._log.exception("Fetch task failed unexpectedly")
            raise TaskJoinError(f"Failed to join fetch task: {e}") from e
