"""Result objects for backup runs.

Structured results provide consistent interfaces for monitoring,
error handling, and CLI output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from github_issue_backup.schemas import EntryKind, GitHubIssueSummary, RawObject

from .enums import ExitCode


@dataclass(frozen=True)
class WorkItem:
    """An entry waiting to be enriched.

    Issues found through the listing carry their payload so it is not
    fetched a second time. Entries retried from a previous run carry
    only their number.
    """

    kind: EntryKind
    number: int
    issue: RawObject | None = field(default=None, compare=False, repr=False)

    @classmethod
    def from_summary(cls, summary: GitHubIssueSummary) -> WorkItem:
        """Create a work item from a listing item."""
        if summary.kind is EntryKind.ISSUE:
            return cls(EntryKind.ISSUE, summary.number, summary.payload)
        return cls(EntryKind.PULL, summary.number)

    @property
    def key(self) -> tuple[EntryKind, int]:
        """Identity of the entry within its repository."""
        return (self.kind, self.number)


@dataclass
class FetchResult:
    """Outcome of walking the listing and enriching every entry.

    Only entry-level failures end up here; listing failures abort the
    whole fetch instead.
    """

    failed_issues: list[int] = field(default_factory=list)
    """Issue numbers that could not be enriched, in processing order."""

    failed_pulls: list[int] = field(default_factory=list)
    """Pull request numbers that could not be enriched, in processing order."""

    loaded_issues: int = 0
    """Issues handed to the writer."""

    loaded_pulls: int = 0
    """Pull requests handed to the writer."""

    @property
    def has_failures(self) -> bool:
        """True if any entry could not be enriched."""
        return bool(self.failed_issues or self.failed_pulls)

    def record_success(self, kind: EntryKind) -> None:
        if kind is EntryKind.ISSUE:
            self.loaded_issues += 1
        else:
            self.loaded_pulls += 1

    def record_failure(self, kind: EntryKind, number: int) -> None:
        failed = self.failed_issues if kind is EntryKind.ISSUE else self.failed_pulls
        # An entry can show up on two listing pages when it is updated mid-walk
        if number not in failed:
            failed.append(number)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "loaded_issues": self.loaded_issues,
            "loaded_pulls": self.loaded_pulls,
            "failed_issues": list(self.failed_issues),
            "failed_pulls": list(self.failed_pulls),
        }


@dataclass
class BackupReport:
    """Result of a backup run that finished without a fatal error."""

    started_at: datetime
    """When the run started; written as the next run's cursor."""

    fetch_result: FetchResult
    """Entry-level outcome of the fetch."""

    records_written: int = 0
    """Records persisted by the writer."""

    state_written: bool = False
    """True if state.json was rewritten."""

    @property
    def exit_code(self) -> ExitCode:
        """SUCCESS, or API_ERROR if the mirror is incomplete."""
        if self.fetch_result.has_failures:
            return ExitCode.API_ERROR
        return ExitCode.SUCCESS

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "started_at": self.started_at.isoformat(),
            "records_written": self.records_written,
            "state_written": self.state_written,
            "exit_code": int(self.exit_code),
            **self.fetch_result.to_dict(),
        }


def format_failure_summary(failed_issues: list[int], failed_pulls: list[int]) -> str:
    """Build the consolidated warning listing every failed entry.

    Example:
        >>> format_failure_summary([3, 4], [9])
        'Failed to fetch issues 3, 4 and PRs 9'
    """
    parts: list[str] = []
    if failed_issues:
        parts.append("issues " + ", ".join(str(n) for n in failed_issues))
    if failed_pulls:
        parts.append("PRs " + ", ".join(str(n) for n in failed_pulls))
    return "Failed to fetch " + " and ".join(parts)
